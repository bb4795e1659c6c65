"""Allow ``python -m gps_stream`` to stream a serial GPS receiver."""

from __future__ import annotations

import sys

from gps_stream.cli import run


def main() -> None:
    run(sys.argv[1:])


if __name__ == "__main__":
    main()
