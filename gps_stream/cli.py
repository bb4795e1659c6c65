"""Command-line entry point: stream a serial GPS receiver and log decoded records."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
import sys
from pathlib import Path
from typing import Optional, Sequence

from gps_stream.core.logging_config import configure_logging
from gps_stream.core.logging_utils import get_module_logger
from gps_stream.core.reconnect_handler import ReconnectConfig
from gps_stream.gps_core.config import DEFAULT_CONFIG_PATH, GPSStreamConfig
from gps_stream.gps_core.decoder import NMEADecoder
from gps_stream.gps_core.handlers import GPSStreamHandler
from gps_stream.gps_core.parsers.nmea_grammar import SentenceType
from gps_stream.gps_core.parsers.nmea_types import BaseRecord, CourseSpeed, NavMinimum, PositionFix
from gps_stream.gps_core.transports import SerialGPSTransport

logger = get_module_logger("MainGPSStream")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments. Unset options fall back to the config file."""
    parser = argparse.ArgumentParser(
        prog="gps-stream",
        description="Decode NMEA-0183 sentences from a serial GPS receiver.",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="Path to a key=value config file.",
    )
    parser.add_argument("--port", help="Serial port (e.g. /dev/ttyUSB0).")
    parser.add_argument("--baud", type=int, help="Serial baud rate.")
    parser.add_argument(
        "--sentences",
        help="Comma-separated sentence types to decode (GGA,RMC,VTG,ZDA).",
    )
    parser.add_argument("--buffer-size", dest="buffer_size", type=int, help="Buffer capacity in bytes.")
    parser.add_argument("--idle-ms", dest="idle_ms", type=int, help="Quiet time before a decode pass.")
    parser.add_argument(
        "--process-interval",
        dest="process_interval",
        type=float,
        help="Seconds between decode passes.",
    )
    parser.add_argument(
        "--no-checksum",
        dest="validate_checksums",
        action="store_false",
        default=None,
        help="Accept sentences without verifying their XOR checksum.",
    )
    parser.add_argument(
        "--tee",
        action="store_true",
        default=None,
        help="Echo every received byte to stderr.",
    )
    parser.add_argument("--log-level", dest="log_level", help="Logging level (debug, info, ...).")
    parser.add_argument("--log-file", dest="log_file", type=Path, help="Optional rotating log file.")
    return parser.parse_args(argv)


def _write_raw_byte(byte: int) -> None:
    sys.stderr.write(chr(byte))


def _record_status(record: BaseRecord) -> Optional[str]:
    if isinstance(record, PositionFix):
        return record.quality_description
    if isinstance(record, (NavMinimum, CourseSpeed)):
        return record.mode_description
    return None


async def _log_record(device_id: str, sentence_type: SentenceType, record: BaseRecord) -> None:
    status = _record_status(record)
    if status:
        logger.info("%s %s (%s): %s", device_id, sentence_type.tag, status, record)
    else:
        logger.info("%s %s: %s", device_id, sentence_type.tag, record)


async def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the serial handler until SIGINT/SIGTERM."""
    args = parse_args(argv)
    config = GPSStreamConfig.load(args.config_path).apply_args(args)

    configure_logging(config.log_level, log_file=config.log_file)
    logger.debug("Effective config: %s", config.to_dict())

    decoder = NMEADecoder(
        **config.decoder_kwargs(),
        tee=_write_raw_byte if config.debug_tee else None,
    )
    transport = SerialGPSTransport(config.serial_port, config.baud_rate)
    handler = GPSStreamHandler(
        f"GPS:{Path(config.serial_port).name}",
        transport,
        decoder,
        process_interval_s=config.process_interval_s,
        reconnect_config=ReconnectConfig.with_delay(config.reconnect_delay_s),
    )
    handler.data_callback = _log_record

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)

    if not await transport.connect():
        logger.warning("Initial connect to %s failed; the handler will retry", config.serial_port)

    await handler.start()
    try:
        await stop_event.wait()
    finally:
        await handler.stop()
        await transport.disconnect()
        logger.info(
            "Stopped: %d overflow resyncs, %d bytes dropped",
            decoder.overflow_count,
            decoder.buffer.dropped,
        )


def run(argv: Optional[Sequence[str]] = None) -> None:
    """Convenience wrapper that runs the async entry point."""
    asyncio.run(main(list(argv) if argv is not None else None))


__all__ = ["main", "parse_args", "run"]
