"""GPS stream handler for standard NMEA-0183 receivers.

Works with any UART receiver that emits GP-talker sentences, such as the
OzzMaker BerryGPS or u-blox modules in NMEA mode.
"""

from __future__ import annotations

from typing import List

from gps_stream.core.logging_utils import get_module_logger

from ..parsers.nmea_grammar import SentenceType
from ..parsers.nmea_types import NavMinimum, PositionFix
from .base_handler import BaseGPSHandler

logger = get_module_logger("GPSStreamHandler")


class GPSStreamHandler(BaseGPSHandler):
    """Default handler: forwards new records and logs the first fix.

    ``data_callback`` receives the latest record of each type that changed in a
    decode pass, so two sentences of one type decoded in the same pass reach it
    once, as the later one. Pass ``on_record`` to the decoder to see every record.

    Decodes:
    - $GPGGA - Fix Data (position, fix quality, satellites, altitude)
    - $GPRMC - Recommended Minimum (position, speed, course, date/time)
    - $GPVTG - Course Over Ground and Ground Speed
    - $GPZDA - Time, Date and Local Zone

    Example:
        transport = SerialGPSTransport("/dev/serial0", 9600)
        await transport.connect()

        handler = GPSStreamHandler("GPS:serial0", transport)
        handler.data_callback = my_callback
        await handler.start()

        # Latest records via handler.store.get(SentenceType.GGA)

        await handler.stop()
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._logged_first_fix = False

    def _handle_updates(self, updated: List[SentenceType]) -> None:
        for sentence_type in updated:
            record = self.decoder.get(sentence_type)
            if not self._logged_first_fix and isinstance(record, (PositionFix, NavMinimum)):
                if record.has_position():
                    self._logged_first_fix = True
                    logger.info(
                        "First GPS fix acquired for %s from %s: lat=%.6f, lon=%.6f",
                        self.device_id,
                        sentence_type.tag,
                        record.latitude,
                        record.longitude,
                    )
            self._dispatch(sentence_type, record)

    def reset_first_fix_logged(self) -> None:
        """Log the first fix again (e.g. at the start of a new session)."""
        self._logged_first_fix = False


__all__ = ["GPSStreamHandler"]
