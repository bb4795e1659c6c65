"""NMEA field conversion and per-sentence decoders.

A decoder matches its grammar against arbitrary buffer text, optionally checks
the XOR checksum, and walks the captured fields into an immutable record.
Whole-sentence mismatches yield nothing; a malformed individual field only
leaves that field at its default.
"""

from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Type

from gps_stream.core.logging_utils import get_module_logger

from ..constants import (
    CHECKSUM_DELIMITER,
    CHECKSUM_LENGTH,
    DATE_CENTURY_OFFSET,
    SENTENCE_START,
)
from .nmea_grammar import (
    GGA_GRAMMAR,
    RMC_GRAMMAR,
    VTG_GRAMMAR,
    ZDA_GRAMMAR,
    SentenceGrammar,
    SentenceType,
)
from .nmea_types import (
    BaseRecord,
    CourseSpeed,
    NavMinimum,
    PositionFix,
    TimeDate,
    UtcTimeFields,
)

logger = get_module_logger("NMEAParser")

Span = Tuple[int, int]
Fields = Dict[str, Optional[str]]


def _parse_float(value: str | None) -> Optional[float]:
    """Parse string to float, None on failure."""
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _parse_int(value: str | None) -> Optional[int]:
    """Parse string to int, None on failure."""
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _parse_letter(value: str | None, allowed: str) -> Optional[str]:
    """Return the single-letter code if it is in ``allowed``, else None."""
    if not value or len(value) != 1:
        return None
    return value if value in allowed else None


def _deg_min_to_decimal(deg_min: float, negative: bool) -> float:
    """Convert DDDMM.MMMM to decimal degrees."""
    minutes = math.fmod(deg_min, 100.0)
    degrees = int(deg_min / 100)
    decimal = degrees + minutes / 60.0
    return -decimal if negative else decimal


def _parse_latlon(value: str | None, hemisphere: Optional[str]) -> Optional[float]:
    """Parse an NMEA coordinate and apply the sign of its hemisphere code.

    ``S`` and ``W`` negate; ``N``, ``E`` or a missing hemisphere leave the value
    positive. Empty coordinate digits yield None.
    """
    deg_min = _parse_float(value)
    if deg_min is None:
        return None
    return _deg_min_to_decimal(deg_min, hemisphere in ("S", "W"))


def _parse_hms(value: str | None) -> UtcTimeFields:
    """Split ``hhmmss[.fff]`` by fixed-width arithmetic."""
    if not value:
        return UtcTimeFields()
    main, dot, frac = value.partition(".")
    combined = _parse_int(main)
    if combined is None:
        return UtcTimeFields()
    micro = 0
    if dot and frac.isdigit():
        micro = int(frac[:6].ljust(6, "0"))
    return UtcTimeFields(
        hour=(combined // 10000) % 100,
        minute=(combined // 100) % 100,
        second=combined % 100,
        microsecond=micro,
        valid=True,
    )


def _parse_dmy(value: str | None) -> Optional[Tuple[int, int, int]]:
    """Split ``ddmmyy`` into (day, month, four-digit year)."""
    combined = _parse_int(value)
    if combined is None:
        return None
    day = (combined // 10000) % 100
    month = (combined // 100) % 100
    year = combined % 100 + DATE_CENTURY_OFFSET
    return day, month, year


def compute_checksum(payload: str) -> int:
    """XOR of every character between ``$`` and ``*``."""
    calculated = 0
    for char in payload:
        calculated ^= ord(char)
    return calculated


def validate_checksum(sentence: str) -> bool:
    """Validate NMEA checksum."""
    sentence = sentence.strip()
    if not sentence.startswith(SENTENCE_START) or CHECKSUM_DELIMITER not in sentence:
        return False
    payload, checksum_str = sentence[len(SENTENCE_START):].split(CHECKSUM_DELIMITER, 1)
    if len(checksum_str) < CHECKSUM_LENGTH:
        return False
    try:
        expected = int(checksum_str[:CHECKSUM_LENGTH], 16)
    except ValueError:
        return False
    return compute_checksum(payload) == expected


class SentenceDecoder(ABC):
    """Decoder for one sentence type.

    Subclasses provide the grammar and the field walk; matching and checksum
    verification are shared.
    """

    grammar: SentenceGrammar

    def __init__(self, validate_checksums: bool = True) -> None:
        self.validate_checksums = validate_checksums

    @property
    def sentence_type(self) -> SentenceType:
        return self.grammar.sentence_type

    def scan(self, text: str, now: float) -> Iterator[Tuple[Span, BaseRecord]]:
        """Yield ``(span, record)`` for every well-formed sentence in ``text``."""
        for match in self.grammar.regex.finditer(text):
            if self.validate_checksums and not self._checksum_matches(match):
                logger.debug(
                    "Rejected %s at %d: checksum mismatch (*%s)",
                    self.grammar.tag, match.start(), match.group("checksum"),
                )
                continue
            yield match.span(), self._build(self._walk(match), match.group("checksum"), now)

    def decode(self, text: str, now: float) -> Optional[BaseRecord]:
        """Return the record for the last matching sentence, or None for no match."""
        record = None
        for _span, record in self.scan(text, now):
            pass
        return record

    def _walk(self, match: "re.Match[str]") -> Fields:
        """Syntax-check every captured field; malformed ones come back as None."""
        captured = match.groupdict()
        fields = self.grammar.conform(captured)
        rejected = [name for name, value in fields.items() if value is None and captured[name]]
        if rejected:
            logger.debug(
                "Malformed %s fields at %d left unset: %s",
                self.grammar.tag, match.start(), ", ".join(rejected),
            )
        return fields

    @staticmethod
    def _checksum_matches(match: "re.Match[str]") -> bool:
        # Payload runs from after the start marker up to the delimiter.
        start = match.start() + len(SENTENCE_START)
        end = match.start("checksum") - len(CHECKSUM_DELIMITER)
        payload = match.string[start:end]
        try:
            expected = int(match.group("checksum"), 16)
        except ValueError:
            return False
        return compute_checksum(payload) == expected

    @abstractmethod
    def _build(self, fields: Fields, checksum: str, now: float) -> BaseRecord:
        """Convert captured field text into a record stamped with ``now``."""


class GGADecoder(SentenceDecoder):
    """$GPGGA: time, position, fix quality, satellites, HDOP, altitude."""

    grammar = GGA_GRAMMAR

    def _build(self, fields: Fields, checksum: str, now: float) -> PositionFix:
        lat_hemisphere = _parse_letter(fields["lat_hemisphere"], "NS")
        lon_hemisphere = _parse_letter(fields["lon_hemisphere"], "EW")
        return PositionFix(
            updated_at=now,
            checksum=checksum,
            utc=_parse_hms(fields["time"]),
            latitude=_parse_latlon(fields["latitude"], lat_hemisphere),
            lat_hemisphere=lat_hemisphere,
            longitude=_parse_latlon(fields["longitude"], lon_hemisphere),
            lon_hemisphere=lon_hemisphere,
            quality=_parse_int(fields["quality"]),
            num_satellites=_parse_int(fields["num_satellites"]),
            hdop=_parse_float(fields["hdop"]),
            altitude=_parse_float(fields["altitude"]),
            altitude_unit=_parse_letter(fields["altitude_unit"], "MF"),
            geoid_separation=_parse_float(fields["geoid_separation"]),
            geoid_unit=_parse_letter(fields["geoid_unit"], "MF"),
            correction_age=_parse_float(fields["correction_age"]),
            station_id=fields["station_id"] or "",
        )


class RMCDecoder(SentenceDecoder):
    """$GPRMC: time, status, position, speed, course, date, variation, mode."""

    grammar = RMC_GRAMMAR

    def _build(self, fields: Fields, checksum: str, now: float) -> NavMinimum:
        lat_hemisphere = _parse_letter(fields["lat_hemisphere"], "NS")
        lon_hemisphere = _parse_letter(fields["lon_hemisphere"], "EW")
        day = month = year = None
        date_parts = _parse_dmy(fields["date"])
        if date_parts:
            day, month, year = date_parts
        return NavMinimum(
            updated_at=now,
            checksum=checksum,
            utc=_parse_hms(fields["time"]),
            status=_parse_letter(fields["status"], "AV"),
            latitude=_parse_latlon(fields["latitude"], lat_hemisphere),
            lat_hemisphere=lat_hemisphere,
            longitude=_parse_latlon(fields["longitude"], lon_hemisphere),
            lon_hemisphere=lon_hemisphere,
            speed_knots=_parse_float(fields["speed_knots"]),
            course_true=_parse_float(fields["course_true"]),
            day=day,
            month=month,
            year=year,
            magnetic_variation=_parse_float(fields["magnetic_variation"]),
            variation_direction=_parse_letter(fields["variation_direction"], "EW"),
            mode=_parse_letter(fields["mode"], "NADE"),
        )


class VTGDecoder(SentenceDecoder):
    """$GPVTG: course (true/magnetic) and ground speed (knots/km/h)."""

    grammar = VTG_GRAMMAR

    def _build(self, fields: Fields, checksum: str, now: float) -> CourseSpeed:
        return CourseSpeed(
            updated_at=now,
            checksum=checksum,
            course_true=_parse_float(fields["course_true"]),
            course_true_tag=_parse_letter(fields["course_true_tag"], "T"),
            course_magnetic=_parse_float(fields["course_magnetic"]),
            course_magnetic_tag=_parse_letter(fields["course_magnetic_tag"], "M"),
            speed_knots=_parse_float(fields["speed_knots"]),
            speed_knots_tag=_parse_letter(fields["speed_knots_tag"], "N"),
            speed_kmh=_parse_float(fields["speed_kmh"]),
            speed_kmh_tag=_parse_letter(fields["speed_kmh_tag"], "K"),
            mode=_parse_letter(fields["mode"], "NADE"),
        )


class ZDADecoder(SentenceDecoder):
    """$GPZDA: UTC time, day, month, four-digit year, local zone."""

    grammar = ZDA_GRAMMAR

    def _build(self, fields: Fields, checksum: str, now: float) -> TimeDate:
        return TimeDate(
            updated_at=now,
            checksum=checksum,
            utc=_parse_hms(fields["time"]),
            day=_parse_int(fields["day"]),
            month=_parse_int(fields["month"]),
            year=_parse_int(fields["year"]),
            zone_hours=_parse_int(fields["zone_hours"]),
            zone_minutes=_parse_int(fields["zone_minutes"]),
        )


DECODER_TYPES: Dict[SentenceType, Type[SentenceDecoder]] = {
    SentenceType.GGA: GGADecoder,
    SentenceType.RMC: RMCDecoder,
    SentenceType.VTG: VTGDecoder,
    SentenceType.ZDA: ZDADecoder,
}


def create_decoders(
    enabled: Optional[Iterable[SentenceType]] = None,
    validate_checksums: bool = True,
) -> List[SentenceDecoder]:
    """Instantiate decoders for ``enabled`` types in fixed priority order."""
    wanted = set(SentenceType) if enabled is None else set(enabled)
    return [
        DECODER_TYPES[sentence_type](validate_checksums=validate_checksums)
        for sentence_type in SentenceType
        if sentence_type in wanted
    ]


__all__ = [
    "SentenceDecoder",
    "GGADecoder",
    "RMCDecoder",
    "VTGDecoder",
    "ZDADecoder",
    "DECODER_TYPES",
    "create_decoders",
    "compute_checksum",
    "validate_checksum",
]
