"""Decoded NMEA record types.

Each record is immutable and replaced wholesale on every successful decode of
its sentence type. Absent fields are ``None``; ``updated_at`` stays at
``NEVER_UPDATED`` until the first decode.
"""

from __future__ import annotations

import datetime as dt
import time
from dataclasses import dataclass
from typing import Optional

from ..constants import (
    FIX_QUALITY_DESCRIPTIONS,
    KMH_PER_KNOT,
    MODE_DESCRIPTIONS,
    NEVER_UPDATED,
)


@dataclass(frozen=True, slots=True)
class UtcTimeFields:
    """UTC time-of-day split out of an ``hhmmss[.fff]`` field."""

    hour: int = 0
    minute: int = 0
    second: int = 0
    microsecond: int = 0
    valid: bool = False

    def as_time(self) -> Optional[dt.time]:
        """Return a ``datetime.time`` or None when absent or out of range."""
        if not self.valid:
            return None
        try:
            return dt.time(
                self.hour, self.minute, self.second, self.microsecond,
                tzinfo=dt.timezone.utc,
            )
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class BaseRecord:
    """Fields shared by every decoded record."""

    updated_at: float = NEVER_UPDATED
    checksum: str = ""

    @property
    def is_set(self) -> bool:
        """True once the record has been decoded at least once."""
        return self.updated_at != NEVER_UPDATED

    def age_seconds(self, now: Optional[float] = None) -> Optional[float]:
        """Return seconds since last update, or None if never updated."""
        if not self.is_set:
            return None
        if now is None:
            now = time.monotonic()
        return max(0.0, now - self.updated_at)


@dataclass(frozen=True, slots=True)
class PositionFix(BaseRecord):
    """$GPGGA: global positioning system fix data."""

    utc: UtcTimeFields = UtcTimeFields()
    latitude: Optional[float] = None
    lat_hemisphere: Optional[str] = None
    longitude: Optional[float] = None
    lon_hemisphere: Optional[str] = None
    quality: Optional[int] = None
    num_satellites: Optional[int] = None
    hdop: Optional[float] = None
    altitude: Optional[float] = None
    altitude_unit: Optional[str] = None
    geoid_separation: Optional[float] = None
    geoid_unit: Optional[str] = None
    correction_age: Optional[float] = None
    station_id: str = ""

    @property
    def utc_time(self) -> Optional[dt.time]:
        return self.utc.as_time()

    @property
    def quality_description(self) -> Optional[str]:
        return FIX_QUALITY_DESCRIPTIONS.get(self.quality)

    def has_position(self) -> bool:
        """Return True if both coordinates are present and the fix quality is non-zero."""
        return (
            self.latitude is not None
            and self.longitude is not None
            and (self.quality or 0) > 0
        )


@dataclass(frozen=True, slots=True)
class NavMinimum(BaseRecord):
    """$GPRMC: recommended minimum navigation information."""

    utc: UtcTimeFields = UtcTimeFields()
    status: Optional[str] = None
    latitude: Optional[float] = None
    lat_hemisphere: Optional[str] = None
    longitude: Optional[float] = None
    lon_hemisphere: Optional[str] = None
    speed_knots: Optional[float] = None
    course_true: Optional[float] = None
    day: Optional[int] = None
    month: Optional[int] = None
    year: Optional[int] = None
    magnetic_variation: Optional[float] = None
    variation_direction: Optional[str] = None
    mode: Optional[str] = None

    @property
    def utc_time(self) -> Optional[dt.time]:
        return self.utc.as_time()

    @property
    def utc_date(self) -> Optional[dt.date]:
        if self.year is None or self.month is None or self.day is None:
            return None
        try:
            return dt.date(self.year, self.month, self.day)
        except ValueError:
            return None

    @property
    def speed_kmh(self) -> Optional[float]:
        if self.speed_knots is None:
            return None
        return self.speed_knots * KMH_PER_KNOT

    @property
    def mode_description(self) -> Optional[str]:
        return MODE_DESCRIPTIONS.get(self.mode)

    def has_position(self) -> bool:
        """Return True if both coordinates are present and the status is active."""
        return (
            self.latitude is not None
            and self.longitude is not None
            and self.status == "A"
        )


@dataclass(frozen=True, slots=True)
class CourseSpeed(BaseRecord):
    """$GPVTG: course over ground and ground speed.

    Each reading is only meaningful when its unit tag was present, so the tag
    letters are kept alongside the values.
    """

    course_true: Optional[float] = None
    course_true_tag: Optional[str] = None
    course_magnetic: Optional[float] = None
    course_magnetic_tag: Optional[str] = None
    speed_knots: Optional[float] = None
    speed_knots_tag: Optional[str] = None
    speed_kmh: Optional[float] = None
    speed_kmh_tag: Optional[str] = None
    mode: Optional[str] = None

    @property
    def mode_description(self) -> Optional[str]:
        return MODE_DESCRIPTIONS.get(self.mode)


@dataclass(frozen=True, slots=True)
class TimeDate(BaseRecord):
    """$GPZDA: UTC time, date and local zone offset."""

    utc: UtcTimeFields = UtcTimeFields()
    day: Optional[int] = None
    month: Optional[int] = None
    year: Optional[int] = None
    zone_hours: Optional[int] = None
    zone_minutes: Optional[int] = None

    @property
    def utc_time(self) -> Optional[dt.time]:
        return self.utc.as_time()

    @property
    def utc_date(self) -> Optional[dt.date]:
        if self.year is None or self.month is None or self.day is None:
            return None
        try:
            return dt.date(self.year, self.month, self.day)
        except ValueError:
            return None

    @property
    def utc_datetime(self) -> Optional[dt.datetime]:
        date_value = self.utc_date
        time_value = self.utc_time
        if date_value is None or time_value is None:
            return None
        return dt.datetime.combine(date_value, time_value)

    @property
    def local_offset(self) -> Optional[dt.timedelta]:
        """Local zone offset from UTC; minutes take the sign of the hours."""
        if self.zone_hours is None:
            return None
        minutes = self.zone_minutes or 0
        sign = -1 if self.zone_hours < 0 else 1
        return dt.timedelta(hours=self.zone_hours, minutes=sign * minutes)


__all__ = [
    "UtcTimeFields",
    "BaseRecord",
    "PositionFix",
    "NavMinimum",
    "CourseSpeed",
    "TimeDate",
]
