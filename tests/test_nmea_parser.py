"""Unit tests for NMEA field conversion and per-sentence decoders."""

import datetime as dt

import pytest

from gps_stream.gps_core.parsers.nmea_grammar import SentenceType
from gps_stream.gps_core.parsers.nmea_parser import (
    GGADecoder,
    RMCDecoder,
    VTGDecoder,
    ZDADecoder,
    _deg_min_to_decimal,
    _parse_dmy,
    _parse_float,
    _parse_hms,
    _parse_int,
    _parse_latlon,
    _parse_letter,
    compute_checksum,
    create_decoders,
    validate_checksum,
)
from gps_stream.gps_core.parsers.nmea_types import (
    CourseSpeed,
    NavMinimum,
    PositionFix,
    TimeDate,
)

from conftest import (
    GGA_DGPS,
    GGA_NO_FIX,
    GGA_SENTENCE,
    GGA_SOUTH_WEST,
    RMC_SENTENCE,
    RMC_VOID,
    RMC_WITH_MODE,
    VTG_SENTENCE,
    VTG_WITH_MODE,
    ZDA_NEGATIVE_ZONE,
    ZDA_SENTENCE,
)


def _encode(body: str) -> str:
    """Frame a sentence body with its checksum."""
    return f"${body}*{compute_checksum(body):02X}"


def _reframe(sentence: str, old: str, new: str) -> str:
    """Replace one field of a valid sentence and recompute its checksum."""
    body = sentence[1:sentence.index("*")]
    assert old in body
    return _encode(body.replace(old, new, 1))


class TestHelperFunctions:
    """Test helper functions."""

    def test_parse_float_valid(self):
        assert _parse_float("123.45") == 123.45
        assert _parse_float("-5.5") == -5.5

    def test_parse_float_invalid(self):
        assert _parse_float(None) is None
        assert _parse_float("") is None
        assert _parse_float("abc") is None

    def test_parse_int_valid(self):
        assert _parse_int("08") == 8
        assert _parse_int("-5") == -5

    def test_parse_int_invalid(self):
        assert _parse_int(None) is None
        assert _parse_int("") is None
        assert _parse_int("1.5") is None

    def test_parse_letter(self):
        assert _parse_letter("N", "NS") == "N"
        assert _parse_letter("s", "NS") is None
        assert _parse_letter("X", "NS") is None
        assert _parse_letter("", "NS") is None
        assert _parse_letter(None, "NS") is None

    def test_deg_min_to_decimal(self):
        assert _deg_min_to_decimal(4807.038, False) == pytest.approx(48.1173, abs=1e-4)
        assert _deg_min_to_decimal(4807.038, True) == pytest.approx(-48.1173, abs=1e-4)
        assert _deg_min_to_decimal(1131.000, False) == pytest.approx(11.516667, abs=1e-6)
        assert _deg_min_to_decimal(0.0, False) == 0.0

    def test_parse_latlon_hemisphere_sign(self):
        assert _parse_latlon("4807.038", "N") == pytest.approx(48.1173, abs=1e-4)
        assert _parse_latlon("4807.038", "S") == pytest.approx(-48.1173, abs=1e-4)
        assert _parse_latlon("01131.000", "E") == pytest.approx(11.516667, abs=1e-6)
        assert _parse_latlon("01131.000", "W") == pytest.approx(-11.516667, abs=1e-6)

    def test_parse_latlon_missing_hemisphere_is_positive(self):
        assert _parse_latlon("4807.038", None) == pytest.approx(48.1173, abs=1e-4)

    def test_parse_latlon_empty(self):
        assert _parse_latlon("", "N") is None
        assert _parse_latlon(None, "N") is None

    def test_parse_hms(self):
        utc = _parse_hms("123519")
        assert (utc.hour, utc.minute, utc.second, utc.microsecond) == (12, 35, 19, 0)
        assert utc.valid is True
        assert utc.as_time() == dt.time(12, 35, 19, tzinfo=dt.timezone.utc)

    def test_parse_hms_fraction(self):
        utc = _parse_hms("201530.25")
        assert (utc.hour, utc.minute, utc.second) == (20, 15, 30)
        assert utc.microsecond == 250000

    def test_parse_hms_short_field_uses_arithmetic(self):
        # Leading zeros dropped by the receiver still split by value
        utc = _parse_hms("5306")
        assert (utc.hour, utc.minute, utc.second) == (0, 53, 6)

    def test_parse_hms_empty(self):
        utc = _parse_hms("")
        assert utc.valid is False
        assert utc.as_time() is None

    def test_parse_hms_out_of_range_has_no_time(self):
        utc = _parse_hms("996199")
        assert utc.valid is True
        assert utc.as_time() is None

    def test_parse_dmy_fixed_century(self):
        assert _parse_dmy("230394") == (23, 3, 2094)
        assert _parse_dmy("010120") == (1, 1, 2020)
        assert _parse_dmy("") is None


class TestChecksumValidation:
    """Test NMEA checksum validation."""

    def test_compute_checksum(self):
        assert compute_checksum("GPVTG,054.7,T,034.4,M,005.5,N,010.2,K") == 0x48

    def test_valid_checksum(self):
        assert validate_checksum(GGA_SENTENCE) is True
        assert validate_checksum(RMC_SENTENCE) is True
        assert validate_checksum(VTG_SENTENCE) is True
        assert validate_checksum(ZDA_SENTENCE) is True

    def test_invalid_checksum(self):
        assert validate_checksum(GGA_SENTENCE[:-2] + "00") is False

    def test_lowercase_hex_accepted(self):
        assert validate_checksum(RMC_SENTENCE[:-2] + "6a") is True

    def test_no_checksum(self):
        assert validate_checksum("$GPGGA,123519,4807.038,N") is False

    def test_no_dollar_sign(self):
        assert validate_checksum(GGA_SENTENCE[1:]) is False

    def test_non_hex_checksum(self):
        assert validate_checksum(GGA_SENTENCE[:-2] + "ZZ") is False


class TestGGADecoder:
    """Test GGA sentence decoding."""

    def test_decode_full_fix(self):
        record = GGADecoder().decode(GGA_SENTENCE, now=10.0)

        assert isinstance(record, PositionFix)
        assert record.updated_at == 10.0
        assert record.checksum == "47"
        assert record.utc_time == dt.time(12, 35, 19, tzinfo=dt.timezone.utc)
        assert record.latitude == pytest.approx(48.1173, abs=1e-4)
        assert record.lat_hemisphere == "N"
        assert record.longitude == pytest.approx(11.516667, abs=1e-4)
        assert record.lon_hemisphere == "E"
        assert record.quality == 1
        assert record.num_satellites == 8
        assert record.hdop == pytest.approx(0.9)
        assert record.altitude == pytest.approx(545.4)
        assert record.altitude_unit == "M"
        assert record.geoid_separation == pytest.approx(46.9)
        assert record.geoid_unit == "M"
        assert record.correction_age is None
        assert record.station_id == ""
        assert record.has_position() is True

    def test_decode_southern_western(self):
        record = GGADecoder().decode(GGA_SOUTH_WEST, now=1.0)
        assert record.latitude == pytest.approx(-48.1173, abs=1e-4)
        assert record.longitude == pytest.approx(-11.516667, abs=1e-4)

    def test_decode_dgps_with_station(self):
        record = GGADecoder().decode(GGA_DGPS, now=1.0)
        assert record.quality == 2
        assert record.num_satellites == 12
        assert record.altitude == pytest.approx(-12.5)
        assert record.geoid_separation == pytest.approx(-47.0)
        assert record.correction_age == pytest.approx(3.2)
        assert record.station_id == "0120"
        assert record.utc.microsecond == 500000

    def test_decode_no_fix(self):
        record = GGADecoder().decode(GGA_NO_FIX, now=1.0)
        assert record is not None
        assert record.latitude is None
        assert record.longitude is None
        assert record.quality == 0
        assert record.hdop == pytest.approx(99.99)
        assert record.utc.valid is False
        assert record.has_position() is False

    def test_invalid_letter_leaves_field_absent(self):
        sentence = _reframe(_reframe(GGA_SENTENCE, ",N,", ",X,"), ",545.4,M,", ",545.4,Q,")
        record = GGADecoder().decode(sentence, now=1.0)
        assert record is not None
        assert record.lat_hemisphere is None
        assert record.latitude == pytest.approx(48.1173, abs=1e-4)
        assert record.altitude_unit is None

    def test_digit_in_hemisphere_leaves_field_absent(self):
        sentence = _reframe(GGA_SENTENCE, ",N,", ",1,")
        record = GGADecoder().decode(sentence, now=1.0)

        assert record is not None
        assert record.lat_hemisphere is None
        assert record.latitude == pytest.approx(48.1173, abs=1e-4)
        assert record.lon_hemisphere == "E"
        assert record.hdop == pytest.approx(0.9)
        assert record.num_satellites == 8

    def test_non_numeric_hdop_leaves_field_absent(self):
        sentence = _reframe(GGA_SENTENCE, ",0.9,", ",0.9x,")
        record = GGADecoder().decode(sentence, now=1.0)

        assert record is not None
        assert record.hdop is None
        assert record.altitude == pytest.approx(545.4)
        assert record.lat_hemisphere == "N"
        assert record.has_position() is True

    def test_lowercase_hemisphere_does_not_negate(self):
        sentence = _reframe(GGA_SENTENCE, ",N,", ",s,")
        record = GGADecoder().decode(sentence, now=1.0)
        assert record.lat_hemisphere is None
        assert record.latitude == pytest.approx(48.1173, abs=1e-4)

    def test_malformed_numbers_leave_fields_absent(self):
        sentence = _reframe(GGA_SENTENCE, ",545.4,M,", ",5-45,M,")
        sentence = _reframe(sentence, ",1,08,", ",x,8,")
        record = GGADecoder().decode(sentence, now=1.0)

        assert record.altitude is None
        assert record.altitude_unit == "M"
        assert record.quality is None
        assert record.num_satellites is None
        assert record.geoid_separation == pytest.approx(46.9)

    def test_malformed_time_leaves_utc_invalid(self):
        sentence = _reframe(GGA_SENTENCE, "123519", "12:35:19")
        record = GGADecoder().decode(sentence, now=1.0)
        assert record.utc.valid is False
        assert record.utc_time is None
        assert record.latitude == pytest.approx(48.1173, abs=1e-4)

    def test_empty_satellite_count_no_match(self):
        sentence = _reframe(GGA_SENTENCE, ",1,08,", ",1,,")
        assert GGADecoder().decode(sentence, now=1.0) is None

    def test_checksum_mismatch_rejected(self):
        assert GGADecoder().decode(GGA_SENTENCE[:-2] + "00", now=1.0) is None

    def test_checksum_mismatch_accepted_when_validation_disabled(self):
        record = GGADecoder(validate_checksums=False).decode(GGA_SENTENCE[:-2] + "00", now=1.0)
        assert record is not None
        assert record.checksum == "00"

    def test_no_match_returns_none(self):
        assert GGADecoder().decode("garbage", now=1.0) is None
        assert GGADecoder().decode(RMC_SENTENCE, now=1.0) is None

    def test_scan_reports_spans(self):
        text = "xx" + GGA_SENTENCE + "\r\n"
        results = list(GGADecoder().scan(text, now=1.0))
        assert len(results) == 1
        span, _record = results[0]
        assert span == (2, 2 + len(GGA_SENTENCE))


class TestRMCDecoder:
    """Test RMC sentence decoding."""

    def test_decode(self):
        record = RMCDecoder().decode(RMC_SENTENCE, now=2.0)

        assert isinstance(record, NavMinimum)
        assert record.utc_time == dt.time(12, 35, 19, tzinfo=dt.timezone.utc)
        assert record.status == "A"
        assert record.latitude == pytest.approx(48.1173, abs=1e-4)
        assert record.longitude == pytest.approx(11.516667, abs=1e-4)
        assert record.speed_knots == pytest.approx(22.4)
        assert record.speed_kmh == pytest.approx(22.4 * 1.852)
        assert record.course_true == pytest.approx(84.4)
        assert (record.day, record.month, record.year) == (23, 3, 2094)
        assert record.utc_date == dt.date(2094, 3, 23)
        assert record.magnetic_variation == pytest.approx(3.1)
        assert record.variation_direction == "W"
        assert record.mode is None
        assert record.has_position() is True

    def test_decode_with_mode(self):
        record = RMCDecoder().decode(RMC_WITH_MODE, now=2.0)
        assert record.mode == "A"
        assert record.latitude == pytest.approx(-33.8076, abs=1e-4)
        assert record.longitude == pytest.approx(-151.018717, abs=1e-4)
        assert record.magnetic_variation is None
        assert record.variation_direction is None
        assert record.utc_date == dt.date(2020, 1, 1)

    def test_void_status(self):
        record = RMCDecoder().decode(RMC_VOID, now=2.0)
        assert record.status == "V"
        assert record.latitude is None
        assert record.mode == "N"
        assert record.has_position() is False

    def test_malformed_date_leaves_date_absent(self):
        sentence = _reframe(RMC_SENTENCE, ",230394,", ",23O394,")
        record = RMCDecoder().decode(sentence, now=2.0)

        assert (record.day, record.month, record.year) == (None, None, None)
        assert record.utc_date is None
        assert record.status == "A"
        assert record.speed_knots == pytest.approx(22.4)

    def test_unknown_mode_leaves_field_absent(self):
        sentence = _reframe(RMC_WITH_MODE, ",,,A", ",,,Z")
        record = RMCDecoder().decode(sentence, now=2.0)
        assert record is not None
        assert record.mode is None
        assert record.status == "A"


class TestVTGDecoder:
    """Test VTG sentence decoding."""

    def test_decode(self):
        record = VTGDecoder().decode(VTG_SENTENCE, now=3.0)

        assert isinstance(record, CourseSpeed)
        assert record.course_true == pytest.approx(54.7)
        assert record.course_true_tag == "T"
        assert record.course_magnetic == pytest.approx(34.4)
        assert record.course_magnetic_tag == "M"
        assert record.speed_knots == pytest.approx(5.5)
        assert record.speed_knots_tag == "N"
        assert record.speed_kmh == pytest.approx(10.2)
        assert record.speed_kmh_tag == "K"
        assert record.mode is None

    def test_decode_with_mode(self):
        record = VTGDecoder().decode(VTG_WITH_MODE, now=3.0)
        assert record.mode == "A"
        assert record.checksum == "25"

    def test_wrong_unit_tag_leaves_tag_absent(self):
        sentence = _reframe(VTG_SENTENCE, ",010.2,K", ",010.2,k")
        record = VTGDecoder().decode(sentence, now=3.0)
        assert record.speed_kmh_tag is None
        assert record.speed_kmh == pytest.approx(10.2)
        assert record.speed_knots_tag == "N"


class TestZDADecoder:
    """Test ZDA sentence decoding."""

    def test_decode(self):
        record = ZDADecoder().decode(ZDA_SENTENCE, now=4.0)

        assert isinstance(record, TimeDate)
        assert record.utc_time == dt.time(20, 15, 30, tzinfo=dt.timezone.utc)
        assert (record.day, record.month, record.year) == (4, 7, 2002)
        assert record.zone_hours == 0
        assert record.zone_minutes == 0
        assert record.utc_datetime == dt.datetime(2002, 7, 4, 20, 15, 30, tzinfo=dt.timezone.utc)
        assert record.local_offset == dt.timedelta(0)

    def test_negative_zone(self):
        record = ZDADecoder().decode(ZDA_NEGATIVE_ZONE, now=4.0)
        assert record.zone_hours == -5
        assert record.zone_minutes == 30
        assert record.local_offset == -dt.timedelta(hours=5, minutes=30)
        assert record.utc_date == dt.date(2024, 2, 29)

    def test_short_day_leaves_field_absent(self):
        sentence = _reframe(ZDA_SENTENCE, ",04,07,", ",4,07,")
        record = ZDADecoder().decode(sentence, now=4.0)
        assert record.day is None
        assert record.month == 7
        assert record.year == 2002
        assert record.utc_date is None


class TestCreateDecoders:
    """Test decoder factory."""

    def test_all_types_in_priority_order(self):
        decoders = create_decoders()
        assert [d.sentence_type for d in decoders] == list(SentenceType)

    def test_priority_order_ignores_argument_order(self):
        decoders = create_decoders([SentenceType.ZDA, SentenceType.GGA])
        assert [d.sentence_type for d in decoders] == [SentenceType.GGA, SentenceType.ZDA]

    def test_checksum_policy_propagates(self):
        decoders = create_decoders(validate_checksums=False)
        assert all(d.validate_checksums is False for d in decoders)

    def test_empty_selection(self):
        assert create_decoders([]) == []
