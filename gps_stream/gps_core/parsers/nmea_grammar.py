"""Sentence grammars for the supported NMEA-0183 messages.

Each grammar lists the comma-separated fields of one sentence type in wire
order. It compiles to a single framing expression that pins the tag, the field
count and the checksum token but captures field text loosely; the syntax of
each field is checked afterwards by ``SentenceGrammar.conform``, so one bad
field never hides the rest of the sentence. Captures never admit ``,``, ``*``
or ``$``, so a match cannot straddle two sentences in the same buffer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple

from ..constants import CHECKSUM_DELIMITER, CHECKSUM_LENGTH, SENTENCE_START


class SentenceType(str, Enum):
    """Supported sentence types, in decoding priority order."""

    GGA = "GGA"
    RMC = "RMC"
    VTG = "VTG"
    ZDA = "ZDA"

    @property
    def tag(self) -> str:
        """The fixed talker+type identifier, e.g. ``GPGGA``."""
        return f"GP{self.value}"

    @classmethod
    def parse(cls, name: str) -> "SentenceType":
        """Resolve ``"gga"``, ``"GGA"`` or ``"GPGGA"`` to a SentenceType."""
        key = name.strip().upper()
        if len(key) == 5 and key.startswith("GP"):
            key = key[2:]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown sentence type '{name}'") from None


class FieldSyntax(Enum):
    """Raw syntax class of a single field."""

    TIME = "time"        # hhmmss[.fff]
    DATE = "date"        # ddmmyy
    INTEGER = "integer"
    DECIMAL = "decimal"
    LETTER = "letter"    # single-letter code
    FIXED = "fixed"      # fixed-width digits
    TEXT = "text"        # free text, copied verbatim


# Any character that can sit inside a field. U+FFFD stands in for undecodable bytes.
FIELD_CHAR = "[^," + re.escape(SENTENCE_START + CHECKSUM_DELIMITER) + "\\r\\n\\ufffd]"

TERMINATOR_PATTERN = re.escape(CHECKSUM_DELIMITER) + f"[0-9A-Za-z]{{{CHECKSUM_LENGTH}}}"
CHECKSUM_PATTERN = re.escape(CHECKSUM_DELIMITER) + f"(?P<checksum>[0-9A-Za-z]{{{CHECKSUM_LENGTH}}})"

_BASE_PATTERNS = {
    FieldSyntax.TIME: r"\d+(?:\.\d*)?",
    FieldSyntax.DATE: r"\d+",
    FieldSyntax.INTEGER: r"\d+",
    FieldSyntax.DECIMAL: r"(?:\d+\.?\d*|\.\d+)",
    FieldSyntax.LETTER: r"[A-Za-z]",
    FieldSyntax.TEXT: f"{FIELD_CHAR}+",
}


@dataclass(frozen=True)
class FieldSpec:
    """One field of a sentence grammar.

    ``capture`` is what the framing expression accepts for the field;
    ``accepts`` is the narrow syntax check applied to the captured text.
    """

    name: str
    syntax: FieldSyntax
    optional: bool = True
    signed: bool = False
    width: Optional[int] = None
    allowed: Optional[str] = None
    # Trailing field added by a later NMEA revision: it may be missing together with its comma.
    omittable: bool = False
    validator: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.syntax is FieldSyntax.FIXED and not self.width:
            raise ValueError(f"Fixed-width field '{self.name}' needs a width")
        if self.allowed is not None and self.syntax is not FieldSyntax.LETTER:
            raise ValueError(f"Only letter fields take an allowed set ('{self.name}')")
        object.__setattr__(self, "validator", re.compile(self.pattern))

    @property
    def pattern(self) -> str:
        """Expression for a well-formed value, without the separating commas."""
        if self.syntax is FieldSyntax.FIXED:
            body = rf"\d{{{self.width}}}"
        elif self.allowed:
            body = f"[{re.escape(self.allowed)}]"
        else:
            body = _BASE_PATTERNS[self.syntax]
        if self.signed:
            body = f"-?{body}"
        if self.optional:
            body = f"(?:{body})?"
        return body

    @property
    def capture(self) -> str:
        # Required fields must be non-empty to frame; their content is checked later.
        repeat = "*" if self.optional else "+"
        return f"(?P<{self.name}>{FIELD_CHAR}{repeat})"

    def accepts(self, value: str) -> bool:
        return self.validator.fullmatch(value) is not None


@dataclass(frozen=True)
class SentenceGrammar:
    """Immutable description of one sentence type's wire layout."""

    sentence_type: SentenceType
    fields: Tuple[FieldSpec, ...]
    regex: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        names = [entry.name for entry in self.fields]
        if len(set(names)) != len(names) or "checksum" in names:
            raise ValueError(f"Duplicate or reserved field names in {self.tag} grammar")
        if any(entry.omittable for entry in self.fields[:-1]):
            raise ValueError(f"Only the last {self.tag} field may be omittable")
        object.__setattr__(self, "regex", re.compile(self._build_pattern()))

    @property
    def tag(self) -> str:
        return self.sentence_type.tag

    @property
    def field_count(self) -> int:
        return len(self.fields)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(entry.name for entry in self.fields)

    def conform(self, captured: Mapping[str, Optional[str]]) -> Dict[str, Optional[str]]:
        """Return the captured field text with malformed values replaced by None.

        An omitted trailing field stays None; an empty optional field stays "".
        """
        fields: Dict[str, Optional[str]] = {}
        for entry in self.fields:
            value = captured.get(entry.name)
            fields[entry.name] = value if value is None or entry.accepts(value) else None
        return fields

    def _build_pattern(self) -> str:
        parts = [re.escape(f"{SENTENCE_START}{self.tag}")]
        for entry in self.fields:
            if entry.omittable:
                parts.append(f"(?:,{entry.capture})?")
            else:
                parts.append(f",{entry.capture}")
        parts.append(CHECKSUM_PATTERN)
        return "".join(parts)


def _letter(name: str, allowed: str, **kwargs) -> FieldSpec:
    return FieldSpec(name, FieldSyntax.LETTER, allowed=allowed, **kwargs)


GGA_GRAMMAR = SentenceGrammar(
    SentenceType.GGA,
    (
        FieldSpec("time", FieldSyntax.TIME),
        FieldSpec("latitude", FieldSyntax.DECIMAL),
        _letter("lat_hemisphere", "NS"),
        FieldSpec("longitude", FieldSyntax.DECIMAL),
        _letter("lon_hemisphere", "EW"),
        FieldSpec("quality", FieldSyntax.INTEGER),
        FieldSpec("num_satellites", FieldSyntax.FIXED, optional=False, width=2),
        FieldSpec("hdop", FieldSyntax.DECIMAL),
        FieldSpec("altitude", FieldSyntax.DECIMAL, signed=True),
        _letter("altitude_unit", "MF"),
        FieldSpec("geoid_separation", FieldSyntax.DECIMAL, signed=True),
        _letter("geoid_unit", "MF"),
        FieldSpec("correction_age", FieldSyntax.DECIMAL),
        FieldSpec("station_id", FieldSyntax.TEXT),
    ),
)

RMC_GRAMMAR = SentenceGrammar(
    SentenceType.RMC,
    (
        FieldSpec("time", FieldSyntax.TIME),
        _letter("status", "AV"),
        FieldSpec("latitude", FieldSyntax.DECIMAL),
        _letter("lat_hemisphere", "NS"),
        FieldSpec("longitude", FieldSyntax.DECIMAL),
        _letter("lon_hemisphere", "EW"),
        FieldSpec("speed_knots", FieldSyntax.DECIMAL),
        FieldSpec("course_true", FieldSyntax.DECIMAL),
        FieldSpec("date", FieldSyntax.DATE),
        FieldSpec("magnetic_variation", FieldSyntax.DECIMAL),
        _letter("variation_direction", "EW"),
        _letter("mode", "NADE", omittable=True),
    ),
)

VTG_GRAMMAR = SentenceGrammar(
    SentenceType.VTG,
    (
        FieldSpec("course_true", FieldSyntax.DECIMAL),
        _letter("course_true_tag", "T"),
        FieldSpec("course_magnetic", FieldSyntax.DECIMAL),
        _letter("course_magnetic_tag", "M"),
        FieldSpec("speed_knots", FieldSyntax.DECIMAL),
        _letter("speed_knots_tag", "N"),
        FieldSpec("speed_kmh", FieldSyntax.DECIMAL),
        _letter("speed_kmh_tag", "K"),
        _letter("mode", "NADE", omittable=True),
    ),
)

ZDA_GRAMMAR = SentenceGrammar(
    SentenceType.ZDA,
    (
        FieldSpec("time", FieldSyntax.TIME),
        FieldSpec("day", FieldSyntax.FIXED, width=2),
        FieldSpec("month", FieldSyntax.FIXED, width=2),
        FieldSpec("year", FieldSyntax.FIXED, width=4),
        FieldSpec("zone_hours", FieldSyntax.FIXED, width=2, signed=True),
        FieldSpec("zone_minutes", FieldSyntax.FIXED, width=2),
    ),
)

GRAMMARS: Dict[SentenceType, SentenceGrammar] = {
    grammar.sentence_type: grammar
    for grammar in (GGA_GRAMMAR, RMC_GRAMMAR, VTG_GRAMMAR, ZDA_GRAMMAR)
}


__all__ = [
    "SentenceType",
    "FieldSyntax",
    "FieldSpec",
    "SentenceGrammar",
    "FIELD_CHAR",
    "CHECKSUM_PATTERN",
    "TERMINATOR_PATTERN",
    "GGA_GRAMMAR",
    "RMC_GRAMMAR",
    "VTG_GRAMMAR",
    "ZDA_GRAMMAR",
    "GRAMMARS",
]
