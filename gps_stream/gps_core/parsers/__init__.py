"""NMEA parsing components."""

from .nmea_grammar import GRAMMARS, FieldSpec, FieldSyntax, SentenceGrammar, SentenceType
from .nmea_parser import (
    SentenceDecoder,
    GGADecoder,
    RMCDecoder,
    VTGDecoder,
    ZDADecoder,
    compute_checksum,
    create_decoders,
    validate_checksum,
)
from .nmea_types import BaseRecord, CourseSpeed, NavMinimum, PositionFix, TimeDate, UtcTimeFields

__all__ = [
    "GRAMMARS",
    "FieldSpec",
    "FieldSyntax",
    "SentenceGrammar",
    "SentenceType",
    "SentenceDecoder",
    "GGADecoder",
    "RMCDecoder",
    "VTGDecoder",
    "ZDADecoder",
    "compute_checksum",
    "create_decoders",
    "validate_checksum",
    "BaseRecord",
    "CourseSpeed",
    "NavMinimum",
    "PositionFix",
    "TimeDate",
    "UtcTimeFields",
]
