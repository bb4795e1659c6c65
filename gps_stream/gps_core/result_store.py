"""Latest decoded record per sentence type."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from .parsers.nmea_grammar import SentenceType
from .parsers.nmea_types import BaseRecord, CourseSpeed, NavMinimum, PositionFix, TimeDate

RECORD_TYPES = {
    SentenceType.GGA: PositionFix,
    SentenceType.RMC: NavMinimum,
    SentenceType.VTG: CourseSpeed,
    SentenceType.ZDA: TimeDate,
}


def _not_enabled(sentence_type: object) -> str:
    name = getattr(sentence_type, "value", sentence_type)
    return f"Sentence type {name} is not enabled"


class ResultStore:
    """One record slot per enabled sentence type.

    Slots start as all-default records and are replaced wholesale by
    ``update``. Records are immutable and a slot swap is a single reference
    assignment, so a reader on another thread sees either the old record or
    the new one, never a mix.
    """

    def __init__(self, enabled: Optional[Iterable[SentenceType]] = None) -> None:
        types = list(SentenceType) if enabled is None else list(dict.fromkeys(enabled))
        self._slots: Dict[SentenceType, BaseRecord] = {
            sentence_type: RECORD_TYPES[sentence_type]() for sentence_type in types
        }
        self._counts: Dict[SentenceType, int] = {sentence_type: 0 for sentence_type in types}

    @property
    def sentence_types(self) -> tuple[SentenceType, ...]:
        return tuple(self._slots)

    def __contains__(self, sentence_type: object) -> bool:
        return sentence_type in self._slots

    def get(self, sentence_type: SentenceType) -> BaseRecord:
        """Most recent record, or a default record before the first decode."""
        try:
            return self._slots[sentence_type]
        except KeyError:
            raise KeyError(_not_enabled(sentence_type)) from None

    def update(self, sentence_type: SentenceType, record: BaseRecord) -> None:
        if sentence_type not in self._slots:
            raise KeyError(_not_enabled(sentence_type))
        expected = RECORD_TYPES[sentence_type]
        if not isinstance(record, expected):
            raise TypeError(
                f"{sentence_type.value} slot takes {expected.__name__}, got {type(record).__name__}"
            )
        self._slots[sentence_type] = record
        self._counts[sentence_type] += 1

    def update_count(self, sentence_type: SentenceType) -> int:
        """How many times the slot has been replaced."""
        return self._counts[sentence_type]

    def snapshot(self) -> Dict[SentenceType, BaseRecord]:
        return dict(self._slots)

    def reset(self) -> None:
        """Return every slot to its default record."""
        for sentence_type in self._slots:
            self._slots[sentence_type] = RECORD_TYPES[sentence_type]()
            self._counts[sentence_type] = 0

    @property
    def position_fix(self) -> Optional[PositionFix]:
        return self._slots.get(SentenceType.GGA)  # type: ignore[return-value]

    @property
    def nav_minimum(self) -> Optional[NavMinimum]:
        return self._slots.get(SentenceType.RMC)  # type: ignore[return-value]

    @property
    def course_speed(self) -> Optional[CourseSpeed]:
        return self._slots.get(SentenceType.VTG)  # type: ignore[return-value]

    @property
    def time_date(self) -> Optional[TimeDate]:
        return self._slots.get(SentenceType.ZDA)  # type: ignore[return-value]


__all__ = ["ResultStore", "RECORD_TYPES"]
