"""Per-day marks and the free-text reasons attached to Cross/Triangle days."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date

from calendar_logic import date_key, parse_date_key


class MarkState(enum.Enum):
    NONE = "none"
    CIRCLE = "circle"
    CROSS = "cross"
    TRIANGLE = "triangle"


# Mark kinds that carry a reason
ANNOTATED_KINDS = (MarkState.CROSS, MarkState.TRIANGLE)

_NEXT_MARK = {
    MarkState.NONE: MarkState.CIRCLE,
    MarkState.CIRCLE: MarkState.CROSS,
    MarkState.CROSS: MarkState.TRIANGLE,
    MarkState.TRIANGLE: MarkState.NONE,
}

NOT_FILLED_IN = "not filled in"


@dataclass(frozen=True)
class ReasonEntry:
    date: date
    key: str
    reason: str


class MarkBook:
    """Session-lifetime store of marks keyed by date key.

    Reasons live in one mapping per annotated kind.  Cycling a day back to
    ``NONE`` wipes both of its reasons; ``CROSS -> TRIANGLE`` keeps the old
    Cross reason in storage, where it stays unreachable until the day next
    reaches ``NONE``.
    """

    def __init__(self) -> None:
        self._marks: dict[str, MarkState] = {}
        self._reasons: dict[MarkState, dict[str, str]] = {
            kind: {} for kind in ANNOTATED_KINDS
        }

    def mark_of(self, d: date) -> MarkState:
        return self._marks.get(date_key(d), MarkState.NONE)

    def toggle(self, d: date) -> MarkState:
        """Advance the mark of *d* one step around the cycle."""
        key = date_key(d)
        new_mark = _NEXT_MARK[self._marks.get(key, MarkState.NONE)]
        if new_mark is MarkState.NONE:
            self._marks.pop(key, None)
            for reasons in self._reasons.values():
                reasons.pop(key, None)
        else:
            self._marks[key] = new_mark
        return new_mark

    def set_reason(self, d: date, kind: MarkState, text: str) -> None:
        self._reasons_for(kind)[date_key(d)] = text

    def reason_of(self, d: date, kind: MarkState) -> str:
        return self._reasons_for(kind).get(date_key(d), "")

    def list_by_kind(self, kind: MarkState) -> list[ReasonEntry]:
        """Return the days currently marked *kind* with their reasons, by date."""
        reasons = self._reasons_for(kind)
        entries = [
            ReasonEntry(parse_date_key(key), key, reasons.get(key, ""))
            for key, mark in self._marks.items()
            if mark is kind
        ]
        entries.sort(key=lambda e: e.date)
        return entries

    def _reasons_for(self, kind: MarkState) -> dict[str, str]:
        try:
            return self._reasons[kind]
        except KeyError:
            raise ValueError(f"{kind} marks do not carry a reason") from None


def display_reason(reason: str) -> str:
    return reason or NOT_FILLED_IN
