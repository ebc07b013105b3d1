"""Pure calendar calculations — no UI dependencies."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from marks import MarkBook, MarkState

GRID_COLUMNS = 7
GRID_ROWS = 6
GRID_CELLS = GRID_COLUMNS * GRID_ROWS

# Weeks start on Sunday
WEEKDAY_LABELS = ["日", "月", "火", "水", "木", "金", "土"]


class Weekend(enum.Enum):
    NONE = "none"
    SUNDAY = "sunday"
    SATURDAY = "saturday"


# ------------------------------------------------------------------
# Date keys
# ------------------------------------------------------------------
def date_key(d: date) -> str:
    """Return the ``YYYY-MM-DD`` key of the local calendar day of *d*.

    Works for ``datetime`` values too; only the year/month/day fields are
    read, so the time of day and any tzinfo never shift the key.
    """
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_date_key(key: str) -> date:
    """Inverse of :func:`date_key`."""
    parts = key.split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"malformed date key: {key!r}")
    year, month, day = (int(p) for p in parts)
    return date(year, month, day)


# ------------------------------------------------------------------
# Month grid
# ------------------------------------------------------------------
def sunday_index(d: date) -> int:
    """Day of week with Sunday = 0 ... Saturday = 6."""
    return (d.weekday() + 1) % 7


def weekend_kind(d: date) -> Weekend:
    idx = sunday_index(d)
    if idx == 0:
        return Weekend.SUNDAY
    if idx == 6:
        return Weekend.SATURDAY
    return Weekend.NONE


def first_of_month(d: date) -> date:
    return date(d.year, d.month, 1)


def grid_start(year: int, month: int) -> date:
    """Return the Sunday on or before the 1st of the month."""
    first = date(year, month, 1)
    return first - timedelta(days=sunday_index(first))


def month_dates(year: int, month: int) -> list[date]:
    """Return the 42 consecutive dates shown for the given month.

    Always 6 rows so the calendar height stays constant.  Current-month
    days past the 42nd cell would simply not be shown.
    """
    start = grid_start(year, month)
    return [start + timedelta(days=i) for i in range(GRID_CELLS)]


@dataclass(frozen=True)
class DayCell:
    date: date
    key: str
    is_current_month: bool
    is_today: bool
    weekend: Weekend
    holiday: str | None
    mark: "MarkState"


def build_month_grid(
    reference: date,
    marks: "MarkBook",
    holidays: Mapping[str, str],
    today: date | None = None,
) -> list[DayCell]:
    """Return the 42 :class:`DayCell` objects for the month of *reference*."""
    today = today or date.today()
    cells: list[DayCell] = []
    for d in month_dates(reference.year, reference.month):
        key = date_key(d)
        cells.append(DayCell(
            date=d,
            key=key,
            is_current_month=(d.year, d.month) == (reference.year, reference.month),
            is_today=d == today,
            weekend=weekend_kind(d),
            holiday=holidays.get(key) or None,
            mark=marks.mark_of(d),
        ))
    return cells


def cell_position(index: int) -> tuple[int, int]:
    """Return (row, column) of a grid index."""
    return divmod(index, GRID_COLUMNS)


# ------------------------------------------------------------------
# Navigation
# ------------------------------------------------------------------
def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Return (year, month) moved by *delta* months."""
    y, m = divmod(year * 12 + (month - 1) + delta, 12)
    return y, m + 1


# ------------------------------------------------------------------
# Labels
# ------------------------------------------------------------------
def month_title(year: int, month: int) -> str:
    return f"{year}年{month}月"


def short_label(d: date) -> str:
    """``M/D`` without zero padding."""
    return f"{d.month}/{d.day}"


def weekday_label(d: date) -> str:
    """``M/D(曜)`` as shown in the reason side panel."""
    return f"{short_label(d)}({WEEKDAY_LABELS[sunday_index(d)]})"
