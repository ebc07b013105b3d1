"""Session state of the calendar and the commands that mutate it."""

from __future__ import annotations

import logging
from datetime import date

from calendar_logic import DayCell, build_month_grid, first_of_month, shift_month
from marks import MarkBook, MarkState

logger = logging.getLogger(__name__)


class CalendarState:
    """Single owner of the displayed month, marks, reasons and holidays.

    Views and the renderer only read from it; every change goes through
    one of the command methods.
    """

    def __init__(self, reference: date | None = None) -> None:
        reference = reference or date.today()
        self.reference = first_of_month(reference)
        self.marks = MarkBook()
        self.holidays: dict[str, str] = {}
        self.holiday_year: int | None = None

    @property
    def year(self) -> int:
        return self.reference.year

    @property
    def month(self) -> int:
        return self.reference.month

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def navigate_month(self, delta: int) -> bool:
        """Move the displayed month; return True when the year changed."""
        old_year = self.year
        y, m = shift_month(self.year, self.month, delta)
        self.reference = date(y, m, 1)
        return self.year != old_year

    def go_today(self, today: date | None = None) -> bool:
        today = today or date.today()
        old_year = self.year
        self.reference = date(today.year, today.month, 1)
        return self.year != old_year

    def toggle_mark(self, d: date) -> MarkState:
        return self.marks.toggle(d)

    def set_reason(self, d: date, kind: MarkState, text: str) -> None:
        self.marks.set_reason(d, kind, text)

    def apply_holidays(self, year: int, table: dict[str, str]) -> bool:
        """Install *table* if it belongs to the displayed year.

        Results for a year the user has already navigated away from are
        dropped.
        """
        if year != self.year:
            logger.debug("Dropping stale holiday table for %d (showing %d)", year, self.year)
            return False
        self.holidays = dict(table)
        self.holiday_year = year
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def needs_holidays(self) -> bool:
        return self.holiday_year != self.year

    def grid(self, today: date | None = None) -> list[DayCell]:
        return build_month_grid(self.reference, self.marks, self.holidays, today)
