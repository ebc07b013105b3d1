from datetime import date

from jp_holidays import fallback_holidays
from marks import MarkState
from state import CalendarState


def test_reference_is_normalised_to_first_of_month():
    assert CalendarState(date(2025, 1, 15)).reference == date(2025, 1, 1)


def test_january_2025_grid_with_fallback_holidays():
    state = CalendarState(date(2025, 1, 15))
    assert state.apply_holidays(2025, fallback_holidays(2025))
    cells = state.grid(today=date(2025, 1, 15))
    assert cells[0].date == date(2024, 12, 29)
    assert cells[3].date == date(2025, 1, 1)
    assert cells[3].holiday == "元日"
    assert cells[3].mark is MarkState.NONE


def test_year_without_holiday_data_shows_no_labels():
    state = CalendarState(date(2099, 5, 1))
    state.apply_holidays(2099, {})
    assert all(c.holiday is None for c in state.grid())
    assert not state.needs_holidays()


def test_navigate_reports_year_change():
    state = CalendarState(date(2025, 11, 3))
    assert not state.navigate_month(1)
    assert state.navigate_month(1)
    assert (state.year, state.month) == (2026, 1)
    assert state.navigate_month(-1)
    assert state.reference == date(2025, 12, 1)


def test_go_today():
    state = CalendarState(date(2020, 1, 1))
    assert state.go_today(date(2025, 7, 20))
    assert state.reference == date(2025, 7, 1)


def test_stale_holiday_table_is_dropped():
    state = CalendarState(date(2025, 12, 1))
    state.navigate_month(1)
    assert not state.apply_holidays(2025, fallback_holidays(2025))
    assert state.holidays == {}
    assert state.needs_holidays()


def test_commands_reach_the_mark_book():
    state = CalendarState(date(2025, 1, 1))
    d = date(2025, 1, 1)
    state.toggle_mark(d)
    assert state.toggle_mark(d) is MarkState.CROSS
    state.set_reason(d, MarkState.CROSS, "sick")
    assert state.grid()[3].mark is MarkState.CROSS
    assert state.marks.reason_of(d, MarkState.CROSS) == "sick"
