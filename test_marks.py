from datetime import date

import pytest

from marks import MarkBook, MarkState, display_reason

NEW_YEAR = date(2025, 1, 1)


def test_unseen_day_has_no_mark():
    assert MarkBook().mark_of(NEW_YEAR) is MarkState.NONE


def test_four_toggles_cycle_back_to_none():
    book = MarkBook()
    seq = [book.toggle(NEW_YEAR) for _ in range(4)]
    assert seq == [MarkState.CIRCLE, MarkState.CROSS, MarkState.TRIANGLE, MarkState.NONE]
    assert book.mark_of(NEW_YEAR) is MarkState.NONE
    assert book.list_by_kind(MarkState.TRIANGLE) == []


def test_reaching_none_clears_both_reasons():
    book = MarkBook()
    book.toggle(NEW_YEAR)
    book.toggle(NEW_YEAR)
    book.set_reason(NEW_YEAR, MarkState.CROSS, "dentist")
    book.toggle(NEW_YEAR)
    book.set_reason(NEW_YEAR, MarkState.TRIANGLE, "maybe")
    book.toggle(NEW_YEAR)
    assert book.reason_of(NEW_YEAR, MarkState.CROSS) == ""
    assert book.reason_of(NEW_YEAR, MarkState.TRIANGLE) == ""


def test_cross_reason_orphaned_after_triangle():
    book = MarkBook()
    book.toggle(NEW_YEAR)
    book.toggle(NEW_YEAR)
    book.set_reason(NEW_YEAR, MarkState.CROSS, "dentist")
    assert book.toggle(NEW_YEAR) is MarkState.TRIANGLE

    assert book.list_by_kind(MarkState.CROSS) == []
    [entry] = book.list_by_kind(MarkState.TRIANGLE)
    assert entry.reason == ""
    # Still stored, just unreachable through the lists
    assert book.reason_of(NEW_YEAR, MarkState.CROSS) == "dentist"


def test_list_by_kind_sorted_and_filtered():
    book = MarkBook()
    days = [date(2025, 3, 2), date(2024, 12, 30), date(2025, 1, 10)]
    for d in days:
        book.toggle(d)
        book.toggle(d)
    book.toggle(date(2025, 1, 10))  # now a triangle
    book.set_reason(date(2025, 3, 2), MarkState.CROSS, "trip")

    crosses = book.list_by_kind(MarkState.CROSS)
    assert [e.date for e in crosses] == [date(2024, 12, 30), date(2025, 3, 2)]
    assert [e.reason for e in crosses] == ["", "trip"]
    assert [e.key for e in book.list_by_kind(MarkState.TRIANGLE)] == ["2025-01-10"]


def test_set_reason_is_not_gated_by_mark():
    book = MarkBook()
    book.set_reason(NEW_YEAR, MarkState.TRIANGLE, "early note")
    assert book.reason_of(NEW_YEAR, MarkState.TRIANGLE) == "early note"
    assert book.list_by_kind(MarkState.TRIANGLE) == []


@pytest.mark.parametrize("kind", [MarkState.NONE, MarkState.CIRCLE])
def test_reason_kinds_are_cross_and_triangle_only(kind):
    with pytest.raises(ValueError):
        MarkBook().set_reason(NEW_YEAR, kind, "x")


def test_display_reason():
    assert display_reason("") == "not filled in"
    assert display_reason("late") == "late"
