import pytest

from month_grid import (
    CalendarCell,
    MonthCursor,
    build_grid,
    days_in_month,
    leading_blanks,
    shift_month,
    weekday_labels,
)


def test_november_2025_monday_start():
    # 1 Nov 2025 is a Saturday
    cells = build_grid(2025, 11, week_start=0, today="2000-01-01")
    assert len(cells) == 5 + 30
    assert all(cell.is_blank for cell in cells[:5])
    assert cells[5] == CalendarCell(1, "2025-11-01", False)
    assert cells[-1].date_key == "2025-11-30"


def test_sunday_start():
    assert leading_blanks(2025, 11, week_start=6) == 6
    assert leading_blanks(2025, 6, week_start=6) == 0


@pytest.mark.parametrize("year, month, days", [
    (2024, 2, 29),
    (2023, 2, 28),
    (1900, 2, 28),
    (2000, 2, 29),
    (2025, 4, 30),
    (2025, 12, 31),
])
def test_days_in_month(year, month, days):
    assert days_in_month(year, month) == days
    cells = build_grid(year, month, today="2000-01-01")
    assert len(cells) == leading_blanks(year, month) + days


def test_exactly_one_today_inside_the_month():
    cells = build_grid(2025, 11, today="2025-11-18")
    today = [cell for cell in cells if cell.is_today]
    assert len(today) == 1
    assert today[0].day_number == 18


def test_no_today_outside_the_month():
    cells = build_grid(2025, 11, today="2025-12-18")
    assert not any(cell.is_today for cell in cells)


def test_default_today_is_now():
    from datekeys import today_key

    key = today_key()
    year, month = int(key[:4]), int(key[5:7])
    assert sum(cell.is_today for cell in build_grid(year, month)) == 1


def test_blank_cells_have_no_key():
    cell = build_grid(2025, 11, today="2000-01-01")[0]
    assert cell.day_number is None and cell.date_key is None and not cell.is_today


@pytest.mark.parametrize("month", [0, 13, -1])
def test_invalid_month(month):
    with pytest.raises(ValueError):
        build_grid(2025, month)


def test_shift_month_rolls_over_years():
    assert shift_month(2025, 12, 1) == (2026, 1)
    assert shift_month(2025, 1, -1) == (2024, 12)
    assert shift_month(2025, 1, -13) == (2023, 12)
    assert shift_month(2025, 6, 0) == (2025, 6)


def test_weekday_labels_rotate():
    assert weekday_labels(0)[0] == "Mon"
    assert weekday_labels(6)[:2] == ["Sun", "Mon"]


def test_cursor_navigation_clears_selection():
    cursor = MonthCursor(2025, 12).select(31)
    assert cursor.selected_key == "2025-12-31"

    forward = cursor.next()
    assert (forward.year, forward.month, forward.selected_day) == (2026, 1, None)

    back = MonthCursor(2026, 1, 15).prev()
    assert (back.year, back.month, back.selected_day) == (2025, 12, None)

    same_year = MonthCursor(2025, 5, 3).next()
    assert same_year.selected_day is None


def test_cursor_rejects_day_outside_month():
    with pytest.raises(ValueError):
        MonthCursor(2025, 2).select(29)
    with pytest.raises(ValueError):
        MonthCursor(2025, 13)


def test_cursor_title_and_key():
    cursor = MonthCursor(2025, 3, 7)
    assert cursor.title == "March 2025"
    assert cursor.selected_key == "2025-03-07"
    assert MonthCursor(2025, 3).selected_key is None


@pytest.mark.parametrize("year", [0, -5, 10000])
def test_cursor_rejects_year_outside_calendar(year):
    with pytest.raises(ValueError):
        MonthCursor(year, 1)


def test_neighbours_stop_at_calendar_ends():
    prev, nxt = MonthCursor(9999, 12).neighbours()
    assert (prev.year, prev.month) == (9999, 11)
    assert nxt is None

    prev, nxt = MonthCursor(1, 1, 10).neighbours()
    assert prev is None
    assert (nxt.year, nxt.month, nxt.selected_day) == (1, 2, None)
