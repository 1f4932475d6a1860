import calendar
from dataclasses import dataclass, replace
from datetime import date, MINYEAR, MAXYEAR

from config import WEEK_START
from datekeys import to_date_key, today_key

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@dataclass(frozen=True)
class CalendarCell:
    day_number: int | None = None
    date_key: str | None = None
    is_today: bool = False

    @property
    def is_blank(self) -> bool:
        return self.day_number is None

    def to_dict(self) -> dict:
        return {
            "dayNumber": self.day_number,
            "dateKey": self.date_key,
            "isToday": self.is_today,
        }


def _check_month(month: int):
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1..12, got {month}")


def days_in_month(year: int, month: int) -> int:
    _check_month(month)
    return calendar.monthrange(year, month)[1]


def leading_blanks(year: int, month: int, week_start: int = WEEK_START) -> int:
    _check_month(month)
    first_weekday = calendar.monthrange(year, month)[0]
    return (first_weekday - week_start) % 7


def build_grid(year: int, month: int, week_start: int = WEEK_START, today: str | None = None) -> list[CalendarCell]:
    """
    Cells for one month: blanks up to the weekday of the 1st, then one cell
    per day. Built fresh every time, nothing here is stored.
    """
    if today is None:
        today = today_key()

    cells = [CalendarCell() for _ in range(leading_blanks(year, month, week_start))]
    for day in range(1, days_in_month(year, month) + 1):
        key = to_date_key(date(year, month, day))
        cells.append(CalendarCell(day_number=day, date_key=key, is_today=key == today))
    return cells


def weekday_labels(week_start: int = WEEK_START) -> list[str]:
    return WEEKDAY_LABELS[week_start:] + WEEKDAY_LABELS[:week_start]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """(2025, 12) + 1 -> (2026, 1), (2025, 1) - 1 -> (2024, 12)"""
    _check_month(month)
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


@dataclass(frozen=True)
class MonthCursor:
    """
    The month being looked at plus the selected day. Moving to another
    month (year roll-over included) always drops the selection.
    """
    year: int
    month: int
    selected_day: int | None = None

    def __post_init__(self):
        if not MINYEAR <= self.year <= MAXYEAR:
            raise ValueError(f"year must be {MINYEAR}..{MAXYEAR}, got {self.year}")
        _check_month(self.month)
        if self.selected_day is not None and not 1 <= self.selected_day <= days_in_month(self.year, self.month):
            raise ValueError(f"day {self.selected_day} is not in {self.year}-{self.month:02d}")

    @classmethod
    def today(cls, tz=None) -> "MonthCursor":
        d = date.fromisoformat(today_key(tz))
        return cls(d.year, d.month)

    def next(self) -> "MonthCursor":
        return MonthCursor(*shift_month(self.year, self.month, 1))

    def prev(self) -> "MonthCursor":
        return MonthCursor(*shift_month(self.year, self.month, -1))

    def neighbours(self) -> tuple["MonthCursor | None", "MonthCursor | None"]:
        """(previous, next) month, None past the ends of the calendar."""
        found = []
        for step in (self.prev, self.next):
            try:
                found.append(step())
            except ValueError:
                found.append(None)
        return found[0], found[1]

    def select(self, day: int | None) -> "MonthCursor":
        return replace(self, selected_day=day)

    @property
    def selected_key(self) -> str | None:
        if self.selected_day is None:
            return None
        return to_date_key(date(self.year, self.month, self.selected_day))

    @property
    def title(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"
