"""
Month grid aggregation for the calendar tab.
Weeks start on Monday. "Today" is always passed in by the caller.
"""

import calendar
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional

from .models import (
    DayCell, Severity, Surgery, LOW_LOAD_MAX, MEDIUM_LOAD_MAX,
)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def first_weekday_offset(year: int, month: int) -> int:
    """Monday-first index (0..6) of the 1st of the month."""
    return date(year, month, 1).weekday()


def build_grid(year: int, month: int) -> List[Optional[int]]:
    """Leading None cells for the offset, then 1..days_in_month. No trailing padding."""
    return [None] * first_weekday_offset(year, month) + list(range(1, days_in_month(year, month) + 1))


def iso_day(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"


def count_by_day(cases: Iterable[Surgery]) -> Dict[str, int]:
    return Counter(c.date for c in cases)


def daily_load(cases: Iterable[Surgery], day) -> int:
    key = day.isoformat() if isinstance(day, date) else str(day)
    return sum(1 for c in cases if c.date == key)


def severity(count: int) -> Severity:
    if count <= 0:
        return Severity.NONE
    if count <= LOW_LOAD_MAX:
        return Severity.LOW
    if count <= MEDIUM_LOAD_MAX:
        return Severity.MEDIUM
    return Severity.HIGH


def cases_on(cases: Iterable[Surgery], day) -> List[Surgery]:
    """Day bucket, input order kept."""
    key = day.isoformat() if isinstance(day, date) else str(day)
    return [c for c in cases if c.date == key]


def month_cells(
    cases: Iterable[Surgery],
    year: int,
    month: int,
    today: Optional[date] = None,
    selected: Optional[str] = None,
) -> List[Optional[DayCell]]:
    today_str = (today or date.today()).isoformat()
    counts = count_by_day(cases)
    cells: List[Optional[DayCell]] = []
    for d in build_grid(year, month):
        if d is None:
            cells.append(None)
            continue
        key = iso_day(year, month, d)
        n = counts.get(key, 0)
        cells.append(DayCell(
            day=d,
            date=key,
            count=n,
            severity=severity(n),
            is_today=key == today_str,
            is_selected=key == selected,
        ))
    return cells


@dataclass
class CalendarState:
    displayed_year: int
    displayed_month: int             # 1..12
    selected_date: str               # ISO day, may lie outside the displayed month

    @classmethod
    def starting_at(cls, day: Optional[date] = None) -> "CalendarState":
        day = day or date.today()
        return cls(day.year, day.month, day.isoformat())

    def navigate(self, direction: int) -> None:
        """Move the displayed month by +1/-1, wrapping the year."""
        if direction not in (-1, 1):
            raise ValueError(f"direction must be -1 or 1 (got {direction})")
        index = self.displayed_year * 12 + (self.displayed_month - 1) + direction
        self.displayed_year, m0 = divmod(index, 12)
        self.displayed_month = m0 + 1

    def jump_to_today(self, today: Optional[date] = None) -> None:
        # date.today() is the local calendar day
        today = today or date.today()
        self.displayed_year = today.year
        self.displayed_month = today.month
        self.selected_date = today.isoformat()

    def select(self, day) -> None:
        self.selected_date = day.isoformat() if isinstance(day, date) else date.fromisoformat(day).isoformat()

    def grid(self) -> List[Optional[int]]:
        return build_grid(self.displayed_year, self.displayed_month)

    def cells(self, cases: Iterable[Surgery], today: Optional[date] = None) -> List[Optional[DayCell]]:
        return month_cells(cases, self.displayed_year, self.displayed_month, today, self.selected_date)
