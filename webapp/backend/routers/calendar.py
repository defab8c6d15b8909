from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from deps import get_case_store, get_professor_store, get_room_store
from schemas import DayCellOut, DayOut, MonthOut, SurgeryOut
from surgery_scheduler.calendar_view import cases_on, first_weekday_offset, month_cells, severity
from surgery_scheduler.export import format_date_display

router = APIRouter()


@router.get("/day/{day}", response_model=DayOut)
def get_day(
    day: date,
    store=Depends(get_case_store),
    rooms=Depends(get_room_store),
    professors=Depends(get_professor_store),
):
    """A day's cases with their room partition (stale room entries are left out)."""
    day_cases = cases_on(store.snapshot(), day)
    partition = rooms.partition([c.id for c in day_cases])
    return DayOut(
        date=day.isoformat(),
        label=format_date_display(day),
        professor_of_day=professors.get(day.isoformat()),
        count=len(day_cases),
        severity=severity(len(day_cases)).value,
        cases=[SurgeryOut.model_validate(c) for c in day_cases],
        rooms=partition.as_dict(),
    )


@router.get("/{year}/{month}", response_model=MonthOut)
def get_month(
    year: int,
    month: int,
    selected: Optional[date] = None,
    today: Optional[date] = None,
    store=Depends(get_case_store),
):
    """Month grid: leading empty cells, then one cell per day with load."""
    if not 1 <= month <= 12:
        raise HTTPException(400, f"Month must be 1..12 (got {month})")
    cells = month_cells(
        store.snapshot(), year, month,
        today=today or date.today(),
        selected=selected.isoformat() if selected else None,
    )
    out = []
    for c in cells:
        if c is None:
            out.append(None)
            continue
        out.append(DayCellOut(
            day=c.day, date=c.date, count=c.count, severity=c.severity.value,
            is_today=c.is_today, is_selected=c.is_selected,
        ))
    return MonthOut(year=year, month=month, offset=first_weekday_offset(year, month), cells=out)
