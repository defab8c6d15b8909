from datetime import date

from fastapi import APIRouter, Depends

from deps import get_professor_store
from schemas import ProfessorOfDayIn, ProfessorOfDayOut

router = APIRouter()


@router.get("/", response_model=list[ProfessorOfDayOut])
def list_professors(store=Depends(get_professor_store)):
    return [ProfessorOfDayOut.model_validate(p) for p in store.snapshot()]


@router.put("/{day}")
def set_professor(day: date, data: ProfessorOfDayIn, store=Depends(get_professor_store)):
    """Set the professor of the day; an empty name clears it."""
    store.set(day.isoformat(), data.professor_name)
    return {"ok": True, "date": day.isoformat(), "professor_name": store.get(day.isoformat())}
