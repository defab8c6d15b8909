from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from deps import get_case_store
from schemas import FilterOptionsOut, FilterQuery, SurgeryCreate, SurgeryOut, SurgeryUpdate
from surgery_scheduler.filters import evaluate, filter_options, summarize
from surgery_scheduler.models import FilterState, Surgery

router = APIRouter()


def _filter_state(q: FilterQuery) -> FilterState:
    return FilterState(**q.model_dump())


@router.get("/", response_model=list[SurgeryOut])
def list_cases(q: FilterQuery = Depends(), store=Depends(get_case_store)):
    """All cases passing the filters, oldest day first."""
    return [SurgeryOut.model_validate(c) for c in evaluate(store.snapshot(), _filter_state(q))]


@router.get("/options", response_model=FilterOptionsOut)
def list_filter_options(store=Depends(get_case_store)):
    return filter_options(store.snapshot())


@router.get("/stats", response_model=dict)
def case_stats(today: Optional[date] = None, q: FilterQuery = Depends(), store=Depends(get_case_store)):
    return summarize(evaluate(store.snapshot(), _filter_state(q)), today)


@router.get("/{case_id}", response_model=SurgeryOut)
def get_case(case_id: str, store=Depends(get_case_store)):
    return SurgeryOut.model_validate(store.get(case_id))


@router.post("/", response_model=SurgeryOut)
def create_case(data: SurgeryCreate, store=Depends(get_case_store)):
    case_id = store.add(Surgery(**data.model_dump()))
    return SurgeryOut.model_validate(store.get(case_id))


@router.patch("/{case_id}", response_model=SurgeryOut)
def update_case(case_id: str, data: SurgeryUpdate, store=Depends(get_case_store)):
    store.update(case_id, data.model_dump(exclude_unset=True))
    return SurgeryOut.model_validate(store.get(case_id))


@router.delete("/{case_id}")
def delete_case(case_id: str, store=Depends(get_case_store)):
    store.delete(case_id)
    return {"ok": True}
