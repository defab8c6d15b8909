"""Export the (filtered) case list as CSV or Excel, or one day as message text."""
import io
from datetime import date

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response, StreamingResponse

from deps import get_case_store
from schemas import FilterQuery
from surgery_scheduler.config import get_settings
from surgery_scheduler.export import day_message, to_csv, write_excel
from surgery_scheduler.filters import evaluate
from surgery_scheduler.models import FilterState

router = APIRouter()


@router.get("/csv")
def export_csv(q: FilterQuery = Depends(), store=Depends(get_case_store)):
    cases = evaluate(store.snapshot(), FilterState(**q.model_dump()))
    return Response(
        content=to_csv(cases).encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": "attachment; filename=ameliyat_listesi.csv"},
    )


@router.get("/excel")
def export_excel(q: FilterQuery = Depends(), store=Depends(get_case_store)):
    cases = evaluate(store.snapshot(), FilterState(**q.model_dump()))
    buf = io.BytesIO()
    write_excel(cases, buf)
    buf.seek(0)
    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": "attachment; filename=ameliyat_listesi.xlsx"},
    )


@router.get("/day/{day}", response_class=PlainTextResponse)
def export_day(day: date, store=Depends(get_case_store)):
    return day_message(store.snapshot(), day, get_settings().clinic_name)
