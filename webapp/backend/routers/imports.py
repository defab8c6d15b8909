from datetime import date

from fastapi import APIRouter, Depends, File, UploadFile

from deps import get_case_store
from schemas import ImportFailureOut, ImportResponse
from surgery_scheduler.importer import import_workbook

router = APIRouter()


@router.post("/excel", response_model=ImportResponse)
def import_excel(anchor: date, file: UploadFile = File(...), store=Depends(get_case_store)):
    """Import a weekly list workbook; anchor is the Monday of that week."""
    content = file.file.read()
    result = import_workbook(store, content, anchor)
    return ImportResponse(
        added=result.added,
        skipped=result.skipped,
        failures=[ImportFailureOut.model_validate(f) for f in result.failures],
    )
