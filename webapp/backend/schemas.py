"""Pydantic schemas for API."""
from datetime import date as date_type
from typing import Optional, List, Dict

from pydantic import BaseModel, Field, field_validator

from surgery_scheduler.models import RoomFilter, TriState, UrineCulture


def _iso_day(v: str) -> str:
    return date_type.fromisoformat(v).isoformat()


class SurgeryBase(BaseModel):
    date: str
    patient_name: str = Field(min_length=1)
    operation: str = Field(min_length=1)
    protocol: str = ""
    phone: str = ""
    professor: str = ""
    resident: str = ""
    urine: str = UrineCulture.STERILE.value
    anesthesia: str = ""
    age: str = ""
    note: str = ""
    is_second_room: bool = False
    is_remaining: bool = False
    is_mdp: bool = False
    is_kg: bool = False

    @field_validator("date")
    @classmethod
    def check_date(cls, v: str) -> str:
        return _iso_day(v)


class SurgeryCreate(SurgeryBase):
    pass


class SurgeryUpdate(BaseModel):
    date: Optional[str] = None
    patient_name: Optional[str] = Field(default=None, min_length=1)
    operation: Optional[str] = Field(default=None, min_length=1)
    protocol: Optional[str] = None
    phone: Optional[str] = None
    professor: Optional[str] = None
    resident: Optional[str] = None
    urine: Optional[str] = None
    anesthesia: Optional[str] = None
    age: Optional[str] = None
    note: Optional[str] = None
    is_second_room: Optional[bool] = None
    is_remaining: Optional[bool] = None
    is_mdp: Optional[bool] = None
    is_kg: Optional[bool] = None

    @field_validator(
        "date", "patient_name", "operation",
        "is_second_room", "is_remaining", "is_mdp", "is_kg",
        mode="before",
    )
    @classmethod
    def not_null(cls, v):
        # Omit a field to leave it unchanged; null is not a value for these
        if v is None:
            raise ValueError("may be omitted but not null")
        return v

    @field_validator("date")
    @classmethod
    def check_date(cls, v: Optional[str]) -> Optional[str]:
        return _iso_day(v) if v is not None else v


class SurgeryOut(SurgeryBase):
    id: str
    patient_name: str
    operation: str

    class Config:
        from_attributes = True


class FilterQuery(BaseModel):
    search: str = ""
    professor: str = ""
    operation: str = ""
    resident: str = ""
    room: RoomFilter = RoomFilter.ANY
    remaining: TriState = TriState.ANY
    mdp: TriState = TriState.ANY
    kg: TriState = TriState.ANY


class FilterOptionsOut(BaseModel):
    professors: List[str] = []
    operations: List[str] = []
    residents: List[str] = []


class DayCellOut(BaseModel):
    day: int
    date: str
    count: int
    severity: str
    is_today: bool
    is_selected: bool

    class Config:
        from_attributes = True


class MonthOut(BaseModel):
    year: int
    month: int
    offset: int
    cells: List[Optional[DayCellOut]]


class DayOut(BaseModel):
    date: str
    label: str
    professor_of_day: Optional[str] = None
    count: int
    severity: str
    cases: List[SurgeryOut]
    rooms: Dict[str, List[str]]


class ToggleRoomRequest(BaseModel):
    case_id: str
    room: int


class ToggleRoomResponse(BaseModel):
    case_id: str
    room: Optional[int] = None


class ProfessorOfDayIn(BaseModel):
    professor_name: str = ""


class ProfessorOfDayOut(BaseModel):
    date: str
    professor_name: str

    class Config:
        from_attributes = True


class ImportFailureOut(BaseModel):
    sheet: str
    patient_name: str
    error: str

    class Config:
        from_attributes = True


class ImportResponse(BaseModel):
    added: int
    skipped: int
    failures: List[ImportFailureOut] = []
