"""
Data models for the surgical case list.
Field names follow the clinic's stored documents (patientName, isSecondRoom, ...)
on the wire; Python attributes are snake_case.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional


class UrineCulture(str, Enum):
    STERILE = "Steril"
    GROWTH = "Üremeli"
    CONTAMINATED = "Kontamine"
    UNKNOWN = "Bilinmiyor"


class TriState(str, Enum):
    """Three-way boolean gate for flag filters."""
    ANY = "any"
    YES = "yes"
    NO = "no"

    def accepts(self, flag: bool) -> bool:
        if self is TriState.YES:
            return bool(flag)
        if self is TriState.NO:
            return not flag
        return True


class RoomFilter(str, Enum):
    """Gate on the is_second_room flag."""
    ANY = "any"
    FIRST = "first"
    SECOND = "second"

    def accepts(self, is_second_room: bool) -> bool:
        if self is RoomFilter.SECOND:
            return bool(is_second_room)
        if self is RoomFilter.FIRST:
            return not is_second_room
        return True


class Severity(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


ROOMS = (1, 2, 3)

# Daily load thresholds (inclusive upper bounds)
LOW_LOAD_MAX = 7
MEDIUM_LOAD_MAX = 12


# python attribute -> stored document key
WIRE_NAMES = {
    "id": "id",
    "date": "date",
    "patient_name": "patientName",
    "protocol": "protocol",
    "phone": "phone",
    "operation": "operation",
    "professor": "professor",
    "resident": "resident",
    "urine": "urine",
    "anesthesia": "anesthesia",
    "age": "age",
    "note": "note",
    "is_second_room": "isSecondRoom",
    "is_remaining": "isRemaining",
    "is_mdp": "isMDP",
    "is_kg": "isKG",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}
ATTR_NAMES = {v: k for k, v in WIRE_NAMES.items()}

FLAG_FIELDS = ("is_second_room", "is_remaining", "is_mdp", "is_kg")
TEXT_FIELDS = (
    "patient_name", "protocol", "phone", "operation", "professor",
    "resident", "urine", "anesthesia", "age", "note",
)


@dataclass
class Surgery:
    """One scheduled surgical case."""
    date: str                        # ISO YYYY-MM-DD
    patient_name: str
    operation: str = ""
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
    id: Optional[str] = None         # assigned by the store
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def day(self) -> date:
        return date.fromisoformat(self.date)

    def with_changes(self, **changes: Any) -> "Surgery":
        return replace(self, **changes)

    def to_dict(self, wire: bool = True) -> Dict[str, Any]:
        out = {}
        for f in fields(self):
            key = WIRE_NAMES[f.name] if wire else f.name
            out[key] = getattr(self, f.name)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Surgery":
        """Build from either wire keys or attribute names; unknown keys are dropped."""
        kwargs = {}
        for key, value in data.items():
            attr = ATTR_NAMES.get(key, key)
            if attr in WIRE_NAMES:
                kwargs[attr] = value
        for flag in FLAG_FIELDS:
            kwargs[flag] = bool(kwargs.get(flag) or False)
        for name in TEXT_FIELDS:
            if kwargs.get(name) is None and name in kwargs:
                kwargs[name] = ""
        return cls(**kwargs)


@dataclass
class ProfessorOfDay:
    date: str
    professor_name: str


@dataclass
class FilterState:
    """Independent criteria; defaults place no constraint."""
    search: str = ""
    professor: str = ""
    operation: str = ""
    resident: str = ""
    room: RoomFilter = RoomFilter.ANY
    remaining: TriState = TriState.ANY
    mdp: TriState = TriState.ANY
    kg: TriState = TriState.ANY


@dataclass
class DayCell:
    """A numbered day in the month grid."""
    day: int
    date: str
    count: int = 0
    severity: Severity = Severity.NONE
    is_today: bool = False
    is_selected: bool = False


@dataclass
class ImportFailure:
    sheet: str
    patient_name: str
    error: str


@dataclass
class ImportResult:
    added: int = 0
    skipped: int = 0
    failures: list = field(default_factory=list)   # [ImportFailure]
