"""
Filter and search over the full case history (list tab).
"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from .models import FilterState, RoomFilter, Surgery, TriState
from .text import collation_key, normalize, turkish_upper

SEARCH_FIELDS = ("patient_name", "operation", "professor", "protocol", "resident")


def _text_match(case: Surgery, needle: str) -> bool:
    if not needle:
        return True
    return any(needle in normalize(getattr(case, f)) for f in SEARCH_FIELDS)


def _value_match(value: str, wanted: str) -> bool:
    wanted = normalize(wanted)
    if not wanted or wanted == "any":
        return True
    return normalize(value) == wanted


def matches(case: Surgery, fs: FilterState, needle: Optional[str] = None) -> bool:
    if needle is None:
        needle = normalize(fs.search)
    if not _text_match(case, needle):
        return False
    if not _value_match(case.professor, fs.professor):
        return False
    if not _value_match(case.operation, fs.operation):
        return False
    if not _value_match(case.resident, fs.resident):
        return False
    if not RoomFilter(fs.room).accepts(case.is_second_room):
        return False
    if not TriState(fs.remaining).accepts(case.is_remaining):
        return False
    if not TriState(fs.mdp).accepts(case.is_mdp):
        return False
    if not TriState(fs.kg).accepts(case.is_kg):
        return False
    return True


def evaluate(cases: Iterable[Surgery], fs: Optional[FilterState] = None) -> List[Surgery]:
    """Cases passing every active constraint, ascending by date (stable for ties)."""
    fs = fs or FilterState()
    needle = normalize(fs.search)
    ordered = sorted(cases, key=lambda c: c.date)
    return [c for c in ordered if matches(c, fs, needle)]


def _distinct(values: Iterable[str]) -> List[str]:
    return sorted({v for v in values if v}, key=collation_key)


def filter_options(cases: Iterable[Surgery]) -> Dict[str, List[str]]:
    """Selector values: professors/residents upper-cased, operations normalized."""
    cases = list(cases)
    return {
        "professors": _distinct(turkish_upper((c.professor or "").strip()) for c in cases),
        "operations": _distinct(normalize(c.operation) for c in cases),
        "residents": _distinct(turkish_upper((c.resident or "").strip()) for c in cases),
    }


def summarize(cases: Iterable[Surgery], today: Optional[date] = None) -> Dict[str, int]:
    today_str = (today or date.today()).isoformat()
    cases = list(cases)
    return {
        "total": len(cases),
        "second_room": sum(1 for c in cases if c.is_second_room),
        "remaining": sum(1 for c in cases if c.is_remaining),
        "upcoming": sum(1 for c in cases if c.date >= today_str),
    }
