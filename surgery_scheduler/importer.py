"""
Bulk import of a weekly list workbook.

One sheet per weekday. The sheet name picks the day ("Salı" -> Tuesday); an
unrecognized name falls back to the sheet's position. Every row with a patient
name becomes one case on anchor + offset.
"""

from datetime import date, timedelta
from io import BytesIO
from typing import Dict, List, Tuple

import pandas as pd
from loguru import logger

from .errors import ImportFormatError
from .models import ImportFailure, ImportResult, Surgery, UrineCulture
from .text import header_key, normalize

DAY_OFFSETS = {
    "pazartesi": 0,
    "salı": 1,
    "çarşamba": 2,
    "perşembe": 3,
    "cuma": 4,
    "cumartesi": 5,
    "pazar": 6,
}
# "cumartesi" contains "cuma", "pazartesi" contains "pazar": try longer names first
_DAY_MATCH_ORDER = sorted(DAY_OFFSETS, key=len, reverse=True)
_DAY_KEYS = {name: header_key(name) for name in DAY_OFFSETS}

# Column header vocabulary of the ward spreadsheets
COLUMNS = {
    "patient_name": "HASTA ADI",
    "protocol": "PROTOKOL",
    "phone": "TELEFON",
    "operation": "OPERASYON",
    "professor": "HOCA",
    "resident": "VEREN DR",
    "urine": "İDRAR KÜLTÜRÜ",
    "anesthesia": "ANESTEZİ",
    "age": "YAŞ",
    "note": "NOTLAR",
}
_COLUMN_KEYS = {field: header_key(label) for field, label in COLUMNS.items()}
_URINE_VALUES = {normalize(u.value): u.value for u in UrineCulture}


def sheet_day_offset(sheet_name: str, position: int) -> int:
    name = header_key(sheet_name)
    for day_name in _DAY_MATCH_ORDER:
        if _DAY_KEYS[day_name] in name:
            return DAY_OFFSETS[day_name]
    return position if position > 0 else 0


def _cell_text(value) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _urine(value: str) -> str:
    if not value:
        return UrineCulture.STERILE.value
    return _URINE_VALUES.get(normalize(value), value)


def _column_map(columns) -> Dict[str, object]:
    """field -> actual DataFrame column, first header match wins."""
    found = {}
    for col in columns:
        key = header_key(col)
        for field, wanted in _COLUMN_KEYS.items():
            if key == wanted and field not in found:
                found[field] = col
    return found


def _read_sheets(source) -> Dict[str, pd.DataFrame]:
    if isinstance(source, (bytes, bytearray)):
        source = BytesIO(source)
    try:
        return pd.read_excel(source, sheet_name=None, dtype=object, engine="openpyxl")
    except Exception as e:
        raise ImportFormatError(f"Invalid Excel: {e}") from e


def row_to_case(row, colmap: Dict[str, object], target: str) -> Surgery:
    vals = {f: _cell_text(row[c]) for f, c in colmap.items()}
    age = vals.get("age", "")
    note = vals.get("note", "")
    if age:
        note = f"{note} (Yaş: {age})".strip()
    return Surgery(
        date=target,
        patient_name=vals.get("patient_name", ""),
        protocol=vals.get("protocol", ""),
        phone=vals.get("phone", ""),
        operation=vals.get("operation", ""),
        professor=vals.get("professor", ""),
        resident=vals.get("resident", ""),
        urine=_urine(vals.get("urine", "")),
        anesthesia=vals.get("anesthesia", ""),
        age=age,
        note=note,
    )


def parse_workbook(source, anchor: date) -> Tuple[List[Tuple[str, Surgery]], int]:
    """
    Map every sheet row to a case.
    Returns ([(sheet_name, case), ...], skipped_row_count).
    """
    sheets = _read_sheets(source)
    records = []
    skipped = 0
    for position, (sheet_name, df) in enumerate(sheets.items()):
        offset = sheet_day_offset(sheet_name, position)
        target = (anchor + timedelta(days=offset)).isoformat()
        colmap = _column_map(df.columns)
        if "patient_name" not in colmap:
            logger.info("Sheet {!r}: no HASTA ADI column, {} rows skipped", sheet_name, len(df))
            skipped += len(df)
            continue
        for _, row in df.iterrows():
            case = row_to_case(row, colmap, target)
            if not case.patient_name:
                skipped += 1
                continue
            records.append((str(sheet_name), case))
        logger.debug("Sheet {!r} -> {} (offset {})", sheet_name, target, offset)
    return records, skipped


def import_workbook(store, source, anchor: date) -> ImportResult:
    """
    Submit each parsed case to the store one by one. A failed write is logged
    and reported; the remaining rows are still submitted.
    """
    records, skipped = parse_workbook(source, anchor)
    result = ImportResult(skipped=skipped)
    for sheet_name, case in records:
        try:
            store.add(case)
        except Exception as e:
            logger.exception("Import of {!r} from sheet {!r} failed", case.patient_name, sheet_name)
            result.failures.append(ImportFailure(sheet_name, case.patient_name, str(e)))
            continue
        result.added += 1
    logger.info(
        "Imported {} cases ({} skipped, {} failed) for week of {}",
        result.added, result.skipped, len(result.failures), anchor.isoformat(),
    )
    return result
