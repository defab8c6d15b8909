"""
Export sinks: CSV download, Excel workbook, and the day-list text shared on
the clinic's messaging group.
"""

import csv
import io
from datetime import date
from typing import Iterable, List

import openpyxl
import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from .calendar_view import cases_on
from .models import Surgery

# (header, attribute) in export order
EXPORT_COLUMNS = [
    ("Tarih", "date"),
    ("Hasta Adı", "patient_name"),
    ("Protokol", "protocol"),
    ("Yaş", "age"),
    ("İşlem", "operation"),
    ("Hoca", "professor"),
    ("Asistan", "resident"),
    ("Telefon", "phone"),
    ("İdrar", "urine"),
    ("Anestezi", "anesthesia"),
    ("Notlar", "note"),
    ("2. Salon", "is_second_room"),
    ("Kalan", "is_remaining"),
    ("MDP", "is_mdp"),
    ("KG", "is_kg"),
]
YES, NO = "Evet", "Hayır"

MONTHS_TR = [
    "Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
    "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık",
]
WEEKDAYS_TR = ["Pazartesi", "Salı", "Çarşamba", "Perşembe", "Cuma", "Cumartesi", "Pazar"]


def _as_date(day) -> date:
    return day if isinstance(day, date) else date.fromisoformat(str(day))


def format_date_display(day) -> str:
    """'5 Mart 2024 Salı'"""
    if not day:
        return ""
    d = _as_date(day)
    return f"{d.day} {MONTHS_TR[d.month - 1]} {d.year} {WEEKDAYS_TR[d.weekday()]}"


def format_date_short(day) -> str:
    """'5 Mar'"""
    if not day:
        return ""
    d = _as_date(day)
    return f"{d.day} {MONTHS_TR[d.month - 1][:3]}"


def _cell(case: Surgery, attr: str) -> str:
    value = getattr(case, attr)
    if isinstance(value, bool):
        return YES if value else NO
    return "" if value is None else str(value)


def export_rows(cases: Iterable[Surgery]) -> List[List[str]]:
    return [[_cell(c, attr) for _, attr in EXPORT_COLUMNS] for c in cases]


def to_dataframe(cases: Iterable[Surgery]) -> pd.DataFrame:
    return pd.DataFrame(export_rows(cases), columns=[h for h, _ in EXPORT_COLUMNS])


def to_csv(cases: Iterable[Surgery]) -> str:
    """UTF-8 text with a leading BOM, all fields quoted."""
    buf = io.StringIO()
    buf.write("\ufeff")
    to_dataframe(cases).to_csv(buf, index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return buf.getvalue()


def write_excel(cases: Iterable[Surgery], target) -> None:
    """Single 'Ameliyatlar' sheet, header row frozen. target: path or binary buffer."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Ameliyatlar"

    thin_side = Side(border_style="thin", color="cbd5e1")
    center = Alignment(horizontal="center", vertical="center")
    bold_font = Font(bold=True, size=11, name="Arial")
    header_fill = PatternFill(start_color="F8FAFC", end_color="F8FAFC", fill_type="solid")
    remaining_fill = PatternFill(start_color="FFFCA5A5", end_color="FFFCA5A5", fill_type="solid")

    for col, (header, _) in enumerate(EXPORT_COLUMNS, 1):
        c = ws.cell(1, col, header)
        c.font = bold_font
        c.alignment = center
        c.fill = header_fill
        c.border = Border(bottom=thin_side, right=thin_side)

    for row_idx, case in enumerate(cases, 2):
        for col, (_, attr) in enumerate(EXPORT_COLUMNS, 1):
            cell = ws.cell(row_idx, col, _cell(case, attr))
            cell.border = Border(bottom=thin_side, right=thin_side)
            if case.is_remaining:
                cell.fill = remaining_fill

    ws.freeze_panes = "A2"
    widths = {"Hasta Adı": 25, "İşlem": 30, "Notlar": 35, "Hoca": 18, "Asistan": 18}
    for col, (header, _) in enumerate(EXPORT_COLUMNS, 1):
        ws.column_dimensions[get_column_letter(col)].width = widths.get(header, 12)

    wb.save(target)


def day_message(cases: Iterable[Surgery], day, clinic_name: str = "EGE ÜROLOJİ") -> str:
    """Clipboard text for one day's list. Empty string when the day has no cases."""
    day_cases = cases_on(cases, _as_date(day))
    if not day_cases:
        return ""
    rule = "-" * 32
    lines = [f"📅 *{format_date_display(day)} - {clinic_name}*", rule]
    for idx, c in enumerate(day_cases, 1):
        badges = "".join([
            "🔴 " if c.is_remaining else "",
            "[2. SALON] " if c.is_second_room else "",
            "[MDP] " if c.is_mdp else "",
            "[KG] " if c.is_kg else "",
        ])
        parts = [f"{idx}. {badges}{c.patient_name}"]
        if c.age:
            parts.append(f"({c.age})")
        if c.protocol:
            parts.append(f"(#{c.protocol})")
        lines.append("")
        lines.append(" ".join(parts))
        lines.append(f"   🔪 {c.operation}")
        lines.append(f"   👨‍⚕️ {c.professor}")
    lines.append("")
    lines.append(rule)
    lines.append(f"Plan: {day_cases[0].resident or '?'}")
    return "\n".join(lines)
