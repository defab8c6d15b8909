import csv
import io
from datetime import date

import openpyxl

from surgery_scheduler.export import (
    EXPORT_COLUMNS,
    day_message,
    format_date_display,
    format_date_short,
    to_csv,
    write_excel,
)


def test_format_dates():
    assert format_date_display("2024-03-05") == "5 Mart 2024 Salı"
    assert format_date_display(date(2024, 12, 1)) == "1 Aralık 2024 Pazar"
    assert format_date_display("") == ""
    assert format_date_short("2024-08-19") == "19 Ağu"


def test_csv_has_bom_quotes_and_yes_no(make_case):
    cases = [
        make_case(patient_name='Ali "Can" Veli', note="sol, böbrek", is_mdp=True),
        make_case(date="2024-03-05", patient_name="Ayşe"),
    ]
    text = to_csv(cases)
    assert text.startswith("\ufeff")
    rows = list(csv.reader(io.StringIO(text.lstrip("\ufeff"))))
    assert rows[0] == [h for h, _ in EXPORT_COLUMNS]
    assert len(rows) == 3
    first = dict(zip(rows[0], rows[1]))
    assert first["Hasta Adı"] == 'Ali "Can" Veli'
    assert first["Notlar"] == "sol, böbrek"
    assert first["MDP"] == "Evet"
    assert first["KG"] == "Hayır"


def test_csv_of_nothing_is_just_header():
    text = to_csv([])
    assert text.count("\n") == 1


def test_write_excel(make_case, tmp_path):
    path = tmp_path / "liste.xlsx"
    cases = [make_case(is_remaining=True), make_case(patient_name="Ayşe Yılmaz", is_kg=True)]
    write_excel(cases, str(path))
    ws = openpyxl.load_workbook(path)["Ameliyatlar"]
    assert ws.freeze_panes == "A2"
    assert [c.value for c in ws[1]] == [h for h, _ in EXPORT_COLUMNS]
    assert ws.max_row == 3
    assert ws.cell(3, 2).value == "Ayşe Yılmaz"
    assert ws.cell(3, 15).value == "Evet"
    assert ws.cell(2, 13).value == "Evet"


def test_write_excel_to_buffer(make_case):
    buf = io.BytesIO()
    write_excel([make_case()], buf)
    buf.seek(0)
    wb = openpyxl.load_workbook(buf)
    assert wb.sheetnames == ["Ameliyatlar"]


def test_day_message(make_case):
    cases = [
        make_case(date="2024-03-05", patient_name="Ali Veli", age="64", protocol="1001",
                  operation="Sol NX", professor="Ahmet Hoca", resident="Dr. Can",
                  is_remaining=True, is_second_room=True),
        make_case(date="2024-03-05", patient_name="Ayşe", operation="URS", professor="İlker Hoca"),
        make_case(date="2024-03-06", patient_name="Başka Gün"),
    ]
    text = day_message(cases, "2024-03-05", clinic_name="EGE ÜROLOJİ")
    lines = text.split("\n")
    assert lines[0] == "📅 *5 Mart 2024 Salı - EGE ÜROLOJİ*"
    assert "1. 🔴 [2. SALON] Ali Veli (64) (#1001)" in lines
    assert "2. Ayşe" in lines
    assert "   🔪 Sol NX" in lines
    assert "   👨‍⚕️ İlker Hoca" in lines
    assert lines[-1] == "Plan: Dr. Can"
    assert "Başka Gün" not in text


def test_day_message_empty_day(make_case):
    assert day_message([make_case(date="2024-03-05")], date(2024, 3, 4)) == ""


def test_day_message_without_resident(make_case):
    text = day_message([make_case(date="2024-03-05")], "2024-03-05")
    assert text.endswith("Plan: ?")
