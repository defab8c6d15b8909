#!/usr/bin/env python3
"""
Ameliyat Listesi CLI. Works directly against the case database.

Usage:
  # Import a weekly workbook (one sheet per weekday), anchored at that Monday
  python run_caselist.py import --workbook "Haftalik Liste.xlsx" --anchor 2024-03-04

  # Month overview with daily load
  python run_caselist.py month --year 2024 --month 3

  # One day's list, as shared on the group
  python run_caselist.py day --date 2024-03-05

  # Filtered history
  python run_caselist.py list --search nx --professor "Ahmet Hoca" --remaining yes

  # Assign / unassign a room (toggle)
  python run_caselist.py room --case <id> --room 2

  # Exports
  python run_caselist.py export-csv --out liste.csv
  python run_caselist.py export-excel --out liste.xlsx
"""

import argparse
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from surgery_scheduler.calendar_view import build_grid, cases_on, count_by_day, iso_day, severity
from surgery_scheduler.config import get_settings
from surgery_scheduler.database import SessionLocal, get_engine
from surgery_scheduler.errors import SchedulerError
from surgery_scheduler.export import day_message, format_date_display, to_csv, write_excel
from surgery_scheduler.filters import evaluate, summarize
from surgery_scheduler.importer import import_workbook
from surgery_scheduler.logging import init_logging
from surgery_scheduler.models import FilterState, RoomFilter, Severity, TriState
from surgery_scheduler.sql_store import SqlCaseStore, SqlProfessorStore, open_room_store

SEVERITY_MARK = {Severity.NONE: " ", Severity.LOW: ".", Severity.MEDIUM: "o", Severity.HIGH: "#"}


def _resolve(p: str) -> Path:
    pp = Path(p)
    if pp.is_absolute():
        return pp
    return Path.cwd() / pp


def _case_store() -> SqlCaseStore:
    get_engine()
    return SqlCaseStore(SessionLocal)


def cmd_import(args):
    """Import every sheet of a weekly workbook."""
    wb_path = _resolve(args.workbook)
    anchor = date.fromisoformat(args.anchor)
    if anchor.weekday() != 0:
        print(f"Warning: anchor {anchor} is not a Monday")
    print(f"Importing: {wb_path}")
    result = import_workbook(_case_store(), str(wb_path), anchor)
    print(f"  Added:   {result.added}")
    print(f"  Skipped: {result.skipped}")
    if result.failures:
        print(f"  Failed:  {len(result.failures)}")
        for f in result.failures:
            print(f"    [{f.sheet}] {f.patient_name}: {f.error}")
        sys.exit(1)


def cmd_month(args):
    """Print a Monday-first month grid with case counts."""
    cases = _case_store().snapshot()
    counts = count_by_day(cases)
    today = date.today()
    print(f"{args.year}-{args.month:02d}")
    print("  Pt    Sa    Ça    Pe    Cu    Ct    Pa")
    line = []
    for d in build_grid(args.year, args.month):
        if d is None:
            line.append("      ")
        else:
            key = iso_day(args.year, args.month, d)
            n = counts.get(key, 0)
            mark = "*" if key == today.isoformat() else " "
            line.append(f"{mark}{d:2d}{SEVERITY_MARK[severity(n)]}{(n or ''):>2}")
        if len(line) == 7:
            print("".join(line))
            line = []
    if line:
        print("".join(line))


def cmd_day(args):
    """Print one day's list with room buckets."""
    store = _case_store()
    cases = store.snapshot()
    day = date.fromisoformat(args.date)
    if args.message:
        text = day_message(cases, day, get_settings().clinic_name)
        print(text or "Vaka yok.")
        return
    day_cases = cases_on(cases, day)
    prof = SqlProfessorStore(SessionLocal).get(day.isoformat())
    print(f"{format_date_display(day)}: {len(day_cases)} vaka ({severity(len(day_cases)).value})")
    if prof:
        print(f"Günün hocası: {prof}")
    rooms = open_room_store(SessionLocal, get_settings().room_store_path)
    partition = rooms.partition([c.id for c in day_cases])
    by_id = {c.id: c for c in day_cases}
    for label, ids in [(f"Salon {r}", ids) for r, ids in partition.rooms.items()] + [("Atanmamış", partition.unassigned)]:
        print(f"\n{label}:")
        for cid in ids:
            c = by_id[cid]
            print(f"  {cid[:8]}  {c.patient_name:<25} {c.operation:<30} {c.professor}")


def cmd_list(args):
    """Filtered, date-ordered case history."""
    fs = FilterState(
        search=args.search,
        professor=args.professor,
        operation=args.operation,
        resident=args.resident,
        room=RoomFilter(args.room),
        remaining=TriState(args.remaining),
        mdp=TriState(args.mdp),
        kg=TriState(args.kg),
    )
    result = evaluate(_case_store().snapshot(), fs)
    for c in result:
        print(f"{c.date}  {c.patient_name:<25} {c.operation:<30} {c.professor}")
    stats = summarize(result)
    print(f"\nToplam: {stats['total']}  2. Salon: {stats['second_room']}  "
          f"Kalan: {stats['remaining']}  Yaklaşan: {stats['upcoming']}")


def cmd_room(args):
    """Toggle a case's room assignment."""
    store = _case_store()
    case = store.get(args.case)
    rooms = open_room_store(SessionLocal, get_settings().room_store_path)
    if args.clear:
        rooms.unassign(case.id)
        print(f"{case.patient_name}: unassigned")
        return
    room = rooms.toggle(case.id, args.room)
    print(f"{case.patient_name}: {'room ' + str(room) if room else 'unassigned'}")


def cmd_export_csv(args):
    out_path = _resolve(args.out)
    cases = evaluate(_case_store().snapshot())
    out_path.write_text(to_csv(cases), encoding="utf-8")
    print(f"Wrote {len(cases)} cases to: {out_path}")


def cmd_export_excel(args):
    out_path = _resolve(args.out)
    cases = evaluate(_case_store().snapshot())
    write_excel(cases, str(out_path))
    print(f"Wrote {len(cases)} cases to: {out_path}")


def main():
    parser = argparse.ArgumentParser(
        description="Ameliyat Listesi: surgical case list",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=None, help="Override SURGERY_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", help="Command")

    p_imp = sub.add_parser("import", help="Import a weekly workbook")
    p_imp.add_argument("--workbook", required=True, help="Workbook path")
    p_imp.add_argument("--anchor", required=True, help="Monday of the week (YYYY-MM-DD)")

    today = date.today()
    p_month = sub.add_parser("month", help="Month grid with daily load")
    p_month.add_argument("--year", type=int, default=today.year)
    p_month.add_argument("--month", type=int, default=today.month)

    p_day = sub.add_parser("day", help="One day's cases by room")
    p_day.add_argument("--date", default=today.isoformat())
    p_day.add_argument("--message", action="store_true", help="Print the shareable list text")

    p_list = sub.add_parser("list", help="Filtered case history")
    p_list.add_argument("--search", default="")
    p_list.add_argument("--professor", default="")
    p_list.add_argument("--operation", default="")
    p_list.add_argument("--resident", default="")
    p_list.add_argument("--room", choices=[r.value for r in RoomFilter], default="any")
    for flag in ("remaining", "mdp", "kg"):
        p_list.add_argument(f"--{flag}", choices=[t.value for t in TriState], default="any")

    p_room = sub.add_parser("room", help="Toggle a case's room")
    p_room.add_argument("--case", required=True, help="Case id")
    p_room.add_argument("--room", type=int, choices=[1, 2, 3], default=1)
    p_room.add_argument("--clear", action="store_true", help="Unassign instead of toggling")

    p_csv = sub.add_parser("export-csv", help="Write all cases as CSV")
    p_csv.add_argument("--out", default="ameliyat_listesi.csv")

    p_xlsx = sub.add_parser("export-excel", help="Write all cases as Excel")
    p_xlsx.add_argument("--out", default="ameliyat_listesi.xlsx")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    init_logging(args.log_level or get_settings().log_level)

    dispatch = {
        "import": cmd_import,
        "month": cmd_month,
        "day": cmd_day,
        "list": cmd_list,
        "room": cmd_room,
        "export-csv": cmd_export_csv,
        "export-excel": cmd_export_excel,
    }
    try:
        dispatch[args.command](args)
    except SchedulerError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
