import argparse
import logging
import random
import sys
from pathlib import Path

from seat_chart import config, snapshot
from seat_chart.allocator import allocate_students, random_assign
from seat_chart.errors import SeatChartError
from seat_chart.layouts import generate_layout, toggle_lock
from seat_chart.models import ClassData, Page, Seat, Workspace
from seat_chart.print_export import export_seating_pdf
from seat_chart.student_import import format_student_name, parse_roster, set_roster, student_import_excel


def read_roster(path):
    path = Path(path)
    if path.suffix.lower() in (".xlsx", ".xls"):
        return student_import_excel(path)
    return parse_roster(path.read_text(encoding="utf-8"))


def print_grid(data):
    width = max([len(format_student_name(s)) for s in data.students] + [4])
    cells = []
    for seat in generate_layout(data.rows, data.cols):
        if seat in data.locked_seats:
            cells.append("X".center(width))
        else:
            student = data.student_at(seat)
            cells.append((format_student_name(student) if student else "-").center(width))
        if seat.col == data.cols:
            print(" | ".join(cells))
            cells = []


def cmd_assign(args):
    data = ClassData(name=args.name, teacher_name=args.teacher, rows=args.rows, cols=args.cols)
    data = set_roster(data, read_roster(args.roster))

    for seat_id in args.lock:
        data = toggle_lock(data, Seat.parse(seat_id))

    data, result = random_assign(data, random.Random(args.seed))

    print("\n--- Seat Allocation ---")
    for a in allocate_students(data):
        print(f"{a['roll']} {a['name']} -> Row {a['row']} | Column {a['column']}")
    if result.displaced:
        print(f"\nNot seated: {', '.join(result.displaced)}")

    ws = Workspace(data=data, page=Page.SEATING)
    if args.snapshot:
        snapshot.save_snapshot(ws, args.snapshot)
    if args.pdf:
        export_seating_pdf(data, args.pdf, teacher_view=args.teacher_view)
    return 0


def cmd_show(args):
    ws = snapshot.load_snapshot(args.snapshot)
    data = ws.data
    print(f"{data.name or config.DEFAULT_FILE_STEM} ({data.rows}x{data.cols}, {len(data.students)} students)")
    print_grid(data)
    if data.waiting_pool:
        print(f"\nWaiting: {', '.join(data.waiting_pool)}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="seat-chart", description="Classroom seating chart")
    sub = parser.add_subparsers(dest="command", required=True)

    assign = sub.add_parser("assign", help="randomly seat a roster")
    assign.add_argument("roster", help="text file (one student per line) or .xlsx")
    assign.add_argument("--name", default="")
    assign.add_argument("--teacher", default="")
    assign.add_argument("--rows", type=int, default=config.DEFAULT_ROWS)
    assign.add_argument("--cols", type=int, default=config.DEFAULT_COLS)
    assign.add_argument("--lock", action="append", default=[], metavar="ROW-COL")
    assign.add_argument("--seed", type=int)
    assign.add_argument("--snapshot", help="write the result as a snapshot JSON file")
    assign.add_argument("--pdf", help="write a printable seating chart")
    assign.add_argument("--teacher-view", action="store_true")
    assign.set_defaults(func=cmd_assign)

    show = sub.add_parser("show", help="print the seating grid of a snapshot")
    show.add_argument("snapshot")
    show.set_defaults(func=cmd_show)

    return parser


def main(argv=None):
    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (SeatChartError, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
