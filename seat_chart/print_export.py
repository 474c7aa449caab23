import logging
import math
from pathlib import Path

import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfgen import canvas

from seat_chart import config
from seat_chart.layouts import generate_layout
from seat_chart.models import TagType
from seat_chart.student_import import format_student_name, roll_number
from seat_chart.tags import title_tag

logger = logging.getLogger(__name__)

CJK_FONT = "MSung-Light"
LIST_COLUMNS = 4
PRINT_WIDTH_PX = 720
GAP_PX = 8


def build_print_layout(data, teacher_view=False):
    """
    Everything a printed page shows, independent of how it is drawn.

    The student view faces the board (desk on top, row 1 first); the
    teacher view faces the class, so rows and columns are reversed and the
    desk comes last.
    """
    if teacher_view:
        title = f"{data.name} 座位表 (導師：{data.teacher_name or ''})"
    else:
        title = f"{data.name} 座位表 (學生視角)"

    rows = list(range(1, data.rows + 1))
    cols = list(range(1, data.cols + 1))
    if teacher_view:
        rows.reverse()
        cols.reverse()

    seats = {(s.row, s.col): s for s in generate_layout(data.rows, data.cols)}
    grid = []
    for r in rows:
        line = []
        for c in cols:
            seat = seats[(r, c)]
            student = data.student_at(seat)
            if seat in data.locked_seats:
                cell = {"seat": seat.seat_id, "kind": "locked", "roll": "", "name": ""}
            elif student:
                cell = {
                    "seat": seat.seat_id,
                    "kind": "student",
                    "roll": roll_number(data, student),
                    "name": format_student_name(student),
                }
            else:
                cell = {"seat": seat.seat_id, "kind": "empty", "roll": "", "name": ""}
            line.append(cell)
        grid.append(line)

    officers = {}
    subjects = {}
    for student in data.students:
        entry = f"{roll_number(data, student)}.{format_student_name(student)}"
        for label in data.titles_of(student):
            tag, tag_type = title_tag(data, label)
            target = subjects if tag_type is TagType.TEACHER else officers
            target.setdefault(tag, []).append(entry)

    seat_width = PRINT_WIDTH_PX // data.cols - GAP_PX
    return {
        "title": title,
        "teacher_view": teacher_view,
        "desk_first": not teacher_view,
        "grid": grid,
        "officers": officers,
        "subjects": subjects,
        "student_list": student_list_columns(data),
        "seat_width": seat_width,
        "seat_height": seat_width * 2 // 3,
    }


def student_list_columns(data, columns=LIST_COLUMNS):
    """Roster laid out in `columns` columns, filled top to bottom first."""
    entries = [
        f"{i + 1:02d}.{format_student_name(s)}" for i, s in enumerate(data.students)
    ]
    per_column = math.ceil(len(entries) / columns)

    table = []
    for r in range(per_column):
        line = []
        for c in range(columns):
            index = c * per_column + r
            line.append(entries[index] if index < len(entries) else "")
        table.append(line)
    return table


def _register_font():
    if CJK_FONT not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(UnicodeCIDFont(CJK_FONT))


def _fit(c, text, font_size, max_width):
    while text and c.stringWidth(text, CJK_FONT, font_size) > max_width:
        text = text[:-1]
    return text


def _draw_list(c, x, top, width, heading, roles):
    c.setFont(CJK_FONT, 12)
    c.drawCentredString(x + width / 2, top, heading)
    c.line(x + 4, top - 5, x + width - 4, top - 5)
    y = top - 20

    c.setFont(CJK_FONT, 9)
    if not roles:
        c.drawCentredString(x + width / 2, y, "尚未設定")
        return

    for role, entries in roles.items():
        if y < 30:
            break
        c.drawString(x + 6, y, _fit(c, f"{role}: {', '.join(entries)}", 9, width - 12))
        y -= 13


def export_seating_pdf(data, file_path=None, teacher_view=False):
    layout = build_print_layout(data, teacher_view)
    if file_path is None:
        config.EXPORT_DIR.mkdir(parents=True, exist_ok=True)
        suffix = "teacher" if teacher_view else "student"
        file_path = config.EXPORT_DIR / f"{data.name or config.DEFAULT_FILE_STEM}_{suffix}.pdf"
    file_path = Path(file_path)

    _register_font()
    c = canvas.Canvas(str(file_path), pagesize=A4)
    width, height = A4
    margin = 20
    gap = 6

    # seating chart takes the top 60% of the page
    chart_top = height - margin
    chart_bottom = height * 0.4
    c.setFont(CJK_FONT, 18)
    c.drawCentredString(width / 2, chart_top - 18, layout["title"])
    grid_top = chart_top - 34

    n_rows = len(layout["grid"]) + 1  # plus the desk
    cell_w = (width - 2 * margin - gap * (data.cols - 1)) / data.cols
    cell_h = min(cell_w * 2 / 3, (grid_top - chart_bottom - gap * n_rows) / n_rows)
    cell_w = min(cell_w, cell_h * 1.5)
    grid_w = cell_w * data.cols + gap * (data.cols - 1)
    left = (width - grid_w) / 2

    y = grid_top

    def draw_desk(y):
        c.setFillColorRGB(0.86, 0.99, 0.91)
        c.rect((width - cell_w) / 2, y - cell_h, cell_w, cell_h, fill=1)
        c.setFillColorRGB(0, 0, 0)
        c.setFont(CJK_FONT, max(6, cell_h * 0.35))
        c.drawCentredString(width / 2, y - cell_h * 0.62, "講桌")
        return y - cell_h - gap

    if layout["desk_first"]:
        y = draw_desk(y)

    for line in layout["grid"]:
        x = left
        for cell in line:
            if cell["kind"] == "empty":
                c.setDash(3, 2)
                c.setStrokeColorRGB(0.8, 0.8, 0.8)
                c.rect(x, y - cell_h, cell_w, cell_h)
                c.setDash()
                c.setStrokeColorRGB(0, 0, 0)
            else:
                c.rect(x, y - cell_h, cell_w, cell_h)
            if cell["kind"] == "locked":
                c.setFillColorRGB(0.6, 0.11, 0.11)
                c.setFont(CJK_FONT, cell_h * 0.5)
                c.drawCentredString(x + cell_w / 2, y - cell_h * 0.68, "X")
                c.setFillColorRGB(0, 0, 0)
            elif cell["kind"] == "student":
                c.setFont(CJK_FONT, max(5, cell_h * 0.25))
                c.drawCentredString(x + cell_w / 2, y - cell_h * 0.32, cell["roll"])
                name_size = max(5, cell_h * 0.34)
                c.setFont(CJK_FONT, name_size)
                c.drawCentredString(
                    x + cell_w / 2,
                    y - cell_h * 0.78,
                    _fit(c, cell["name"], name_size, cell_w - 4),
                )
            x += cell_w + gap
        y -= cell_h + gap

    if not layout["desk_first"]:
        draw_desk(y)

    c.setDash(4, 3)
    c.line(margin, chart_bottom, width - margin, chart_bottom)
    c.setDash()

    # lists in the bottom 40%, split 2/9, 3/9, 4/9
    usable = width - 2 * margin
    list_top = chart_bottom - 24
    x = margin
    _draw_list(c, x, list_top, usable * 2 / 9, "班級幹部", layout["officers"])
    x += usable * 2 / 9
    _draw_list(c, x, list_top, usable * 3 / 9, "學科小老師", layout["subjects"])
    x += usable * 3 / 9

    list_w = usable * 4 / 9
    c.setFont(CJK_FONT, 12)
    c.drawCentredString(x + list_w / 2, list_top, "學生名單")
    c.line(x + 4, list_top - 5, x + list_w - 4, list_top - 5)
    c.setFont(CJK_FONT, 9)
    col_w = list_w / LIST_COLUMNS
    row_y = list_top - 20
    for line in layout["student_list"]:
        if row_y < 20:
            break
        for i, text in enumerate(line):
            c.drawString(x + 4 + i * col_w, row_y, _fit(c, text, 9, col_w - 6))
        row_y -= 12

    c.save()
    logger.info("Seating chart PDF written to %s", file_path)
    return file_path


def export_seating_excel(data, file_path=None):
    if file_path is None:
        config.EXPORT_DIR.mkdir(parents=True, exist_ok=True)
        file_path = config.EXPORT_DIR / f"{data.name or config.DEFAULT_FILE_STEM}.xlsx"
    file_path = Path(file_path)

    rows = []
    for seat in generate_layout(data.rows, data.cols):
        student = data.student_at(seat)
        if seat in data.locked_seats:
            status = "locked"
        elif student:
            status = "occupied"
        else:
            status = "empty"
        rows.append({
            "seat": seat.seat_id,
            "row": seat.row,
            "column": seat.col,
            "status": status,
            "roll": roll_number(data, student) if student else "",
            "student": format_student_name(student) if student else "",
            "titles": "、".join(data.titles_of(student)) if student else "",
        })

    df = pd.DataFrame(rows)
    df.to_excel(file_path, index=False)
    logger.info("Seating chart spreadsheet written to %s", file_path)
    return file_path
