import pandas as pd

from seat_chart.layouts import toggle_lock
from seat_chart.models import ClassData, Seat, TagType
from seat_chart.print_export import (
    build_print_layout,
    export_seating_excel,
    export_seating_pdf,
    student_list_columns,
)
from seat_chart.tags import add_custom_tag, toggle_title


def test_student_view_layout(seated_class):
    data = toggle_lock(seated_class, Seat(2, 2))
    layout = build_print_layout(data)

    assert layout["title"] == "三年甲班 座位表 (學生視角)"
    assert layout["desk_first"]
    assert [[c["seat"] for c in row] for row in layout["grid"]] == [["1-1", "1-2"], ["2-1", "2-2"]]
    first = layout["grid"][0][0]
    assert (first["kind"], first["roll"], first["name"]) == ("student", "01", "王小明")
    assert layout["grid"][1][0]["kind"] == "empty"
    assert layout["grid"][1][1]["kind"] == "locked"
    assert layout["seat_width"] == 352
    assert layout["seat_height"] == 234


def test_teacher_view_reverses_grid(seated_class):
    layout = build_print_layout(seated_class, teacher_view=True)

    assert layout["title"] == "三年甲班 座位表 (導師：陳老師)"
    assert not layout["desk_first"]
    assert [[c["seat"] for c in row] for row in layout["grid"]] == [["2-2", "2-1"], ["1-2", "1-1"]]


def test_titles_are_grouped_by_role(small_class):
    data = toggle_title(small_class, "03", "班長", TagType.OFFICER)
    data = toggle_title(data, "01 王小明", "英文", TagType.TEACHER)
    data = toggle_title(data, "03", "英文", TagType.TEACHER)

    layout = build_print_layout(data)

    assert layout["officers"] == {"班長": ["03."]}
    assert layout["subjects"] == {"英文": ["01.王小明", "03."]}


def test_officer_tag_with_helper_suffix_prints_as_officer(small_class):
    data = add_custom_tag(small_class, TagType.OFFICER, "實驗小老師")
    data = toggle_title(data, "03", "實驗小老師", TagType.OFFICER)

    layout = build_print_layout(data)

    assert layout["officers"] == {"實驗小老師": ["03."]}
    assert layout["subjects"] == {}


def test_student_list_fills_columns_first():
    data = ClassData(rows=3, cols=3, students=("A", "B", "C", "D", "E"))
    assert student_list_columns(data) == [
        ["01.A", "03.C", "05.E", ""],
        ["02.B", "04.D", "", ""],
    ]


def test_export_pdf(seated_class, tmp_path):
    data = toggle_title(seated_class, "03", "班長", TagType.OFFICER)
    path = export_seating_pdf(data, tmp_path / "chart.pdf", teacher_view=True)

    assert path.exists()
    assert path.read_bytes().startswith(b"%PDF")


def test_export_pdf_default_location(seated_class, export_dir):
    path = export_seating_pdf(seated_class)
    assert path == export_dir / "三年甲班_student.pdf"
    assert path.exists()


def test_export_excel(seated_class, tmp_path):
    data = toggle_lock(seated_class, Seat(2, 2))
    data = toggle_title(data, "01 王小明", "班長", TagType.OFFICER)
    path = export_seating_excel(data, tmp_path / "chart.xlsx")

    df = pd.read_excel(path, keep_default_na=False)
    assert list(df["seat"]) == ["1-1", "1-2", "2-1", "2-2"]
    assert list(df["status"]) == ["occupied", "occupied", "empty", "locked"]
    assert df.loc[0, "student"] == "王小明"
    assert df.loc[0, "titles"] == "班長"
