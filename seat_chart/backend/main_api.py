import logging
from dataclasses import replace
from typing import Optional
from urllib.parse import quote

from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from seat_chart import config, snapshot
from seat_chart.allocator import (
    allocate_students,
    clear_all,
    random_assign,
    remove_from_seat,
    select_seat,
    select_waiting_student,
)
from seat_chart.backend.session import SessionStore, get_session
from seat_chart.errors import CapacityError, FormatError
from seat_chart.layouts import capacity_check, update_settings
from seat_chart.models import Page, Seat, SeatCursor, TagType
from seat_chart.print_export import export_seating_excel, export_seating_pdf
from seat_chart.student_import import parse_roster, placeholder_roster, set_roster
from seat_chart.tags import (
    add_custom_tag,
    delete_custom_tag,
    remove_title,
    select_title_student,
    select_title_tag,
    toggle_title,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Seat Chart API")


def _seat(seat_id):
    try:
        return Seat.parse(seat_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _reseat(ws, data):
    """New seating invalidates any seat or student picked before it."""
    return replace(ws, data=data, seat_cursor=SeatCursor())


def _state(ws):
    data = ws.data
    return {
        "page": ws.page.value,
        "classData": snapshot.encode(ws)["classData"],
        "waiting": data.waiting_pool,
        "selectedSeat": ws.seat_cursor.seat.seat_id if ws.seat_cursor.seat else None,
        "selectedStudent": ws.seat_cursor.student,
        "selectedTitleStudent": ws.title_cursor.student,
        "selectedTitleTag": (
            {"name": ws.title_cursor.tag, "type": ws.title_cursor.tag_type.value}
            if ws.title_cursor.tag
            else None
        ),
    }


@app.get("/")
def root():
    return {"message": "Seat Chart API is running !"}


@app.get("/state")
def get_state(session: SessionStore = Depends(get_session)):
    return _state(session.workspace)


class SettingsRequest(BaseModel):
    name: Optional[str] = None
    teacher_name: Optional[str] = None
    rows: Optional[int] = None
    cols: Optional[int] = None


@app.post("/settings")
def update_class_settings(req: SettingsRequest, session: SessionStore = Depends(get_session)):
    try:
        ws = session.update(lambda ws: ws.with_data(
            update_settings(ws.data, req.name, req.teacher_name, req.rows, req.cols)
        ))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _state(ws)


class PageRequest(BaseModel):
    page: Page


@app.post("/page")
def change_page(req: PageRequest, session: SessionStore = Depends(get_session)):
    return _state(session.update(lambda ws: replace(ws, page=req.page)))


class RosterRequest(BaseModel):
    text: str


@app.post("/students")
def load_students(req: RosterRequest, session: SessionStore = Depends(get_session)):
    students = parse_roster(req.text)
    try:
        ws = session.update(lambda ws: ws.with_data(set_roster(ws.data, students)))
    except CapacityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(ws)


@app.get("/students/placeholder")
def students_placeholder(session: SessionStore = Depends(get_session)):
    data = session.workspace.data
    return {"text": "\n".join(placeholder_roster(data.rows, data.cols))}


@app.post("/seats/{seat_id}/select")
def click_seat(seat_id: str, session: SessionStore = Depends(get_session)):
    seat = _seat(seat_id)
    return _state(session.update(lambda ws: select_seat(ws, seat)))


@app.post("/seats/{seat_id}/remove")
def double_click_seat(seat_id: str, session: SessionStore = Depends(get_session)):
    seat = _seat(seat_id)
    try:
        ws = session.update(lambda ws: _reseat(ws, remove_from_seat(ws.data, seat)))
    except CapacityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(ws)


@app.post("/waiting/{student}/select")
def click_waiting_student(student: str, session: SessionStore = Depends(get_session)):
    return _state(session.update(lambda ws: select_waiting_student(ws, student)))


@app.post("/allocate")
def allocate(session: SessionStore = Depends(get_session)):
    with session.lock:
        data, result = random_assign(session.workspace.data)
        session.replace(_reseat(session.workspace, data))

    return {
        "message": "Allocation completed ✅",
        "reshuffled": result.reshuffled,
        "allocated": len(result.placed),
        "displaced": list(result.displaced),
        "allocation": allocate_students(data),
    }


@app.post("/seats/clear")
def clear_seats(session: SessionStore = Depends(get_session)):
    return _state(session.update(lambda ws: _reseat(ws, clear_all(ws.data))))


@app.get("/capacity-check")
def get_capacity(session: SessionStore = Depends(get_session)):
    return capacity_check(session.workspace.data)


class TagRequest(BaseModel):
    tag_type: TagType
    label: str


@app.post("/tags")
def create_tag(req: TagRequest, session: SessionStore = Depends(get_session)):
    return _state(session.update(
        lambda ws: ws.with_data(add_custom_tag(ws.data, req.tag_type, req.label))
    ))


@app.delete("/tags/{tag_type}/{label}")
def remove_tag(tag_type: TagType, label: str, session: SessionStore = Depends(get_session)):
    return _state(session.update(
        lambda ws: ws.with_data(delete_custom_tag(ws.data, tag_type, label))
    ))


@app.post("/tags/{tag_type}/{label}/select")
def click_tag(tag_type: TagType, label: str, session: SessionStore = Depends(get_session)):
    return _state(session.update(lambda ws: select_title_tag(ws, label, tag_type)))


@app.post("/titles/{student}/select")
def click_title_student(student: str, session: SessionStore = Depends(get_session)):
    return _state(session.update(lambda ws: select_title_student(ws, student)))


class TitleRequest(BaseModel):
    student: str
    tag: str
    tag_type: TagType


@app.post("/titles/toggle")
def toggle_student_title(req: TitleRequest, session: SessionStore = Depends(get_session)):
    return _state(session.update(
        lambda ws: ws.with_data(toggle_title(ws.data, req.student, req.tag, req.tag_type))
    ))


class RemoveTitleRequest(BaseModel):
    student: str
    label: str


@app.post("/titles/remove")
def remove_student_title(req: RemoveTitleRequest, session: SessionStore = Depends(get_session)):
    return _state(session.update(
        lambda ws: ws.with_data(remove_title(ws.data, req.student, req.label))
    ))


@app.get("/export/snapshot")
def export_snapshot(session: SessionStore = Depends(get_session)):
    ws = session.workspace
    filename = snapshot.export_file_name(ws.data.name)
    return JSONResponse(
        content=snapshot.encode(ws),
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@app.post("/import/snapshot")
def import_snapshot(payload: dict = Body(...), session: SessionStore = Depends(get_session)):
    try:
        ws = snapshot.decode(payload)
    except FormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Snapshot imported (%d students)", len(ws.data.students))
    return _state(session.replace(ws))


@app.get("/export/allocation/pdf")
def export_allocation_pdf(teacher_view: bool = False, session: SessionStore = Depends(get_session)):
    data = session.workspace.data
    if not data.students:
        raise HTTPException(status_code=400, detail="No students loaded. Post /students first.")

    config.EXPORT_DIR.mkdir(parents=True, exist_ok=True)
    suffix = "teacher" if teacher_view else "student"
    file_path = export_seating_pdf(data, config.EXPORT_DIR / f"seating_{suffix}.pdf", teacher_view)

    return FileResponse(
        path=str(file_path),
        filename=file_path.name,
        media_type="application/pdf"
    )


@app.get("/export/allocation/excel")
def export_allocation_excel(session: SessionStore = Depends(get_session)):
    data = session.workspace.data
    if not data.students:
        raise HTTPException(status_code=400, detail="No students loaded. Post /students first.")

    config.EXPORT_DIR.mkdir(parents=True, exist_ok=True)
    file_path = export_seating_excel(data, config.EXPORT_DIR / "seating.xlsx")

    return FileResponse(
        path=str(file_path),
        filename=file_path.name,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
