import pytest
from fastapi.testclient import TestClient

from seat_chart.backend.main_api import app
from seat_chart.backend.session import SessionStore, get_session


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def client(store, export_dir):
    app.dependency_overrides[get_session] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def loaded(client):
    client.post("/settings", json={"name": "三年甲班", "teacher_name": "陳老師", "rows": 2, "cols": 2})
    r = client.post("/students", json={"text": "01 王小明\n02 林大衛\n03\n"})
    assert r.status_code == 200
    return client


def test_root(client):
    assert client.get("/").json() == {"message": "Seat Chart API is running !"}


def test_roster_over_capacity_is_rejected(client):
    client.post("/settings", json={"rows": 1, "cols": 2})
    r = client.post("/students", json={"text": "A\nB\nC"})
    assert r.status_code == 409
    assert client.get("/state").json()["classData"]["students"] == []


def test_placeholder(client):
    client.post("/settings", json={"rows": 1, "cols": 3})
    assert client.get("/students/placeholder").json() == {"text": "01 王小明\n02 林大衛\n03"}


def test_bad_settings(client):
    assert client.post("/settings", json={"rows": 0}).status_code == 400


def test_seat_selection_flow(loaded):
    state = loaded.post("/waiting/03/select").json()
    assert state["selectedStudent"] == "03"

    state = loaded.post("/seats/2-1/select").json()
    assert state["classData"]["seatingArrangement"] == {"2-1": "03"}
    assert state["waiting"] == ["01 王小明", "02 林大衛"]
    assert state["selectedStudent"] is None


def test_bad_seat_id(loaded):
    assert loaded.post("/seats/abc/select").status_code == 400


def test_lock_and_capacity(loaded):
    r = loaded.post("/seats/1-1/remove")
    assert r.json()["classData"]["lockedSeats"] == ["1-1"]

    r = loaded.post("/seats/1-2/remove")
    assert r.status_code == 409

    report = loaded.get("/capacity-check").json()
    assert report["available_seats"] == 3
    assert report["waiting_students"] == 3


def test_allocate_and_clear(loaded):
    r = loaded.post("/allocate").json()
    assert r["allocated"] == 3
    assert r["displaced"] == []
    assert not r["reshuffled"]
    assert len(r["allocation"]) == 3

    state = loaded.post("/seats/clear").json()
    assert state["classData"]["seatingArrangement"] == {}


def test_reseating_drops_the_seat_selection(loaded):
    assert loaded.post("/seats/2-1/select").json()["selectedSeat"] == "2-1"
    loaded.post("/allocate")
    state = loaded.get("/state").json()
    assert state["selectedSeat"] is None
    assert state["selectedStudent"] is None

    seat, student = next(iter(state["classData"]["seatingArrangement"].items()))
    state = loaded.post(f"/seats/{seat}/select").json()
    assert state["selectedStudent"] == student
    state = loaded.post(f"/seats/{seat}/remove").json()
    assert student in state["waiting"]
    assert state["selectedSeat"] is None
    assert state["selectedStudent"] is None

    loaded.post("/seats/1-1/remove")
    loaded.post("/seats/1-2/select")
    state = loaded.post("/seats/clear").json()
    assert state["selectedSeat"] is None
    assert state["selectedStudent"] is None


def test_tags_and_titles(loaded):
    loaded.post("/tags", json={"tag_type": "teacher", "label": "程式"})
    loaded.post("/tags/teacher/程式/select")
    state = loaded.post("/titles/03/select").json()
    assert state["classData"]["studentTitles"]["03"] == ["程式小老師"]
    assert state["classData"]["teacherTagsUsage"]["程式"] == 1

    state = loaded.post("/titles/toggle", json={"student": "03", "tag": "班長", "tag_type": "officer"}).json()
    assert state["classData"]["studentTitles"]["03"] == ["程式小老師", "班長"]

    state = loaded.post("/titles/remove", json={"student": "03", "label": "班長"}).json()
    assert state["classData"]["officerTagsUsage"]["班長"] == 0

    state = loaded.delete("/tags/teacher/程式").json()
    assert "程式" not in state["classData"]["teacherTags"]
    assert state["classData"]["studentTitles"]["03"] == []


def test_snapshot_export_import(loaded, client):
    loaded.post("/allocate")
    loaded.post("/page", json={"page": "seating"})
    exported = loaded.get("/export/snapshot")
    assert exported.status_code == 200
    assert "attachment" in exported.headers["content-disposition"]
    payload = exported.json()

    loaded.post("/seats/clear")
    state = loaded.post("/import/snapshot", json=payload).json()

    assert state["page"] == "seating"
    assert state["classData"]["seatingArrangement"] == payload["classData"]["seatingArrangement"]


def test_bad_import_keeps_state(loaded):
    r = loaded.post("/import/snapshot", json={"version": "1.0"})
    assert r.status_code == 400
    assert loaded.get("/state").json()["classData"]["name"] == "三年甲班"


def test_exports(loaded):
    loaded.post("/allocate")

    pdf = loaded.get("/export/allocation/pdf", params={"teacher_view": True})
    assert pdf.status_code == 200
    assert pdf.content.startswith(b"%PDF")

    excel = loaded.get("/export/allocation/excel")
    assert excel.status_code == 200


def test_exports_need_students(client):
    assert client.get("/export/allocation/pdf").status_code == 400
