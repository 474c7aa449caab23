"""
Snapshot export/import.

The snapshot is the JSON document written by "save" and read by "load":
camelCase keys, seats as "row-col" strings and the locked-seat set as a
list. Loading replaces the whole workspace; a payload that does not parse
or validate raises FormatError and nothing is changed.
"""

import json
import logging
from collections import Counter
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from seat_chart import config
from seat_chart.errors import FormatError
from seat_chart.layouts import in_grid
from seat_chart.models import ClassData, Page, Seat, Workspace

logger = logging.getLogger(__name__)


class ClassDataModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    teacher_name: str = ""
    rows: int = Field(ge=1)
    cols: int = Field(ge=1)
    students: List[str]
    seating_arrangement: Dict[str, str] = Field(default_factory=dict)
    locked_seats: List[str] = Field(default_factory=list)
    student_titles: Dict[str, List[str]] = Field(default_factory=dict)
    officer_tags: List[str] = Field(default_factory=lambda: list(config.DEFAULT_OFFICER_TAGS))
    teacher_tags: List[str] = Field(default_factory=lambda: list(config.DEFAULT_TEACHER_TAGS))
    officer_tags_usage: Dict[str, int] = Field(default_factory=dict)
    teacher_tags_usage: Dict[str, int] = Field(default_factory=dict)
    custom_officer_tags: List[str] = Field(default_factory=list)
    custom_teacher_tags: List[str] = Field(default_factory=list)


class SnapshotModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    version: str = config.SNAPSHOT_VERSION
    timestamp: str = ""
    current_page: Page = Page.SETTINGS
    class_data: ClassDataModel


def encode(ws, now=None):
    data = ws.data
    now = now or datetime.now(timezone.utc)

    snapshot = SnapshotModel(
        version=config.SNAPSHOT_VERSION,
        timestamp=now.isoformat(),
        current_page=ws.page,
        class_data=ClassDataModel(
            name=data.name,
            teacher_name=data.teacher_name,
            rows=data.rows,
            cols=data.cols,
            students=list(data.students),
            seating_arrangement={
                seat.seat_id: student for seat, student in sorted(data.seating.items())
            },
            locked_seats=[seat.seat_id for seat in sorted(data.locked_seats)],
            student_titles={s: list(t) for s, t in data.student_titles.items()},
            officer_tags=list(data.officer_tags),
            teacher_tags=list(data.teacher_tags),
            officer_tags_usage=dict(data.officer_tags_usage),
            teacher_tags_usage=dict(data.teacher_tags_usage),
            custom_officer_tags=list(data.custom_officer_tags),
            custom_teacher_tags=list(data.custom_teacher_tags),
        ),
    )
    return snapshot.model_dump(mode="json", by_alias=True)


def dumps(ws, now=None):
    return json.dumps(encode(ws, now), ensure_ascii=False, indent=2)


def check_invariants(data):
    """Reject seating that no sequence of operations could have produced."""
    outside = sorted(s.seat_id for s in set(data.seating) | data.locked_seats if not in_grid(data, s))
    if outside:
        raise FormatError(f"Invalid snapshot: seats outside the {data.rows}x{data.cols} grid: {', '.join(outside)}")

    both = sorted(s.seat_id for s in data.locked_seats & set(data.seating))
    if both:
        raise FormatError(f"Invalid snapshot: seats both locked and occupied: {', '.join(both)}")

    counts = Counter(data.seating.values())
    repeated = sorted(name for name, n in counts.items() if n > 1)
    if repeated:
        raise FormatError(f"Invalid snapshot: students on more than one seat: {', '.join(repeated)}")


def decode(payload):
    try:
        snapshot = SnapshotModel.model_validate(payload)
    except ValidationError as exc:
        raise FormatError(f"Invalid snapshot: {exc.error_count()} validation errors") from exc

    cd = snapshot.class_data
    try:
        seating = {Seat.parse(k): v for k, v in cd.seating_arrangement.items()}
        locked = frozenset(Seat.parse(k) for k in cd.locked_seats)
    except ValueError as exc:
        raise FormatError(f"Invalid snapshot: {exc}") from exc

    data = ClassData(
        name=cd.name,
        teacher_name=cd.teacher_name,
        rows=cd.rows,
        cols=cd.cols,
        students=tuple(cd.students),
        seating=seating,
        locked_seats=locked,
        student_titles={s: tuple(t) for s, t in cd.student_titles.items()},
        officer_tags=tuple(cd.officer_tags),
        teacher_tags=tuple(cd.teacher_tags),
        officer_tags_usage=dict(cd.officer_tags_usage),
        teacher_tags_usage=dict(cd.teacher_tags_usage),
        custom_officer_tags=tuple(cd.custom_officer_tags),
        custom_teacher_tags=tuple(cd.custom_teacher_tags),
    )
    check_invariants(data)
    return Workspace(data=data, page=snapshot.current_page)


def loads(text):
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FormatError(f"Snapshot is not valid JSON: {exc.msg}") from exc
    return decode(payload)


def export_file_name(class_name, today=None):
    today = today or date.today()
    return f"{class_name or config.DEFAULT_FILE_STEM}_{today.isoformat()}.json"


def save_snapshot(ws, path=None):
    if path is None:
        config.EXPORT_DIR.mkdir(parents=True, exist_ok=True)
        path = config.EXPORT_DIR / export_file_name(ws.data.name)
    path = Path(path)
    path.write_text(dumps(ws), encoding="utf-8")
    logger.info("Snapshot written to %s", path)
    return path


def load_snapshot(path):
    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(f"Snapshot {path} is not UTF-8 text") from exc
    ws = loads(text)
    logger.info("Snapshot loaded from %s (%d students)", path, len(ws.data.students))
    return ws
