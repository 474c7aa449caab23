"""
Value types for the seating chart.

Everything here is immutable: operations in layouts, allocator and tags
take a ClassData or Workspace and return a new one built with replace().
Dict fields are never mutated in place, only copied.
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from seat_chart import config

# 1-based, no leading zeros or signs
_SEAT_ID = re.compile(r"^([1-9][0-9]*)-([1-9][0-9]*)\Z")


@dataclass(frozen=True, order=True)
class Seat:
    row: int
    col: int

    @property
    def seat_id(self):
        return f"{self.row}-{self.col}"

    @classmethod
    def parse(cls, seat_id):
        match = _SEAT_ID.match(seat_id) if isinstance(seat_id, str) else None
        if not match:
            raise ValueError(f"Invalid seat id: {seat_id!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    def __str__(self):
        return self.seat_id


class TagType(str, Enum):
    OFFICER = "officer"
    TEACHER = "teacher"


class Page(str, Enum):
    SETTINGS = "settings"
    STUDENTS = "students"
    ROLES = "roles"
    SEATING = "seating"
    TEACHER_VIEW = "teacherView"


@dataclass(frozen=True)
class ClassData:
    name: str = ""
    teacher_name: str = ""
    rows: int = config.DEFAULT_ROWS
    cols: int = config.DEFAULT_COLS
    students: Tuple[str, ...] = ()
    seating: Dict[Seat, str] = field(default_factory=dict)
    locked_seats: frozenset = frozenset()
    student_titles: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    officer_tags: Tuple[str, ...] = config.DEFAULT_OFFICER_TAGS
    teacher_tags: Tuple[str, ...] = config.DEFAULT_TEACHER_TAGS
    officer_tags_usage: Dict[str, int] = field(default_factory=dict)
    teacher_tags_usage: Dict[str, int] = field(default_factory=dict)
    custom_officer_tags: Tuple[str, ...] = ()
    custom_teacher_tags: Tuple[str, ...] = ()

    @property
    def total_seats(self):
        return self.rows * self.cols

    @property
    def waiting_pool(self):
        """Roster members without a seat, in roster order."""
        seated = set(self.seating.values())
        return [s for s in self.students if s not in seated]

    def seat_of(self, student) -> Optional[Seat]:
        for seat, occupant in self.seating.items():
            if occupant == student:
                return seat
        return None

    def student_at(self, seat) -> Optional[str]:
        return self.seating.get(seat)

    def titles_of(self, student):
        return self.student_titles.get(student, ())


@dataclass(frozen=True)
class SeatCursor:
    seat: Optional[Seat] = None
    student: Optional[str] = None


@dataclass(frozen=True)
class TitleCursor:
    student: Optional[str] = None
    tag: Optional[str] = None
    tag_type: Optional[TagType] = None


@dataclass(frozen=True)
class Workspace:
    data: ClassData = field(default_factory=ClassData)
    page: Page = Page.SETTINGS
    seat_cursor: SeatCursor = SeatCursor()
    title_cursor: TitleCursor = TitleCursor()

    def with_data(self, data):
        return replace(self, data=data)


@dataclass(frozen=True)
class AssignResult:
    placed: Tuple[Tuple[Seat, str], ...] = ()
    # students left without a seat because there were fewer free seats than students
    displaced: Tuple[str, ...] = ()
    reshuffled: bool = False
