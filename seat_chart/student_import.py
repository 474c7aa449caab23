import logging
import re
from collections import Counter
from dataclasses import replace

import pandas as pd

from seat_chart.errors import CapacityError

logger = logging.getLogger(__name__)

_BEFORE_PAREN = re.compile(r"^([^()]+)")
_NAME_WITH_NOTE = re.compile(r"^([^()]+)(\(([^)]+)\))?$")
_LEADING_NUMBER = re.compile(r"^\d+[\s.]*")


def parse_roster(text):
    """
    One student per non-blank line; anything from the first "(" on is a note
    and is dropped.
    """
    students = []

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        match = _BEFORE_PAREN.match(line)
        students.append(match.group(1).strip() if match else line)

    return students


def student_import_excel(file_path, column=None):
    df = pd.read_excel(file_path)
    if df.empty:
        return []

    if column is None:
        column = df.columns[0]
    elif column not in df.columns:
        raise ValueError(f"Column {column!r} not found in {file_path}")

    lines = []
    for value in df[column]:
        if pd.isna(value):
            continue
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        lines.append(str(value))

    return parse_roster("\n".join(lines))


def format_student_name(raw):
    """Display name: no parenthesised note, no leading roll number."""
    match = _NAME_WITH_NOTE.match(raw)
    base = match.group(1).strip() if match else raw.strip()
    return _LEADING_NUMBER.sub("", base)


def roll_number(data, student):
    try:
        return f"{data.students.index(student) + 1:02d}"
    except ValueError:
        return ""


def placeholder_roster(rows, cols):
    lines = []

    for i in range(rows * cols):
        num = f"{i + 1:02d}"
        if i == 0:
            lines.append(f"{num} 王小明")
        elif i == 1:
            lines.append(f"{num} 林大衛")
        else:
            lines.append(num)

    return lines


def duplicate_names(students):
    counts = Counter(students)
    return sorted(name for name, n in counts.items() if n > 1)


def set_roster(data, students):
    students = tuple(students)
    max_seats = data.total_seats

    if len(students) > max_seats:
        logger.warning("Roster of %d students exceeds %d seats", len(students), max_seats)
        raise CapacityError(
            len(students),
            max_seats,
            f"Number of students ({len(students)}) exceeds number of seats ({max_seats})",
        )

    duplicates = duplicate_names(students)
    if duplicates:
        # seating and titles are keyed by name, so these students share one identity
        logger.warning("Roster contains duplicate names: %s", ", ".join(duplicates))

    logger.info("Roster set with %d students", len(students))
    return replace(data, students=students)
