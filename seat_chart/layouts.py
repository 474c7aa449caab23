import logging
from dataclasses import replace

from seat_chart.errors import CapacityError
from seat_chart.models import Seat

logger = logging.getLogger(__name__)


def generate_layout(rows, cols):
    """All seats of a rows x cols grid, row by row."""
    seats = []

    for row in range(1, rows + 1):
        for col in range(1, cols + 1):
            seats.append(Seat(row=row, col=col))

    return seats


def in_grid(data, seat):
    return 1 <= seat.row <= data.rows and 1 <= seat.col <= data.cols


def unlocked_seats(data):
    return [s for s in generate_layout(data.rows, data.cols) if s not in data.locked_seats]


def empty_unlocked_seats(data):
    return [s for s in unlocked_seats(data) if s not in data.seating]


def toggle_lock(data, seat):
    """
    Lock an empty seat or unlock a locked one.

    Occupied seats are left alone. Locking raises CapacityError when the
    remaining unlocked seats could no longer hold the whole roster.
    """
    if seat in data.seating or not in_grid(data, seat):
        logger.debug("Lock toggle ignored for seat %s", seat)
        return data

    if seat in data.locked_seats:
        return replace(data, locked_seats=data.locked_seats - {seat})

    available = data.total_seats - (len(data.locked_seats) + 1)
    if available < len(data.students):
        logger.warning(
            "Refusing to lock seat %s: %d seats would remain for %d students",
            seat, available, len(data.students),
        )
        raise CapacityError(
            len(data.students),
            available,
            f"Locking seat {seat} would leave too few seats to place all "
            f"{len(data.students)} students",
        )

    return replace(data, locked_seats=data.locked_seats | {seat})


def resize_grid(data, rows, cols):
    """Change the grid size, dropping seat and lock entries that fall outside it."""
    if rows < 1 or cols < 1:
        raise ValueError(f"Grid must be at least 1x1, got {rows}x{cols}")

    resized = replace(data, rows=rows, cols=cols)
    seating = {seat: s for seat, s in data.seating.items() if in_grid(resized, seat)}
    locked = frozenset(seat for seat in data.locked_seats if in_grid(resized, seat))

    dropped = len(data.seating) - len(seating)
    if dropped:
        logger.info("Resize to %dx%d returned %d students to the waiting pool", rows, cols, dropped)

    return replace(resized, seating=seating, locked_seats=locked)


def update_settings(data, name=None, teacher_name=None, rows=None, cols=None):
    if name is not None:
        data = replace(data, name=name)
    if teacher_name is not None:
        data = replace(data, teacher_name=teacher_name)
    if rows is not None or cols is not None:
        data = resize_grid(
            data,
            data.rows if rows is None else rows,
            data.cols if cols is None else cols,
        )
    return data


def capacity_check(data):
    total_seats = data.total_seats
    locked = len(data.locked_seats)
    available = total_seats - locked
    total_students = len(data.students)
    waiting = len(data.waiting_pool)

    return {
        "total_seats": total_seats,
        "locked_seats": locked,
        "available_seats": available,
        "total_students": total_students,
        "seated_students": total_students - waiting,
        "waiting_students": waiting,
        "shortage_students": max(0, total_students - available),
    }
