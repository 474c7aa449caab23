import logging
import random
from dataclasses import replace

from seat_chart.layouts import empty_unlocked_seats, in_grid, toggle_lock, unlocked_seats
from seat_chart.models import AssignResult, SeatCursor
from seat_chart.student_import import format_student_name, roll_number

logger = logging.getLogger(__name__)


def place_student(data, seat, student):
    """
    Put a roster student on an unlocked seat.

    The student's previous seat is vacated; whoever sat on the target seat
    goes back to the waiting pool.
    """
    if seat in data.locked_seats or not in_grid(data, seat) or student not in data.students:
        logger.debug("Ignoring placement of %r on seat %s", student, seat)
        return data

    seating = {k: v for k, v in data.seating.items() if v != student}
    seating[seat] = student
    return replace(data, seating=seating)


def swap_students(data, first, second):
    """Exchange the occupants of two seats. Either seat may be empty."""
    if first == second:
        return data
    if first in data.locked_seats or second in data.locked_seats:
        return data

    seating = dict(data.seating)
    a = seating.pop(first, None)
    b = seating.pop(second, None)
    if a is not None:
        seating[second] = a
    if b is not None:
        seating[first] = b
    return replace(data, seating=seating)


def select_seat(ws, seat):
    data, cursor = ws.data, ws.seat_cursor
    if seat in data.locked_seats or not in_grid(data, seat):
        return ws

    if cursor.student is not None and cursor.student not in data.students:
        cursor = SeatCursor()

    occupant = data.student_at(seat)
    if occupant is not None:
        if cursor.seat == seat:
            return replace(ws, seat_cursor=SeatCursor())
        if cursor.student is None:
            return replace(ws, seat_cursor=SeatCursor(seat=seat, student=occupant))

        previous = data.seat_of(cursor.student)
        if previous is not None:
            data = swap_students(data, previous, seat)
        else:
            # occupant is bumped to the waiting pool
            data = place_student(data, seat, cursor.student)
        return replace(ws, data=data, seat_cursor=SeatCursor())

    if cursor.student is not None:
        data = place_student(data, seat, cursor.student)
        return replace(ws, data=data, seat_cursor=SeatCursor())

    if cursor.seat == seat:
        return replace(ws, seat_cursor=SeatCursor())
    return replace(ws, seat_cursor=SeatCursor(seat=seat))


def select_waiting_student(ws, student):
    if student not in ws.data.waiting_pool:
        logger.debug("%r is not waiting for a seat", student)
        return ws

    cursor = ws.seat_cursor
    if cursor.seat is not None:
        # same outcome as picking the student first, then the seat
        return select_seat(replace(ws, seat_cursor=SeatCursor(student=student)), cursor.seat)

    if cursor.student == student:
        return replace(ws, seat_cursor=SeatCursor())
    return replace(ws, seat_cursor=SeatCursor(student=student))


def remove_from_seat(data, seat):
    """Send the occupant back to the waiting pool, or toggle the lock on an empty seat."""
    if seat in data.seating:
        seating = dict(data.seating)
        del seating[seat]
        return replace(data, seating=seating)
    return toggle_lock(data, seat)


def random_assign(data, rng=None):
    """
    Randomly seat students.

    While anyone is waiting, only waiting students are drawn onto empty
    unlocked seats and existing placements stay put. Once everyone is
    seated, the whole roster is reshuffled over all unlocked seats.
    """
    rng = rng or random.Random()
    waiting = data.waiting_pool

    if waiting:
        students = list(waiting)
        seats = empty_unlocked_seats(data)
        seating = dict(data.seating)
    else:
        students = list(data.students)
        seats = unlocked_seats(data)
        seating = {}

    rng.shuffle(students)
    rng.shuffle(seats)

    count = min(len(students), len(seats))
    placed = tuple(zip(seats[:count], students[:count]))
    for seat, student in placed:
        seating[seat] = student

    result = AssignResult(
        placed=placed,
        displaced=tuple(students[count:]),
        reshuffled=not waiting,
    )
    if result.displaced:
        logger.warning(
            "%d students could not be seated: %s",
            len(result.displaced), ", ".join(result.displaced),
        )
    logger.info(
        "Random assignment (%s) placed %d students",
        "reshuffle" if result.reshuffled else "fill", count,
    )

    return replace(data, seating=seating), result


def clear_all(data):
    return replace(data, seating={})


def allocate_students(data):
    """Current seating as rows ordered by seat, for listings and exports."""
    allocation = []

    for seat in sorted(data.seating):
        student = data.seating[seat]
        allocation.append({
            "seat": seat.seat_id,
            "row": seat.row,
            "column": seat.col,
            "roll": roll_number(data, student),
            "student": student,
            "name": format_student_name(student),
        })

    return allocation
