"""Room status changes that follow a reservation through its lifecycle."""
from dataclasses import replace

from .entities import AVAILABLE, CHECKED_IN, MAINTENANCE, OCCUPIED
from .exceptions import RoomConflict


def occupy(room, reservation_id, reservations=()):
    """
    Room marked occupied on behalf of a reservation.

    Raises:
        RoomConflict: if another checked-in reservation already holds the room
    """
    for other in reservations:
        if other.room_id == room.id and other.id != reservation_id and other.status == CHECKED_IN:
            raise RoomConflict(
                f'Room {room.room_number} is already occupied by reservation {other.id}.'
            )
    return replace(room, status=OCCUPIED)


def release(room):
    return replace(room, status=AVAILABLE)


def mark_for_cleaning(room):
    # Housekeeping moves the room back to available once it is cleaned.
    return replace(room, status=MAINTENANCE)
