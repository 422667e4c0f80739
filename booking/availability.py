from dataclasses import dataclass
from typing import Optional

from .entities import AVAILABLE, CANCELED, DateRange
from .stay import overlaps


@dataclass(frozen=True)
class Criteria:
    """What a caller is looking for when searching rooms."""
    stay: DateRange
    occupants: int = 1
    room_type_id: Optional[str] = None
    view_type_id: Optional[str] = None
    exclude_reservation_id: Optional[str] = None


def is_room_free(room_id, reservations, stay, exclude_reservation_id=None):
    """
    Check that no other reservation claims the room during the stay.

    Args:
        room_id: id of the room to check
        reservations: iterable of Reservation values
        stay: anything with check_in/check_out
        exclude_reservation_id: reservation to ignore (the one being edited)

    Returns:
        bool: True if no non-canceled reservation on the room overlaps the stay
    """
    for reservation in reservations:
        if reservation.room_id != room_id or reservation.id == exclude_reservation_id:
            continue
        if reservation.status == CANCELED:
            continue
        if overlaps(reservation, stay):
            return False
    return True


def find_available(rooms, reservations, room_types, criteria):
    """
    Rooms that can take the stay described by criteria, in input order.

    A room qualifies when it is available (or is the room the excluded
    reservation currently holds), matches the type and view filters, fits the
    occupants, and has no overlapping reservation. An empty list means no match.
    """
    reservations = tuple(reservations)
    types_by_id = {room_type.id: room_type for room_type in room_types}

    held_room_id = None
    if criteria.exclude_reservation_id is not None:
        for reservation in reservations:
            if reservation.id == criteria.exclude_reservation_id:
                held_room_id = reservation.room_id
                break

    matches = []
    for room in rooms:
        if room.status != AVAILABLE and room.id != held_room_id:
            continue
        if criteria.room_type_id is not None and room.room_type_id != criteria.room_type_id:
            continue
        room_type = types_by_id.get(room.room_type_id)
        if room_type is None:
            continue
        if criteria.view_type_id is not None and room_type.view_type_id != criteria.view_type_id:
            continue
        if room_type.capacity < criteria.occupants:
            continue
        if not is_room_free(room.id, reservations, criteria.stay, criteria.exclude_reservation_id):
            continue
        matches.append(room)
    return matches
