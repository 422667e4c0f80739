"""
Reservation lifecycle.

    confirmed --check_in--> checked-in --check_out--> checked-out
        |                    |    ^
        |                    +----+ extend_stay
        +------cancel--------+----> canceled

Every transition takes an Inventory snapshot and the reservation to move,
validates, and returns a Transition holding the new reservation value, the
commands the caller must apply (all or nothing) and the charge lines that
explain the new total. Nothing passed in is mutated, so a failed transition
leaves every entity exactly as it was.
"""
from dataclasses import dataclass, replace
from typing import Tuple

from . import assignment
from .availability import Criteria, find_available
from .entities import (
    CANCELED, CHECKED_IN, CHECKED_OUT, CONFIRMED,
    ChargeLine, DateRange, Reservation, UpdateReservation, UpdateRoom,
)
from .exceptions import InvalidTransition, NoExtensionNeeded, NotAvailable
from .pricing import quote, total_of
from .stay import as_datetime, nights

# Statuses each action may start from.
ALLOWED_FROM = {
    'check in': (CONFIRMED,),
    'check out': (CHECKED_IN,),
    'extend': (CHECKED_IN,),
    'cancel': (CONFIRMED, CHECKED_IN),
}


@dataclass(frozen=True)
class Transition:
    reservation: Reservation
    commands: Tuple = ()
    charges: Tuple[ChargeLine, ...] = ()
    # True when charges are the full bill (booking, check-in); False when they add to it.
    replaces_charges: bool = False
    notices: Tuple[str, ...] = ()

    @property
    def rooms(self):
        return [command.room for command in self.commands if isinstance(command, UpdateRoom)]


def can_transition(status, action):
    return status in ALLOWED_FROM.get(action, ())


def _require(reservation, action):
    if not can_transition(reservation.status, action):
        raise InvalidTransition(
            f'Cannot {action} reservation {reservation.id}: it is {reservation.status}.'
        )


def _available_room(inventory, room_id, stay, occupants, exclude_reservation_id=None):
    room = inventory.room(room_id)
    criteria = Criteria(
        stay=stay,
        occupants=occupants,
        exclude_reservation_id=exclude_reservation_id,
    )
    if not find_available([room], inventory.reservations, inventory.room_types, criteria):
        raise NotAvailable(f'Room {room.room_number} is not available for the selected dates.')
    return room


def _is_held_by_other(inventory, room_id, reservation_id):
    return any(
        other.room_id == room_id and other.id != reservation_id and other.status == CHECKED_IN
        for other in inventory.reservations
    )


def _move(inventory, reservation_id, old_room_id, new_room):
    """Commands that put the guest in new_room and free the old room if nobody else holds it."""
    commands = []
    if old_room_id != new_room.id and not _is_held_by_other(inventory, old_room_id, reservation_id):
        commands.append(UpdateRoom(assignment.release(inventory.room(old_room_id))))
    commands.append(UpdateRoom(assignment.occupy(new_room, reservation_id, inventory.reservations)))
    return commands


def _reoccupy(reservation, room_id, adults, children, notes):
    return replace(
        reservation,
        room_id=room_id if room_id is not None else reservation.room_id,
        adults=adults if adults is not None else reservation.adults,
        children=children if children is not None else reservation.children,
        notes=notes if notes is not None else reservation.notes,
    )


def book(inventory, *, reservation_id, customer_id, room_id, check_in, check_out,
         adults=1, children=0, channel_id='direct', meal_plan_id=None, notes=None,
         check_in_now=False, created_at=None):
    """
    Create a reservation, confirmed or (check_in_now) directly checked in.

    The room must be available for the stay and fit adults + children.
    The total is the full quote for the stay.
    """
    draft = Reservation(
        id=reservation_id,
        customer_id=customer_id,
        room_id=room_id,
        check_in=check_in,
        check_out=check_out,
        adults=adults,
        children=children,
        channel_id=channel_id or 'direct',
        status=CONFIRMED,
        created_at=created_at,
        notes=notes or None,
        meal_plan_id=meal_plan_id,
    )
    room = _available_room(inventory, room_id, draft.stay, draft.occupants)
    charges = quote(
        inventory.room_type_for(room),
        inventory.meal_plan(meal_plan_id),
        adults,
        nights(check_in, check_out),
    )
    reservation = replace(
        draft,
        status=CHECKED_IN if check_in_now else CONFIRMED,
        total_amount=total_of(charges),
    )
    commands = [UpdateReservation(reservation)]
    if check_in_now:
        commands.append(UpdateRoom(assignment.occupy(room, reservation.id, inventory.reservations)))
    return Transition(reservation, tuple(commands), tuple(charges), replaces_charges=True)


def check_in(inventory, reservation, *, room_id=None, adults=None, children=None,
             notes=None, today=None, tolerance_days=1):
    """
    confirmed -> checked-in, optionally moving the guest to another room.

    The total is recomputed for the (possibly new) room. Arriving more than
    tolerance_days away from the booked date only adds a notice.
    """
    _require(reservation, 'check in')
    updated = _reoccupy(reservation, room_id, adults, children, notes)
    room = _available_room(inventory, updated.room_id, updated.stay, updated.occupants, reservation.id)

    notices = []
    if today is not None:
        offset = (as_datetime(today).date() - as_datetime(reservation.check_in).date()).days
        if abs(offset) > tolerance_days:
            when = 'early' if offset < 0 else 'late'
            notices.append(f'Guest is checking in {abs(offset)} days {when} for reservation {reservation.id}.')

    charges = quote(
        inventory.room_type_for(room),
        inventory.meal_plan(updated.meal_plan_id),
        updated.adults,
        nights(updated.check_in, updated.check_out),
    )
    updated = replace(updated, status=CHECKED_IN, total_amount=total_of(charges))
    commands = [UpdateReservation(updated)]
    commands.extend(_move(inventory, reservation.id, reservation.room_id, room))
    return Transition(updated, tuple(commands), tuple(charges), replaces_charges=True, notices=tuple(notices))


def check_out(inventory, reservation):
    """checked-in -> checked-out; the room is left for housekeeping."""
    _require(reservation, 'check out')
    updated = replace(reservation, status=CHECKED_OUT)
    room = inventory.room(reservation.room_id)
    return Transition(
        updated,
        (UpdateReservation(updated), UpdateRoom(assignment.mark_for_cleaning(room))),
    )


def extend_stay(inventory, reservation, new_check_out, *, room_id=None, adults=None,
                children=None, notes=None):
    """
    Push a checked-in stay's check-out forward.

    The booked room must be free for [current check-out, new check-out). A
    new room takes over the whole stay, so it must be free for
    [check-in, new check-out).
    Only the additional nights are charged, at the target room's current rate;
    the existing total is kept as it is.

    Raises:
        NoExtensionNeeded: if new_check_out does not add at least one night
        NotAvailable: if the target room cannot take the additional nights
    """
    _require(reservation, 'extend')
    if as_datetime(new_check_out) <= as_datetime(reservation.check_out):
        raise NoExtensionNeeded('Please select a date after the current check-out date.')
    additional_nights = (
        nights(reservation.check_in, new_check_out) - nights(reservation.check_in, reservation.check_out)
    )
    if additional_nights < 1:
        raise NoExtensionNeeded('The new check-out date does not add a night to the stay.')

    updated = replace(_reoccupy(reservation, room_id, adults, children, notes), check_out=new_check_out)
    if updated.room_id == reservation.room_id:
        window = DateRange(reservation.check_out, new_check_out)
    else:
        window = updated.stay
    room = _available_room(inventory, updated.room_id, window, updated.occupants, reservation.id)

    charges = [
        replace(line, description=f'Extension: {line.description}')
        for line in quote(
            inventory.room_type_for(room),
            inventory.meal_plan(updated.meal_plan_id),
            updated.adults,
            additional_nights,
        )
    ]
    updated = replace(updated, total_amount=reservation.total_amount + total_of(charges))
    commands = [UpdateReservation(updated)]
    if room.id != reservation.room_id:
        commands.extend(_move(inventory, reservation.id, reservation.room_id, room))
    return Transition(updated, tuple(commands), tuple(charges))


def cancel(inventory, reservation):
    """Administrative cancellation. A guest already in the room leaves it for housekeeping."""
    _require(reservation, 'cancel')
    updated = replace(reservation, status=CANCELED)
    commands = [UpdateReservation(updated)]
    if reservation.status == CHECKED_IN:
        room = inventory.room(reservation.room_id)
        commands.append(UpdateRoom(assignment.mark_for_cleaning(room)))
    return Transition(updated, tuple(commands))
