from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from booking import lifecycle
from booking.entities import (
    AVAILABLE, CANCELED, CHECKED_IN, CHECKED_OUT, CONFIRMED, MAINTENANCE, OCCUPIED,
    UpdateReservation, UpdateRoom,
)
from booking.exceptions import (
    InvalidQuantity, InvalidRange, InvalidTransition, NoExtensionNeeded, NotAvailable,
    RoomConflict, UnknownEntity,
)

from .conftest import make_reservation


def book(inventory, **kwargs):
    kwargs.setdefault('reservation_id', 1)
    kwargs.setdefault('customer_id', 'guest')
    kwargs.setdefault('room_id', 101)
    kwargs.setdefault('check_in', date(2025, 3, 1))
    kwargs.setdefault('check_out', date(2025, 3, 4))
    return lifecycle.book(inventory, **kwargs)


def settle(inventory, transition):
    return inventory.apply(transition.commands)


def checked_in(inventory, **kwargs):
    inventory = settle(inventory, book(inventory, **kwargs))
    transition = lifecycle.check_in(inventory, inventory.reservation(kwargs.get('reservation_id', 1)))
    return settle(inventory, transition), transition.reservation


def test_booking_without_meal_plan(inventory):
    transition = book(inventory)
    assert transition.reservation.status == CONFIRMED
    assert transition.reservation.total_amount == Decimal('300')
    assert transition.replaces_charges
    assert transition.rooms == []


def test_booking_with_meal_plan(inventory):
    transition = book(inventory, adults=2, meal_plan_id='hb')
    assert transition.reservation.total_amount == Decimal('450')
    assert sum(line.amount for line in transition.charges) == Decimal('450')


def test_booking_rejects_reversed_dates(inventory):
    with pytest.raises(InvalidRange):
        book(inventory, check_in=date(2025, 3, 4), check_out=date(2025, 3, 1))


def test_booking_rejects_no_adults(inventory):
    with pytest.raises(InvalidQuantity):
        book(inventory, adults=0)


def test_booking_rejects_party_too_large_for_room(inventory):
    with pytest.raises(NotAvailable):
        book(inventory, adults=2, children=1)


def test_booking_rejects_overlap(inventory):
    inventory = settle(inventory, book(inventory))
    with pytest.raises(NotAvailable):
        book(inventory, reservation_id=2, check_in=date(2025, 3, 3), check_out=date(2025, 3, 5))


def test_booking_back_to_back_is_allowed(inventory):
    inventory = settle(inventory, book(inventory))
    transition = book(inventory, reservation_id=2, check_in=date(2025, 3, 4), check_out=date(2025, 3, 6))
    assert transition.reservation.total_amount == Decimal('200')


def test_booking_unknown_room(inventory):
    with pytest.raises(UnknownEntity):
        book(inventory, room_id=999)


def test_booking_and_checking_in_at_once(inventory):
    transition = book(inventory, check_in_now=True)
    assert transition.reservation.status == CHECKED_IN
    assert [room.status for room in transition.rooms] == [OCCUPIED]


def test_check_in_occupies_room(inventory):
    inventory = settle(inventory, book(inventory))
    transition = lifecycle.check_in(inventory, inventory.reservation(1))
    assert transition.reservation.status == CHECKED_IN
    assert [(room.id, room.status) for room in transition.rooms] == [(101, OCCUPIED)]
    assert isinstance(transition.commands[0], UpdateReservation)


def test_check_in_keeps_meal_plan_in_total(inventory):
    inventory = settle(inventory, book(inventory, adults=2, meal_plan_id='hb'))
    transition = lifecycle.check_in(inventory, inventory.reservation(1))
    assert transition.reservation.total_amount == Decimal('450')


def test_check_in_into_another_room_reprices_and_frees_the_old_one(inventory):
    inventory = settle(inventory, book(inventory))
    transition = lifecycle.check_in(inventory, inventory.reservation(1), room_id=201)
    assert transition.reservation.room_id == 201
    assert transition.reservation.total_amount == Decimal('540')
    assert [(room.id, room.status) for room in transition.rooms] == [(101, AVAILABLE), (201, OCCUPIED)]


def test_check_in_with_more_guests_than_the_room_holds(inventory):
    inventory = settle(inventory, book(inventory))
    with pytest.raises(NotAvailable):
        lifecycle.check_in(inventory, inventory.reservation(1), adults=3)


def test_check_in_notice_when_far_from_booked_date(inventory):
    inventory = settle(inventory, book(inventory))
    late = lifecycle.check_in(inventory, inventory.reservation(1), today=date(2025, 3, 3))
    assert late.notices == ('Guest is checking in 2 days late for reservation 1.',)
    on_time = lifecycle.check_in(inventory, inventory.reservation(1), today=date(2025, 2, 28))
    assert on_time.notices == ()


def test_check_in_into_room_held_by_another_guest(inventory):
    inventory = settle(inventory, book(inventory))
    other = make_reservation(id=2, room_id=102, check_in=date(2025, 2, 1), check_out=date(2025, 2, 3), status=CHECKED_IN)
    inventory = replace(inventory, reservations=inventory.reservations + (other,))
    with pytest.raises(RoomConflict):
        lifecycle.check_in(inventory, inventory.reservation(1), room_id=102)


def test_check_out_leaves_room_for_housekeeping(inventory):
    inventory, _ = checked_in(inventory)
    transition = lifecycle.check_out(inventory, inventory.reservation(1))
    assert transition.reservation.status == CHECKED_OUT
    assert transition.reservation.total_amount == Decimal('300')
    assert [room.status for room in transition.rooms] == [MAINTENANCE]


def test_check_out_requires_checked_in(inventory):
    inventory = settle(inventory, book(inventory))
    with pytest.raises(InvalidTransition):
        lifecycle.check_out(inventory, inventory.reservation(1))


def test_extension_charges_additional_nights_only(inventory):
    inventory, reservation = checked_in(inventory)
    transition = lifecycle.extend_stay(inventory, reservation, date(2025, 3, 6))
    assert transition.reservation.check_out == date(2025, 3, 6)
    assert transition.reservation.total_amount == Decimal('500')
    assert [line.amount for line in transition.charges] == [Decimal('200')]
    assert transition.charges[0].description.startswith('Extension: ')
    assert not transition.replaces_charges
    assert transition.rooms == []


def test_extension_keeps_price_of_nights_already_booked(inventory, standard):
    inventory, reservation = checked_in(inventory)
    pricier = replace(standard, base_price=Decimal('150'))
    inventory = replace(inventory, room_types=(pricier,) + inventory.room_types[1:])
    transition = lifecycle.extend_stay(inventory, reservation, date(2025, 3, 5))
    assert transition.reservation.total_amount == Decimal('450')


@pytest.mark.parametrize('new_check_out', [date(2025, 3, 4), date(2025, 3, 2)])
def test_extension_must_move_check_out_forward(inventory, new_check_out):
    inventory, reservation = checked_in(inventory)
    with pytest.raises(NoExtensionNeeded):
        lifecycle.extend_stay(inventory, reservation, new_check_out)
    assert inventory.reservation(1) == reservation


def test_extension_blocked_by_next_guest(inventory):
    inventory, reservation = checked_in(inventory)
    next_guest = make_reservation(id=2, check_in=date(2025, 3, 5), check_out=date(2025, 3, 8))
    inventory = replace(inventory, reservations=inventory.reservations + (next_guest,))
    with pytest.raises(NotAvailable):
        lifecycle.extend_stay(inventory, reservation, date(2025, 3, 6))


def test_extension_into_another_room(inventory):
    inventory, reservation = checked_in(inventory)
    transition = lifecycle.extend_stay(inventory, reservation, date(2025, 3, 6), room_id=102)
    assert transition.reservation.room_id == 102
    assert [(room.id, room.status) for room in transition.rooms] == [(101, AVAILABLE), (102, OCCUPIED)]


def test_extension_requires_checked_in(inventory):
    inventory = settle(inventory, book(inventory))
    with pytest.raises(InvalidTransition):
        lifecycle.extend_stay(inventory, inventory.reservation(1), date(2025, 3, 6))


def test_cancel_confirmed_reservation(inventory):
    inventory = settle(inventory, book(inventory))
    transition = lifecycle.cancel(inventory, inventory.reservation(1))
    assert transition.reservation.status == CANCELED
    assert transition.rooms == []


def test_cancel_checked_in_reservation_marks_room(inventory):
    inventory, reservation = checked_in(inventory)
    transition = lifecycle.cancel(inventory, reservation)
    assert [room.status for room in transition.rooms] == [MAINTENANCE]


@pytest.mark.parametrize('status', [CHECKED_OUT, CANCELED])
def test_terminal_reservations_do_not_move(inventory, status):
    reservation = make_reservation(status=status)
    for operation in (lifecycle.check_in, lifecycle.check_out, lifecycle.cancel):
        with pytest.raises(InvalidTransition):
            operation(inventory, reservation)
    with pytest.raises(InvalidTransition):
        lifecycle.extend_stay(inventory, reservation, date(2025, 3, 6))


def test_failed_transition_leaves_inventory_untouched(inventory):
    before = inventory
    with pytest.raises(NotAvailable):
        book(inventory, adults=5)
    assert inventory == before
    assert all(room.status == AVAILABLE for room in inventory.rooms)


def test_apply_replaces_entities_by_id(inventory, rooms):
    occupied = replace(rooms[0], status=OCCUPIED)
    reservation = make_reservation()
    after = inventory.apply([UpdateRoom(occupied), UpdateReservation(reservation)])
    assert after.room(101).status == OCCUPIED
    assert after.reservation(1) == reservation
    assert inventory.room(101).status == AVAILABLE
    with pytest.raises(UnknownEntity):
        inventory.reservation(1)


def test_check_in_twice_is_refused(inventory):
    inventory, reservation = checked_in(inventory)
    extended = lifecycle.extend_stay(inventory, reservation, date(2025, 3, 6))
    inventory = settle(inventory, extended)
    with pytest.raises(InvalidTransition):
        lifecycle.check_in(inventory, inventory.reservation(1))
    assert inventory.reservation(1).total_amount == Decimal('500')


@pytest.mark.parametrize('action,allowed', [
    ('check in', {CONFIRMED}),
    ('check out', {CHECKED_IN}),
    ('extend', {CHECKED_IN}),
    ('cancel', {CONFIRMED, CHECKED_IN}),
])
def test_actions_start_from_fixed_statuses(action, allowed):
    for status in (CONFIRMED, CHECKED_IN, CHECKED_OUT, CANCELED):
        assert lifecycle.can_transition(status, action) == (status in allowed)


def test_extension_into_room_booked_during_current_stay(inventory):
    inventory, reservation = checked_in(inventory)
    other = make_reservation(id=2, room_id=102, check_in=date(2025, 3, 2), check_out=date(2025, 3, 3))
    inventory = replace(inventory, reservations=inventory.reservations + (other,))
    with pytest.raises(NotAvailable):
        lifecycle.extend_stay(inventory, reservation, date(2025, 3, 6), room_id=102)
    # Staying put only needs the extra nights to be free.
    transition = lifecycle.extend_stay(inventory, reservation, date(2025, 3, 6))
    assert transition.reservation.room_id == 101


def test_booking_keeps_created_at_from_caller(inventory):
    moment = datetime(2025, 2, 1, 9, 0)
    assert book(inventory, created_at=moment).reservation.created_at == moment
    assert book(inventory).reservation.created_at is None
