import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Q, IntegerField
from django.db.models.functions import Cast
from django.utils import timezone

from booking import entities, lifecycle
from booking.availability import Criteria, find_available, is_room_free
from booking.entities import Inventory, UpdateReservation, UpdateRoom
from rooms.models import Room, RoomType
from .models import Customer, MealPlan, Reservation, ReservationCharge

logger = logging.getLogger(__name__)


def _ordered_rooms(queryset):
    """Rooms ordered ascending by room number (1, 2, ... 30)."""
    return (
        queryset
        .annotate(room_num_int=Cast('room_number', IntegerField()))
        .order_by('room_num_int', 'room_number')
    )


def load_inventory(include_reservation_id=None, since=None):
    """
    Snapshot of the store for the booking core.

    Canceled reservations never block a room, so they are left out, except
    the one being worked on (so cancelling it twice fails as a transition).
    With since, reservations that ended on or before that date are left out
    too; checked-in guests are always kept since they hold their room.
    """
    rooms = _ordered_rooms(Room.objects.filter(is_active=True).prefetch_related('amenities'))
    relevant = ~Q(status=entities.CANCELED)
    if since is not None:
        relevant &= Q(check_out_date__gt=since) | Q(status=entities.CHECKED_IN)
    if include_reservation_id is not None:
        relevant |= Q(pk=include_reservation_id)
    reservations = Reservation.objects.filter(relevant)
    return Inventory(
        rooms=[room.to_entity() for room in rooms],
        room_types=[room_type.to_entity() for room_type in RoomType.objects.all()],
        meal_plans=[plan.to_entity() for plan in MealPlan.objects.all()],
        reservations=[reservation.to_entity() for reservation in reservations],
    )


def _lock_rooms(room_ids):
    """Row-lock the rooms an operation touches so two desks cannot claim the same room."""
    ids = sorted({room_id for room_id in room_ids if room_id is not None})
    return list(Room.objects.select_for_update().filter(pk__in=ids).order_by('pk'))


def _save_reservation(value):
    fields = {
        'customer_id': value.customer_id,
        'room_id': value.room_id,
        'check_in_date': value.check_in,
        'check_out_date': value.check_out,
        'adults': value.adults,
        'children': value.children,
        'channel': value.channel_id,
        'status': value.status,
        'total_amount': value.total_amount,
        'meal_plan_id': value.meal_plan_id,
        'notes': value.notes,
    }
    if value.id is None:
        return Reservation.objects.create(**fields)
    reservation = Reservation.objects.get(pk=value.id)
    for name, field_value in fields.items():
        setattr(reservation, name, field_value)
    reservation.save()
    return reservation


def _apply(transition):
    """Write every command of a transition, then its charge lines. Caller holds the transaction."""
    reservation = None
    for command in transition.commands:
        if isinstance(command, UpdateReservation):
            reservation = _save_reservation(command.reservation)
        elif isinstance(command, UpdateRoom):
            Room.objects.filter(pk=command.room.id).update(
                status=command.room.status,
                updated_at=timezone.now(),
            )
    if transition.replaces_charges:
        reservation.charges.all().delete()
    ReservationCharge.objects.bulk_create([
        ReservationCharge(
            reservation=reservation,
            kind=line.kind,
            description=line.description,
            quantity=line.quantity,
            unit_price=line.unit_price,
            amount=line.amount,
        )
        for line in transition.charges
    ])
    return reservation


def _run(action, room_ids, operation, reservation_id=None, since=None):
    """
    Lock the rooms, re-read the store inside the lock, run the core, apply.

    Any BookingError raised by operation rolls the whole thing back, so a
    failed transition never leaves a half-updated room or reservation.
    """
    with transaction.atomic():
        _lock_rooms(room_ids)
        inventory = load_inventory(include_reservation_id=reservation_id, since=since)
        transition = operation(inventory)
        reservation = _apply(transition)
    for notice in transition.notices:
        logger.warning(notice)
    logger.info(
        '%s reservation %s: status=%s room=%s total=%s',
        action, reservation.pk, reservation.status, reservation.room_id, reservation.total_amount,
    )
    return reservation, transition


def get_available_rooms(check_in_date, check_out_date, occupants=1, room_type=None,
                        view_type=None, exclude_reservation=None):
    """
    Get all rooms that can take a stay.

    Args:
        check_in_date: Check-in date
        check_out_date: Check-out date
        occupants: adults + children the room must hold
        room_type: Optional RoomType instance to restrict to
        view_type: Optional ViewType instance to restrict to
        exclude_reservation: Optional Reservation instance to exclude from check

    Returns:
        list: Available Room instances, ordered by room number
    """
    # Validate dates
    if not check_in_date or not check_out_date or check_out_date <= check_in_date:
        return []

    inventory = load_inventory(since=check_in_date)
    criteria = Criteria(
        stay=entities.DateRange(check_in_date, check_out_date),
        occupants=occupants,
        room_type_id=room_type.pk if room_type else None,
        view_type_id=view_type.pk if view_type else None,
        exclude_reservation_id=exclude_reservation.pk if exclude_reservation else None,
    )
    matches = find_available(inventory.rooms, inventory.reservations, inventory.room_types, criteria)
    rooms_by_id = Room.objects.select_related('room_type').in_bulk([room.id for room in matches])
    return [rooms_by_id[room.id] for room in matches]


def check_room_availability(room, check_in_date, check_out_date, exclude_reservation=None):
    """
    Check if a room is free for the given date range.

    Args:
        room: Room instance
        check_in_date: Check-in date
        check_out_date: Check-out date
        exclude_reservation: Optional Reservation instance to exclude from check

    Returns:
        bool: True if no other non-canceled reservation overlaps the dates
    """
    # Validate dates
    if check_out_date <= check_in_date:
        return False

    reservations = [
        reservation.to_entity()
        for reservation in Reservation.objects.filter(room=room).exclude(status=entities.CANCELED)
    ]
    return is_room_free(
        room.pk,
        reservations,
        entities.DateRange(check_in_date, check_out_date),
        exclude_reservation.pk if exclude_reservation else None,
    )


def find_or_create_customer(name, email='', phone=''):
    """Reuse the customer with the same email (case-insensitive), otherwise create one."""
    if email:
        existing = Customer.objects.filter(email__iexact=email).first()
        if existing:
            return existing
    return Customer.objects.create(name=name, email=email or '', phone=phone or '')


def create_reservation(customer, room, check_in_date, check_out_date, adults=1, children=0,
                       channel='direct', meal_plan=None, notes='', check_in_now=False):
    """
    Single place that books a room, used by the booking form and the "check in now" shortcut.

    Returns the saved Reservation. Raises a BookingError (nothing is saved)
    if the dates, quantities or room are not acceptable.
    """
    def operation(inventory):
        return lifecycle.book(
            inventory,
            reservation_id=None,
            customer_id=customer.pk,
            room_id=room.pk,
            check_in=check_in_date,
            check_out=check_out_date,
            adults=adults,
            children=children,
            channel_id=channel,
            meal_plan_id=meal_plan.pk if meal_plan else None,
            notes=notes,
            check_in_now=check_in_now,
        )

    reservation, _ = _run('Booked', [room.pk], operation, since=check_in_date)
    return reservation


def check_in_reservation(reservation, room=None, adults=None, children=None, notes=None, today=None):
    """
    Check a guest in, optionally moving them to another room.

    Returns:
        tuple: (Reservation, list of advisory notices)
    """
    target_room_id = room.pk if room else reservation.room_id

    def operation(inventory):
        return lifecycle.check_in(
            inventory,
            inventory.reservation(reservation.pk),
            room_id=target_room_id,
            adults=adults,
            children=children,
            notes=notes,
            today=today or timezone.localdate(),
            tolerance_days=settings.HOTEL_CHECK_IN_TOLERANCE_DAYS,
        )

    updated, transition = _run(
        'Checked in', [reservation.room_id, target_room_id], operation,
        reservation_id=reservation.pk, since=reservation.check_in_date,
    )
    return updated, list(transition.notices)


def check_out_reservation(reservation):
    def operation(inventory):
        return lifecycle.check_out(inventory, inventory.reservation(reservation.pk))

    updated, _ = _run(
        'Checked out', [reservation.room_id], operation,
        reservation_id=reservation.pk, since=reservation.check_in_date,
    )
    return updated


def extend_reservation(reservation, new_check_out_date, room=None, adults=None, children=None, notes=None):
    """Extend a checked-in stay; only the additional nights are charged."""
    target_room_id = room.pk if room else reservation.room_id

    def operation(inventory):
        return lifecycle.extend_stay(
            inventory,
            inventory.reservation(reservation.pk),
            new_check_out_date,
            room_id=target_room_id,
            adults=adults,
            children=children,
            notes=notes,
        )

    updated, _ = _run(
        'Extended', [reservation.room_id, target_room_id], operation,
        reservation_id=reservation.pk, since=reservation.check_in_date,
    )
    return updated


def cancel_reservation(reservation):
    def operation(inventory):
        return lifecycle.cancel(inventory, inventory.reservation(reservation.pk))

    updated, _ = _run(
        'Canceled', [reservation.room_id], operation,
        reservation_id=reservation.pk, since=reservation.check_in_date,
    )
    return updated


def get_room_status_for_date(room, target_date):
    """
    Get the booking status of a room for a specific date.

    Args:
        room: Room instance
        target_date: Date to check

    Returns:
        str: 'available', 'booked', 'check_in' or 'check_out' if it's a transition day
    """
    reservation = (
        Reservation.objects
        .filter(
            room=room,
            status__in=entities.ACTIVE_STATUSES,
            check_in_date__lte=target_date,
            check_out_date__gte=target_date,
        )
        .order_by('check_in_date')
        .first()
    )
    if reservation is None:
        return 'available'
    if reservation.check_in_date == target_date:
        return 'check_in'
    if reservation.check_out_date == target_date:
        return 'check_out'
    return 'booked'
