"""
Immutable values the booking core reads and returns.

Status strings match the ones stored by the Django models, so a value can be
built straight from a row and written straight back.
"""
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

from .exceptions import InvalidQuantity, InvalidRange, UnknownEntity
from .stay import as_datetime

# Reservation statuses
CONFIRMED = 'confirmed'
CHECKED_IN = 'checked-in'
CHECKED_OUT = 'checked-out'
CANCELED = 'canceled'

ACTIVE_STATUSES = (CONFIRMED, CHECKED_IN)
TERMINAL_STATUSES = (CHECKED_OUT, CANCELED)

# Room statuses
AVAILABLE = 'available'
OCCUPIED = 'occupied'
MAINTENANCE = 'maintenance'
CLEANED = 'cleaned'
TO_CLEAN = 'to-clean'

# Charge kinds
ROOM_CHARGE = 'room'
MEAL_CHARGE = 'meal'

ZERO = Decimal('0')


def to_decimal(value):
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class DateRange:
    """Half-open availability window [check_in, check_out)."""
    check_in: date
    check_out: date

    def __post_init__(self):
        if as_datetime(self.check_out) <= as_datetime(self.check_in):
            raise InvalidRange('Check-out date must be after check-in date.')


@dataclass(frozen=True)
class RoomType:
    id: str
    name: str
    capacity: int
    base_price: Decimal
    view_type_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'base_price', to_decimal(self.base_price))
        if self.capacity < 1:
            raise InvalidQuantity(f'Room type {self.name} must hold at least one guest.')
        if self.base_price < 0:
            raise InvalidQuantity(f'Room type {self.name} cannot have a negative base price.')


@dataclass(frozen=True)
class Room:
    id: str
    room_number: str
    room_type_id: str
    status: str = AVAILABLE
    amenities: Tuple[str, ...] = ()
    floor: Optional[int] = None
    size: Optional[int] = None


@dataclass(frozen=True)
class MealPlan:
    id: str
    name: str
    per_person_rate: Decimal
    code: str = ''
    per_room_rate: Optional[Decimal] = None
    is_active: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'per_person_rate', to_decimal(self.per_person_rate))
        object.__setattr__(self, 'per_room_rate', to_decimal(self.per_room_rate))


@dataclass(frozen=True)
class Reservation:
    """One guest's booking of one room for a date range."""
    id: str
    customer_id: str
    room_id: str
    check_in: date
    check_out: date
    adults: int = 1
    children: int = 0
    channel_id: str = 'direct'
    status: str = CONFIRMED
    total_amount: Decimal = ZERO
    created_at: Optional[datetime] = None
    notes: Optional[str] = None
    meal_plan_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'total_amount', to_decimal(self.total_amount))
        if as_datetime(self.check_out) <= as_datetime(self.check_in):
            raise InvalidRange('Check-out date must be after check-in date.')
        if self.adults < 1:
            raise InvalidQuantity('A reservation needs at least one adult.')
        if self.children < 0:
            raise InvalidQuantity('Children cannot be negative.')
        if self.total_amount < 0:
            raise InvalidQuantity('Total amount cannot be negative.')

    @property
    def stay(self):
        return DateRange(self.check_in, self.check_out)

    @property
    def occupants(self):
        return self.adults + self.children

    @property
    def is_active(self):
        return self.status in ACTIVE_STATUSES


@dataclass(frozen=True)
class ChargeLine:
    kind: str
    description: str
    quantity: int
    unit_price: Decimal

    def __post_init__(self):
        object.__setattr__(self, 'unit_price', to_decimal(self.unit_price))

    @property
    def amount(self):
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class UpdateReservation:
    reservation: Reservation


@dataclass(frozen=True)
class UpdateRoom:
    room: Room


def _index(items):
    return {item.id: item for item in items}


@dataclass(frozen=True)
class Inventory:
    """
    Read-only snapshot of the state a lifecycle operation needs.

    Lookups raise UnknownEntity rather than KeyError so callers can handle a
    stale id the same way as any other booking failure.
    """
    rooms: Tuple[Room, ...] = ()
    room_types: Tuple[RoomType, ...] = ()
    meal_plans: Tuple[MealPlan, ...] = ()
    reservations: Tuple[Reservation, ...] = ()
    _rooms_by_id: dict = field(init=False, repr=False, compare=False)
    _room_types_by_id: dict = field(init=False, repr=False, compare=False)
    _meal_plans_by_id: dict = field(init=False, repr=False, compare=False)
    _reservations_by_id: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        for name in ('rooms', 'room_types', 'meal_plans', 'reservations'):
            items = tuple(getattr(self, name))
            object.__setattr__(self, name, items)
            object.__setattr__(self, f'_{name}_by_id', _index(items))

    def room(self, room_id):
        try:
            return self._rooms_by_id[room_id]
        except KeyError:
            raise UnknownEntity(f'Unknown room: {room_id}')

    def room_type(self, room_type_id):
        try:
            return self._room_types_by_id[room_type_id]
        except KeyError:
            raise UnknownEntity(f'Unknown room type: {room_type_id}')

    def room_type_for(self, room):
        return self.room_type(room.room_type_id)

    def meal_plan(self, meal_plan_id):
        """The meal plan for an id, or None when no plan is selected."""
        if meal_plan_id is None:
            return None
        try:
            return self._meal_plans_by_id[meal_plan_id]
        except KeyError:
            raise UnknownEntity(f'Unknown meal plan: {meal_plan_id}')

    def reservation(self, reservation_id):
        try:
            return self._reservations_by_id[reservation_id]
        except KeyError:
            raise UnknownEntity(f'Unknown reservation: {reservation_id}')

    def apply(self, commands):
        """Snapshot after applying UpdateRoom/UpdateReservation commands in order."""
        rooms = dict(self._rooms_by_id)
        reservations = dict(self._reservations_by_id)
        for command in commands:
            if isinstance(command, UpdateRoom):
                rooms[command.room.id] = command.room
            elif isinstance(command, UpdateReservation):
                reservations[command.reservation.id] = command.reservation
            else:
                raise TypeError(f'Unsupported command: {command!r}')
        return replace(self, rooms=tuple(rooms.values()), reservations=tuple(reservations.values()))
