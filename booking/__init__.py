"""
Reservation lifecycle and billing core.

Pure functions over immutable values; no I/O and no shared state. Callers pass
in an Inventory snapshot and apply the returned commands to their own store.
"""
from .availability import Criteria, find_available, is_room_free
from .entities import (
    DateRange, Inventory, MealPlan, Reservation, Room, RoomType,
    ChargeLine, UpdateReservation, UpdateRoom,
)
from .exceptions import (
    BookingError, InvalidQuantity, InvalidRange, InvalidTransition,
    NoExtensionNeeded, NotAvailable, RoomConflict, UnknownEntity,
)
from .lifecycle import Transition, book, cancel, check_in, check_out, extend_stay
from .pricing import meal_plan_price, quote, stay_total
from .stay import nights, overlaps, room_subtotal
