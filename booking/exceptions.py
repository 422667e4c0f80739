class BookingError(Exception):
    """Base class for every failure raised by the booking core."""


class InvalidRange(BookingError):
    """Check-out is not after check-in."""


class InvalidQuantity(BookingError):
    """A count or amount is out of range (adults, nights, capacity, price)."""


class NoExtensionNeeded(BookingError):
    """The requested check-out does not extend the stay."""


class InvalidTransition(BookingError):
    """The reservation's current status does not allow the requested action."""


class RoomConflict(BookingError):
    """The room is already held by another checked-in reservation."""


class NotAvailable(BookingError):
    """The requested room cannot be used for the requested stay."""


class UnknownEntity(BookingError, LookupError):
    """An id does not resolve in the inventory snapshot."""
