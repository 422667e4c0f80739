from datetime import date, datetime, time, timedelta
from decimal import Decimal

from dateutil import parser as date_parser
from dateutil import tz

from .exceptions import InvalidQuantity, InvalidRange

ONE_DAY = timedelta(days=1)


def _naive(value):
    if value.tzinfo is None:
        return value
    return value.astimezone(tz.UTC).replace(tzinfo=None)


def as_datetime(value):
    """
    Normalise a stay boundary to a datetime.

    A plain date means midnight of that day; strings are parsed as ISO-8601.
    Values carrying an offset are converted to naive UTC so they compare with
    plain dates.
    """
    if isinstance(value, datetime):
        return _naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return _naive(date_parser.isoparse(value.strip()))
        except ValueError:
            raise InvalidRange(f'Invalid date: {value!r}')
    raise InvalidRange(f'Expected a date, got {value!r}')


def nights(check_in, check_out):
    """
    Number of billable nights between check-in and check-out.

    Partial days round up, so a stay ending 14 hours after check-in is one night.

    Raises:
        InvalidRange: if check_out is not after check_in
    """
    start = as_datetime(check_in)
    end = as_datetime(check_out)
    if end <= start:
        raise InvalidRange('Check-out date must be after check-in date.')
    whole, remainder = divmod(end - start, ONE_DAY)
    return whole + (1 if remainder else 0)


def overlaps(range_a, range_b):
    """
    True when the half-open windows [check_in, check_out) of both ranges intersect.

    Works with anything exposing check_in/check_out, reservations included.
    """
    a_start, a_end = as_datetime(range_a.check_in), as_datetime(range_a.check_out)
    b_start, b_end = as_datetime(range_b.check_in), as_datetime(range_b.check_out)
    return a_start < b_end and b_start < a_end


def room_subtotal(night_count, rate):
    """Nights multiplied by the nightly rate."""
    if night_count < 1:
        raise InvalidQuantity('A stay must cover at least one night.')
    return Decimal(night_count) * Decimal(str(rate))
