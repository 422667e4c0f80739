from dataclasses import replace
from datetime import date

from booking.availability import Criteria, find_available, is_room_free
from booking.entities import CANCELED, CHECKED_IN, CHECKED_OUT, MAINTENANCE, OCCUPIED, DateRange, Room

from .conftest import make_reservation


def january(start, end):
    return DateRange(date(2025, 1, start), date(2025, 1, end))


def test_overlapping_reservation_blocks_room():
    booked = make_reservation(check_in=date(2025, 1, 10), check_out=date(2025, 1, 15))
    assert not is_room_free(101, [booked], january(14, 16))
    assert is_room_free(102, [booked], january(14, 16))


def test_back_to_back_is_free():
    booked = make_reservation(check_in=date(2025, 1, 10), check_out=date(2025, 1, 15))
    assert is_room_free(101, [booked], january(15, 18))
    assert is_room_free(101, [booked], january(5, 10))


def test_excluded_reservation_does_not_block_itself():
    booked = make_reservation(check_in=date(2025, 1, 10), check_out=date(2025, 1, 15))
    assert is_room_free(101, [booked], january(10, 15), exclude_reservation_id=booked.id)


def test_canceled_reservation_never_blocks():
    canceled = make_reservation(check_in=date(2025, 1, 10), check_out=date(2025, 1, 15), status=CANCELED)
    assert is_room_free(101, [canceled], january(10, 15))


def test_checked_out_reservation_still_blocks_its_dates():
    departed = make_reservation(check_in=date(2025, 1, 10), check_out=date(2025, 1, 15), status=CHECKED_OUT)
    assert not is_room_free(101, [departed], january(12, 13))


def test_find_available_keeps_input_order(rooms, standard, deluxe):
    found = find_available(list(reversed(rooms)), [], [standard, deluxe], Criteria(stay=january(1, 3)))
    assert [room.id for room in found] == [201, 102, 101]


def test_find_available_filters_capacity(rooms, standard, deluxe):
    found = find_available(rooms, [], [standard, deluxe], Criteria(stay=january(1, 3), occupants=3))
    assert [room.id for room in found] == [201]


def test_find_available_filters_type_and_view(rooms, standard, deluxe):
    by_type = find_available(rooms, [], [standard, deluxe], Criteria(stay=january(1, 3), room_type_id='std'))
    assert [room.id for room in by_type] == [101, 102]
    by_view = find_available(rooms, [], [standard, deluxe], Criteria(stay=january(1, 3), view_type_id='sea'))
    assert [room.id for room in by_view] == [201]


def test_find_available_skips_rooms_that_are_not_available(rooms, standard, deluxe):
    rooms = [replace(rooms[0], status=MAINTENANCE), replace(rooms[1], status=OCCUPIED), rooms[2]]
    found = find_available(rooms, [], [standard, deluxe], Criteria(stay=january(1, 3)))
    assert [room.id for room in found] == [201]


def test_room_held_by_excluded_reservation_is_offered(rooms, standard, deluxe):
    guest = make_reservation(id=7, room_id=101, check_in=date(2025, 1, 1), check_out=date(2025, 1, 3), status=CHECKED_IN)
    rooms = [replace(rooms[0], status=OCCUPIED)] + rooms[1:]
    criteria = Criteria(stay=january(1, 3), exclude_reservation_id=7)
    found = find_available(rooms, [guest], [standard, deluxe], criteria)
    assert [room.id for room in found] == [101, 102, 201]


def test_room_with_unknown_type_never_matches(standard):
    orphan = Room(id=999, room_number='999', room_type_id='gone')
    assert find_available([orphan], [], [standard], Criteria(stay=january(1, 3))) == []


def test_no_match_is_an_empty_list(rooms, standard, deluxe):
    assert find_available(rooms, [], [standard, deluxe], Criteria(stay=january(1, 3), occupants=9)) == []
