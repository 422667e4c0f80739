import pytest

from booking.assignment import mark_for_cleaning, occupy, release
from booking.entities import AVAILABLE, CHECKED_IN, CONFIRMED, MAINTENANCE, OCCUPIED, Room
from booking.exceptions import RoomConflict

from .conftest import make_reservation


@pytest.fixture
def room():
    return Room(id=101, room_number='101', room_type_id='std')


def test_occupy_returns_a_new_room(room):
    occupied = occupy(room, 1)
    assert occupied.status == OCCUPIED
    assert room.status == AVAILABLE


def test_occupy_ignores_confirmed_and_own_reservations(room):
    others = [make_reservation(id=1, status=CHECKED_IN), make_reservation(id=2, status=CONFIRMED)]
    assert occupy(room, 1, others).status == OCCUPIED


def test_occupy_refuses_room_held_by_another_guest(room):
    with pytest.raises(RoomConflict):
        occupy(room, 2, [make_reservation(id=1, status=CHECKED_IN)])


def test_release_and_cleaning():
    occupied = Room(id=101, room_number='101', room_type_id='std', status=OCCUPIED)
    assert release(occupied).status == AVAILABLE
    assert mark_for_cleaning(occupied).status == MAINTENANCE
