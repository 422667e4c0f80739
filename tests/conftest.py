from datetime import date
from decimal import Decimal

import pytest

from booking.entities import Inventory, MealPlan, Reservation, Room, RoomType


@pytest.fixture
def standard():
    return RoomType(id='std', name='Standard', capacity=2, base_price=Decimal('100'))


@pytest.fixture
def deluxe():
    return RoomType(id='dlx', name='Deluxe', capacity=4, base_price=Decimal('180'), view_type_id='sea')


@pytest.fixture
def half_board():
    return MealPlan(id='hb', name='Half board', code='HB', per_person_rate=Decimal('20'), per_room_rate=Decimal('10'))


@pytest.fixture
def rooms():
    return [
        Room(id=101, room_number='101', room_type_id='std'),
        Room(id=102, room_number='102', room_type_id='std'),
        Room(id=201, room_number='201', room_type_id='dlx'),
    ]


@pytest.fixture
def inventory(rooms, standard, deluxe, half_board):
    return Inventory(rooms=rooms, room_types=[standard, deluxe], meal_plans=[half_board])


def make_reservation(id=1, room_id=101, check_in=date(2025, 3, 1), check_out=date(2025, 3, 4), **kwargs):
    kwargs.setdefault('customer_id', 'guest')
    return Reservation(id=id, room_id=room_id, check_in=check_in, check_out=check_out, **kwargs)


@pytest.fixture
def room_type_db(db):
    from rooms.models import RoomType as RoomTypeModel
    return RoomTypeModel.objects.create(name='Standard', capacity=2, base_price=Decimal('100.00'))


@pytest.fixture
def suite_type_db(db):
    from rooms.models import RoomType as RoomTypeModel, ViewType
    sea = ViewType.objects.create(name='Sea')
    return RoomTypeModel.objects.create(name='Suite', capacity=4, base_price=Decimal('180.00'), view_type=sea)


@pytest.fixture
def room_101(room_type_db):
    from rooms.models import Room as RoomModel
    return RoomModel.objects.create(room_number='101', room_type=room_type_db)


@pytest.fixture
def room_102(room_type_db):
    from rooms.models import Room as RoomModel
    return RoomModel.objects.create(room_number='102', room_type=room_type_db)


@pytest.fixture
def suite_201(suite_type_db):
    from rooms.models import Room as RoomModel
    return RoomModel.objects.create(room_number='201', room_type=suite_type_db)


@pytest.fixture
def meal_plan_db(db):
    from reservations.models import MealPlan as MealPlanModel
    return MealPlanModel.objects.create(
        name='Half board', code='HB', per_person_rate=Decimal('20.00'), per_room_rate=Decimal('10.00'),
    )


@pytest.fixture
def customer(db):
    from reservations.models import Customer
    return Customer.objects.create(name='Ada Lovelace', email='ada@example.com')
