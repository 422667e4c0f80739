from decimal import Decimal

import pytest

from booking.entities import MEAL_CHARGE, ROOM_CHARGE, MealPlan
from booking.exceptions import InvalidQuantity
from booking.pricing import meal_plan_charges, meal_plan_price, quote, stay_total


@pytest.mark.parametrize('adults,night_count', [(1, 1), (2, 3), (0, 0), (5, -1)])
def test_no_meal_plan_costs_nothing(adults, night_count):
    assert meal_plan_price(None, adults, night_count) == 0


def test_meal_plan_price_per_person_and_per_room(half_board):
    assert meal_plan_price(half_board, 2, 3) == Decimal('150')


def test_meal_plan_without_room_rate():
    plan = MealPlan(id='bb', name='Bed and breakfast', per_person_rate=Decimal('12.50'))
    assert meal_plan_price(plan, 2, 2) == Decimal('50.00')
    assert len(meal_plan_charges(plan, 2, 2)) == 1


@pytest.mark.parametrize('adults,night_count', [(0, 3), (2, 0)])
def test_meal_plan_rejects_bad_quantities(half_board, adults, night_count):
    with pytest.raises(InvalidQuantity):
        meal_plan_price(half_board, adults, night_count)


def test_quote_without_meal_plan(standard):
    lines = quote(standard, None, 2, 3)
    assert [line.kind for line in lines] == [ROOM_CHARGE]
    assert lines[0].quantity == 3
    assert lines[0].amount == Decimal('300')
    assert lines[0].description == 'Standard (3 nights)'


def test_quote_with_meal_plan(standard, half_board):
    lines = quote(standard, half_board, 2, 3)
    assert [line.kind for line in lines] == [ROOM_CHARGE, MEAL_CHARGE, MEAL_CHARGE]
    assert sum(line.amount for line in lines) == Decimal('450')
    assert lines[1].description == 'Half board (2 adults x 3 nights)'


def test_stay_total(standard, half_board):
    assert stay_total(standard, None, 2, 3) == Decimal('300')
    assert stay_total(standard, half_board, 2, 3) == Decimal('450')


def test_quote_needs_a_night(standard):
    with pytest.raises(InvalidQuantity):
        quote(standard, None, 1, 0)
