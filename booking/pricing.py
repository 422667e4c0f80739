from .entities import MEAL_CHARGE, ROOM_CHARGE, ZERO, ChargeLine
from .exceptions import InvalidQuantity


def _plural(count, noun):
    return f'{count} {noun}' if count == 1 else f'{count} {noun}s'


def _validate(adults, night_count):
    if adults < 1:
        raise InvalidQuantity('At least one adult is required to price a meal plan.')
    if night_count < 1:
        raise InvalidQuantity('A stay must cover at least one night.')


def meal_plan_charges(plan, adults, night_count):
    """Charge lines for a meal plan: one per-person line and, if set, one per-room line."""
    if plan is None:
        return []
    _validate(adults, night_count)
    lines = [
        ChargeLine(
            kind=MEAL_CHARGE,
            description=f'{plan.name} ({_plural(adults, "adult")} x {_plural(night_count, "night")})',
            quantity=adults * night_count,
            unit_price=plan.per_person_rate,
        )
    ]
    if plan.per_room_rate:
        lines.append(ChargeLine(
            kind=MEAL_CHARGE,
            description=f'{plan.name} room supplement ({_plural(night_count, "night")})',
            quantity=night_count,
            unit_price=plan.per_room_rate,
        ))
    return lines


def meal_plan_price(plan, adults, night_count):
    """
    Additional cost of a meal plan for a stay.

    per_person_rate * adults * nights + (per_room_rate or 0) * nights.
    No plan costs nothing; that is checked before the quantities.

    Raises:
        InvalidQuantity: if adults < 1 or nights < 1
    """
    return sum((line.amount for line in meal_plan_charges(plan, adults, night_count)), ZERO)


def quote(room_type, plan, adults, night_count):
    """
    Charge lines for a stay: room nights at the type's base price plus the meal plan.

    Args:
        room_type: RoomType priced per night
        plan: MealPlan or None
        adults: adult count (meal plan is billed per adult)
        night_count: nights being charged

    Returns:
        list: ChargeLine values
    """
    if night_count < 1:
        raise InvalidQuantity('A stay must cover at least one night.')
    lines = [
        ChargeLine(
            kind=ROOM_CHARGE,
            description=f'{room_type.name} ({_plural(night_count, "night")})',
            quantity=night_count,
            unit_price=room_type.base_price,
        )
    ]
    lines.extend(meal_plan_charges(plan, adults, night_count))
    return lines


def total_of(lines):
    return sum((line.amount for line in lines), ZERO)


def stay_total(room_type, plan, adults, night_count):
    """nights * base price + meal plan cost."""
    return total_of(quote(room_type, plan, adults, night_count))

