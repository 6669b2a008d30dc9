"""Supply projections and consumption reconciliation for food entries.

Everything here is pure: callers pass the current day explicitly and no
function touches storage or mutates a record.
"""

import math
from datetime import date, timedelta

from pet_food_tracker.domain.errors import BadRequestError
from pet_food_tracker.domain.food import (
    ConsumptionReport,
    DryFoodEntry,
    FeedingStatus,
    FoodEntry,
    RemainingSupply,
)
from pet_food_tracker.services.units import from_grams, to_grams

FEEDING_TOLERANCE_PERCENT = 5.0


def total_grams(entry: FoodEntry) -> float:
    """Return the purchased quantity of an entry in grams."""
    if isinstance(entry, DryFoodEntry):
        return to_grams(entry.total_quantity, entry.total_quantity_unit)
    return to_grams(
        entry.unit_count * entry.quantity_per_unit, entry.quantity_per_unit_unit
    )


def daily_grams(entry: FoodEntry) -> float:
    """Return the declared daily amount of an entry in grams."""
    return to_grams(entry.daily_amount, entry.daily_amount_unit)


def native_unit(entry: FoodEntry) -> str:
    """Return the unit the entry's purchased quantity is expressed in."""
    if isinstance(entry, DryFoodEntry):
        return entry.total_quantity_unit
    return entry.quantity_per_unit_unit


def days_between(start: date, end: date) -> int:
    """Return whole days from start to end, counting the start day as one."""
    return max(1, (end - start).days)


def expected_days(entry: FoodEntry) -> int:
    """Return how many days the supply should last at the declared rate."""
    per_day = daily_grams(entry)
    if per_day <= 0:
        return 0
    return math.ceil(total_grams(entry) / per_day)


def calculate_remaining(entry: FoodEntry, today: date) -> RemainingSupply:
    """Project remaining weight, days and depletion date as of today."""
    total = total_grams(entry)
    per_day = daily_grams(entry)
    consumed = days_between(entry.date_started, today) * per_day
    remaining_grams = max(0.0, total - consumed)
    remaining_days = math.floor(remaining_grams / per_day) if per_day > 0 else 0

    if remaining_days > 0:
        depletion_date = today + timedelta(days=remaining_days)
    else:
        # Exhausted by schedule: report when it should have run out.
        depletion_date = entry.date_started + timedelta(days=expected_days(entry))

    return RemainingSupply(
        remaining_days=remaining_days,
        remaining_weight=from_grams(remaining_grams, native_unit(entry)),
        depletion_date=depletion_date,
    )


def calculate_actual_consumption(
    entry: FoodEntry, tolerance: float = FEEDING_TOLERANCE_PERCENT
) -> ConsumptionReport:
    """Compare realized daily consumption of a finished entry to its plan."""
    if entry.date_finished is None:
        raise BadRequestError(
            "Cannot calculate consumption for a food entry without a finish date"
        )
    expected = daily_grams(entry)
    if expected <= 0:
        raise BadRequestError(
            "Cannot calculate consumption without a positive daily amount"
        )

    days_elapsed = days_between(entry.date_started, entry.date_finished)
    actual = total_grams(entry) / days_elapsed
    variance = (actual - expected) / expected * 100

    return ConsumptionReport(
        date_finished=entry.date_finished,
        actual_days_elapsed=days_elapsed,
        actual_daily_consumption=actual,
        expected_daily_consumption=expected,
        variance_percentage=variance,
        feeding_status=classify_feeding(variance, tolerance),
        expected_days=expected_days(entry),
    )


def classify_feeding(
    variance_percentage: float, tolerance: float = FEEDING_TOLERANCE_PERCENT
) -> FeedingStatus:
    """Classify a consumption variance into a feeding status."""
    if variance_percentage > tolerance:
        return FeedingStatus.OVERFEEDING
    if variance_percentage < -tolerance:
        return FeedingStatus.UNDERFEEDING
    return FeedingStatus.NORMAL
