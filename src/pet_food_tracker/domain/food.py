"""Domain models for pet food supply tracking."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID


class FoodCategory(StrEnum):
    """Kind of food a supply record tracks."""

    DRY = "dry"
    WET = "wet"


class FeedingStatus(StrEnum):
    """Classification of realized consumption against the declared rate."""

    OVERFEEDING = "overfeeding"
    NORMAL = "normal"
    UNDERFEEDING = "underfeeding"


@dataclass(frozen=True)
class FoodEntryBase:
    """Fields shared by every supply record."""

    id: UUID
    pet_id: UUID
    brand_name: str | None
    product_name: str | None
    daily_amount: float
    daily_amount_unit: str
    date_started: date
    date_finished: date | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class DryFoodEntry(FoodEntryBase):
    """A bag of dry food measured by total weight."""

    total_quantity: float
    total_quantity_unit: str
    category: FoodCategory = field(default=FoodCategory.DRY, init=False)


@dataclass(frozen=True)
class WetFoodEntry(FoodEntryBase):
    """A case of wet food measured as a count of cans or pouches."""

    unit_count: int
    quantity_per_unit: float
    quantity_per_unit_unit: str
    category: FoodCategory = field(default=FoodCategory.WET, init=False)


FoodEntry = DryFoodEntry | WetFoodEntry


@dataclass(frozen=True)
class RemainingSupply:
    """Projected supply left for a record at a given day."""

    remaining_days: int
    remaining_weight: float
    depletion_date: date


@dataclass(frozen=True)
class ConsumptionReport:
    """Realized consumption of a finished record."""

    date_finished: date
    actual_days_elapsed: int
    actual_daily_consumption: float
    expected_daily_consumption: float
    variance_percentage: float
    feeding_status: FeedingStatus
    expected_days: int


@dataclass(frozen=True)
class FoodEntryView:
    """A supply record enriched for callers."""

    entry: FoodEntry
    remaining: RemainingSupply | None = None
    consumption: ConsumptionReport | None = None


@dataclass(frozen=True)
class FoodEntryQuery:
    """Filter, ordering and limit for listing supply records."""

    pet_id: UUID
    category: FoodCategory | None = None
    is_active: bool | None = None
    order_by: str = "created_at"
    descending: bool = True
    limit: int | None = None
