"""Request models for food entry payloads."""

from datetime import date
from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

MAX_BRAND_NAME_LENGTH = 100
MAX_PRODUCT_NAME_LENGTH = 100
MIN_HISTORY_LIMIT = 1
MAX_HISTORY_LIMIT = 100


def _reject_bool(value: object) -> object:
    if isinstance(value, bool):
        raise ValueError("boolean is not a quantity")
    return value


PositiveAmount = Annotated[
    float, BeforeValidator(_reject_bool), Field(gt=0, allow_inf_nan=False)
]
PositiveCount = Annotated[int, BeforeValidator(_reject_bool), Field(gt=0)]
BrandName = Annotated[str | None, Field(max_length=MAX_BRAND_NAME_LENGTH)]
ProductName = Annotated[str | None, Field(max_length=MAX_PRODUCT_NAME_LENGTH)]
HistoryLimit = Annotated[
    int,
    BeforeValidator(_reject_bool),
    Field(ge=MIN_HISTORY_LIMIT, le=MAX_HISTORY_LIMIT),
]


class _FoodInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @field_validator("brand_name", "product_name", mode="before", check_fields=False)
    @classmethod
    def _blank_name_is_none(cls, value: object) -> object:
        return None if value == "" else value


class DryFoodCreate(_FoodInput):
    """Payload for a new bag of dry food."""

    total_quantity: PositiveAmount
    total_quantity_unit: Literal["kg", "pounds"]
    daily_amount: PositiveAmount
    daily_amount_unit: Literal["grams", "cups"]
    date_started: date
    brand_name: BrandName = None
    product_name: ProductName = None


class WetFoodCreate(_FoodInput):
    """Payload for a new case of wet food."""

    unit_count: PositiveCount
    quantity_per_unit: PositiveAmount
    quantity_per_unit_unit: Literal["grams", "oz"]
    daily_amount: PositiveAmount
    daily_amount_unit: Literal["grams", "oz"]
    date_started: date
    brand_name: BrandName = None
    product_name: ProductName = None


class DryFoodUpdate(_FoodInput):
    """Partial update of an active dry food entry."""

    total_quantity: PositiveAmount | None = None
    total_quantity_unit: Literal["kg", "pounds"] | None = None
    daily_amount: PositiveAmount | None = None
    daily_amount_unit: Literal["grams", "cups"] | None = None
    brand_name: BrandName = None
    product_name: ProductName = None


class WetFoodUpdate(_FoodInput):
    """Partial update of an active wet food entry."""

    unit_count: PositiveCount | None = None
    quantity_per_unit: PositiveAmount | None = None
    quantity_per_unit_unit: Literal["grams", "oz"] | None = None
    daily_amount: PositiveAmount | None = None
    daily_amount_unit: Literal["grams", "oz"] | None = None
    brand_name: BrandName = None
    product_name: ProductName = None
