"""Input validation for food entry requests.

Shape and type checks live in the pydantic models of
``pet_food_tracker.domain.food_inputs``; this module turns their failures into
``BadRequestError`` messages and applies the business rules on top:
unit-dependent ceilings, non-future dates and immutable fields.
"""

import re
from datetime import date
from uuid import UUID

from pydantic import BaseModel, TypeAdapter, ValidationError

from pet_food_tracker.domain.errors import BadRequestError
from pet_food_tracker.domain.food import FoodCategory
from pet_food_tracker.domain.food_inputs import (
    MAX_BRAND_NAME_LENGTH,
    MAX_HISTORY_LIMIT,
    MAX_PRODUCT_NAME_LENGTH,
    MIN_HISTORY_LIMIT,
    DryFoodCreate,
    DryFoodUpdate,
    HistoryLimit,
    WetFoodCreate,
    WetFoodUpdate,
)

MAX_UNIT_COUNT = 100

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

_CREATE_MODELS: dict[FoodCategory, type[BaseModel]] = {
    FoodCategory.DRY: DryFoodCreate,
    FoodCategory.WET: WetFoodCreate,
}

_UPDATE_MODELS: dict[FoodCategory, type[BaseModel]] = {
    FoodCategory.DRY: DryFoodUpdate,
    FoodCategory.WET: WetFoodUpdate,
}

_DATE = TypeAdapter(date)
_HISTORY_LIMIT = TypeAdapter(HistoryLimit)

_UNIT_CHOICES: dict[FoodCategory, dict[str, tuple[str, ...]]] = {
    FoodCategory.DRY: {
        "total_quantity_unit": ("kg", "pounds"),
        "daily_amount_unit": ("grams", "cups"),
    },
    FoodCategory.WET: {
        "quantity_per_unit_unit": ("grams", "oz"),
        "daily_amount_unit": ("grams", "oz"),
    },
}

# quantity field -> (unit field, ceiling per unit)
_CEILINGS: dict[FoodCategory, dict[str, tuple[str, dict[str, float]]]] = {
    FoodCategory.DRY: {
        "total_quantity": ("total_quantity_unit", {"kg": 50, "pounds": 110}),
        "daily_amount": ("daily_amount_unit", {"grams": 2000, "cups": 16}),
    },
    FoodCategory.WET: {
        "quantity_per_unit": (
            "quantity_per_unit_unit",
            {"grams": 5000, "oz": 176},
        ),
        "daily_amount": ("daily_amount_unit", {"grams": 2000, "oz": 70}),
    },
}

_QUANTITY_LABELS = {
    "total_quantity": "Total quantity",
    "quantity_per_unit": "Quantity per unit",
    "daily_amount": "Daily amount",
}

_UNIT_LABELS = {
    "total_quantity_unit": "total quantity unit",
    "quantity_per_unit_unit": "quantity per unit unit",
    "daily_amount_unit": "daily amount unit",
}

_NAME_LIMITS = {
    "brand_name": ("Brand name", MAX_BRAND_NAME_LENGTH),
    "product_name": ("Product name", MAX_PRODUCT_NAME_LENGTH),
}

IMMUTABLE_FIELDS = frozenset(
    {
        "id",
        "pet_id",
        "category",
        "date_started",
        "date_finished",
        "is_active",
        "created_at",
        "updated_at",
    }
)


def validate_category(value: object) -> FoodCategory:
    """Parse a food category."""
    try:
        return FoodCategory(str(value))
    except ValueError:
        raise BadRequestError("Food type must be either dry or wet") from None


def validate_identifier(value: object, field_name: str = "ID") -> UUID:
    """Parse an opaque identifier, rejecting anything that is not a UUID."""
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str) or not _UUID_PATTERN.match(value):
        raise BadRequestError(f"Invalid {field_name} format")
    return UUID(value)


def validate_history_limit(value: object, default: int) -> int:
    """Parse the number of finished entries to return."""
    if value is None:
        return default
    try:
        return _HISTORY_LIMIT.validate_python(value)
    except ValidationError:
        raise BadRequestError(
            f"Limit must be between {MIN_HISTORY_LIMIT} and {MAX_HISTORY_LIMIT}"
        ) from None


def validate_food_input(
    category: FoodCategory,
    data: dict[str, object],
    today: date,
    *,
    is_update: bool = False,
) -> dict[str, object]:
    """Validate a create or update payload and return the normalized fields.

    Creates must carry every required field of the category. Updates check
    only the fields present, reject immutable fields and silently drop keys
    that do not belong to the category.
    """
    if is_update:
        for key in data:
            if key in IMMUTABLE_FIELDS:
                raise BadRequestError(f"Field '{key}' cannot be updated")
        model = _UPDATE_MODELS[category]
    else:
        model = _CREATE_MODELS[category]

    try:
        parsed = model.model_validate(data)
    except ValidationError as exc:
        raise BadRequestError(_error_message(category, exc)) from None

    cleaned = parsed.model_dump(exclude_unset=is_update)
    if is_update:
        if not cleaned:
            raise BadRequestError("At least one field must be provided for update")
        for key, value in cleaned.items():
            if value is None and key not in _NAME_LIMITS:
                raise BadRequestError(_field_message(category, key, "none_required"))
    else:
        cleaned["date_started"] = _not_in_future(
            cleaned["date_started"], "start date", today
        )

    check_quantity_bounds(category, cleaned)
    return cleaned


def check_quantity_bounds(category: FoodCategory, values: dict[str, object]) -> None:
    """Reject quantities above the sanity ceiling for their unit."""
    for quantity_field, (unit_field, ceilings) in _CEILINGS[category].items():
        quantity = values.get(quantity_field)
        unit = values.get(unit_field)
        if quantity is None or unit is None:
            continue
        ceiling = ceilings.get(str(unit))
        if ceiling is not None and float(quantity) > ceiling:
            label = _QUANTITY_LABELS[quantity_field]
            raise BadRequestError(
                f"{label} seems unreasonably large (max {ceiling:g} {unit})"
            )
    unit_count = values.get("unit_count")
    if unit_count is not None and int(unit_count) > MAX_UNIT_COUNT:
        raise BadRequestError(
            f"Unit count seems unreasonably large (max {MAX_UNIT_COUNT})"
        )


def parse_past_date(value: object, label: str, today: date) -> date:
    """Parse a calendar date that must not lie after today."""
    try:
        parsed = _DATE.validate_python(value)
    except ValidationError:
        raise BadRequestError(f"Invalid date format for {label}") from None
    return _not_in_future(parsed, label, today)


def _not_in_future(value: date, label: str, today: date) -> date:
    if value > today:
        raise BadRequestError(f"{label.capitalize()} cannot be in the future")
    return value


def _error_message(category: FoodCategory, exc: ValidationError) -> str:
    errors = exc.errors()
    missing = [
        str(error["loc"][0])
        for error in errors
        if error["type"] == "missing" and error["loc"]
    ]
    if missing:
        return f"Missing required fields for {category} food: {', '.join(missing)}"
    error = errors[0]
    field = str(error["loc"][0]) if error["loc"] else ""
    return _field_message(category, field, error["type"])


def _field_message(category: FoodCategory, field: str, error_type: str) -> str:
    if field in _QUANTITY_LABELS:
        return f"{_QUANTITY_LABELS[field]} must be a positive number"
    if field == "unit_count":
        return "Unit count must be a positive integer"
    if field in _UNIT_LABELS:
        choices = " or ".join(_UNIT_CHOICES[category][field])
        return (
            f"Invalid {_UNIT_LABELS[field]} for {category} food. Must be {choices}"
        )
    if field == "date_started":
        return "Invalid date format for start date"
    if field in _NAME_LIMITS:
        label, max_length = _NAME_LIMITS[field]
        if error_type == "string_too_long":
            return f"{label} must be {max_length} characters or less"
        return f"{label} must be text"
    return f"Invalid {category} food entry"
