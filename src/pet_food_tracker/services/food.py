"""Food supply tracking service."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID

from pet_food_tracker.domain.errors import (
    ActiveEntryExistsError,
    BadRequestError,
    ConflictError,
    NotFoundError,
)
from pet_food_tracker.domain.food import (
    DryFoodEntry,
    FoodCategory,
    FoodEntry,
    FoodEntryQuery,
    FoodEntryView,
)
from pet_food_tracker.services.calculations import (
    calculate_actual_consumption,
    calculate_remaining,
)
from pet_food_tracker.services.validation import (
    check_quantity_bounds,
    parse_past_date,
    validate_category,
    validate_food_input,
    validate_history_limit,
    validate_identifier,
)

_logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 5

_DRY_ONLY_FIELDS = ("total_quantity", "total_quantity_unit")
_WET_ONLY_FIELDS = ("unit_count", "quantity_per_unit", "quantity_per_unit_unit")


class FoodRepository(Protocol):
    """Persistence interface for food entries.

    Implementations must reject a second active entry for the same pet and
    category atomically, and apply ``expected_active`` as part of the write
    predicate so that racing transitions cannot both succeed.
    """

    async def insert(self, payload: dict[str, object]) -> FoodEntry:
        """Insert an entry, raising ActiveEntryExistsError on a duplicate."""

    async def update(
        self,
        entry_id: UUID,
        pet_id: UUID,
        fields: dict[str, object],
        expected_active: bool | None = None,
    ) -> FoodEntry | None:
        """Update matching entry fields and return it, or None if unmatched."""

    async def find_by_id(self, entry_id: UUID) -> FoodEntry | None:
        """Return an entry by id, if present."""

    async def find_many(self, query: FoodEntryQuery) -> list[FoodEntry]:
        """Return entries matching a query."""

    async def delete(self, entry_id: UUID) -> bool:
        """Delete an entry and return whether it existed."""


class PetOwnershipChecker(Protocol):
    """Authorization interface for pet records."""

    async def verify_ownership(self, pet_id: UUID, user_id: str) -> None:
        """Raise NotFoundError unless the user owns an active pet."""


def _today() -> date:
    return datetime.now(tz=UTC).date()


def enrich_remaining(entry: FoodEntry, today: date) -> FoodEntryView:
    """Attach the remaining-supply projection to an entry."""
    return FoodEntryView(entry=entry, remaining=calculate_remaining(entry, today))


def enrich_consumption(entry: FoodEntry) -> FoodEntryView:
    """Attach the realized-consumption report to a finished entry."""
    return FoodEntryView(entry=entry, consumption=calculate_actual_consumption(entry))


@dataclass
class FoodService:
    """Application service for the food supply lifecycle."""

    repository: FoodRepository
    pet_ownership: PetOwnershipChecker
    clock: Callable[[], date] = field(default=_today)
    history_limit: int = DEFAULT_HISTORY_LIMIT

    async def create_entry(
        self,
        pet_id: UUID | str,
        user_id: str,
        category: FoodCategory | str,
        data: dict[str, object],
    ) -> FoodEntry:
        """Create an active entry, allowing one active entry per category."""
        resolved_category = validate_category(category)
        resolved_pet_id = validate_identifier(pet_id, "pet ID")
        fields = validate_food_input(resolved_category, data, self.clock())
        await self.pet_ownership.verify_ownership(resolved_pet_id, user_id)

        existing = await self.repository.find_many(
            FoodEntryQuery(
                pet_id=resolved_pet_id,
                category=resolved_category,
                is_active=True,
                limit=1,
            )
        )
        if existing:
            raise _duplicate_active_error(resolved_pet_id, resolved_category)

        try:
            entry = await self.repository.insert(
                _insert_payload(resolved_pet_id, resolved_category, fields)
            )
        except ActiveEntryExistsError:
            raise _duplicate_active_error(
                resolved_pet_id, resolved_category
            ) from None
        _logger.info(
            "Food entry created: entry_id=%s pet_id=%s category=%s",
            entry.id,
            resolved_pet_id,
            resolved_category,
        )
        return entry

    async def get_entry(
        self, pet_id: UUID | str, entry_id: UUID | str, user_id: str
    ) -> FoodEntryView:
        """Return an entry with its supply projection and, if finished, report."""
        resolved_pet_id = validate_identifier(pet_id, "pet ID")
        resolved_entry_id = validate_identifier(entry_id, "food entry ID")
        await self.pet_ownership.verify_ownership(resolved_pet_id, user_id)
        entry = await self._load(resolved_pet_id, resolved_entry_id)
        view = enrich_remaining(entry, self.clock())
        if entry.date_finished is None:
            return view
        return FoodEntryView(
            entry=entry,
            remaining=view.remaining,
            consumption=calculate_actual_consumption(entry),
        )

    async def list_active(
        self,
        pet_id: UUID | str,
        user_id: str,
        category: FoodCategory | str | None = None,
    ) -> list[FoodEntryView]:
        """Return active entries with supply projections."""
        entries = await self._list(pet_id, user_id, category, is_active=True)
        today = self.clock()
        return [enrich_remaining(entry, today) for entry in entries]

    async def list_all(
        self,
        pet_id: UUID | str,
        user_id: str,
        category: FoodCategory | str | None = None,
    ) -> list[FoodEntryView]:
        """Return active and finished entries with supply projections."""
        entries = await self._list(pet_id, user_id, category, is_active=None)
        today = self.clock()
        return [enrich_remaining(entry, today) for entry in entries]

    async def list_finished(
        self,
        pet_id: UUID | str,
        user_id: str,
        category: FoodCategory | str | None = None,
        limit: int | str | None = None,
    ) -> list[FoodEntryView]:
        """Return the most recently finished entries with consumption reports."""
        resolved_limit = validate_history_limit(limit, self.history_limit)
        entries = await self._list(
            pet_id,
            user_id,
            category,
            is_active=False,
            order_by="date_finished",
            limit=resolved_limit,
        )
        return [enrich_consumption(entry) for entry in entries]

    async def update_entry(
        self,
        pet_id: UUID | str,
        entry_id: UUID | str,
        user_id: str,
        category: FoodCategory | str,
        data: dict[str, object],
    ) -> FoodEntry:
        """Apply a partial update to an active entry."""
        resolved_category = validate_category(category)
        resolved_pet_id = validate_identifier(pet_id, "pet ID")
        resolved_entry_id = validate_identifier(entry_id, "food entry ID")
        if not data:
            raise BadRequestError("At least one field must be provided for update")
        fields = validate_food_input(
            resolved_category, data, self.clock(), is_update=True
        )
        await self.pet_ownership.verify_ownership(resolved_pet_id, user_id)

        existing = await self._load(resolved_pet_id, resolved_entry_id)
        if existing.category != resolved_category:
            raise NotFoundError(f"{resolved_category.capitalize()} food entry not found")
        if not existing.is_active:
            raise ConflictError("Finished food entries cannot be edited")
        check_quantity_bounds(resolved_category, {**_quantity_fields(existing), **fields})

        updated = await self.repository.update(
            resolved_entry_id,
            resolved_pet_id,
            {**fields, "updated_at": datetime.now(tz=UTC)},
            expected_active=True,
        )
        if updated is None:
            raise NotFoundError("Active food entry not found")
        _logger.info(
            "Food entry updated: entry_id=%s fields=%s",
            resolved_entry_id,
            sorted(fields),
        )
        return updated

    async def mark_finished(
        self, pet_id: UUID | str, entry_id: UUID | str, user_id: str
    ) -> FoodEntry:
        """Finish an active entry as of today."""
        resolved_pet_id = validate_identifier(pet_id, "pet ID")
        resolved_entry_id = validate_identifier(entry_id, "food entry ID")
        await self.pet_ownership.verify_ownership(resolved_pet_id, user_id)

        finished = await self.repository.update(
            resolved_entry_id,
            resolved_pet_id,
            {
                "is_active": False,
                "date_finished": self.clock(),
                "updated_at": datetime.now(tz=UTC),
            },
            expected_active=True,
        )
        if finished is None:
            raise NotFoundError("Active food entry not found")
        _logger.info(
            "Food entry finished: entry_id=%s pet_id=%s",
            resolved_entry_id,
            resolved_pet_id,
        )
        return finished

    async def update_finish_date(
        self,
        pet_id: UUID | str,
        entry_id: UUID | str,
        user_id: str,
        date_finished: date | str,
    ) -> FoodEntry:
        """Correct the finish date of a finished entry."""
        resolved_pet_id = validate_identifier(pet_id, "pet ID")
        resolved_entry_id = validate_identifier(entry_id, "food entry ID")
        new_date = parse_past_date(date_finished, "finish date", self.clock())
        await self.pet_ownership.verify_ownership(resolved_pet_id, user_id)

        existing = await self._load(resolved_pet_id, resolved_entry_id)
        if existing.is_active:
            raise ConflictError("Only finished food entries have a finish date")
        if new_date < existing.date_started:
            raise BadRequestError("Finish date cannot be before the start date")

        updated = await self.repository.update(
            resolved_entry_id,
            resolved_pet_id,
            {"date_finished": new_date, "updated_at": datetime.now(tz=UTC)},
            expected_active=False,
        )
        if updated is None:
            raise NotFoundError("Finished food entry not found")
        _logger.info(
            "Food entry finish date corrected: entry_id=%s date_finished=%s",
            resolved_entry_id,
            new_date,
        )
        return updated

    async def delete_entry(
        self, pet_id: UUID | str, entry_id: UUID | str, user_id: str
    ) -> None:
        """Permanently delete an entry in any state."""
        resolved_pet_id = validate_identifier(pet_id, "pet ID")
        resolved_entry_id = validate_identifier(entry_id, "food entry ID")
        await self.pet_ownership.verify_ownership(resolved_pet_id, user_id)

        await self._load(resolved_pet_id, resolved_entry_id)
        if not await self.repository.delete(resolved_entry_id):
            raise NotFoundError("Food entry not found")
        _logger.info(
            "Food entry deleted: entry_id=%s pet_id=%s",
            resolved_entry_id,
            resolved_pet_id,
        )

    async def _load(self, pet_id: UUID, entry_id: UUID) -> FoodEntry:
        entry = await self.repository.find_by_id(entry_id)
        if entry is None or entry.pet_id != pet_id:
            raise NotFoundError("Food entry not found")
        return entry

    async def _list(  # noqa: PLR0913
        self,
        pet_id: UUID | str,
        user_id: str,
        category: FoodCategory | str | None,
        is_active: bool | None,
        order_by: str = "created_at",
        limit: int | None = None,
    ) -> list[FoodEntry]:
        resolved_category = (
            validate_category(category) if category is not None else None
        )
        resolved_pet_id = validate_identifier(pet_id, "pet ID")
        await self.pet_ownership.verify_ownership(resolved_pet_id, user_id)
        return await self.repository.find_many(
            FoodEntryQuery(
                pet_id=resolved_pet_id,
                category=resolved_category,
                is_active=is_active,
                order_by=order_by,
                limit=limit,
            )
        )


def _insert_payload(
    pet_id: UUID, category: FoodCategory, fields: dict[str, object]
) -> dict[str, object]:
    nulled = _WET_ONLY_FIELDS if category is FoodCategory.DRY else _DRY_ONLY_FIELDS
    return {
        "pet_id": pet_id,
        "category": category,
        "brand_name": None,
        "product_name": None,
        **fields,
        **dict.fromkeys(nulled),
        "is_active": True,
        "date_finished": None,
    }


def _quantity_fields(entry: FoodEntry) -> dict[str, object]:
    values: dict[str, object] = {
        "daily_amount": entry.daily_amount,
        "daily_amount_unit": entry.daily_amount_unit,
    }
    if isinstance(entry, DryFoodEntry):
        values["total_quantity"] = entry.total_quantity
        values["total_quantity_unit"] = entry.total_quantity_unit
    else:
        values["unit_count"] = entry.unit_count
        values["quantity_per_unit"] = entry.quantity_per_unit
        values["quantity_per_unit_unit"] = entry.quantity_per_unit_unit
    return values


def _duplicate_active_error(pet_id: UUID, category: FoodCategory) -> ConflictError:
    _logger.warning(
        "Rejected duplicate active food entry: pet_id=%s category=%s",
        pet_id,
        category,
    )
    return ConflictError(
        f"You already have an active {category} food entry. "
        "Please finish or delete it before adding a new one."
    )
