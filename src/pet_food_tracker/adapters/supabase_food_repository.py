"""Supabase implementation for food entries."""

import asyncio
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from postgrest.exceptions import APIError
from supabase import Client

from pet_food_tracker.domain.errors import ActiveEntryExistsError
from pet_food_tracker.domain.food import (
    DryFoodEntry,
    FoodCategory,
    FoodEntry,
    FoodEntryQuery,
    WetFoodEntry,
)
from pet_food_tracker.services.food import FoodRepository

UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase-backed repository for food entries."""

    client: Client
    table_name: str = "food_entries"

    async def insert(self, payload: dict[str, object]) -> FoodEntry:
        """Insert an entry, relying on the partial unique index for actives."""
        query = self.client.table(self.table_name).insert(_serialize(payload))
        try:
            response = await asyncio.to_thread(query.execute)
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise ActiveEntryExistsError(str(payload.get("category"))) from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create food entry")
        return _parse_entry(response.data[0])

    async def update(
        self,
        entry_id: UUID,
        pet_id: UUID,
        fields: dict[str, object],
        expected_active: bool | None = None,
    ) -> FoodEntry | None:
        """Update an entry and return it, or None if no row matched."""
        query = (
            self.client.table(self.table_name)
            .update(_serialize(fields))
            .eq("id", str(entry_id))
            .eq("pet_id", str(pet_id))
        )
        if expected_active is not None:
            query = query.eq("is_active", expected_active)
        response = await asyncio.to_thread(query.execute)
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    async def find_by_id(self, entry_id: UUID) -> FoodEntry | None:
        """Return an entry by id, if present."""
        query = (
            self.client.table(self.table_name)
            .select("*")
            .eq("id", str(entry_id))
            .limit(1)
        )
        response = await asyncio.to_thread(query.execute)
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    async def find_many(self, query: FoodEntryQuery) -> list[FoodEntry]:
        """Return entries for a pet matching the query filters."""
        request = (
            self.client.table(self.table_name)
            .select("*")
            .eq("pet_id", str(query.pet_id))
        )
        if query.category is not None:
            request = request.eq("category", str(query.category))
        if query.is_active is not None:
            request = request.eq("is_active", query.is_active)
        request = request.order(query.order_by, desc=query.descending)
        if query.limit is not None:
            request = request.limit(query.limit)
        response = await asyncio.to_thread(request.execute)
        return [_parse_entry(row) for row in response.data or []]

    async def delete(self, entry_id: UUID) -> bool:
        """Delete an entry and report whether a row was removed."""
        query = self.client.table(self.table_name).delete().eq("id", str(entry_id))
        response = await asyncio.to_thread(query.execute)
        return bool(response.data)


def _serialize(payload: dict[str, object]) -> dict[str, object]:
    serialized: dict[str, object] = {}
    for key, value in payload.items():
        if isinstance(value, StrEnum):
            serialized[key] = str(value)
        elif isinstance(value, UUID):
            serialized[key] = str(value)
        elif isinstance(value, date | datetime):
            serialized[key] = value.isoformat()
        else:
            serialized[key] = value
    return serialized


def _parse_entry(row: dict[str, object]) -> FoodEntry:
    """Parse a food entry row into a domain model."""
    common = {
        "id": UUID(str(row["id"])),
        "pet_id": UUID(str(row["pet_id"])),
        "brand_name": row.get("brand_name"),
        "product_name": row.get("product_name"),
        "daily_amount": float(row["daily_amount"]),
        "daily_amount_unit": str(row["daily_amount_unit"]),
        "date_started": _parse_date(row["date_started"]),
        "date_finished": (
            _parse_date(row["date_finished"]) if row.get("date_finished") else None
        ),
        "is_active": bool(row.get("is_active", False)),
        "created_at": _parse_timestamp(row["created_at"]),
        "updated_at": _parse_timestamp(row["updated_at"]),
    }
    if FoodCategory(str(row["category"])) is FoodCategory.DRY:
        return DryFoodEntry(
            **common,
            total_quantity=float(row["total_quantity"]),
            total_quantity_unit=str(row["total_quantity_unit"]),
        )
    return WetFoodEntry(
        **common,
        unit_count=int(row["unit_count"]),
        quantity_per_unit=float(row["quantity_per_unit"]),
        quantity_per_unit_unit=str(row["quantity_per_unit_unit"]),
    )


def _parse_date(value: object) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
