"""Supabase implementation for pet ownership checks."""

import asyncio
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from pet_food_tracker.domain.errors import NotFoundError
from pet_food_tracker.services.food import PetOwnershipChecker


@dataclass
class SupabasePetRepository(PetOwnershipChecker):
    """Supabase-backed ownership lookups against the pets table."""

    client: Client
    table_name: str = "pets"

    async def verify_ownership(self, pet_id: UUID, user_id: str) -> None:
        """Raise NotFoundError unless the user owns the active pet."""
        query = (
            self.client.table(self.table_name)
            .select("id")
            .eq("id", str(pet_id))
            .eq("user_id", user_id)
            .eq("is_active", True)
            .limit(1)
        )
        response = await asyncio.to_thread(query.execute)
        if not response.data:
            raise NotFoundError("Pet not found")
