"""Food supply endpoints scoped to a pet."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

if TYPE_CHECKING:
    from pet_food_tracker.containers import AppContainer
    from pet_food_tracker.domain.food import FoodEntry, FoodEntryView
    from pet_food_tracker.services.food import FoodService

router = APIRouter(prefix="/pets/{pet_id}/food", tags=["food"])


class FinishDateRequest(BaseModel):
    """Body for correcting a finish date."""

    date_finished: str


async def require_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Return the caller id set by the upstream auth layer."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    return x_user_id


def _food_service(request: Request) -> FoodService:
    container: AppContainer = request.app.state.container
    return container.food_service


@router.get("")
async def list_entries(
    pet_id: str,
    request: Request,
    category: str | None = None,
    user_id: str = Depends(require_user_id),
) -> dict[str, object]:
    """Return every entry for a pet, newest first."""
    views = await _food_service(request).list_all(pet_id, user_id, category)
    return {"entries": [serialize_view(view) for view in views]}


@router.get("/active")
async def list_active_entries(
    pet_id: str,
    request: Request,
    category: str | None = None,
    user_id: str = Depends(require_user_id),
) -> dict[str, object]:
    """Return active entries with remaining supply."""
    views = await _food_service(request).list_active(pet_id, user_id, category)
    return {"entries": [serialize_view(view) for view in views]}


@router.get("/finished")
async def list_finished_entries(
    pet_id: str,
    request: Request,
    category: str | None = None,
    limit: str | None = None,
    user_id: str = Depends(require_user_id),
) -> dict[str, object]:
    """Return recently finished entries with consumption reports."""
    views = await _food_service(request).list_finished(
        pet_id, user_id, category, limit
    )
    return {"entries": [serialize_view(view) for view in views]}


@router.get("/{entry_id}")
async def get_entry(
    pet_id: str,
    entry_id: str,
    request: Request,
    user_id: str = Depends(require_user_id),
) -> dict[str, object]:
    """Return a single entry with its projections."""
    view = await _food_service(request).get_entry(pet_id, entry_id, user_id)
    return serialize_view(view)


@router.post("/{category}", status_code=status.HTTP_201_CREATED)
async def create_entry(
    pet_id: str,
    category: str,
    request: Request,
    payload: dict[str, Any] = Body(...),
    user_id: str = Depends(require_user_id),
) -> dict[str, object]:
    """Start tracking a new supply."""
    entry = await _food_service(request).create_entry(
        pet_id, user_id, category, payload
    )
    return serialize_entry(entry)


@router.post("/{entry_id}/finish")
async def finish_entry(
    pet_id: str,
    entry_id: str,
    request: Request,
    user_id: str = Depends(require_user_id),
) -> dict[str, object]:
    """Mark an active supply as finished today."""
    entry = await _food_service(request).mark_finished(pet_id, entry_id, user_id)
    return serialize_entry(entry)


@router.patch("/{entry_id}/finish-date")
async def correct_finish_date(
    pet_id: str,
    entry_id: str,
    body: FinishDateRequest,
    request: Request,
    user_id: str = Depends(require_user_id),
) -> dict[str, object]:
    """Correct when a finished supply ran out."""
    entry = await _food_service(request).update_finish_date(
        pet_id, entry_id, user_id, body.date_finished
    )
    return serialize_entry(entry)


@router.patch("/{category}/{entry_id}")
async def update_entry(  # noqa: PLR0913
    pet_id: str,
    category: str,
    entry_id: str,
    request: Request,
    payload: dict[str, Any] = Body(...),
    user_id: str = Depends(require_user_id),
) -> dict[str, object]:
    """Apply a partial update to an active supply."""
    entry = await _food_service(request).update_entry(
        pet_id, entry_id, user_id, category, payload
    )
    return serialize_entry(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    pet_id: str,
    entry_id: str,
    request: Request,
    user_id: str = Depends(require_user_id),
) -> None:
    """Permanently delete a supply record."""
    await _food_service(request).delete_entry(pet_id, entry_id, user_id)


def serialize_entry(entry: FoodEntry) -> dict[str, object]:
    """Convert an entry to a JSON-ready dict."""
    return jsonable_encoder(asdict(entry))


def serialize_view(view: FoodEntryView) -> dict[str, object]:
    """Flatten an enriched entry into a JSON-ready dict."""
    payload = serialize_entry(view.entry)
    payload["remaining"] = jsonable_encoder(view.remaining)
    payload["consumption"] = jsonable_encoder(view.consumption)
    return payload
