from __future__ import annotations

from pydantic import BaseModel, Field

from ..profiles.repository import profile_path
from ..store.documents import DocumentStore


class FridgeItem(BaseModel):
    id: str
    name: str


class FridgeItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)


def _fridge_path(user_id: str) -> str:
    return f"{profile_path(user_id)}/fridge"


def list_items(store: DocumentStore, user_id: str) -> list[FridgeItem]:
    return [FridgeItem.model_validate(d) for d in store.list(_fridge_path(user_id))]


def add_item(store: DocumentStore, user_id: str, name: str) -> FridgeItem:
    """Add an ingredient. Raises ``ValueError`` for blanks and duplicates."""
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Item name is empty")
    if any(item.name.lower() == cleaned.lower() for item in list_items(store, user_id)):
        raise ValueError(f"{cleaned!r} is already in the fridge")

    item_id = store.add(_fridge_path(user_id), {"name": cleaned})
    return FridgeItem(id=item_id, name=cleaned)


def remove_item(store: DocumentStore, user_id: str, item_id: str) -> bool:
    return store.delete(f"{_fridge_path(user_id)}/{item_id}")
