from __future__ import annotations

from typing import Any

from ..store.documents import DocumentStore
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import Dish, DishCreate, DishUpdate

_COLLECTION = DEFAULT_CATALOG_CONFIG.collection


def _to_dish(doc: dict[str, Any]) -> Dish:
    return Dish.model_validate(doc)


def list_dishes(store: DocumentStore, verified_first: bool = False) -> list[Dish]:
    """Return every dish, or only verified dishes when any exist and
    ``verified_first`` is set."""
    if verified_first:
        verified = store.list(_COLLECTION, isVerified=True)
        if verified:
            return [_to_dish(d) for d in verified]
    return [_to_dish(d) for d in store.list(_COLLECTION)]


def get_dish(store: DocumentStore, dish_id: str) -> Dish | None:
    doc = store.get(f"{_COLLECTION}/{dish_id}")
    return _to_dish(doc) if doc else None


def create_dish(store: DocumentStore, body: DishCreate) -> Dish:
    data = body.model_dump(by_alias=True, exclude_none=True)
    data["type"] = data.get("type", "").lower()
    dish_id = store.add(_COLLECTION, data)
    return _to_dish({**data, "id": dish_id})


def update_dish(store: DocumentStore, dish_id: str, body: DishUpdate) -> Dish:
    """Apply a partial update; ``null`` fields are left unchanged.

    Raises ``KeyError`` for unknown dishes.
    """
    changes = body.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    if "type" in changes:
        changes["type"] = changes["type"].lower()
    store.update(f"{_COLLECTION}/{dish_id}", changes)
    return get_dish(store, dish_id)


def delete_dish(store: DocumentStore, dish_id: str) -> bool:
    return store.delete(f"{_COLLECTION}/{dish_id}")


def catalog_metadata(store: DocumentStore, config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> dict:
    docs = store.list(config.collection)
    categories = sorted({d["category"] for d in docs if d.get("category")})
    origins = sorted({d["origin"] for d in docs if d.get("origin")})
    return {"categories": categories, "origins": origins, "total_dishes": len(docs)}
