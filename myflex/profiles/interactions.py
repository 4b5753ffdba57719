from __future__ import annotations

import logging
import threading
import time

from ..analytics.store import record_event
from ..store.documents import DocumentStore, Increment
from .models import InteractionEvent
from .repository import profile_path

logger = logging.getLogger(__name__)

INTERACTION_WEIGHTS: dict[str, int] = {
    "view": 1,
    "cook_start": 3,
    "cook_complete": 5,
    "like": 8,
    "dislike": -10,
}

MAX_LAST_INTERACTIONS = 20


def score_key(value: str | None) -> str:
    """Key under which an origin or category is scored.

    Dots would be read as nested fields by the store.
    """
    return (value or "").strip().lower().replace(".", " ")


# Serialises the read-modify-write of ``lastInteractions``.
_history_lock = threading.Lock()


def track_user_interaction(
    store: DocumentStore,
    user_id: str,
    dish_name: str,
    dish_origin: str,
    dish_category: str,
    event_type: InteractionEvent,
) -> bool:
    """Fold one dish interaction into the user's virtual profile.

    Origin and category scores move by the event weight, the interaction
    counter is bumped and the dish goes to the front of the recent history.
    Returns ``False`` (after logging) when the update cannot be applied.
    """
    weight = INTERACTION_WEIGHTS.get(event_type, 0)
    origin_key = score_key(dish_origin)
    category_key = score_key(dish_category)
    path = profile_path(user_id)

    changes: dict = {"virtualProfile.totalInteractions": Increment(1)}
    if origin_key:
        changes[f"virtualProfile.originScores.{origin_key}"] = Increment(weight)
    if category_key:
        changes[f"virtualProfile.categoryScores.{category_key}"] = Increment(weight)

    try:
        with _history_lock:
            doc = store.get(path)
            if doc is None:
                raise KeyError(path)
            history = (doc.get("virtualProfile") or {}).get("lastInteractions") or []
            history = [dish_name] + [name for name in history if name != dish_name]
            changes["virtualProfile.lastInteractions"] = history[:MAX_LAST_INTERACTIONS]
            store.update(path, changes)

        store.add(f"{path}/analytics", {
            "userId": user_id,
            "dishName": dish_name,
            "eventType": event_type,
            "origin": origin_key,
            "category": category_key,
            "createdAt": time.time(),
        })
    except KeyError:
        logger.warning("Interaction tracking failed: unknown user %s", user_id)
        return False

    record_event("interaction", {
        "user_id": user_id,
        "dish_name": dish_name,
        "event_type": event_type,
        "origin": origin_key,
        "category": category_key,
        "weight": weight,
    })
    return True
