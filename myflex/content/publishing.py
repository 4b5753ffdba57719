from __future__ import annotations

import logging
import time

from ..profiles.repository import list_profiles, profile_path
from ..store.documents import DocumentStore
from .models import (
    Notification,
    NotificationSend,
    Promotion,
    PromotionCreate,
    PromotionUpdate,
)

logger = logging.getLogger(__name__)

_PROMOTIONS = "promotions"


# ── Promotions ───────────────────────────────────────────────────────────


def list_promotions(store: DocumentStore, active_only: bool = False) -> list[Promotion]:
    docs = store.list(_PROMOTIONS, isActive=True) if active_only else store.list(_PROMOTIONS)
    promotions = [Promotion.model_validate(d) for d in docs]
    return sorted(promotions, key=lambda p: p.created_at, reverse=True)


def create_promotion(store: DocumentStore, body: PromotionCreate) -> Promotion:
    data = {**body.model_dump(by_alias=True), "createdAt": time.time()}
    promo_id = store.add(_PROMOTIONS, data)
    return Promotion.model_validate({**data, "id": promo_id})


def update_promotion(store: DocumentStore, promo_id: str, body: PromotionUpdate) -> Promotion:
    """Raises ``KeyError`` for unknown promotions. ``null`` fields are ignored."""
    changes = body.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    store.update(f"{_PROMOTIONS}/{promo_id}", changes)
    return Promotion.model_validate(store.get(f"{_PROMOTIONS}/{promo_id}"))


def delete_promotion(store: DocumentStore, promo_id: str) -> bool:
    return store.delete(f"{_PROMOTIONS}/{promo_id}")


# ── Notifications ────────────────────────────────────────────────────────


def _notifications_path(user_id: str) -> str:
    return f"{profile_path(user_id)}/notifications"


def send_notification(store: DocumentStore, body: NotificationSend) -> int:
    """Deliver a notification to one user, or to all users when no target is
    given. Returns the number delivered; raises ``KeyError`` for an unknown
    target."""
    if body.user_id:
        if store.get(profile_path(body.user_id)) is None:
            raise KeyError(body.user_id)
        recipients = [body.user_id]
    else:
        recipients = [p.id for p in list_profiles(store)]

    data = {
        "title": body.title,
        "body": body.body,
        "link": body.link,
        "isRead": False,
        "createdAt": time.time(),
    }
    for user_id in recipients:
        store.add(_notifications_path(user_id), data)

    logger.info("Notification %r sent to %d user(s)", body.title, len(recipients))
    return len(recipients)


def list_notifications(store: DocumentStore, user_id: str) -> list[Notification]:
    items = [Notification.model_validate(d) for d in store.list(_notifications_path(user_id))]
    return sorted(items, key=lambda n: n.created_at, reverse=True)


def mark_notification_read(store: DocumentStore, user_id: str, notification_id: str) -> None:
    """Raises ``KeyError`` for unknown notifications."""
    store.update(f"{_notifications_path(user_id)}/{notification_id}", {"isRead": True})
