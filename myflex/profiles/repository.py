from __future__ import annotations

from typing import Any

from ..store.documents import DocumentStore
from .models import ProfileUpdate, UserProfile

_COLLECTION = "users"


def profile_path(user_id: str) -> str:
    return f"{_COLLECTION}/{user_id}"


def create_profile(store: DocumentStore, profile: UserProfile) -> UserProfile:
    data = profile.model_dump(by_alias=True, exclude={"id"})
    store.set(profile_path(profile.id), data)
    return profile


def get_profile(store: DocumentStore, user_id: str) -> UserProfile | None:
    doc = store.get(profile_path(user_id))
    return UserProfile.model_validate(doc) if doc else None


def update_profile(store: DocumentStore, user_id: str, body: ProfileUpdate) -> UserProfile:
    """Apply the owner's partial update, ignoring ``null`` fields.

    Raises ``KeyError`` if unknown.
    """
    changes: dict[str, Any] = body.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
    store.update(profile_path(user_id), changes)
    return get_profile(store, user_id)


def list_profiles(store: DocumentStore) -> list[UserProfile]:
    return [UserProfile.model_validate(d) for d in store.list(_COLLECTION)]
