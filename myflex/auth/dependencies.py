from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from ..profiles.models import UserProfile
from ..profiles.repository import get_profile
from ..store.documents import DocumentStore, get_store


def get_document_store() -> DocumentStore:
    return get_store()


def require_user(request: Request) -> dict:
    """Raise 401 if no user is logged in."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(user: dict = Depends(require_user)) -> dict:
    """Raise 401 if not logged in, 403 if not admin."""
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def require_profile(
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_document_store),
) -> UserProfile:
    """Load the logged-in user's profile; 401 when it no longer exists."""
    profile = get_profile(store, user["username"])
    if profile is None:
        raise HTTPException(status_code=401, detail="Profile not found")
    return profile
