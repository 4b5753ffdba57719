from __future__ import annotations

import threading
from typing import Any

import bcrypt
from pydantic import BaseModel, Field

from ..profiles.models import UserProfile
from ..profiles.repository import create_profile, get_profile
from ..store.documents import DocumentStore

_users: dict[str, dict[str, Any]] = {}
_lock = threading.Lock()


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=40, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    country: str | None = None
    origin: str | None = None


class UsernameTaken(Exception):
    pass


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def register(store: DocumentStore, body: RegisterRequest, role: str = "user") -> dict[str, Any]:
    """Create credentials and a profile. Raises ``UsernameTaken``."""
    with _lock:
        if body.username in _users:
            raise UsernameTaken(body.username)
        _users[body.username] = {"password_hash": _hash_password(body.password), "role": role}

    create_profile(store, UserProfile(
        id=body.username,
        name=body.name,
        email=body.email,
        country=body.country,
        origin=body.origin,
        role=role,
    ))
    return {"username": body.username, "role": role}


def seed_demo_accounts(store: DocumentStore) -> None:
    """Ensure the demo ``user`` and ``admin`` accounts and their profiles exist."""
    demo = [
        (RegisterRequest(username="user", password="user123", name="Demo User",
                         email="user@myflex.app", country="France", origin="Italienne"), "user"),
        (RegisterRequest(username="admin", password="admin123", name="Admin",
                         email="admin@myflex.app", country="France"), "admin"),
    ]
    for body, role in demo:
        if body.username not in _users:
            register(store, body, role=role)
        elif get_profile(store, body.username) is None:
            create_profile(store, UserProfile(
                id=body.username, name=body.name, email=body.email,
                country=body.country, origin=body.origin, role=role,
            ))


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, role}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username, "role": record["role"]}
    return None
