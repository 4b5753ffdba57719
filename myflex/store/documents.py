from __future__ import annotations

import copy
import threading
import uuid
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Increment:
    """Numeric delta applied by :meth:`DocumentStore.update`."""

    amount: float


def _split(path: str) -> list[str]:
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        raise ValueError("Empty path")
    return parts


def _collection_key(path: str) -> str:
    parts = _split(path)
    if len(parts) % 2 != 1:
        raise ValueError(f"Not a collection path: {path!r}")
    return "/".join(parts)


def _document_key(path: str) -> tuple[str, str]:
    parts = _split(path)
    if len(parts) % 2 != 0:
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(parts[:-1]), parts[-1]


def _apply_change(doc: dict[str, Any], dotted_key: str, value: Any) -> None:
    keys = dotted_key.split(".")
    target = doc
    for key in keys[:-1]:
        nested = target.get(key)
        if not isinstance(nested, dict):
            nested = {}
            target[key] = nested
        target = nested

    last = keys[-1]
    if isinstance(value, Increment):
        current = target.get(last) or 0
        target[last] = current + value.amount
    else:
        target[last] = copy.deepcopy(value)


class DocumentStore:
    """In-process document database.

    Collections hold documents keyed by id; a document at
    ``users/u1`` owns the sub-collections ``users/u1/<name>``.
    Every read returns a deep copy so callers never mutate stored state.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def add(self, collection: str, data: dict[str, Any]) -> str:
        key = _collection_key(collection)
        doc_id = uuid.uuid4().hex[:20]
        with self._lock:
            self._collections.setdefault(key, {})[doc_id] = copy.deepcopy(data)
        return doc_id

    def set(self, doc_path: str, data: dict[str, Any], merge: bool = False) -> None:
        key, doc_id = _document_key(doc_path)
        with self._lock:
            docs = self._collections.setdefault(key, {})
            if merge and doc_id in docs:
                for field, value in data.items():
                    _apply_change(docs[doc_id], field, value)
            else:
                docs[doc_id] = copy.deepcopy(data)

    def get(self, doc_path: str) -> dict[str, Any] | None:
        key, doc_id = _document_key(doc_path)
        with self._lock:
            doc = self._collections.get(key, {}).get(doc_id)
            if doc is None:
                return None
            return {**copy.deepcopy(doc), "id": doc_id}

    def update(self, doc_path: str, changes: dict[str, Any]) -> None:
        key, doc_id = _document_key(doc_path)
        with self._lock:
            doc = self._collections.get(key, {}).get(doc_id)
            if doc is None:
                raise KeyError(doc_path)
            for field, value in changes.items():
                _apply_change(doc, field, value)

    def delete(self, doc_path: str) -> bool:
        key, doc_id = _document_key(doc_path)
        prefix = f"{key}/{doc_id}/"
        with self._lock:
            removed = self._collections.get(key, {}).pop(doc_id, None) is not None
            for sub in [k for k in self._collections if k.startswith(prefix)]:
                del self._collections[sub]
        return removed

    def list(self, collection: str, **equals: Any) -> list[dict[str, Any]]:
        key = _collection_key(collection)
        with self._lock:
            docs = list(self._collections.get(key, {}).items())
            results = []
            for doc_id, doc in docs:
                if all(doc.get(field) == value for field, value in equals.items()):
                    results.append({**copy.deepcopy(doc), "id": doc_id})
        return results

    def count(self, collection: str) -> int:
        key = _collection_key(collection)
        with self._lock:
            return len(self._collections.get(key, {}))

    def clear(self) -> None:
        with self._lock:
            self._collections.clear()


_store: DocumentStore | None = None


def get_store() -> DocumentStore:
    """Return the process-wide document store, creating it on first call."""
    global _store
    if _store is None:
        _store = DocumentStore()
    return _store


def reset_store() -> None:
    get_store().clear()
