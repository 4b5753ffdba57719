from __future__ import annotations

import pytest

from myflex.store.documents import DocumentStore, Increment


def test_add_and_get_returns_copy_with_id():
    store = DocumentStore()
    doc_id = store.add("dishes", {"name": "Ratatouille", "tags": ["veggie"]})

    doc = store.get(f"dishes/{doc_id}")
    assert doc == {"id": doc_id, "name": "Ratatouille", "tags": ["veggie"]}

    doc["tags"].append("mutated")
    assert store.get(f"dishes/{doc_id}")["tags"] == ["veggie"]


def test_get_missing_document_is_none():
    assert DocumentStore().get("users/nobody") is None


def test_invalid_paths_raise():
    store = DocumentStore()
    with pytest.raises(ValueError):
        store.add("users/u1", {})
    with pytest.raises(ValueError):
        store.get("users")


def test_update_dotted_paths_and_increments():
    store = DocumentStore()
    store.set("users/u1", {"xp": 10})
    store.update("users/u1", {
        "xp": Increment(5),
        "virtualProfile.originScores.italienne": Increment(8),
        "virtualProfile.lastInteractions": ["Pizza maison"],
    })
    store.update("users/u1", {"virtualProfile.originScores.italienne": Increment(-10)})

    doc = store.get("users/u1")
    assert doc["xp"] == 15
    assert doc["virtualProfile"]["originScores"] == {"italienne": -2}
    assert doc["virtualProfile"]["lastInteractions"] == ["Pizza maison"]


def test_update_missing_document_raises_key_error():
    with pytest.raises(KeyError):
        DocumentStore().update("users/ghost", {"xp": 1})


def test_set_merge_keeps_other_fields():
    store = DocumentStore()
    store.set("users/u1", {"name": "A", "xp": 1})
    store.set("users/u1", {"xp": 2}, merge=True)
    assert store.get("users/u1") == {"id": "u1", "name": "A", "xp": 2}


def test_list_filters_by_equality_in_insertion_order():
    store = DocumentStore()
    store.add("dishes", {"name": "A", "isVerified": True})
    store.add("dishes", {"name": "B", "isVerified": False})
    store.add("dishes", {"name": "C", "isVerified": True})

    assert [d["name"] for d in store.list("dishes")] == ["A", "B", "C"]
    assert [d["name"] for d in store.list("dishes", isVerified=True)] == ["A", "C"]
    assert store.count("dishes") == 3


def test_delete_drops_sub_collections():
    store = DocumentStore()
    store.set("users/u1", {"name": "A"})
    store.add("users/u1/fridge", {"name": "Oeufs"})

    assert store.delete("users/u1") is True
    assert store.list("users/u1/fridge") == []
    assert store.delete("users/u1") is False
