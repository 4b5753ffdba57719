from __future__ import annotations

from unittest.mock import patch

import pandas as pd
from fastapi.testclient import TestClient

from myflex.app import app, bootstrap
from myflex.dishes.data_store import catalog_metadata, list_dishes
from myflex.dishes.ingest import (
    CANONICAL_COLUMNS,
    import_dishes_csv,
    load_catalog,
    normalize_frame,
    seed_dishes,
)
from myflex.store.documents import DocumentStore, get_store, reset_store

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def _fresh_app_store():
    reset_store()
    bootstrap(get_store())


# ── Ingestion ────────────────────────────────────────────────────────────


def test_load_catalog_reads_bundled_csv():
    docs = load_catalog()
    assert len(docs) == 49
    assert all(doc["name"] for doc in docs)
    assert sum(1 for doc in docs if not doc["isVerified"]) == 5
    bolo = next(d for d in docs if d["name"] == "Pâtes bolognaise")
    assert bolo["origin"] == "Italienne"
    assert bolo["type"] == "dinner"
    assert bolo["cookingTime"] == "30 min"


def test_normalize_frame_maps_aliases_and_fills_missing():
    raw = pd.DataFrame({
        "Nom": [" Tajine "],
        "Catégorie": ["Plat Unique"],
        "cuisine": ["Marocaine"],
        "meal_type": ["DINNER"],
    })
    frame = normalize_frame(raw)

    assert list(frame.columns) == CANONICAL_COLUMNS
    row = frame.iloc[0]
    assert row["name"] == "Tajine"
    assert row["category"] == "Plat Unique"
    assert row["origin"] == "Marocaine"
    assert row["type"] == "dinner"
    assert row["cookingTime"] == ""


def test_seed_dishes_is_idempotent():
    store = DocumentStore()
    assert seed_dishes(store) == 49
    assert seed_dishes(store) == 49
    assert store.count("dishes") == 49


def test_import_skips_blank_and_duplicate_names():
    store = DocumentStore()
    store.add("dishes", {"name": "Ratatouille", "category": "Healthy", "origin": "Française"})
    csv_text = (
        "name,category,origin,calories,isVerified\n"
        "ratatouille,Healthy,Française,300,true\n"
        ",Healthy,Française,,true\n"
        "Poulet yassa,Cuisine Africaine,Africaine,650,oui\n"
        "Poulet Yassa,Cuisine Africaine,Africaine,650,oui\n"
    )

    result = import_dishes_csv(csv_text, store)

    assert result == {"imported": 1, "skipped": 3}
    yassa = store.list("dishes", name="Poulet yassa")[0]
    assert yassa["isVerified"] is True
    assert yassa["calories"] == 650


def test_list_dishes_prefers_verified_when_asked():
    store = DocumentStore()
    store.add("dishes", {"name": "A", "isVerified": False})
    assert [d.name for d in list_dishes(store, verified_first=True)] == ["A"]

    store.add("dishes", {"name": "B", "isVerified": True})
    assert [d.name for d in list_dishes(store, verified_first=True)] == ["B"]
    assert [d.name for d in list_dishes(store)] == ["A", "B"]


def test_catalog_metadata():
    store = DocumentStore()
    store.add("dishes", {"name": "A", "category": "Pâtes", "origin": "Italienne"})
    store.add("dishes", {"name": "B", "category": "Healthy", "origin": "Italienne"})

    assert catalog_metadata(store) == {
        "categories": ["Healthy", "Pâtes"],
        "origins": ["Italienne"],
        "total_dishes": 2,
    }


# ── Endpoints ────────────────────────────────────────────────────────────


def test_metadata_endpoint_is_public():
    _fresh_app_store()
    resp = TestClient(app).get("/metadata")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_dishes"] == 49
    assert "Italienne" in body["origins"]


def test_dishes_requires_login():
    resp = TestClient(app).get("/dishes")
    assert resp.status_code == 401


def test_dishes_lists_catalog_with_camel_case_fields():
    _fresh_app_store()
    _login_user(client)
    resp = client.get("/dishes")
    assert resp.status_code == 200
    body = resp.json()
    assert len(body) == 49
    assert {"id", "name", "cookingTime", "isVerified"} <= set(body[0])


def test_admin_dish_crud():
    _fresh_app_store()
    _login_admin(client)

    resp = client.post("/admin/dishes", json={
        "name": "Poké bowl",
        "category": "Healthy",
        "origin": "Hawaïenne",
        "cookingTime": "15 min",
        "type": "Lunch",
    })
    assert resp.status_code == 201
    dish = resp.json()
    assert dish["type"] == "lunch"
    assert dish["isVerified"] is False

    resp = client.patch(f"/admin/dishes/{dish['id']}", json={"isVerified": True})
    assert resp.status_code == 200
    assert resp.json()["isVerified"] is True
    assert resp.json()["name"] == "Poké bowl"

    assert client.delete(f"/admin/dishes/{dish['id']}").status_code == 200
    assert client.delete(f"/admin/dishes/{dish['id']}").status_code == 404
    assert client.patch("/admin/dishes/missing", json={"name": "X"}).status_code == 404


def test_admin_dish_endpoints_forbidden_for_users():
    _login_user(client)
    resp = client.post("/admin/dishes", json={"name": "X", "category": "Y", "origin": "Z"})
    assert resp.status_code == 403


def test_admin_import_endpoint():
    _fresh_app_store()
    _login_admin(client)
    resp = client.post("/admin/dishes/import", json={
        "csv": "nom,categorie,origine\nMafé,Cuisine Africaine,Africaine\nQuiche lorraine,Plat Unique,Française\n",
    })
    assert resp.status_code == 200
    assert resp.json() == {"imported": 1, "skipped": 1}


def test_admin_import_rejects_empty_csv():
    _login_admin(client)
    resp = client.post("/admin/dishes/import", json={"csv": "\n"})
    assert resp.status_code == 400


def test_admin_seed_reports_count():
    _fresh_app_store()
    _login_admin(client)
    resp = client.post("/admin/dishes/seed")
    assert resp.status_code == 200
    assert resp.json() == {"count": 49}


@patch("myflex.llm.groq_client.Groq", side_effect=Exception("offline"))
def test_admin_dish_update_ignores_null_fields(mock_groq_cls):
    _fresh_app_store()
    _login_admin(client)
    dish = client.get("/dishes").json()[0]

    resp = client.patch(f"/admin/dishes/{dish['id']}", json={
        "category": None, "name": None, "cookingTime": "35 min",
    })
    assert resp.status_code == 200
    assert resp.json()["category"] == dish["category"]
    assert resp.json()["name"] == dish["name"]
    assert resp.json()["cookingTime"] == "35 min"

    assert client.get("/dishes").status_code == 200
    _login_user(client)
    assert client.post("/single-meal", json={"timeOfDay": "midi"}).status_code == 200
