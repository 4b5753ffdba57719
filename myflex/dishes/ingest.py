from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, List

import pandas as pd

from ..store.documents import DocumentStore
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig

logger = logging.getLogger(__name__)

CANONICAL_COLUMNS: List[str] = [
    "name",
    "category",
    "origin",
    "cookingTime",
    "type",
    "momentSuggest",
    "imageUrl",
    "recipe",
    "calories",
    "isVerified",
]

# Admin exports come from spreadsheets with French or snake_case headers.
COLUMN_ALIASES: dict[str, List[str]] = {
    "name": ["name", "nom", "dish", "plat"],
    "category": ["category", "categorie", "catégorie"],
    "origin": ["origin", "origine", "cuisine"],
    "cookingTime": ["cookingTime", "cooking_time", "temps", "temps_de_cuisson"],
    "type": ["type", "meal_type"],
    "momentSuggest": ["momentSuggest", "moment_suggest", "moment"],
    "imageUrl": ["imageUrl", "image_url", "image"],
    "recipe": ["recipe", "recette"],
    "calories": ["calories", "kcal"],
    "isVerified": ["isVerified", "is_verified", "verified", "verifie"],
}

_TRUE_VALUES = {"true", "1", "yes", "oui", "y"}


def _parse_bool(value: Any) -> bool:
    return str(value).strip().lower() in _TRUE_VALUES


def _parse_calories(value: Any) -> int | None:
    number = pd.to_numeric(value, errors="coerce")
    if pd.isna(number):
        return None
    return max(0, int(number))


def normalize_frame(raw: pd.DataFrame) -> pd.DataFrame:
    """Map raw columns onto the canonical dish columns.

    Missing columns are filled with empty strings; text is stripped and
    ``type`` / ``momentSuggest`` are lower-cased.
    """
    lookup = {str(col).strip().lower(): col for col in raw.columns}

    def _first_present(aliases: List[str]) -> str | None:
        for alias in aliases:
            if alias.lower() in lookup:
                return lookup[alias.lower()]
        return None

    canonical = pd.DataFrame(index=raw.index)
    for column in CANONICAL_COLUMNS:
        source = _first_present(COLUMN_ALIASES[column])
        if source is None:
            canonical[column] = ""
        else:
            canonical[column] = raw[source].fillna("").astype(str).str.strip()

    canonical["type"] = canonical["type"].str.lower()
    canonical["momentSuggest"] = canonical["momentSuggest"].str.lower()
    return canonical[CANONICAL_COLUMNS]


def frame_to_documents(frame: pd.DataFrame) -> list[dict[str, Any]]:
    """Turn a canonical frame into dish documents, dropping nameless rows."""
    documents: list[dict[str, Any]] = []
    for _, row in frame.iterrows():
        if not row["name"]:
            continue
        doc: dict[str, Any] = {
            "name": row["name"],
            "category": row["category"],
            "origin": row["origin"],
            "cookingTime": row["cookingTime"],
            "type": row["type"],
            "isVerified": _parse_bool(row["isVerified"]),
        }
        for optional in ("momentSuggest", "imageUrl", "recipe"):
            if row[optional]:
                doc[optional] = row[optional]
        calories = _parse_calories(row["calories"])
        if calories is not None:
            doc["calories"] = calories
        documents.append(doc)
    return documents


def read_csv_text(text: str) -> pd.DataFrame:
    raw = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    return normalize_frame(raw)


def load_catalog(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> list[dict[str, Any]]:
    """Read the bundled seed catalog into dish documents."""
    path: Path = config.seed_csv
    raw = pd.read_csv(path, dtype=str, keep_default_na=False)
    return frame_to_documents(normalize_frame(raw))


def seed_dishes(
    store: DocumentStore,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> int:
    """Populate the dish collection from the seed CSV when it is empty.

    Returns the number of dishes in the collection afterwards.
    """
    existing = store.count(config.collection)
    if existing:
        logger.info("Dish collection already initialised (%d dishes)", existing)
        return existing

    documents = load_catalog(config)
    for doc in documents:
        store.add(config.collection, doc)
    logger.info("Seeded %d dishes from %s", len(documents), config.seed_csv)
    return len(documents)


def import_dishes_csv(
    text: str,
    store: DocumentStore,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> dict[str, int]:
    """Bulk-import dishes from CSV text, skipping blank and duplicate names."""
    frame = read_csv_text(text)
    known = {d.get("name", "").strip().lower() for d in store.list(config.collection)}

    imported = 0
    skipped = int((frame["name"] == "").sum())
    for doc in frame_to_documents(frame):
        key = doc["name"].lower()
        if key in known:
            skipped += 1
            continue
        store.add(config.collection, doc)
        known.add(key)
        imported += 1

    logger.info("Dish import finished: %d imported, %d skipped", imported, skipped)
    return {"imported": imported, "skipped": skipped}
