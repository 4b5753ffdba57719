from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CatalogConfig:
    seed_csv: Path = Path(__file__).resolve().parent.parent / "data" / "dishes.csv"
    collection: str = "dishes"


DEFAULT_CATALOG_CONFIG = CatalogConfig()
