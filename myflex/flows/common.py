from __future__ import annotations

import json
import re
import time
from typing import Any

from ..analytics.store import record_event
from ..dishes.models import Dish
from ..profiles.models import AIPersonality

_WHITESPACE = re.compile(r"\s")


def image_hint(dish: Dish) -> str:
    return f"{dish.category.lower()} {dish.origin.lower()}"[:50]


def image_url(dish: Dish) -> str:
    """The dish image, or a stable placeholder seeded by the dish name."""
    if dish.image_url:
        return dish.image_url
    return f"https://picsum.photos/seed/{_WHITESPACE.sub('-', dish.name)}/400/300"


def personality_json(personality: AIPersonality | None) -> str | None:
    if personality is None:
        return None
    data = personality.model_dump(by_alias=True, exclude_none=True)
    return json.dumps(data, ensure_ascii=False) if data else None


def find_by_name(dishes: list[Dish], name: Any) -> Dish | None:
    """Case-insensitive exact lookup of an LLM-chosen dish name."""
    if not isinstance(name, str) or not name.strip():
        return None
    wanted = name.strip().lower()
    for dish in dishes:
        if dish.name.lower() == wanted:
            return dish
    return None


def record_flow(flow: str, started: float, fallback: bool, results: int) -> None:
    record_event("flow", {
        "flow": flow,
        "fallback": fallback,
        "results": results,
        "response_time_ms": round((time.time() - started) * 1000, 1),
    })
