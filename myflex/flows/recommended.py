from __future__ import annotations

import logging
import random
import time
from typing import Any

from ..dishes.data_store import list_dishes
from ..dishes.models import Dish, RecommendedDish
from ..dishes.scoring import top_candidates
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import complete_json
from ..profiles.models import UserProfile
from ..profiles.repository import get_profile
from ..store.documents import DocumentStore
from .common import record_flow

logger = logging.getLogger(__name__)


def _build_prompt(profile: UserProfile, candidates: list[tuple[Dish, float]], count: int) -> str:
    lines = [
        "You are the MyFlex recommendation engine. Pick the "
        f"{count} best dishes for this user among the candidates below.",
        "",
        "## User profile",
        f"- Origin: {profile.origin or 'Unknown'}",
        f"- Current country: {profile.country or 'Unknown'}",
        f"- Objectives: {profile.main_objective or 'Not specified'}",
        f"- Preferences: {profile.preferences or 'Varied'}",
        "",
        "## Candidates",
    ]
    for i, (dish, _) in enumerate(candidates, start=1):
        lines.append(
            f"{i}. {dish.name} (Origin: {dish.origin}, Category: {dish.category}, "
            f"Type: {dish.type or 'N/A'}, Suggested moment: {dish.moment_suggest or 'N/A'})"
        )
    lines += [
        "",
        "## Instructions",
        f"1. Select the {count} most relevant dishes.",
        "2. Build a balanced mix: dishes from their origin, from their current "
        "country, and discoveries.",
        '3. For each dish give a short, engaging "matchReason" written in French.',
        '4. Answer ONLY with a JSON object with a "recommendations" key holding a list.',
        "",
        "Example:",
        '{"recommendations": [{"name": "Exact candidate name", "matchReason": "..."}]}',
    ]
    return "\n".join(lines)


def _match_candidate(
    name: str,
    candidates: list[tuple[Dish, float]],
) -> tuple[Dish, float]:
    """Exact name, then a candidate containing the name, then the best one."""
    for pair in candidates:
        if pair[0].name == name:
            return pair
    lowered = name.lower()
    for pair in candidates:
        if lowered in pair[0].name.lower():
            return pair
    return candidates[0]


def _to_recommended(dish: Dish, score: float, reason: str | None) -> RecommendedDish:
    return RecommendedDish(
        **dish.model_dump(),
        relevance_score=score,
        match_reason=reason,
    )


def _refine(
    llm_items: list[Any],
    candidates: list[tuple[Dish, float]],
    count: int,
) -> list[RecommendedDish]:
    results: list[RecommendedDish] = []
    used: set[str] = set()
    for item in llm_items:
        if len(results) >= count:
            break
        if not isinstance(item, dict):
            continue
        name = str(item.get("name") or "").strip()
        if not name:
            continue
        dish, score = _match_candidate(name, candidates)
        if dish.id in used:
            continue
        used.add(dish.id)
        reason = item.get("matchReason")
        results.append(_to_recommended(dish, score, reason if isinstance(reason, str) else None))

    # Top up from the heuristic order when the model returned too few.
    for dish, score in candidates:
        if len(results) >= count:
            break
        if dish.id not in used:
            used.add(dish.id)
            results.append(_to_recommended(dish, score, None))
    return results


def suggest_recommended_dishes(
    store: DocumentStore,
    user_id: str,
    count: int = 6,
    time_of_day: str | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    rng: random.Random | None = None,
) -> list[RecommendedDish]:
    """
    Recommend ``count`` dishes for a user.

    Verified dishes are scored against the user's origin, country and
    virtual profile; the ``2 * count`` best go to the LLM, which picks the
    final set and writes a reason for each. Without a usable LLM answer the
    heuristic ranking is returned as is. Any unexpected error yields ``[]``.
    """
    started = time.time()
    try:
        profile = get_profile(store, user_id)
        if profile is None:
            logger.error("Recommendations requested for unknown user %s", user_id)
            return []

        dishes = list_dishes(store, verified_first=True)
        if not dishes:
            return []

        candidates = top_candidates(
            dishes, profile, limit=count * 2, time_of_day=time_of_day, rng=rng,
        )

        parsed = complete_json(
            _build_prompt(profile, candidates, count),
            temperature=0.5,
            config=config,
            context="suggest_recommended_dishes",
        )
        llm_items = parsed.get("recommendations") if parsed else None
        fallback = not isinstance(llm_items, list) or not llm_items
        if fallback:
            logger.warning("No usable LLM recommendations, keeping heuristic ranking")
            llm_items = []

        results = _refine(llm_items, candidates, count)
        record_flow("suggest_recommended_dishes", started, fallback, len(results))
        return results

    except Exception:
        logger.exception("Error in suggest_recommended_dishes")
        record_flow("suggest_recommended_dishes", started, True, 0)
        return []
