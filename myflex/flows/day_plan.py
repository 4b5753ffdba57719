from __future__ import annotations

import logging
import random
import time

from ..dishes.data_store import list_dishes
from ..dishes.models import Dish
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import complete_json
from ..profiles.models import AIPersonality
from ..store.documents import DocumentStore
from .common import find_by_name, personality_json, record_flow
from .models import DayPlanMeal

logger = logging.getLogger(__name__)

DAY_MEAL_TYPES = ("breakfast", "lunch", "dinner")
MAIN_COURSE_TYPES = {"lunch", "dinner", "plat quotidien", "plat unique", ""}


def meal_pool(dishes: list[Dish], meal_type: str) -> list[Dish]:
    """Dishes eligible for ``meal_type``, widening the filter until non-empty."""
    pool = [d for d in dishes if (d.type or "").lower() == meal_type]
    if not pool:
        if meal_type == "breakfast":
            pool = [d for d in dishes if (d.category or "").lower() == "healthy"]
        else:
            pool = [d for d in dishes if (d.type or "").lower() in MAIN_COURSE_TYPES]
    return pool or dishes


def _build_prompt(
    pools: dict[str, list[Dish]],
    dietary_goals: str,
    personality: AIPersonality | None,
) -> str:
    prompt = (
        "You are an expert nutritionist planning a full day of home-cooked meals. "
        "Pick one dish for each meal from its own list so the day is balanced and varied. "
        "Never pick the same dish twice.\n\n"
        f'User\'s dietary goals: "{dietary_goals}"\n'
    )
    prefs = personality_json(personality)
    if prefs:
        prompt += f"Consider their preferences: {prefs}\n"
    for meal_type in DAY_MEAL_TYPES:
        names = "\n".join(f"- {d.name}" for d in pools[meal_type])
        prompt += f"\n## {meal_type}\n{names}\n"
    prompt += (
        '\nAnswer ONLY with a JSON object with the keys "breakfast", "lunch" and "dinner", '
        "each holding the exact name of the chosen dish."
    )
    return prompt


def _random_cook(household: list[str], rng: random.Random) -> str | None:
    return rng.choice(household) if household else None


def suggest_day_plan(
    store: DocumentStore,
    dietary_goals: str,
    personality: AIPersonality | None = None,
    household_members: list[str] | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    rng: random.Random | None = None,
) -> list[DayPlanMeal]:
    """
    Plan breakfast, lunch and dinner and assign a cook to each meal.

    Each meal draws from its own pool (see :func:`meal_pool`) minus the
    dishes already planned that day. An LLM pick is kept only when it
    belongs to that pool; otherwise a random dish from the pool is used.
    """
    rng = rng or random.Random()
    started = time.time()
    household = [m for m in (household_members or []) if m and m.strip()]

    try:
        dishes = list_dishes(store)
        if not dishes:
            record_flow("suggest_day_plan", started, True, 0)
            return []

        pools = {meal_type: meal_pool(dishes, meal_type) for meal_type in DAY_MEAL_TYPES}
        picks = complete_json(
            _build_prompt(pools, dietary_goals, personality),
            temperature=0.5,
            config=config,
            context="suggest_day_plan",
        ) or {}

        fallback = False
        meals: list[DayPlanMeal] = []
        for meal_type in DAY_MEAL_TYPES:
            planned = {m.name for m in meals}
            available = [d for d in pools[meal_type] if d.name not in planned]
            selectable = available or pools[meal_type]

            dish = find_by_name(selectable, picks.get(meal_type))
            if dish is None:
                fallback = True
                dish = rng.choice(selectable)

            meals.append(DayPlanMeal(
                name=dish.name,
                type=meal_type,
                calories=rng.randint(250, 599),
                cooked_by=_random_cook(household, rng),
                image_url=dish.image_url,
            ))

        record_flow("suggest_day_plan", started, fallback, len(meals))
        return meals

    except Exception:
        logger.exception("Error in suggest_day_plan")
        record_flow("suggest_day_plan", started, True, 0)
        return []
