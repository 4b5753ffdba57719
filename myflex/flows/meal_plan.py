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
from .common import find_by_name, image_hint, image_url, personality_json, record_flow
from .models import MealSuggestion

logger = logging.getLogger(__name__)

PLAN_MEAL_TYPES = ("breakfast", "lunch", "dinner")
FALLBACK_CALORIES = {"breakfast": 350, "lunch": 550, "dinner": 600}


def _build_prompt(dishes: list[Dish], dietary_goals: str, personality: AIPersonality | None) -> str:
    dish_list = "\n".join(
        f'- "{d.name}" (Type: {d.type or "N/A"}, Category: {d.category})' for d in dishes
    )
    prompt = (
        "You are an expert nutritionist. Select three dishes from the provided list "
        "to create a balanced and appealing one-day meal plan (breakfast, lunch, dinner).\n\n"
        f'User\'s dietary goals: "{dietary_goals}"\n'
    )
    prefs = personality_json(personality)
    if prefs:
        prompt += f"\nConsider their preferences: {prefs}\n"
    prompt += (
        f"\nHere is the list of available dishes:\n{dish_list}\n\n"
        'Your response MUST be a JSON object with three keys: "breakfast", "lunch" and '
        '"dinner". The value for each key must be ONLY the name of the chosen dish, '
        "exactly as it appears in the list.\n\n"
        'Example: {"breakfast": "Pancakes protéinés", "lunch": "Salade niçoise", '
        '"dinner": "Saumon au four"}'
    )
    return prompt


def _suggestion(dish: Dish, meal_type: str, calories: int) -> MealSuggestion:
    return MealSuggestion(
        name=dish.name,
        calories=calories,
        cooking_time=dish.cooking_time,
        image_hint=image_hint(dish),
        image_url=image_url(dish),
        type=meal_type,
    )


def random_meal_plan(dishes: list[Dish], rng: random.Random) -> list[MealSuggestion]:
    """Three distinct random dishes with fixed calorie placeholders."""
    if len(dishes) < len(PLAN_MEAL_TYPES):
        return []
    picks = rng.sample(dishes, len(PLAN_MEAL_TYPES))
    return [
        _suggestion(dish, meal_type, FALLBACK_CALORIES[meal_type])
        for dish, meal_type in zip(picks, PLAN_MEAL_TYPES)
    ]


def suggest_meal_plan(
    store: DocumentStore,
    dietary_goals: str,
    personality: AIPersonality | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    rng: random.Random | None = None,
) -> list[MealSuggestion]:
    """
    Suggest a breakfast / lunch / dinner plan from the dish catalog.

    The LLM names one dish per meal; names are matched case-insensitively.
    If any meal cannot be resolved the whole plan is drawn at random.
    Fewer than three dishes in the catalog yields an empty plan.
    """
    rng = rng or random.Random()
    started = time.time()

    dishes = list_dishes(store)
    if len(dishes) < len(PLAN_MEAL_TYPES):
        logger.warning("Not enough dishes (%d) to build a meal plan", len(dishes))
        record_flow("suggest_meal_plan", started, True, 0)
        return []

    chosen = complete_json(
        _build_prompt(dishes, dietary_goals, personality),
        temperature=0.5,
        config=config,
        context="suggest_meal_plan",
    ) or {}

    suggestions: list[MealSuggestion] = []
    for meal_type in PLAN_MEAL_TYPES:
        dish = find_by_name(dishes, chosen.get(meal_type))
        if dish is not None:
            suggestions.append(_suggestion(dish, meal_type, rng.randint(300, 599)))

    fallback = len(suggestions) < len(PLAN_MEAL_TYPES)
    if fallback:
        logger.warning("AI meal plan was incomplete, falling back to random selection")
        suggestions = random_meal_plan(dishes, rng)

    record_flow("suggest_meal_plan", started, fallback, len(suggestions))
    return suggestions
