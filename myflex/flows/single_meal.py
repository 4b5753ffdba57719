from __future__ import annotations

import logging
import random
import time

from ..dishes.data_store import list_dishes
from ..dishes.models import Dish
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import complete
from ..profiles.models import AIPersonality
from ..store.documents import DocumentStore
from .common import find_by_name, image_hint, personality_json, record_flow
from .errors import NoDishesAvailable
from .models import SingleMealSuggestion

logger = logging.getLogger(__name__)

TIME_OF_DAY_TO_MEAL_TYPE = {
    "matin": "breakfast",
    "midi": "lunch",
    "soir": "dinner",
    "collation": "dessert",
    "dessert": "dessert",
}


def meal_type_for(time_of_day: str) -> str:
    """Raises ``ValueError`` for an unknown moment of the day."""
    try:
        return TIME_OF_DAY_TO_MEAL_TYPE[time_of_day]
    except KeyError:
        raise ValueError(f"Unknown time of day: {time_of_day!r}") from None


def _build_prompt(
    dishes: list[Dish],
    time_of_day: str,
    dietary_goals: str,
    personality: AIPersonality | None,
    meal_history: list[str],
) -> str:
    dish_list = "\n".join(
        f"- {d.name} (Category: {d.category}, Type: {d.type or 'N/A'})" for d in dishes
    )
    prompt = (
        "You are an expert nutritionist's assistant. Your ONLY task is to choose the "
        "most suitable dish from the following list for a user.\n\n"
        f'The user wants a meal for the following time of day: "{time_of_day}".\n'
        f'Their dietary goals are: "{dietary_goals}".\n'
    )
    if meal_history:
        prompt += (
            "\nHere is the user's recent meal history, avoid suggesting these too often: "
            f"{', '.join(meal_history)}.\n"
        )
    prefs = personality_json(personality)
    if prefs:
        prompt += f"\nConsider their preferences: {prefs}\n"
    prompt += (
        f"\nHere is the list of available dishes:\n{dish_list}\n\n"
        "Based on all this information, what is the single best dish to suggest?\n\n"
        "Your response MUST be ONLY the name of the dish you have chosen, exactly as it "
        "appears in the list. Do not add any other text, explanation, or formatting."
    )
    return prompt


def _clean_answer(answer: str | None) -> str | None:
    if answer is None:
        return None
    return answer.strip().strip("\"'«»“”").strip() or None


def _random_dish(dishes: list[Dish], meal_type: str, rng: random.Random) -> Dish:
    relevant = [d for d in dishes if (d.type or "").lower() == meal_type]
    return rng.choice(relevant or dishes)


def suggest_single_meal(
    store: DocumentStore,
    time_of_day: str,
    dietary_goals: str,
    personality: AIPersonality | None = None,
    meal_history: list[str] | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    rng: random.Random | None = None,
) -> SingleMealSuggestion:
    """
    Suggest one dish for a moment of the day.

    The LLM answers with a bare dish name which must exist in the catalog;
    otherwise a random dish of the matching meal type (or any dish) is
    used. Raises :class:`NoDishesAvailable` when the catalog is empty.
    """
    rng = rng or random.Random()
    started = time.time()
    meal_type = meal_type_for(time_of_day)

    dishes = list_dishes(store)
    if not dishes:
        raise NoDishesAvailable("No dishes found in the database.")

    answer = _clean_answer(complete(
        _build_prompt(dishes, time_of_day, dietary_goals, personality, meal_history or []),
        temperature=0.5,
        config=config,
        context="suggest_single_meal",
    ))
    chosen = find_by_name(dishes, answer)

    fallback = chosen is None
    if fallback:
        logger.warning("AI suggested an invalid dish: %r. Falling back to random selection.", answer)
        chosen = _random_dish(dishes, meal_type, rng)

    record_flow("suggest_single_meal", started, fallback, 1)
    return SingleMealSuggestion(
        id=chosen.id,
        name=chosen.name,
        calories=rng.randint(300, 599),
        cooking_time=chosen.cooking_time,
        type=meal_type,
        image_hint=image_hint(chosen),
        image_url=chosen.image_url,
        recipe=chosen.recipe,
    )
