from __future__ import annotations

import logging
import random
import time

from pydantic import ValidationError

from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import complete_json
from ..profiles.models import AIPersonality
from .cache import cache_get, cache_set
from .common import personality_json, record_flow
from .errors import FlowError
from .models import CalorieEstimate, RecipeIdeas, RecipeResponse, ShoppingList

logger = logging.getLogger(__name__)

RECIPE_APOLOGY = (
    "Désolé, je n'ai pas pu trouver de recette pour ce plat. "
    "Essayez de chercher en ligne !"
)
MAX_XP = 10

RECIPE_PROMPT = (
    "You are a helpful chef's assistant. Provide a simple, easy-to-follow recipe for "
    "the given meal, formatted in Markdown with an ingredient list and step-by-step "
    "instructions. Keep it simple enough for a home cook. You must respond in French.\n"
    'Your response must be a JSON object: {"recipe": "<markdown>"}'
)

CALORIES_PROMPT = (
    "You are a nutritional expert and a motivational coach for a diet app. Analyse a "
    "meal and determine its calorie count and its relevance to the user's main "
    "objective.\n\n"
    "1. Estimate calories: a reasonable, common estimate for the given meal name.\n"
    "2. Award XP according to the objective: between +3 and +10 when the meal aligns "
    "with it, between -3 and -10 when it goes against it, 0 to +2 for neutral meals. "
    "A small treat is not a catastrophe.\n\n"
    'User\'s main objective: "{objective}"\n\n'
    'Your response MUST be a JSON object: {{"calories": number, "xpGained": number}}'
)

FRIDGE_PROMPT = (
    "You are a creative chef who excels at making delicious meals with whatever is on "
    "hand. Suggest 2-3 simple and appealing recipes from the user's ingredients.\n"
    "- Prioritise the provided ingredients.\n"
    "- For each recipe, list the common, essential ingredients the user might be missing.\n"
    "- Keep the recipes suitable for a home cook.\n"
    "- Respond in French.\n"
    'Your response must be a JSON object: {"recipes": [{"name": "string", '
    '"description": "string", "missingIngredients": ["string"]}]}'
)


def generate_recipe(meal_name: str, config: LLMConfig = DEFAULT_LLM_CONFIG) -> RecipeResponse:
    """Markdown recipe for ``meal_name``; an apology text when the LLM fails."""
    started = time.time()
    cache_key = {"meal": meal_name.strip().lower()}
    cached = cache_get("generate_recipe", cache_key)
    if cached is not None:
        return cached

    parsed = complete_json(
        RECIPE_PROMPT,
        f'Meal: "{meal_name}"',
        temperature=0.3,
        config=config,
        context="generate_recipe",
    )
    recipe = parsed.get("recipe") if parsed else None
    if not isinstance(recipe, str) or not recipe.strip():
        record_flow("generate_recipe", started, True, 0)
        return RecipeResponse(recipe=RECIPE_APOLOGY)

    response = RecipeResponse(recipe=recipe)
    cache_set("generate_recipe", cache_key, response)
    record_flow("generate_recipe", started, False, 1)
    return response


def estimate_calories(
    meal_name: str,
    user_objective: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    rng: random.Random | None = None,
) -> CalorieEstimate:
    """
    Estimate a meal's calories and the XP it earns against the objective.

    Calories are floored at 0 and XP clamped to [-10, 10]. When the LLM is
    unavailable a neutral estimate (random 200-599 kcal, 1 XP) is returned
    and not cached.
    """
    rng = rng or random.Random()
    started = time.time()
    cache_key = {"meal": meal_name.strip().lower(), "objective": user_objective}
    cached = cache_get("estimate_calories", cache_key)
    if cached is not None:
        return cached

    parsed = complete_json(
        CALORIES_PROMPT.format(objective=user_objective),
        f'Meal: "{meal_name}"',
        temperature=0.2,
        config=config,
        context="estimate_calories",
    )
    try:
        calories = int(round(float(parsed["calories"])))
        xp = int(round(float(parsed["xpGained"])))
    except (TypeError, KeyError, ValueError, OverflowError):
        logger.warning("Calorie estimate unavailable for %r, using a neutral value", meal_name)
        record_flow("estimate_calories", started, True, 1)
        return CalorieEstimate(calories=rng.randint(200, 599), xp_gained=1)

    estimate = CalorieEstimate(
        calories=max(0, calories),
        xp_gained=max(-MAX_XP, min(MAX_XP, xp)),
    )
    cache_set("estimate_calories", cache_key, estimate)
    record_flow("estimate_calories", started, False, 1)
    return estimate


def suggest_recipes_from_ingredients(
    ingredients: list[str],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> RecipeIdeas:
    """Recipe ideas built around ``ingredients``. Raises :class:`FlowError`."""
    started = time.time()
    user_content = "Ingredients available:\n" + "\n".join(f"- {i}" for i in ingredients)
    parsed = complete_json(
        FRIDGE_PROMPT,
        user_content,
        temperature=0.7,
        config=config,
        context="suggest_recipes_from_ingredients",
    )
    if parsed is None:
        record_flow("suggest_recipes_from_ingredients", started, True, 0)
        raise FlowError("Failed to generate recipes.")

    try:
        ideas = RecipeIdeas.model_validate(parsed)
    except ValidationError as exc:
        record_flow("suggest_recipes_from_ingredients", started, True, 0)
        raise FlowError("Failed to generate recipes.") from exc

    record_flow("suggest_recipes_from_ingredients", started, False, len(ideas.recipes))
    return ideas


def _shopping_prompt(
    liked_meals: list[str],
    fridge_contents: list[str],
    origin: str | None,
    country: str | None,
    personality: AIPersonality | None,
) -> str:
    return (
        "You are an expert culinary assistant and nutritionist. Build a precise, "
        "optimised weekly shopping list.\n\n"
        "## User data\n"
        f"1. Liked or recent meals: {', '.join(liked_meals) or 'None'}\n"
        f"2. Cultural origin: {origin or 'Not specified'}\n"
        f"3. Country of residence: {country or 'Not specified'}\n"
        f"4. Fridge contents (exclude unless more is needed): {', '.join(fridge_contents) or 'Empty'}\n"
        f"5. Preferences / allergies: {personality_json(personality) or '{}'}\n\n"
        "## Goal\n"
        "- Suggest ingredients consistent with the liked meals and the user's origins.\n"
        "- Do not suggest what is already in the fridge unless a larger quantity is needed.\n"
        "- Group items by category (Légumes, Épicerie, Viandes/Poissons, Produits Laitiers, ...).\n"
        "- Add a concise summary of your choices. Respond in French.\n\n"
        'Output (strict JSON): {"items": [{"name": "...", "category": "...", '
        '"quantity": "...", "reason": "..."}], "summary": "..."}'
    )


def generate_shopping_list(
    liked_meals: list[str],
    fridge_contents: list[str] | None = None,
    origin: str | None = None,
    country: str | None = None,
    personality: AIPersonality | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> ShoppingList:
    """Weekly shopping list from liked meals minus the fridge. Raises :class:`FlowError`."""
    started = time.time()
    parsed = complete_json(
        _shopping_prompt(liked_meals, fridge_contents or [], origin, country, personality),
        "Generate my personalised shopping list.",
        temperature=0.7,
        config=config,
        context="generate_shopping_list",
    )
    if parsed is None:
        record_flow("generate_shopping_list", started, True, 0)
        raise FlowError("Unable to generate the shopping list.")

    # Quantities come back as numbers as often as strings.
    for item in parsed.get("items") or []:
        if isinstance(item, dict) and isinstance(item.get("quantity"), (int, float)):
            item["quantity"] = str(item["quantity"])

    try:
        shopping = ShoppingList.model_validate(parsed)
    except ValidationError as exc:
        record_flow("generate_shopping_list", started, True, 0)
        raise FlowError("Unable to generate the shopping list.") from exc

    record_flow("generate_shopping_list", started, False, len(shopping.items))
    return shopping
