from __future__ import annotations

import logging
import time

from pydantic import ValidationError

from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import complete_json
from ..profiles.models import AIPersonality
from .common import record_flow
from .errors import FlowError
from .models import (
    CalorieGoalExplanation,
    DietaryTips,
    HealthyReplacements,
    MotivationalMessage,
    ReminderMessage,
)

logger = logging.getLogger(__name__)

DEFAULT_MOTIVATION = "Continuez vos efforts, vous êtes sur la bonne voie !"
DEFAULT_REMINDER = ReminderMessage(
    subject="On pense à vous !",
    body="De nouvelles recettes et fonctionnalités vous attendent sur MyFlex. Venez les découvrir !",
)

REPLACEMENTS_PROMPT = (
    "You are a nutritional expert. Based on the user's logged food and health goals, "
    "suggest a few healthier alternative meals or snacks. Respond in French.\n"
    'Your response must be a JSON object: {"suggestions": ["string", ...]}'
)

TIPS_PROMPT = (
    "You are a personal nutritionist providing dietary advice. Based on the user's "
    "food logs and dietary goals, give personalised tips to improve their eating "
    "habits and reach their goals. Respond in French.\n"
    'Your response must be a JSON object: {"tips": "string"}'
)

MOTIVATION_PROMPT = (
    "You are a very positive and motivating personal coach for the MyFlex app. "
    "Write a short, personalised and encouraging message about the user's progress, "
    "under 3-4 sentences. Be specific, positive and forward-looking. "
    "You MUST respond in French.\n"
    'Your response MUST be a JSON object: {"message": "string"}'
)


def _calorie_goal_prompt(
    target_calories: int,
    eaters_count: int,
    personality: AIPersonality | None,
) -> str:
    objective = (personality.main_objective if personality else None) or "Manger équilibré"
    prompt = (
        "You are a caring nutrition expert. Explain what a daily target of "
        f"{target_calories} kcal means in practice.\n"
    )
    if eaters_count > 1:
        prompt += (
            f"The target is the total for a household of {eaters_count} people "
            f"(about {round(target_calories / eaters_count)} kcal each). Give examples "
            f"of meals for {eaters_count} that reach the total.\n"
        )
    prompt += (
        "Give concrete examples of real dishes for breakfast, lunch, dinner and a snack "
        f'that add up to the target, adapted to the objective "{objective}". '
        "Be encouraging, use emojis, stay under 150 words and respond in French.\n"
        'Your response MUST be a JSON object: {"explanation": "string"}'
    )
    return prompt


def explain_calorie_goal(
    target_calories: int,
    eaters_count: int = 1,
    personality: AIPersonality | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> CalorieGoalExplanation:
    """Concrete meal examples for a daily calorie target; a generic text on failure."""
    started = time.time()
    parsed = complete_json(
        _calorie_goal_prompt(target_calories, eaters_count, personality),
        f"Objectif : {target_calories} kcal / jour.",
        temperature=0.7,
        config=config,
        context="explain_calorie_goal",
    )
    try:
        result = CalorieGoalExplanation.model_validate(parsed or {})
    except ValidationError:
        record_flow("explain_calorie_goal", started, True, 1)
        return CalorieGoalExplanation(explanation=(
            f"Avec {target_calories} kcal, vous pouvez manger des repas équilibrés comme "
            "un poulet grillé avec du riz et des légumes, ou un bon bol de porridge le "
            "matin. C'est un excellent objectif !"
        ))

    record_flow("explain_calorie_goal", started, False, 1)
    return result


def suggest_healthy_replacements(
    logged_food: str,
    health_goals: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> HealthyReplacements:
    """Healthier alternatives to a logged meal. Raises :class:`FlowError`."""
    started = time.time()
    parsed = complete_json(
        REPLACEMENTS_PROMPT,
        f"Logged food: {logged_food}\nHealth goals: {health_goals or 'Manger équilibré'}",
        config=config,
        context="suggest_healthy_replacements",
    )
    try:
        result = HealthyReplacements.model_validate(parsed or {})
    except ValidationError as exc:
        record_flow("suggest_healthy_replacements", started, True, 0)
        raise FlowError("Failed to generate suggestions.") from exc

    record_flow("suggest_healthy_replacements", started, False, len(result.suggestions))
    return result


def provide_dietary_tips(
    food_logs: list[str],
    dietary_goals: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> DietaryTips:
    """Personalised advice from recent food logs. Raises :class:`FlowError`."""
    started = time.time()
    parsed = complete_json(
        TIPS_PROMPT,
        f"Food logs: {', '.join(food_logs) or 'None'}\n"
        f"Dietary goals: {dietary_goals or 'Manger équilibré'}",
        config=config,
        context="provide_dietary_tips",
    )
    try:
        result = DietaryTips.model_validate(parsed or {})
    except ValidationError as exc:
        record_flow("provide_dietary_tips", started, True, 0)
        raise FlowError("Failed to generate dietary tips.") from exc

    record_flow("provide_dietary_tips", started, False, 1)
    return result


def generate_motivational_message(
    user_name: str,
    level: int,
    streak: int,
    main_objective: str | None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> MotivationalMessage:
    started = time.time()
    parsed = complete_json(
        MOTIVATION_PROMPT,
        f"User's name: {user_name}\nCurrent level: {level}\n"
        f"Current streak: {streak} days\nMain objective: {main_objective or 'Manger équilibré'}",
        temperature=0.8,
        config=config,
        context="generate_motivational_message",
    )
    message = parsed.get("message") if parsed else None
    if not isinstance(message, str) or not message.strip():
        record_flow("generate_motivational_message", started, True, 1)
        return MotivationalMessage(message=DEFAULT_MOTIVATION)

    record_flow("generate_motivational_message", started, False, 1)
    return MotivationalMessage(message=message.strip())


def _reminder_prompt(message_type: str) -> str:
    return (
        "You are a marketing and user engagement expert for the nutrition app MyFlex. "
        "Write a short, friendly and effective reminder to re-engage inactive users.\n"
        f'- The message type is "{message_type}".\n'
        "- A notification body is very short (max 150 characters) and has no subject.\n"
        "- An email needs a friendly subject line and a body of 4-5 sentences at most.\n"
        "- Be encouraging, never guilt-inducing, and end with a clear call to action.\n"
        "- You MUST respond in French.\n"
        'Your response MUST be a JSON object: {"subject": "string (optional)", "body": "string"}'
    )


def generate_reminder_message(
    message_type: str,
    user_segment: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> ReminderMessage:
    """Re-engagement copy for a user segment; notifications never carry a subject."""
    started = time.time()
    parsed = complete_json(
        _reminder_prompt(message_type),
        f'User segment: "{user_segment}"\nMessage type: "{message_type}"',
        temperature=0.8,
        config=config,
        context="generate_reminder_message",
    )
    try:
        reminder = ReminderMessage.model_validate(parsed or {})
    except ValidationError:
        logger.warning("Reminder generation failed, using the default copy")
        record_flow("generate_reminder_message", started, True, 1)
        reminder = DEFAULT_REMINDER.model_copy()
    else:
        record_flow("generate_reminder_message", started, False, 1)

    if message_type == "notification":
        reminder.subject = None
    return reminder
