from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timedelta, timezone

from ..flows.recipes import estimate_calories
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..profiles.repository import get_profile, profile_path
from ..store.documents import DocumentStore
from .models import MealLogEntry, MealLogRequest, MealLogResponse

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 500
MANUAL_ENTRY_XP = 50
DEFAULT_OBJECTIVE = "Manger équilibré"

# Serialises the read-modify-write of xp, level and streak.
_progress_lock = threading.Lock()


def level_for(xp: int) -> int:
    return max(xp, 0) // XP_PER_LEVEL + 1


def next_streak(streak: int, last_log_date: str | None, today: date) -> int:
    """Consecutive logging days after logging a meal on ``today``."""
    if last_log_date is None:
        return 1
    last = date.fromisoformat(last_log_date)
    if last == today:
        return max(streak, 1)
    if last == today - timedelta(days=1):
        return streak + 1
    return 1


def _logs_path(user_id: str) -> str:
    return f"{profile_path(user_id)}/foodLogs"


def log_meal(
    store: DocumentStore,
    user_id: str,
    body: MealLogRequest,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> MealLogResponse:
    """Record a meal, award XP and extend the daily logging streak.

    Meals logged without calories are estimated (and scored against the
    user's objective); meals with calories earn a flat bonus.
    Raises ``KeyError`` for unknown users.
    """
    profile = get_profile(store, user_id)
    if profile is None:
        raise KeyError(user_id)

    if body.calories:
        calories, xp_gained = body.calories, MANUAL_ENTRY_XP
    else:
        estimate = estimate_calories(
            body.name, profile.main_objective or DEFAULT_OBJECTIVE, config=config,
        )
        calories, xp_gained = estimate.calories, estimate.xp_gained

    now = datetime.now(timezone.utc)
    logged_at = now.isoformat()
    data = {
        "name": body.name,
        "type": body.type,
        "calories": calories,
        "cookedBy": body.cooked_by or "",
        "userId": user_id,
        "date": logged_at,
    }
    meal_id = store.add(_logs_path(user_id), data)

    with _progress_lock:
        current = get_profile(store, user_id) or profile
        xp = max(current.xp + xp_gained, 0)
        level = level_for(xp)
        streak = next_streak(current.streak, current.last_log_date, now.date())
        store.update(profile_path(user_id), {
            "xp": xp,
            "level": level,
            "streak": streak,
            "lastLogDate": now.date().isoformat(),
        })
    logger.info("User %s logged %r (%d kcal, %+d XP)", user_id, body.name, calories, xp_gained)

    return MealLogResponse(
        meal=MealLogEntry(id=meal_id, **data),
        xp_gained=xp_gained,
        xp=xp,
        level=level,
        streak=streak,
    )


def list_meals(store: DocumentStore, user_id: str, day: date | None = None) -> list[MealLogEntry]:
    entries = [MealLogEntry.model_validate(d) for d in store.list(_logs_path(user_id))]
    if day is not None:
        entries = [e for e in entries if datetime.fromisoformat(e.date).date() == day]
    return sorted(entries, key=lambda e: e.date, reverse=True)


def delete_meal(store: DocumentStore, user_id: str, meal_id: str) -> bool:
    return store.delete(f"{_logs_path(user_id)}/{meal_id}")
