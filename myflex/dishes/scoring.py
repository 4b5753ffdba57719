from __future__ import annotations

import random

import pandas as pd

from ..profiles.interactions import score_key
from ..profiles.models import UserProfile
from .models import Dish

ORIGIN_MATCH_BONUS = 15.0
COUNTRY_MATCH_BONUS = 10.0
ORIGIN_AFFINITY_WEIGHT = 2.0
CATEGORY_AFFINITY_WEIGHT = 1.5
NOVELTY_MAX = 5.0
TIME_OF_DAY_BONUS = 5.0


def _text(row: pd.Series, key: str) -> str:
    value = row.get(key)
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).lower()


def _score_row(
    row: pd.Series,
    user_origin: str,
    user_country: str,
    origin_scores: dict[str, float],
    category_scores: dict[str, float],
    time_of_day: str,
    rng: random.Random,
) -> float:
    """Compute the relevance score for a single dish row."""
    dish_origin = _text(row, "origin")
    dish_category = _text(row, "category")

    score = 0.0
    if user_origin and user_origin in dish_origin:
        score += ORIGIN_MATCH_BONUS
    if user_country and user_country in dish_origin:
        score += COUNTRY_MATCH_BONUS

    score += origin_scores.get(score_key(dish_origin), 0) * ORIGIN_AFFINITY_WEIGHT
    score += category_scores.get(score_key(dish_category), 0) * CATEGORY_AFFINITY_WEIGHT

    score += rng.random() * NOVELTY_MAX

    if time_of_day:
        moment = _text(row, "moment_suggest") or _text(row, "type")
        if moment == time_of_day:
            score += TIME_OF_DAY_BONUS

    return score


def score_dishes(
    dishes: list[Dish],
    profile: UserProfile,
    time_of_day: str | None = None,
    rng: random.Random | None = None,
) -> pd.DataFrame:
    """Return a frame of dishes with a ``_score`` column, best first."""
    rng = rng or random.Random()
    df = pd.DataFrame([d.model_dump() for d in dishes])
    if df.empty:
        return df

    vp = profile.virtual_profile
    df["_score"] = df.apply(
        _score_row,
        axis=1,
        user_origin=(profile.origin or "").strip().lower(),
        user_country=(profile.country or "").strip().lower(),
        origin_scores=vp.origin_scores,
        category_scores=vp.category_scores,
        time_of_day=(time_of_day or "").strip().lower(),
        rng=rng,
    )
    return df.sort_values("_score", ascending=False, kind="stable")


def top_candidates(
    dishes: list[Dish],
    profile: UserProfile,
    limit: int,
    time_of_day: str | None = None,
    rng: random.Random | None = None,
) -> list[tuple[Dish, float]]:
    """Score ``dishes`` for ``profile`` and keep the ``limit`` best."""
    scored = score_dishes(dishes, profile, time_of_day=time_of_day, rng=rng)
    if scored.empty:
        return []

    by_id = {d.id: d for d in dishes}
    return [
        (by_id[row["id"]], round(float(row["_score"]), 4))
        for _, row in scored.head(limit).iterrows()
    ]
