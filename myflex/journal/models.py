from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class MealLogRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    type: Literal["breakfast", "lunch", "dinner", "dessert"]
    calories: int | None = Field(default=None, gt=0)
    cooked_by: str | None = Field(default=None, alias="cookedBy")


class MealLogEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    type: str
    calories: int
    cooked_by: str = Field(default="", alias="cookedBy")
    date: str


class MealLogResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    meal: MealLogEntry
    xp_gained: int = Field(..., alias="xpGained")
    xp: int
    level: int
    streak: int
