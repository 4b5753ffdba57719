from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

InteractionEvent = Literal["view", "cook_start", "cook_complete", "like", "dislike"]


class VirtualProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    origin_scores: dict[str, float] = Field(default_factory=dict, alias="originScores")
    category_scores: dict[str, float] = Field(default_factory=dict, alias="categoryScores")
    last_interactions: list[str] = Field(default_factory=list, alias="lastInteractions")
    total_interactions: int = Field(default=0, alias="totalInteractions")


class AIPersonality(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tone: str | None = None
    main_objective: str | None = Field(default=None, alias="mainObjective")
    allergies: str | None = None
    preferences: str | None = None


class UserProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str = ""
    country: str | None = None
    origin: str | None = None
    main_objective: str | None = Field(default=None, alias="mainObjective")
    preferences: str | None = None
    allergies: str | None = None
    tone: str | None = None
    household: list[str] = Field(default_factory=list)
    xp: int = 0
    level: int = 1
    streak: int = 0
    last_log_date: str | None = Field(default=None, alias="lastLogDate")
    role: Literal["user", "admin"] = "user"
    virtual_profile: VirtualProfile = Field(default_factory=VirtualProfile, alias="virtualProfile")

    def personality(self) -> AIPersonality:
        return AIPersonality(
            tone=self.tone,
            main_objective=self.main_objective,
            allergies=self.allergies,
            preferences=self.preferences,
        )


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1)
    country: str | None = None
    origin: str | None = None
    main_objective: str | None = Field(default=None, alias="mainObjective")
    preferences: str | None = None
    allergies: str | None = None
    tone: str | None = None
    household: list[str] | None = None


class InteractionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dish_name: str = Field(..., min_length=1, alias="dishName")
    dish_origin: str = Field(default="", alias="dishOrigin")
    dish_category: str = Field(default="", alias="dishCategory")
    event_type: InteractionEvent = Field(..., alias="eventType")


class InteractionResponse(BaseModel):
    success: bool
