from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Dish(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    category: str = ""
    origin: str = ""
    cooking_time: str = Field(default="", alias="cookingTime")
    image_url: str | None = Field(default=None, alias="imageUrl")
    type: str = ""
    moment_suggest: str | None = Field(default=None, alias="momentSuggest")
    recipe: str | None = None
    image_hint: str | None = Field(default=None, alias="imageHint")
    calories: int | None = None
    is_verified: bool = Field(default=False, alias="isVerified")


class RecommendedDish(Dish):
    relevance_score: float | None = Field(default=None, alias="relevanceScore")
    match_reason: str | None = Field(default=None, alias="matchReason")


class DishCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    origin: str = Field(..., min_length=1)
    cooking_time: str = Field(default="", alias="cookingTime")
    image_url: str | None = Field(default=None, alias="imageUrl")
    type: str = ""
    moment_suggest: str | None = Field(default=None, alias="momentSuggest")
    recipe: str | None = None
    image_hint: str | None = Field(default=None, alias="imageHint")
    calories: int | None = Field(default=None, ge=0)
    is_verified: bool = Field(default=False, alias="isVerified")


class DishUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1)
    category: str | None = None
    origin: str | None = None
    cooking_time: str | None = Field(default=None, alias="cookingTime")
    image_url: str | None = Field(default=None, alias="imageUrl")
    type: str | None = None
    moment_suggest: str | None = Field(default=None, alias="momentSuggest")
    recipe: str | None = None
    image_hint: str | None = Field(default=None, alias="imageHint")
    calories: int | None = Field(default=None, ge=0)
    is_verified: bool | None = Field(default=None, alias="isVerified")


class DishImportRequest(BaseModel):
    csv: str = Field(..., min_length=1, description="Raw CSV text with a header row")


class DishImportResponse(BaseModel):
    imported: int
    skipped: int
