from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..profiles.models import AIPersonality

MealType = Literal["breakfast", "lunch", "dinner", "dessert"]
TimeOfDay = Literal["matin", "midi", "soir", "collation", "dessert"]


class _FlowModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RecommendationRequest(_FlowModel):
    count: int = Field(default=6, ge=1, le=24)
    time_of_day: Literal["breakfast", "lunch", "dinner", "dessert", ""] | None = Field(
        default=None, alias="timeOfDay"
    )


class MealPlanRequest(_FlowModel):
    dietary_goals: str = Field(default="", alias="dietaryGoals")
    personality: AIPersonality | None = None


class MealSuggestion(_FlowModel):
    name: str
    calories: int
    cooking_time: str = Field(default="", alias="cookingTime")
    image_hint: str = Field(default="", alias="imageHint")
    image_url: str | None = Field(default=None, alias="imageUrl")
    type: MealType
    recipe: str | None = None


class SingleMealRequest(_FlowModel):
    time_of_day: TimeOfDay = Field(..., alias="timeOfDay")
    dietary_goals: str = Field(default="", alias="dietaryGoals")
    personality: AIPersonality | None = None
    meal_history: list[str] = Field(default_factory=list, alias="mealHistory")


class SingleMealSuggestion(MealSuggestion):
    id: str | None = None


class DayPlanRequest(_FlowModel):
    dietary_goals: str = Field(default="", alias="dietaryGoals")
    personality: AIPersonality | None = None
    household_members: list[str] | None = Field(default=None, alias="householdMembers")


class DayPlanMeal(_FlowModel):
    name: str
    type: Literal["breakfast", "lunch", "dinner"]
    calories: int
    cooked_by: str | None = Field(default=None, alias="cookedBy")
    image_url: str | None = Field(default=None, alias="imageUrl")


class RecipeRequest(_FlowModel):
    meal_name: str = Field(..., min_length=1, alias="mealName")


class RecipeResponse(_FlowModel):
    recipe: str


class CalorieEstimateRequest(_FlowModel):
    meal_name: str = Field(..., min_length=1, alias="mealName")
    user_objective: str = Field(default="Manger équilibré", alias="userObjective")


class CalorieEstimate(_FlowModel):
    calories: int
    xp_gained: int = Field(..., alias="xpGained")


class IngredientsRequest(_FlowModel):
    ingredients: list[str] = Field(..., min_length=1)


class RecipeIdea(_FlowModel):
    name: str
    description: str = ""
    missing_ingredients: list[str] = Field(default_factory=list, alias="missingIngredients")


class RecipeIdeas(_FlowModel):
    recipes: list[RecipeIdea]


class ShoppingListRequest(_FlowModel):
    liked_meals: list[str] = Field(default_factory=list, alias="likedMeals")
    fridge_contents: list[str] | None = Field(default=None, alias="fridgeContents")
    origin: str | None = None
    country: str | None = None
    personality: AIPersonality | None = None


class ShoppingItem(_FlowModel):
    name: str
    category: str = "Divers"
    quantity: str = ""
    reason: str = ""


class ShoppingList(_FlowModel):
    items: list[ShoppingItem]
    summary: str = ""


class CalorieGoalRequest(_FlowModel):
    target_calories: int = Field(..., gt=0, le=20000, alias="targetCalories")
    eaters_count: int = Field(default=1, ge=1, le=20, alias="eatersCount")


class CalorieGoalExplanation(_FlowModel):
    explanation: str


class ReplacementsRequest(_FlowModel):
    logged_food: str = Field(..., min_length=1, alias="loggedFood")
    health_goals: str = Field(default="", alias="healthGoals")


class HealthyReplacements(_FlowModel):
    suggestions: list[str] = Field(..., min_length=1)


class DietaryTipsRequest(_FlowModel):
    dietary_goals: str = Field(default="", alias="dietaryGoals")


class DietaryTips(_FlowModel):
    tips: str = Field(..., min_length=1)


class MotivationalMessage(_FlowModel):
    message: str


class ReminderRequest(_FlowModel):
    type: Literal["notification", "email"] = "notification"
    user_segment: str = Field(..., min_length=1, alias="userSegment")


class ReminderMessage(_FlowModel):
    subject: str | None = None
    body: str = Field(..., min_length=1)
