from __future__ import annotations

import logging
import os
from datetime import date

import pandas as pd
from fastapi import Depends, FastAPI, HTTPException, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.feedback import (
    FeedbackOut,
    FeedbackRequest,
    FeedbackStatus,
    FeedbackStatusUpdate,
    feedback_summary,
    get_feedback,
    record_feedback,
    set_feedback_status,
)
from .analytics.store import get_events
from .auth.dependencies import (
    get_document_store,
    require_admin,
    require_profile,
    require_user,
)
from .auth.users import (
    LoginRequest,
    RegisterRequest,
    UsernameTaken,
    authenticate,
    register,
    seed_demo_accounts,
)
from .content.models import (
    Notification,
    NotificationSend,
    NotificationSendResponse,
    Promotion,
    PromotionCreate,
    PromotionUpdate,
)
from .content.publishing import (
    create_promotion,
    delete_promotion,
    list_notifications,
    list_promotions,
    mark_notification_read,
    send_notification,
    update_promotion,
)
from .dishes.data_store import (
    catalog_metadata,
    create_dish,
    delete_dish,
    list_dishes,
    update_dish,
)
from .dishes.ingest import import_dishes_csv, seed_dishes
from .dishes.models import (
    Dish,
    DishCreate,
    DishImportRequest,
    DishImportResponse,
    DishUpdate,
    RecommendedDish,
)
from .flows.cache import get_cache_stats
from .flows.coaching import (
    explain_calorie_goal,
    generate_motivational_message,
    generate_reminder_message,
    provide_dietary_tips,
    suggest_healthy_replacements,
)
from .flows.day_plan import suggest_day_plan
from .flows.errors import FlowError, NoDishesAvailable
from .flows.meal_plan import suggest_meal_plan
from .flows.models import (
    CalorieEstimate,
    CalorieEstimateRequest,
    CalorieGoalExplanation,
    CalorieGoalRequest,
    DayPlanMeal,
    DayPlanRequest,
    DietaryTips,
    DietaryTipsRequest,
    HealthyReplacements,
    MealPlanRequest,
    MealSuggestion,
    MotivationalMessage,
    RecipeIdeas,
    RecipeRequest,
    RecipeResponse,
    RecommendationRequest,
    ReminderMessage,
    ReminderRequest,
    ReplacementsRequest,
    ShoppingList,
    ShoppingListRequest,
    SingleMealRequest,
    SingleMealSuggestion,
)
from .flows.recipes import (
    estimate_calories,
    generate_recipe,
    generate_shopping_list,
    suggest_recipes_from_ingredients,
)
from .flows.recommended import suggest_recommended_dishes
from .flows.single_meal import suggest_single_meal
from .fridge.inventory import FridgeItem, FridgeItemCreate, add_item, list_items, remove_item
from .journal.food_log import delete_meal, list_meals, log_meal
from .journal.models import MealLogEntry, MealLogRequest, MealLogResponse
from .profiles.interactions import track_user_interaction
from .profiles.models import (
    InteractionRequest,
    InteractionResponse,
    ProfileUpdate,
    UserProfile,
)
from .profiles.repository import list_profiles, update_profile
from .store.documents import DocumentStore, get_store

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
app = FastAPI(title="MyFlex Meal Planning API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "myflex-secret-change-in-production"),
)


def bootstrap(store: DocumentStore) -> None:
    """Seed the dish catalog and the demo accounts."""
    seed_dishes(store)
    seed_demo_accounts(store)


bootstrap(get_store())


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata(store: DocumentStore = Depends(get_document_store)) -> dict:
    return catalog_metadata(store)


@app.get("/promotions", response_model=list[Promotion])
def promotions(store: DocumentStore = Depends(get_document_store)) -> list[Promotion]:
    return list_promotions(store, active_only=True)


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/register", status_code=201)
def register_user(
    body: RegisterRequest,
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    try:
        user = register(store, body)
    except UsernameTaken:
        raise HTTPException(status_code=409, detail="Username already taken")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Profile endpoints ────────────────────────────────────────────────────


@app.get("/profile", response_model=UserProfile)
def read_profile(profile: UserProfile = Depends(require_profile)) -> UserProfile:
    return profile


@app.patch("/profile", response_model=UserProfile)
def edit_profile(
    body: ProfileUpdate,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> UserProfile:
    return update_profile(store, profile.id, body)


@app.post("/interactions", response_model=InteractionResponse)
def interactions(
    body: InteractionRequest,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> InteractionResponse:
    ok = track_user_interaction(
        store,
        profile.id,
        body.dish_name,
        body.dish_origin,
        body.dish_category,
        body.event_type,
    )
    return InteractionResponse(success=ok)


# ── AI flow endpoints ────────────────────────────────────────────────────


@app.get("/dishes", response_model=list[Dish])
def dishes(
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_document_store),
) -> list[Dish]:
    return list_dishes(store)


@app.post("/recommendations", response_model=list[RecommendedDish])
def recommendations(
    body: RecommendationRequest,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> list[RecommendedDish]:
    return suggest_recommended_dishes(
        store, profile.id, count=body.count, time_of_day=body.time_of_day,
    )


@app.post("/meal-plan", response_model=list[MealSuggestion])
def meal_plan(
    body: MealPlanRequest,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> list[MealSuggestion]:
    return suggest_meal_plan(
        store,
        body.dietary_goals or profile.main_objective or "",
        personality=body.personality or profile.personality(),
    )


@app.post("/single-meal", response_model=SingleMealSuggestion)
def single_meal(
    body: SingleMealRequest,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> SingleMealSuggestion:
    try:
        return suggest_single_meal(
            store,
            body.time_of_day,
            body.dietary_goals or profile.main_objective or "",
            personality=body.personality or profile.personality(),
            meal_history=body.meal_history or profile.virtual_profile.last_interactions,
        )
    except NoDishesAvailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))


@app.post("/day-plan", response_model=list[DayPlanMeal])
def day_plan(
    body: DayPlanRequest,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> list[DayPlanMeal]:
    household = body.household_members if body.household_members is not None else profile.household
    return suggest_day_plan(
        store,
        body.dietary_goals or profile.main_objective or "",
        personality=body.personality or profile.personality(),
        household_members=household,
    )


@app.post("/recipes/generate", response_model=RecipeResponse)
def recipe(body: RecipeRequest, user: dict = Depends(require_user)) -> RecipeResponse:
    return generate_recipe(body.meal_name)


@app.post("/calories/estimate", response_model=CalorieEstimate)
def calories(body: CalorieEstimateRequest, user: dict = Depends(require_user)) -> CalorieEstimate:
    return estimate_calories(body.meal_name, body.user_objective)


@app.post("/shopping-list", response_model=ShoppingList)
def shopping_list(
    body: ShoppingListRequest,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> ShoppingList:
    fridge = body.fridge_contents
    if fridge is None:
        fridge = [item.name for item in list_items(store, profile.id)]
    try:
        return generate_shopping_list(
            body.liked_meals or profile.virtual_profile.last_interactions,
            fridge_contents=fridge,
            origin=body.origin or profile.origin,
            country=body.country or profile.country,
            personality=body.personality or profile.personality(),
        )
    except FlowError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


# ── Coaching ─────────────────────────────────────────────────────────────


@app.post("/coach/calorie-goal", response_model=CalorieGoalExplanation)
def calorie_goal(
    body: CalorieGoalRequest,
    profile: UserProfile = Depends(require_profile),
) -> CalorieGoalExplanation:
    return explain_calorie_goal(body.target_calories, body.eaters_count, profile.personality())


@app.post("/coach/replacements", response_model=HealthyReplacements)
def replacements(
    body: ReplacementsRequest,
    profile: UserProfile = Depends(require_profile),
) -> HealthyReplacements:
    try:
        return suggest_healthy_replacements(
            body.logged_food, body.health_goals or profile.main_objective or ""
        )
    except FlowError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


@app.post("/coach/tips", response_model=DietaryTips)
def dietary_tips(
    body: DietaryTipsRequest,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> DietaryTips:
    logs = [f"{e.name} ({e.calories} kcal)" for e in list_meals(store, profile.id)[:20]]
    try:
        return provide_dietary_tips(logs, body.dietary_goals or profile.main_objective or "")
    except FlowError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


@app.get("/coach/motivation", response_model=MotivationalMessage)
def motivation(profile: UserProfile = Depends(require_profile)) -> MotivationalMessage:
    return generate_motivational_message(
        profile.name, profile.level, profile.streak, profile.main_objective
    )


# ── Food journal ─────────────────────────────────────────────────────────


@app.get("/meals", response_model=list[MealLogEntry])
def meals(
    day: date | None = None,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> list[MealLogEntry]:
    return list_meals(store, profile.id, day=day)


@app.post("/meals", response_model=MealLogResponse, status_code=201)
def add_meal(
    body: MealLogRequest,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> MealLogResponse:
    return log_meal(store, profile.id, body)


@app.delete("/meals/{meal_id}")
def remove_meal(
    meal_id: str,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    if not delete_meal(store, profile.id, meal_id):
        raise HTTPException(status_code=404, detail="Meal not found")
    return {"status": "deleted"}


# ── Fridge ───────────────────────────────────────────────────────────────


@app.get("/fridge", response_model=list[FridgeItem])
def fridge(
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> list[FridgeItem]:
    return list_items(store, profile.id)


@app.post("/fridge", response_model=FridgeItem, status_code=201)
def add_fridge_item(
    body: FridgeItemCreate,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> FridgeItem:
    try:
        return add_item(store, profile.id, body.name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.delete("/fridge/{item_id}")
def remove_fridge_item(
    item_id: str,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    if not remove_item(store, profile.id, item_id):
        raise HTTPException(status_code=404, detail="Item not found")
    return {"status": "deleted"}


@app.post("/fridge/recipes", response_model=RecipeIdeas)
def fridge_recipes(
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> RecipeIdeas:
    items = list_items(store, profile.id)
    if not items:
        raise HTTPException(status_code=400, detail="The fridge is empty")
    try:
        return suggest_recipes_from_ingredients([item.name for item in items])
    except FlowError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


# ── Notifications & feedback ─────────────────────────────────────────────


@app.get("/notifications", response_model=list[Notification])
def notifications(
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> list[Notification]:
    return list_notifications(store, profile.id)


@app.post("/notifications/{notification_id}/read")
def read_notification(
    notification_id: str,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    try:
        mark_notification_read(store, profile.id, notification_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"status": "read"}


@app.post("/feedback", response_model=FeedbackOut, status_code=201)
def feedback(
    body: FeedbackRequest,
    profile: UserProfile = Depends(require_profile),
    store: DocumentStore = Depends(get_document_store),
) -> FeedbackOut:
    return record_feedback(store, profile.id, profile.name, body)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.post("/admin/dishes", response_model=Dish, status_code=201)
def admin_create_dish(
    body: DishCreate,
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> Dish:
    return create_dish(store, body)


@app.patch("/admin/dishes/{dish_id}", response_model=Dish)
def admin_update_dish(
    dish_id: str,
    body: DishUpdate,
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> Dish:
    try:
        return update_dish(store, dish_id, body)
    except KeyError:
        raise HTTPException(status_code=404, detail="Dish not found")


@app.delete("/admin/dishes/{dish_id}")
def admin_delete_dish(
    dish_id: str,
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    if not delete_dish(store, dish_id):
        raise HTTPException(status_code=404, detail="Dish not found")
    return {"status": "deleted"}


@app.post("/admin/dishes/import", response_model=DishImportResponse)
def admin_import_dishes(
    body: DishImportRequest,
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> DishImportResponse:
    try:
        result = import_dishes_csv(body.csv, store)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid CSV: {exc}")
    return DishImportResponse(**result)


@app.post("/admin/dishes/seed")
def admin_seed_dishes(
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    return {"count": seed_dishes(store)}


@app.post("/admin/promotions", response_model=Promotion, status_code=201)
def admin_create_promotion(
    body: PromotionCreate,
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> Promotion:
    return create_promotion(store, body)


@app.patch("/admin/promotions/{promo_id}", response_model=Promotion)
def admin_update_promotion(
    promo_id: str,
    body: PromotionUpdate,
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> Promotion:
    try:
        return update_promotion(store, promo_id, body)
    except KeyError:
        raise HTTPException(status_code=404, detail="Promotion not found")


@app.delete("/admin/promotions/{promo_id}")
def admin_delete_promotion(
    promo_id: str,
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    if not delete_promotion(store, promo_id):
        raise HTTPException(status_code=404, detail="Promotion not found")
    return {"status": "deleted"}


@app.post("/admin/notifications", response_model=NotificationSendResponse)
def admin_send_notification(
    body: NotificationSend,
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> NotificationSendResponse:
    try:
        sent = send_notification(store, body)
    except KeyError:
        raise HTTPException(status_code=404, detail="User not found")
    return NotificationSendResponse(sent=sent)


@app.post("/admin/reminders", response_model=ReminderMessage)
def admin_reminder(body: ReminderRequest, user: dict = Depends(require_admin)) -> ReminderMessage:
    return generate_reminder_message(body.type, body.user_segment)


@app.get("/admin/users", response_model=list[UserProfile])
def admin_users(
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> list[UserProfile]:
    return list_profiles(store)


@app.get("/admin/feedback", response_model=list[FeedbackOut])
def admin_feedback(
    status: FeedbackStatus | None = None,
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> list[FeedbackOut]:
    return get_feedback(store, status=status)


@app.patch("/admin/feedback/{feedback_id}", response_model=FeedbackOut)
def admin_feedback_status(
    feedback_id: str,
    body: FeedbackStatusUpdate,
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> FeedbackOut:
    try:
        return set_feedback_status(store, feedback_id, body.status)
    except KeyError:
        raise HTTPException(status_code=404, detail="Feedback not found")


@app.get("/feedback/stats")
def feedback_stats(
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    return feedback_summary(get_feedback(store))


@app.get("/analytics")
def analytics(
    user: dict = Depends(require_admin),
    store: DocumentStore = Depends(get_document_store),
) -> dict:
    return compute_analytics(get_events(), get_feedback(store))


@app.get("/cache/stats")
def cache_stats(user: dict = Depends(require_admin)) -> dict:
    return get_cache_stats()
