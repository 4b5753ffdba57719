from __future__ import annotations

import time
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..store.documents import DocumentStore

FeedbackStatus = Literal["new", "read", "archived"]

_COLLECTION = "feedbacks"


class FeedbackRequest(BaseModel):
    rating: int = Field(..., ge=-1, le=5, description="-1 dislike, 0 neutral, 1-5 stars")
    comment: str = Field(..., min_length=1, max_length=2000)
    page: str | None = None


class FeedbackOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(..., alias="userId")
    user_name: str = Field(..., alias="userName")
    rating: int
    comment: str
    page: str | None = None
    status: FeedbackStatus = "new"
    created_at: float = Field(..., alias="createdAt")


class FeedbackStatusUpdate(BaseModel):
    status: FeedbackStatus


def record_feedback(
    store: DocumentStore,
    user_id: str,
    user_name: str,
    body: FeedbackRequest,
) -> FeedbackOut:
    data = {
        "userId": user_id,
        "userName": user_name,
        "rating": body.rating,
        "comment": body.comment,
        "page": body.page,
        "status": "new",
        "createdAt": time.time(),
    }
    feedback_id = store.add(_COLLECTION, data)
    return FeedbackOut.model_validate({**data, "id": feedback_id})


def get_feedback(store: DocumentStore, status: FeedbackStatus | None = None) -> list[FeedbackOut]:
    docs = store.list(_COLLECTION, status=status) if status else store.list(_COLLECTION)
    return [FeedbackOut.model_validate(d) for d in docs]


def set_feedback_status(store: DocumentStore, feedback_id: str, status: FeedbackStatus) -> FeedbackOut:
    """Raises ``KeyError`` for unknown feedback."""
    store.update(f"{_COLLECTION}/{feedback_id}", {"status": status})
    return FeedbackOut.model_validate(store.get(f"{_COLLECTION}/{feedback_id}"))


def feedback_summary(feedback: list[FeedbackOut]) -> dict[str, Any]:
    stars = [f.rating for f in feedback if f.rating >= 1]
    by_status = {"new": 0, "read": 0, "archived": 0}
    for f in feedback:
        by_status[f.status] += 1
    return {
        "total": len(feedback),
        "average_rating": round(sum(stars) / len(stars), 2) if stars else 0.0,
        "dislikes": sum(1 for f in feedback if f.rating == -1),
        "by_status": by_status,
    }
