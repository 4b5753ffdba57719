from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ContentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Promotion(_ContentModel):
    id: str
    title: str
    description: str | None = None
    image_url: str = Field(..., alias="imageUrl")
    link: str | None = None
    is_active: bool = Field(default=True, alias="isActive")
    created_at: float = Field(..., alias="createdAt")


class PromotionCreate(_ContentModel):
    title: str = Field(..., min_length=1)
    description: str | None = None
    image_url: str = Field(..., pattern=r"^https?://", alias="imageUrl")
    link: str | None = Field(default=None, pattern=r"^https?://")
    is_active: bool = Field(default=True, alias="isActive")


class PromotionUpdate(_ContentModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    image_url: str | None = Field(default=None, pattern=r"^https?://", alias="imageUrl")
    link: str | None = Field(default=None, pattern=r"^https?://")
    is_active: bool | None = Field(default=None, alias="isActive")


class Notification(_ContentModel):
    id: str
    title: str
    body: str
    link: str | None = None
    is_read: bool = Field(default=False, alias="isRead")
    created_at: float = Field(..., alias="createdAt")


class NotificationSend(_ContentModel):
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    link: str | None = Field(default=None, pattern=r"^https?://")
    user_id: str | None = Field(
        default=None, alias="userId", description="Target user; every user when omitted"
    )


class NotificationSendResponse(_ContentModel):
    sent: int
