from __future__ import annotations

from datetime import datetime

from pydantic import Field

from mis_canchas.enums import NotificationType
from mis_canchas.schemas.base import BaseSchema


class NotificationOut(BaseSchema):
    id: int | None = None
    type: NotificationType
    title: str
    message: str = ""
    data: dict = Field(default_factory=dict)
    is_read: bool = False
    read_at: datetime | None = None
    created_at: datetime | None = None


class NotificationListOut(BaseSchema):
    items: list[NotificationOut] = Field(default_factory=list)
    unread_count: int = 0
