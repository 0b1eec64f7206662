from datetime import datetime
from typing import Dict, Optional

import reflex as rx
import sqlalchemy
from sqlmodel import JSON, Column, Field

from mis_canchas.enums import NotificationType


class Notification(rx.Model, table=True):
    """Aviso para un usuario (reservas, pagos, caja)."""

    user_id: int = Field(foreign_key="user.id", index=True)
    type: NotificationType = Field(nullable=False)
    title: str = Field(nullable=False)
    message: str = Field(default="")
    data: Dict = Field(default_factory=dict, sa_column=Column(JSON))
    is_read: bool = Field(default=False, index=True)
    read_at: Optional[datetime] = Field(
        default=None,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False)),
    )
    created_at: datetime = Field(
        default_factory=datetime.now,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False), index=True),
    )
