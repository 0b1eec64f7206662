from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal

import reflex as rx
import sqlalchemy
from sqlalchemy import Numeric
from sqlmodel import JSON, Column, Field, Relationship

from mis_canchas.enums import UserRole


class User(rx.Model, table=True):
    """Usuario de la plataforma (jugador, personal o administrador)."""

    email: str = Field(unique=True, index=True, nullable=False)
    name: str = Field(default="")
    phone: Optional[str] = Field(default=None)
    role: UserRole = Field(default=UserRole.player)
    # Establecimiento donde trabaja (personal y administradores)
    establishment_id: Optional[int] = Field(default=None, index=True)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(
        default_factory=datetime.now,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False)),
    )


class Establishment(rx.Model, table=True):
    """Establecimiento deportivo (tenant)."""

    name: str = Field(nullable=False, index=True)
    slug: str = Field(unique=True, index=True, nullable=False)
    city: str = Field(default="", index=True)
    address: str = Field(default="")
    phone: Optional[str] = Field(default=None)
    owner_id: Optional[int] = Field(default=None, foreign_key="user.id")
    # {"monday": {"open": "08:00", "close": "23:00", "closed": false}, ...}
    opening_hours: dict = Field(default_factory=dict, sa_column=Column(JSON))
    is_active: bool = Field(default=True)
    created_at: datetime = Field(
        default_factory=datetime.now,
        sa_column=sqlalchemy.Column(sqlalchemy.DateTime(timezone=False)),
    )

    courts: List["Court"] = Relationship(back_populates="establishment")


class Court(rx.Model, table=True):
    """Cancha reservable de un establecimiento."""

    establishment_id: int = Field(foreign_key="establishment.id", index=True)
    name: str = Field(nullable=False)
    sport: str = Field(default="futbol", index=True)
    price_per_hour: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=sqlalchemy.Column(Numeric(10, 2)),
    )
    surface: Optional[str] = Field(default=None)
    covered: bool = Field(default=False)
    is_active: bool = Field(default=True)

    establishment: Optional[Establishment] = Relationship(back_populates="courts")
