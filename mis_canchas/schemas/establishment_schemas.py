from __future__ import annotations

from decimal import Decimal

from pydantic import Field

from mis_canchas.schemas.base import BaseSchema, Money


class CourtOut(BaseSchema):
    id: int | None = None
    establishment_id: int
    name: str
    sport: str = ""
    price_per_hour: Money = Decimal("0.00")
    surface: str | None = None
    covered: bool = False
    is_active: bool = True


class EstablishmentOut(BaseSchema):
    id: int | None = None
    name: str
    slug: str = ""
    city: str = ""
    address: str = ""
    phone: str | None = None
    is_active: bool = True
    courts: list[CourtOut] = Field(default_factory=list)


class EstablishmentPageOut(BaseSchema):
    items: list[EstablishmentOut] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20
