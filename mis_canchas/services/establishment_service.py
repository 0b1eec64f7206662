from __future__ import annotations

from typing import List, Tuple

from sqlalchemy.orm import selectinload
from sqlmodel import func, or_, select
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from mis_canchas.models import Court, Establishment


class EstablishmentNotFoundError(ValueError):
    pass


def _page_bounds(page: int, limit: int) -> Tuple[int, int]:
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
    return page, limit


class EstablishmentService:
    @staticmethod
    async def search(
        session: AsyncSession,
        city: str = "",
        sport: str = "",
        query: str = "",
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> Tuple[List[Establishment], int, int, int]:
        """
        Busca establecimientos activos con paginacion.

        Returns:
            (items, total, page, limit)
        """
        page, limit = _page_bounds(page, limit)
        filters = [Establishment.is_active == True]  # noqa: E712
        if city.strip():
            filters.append(Establishment.city == city.strip())
        if query.strip():
            term = f"%{query.strip()}%"
            filters.append(
                or_(Establishment.name.ilike(term), Establishment.address.ilike(term))
            )
        if sport.strip():
            court_ids = (
                select(Court.establishment_id)
                .where(Court.sport == sport.strip())
                .where(Court.is_active == True)  # noqa: E712
            )
            filters.append(Establishment.id.in_(court_ids))

        count_query = select(func.count()).select_from(Establishment).where(*filters)
        total = int((await session.exec(count_query)).first() or 0)

        items_query = (
            select(Establishment)
            .where(*filters)
            .options(selectinload(Establishment.courts))
            .order_by(Establishment.name)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = list((await session.exec(items_query)).all())
        return items, total, page, limit

    @staticmethod
    async def get_with_courts(
        session: AsyncSession,
        establishment_id: int,
    ) -> Establishment:
        establishment = (
            await session.exec(
                select(Establishment)
                .where(Establishment.id == establishment_id)
                .options(selectinload(Establishment.courts))
            )
        ).first()
        if not establishment:
            raise EstablishmentNotFoundError("Establecimiento no encontrado.")
        return establishment
