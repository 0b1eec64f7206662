import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.api.dependencies import ensure_establishment_access, get_session, require_staff
from mis_canchas.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from mis_canchas.enums import BookingStatus
from mis_canchas.models import User
from mis_canchas.schemas.booking_schemas import AdminReservationDTO
from mis_canchas.schemas.establishment_schemas import EstablishmentOut, EstablishmentPageOut
from mis_canchas.services.booking_service import BookingLifecycleService
from mis_canchas.services.establishment_service import EstablishmentService

router = APIRouter(prefix="/api/establishments", tags=["establishments"])


@router.get("", response_model=EstablishmentPageOut)
async def search_establishments(
    city: str = "",
    sport: str = "",
    q: str = "",
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    session: AsyncSession = Depends(get_session),
):
    items, total, page, limit = await EstablishmentService.search(
        session, city=city, sport=sport, query=q, page=page, limit=limit
    )
    return EstablishmentPageOut(
        items=[EstablishmentOut.model_validate(item) for item in items],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/{establishment_id}", response_model=EstablishmentOut)
async def get_establishment(
    establishment_id: int,
    session: AsyncSession = Depends(get_session),
):
    establishment = await EstablishmentService.get_with_courts(session, establishment_id)
    return EstablishmentOut.model_validate(establishment)


@router.get("/{establishment_id}/reservations", response_model=List[AdminReservationDTO])
async def list_establishment_reservations(
    establishment_id: int,
    status: Optional[BookingStatus] = None,
    date: Optional[datetime.date] = None,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_staff),
):
    ensure_establishment_access(user, establishment_id)
    return await BookingLifecycleService.list_establishment_reservations(
        session, establishment_id, status=status, date=date
    )
