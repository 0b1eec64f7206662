import datetime

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.api.dependencies import get_session
from mis_canchas.schemas.booking_schemas import CourtAvailabilityDTO
from mis_canchas.services.booking_service import BookingLifecycleService

router = APIRouter(prefix="/api/courts", tags=["courts"])


@router.get("/{court_id}/availability", response_model=CourtAvailabilityDTO)
async def get_court_availability(
    court_id: int,
    date: datetime.date,
    duration: int = Query(60, ge=30, le=240),
    session: AsyncSession = Depends(get_session),
):
    """Turnos libres de la cancha; es publico, igual que la busqueda."""
    return await BookingLifecycleService.available_slots(session, court_id, date, duration)
