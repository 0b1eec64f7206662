from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.api.dependencies import (
    ensure_establishment_access,
    get_current_user,
    get_session,
    is_staff,
    require_staff,
)
from mis_canchas.enums import BookingStatus, PaymentStatus
from mis_canchas.models import Booking, User
from mis_canchas.schemas.booking_schemas import (
    BookingCancelDTO,
    BookingCreateDTO,
    BookingDetailDTO,
    BookingOut,
    BookingUpdateDTO,
    PaymentUpdateDTO,
)
from mis_canchas.services.booking_service import BookingLifecycleService

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


def _ensure_booking_access(user: User, booking: Booking) -> None:
    if booking.user_id == user.id:
        return
    if is_staff(user):
        ensure_establishment_access(user, booking.establishment_id)
        return
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reserva no encontrada.")


def _detail(booking, court, establishment) -> BookingDetailDTO:
    payload = booking.model_dump()
    payload["court_name"] = court.name if court else ""
    payload["facility_name"] = establishment.name if establishment else ""
    return BookingDetailDTO.model_validate(payload)


@router.get("", response_model=List[BookingDetailDTO])
async def list_my_bookings(
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    rows = await BookingLifecycleService.user_booking_rows(session, user.id)
    return [_detail(booking, court, establishment) for booking, court, establishment in rows]


@router.get("/{booking_id}", response_model=BookingDetailDTO)
async def get_booking(
    booking_id: int,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    booking, court, establishment = await BookingLifecycleService.booking_detail(
        session, booking_id
    )
    _ensure_booking_access(user, booking)
    return _detail(booking, court, establishment)


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreateDTO,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    booking = await BookingLifecycleService.create_booking(session, user.id, payload)
    await session.commit()
    return BookingOut.model_validate(booking)


@router.put("/{booking_id}", response_model=BookingOut)
async def update_booking(
    booking_id: int,
    payload: BookingUpdateDTO,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    booking = await BookingLifecycleService.get_booking(session, booking_id)
    _ensure_booking_access(user, booking)
    staff = is_staff(user)
    if payload.status is not None and payload.status != BookingStatus.cancelled and not staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Solo el establecimiento puede cambiar el estado de la reserva.",
        )
    booking = await BookingLifecycleService.update_booking(
        session,
        booking_id,
        payload,
        user_id=user.id,
        enforce_policy=not staff,
    )
    await session.commit()
    return BookingOut.model_validate(booking)


@router.post("/{booking_id}/cancel", response_model=BookingOut)
async def cancel_booking(
    booking_id: int,
    payload: BookingCancelDTO,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(get_current_user),
):
    booking = await BookingLifecycleService.get_booking(session, booking_id)
    _ensure_booking_access(user, booking)
    booking = await BookingLifecycleService.cancel(
        session,
        booking_id,
        payload.reason,
        user_id=user.id,
        enforce_policy=not is_staff(user),
    )
    await session.commit()
    return BookingOut.model_validate(booking)


@router.put("/{booking_id}/payment", response_model=BookingOut)
async def update_booking_payment(
    booking_id: int,
    payload: PaymentUpdateDTO,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_staff),
):
    booking = await BookingLifecycleService.get_booking(session, booking_id)
    ensure_establishment_access(user, booking.establishment_id)
    if payload.payment_status == PaymentStatus.paid and payload.amount is not None:
        booking = await BookingLifecycleService.collect_payment(
            session,
            booking_id,
            payload.amount,
            payload.payment_method or "cash",
            user_id=user.id,
        )
    else:
        booking = await BookingLifecycleService.update_payment_status(
            session,
            booking_id,
            payload.payment_status,
            payment_method=payload.payment_method.value if payload.payment_method else None,
        )
    await session.commit()
    return BookingOut.model_validate(booking)
