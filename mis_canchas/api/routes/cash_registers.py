from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from mis_canchas.api.dependencies import ensure_establishment_access, get_session, require_staff
from mis_canchas.constants import CASH_REGISTER_HISTORY_LIMIT
from mis_canchas.enums import CashRegisterStatus
from mis_canchas.models import User
from mis_canchas.schemas.cash_register_schemas import (
    CashMovementDTO,
    CashMovementOut,
    CashRegisterCloseDTO,
    CashRegisterOpenDTO,
    CashRegisterOut,
)
from mis_canchas.services.cash_register_service import (
    CashRegisterNotOpenError,
    CashRegisterService,
)

router = APIRouter(prefix="/api/cash-registers", tags=["cash-registers"])


@router.post("", response_model=CashRegisterOut, status_code=status.HTTP_201_CREATED)
async def open_cash_register(
    payload: CashRegisterOpenDTO,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_staff),
):
    ensure_establishment_access(user, payload.establishment_id)
    register = await CashRegisterService.open_register(
        session,
        payload.establishment_id,
        user.id,
        payload.initial_cash,
        payload.opening_notes,
    )
    await session.commit()
    return CashRegisterOut.model_validate(register)


@router.get("/active", response_model=Optional[CashRegisterOut])
async def get_active_cash_register(
    establishment_id: int = Query(..., alias="establishmentId"),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_staff),
):
    ensure_establishment_access(user, establishment_id)
    register = await CashRegisterService.get_active(session, establishment_id)
    return CashRegisterOut.model_validate(register) if register else None


@router.get("", response_model=List[CashRegisterOut])
async def list_cash_registers(
    establishment_id: int = Query(..., alias="establishmentId"),
    limit: int = Query(CASH_REGISTER_HISTORY_LIMIT, ge=1, le=365),
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_staff),
):
    ensure_establishment_access(user, establishment_id)
    registers = await CashRegisterService.list_registers(session, establishment_id, limit)
    return [CashRegisterOut.model_validate(register) for register in registers]


@router.put("/{register_id}/close", response_model=CashRegisterOut)
async def close_cash_register(
    register_id: int,
    payload: CashRegisterCloseDTO,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_staff),
):
    register = await CashRegisterService.get_register(session, register_id)
    ensure_establishment_access(user, register.establishment_id)
    register = await CashRegisterService.close_register(
        session,
        register_id,
        payload.actual_cash,
        payload.closing_notes,
        user.id,
    )
    await session.commit()
    return CashRegisterOut.model_validate(register)


@router.post(
    "/{register_id}/movements",
    response_model=CashMovementOut,
    status_code=status.HTTP_201_CREATED,
)
async def record_cash_movement(
    register_id: int,
    payload: CashMovementDTO,
    session: AsyncSession = Depends(get_session),
    user: User = Depends(require_staff),
):
    register = await CashRegisterService.get_register(session, register_id)
    ensure_establishment_access(user, register.establishment_id)
    if register.status != CashRegisterStatus.open:
        raise CashRegisterNotOpenError("La caja ya esta cerrada.")
    movement = await CashRegisterService.record_movement(
        session,
        register.establishment_id,
        payload.movement_type,
        payload.payment_method,
        payload.amount,
        description=payload.description,
        order_id=payload.order_id,
        booking_id=payload.booking_id,
        user_id=user.id,
    )
    await session.commit()
    return CashMovementOut.model_validate(movement)
