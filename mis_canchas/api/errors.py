"""Traduccion de errores de dominio a respuestas HTTP."""
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from mis_canchas.services.booking_service import (
    BookingConflictError,
    BookingError,
    BookingNotFoundError,
    BookingPolicyError,
    BookingTransitionError,
)
from mis_canchas.services.cash_register_service import (
    CashRegisterAlreadyOpenError,
    CashRegisterError,
    CashRegisterNotFoundError,
    CashRegisterNotOpenError,
)
from mis_canchas.services.establishment_service import EstablishmentNotFoundError
from mis_canchas.services.notification_service import NotificationNotFoundError

ERROR_STATUS = {
    CashRegisterNotFoundError: status.HTTP_404_NOT_FOUND,
    BookingNotFoundError: status.HTTP_404_NOT_FOUND,
    EstablishmentNotFoundError: status.HTTP_404_NOT_FOUND,
    NotificationNotFoundError: status.HTTP_404_NOT_FOUND,
    CashRegisterAlreadyOpenError: status.HTTP_409_CONFLICT,
    CashRegisterNotOpenError: status.HTTP_409_CONFLICT,
    BookingConflictError: status.HTTP_409_CONFLICT,
    BookingTransitionError: status.HTTP_409_CONFLICT,
    BookingPolicyError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    CashRegisterError: status.HTTP_400_BAD_REQUEST,
    BookingError: status.HTTP_400_BAD_REQUEST,
}


def status_for(exc: Exception) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_400_BAD_REQUEST


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_for(exc), content={"detail": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    for error_class in ERROR_STATUS:
        app.add_exception_handler(error_class, domain_error_handler)
