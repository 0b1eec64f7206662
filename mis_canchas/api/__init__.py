"""API REST de Mis Canchas, montada sobre el backend de Reflex."""
from fastapi import Depends, FastAPI

from mis_canchas.api.dependencies import rate_limit
from mis_canchas.api.errors import register_error_handlers
from mis_canchas.api.routes import (
    bookings_router,
    cash_registers_router,
    courts_router,
    establishments_router,
    notifications_router,
    payments_router,
)
from mis_canchas.utils.rate_limit import get_rate_limit_status


def create_api() -> FastAPI:
    api = FastAPI(title="Mis Canchas API")
    register_error_handlers(api)
    for router in (
        cash_registers_router,
        bookings_router,
        courts_router,
        establishments_router,
        notifications_router,
        payments_router,
    ):
        api.include_router(router, dependencies=[Depends(rate_limit)])

    @api.get("/api/health")
    async def health():
        return {"status": "ok", "rate_limit": get_rate_limit_status()}

    return api


__all__ = ["create_api"]
