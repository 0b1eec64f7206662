from .bookings import router as bookings_router
from .cash_registers import router as cash_registers_router
from .courts import router as courts_router
from .establishments import router as establishments_router
from .notifications import router as notifications_router
from .payments import router as payments_router

__all__ = [
    "bookings_router",
    "cash_registers_router",
    "courts_router",
    "establishments_router",
    "notifications_router",
    "payments_router",
]
