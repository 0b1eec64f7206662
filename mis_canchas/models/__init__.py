from .establishment import Court, Establishment, User
from .cash_register import CashRegister, CashRegisterMovement
from .booking import Booking
from .notification import Notification

__all__ = [
    "User",
    "Establishment",
    "Court",
    "CashRegister",
    "CashRegisterMovement",
    "Booking",
    "Notification",
]
