"""Estados de Mis Canchas.

Los estados son mixins sobre MixinState que se combinan en RootState;
la aplicacion usa ``mis_canchas.state.State``.
"""
from .mixin_state import MixinState, require_login, require_role
from .auth_state import AuthState
from .cash_register_state import CashRegisterState
from .booking_state import BookingState
from .notification_state import NotificationState

__all__ = [
    "MixinState",
    "require_login",
    "require_role",
    "AuthState",
    "CashRegisterState",
    "BookingState",
    "NotificationState",
]
