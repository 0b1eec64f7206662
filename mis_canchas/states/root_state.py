import reflex as rx
from .auth_state import AuthState
from .cash_register_state import CashRegisterState
from .booking_state import BookingState
from .notification_state import NotificationState

_mixins = [
    NotificationState,
    BookingState,
    CashRegisterState,
    AuthState,
]

_class_dict = {
    "__module__": __name__,
    "__qualname__": "RootState",
    "__doc__": """
    Estado raiz que combina los estados modulares (mixins).
    Cada estado hereda de MixinState y comparte current_user.
    """,
    "__annotations__": {},
}

for _mixin in _mixins:
    if hasattr(_mixin, "__annotations__"):
        _class_dict["__annotations__"].update(_mixin.__annotations__)

    for _name, _value in _mixin.__dict__.items():
        if _name.startswith("__"):
            continue
        _class_dict[_name] = _value

# BaseStateMeta debe procesar los metodos de todos los mixins
RootState = type("RootState", (*_mixins, rx.State), _class_dict)
