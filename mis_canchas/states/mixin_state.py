"""Mixin Base y Decoradores de Estados.

Componentes principales:

Decoradores:
    @require_role(*roles): Verifica el rol del usuario antes del evento
    @require_login(): Verifica que haya un usuario autenticado

Clase MixinState:
    Utilidades compartidas por los estados (usuario actual, montos).

Ejemplo de uso::

    class MyState(MixinState):
        @rx.event
        @require_role("staff", "admin")
        async def close_register(self):
            ...
"""
import functools
import inspect
from typing import Any, Callable, TypeVar

import reflex as rx

from mis_canchas.enums import UserRole

F = TypeVar("F", bound=Callable[..., Any])

STAFF_ROLES = (UserRole.staff.value, UserRole.admin.value)


def _guarded(method: F, check: Callable[[Any], str | None]) -> F:
    """Envuelve el evento respetando si es sync, async o generador async."""
    if inspect.isasyncgenfunction(method):
        @functools.wraps(method)
        async def agen_wrapper(self, *args, **kwargs):
            error_msg = check(self)
            if error_msg:
                yield rx.toast(error_msg, duration=3000)
                return
            async for item in method(self, *args, **kwargs):
                yield item

        return agen_wrapper  # type: ignore

    if inspect.iscoroutinefunction(method):
        @functools.wraps(method)
        async def async_wrapper(self, *args, **kwargs):
            error_msg = check(self)
            if error_msg:
                return rx.toast(error_msg, duration=3000)
            return await method(self, *args, **kwargs)

        return async_wrapper  # type: ignore

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        error_msg = check(self)
        if error_msg:
            return rx.toast(error_msg, duration=3000)
        return method(self, *args, **kwargs)

    return wrapper  # type: ignore


def require_login(
    message: str = "Debe iniciar sesion para continuar.",
) -> Callable[[F], F]:
    def decorator(method: F) -> F:
        return _guarded(method, lambda self: None if self._user_id() else message)

    return decorator


def require_role(*roles: str, message: str | None = None) -> Callable[[F], F]:
    """
    Decorador para verificar el rol antes de ejecutar un evento.

    Uso:
        @rx.event
        @require_role("staff", "admin")
        async def open_cash_register(self):
            ...
    """
    allowed = {getattr(role, "value", role) for role in roles}
    error_msg = message or "No tiene permisos para esta operacion."

    def check(self) -> str | None:
        if not self._user_id():
            return "Debe iniciar sesion para continuar."
        if self._user_role() not in allowed:
            return error_msg
        return None

    def decorator(method: F) -> F:
        return _guarded(method, check)

    return decorator


class MixinState:
    def _user(self) -> dict:
        user = getattr(self, "current_user", None)
        return user if isinstance(user, dict) else {}

    def _user_id(self) -> int | None:
        value = self._user().get("id")
        return int(value) if value else None

    def _user_role(self) -> str:
        return str(self._user().get("role") or UserRole.player.value)

    def _is_staff(self) -> bool:
        return self._user_role() in STAFF_ROLES

    def _establishment_id(self) -> int | None:
        value = self._user().get("establishment_id")
        return int(value) if value else None
