import reflex as rx
from sqlmodel import select

from mis_canchas.models import User as UserModel
from mis_canchas.utils.auth import decode_token
from mis_canchas.utils.db import get_async_session
from mis_canchas.utils.logger import get_logger

from .mixin_state import MixinState
from .types import CurrentUser

logger = get_logger("AuthState")

GUEST_USER: CurrentUser = {
    "id": None,
    "email": "",
    "name": "",
    "role": "player",
    "establishment_id": None,
}


def _user_snapshot(user: UserModel) -> CurrentUser:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name or "",
        "role": getattr(user.role, "value", user.role) or "player",
        "establishment_id": user.establishment_id,
    }


class AuthState(MixinState):
    token: str = rx.LocalStorage("", name="mis_canchas_token")
    current_user: CurrentUser = dict(GUEST_USER)

    @rx.var
    def is_authenticated(self) -> bool:
        return bool(self.current_user.get("id"))

    async def _load_user(self, user_id: int) -> CurrentUser | None:
        async with get_async_session() as session:
            user = (
                await session.exec(select(UserModel).where(UserModel.id == user_id))
            ).first()
        if not user or not user.is_active:
            return None
        return _user_snapshot(user)

    async def _restore(self) -> None:
        payload = decode_token(self.token)
        if not payload or not str(payload.get("sub", "")).isdigit():
            self.current_user = dict(GUEST_USER)
            return
        user = await self._load_user(int(payload["sub"]))
        if user is None:
            self.token = ""
            self.current_user = dict(GUEST_USER)
            return
        self.current_user = user

    @rx.event
    async def restore_session(self):
        """Recupera el usuario a partir del token guardado en el navegador."""
        await self._restore()

    @rx.event
    async def set_session_token(self, token: str):
        """Guarda un token emitido por el servicio de autenticacion."""
        self.token = (token or "").strip()
        await self._restore()
        if not self.current_user.get("id"):
            return rx.toast("Sesion invalida o expirada.", duration=3000)
        logger.info("Sesion iniciada para usuario %s", self.current_user["id"])

    @rx.event
    def logout(self):
        self.token = ""
        self.current_user = dict(GUEST_USER)
        return rx.redirect("/")
