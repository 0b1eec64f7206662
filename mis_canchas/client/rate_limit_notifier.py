"""
Avisos al usuario cuando la API responde HTTP 429.

Escala los mensajes segun el intento: dos advertencias y un unico
error final, con un tiempo minimo entre avisos para no saturar.
"""
from __future__ import annotations

import time
from typing import Any, Callable

from mis_canchas.constants import RATE_LIMIT_NOTIFICATION_COOLDOWN
from mis_canchas.utils.logger import get_logger

logger = get_logger("RateLimitNotifier")

# (nivel, titulo, mensaje)
NotifyFn = Callable[[str, str, str], Any]


def _log_notification(level: str, title: str, message: str) -> None:
    if level == "error":
        logger.error("%s: %s", title, message)
    else:
        logger.warning("%s: %s", title, message)


class RateLimitNotifier:
    def __init__(
        self,
        notify: NotifyFn | None = None,
        cooldown: float = RATE_LIMIT_NOTIFICATION_COOLDOWN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._notify = notify or _log_notification
        self._cooldown = cooldown
        self._clock = clock
        self._last_notification: float | None = None
        self._max_retries_error_shown = False

    def __call__(self, retry_after: int, attempt: int) -> bool:
        return self.on_rate_limit(retry_after, attempt)

    def on_rate_limit(self, retry_after: int, attempt: int) -> bool:
        """Devuelve True si se mostro un aviso."""
        now = self._clock()
        if self._last_notification is not None and now - self._last_notification < self._cooldown:
            return False

        if attempt == 1:
            self._last_notification = now
            self._max_retries_error_shown = False
            self._notify(
                "warning",
                "Conexión lenta",
                "Estamos procesando tu solicitud. Por favor, espera un momento.",
            )
            return True
        if attempt == 2:
            self._last_notification = now
            self._notify(
                "warning",
                "Muchas solicitudes",
                "Estás navegando muy rápido. Reintentando automáticamente...",
            )
            return True
        if attempt >= 3 and not self._max_retries_error_shown:
            self._last_notification = now
            self._max_retries_error_shown = True
            self._notify(
                "error",
                "Límite de solicitudes alcanzado",
                f"Por favor, espera {retry_after} segundos antes de continuar navegando.",
            )
            return True
        return False

    def reset(self) -> None:
        self._last_notification = None
        self._max_retries_error_shown = False
