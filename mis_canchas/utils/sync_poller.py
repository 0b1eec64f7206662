"""
Revalidacion periodica de estado autoritativo del servidor.

``SyncPoller`` vuelve a pedir un recurso cada ``interval`` segundos
mientras ``should_continue()`` sea verdadero. Se usa para la caja
abierta y las notificaciones, donde no hay push en tiempo real.

Reglas:
    - La condicion se evalua despues de cada espera y despues de cada
      consulta, asi que el sondeo termina a lo sumo un tick despues de
      que la condicion deja de cumplirse.
    - Nunca hay dos consultas en vuelo del mismo poller.
    - Los errores de consulta se registran y se reintenta en el
      siguiente intervalo.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from mis_canchas.utils.logger import get_logger

logger = get_logger("SyncPoller")

FetchFn = Callable[[], Awaitable[Any]]
ConditionFn = Callable[[], bool]
SleepFn = Callable[[float], Awaitable[Any]]


class SyncPoller:
    def __init__(
        self,
        fetch: FetchFn,
        interval: float,
        should_continue: ConditionFn | None = None,
        sleep: SleepFn = asyncio.sleep,
        name: str = "poller",
    ) -> None:
        if interval <= 0:
            raise ValueError("El intervalo de sondeo debe ser positivo.")
        self._fetch = fetch
        self._interval = interval
        self._should_continue = should_continue or (lambda: True)
        self._sleep = sleep
        self.name = name
        self._running = False
        self._stopped = False
        self._in_flight = False
        self.ticks = 0
        self.failures = 0

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        self._stopped = True

    def _active(self) -> bool:
        return not self._stopped and bool(self._should_continue())

    async def tick(self) -> bool:
        """Ejecuta una consulta. Devuelve False si fallo."""
        if self._in_flight:
            return True
        self._in_flight = True
        try:
            await self._fetch()
            return True
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failures += 1
            logger.warning("Fallo de sondeo %s: %s", self.name, e)
            return False
        finally:
            self._in_flight = False
            self.ticks += 1

    async def run(self) -> None:
        if self._running:
            logger.info("Sondeo %s ya en ejecucion, se ignora.", self.name)
            return
        self._running = True
        self._stopped = False
        try:
            while self._active():
                await self._sleep(self._interval)
                if not self._active():
                    break
                await self.tick()
        finally:
            self._running = False
