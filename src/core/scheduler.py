# src/core/scheduler.py
"""
Scheduler: dueño explícito de los timers periódicos de la sesión.

En lugar de timers globales, el engine recibe un `Scheduler` y registra sus
callbacks con `every(...)`. Cada registro devuelve un `TimerHandle`
cancelable; `shutdown()` cancela todos al desmontar la sesión para no dejar
trabajo vivo contra una UI ya destruida.

Funciona sobre el event loop de asyncio en curso (un solo hilo).
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import itertools
from typing import Any

from loguru import logger

TickCallback = Callable[[], Any]


class TimerHandle:
    """Handle de un timer periódico."""

    def __init__(self, name: str, interval: float, task: asyncio.Task[None]) -> None:
        self.name = name
        self.interval = interval
        self._task = task
        self.fired = 0

    @property
    def active(self) -> bool:
        return not self._task.done()

    def cancel(self) -> bool:
        """Cancela el timer; devuelve False si ya estaba parado."""
        if self._task.done():
            return False
        self._task.cancel()
        logger.debug(f"Timer '{self.name}' cancelado")
        return True

    async def wait_closed(self) -> None:
        """Espera a que la tarea termine tras `cancel()`."""
        try:
            await self._task
        except asyncio.CancelledError:
            pass


class Scheduler:
    """
    Registro de timers periódicos sobre asyncio.

    Uso:
        scheduler = Scheduler()
        handle = scheduler.every(3.0, engine.tick, name="price-tick")
        ...
        scheduler.shutdown()
    """

    def __init__(self) -> None:
        self._handles: dict[str, TimerHandle] = {}
        self._ids = itertools.count(1)

    def every(
        self,
        interval: float,
        callback: TickCallback,
        *,
        name: str | None = None,
        run_immediately: bool = False,
    ) -> TimerHandle:
        """
        Ejecuta `callback` cada `interval` segundos hasta que se cancele.

        Debe llamarse desde código que corre dentro del event loop.
        Una excepción en el callback se registra y el timer sigue vivo.
        """
        if interval <= 0:
            raise ValueError(f"interval debe ser > 0 (recibido {interval})")

        name = name or f"timer-{next(self._ids)}"
        previous = self._handles.get(name)
        if previous is not None:
            previous.cancel()

        loop = asyncio.get_running_loop()
        handle_ref: list[TimerHandle] = []

        async def _loop() -> None:
            if not run_immediately:
                await asyncio.sleep(interval)
            while True:
                try:
                    callback()
                except Exception:
                    logger.exception(f"Error en el timer '{name}'")
                handle_ref[0].fired += 1
                await asyncio.sleep(interval)

        handle = TimerHandle(name, interval, loop.create_task(_loop()))
        handle_ref.append(handle)
        self._handles[name] = handle
        logger.debug(f"Timer '{name}' programado cada {interval}s")
        return handle

    def cancel(self, handle: TimerHandle | str) -> bool:
        name = handle if isinstance(handle, str) else handle.name
        found = self._handles.pop(name, None)
        if found is None:
            return False
        return found.cancel()

    def active_handles(self) -> list[TimerHandle]:
        return [h for h in self._handles.values() if h.active]

    def shutdown(self) -> int:
        """Cancela todos los timers; devuelve cuántos estaban activos."""
        cancelled = sum(1 for h in self._handles.values() if h.cancel())
        self._handles.clear()
        if cancelled:
            logger.info(f"Scheduler detenido ({cancelled} timers cancelados)")
        return cancelled

    async def aclose(self) -> None:
        """`shutdown()` y espera a que las tareas canceladas terminen."""
        handles = list(self._handles.values())
        self.shutdown()
        for h in handles:
            await h.wait_closed()


__all__ = ["Scheduler", "TimerHandle", "TickCallback"]
