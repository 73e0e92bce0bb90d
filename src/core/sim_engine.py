# src/core/sim_engine.py

"""
Motor de backtest simulado (Monte Carlo) sobre las posiciones de la cartera.

✅ Principios:
- NO es un backtest contra precios históricos: cada día, para cada activo en
  cartera, la regla de la estrategia produce un resultado de trade con signo.
- Aleatoriedad inyectada (`rng`) para poder reproducir resultados en tests.
- Sin efectos secundarios: los activos de entrada no se modifican.

📦 Uso típico:
    from core.sim_engine import run_backtest, submit_backtest

    results = run_backtest(ledger.held_assets(), rng=make_rng(7))

    # Desde código async (la UI muestra "Backtesting..." mientras tanto):
    job = submit_backtest(ledger.held_assets(), rng=rng, delay=1.5)
    job.on_complete(lambda j: render(j.result()))
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator, Iterable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any, Union

from loguru import logger
import numpy as np

from core.types import Asset, BacktestResult, ValuePoint
from strategies import StrategySpec, resolve_strategies

StrategyRef = Union[str, StrategySpec]

DEFAULT_DAYS = 30
DEFAULT_DELAY_SECONDS = 1.5


# ----------------------------- #
#  Helpers
# ----------------------------- #


def _resolve(strategies: Iterable[StrategyRef] | None) -> list[StrategySpec]:
    if strategies is None:
        return resolve_strategies(None)
    specs: list[StrategySpec] = []
    for ref in strategies:
        if isinstance(ref, StrategySpec):
            specs.append(ref)
        else:
            specs.extend(resolve_strategies([ref]))
    return specs


def held_only(assets: Iterable[Asset]) -> list[Asset]:
    """Filtra los activos con posición abierta (quantity_held > 0)."""
    return [a for a in assets if a.quantity_held > 0]


def portfolio_value(assets: Iterable[Asset]) -> float:
    return float(sum(a.market_value for a in assets))


def _simulate_strategy(
    spec: StrategySpec,
    assets: Sequence[Asset],
    days: int,
    rng: np.random.Generator,
    base_value: float,
    now: datetime,
) -> BacktestResult:
    profit = 0.0
    trades = 0
    wins = 0
    history: list[ValuePoint] = []

    for day in range(days):
        day_profit = 0.0
        for asset in assets:
            trade_result = spec.trade_result(asset, rng)
            trades += 1
            if trade_result > 0:
                wins += 1
            day_profit += trade_result * asset.quantity_held

        profit += day_profit
        history.append(
            ValuePoint(
                timestamp=now - timedelta(days=days - day),
                portfolio_value=base_value + profit,
            )
        )

    win_rate = round((wins / trades) * 100.0, 1) if trades else 0.0
    return BacktestResult(
        strategy_name=spec.name,
        profit=round(profit, 2),
        trade_count=trades,
        win_rate_pct=win_rate,
        value_history=tuple(history),
    )


# ----------------------------- #
#  API síncrona
# ----------------------------- #


def run_backtest(
    held_assets: Iterable[Asset],
    strategies: Iterable[StrategyRef] | None = None,
    days: int = DEFAULT_DAYS,
    *,
    rng: np.random.Generator,
    base_value: float | None = None,
    now: datetime | None = None,
) -> list[BacktestResult]:
    """
    Simula `days` días de trading para cada estrategia.

    Args:
        held_assets: activos de la cartera (se ignoran los que no tienen posición).
        strategies: ids o StrategySpec; None → todas las registradas.
        days: días simulados.
        rng: fuente aleatoria (numpy.random.Generator).
        base_value: valor de partida de la curva; por defecto, valor actual de la cartera.
        now: referencia temporal de la curva (por defecto, ahora en UTC).

    Returns:
        Un BacktestResult por estrategia, en el mismo orden; [] si no hay posiciones.
    """
    assets = held_only(held_assets)
    if not assets:
        logger.warning("Backtest sin posiciones en cartera: no se ejecuta.")
        return []

    specs = _resolve(strategies)
    now = now or datetime.now(timezone.utc)
    start_value = portfolio_value(assets) if base_value is None else float(base_value)

    results = [_simulate_strategy(s, assets, days, rng, start_value, now) for s in specs]
    for r in results:
        logger.info(
            f"Backtest {r.strategy_name}: profit={r.profit:.2f} trades={r.trade_count} "
            f"win_rate={r.win_rate_pct:.1f}%"
        )
    return results


# ----------------------------- #
#  API asíncrona
# ----------------------------- #


async def run_backtest_async(
    held_assets: Iterable[Asset],
    strategies: Iterable[StrategyRef] | None = None,
    days: int = DEFAULT_DAYS,
    *,
    rng: np.random.Generator,
    delay: float = DEFAULT_DELAY_SECONDS,
    base_value: float | None = None,
    now: datetime | None = None,
) -> list[BacktestResult]:
    """Igual que `run_backtest`, tras una espera simulada de `delay` segundos."""
    assets = tuple(held_assets)
    if delay > 0:
        await asyncio.sleep(delay)
    return run_backtest(assets, strategies, days, rng=rng, base_value=base_value, now=now)


class BacktestJob:
    """
    Handle de un backtest en curso (envuelve un asyncio.Task).

    - Un único callback de finalización: registrar otro sustituye al anterior.
    - Si el job ya terminó, el callback se invoca en el acto.
    - Cancelable, igual que el resto del trabajo asíncrono de la sesión.
    """

    def __init__(self, task: asyncio.Task[list[BacktestResult]]) -> None:
        self._task = task
        self._callback: Callable[[BacktestJob], Any] | None = None
        self._notified = False
        task.add_done_callback(self._on_task_done)

    # Estado ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return not self._task.done()

    def done(self) -> bool:
        return self._task.done()

    def cancelled(self) -> bool:
        return self._task.cancelled()

    def result(self) -> list[BacktestResult]:
        """Resultados; lanza InvalidStateError si aún no terminó."""
        return self._task.result()

    def exception(self) -> BaseException | None:
        return self._task.exception()

    # Control -----------------------------------------------------------------

    def cancel(self) -> bool:
        return self._task.cancel()

    def on_complete(self, callback: Callable[[BacktestJob], Any]) -> None:
        self._callback = callback
        if self._task.done():
            self._notify()

    def __await__(self) -> Generator[Any, None, list[BacktestResult]]:
        return self._task.__await__()

    # Internos ----------------------------------------------------------------

    def _on_task_done(self, task: asyncio.Task[list[BacktestResult]]) -> None:
        if task.cancelled():
            logger.info("Backtest cancelado.")
        elif task.exception() is not None:
            logger.error(f"Backtest fallido: {task.exception()!r}")
        self._notify()

    def _notify(self) -> None:
        if self._notified or self._callback is None:
            return
        self._notified = True
        self._callback(self)


def submit_backtest(
    held_assets: Iterable[Asset],
    strategies: Iterable[StrategyRef] | None = None,
    days: int = DEFAULT_DAYS,
    *,
    rng: np.random.Generator,
    delay: float = DEFAULT_DELAY_SECONDS,
    base_value: float | None = None,
    on_complete: Callable[[BacktestJob], Any] | None = None,
) -> BacktestJob:
    """
    Programa el backtest en el event loop en curso y devuelve su handle.

    Las posiciones se copian en el momento de la llamada: lo que ocurra
    después en la cartera no afecta a la simulación.
    """
    loop = asyncio.get_running_loop()
    snapshot = tuple(held_assets)
    task = loop.create_task(
        run_backtest_async(
            snapshot, strategies, days, rng=rng, delay=delay, base_value=base_value
        )
    )
    job = BacktestJob(task)
    if on_complete is not None:
        job.on_complete(on_complete)
    logger.debug(f"Backtest programado ({len(snapshot)} activos, delay={delay}s)")
    return job


__all__ = [
    "DEFAULT_DAYS",
    "DEFAULT_DELAY_SECONDS",
    "BacktestJob",
    "held_only",
    "portfolio_value",
    "run_backtest",
    "run_backtest_async",
    "submit_backtest",
]
