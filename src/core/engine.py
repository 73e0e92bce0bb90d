# src/core/engine.py
"""
SimulationEngine: sesión de simulación completa.

Une las piezas del núcleo:
- Catálogo de activos (series sintéticas) y `PortfolioLedger`.
- Tick periódico de precios registrado en un `Scheduler` propio o inyectado.
- Backtest asíncrono (`BacktestJob`); mientras corre, la cartera queda en
  solo lectura y los comandos devuelven BACKTEST_RUNNING.
- Dashboard analítico por activo.

Uso:
    settings = load_settings()
    engine = SimulationEngine(settings)

    async def main():
        engine.start()
        engine.execute_trade("1", "buy", 5)
        job = engine.run_backtest().unwrap()
        results = await job
        await engine.aclose()
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from loguru import logger
import numpy as np

from core.config_loader import SimulationSettings
from core.errors import ErrorKind, OperationResult
from core.portfolio import PortfolioConfig, PortfolioLedger
from core.scheduler import Scheduler, TimerHandle
from core.sim_engine import BacktestJob, submit_backtest
from core.types import Asset, BacktestResult, TradeSide, Transaction
from data.catalog import build_catalog
from data.generator import make_rng, tick_prices
from features.analytics import DEFAULT_METRICS, AnalyticsMetric, build_dashboard, toggle_metric

TICK_TIMER = "price-tick"


class SimulationEngine:
    """Sesión de simulación: cartera + precios vivos + backtests."""

    def __init__(
        self,
        settings: SimulationSettings | None = None,
        *,
        rng: np.random.Generator | None = None,
        scheduler: Scheduler | None = None,
        now: datetime | None = None,
    ) -> None:
        self.settings = settings or SimulationSettings()
        self.rng = rng if rng is not None else make_rng(self.settings.seed)
        self.scheduler = scheduler or Scheduler()
        self.metrics: tuple[AnalyticsMetric, ...] = DEFAULT_METRICS

        assets = build_catalog(
            self.settings.catalog,
            rng=self.rng,
            history_length=self.settings.history_length,
            now=now,
        )
        self.ledger = PortfolioLedger(assets, PortfolioConfig(cash=self.settings.initial_cash))
        self._tick_handle: TimerHandle | None = None
        self._job: BacktestJob | None = None
        self.last_results: list[BacktestResult] = []
        self.ticks = 0

        logger.info(
            f"Sesión '{self.settings.catalog}' lista: {len(assets)} activos, "
            f"cash={self.settings.initial_cash:.2f}, tick={self.settings.tick_mode}"
        )

    # ------------------------------------------------------------------ #
    # Ciclo de vida
    # ------------------------------------------------------------------ #
    @property
    def running(self) -> bool:
        return self._tick_handle is not None and self._tick_handle.active

    @property
    def backtest_running(self) -> bool:
        return self._job is not None and self._job.running

    def start(self) -> TimerHandle:
        """Programa el tick periódico (requiere event loop en curso)."""
        if self.running:
            assert self._tick_handle is not None
            return self._tick_handle
        self._tick_handle = self.scheduler.every(
            self.settings.tick_interval_seconds, self.tick, name=TICK_TIMER
        )
        logger.info(f"Ticks de precio cada {self.settings.tick_interval_seconds}s")
        return self._tick_handle

    def stop(self) -> None:
        """Cancela el tick y un backtest pendiente. Idempotente."""
        if self._tick_handle is not None:
            self.scheduler.cancel(self._tick_handle)
            self._tick_handle = None
        if self.backtest_running:
            assert self._job is not None
            self._job.cancel()

    async def aclose(self) -> None:
        self.stop()
        await self.scheduler.aclose()

    def tick(self, now: datetime | None = None) -> list[Asset]:
        """Avanza todos los precios un paso y los vuelca en el ledger."""
        ticked = tick_prices(
            self.ledger.assets(), rng=self.rng, mode=self.settings.tick_mode, now=now
        )
        self.ledger.apply_ticks(ticked)
        self.ticks += 1
        return self.ledger.assets()

    # ------------------------------------------------------------------ #
    # Comandos de cartera
    # ------------------------------------------------------------------ #
    def _guarded(self, command: Callable[..., OperationResult], *args: Any) -> OperationResult:
        if self.backtest_running:
            msg = "Backtest en curso: la cartera es de solo lectura"
            logger.warning(f"[{ErrorKind.BACKTEST_RUNNING.value}] {msg}")
            return OperationResult.failure(ErrorKind.BACKTEST_RUNNING, msg)
        return command(*args)

    def execute_trade(
        self, asset_id: str, side: TradeSide | str, quantity: Any
    ) -> OperationResult[Transaction]:
        return self._guarded(self.ledger.execute_trade, asset_id, side, quantity)

    def add_position(self, asset_id: str, shares: Any = 1) -> OperationResult[Asset]:
        return self._guarded(self.ledger.add_position, asset_id, shares)

    def remove_position(self, asset_id: str) -> OperationResult[Asset]:
        return self._guarded(self.ledger.remove_position, asset_id)

    def update_shares(self, asset_id: str, new_shares: Any) -> OperationResult[Asset]:
        return self._guarded(self.ledger.update_shares, asset_id, new_shares)

    # ------------------------------------------------------------------ #
    # Backtest
    # ------------------------------------------------------------------ #
    def run_backtest(
        self, strategy_ids: Iterable[str] | None = None
    ) -> OperationResult[BacktestJob]:
        """
        Lanza el backtest sobre las posiciones actuales.

        Fallos: EMPTY_PORTFOLIO sin posiciones, BACKTEST_RUNNING si ya hay uno.
        """
        if self.backtest_running:
            msg = "Ya hay un backtest en curso"
            return OperationResult.failure(ErrorKind.BACKTEST_RUNNING, msg)
        held = self.ledger.held_assets()
        if not held:
            logger.warning("Backtest solicitado sin posiciones en cartera")
            return OperationResult.failure(
                ErrorKind.EMPTY_PORTFOLIO, "Add stocks to your portfolio to run a backtest"
            )

        ids = list(strategy_ids) if strategy_ids is not None else list(self.settings.strategies)
        self._job = submit_backtest(
            held,
            ids,
            self.settings.backtest_days,
            rng=self.rng,
            delay=self.settings.backtest_delay_seconds,
            on_complete=self._store_results,
        )
        return OperationResult.success(self._job)

    def _store_results(self, job: BacktestJob) -> None:
        if job.cancelled() or job.exception() is not None:
            return
        self.last_results = job.result()

    # ------------------------------------------------------------------ #
    # Analítica
    # ------------------------------------------------------------------ #
    def toggle_metric(self, metric_id: str) -> tuple[AnalyticsMetric, ...]:
        self.metrics = toggle_metric(self.metrics, metric_id)
        return self.metrics

    def analyze(self, asset_id: str) -> OperationResult[dict[str, Any]]:
        asset = self.ledger.get(asset_id)
        if asset is None:
            return OperationResult.failure(
                ErrorKind.UNKNOWN_ASSET, f"Activo desconocido: {asset_id}"
            )
        return OperationResult.success(build_dashboard(asset, self.metrics))

    def snapshot(self) -> dict[str, Any]:
        snap = self.ledger.snapshot()
        snap["ticks"] = self.ticks
        snap["backtest_running"] = self.backtest_running
        return snap


__all__ = ["SimulationEngine", "TICK_TIMER"]
