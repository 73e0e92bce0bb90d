# src/strategies/__init__.py
"""
Estrategias del backtest.

Importar el paquete registra las reglas de `strategies.rules` en el orden
moving_avg, momentum, mean_reversion.
"""

from __future__ import annotations

from strategies import rules  # noqa: F401
from strategies.base import (
    StrategySpec,
    get_strategy,
    list_strategies,
    register_strategy,
    resolve_strategies,
)

DEFAULT_STRATEGY_IDS = ("moving_avg", "momentum", "mean_reversion")

__all__ = [
    "DEFAULT_STRATEGY_IDS",
    "StrategySpec",
    "get_strategy",
    "list_strategies",
    "register_strategy",
    "resolve_strategies",
]
