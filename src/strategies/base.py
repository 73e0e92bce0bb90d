# src/strategies/base.py
"""
Tipos base y registro global de estrategias de backtest.

Una estrategia aquí es una *regla por trade*: dado un activo (y la fuente
aleatoria de la simulación) devuelve el resultado con signo del trade
simulado, en unidades de precio por acción.

Registro:
    @register_strategy("momentum", "Momentum Strategy")
    def momentum(asset, rng) -> float: ...

    get_strategy("momentum")  -> StrategySpec
    list_strategies()         -> [StrategySpec, ...] en orden de registro
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from core.types import Asset

TradeRule = Callable[[Asset, np.random.Generator], float]


@dataclass(frozen=True)
class StrategySpec:
    """Estrategia registrada: id estable, nombre visible y regla."""

    id: str
    name: str
    rule: TradeRule

    def trade_result(self, asset: Asset, rng: np.random.Generator) -> float:
        return float(self.rule(asset, rng))


# ------------------------------ Utilidades numéricas -----------------------


def pct_of(price: float, pct: float) -> float:
    """`pct` expresado como fracción (0.02 = 2%) aplicado a `price`."""
    return float(price) * float(pct)


# ------------------------------- Registro ---------------------------------

_REGISTRY: dict[str, StrategySpec] = {}


def register_strategy(strategy_id: str, name: str) -> Callable[[TradeRule], TradeRule]:
    """
    Decorador que registra una regla en el registro global.

    Registrar dos veces el mismo id sustituye la entrada anterior
    (útil en tests), conservando la posición original.
    """

    def _decorator(rule: TradeRule) -> TradeRule:
        _REGISTRY[strategy_id] = StrategySpec(id=strategy_id, name=name, rule=rule)
        return rule

    return _decorator


def get_strategy(strategy_id: str) -> StrategySpec:
    if strategy_id in _REGISTRY:
        return _REGISTRY[strategy_id]
    raise KeyError(f"Estrategia no registrada: {strategy_id}")


def list_strategies() -> list[StrategySpec]:
    return list(_REGISTRY.values())


def resolve_strategies(ids: list[str] | tuple[str, ...] | None = None) -> list[StrategySpec]:
    """Convierte ids en specs; None → todas en orden de registro."""
    if ids is None:
        return list_strategies()
    return [get_strategy(i) for i in ids]


__all__ = [
    "TradeRule",
    "StrategySpec",
    "pct_of",
    "register_strategy",
    "get_strategy",
    "list_strategies",
    "resolve_strategies",
]
