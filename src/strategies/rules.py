# src/strategies/rules.py
"""
Reglas de trade de las tres estrategias del backtest.

Es una simulación estocástica tipo Monte Carlo, NO un backtest sobre precios
históricos: cada regla solo mira el precio actual y el último cambio.

| id             | condición                 | gana         | pierde        |
|----------------|---------------------------|--------------|---------------|
| moving_avg     | rng.random() > 0.5        | +2% precio   | -1% precio    |
| momentum       | change_abs > 0            | +1.5% precio | -1% precio    |
| mean_reversion | change_abs < 0            | +1% precio   | -0.5% precio  |
"""

from __future__ import annotations

import numpy as np

from core.types import Asset
from strategies.base import pct_of, register_strategy


@register_strategy("moving_avg", "Moving Average Crossover")
def moving_average_crossover(asset: Asset, rng: np.random.Generator) -> float:
    # Señal de compra a cara o cruz.
    should_buy = rng.random() > 0.5
    return pct_of(asset.current_price, 0.02) if should_buy else -pct_of(asset.current_price, 0.01)


@register_strategy("momentum", "Momentum Strategy")
def momentum(asset: Asset, rng: np.random.Generator) -> float:
    _ = rng
    if asset.change_abs > 0:
        return pct_of(asset.current_price, 0.015)
    return -pct_of(asset.current_price, 0.01)


@register_strategy("mean_reversion", "Mean Reversion")
def mean_reversion(asset: Asset, rng: np.random.Generator) -> float:
    _ = rng
    if asset.change_abs < 0:
        return pct_of(asset.current_price, 0.01)
    return -pct_of(asset.current_price, 0.005)


__all__ = ["moving_average_crossover", "momentum", "mean_reversion"]
