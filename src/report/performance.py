# src/report/performance.py
"""
Métricas sobre la curva de valor diaria de un backtest.

La curva es `[p.portfolio_value for p in result.value_history]`: un valor de
cartera por día simulado, el más antiguo primero.
"""

from __future__ import annotations


def calculate_returns(value_curve: list[float]) -> list[float]:
    """
    Variación diaria de la cartera como fracción (0.01 = +1%).

    Un día que parte de valor 0 cuenta como 0.0. Menos de 2 puntos → [].
    """
    if len(value_curve) < 2:
        return []
    daily: list[float] = []
    for prev, curr in zip(value_curve, value_curve[1:]):
        daily.append((curr - prev) / prev if prev != 0 else 0.0)
    return daily


def calculate_total_return(value_curve: list[float]) -> float:
    """Variación entre el primer y el último día (fracción)."""
    if len(value_curve) < 2 or value_curve[0] == 0:
        return 0.0
    return (value_curve[-1] - value_curve[0]) / value_curve[0]


def calculate_max_drawdown(value_curve: list[float]) -> tuple[float, int, int]:
    """
    Mayor caída de la cartera desde un máximo previo hasta un día posterior.

    Returns:
        (caída, día del máximo, día del mínimo); caída como fracción (0.05 = 5%).
        (0.0, 0, 0) si la curva tiene menos de 2 días o nunca cae.
    """
    if len(value_curve) < 2:
        return 0.0, 0, 0

    best = (0.0, 0, 0)
    high_value, high_day = value_curve[0], 0
    for day, value in enumerate(value_curve):
        if value > high_value:
            high_value, high_day = value, day
        if high_value <= 0:
            continue
        fall = (high_value - value) / high_value
        if fall > best[0]:
            best = (fall, high_day, day)
    return best


__all__ = ["calculate_returns", "calculate_total_return", "calculate_max_drawdown"]
