# src/features/technical_indicators.py
"""
Indicadores técnicos sobre una serie de precios ordenada (más antiguo primero).

Indicadores implementados:
- moving_average: media aritmética sobre una ventana de `n` precios.
- volatility: desviación estándar poblacional de la misma ventana.
- rsi: Relative Strength Index (media simple de ganancias/pérdidas).

Convenciones:
- Cada función devuelve una lista del MISMO largo que la entrada.
- Donde la ventana aún está incompleta se devuelve el centinela 0.0.
- Sin redondeos: el consumidor decide cómo mostrar los números.

Diseño:
- Implementación pura Python para las series.
- `indicator_frame` expone todo como pandas.DataFrame para la capa de UI.
"""

from __future__ import annotations

from collections.abc import Sequence
import math

import pandas as pd

SENTINEL = 0.0

RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0


def _check_window(n: int, name: str = "n") -> None:
    if n <= 0:
        raise ValueError(f"{name} debe ser > 0 (recibido {n})")


def moving_average(prices: Sequence[float], n: int) -> list[float]:
    """
    Media móvil simple.

    out[i] = mean(prices[i-n+1 .. i]) para i >= n-1; centinela en otro caso.
    """
    _check_window(n)
    out = [SENTINEL] * len(prices)
    for i in range(n - 1, len(prices)):
        window = prices[i - n + 1 : i + 1]
        out[i] = sum(window) / n
    return out


def volatility(prices: Sequence[float], n: int) -> list[float]:
    """
    Volatilidad como desviación estándar poblacional de la ventana.

    out[i] = sqrt(sum((p - media)^2) / n) para i >= n-1; centinela en otro caso.
    """
    _check_window(n)
    out = [SENTINEL] * len(prices)
    for i in range(n - 1, len(prices)):
        window = prices[i - n + 1 : i + 1]
        avg = sum(window) / n
        variance = sum((p - avg) ** 2 for p in window) / n
        out[i] = math.sqrt(variance)
    return out


def rsi(prices: Sequence[float], period: int = 14) -> list[float]:
    """
    Relative Strength Index.

    FÓRMULA (para i >= period):
        diffs   = prices[j] - prices[j-1], j en [i-period+1, i]
        avgGain = sum(diffs > 0) / period
        avgLoss = sum(-diffs < 0) / period
        RS      = 100 si avgLoss == 0, si no avgGain / avgLoss
        RSI     = 100 - 100 / (1 + RS)

    Con avgLoss == 0 el RS se fuerza a 100 aunque tampoco haya ganancias
    (serie plana → RSI ≈ 99.01).
    """
    _check_window(period, "period")
    out = [SENTINEL] * len(prices)
    for i in range(period, len(prices)):
        gains = 0.0
        losses = 0.0
        for j in range(i - period + 1, i + 1):
            change = prices[j] - prices[j - 1]
            if change > 0:
                gains += change
            else:
                losses -= change
        avg_gain = gains / period
        avg_loss = losses / period
        rs = 100.0 if avg_loss == 0 else avg_gain / avg_loss
        out[i] = 100.0 - (100.0 / (1.0 + rs))
    return out


def rsi_zone(value: float) -> str:
    """
    Clasifica un valor de RSI.

    Returns:
        "OVERBOUGHT" (> 70), "OVERSOLD" (< 30) o "NEUTRAL".
    """
    if value > RSI_OVERBOUGHT:
        return "OVERBOUGHT"
    if value < RSI_OVERSOLD:
        return "OVERSOLD"
    return "NEUTRAL"


def last_defined(series: Sequence[float]) -> float:
    """Último valor de la serie (centinela si está vacía)."""
    return series[-1] if series else SENTINEL


def indicator_frame(
    prices: Sequence[float],
    ma_windows: Sequence[int] = (5, 10),
    vol_window: int = 10,
    rsi_period: int = 14,
) -> pd.DataFrame:
    """
    Calcula todos los indicadores y los devuelve en un DataFrame.

    Columnas: price, ma_<n> (por cada ventana), volatility_<n>, rsi_<period>.
    """
    data: dict[str, list[float]] = {"price": [float(p) for p in prices]}
    for n in ma_windows:
        data[f"ma_{n}"] = moving_average(prices, n)
    data[f"volatility_{vol_window}"] = volatility(prices, vol_window)
    data[f"rsi_{rsi_period}"] = rsi(prices, rsi_period)
    return pd.DataFrame(data)


__all__ = [
    "SENTINEL",
    "RSI_OVERBOUGHT",
    "RSI_OVERSOLD",
    "moving_average",
    "volatility",
    "rsi",
    "rsi_zone",
    "last_defined",
    "indicator_frame",
]
