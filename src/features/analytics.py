# src/features/analytics.py
"""
Dashboard analítico de un activo.

- Métricas activables (MA5, MA10, volatilidad, RSI, patrones...).
- Resumen numérico del activo (último valor de cada indicador, máximos, mínimos).
- `build_dashboard`: series completas de las métricas activadas.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any

from core.types import Asset
from features.patterns import detect_patterns
from features.technical_indicators import (
    last_defined,
    moving_average,
    rsi,
    rsi_zone,
    volatility,
)

SHORT_MA = 5
LONG_MA = 10
VOLATILITY_WINDOW = 10
RSI_PERIOD = 14


@dataclass(frozen=True)
class AnalyticsMetric:
    id: str
    name: str
    enabled: bool


DEFAULT_METRICS: tuple[AnalyticsMetric, ...] = (
    AnalyticsMetric("ma5", "5-Day MA", True),
    AnalyticsMetric("ma10", "10-Day MA", True),
    AnalyticsMetric("volatility", "Volatility", True),
    AnalyticsMetric("rsi", "RSI (14)", True),
    AnalyticsMetric("volume", "Volume", False),
    AnalyticsMetric("macd", "MACD", False),
    AnalyticsMetric("patterns", "Candlestick Patterns", True),
)


def toggle_metric(
    metrics: Iterable[AnalyticsMetric], metric_id: str
) -> tuple[AnalyticsMetric, ...]:
    """Devuelve una tupla nueva con `metric_id` invertido (ids desconocidos: sin cambios)."""
    return tuple(replace(m, enabled=not m.enabled) if m.id == metric_id else m for m in metrics)


def enabled_ids(metrics: Iterable[AnalyticsMetric]) -> set[str]:
    return {m.id for m in metrics if m.enabled}


def stock_summary(asset: Asset) -> dict[str, Any]:
    """
    Tarjetas de resumen del activo seleccionado.

    Valores sin redondear: el formateo (2 decimales, moneda) es cosa de la UI.
    """
    prices = asset.prices
    last_rsi = last_defined(rsi(prices, RSI_PERIOD))
    # Sin ventana completa el RSI es el centinela: no se clasifica.
    zone = rsi_zone(last_rsi) if len(prices) > RSI_PERIOD else "NEUTRAL"
    return {
        "symbol": asset.symbol,
        "current_price": asset.current_price,
        "ma5": last_defined(moving_average(prices, SHORT_MA)),
        "ma10": last_defined(moving_average(prices, LONG_MA)),
        "volatility10": last_defined(volatility(prices, VOLATILITY_WINDOW)),
        "rsi": last_rsi,
        "rsi_zone": zone,
        "high": max(prices) if prices else asset.current_price,
        "low": min(prices) if prices else asset.current_price,
        "change_abs": asset.change_abs,
        "change_pct": asset.change_pct,
    }


def build_dashboard(
    asset: Asset,
    metrics: Iterable[AnalyticsMetric] = DEFAULT_METRICS,
) -> dict[str, Any]:
    """
    Calcula las series de las métricas activadas.

    Métricas sin implementación (volume, macd) se ignoran.
    """
    active = enabled_ids(metrics)
    prices = asset.prices
    out: dict[str, Any] = {"summary": stock_summary(asset)}

    if "ma5" in active:
        out["ma5"] = moving_average(prices, SHORT_MA)
    if "ma10" in active:
        out["ma10"] = moving_average(prices, LONG_MA)
    if "volatility" in active:
        out["volatility"] = volatility(prices, VOLATILITY_WINDOW)
    if "rsi" in active:
        out["rsi"] = rsi(prices, RSI_PERIOD)
    if "patterns" in active:
        out["patterns"] = detect_patterns(asset.daily_data)
    return out


__all__ = [
    "AnalyticsMetric",
    "DEFAULT_METRICS",
    "toggle_metric",
    "enabled_ids",
    "stock_summary",
    "build_dashboard",
]
