# src/features/__init__.py
"""
Analítica sobre las series de precios.

Módulos:
- technical_indicators: media móvil, volatilidad, RSI.
- patterns: detección de patrones de velas.
- analytics: métricas activables y resumen del activo.
"""

from features.analytics import DEFAULT_METRICS, AnalyticsMetric, build_dashboard, stock_summary
from features.patterns import detect_patterns
from features.technical_indicators import (
    indicator_frame,
    moving_average,
    rsi,
    rsi_zone,
    volatility,
)

__all__ = [
    "AnalyticsMetric",
    "DEFAULT_METRICS",
    "build_dashboard",
    "stock_summary",
    "detect_patterns",
    "indicator_frame",
    "moving_average",
    "rsi",
    "rsi_zone",
    "volatility",
]
