"""Reporting de backtests: tablas pandas y métricas de la curva de valor."""

from report.performance import calculate_max_drawdown, calculate_returns, calculate_total_return
from report.results import format_results, results_frame, value_history_frame

__all__ = [
    "calculate_returns",
    "calculate_total_return",
    "calculate_max_drawdown",
    "results_frame",
    "value_history_frame",
    "format_results",
]
