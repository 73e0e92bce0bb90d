# src/report/results.py
"""
Tablas de resultados de backtest (pandas).

- `results_frame`: una fila por estrategia, ordenada por beneficio.
- `value_history_frame`: curva de valor diaria de una estrategia.
- `format_results`: tabla en texto para la CLI.
"""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from core.types import BacktestResult
from report.performance import calculate_max_drawdown, calculate_total_return

RESULT_COLUMNS = [
    "strategy",
    "profit",
    "trades",
    "win_rate_pct",
    "max_drawdown_pct",
    "total_return_pct",
]


def value_history_frame(result: BacktestResult) -> pd.DataFrame:
    """Curva de valor de un resultado: columnas timestamp, portfolio_value."""
    df = pd.DataFrame(
        {
            "timestamp": [p.timestamp for p in result.value_history],
            "portfolio_value": [p.portfolio_value for p in result.value_history],
        }
    )
    if not df.empty:
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df


def results_frame(results: Iterable[BacktestResult]) -> pd.DataFrame:
    rows = []
    for r in results:
        curve = [p.portfolio_value for p in r.value_history]
        max_dd, _, _ = calculate_max_drawdown(curve)
        rows.append(
            {
                "strategy": r.strategy_name,
                "profit": r.profit,
                "trades": r.trade_count,
                "win_rate_pct": r.win_rate_pct,
                "max_drawdown_pct": round(max_dd * 100.0, 2),
                "total_return_pct": round(calculate_total_return(curve) * 100.0, 2),
            }
        )
    if not rows:
        return pd.DataFrame(columns=RESULT_COLUMNS)
    df = pd.DataFrame(rows, columns=RESULT_COLUMNS)
    return df.sort_values("profit", ascending=False).reset_index(drop=True)


def format_results(results: Iterable[BacktestResult]) -> str:
    df = results_frame(results)
    if df.empty:
        return "(sin resultados)"
    return df.to_string(index=False, float_format=lambda x: f"{x:,.2f}")


__all__ = ["RESULT_COLUMNS", "results_frame", "value_history_frame", "format_results"]
