# src/data/catalog.py
"""
Catálogos de activos con los que arranca una sesión.

- "simulator": acciones indias del simulador (historia dispersa + 30 velas).
- "tracker": acciones USA del tracker (paseo aleatorio de 31 puntos).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import numpy as np

from core.types import Asset
from data.generator import generate_history, generate_ohlc, generate_scatter_history


@dataclass(frozen=True)
class AssetPreset:
    id: str
    name: str
    symbol: str
    price: float
    change_abs: float = 0.0
    change_pct: float = 0.0
    series_base: float | None = None  # base de la historia sintética (por defecto: price)


SIMULATOR_PRESETS: tuple[AssetPreset, ...] = (
    AssetPreset("1", "Reliance", "RELIANCE", 2456.75, 12.5, 0.51, series_base=2400.0),
    AssetPreset("2", "TCS", "TCS", 3456.25, -23.4, -0.67, series_base=3400.0),
    AssetPreset("3", "HDFC Bank", "HDFCBANK", 1456.80, 8.2, 0.57, series_base=1400.0),
    AssetPreset("4", "Infosys", "INFY", 1520.50, -15.3, -1.0, series_base=1500.0),
)

TRACKER_PRESETS: tuple[AssetPreset, ...] = (
    AssetPreset("1", "Apple", "AAPL", 182.63, change_pct=1.2),
    AssetPreset("2", "Microsoft", "MSFT", 413.64, change_pct=-0.5),
    AssetPreset("3", "Google", "GOOGL", 171.95, change_pct=0.8),
    AssetPreset("4", "Amazon", "AMZN", 185.71, change_pct=2.1),
    AssetPreset("5", "Tesla", "TSLA", 177.48, change_pct=-1.3),
)

CATALOGS: dict[str, tuple[AssetPreset, ...]] = {
    "simulator": SIMULATOR_PRESETS,
    "tracker": TRACKER_PRESETS,
}


def _tracker_change_abs(preset: AssetPreset) -> float:
    return preset.change_abs or preset.price * preset.change_pct / 100.0


def build_catalog(
    name: str,
    *,
    rng: np.random.Generator,
    history_length: int = 30,
    now: datetime | None = None,
) -> list[Asset]:
    """
    Construye los activos de un catálogo con sus series sintéticas.

    - simulator: `history_length` puntos dispersos + `history_length` velas.
    - tracker: `history_length + 1` puntos de paseo aleatorio + velas.
    """
    if name not in CATALOGS:
        raise ValueError(f"Catálogo no reconocido: {name!r} (usa {sorted(CATALOGS)})")

    assets: list[Asset] = []
    for preset in CATALOGS[name]:
        base = preset.series_base if preset.series_base is not None else preset.price
        if name == "simulator":
            history = generate_scatter_history(base, history_length, rng=rng, end=now)
            change_abs = preset.change_abs
        else:
            history = generate_history(base, history_length, rng=rng, end=now)
            change_abs = _tracker_change_abs(preset)
        bars = generate_ohlc(base, history_length, rng=rng)
        assets.append(
            Asset(
                id=preset.id,
                name=preset.name,
                symbol=preset.symbol,
                current_price=preset.price,
                change_abs=change_abs,
                change_pct=preset.change_pct,
                price_history=tuple(history),
                daily_data=tuple(bars),
            )
        )
    return assets


__all__ = [
    "AssetPreset",
    "SIMULATOR_PRESETS",
    "TRACKER_PRESETS",
    "CATALOGS",
    "build_catalog",
]
