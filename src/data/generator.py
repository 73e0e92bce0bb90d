# src/data/generator.py
"""
Generador de series sintéticas (paseo aleatorio) para sembrar y refrescar activos.

Funciones
---------
- generate_history: ventana de PricePoint con variación relativa U(-1%, +1%).
- generate_scatter_history: puntos independientes base ± U(-100, 100).
- generate_ohlc: velas diarias sintéticas alrededor de un precio base.
- tick_asset / tick_prices: paso "en vivo" (desplaza la ventana y añade un punto).

Toda la aleatoriedad llega por `rng` (numpy.random.Generator) para que los
tests puedan sembrarla: `make_rng(42)`.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Literal

from loguru import logger
import numpy as np

from core.types import Asset, OHLCBar, PricePoint

TickMode = Literal["absolute", "relative"]

# Parámetros de los generadores (mismos rangos que los dashboards)
HISTORY_STEP_PCT = 0.01
OPEN_JITTER = 100.0
CLOSE_JITTER = 50.0
WICK_JITTER = 50.0
TICK_ABS_JITTER = 10.0
TICK_WICK_JITTER = 10.0


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Crea la fuente aleatoria (sembrada si `seed` no es None)."""
    return np.random.default_rng(seed)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uniform(rng: np.random.Generator, low: float, high: float) -> float:
    return float(rng.uniform(low, high))


# ============================================================
# Historias de precio
# ============================================================


def generate_history(
    base_price: float,
    window_length: int,
    *,
    rng: np.random.Generator,
    end: datetime | None = None,
) -> list[PricePoint]:
    """
    Genera `window_length + 1` puntos, uno por día, terminando en `end`.

    Cada paso multiplica el valor anterior (sin redondear) por
    (1 + U(-0.01, 0.01)); el valor guardado se redondea a 2 decimales.
    """
    end = end or _utcnow()
    price = float(base_price)
    points: list[PricePoint] = []
    for days_back in range(window_length, -1, -1):
        price = price * (1.0 + _uniform(rng, -HISTORY_STEP_PCT, HISTORY_STEP_PCT))
        points.append(PricePoint(value=round(price, 2), timestamp=end - timedelta(days=days_back)))
    return points


def generate_scatter_history(
    base_price: float,
    length: int,
    *,
    rng: np.random.Generator,
    end: datetime | None = None,
) -> list[PricePoint]:
    """Puntos independientes `base ± U(-100, 100)` (sin paseo aleatorio)."""
    end = end or _utcnow()
    return [
        PricePoint(
            value=float(base_price) + _uniform(rng, -OPEN_JITTER, OPEN_JITTER),
            timestamp=end - timedelta(days=length - 1 - i),
        )
        for i in range(length)
    ]


def generate_ohlc(base_price: float, days: int, *, rng: np.random.Generator) -> list[OHLCBar]:
    """
    Velas diarias sintéticas:
        open  = base + U(-100, 100)
        close = open + U(-50, 50)
        high  = max(open, close) + U(0, 50)
        low   = min(open, close) - U(0, 50)
    """
    bars: list[OHLCBar] = []
    for _ in range(days):
        open_ = float(base_price) + _uniform(rng, -OPEN_JITTER, OPEN_JITTER)
        close = open_ + _uniform(rng, -CLOSE_JITTER, CLOSE_JITTER)
        high = max(open_, close) + _uniform(rng, 0.0, WICK_JITTER)
        low = min(open_, close) - _uniform(rng, 0.0, WICK_JITTER)
        bars.append(OHLCBar(open=open_, high=high, low=low, close=close))
    return bars


def next_bar(
    last_close: float,
    new_price: float,
    *,
    rng: np.random.Generator,
    wick: float = TICK_WICK_JITTER,
) -> OHLCBar:
    """Vela del tick: abre en el último cierre y cierra en el precio nuevo."""
    high = max(last_close, new_price) + _uniform(rng, 0.0, wick)
    low = min(last_close, new_price) - _uniform(rng, 0.0, wick)
    return OHLCBar(open=last_close, high=high, low=low, close=new_price)


# ============================================================
# Paso "en vivo"
# ============================================================


def _roll(window: tuple, item) -> tuple:
    """Desplaza la ventana una posición y añade `item` (longitud constante)."""
    if not window:
        return (item,)
    return window[1:] + (item,)


def tick_asset(
    asset: Asset,
    *,
    rng: np.random.Generator,
    mode: TickMode = "absolute",
    now: datetime | None = None,
) -> Asset:
    """
    Avanza un activo un tick y devuelve el snapshot nuevo.

    Modos:
    - absolute: delta = U(-10, 10) sobre el precio actual (simulador).
    - relative: precio * (1 + U(-1%, +1%)), redondeado a 2 decimales (tracker).

    En ambos casos la ventana de precios y la de velas se desplazan una
    posición; la vela nueva abre en el último cierre.
    """
    now = now or _utcnow()
    old_price = asset.current_price

    if mode == "absolute":
        delta = _uniform(rng, -TICK_ABS_JITTER, TICK_ABS_JITTER)
        new_price = old_price + delta
    elif mode == "relative":
        step = _uniform(rng, -HISTORY_STEP_PCT, HISTORY_STEP_PCT)
        new_price = round(old_price * (1.0 + step), 2)
        delta = new_price - old_price
    else:
        raise ValueError(f"mode de tick no reconocido: {mode!r}")

    change_pct = (delta / old_price) * 100.0 if old_price else 0.0

    daily = asset.daily_data
    if daily:
        daily = _roll(daily, next_bar(daily[-1].close, new_price, rng=rng))

    return asset.with_changes(
        current_price=new_price,
        change_abs=delta,
        change_pct=change_pct,
        price_history=_roll(asset.price_history, PricePoint(value=new_price, timestamp=now)),
        daily_data=daily,
    )


def tick_prices(
    assets: Iterable[Asset],
    *,
    rng: np.random.Generator,
    mode: TickMode = "absolute",
    now: datetime | None = None,
) -> list[Asset]:
    """Aplica `tick_asset` a todos los activos (mismo `now` para todos)."""
    now = now or _utcnow()
    updated = [tick_asset(a, rng=rng, mode=mode, now=now) for a in assets]
    logger.debug(f"Tick {mode} sobre {len(updated)} activos")
    return updated


__all__ = [
    "TickMode",
    "make_rng",
    "generate_history",
    "generate_scatter_history",
    "generate_ohlc",
    "next_bar",
    "tick_asset",
    "tick_prices",
]
