# src/core/types.py
"""
Tipos de dominio del simulador de carteras.

Todas las entidades viven en memoria durante la sesión y son inmutables:
cualquier cambio (tick de precio, trade, edición de posición) produce un
snapshot nuevo vía `dataclasses.replace`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

# ------------------------------ Enums --------------------------------------


class TradeSide(str, Enum):
    """Lado de la operación."""

    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def parse(cls, value: TradeSide | str) -> TradeSide:
        """Acepta 'buy'/'BUY'/TradeSide.BUY."""
        if isinstance(value, TradeSide):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"side debe ser 'buy' o 'sell', recibido: {value!r}") from None


# ------------------------------ Series -------------------------------------


@dataclass(frozen=True)
class PricePoint:
    """Punto de la serie de precios (valor + marca temporal)."""

    value: float
    timestamp: datetime


@dataclass(frozen=True)
class OHLCBar:
    """
    Vela diaria sintética.

    Atributos
    ---------
    open, high, low, close : float
        Precios de apertura, máximo, mínimo y cierre del periodo.
    """

    open: float
    high: float
    low: float
    close: float

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def upper_shadow(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_shadow(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


# ------------------------------ Activos ------------------------------------


@dataclass(frozen=True)
class Asset:
    """
    Snapshot de un activo con la posición que mantiene la cartera.

    Invariantes:
    - quantity_held >= 0
    - avg_buy_price solo tiene sentido si quantity_held > 0
    """

    id: str
    name: str
    symbol: str
    current_price: float
    change_abs: float = 0.0
    change_pct: float = 0.0
    quantity_held: int = 0
    avg_buy_price: float = 0.0
    price_history: tuple[PricePoint, ...] = field(default_factory=tuple)
    daily_data: tuple[OHLCBar, ...] = field(default_factory=tuple)

    @property
    def is_held(self) -> bool:
        return self.quantity_held > 0

    @property
    def market_value(self) -> float:
        return self.current_price * self.quantity_held

    @property
    def prices(self) -> list[float]:
        """Valores de `price_history` (más antiguo primero)."""
        return [p.value for p in self.price_history]

    def with_changes(self, **changes) -> Asset:
        return replace(self, **changes)


@dataclass(frozen=True)
class Transaction:
    """Registro inmutable de una operación ejecutada."""

    id: str
    asset_id: str
    side: TradeSide
    price: float
    quantity: int
    timestamp: datetime

    @property
    def total(self) -> float:
        return self.price * self.quantity


# ------------------------------ Analítica ----------------------------------


@dataclass(frozen=True)
class Pattern:
    """Patrón de velas detectado en `index` (derivado, no se persiste)."""

    name: str
    index: int
    bullish: bool

    @property
    def is_neutral(self) -> bool:
        # El Doji es neutral: bullish=False, solo el nombre lo distingue.
        return self.name.startswith("Doji")


@dataclass(frozen=True)
class ValuePoint:
    timestamp: datetime
    portfolio_value: float


@dataclass(frozen=True)
class BacktestResult:
    """Resultado de una estrategia en una ejecución de backtest."""

    strategy_name: str
    profit: float
    trade_count: int
    win_rate_pct: float
    value_history: tuple[ValuePoint, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AllocationSlice:
    """Peso de un activo en el valor total de la cartera."""

    asset_id: str
    name: str
    value: float
    weight_pct: float


__all__ = [
    "TradeSide",
    "PricePoint",
    "OHLCBar",
    "Asset",
    "Transaction",
    "Pattern",
    "ValuePoint",
    "BacktestResult",
    "AllocationSlice",
]
