"""Core del simulador: tipos de dominio, errores, ledger, backtest y sesión."""

from core.errors import ErrorKind, LedgerError, OperationResult, sanitize_quantity
from core.types import (
    AllocationSlice,
    Asset,
    BacktestResult,
    OHLCBar,
    Pattern,
    PricePoint,
    TradeSide,
    Transaction,
    ValuePoint,
)

__all__ = [
    # Tipos
    "AllocationSlice",
    "Asset",
    "BacktestResult",
    "OHLCBar",
    "Pattern",
    "PricePoint",
    "TradeSide",
    "Transaction",
    "ValuePoint",
    # Errores
    "ErrorKind",
    "LedgerError",
    "OperationResult",
    "sanitize_quantity",
]
