# src/core/errors.py
"""
Errores recuperables del simulador.

Los fallos de usuario (fondos insuficientes, cantidades inválidas, ids
desconocidos...) NO se lanzan: se devuelven como `OperationResult` con un
`ErrorKind`, y es la capa de UI quien decide si muestra un mensaje.

`LedgerError` existe para quien prefiera excepciones (`result.unwrap()`).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Tipos de error recuperables."""

    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    INSUFFICIENT_SHARES = "INSUFFICIENT_SHARES"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    EMPTY_PORTFOLIO = "EMPTY_PORTFOLIO"
    UNKNOWN_ASSET = "UNKNOWN_ASSET"
    BACKTEST_RUNNING = "BACKTEST_RUNNING"


class LedgerError(Exception):
    """Excepción equivalente a un `OperationResult` fallido."""

    def __init__(self, kind: ErrorKind, message: str = "") -> None:
        self.kind = kind
        self.message = message or kind.value
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """
    Resultado tipado de un comando: valor o error, nunca ambos.

    Uso:
        res = ledger.execute_trade("1", "buy", 10)
        if not res.ok:
            print(res.error, res.message)
    """

    value: T | None = None
    error: ErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None, message: str = "") -> OperationResult[T]:
        return cls(value=value, message=message)

    @classmethod
    def failure(cls, error: ErrorKind, message: str = "") -> OperationResult[T]:
        return cls(error=error, message=message or error.value)

    def unwrap(self) -> T | None:
        if self.error is not None:
            raise LedgerError(self.error, self.message)
        return self.value

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "error": self.error.value if self.error else None,
            "message": self.message,
        }


def sanitize_quantity(raw: Any, default: int = 1) -> int:
    """
    Convierte la entrada del usuario en un entero.

    NaN, None, infinitos o textos no numéricos se sustituyen por `default`.
    Los valores <= 0 se devuelven tal cual: decidir si son válidos es
    responsabilidad del comando que los recibe.
    """
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if math.isnan(value) or math.isinf(value):
        return default
    return int(value)


__all__ = [
    "ErrorKind",
    "LedgerError",
    "OperationResult",
    "sanitize_quantity",
]
