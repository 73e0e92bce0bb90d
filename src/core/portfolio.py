# src/core/portfolio.py
"""
PortfolioLedger: libro de la cartera simulada.

Gestiona:
- El universo de activos (snapshots inmutables `Asset`) y sus posiciones.
- Efectivo disponible y log append-only de transacciones.
- Alta/baja/edición de posiciones (tracker) y compra/venta (simulador).
- Valoración: valor de mercado, P/L no realizado, asignación por activo.

Todos los comandos devuelven `OperationResult`: los fallos de usuario no se
lanzan, se reportan con su `ErrorKind` y dejan el estado intacto.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
import uuid

from loguru import logger

from core.errors import ErrorKind, OperationResult, sanitize_quantity
from core.types import AllocationSlice, Asset, TradeSide, Transaction

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_tx_id() -> str:
    return uuid.uuid4().hex


# --------------------------------------------------------------------------- #
# Configuración
# --------------------------------------------------------------------------- #
@dataclass
class PortfolioConfig:
    """Configuración inicial de la cartera."""

    cash: float = 100_000.0


# --------------------------------------------------------------------------- #
# Funciones puras de valoración
# --------------------------------------------------------------------------- #
def unrealized_pnl(asset: Asset) -> float:
    """(precio actual - precio medio) * cantidad; 0 si no hay posición."""
    if asset.quantity_held == 0:
        return 0.0
    return (asset.current_price - asset.avg_buy_price) * asset.quantity_held


def allocation(assets: Iterable[Asset]) -> list[AllocationSlice]:
    """Peso (%) de cada activo con posición sobre el valor total."""
    held = [a for a in assets if a.is_held]
    total = sum(a.market_value for a in held)
    return [
        AllocationSlice(
            asset_id=a.id,
            name=a.name,
            value=a.market_value,
            weight_pct=(a.market_value / total * 100.0) if total else 0.0,
        )
        for a in held
    ]


# --------------------------------------------------------------------------- #
# Ledger
# --------------------------------------------------------------------------- #
class PortfolioLedger:
    """
    Controla el estado de la cartera: activos, posiciones, efectivo y transacciones.
    """

    def __init__(
        self,
        assets: Iterable[Asset] = (),
        cfg: PortfolioConfig | None = None,
        *,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self.cfg = cfg or PortfolioConfig()
        self._initial_assets: dict[str, Asset] = {a.id: a for a in assets}
        self._assets: dict[str, Asset] = dict(self._initial_assets)
        self._cash: float = float(self.cfg.cash)
        self._transactions: list[Transaction] = []
        self._clock = clock or _utcnow
        self._id_factory = id_factory or _new_tx_id
        logger.debug(
            f"Ledger iniciado con cash={self._cash:.2f} y {len(self._assets)} activos"
        )

    # ------------------------------------------------------------------ #
    # Lectura
    # ------------------------------------------------------------------ #
    @property
    def cash(self) -> float:
        return self._cash

    def get(self, asset_id: str) -> Asset | None:
        return self._assets.get(asset_id)

    def assets(self) -> list[Asset]:
        return list(self._assets.values())

    def held_assets(self) -> list[Asset]:
        return [a for a in self._assets.values() if a.is_held]

    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    def unrealized_pnl(self, asset: Asset | str) -> float:
        """P/L no realizado de un activo (acepta el snapshot o su id)."""
        if isinstance(asset, str):
            found = self._assets.get(asset)
            return unrealized_pnl(found) if found is not None else 0.0
        return unrealized_pnl(asset)

    def total_value(self) -> float:
        """Valor de mercado de las posiciones (sin efectivo)."""
        return float(sum(a.market_value for a in self._assets.values()))

    def total_unrealized_pnl(self) -> float:
        return float(sum(unrealized_pnl(a) for a in self._assets.values()))

    def allocation(self) -> list[AllocationSlice]:
        return allocation(self._assets.values())

    # ------------------------------------------------------------------ #
    # Comandos de posición (tracker)
    # ------------------------------------------------------------------ #
    def add_position(self, asset_id: str, shares: Any = 1) -> OperationResult[Asset]:
        """
        Abre una posición con `shares` acciones (mínimo 1).

        Si el activo ya tiene posición es un no-op: se devuelve el snapshot
        existente sin cambios.
        """
        asset = self._assets.get(asset_id)
        if asset is None:
            return self._reject(ErrorKind.UNKNOWN_ASSET, f"Activo desconocido: {asset_id}")
        if asset.is_held:
            logger.debug(f"add_position ignorado: {asset.symbol} ya está en cartera")
            return OperationResult.success(asset, "already held")

        qty = max(1, sanitize_quantity(shares))
        updated = asset.with_changes(quantity_held=qty, avg_buy_price=asset.current_price)
        self._assets[asset_id] = updated
        logger.info(f"Posición añadida: {updated.symbol} x{qty}")
        return OperationResult.success(updated)

    def remove_position(self, asset_id: str) -> OperationResult[Asset]:
        """
        Cierra la posición (cantidad 0), tenga las acciones que tenga.

        El activo sigue en el universo: recibe ticks y puede volver a añadirse.
        """
        asset = self._assets.get(asset_id)
        if asset is None:
            return self._reject(ErrorKind.UNKNOWN_ASSET, f"Activo desconocido: {asset_id}")
        updated = asset.with_changes(quantity_held=0, avg_buy_price=0.0)
        self._assets[asset_id] = updated
        logger.info(f"Posición eliminada: {asset.symbol}")
        return OperationResult.success(updated)

    def update_shares(self, asset_id: str, new_shares: Any) -> OperationResult[Asset]:
        """Sustituye la cantidad de acciones; se fuerza un mínimo de 1."""
        asset = self._assets.get(asset_id)
        if asset is None:
            return self._reject(ErrorKind.UNKNOWN_ASSET, f"Activo desconocido: {asset_id}")
        qty = max(1, sanitize_quantity(new_shares))
        avg = asset.avg_buy_price if asset.is_held else asset.current_price
        updated = asset.with_changes(quantity_held=qty, avg_buy_price=avg)
        self._assets[asset_id] = updated
        logger.debug(f"Acciones actualizadas: {updated.symbol} -> {qty}")
        return OperationResult.success(updated)

    # ------------------------------------------------------------------ #
    # Trading (simulador)
    # ------------------------------------------------------------------ #
    def execute_trade(
        self,
        asset_id: str,
        side: TradeSide | str,
        quantity: Any,
    ) -> OperationResult[Transaction]:
        """
        Compra o vende `quantity` acciones al precio actual del activo.

        Fallos (estado intacto):
        - INVALID_QUANTITY si quantity <= 0 (NaN/None se tratan como 1).
        - UNKNOWN_ASSET si el id no existe.
        - INSUFFICIENT_FUNDS si cash < precio * cantidad (compra).
        - INSUFFICIENT_SHARES si la posición < cantidad (venta).
        """
        side = TradeSide.parse(side)
        qty = sanitize_quantity(quantity)
        if qty <= 0:
            return self._reject(ErrorKind.INVALID_QUANTITY, f"Cantidad inválida: {quantity!r}")

        asset = self._assets.get(asset_id)
        if asset is None:
            return self._reject(ErrorKind.UNKNOWN_ASSET, f"Activo desconocido: {asset_id}")

        price = asset.current_price
        total_cost = price * qty
        held = asset.quantity_held

        if side is TradeSide.BUY:
            if self._cash < total_cost:
                return self._reject(
                    ErrorKind.INSUFFICIENT_FUNDS,
                    f"Insufficient funds: {total_cost:.2f} > {self._cash:.2f}",
                )
            new_avg = (asset.avg_buy_price * held + price * qty) / (held + qty)
            updated = asset.with_changes(quantity_held=held + qty, avg_buy_price=new_avg)
            self._cash -= total_cost
        else:
            if held < qty:
                return self._reject(
                    ErrorKind.INSUFFICIENT_SHARES,
                    f"Not enough shares to sell: {qty} > {held}",
                )
            updated = asset.with_changes(quantity_held=held - qty)
            self._cash += total_cost

        tx = Transaction(
            id=self._id_factory(),
            asset_id=asset_id,
            side=side,
            price=price,
            quantity=qty,
            timestamp=self._clock(),
        )
        self._assets[asset_id] = updated
        self._transactions.append(tx)

        logger.info(
            f"Trade {side.value} {asset.symbol} x{qty} @ {price:.2f} | "
            f"cash={self._cash:.2f} pos={updated.quantity_held} avg={updated.avg_buy_price:.2f}"
        )
        return OperationResult.success(tx)

    # ------------------------------------------------------------------ #
    # Precios
    # ------------------------------------------------------------------ #
    def apply_ticks(self, ticked: Iterable[Asset]) -> None:
        """
        Refresca precios/series con snapshots nuevos conservando las posiciones.

        Los ids desconocidos (p. ej. activos eliminados entre tanto) se ignoran.
        """
        for new in ticked:
            current = self._assets.get(new.id)
            if current is None:
                continue
            self._assets[new.id] = new.with_changes(
                quantity_held=current.quantity_held,
                avg_buy_price=current.avg_buy_price,
            )

    # ------------------------------------------------------------------ #
    # Snapshots
    # ------------------------------------------------------------------ #
    def snapshot(self) -> dict[str, Any]:
        """Resumen numérico completo para la UI."""
        return {
            "cash": float(self._cash),
            "portfolio_value": self.total_value(),
            "total_unrealized_pnl": self.total_unrealized_pnl(),
            "positions": {
                a.id: {
                    "symbol": a.symbol,
                    "quantity": a.quantity_held,
                    "avg_buy_price": a.avg_buy_price,
                    "current_price": a.current_price,
                    "market_value": a.market_value,
                    "unrealized_pnl": unrealized_pnl(a),
                }
                for a in self.held_assets()
            },
            "transactions": len(self._transactions),
        }

    def reset(self) -> None:
        """Vuelve al estado inicial (activos, efectivo y transacciones)."""
        self._assets = dict(self._initial_assets)
        self._cash = float(self.cfg.cash)
        self._transactions.clear()
        logger.debug("Ledger reseteado a estado inicial.")

    # ------------------------------------------------------------------ #
    def _reject(self, kind: ErrorKind, message: str) -> OperationResult:
        logger.warning(f"[{kind.value}] {message}")
        return OperationResult.failure(kind, message)


__all__ = [
    "PortfolioConfig",
    "PortfolioLedger",
    "allocation",
    "unrealized_pnl",
]
