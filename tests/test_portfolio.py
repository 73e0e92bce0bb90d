from __future__ import annotations

import math

import pytest

from core.errors import ErrorKind, LedgerError, OperationResult, sanitize_quantity
from core.portfolio import PortfolioConfig, PortfolioLedger, allocation, unrealized_pnl
from core.types import Asset, TradeSide


def make_asset(asset_id: str = "1", price: float = 100.0, **kw) -> Asset:
    return Asset(
        id=asset_id, name=f"Asset {asset_id}", symbol=f"A{asset_id}", current_price=price, **kw
    )


def make_ledger(cash: float = 100_000.0, *assets: Asset) -> PortfolioLedger:
    return PortfolioLedger(
        assets or (make_asset(),),
        PortfolioConfig(cash=cash),
        id_factory=iter(f"tx{i}" for i in range(1000)).__next__,
    )


def test_buy_with_insufficient_funds_leaves_state_unchanged():
    ledger = make_ledger(50.0)
    res = ledger.execute_trade("1", "buy", 1)
    assert not res.ok
    assert res.error is ErrorKind.INSUFFICIENT_FUNDS
    assert ledger.cash == 50.0
    assert ledger.get("1").quantity_held == 0
    assert ledger.transactions() == ()


def test_weighted_average_buy_price():
    ledger = make_ledger()
    assert ledger.execute_trade("1", TradeSide.BUY, 10).ok
    ledger.apply_ticks([ledger.get("1").with_changes(current_price=200.0)])
    assert ledger.execute_trade("1", "BUY", 10).ok

    asset = ledger.get("1")
    assert asset.quantity_held == 20
    assert asset.avg_buy_price == pytest.approx(150.0)
    assert ledger.cash == pytest.approx(100_000.0 - 1_000.0 - 2_000.0)
    assert [t.id for t in ledger.transactions()] == ["tx0", "tx1"]


def test_sell_keeps_average_and_credits_cash():
    ledger = make_ledger()
    ledger.execute_trade("1", "buy", 10)
    ledger.apply_ticks([ledger.get("1").with_changes(current_price=120.0)])
    res = ledger.execute_trade("1", "sell", 4)
    assert res.ok
    assert res.value.side is TradeSide.SELL
    assert res.value.total == pytest.approx(480.0)

    asset = ledger.get("1")
    assert asset.quantity_held == 6
    assert asset.avg_buy_price == pytest.approx(100.0)
    assert ledger.cash == pytest.approx(100_000.0 - 1_000.0 + 480.0)


def test_sell_more_than_held_is_rejected():
    ledger = make_ledger()
    ledger.execute_trade("1", "buy", 2)
    res = ledger.execute_trade("1", "sell", 3)
    assert res.error is ErrorKind.INSUFFICIENT_SHARES
    assert ledger.get("1").quantity_held == 2
    assert len(ledger.transactions()) == 1


def test_invalid_quantity_and_unknown_asset():
    ledger = make_ledger()
    assert ledger.execute_trade("1", "buy", 0).error is ErrorKind.INVALID_QUANTITY
    assert ledger.execute_trade("1", "buy", -5).error is ErrorKind.INVALID_QUANTITY
    assert ledger.execute_trade("999", "buy", 1).error is ErrorKind.UNKNOWN_ASSET


def test_nan_quantity_is_treated_as_one():
    ledger = make_ledger()
    res = ledger.execute_trade("1", "buy", math.nan)
    assert res.ok
    assert res.value.quantity == 1


def test_bad_side_raises():
    ledger = make_ledger()
    with pytest.raises(ValueError):
        ledger.execute_trade("1", "hold", 1)


def test_add_position_uses_current_price_and_is_idempotent():
    ledger = make_ledger()
    res = ledger.add_position("1", 5)
    assert res.ok
    assert res.value.quantity_held == 5
    assert res.value.avg_buy_price == 100.0
    assert ledger.cash == 100_000.0

    again = ledger.add_position("1", 50)
    assert again.ok
    assert ledger.get("1").quantity_held == 5


def test_update_shares_clamps_to_one():
    ledger = make_ledger()
    ledger.add_position("1", 3)
    for raw, expected in ((7, 7), (0, 1), (-4, 1), ("abc", 1), (None, 1), ("12", 12)):
        assert ledger.update_shares("1", raw).ok
        assert ledger.get("1").quantity_held == expected


def test_remove_position_keeps_asset():
    ledger = make_ledger()
    ledger.add_position("1", 3)
    res = ledger.remove_position("1")
    assert res.ok
    asset = ledger.get("1")
    assert asset is not None
    assert asset.quantity_held == 0
    assert asset.avg_buy_price == 0.0
    assert ledger.held_assets() == []
    assert ledger.remove_position("999").error is ErrorKind.UNKNOWN_ASSET


def test_removed_position_can_be_added_back_and_still_ticks():
    ledger = make_ledger()
    ledger.add_position("1", 5)
    ledger.remove_position("1")
    ledger.apply_ticks([make_asset("1", 120.0)])
    assert ledger.get("1").current_price == 120.0

    res = ledger.add_position("1", 3)
    assert res.ok
    assert res.value.quantity_held == 3
    assert res.value.avg_buy_price == 120.0


def test_unrealized_pnl_and_allocation():
    a = make_asset("1", 110.0, quantity_held=10, avg_buy_price=100.0)
    b = make_asset("2", 50.0, quantity_held=20, avg_buy_price=60.0)
    c = make_asset("3", 10.0)
    assert unrealized_pnl(a) == pytest.approx(100.0)
    assert unrealized_pnl(b) == pytest.approx(-200.0)
    assert unrealized_pnl(c) == 0.0

    slices = allocation([a, b, c])
    assert [s.asset_id for s in slices] == ["1", "2"]
    assert sum(s.weight_pct for s in slices) == pytest.approx(100.0)
    assert slices[0].weight_pct == pytest.approx(1100.0 / 2100.0 * 100.0)

    ledger = make_ledger(1_000.0, a, b, c)
    assert ledger.total_value() == pytest.approx(2_100.0)
    assert ledger.total_unrealized_pnl() == pytest.approx(-100.0)
    assert ledger.unrealized_pnl("1") == pytest.approx(100.0)


def test_apply_ticks_keeps_positions():
    ledger = make_ledger()
    ledger.execute_trade("1", "buy", 3)
    ledger.apply_ticks([make_asset("1", 130.0), make_asset("ghost", 1.0)])
    asset = ledger.get("1")
    assert asset.current_price == 130.0
    assert asset.quantity_held == 3
    assert asset.avg_buy_price == 100.0
    assert ledger.get("ghost") is None


def test_reset_restores_initial_state():
    ledger = make_ledger()
    ledger.execute_trade("1", "buy", 3)
    ledger.reset()
    assert ledger.cash == 100_000.0
    assert ledger.get("1").quantity_held == 0
    assert ledger.transactions() == ()


def test_operation_result_unwrap():
    assert OperationResult.success(3).unwrap() == 3
    failed = OperationResult.failure(ErrorKind.EMPTY_PORTFOLIO)
    assert failed.message == "EMPTY_PORTFOLIO"
    with pytest.raises(LedgerError) as exc:
        failed.unwrap()
    assert exc.value.kind is ErrorKind.EMPTY_PORTFOLIO


def test_sanitize_quantity():
    assert sanitize_quantity(3.9) == 3
    assert sanitize_quantity(float("inf")) == 1
    assert sanitize_quantity(True) == 1
    assert sanitize_quantity("x", default=7) == 7
