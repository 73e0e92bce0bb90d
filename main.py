# ============================================================
# main.py — Punto de entrada del simulador "stocksim"
# ------------------------------------------------------------
# Añade /src al sys.path ANTES de importar "core.*".
#
# Además:
#  - Carga .env pronto (overrides de config.yaml)
#  - Lanza una sesión demo: compra, ticks, indicadores, backtest
# ============================================================

import argparse
import asyncio
from pathlib import Path
import sys

# --- 1) AÑADIR ./src AL sys.path ANTES DE NADA ----------------
PROJECT_ROOT = Path(__file__).parent
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

# --- 2) CARGAR .env --------------------------------------------
from dotenv import load_dotenv  # noqa: E402 (import tardío por orden lógico)

load_dotenv()

# --- 3) IMPORTS DEL PAQUETE ------------------------------------
from loguru import logger  # noqa: E402

from core.config_loader import load_settings  # noqa: E402
from core.engine import SimulationEngine  # noqa: E402
from core.logger_config import init_logger  # noqa: E402
from features.technical_indicators import indicator_frame  # noqa: E402
from report.results import format_results  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Sesión demo del simulador de bolsa.")
    p.add_argument("--config", default=None, help="Ruta a config.yaml alternativo")
    p.add_argument("--catalog", choices=["simulator", "tracker"], default=None)
    p.add_argument("--seed", type=int, default=None, help="Semilla del generador aleatorio")
    p.add_argument("--ticks", type=int, default=5, help="Ticks de precio a simular")
    p.add_argument("--interval", type=float, default=None, help="Segundos entre ticks")
    p.add_argument("--buy", type=int, default=10, help="Acciones a comprar de cada activo")
    p.add_argument("--delay", type=float, default=None, help="Espera simulada del backtest")
    return p.parse_args(argv)


async def run_demo(args: argparse.Namespace) -> int:
    settings = load_settings(args.config)
    if args.catalog:
        settings.catalog = args.catalog
    if args.seed is not None:
        settings.seed = args.seed
    if args.interval is not None:
        settings.tick_interval_seconds = args.interval
    if args.delay is not None:
        settings.backtest_delay_seconds = args.delay

    init_logger(settings.log_level, settings.log_dir)
    engine = SimulationEngine(settings)

    for asset in engine.ledger.assets():
        if settings.catalog == "tracker":
            res = engine.add_position(asset.id, args.buy)
        else:
            res = engine.execute_trade(asset.id, "buy", args.buy)
        if not res.ok:
            logger.warning(f"{asset.symbol}: {res.message}")

    engine.start()
    await asyncio.sleep(settings.tick_interval_seconds * args.ticks + 0.05)
    engine.stop()

    snap = engine.snapshot()
    print(f"\nTicks: {snap['ticks']} | Cash: {snap['cash']:,.2f} | "
          f"Valor: {snap['portfolio_value']:,.2f} | P/L: {snap['total_unrealized_pnl']:,.2f}")

    for asset in engine.ledger.held_assets():
        dash = engine.analyze(asset.id).unwrap()
        summary = dash["summary"]
        print(f"\n== {asset.symbol} ({asset.name}) ==")
        print(f"Precio: {summary['current_price']:,.2f} | RSI: {summary['rsi']:.1f} "
              f"({summary['rsi_zone']})")
        print(indicator_frame(asset.prices).tail(5).to_string(float_format=lambda x: f"{x:,.2f}"))
        patterns = dash.get("patterns", [])
        if patterns:
            print("Patrones: " + ", ".join(f"{p.name}@{p.index}" for p in patterns[-5:]))

    res = engine.run_backtest()
    if not res.ok:
        print(f"\nBacktest: {res.message}")
        await engine.aclose()
        return 1

    print("\nBacktesting...")
    results = await res.unwrap()
    print(format_results(results))
    await engine.aclose()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    return asyncio.run(run_demo(args))


if __name__ == "__main__":
    sys.exit(main())
