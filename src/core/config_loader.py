# ============================================================
# src/core/config_loader.py — Cargador central de configuración
# ------------------------------------------------------------
# OBJETIVO:
#   Leer la configuración del simulador desde un YAML
#   (src/config/config.yaml) y aplicar overrides desde .env.
#
# CARACTERÍSTICAS:
#   - Cache interna (evita relecturas del archivo en cada import).
#   - Overrides vía .env (LOG_LEVEL, INITIAL_CASH, RANDOM_SEED...).
#   - Validación mínima del esquema (claves imprescindibles).
#   - SimulationSettings: vista tipada de la config para el engine.
#
# USO BÁSICO:
#   from core.config_loader import get_config, SimulationSettings
#   cfg = get_config()
#   settings = SimulationSettings.from_config(cfg)
#
# NOTA:
#   Este módulo NO configura logs (evita dependencia circular).
# ============================================================

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, MutableMapping, Optional

from dotenv import load_dotenv
import yaml

# ------------------------------------------------------------
# Constantes y cache interna
# ------------------------------------------------------------
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "config.yaml"

TICK_MODES = ("absolute", "relative")
CATALOGS = ("simulator", "tracker")

# Se invalida llamando a reload_config().
_CONFIG_CACHE: Optional[Dict[str, Any]] = None
_MISSING = object()


# ------------------------------------------------------------
# Utilidades internas de tipos / paths
# ------------------------------------------------------------
def _to_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_int(value: Any, default: int | None) -> int | None:
    if value is None or str(value).strip().lower() in {"", "none", "null"}:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _ensure_file_exists(path: Path) -> None:
    if not path.exists():
        raise FileNotFoundError(f"No se encontró el archivo de configuración: {path.resolve()}")


def _deep_set(d: MutableMapping[str, Any], keys: Iterable[str], value: Any) -> None:
    """
    Asigna value en un diccionario anidado siguiendo la lista de 'keys'.
    Crea los nodos intermedios si no existen.
    """
    keys = list(keys)
    current = d
    for k in keys[:-1]:
        if k not in current or not isinstance(current[k], dict):
            current[k] = {}
        current = current[k]
    current[keys[-1]] = value


# ------------------------------------------------------------
# Carga YAML + overrides desde .env
# ------------------------------------------------------------
def _load_yaml_config(path: Path) -> Dict[str, Any]:
    _ensure_file_exists(path)
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"El YAML debe mapear a dict en la raíz. Archivo: {path}")
    return data


# Mapeo: ENV_VAR -> (ruta en config.yaml)
ENV_TO_CFG: Dict[str, tuple[str, str]] = {
    "LOG_LEVEL": ("environment", "log_level"),
    "LOG_DIR": ("environment", "log_dir"),
    "INITIAL_CASH": ("simulation", "initial_cash"),
    "HISTORY_LENGTH": ("simulation", "history_length"),
    "TICK_INTERVAL": ("simulation", "tick_interval_seconds"),
    "TICK_MODE": ("simulation", "tick_mode"),
    "RANDOM_SEED": ("simulation", "seed"),
    "CATALOG": ("simulation", "catalog"),
    "BACKTEST_DAYS": ("backtest", "days"),
    "BACKTEST_DELAY": ("backtest", "delay_seconds"),
}


def _apply_env_overrides(cfg: Dict[str, Any]) -> None:
    """
    Aplica overrides de variables de entorno (.env) sobre el dict `cfg`.
    Mantén este mapeo corto y explícito para evitar sorpresas.
    """
    load_dotenv(override=False)

    for env_var, path_keys in ENV_TO_CFG.items():
        if env_var not in os.environ:
            continue
        raw = os.getenv(env_var)
        section = cfg.get(path_keys[0], {}) or {}
        current = section.get(path_keys[1])

        value: Any
        if path_keys in {
            ("simulation", "initial_cash"),
            ("simulation", "tick_interval_seconds"),
            ("backtest", "delay_seconds"),
        }:
            value = _to_float(raw, default=float(current or 0.0))
        elif path_keys in {("simulation", "history_length"), ("backtest", "days")}:
            value = _to_int(raw, default=current)
        elif path_keys == ("simulation", "seed"):
            value = _to_int(raw, default=None)
        else:
            value = raw

        _deep_set(cfg, path_keys, value)


# ------------------------------------------------------------
# Validación mínima del esquema (imprescindibles)
# ------------------------------------------------------------
REQUIRED_PATHS = [
    ("environment", "log_level"),
    ("simulation", "initial_cash"),
    ("simulation", "history_length"),
    ("simulation", "tick_interval_seconds"),
    ("simulation", "tick_mode"),
    ("backtest", "days"),
    ("backtest", "delay_seconds"),
]


def _validate_schema(cfg: Dict[str, Any]) -> None:
    """
    Valida que existan las secciones y claves mínimas.
    Lanza ValueError si falta algo crítico o un valor está fuera de rango.
    """
    missing: List[str] = []
    for path_keys in REQUIRED_PATHS:
        if get_nested(cfg, *path_keys, default=_MISSING) is _MISSING:
            missing.append(".".join(path_keys))

    if missing:
        raise ValueError(
            "Faltan claves imprescindibles en config.yaml (o tras overrides): " + ", ".join(missing)
        )

    mode = cfg["simulation"]["tick_mode"]
    if mode not in TICK_MODES:
        raise ValueError(f"simulation.tick_mode inválido: {mode!r} (usa {TICK_MODES})")
    if float(cfg["simulation"]["tick_interval_seconds"]) <= 0:
        raise ValueError("simulation.tick_interval_seconds debe ser > 0")
    if int(cfg["simulation"]["history_length"]) < 1:
        raise ValueError("simulation.history_length debe ser >= 1")


# ------------------------------------------------------------
# API pública
# ------------------------------------------------------------
def get_config(path: Optional[Path | str] = None, use_cache: bool = True) -> Dict[str, Any]:
    """
    Devuelve la configuración como diccionario.
    - path: ruta alternativa al YAML (opcional).
    - use_cache: si True, reutiliza la última carga (más rápido).
    """
    global _CONFIG_CACHE
    if use_cache and _CONFIG_CACHE is not None and path is None:
        return _CONFIG_CACHE

    cfg_path = Path(path) if path else DEFAULT_CONFIG_PATH
    cfg = _load_yaml_config(cfg_path)
    _apply_env_overrides(cfg)
    _validate_schema(cfg)

    if path is None:
        _CONFIG_CACHE = cfg
    return cfg


def reload_config(path: Optional[Path | str] = None) -> Dict[str, Any]:
    """Fuerza la recarga del YAML y re-aplica overrides del .env."""
    global _CONFIG_CACHE
    _CONFIG_CACHE = None
    return get_config(path=path, use_cache=False)


def get_nested(cfg: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """
    Acceso seguro a valores anidados: get_nested(cfg, "simulation", "seed")
    Devuelve `default` si no existe la ruta.
    """
    node: Any = cfg
    for k in keys:
        if not isinstance(node, dict) or k not in node:
            return default
        node = node[k]
    return node


# ------------------------------------------------------------
# Vista tipada
# ------------------------------------------------------------
@dataclass
class SimulationSettings:
    """Parámetros de sesión que consume `core.engine.SimulationEngine`."""

    initial_cash: float = 100_000.0
    history_length: int = 30
    tick_interval_seconds: float = 3.0
    tick_mode: str = "absolute"
    seed: int | None = None
    catalog: str = "simulator"
    backtest_days: int = 30
    backtest_delay_seconds: float = 1.5
    strategies: list[str] = field(
        default_factory=lambda: ["moving_avg", "momentum", "mean_reversion"]
    )
    log_level: str = "INFO"
    log_dir: str = "data/logs"

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> SimulationSettings:
        defaults = cls()
        catalog = str(get_nested(cfg, "simulation", "catalog", default=defaults.catalog))
        if catalog not in CATALOGS:
            raise ValueError(f"simulation.catalog inválido: {catalog!r} (usa {CATALOGS})")
        strategies = get_nested(cfg, "backtest", "strategies", default=None)
        return cls(
            initial_cash=float(cfg["simulation"]["initial_cash"]),
            history_length=int(cfg["simulation"]["history_length"]),
            tick_interval_seconds=float(cfg["simulation"]["tick_interval_seconds"]),
            tick_mode=str(cfg["simulation"]["tick_mode"]),
            seed=_to_int(get_nested(cfg, "simulation", "seed"), default=None),
            catalog=catalog,
            backtest_days=int(cfg["backtest"]["days"]),
            backtest_delay_seconds=float(cfg["backtest"]["delay_seconds"]),
            strategies=list(strategies) if strategies else defaults.strategies,
            log_level=str(cfg["environment"]["log_level"]).upper(),
            log_dir=str(get_nested(cfg, "environment", "log_dir", default=defaults.log_dir)),
        )


def load_settings(path: Optional[Path | str] = None) -> SimulationSettings:
    """Atajo: get_config() + SimulationSettings.from_config()."""
    return SimulationSettings.from_config(get_config(path))


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SimulationSettings",
    "get_config",
    "reload_config",
    "get_nested",
    "load_settings",
]
