# ============================================================
# src/core/logger_config.py — Configuración central del logger
# ------------------------------------------------------------
# init_logger() configura el logger global de Loguru según el
# entorno (.env) o los parámetros recibidos.
#
# El logger escribe en:
#   - Consola (colorizada, nivel configurable)
#   - Archivo de logs (rotación diaria en data/logs/)
#
# Los módulos de librería solo hacen `from loguru import logger`;
# nunca añaden sinks por su cuenta.
# ============================================================

from __future__ import annotations

import os
from pathlib import Path
import sys

from dotenv import load_dotenv
from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


# ============================================================
# Función: init_logger
# ============================================================
def init_logger(
    level: str | None = None,
    log_dir: str | Path | None = "data/logs",
    file_name: str = "stocksim.log",
) -> Path | None:
    """
    Inicializa la configuración global del logger.

    Llama a esta función una sola vez al inicio del programa (main.py).

    Args:
        level: nivel mínimo; si es None se lee LOG_LEVEL del .env (INFO por defecto).
        log_dir: carpeta del archivo de logs; None desactiva el sink de archivo.
        file_name: nombre del archivo dentro de `log_dir`.

    Returns:
        Ruta del archivo de logs, o None si solo se loggea a consola.
    """
    load_dotenv()
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    # --- Eliminar configuración previa ---
    logger.remove()

    # --- Consola (colorizada) ---
    logger.add(
        sink=sys.stderr,
        level=log_level,
        colorize=True,
        format=LOG_FORMAT,
    )

    log_file_path: Path | None = None
    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        log_file_path = log_path / file_name

        # --- Archivo (rotación diaria) ---
        logger.add(
            sink=log_file_path,
            level=log_level,
            rotation="1 day",
            retention="7 days",
            enqueue=True,
            backtrace=True,
            diagnose=False,
            format=LOG_FORMAT,
        )

    logger.info(f"Logger inicializado (nivel {log_level})")
    if log_file_path is not None:
        logger.debug(f"Logs guardados en: {log_file_path}")
    return log_file_path


if __name__ == "__main__":
    init_logger(level="DEBUG", log_dir=None)
    logger.info("Prueba de logger: info")
    logger.debug("Prueba de logger: debug")
    logger.warning("Prueba de logger: warning")
