from __future__ import annotations

import sys

from loguru import logger

from core.logger_config import init_logger


def test_init_logger_without_file_sink():
    assert init_logger("warning", log_dir=None) is None
    logger.remove()
    logger.add(sys.stderr)


def test_init_logger_writes_file(tmp_path):
    path = init_logger("DEBUG", log_dir=tmp_path / "logs", file_name="test.log")
    logger.info("hello from the test")
    logger.complete()
    logger.remove()
    logger.add(sys.stderr)

    assert path == tmp_path / "logs" / "test.log"
    assert "hello from the test" in path.read_text(encoding="utf-8")
