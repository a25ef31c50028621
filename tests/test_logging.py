"""Tests for logging setup."""
from loguru import logger

from xaiflow.utils.logging import reset_logging, setup_logging


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "xaiflow.log"
    setup_logging(level="debug", log_file=log_file, force=True)
    logger.info("model {} trained", 5)
    reset_logging()
    text = log_file.read_text()
    assert "INFO" in text
    assert "model 5 trained" in text


def test_setup_logging_runs_once(tmp_path):
    first = tmp_path / "first.log"
    second = tmp_path / "second.log"
    setup_logging(log_file=first, force=True)
    setup_logging(log_file=second)
    logger.warning("hello")
    reset_logging()
    assert "hello" in first.read_text()
    assert not second.exists()
