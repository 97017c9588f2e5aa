"""
Unit tests for logging helpers.
"""
import logging

from ledger.logger import mask_label, setup_logger


def test_setup_logger_single_handler():
    logger = setup_logger("ledger.tests.single", level="debug")
    setup_logger("ledger.tests.single", level="debug")

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_setup_logger_env_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    assert setup_logger("ledger.tests.env").level == logging.WARNING


def test_mask_label():
    assert mask_label("Netflix") == "Net****"
    assert mask_label("  Rent ") == "Ren*"
    assert mask_label("abc") == "***"
    assert mask_label("") == "<empty>"
    assert mask_label(None) == "<empty>"
