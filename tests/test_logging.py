"""Tests for logging configuration."""

import logging
import re


def test_setup_logging_returns_logger():
    from diceware_db.logging_config import setup_logging

    logger = setup_logging()
    assert isinstance(logger, logging.Logger)
    assert logger.name == "diceware_db"


def test_setup_logging_default_level_is_info():
    from diceware_db.logging_config import setup_logging

    assert setup_logging().level == logging.INFO


def test_setup_logging_verbose_sets_debug():
    from diceware_db.logging_config import setup_logging

    assert setup_logging(verbose=True).level == logging.DEBUG


def test_setup_logging_quiet_sets_warning():
    from diceware_db.logging_config import setup_logging

    assert setup_logging(quiet=True).level == logging.WARNING


def test_repeated_setup_does_not_stack_handlers(tmp_path):
    from diceware_db.logging_config import setup_logging

    setup_logging(log_file=str(tmp_path / "a.log"))
    logger = setup_logging(log_file=str(tmp_path / "b.log"))
    assert len(logger.handlers) == 1
    setup_logging()
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.NullHandler)


def test_log_file_format(tmp_path):
    """Records carry timestamp, level and logger name."""
    from diceware_db.logging_config import setup_logging

    log_path = tmp_path / "test.log"
    logger = setup_logging(log_file=str(log_path))
    logger.warning("level check")
    for handler in logger.handlers:
        handler.flush()
    content = log_path.read_text()
    assert "level check" in content
    assert "WARNING" in content
    assert "diceware_db" in content
    assert re.search(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", content)
    setup_logging()


def test_module_loggers_reach_log_file(tmp_path, wordlist_file):
    from diceware_db.logging_config import setup_logging
    from diceware_db.store import create_store

    log_path = tmp_path / "store.log"
    logger = setup_logging(verbose=True, log_file=str(log_path))
    create_store(tmp_path / "words.db", wordlist_file).close()
    for handler in logger.handlers:
        handler.flush()
    content = log_path.read_text()
    assert "diceware_db.store" in content
    assert "created word store" in content
    setup_logging()
