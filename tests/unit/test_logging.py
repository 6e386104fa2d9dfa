"""
Tests for the logging wrapper, formatter and performance decorator.
"""

import logging

import pytest

from jolly_seber_jax.config.settings import JollySeberConfig, LogLevel, get_default_config
from jolly_seber_jax.utils.logging import (
    ColoredFormatter,
    JollySeberLogger,
    format_context,
    get_logger,
    log_performance,
    setup_logging,
)


@pytest.fixture
def file_logger(tmp_path):
    log_file = tmp_path / "logs" / "jolly_seber.log"
    config = JollySeberConfig(logging={
        "level": "DEBUG",
        "console_logging": False,
        "file_logging": True,
        "log_file": str(log_file),
    })
    logger = JollySeberLogger("jolly_seber_jax.tests.file", config=config)
    yield logger, log_file
    for handler in logger.logger.handlers:
        handler.close()
    logger.logger.handlers.clear()


class TestJollySeberLogger:

    def test_context_formatting(self):
        assert format_context("Built data context", {}) == "Built data context"
        assert (
            format_context("Built data context", {"n_individuals": 3, "n_occasions": 2})
            == "Built data context | n_individuals=3 | n_occasions=2"
        )

    def test_writes_to_file(self, file_logger):
        logger, log_file = file_logger
        logger.debug("Simulating posterior predictive", n_draws=4)
        logger.warning("Capture matrix contains no captures", n_individuals=7)
        for handler in logger.logger.handlers:
            handler.flush()

        text = log_file.read_text()
        assert "Simulating posterior predictive | n_draws=4" in text
        assert "WARNING" in text
        assert "n_individuals=7" in text
        assert logger.logger.propagate is False

    def test_get_logger_is_cached(self):
        assert get_logger("jolly_seber_jax.tests.cached") is get_logger("jolly_seber_jax.tests.cached")


class TestColoredFormatter:

    def test_levelname_restored(self):
        formatter = ColoredFormatter("%(levelname)s %(message)s")
        record = logging.LogRecord("x", logging.WARNING, __file__, 1, "entry mass clamped", None, None)
        output = formatter.format(record)
        assert ColoredFormatter.COLORS["WARNING"] in output
        assert "entry mass clamped" in output
        assert record.levelname == "WARNING"


class TestSetupLogging:

    def test_reconfigures_registered_loggers(self):
        config = get_default_config()
        previous = config.logging.level
        logger = get_logger("jolly_seber_jax.tests.setup")
        logger.info("configured")
        assert not logger.stale

        try:
            setup_logging(level="WARNING")
            assert config.logging.level == LogLevel.WARNING
            assert logger.stale

            logger.info("reconfigured")
            assert logger.logger.level == logging.WARNING
        finally:
            setup_logging(level=previous)


class TestLogPerformance:

    def test_returns_result(self):
        @log_performance
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"

    def test_reraises(self):
        @log_performance
        def fail():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            fail()
