"""Unit tests for CLI logging setup."""

import logging

import pytest

from bench_manager.cli.logging_config import ColoredFormatter, log_timing, setup_logging


@pytest.fixture(autouse=True)
def reset_bench_logger():
    yield
    logger = logging.getLogger("bench")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_default_level_is_warning(self):
        assert setup_logging().level == logging.WARNING

    def test_verbose(self):
        assert setup_logging(verbose=True).level == logging.INFO

    def test_debug_wins(self):
        logger = setup_logging(verbose=True, debug=True)
        assert logger.level == logging.DEBUG
        assert "%(lineno)d" in logger.handlers[0].formatter._fmt

    def test_repeated_setup_keeps_one_handler(self):
        setup_logging()
        logger = setup_logging(verbose=True)
        assert len(logger.handlers) == 1

    def test_child_loggers_inherit(self):
        setup_logging(debug=True)
        assert logging.getLogger("bench.resolver").getEffectiveLevel() == logging.DEBUG


class TestColoredFormatter:
    """Tests for ColoredFormatter."""

    def test_colors_level_without_touching_record(self):
        record = logging.LogRecord("bench", logging.ERROR, __file__, 1, "boom", None, None)
        text = ColoredFormatter("%(levelname)s: %(message)s").format(record)
        assert text == "\033[31mERROR\033[0m: boom"
        assert record.levelname == "ERROR"


class TestLogTiming:
    """Tests for log_timing()."""

    def test_logs_start_and_completion(self, caplog):
        logger = logging.getLogger("timing-test")
        with caplog.at_level(logging.INFO, logger="timing-test"):
            with log_timing("assemble work", logger):
                pass
        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "Starting: assemble work"
        assert messages[1].startswith("assemble work completed in ")

    def test_logs_even_on_error(self, caplog):
        logger = logging.getLogger("timing-test")
        with caplog.at_level(logging.INFO, logger="timing-test"):
            with pytest.raises(RuntimeError):
                with log_timing("focus work", logger):
                    raise RuntimeError("boom")
        assert any("focus work completed" in r.getMessage() for r in caplog.records)
