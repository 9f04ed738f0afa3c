"""Unit tests for structured logging helpers and package log configuration."""

import logging
import sys

import pytest

from rpi_camstream.core.logging_config import coerce_level, configure_logging, remove_handlers
from rpi_camstream.core.logging_utils import (
    LOGGER_NAMESPACE,
    StructuredLogger,
    ensure_structured_logger,
    get_module_logger,
)


@pytest.fixture()
def package_logger():
    logger = logging.getLogger(LOGGER_NAMESPACE)
    level = logger.level
    yield logger
    remove_handlers()
    logger.setLevel(level)


class TestStructuredLogger:

    def test_component_prefix(self, caplog):
        logger = get_module_logger("StreamCamera")

        with caplog.at_level(logging.INFO, logger=LOGGER_NAMESPACE):
            logger.info("Capture running (PID %d)", 42)

        assert caplog.records[-1].name == "rpi_camstream.StreamCamera"
        assert caplog.records[-1].getMessage() == "[StreamCamera] Capture running (PID 42)"

    def test_child_component(self, caplog):
        logger = get_module_logger("StreamCamera").getChild("streams")

        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAMESPACE):
            logger.debug("registered")

        assert caplog.records[-1].name == "rpi_camstream.StreamCamera.streams"
        assert caplog.records[-1].getMessage() == "[StreamCamera.streams] registered"

    def test_bad_format_args_do_not_raise(self, caplog):
        logger = get_module_logger("Test")

        with caplog.at_level(logging.INFO, logger=LOGGER_NAMESPACE):
            logger.info("value %d", "not-a-number")

        assert "args=not-a-number" in caplog.records[-1].getMessage()

    def test_disabled_level_is_skipped(self, caplog):
        logger = get_module_logger("Quiet")

        with caplog.at_level(logging.WARNING, logger=LOGGER_NAMESPACE):
            logger.debug("hidden")

        assert caplog.records == []

    def test_ensure_structured_logger(self):
        plain = logging.getLogger("custom.camera")
        structured = get_module_logger("X")

        assert ensure_structured_logger(structured) is structured
        wrapped = ensure_structured_logger(plain)
        assert isinstance(wrapped, StructuredLogger)
        assert wrapped.logger is plain
        assert ensure_structured_logger(None, fallback_name="Fallback").name == "rpi_camstream.Fallback"


class TestConfigureLogging:

    @pytest.mark.parametrize("level,expected", [
        ("debug", logging.DEBUG),
        ("WARNING", logging.WARNING),
        (logging.ERROR, logging.ERROR),
    ])
    def test_coerce_level(self, level, expected):
        assert coerce_level(level) == expected

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            coerce_level("loud")

    def test_rotating_file_handler(self, tmp_path, package_logger):
        log_file = tmp_path / "logs" / "camera.log"

        configure_logging("info", console=False, log_file=log_file)
        get_module_logger("StreamCamera").info("hello")
        for handler in package_logger.handlers:
            handler.flush()

        assert "[StreamCamera] hello" in log_file.read_text(encoding="utf-8")

    def test_console_uses_stderr(self, package_logger):
        configure_logging(logging.DEBUG)

        assert len(package_logger.handlers) == 1
        assert package_logger.handlers[0].stream is sys.stderr
        assert package_logger.level == logging.DEBUG
        assert package_logger.propagate is False

    def test_root_logger_untouched(self, package_logger):
        root = logging.getLogger()
        handlers = list(root.handlers)
        level = root.level

        configure_logging("debug")

        assert root.handlers == handlers
        assert root.level == level

    def test_reconfigure_replaces_own_handlers_only(self, package_logger):
        foreign = logging.NullHandler()
        package_logger.addHandler(foreign)
        try:
            configure_logging("info")
            configure_logging("warning")

            owned = [h for h in package_logger.handlers if h is not foreign]
            assert len(owned) == 1
            assert foreign in package_logger.handlers
            assert package_logger.level == logging.WARNING
        finally:
            package_logger.removeHandler(foreign)

    def test_without_handlers_records_propagate(self, package_logger):
        configure_logging("info", console=False)

        assert package_logger.handlers == []
        assert package_logger.propagate is True
