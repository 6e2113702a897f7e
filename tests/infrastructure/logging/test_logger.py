"""Tests for the logging helpers."""

import logging
from unittest.mock import MagicMock

from src.infrastructure.logging import logger as logger_module


def test_logger_builder_writes_under_project_logs(tmp_path, monkeypatch):
    """LoggerBuilder should place the file in logs/<subdir>/."""
    monkeypatch.setattr(
        logger_module,
        "get_project_root",
        lambda: tmp_path,
    )
    monkeypatch.setattr(
        logger_module.LoggerBuilder,
        "_today_stamp",
        staticmethod(lambda: "20240315"),
    )

    builder = logger_module.LoggerBuilder()
    snapshot_logger = (
        builder.name("snapshots-test")
        .subdir("balance_sheet")
        .prefix("snapshots")
        .console(False)
        .level(logging.DEBUG)
        .build()
    )

    assert snapshot_logger.name == "snapshots-test"
    assert snapshot_logger.level == logging.DEBUG
    assert snapshot_logger.propagate is False
    file_handlers = [
        h
        for h in snapshot_logger.handlers
        if isinstance(h, logging.FileHandler)
    ]
    assert len(file_handlers) == 1
    assert len(snapshot_logger.handlers) == 1
    expected = tmp_path / "logs" / "balance_sheet" / "20240315_snapshots.log"
    assert file_handlers[0].baseFilename == str(expected)
    assert builder.build() is snapshot_logger
    for handler in list(snapshot_logger.handlers):
        handler.close()
        snapshot_logger.removeHandler(handler)


def test_custom_handler_factories_are_used(tmp_path, monkeypatch):
    monkeypatch.setattr(logger_module, "get_project_root", lambda: tmp_path)
    file_handler = logging.NullHandler()
    console_handler = logging.NullHandler()
    fmt = logging.Formatter("%(message)s")

    built = (
        logger_module.LoggerBuilder()
        .name("factories-test")
        .formatter(lambda: fmt)
        .file_handler(lambda path, f: file_handler)
        .console_handler(lambda f: console_handler)
        .build()
    )

    assert built.handlers == [file_handler, console_handler]
    built.handlers.clear()


def test_default_handlers_use_formatter(tmp_path):
    """Default handlers should apply the provided formatter."""
    fmt = logger_module.LoggerBuilder._default_formatter()
    file_handler = logger_module.LoggerBuilder._default_file_handler(
        tmp_path / "balance.log",
        fmt,
    )
    console_handler = logger_module.LoggerBuilder._default_console_handler(fmt)

    assert isinstance(file_handler, logging.FileHandler)
    assert file_handler.level == logging.INFO
    assert file_handler.formatter is fmt
    assert isinstance(console_handler, logging.StreamHandler)
    assert console_handler.formatter is fmt
    file_handler.close()


def test_logger_singleton_delegates_to_underlying_logger(monkeypatch):
    """Logger info/warning/error/etc. should call the wrapped logger."""
    fake_logger = MagicMock()
    monkeypatch.setattr(
        logger_module.LoggerBuilder,
        "build",
        lambda self: fake_logger,
    )
    monkeypatch.setattr(logger_module.Logger, "_instance", None)

    logger = logger_module.Logger("app")
    logger.info("asset created")
    logger.warning("snapshot skipped")
    logger.error("store failed")
    logger.debug("event queued")
    logger.critical("crit")

    fake_logger.info.assert_called_with("asset created")
    fake_logger.warning.assert_called_with("snapshot skipped")
    fake_logger.error.assert_called_with("store failed")
    fake_logger.debug.assert_called_with("event queued")
    fake_logger.critical.assert_called_with("crit")
    assert logger_module.Logger("other") is logger


def test_app_and_usage_loggers_use_their_own_folders(monkeypatch):
    """Each logger class should be a singleton with its own subdir."""
    subdirs = []

    def _fake_build(self):
        subdirs.append(self._subdir)
        return MagicMock()

    monkeypatch.setattr(logger_module.LoggerBuilder, "build", _fake_build)
    monkeypatch.setattr(logger_module.AppLogger, "_instance", None)
    monkeypatch.setattr(logger_module.UsageLogger, "_instance", None)

    app_logger_1 = logger_module.get_app_logger()
    app_logger_2 = logger_module.get_app_logger()
    usage_logger_1 = logger_module.get_usage_logger()
    usage_logger_2 = logger_module.get_usage_logger()

    assert app_logger_1 is app_logger_2
    assert usage_logger_1 is usage_logger_2
    assert app_logger_1 is not usage_logger_1
    assert subdirs == ["balance_sheet", "usage"]
