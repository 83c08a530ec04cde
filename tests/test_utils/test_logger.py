"""Проверки подсистемы логирования."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from n8n_deploy.utils.logger import configure_logging, resolve_log_level


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def test_configure_logging_creates_file(tmp_path: Path, restore_root_logger: logging.Logger) -> None:
    """После конфигурации должны появиться файлы логов и запись в них."""

    log_dir = tmp_path / "logs"
    configure_logging(log_dir, level_name="INFO", max_bytes=1024, backup_count=1)

    logger = logging.getLogger("n8n_deploy.test")
    logger.info("log entry")
    logger.debug("hidden entry")
    for handler in restore_root_logger.handlers:
        handler.flush()

    log_file = log_dir / "n8n-deploy.log"
    assert log_file.exists()
    content = log_file.read_text(encoding="utf-8")
    assert "log entry" in content
    assert "n8n_deploy.test" in content
    assert "hidden entry" not in content


def test_console_output_is_short(tmp_path: Path, restore_root_logger: logging.Logger, capsys) -> None:
    configure_logging(tmp_path, level_name="DEBUG")
    logging.getLogger("n8n_deploy.test").warning("Docker is not running")

    captured = capsys.readouterr().out
    assert "WARNING Docker is not running" in captured
    assert "n8n_deploy.test" not in captured


def test_resolve_log_level() -> None:
    assert resolve_log_level("warning") == logging.WARNING


def test_resolve_log_level_invalid() -> None:
    """Неизвестный уровень логирования приводит к ValueError."""

    with pytest.raises(ValueError):
        resolve_log_level("INVALID")
