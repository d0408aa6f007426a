"""
Unit Tests for the saltbox Entry Point.

Gunicorn is patched out; these tests cover logging setup and the wiring
between configuration, store and application.
"""
import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

import pytest

from saltbox import configure_logging
from saltbox.saltbox import main


@pytest.fixture(autouse=True)
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def test_configure_logging_with_file(tmp_path):
    log_file = tmp_path / "saltbox.log"

    configure_logging({"logging": {"level": "WARNING", "file": str(log_file)}})

    root_logger = logging.getLogger()
    assert root_logger.level == logging.WARNING
    assert any(isinstance(h, RotatingFileHandler) for h in root_logger.handlers)


def test_configure_logging_without_file():
    configure_logging({"logging": {"level": "INFO", "file": None}})

    root_logger = logging.getLogger()
    assert root_logger.level == logging.INFO
    assert not any(isinstance(h, RotatingFileHandler) for h in root_logger.handlers)
    assert len(root_logger.handlers) == 1


def test_configure_logging_debug_overrides_level():
    configure_logging({"logging": {"level": "ERROR", "file": None}}, debug=True)

    assert logging.getLogger().level == logging.DEBUG


def test_main_builds_app_and_runs_gunicorn(tmp_path):
    config_file = tmp_path / "config.yml"
    config_file.write_text(f"""
storage:
  backend: sqlite
  path: {tmp_path / "kv"}
server:
  bind: "127.0.0.1:9999"
  workers: 2
logging:
  file: null
""")

    with patch("gunicorn.app.base.BaseApplication.run") as run, \
         patch("saltbox.saltbox.configure_logging"):
        main(config_path=str(config_file))

    run.assert_called_once()
    assert (tmp_path / "kv" / "kv.db").exists()
