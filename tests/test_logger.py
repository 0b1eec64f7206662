"""Tests para mis_canchas/utils/logger.py"""
import logging
import uuid

import pytest

from mis_canchas.utils.logger import (
    LOG_FILENAME,
    get_environment,
    get_logger,
    is_production,
    log_file_path,
    resolve_level,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("ENV", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)


class TestEnvironment:
    @pytest.mark.parametrize(
        "value, expected",
        [("prod", "prod"), ("Production", "prod"), ("dev", "dev"), ("staging", "dev")],
    )
    def test_environment_names(self, monkeypatch, value, expected):
        monkeypatch.setenv("ENV", value)

        assert get_environment() == expected

    def test_defaults_to_dev(self):
        assert get_environment() == "dev"
        assert is_production() is False


class TestResolveLevel:
    def test_defaults_by_environment(self):
        assert resolve_level("dev") == logging.INFO
        assert resolve_level("prod") == logging.WARNING

    def test_log_level_override(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert resolve_level("prod") == logging.DEBUG

    def test_unknown_log_level_ignored(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ruidoso")

        assert resolve_level("dev") == logging.INFO


class TestGetLogger:
    def test_writes_to_log_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOG_DIR", str(tmp_path))
        logger = get_logger(f"Prueba-{uuid.uuid4().hex}")

        logger.warning("caja cerrada con diferencia")
        for handler in logger.handlers:
            handler.flush()

        assert log_file_path() == tmp_path / LOG_FILENAME
        assert "caja cerrada con diferencia" in (tmp_path / LOG_FILENAME).read_text(encoding="utf-8")

    def test_configured_once(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOG_DIR", str(tmp_path))
        name = f"Prueba-{uuid.uuid4().hex}"

        first = get_logger(name)
        handlers = len(first.handlers)

        assert get_logger(name) is first
        assert len(first.handlers) == handlers == 2
        assert first.propagate is False
