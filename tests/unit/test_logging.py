# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging configuration."""

import logging
import os
from unittest.mock import patch

import structlog

from campus.core.config.settings import Settings
from campus.utils.logging import bind_context, clear_context, get_logger, setup_logging


def _settings(**env: str) -> Settings:
    with patch.dict(os.environ, env, clear=True):
        return Settings(_env_file=None)  # type: ignore[call-arg]


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_sets_campus_logger_level(self) -> None:
        setup_logging(_settings(LOG_LEVEL="WARNING"))

        assert logging.getLogger("campus").level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_development_uses_console_renderer(self) -> None:
        setup_logging(_settings(ENVIRONMENT="development"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_staging_uses_json_renderer(self) -> None:
        setup_logging(_settings(ENVIRONMENT="staging", DEBUG="false"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)


class TestContext:
    """Tests for context binding helpers."""

    def test_bind_and_clear(self) -> None:
        bind_context(request_id="req-1", performed_by="registrar")
        assert structlog.contextvars.get_contextvars()["request_id"] == "req-1"

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_get_logger(self) -> None:
        assert get_logger(__name__) is not None
