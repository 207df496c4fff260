"""Tests for cadence/logging_config.py

Logging is configured on the project's own logger only, and each event is
tagged with the component and the bound user.
"""

import logging

import pytest
import structlog

from cadence.logging_config import (
    LOGGER_NAMESPACE,
    add_component,
    bind_user,
    setup_logging,
    unbind_user,
    user_context,
)


@pytest.fixture
def restore_logging():
    project_logger = logging.getLogger(LOGGER_NAMESPACE)
    root = logging.getLogger()
    saved = (list(project_logger.handlers), project_logger.level, project_logger.propagate)
    root_handlers = list(root.handlers)
    yield
    project_logger.handlers[:] = saved[0]
    project_logger.setLevel(saved[1])
    project_logger.propagate = saved[2]
    root.handlers[:] = root_handlers
    structlog.reset_defaults()


class TestAddComponent:
    @pytest.mark.parametrize("name,component", [
        ("cadence.engagement.nudges", "engagement"),
        ("cadence.learning.correlation", "learning"),
        ("cadence.engine", "engine"),
    ])
    def test_component_from_logger_name(self, name, component):
        event = add_component(None, "info", {"event": "x", "logger": name})
        assert event["component"] == component

    @pytest.mark.parametrize("name", ["cadence", "uvicorn.error", ""])
    def test_other_loggers_untouched(self, name):
        event = add_component(None, "info", {"event": "x", "logger": name})
        assert "component" not in event

    def test_explicit_component_kept(self):
        event = add_component(
            None, "info", {"event": "x", "logger": "cadence.focus.timer", "component": "cli"}
        )
        assert event["component"] == "cli"


class TestUserBinding:
    def test_bind_and_unbind(self):
        bind_user("alice")
        assert structlog.contextvars.get_contextvars()["user_id"] == "alice"

        unbind_user()
        assert "user_id" not in structlog.contextvars.get_contextvars()

    def test_user_context_clears_on_error(self):
        with pytest.raises(RuntimeError):
            with user_context("bob"):
                assert structlog.contextvars.get_contextvars()["user_id"] == "bob"
                raise RuntimeError("boom")

        assert "user_id" not in structlog.contextvars.get_contextvars()


class TestSetupLogging:
    def test_configures_project_logger_only(self, restore_logging):
        root_handlers = list(logging.getLogger().handlers)

        setup_logging(level="debug", json_output=True)

        project_logger = logging.getLogger(LOGGER_NAMESPACE)
        assert len(project_logger.handlers) == 1
        assert project_logger.level == logging.DEBUG
        assert project_logger.propagate is False
        assert logging.getLogger().handlers == root_handlers

    def test_quiets_access_log(self, restore_logging):
        setup_logging(level="INFO")
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, restore_logging):
        setup_logging(level="chatty")
        assert logging.getLogger(LOGGER_NAMESPACE).level == logging.INFO
