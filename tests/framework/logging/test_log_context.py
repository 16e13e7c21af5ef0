"""Tests for run-context propagation into log entries."""

from __future__ import annotations

import logging

import pytest
import structlog

from wpexport.framework.logging import (
    LogContext,
    clear_context,
    configure_logging,
    get_context,
    push_context,
    set_context,
)
from wpexport.framework.logging import config as logging_config
from wpexport.framework.logging.config import is_configured
from wpexport.framework.logging.context import add_context_processor


class TestLogContext:
    def test_to_dict_drops_none(self):
        assert LogContext(run_id="abc", stage="fetch").to_dict() == {"run_id": "abc", "stage": "fetch"}

    def test_merge_ignores_unknown_keys(self):
        merged = LogContext(run_id="abc").merge(category="page", bogus="x")
        assert merged.category == "page"
        assert not hasattr(merged, "bogus")

    def test_merge_keeps_existing_on_none(self):
        assert LogContext(run_id="abc").merge(run_id=None).run_id == "abc"


class TestContextVar:
    def test_default_is_empty(self):
        assert get_context().to_dict() == {}

    def test_set_replaces(self):
        set_context(run_id="r1", channel="local")
        set_context(run_id="r2")
        assert get_context().channel is None
        assert get_context().run_id == "r2"

    def test_push_adds_to_existing(self):
        set_context(run_id="r1")
        push_context(category="post")
        assert get_context().to_dict() == {"run_id": "r1", "category": "post"}

    def test_push_and_restore(self):
        set_context(run_id="r1", stage="fetch")
        token = push_context(category="page", stage="fetch.primary")
        assert get_context().stage == "fetch.primary"
        token.restore()
        assert get_context().stage == "fetch"
        assert get_context().category is None

    def test_clear(self):
        set_context(run_id="r1")
        clear_context()
        assert get_context().run_id is None


class TestContextProcessor:
    def test_adds_context(self):
        set_context(run_id="r1", channel="remote")
        event = add_context_processor(None, "info", {"event": "x"})
        assert event["run_id"] == "r1"
        assert event["channel"] == "remote"

    def test_event_keys_win(self):
        set_context(run_id="r1", stage="fetch")
        event = add_context_processor(None, "info", {"event": "x", "stage": "aggregate.authors"})
        assert event["stage"] == "aggregate.authors"


@pytest.fixture
def reset_logging(monkeypatch):
    monkeypatch.setattr(logging_config, "_configured", False)
    yield
    structlog.reset_defaults()
    logging.getLogger("wpexport").setLevel(logging.NOTSET)


@pytest.mark.usefixtures("reset_logging")
class TestConfigureLogging:
    def test_json_output_to_stderr(self, capsys):
        configure_logging(level="INFO", format="json", force=True)
        set_context(run_id="r1")
        structlog.get_logger("wpexport.test").info("hello.world", rows=3)
        captured = capsys.readouterr()
        assert captured.out == ""
        assert '"event": "hello.world"' in captured.err
        assert '"run_id": "r1"' in captured.err
        assert is_configured()

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("WPEXPORT_LOG_LEVEL", "debug")
        configure_logging(force=True)
        assert logging.getLogger("wpexport").level == logging.DEBUG
