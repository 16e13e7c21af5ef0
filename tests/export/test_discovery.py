"""Tests for the category discovery chain."""

from __future__ import annotations

import pytest

from wpexport.core.errors import ChannelTimeout, DiscoveryError
from wpexport.execution import commands
from wpexport.execution.channels import StubChannel
from wpexport.export.discovery import (
    BASELINE_CATEGORIES,
    CategoryDiscovery,
    CommandStrategy,
    DiscoveryAttempt,
    ManualStrategy,
    normalize_operator_tokens,
    validate_categories,
)

STRUCTURED = "post-type list --field=name --public=true"
UNSTRUCTURED = "post-type list --field=name"
EVAL = "wp eval"


class TestValidateCategories:
    def test_drops_header_attachment_and_blanks(self):
        raw = ["name", "post", "", "page", "attachment", "case_study"]
        assert validate_categories(raw) == ("post", "page", "case_study")

    def test_trims_cr_and_quotes(self):
        assert validate_categories(["post\r", ' "page" ', "  "]) == ("post", "page")

    def test_dedupes_keeping_first(self):
        assert validate_categories(["page", "post", "page"]) == ("page", "post")

    def test_drops_transport_chatter(self):
        raw = ["post", "Connection to acme.wpengine closed.", "page"]
        assert validate_categories(raw) == ("post", "page")


class TestOperatorTokens:
    def test_commas_and_whitespace(self):
        assert normalize_operator_tokens([" case_study, ", "event", "", "event"]) == ("case_study", "event")


class TestStrategies:
    def test_command_strategy_rejects_marker_output(self):
        stub = StubChannel({UNSTRUCTURED: "post\nError: Unknown parameter\n"})
        attempt = CommandStrategy("unstructured", commands.post_type_list).attempt(stub)
        assert attempt.succeeded is False
        assert "Error:" in attempt.error.message

    def test_manual_strategy_never_touches_channel(self):
        stub = StubChannel()
        attempt = ManualStrategy(["case_study"]).attempt(stub)
        assert attempt.categories == ("post", "page", "case_study")
        assert stub.calls == 0

    def test_attempt_fail_carries_strategy(self):
        attempt = DiscoveryAttempt.fail("eval", "timed out")
        assert isinstance(attempt.error, DiscoveryError)
        assert attempt.error.context.strategy == "eval"


class TestCategoryDiscovery:
    def test_structured_first(self):
        stub = StubChannel({STRUCTURED: "post\npage\ncase_study\n"})
        result = CategoryDiscovery().discover(stub)
        assert result.strategy == "structured"
        assert result.categories == ("post", "page", "case_study")
        assert stub.calls == 1

    def test_falls_back_in_order(self):
        stub = StubChannel({
            STRUCTURED: StubChannel.failure("Connection closed by remote host", exit_code=255, session_closed=True),
            UNSTRUCTURED: "name\npost\npage\nattachment\ncase_study\n",
        })
        result = CategoryDiscovery().discover(stub)
        assert result.categories == ("post", "page", "case_study")
        assert result.strategy == "unstructured"
        assert result.failed_strategies == ["structured"]

    def test_eval_strategy(self):
        stub = StubChannel({
            STRUCTURED: StubChannel.failure(),
            UNSTRUCTURED: "Warning: something\nError: broken\n",
            EVAL: "post\npage\nevent\n",
        })
        result = CategoryDiscovery().discover(stub)
        assert result.strategy == "eval"
        assert result.categories == ("post", "page", "event")

    def test_eval_output_drops_attachment(self):
        stub = StubChannel({
            STRUCTURED: StubChannel.failure(),
            UNSTRUCTURED: StubChannel.failure(),
            EVAL: "post\npage\nattachment\ncase_study\n",
        })
        result = CategoryDiscovery().discover(stub)
        assert result.strategy == "eval"
        assert result.categories == ("post", "page", "case_study")
        assert result.failed_strategies == ["structured", "unstructured"]

    def test_empty_queries_without_tokens_give_post_and_page(self):
        stub = StubChannel({STRUCTURED: "", UNSTRUCTURED: "", EVAL: ""})
        result = CategoryDiscovery().discover(stub)
        assert result.categories == ("post", "page")
        assert result.strategy == "manual"
        assert result.failed_strategies == ["structured", "unstructured", "eval"]
        assert stub.calls == 3

    def test_transport_failure_is_kept_as_cause(self):
        stub = StubChannel({STRUCTURED: StubChannel.failure(timed_out=True, exit_code=None), UNSTRUCTURED: "post\n"})
        result = CategoryDiscovery().discover(stub)
        error = result.attempts[0].error
        assert error.message == "timed out"
        assert isinstance(error.cause, ChannelTimeout)
        assert error.cause.context.command == "post-type.list.public"

    def test_manual_tokens_after_query_failures(self):
        result = CategoryDiscovery(extra_categories=["case_study", "post"]).discover(StubChannel())
        assert result.strategy == "manual"
        assert result.categories == ("post", "page", "case_study")
        assert result.used_baseline is False

    def test_exhausted_chain_returns_baseline(self):
        discovery = CategoryDiscovery(extra_categories=[])
        discovery.manual = ManualStrategy(baseline=())
        result = discovery.discover(StubChannel())
        assert result.categories == BASELINE_CATEGORIES
        assert result.strategy == "baseline"
        assert result.used_baseline is True
        assert len(result.attempts) == 4

    def test_skip_discovery(self):
        stub = StubChannel({STRUCTURED: "post\n"})
        result = CategoryDiscovery(extra_categories=["event"], skip_discovery=True).discover(stub)
        assert result.strategy == "manual"
        assert result.categories == ("post", "page", "event")
        assert stub.calls == 0

    @pytest.mark.parametrize("output", ["", "name\n", "attachment\n", "\r\n\r\n"])
    def test_unusable_output_is_a_failure(self, output):
        stub = StubChannel({STRUCTURED: output, UNSTRUCTURED: "post\n"})
        result = CategoryDiscovery().discover(stub)
        assert result.strategy == "unstructured"
