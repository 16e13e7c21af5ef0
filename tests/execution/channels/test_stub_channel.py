"""Tests for the StubChannel and the BaseChannel accounting it inherits."""

from __future__ import annotations

from wpexport.core.errors import ChannelError, ChannelTimeout, ErrorCategory, SessionClosedError
from wpexport.execution import commands
from wpexport.execution.channels import BaseChannel, Channel, ChannelResult, StubChannel


class TestStubResponses:
    def test_string_response_succeeds(self):
        stub = StubChannel({"post-type list": "post\npage\n"})
        result = stub.run(commands.post_type_list())
        assert result.succeeded
        assert result.exit_code == 0
        assert result.text == "post\npage\n"

    def test_longest_fragment_wins(self):
        stub = StubChannel({
            "post-type list --field=name": "generic\n",
            "post-type list --field=name --public=true": "public\n",
        })
        assert stub.run(commands.post_type_list_public()).text == "public\n"
        assert stub.run(commands.post_type_list()).text == "generic\n"

    def test_unscripted_command_fails(self):
        result = StubChannel().run(commands.user_list())
        assert result.succeeded is False
        assert result.exit_code == 1

    def test_list_responses_are_sequential(self):
        stub = StubChannel({"user list": ["first", "second"]})
        outputs = [stub.run(commands.user_list()).text for _ in range(3)]
        assert outputs == ["first", "second", "second"]

    def test_channel_result_passthrough(self):
        failure = StubChannel.failure("Error: not a WordPress install", exit_code=1)
        stub = StubChannel({"user list": failure})
        result = stub.run(commands.user_list())
        assert result.succeeded is False
        assert "not a WordPress install" in result.stderr


class TestAccounting:
    def test_calls_and_history(self):
        stub = StubChannel({"post-type": "post\n"})
        stub.run(commands.post_type_list())
        stub.run(commands.post_type_list_public())
        assert stub.calls == 2
        assert stub.count_for("--public=true") == 1

    def test_session_drop_degrades(self):
        stub = StubChannel({"user list": StubChannel.failure("Connection closed", exit_code=255, session_closed=True)})
        assert stub.degraded is False
        stub.run(commands.user_list())
        assert stub.degraded is True

    def test_degrade_after(self):
        stub = StubChannel({"post-type": "post\n"}, degrade_after=1)
        assert stub.run(commands.post_type_list()).succeeded
        second = stub.run(commands.post_type_list())
        assert second.session_closed
        assert stub.degraded

    def test_duration_recorded(self):
        result = StubChannel({"post-type": "post\n"}).run(commands.post_type_list())
        assert result.duration_ms >= 0

    def test_protocol(self):
        assert isinstance(StubChannel(), Channel)
        assert StubChannel(supports_per_author_queries=False).capabilities.supports_per_author_queries is False


class _ExplodingChannel(BaseChannel):
    kind = "exploding"

    def _do_run(self, command, timeout):
        raise FileNotFoundError("wp: command not found")


def test_oserror_becomes_failed_result():
    channel = _ExplodingChannel()
    result = channel.run(commands.post_type_list())
    assert isinstance(result, ChannelResult)
    assert result.succeeded is False
    assert result.exit_code is None
    assert "command not found" in result.stderr
    assert channel.degraded is False


class TestResultErrors:
    def test_success_has_no_error(self):
        assert ChannelResult(output=b"ok", succeeded=True, exit_code=0).error() is None

    def test_timeout_maps_to_channel_timeout(self):
        error = StubChannel.failure(timed_out=True, exit_code=None, output="1,a\n").error("post.list.primary")
        assert isinstance(error, ChannelTimeout)
        assert error.retryable is True
        assert error.context.command == "post.list.primary"
        assert error.context.metadata["partial_bytes"] == 4

    def test_session_drop_maps_to_session_closed(self):
        error = StubChannel.failure(session_closed=True, exit_code=255).error()
        assert isinstance(error, SessionClosedError)
        assert error.message == "session closed"

    def test_nonzero_exit_maps_to_channel_error(self):
        error = StubChannel.failure(exit_code=2).error()
        assert type(error) is ChannelError
        assert error.category is ErrorCategory.TRANSPORT
        assert error.message == "command failed (exit=2)"
