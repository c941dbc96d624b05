from datetime import timedelta

import pytest

from appforge.chat import (
    BUILD_REPLY,
    CHAT_GENERATED_FILES,
    DEBUG_REPLY,
    ERROR_REPLY,
    GREETING,
    AssistantSimulator,
)
from appforge.generation import CHAT_STEP_LABELS, CancellationToken


@pytest.fixture
def assistant():
    return AssistantSimulator(think_delay=0, stream_delay=0, step_delay=0)


class TestComposeReply:
    def test_build_request(self, assistant):
        assert assistant.compose_reply("Please BUILD me a todo app") == BUILD_REPLY

    def test_debug_request(self, assistant):
        assert assistant.compose_reply("I get an error on login") == DEBUG_REPLY

    def test_default_echoes_request(self, assistant):
        reply = assistant.compose_reply("  add dark mode ")

        assert reply.startswith("I understand you want to add dark mode.")

    def test_triggers_generation(self):
        assert AssistantSimulator.triggers_generation("create a blog", "ok")
        assert AssistantSimulator.triggers_generation("hi", "```ts\n```")
        assert not AssistantSimulator.triggers_generation("hi", "hello")


class TestRespond:
    def test_history_starts_with_greeting(self, assistant):
        (greeting,) = assistant.history

        assert greeting.role == "assistant"
        assert greeting.content == GREETING

    @pytest.mark.asyncio
    async def test_message_timestamps_are_utc(self, assistant):
        turn = await assistant.respond("what is a monad?")

        for message in (*assistant.history, turn.reply):
            assert message.timestamp.utcoffset() == timedelta(0)

    @pytest.mark.asyncio
    async def test_build_request_streams_and_generates(self, assistant):
        chunks = []
        steps = []

        turn = await assistant.respond(
            "build a todo app",
            on_chunk=chunks.append,
            on_step=lambda index, total, label: steps.append((index, total, label)),
        )

        assert turn.reply.content == BUILD_REPLY
        assert not turn.reply.is_streaming
        assert chunks[0] == BUILD_REPLY[0]
        assert chunks[-1] == BUILD_REPLY
        assert [label for _, _, label in steps] == list(CHAT_STEP_LABELS)
        assert steps[0][:2] == (1, len(CHAT_STEP_LABELS))
        assert turn.files == list(CHAT_GENERATED_FILES)
        assert [m.role for m in assistant.history] == ["assistant", "user", "assistant"]

    @pytest.mark.asyncio
    async def test_plain_question_generates_nothing(self, assistant):
        turn = await assistant.respond("what is a monad?")

        assert turn.files == []
        assert not turn.cancelled

    @pytest.mark.asyncio
    async def test_cancelled_turn_keeps_partial_reply(self, assistant):
        token = CancellationToken()

        def cancel_after_three(content):
            if len(content) == 3:
                token.cancel()

        turn = await assistant.respond("build it", token=token, on_chunk=cancel_after_three)

        assert turn.cancelled
        assert turn.reply.content == BUILD_REPLY[:3]
        assert not turn.reply.is_streaming
        assert turn.files == []

    @pytest.mark.asyncio
    async def test_failure_replaces_reply_with_error_message(self, assistant):
        def broken(content):
            raise RuntimeError("renderer crashed")

        turn = await assistant.respond("hello", on_chunk=broken)

        assert turn.reply.content == ERROR_REPLY
        assert assistant.history[-1].content == ERROR_REPLY
        assert len(assistant.history) == 3
