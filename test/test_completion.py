import asyncio

import pytest
from langchain_core.language_models.fake_chat_models import GenericFakeChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from smarttrip.agents.completion import CompletionClient, classify_provider_error, content_to_text
from smarttrip.core.exceptions import (
    CompletionError,
    CompletionTimeoutError,
    QuotaExhaustedError,
    RateLimitError,
)


class ResourceExhausted(Exception):
    pass


class ProviderHTTPError(Exception):
    def __init__(self, message, status_code):
        super().__init__(message)
        self.status_code = status_code


class RecordingModel:
    def __init__(self, reply="ok", error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.messages = None

    async def ainvoke(self, messages):
        self.messages = messages
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)


def test_complete_returns_model_text():
    llm = GenericFakeChatModel(messages=iter([AIMessage(content="  Paris in spring  ")]))
    client = CompletionClient(llm)

    assert asyncio.run(client.complete("system", [{"role": "user", "content": "hi"}])) == "Paris in spring"


def test_list_content_parts_are_joined():
    parts = [{"type": "text", "text": "Day 1. "}, {"type": "text", "text": "Day 2."}]
    client = CompletionClient(RecordingModel(reply=parts))

    assert asyncio.run(client.complete("system", [{"role": "user", "content": "plan"}])) == "Day 1. Day 2."


def test_turns_map_onto_message_roles():
    llm = RecordingModel()
    client = CompletionClient(llm)

    asyncio.run(client.complete("Be concise.", [
        {"role": "user", "content": "Where to?"},
        {"role": "assistant", "content": "Lisbon."},
        {"role": "user", "content": "Why?"},
    ]))

    assert [type(m) for m in llm.messages] == [SystemMessage, HumanMessage, AIMessage, HumanMessage]
    assert llm.messages[0].content == "Be concise."
    assert llm.messages[2].content == "Lisbon."


def test_slow_completion_times_out():
    client = CompletionClient(RecordingModel(delay=1.0), timeout=0.01)

    with pytest.raises(CompletionTimeoutError):
        asyncio.run(client.complete("system", [{"role": "user", "content": "hi"}]))


def test_provider_error_is_classified_with_message():
    client = CompletionClient(RecordingModel(error=ResourceExhausted("429 Too many requests")))

    with pytest.raises(RateLimitError) as exc_info:
        asyncio.run(client.complete("system", [{"role": "user", "content": "hi"}]))

    assert str(exc_info.value) == "429 Too many requests"
    assert exc_info.value.status_code == 429


@pytest.mark.parametrize("exc, expected", [
    (ProviderHTTPError("Payment required", 402), QuotaExhaustedError),
    (ProviderHTTPError("Too many requests", 429), RateLimitError),
    (ProviderHTTPError("You exceeded your current quota", 429), QuotaExhaustedError),
    (ResourceExhausted("Resource has been exhausted"), RateLimitError),
    (RuntimeError("429 rate limited upstream"), RateLimitError),
    (RuntimeError("Internal error"), CompletionError),
    (ProviderHTTPError("Bad gateway", 502), CompletionError),
])
def test_classify_provider_error(exc, expected):
    error = classify_provider_error(exc)

    assert type(error) is expected
    assert str(error) == str(exc)


def test_content_to_text():
    assert content_to_text("plain") == "plain"
    assert content_to_text(["a", {"text": "b"}, {"type": "image"}]) == "ab"
    assert content_to_text(42) == "42"
