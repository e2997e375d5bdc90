import asyncio
from types import SimpleNamespace

import pytest

from conftest import make_chunk
from controllers.chat_controller import new_completion_request
from models.chat_models import ChatCompletionRequest, ChatParams
from services.openai.completion_stream import CompletionStreamError, stream_completion


def _request():
    request = ChatCompletionRequest(model="gpt-test", max_tokens=20, stream=False)
    request.add_message("user", "hi")
    return request


def test_fragments_forwarded_in_order(fake_client):
    client = fake_client(["Hel", "lo", "", " there"])
    seen = []

    result = asyncio.run(stream_completion(client, _request(), seen.append))

    assert seen == ["Hel", "lo", "", " there"]
    assert result == "Hello there"
    assert client.stream.closed


def test_request_is_sent_streaming(fake_client):
    client = fake_client(["ok"])
    asyncio.run(stream_completion(client, _request(), lambda chunk: None))

    call = client.completions.calls[0]
    assert call["stream"] is True
    assert call["model"] == "gpt-test"
    assert call["max_tokens"] == 20
    assert call["messages"] == [{"role": "user", "content": "hi"}]


def test_chunks_without_choices_are_skipped(fake_client):
    raw = [
        SimpleNamespace(choices=[]),
        make_chunk("a"),
        make_chunk(None),
        make_chunk("b"),
    ]
    client = fake_client(raw=raw)
    seen = []

    result = asyncio.run(stream_completion(client, _request(), seen.append))

    assert seen == ["a", "", "b"]
    assert result == "ab"


def test_open_failure_raises(fake_client):
    client = fake_client(error=ConnectionError("refused"))
    with pytest.raises(CompletionStreamError, match="ChatCompletionStream error"):
        asyncio.run(stream_completion(client, _request(), lambda chunk: None))


def test_mid_stream_failure_raises_and_closes(fake_client):
    client = fake_client(raw=[make_chunk("partial"), ConnectionResetError("dropped")])
    with pytest.raises(CompletionStreamError, match="stream error"):
        asyncio.run(stream_completion(client, _request(), lambda chunk: None))
    assert client.stream.closed


def test_callback_failure_raises(fake_client):
    client = fake_client(["x"])

    def _broken(chunk):
        raise OSError("stdout closed")

    with pytest.raises(CompletionStreamError, match="callback error"):
        asyncio.run(stream_completion(client, _request(), _broken))


def test_deadline_aborts_stream(fake_client):
    class SlowStream:
        closed = False

        def __aiter__(self):
            return self

        async def __anext__(self):
            await asyncio.sleep(5)
            return make_chunk("late")

        async def close(self):
            SlowStream.closed = True

    client = fake_client()
    client.completions.stream = SlowStream()

    with pytest.raises(CompletionStreamError, match="timed out"):
        asyncio.run(stream_completion(client, _request(), lambda chunk: None, timeout=0.05))
    assert SlowStream.closed


def test_zero_limits_are_not_sent(fake_client):
    request = new_completion_request(ChatParams(msg="hi", max_tokens=0), "gpt-test")
    request.add_message("user", "hi")
    client = fake_client(["ok"])

    asyncio.run(stream_completion(client, request, lambda chunk: None))

    call = client.completions.calls[0]
    assert "max_tokens" not in call
    assert "temperature" not in call
    assert call["stream"] is True


def test_nonzero_limits_are_sent(fake_client):
    request = new_completion_request(ChatParams(msg="hi", max_tokens=300, temperature=0.8), "gpt-test")
    request.add_message("user", "hi")
    client = fake_client(["ok"])

    asyncio.run(stream_completion(client, request, lambda chunk: None))

    call = client.completions.calls[0]
    assert call["max_tokens"] == 300
    assert call["temperature"] == 0.8
