"""Streaming chat completions with a single overall deadline.

The request is opened once with ``stream=True`` and every text fragment is
handed to a callback before the next one is read. The concatenated reply is
returned only when the stream ends cleanly; any failure along the way
(opening the stream, reading it, the callback, or the deadline) raises
`CompletionStreamError` and no partial text is returned.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, List

from openai import AsyncOpenAI

from models.chat_models import ChatCompletionRequest

ChunkCallback = Callable[[str], None]


class CompletionStreamError(RuntimeError):
    """Raised when a streaming completion cannot be completed."""


def chunk_text(chunk: Any) -> str | None:
    """Return the delta text of a stream chunk, or None when it has no choices."""
    choices = getattr(chunk, "choices", None)
    if not choices:
        return None
    delta = getattr(choices[0], "delta", None)
    return getattr(delta, "content", None) or ""


async def _consume(client: AsyncOpenAI, request: ChatCompletionRequest, callback: ChunkCallback) -> str:
    try:
        stream = await client.chat.completions.create(**request.to_api_params())
    except Exception as exc:
        logging.error("ChatCompletionStream error: %s", exc)
        raise CompletionStreamError(f"ChatCompletionStream error: {exc}") from exc

    fragments: List[str] = []
    try:
        async for chunk in stream:
            text = chunk_text(chunk)
            if text is None:
                continue
            try:
                callback(text)
            except Exception as exc:
                logging.error("callback error: %s", exc)
                raise CompletionStreamError(f"callback error: {exc}") from exc
            fragments.append(text)
    except CompletionStreamError:
        raise
    except Exception as exc:
        logging.error("stream error: %s", exc)
        raise CompletionStreamError(f"stream error: {exc}") from exc
    finally:
        close = getattr(stream, "close", None)
        if close is not None:
            await close()

    return "".join(fragments)


async def stream_completion(
    client: AsyncOpenAI,
    request: ChatCompletionRequest,
    callback: ChunkCallback,
    *,
    timeout: float = 60.0,
) -> str:
    """Stream `request` through `client`, forwarding fragments to `callback`.

    Args:
        client: Async OpenAI (or Azure OpenAI) client.
        request: Completion request; it is always sent with streaming enabled.
        callback: Receives each text fragment in arrival order.
        timeout: Deadline in seconds for the whole request, stream included.

    Returns:
        The concatenation of all fragments.

    Raises:
        CompletionStreamError: On any transport, callback or deadline failure.
    """
    start = time.time()
    try:
        response = await asyncio.wait_for(_consume(client, request, callback), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logging.error("stream error: request timed out after %.0fs", timeout)
        raise CompletionStreamError(f"stream error: request timed out after {timeout:.0f}s") from exc

    latency = time.time() - start
    logging.info(f"Chat completion stream latency: {latency:.3f}s")
    return response
