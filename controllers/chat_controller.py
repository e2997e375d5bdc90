"""Chat flow helpers: build the request, stream the reply, persist the session."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from openai import AsyncOpenAI

from models.chat_models import ChatCompletionRequest, ChatParams
from services.openai.completion_stream import stream_completion
from services.session_store import SessionFileStore


def new_completion_request(params: ChatParams, model: str) -> ChatCompletionRequest:
	"""Build a fresh streaming request, led by the system message when one is set."""
	request = ChatCompletionRequest(
		model=model,
		max_tokens=params.max_tokens,
		temperature=params.temperature,
		stream=True,
	)
	if params.system_msg:
		request.add_message("system", params.system_msg)
	return request


def get_completion_request(params: ChatParams, model: str, store: SessionFileStore) -> ChatCompletionRequest:
	"""Return the previous session when continuing, otherwise a new request.

	A session that cannot be loaded is not fatal: a warning is logged and a new
	request is built from the current flags.
	"""
	if params.continue_session:
		request = store.load()
		if request is not None:
			return request
		logging.warning("failed to load previous session, starting a new one")
	return new_completion_request(params, model)


def append_messages(request: ChatCompletionRequest, params: ChatParams) -> ChatCompletionRequest:
	"""Append the user prompt, then the included file as a second user message."""
	request.add_message("user", params.msg)
	if params.include_file:
		try:
			with open(params.include_file, "r", encoding="utf-8") as fh:
				contents = fh.read()
		except OSError as exc:
			raise RuntimeError(f"Failed to read include file {params.include_file}") from exc
		request.add_message("user", contents)
	return request


async def run_chat(
	params: ChatParams,
	client: AsyncOpenAI,
	model: str,
	store: SessionFileStore,
	*,
	out: TextIO | None = None,
	timeout: float = 60.0,
) -> ChatCompletionRequest:
	"""Send one prompt, echo the streamed reply to `out` and save the session.

	Returns:
		The request including the final assistant message, as persisted.

	Raises:
		CompletionStreamError: When streaming fails; nothing is persisted.
		RuntimeError: When the include file or the session file cannot be accessed.
	"""
	out = out or sys.stdout

	request = get_completion_request(params, model, store)
	request = append_messages(request, params)

	def _print_chunk(chunk: str) -> None:
		out.write(chunk)
		out.flush()

	try:
		full_response = await stream_completion(client, request, _print_chunk, timeout=timeout)
	finally:
		out.write("\n")
		out.flush()

	request.add_message("assistant", full_response)
	store.save(request)
	return request
