"""Chat domain models shared by the CLI, the stream service and the session file."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, model_serializer

DEFAULT_MAX_TOKENS = 500
OMITTED_WHEN_ZERO = ("max_tokens", "temperature")

Role = Literal["system", "user", "assistant"]


class ChatMessage(BaseModel):
	"""A single conversation turn."""

	model_config = ConfigDict(frozen=True)

	role: Role
	content: str


class ChatCompletionRequest(BaseModel):
	"""Completion payload sent to the endpoint and persisted as the session.

	Unknown keys are ignored on load so session files written by other
	revisions of the tool stay readable. A zero `max_tokens` or `temperature`
	means "unset": the key is left out of both the API call and the session
	file so the endpoint applies its own default.
	"""

	model: str
	max_tokens: int = 0
	temperature: float = 0.0
	stream: bool = True
	messages: List[ChatMessage] = Field(default_factory=list)

	@model_serializer(mode="wrap")
	def _omit_unset_limits(self, handler):
		data = handler(self)
		for key in OMITTED_WHEN_ZERO:
			if not data.get(key):
				data.pop(key, None)
		return data

	def add_message(self, role: Role, content: str) -> "ChatCompletionRequest":
		"""Append a message and return the request for chaining."""
		self.messages.append(ChatMessage(role=role, content=content))
		return self

	def to_api_params(self) -> dict:
		"""Return keyword arguments for `chat.completions.create`."""
		params = self.model_dump()
		params["stream"] = True
		return params


@dataclass
class ChatParams:
	"""Parameters resolved from the command line."""

	msg: str
	max_tokens: int = DEFAULT_MAX_TOKENS
	system_msg: str = ""
	include_file: str = ""
	temperature: float = 0.0
	continue_session: bool = False
