"""Single-slot JSON store for the last chat session."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from models.chat_models import ChatCompletionRequest
from utils.settings import default_session_path


class SessionFileStore:
	"""Read and overwrite the one session file that `-c` continues from.

	There is no locking; concurrent invocations sharing the path race and the
	last writer wins.
	"""

	def __init__(self, path: Optional[Path | str] = None) -> None:
		self.path = Path(path) if path is not None else default_session_path()

	def load(self) -> Optional[ChatCompletionRequest]:
		"""Return the persisted request, or None when it is missing or unreadable."""
		try:
			raw = self.path.read_text(encoding="utf-8")
		except (OSError, UnicodeDecodeError) as exc:
			logging.debug("Session file %s not readable: %s", self.path, exc)
			return None

		try:
			return ChatCompletionRequest.model_validate_json(raw)
		except ValidationError as exc:
			logging.debug("Session file %s is invalid: %s", self.path, exc)
			return None

	def save(self, request: ChatCompletionRequest) -> Path:
		"""Overwrite the session file with `request`."""
		try:
			payload = request.model_dump_json()
			self.path.write_text(payload, encoding="utf-8")
		except Exception as exc:
			raise RuntimeError(f"Failed to save session to {self.path}") from exc
		return self.path
