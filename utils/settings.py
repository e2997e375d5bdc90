import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_AZURE_API_VERSION = "2023-05-15"
SESSION_FILENAME = "chatgpt-cli-last-session.json"
REQUEST_TIMEOUT_SECONDS = 60.0


def default_session_path() -> Path:
    """Return the fixed session file location in the system temp directory."""
    return Path(tempfile.gettempdir()) / SESSION_FILENAME


@dataclass
class Settings:
    """
    Runtime configuration read from the environment.

    - OPENAI_API_KEY is required. A RuntimeError is raised if it is missing.
    - OPENAI_AZURE_ENDPOINT switches the client to Azure OpenAI; the
      deployment comes from OPENAI_AZURE_MODEL, or from the model name when
      that is empty.
    - OPENAI_MODEL overrides the model used for new sessions.
    - CHATGPT_CLI_SESSION_FILE overrides the session file path.
    """

    api_key: str
    model: str = DEFAULT_MODEL
    azure_endpoint: Optional[str] = None
    azure_deployment: Optional[str] = None
    azure_api_version: str = DEFAULT_AZURE_API_VERSION
    session_path: Path = field(default_factory=default_session_path)
    log_level: str = "WARNING"
    timeout: float = REQUEST_TIMEOUT_SECONDS

    @property
    def use_azure(self) -> bool:
        return bool(self.azure_endpoint)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        api_key = (env.get("OPENAI_API_KEY") or "").strip()
        if not api_key:
            raise RuntimeError("OPENAI_API_KEY environment variable is not set")

        session_file = (env.get("CHATGPT_CLI_SESSION_FILE") or "").strip()

        return cls(
            api_key=api_key,
            model=(env.get("OPENAI_MODEL") or "").strip() or DEFAULT_MODEL,
            azure_endpoint=(env.get("OPENAI_AZURE_ENDPOINT") or "").strip() or None,
            azure_deployment=(env.get("OPENAI_AZURE_MODEL") or "").strip() or None,
            azure_api_version=(env.get("OPENAI_API_VERSION") or "").strip() or DEFAULT_AZURE_API_VERSION,
            session_path=Path(session_file).expanduser() if session_file else default_session_path(),
            log_level=(env.get("CHATGPT_CLI_LOG_LEVEL") or "").strip().upper() or "WARNING",
        )
