import asyncio
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from controllers.chat_controller import run_chat
from services.openai.client_factory import create_client
from services.session_store import SessionFileStore
from utils.cli_args import parse_args
from utils.settings import Settings


def configure_logging(level: str) -> None:
    """Send log records to stderr so stdout only carries the model reply."""
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


async def _run(argv: Optional[List[str]]) -> None:
    params = parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    client = create_client(settings)
    store = SessionFileStore(settings.session_path)
    try:
        await run_chat(params, client, settings.model, store, timeout=settings.timeout)
    finally:
        await client.close()


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the `chatgpt-cli` command:
      - load environment variables from a .env file if present
      - parse flags and the prompt
      - stream one completion to stdout and persist the session
    Errors other than usage errors propagate and end the process.
    """
    load_dotenv()
    asyncio.run(_run(argv))


if __name__ == "__main__":
    main()
