"""Command-line parsing for the chat client."""

import argparse
import sys
from typing import List, Optional, TextIO

from models.chat_models import DEFAULT_MAX_TOKENS, ChatParams

STDIN_MARKER = "-"


def build_parser(prog: str = "chatgpt-cli") -> argparse.ArgumentParser:
    """Return the argument parser.

    Flags are spelled in full with one or two dashes; prefixes are not accepted.
    """
    parser = argparse.ArgumentParser(
        prog=prog,
        allow_abbrev=False,
        usage="%(prog)s [options] message",
        description=(
            "Send a prompt to a chat completion endpoint and stream the reply. "
            "Use '-' as the message to read the prompt from standard input."
        ),
    )
    parser.add_argument(
        "-maxTokens",
        "--maxTokens",
        dest="max_tokens",
        type=int,
        default=DEFAULT_MAX_TOKENS,
        help="Maximum number of tokens to generate",
    )
    parser.add_argument(
        "-systemMsg",
        "--systemMsg",
        dest="system_msg",
        default="",
        help="System message to include with the prompt",
    )
    parser.add_argument(
        "-includeFile",
        "--includeFile",
        dest="include_file",
        default="",
        help="File to include with the prompt",
    )
    parser.add_argument(
        "-temperature",
        "--temperature",
        dest="temperature",
        type=float,
        default=0.0,
        help="Sampling temperature",
    )
    parser.add_argument(
        "-c",
        "--c",
        dest="continue_session",
        action="store_true",
        help="Continue last session (ignores other flags)",
    )
    # Flag parsing stops at the first word of the message.
    parser.add_argument("message", nargs=argparse.REMAINDER, help="Prompt text")
    return parser


def read_stdin_prompt(stdin: TextIO) -> str:
    """Read the prompt line by line, keeping one newline per line."""
    return "".join(line.rstrip("\r\n") + "\n" for line in stdin)


def parse_args(
    argv: Optional[List[str]] = None,
    *,
    stdin: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> ChatParams:
    """Resolve flags and prompt text into ChatParams.

    Exits with status 1 after printing usage to stderr when no message is given,
    including an empty prompt read from standard input.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    msg = " ".join(args.message).strip()
    if msg == STDIN_MARKER:
        msg = read_stdin_prompt(stdin or sys.stdin)
    if not msg.strip():
        parser.print_help(stderr or sys.stderr)
        raise SystemExit(1)

    return ChatParams(
        msg=msg,
        max_tokens=args.max_tokens,
        system_msg=args.system_msg,
        include_file=args.include_file,
        temperature=args.temperature,
        continue_session=args.continue_session,
    )
