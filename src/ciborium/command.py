# command.py
from __future__ import annotations

from typing import Iterable, Optional


def join_command(tokens: Iterable[Optional[str]]) -> str:
    """
    Join command tokens into one command line for `sh -c`.

    Tokens are joined with a single space and None tokens are skipped.
    Nothing is quoted: tokens such as `<` or a heredoc body must reach the
    shell unchanged.
    """
    return " ".join(t for t in tokens if t is not None)


def quote(value: str) -> str:
    """Wrap a value in double quotes, the way image tags are passed to docker."""
    return f'"{value}"'
