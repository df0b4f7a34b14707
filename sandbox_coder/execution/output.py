"""Cleanup of command output before it is handed to the model."""

from __future__ import annotations

import re

DEFAULT_MAX_CHARS = 100_000

# Share of the character budget kept from the start of the output
HEAD_RATIO = 0.2

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")


def truncate_output(output: str, max_chars: int | None = None) -> tuple[str, bool]:
    """Cut the middle out of overlong output.

    The first 20% of the budget and the last 80% are kept around a marker
    that says how many characters were dropped.

    Returns:
        ``(text, truncated)``
    """
    limit = DEFAULT_MAX_CHARS if max_chars is None else max_chars
    excess = len(output) - limit
    if excess <= 0:
        return output, False

    keep_head = int(limit * HEAD_RATIO)
    keep_tail = limit - keep_head
    tail = output[len(output) - keep_tail :] if keep_tail else ""
    marker = f"\n\n--- truncated {excess} characters ---\n\n"
    return output[:keep_head] + marker + tail, True


def strip_ansi(text: str) -> str:
    """Remove terminal color and cursor escape sequences."""
    return _ANSI_ESCAPE.sub("", text)
