"""Locate and decode JSON objects embedded in free-form oracle text."""

from __future__ import annotations

import json
from typing import Any

from intakebot.observability.logging import get_logger

logger = get_logger(__name__)


def _skip_string(text: str, start: int) -> int:
    """Return the index of the quote closing the string literal opened at ``start``."""
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == '"':
            return i
        i += 1
    return len(text)


def extract_balanced_json(text: str) -> str | None:
    """Return the first balanced top-level ``{...}`` block in ``text``.

    Single linear scan: braces inside string literals are ignored and escapes
    are honoured. Returns None when there is no opening brace or the object
    never closes.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    i = start
    while i < len(text):
        ch = text[i]
        if ch == '"':
            i = _skip_string(text, i) + 1
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
        i += 1
    return None


def parse_json_object(text: str | None) -> dict[str, Any] | None:
    """Decode the first embedded JSON object, or None if there isn't a valid one."""
    if not text:
        return None
    candidate = extract_balanced_json(text)
    if candidate is None:
        return None
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.debug("embedded_json_invalid", error=str(exc))
        return None
    return parsed if isinstance(parsed, dict) else None
