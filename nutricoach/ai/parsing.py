# -*- coding: utf-8 -*-
"""Best-effort extraction of a JSON object from chat-model output."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    return _FENCE_CLOSE.sub("", cleaned)


def _drop_trailing_commas(text: str) -> str:
    """Remove commas directly before a closing bracket, outside string literals."""
    out: List[str] = []
    in_str = False
    escaped = False
    for i, ch in enumerate(text):
        if in_str:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == ",":
            rest = text[i + 1 :].lstrip(" \t\r\n")
            if rest[:1] in ("}", "]"):
                continue
        out.append(ch)
    return "".join(out)


def iter_object_candidates(text: str) -> List[str]:
    """Return every balanced top-level ``{...}`` span, respecting string literals.

    Models wrap JSON in prose or markdown fences, and occasionally emit more
    than one object; callers try the candidates in order.
    """
    cleaned = _strip_fences(text)
    candidates: List[str] = []
    in_str = False
    escaped = False
    depth = 0
    start = -1
    for i, ch in enumerate(cleaned):
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start >= 0:
                candidates.append(cleaned[start : i + 1])
                start = -1
    return candidates


def _sanitize(text: str) -> str:
    cleaned = text.replace("“", '"').replace("”", '"')
    cleaned = cleaned.replace("‘", "'").replace("’", "'")
    cleaned = _drop_trailing_commas(cleaned)
    cleaned = re.sub(r"\bNaN\b", "null", cleaned)
    return re.sub(r"-?\bInfinity\b", "null", cleaned)


def parse_model_json(content: str) -> Dict[str, Any]:
    """Parse the first JSON object found in ``content``.

    Raises ValueError when nothing parses to a dict.
    """
    last_error: Exception | None = None
    stripped = _strip_fences(content or "")
    candidates = [stripped] if stripped.startswith("{") else []
    candidates.extend(iter_object_candidates(content or ""))
    for candidate in candidates:
        for attempt in (candidate, _sanitize(candidate)):
            try:
                parsed = json.loads(attempt)
            except ValueError as exc:
                last_error = exc
                continue
            if isinstance(parsed, dict):
                return parsed
    if last_error is None:
        raise ValueError("Model output does not contain a JSON object")
    raise ValueError(f"Failed to parse model JSON: {last_error}") from last_error


def parse_or_fallback(content: str) -> Tuple[Dict[str, Any], bool]:
    """Parse model output, falling back to ``{"ai_analysis": <raw text>}``.

    The boolean is True when structured JSON was recovered.
    """
    try:
        return parse_model_json(content), True
    except ValueError as exc:
        logger.warning("AI output is not JSON, keeping raw text: %s", exc)
        return {"ai_analysis": content or ""}, False
