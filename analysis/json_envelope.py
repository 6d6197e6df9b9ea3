"""
JSON envelope extractor — isolates the JSON payload inside a model response.

Handles the three shapes the news / indicator prompts actually get back:
  1. a clean payload                       → returned as-is (trimmed)
  2. a ```json fenced block                → inner content
  3. prose followed by the payload         → slice from the first '{' or '['

Never parses. Callers distinguish "no JSON-like content" (no brace/bracket
in the result) from "malformed JSON" (json decode failure).
"""
from __future__ import annotations

import re

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL | re.IGNORECASE)


def extract_json_envelope(text: str) -> str:
    payload = (text or "").strip()

    fence = _FENCE_RE.match(payload)
    if fence and fence.group(1):
        return fence.group(1).strip()

    starts = [i for i in (payload.find("{"), payload.find("[")) if i != -1]
    if starts:
        return payload[min(starts):]

    return payload


def looks_like_json(payload: str) -> bool:
    """True when the isolated payload starts like a JSON object or array."""
    return payload[:1] in ("{", "[")
