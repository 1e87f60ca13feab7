"""Shared utilities for cleaning LLM responses."""

from __future__ import annotations

import re

_LABEL_PATTERN = re.compile(r"^(?:jql|query)\s*:\s*", re.IGNORECASE)


def clean_llm_query(raw: str) -> str:
    """Reduce an LLM response that should be a bare query string to that string.

    Handles, in order:
    1. Markdown code fences (```jql ... ```)
    2. A leading "JQL:" / "Query:" label
    3. Backticks or quotes wrapping the whole string (left alone when the
       same quote also appears inside, e.g. ``"a" AND b = "c"``)
    """
    if not raw:
        return ""

    text = raw.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = [l for l in lines if not l.strip().startswith("```")]
        text = "\n".join(lines).strip()

    text = _LABEL_PATTERN.sub("", text).strip()

    for quote in ("`", '"', "'"):
        if len(text) >= 2 and text.startswith(quote) and text.endswith(quote):
            inner = text[1:-1]
            if quote not in inner:
                text = inner.strip()

    return text
