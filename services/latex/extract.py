"""Pull the LaTeX body out of a recognizer's chat-style response."""

from __future__ import annotations

import re
from typing import Optional

_FENCE_OPEN = re.compile(r"```latex\s*\n?")
_FENCE_CLOSE = re.compile(r"```\s*$")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_DISPLAY_DOLLARS = re.compile(r"\$\$([\s\S]*?)\$\$")
_DISPLAY_BRACKETS = re.compile(r"\\\[([\s\S]*?)\\\]")


def extract_latex(content: Optional[str]) -> str:
    """
    Extract the formula from model response text.

    Priority: ``$$...$$`` > ``\\[...\\]`` > the cleaned content itself.
    Markdown fences and inline code ticks are removed first.
    """
    if not content:
        return ""

    cleaned = _FENCE_OPEN.sub("", content)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    cleaned = _INLINE_CODE.sub(r"\1", cleaned)

    match = _DISPLAY_DOLLARS.search(cleaned)
    if match:
        return match.group(1).strip()

    match = _DISPLAY_BRACKETS.search(cleaned)
    if match:
        return match.group(1).strip()

    return cleaned.strip()
