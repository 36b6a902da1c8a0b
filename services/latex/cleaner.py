"""Strip unsupported commands and tidy bold/text blocks before rewriting."""

from __future__ import annotations

import re

from services.latex.scanner import read_group

# An even run of backslashes (line breaks) before the command, never \\ itself
_UNESCAPED = r"(?<!\\)((?:\\\\)*)"

# \limits only; \nolimits keeps its backslash on the "n"
_LIMITS = re.compile(_UNESCAPED + r"\\limits(?![A-Za-z])")

_BOLD_GROUP = re.compile(_UNESCAPED + r"\\bm\s*(?=\{)")
_BOLD_COMMAND = re.compile(_UNESCAPED + r"\\bm\s*(\\[A-Za-z]+)")
_BOLD_CHAR = re.compile(_UNESCAPED + r"\\bm\s+([A-Za-z0-9])")

_TEXT_BLOCK = re.compile(_UNESCAPED + r"\\(?:text|textrm|textit|textbf|mbox)\s*(?=\{)")


def remove_limits(text: str) -> str:
    return _LIMITS.sub(r"\1", text)


def normalize_bold(text: str) -> str:
    r"""Rewrite ``\bm{x}``, ``\bm x`` and ``\bm\alpha`` as ``\mathbf``."""
    text = _BOLD_GROUP.sub(r"\1\\mathbf", text)
    text = _BOLD_COMMAND.sub(r"\1\\mathbf{\2}", text)
    return _BOLD_CHAR.sub(r"\1\\mathbf{\2}", text)


def normalize_text_blocks(text: str) -> str:
    """Collapse whitespace runs inside text blocks and trim their ends."""
    out: list[str] = []
    pos = 0
    for match in _TEXT_BLOCK.finditer(text):
        if match.start() < pos:
            # Nested inside a block already emitted
            continue
        group = read_group(text, match.end())
        if group is None:
            continue
        body = " ".join(group.content.split())
        out.append(text[pos:match.end()])
        out.append("{" + body + "}")
        pos = group.end
    out.append(text[pos:])
    return "".join(out)


def clean_latex(text: str) -> str:
    """Apply the three independent cleanup substitutions."""
    text = remove_limits(text)
    text = normalize_bold(text)
    return normalize_text_blocks(text)
