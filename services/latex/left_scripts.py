"""
Rewrite empty-base script notation (``{}_{a}^{b}X``) into ``\\prescript``.

Recognizers emit left scripts as ordinary scripts on an empty group, which
renders with the scripts detached from the symbol they belong to. Rewriting
them as ``\\prescript{sup}{sub}{base}`` keeps sub and sup stacked against the
base, with ``\\mathstrut`` standing in for a missing side.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from core.logger import logger
from services.latex.scanner import (
    ESCAPE,
    SCRIPT_MARKERS,
    read_command_name,
    read_base_token,
    read_script,
    skip_whitespace,
)

SPACING_NOOP = r"\hspace{0pt}"
STRUT = r"\mathstrut"

# Delimiter sizing commands (and the spacing no-op this module emits) are
# never the real base of a prescript
_NON_SUBSTANTIVE_BASE = re.compile(r"\\(?:left|right|[bB]igg?[lrm]?|hspace)")

# Characters after which a bare _ or ^ cannot be a trailing script
_BARE_LEAD_IN_CONTEXT = frozenset("([{=+-")

_COMMAND_PREFIX = re.compile(r"\\[A-Za-z]+")


@dataclass(frozen=True)
class LeftScripts:
    """Scripts written before their base; a missing side is empty."""

    sub: str
    sup: str
    next_index: int


def _scripts_start(text: str, pos: int) -> Optional[int]:
    """Return where the scripts of a left-script lead-in begin, if any."""
    if text.startswith("{}", pos):
        # {} as the argument of a trailing script, as in a^{}_1
        if pos > 0 and text[:pos].rstrip()[-1:] in SCRIPT_MARKERS:
            return None
        i = skip_whitespace(text, pos + 2)
        if i < len(text) and text[i] in SCRIPT_MARKERS:
            return i
        return None

    if pos < len(text) and text[pos] in SCRIPT_MARKERS:
        if pos == 0:
            return pos
        prev = text[pos - 1]
        if prev.isspace() or prev in _BARE_LEAD_IN_CONTEXT:
            return pos
    return None


def match_left_scripts(text: str, pos: int) -> Optional[LeftScripts]:
    """Match ``{}_{a}^{b}`` or a context-guarded bare ``_a`` at ``pos``."""
    i = _scripts_start(text, pos)
    if i is None:
        return None

    found: dict[str, str] = {}
    next_index = pos
    for _ in range(2):
        i = skip_whitespace(text, i)
        if i >= len(text) or text[i] in found:
            break
        script = read_script(text, i)
        if script is None:
            break
        found[script.kind] = script.value
        next_index = i = script.end

    if not found:
        return None
    return LeftScripts(
        sub=found.get("_", ""),
        sup=found.get("^", ""),
        next_index=next_index,
    )


def _is_non_substantive(token: str) -> bool:
    match = _COMMAND_PREFIX.match(token)
    return bool(match) and _NON_SUBSTANTIVE_BASE.fullmatch(match.group(0)) is not None


def rewrite_left_scripts(text: str) -> str:
    """Replace every left-script construct with ``\\prescript`` notation."""
    out: list[str] = []
    pos = 0
    rewritten = 0

    while pos < len(text):
        if text[pos] == ESCAPE:
            # Escaped braces and scripts never open a lead-in
            name = read_command_name(text, pos) or text[pos]
            out.append(name)
            pos += len(name)
            continue

        scripts = match_left_scripts(text, pos)
        if scripts is None:
            out.append(text[pos])
            pos += 1
            continue

        base = read_base_token(text, scripts.next_index)
        if base is None:
            # Nothing to attach to: keep the lead-in as written
            out.append(text[pos:scripts.next_index])
            pos = scripts.next_index
            continue

        if _is_non_substantive(base.token):
            out.append(text[pos:base.end])
            pos = base.end
            continue

        sup = scripts.sup or STRUT
        sub = scripts.sub or STRUT
        out.append(f"{SPACING_NOOP}\\prescript{{{sup}}}{{{sub}}}{{{base.token}}}")
        pos = base.end
        rewritten += 1

    if rewritten:
        logger.debug("Rewrote %d left-script construct(s)", rewritten)
    return "".join(out)
