"""Rewrite ``\\dot`` / ``\\ddot`` time-derivative accents as explicit overlays."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.logger import logger
from services.latex.scanner import read_accent_target, read_command_name

DOT_ABOVE = "˙"
DIAERESIS = "¨"

# Longest first so \ddot is not read as \d + "dot"
_DERIVATIVE_COMMANDS = (
    (r"\ddot", 2),
    (r"\dot", 1),
)

_GLYPH_BY_ORDER = {1: DOT_ABOVE, 2: DIAERESIS}


@dataclass(frozen=True)
class DerivativeCommand:
    order: int
    next_index: int


def detect_derivative(text: str, pos: int) -> Optional[DerivativeCommand]:
    """Match ``\\dot`` or ``\\ddot`` at ``pos`` but not ``\\dots``, ``\\ddots``..."""
    for command, order in _DERIVATIVE_COMMANDS:
        if not text.startswith(command, pos):
            continue
        end = pos + len(command)
        if end < len(text) and text[end].isascii() and text[end].isalpha():
            return None
        return DerivativeCommand(order=order, next_index=end)
    return None


def normalize_derivatives(text: str) -> str:
    r"""Turn ``\dot{x}`` into ``\overset{˙}{x}`` and ``\ddot{x}`` into ``\overset{¨}{x}``."""
    out: list[str] = []
    pos = 0
    rewritten = 0

    while pos < len(text):
        if text[pos] != "\\":
            out.append(text[pos])
            pos += 1
            continue

        command = detect_derivative(text, pos)
        if command is None:
            # Copy whole control sequences so \\dot is never split
            name = read_command_name(text, pos) or text[pos]
            out.append(name)
            pos += len(name)
            continue

        target = read_accent_target(text, command.next_index)
        if target is None:
            out.append(text[pos:command.next_index])
            pos = command.next_index
            continue

        glyph = _GLYPH_BY_ORDER[command.order]
        out.append(f"\\overset{{{glyph}}}{{{target.token}}}")
        pos = target.end
        rewritten += 1

    if rewritten:
        logger.debug("Rewrote %d derivative accent(s)", rewritten)
    return "".join(out)
