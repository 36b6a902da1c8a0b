"""
Cursor-style readers over a LaTeX source string.

Every reader takes ``(text, pos)`` and returns either ``None`` or a frozen
descriptor whose ``end`` is strictly greater than ``pos``. Readers never
consume a partial construct: an unterminated group or a truncated script is
reported as ``None`` and the caller copies the text through unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

ESCAPE = "\\"
SCRIPT_MARKERS = ("_", "^")


@dataclass(frozen=True)
class Group:
    """Interior of a balanced ``{...}`` span, braces excluded."""

    content: str
    end: int


@dataclass(frozen=True)
class Script:
    """One ``_`` / ``^`` attachment."""

    kind: str
    value: str
    end: int


@dataclass(frozen=True)
class BaseToken:
    """The unit a prescript attaches to, trailing scripts folded in.

    ``leading_whitespace`` is the run skipped before the base. The prescript
    rewriter does not re-emit it.
    """

    token: str
    end: int
    leading_whitespace: str = ""


def skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def read_command_name(text: str, pos: int) -> Optional[str]:
    """Return ``\\name`` (or a two-char control symbol) starting at ``pos``."""
    if pos >= len(text) or text[pos] != ESCAPE:
        return None
    end = pos + 1
    while end < len(text) and text[end].isascii() and text[end].isalpha():
        end += 1
    if end > pos + 1:
        return text[pos:end]
    if pos + 1 < len(text):
        # \{ \, \| and friends
        return text[pos:pos + 2]
    return None


def read_group(text: str, pos: int) -> Optional[Group]:
    """Read a balanced brace group whose ``{`` sits at ``pos``."""
    if pos >= len(text) or text[pos] != "{":
        return None

    depth = 0
    i = pos
    while i < len(text):
        ch = text[i]
        if ch == ESCAPE:
            i += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return Group(content=text[pos + 1:i], end=i + 1)
        i += 1
    return None


def read_script(text: str, pos: int) -> Optional[Script]:
    """Read one ``_x`` / ``^{...}`` / ``_\\alpha`` attachment at ``pos``."""
    if pos >= len(text) or text[pos] not in SCRIPT_MARKERS:
        return None

    kind = text[pos]
    i = skip_whitespace(text, pos + 1)
    if i >= len(text):
        return None

    if text[i] == "{":
        group = read_group(text, i)
        if group is None:
            return None
        return Script(kind=kind, value=group.content, end=group.end)

    if text[i] == ESCAPE:
        command = read_command_name(text, i)
        if command is None:
            return None
        return Script(kind=kind, value=command, end=i + len(command))

    # A closing brace or another marker is not a value; the script is truncated
    if text[i] == "}" or text[i] in SCRIPT_MARKERS:
        return None
    return Script(kind=kind, value=text[i], end=i + 1)


def _read_unit(text: str, pos: int, keep_group_braces: bool) -> Optional[tuple[str, int]]:
    """Read a command (with optional group), a group, or one character."""
    # A closing brace or a script marker cannot carry scripts itself
    if pos >= len(text) or text[pos] == "}" or text[pos] in SCRIPT_MARKERS:
        return None

    ch = text[pos]
    if ch == ESCAPE:
        command = read_command_name(text, pos)
        if command is None:
            return ch, pos + 1
        end = pos + len(command)
        if command[1:].isalpha():
            group = read_group(text, end)
            if group is not None:
                return text[pos:group.end], group.end
        return command, end

    if ch == "{":
        group = read_group(text, pos)
        if group is None:
            return None
        unit = text[pos:group.end] if keep_group_braces else group.content
        return unit, group.end

    return ch, pos + 1


def _absorb_scripts(text: str, token: str, pos: int) -> tuple[str, int]:
    """Fold scripts trailing the base into the token as ``kind{value}``."""
    while True:
        i = skip_whitespace(text, pos)
        if i >= len(text) or text[i] not in SCRIPT_MARKERS:
            return token, pos
        script = read_script(text, i)
        if script is None:
            return token, pos
        token += f"{script.kind}{{{script.value}}}"
        pos = script.end


def read_base_token(text: str, pos: int) -> Optional[BaseToken]:
    """Read the base a prescript attaches to, recording leading whitespace."""
    start = skip_whitespace(text, pos)
    unit = _read_unit(text, start, keep_group_braces=True)
    if unit is None:
        return None
    token, end = _absorb_scripts(text, unit[0], unit[1])
    return BaseToken(token=token, end=end, leading_whitespace=text[pos:start])


def read_accent_target(text: str, pos: int) -> Optional[BaseToken]:
    """Read the argument of an accent command (group content unwrapped)."""
    start = skip_whitespace(text, pos)
    unit = _read_unit(text, start, keep_group_braces=False)
    if unit is None:
        return None
    token, end = _absorb_scripts(text, unit[0], unit[1])
    return BaseToken(token=token, end=end)
