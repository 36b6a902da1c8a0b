"""
Text-level cleanup of compiler-generated MathML.

The passes work on the markup string rather than a parsed tree because
compiler output may carry named entities (``&dot;``, ``&die;``) that an XML
parser without a DTD rejects. Where structure matters the passes use a small
tag scanner with an element stack.

Order is fixed: accent marking inspects the original glyphs, so it runs
before placeholders are replaced and empty nodes are dropped.
"""

from __future__ import annotations

import re
from typing import Optional

MATHML_NS = "http://www.w3.org/1998/Math/MathML"
ZERO_WIDTH_SPACE = "&#x200B;"
ZERO_WIDTH_TEXT = f"<mtext>{ZERO_WIDTH_SPACE}</mtext>"

_TAG = re.compile(r"<(/?)([A-Za-z][\w:.-]*)([^<>]*?)(/?)>")
_START_TAG = re.compile(r"<[A-Za-z][^<>]*>")
_MATH_ROOT = re.compile(r"<((?:([\w.-]+):)?math)\b([^<>]*)>")
_MOVER_OPEN = re.compile(r"<(mover)\b([^<>]*)>")
_ACCENT_ATTR = re.compile(r"\baccent\s*=")
_NONE = re.compile(r"<none\s*/>|<none\s*>\s*</none>")

# Dot (U+02D9) and double dot (U+00A8) in literal, numeric and named form
_DOT_GLYPHS = re.compile(
    "˙|¨"
    r"|&#[xX]0*(?:2[dD]9|[aA]8);|&#0*(?:729|168);"
    r"|&dot;|&DiacriticalDot;|&die;|&uml;|&Dot;|&DoubleDot;"
)

_LAYOUT_ATTRS = re.compile(
    r"\s+(?:display|indentalign(?:first|last)?|indentshift(?:first|last)?|indenttarget)"
    r"\s*=\s*(?:\"[^\"]*\"|'[^']*')"
)

# Children of these elements are positional; dropping one shifts the rest
_FIXED_ARITY = frozenset({
    "msub", "msup", "msubsup", "mfrac", "mroot",
    "mover", "munder", "munderover", "mmultiscripts",
})


def _local(name: str) -> str:
    return name.rsplit(":", 1)[-1]


# ---------------------------------------------------------
# Pass 1: namespace
# ---------------------------------------------------------
def ensure_namespace(markup: str) -> str:
    """Declare the MathML namespace on the root ``<math>`` when missing."""
    match = _MATH_ROOT.search(markup)
    if match is None or "xmlns" in match.group(3):
        return markup
    prefix = match.group(2)
    declaration = f' xmlns:{prefix}="{MATHML_NS}"' if prefix else f' xmlns="{MATHML_NS}"'
    insert_at = match.start() + 1 + len(match.group(1))
    return markup[:insert_at] + declaration + markup[insert_at:]


# ---------------------------------------------------------
# Pass 2: accents
# ---------------------------------------------------------
def _find_close(markup: str, start: int, name: str) -> int:
    """Index of the ``</name>`` balancing an element opened before ``start``."""
    depth = 1
    for match in _TAG.finditer(markup, start):
        if match.group(2) != name or match.group(4):
            continue
        depth += -1 if match.group(1) else 1
        if depth == 0:
            return match.start()
    return len(markup)


def mark_accents(markup: str) -> str:
    """Add ``accent="true"`` to ``<mover>`` elements overlaying a dot glyph."""
    inserts: list[int] = []
    for match in _MOVER_OPEN.finditer(markup):
        attrs = match.group(2)
        if attrs.rstrip().endswith("/") or _ACCENT_ATTR.search(attrs):
            continue
        content = markup[match.end():_find_close(markup, match.end(), match.group(1))]
        if _DOT_GLYPHS.search(content):
            inserts.append(match.start() + 1 + len(match.group(1)))

    for index in reversed(inserts):
        markup = markup[:index] + ' accent="true"' + markup[index:]
    return markup


# ---------------------------------------------------------
# Pass 3: <none/> placeholders
# ---------------------------------------------------------
def replace_none_placeholders(markup: str) -> str:
    """Swap ``<none/>`` for a zero-width text node, keeping argument slots."""
    return _NONE.sub(ZERO_WIDTH_TEXT, markup)


# ---------------------------------------------------------
# Pass 4: empty nodes
# ---------------------------------------------------------
def _collapse_empty(name: str, open_tag: str, close_tag: str, parent: Optional[str]) -> Optional[str]:
    """Replacement for an empty element, ``None`` to keep it as is."""
    local = _local(name)
    if local == "mrow":
        return ZERO_WIDTH_TEXT if parent in _FIXED_ARITY else ""
    if local == "mtr":
        return ""
    if local == "mtd":
        return f"{open_tag}{ZERO_WIDTH_TEXT}{close_tag}"
    if local == "mtext":
        return f"{open_tag}{ZERO_WIDTH_SPACE}{close_tag}"
    return None


def remove_empty_nodes(markup: str) -> str:
    """Drop empty rows; fill empty cells and text nodes with a zero-width space."""
    out: list[str] = []
    stack: list[tuple[str, int]] = []
    pos = 0

    for match in _TAG.finditer(markup):
        out.append(markup[pos:match.start()])
        pos = match.end()
        closing, name, attrs, self_closing = match.groups()

        if self_closing:
            parent = _local(stack[-1][0]) if stack else None
            replacement = _collapse_empty(name, f"<{name}{attrs.rstrip()}>", f"</{name}>", parent)
            out.append(match.group(0) if replacement is None else replacement)
            continue

        if not closing:
            stack.append((name, len(out)))
            out.append(match.group(0))
            continue

        if not any(open_name == name for open_name, _ in stack):
            # Stray close tag: keep it, nothing to balance
            out.append(match.group(0))
            continue
        while stack[-1][0] != name:
            stack.pop()
        _, index = stack.pop()

        inner = "".join(out[index + 1:])
        # A text node holding a literal space is content
        if inner.strip() or (inner and _local(name) == "mtext"):
            out.append(match.group(0))
            continue
        parent = _local(stack[-1][0]) if stack else None
        replacement = _collapse_empty(name, out[index], match.group(0), parent)
        if replacement is None:
            out.append(match.group(0))
        else:
            del out[index:]
            out.append(replacement)

    out.append(markup[pos:])
    return "".join(out)


# ---------------------------------------------------------
# Pass 5: layout hints
# ---------------------------------------------------------
def strip_layout_attributes(markup: str) -> str:
    """Remove display and indentation attributes downstream editors ignore."""
    return _START_TAG.sub(lambda m: _LAYOUT_ATTRS.sub("", m.group(0)), markup)


def postprocess_mathml(raw: Optional[str]) -> str:
    """Run the five cleanup passes in order."""
    if not raw:
        return ""
    markup = ensure_namespace(raw)
    markup = mark_accents(markup)
    markup = replace_none_placeholders(markup)
    markup = remove_empty_nodes(markup)
    return strip_layout_attributes(markup)
