"""
Canonical LaTeX normalization for recognizer output.

``normalize`` is the only entry point callers use before compiling to
MathML. The passes run in a fixed order:

1. ``clean_latex`` - drop ``\\limits``, unify bold, tidy text blocks
2. ``rewrite_left_scripts`` - ``{}_{a}^{b}X`` -> ``\\prescript{b}{a}{X}``
3. ``normalize_derivatives`` - ``\\dot``/``\\ddot`` -> ``\\overset`` overlays

Derivatives run last so an accent target that itself holds a prescript is
read in its rewritten form.
"""

from __future__ import annotations

import re
from typing import Optional

from services.latex.cleaner import clean_latex
from services.latex.derivatives import normalize_derivatives
from services.latex.left_scripts import rewrite_left_scripts

_DISPLAY_CUES = re.compile(r"\\begin|\\\\|\n|\\dfrac|\\displaystyle|\\int|\\sum")


def normalize(latex: Optional[str]) -> str:
    """Rewrite ``latex`` into canonical form. Never raises."""
    if not latex:
        return ""
    text = clean_latex(latex)
    text = rewrite_left_scripts(text)
    return normalize_derivatives(text)


def is_display(latex: Optional[str]) -> bool:
    """Whether ``latex`` should render as a block rather than inline."""
    if not latex:
        return False
    return _DISPLAY_CUES.search(latex) is not None
