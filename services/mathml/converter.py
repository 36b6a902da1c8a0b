"""
LaTeX -> MathML conversion entry point.

Compilation is delegated to a compiler callable ``(latex, display) -> str``
(latex2mathml by default) and its output goes through ``postprocess_mathml``.
A failing or silent compiler yields ``""``: callers treat an empty result as
"conversion unavailable", not as an empty formula.
"""

from __future__ import annotations

from typing import Callable, Optional

from core.logger import logger
from services.latex.normalizer import is_display
from services.mathml.compiler import Latex2MathMLCompiler
from services.mathml.postprocess import postprocess_mathml

Compiler = Callable[[str, bool], str]


class MathMLConverter:
    """Convert (already normalized) LaTeX to cleaned-up MathML."""

    def __init__(self, compiler: Optional[Compiler] = None) -> None:
        self.compiler: Compiler = compiler or Latex2MathMLCompiler()

    def convert(self, latex: Optional[str], display: Optional[bool] = None) -> str:
        if not latex or not latex.strip():
            return ""

        mode = display if isinstance(display, bool) else is_display(latex)
        try:
            raw = self.compiler(latex, mode)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "LaTeX→MathML failed: %s: %s | Input (first 200 chars): %s",
                type(exc).__name__, exc, latex[:200],
            )
            logger.debug("Full LaTeX input: %s", latex)
            return ""

        if not raw or not raw.strip():
            logger.warning("Compiler returned no MathML | Input (first 200 chars): %s", latex[:200])
            return ""
        return postprocess_mathml(raw)


def to_mathml(latex: Optional[str], display: Optional[bool] = None) -> str:
    """Module-level shortcut; builds a fresh converter so no state is shared."""
    return MathMLConverter().convert(latex, display)
