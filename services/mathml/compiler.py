"""
TeX -> MathML compiler backed by latex2mathml.

latex2mathml has no ``\\prescript``, so normalized LaTeX goes through a thin
adapter: each ``\\prescript{sup}{sub}{base}`` is swapped for a private-use
placeholder character, its arguments are compiled on their own, and the
resulting ``<mmultiscripts>`` element is spliced back in where the
placeholder landed in the compiled markup.
"""

from __future__ import annotations

import re

from latex2mathml.converter import convert as latex2mathml_convert

from core.logger import logger
from services.latex.left_scripts import SPACING_NOOP, STRUT
from services.latex.scanner import read_group, skip_whitespace

_PRESCRIPT = re.compile(r"\\prescript(?![A-Za-z])")
_MATH_WRAPPER = re.compile(r"^\s*<math\b[^>]*>(.*)</math>\s*$", re.DOTALL)
_PLACEHOLDER_BASE = 0xE000


def _placeholder_pattern(index: int) -> re.Pattern[str]:
    code = _PLACEHOLDER_BASE + index
    return re.compile(
        rf"<(m[a-z]+)\b[^>]*>\s*(?:{re.escape(chr(code))}|&#[xX]0*{code:X};|&#{code};)\s*</\1>"
    )


class Latex2MathMLCompiler:
    """Compile LaTeX to a MathML string; raises on unparsable input."""

    def __call__(self, latex: str, display: bool = False) -> str:
        elements: list[str] = []
        text = self._extract_prescripts(latex.replace(SPACING_NOOP, ""), elements)
        mathml = latex2mathml_convert(text, display="block" if display else "inline")
        return self._splice(mathml, elements)

    # ---------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------
    def _extract_prescripts(self, latex: str, elements: list[str]) -> str:
        """Replace each well-formed ``\\prescript`` with a placeholder."""
        out: list[str] = []
        pos = 0
        for match in _PRESCRIPT.finditer(latex):
            if match.start() < pos:
                # Already consumed as an argument of an outer \prescript
                continue
            args: list[str] = []
            end = match.end()
            for _ in range(3):
                group = read_group(latex, skip_whitespace(latex, end))
                if group is None:
                    break
                args.append(group.content)
                end = group.end
            if len(args) < 3:
                continue

            sup, sub, base = args
            out.append(latex[pos:match.start()])
            out.append(chr(_PLACEHOLDER_BASE + len(elements)))
            elements.append(
                "<mmultiscripts>"
                f"{self._fragment(base)}<mprescripts/>{self._fragment(sub)}{self._fragment(sup)}"
                "</mmultiscripts>"
            )
            pos = end
        out.append(latex[pos:])
        return "".join(out)

    def _fragment(self, latex: str) -> str:
        """Compile one prescript argument to a bare MathML row."""
        if latex.strip() in ("", STRUT):
            return "<none/>"
        mathml = self(latex)
        match = _MATH_WRAPPER.match(mathml)
        inner = match.group(1) if match else mathml
        return f"<mrow>{inner}</mrow>"

    def _splice(self, mathml: str, elements: list[str]) -> str:
        for index, element in enumerate(elements):
            mathml, count = _placeholder_pattern(index).subn(lambda _m, e=element: e, mathml, count=1)
            if count == 0:
                logger.warning("Prescript placeholder %d missing from compiled MathML", index)
        return mathml
