"""Tests for pulling LaTeX out of recognizer responses."""
from __future__ import annotations

from services.latex.extract import extract_latex


def test_extract_from_display_dollars() -> None:
    assert extract_latex("Here is the formula: $$E=mc^2$$") == "E=mc^2"


def test_extract_from_brackets() -> None:
    assert extract_latex(r"The formula is \[x^2 + y^2 = r^2\]") == "x^2 + y^2 = r^2"


def test_dollars_preferred_over_brackets() -> None:
    assert extract_latex(r"\[a\] and $$b$$") == "b"


def test_multiline_dollars() -> None:
    raw = "$$\n\\begin{aligned}\nx &= 1 \\\\\ny &= 2\n\\end{aligned}\n$$"
    result = extract_latex(raw)

    assert result.startswith(r"\begin{aligned}")
    assert "x &= 1" in result


def test_code_fences_removed() -> None:
    assert extract_latex("```latex\n$$x^2$$\n```") == "x^2"


def test_inline_code_removed() -> None:
    assert extract_latex("The answer is `$$x^2$$`") == "x^2"


def test_plain_content_trimmed() -> None:
    assert extract_latex("  Just plain text formula: x^2 ") == "Just plain text formula: x^2"


def test_fraction_kept_intact() -> None:
    assert extract_latex(r"$$\frac{a}{b}$$") == r"\frac{a}{b}"


def test_empty() -> None:
    assert extract_latex("") == ""
    assert extract_latex(None) == ""
