"""Tests for the MathML cleanup passes."""
from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from services.mathml.postprocess import (
    MATHML_NS,
    ensure_namespace,
    mark_accents,
    postprocess_mathml,
    remove_empty_nodes,
    replace_none_placeholders,
    strip_layout_attributes,
)

ZWSP_TEXT = "<mtext>&#x200B;</mtext>"


# ----------------------------------------------------------
# NAMESPACE
# ----------------------------------------------------------

def test_namespace_added() -> None:
    assert ensure_namespace("<math><mi>x</mi></math>") == f'<math xmlns="{MATHML_NS}"><mi>x</mi></math>'


def test_namespace_added_before_existing_attributes() -> None:
    result = ensure_namespace('<math display="block"><mi>x</mi></math>')
    assert result.startswith(f'<math xmlns="{MATHML_NS}" display="block">')


def test_namespace_already_present() -> None:
    raw = f'<math xmlns="{MATHML_NS}"><mi>x</mi></math>'
    assert ensure_namespace(raw) == raw


def test_namespace_prefixed_root() -> None:
    result = ensure_namespace("<m:math><m:mi>x</m:mi></m:math>")
    assert result.startswith(f'<m:math xmlns:m="{MATHML_NS}">')


# ----------------------------------------------------------
# ACCENTS
# ----------------------------------------------------------

@pytest.mark.parametrize(
    "glyph",
    ["˙", "¨", "&#x2D9;", "&#x002D9;", "&#729;", "&#xA8;", "&#x000A8;", "&#168;",
     "&dot;", "&DiacriticalDot;", "&die;", "&uml;"],
)
def test_dot_overlays_marked_as_accents(glyph: str) -> None:
    raw = f"<mover><mi>x</mi><mo>{glyph}</mo></mover>"
    assert mark_accents(raw) == f'<mover accent="true"><mi>x</mi><mo>{glyph}</mo></mover>'


def test_existing_accent_attribute_respected() -> None:
    raw = '<mover accent="false"><mi>x</mi><mo>˙</mo></mover>'
    assert mark_accents(raw) == raw


def test_other_overlays_untouched() -> None:
    raw = "<mover><mi>x</mi><mo>¯</mo></mover><mi>y</mi><mo>˙</mo>"
    assert mark_accents(raw) == raw


def test_accent_matched_on_own_content_only() -> None:
    raw = "<mover><mi>a</mi><mo>→</mo></mover><mover><mi>b</mi><mo>&#x2D9;</mo></mover>"
    expected = '<mover><mi>a</mi><mo>→</mo></mover><mover accent="true"><mi>b</mi><mo>&#x2D9;</mo></mover>'
    assert mark_accents(raw) == expected


# ----------------------------------------------------------
# PLACEHOLDERS
# ----------------------------------------------------------

def test_none_replaced_not_deleted() -> None:
    raw = "<mmultiscripts><mi>R</mi><mprescripts/><none/><mn>0</mn></mmultiscripts>"
    expected = f"<mmultiscripts><mi>R</mi><mprescripts/>{ZWSP_TEXT}<mn>0</mn></mmultiscripts>"
    assert replace_none_placeholders(raw) == expected


def test_none_with_space_and_explicit_close() -> None:
    assert replace_none_placeholders("<none /><none></none>") == ZWSP_TEXT * 2


# ----------------------------------------------------------
# EMPTY NODES
# ----------------------------------------------------------

def test_empty_rows_removed() -> None:
    assert remove_empty_nodes("<math><mrow></mrow><mi>x</mi><mrow/></math>") == "<math><mi>x</mi></math>"


def test_nested_empty_rows_removed() -> None:
    assert remove_empty_nodes("<math><mrow> <mrow/> </mrow><mi>x</mi></math>") == "<math><mi>x</mi></math>"


def test_empty_script_argument_kept_as_zero_width() -> None:
    raw = "<msup><mi>x</mi><mrow></mrow></msup>"
    assert remove_empty_nodes(raw) == f"<msup><mi>x</mi>{ZWSP_TEXT}</msup>"


def test_table_structure_preserved() -> None:
    raw = "<mtable><mtr><mtd><mi>a</mi></mtd><mtd></mtd></mtr><mtr></mtr></mtable>"
    expected = f"<mtable><mtr><mtd><mi>a</mi></mtd><mtd>{ZWSP_TEXT}</mtd></mtr></mtable>"
    assert remove_empty_nodes(raw) == expected


def test_empty_cell_with_attributes_self_closing() -> None:
    assert remove_empty_nodes('<mtd columnalign="left"/>') == f'<mtd columnalign="left">{ZWSP_TEXT}</mtd>'


def test_empty_text_filled() -> None:
    assert remove_empty_nodes("<mtext></mtext><mtext> </mtext>") == "<mtext>&#x200B;</mtext><mtext> </mtext>"


def test_other_empty_tokens_untouched() -> None:
    raw = "<math><mi></mi><mspace width=\"1em\"/></math>"
    assert remove_empty_nodes(raw) == raw


def test_stray_close_tag_does_not_raise() -> None:
    raw = "<math><mi>x</mi></mrow></math>"
    assert remove_empty_nodes(raw) == raw


# ----------------------------------------------------------
# LAYOUT ATTRIBUTES
# ----------------------------------------------------------

def test_layout_attributes_stripped() -> None:
    raw = (
        '<math xmlns="x" display="block">'
        "<mtable indentalign='left' indentalignfirst=\"left\" indentshift=\"1em\" indenttarget=\"t\">"
        '<mtr><mtd><mstyle displaystyle="true"><mi>x</mi></mstyle></mtd></mtr></mtable></math>'
    )
    expected = (
        '<math xmlns="x"><mtable>'
        '<mtr><mtd><mstyle displaystyle="true"><mi>x</mi></mstyle></mtd></mtr></mtable></math>'
    )
    assert strip_layout_attributes(raw) == expected


# ----------------------------------------------------------
# FULL PIPELINE
# ----------------------------------------------------------

def test_postprocess_runs_all_passes() -> None:
    raw = (
        '<math display="block">'
        "<mover><mi>q</mi><mo>&#xA8;</mo></mover><mrow></mrow>"
        "<mmultiscripts><mi>R</mi><mprescripts/><none/><mn>0</mn></mmultiscripts>"
        "</math>"
    )
    expected = (
        f'<math xmlns="{MATHML_NS}">'
        '<mover accent="true"><mi>q</mi><mo>&#xA8;</mo></mover>'
        f"<mmultiscripts><mi>R</mi><mprescripts/>{ZWSP_TEXT}<mn>0</mn></mmultiscripts>"
        "</math>"
    )
    result = postprocess_mathml(raw)

    assert result == expected
    root = ET.fromstring(result)
    assert root.tag == f"{{{MATHML_NS}}}math"


@pytest.mark.parametrize("empty", ["", None])
def test_postprocess_empty(empty) -> None:
    assert postprocess_mathml(empty) == ""
