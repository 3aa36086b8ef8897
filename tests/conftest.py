"""Test fixtures and XMI builders.

This module provides:
- String builders for the three annotation families (textsem mentions,
  refsem concepts, syntax dependency nodes) and for a complete XMI document
- A sample note exercising all three families, including a mention that
  links to two concepts and a concept emitted before its mention
- Fixtures writing notes to a temporary input directory for batch tests

Attributes passed as None are omitted from the generated element, which is
how tests express "attribute absent".
"""

from pathlib import Path
from xml.etree.ElementTree import Element, fromstring

import pytest

XMI_ROOT_OPEN = (
    '<xmi:XMI xmlns:xmi="http://www.omg.org/XMI"'
    ' xmlns:cas="http:///uima/cas.ecore"'
    ' xmlns:textsem="http:///org/apache/ctakes/typesystem/type/textsem.ecore"'
    ' xmlns:refsem="http:///org/apache/ctakes/typesystem/type/refsem.ecore"'
    ' xmlns:syntax="http:///org/apache/ctakes/typesystem/type/syntax.ecore"'
    ' xmlns:textspan="http:///org/apache/ctakes/typesystem/type/textspan.ecore"'
    ' xmi:version="2.0">'
)
XMI_ROOT_CLOSE = "</xmi:XMI>"


def _attrs(**attributes) -> str:
    parts = []
    for key, value in attributes.items():
        if value is None:
            continue
        parts.append(f'{key.replace("__", ":")}="{value}"')
    return " ".join(parts)


def mention(
    tag: str = "DiseaseDisorderMention",
    xmi_id: int | None = 100,
    begin="10",
    end="20",
    polarity="1",
    concepts="501",
    **extra,
) -> str:
    """Build a textsem mention element."""
    attrs = _attrs(
        xmi__id=xmi_id,
        begin=begin,
        end=end,
        polarity=polarity,
        ontologyConceptArr=concepts,
        **extra,
    )
    return f"<textsem:{tag} {attrs}/>"


def concept(
    xmi_id="501",
    tag: str = "UmlsConcept",
    cui="C0030193",
    tui="T184",
    preferredText="Pain",
    codingScheme="SNOMEDCT_US",
    score="0.0",
) -> str:
    """Build a refsem concept element."""
    attrs = _attrs(
        xmi__id=xmi_id,
        codingScheme=codingScheme,
        cui=cui,
        tui=tui,
        preferredText=preferredText,
        score=score,
    )
    return f"<refsem:{tag} {attrs}/>"


def token(node_id="1", begin="10", end="13", form="no", postag="RB", xmi_id: int | None = None) -> str:
    """Build a syntax ConllDependencyNode element."""
    attrs = _attrs(xmi__id=xmi_id, id=node_id, begin=begin, end=end, form=form, postag=postag)
    return f"<syntax:ConllDependencyNode {attrs}/>"


def make_xmi(*elements: str) -> str:
    """Wrap element strings into a complete XMI document."""
    return '<?xml version="1.0" encoding="UTF-8"?>' + XMI_ROOT_OPEN + "".join(elements) + XMI_ROOT_CLOSE


def make_element(markup: str) -> Element:
    """Parse a single element string and return it with its namespaces resolved."""
    return fromstring(make_xmi(markup))[0]


SAMPLE_NOTE = make_xmi(
    '<cas:Sofa xmi:id="1" sofaNum="1" sofaID="_InitialView" mimeType="text" sofaString="Patient denies chest pain."/>',
    concept(xmi_id="701", cui="C0008031", tui="T184", preferredText="Chest Pain"),
    token(node_id="0", begin="0", end="26", form="ROOT", postag=None),
    token(node_id="1", begin="0", end="7", form="Patient", postag="NN"),
    token(node_id="2", begin="8", end="14", form="denies", postag="VBZ"),
    token(node_id="3", begin="15", end="20", form="chest", postag="NN"),
    token(node_id="4", begin="21", end="25", form="pain", postag="NN"),
    mention(xmi_id=300, begin="15", end="25", polarity="-1", concepts="701 702", subject="patient", generic="false"),
    '<textsem:SignSymptomMention xmi:id="301" begin="21" end="25" polarity="1"/>',
    concept(xmi_id="702", cui="C2926613", tui="T033", preferredText="Chest pain:Find:Pt:Chest:Nom", codingScheme="LNC"),
)


@pytest.fixture
def sample_note() -> str:
    """A small note with two concepts linked from one mention."""
    return SAMPLE_NOTE


@pytest.fixture
def notes_dir(tmp_path: Path) -> Path:
    """An input directory with two good notes, one broken note and a subdirectory."""
    input_dir = tmp_path / "xmi"
    input_dir.mkdir()
    (input_dir / "note_a.txt.xmi").write_text(SAMPLE_NOTE, encoding="utf-8")
    (input_dir / "note_b.xmi").write_text(
        make_xmi(mention(concepts="9"), concept(xmi_id="9"), token()),
        encoding="utf-8",
    )
    (input_dir / "note_c.xmi").write_text("<xmi:XMI this is not xml", encoding="utf-8")
    (input_dir / "nested").mkdir()
    return input_dir
