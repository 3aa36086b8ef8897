"""Annotation classifier for cTAKES XMI documents.

The direct children of the XMI root are a flat, loosely typed annotation
graph. Each child is routed by its namespace and tag to one of three
annotation families, or ignored:

- **MENTION** (textsem): clinical mentions that link to ontology concepts
  through `ontologyConceptArr`. Mentions without that attribute are skipped.
- **REFERENCE** (refsem): ontology concepts such as `UmlsConcept`, joined to
  mentions by their `xmi:id`.
- **TOKEN** (syntax): `ConllDependencyNode` elements, except the sentinel
  root node whose `id` is `"0"`.
"""

from enum import Enum
from typing import Iterator
from xml.etree.ElementTree import Element

from ctakes_parser.attributes import get_attribute, split_tag

TEXTSEM_NAMESPACE = "http:///org/apache/ctakes/typesystem/type/textsem.ecore"
REFSEM_NAMESPACE = "http:///org/apache/ctakes/typesystem/type/refsem.ecore"
SYNTAX_NAMESPACE = "http:///org/apache/ctakes/typesystem/type/syntax.ecore"

CONCEPT_ARRAY_ATTRIBUTE = "ontologyConceptArr"
DEPENDENCY_NODE_TAG = "ConllDependencyNode"
ROOT_NODE_ID = "0"


class AnnotationFamily(str, Enum):
    """The three annotation families extracted from a document."""

    MENTION = "mention"
    """A textsem mention carrying ontology concept references."""

    REFERENCE = "reference"
    """A refsem ontology concept, keyed by its xmi:id."""

    TOKEN = "token"
    """A syntax dependency node with a surface form and POS tag."""


def classify(element: Element) -> AnnotationFamily | None:
    """Return the family `element` belongs to, or `None` if it is not extracted."""
    namespace, tag = split_tag(element.tag)
    if namespace == TEXTSEM_NAMESPACE:
        concepts = get_attribute(element, CONCEPT_ARRAY_ATTRIBUTE)
        if concepts and concepts.strip():
            return AnnotationFamily.MENTION
        return None
    if namespace == REFSEM_NAMESPACE:
        return AnnotationFamily.REFERENCE
    if namespace == SYNTAX_NAMESPACE:
        if tag == DEPENDENCY_NODE_TAG and get_attribute(element, "id") != ROOT_NODE_ID:
            return AnnotationFamily.TOKEN
    return None


def iter_annotations(root: Element) -> Iterator[tuple[AnnotationFamily, Element]]:
    """Yield `(family, element)` for each extracted child of `root`, in document order."""
    for element in root:
        if not isinstance(element.tag, str):
            # comments and processing instructions
            continue
        family = classify(element)
        if family is not None:
            yield family, element
