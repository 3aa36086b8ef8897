"""Parse cTAKES XMI output into correlated concept records.

This is the core of the package. `parse_document` runs one pass over the
direct children of the XMI root:

    1. Classify each child into the mention, reference or token family
    2. Build concept records, reference updates or tokens from it
    3. Apply reference updates to the matching records
    4. Once the pass is complete, correlate records with the tokens

Malformed elements are dropped and reported as `Diagnostic` values on the
result; only a document that is not well-formed XML fails as a whole.

Example usage:
    ```python
    result = parse_note_file("notes/note_001.xmi")
    for diagnostic in result.diagnostics:
        print(diagnostic.describe())
    result.to_frame().to_csv("note_001.csv", index=False, na_rep="NULL")
    ```
"""

import xml.etree.ElementTree as ET
from pathlib import Path

from ctakes_parser.builders import (
    MalformedElementError,
    RecordIndex,
    build_concept_records,
    build_reference_update,
    build_token,
)
from ctakes_parser.classifier import AnnotationFamily, iter_annotations
from ctakes_parser.correlator import correlate
from ctakes_parser.records import Diagnostic, DocumentResult, Token


class DocumentParseError(ValueError):
    """The document could not be parsed as XML at all."""


def _read_root(content: bytes | str) -> ET.Element:
    if isinstance(content, str):
        content = content.encode("utf-8")
    if not content.strip():
        raise DocumentParseError("Document is empty")
    try:
        return ET.fromstring(content)
    except ET.ParseError as e:
        raise DocumentParseError(f"Failed to parse XML: {e}") from e


def parse_document(content: bytes | str) -> DocumentResult:
    """Extract and correlate the concept records of one XMI document.

    Args:
        content: The full XMI document, as UTF-8 bytes or text.

    Returns:
        A `DocumentResult` with correlated records, the token collection and
        one diagnostic per dropped element.

    Raises:
        DocumentParseError: If the content is empty or not well-formed XML.
    """
    root = _read_root(content)

    index = RecordIndex()
    tokens: list[Token] = []
    diagnostics: list[Diagnostic] = []

    for family, element in iter_annotations(root):
        try:
            if family is AnnotationFamily.MENTION:
                for record in build_concept_records(element):
                    index.add(record)
            elif family is AnnotationFamily.REFERENCE:
                index.apply(build_reference_update(element))
            else:
                tokens.append(build_token(element, position=len(tokens)))
        except MalformedElementError as e:
            diagnostics.append(e.diagnostic)

    return DocumentResult(
        records=correlate(index.records, tokens),
        tokens=tuple(tokens),
        diagnostics=tuple(diagnostics),
    )


def parse_note_file(path: str | Path) -> DocumentResult:
    """Read and parse one XMI file.

    Raises:
        FileNotFoundError: If `path` is not an existing file.
        DocumentParseError: If the file is not well-formed XML.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No input file: {path}")
    return parse_document(path.read_bytes())
