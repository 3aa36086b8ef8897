"""Builders turning classified XMI elements into records, updates and tokens.

Each builder reads one element and either returns its contribution or
raises `MalformedElementError` carrying a `Diagnostic`. Nothing partial is
ever returned: a mention whose `end` fails to parse yields no records at
all, even though its concept list was fine.

`RecordIndex` holds the concept records of one document and applies
reference updates to them. It keeps a multimap from `concept_id` to record
positions so an update touches only its matches, and it remembers the last
update seen per key so that records created after their concept still get
resolved.
"""

from collections import defaultdict
from xml.etree.ElementTree import Element

from ctakes_parser.attributes import (
    XMI_NAMESPACE,
    Parsed,
    get_attribute,
    parse_bool,
    parse_float,
    parse_int,
    parse_int_list,
    require,
    split_tag,
)
from ctakes_parser.classifier import CONCEPT_ARRAY_ATTRIBUTE
from ctakes_parser.records import ConceptRecord, Diagnostic, ReferenceUpdate, Token


class MalformedElementError(ValueError):
    """An element was dropped because one of its attributes failed to parse."""

    def __init__(self, diagnostic: Diagnostic):
        super().__init__(diagnostic.describe())
        self.diagnostic = diagnostic


def _reject(element: Element, key: str, message: str) -> None:
    namespace, tag = split_tag(element.tag)
    raise MalformedElementError(
        Diagnostic(
            namespace=namespace,
            tag=tag,
            element_id=element.get(f"{{{XMI_NAMESPACE}}}id"),
            attribute=key,
            value=get_attribute(element, key),
            message=message,
        )
    )


def _field(element: Element, key: str, outcome: Parsed):
    """Return the parsed value, raising `MalformedElementError` on failure."""
    if not outcome.ok:
        _reject(element, key, outcome.error or "invalid value")
    return outcome.value


def _span(element: Element) -> tuple[int, int]:
    begin = _field(element, "begin", require(parse_int(get_attribute(element, "begin"))))
    end = _field(element, "end", require(parse_int(get_attribute(element, "end"))))
    return begin, end


def build_concept_records(element: Element) -> list[ConceptRecord]:
    """Build one `ConceptRecord` per concept id listed on a textsem mention.

    Polarity defaults to 0 when absent, so a mention with no polarity is
    reported as negated.
    """
    _, tag = split_tag(element.tag)

    polarity = parse_int(get_attribute(element, "polarity"))
    polarity_value = _field(element, "polarity", polarity)
    if polarity_value is None:
        polarity_value = 0

    begin, end = _span(element)
    if begin >= end:
        _reject(element, "end", f"span end must be greater than begin ({begin})")

    confidence = _field(element, "confidence", parse_float(get_attribute(element, "confidence")))
    uncertainty = _field(element, "uncertainty", parse_float(get_attribute(element, "uncertainty")))
    conditional = _field(element, "conditional", parse_bool(get_attribute(element, "conditional")))
    generic = _field(element, "generic", parse_bool(get_attribute(element, "generic")))
    subject = get_attribute(element, "subject")
    concept_ids = _field(
        element,
        CONCEPT_ARRAY_ATTRIBUTE,
        require(parse_int_list(get_attribute(element, CONCEPT_ARRAY_ATTRIBUTE))),
    )

    negated = not (polarity_value > 0)
    return [
        ConceptRecord(
            mention_kind=tag,
            concept_id=concept_id,
            span_start=begin,
            span_end=end,
            negated=negated,
            confidence=confidence,
            uncertainty=uncertainty,
            conditional=conditional,
            generic=generic,
            subject=subject,
        )
        for concept_id in concept_ids
    ]


def build_reference_update(element: Element) -> ReferenceUpdate:
    """Build the `ReferenceUpdate` carried by a refsem concept element."""
    _, tag = split_tag(element.tag)
    key = _field(element, "xmi:id", require(parse_int(get_attribute(element, "xmi:id"))))
    score = _field(element, "score", parse_float(get_attribute(element, "score")))
    return ReferenceUpdate(
        key=key,
        concept_kind=tag,
        coding_scheme=get_attribute(element, "codingScheme"),
        cui=get_attribute(element, "cui"),
        preferred_text=get_attribute(element, "preferredText"),
        tui=get_attribute(element, "tui"),
        score=score,
    )


def build_token(element: Element, position: int) -> Token:
    """Build a `Token` from a ConllDependencyNode at document `position`."""
    begin, end = _span(element)
    return Token(
        span_start=begin,
        span_end=end,
        part_of_speech=get_attribute(element, "postag"),
        surface_form=get_attribute(element, "form"),
        position=position,
    )


class RecordIndex:
    """Concept records of one document, indexed by `concept_id`.

    Updates are applied to every current match and remembered, so the
    reference join holds whichever of mention and concept comes first in
    the document.
    """

    def __init__(self) -> None:
        self._records: list[ConceptRecord] = []
        self._positions: dict[int, list[int]] = defaultdict(list)
        self._updates: dict[int, ReferenceUpdate] = {}

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[ConceptRecord]:
        return list(self._records)

    def add(self, record: ConceptRecord) -> None:
        """Append `record`, resolving it at once if its concept was already seen."""
        self._positions[record.concept_id].append(len(self._records))
        self._records.append(record)
        pending = self._updates.get(record.concept_id)
        if pending is not None:
            record.apply(pending)

    def apply(self, update: ReferenceUpdate) -> int:
        """Apply `update` to all records sharing its key; return how many matched."""
        self._updates[update.key] = update
        positions = self._positions.get(update.key, [])
        for position in positions:
            self._records[position].apply(update)
        return len(positions)
