"""Record types produced by a single pass over a cTAKES XMI document.

This module defines the data model shared by the classifier, the builders
and the correlator:

- **ConceptRecord**: One output row linking a mention span to an ontology concept
- **ReferenceUpdate**: Concept payload keyed by `xmi:id`, applied to matching records
- **Token**: A position-tagged surface form with its part-of-speech tag
- **Diagnostic**: A malformed element that was dropped from the pass
- **DocumentResult**: The correlated records of one document plus its diagnostics

**Record Lifecycle:**

1. **Creation**: The concept record builder creates one record per concept id
   listed on a mention element.

2. **Resolution**: Each reference update whose key matches `concept_id`
   overwrites the record's concept fields. Absent attributes overwrite with
   `None`; this is assignment, not a merge.

3. **Correlation**: The correlator returns copies of the records carrying
   `part_of_speech` and `reconstructed_text`. Resolved records are never
   mutated again.

Tokens, reference updates and diagnostics are frozen Pydantic models.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    import pandas as pd


class ConceptRecord(BaseModel):
    """One row of the output table.

    Scalar mention fields are shared by every record built from the same
    mention element; only `concept_id` differs between them. The concept
    fields (`concept_kind`, `coding_scheme`, `cui`, `preferred_text`, `tui`,
    `score`) stay `None` until a matching reference update is applied.
    """

    mention_kind: str = Field(description="Tag name of the textsem mention, e.g. 'DiseaseDisorderMention'.")
    concept_kind: str | None = Field(default=None, description="Tag name of the linked refsem concept.")
    concept_id: int = Field(description="Join key against the concept's xmi:id.")
    span_start: int = Field(description="Inclusive start offset into the note text.")
    span_end: int = Field(description="Exclusive end offset into the note text.")
    coding_scheme: str | None = None
    cui: str | None = None
    tui: str | None = None
    preferred_text: str | None = None
    score: float | None = None
    negated: bool = Field(description="True unless the mention polarity is positive.")
    confidence: float | None = None
    uncertainty: float | None = None
    conditional: bool | None = None
    generic: bool | None = None
    subject: str | None = None
    part_of_speech: str | None = Field(default=None, description="Tag of the token starting exactly at span_start.")
    reconstructed_text: str = Field(default="", description="Space-joined forms of tokens starting inside the span.")

    def apply(self, update: "ReferenceUpdate") -> None:
        """Overwrite the concept fields with those carried by `update`."""
        self.concept_kind = update.concept_kind
        self.coding_scheme = update.coding_scheme
        self.cui = update.cui
        self.preferred_text = update.preferred_text
        self.tui = update.tui
        self.score = update.score


class ReferenceUpdate(BaseModel):
    """Concept payload from a refsem element, keyed by its `xmi:id`."""

    model_config = ConfigDict(frozen=True)

    key: int = Field(description="The refsem element's xmi:id.")
    concept_kind: str = Field(description="Tag name of the refsem element, e.g. 'UmlsConcept'.")
    coding_scheme: str | None = None
    cui: str | None = None
    preferred_text: str | None = None
    tui: str | None = None
    score: float | None = None


class Token(BaseModel):
    """A ConllDependencyNode reduced to its span, tag and surface form.

    `position` records the token's index in document order as parsed. The
    correlator orders tokens by their place in the sequence it is given.
    """

    model_config = ConfigDict(frozen=True)

    span_start: int
    span_end: int
    part_of_speech: str | None = None
    surface_form: str | None = None
    position: int = Field(default=0, ge=0)


class Diagnostic(BaseModel):
    """A single element dropped from the pass because an attribute failed to parse."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    tag: str
    element_id: str | None = Field(default=None, description="The element's xmi:id, when it has one.")
    attribute: str
    value: str | None = None
    message: str

    def describe(self) -> str:
        """Return a one-line description suitable for a log file."""
        ident = f" xmi:id={self.element_id}" if self.element_id else ""
        return f"{self.tag}{ident} ({self.namespace}): {self.attribute}={self.value!r}: {self.message}"


class DocumentResult(BaseModel):
    """Correlated output of one document.

    Attributes:
        records: Correlated concept records in creation order.
        tokens: The token collection in document order.
        diagnostics: Elements dropped during the pass.
    """

    records: list[ConceptRecord] = Field(default_factory=list)
    tokens: tuple[Token, ...] = ()
    diagnostics: tuple[Diagnostic, ...] = ()

    def to_frame(self) -> "pd.DataFrame":
        """Return the records as an output table."""
        from ctakes_parser.table import records_to_frame

        return records_to_frame(self.records)
