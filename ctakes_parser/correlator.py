"""Correlate concept records with the token collection of their document.

For each record the correlator derives two fields from the tokens:

- `reconstructed_text`: the surface forms of every token whose *start*
  lies in the record's half-open span `[span_start, span_end)`, joined by a
  single space in document order. A token only has to start inside the
  span; it may end past it.
- `part_of_speech`: the tag of the first token, in document order, whose
  start equals the record's `span_start` exactly.

`TokenIndex` keeps the tokens sorted by start offset, with ties broken by
their index in the given sequence, and answers both questions with a
`bisect` range query instead of scanning every token per record.
"""

from bisect import bisect_left
from typing import Sequence

from ctakes_parser.records import ConceptRecord, Token


class TokenIndex:
    """Read-only view of a document's tokens, sorted by `span_start`."""

    def __init__(self, tokens: Sequence[Token]):
        # (order, token) pairs; order is the index in `tokens`, i.e. document order
        self._entries = sorted(enumerate(tokens), key=lambda entry: (entry[1].span_start, entry[0]))
        self._starts = [token.span_start for _, token in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def starting_within(self, start: int, end: int) -> list[Token]:
        """Return tokens with `start <= span_start < end`, in document order."""
        lo = bisect_left(self._starts, start)
        hi = bisect_left(self._starts, end, lo=lo)
        return [token for _, token in sorted(self._entries[lo:hi], key=lambda entry: entry[0])]

    def first_starting_at(self, start: int) -> Token | None:
        """Return the earliest token in document order that starts exactly at `start`."""
        i = bisect_left(self._starts, start)
        if i < len(self._starts) and self._starts[i] == start:
            return self._entries[i][1]
        return None


def reconstruct_text(record: ConceptRecord, index: TokenIndex) -> str:
    forms = [
        token.surface_form
        for token in index.starting_within(record.span_start, record.span_end)
        if token.surface_form is not None
    ]
    return " ".join(forms)


def correlate(records: Sequence[ConceptRecord], tokens: Sequence[Token]) -> list[ConceptRecord]:
    """Return copies of `records` with `part_of_speech` and `reconstructed_text` filled in.

    The input records are left untouched, so correlating the same records
    and tokens twice gives equal results.

    Args:
        records: Resolved concept records, in creation order.
        tokens: The document's tokens in document order. Their sequence order, not
            `Token.position`, decides ties and the order of reconstructed text.

    Returns:
        One correlated record per input record, in the same order.
    """
    index = TokenIndex(tokens)
    correlated: list[ConceptRecord] = []
    for record in records:
        match = index.first_starting_at(record.span_start)
        correlated.append(
            record.model_copy(
                update={
                    "part_of_speech": match.part_of_speech if match is not None else None,
                    "reconstructed_text": reconstruct_text(record, index),
                }
            )
        )
    return correlated
