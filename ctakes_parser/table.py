"""Tabular output for correlated concept records.

The column order below is the stable output contract of the package:
downstream consumers read the CSV files positionally.
"""

from pathlib import Path
from typing import Sequence

import pandas as pd

from ctakes_parser.records import ConceptRecord

# output column -> ConceptRecord field
COLUMN_FIELDS: dict[str, str] = {
    "textsem": "mention_kind",
    "refsem": "concept_kind",
    "id": "concept_id",
    "pos_start": "span_start",
    "pos_end": "span_end",
    "cui": "cui",
    "negated": "negated",
    "preferred_text": "preferred_text",
    "scheme": "coding_scheme",
    "tui": "tui",
    "score": "score",
    "confidence": "confidence",
    "uncertainty": "uncertainty",
    "conditional": "conditional",
    "generic": "generic",
    "subject": "subject",
    "part_of_speech": "part_of_speech",
    "true_text": "reconstructed_text",
}

OUTPUT_COLUMNS: list[str] = list(COLUMN_FIELDS)

BOOLEAN_COLUMNS = ("negated", "conditional", "generic")

DEFAULT_MISSING = "NULL"


def records_to_frame(records: Sequence[ConceptRecord]) -> pd.DataFrame:
    """Build the output table, one row per record, columns in contract order."""
    rows = [{column: getattr(record, field) for column, field in COLUMN_FIELDS.items()} for record in records]
    return pd.DataFrame(rows, columns=OUTPUT_COLUMNS)


def _format_bool(value):
    if value is None or pd.isna(value):
        return None
    return "true" if value else "false"


def write_table(frame: pd.DataFrame, path: str | Path, missing: str = DEFAULT_MISSING) -> Path:
    """Write `frame` as CSV to `path`, rendering missing values as `missing`.

    Booleans are written as lowercase `true`/`false`.

    Returns:
        The path written.
    """
    path = Path(path)
    out = frame.copy()
    for column in BOOLEAN_COLUMNS:
        if column in out.columns:
            out[column] = out[column].map(_format_bool).astype(object)
    out.to_csv(path, index=False, na_rep=missing)
    return path
