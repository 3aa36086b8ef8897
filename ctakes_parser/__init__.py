"""
cTAKES XMI parser - flatten clinical NLP annotations into tabular records.

Reads the XMI output of the Apache cTAKES clinical pipeline and produces one
row per (mention, ontology concept) pair, with the concept's CUI, TUI and
preferred text, the mention's assertion attributes, and the token text and
part-of-speech reconstructed from the syntax layer.

    from ctakes_parser import parse_note_file

    result = parse_note_file("note_001.xmi")
    frame = result.to_frame()

The batch layer is imported lazily so that the core parser does not pull in
asyncio machinery:

    from ctakes_parser import run_batch
"""

from typing import TYPE_CHECKING

from ctakes_parser.correlator import TokenIndex, correlate
from ctakes_parser.parser import DocumentParseError, parse_document, parse_note_file
from ctakes_parser.records import (
    ConceptRecord,
    Diagnostic,
    DocumentResult,
    ReferenceUpdate,
    Token,
)
from ctakes_parser.table import OUTPUT_COLUMNS, records_to_frame, write_table

if TYPE_CHECKING:
    from ctakes_parser.batch import BatchResult, parse_output_dir, run_batch

__all__ = [
    "ConceptRecord",
    "Diagnostic",
    "DocumentResult",
    "ReferenceUpdate",
    "Token",
    "TokenIndex",
    "correlate",
    "DocumentParseError",
    "parse_document",
    "parse_note_file",
    "OUTPUT_COLUMNS",
    "records_to_frame",
    "write_table",
    "BatchResult",
    "parse_output_dir",
    "run_batch",
]

__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy import for the batch layer."""
    if name in ("BatchResult", "parse_output_dir", "run_batch"):
        from ctakes_parser import batch

        return getattr(batch, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
