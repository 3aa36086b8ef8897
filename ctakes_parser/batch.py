"""Batch parsing of a directory of cTAKES XMI notes into CSV tables.

Every regular file in the input directory is parsed on its own and written
to `<name>.csv` in the output directory, where `<name>` is the file name up
to its first dot. A file that fails to parse is logged and skipped; it never
stops the batch. Entries that are not regular files are skipped with a
warning.

Notes are independent, so up to `workers` of them are parsed concurrently.
Inputs that map to the same CSV, such as `a.xmi` and `a.txt`, are logged and
parsed one after another in input order, so the last of them wins as in a
sequential run.
Parsing is CPU bound and runs in worker threads; the batch log is only
written from the event loop.

Example usage:
    ```python
    result = run_batch("xmi/", "csv/", workers=4)
    print(f"{result.files_processed} parsed, {result.files_failed} failed")
    ```
"""

import asyncio
import fnmatch
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ctakes_parser.config import ParserConfig, load_config
from ctakes_parser.logging import BatchLog, PprintLogger
from ctakes_parser.parser import parse_note_file
from ctakes_parser.progress import ProgressTracker
from ctakes_parser.records import DocumentResult
from ctakes_parser.table import write_table


class FileResult(BaseModel):
    """Outcome of one file in a batch."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(description="Path of the input file.")
    output: str | None = Field(default=None, description="Path of the CSV written, if any.")
    records: int = Field(default=0, description="Rows written to the CSV.")
    diagnostics: tuple[str, ...] = Field(default=(), description="Elements dropped while parsing.")
    error: str | None = Field(default=None, description="Why the file could not be parsed.")


class BatchResult(BaseModel):
    """Summary of a batch run.

    Attributes:
        files_processed: Files parsed and written successfully.
        files_failed: Regular files that could not be parsed or written.
        files_skipped: Directory entries that are not regular files.
        file_results: Per-file outcomes, in input order.
    """

    model_config = ConfigDict(frozen=True)

    input_dir: str
    output_dir: str
    log_file: str
    started_at: datetime
    completed_at: datetime
    files_processed: int
    files_failed: int
    files_skipped: int
    file_results: tuple[FileResult, ...] = ()
    skipped: tuple[str, ...] = ()


def find_input_entries(
    input_dir: Path,
    limit: int | None = None,
    pattern: str | None = None,
) -> list[Path]:
    """List the entries of `input_dir`, sorted by name.

    Args:
        input_dir: Directory to list (not recursive).
        limit: Keep only the first `limit` entries after filtering.
        pattern: Optional comma-separated glob patterns matched against entry names,
                 e.g. 'note_1*.xmi,note_2*.xmi'.
    """
    entries = sorted(input_dir.iterdir(), key=lambda p: p.name)
    if pattern:
        patterns = [p.strip() for p in pattern.split(",") if p.strip()]
        entries = [e for e in entries if any(fnmatch.fnmatch(e.name, p) for p in patterns)]
    if limit is not None:
        entries = entries[:limit]
    return entries


def output_path_for(source: Path, output_dir: Path) -> Path:
    """Return the CSV path for `source`: its name up to the first dot, plus `.csv`."""
    stem = source.name.split(".")[0] or source.name
    return output_dir / f"{stem}.csv"


def convert_note(source: Path, output: Path, missing: str = "NULL") -> DocumentResult:
    """Parse `source` and write its table to `output`."""
    result = parse_note_file(source)
    write_table(result.to_frame(), output, missing=missing)
    return result


async def _process_file(
    source: Path,
    output_dir: Path,
    config: ParserConfig,
    log: PprintLogger,
) -> FileResult:
    output = output_path_for(source, output_dir)
    try:
        result = await asyncio.to_thread(convert_note, source, output, config.missing_string)
    except Exception as e:
        log.warning(f"Could not parse file {source}: {e}")
        return FileResult(source=str(source), error=f"{type(e).__name__}: {e}")

    diagnostics = tuple(d.describe() for d in result.diagnostics)
    for diagnostic in diagnostics:
        log.warning(f"{source.name}: dropped {diagnostic}")
    return FileResult(
        source=str(source),
        output=str(output),
        records=len(result.records),
        diagnostics=diagnostics,
    )


async def parse_output_dir(
    input_dir: str | Path,
    output_dir: str | Path,
    *,
    config: ParserConfig | None = None,
    workers: int | None = None,
    pattern: str | None = None,
    limit: int | None = None,
    quiet: bool = True,
) -> BatchResult:
    """Parse every note in `input_dir` and save one CSV per note into `output_dir`.

    Args:
        input_dir: Directory of XMI files.
        output_dir: Directory for the CSV files and the batch log; created if absent.
        config: Batch settings; loaded from the default locations when omitted.
        workers: Overrides `config.workers`.
        pattern: Comma-separated glob patterns restricting which entries are processed.
        limit: Process at most this many entries.
        quiet: If False, report progress on stderr.

    Returns:
        A `BatchResult` describing every entry.

    Raises:
        FileNotFoundError: If `input_dir` does not exist.
    """
    input_dir = Path(input_dir)
    output_dir = Path(output_dir)
    if not input_dir.is_dir():
        raise FileNotFoundError(f"Input directory does not exist: {input_dir}")
    config = config or load_config()
    max_workers = max(1, workers or config.workers)

    output_dir.mkdir(parents=True, exist_ok=True)
    log_path = output_dir / config.log_filename
    entries = find_input_entries(input_dir, limit=limit, pattern=pattern)
    # the log file may live in the input directory when both paths are the same
    entries = [e for e in entries if e.resolve() != log_path.resolve()]
    started_at = datetime.now(timezone.utc)

    with BatchLog(log_path) as log:
        n = len(entries)
        log.info(f"------------------- {datetime.now().strftime('%d-%m-%Y %H:%M')} -------------------")
        log.info(f"Parsing {n} files from {input_dir}")
        log.info("--------------------------------------------------------")

        skipped: list[str] = []
        files: list[tuple[int, Path]] = []
        for i, entry in enumerate(entries, start=1):
            if not entry.is_file():
                log.warning(f"{entry} is not a file")
                skipped.append(str(entry))
                continue
            files.append((i, entry))

        tracker = ProgressTracker(total=len(files), report_interval=config.progress_interval)
        semaphore = asyncio.Semaphore(max_workers)

        async def process_with_limit(i: int, source: Path) -> FileResult:
            async with semaphore:
                log.info(f" - Parsing file {i} of {n}: {source.name}")
                file_result = await _process_file(source, output_dir, config, log)
            tracker.increment(failed=file_result.error is not None)
            return file_result

        # files sharing an output path form one group and never run concurrently
        groups: dict[Path, list[tuple[int, Path]]] = {}
        for i, source in files:
            groups.setdefault(output_path_for(source, output_dir), []).append((i, source))
        for output, members in groups.items():
            if len(members) > 1:
                names = ", ".join(source.name for _, source in members)
                log.warning(f"{output.name} is written by {len(members)} files: {names}")

        async def process_group(members: list[tuple[int, Path]]) -> list[tuple[int, FileResult]]:
            return [(i, await process_with_limit(i, source)) for i, source in members]

        if max_workers > 1:
            grouped = await asyncio.gather(*[process_group(members) for members in groups.values()])
            pairs = sorted((pair for group in grouped for pair in group), key=lambda pair: pair[0])
            file_results = [file_result for _, file_result in pairs]
        else:
            file_results = [await process_with_limit(i, source) for i, source in files]

        processed = sum(1 for r in file_results if r.error is None)
        failed = len(file_results) - processed
        log.info(f"Finished: {processed} parsed, {failed} failed, {len(skipped)} skipped")

    if not quiet:
        tracker.report()

    return BatchResult(
        input_dir=str(input_dir),
        output_dir=str(output_dir),
        log_file=str(log_path),
        started_at=started_at,
        completed_at=datetime.now(timezone.utc),
        files_processed=processed,
        files_failed=failed,
        files_skipped=len(skipped),
        file_results=tuple(file_results),
        skipped=tuple(skipped),
    )


def run_batch(input_dir: str | Path, output_dir: str | Path, **kwargs) -> BatchResult:
    """Synchronous wrapper around `parse_output_dir`."""
    return asyncio.run(parse_output_dir(input_dir, output_dir, **kwargs))
