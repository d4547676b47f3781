"""Ingest entry points shared by the CLI and library callers.

A file may hold several concatenated export sections (users merge exports
before uploading). The text is scanned line by line; any line matching one of
the known header signatures starts a new section and flushes the previous one
through its adapter. Lines before the first recognized header (report titles,
date-range preambles) are discarded, and a file with no recognized header
yields no records rather than an error.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from os import PathLike
from pathlib import Path
from types import ModuleType
from typing import TypeAlias

from ..logging_setup import get_logger
from ..models import ParseResult, RawTransactionRecord
from .adapters import accounting_export_csv, bank_statement_csv, card_statement_csv
from .fields import read_rows

_logger = get_logger("cashflow_forecast.ingest")

# Detection order matters only for pathological headers; real exports match one.
_ADAPTERS: tuple[ModuleType, ...] = (
    accounting_export_csv,
    bank_statement_csv,
    card_statement_csv,
)

_Converter: TypeAlias = Callable[
    [Sequence[Sequence[str]]], tuple[list[RawTransactionRecord], int]
]


def detect_header(line: str) -> ModuleType | None:
    """Return the adapter whose header signature ``line`` matches, if any."""

    for adapter in _ADAPTERS:
        if adapter.matches_header(line):
            return adapter
    return None


def _flush(adapter: ModuleType, lines: list[str]) -> tuple[list[RawTransactionRecord], int]:
    convert: _Converter = adapter.to_raw_records
    records, skipped = convert(read_rows(lines))
    if skipped:
        _logger.debug("ingest:rows_skipped format=%s skipped=%d", adapter.FORMAT_NAME, skipped)
    return records, skipped


def parse_export(text: str) -> ParseResult:
    """Parse export text (one or more sections) into raw records.

    Never raises for malformed content: unreadable sections and rows are
    skipped and reported through ``ParseResult.skipped_rows`` and logging.
    """

    if not text:
        return ParseResult(records=[], skipped_rows=0, formats=())
    text = text.removeprefix("\ufeff")

    records: list[RawTransactionRecord] = []
    skipped = 0
    formats: list[str] = []

    current: ModuleType | None = None
    section: list[str] = []

    for line in text.splitlines(keepends=True):
        adapter = detect_header(line)
        if adapter is not None:
            if current is not None:
                recs, n_skipped = _flush(current, section)
                records.extend(recs)
                skipped += n_skipped
            current = adapter
            section = [line]
            formats.append(adapter.FORMAT_NAME)
            _logger.debug("ingest:section_start format=%s", adapter.FORMAT_NAME)
        elif current is not None:
            section.append(line)

    if current is not None:
        recs, n_skipped = _flush(current, section)
        records.extend(recs)
        skipped += n_skipped
    else:
        _logger.info("ingest:no_recognized_header")

    _logger.info(
        "ingest:parsed records=%d skipped=%d sections=%d",
        len(records),
        skipped,
        len(formats),
    )
    return ParseResult(records=records, skipped_rows=skipped, formats=tuple(formats))


def parse_records(text: str) -> list[RawTransactionRecord]:
    """Convenience wrapper returning only the records of :func:`parse_export`."""

    return parse_export(text).records


def load_export_file(path: str | PathLike[str]) -> ParseResult:
    """Read ``path`` as UTF-8 (BOM tolerated) and parse it.

    File-system errors (missing file, permissions) propagate to the caller.
    """

    text = Path(path).read_text(encoding="utf-8-sig")
    return parse_export(text)


__all__ = ["detect_header", "load_export_file", "parse_export", "parse_records"]
