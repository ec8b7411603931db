from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any

from txn_import.errors import RowValidationError, SourceReadError, StructuralError
from txn_import.models.processing_result import ImportOutcome
from txn_import.models.row_data import HeaderIndex

from .tokenizer import tokenize_line
from .validator import validate_row

"""CSV document parser.

- Row 1 is the header; column order is free but the four required columns must
  be present, otherwise the whole document is rejected (StructuralError).
- Blank lines are skipped without a warning.
- A row failing validation is excluded and reported as ``Row <n>: <message>``;
  parsing continues with the next line.
"""

__all__ = [
    "read_source",
    "split_lines",
    "parse_csv",
    "parse_csv_file",
]

logger = logging.getLogger(__name__)

Source = str | Path | bytes | IO[Any]


def read_source(source: Source) -> str:
    """Read the full text of a CSV source.

    Accepts a filesystem path, raw bytes, or a binary/text file-like object.
    Bytes are decoded as UTF-8 with an optional BOM.

    Raises:
        SourceReadError: when the source cannot be read or decoded
    """
    try:
        if isinstance(source, (str, Path)):
            raw: bytes | str = Path(source).read_bytes()
        elif isinstance(source, bytes):
            raw = source
        else:
            raw = source.read()
        if isinstance(raw, bytes):
            return raw.decode("utf-8-sig")
        if isinstance(raw, str):
            return raw.removeprefix("\ufeff")
    except (OSError, UnicodeDecodeError, ValueError, AttributeError) as e:
        raise SourceReadError(f"Failed to read file: {e}") from e
    raise SourceReadError(f"Failed to read file: unsupported content type {type(raw).__name__}")


def split_lines(text: str) -> list[str]:
    """Split document text into lines (outer whitespace trimmed, CRLF tolerated)."""
    return [line.rstrip("\r") for line in text.strip().split("\n")]


def parse_csv(text: str) -> ImportOutcome:
    """Parse full CSV text into accepted records and row-tagged warnings.

    Raises:
        StructuralError: fewer than two lines, or required header columns missing
    """
    lines = split_lines(text)
    if len(lines) < 2:
        raise StructuralError("CSV file is empty or has no data rows")

    header = HeaderIndex.from_header(tokenize_line(lines[0]))
    missing = header.missing()
    if missing:
        raise StructuralError(f"Missing required columns: {', '.join(missing)}")

    outcome = ImportOutcome()
    for idx, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        row = header.build_row(idx, tokenize_line(line))
        try:
            outcome.records.append(validate_row(row))
        except RowValidationError as e:
            outcome.add_error(idx, str(e))

    if outcome.errors:
        logger.debug("csv parsing warnings: %s", outcome.errors)
    return outcome


def parse_csv_file(source: Source) -> ImportOutcome:
    """read_source + parse_csv convenience wrapper."""
    return parse_csv(read_source(source))
