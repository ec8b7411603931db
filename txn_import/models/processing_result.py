from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .import_record import ImportRecord
from .local_transaction import LocalTransaction

"""Result models for the CSV transaction importer.

ImportOutcome / ImportResult describe a single import call; FileStat and
ProcessingResult aggregate a CLI run over several files for the SUMMARY line.
"""

__all__ = [
    "ImportOutcome",
    "ImportResult",
    "FileStat",
    "ProcessingResult",
]


@dataclass
class ImportOutcome:
    """In-flight state of one import: parsed records, row warnings, assigned ids.

    ``ids`` stays empty until the bulk insert returns; ``ids[i]`` belongs to
    ``records[i]``.
    """
    records: list[ImportRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)  # "Row <n>: <message>"
    ids: list[Any] = field(default_factory=list)
    error_rows: list[int] = field(default_factory=list)  # row number of errors[i]

    def add_error(self, row_number: int, message: str) -> None:
        self.errors.append(f"Row {row_number}: {message}")
        self.error_rows.append(row_number)


@dataclass(frozen=True)
class ImportResult:
    """What a successful import reports back to its caller."""
    success: bool
    count: int  # rows accepted and uploaded (server-reported)
    transactions: list[LocalTransaction]  # whole collection after merge
    warnings: list[str]

    def display_warnings(self, limit: int = 5) -> list[str]:
        """Warnings capped for display, with a trailing '... and N more' line."""
        if len(self.warnings) <= limit:
            return list(self.warnings)
        shown = list(self.warnings[:limit])
        shown.append(f"... and {len(self.warnings) - limit} more warnings")
        return shown


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics for one CLI run."""
    file_name: str
    status: str  # success/failed
    imported_rows: int
    warnings: int
    elapsed_seconds: float
    error: str | None = None


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of a CLI run (SUMMARY line input)."""
    success_files: int
    failed_files: int
    total_imported_rows: int
    total_warnings: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    file_stats: list[FileStat] | None = None
