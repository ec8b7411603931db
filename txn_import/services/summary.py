from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering for CLI import runs.

Format:
SUMMARY files={total}/{total} success={success} failed={failed} rows={rows}
warnings={warnings} elapsed_sec={elapsed} throughput_rps={throughput}
"""

__all__ = [
    "format_number",
    "render_summary_line",
]


def format_number(value: float) -> str:
    """Integers without a decimal point, tiny values without scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(total_files: int, result: ProcessingResult) -> str:
    """Render a SUMMARY line from ProcessingResult.

    >>> from datetime import datetime, timezone
    >>> start = datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
    >>> end = datetime(2026, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
    >>> result = ProcessingResult(
    ...     success_files=1, failed_files=0, total_imported_rows=10,
    ...     total_warnings=2, start_time=start, end_time=end,
    ...     elapsed_seconds=2.0, throughput_rows_per_sec=5.0
    ... )
    >>> render_summary_line(1, result)
    'SUMMARY files=1/1 success=1 failed=0 rows=10 warnings=2 elapsed_sec=2 throughput_rps=5'
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"rows={result.total_imported_rows} "
        f"warnings={result.total_warnings} "
        f"elapsed_sec={format_number(result.elapsed_seconds)} "
        f"throughput_rps={format_number(result.throughput_rows_per_sec)}"
    )
