"""Write captured result sets to artifact files."""

import csv
import logging
from pathlib import Path
from typing import Any, Dict, List

from sqlbatch.config import OutputFormat
from sqlbatch.errors import OutputWriteError
from .models import ExecutionResult, ScriptFile


logger = logging.getLogger(__name__)


CONTROL_ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t"})


def _cell(value: Any) -> str:
    """Single-line text for a table cell; line breaks and tabs are escaped."""
    if value is None:
        return ""
    return str(value).translate(CONTROL_ESCAPES)


def format_table(columns: List[str], rows: List[Dict[str, Any]]) -> str:
    """Format rows as a fixed-width ASCII table."""
    if not columns:
        return "No results"

    # Calculate column widths
    widths = {}
    for col in columns:
        widths[col] = len(col)
        for row in rows:
            widths[col] = max(widths[col], len(_cell(row.get(col))))

    lines = []

    header = "| " + " | ".join(col.ljust(widths[col]) for col in columns) + " |"
    separator = "+-" + "-+-".join("-" * widths[col] for col in columns) + "-+"

    lines.append(separator)
    lines.append(header)
    lines.append(separator)

    for row in rows:
        values = [_cell(row.get(col)).ljust(widths[col]) for col in columns]
        lines.append("| " + " | ".join(values) + " |")

    lines.append(separator)
    lines.append("")
    noun = "row" if len(rows) == 1 else "rows"
    lines.append(f"({len(rows)} {noun} affected)")

    return "\n".join(lines)


class ResultSerializer:
    """Writes one artifact per executed script."""

    def __init__(self, output_format: OutputFormat):
        self.output_format = output_format

    def write(self, script: ScriptFile, result: ExecutionResult) -> Path:
        """
        Write the result next to the script, replacing any earlier artifact.

        Returns:
            Path of the written artifact

        Raises:
            OutputWriteError: the file could not be written
        """
        target = script.output_path(self.output_format)

        try:
            if self.output_format is OutputFormat.CSV:
                self._write_csv(target, result)
            else:
                self._write_table(target, result)
        except OSError as e:
            logger.error(f"Failed to write {target}: {e}")
            raise OutputWriteError(target, e) from e

        logger.debug(f"Wrote {result.row_count} rows to {target}")
        return target

    def _write_csv(self, target: Path, result: ExecutionResult):
        with open(target, "w", encoding="utf-8", newline="") as f:
            if not result.has_result_set:
                return
            writer = csv.DictWriter(f, fieldnames=result.columns, restval="")
            writer.writeheader()
            writer.writerows(result.rows)

    def _write_table(self, target: Path, result: ExecutionResult):
        with open(target, "w", encoding="utf-8") as f:
            f.write(format_table(result.columns, result.rows))
            f.write("\n")
