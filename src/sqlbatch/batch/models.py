"""
Domain models for one batch run.
Scripts, their captured results and the per-file outcomes.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlbatch.config import OutputFormat
from sqlbatch.errors import SqlBatchError


@dataclass(frozen=True, order=True)
class ScriptFile:
    """A discovered query file. Identity is its path."""
    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def stem(self) -> str:
        return self.path.stem

    def output_path(self, output_format: OutputFormat) -> Path:
        """Artifact path: same directory, extension replaced."""
        return self.path.with_suffix(output_format.suffix)

    def read_text(self) -> str:
        # utf-8-sig strips the BOM that Windows editors prepend
        return self.path.read_text(encoding="utf-8-sig")


@dataclass
class ExecutionResult:
    """
    Tabular result of running one script.

    Columns are unique and ordered; each row maps every column to its value.
    """
    columns: List[str] = field(default_factory=list)
    rows: List[Dict[str, Any]] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def has_result_set(self) -> bool:
        return bool(self.columns)


@dataclass
class FileOutcome:
    """What happened to one script."""
    script: ScriptFile
    artifact: Optional[Path] = None
    error: Optional[SqlBatchError] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class BatchReport:
    """Summary of one batch: outcomes in execution order."""
    outcomes: List[FileOutcome] = field(default_factory=list)
    aborted: bool = False

    @property
    def executed(self) -> int:
        return len(self.outcomes)

    @property
    def failures(self) -> List[FileOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def artifacts(self) -> List[Path]:
        return [o.artifact for o in self.outcomes if o.artifact is not None]

    @property
    def success(self) -> bool:
        return not self.aborted and not self.failures
