"""Error taxonomy for a batch run.

Every error carries the process exit code the runner should use when the
error ends the run.
"""
from typing import Any, Dict, Optional


class SqlBatchError(Exception):
    """Base class for all sqlbatch errors."""
    exit_code = 1


class DirectoryNotFound(SqlBatchError):
    """Script directory is missing, not a directory, or unreadable."""

    def __init__(self, path, reason: str = "does not exist"):
        self.path = path
        super().__init__(f"Script directory {reason}: {path}")


class DatabaseConnectionError(SqlBatchError):
    """Connection could not be opened or was lost.

    Carries the attempted configuration with secrets removed.
    """

    def __init__(self, message: str, target: Optional[Dict[str, Any]] = None):
        self.target = target or {}
        if self.target:
            details = ", ".join(f"{k}={v}" for k, v in self.target.items())
            message = f"{message} ({details})"
        super().__init__(message)


class ExecutionFault(SqlBatchError):
    """A script failed while executing against the database."""

    def __init__(self, script_path, error: Exception):
        self.script_path = script_path
        self.error = error
        super().__init__(f"{script_path}: {error}")


class OutputWriteError(SqlBatchError):
    """An artifact could not be written."""

    def __init__(self, artifact_path, error: Exception):
        self.artifact_path = artifact_path
        self.error = error
        super().__init__(f"Failed to write {artifact_path}: {error}")


class OperatorDeclined(SqlBatchError):
    """Operator did not confirm the run. Not a failure."""
    exit_code = 0

    def __init__(self, answer: str = ""):
        self.answer = answer
        super().__init__("Run cancelled by operator")
