"""Discover, confirm, execute and serialize a batch of SQL scripts."""
from .models import (
    ScriptFile,
    ExecutionResult,
    FileOutcome,
    BatchReport,
)
from .loader import ScriptLoader
from .gate import confirm_run
from .serializer import ResultSerializer
from .executor import BatchExecutor

__all__ = [
    "ScriptFile",
    "ExecutionResult",
    "FileOutcome",
    "BatchReport",
    "ScriptLoader",
    "confirm_run",
    "ResultSerializer",
    "BatchExecutor",
]
