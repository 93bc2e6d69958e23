"""Batch executor - runs scripts one at a time and writes their results."""

import logging
from datetime import date, datetime, time, UTC
from typing import Any, Callable, List, Optional

from sqlbatch.config import RunConfig
from sqlbatch.errors import (
    DatabaseConnectionError,
    ExecutionFault,
    OutputWriteError,
)
from sqlbatch.services.database import is_connection_lost, open_connection
from .models import BatchReport, ExecutionResult, FileOutcome, ScriptFile
from .serializer import ResultSerializer


logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("sqlbatch_audit")


def _normalize_value(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex().upper()
    return value


def unique_columns(names: List[Optional[str]]) -> List[str]:
    """
    Make result-set column names usable as row keys.

    Unnamed columns become Column1, Column2, ... by position; repeated
    names get the first free numeric suffix (id, id_2).
    """
    columns: List[str] = []
    used = set()
    for position, name in enumerate(names, start=1):
        base = name or f"Column{position}"
        candidate = base
        suffix = 1
        # a suffixed name may itself already be a real column name
        while candidate in used:
            suffix += 1
            candidate = f"{base}_{suffix}"
        used.add(candidate)
        columns.append(candidate)
    return columns


class BatchExecutor:
    """
    Sequential script executor.

    Opens a fresh connection for every script and closes it before the
    result is written. Nothing is cached between scripts.
    """

    def __init__(
        self,
        config: RunConfig,
        serializer: ResultSerializer,
        operator,
        connect: Callable[[RunConfig], Any] = open_connection,
    ):
        self.config = config
        self.serializer = serializer
        self.operator = operator
        self.connect = connect

    def run(self, scripts: List[ScriptFile]) -> BatchReport:
        """
        Execute every script in order and write one artifact per script.

        Execution faults and write failures are reported inline and
        recorded. A lost connection stops the batch; so does the first
        execution fault when continue_on_error is off.

        Returns:
            BatchReport with one outcome per attempted script
        """
        report = BatchReport()

        for index, script in enumerate(scripts, start=1):
            logger.info(f"[{index}/{len(scripts)}] Executing {script.path}")
            outcome = FileOutcome(script=script)
            report.outcomes.append(outcome)

            try:
                result = self.execute(script)
            except DatabaseConnectionError as e:
                outcome.error = e
                self.operator.emit(f"{script.path}: {e}")
                logger.error(f"Connection lost during {script.name}, aborting batch")
                report.aborted = True
                break
            except ExecutionFault as e:
                outcome.error = e
                self.operator.emit(str(e))
                if not self.config.continue_on_error:
                    logger.error(f"Stopping batch after failure in {script.name}")
                    report.aborted = True
                    break
                continue

            try:
                outcome.artifact = self.serializer.write(script, result)
            except OutputWriteError as e:
                outcome.error = e
                self.operator.emit(f"{script.path}: {e}")
                continue

            self.operator.emit(str(outcome.artifact))

        logger.info(
            f"Batch finished: {report.executed} of {len(scripts)} script(s) attempted, "
            f"{len(report.failures)} failure(s)"
        )
        return report

    def execute(self, script: ScriptFile) -> ExecutionResult:
        """
        Run one script's full text as a single unit.

        Raises:
            DatabaseConnectionError: connection could not be opened or was lost
            ExecutionFault: the script failed or could not be read
        """
        try:
            sql = script.read_text()
        except (OSError, UnicodeDecodeError) as e:
            self._audit_log(script, success=False, error=str(e))
            raise ExecutionFault(script.path, e) from e

        start_time = datetime.now(UTC)
        try:
            result = self._execute_sql(sql)
        except DatabaseConnectionError as e:
            self._audit_log(script, success=False, error=str(e))
            raise
        except Exception as e:
            logger.debug(f"Execution of {script.name} failed", exc_info=True)
            self._audit_log(script, success=False, error=str(e))
            if is_connection_lost(e):
                raise DatabaseConnectionError(
                    f"Connection lost: {e}", self.config.describe()
                ) from e
            raise ExecutionFault(script.path, e) from e

        result.elapsed_seconds = (datetime.now(UTC) - start_time).total_seconds()
        self._audit_log(script, success=True, row_count=result.row_count)
        logger.info(
            f"{script.name}: {result.row_count} rows in {result.elapsed_seconds:.2f}s"
        )
        return result

    def _execute_sql(self, sql: str) -> ExecutionResult:
        """Execute SQL and collect rows from every result set."""
        conn = self.connect(self.config)
        try:
            cursor = conn.cursor()
            try:
                cursor.execute(sql)
                return self._collect(cursor)
            finally:
                cursor.close()
        finally:
            conn.close()

    def _collect(self, cursor) -> ExecutionResult:
        """
        Walk all result sets on the cursor.

        The first result set with columns fixes the column set; rows from
        later result sets are mapped onto it by position.
        """
        result = ExecutionResult()

        while True:
            if cursor.description:
                columns = unique_columns([desc[0] for desc in cursor.description])
                if not result.columns:
                    result.columns = columns
                elif columns != result.columns:
                    logger.warning(
                        f"Result set columns {columns} differ from {result.columns}; "
                        "values are mapped by position"
                    )

                for row in cursor.fetchall():
                    result.rows.append({
                        col: _normalize_value(row[i]) if i < len(row) else None
                        for i, col in enumerate(result.columns)
                    })

            if not cursor.nextset():
                break

        return result

    def _audit_log(self, script: ScriptFile, success: bool,
                   row_count: int = 0, error: Optional[str] = None):
        """Log execution for audit trail."""
        audit_logger.info(
            f"server={self.config.server} database={self.config.database} "
            f"script={script.path} success={success} rows={row_count} error={error}"
        )
