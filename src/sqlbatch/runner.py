"""
Run orchestrator.

Wires configuration, discovery, confirmation, the connection check and the
batch together and decides the process exit code.
"""
import logging
from enum import Enum
from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from sqlbatch.batch import (
    BatchExecutor,
    BatchReport,
    ResultSerializer,
    ScriptLoader,
    confirm_run,
)
from sqlbatch.config import RunConfig
from sqlbatch.errors import OperatorDeclined, SqlBatchError
from sqlbatch.services.database import open_connection
from sqlbatch.services.health import check_connection

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class RunState(str, Enum):
    START = "start"
    CONFIG_RESOLVED = "config_resolved"
    FILES_LISTED = "files_listed"
    CONFIRMED = "confirmed"
    CONNECTION_VALIDATED = "connection_validated"
    BATCH_EXECUTED = "batch_executed"
    DONE = "done"
    ABORTED = "aborted"


class BatchRunner:
    """
    Single-pass run: each state is entered at most once, in order, and
    any failure moves straight to ABORTED.
    """

    def __init__(self, operator, connect: Callable[[RunConfig], Any] = open_connection):
        self.operator = operator
        self.connect = connect
        self.state = RunState.START
        self.history: List[RunState] = [RunState.START]
        self.config: Optional[RunConfig] = None
        self.report: Optional[BatchReport] = None

    def _advance(self, state: RunState):
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def run(self, resolve: Callable[[], RunConfig]) -> int:
        """
        Execute the whole run.

        Args:
            resolve: builds the RunConfig (may prompt for credentials)

        Returns:
            Process exit code: 0 on success or operator decline, 1 otherwise
        """
        try:
            return self._run(resolve)
        except OperatorDeclined as e:
            self._advance(RunState.ABORTED)
            self.operator.emit(str(e))
            return e.exit_code
        except SqlBatchError as e:
            self._advance(RunState.ABORTED)
            logger.error(f"Run aborted: {e}")
            self.operator.emit(f"Error: {e}")
            return e.exit_code
        except ValidationError as e:
            self._advance(RunState.ABORTED)
            self.operator.emit(f"Invalid configuration: {e}")
            return EXIT_FAILURE
        except Exception as e:
            self._advance(RunState.ABORTED)
            logger.error(f"Unexpected failure: {e}", exc_info=True)
            self.operator.emit(f"Unexpected error: {e}")
            return EXIT_FAILURE

    def _run(self, resolve: Callable[[], RunConfig]) -> int:
        config = resolve()
        self.config = config
        self._advance(RunState.CONFIG_RESOLVED)

        loader = ScriptLoader(config.script_dir)
        scripts = loader.list_scripts()
        self._advance(RunState.FILES_LISTED)

        confirm_run(config, scripts, self.operator)
        self._advance(RunState.CONFIRMED)

        check_connection(config, connect=self.connect)
        self._advance(RunState.CONNECTION_VALIDATED)

        executor = BatchExecutor(
            config,
            ResultSerializer(config.output_format),
            self.operator,
            connect=self.connect,
        )
        # Enumerate again so execution sees the directory as it is now
        self.report = executor.run(loader.list_scripts())
        self._advance(RunState.BATCH_EXECUTED)

        if not self.report.success:
            failed = len(self.report.failures)
            suffix = " (batch stopped early)" if self.report.aborted else ""
            self.operator.emit(f"Completed with {failed} failed script(s){suffix}")
            self._advance(RunState.ABORTED)
            return EXIT_FAILURE

        self.operator.emit(f"Completed {self.report.executed} script(s)")
        self._advance(RunState.DONE)
        return EXIT_OK
