"""
Operator interaction over the console.

The runner only talks to the operator through this interface so it can be
driven without a real terminal.
"""
import getpass
import logging
import sys
from typing import Protocol

from sqlbatch.errors import OperatorDeclined

logger = logging.getLogger(__name__)

AFFIRMATIVE_ANSWERS = ("y", "yes")


class Operator(Protocol):
    """Interaction capability used by the runner."""

    def emit(self, message: str) -> None:
        """Show one line to the operator."""

    def prompt(self, message: str) -> str:
        """Read one line of plain input."""

    def prompt_secret(self, message: str) -> str:
        """Read one line without echo."""

    def confirm(self, message: str) -> bool:
        """Ask a yes/no question; only an affirmative answer returns True."""


def is_affirmative(answer: str) -> bool:
    return answer.strip().lower() in AFFIRMATIVE_ANSWERS


class ConsoleOperator:
    """
    Operator backed by stdin/stdout.

    EOF reads as an empty answer; Ctrl-C at any prompt declines the run.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout

    def emit(self, message: str) -> None:
        print(message, file=self.stream, flush=True)

    def prompt(self, message: str) -> str:
        try:
            return input(message)
        except EOFError:
            return ""
        except KeyboardInterrupt:
            print(file=self.stream)
            raise OperatorDeclined()

    def prompt_secret(self, message: str) -> str:
        try:
            return getpass.getpass(message)
        except EOFError:
            return ""
        except KeyboardInterrupt:
            print(file=self.stream)
            raise OperatorDeclined()

    def confirm(self, message: str) -> bool:
        answer = self.prompt(message)
        logger.debug(f"Operator answered {answer!r}")
        return is_affirmative(answer)
