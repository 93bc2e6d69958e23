"""Shared fakes: an in-memory database, connection/cursor and operator."""

from pathlib import Path

import pytest

from sqlbatch.config import OutputFormat, RunConfig
from sqlbatch.errors import DatabaseConnectionError


class FakeCursor:
    """Mimics the pyodbc cursor surface the runner uses."""

    def __init__(self, database):
        self.database = database
        self._result_sets = []
        self.description = None
        self.closed = False

    def execute(self, sql):
        self.database.executed.append(sql)
        outcome = self.database.responses.get(sql.strip(), [])
        if isinstance(outcome, Exception):
            raise outcome
        self._result_sets = list(outcome)
        self._load_next()
        return self

    def _load_next(self):
        if not self._result_sets:
            self.description = None
            self._rows = []
            return
        result_set = self._result_sets.pop(0)
        if isinstance(result_set, Exception):
            raise result_set
        columns, rows = result_set
        self.description = (
            [(name, str, None, None, None, None, True) for name in columns]
            if columns is not None else None
        )
        self._rows = list(rows)

    def fetchall(self):
        rows, self._rows = self._rows, []
        return rows

    def nextset(self):
        if not self._result_sets:
            return False
        self._load_next()
        return True

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, database):
        self.database = database
        self.closed = False
        self.cursors = []

    def cursor(self):
        cursor = FakeCursor(self.database)
        self.cursors.append(cursor)
        return cursor

    def close(self):
        self.closed = True


class FakeDatabase:
    """
    Responses map stripped SQL text to a list of result sets
    (columns, rows), or to an exception raised by execute().
    """

    def __init__(self, responses=None, refuse=False):
        self.responses = {"SELECT @@SERVERNAME": [(["name"], [("SQL01",)])]}
        self.responses.update(responses or {})
        self.refuse = refuse
        self.connections = []
        self.executed = []

    def connect(self, config):
        if self.refuse:
            raise DatabaseConnectionError("Cannot connect: refused", config.describe())
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn

    @property
    def scripts_executed(self):
        return [sql for sql in self.executed if sql != "SELECT @@SERVERNAME"]


class FakeOperator:
    """Scripted operator that records everything shown to it."""

    def __init__(self, answers=None, secret="s3cret"):
        self.answers = list(answers or [])
        self.secret = secret
        self.messages = []
        self.prompts = []

    def emit(self, message):
        self.messages.append(message)

    def prompt(self, message):
        self.prompts.append(message)
        return self.answers.pop(0) if self.answers else ""

    def prompt_secret(self, message):
        self.prompts.append(message)
        return self.secret

    def confirm(self, message):
        return self.prompt(message).strip().lower() in ("y", "yes")


@pytest.fixture
def script_dir(tmp_path):
    """Folder with three scripts plus files that must be ignored."""
    (tmp_path / "b.sql").write_text("select 2 as y")
    (tmp_path / "a.sql").write_text("select 1 as x")
    (tmp_path / "c.SQL").write_text("select 3 as z")
    (tmp_path / "notes.md").write_text("not a script")
    (tmp_path / "nested.sql").mkdir()
    return tmp_path


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        values = {
            "script_dir": tmp_path,
            "server": "db01\\SQLEXPRESS",
            "database": "Sales",
            "output_format": OutputFormat.CSV,
        }
        values.update(overrides)
        return RunConfig(**values)
    return _make


@pytest.fixture
def database():
    return FakeDatabase({
        "select 1 as x": [(["x"], [(1,)])],
        "select 2 as y": [(["y"], [(2,)])],
        "select 3 as z": [(["z"], [(3,)])],
    })


@pytest.fixture
def artifact_names():
    """Names of csv/txt artifacts in a folder."""
    def _names(folder: Path):
        return sorted(p.name for p in folder.iterdir() if p.suffix in (".csv", ".txt"))
    return _names


@pytest.fixture
def make_operator():
    return FakeOperator


@pytest.fixture
def make_database():
    return FakeDatabase
