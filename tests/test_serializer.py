"""Tests for sqlbatch.batch.serializer."""

import csv
from datetime import datetime
from unittest.mock import patch

import pytest

from sqlbatch.batch import ExecutionResult, ResultSerializer, ScriptFile
from sqlbatch.batch.serializer import format_table
from sqlbatch.config import OutputFormat
from sqlbatch.errors import OutputWriteError


@pytest.fixture
def script(tmp_path):
    path = tmp_path / "report.sql"
    path.write_text("select 1 as x")
    return ScriptFile(path=path)


def single_value_result():
    return ExecutionResult(columns=["x"], rows=[{"x": 1}])


class TestCsvOutput:
    """Tests for csv artifacts."""

    def test_header_and_row(self, script, tmp_path):
        """Test select 1 as x produces header x and row 1."""
        target = ResultSerializer(OutputFormat.CSV).write(script, single_value_result())
        assert target == tmp_path / "report.csv"
        with open(target, newline="", encoding="utf-8") as f:
            assert list(csv.reader(f)) == [["x"], ["1"]]

    def test_nulls_and_quoting(self, script):
        """Test NULL becomes an empty field and commas are quoted."""
        result = ExecutionResult(
            columns=["name", "note"],
            rows=[{"name": "Smith, J", "note": None}],
        )
        target = ResultSerializer(OutputFormat.CSV).write(script, result)
        with open(target, newline="", encoding="utf-8") as f:
            assert list(csv.reader(f)) == [["name", "note"], ["Smith, J", ""]]
        assert '"Smith, J"' in target.read_text(encoding="utf-8")

    def test_no_result_set_writes_empty_file(self, script):
        """Test a script without a result set still gets an artifact."""
        target = ResultSerializer(OutputFormat.CSV).write(script, ExecutionResult())
        assert target.exists()
        assert target.read_text(encoding="utf-8") == ""

    def test_overwrites_existing_artifact(self, script):
        """Test a second write replaces the first."""
        serializer = ResultSerializer(OutputFormat.CSV)
        serializer.write(script, ExecutionResult(columns=["x"], rows=[{"x": 1}, {"x": 2}]))
        target = serializer.write(script, single_value_result())
        assert target.read_text(encoding="utf-8").splitlines() == ["x", "1"]


class TestTableOutput:
    """Tests for fixed-width table artifacts."""

    def test_header_and_value(self, script, tmp_path):
        """Test the table shows column x and value 1."""
        target = ResultSerializer(OutputFormat.TABLE).write(script, single_value_result())
        assert target == tmp_path / "report.txt"
        lines = target.read_text(encoding="utf-8").splitlines()
        assert lines[1] == "| x |"
        assert lines[3] == "| 1 |"
        assert lines[-1] == "(1 row affected)"

    def test_columns_padded_to_widest_value(self):
        """Test column widths follow the longest value."""
        table = format_table(
            ["id", "name"],
            [{"id": 1, "name": "alpha"}, {"id": 22, "name": None}],
        )
        lines = table.splitlines()
        assert lines[0] == "+----+-------+"
        assert lines[1] == "| id | name  |"
        assert lines[3] == "| 1  | alpha |"
        assert lines[4] == "| 22 |       |"
        assert lines[-1] == "(2 rows affected)"

    def test_line_breaks_escaped(self):
        """Test multi-line values stay on one table row."""
        table = format_table(["note"], [{"note": "line one\r\nline\ttwo"}])
        lines = table.splitlines()
        assert lines[3] == "| line one\\r\\nline\\ttwo |"
        assert len(lines) == 7
        assert len({len(line) for line in lines[:5]}) == 1

    def test_no_result_set(self):
        """Test scripts without a result set render a placeholder."""
        assert format_table([], []) == "No results"

    def test_renders_normalized_values(self):
        """Test non-string values are rendered with str()."""
        table = format_table(["at"], [{"at": datetime(2024, 1, 2).isoformat()}])
        assert "2024-01-02T00:00:00" in table


class TestWriteErrors:
    """Tests for write failures."""

    def test_os_error_becomes_output_write_error(self, script):
        """Test filesystem errors surface as OutputWriteError."""
        with patch("builtins.open", side_effect=PermissionError("denied")):
            with pytest.raises(OutputWriteError) as excinfo:
                ResultSerializer(OutputFormat.CSV).write(script, single_value_result())
        assert excinfo.value.artifact_path.name == "report.csv"
        assert "denied" in str(excinfo.value)
