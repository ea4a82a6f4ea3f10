"""Unit tests for the validate command."""

import json

import pytest
from click.testing import CliRunner

from paycalc.cli import cli


def write_schedules(tmp_path, entries):
    path = tmp_path / "schedules.json"
    path.write_text(
        json.dumps(
            [
                {
                    "_id": "sch-9",
                    "fromDate": "2025-06-02T07:00:00.000Z",
                    "timesheet": entries,
                }
            ]
        )
    )
    return path


def site_entry(**fields):
    entry = {
        "_id": "ts-90",
        "employee": "jdoe@example.com",
        "type": "Site Time",
        "clockIn": "2025-06-02T07:00:00.000Z",
        "clockOut": "2025-06-02T15:00:00.000Z",
    }
    entry.update(fields)
    return entry


class TestValidateCommand:
    """Test suite for validate command."""

    @pytest.fixture
    def runner(self):
        """Create a Click CLI test runner."""
        return CliRunner()

    def test_clean_data(self, runner, schedules_file):
        result = runner.invoke(cli, ["validate", "--input", str(schedules_file)])

        assert result.exit_code == 0, result.output
        assert "Validation Summary" in result.output
        assert "Schedules:        2" in result.output
        assert "Entries:          4" in result.output
        assert "Validation passed! No issues found." in result.output

    def test_errors_fail_validation(self, runner, tmp_path):
        path = write_schedules(tmp_path, [site_entry(clockIn=None), site_entry()])

        result = runner.invoke(cli, ["validate", "--input", str(path)])

        assert result.exit_code == 3
        assert "ERROR (1):" in result.output
        assert "clockIn: Clock-in is missing" in result.output
        assert "Validation failed with 1 error(s)" in result.output

    def test_warnings_pass_validation(self, runner, tmp_path):
        path = write_schedules(tmp_path, [site_entry(clockOut=None)])

        result = runner.invoke(cli, ["validate", "--input", str(path)])

        assert result.exit_code == 0, result.output
        assert "Issues (showing" not in result.output
        assert "Validation completed with 1 warning(s)" in result.output

    def test_severity_shows_warnings(self, runner, tmp_path):
        path = write_schedules(tmp_path, [site_entry(clockOut=None)])

        result = runner.invoke(
            cli, ["validate", "--input", str(path), "--severity", "warning"]
        )

        assert result.exit_code == 0, result.output
        assert "Issues (showing WARNING and above):" in result.output
        assert "WARNING (1):" in result.output
        assert "clockOut: Clock-out is missing" in result.output

    def test_invalid_severity(self, runner, schedules_file):
        result = runner.invoke(
            cli, ["validate", "--input", str(schedules_file), "--severity", "fatal"]
        )

        assert result.exit_code == 2

    def test_invalid_json(self, runner, tmp_path):
        path = tmp_path / "schedules.json"
        path.write_text("{not json")

        result = runner.invoke(cli, ["validate", "--input", str(path)])

        assert result.exit_code == 2
        assert "Invalid JSON" in result.output
