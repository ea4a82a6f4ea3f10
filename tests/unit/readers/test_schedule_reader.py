"""Tests for reading schedule documents and comp rates."""

import json
from decimal import Decimal

import pytest

from paycalc.readers.schedule_reader import (
    ScheduleReadError,
    ScheduleReader,
    read_comp_rates,
)


@pytest.fixture
def reader():
    return ScheduleReader()


class TestScheduleReader:
    """Test reading schedules pages."""

    def test_read_schedules_page(self, reader, schedules_file):
        data = reader.read(schedules_file)

        assert [s.schedule_id for s in data.schedules] == ["sch-1", "sch-2"]
        assert sorted(data.employees) == ["asmith@example.com", "jdoe@example.com"]
        assert data.entry_count == 4
        assert data.skipped == 0

    def test_read_accepts_string_path(self, reader, schedules_file):
        assert len(reader.read(str(schedules_file)).schedules) == 2

    def test_bare_list_of_schedules(self, reader, sample_schedules):
        data = reader.parse(sample_schedules)

        assert len(data.schedules) == 2
        assert data.employees == {}

    def test_top_level_employees(self, reader, sample_schedules, sample_employees):
        data = reader.parse(
            {"schedules": sample_schedules, "employees": sample_employees}
        )

        assert data.employees["jdoe@example.com"].display_name == "John Doe"

    def test_invalid_schedules_skipped(self, reader, sample_schedules):
        data = reader.parse({"schedules": [sample_schedules[0], "oops"]})

        assert len(data.schedules) == 1
        assert data.skipped == 1

    def test_bad_entry_does_not_drop_schedule(self, reader, sample_schedules):
        schedule = dict(sample_schedules[0])
        schedule["timesheet"] = [
            sample_schedules[0]["timesheet"][0],
            None,
            {
                "_id": "ts-bad",
                "employee": "jdoe@example.com",
                "type": "Drive Time",
                "manualDistance": {"miles": 5},
            },
        ]

        data = reader.parse({"schedules": [schedule, sample_schedules[1]]})

        assert [s.schedule_id for s in data.schedules] == ["sch-1", "sch-2"]
        assert [e.record_id for e in data.schedules[0].timesheet] == ["ts-1"]
        assert data.skipped == 0
        assert data.skipped_entries == 2
        assert data.entry_count == 3

    def test_schedules_must_be_a_list(self, reader):
        with pytest.raises(ScheduleReadError, match="'schedules' must be a list"):
            reader.parse({"schedules": {"_id": "sch-1"}})

    def test_document_must_be_object_or_list(self, reader):
        with pytest.raises(ScheduleReadError, match="Expected a JSON object or list"):
            reader.parse("schedules")

    def test_missing_file(self, reader, tmp_path):
        with pytest.raises(ScheduleReadError, match="File not found"):
            reader.read(tmp_path / "missing.json")

    def test_invalid_json(self, reader, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ScheduleReadError, match="Invalid JSON"):
            reader.read(path)


class TestParseEmployees:
    """Test building the employee map."""

    def test_keys_are_lower_cased(self, reader):
        employees = reader.parse_employees([{"value": "JDoe@Example.com"}])

        assert list(employees) == ["jdoe@example.com"]

    def test_later_duplicates_win(self, reader):
        employees = reader.parse_employees(
            [
                {"value": "jdoe@example.com", "hourlyRateSITE": "40"},
                {"value": "JDOE@example.com", "hourlyRateSITE": "42"},
            ]
        )

        assert employees["jdoe@example.com"].hourly_rate_site == "42"

    def test_invalid_records_skipped(self, reader):
        employees = reader.parse_employees([{"label": "No id"}, {"value": "a@b.c"}])

        assert list(employees) == ["a@b.c"]

    def test_non_list_ignored(self, reader):
        assert reader.parse_employees({"value": "a@b.c"}) == {}


class TestParseEstimateFringe:
    """Test reading the fringe type of estimates."""

    def test_initial_data_estimates(self, reader, sample_schedules):
        data = reader.parse(
            {
                "schedules": sample_schedules,
                "initialData": {
                    "estimates": [
                        {"value": "EST-1002", "fringe": "Union"},
                        {"value": "EST-1001"},
                        {"fringe": "Orphan"},
                        "oops",
                    ]
                },
            }
        )

        assert data.estimate_fringe == {"EST-1002": "Union"}

    def test_top_level_estimates(self, reader):
        data = reader.parse(
            {"schedules": [], "estimates": [{"value": " EST-7 ", "fringe": "Yes"}]}
        )

        assert data.estimate_fringe == {"EST-7": "Yes"}

    def test_non_list_ignored(self, reader):
        assert reader.parse_estimate_fringe({"value": "EST-1"}) == {}


class TestReadCompRates:
    """Test reading workers-comp rate files."""

    def test_mapping(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text(json.dumps({"Excavation": 4.25, "Paving": "3.10"}))

        assert read_comp_rates(path) == {
            "excavation": Decimal("4.25"),
            "paving": Decimal("3.10"),
        }

    def test_constants_list(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text(
            json.dumps(
                [
                    {"description": "Excavation", "value": "4.25"},
                    {"description": "Paving", "value": 3.1},
                    {"description": "Office", "value": "n/a"},
                    {"value": "2.00"},
                    "stray",
                ]
            )
        )

        assert read_comp_rates(path) == {
            "excavation": Decimal("4.25"),
            "paving": Decimal("3.1"),
        }

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text("4.25")

        with pytest.raises(ScheduleReadError, match="comp rates"):
            read_comp_rates(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ScheduleReadError, match="File not found"):
            read_comp_rates(tmp_path / "rates.json")
