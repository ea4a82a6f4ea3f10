"""Unit tests for the payroll aggregator.

The fixtures describe one week: John Doe works split shifts of 6 h and 5 h
on Monday on two schedules plus a 55 mile drive, and Ann Smith works 13 h on
Tuesday on a certified job.
"""

import datetime as dt
from decimal import Decimal

import pandas as pd
import pytest

from paycalc.aggregators.payroll_aggregator import (
    PayrollAggregator,
    PayrollReport,
    generate_weekly_matrix,
)
from paycalc.calculators.rules import PayRules
from paycalc.models.schedule import Schedule

JUNE_1 = dt.date(2025, 6, 1)
JUNE_2 = dt.date(2025, 6, 2)
JUNE_30 = dt.date(2025, 6, 30)

COMP_RATES = {"excavation": 4.25, "Paving": "3.10"}


@pytest.fixture
def aggregator():
    return PayrollAggregator()


class TestAggregateEntries:
    """Test attribution of every entry in a date range."""

    def test_entries_keep_their_schedule(
        self, aggregator, schedule_models, employee_map
    ):
        records = aggregator.aggregate_entries(
            schedule_models, employee_map, JUNE_2, JUNE_2
        )

        assert [r.entry.record_id for r in records] == ["ts-1", "ts-3", "ts-2"]
        assert [r.item for r in records] == ["Excavation", "Paving", "Excavation"]

    def test_split_shift_across_schedules(
        self, aggregator, schedule_models, employee_map
    ):
        records = aggregator.aggregate_entries(
            schedule_models, employee_map, JUNE_2, JUNE_2
        )
        second_shift = records[1].attribution

        assert second_shift.reg_hours == Decimal("2.00")
        assert second_shift.ot_hours == Decimal("3.00")
        assert second_shift.gross_pay == Decimal("260.00")

    def test_date_range_is_inclusive(self, aggregator, schedule_models, employee_map):
        records = aggregator.aggregate_entries(
            schedule_models, employee_map, dt.date(2025, 6, 3), dt.date(2025, 6, 3)
        )

        assert [r.entry.record_id for r in records] == ["ts-4"]

    def test_drive_can_be_excluded(self, aggregator, schedule_models, employee_map):
        records = aggregator.aggregate_entries(
            schedule_models, employee_map, JUNE_1, JUNE_30, include_drive=False
        )

        assert all(r.entry.is_site_time for r in records)
        assert len(records) == 3

    def test_unreadable_clock_in_is_skipped(self, aggregator, employee_map, caplog):
        schedule = Schedule.model_validate(
            {
                "_id": "sch-9",
                "timesheet": [
                    {"_id": "bad", "employee": "jdoe", "type": "Site Time"},
                    {
                        "_id": "good",
                        "employee": "jdoe",
                        "type": "Site Time",
                        "clockIn": "2025-06-02T07:00:00Z",
                        "clockOut": "2025-06-02T09:00:00Z",
                    },
                ],
            }
        )

        records = aggregator.aggregate_entries(
            [schedule], employee_map, JUNE_1, JUNE_30
        )

        assert [r.entry.record_id for r in records] == ["good"]
        assert "Skipped 1 entries" in caplog.text


class TestBuildPayrollReport:
    """Test the weekly payroll report."""

    @pytest.fixture
    def report(self, aggregator, schedule_models, employee_map) -> PayrollReport:
        return aggregator.build_payroll_report(
            schedule_models, employee_map, dt.date(2025, 6, 4)
        )

    def test_week_snaps_to_monday(self, report):
        assert report.week_start == JUNE_2
        assert report.week_end == dt.date(2025, 6, 8)

    def test_iso_week_number(self, report):
        assert report.week_number == 23

    def test_employees_sorted_by_name(self, report):
        assert [e.display_name for e in report.employees] == ["Ann Smith", "John Doe"]

    def test_seven_days_monday_first(self, report):
        john = report.get("jdoe@example.com")

        assert len(john.days) == 7
        assert [d.weekday for d in john.days] == [
            "Mon",
            "Tue",
            "Wed",
            "Thu",
            "Fri",
            "Sat",
            "Sun",
        ]

    def test_split_shift_day(self, report):
        monday = report.get("jdoe@example.com").days[0]

        assert monday.regular == Decimal("8.00")
        assert monday.overtime == Decimal("3.00")
        assert monday.doubletime == Decimal("0.00")
        assert monday.travel == Decimal("1.50")
        assert monday.amount == Decimal("545.00")
        assert monday.estimates == ["EST-1001", "EST-1002"]
        assert monday.certified

    def test_long_day_at_default_rate(self, report):
        ann = report.get("asmith@example.com")
        tuesday = ann.days[1]

        assert (tuesday.regular, tuesday.overtime, tuesday.doubletime) == (
            Decimal("8.00"),
            Decimal("4.00"),
            Decimal("1.00"),
        )
        assert tuesday.amount == Decimal("720.00")
        assert ann.site_rate == Decimal("45.00")
        assert ann.travel_rate == Decimal("33.75")

    def test_empty_days_are_zero(self, report):
        tuesday = report.get("jdoe@example.com").days[1]

        assert tuesday.total_hours == Decimal("0.00")
        assert tuesday.amount == Decimal("0.00")
        assert tuesday.estimates == []
        assert not tuesday.certified

    def test_employee_totals(self, report):
        john = report.get("JDoe@Example.com")

        assert john.site_rate == Decimal("40.00")
        assert john.travel_rate == Decimal("30.00")
        assert john.total_hours == Decimal("12.50")
        assert john.total_amount == Decimal("545.00")
        assert john.classification == "Laborer"
        assert john.is_certified

    def test_report_totals(self, report):
        assert report.total_amount == Decimal("1265.00")
        assert report.total_hours == Decimal("25.50")

    def test_employee_filter(self, aggregator, schedule_models, employee_map):
        report = aggregator.build_payroll_report(
            schedule_models, employee_map, JUNE_2, employee="JDOE@example.com"
        )

        assert [e.employee_key for e in report.employees] == ["jdoe@example.com"]

    def test_week_without_entries(self, aggregator, schedule_models, employee_map):
        report = aggregator.build_payroll_report(
            schedule_models, employee_map, dt.date(2025, 6, 9)
        )

        assert report.employees == []
        assert report.total_amount == Decimal("0.00")

    def test_unknown_employee_uses_identifier_as_name(
        self, aggregator, schedule_models
    ):
        report = aggregator.build_payroll_report(schedule_models, {}, JUNE_2)

        john = report.get("jdoe@example.com")
        assert john.display_name == "jdoe@example.com"
        assert john.days[0].amount == Decimal("613.13")

    def test_per_diem_added_to_amount(self, aggregator, employee_map):
        schedule = Schedule.model_validate(
            {
                "estimate": "EST-2001",
                "timesheet": [
                    {
                        "employee": "jdoe@example.com",
                        "type": "Site Time",
                        "clockIn": "2025-06-02T07:00:00Z",
                        "clockOut": "2025-06-02T15:00:00Z",
                        "perDiem": "35",
                    }
                ],
            }
        )

        report = aggregator.build_payroll_report([schedule], employee_map, JUNE_2)
        monday = report.get("jdoe@example.com").days[0]

        assert monday.per_diem == Decimal("35.00")
        assert monday.amount == Decimal("355.00")

    def test_rules_are_applied(self, schedule_models, employee_map):
        aggregator = PayrollAggregator(PayRules(regular_threshold=Decimal("10")))

        report = aggregator.build_payroll_report(schedule_models, employee_map, JUNE_2)
        monday = report.get("jdoe@example.com").days[0]

        assert monday.regular == Decimal("10.00")
        assert monday.overtime == Decimal("1.00")

    def test_same_input_same_report(self, aggregator, schedule_models, employee_map):
        first = aggregator.build_payroll_report(schedule_models, employee_map, JUNE_2)
        second = aggregator.build_payroll_report(schedule_models, employee_map, JUNE_2)

        assert first == second


class TestBuildWorkersCompReport:
    """Test the workers-comp summary."""

    @pytest.fixture
    def report(self, aggregator, schedule_models, employee_map):
        return aggregator.build_workers_comp_report(
            schedule_models, employee_map, JUNE_1, JUNE_30, comp_rates=COMP_RATES
        )

    def test_groups_sorted_by_item(self, report):
        assert [g.item for g in report.groups] == ["Excavation", "Paving"]

    def test_site_time_only_by_default(self, report):
        excavation = report.groups[0]

        assert not report.include_drive
        assert excavation.record_count == 1
        assert excavation.total_hours == Decimal("6.00")
        assert excavation.total_amount == Decimal("240.00")
        assert excavation.comp_cost == Decimal("10.20")

    def test_comp_cost_on_straight_time_wages(self, report):
        paving = report.groups[1]

        assert paving.rate_per_100 == Decimal("3.10")
        assert paving.record_count == 2
        assert paving.total_hours == Decimal("18.00")
        assert paving.total_amount == Decimal("980.00")
        assert paving.subject_wages == Decimal("785.00")
        assert paving.comp_cost == Decimal("24.34")

    def test_report_totals(self, report):
        assert report.total_amount == Decimal("1220.00")
        assert report.total_hours == Decimal("24.00")
        assert report.total_comp_cost == Decimal("34.54")
        assert report.overtime_hours == Decimal("7.00")
        assert report.personnel_count == 2

    def test_records_newest_first(self, report):
        assert [r.entry.record_id for r in report.records] == ["ts-4", "ts-3", "ts-1"]

    def test_employee_totals(self, report):
        totals = report.employee_totals()

        assert list(totals) == ["asmith@example.com", "jdoe@example.com"]
        assert totals["jdoe@example.com"] == Decimal("500.00")

    def test_include_drive(self, aggregator, schedule_models, employee_map):
        report = aggregator.build_workers_comp_report(
            schedule_models,
            employee_map,
            JUNE_1,
            JUNE_30,
            comp_rates=COMP_RATES,
            include_drive=True,
        )
        excavation = report.groups[0]

        assert excavation.record_count == 2
        assert excavation.total_hours == Decimal("7.50")
        assert excavation.total_amount == Decimal("285.00")
        assert excavation.comp_cost == Decimal("12.11")

    def test_missing_rates_cost_nothing(
        self, aggregator, schedule_models, employee_map
    ):
        report = aggregator.build_workers_comp_report(
            schedule_models, employee_map, JUNE_1, JUNE_30
        )

        assert all(g.rate_per_100 == Decimal("0.00") for g in report.groups)
        assert report.total_comp_cost == Decimal("0.00")
        assert report.total_amount == Decimal("1220.00")

    def test_uncategorized_item(self, aggregator, employee_map):
        schedule = Schedule.model_validate(
            {
                "timesheet": [
                    {
                        "employee": "jdoe@example.com",
                        "type": "Site Time",
                        "clockIn": "2025-06-02T07:00:00Z",
                        "clockOut": "2025-06-02T09:00:00Z",
                    }
                ]
            }
        )

        report = aggregator.build_workers_comp_report(
            [schedule], employee_map, JUNE_1, JUNE_30
        )

        assert [g.item for g in report.groups] == ["Uncategorized"]

    def test_empty_range(self, aggregator, schedule_models, employee_map):
        report = aggregator.build_workers_comp_report(
            schedule_models, employee_map, dt.date(2025, 7, 1), dt.date(2025, 7, 31)
        )

        assert report.groups == []
        assert report.records == []
        assert report.personnel_count == 0


class TestBuildFringeReport:
    """Test the fringe-benefits summary."""

    @pytest.fixture
    def report(self, aggregator, schedule_models, employee_map):
        return aggregator.build_fringe_report(
            schedule_models,
            employee_map,
            JUNE_1,
            JUNE_30,
            estimate_fringe={"EST-1002": "Union"},
        )

    def test_fringe_from_estimate_or_no(self, report):
        assert [g.fringe for g in report.groups] == ["No", "Union"]

    def test_group_totals(self, report):
        union = report.get("union")

        assert union.record_count == 2
        assert union.total_hours == Decimal("18.00")
        assert union.total_amount == Decimal("980.00")
        assert union.subject_wages == Decimal("785.00")

    def test_site_time_only(self, report):
        assert report.get("No").total_amount == Decimal("240.00")
        assert report.total_amount == Decimal("1220.00")
        assert report.total_hours == Decimal("24.00")
        assert report.subject_wages == Decimal("1025.00")

    def test_records_newest_first(self, report):
        assert [r.record.entry.record_id for r in report.records] == [
            "ts-4",
            "ts-3",
            "ts-1",
        ]
        assert [r.fringe for r in report.records] == ["Union", "Union", "No"]

    def test_schedule_fringe_wins_over_estimate(
        self, aggregator, sample_schedules, employee_map
    ):
        sample_schedules[1]["fringe"] = "Benefit Fund"
        schedules = [Schedule.model_validate(s) for s in sample_schedules]

        report = aggregator.build_fringe_report(
            schedules,
            employee_map,
            JUNE_1,
            JUNE_30,
            estimate_fringe={"EST-1002": "Union"},
        )

        assert [g.fringe for g in report.groups] == ["Benefit Fund", "No"]

    def test_employee_summary_highest_gross_first(self, report):
        ann, john = report.employee_summary()

        assert ann.employee_key == "asmith@example.com"
        assert (ann.regular, ann.overtime, ann.doubletime) == (
            Decimal("8.00"),
            Decimal("4.00"),
            Decimal("1.00"),
        )
        assert ann.doubletime_pay == Decimal("90.00")
        assert ann.gross_pay == Decimal("720.00")
        assert john.record_count == 2
        assert john.regular_pay == Decimal("320.00")
        assert john.overtime_pay == Decimal("180.00")

    def test_employee_summary_for_one_fringe(self, report):
        summaries = report.employee_summary("UNION")
        john = summaries[1]

        assert [s.employee_key for s in summaries] == [
            "asmith@example.com",
            "jdoe@example.com",
        ]
        assert john.record_count == 1
        assert john.gross_pay == Decimal("260.00")

    def test_empty_range(self, aggregator, schedule_models, employee_map):
        report = aggregator.build_fringe_report(
            schedule_models, employee_map, dt.date(2025, 7, 1), dt.date(2025, 7, 31)
        )

        assert report.groups == []
        assert report.total_amount == Decimal("0.00")
        assert report.get("No") is None


class TestGenerateWeeklyMatrix:
    """Test the employee-by-day hours matrix."""

    def test_matrix_layout(self, aggregator, schedule_models, employee_map):
        report = aggregator.build_payroll_report(schedule_models, employee_map, JUNE_2)

        matrix = generate_weekly_matrix(report)

        assert list(matrix.index) == ["Ann Smith", "John Doe"]
        assert list(matrix.columns) == [
            "Mon 06/02",
            "Tue 06/03",
            "Wed 06/04",
            "Thu 06/05",
            "Fri 06/06",
            "Sat 06/07",
            "Sun 06/08",
        ]
        assert matrix.loc["John Doe", "Mon 06/02"] == Decimal("12.50")
        assert matrix.loc["Ann Smith", "Tue 06/03"] == Decimal("13.00")
        assert matrix.loc["Ann Smith", "Mon 06/02"] == Decimal("0.00")

    def test_empty_report(self):
        matrix = generate_weekly_matrix(PayrollReport(JUNE_2, dt.date(2025, 6, 8)))

        assert isinstance(matrix, pd.DataFrame)
        assert matrix.empty
