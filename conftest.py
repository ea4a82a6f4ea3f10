"""
Global pytest configuration and fixtures.
"""
import json
import pytest
from typing import Dict, Any, List
from paycalc.config import PayrollConfig, reload_config
from paycalc.config.logging_config import reset_logging
from paycalc.models import EmployeeProfile, Schedule


PAY_ENV_VARS = [
    'ENVIRONMENT', 'DEBUG', 'LOG_LEVEL', 'LOG_FORMAT', 'LOG_FILE',
    'DEFAULT_SITE_RATE', 'TRAVEL_RATE_FACTOR', 'SPEED_MPH', 'DRIVING_FACTOR',
    'EARTH_RADIUS_MI', 'REGULAR_HOURS_THRESHOLD', 'OVERTIME_HOURS_THRESHOLD',
    'MISSING_CLOCK_OUT_POLICY', 'DEFAULT_SHIFT_HOURS', 'ROUNDING_CUTOFF_DATE',
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Start every test from default settings and unconfigured logging."""
    for key in PAY_ENV_VARS:
        monkeypatch.delenv(key, raising=False)

    import paycalc.config.settings
    paycalc.config.settings._config = None

    yield

    paycalc.config.settings._config = None
    reset_logging()


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'ENVIRONMENT': 'testing',
        'DEBUG': 'true',
        'LOG_LEVEL': 'DEBUG',
        'DEFAULT_SITE_RATE': '50.00',
        'MISSING_CLOCK_OUT_POLICY': 'default_shift',
        'ROUNDING_CUTOFF_DATE': '2025-10-26',
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)

    yield test_env_vars


@pytest.fixture
def test_config(mock_env) -> PayrollConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture
def sample_employees() -> List[Dict[str, Any]]:
    """Employee directory records as returned by the backend."""
    return [
        {
            'value': 'jdoe@example.com',
            'label': 'John Doe',
            'hourlyRateSITE': '40',
            'hourlyRateDrive': '30',
            'classification': 'Laborer',
        },
        {
            'value': 'asmith@example.com',
            'label': 'Ann Smith',
        },
    ]


@pytest.fixture
def sample_schedules() -> List[Dict[str, Any]]:
    """Schedules for the week of Monday 2025-06-02.

    John Doe works 6 h and 5 h split shifts on Monday plus a 55 mile
    drive; Ann Smith works a 13 h day on Tuesday on a certified job.
    """
    return [
        {
            '_id': 'sch-1',
            'estimate': 'EST-1001',
            'fromDate': '2025-06-02T07:00:00.000Z',
            'certifiedPayroll': 'No',
            'item': 'Excavation',
            'title': 'Main St Trench',
            'timesheet': [
                {
                    '_id': 'ts-1',
                    'employee': 'jdoe@example.com',
                    'type': 'Site Time',
                    'clockIn': '2025-06-02T06:00:00.000Z',
                    'clockOut': '2025-06-02T12:00:00.000Z',
                },
                {
                    '_id': 'ts-2',
                    'employee': 'jdoe@example.com',
                    'type': 'Drive Time',
                    'clockIn': '2025-06-02T12:00:00.000Z',
                    'manualDistance': '55',
                },
            ],
        },
        {
            '_id': 'sch-2',
            'estimate': 'EST-1002',
            'fromDate': '2025-06-02T13:00:00.000Z',
            'certifiedPayroll': 'Yes',
            'item': 'Paving',
            'title': 'Oak Ave Overlay',
            'timesheet': [
                {
                    '_id': 'ts-3',
                    'employee': 'JDoe@example.com',
                    'type': 'Site Time',
                    'clockIn': '2025-06-02T13:00:00.000Z',
                    'clockOut': '2025-06-02T18:00:00.000Z',
                },
                {
                    '_id': 'ts-4',
                    'employee': 'asmith@example.com',
                    'type': 'Site Time',
                    'clockIn': '2025-06-03T05:00:00.000Z',
                    'clockOut': '2025-06-03T18:00:00.000Z',
                },
            ],
        },
    ]


@pytest.fixture
def schedule_models(sample_schedules) -> List[Schedule]:
    return [Schedule.model_validate(s) for s in sample_schedules]


@pytest.fixture
def employee_map(sample_employees) -> Dict[str, EmployeeProfile]:
    profiles = [EmployeeProfile.model_validate(e) for e in sample_employees]
    return {p.key: p for p in profiles}


@pytest.fixture
def schedules_file(tmp_path, sample_schedules, sample_employees):
    """Schedules-page JSON document written to a temporary file."""
    path = tmp_path / 'schedules.json'
    path.write_text(json.dumps({
        'schedules': sample_schedules,
        'initialData': {'employees': sample_employees},
    }))
    return path


# Pytest configuration for different test types
def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "cli: mark test as exercising the command line"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        # Add unit marker for tests in tests/unit/
        if "tests/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "tests/unit/cli/" in str(item.fspath):
            item.add_marker(pytest.mark.cli)
