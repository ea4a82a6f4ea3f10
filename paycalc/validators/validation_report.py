"""Validation report for collecting and formatting data-quality issues."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, List, Optional


class ValidationSeverity(IntEnum):
    """Severity levels for validation issues."""

    INFO = 1
    WARNING = 2
    ERROR = 3

    @classmethod
    def from_name(cls, name: str) -> "ValidationSeverity":
        """Look up a severity by case-insensitive name.

        Raises:
            ValueError: If the name is not a severity
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(
                f"Unknown severity: {name}. "
                f"Must be one of {', '.join(s.name.lower() for s in cls)}"
            ) from None


_HEADINGS = (
    (ValidationSeverity.ERROR, "ERRORS"),
    (ValidationSeverity.WARNING, "WARNINGS"),
    (ValidationSeverity.INFO, "INFO"),
)


@dataclass
class ValidationIssue:
    """A single data-quality issue on a timesheet entry.

    Attributes:
        severity: The severity level of the issue
        field: The entry field that has the issue (e.g. "clockIn")
        message: Human-readable description of the issue
        value: The raw value that caused the issue
        context: Where the issue was found (schedule, record, employee)
    """

    severity: ValidationSeverity
    field: str
    message: str
    value: Any
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        context_str = ""
        if self.context:
            context_parts = [f"{k}={v}" for k, v in self.context.items() if v]
            if context_parts:
                context_str = f" ({', '.join(context_parts)})"
        return f"[{self.severity.name}] {self.field}: {self.message}{context_str}"


class ValidationReport:
    """Collects validation issues and reports on them.

    Example:
        >>> report = ValidationReport()
        >>> report.add_error("clockIn", "Clock-in is missing", None)
        >>> report.add_warning("clockOut", "Clock-out is missing", None)
        >>> report.summary()
        '1 error(s), 1 warning(s)'
        >>> report.is_valid()
        False
    """

    def __init__(self) -> None:
        self.issues: List[ValidationIssue] = []

    def count(self, severity: ValidationSeverity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def error_count(self) -> int:
        return self.count(ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return self.count(ValidationSeverity.WARNING)

    @property
    def info_count(self) -> int:
        return self.count(ValidationSeverity.INFO)

    def is_valid(self) -> bool:
        """True when no errors are present; warnings do not count."""
        return self.error_count == 0

    def has_errors(self) -> bool:
        return self.error_count > 0

    def add(
        self,
        severity: ValidationSeverity,
        field: str,
        message: str,
        value: Any,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.issues.append(
            ValidationIssue(
                severity=severity,
                field=field,
                message=message,
                value=value,
                context=context,
            )
        )

    def add_error(
        self,
        field: str,
        message: str,
        value: Any,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.add(ValidationSeverity.ERROR, field, message, value, context)

    def add_warning(
        self,
        field: str,
        message: str,
        value: Any,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.add(ValidationSeverity.WARNING, field, message, value, context)

    def add_info(
        self,
        field: str,
        message: str,
        value: Any,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.add(ValidationSeverity.INFO, field, message, value, context)

    def get_issues(
        self, min_severity: ValidationSeverity = ValidationSeverity.INFO
    ) -> List[ValidationIssue]:
        """Issues at or above a severity, in the order they were found."""
        return [issue for issue in self.issues if issue.severity >= min_severity]

    def get_errors(self) -> List[ValidationIssue]:
        return self.get_issues(ValidationSeverity.ERROR)

    def get_warnings(self) -> List[ValidationIssue]:
        return [
            issue
            for issue in self.issues
            if issue.severity == ValidationSeverity.WARNING
        ]

    def merge(self, other: "ValidationReport") -> None:
        self.issues.extend(other.issues)

    def summary(self) -> str:
        """Counts of errors, warnings and info messages."""
        parts = []
        if self.error_count > 0:
            parts.append(f"{self.error_count} error(s)")
        if self.warning_count > 0:
            parts.append(f"{self.warning_count} warning(s)")
        if self.info_count > 0:
            parts.append(f"{self.info_count} info message(s)")

        if not parts:
            return "No issues found"
        return ", ".join(parts)

    def format(
        self, min_severity: ValidationSeverity = ValidationSeverity.INFO
    ) -> str:
        """Format the issues at or above ``min_severity`` for display.

        Issues are grouped by severity, most severe first.
        """
        shown = self.get_issues(min_severity)
        if not shown:
            return "Validation successful - no issues found"

        lines = [f"Validation Report - {self.summary()}", "=" * 60]
        for severity, heading in _HEADINGS:
            group = [issue for issue in shown if issue.severity == severity]
            if group:
                lines.append(f"\n{heading}:")
                lines.extend(f"  - {issue}" for issue in group)

        return "\n".join(lines)
