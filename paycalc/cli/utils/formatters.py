"""Output formatting utilities for CLI."""

from decimal import Decimal
from typing import List, Sequence

import click


def format_success(message: str) -> str:
    """Format a success message in green."""
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message in red."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    """Format a warning message in yellow."""
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    """Format an info message in blue."""
    return click.style(f"ℹ {message}", fg="blue")


def format_hours(hours: Decimal) -> str:
    """Hours with two decimals; zero shows as a dash.

    Example:
        >>> format_hours(Decimal("7.5"))
        '7.50'
        >>> format_hours(Decimal("0.00"))
        '-'
    """
    if not hours:
        return "-"
    return f"{hours:.2f}"


def format_money(amount: Decimal) -> str:
    """Dollar amount with thousands separator.

    Example:
        >>> format_money(Decimal("1512"))
        '$1,512.00'
    """
    return f"${amount:,.2f}"


def format_table(
    headers: Sequence[str], rows: List[Sequence[object]], max_width: int = 40
) -> str:
    """Format data as a plain text table.

    Args:
        headers: Column headers
        rows: Data rows (each row is a sequence of cell values)
        max_width: Maximum width of a column; longer cells are truncated

    Returns:
        Formatted table as a string
    """
    if not headers:
        return ""

    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(col_widths)]):
            col_widths[i] = max(col_widths[i], len(str(cell)))
    col_widths = [min(w, max_width) for w in col_widths]

    def render(cells: Sequence[object]) -> str:
        return (
            "|"
            + "|".join(
                f" {str(cell)[:width]:<{width}} "
                for cell, width in zip(cells, col_widths)
            )
            + "|"
        )

    separator = "+" + "+".join("-" * (w + 2) for w in col_widths) + "+"
    table_lines = [separator, render(headers), separator]
    if rows:
        table_lines.extend(render(row) for row in rows)
        table_lines.append(separator)

    return "\n".join(table_lines)
