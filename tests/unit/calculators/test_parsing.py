"""Unit tests for the lenient field parsing helpers."""

from decimal import Decimal

from paycalc.calculators.parsing import parse_addon_quantity, parse_number, to_decimal


class TestParseNumber:
    """Test reading the leading number of free-text fields."""

    def test_plain_number_string(self):
        assert parse_number("50") == 50.0

    def test_number_with_unit(self):
        """Units after the number are ignored."""
        assert parse_number("12.5 mi") == 12.5

    def test_leading_whitespace_and_sign(self):
        assert parse_number("  -3.25") == -3.25

    def test_numeric_types_pass_through(self):
        assert parse_number(7) == 7.0
        assert parse_number(2.5) == 2.5

    def test_text_is_not_a_number(self):
        assert parse_number("abc") is None
        assert parse_number("") is None

    def test_none_and_booleans_are_not_numbers(self):
        assert parse_number(None) is None
        assert parse_number(True) is None

    def test_non_finite_values_rejected(self):
        assert parse_number(float("nan")) is None
        assert parse_number(float("inf")) is None


class TestToDecimal:
    """Test float to Decimal conversion."""

    def test_uses_shortest_repr(self):
        assert to_decimal(0.1) == Decimal("0.1")
        assert str(to_decimal(55.0)) == "55.0"


class TestParseAddonQuantity:
    """Test reading the quantity of drive add-ons."""

    def test_display_string_quantity(self):
        assert parse_addon_quantity("1.00 hrs (2 qty)") == Decimal("2")

    def test_quantity_without_space(self):
        assert parse_addon_quantity("0.75 hrs (3qty)") == Decimal("3")

    def test_quantity_case_insensitive(self):
        assert parse_addon_quantity("0.50 hrs (1 QTY)") == Decimal("1")

    def test_boolean_flag_counts_as_one(self):
        assert parse_addon_quantity(True) == Decimal("1")
        assert parse_addon_quantity("true") == Decimal("1")
        assert parse_addon_quantity("Yes") == Decimal("1")

    def test_absent_or_negative_flag_is_zero(self):
        assert parse_addon_quantity(None) == Decimal("0")
        assert parse_addon_quantity(False) == Decimal("0")
        assert parse_addon_quantity("no") == Decimal("0")
        assert parse_addon_quantity("1.00 hrs") == Decimal("0")
