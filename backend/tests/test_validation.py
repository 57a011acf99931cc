# Overview: Pytest coverage for request value coercion.

from decimal import Decimal

import pytest

from pos_backend.services.errors import InvalidInput
from pos_backend.validation import clean_text, coerce_choice, coerce_decimal, coerce_int, is_missing


class TestIsMissing:

    @pytest.mark.parametrize("value", [None, "", "   ", 0, 0.0, Decimal("0"), False])
    def test_missing(self, value):
        assert is_missing(value)

    @pytest.mark.parametrize("value", [1, -1, "x", Decimal("0.01"), [], {}])
    def test_present(self, value):
        assert not is_missing(value)


class TestCoerceInt:

    @pytest.mark.parametrize("value,expected", [(5, 5), (-3, -3), ("42", 42), (" -7 ", -7)])
    def test_valid(self, value, expected):
        assert coerce_int(value, "qty") == expected

    @pytest.mark.parametrize("value,message", [
        (1.5, "qty must be an integer, not a decimal"),
        ("1.5", "qty must be an integer (no decimals)"),
        ("1e3", "qty must be a plain integer (scientific notation not allowed)"),
        ("abc", "qty must be an integer"),
        ("", "qty must be an integer"),
        (True, "qty must be an integer"),
        (None, "qty must be an integer"),
    ])
    def test_invalid(self, value, message):
        with pytest.raises(InvalidInput) as excinfo:
            coerce_int(value, "qty")
        assert str(excinfo.value) == message


class TestCoerceDecimal:

    @pytest.mark.parametrize("value,expected", [
        (1.5, Decimal("1.5")),
        (0.1, Decimal("0.1")),
        (3, Decimal("3")),
        ("2.25", Decimal("2.25")),
        (Decimal("8.50"), Decimal("8.50")),
    ])
    def test_valid(self, value, expected):
        assert coerce_decimal(value, "price") == expected

    @pytest.mark.parametrize("value", [True, "abc", None, [1], "NaN", float("inf")])
    def test_invalid(self, value):
        with pytest.raises(InvalidInput):
            coerce_decimal(value, "price")


class TestCoerceChoice:

    def test_valid(self):
        assert coerce_choice("card", "payment_method", ("cash", "card")) == "card"

    def test_two_choices_message(self):
        with pytest.raises(InvalidInput, match="payment_method must be 'cash' or 'card'"):
            coerce_choice("cheque", "payment_method", ("cash", "card"))

    def test_three_choices_message(self):
        with pytest.raises(InvalidInput, match="kind must be 'a', 'b', or 'c'"):
            coerce_choice(None, "kind", ("a", "b", "c"))


class TestCleanText:

    def test_strips_and_blanks_to_none(self):
        assert clean_text("  hi ", "reason") == "hi"
        assert clean_text("   ", "reason") is None
        assert clean_text(None, "reason") is None

    def test_max_length(self):
        with pytest.raises(InvalidInput, match="payment_id exceeds max length 3"):
            clean_text("abcd", "payment_id", max_length=3)
