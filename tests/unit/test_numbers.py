"""Unit tests for locale-aware number parsing."""

import pytest

from fundfolio.core.numbers import parse_locale_number


class TestParseLocaleNumber:
    """Test European / US disambiguation."""

    def test_european_format(self) -> None:
        """Comma after dot is the decimal separator."""
        assert parse_locale_number("1.234,56") == pytest.approx(1234.56)

    def test_us_format(self) -> None:
        """Dot after comma is the decimal separator."""
        assert parse_locale_number("1,234.56") == pytest.approx(1234.56)

    def test_comma_only_is_decimal(self) -> None:
        """A lone comma is read as the decimal separator."""
        assert parse_locale_number("1234,5") == pytest.approx(1234.5)

    def test_plain_integer(self) -> None:
        """Digits without separators parse directly."""
        assert parse_locale_number("42") == 42.0

    def test_currency_symbols_and_spaces_stripped(self) -> None:
        """Currency symbols and whitespace are ignored."""
        assert parse_locale_number("1.200,50 €") == pytest.approx(1200.50)
        assert parse_locale_number("$ 1,200.50") == pytest.approx(1200.50)

    def test_negative_number(self) -> None:
        """Minus sign is preserved."""
        assert parse_locale_number("-12,5") == pytest.approx(-12.5)

    def test_repeated_separator_reads_leading_number(self) -> None:
        """Only the leading well-formed number is read."""
        assert parse_locale_number("1,234,567") == pytest.approx(1.234)

    @pytest.mark.parametrize("text", ["", "abc", "-", "€", "   "])
    def test_unparseable_returns_zero(self, text: str) -> None:
        """Empty or non-numeric text yields 0."""
        assert parse_locale_number(text) == 0.0

    def test_none_returns_zero(self) -> None:
        """None yields 0 instead of raising."""
        assert parse_locale_number(None) == 0.0

    def test_numbers_pass_through(self) -> None:
        """Numeric input is returned as float."""
        assert parse_locale_number(3) == 3.0
        assert parse_locale_number(2.5) == 2.5
        assert parse_locale_number(float("nan")) == 0.0
