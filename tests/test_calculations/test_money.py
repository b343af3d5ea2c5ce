"""Tests for cent rounding and formatting."""

from feaso.calculations.money import (
    cents_to_dollars,
    dollars_to_cents,
    format_currency,
    format_pct,
    round_half_up,
)


class TestRoundHalfUp:
    def test_halves_round_away_from_zero(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(-2.5) == -3

    def test_absorbs_float_noise(self):
        assert round_half_up(10000.000000000002) == 10000

    def test_ints_pass_through(self):
        assert round_half_up(7) == 7


class TestConversions:
    def test_dollars_to_cents(self):
        assert dollars_to_cents(19.99) == 1999
        assert dollars_to_cents(1_950_000) == 195_000_000

    def test_cents_to_dollars(self):
        assert cents_to_dollars(195_000_000) == 1_950_000


class TestFormatting:
    def test_format_currency(self):
        assert format_currency(195_000_000) == "$1,950,000"
        assert format_currency(-10_050) == "-$101"
        assert format_currency(0) == "$0"

    def test_format_pct(self):
        assert format_pct(33.333) == "33.3%"
        assert format_pct(12.5, decimals=2) == "12.50%"

    def test_undefined_pct_is_na(self):
        assert format_pct(None) == "N/A"
