"""Tests for GST normalisation and the GST position."""

import pytest

from feaso.calculations.gst import (
    calculate_gst,
    calculate_gst_position,
    margin_scheme_gst,
    normalize_to_ex_gst,
)
from feaso.models import GstStatus, LandLot, SalesUnit, SaleStatus


class TestCalculateGst:
    """Tests for GST on ex-GST amounts."""

    @pytest.mark.parametrize("amount", [0, 1, 99, 100_00, 123_456_789, -5_000])
    def test_exempt_is_always_zero(self, amount):
        """Exempt amounts never attract GST."""
        assert calculate_gst(amount, GstStatus.EXEMPT) == 0

    def test_ten_percent_of_exclusive_amount(self):
        assert calculate_gst(100_00, GstStatus.EXCLUSIVE) == 10_00

    def test_rounds_half_up_to_the_cent(self):
        """0.5 cent of GST rounds up, not to even."""
        assert calculate_gst(5, GstStatus.EXCLUSIVE) == 1
        assert calculate_gst(25, GstStatus.EXCLUSIVE) == 3


class TestNormalizeToExGst:
    """Tests for converting entered prices to ex-GST."""

    def test_inclusive_extracts_embedded_gst(self):
        """$110.00 inclusive is $100.00 ex GST."""
        assert normalize_to_ex_gst(110_00, GstStatus.INCLUSIVE) == 100_00

    def test_inclusive_large_price(self):
        assert normalize_to_ex_gst(330_000_000, GstStatus.INCLUSIVE) == 300_000_000

    def test_exclusive_and_exempt_unchanged(self):
        assert normalize_to_ex_gst(12_345, GstStatus.EXCLUSIVE) == 12_345
        assert normalize_to_ex_gst(12_345, GstStatus.EXEMPT) == 12_345

    def test_inclusive_rounds_to_whole_cents(self):
        """$1.00 inclusive is 90.909c ex GST, rounded to 91c."""
        assert normalize_to_ex_gst(100, GstStatus.INCLUSIVE) == 91

    def test_unknown_status_raises(self):
        with pytest.raises(ValueError):
            normalize_to_ex_gst(100, "inclusive")


class TestMarginScheme:
    """Tests for margin scheme GST."""

    def test_one_eleventh_of_margin(self):
        assert margin_scheme_gst(330_000_000, 220_000_000) == 10_000_000

    def test_no_gst_without_margin(self):
        assert margin_scheme_gst(100, 100) == 0
        assert margin_scheme_gst(100, 200) == 0


class TestGstPosition:
    """Tests for the scenario GST position."""

    def test_standard_sale_and_costs(self):
        """GST on sales less input tax credits."""
        units = [SalesUnit(sale_price=330_000_000, gst_status=GstStatus.INCLUSIVE)]
        lots = [LandLot(purchase_price=100_000_000)]
        costs = [(200_000_000, GstStatus.EXCLUSIVE), (1_000_000, GstStatus.EXEMPT)]

        position = calculate_gst_position(units, lots, costs)

        assert position.gst_on_sales == 30_000_000
        assert position.input_tax_credits == 20_000_000
        assert position.land_gst_credit == 0
        assert position.net_gst_payable == 10_000_000
        assert not position.margin_scheme_applied

    def test_margin_scheme_lot(self):
        """Margin scheme GST is one eleventh of sales less the land price."""
        units = [SalesUnit(sale_price=330_000_000, gst_status=GstStatus.INCLUSIVE)]
        lots = [LandLot(purchase_price=100_000_000, margin_scheme_applied=True)]

        position = calculate_gst_position(units, lots, [])

        assert position.margin_scheme_applied
        assert position.gst_on_sales == 20_909_091

    def test_recoverable_land_gst(self):
        """Registered buyer claims the GST embedded in an inclusive land price."""
        lots = [
            LandLot(
                purchase_price=110_000_000,
                entity_gst_registered=True,
                purchase_price_includes_gst=True,
            )
        ]

        position = calculate_gst_position([], lots, [])

        assert position.land_gst_credit == 10_000_000
        assert position.net_gst_payable == -10_000_000

    def test_withdrawn_and_exempt_units_ignored(self):
        units = [
            SalesUnit(sale_price=110_00, gst_status=GstStatus.INCLUSIVE, status=SaleStatus.WITHDRAWN),
            SalesUnit(sale_price=110_00, gst_status=GstStatus.EXEMPT),
        ]
        assert calculate_gst_position(units, [], []).gst_on_sales == 0
