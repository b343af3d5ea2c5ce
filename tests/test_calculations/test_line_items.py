"""Tests for line-item resolution and the resolution context."""

from dataclasses import replace

import pytest

from feaso.calculations.line_items import (
    ResolveContext,
    build_resolve_context,
    get_land_cost,
    get_lot_count,
    occurrence_months,
    resolve_line_item_amount,
    total_line_item_amount,
)
from feaso.models import (
    FeasibilityState,
    Frequency,
    GstStatus,
    LandLot,
    LineItem,
    LineItemSection,
    RateType,
    Scenario,
)


CONTEXT = ResolveContext(
    total_land_size=800,
    lot_count=4,
    construction_total=200_000_000,
    grv_total=330_000_000,
    project_costs_total=300_000_000,
    project_length_months=12,
)

# (rate type, rate, expected amount for quantity 1 against CONTEXT)
RATE_CASES = [
    (RateType.FIXED_AMOUNT, 500_000, 500_000),
    (RateType.PER_M2, 150, 120_000),
    (RateType.PER_LOT, 1_000_000, 4_000_000),
    (RateType.PERCENT_OF_CONSTRUCTION, 5, 10_000_000),
    (RateType.PERCENT_OF_REVENUE, 2, 6_600_000),
    (RateType.PERCENT_OF_PROJECT_COSTS, 10, 30_000_000),
]


class TestResolveLineItemAmount:
    """Tests for each rate type."""

    @pytest.mark.parametrize("rate_type,rate,expected", RATE_CASES)
    def test_rate_types(self, rate_type, rate, expected):
        item = LineItem(rate_type=rate_type, rate=rate)
        assert resolve_line_item_amount(item, CONTEXT) == expected

    @pytest.mark.parametrize("rate_type,rate,expected", RATE_CASES)
    @pytest.mark.parametrize("quantity", [0, 2, 3, 7])
    def test_linear_in_quantity(self, rate_type, rate, expected, quantity):
        """Resolving quantity k equals k times resolving quantity 1."""
        single = resolve_line_item_amount(LineItem(rate_type=rate_type, rate=rate), CONTEXT)
        scaled = resolve_line_item_amount(
            LineItem(rate_type=rate_type, rate=rate, quantity=quantity), CONTEXT
        )
        assert scaled == quantity * single

    @pytest.mark.parametrize(
        "item,context",
        [
            (LineItem(rate_type=RateType.PER_M2, rate=3), ResolveContext(total_land_size=800.5)),
            (LineItem(rate=5, gst_status=GstStatus.INCLUSIVE), CONTEXT),
            (LineItem(rate_type=RateType.PER_LOT, rate=2_000_000, gst_status=GstStatus.INCLUSIVE),
             ResolveContext(lot_count=3)),
        ],
    )
    @pytest.mark.parametrize("quantity", [2, 3, 11])
    def test_linear_in_quantity_after_rounding(self, item, context, quantity):
        """Fractional totals and inclusive GST still scale exactly with quantity."""
        single = resolve_line_item_amount(item, context)
        scaled = resolve_line_item_amount(replace(item, quantity=quantity), context)
        assert scaled == quantity * single

    def test_fractional_land_area(self):
        item = LineItem(rate_type=RateType.PER_M2, rate=3, quantity=2)
        assert resolve_line_item_amount(item, ResolveContext(total_land_size=800.5)) == 4_804

    def test_fractional_quantity_rounds_once(self):
        item = LineItem(rate=5, quantity=2.5, gst_status=GstStatus.INCLUSIVE)
        assert resolve_line_item_amount(item, CONTEXT) == 12

    def test_zero_context_total_resolves_to_zero(self):
        empty = ResolveContext()
        for rate_type in (
            RateType.PER_M2,
            RateType.PERCENT_OF_CONSTRUCTION,
            RateType.PERCENT_OF_REVENUE,
            RateType.PERCENT_OF_PROJECT_COSTS,
        ):
            assert resolve_line_item_amount(LineItem(rate_type=rate_type, rate=10), empty) == 0

    def test_per_lot_counts_at_least_one_lot(self):
        item = LineItem(rate_type=RateType.PER_LOT, rate=1_000)
        assert resolve_line_item_amount(item, ResolveContext(lot_count=0)) == 1_000

    def test_inclusive_item_normalized(self):
        item = LineItem(rate=110_00, gst_status=GstStatus.INCLUSIVE)
        assert resolve_line_item_amount(item, CONTEXT) == 100_00


class TestOccurrences:
    """Tests for recurrence months."""

    def test_once_defaults_to_month_one(self):
        assert occurrence_months(LineItem(), 12) == [1]

    def test_once_in_start_month(self):
        assert occurrence_months(LineItem(cashflow_start_month=5), 12) == [5]

    def test_start_clamped_into_project(self):
        assert occurrence_months(LineItem(cashflow_start_month=20), 12) == [12]
        assert occurrence_months(LineItem(cashflow_start_month=-3), 12) == [1]

    def test_monthly_until_project_end(self):
        item = LineItem(frequency=Frequency.MONTHLY, cashflow_start_month=3)
        assert occurrence_months(item, 12) == list(range(3, 13))

    def test_quarterly_cadence(self):
        item = LineItem(frequency=Frequency.QUARTERLY, cashflow_start_month=2)
        assert occurrence_months(item, 12) == [2, 5, 8, 11]

    def test_annual_and_semi_annual(self):
        assert occurrence_months(LineItem(frequency=Frequency.ANNUALLY), 24) == [1, 13]
        assert occurrence_months(LineItem(frequency=Frequency.SEMI_ANNUALLY), 12) == [1, 7]

    def test_total_is_amount_times_occurrences(self):
        item = LineItem(rate=100_000, frequency=Frequency.MONTHLY)
        assert total_line_item_amount(item, CONTEXT) == 1_200_000


class TestBuildResolveContext:
    """Tests for the three-pass context."""

    def _state(self, *items, lots=None):
        return FeasibilityState(
            scenario=Scenario(project_length_months=12),
            land_lots=lots if lots is not None else (LandLot(land_size_m2=800, purchase_price=100_000_000),),
            line_items=items,
        )

    def test_construction_total_from_flat_items_only(self):
        state = self._state(
            LineItem(section=LineItemSection.CONSTRUCTION, rate=200_000_000),
            LineItem(
                section=LineItemSection.CONSTRUCTION,
                rate_type=RateType.PERCENT_OF_CONSTRUCTION,
                rate=10,
            ),
        )
        assert build_resolve_context(state).construction_total == 200_000_000

    def test_project_costs_total_excludes_funding_and_pct_project_items(self):
        state = self._state(
            LineItem(section=LineItemSection.CONSTRUCTION, rate=200_000_000),
            LineItem(
                section=LineItemSection.CONTINGENCY,
                rate_type=RateType.PERCENT_OF_CONSTRUCTION,
                rate=5,
            ),
            LineItem(
                section=LineItemSection.DEV_FEES,
                rate_type=RateType.PERCENT_OF_PROJECT_COSTS,
                rate=1,
            ),
            LineItem(section=LineItemSection.FACILITY_FEES, rate=9_999_999),
        )
        context = build_resolve_context(state)

        # land 100M + construction 200M + contingency 10M
        assert context.project_costs_total == 310_000_000
        dev_fee = state.line_items[2]
        assert resolve_line_item_amount(dev_fee, context) == 3_100_000

    def test_lot_count_defaults_to_one(self):
        assert get_lot_count(self._state(lots=())) == 1
        assert build_resolve_context(self._state(lots=())).total_land_size == 0


class TestLandCost:
    def test_gross_price_when_not_recoverable(self):
        state = FeasibilityState(land_lots=(LandLot(purchase_price=110_000_000),))
        assert get_land_cost(state) == 110_000_000

    def test_ex_gst_when_recoverable(self):
        lot = LandLot(
            purchase_price=110_000_000,
            entity_gst_registered=True,
            purchase_price_includes_gst=True,
        )
        assert get_land_cost(FeasibilityState(land_lots=(lot,))) == 100_000_000

    def test_margin_scheme_keeps_gross_price(self):
        lot = LandLot(
            purchase_price=110_000_000,
            entity_gst_registered=True,
            purchase_price_includes_gst=True,
            margin_scheme_applied=True,
        )
        assert get_land_cost(FeasibilityState(land_lots=(lot,))) == 110_000_000
