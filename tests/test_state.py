"""Tests for loading rows and the scenario state reducer."""

from dataclasses import replace
from datetime import date

import pytest

from feaso.calculations.summary import run_feasibility
from feaso.models import (
    AddChild,
    Collection,
    DebtFacility,
    FeasibilityState,
    Frequency,
    GstStatus,
    LandLot,
    LineItem,
    LoadAll,
    LvrMethod,
    RateType,
    RemoveChild,
    SalesUnit,
    UpdateChild,
    UpdateScenario,
    load_state,
    reduce_state,
)
from feaso.models.scenario import Scenario


class TestLoadState:
    """Tests for tolerant row loading."""

    def test_missing_collections_are_empty(self):
        state = load_state({"scenario": {"name": "Empty"}, "line_items": None})
        assert state.land_lots == ()
        assert state.line_items == ()
        assert state.equity_partners == ()

    def test_scenario_defaults(self):
        scenario = load_state({}).scenario
        assert scenario.project_length_months == 24
        assert scenario.target_margin_pct == 20
        assert scenario.tax_rate == 30
        assert scenario.discount_rate == 10
        assert scenario.start_date is None

    def test_start_date_parsed(self):
        scenario = Scenario.from_row({"start_date": "2026-03-01T00:00:00Z"})
        assert scenario.start_date == date(2026, 3, 1)

    def test_line_item_defaults(self):
        """Missing frequency is once; missing GST status is exclusive."""
        item = LineItem.from_row({"id": 7, "rate": "1500"})
        assert item.id == "7"
        assert item.frequency == Frequency.ONCE
        assert item.gst_status == GstStatus.EXCLUSIVE
        assert item.rate_type == RateType.FIXED_AMOUNT
        assert item.quantity == 1.0
        assert item.rate == 1500.0
        assert item.cashflow_span_months == 1

    def test_unknown_values_fall_back(self):
        item = LineItem.from_row({"frequency": "fortnightly", "gst_status": "zero", "quantity": "x"})
        assert item.frequency == Frequency.ONCE
        assert item.gst_status == GstStatus.EXCLUSIVE
        assert item.quantity == 1.0

    def test_legacy_labels_accepted(self):
        assert LineItem.from_row({"rate_type": "% GRV"}).rate_type == RateType.PERCENT_OF_REVENUE
        facility = DebtFacility.from_row({"lvr_method": "grv_ex_gst"})
        assert facility.lvr_method == LvrMethod.GRV

    def test_land_gst_flag_alias(self):
        lot = LandLot.from_row({"land_purchase_gst_included": True, "purchase_price": 1_000})
        assert lot.purchase_price_includes_gst
        assert lot.settlement_balance == 1_000

    def test_state_is_immutable(self):
        state = load_state({})
        with pytest.raises(AttributeError):
            state.land_lots = ()


class TestReduceState:
    """Tests for state transitions."""

    def _state(self):
        return FeasibilityState(
            land_lots=(LandLot(id="a", purchase_price=100), LandLot(id="b", purchase_price=200)),
        )

    def test_load_all_replaces_state(self):
        new = FeasibilityState(scenario=Scenario(name="Loaded"))
        assert reduce_state(self._state(), LoadAll(new)) is new

    def test_update_scenario(self):
        state = reduce_state(self._state(), UpdateScenario({"tax_rate": 25}))
        assert state.scenario.tax_rate == 25

    def test_add_child(self):
        original = self._state()
        state = reduce_state(original, AddChild(Collection.SALES_UNITS, SalesUnit(id="u1")))
        assert [u.id for u in state.sales_units] == ["u1"]
        assert original.sales_units == ()

    def test_add_wrong_record_type(self):
        with pytest.raises(TypeError):
            reduce_state(self._state(), AddChild(Collection.SALES_UNITS, LandLot(id="x")))

    def test_update_child(self):
        state = reduce_state(
            self._state(), UpdateChild(Collection.LAND_LOTS, "b", {"purchase_price": 250})
        )
        assert [lot.purchase_price for lot in state.land_lots] == [100, 250]

    def test_remove_child(self):
        state = reduce_state(self._state(), RemoveChild(Collection.LAND_LOTS, "a"))
        assert [lot.id for lot in state.land_lots] == ["b"]

    def test_unknown_id_is_noop(self):
        original = self._state()
        assert reduce_state(original, RemoveChild(Collection.LAND_LOTS, "zz")) is original
        assert reduce_state(original, UpdateChild(Collection.LAND_LOTS, "zz", {})) is original

    def test_replay_is_deterministic(self):
        actions = [
            AddChild(Collection.LINE_ITEMS, LineItem(id="i1", rate=10)),
            UpdateChild(Collection.LINE_ITEMS, "i1", {"rate": 20}),
            AddChild(Collection.LINE_ITEMS, LineItem(id="i2", rate=5)),
            RemoveChild(Collection.LAND_LOTS, "a"),
        ]
        first = second = self._state()
        for action in actions:
            first = reduce_state(first, action)
        for action in actions:
            second = reduce_state(second, action)
        assert first == second
        assert [i.rate for i in first.line_items] == [20, 5]

    def test_unknown_action(self):
        with pytest.raises(TypeError):
            reduce_state(self._state(), "ADD_LAND_LOT")


class TestEditsAreNormalized:
    """Partially entered edits fall back to defaults like loaded rows do."""

    def test_enum_strings_coerced(self, reference_state):
        state = reduce_state(
            reference_state,
            UpdateChild(Collection.LINE_ITEMS, "c1", {"frequency": "monthly", "rate_type": "per_m2"}),
        )
        item = state.line_items[0]
        assert item.frequency == Frequency.MONTHLY
        assert item.rate_type == RateType.PER_M2
        assert item.rate == 200_000_000

    def test_legacy_label_in_edit(self, reference_state):
        state = reduce_state(
            reference_state, UpdateChild(Collection.LINE_ITEMS, "c1", {"rate_type": "% GRV"})
        )
        assert state.line_items[0].rate_type == RateType.PERCENT_OF_REVENUE

    def test_blank_number_uses_default(self, reference_state):
        state = reduce_state(
            reference_state, UpdateChild(Collection.LINE_ITEMS, "c1", {"quantity": None})
        )
        assert state.line_items[0].quantity == 1.0

    def test_non_positive_project_length(self, reference_state):
        state = reduce_state(reference_state, UpdateScenario({"project_length_months": -1}))
        assert state.scenario.project_length_months == 24
        state = reduce_state(reference_state, UpdateScenario({"project_length_months": "0"}))
        assert state.scenario.project_length_months == 24

    def test_added_record_normalized(self, reference_state):
        state = reduce_state(
            reference_state,
            AddChild(Collection.LINE_ITEMS, LineItem(id="x", frequency="weekly", quantity=None)),
        )
        added = state.line_items[-1]
        assert added.frequency == Frequency.ONCE
        assert added.quantity == 1.0

    def test_unchanged_fields_kept(self, reference_state):
        state = reduce_state(reference_state, UpdateScenario({"tax_rate": "25"}))
        assert state.scenario.tax_rate == 25
        assert state.scenario == replace(reference_state.scenario, tax_rate=25)

    def test_unknown_field_rejected(self, reference_state):
        with pytest.raises(TypeError):
            reduce_state(reference_state, UpdateScenario({"tax_rat": 25}))

    def test_edited_state_still_calculates(self, reference_state):
        edits = [
            UpdateChild(Collection.LINE_ITEMS, "c1", {"frequency": "monthly"}),
            UpdateChild(Collection.LINE_ITEMS, "c1", {"rate_type": "per_m2", "rate": "150"}),
            UpdateChild(Collection.LINE_ITEMS, "c1", {"quantity": None}),
            UpdateScenario({"project_length_months": -1}),
        ]
        state = reference_state
        for action in edits:
            state = reduce_state(state, action)
        result = run_feasibility(state)
        assert len(result.cashflow) == 24
        # 150 cents x 800 m2, charged monthly for 24 months
        assert result.summary.construction_costs == 120_000 * 24
