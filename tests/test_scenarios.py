"""Tests for scenario comparison."""

from dataclasses import replace

import pytest

from feaso.calculations.summary import compute_summary
from feaso.models import FeasibilityState
from feaso.scenarios import METRICS, compare_scenarios, format_comparison_table


@pytest.fixture
def comparison(profitable_state):
    base = compute_summary(profitable_state)
    cheaper_items = tuple(replace(i, rate=180_000_000) for i in profitable_state.line_items)
    cheaper = compute_summary(replace(profitable_state, line_items=cheaper_items))
    return compare_scenarios("Base", base, "Value engineered", cheaper)


class TestCompareScenarios:
    def test_one_row_per_metric(self, comparison):
        assert [r.label for r in comparison.rows] == [m.label for m in METRICS]

    def test_delta_is_b_minus_a(self, comparison):
        row = comparison.get("Construction")
        assert row.value_a == 200_000_000
        assert row.value_b == 180_000_000
        assert row.delta == -20_000_000

    def test_lower_cost_is_better(self, comparison):
        assert comparison.get("Total Costs").b_is_better
        assert comparison.get("Construction").b_is_better

    def test_higher_profit_is_better(self, comparison):
        assert comparison.get("Profit").b_is_better
        assert comparison.get("Profit Margin").b_is_better
        assert not comparison.get("Revenue (Ex GST)").b_is_better

    def test_undefined_irr_has_no_delta(self, profitable_state):
        result = compare_scenarios(
            "A", compute_summary(FeasibilityState()),
            "B", compute_summary(profitable_state),
        )
        row = result.get("IRR")
        assert row.value_a is None
        assert row.delta is None
        assert not row.b_is_better
        assert row.formatted()[0] == "N/A"


class TestFormatComparisonTable:
    def test_contains_names_and_metrics(self, comparison):
        table = format_comparison_table(comparison)
        assert "SCENARIO COMPARISON" in table
        assert "Value engineer" in table
        assert "Construction" in table
        assert "-$200,000" in table
