"""Side-by-side comparison of two scenario summaries."""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .calculations.money import format_currency, format_pct
from .calculations.summary import FeasibilitySummary


@dataclass(frozen=True)
class ComparisonMetric:
    label: str
    get_value: Callable[[FeasibilitySummary], Optional[float]]
    is_currency: bool
    higher_is_better: bool


METRICS: Tuple[ComparisonMetric, ...] = (
    ComparisonMetric("Revenue (Ex GST)", lambda s: s.total_revenue_ex_gst, True, True),
    ComparisonMetric("Total Costs", lambda s: s.total_costs, True, False),
    ComparisonMetric("Profit", lambda s: s.profit_before_tax, True, True),
    ComparisonMetric("Profit Margin", lambda s: s.profit_margin, False, True),
    ComparisonMetric("Dev Margin", lambda s: s.development_margin, False, True),
    ComparisonMetric("Profit on Cost", lambda s: s.profit_on_cost, False, True),
    ComparisonMetric("Construction", lambda s: s.construction_costs, True, False),
    ComparisonMetric("Land Cost", lambda s: s.land_cost, True, False),
    ComparisonMetric("Funding Costs", lambda s: s.total_funding_costs, True, False),
    ComparisonMetric("IRR", lambda s: s.irr, False, True),
    ComparisonMetric("NPV", lambda s: s.npv, True, True),
    ComparisonMetric("LTC Ratio", lambda s: s.debt_to_cost_ratio, False, False),
    ComparisonMetric("LVR", lambda s: s.debt_to_grv_ratio, False, False),
)


@dataclass
class ComparisonRow:
    """One metric compared across scenarios A and B."""

    label: str
    value_a: Optional[float]
    value_b: Optional[float]
    delta: Optional[float]  # B - A, None when either side is undefined
    is_currency: bool
    b_is_better: bool

    def formatted(self) -> Tuple[str, str, str]:
        fmt = format_currency if self.is_currency else format_pct
        a = "N/A" if self.value_a is None else fmt(self.value_a)
        b = "N/A" if self.value_b is None else fmt(self.value_b)
        if self.delta is None:
            delta = "N/A"
        elif self.is_currency:
            delta = ("+" if self.delta > 0 else "") + format_currency(self.delta)
        else:
            delta = f"{self.delta:+.1f}%"
        return a, b, delta


@dataclass
class ScenarioComparison:
    name_a: str
    name_b: str
    rows: List[ComparisonRow]

    def get(self, label: str) -> ComparisonRow:
        for row in self.rows:
            if row.label == label:
                return row
        raise KeyError(label)


def compare_scenarios(
    name_a: str,
    summary_a: FeasibilitySummary,
    name_b: str,
    summary_b: FeasibilitySummary,
) -> ScenarioComparison:
    """Compare two scenarios metric by metric.

    Args:
        name_a: Label for the base scenario.
        summary_a: Base scenario summary.
        name_b: Label for the alternative scenario.
        summary_b: Alternative scenario summary.

    Returns:
        ScenarioComparison with a row per metric; ``delta`` is B - A.
    """
    rows = []
    for metric in METRICS:
        a = metric.get_value(summary_a)
        b = metric.get_value(summary_b)
        delta = None if a is None or b is None else b - a
        if delta is None:
            better = False
        elif metric.higher_is_better:
            better = delta > 0
        else:
            better = delta < 0
        rows.append(
            ComparisonRow(
                label=metric.label,
                value_a=a,
                value_b=b,
                delta=delta,
                is_currency=metric.is_currency,
                b_is_better=better,
            )
        )
    return ScenarioComparison(name_a=name_a, name_b=name_b, rows=rows)


def format_comparison_table(comparison: ScenarioComparison) -> str:
    """Format a comparison as a text table.

    Args:
        comparison: Scenario comparison result.

    Returns:
        Formatted string table.
    """
    lines = [
        "=" * 72,
        "SCENARIO COMPARISON",
        "=" * 72,
        "",
        f"{'Metric':<20} {comparison.name_a[:15]:>15} {comparison.name_b[:15]:>15} {'Delta':>15}",
        "-" * 72,
    ]
    for row in comparison.rows:
        a, b, delta = row.formatted()
        marker = " *" if row.b_is_better else ""
        lines.append(f"{row.label:<20} {a:>15} {b:>15} {delta:>15}{marker}")
    lines += [
        "-" * 72,
        "* B is better",
        "=" * 72,
    ]
    return "\n".join(lines)
