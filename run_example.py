#!/usr/bin/env python3
"""Example script to run the feasibility engine on a reference scenario."""

import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from feaso.calculations import (
    calculate_equity_distributions,
    format_currency,
    format_pct,
    run_feasibility,
)
from feaso.models import load_state
from feaso.scenarios import compare_scenarios, format_comparison_table


def get_reference_rows(construction_rate: int = 200_000_000, equity: int = 105_000_000) -> dict:
    """Rows for a single-lot residential scenario, as the store would return them."""
    return {
        "scenario": {
            "id": "s1",
            "name": "Base case",
            "development_type": "residential",
            "project_length_months": 12,
            "start_date": date(2026, 1, 1).isoformat(),
            "target_margin_pct": 20,
            "tax_rate": 30,
            "discount_rate": 10,
        },
        "land_lots": [
            {"id": "lot1", "name": "Lot 1", "land_size_m2": 800, "purchase_price": 100_000_000},
        ],
        "line_items": [
            {
                "id": "c1",
                "section": "construction",
                "name": "Build",
                "rate_type": "fixed_amount",
                "rate": construction_rate,
                "gst_status": "exclusive",
                "cashflow_start_month": 2,
                "cashflow_span_months": 8,
            },
        ],
        "sales_units": [
            {"id": "u1", "name": "House", "sale_price": 330_000_000, "gst_status": "inclusive",
             "area_m2": 250},
        ],
        "debt_facilities": [
            {"id": "f1", "name": "Senior", "priority": "senior", "calculation_type": "auto",
             "lvr_method": "tdc", "lvr_pct": 65, "interest_rate": 7.5,
             "land_loan_type": "provisioned"},
        ],
        "equity_partners": [
            {"id": "e1", "name": "Developer", "equity_amount": equity, "is_developer_equity": True},
        ],
    }


def print_result(result) -> None:
    s = result.summary
    lines = [
        "=" * 60,
        "FEASIBILITY SUMMARY",
        "=" * 60,
        f"{'Revenue (ex GST)':<28} {format_currency(s.total_revenue_ex_gst):>18}",
        f"{'Total Costs ex Funding':<28} {format_currency(s.total_costs_ex_funding):>18}",
        f"{'EBIT':<28} {format_currency(s.ebit):>18}",
        f"{'Funding Costs':<28} {format_currency(s.total_funding_costs):>18}",
        f"{'Profit Before Tax':<28} {format_currency(s.profit_before_tax):>18}",
        f"{'Tax':<28} {format_currency(s.tax_amount):>18}",
        f"{'Profit After Tax':<28} {format_currency(s.profit_after_tax):>18}",
        "",
        f"{'Profit Margin':<28} {format_pct(s.profit_margin):>18}",
        f"{'Development Margin':<28} {format_pct(s.development_margin):>18}",
        f"{'NPV':<28} {format_currency(s.npv):>18}",
        f"{'IRR':<28} {format_pct(s.irr):>18}",
        "",
        f"{'Total Debt':<28} {format_currency(s.total_debt):>18}",
        f"{'Total Equity':<28} {format_currency(s.total_equity):>18}",
        f"{'Funding Shortfall':<28} {format_currency(s.funding_shortfall):>18}",
        "=" * 60,
    ]
    print("\n".join(lines))

    print("\nMonthly cashflow")
    print("-" * 60)
    for cf in result.cashflow:
        print(
            f"{cf.label:<8} {format_currency(cf.revenue):>14} "
            f"{format_currency(cf.total_costs):>14} {format_currency(cf.cumulative_cashflow):>16}"
        )

    for facility in result.drawdown.facilities:
        print(
            f"\n{facility.facility_name}: limit {format_currency(facility.facility_size)}, "
            f"peak {format_currency(facility.peak_drawn)}, "
            f"interest {format_currency(facility.total_interest)}, "
            f"utilisation {facility.utilisation:.1%}"
        )


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    base = run_feasibility(load_state(get_reference_rows()))
    print_result(base)

    distributions = calculate_equity_distributions(
        load_state(get_reference_rows()).equity_partners, base.summary.profit_after_tax
    )
    for d in distributions.distributions:
        print(f"{d.partner_name}: return {format_currency(d.total_return)}, ROI {d.roi:.1%}")

    cheaper = run_feasibility(load_state(get_reference_rows(construction_rate=180_000_000)))
    print()
    print(format_comparison_table(
        compare_scenarios("Base case", base.summary, "Value engineered", cheaper.summary)
    ))


if __name__ == "__main__":
    main()
