"""Feasibility report export.

Turns the engine's outputs into pandas DataFrames (dollars, not cents) and an
Excel workbook with Summary, Cashflow, Drawdown and Equity sheets.
"""

import io
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from ..calculations.cashflow import COST_FIELDS, CashflowMonth
from ..calculations.drawdown import DrawdownSchedule
from ..calculations.equity import EquityDistributionResult, calculate_equity_distributions
from ..calculations.money import cents_to_dollars
from ..calculations.summary import FeasibilitySummary, run_feasibility
from ..models.scenario import FeasibilityState


@dataclass
class ReportConfig:
    """Which sheets to include in the workbook."""
    include_summary: bool = True
    include_cashflow: bool = True
    include_drawdown: bool = True
    include_equity: bool = True


# (label, attribute, kind) rows of the summary sheet; kind is "$", "%" or "n"
SUMMARY_ROWS = [
    ("Revenue (inc GST)", "total_revenue", "$"),
    ("Revenue (ex GST)", "total_revenue_ex_gst", "$"),
    ("Units", "unit_count", "n"),
    ("Land", "land_cost", "$"),
    ("Acquisition", "acquisition_costs", "$"),
    ("Professional Fees", "professional_fees", "$"),
    ("Construction", "construction_costs", "$"),
    ("Development Fees", "dev_fees", "$"),
    ("Land Holding", "land_holding_costs", "$"),
    ("Contingency", "contingency_costs", "$"),
    ("Marketing", "marketing_costs", "$"),
    ("Agent Fees", "agent_fees", "$"),
    ("Legal Fees", "legal_fees", "$"),
    ("Rental Costs", "rental_costs", "$"),
    ("Total Costs ex Funding", "total_costs_ex_funding", "$"),
    ("Facility Fees", "facility_fees", "$"),
    ("Loan Fees", "loan_fees", "$"),
    ("Equity Fees", "equity_fees", "$"),
    ("Debt Interest", "total_debt_interest", "$"),
    ("Total Funding Costs", "total_funding_costs", "$"),
    ("Total Costs", "total_costs", "$"),
    ("EBIT", "ebit", "$"),
    ("Profit Before Tax", "profit_before_tax", "$"),
    ("Tax", "tax_amount", "$"),
    ("Profit After Tax", "profit_after_tax", "$"),
    ("Profit Margin", "profit_margin", "%"),
    ("Development Margin", "development_margin", "%"),
    ("Profit on Cost", "profit_on_cost", "%"),
    ("Total Debt", "total_debt", "$"),
    ("Total Equity", "total_equity", "$"),
    ("Debt Leverage", "debt_leverage_pct", "%"),
    ("LTC", "debt_to_cost_ratio", "%"),
    ("LVR", "debt_to_grv_ratio", "%"),
    ("Funding Shortfall", "funding_shortfall", "$"),
    ("NPV", "npv", "$"),
    ("IRR", "irr", "%"),
    ("Residual Land Value", "residual_land_value", "$"),
    ("RLV at Target Margin", "residual_land_value_at_target", "$"),
]


def summary_to_dataframe(summary: FeasibilitySummary) -> pd.DataFrame:
    """Summary as a two-column Metric/Value frame (money in dollars, undefined IRR is None)."""
    records = []
    for label, attr, kind in SUMMARY_ROWS:
        value = getattr(summary, attr)
        if value is not None and kind == "$":
            value = cents_to_dollars(value)
        records.append({"Metric": label, "Value": value})
    return pd.DataFrame.from_records(records, columns=["Metric", "Value"])


def cashflow_to_dataframe(months: List[CashflowMonth]) -> pd.DataFrame:
    """Monthly cashflow indexed by month label."""
    columns = ["revenue", *COST_FIELDS, "total_costs", "net_cashflow", "cumulative_cashflow"]
    df = pd.DataFrame(
        [[getattr(cf, c) for c in columns] for cf in months],
        columns=columns,
        index=pd.Index([cf.label for cf in months], name="month"),
    )
    return df / 100


def drawdown_to_dataframe(schedule: DrawdownSchedule) -> pd.DataFrame:
    """One row per facility per month, plus the monthly shortfall as its own rows."""
    records = []
    for facility in schedule.facilities:
        for m in facility.months:
            records.append({
                "facility": facility.facility_name,
                "month": m.month,
                "label": m.label,
                "costs_drawn": cents_to_dollars(m.costs_drawn),
                "interest": cents_to_dollars(m.interest_accrued),
                "capitalised": cents_to_dollars(m.capitalised),
                "cumulative_drawn": cents_to_dollars(m.cumulative_drawn),
                "available": cents_to_dollars(m.available_balance),
            })
    for i, shortfall in enumerate(schedule.shortfall_by_month):
        if shortfall:
            records.append({
                "facility": "Shortfall",
                "month": i + 1,
                "costs_drawn": cents_to_dollars(shortfall),
            })
    return pd.DataFrame.from_records(
        records,
        columns=[
            "facility", "month", "label", "costs_drawn", "interest",
            "capitalised", "cumulative_drawn", "available",
        ],
    )


def equity_to_dataframe(result: EquityDistributionResult) -> pd.DataFrame:
    return pd.DataFrame.from_records(
        [
            {
                "partner": d.partner_name,
                "policy": d.distribution_type.value,
                "equity": cents_to_dollars(d.equity_amount),
                "share": d.share,
                "preferred_return": cents_to_dollars(d.preferred_return),
                "profit_share": cents_to_dollars(d.profit_share),
                "total_return": cents_to_dollars(d.total_return),
                "roi": d.roi,
            }
            for d in result.distributions
        ],
        columns=[
            "partner", "policy", "equity", "share", "preferred_return",
            "profit_share", "total_return", "roi",
        ],
    )


def _add_header_style(ws, row: int, cols: int) -> None:
    """Apply header styling to a row."""
    header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True)

    for col in range(1, cols + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")


def _write_frame(ws, df: pd.DataFrame, index: bool = False, width: int = 16) -> None:
    """Write a DataFrame from row 1 with a styled header row."""
    if index:
        df = df.reset_index()
    for row in dataframe_to_rows(df, index=False, header=True):
        ws.append([None if isinstance(v, float) and v != v else v for v in row])
    _add_header_style(ws, 1, len(df.columns))
    for col in range(1, len(df.columns) + 1):
        ws.column_dimensions[get_column_letter(col)].width = width


def generate_feasibility_excel(
    state: FeasibilityState,
    config: Optional[ReportConfig] = None,
) -> bytes:
    """Generate an Excel feasibility report for a scenario.

    Args:
        state: Scenario snapshot to run the engine over.
        config: Optional sheet selection.

    Returns:
        Excel file as bytes
    """
    if config is None:
        config = ReportConfig()

    result = run_feasibility(state)

    wb = Workbook()
    wb.remove(wb.active)

    if config.include_summary:
        ws = wb.create_sheet("Summary")
        _write_frame(ws, summary_to_dataframe(result.summary), width=28)

    if config.include_cashflow:
        ws = wb.create_sheet("Cashflow")
        _write_frame(ws, cashflow_to_dataframe(result.cashflow), index=True)

    if config.include_drawdown:
        ws = wb.create_sheet("Drawdown")
        _write_frame(ws, drawdown_to_dataframe(result.drawdown))

    if config.include_equity:
        ws = wb.create_sheet("Equity")
        distributions = calculate_equity_distributions(
            state.equity_partners, result.summary.profit_after_tax
        )
        _write_frame(ws, equity_to_dataframe(distributions))

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()
