"""Monthly cashflow projection.

Spreads land payments, every line item and every sales settlement across
the project's months. Net cashflow is revenue less all cost categories and
the cumulative series is the running total of net cashflow.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from ..models.lookups import GstStatus, LineItemSection
from ..models.scenario import FeasibilityState, LandLot
from .gst import normalize_to_ex_gst
from .line_items import (
    ResolveContext,
    build_resolve_context,
    clamp_month,
    get_lot_cost,
    occurrence_months,
    resolve_line_item_amount,
)
from .money import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class CashflowMonth:
    """Cashflow for a single month (all amounts ex-GST cents)."""

    month: int  # 1-indexed
    label: str

    revenue: int = 0

    land_cost: int = 0
    acquisition_costs: int = 0
    professional_fees: int = 0
    construction_costs: int = 0
    dev_fees: int = 0
    land_holding_costs: int = 0
    contingency_costs: int = 0
    marketing_costs: int = 0
    agent_fees: int = 0
    legal_fees: int = 0
    rental_costs: int = 0
    funding_costs: int = 0  # Facility, loan and equity fees

    total_costs: int = 0
    net_cashflow: int = 0
    cumulative_cashflow: int = 0

    @property
    def project_costs(self) -> int:
        """Costs that need funding (everything except funding costs)."""
        return self.total_costs - self.funding_costs


# Attribute of CashflowMonth each section accumulates into
SECTION_FIELDS: Dict[LineItemSection, str] = {
    LineItemSection.ACQUISITION: "acquisition_costs",
    LineItemSection.PROFESSIONAL_FEES: "professional_fees",
    LineItemSection.CONSTRUCTION: "construction_costs",
    LineItemSection.DEV_FEES: "dev_fees",
    LineItemSection.LAND_HOLDING: "land_holding_costs",
    LineItemSection.CONTINGENCY: "contingency_costs",
    LineItemSection.MARKETING: "marketing_costs",
    LineItemSection.AGENT_FEES: "agent_fees",
    LineItemSection.LEGAL_FEES: "legal_fees",
    LineItemSection.RENTAL_COSTS: "rental_costs",
    LineItemSection.FACILITY_FEES: "funding_costs",
    LineItemSection.LOAN_FEES: "funding_costs",
    LineItemSection.EQUITY_FEES: "funding_costs",
}

COST_FIELDS: Tuple[str, ...] = ("land_cost",) + tuple(dict.fromkeys(SECTION_FIELDS.values()))


def month_label(start_date: Optional[date], month: int) -> str:
    """Short label for a 1-based month, e.g. ``"Jan 26"`` (``"M1"`` with no start)."""
    if start_date is None:
        return f"M{month}"
    return (start_date + relativedelta(months=month - 1)).strftime("%b %y")


def spread_evenly(amount: int, span: int) -> List[int]:
    """Split cents into ``span`` equal parts, remainder on the last part.

    Example:
        >>> spread_evenly(100, 3)
        [33, 33, 34]
    """
    span = max(1, span)
    per_month = abs(amount) // span * (1 if amount >= 0 else -1)
    parts = [per_month] * span
    parts[-1] += amount - per_month * span
    return parts


def land_payments(lot: LandLot) -> List[Tuple[int, int]]:
    """``(month, amount)`` pairs for a lot's deposit and settlement balance."""
    cost = get_lot_cost(lot)
    deposit = lot.deposit_amount
    if not deposit and lot.deposit_pct:
        deposit = round_half_up(lot.purchase_price * lot.deposit_pct / 100)
    if lot.gst_recoverable:
        deposit = normalize_to_ex_gst(deposit, GstStatus.INCLUSIVE)
    return [(lot.deposit_month, deposit), (lot.settlement_month, cost - deposit)]


def project_cashflow(
    state: FeasibilityState,
    context: Optional[ResolveContext] = None,
) -> List[CashflowMonth]:
    """Build the monthly cashflow for the whole project.

    Unlike ``generate_cashflow`` this always returns one entry per month;
    months are labelled ``M1..Mn`` when the scenario has no start date.

    Args:
        state: Scenario snapshot.
        context: Resolution context (built from ``state`` when omitted).

    Returns:
        Ordered list of CashflowMonth, one per project month.
    """
    total_months = state.project_length_months
    if context is None:
        context = build_resolve_context(state)
    start_date = state.scenario.start_date

    months = [
        CashflowMonth(month=m, label=month_label(start_date, m))
        for m in range(1, total_months + 1)
    ]

    def add(month: int, attr: str, amount: int) -> None:
        cf = months[clamp_month(month, total_months) - 1]
        setattr(cf, attr, getattr(cf, attr) + amount)

    for lot in state.land_lots:
        for month, amount in land_payments(lot):
            add(month, "land_cost", amount)

    for item in state.line_items:
        amount = resolve_line_item_amount(item, context)
        attr = SECTION_FIELDS[item.section]
        for start in occurrence_months(item, total_months):
            # Months of the span beyond the project end land in the final month
            for offset, part in enumerate(spread_evenly(amount, item.cashflow_span_months)):
                add(start + offset, attr, part)

    for unit in state.sales_units:
        if unit.is_withdrawn:
            continue
        month = unit.settlement_month or total_months
        add(month, "revenue", normalize_to_ex_gst(unit.sale_price, unit.gst_status))

    cumulative = 0
    for cf in months:
        cf.total_costs = sum(getattr(cf, attr) for attr in COST_FIELDS)
        cf.net_cashflow = cf.revenue - cf.total_costs
        cumulative += cf.net_cashflow
        cf.cumulative_cashflow = cumulative

    logger.debug(
        "Cashflow over %d months: closing cumulative %d", total_months, cumulative
    )
    return months


def generate_cashflow(
    state: FeasibilityState,
    context: Optional[ResolveContext] = None,
) -> List[CashflowMonth]:
    """Monthly cashflow labelled from the scenario start date.

    Returns an empty list when no start date is set; callers render a
    placeholder in that case.
    """
    if state.scenario.start_date is None:
        return []
    return project_cashflow(state, context)


def monthly_project_costs(months: List[CashflowMonth]) -> List[int]:
    """Per-month costs that need funding (excludes funding costs)."""
    return [cf.project_costs for cf in months]


def net_cashflows(months: List[CashflowMonth]) -> List[int]:
    return [cf.net_cashflow for cf in months]
