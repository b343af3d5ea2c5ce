"""Feasibility summary: the project P&L, margins, leverage and returns.

Totals are built from the same resolution context and monthly cashflow the
rest of the engine uses, so the summary reconciles to the cashflow and the
drawdown to the cent.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..models.lookups import LineItemSection, SizingMode
from ..models.scenario import FeasibilityState
from .cashflow import CashflowMonth, monthly_project_costs, net_cashflows, project_cashflow
from .drawdown import DrawdownSchedule, apply_equity_first, compute_drawdowns
from .equity import FundingPosition, calculate_funding_position
from .facilities import FacilityCalcContext, calculate_loan_interest, resolve_facilities
from .gst import GstPosition, calculate_gst_position
from .line_items import (
    build_resolve_context,
    get_gross_revenue,
    get_land_cost,
    get_revenue_ex_gst,
    sum_section,
    total_line_item_amount,
)
from .money import round_half_up
from .returns import calculate_irr, calculate_npv

logger = logging.getLogger(__name__)


@dataclass
class FeasibilitySummary:
    """Complete project P&L (cents unless noted; percentages as plain numbers)."""

    # Revenue
    total_revenue: int  # Gross sale prices as entered
    total_revenue_ex_gst: int
    unit_count: int

    # Cost sections
    land_cost: int
    acquisition_costs: int
    professional_fees: int
    construction_costs: int
    dev_fees: int
    land_holding_costs: int
    contingency_costs: int
    marketing_costs: int
    agent_fees: int
    legal_fees: int
    rental_costs: int

    # Funding costs
    facility_fees: int
    loan_fees: int
    equity_fees: int
    total_debt_interest: int

    # Totals
    total_costs_ex_funding: int  # TDC
    total_funding_costs: int
    total_costs: int
    project_costs_to_fund: int

    # Profit
    ebit: int
    profit_before_tax: int
    tax_amount: int
    profit_after_tax: int
    profit_margin: float  # Pre-tax profit / revenue ex GST
    development_margin: float  # EBIT / revenue ex GST
    profit_on_cost: float  # Pre-tax profit / total costs
    profit_on_project_cost: float  # Pre-tax profit / TDC

    # Per unit
    revenue_per_unit: int
    cost_per_unit: int
    profit_per_unit: int

    # Per m2 and per lot
    total_saleable_area: float
    ave_net_sales_per_m2: int
    ave_net_sales_per_lot: int
    ave_construction_per_m2: int
    ave_construction_per_lot: int

    # Capital structure
    total_debt: int  # Sum of facility limits
    total_equity: int
    total_preferred_equity: int  # Non-developer equity
    total_developer_equity: int
    debt_leverage_pct: float  # Debt / (debt + equity)
    debt_to_cost_ratio: float  # LTC
    debt_to_grv_ratio: float  # LVR
    ordinary_equity_leverage_pct: float
    preferred_equity_leverage_pct: float
    funding_shortfall: int  # TDC not covered by debt limits plus equity
    drawdown_shortfall: int  # Monthly demand left unfunded by the waterfall

    # Returns
    npv: int
    irr: Optional[float]  # None when undefined

    # Land
    total_land_size: float
    lot_count: int
    residual_land_value: int
    residual_land_value_at_target: int

    gst: GstPosition

    @property
    def profit(self) -> int:
        return self.profit_before_tax

    @property
    def is_fully_funded(self) -> bool:
        return self.drawdown_shortfall == 0


@dataclass
class FeasibilityResult:
    """Everything the engine derives from one scenario snapshot."""

    summary: FeasibilitySummary
    cashflow: List[CashflowMonth]  # Always one entry per month
    drawdown: DrawdownSchedule
    funding: FundingPosition


def _pct(numerator: float, denominator: float) -> float:
    return numerator / denominator * 100 if denominator > 0 else 0.0


def _per(amount: float, count: float) -> int:
    return round_half_up(amount / count) if count > 0 else 0


def run_feasibility(state: FeasibilityState) -> FeasibilityResult:
    """Run the full calculation engine over a scenario snapshot.

    Steps:
    1. Resolve every line item against the three-pass context
    2. Build the monthly cashflow
    3. Size facilities from the cost and revenue totals
    4. Fund monthly project costs from equity, then the facilities
    5. Roll up funding costs, tax, margins, leverage and returns

    Args:
        state: Scenario and its child collections.

    Returns:
        FeasibilityResult with summary, cashflow, drawdown and funding position.
    """
    scenario = state.scenario
    context = build_resolve_context(state)

    # Revenue
    total_revenue = get_gross_revenue(state)
    total_revenue_ex_gst = get_revenue_ex_gst(state)
    selling = [u for u in state.sales_units if not u.is_withdrawn]
    unit_count = len(selling)
    total_saleable_area = sum(u.area_m2 for u in selling)

    # Costs by section
    sections: Dict[LineItemSection, int] = {
        section: sum_section(state.line_items, section, context) for section in LineItemSection
    }
    land_cost = get_land_cost(state)
    total_costs_ex_funding = land_cost + sum(
        amount for section, amount in sections.items() if not section.is_funding_cost
    )
    construction_costs = sections[LineItemSection.CONSTRUCTION]
    contingency_costs = sections[LineItemSection.CONTINGENCY]

    # Cashflow and debt
    months = project_cashflow(state, context)
    facility_ctx = FacilityCalcContext(
        total_revenue_ex_gst=total_revenue_ex_gst,
        total_revenue=total_revenue,
        total_costs_ex_funding=total_costs_ex_funding,
        construction_costs=construction_costs,
        contingency_costs=contingency_costs,
    )
    resolved = resolve_facilities(state.debt_facilities, facility_ctx)
    total_debt = sum(f.size for f in resolved)

    total_developer_equity = sum(
        p.equity_amount for p in state.equity_partners if p.is_developer_equity
    )
    total_preferred_equity = sum(
        p.equity_amount for p in state.equity_partners if not p.is_developer_equity
    )
    total_equity = total_developer_equity + total_preferred_equity

    unfunded = apply_equity_first(monthly_project_costs(months), total_equity)
    drawdown = compute_drawdowns(resolved, unfunded, [cf.label for cf in months])

    facility_interest = 0
    for facility in state.debt_facilities:
        if facility.calculation_type == SizingMode.MANUAL and facility.interest_provision:
            facility_interest += facility.interest_provision
        else:
            result = drawdown.get_facility(facility.id)
            facility_interest += result.total_interest if result else 0
    total_debt_interest = facility_interest + sum(
        calculate_loan_interest(loan) for loan in state.debt_loans
    )

    facility_fees = sections[LineItemSection.FACILITY_FEES]
    loan_fees = sections[LineItemSection.LOAN_FEES]
    equity_fees = sections[LineItemSection.EQUITY_FEES]
    total_funding_costs = facility_fees + loan_fees + equity_fees + total_debt_interest
    total_costs = total_costs_ex_funding + total_funding_costs

    # Profit
    ebit = total_revenue_ex_gst - total_costs_ex_funding
    profit_before_tax = ebit - total_funding_costs
    tax_amount = (
        round_half_up(profit_before_tax * scenario.tax_rate / 100) if profit_before_tax > 0 else 0
    )
    profit_after_tax = profit_before_tax - tax_amount

    # Averages; net sales are revenue less selling costs
    net_sales = (
        total_revenue_ex_gst
        - sections[LineItemSection.AGENT_FEES]
        - sections[LineItemSection.LEGAL_FEES]
    )
    project_lots = scenario.project_lots or unit_count or 1

    funding = calculate_funding_position(total_costs_ex_funding, total_debt, total_equity)

    # Residual land value
    costs_ex_land = total_costs - land_cost
    target = scenario.target_margin_pct
    residual_land_value = total_revenue_ex_gst - costs_ex_land
    residual_at_target = (
        round_half_up(total_revenue_ex_gst * (1 - target / 100)) - costs_ex_land
    )

    flows = net_cashflows(months)
    gst = calculate_gst_position(
        state.sales_units,
        state.land_lots,
        [(total_line_item_amount(i, context), i.gst_status) for i in state.line_items],
    )

    summary = FeasibilitySummary(
        total_revenue=total_revenue,
        total_revenue_ex_gst=total_revenue_ex_gst,
        unit_count=unit_count,
        land_cost=land_cost,
        acquisition_costs=sections[LineItemSection.ACQUISITION],
        professional_fees=sections[LineItemSection.PROFESSIONAL_FEES],
        construction_costs=construction_costs,
        dev_fees=sections[LineItemSection.DEV_FEES],
        land_holding_costs=sections[LineItemSection.LAND_HOLDING],
        contingency_costs=contingency_costs,
        marketing_costs=sections[LineItemSection.MARKETING],
        agent_fees=sections[LineItemSection.AGENT_FEES],
        legal_fees=sections[LineItemSection.LEGAL_FEES],
        rental_costs=sections[LineItemSection.RENTAL_COSTS],
        facility_fees=facility_fees,
        loan_fees=loan_fees,
        equity_fees=equity_fees,
        total_debt_interest=total_debt_interest,
        total_costs_ex_funding=total_costs_ex_funding,
        total_funding_costs=total_funding_costs,
        total_costs=total_costs,
        project_costs_to_fund=total_costs_ex_funding,
        ebit=ebit,
        profit_before_tax=profit_before_tax,
        tax_amount=tax_amount,
        profit_after_tax=profit_after_tax,
        profit_margin=_pct(profit_before_tax, total_revenue_ex_gst),
        development_margin=_pct(ebit, total_revenue_ex_gst),
        profit_on_cost=_pct(profit_before_tax, total_costs),
        profit_on_project_cost=_pct(profit_before_tax, total_costs_ex_funding),
        revenue_per_unit=_per(total_revenue, unit_count),
        cost_per_unit=_per(total_costs, unit_count),
        profit_per_unit=_per(profit_before_tax, unit_count),
        total_saleable_area=total_saleable_area,
        ave_net_sales_per_m2=_per(net_sales, total_saleable_area),
        ave_net_sales_per_lot=_per(net_sales, project_lots),
        ave_construction_per_m2=_per(construction_costs, total_saleable_area),
        ave_construction_per_lot=_per(construction_costs, project_lots),
        total_debt=total_debt,
        total_equity=total_equity,
        total_preferred_equity=total_preferred_equity,
        total_developer_equity=total_developer_equity,
        debt_leverage_pct=_pct(total_debt, total_debt + total_equity),
        debt_to_cost_ratio=_pct(total_debt, total_costs),
        debt_to_grv_ratio=_pct(total_debt, total_revenue_ex_gst),
        ordinary_equity_leverage_pct=_pct(total_developer_equity, total_costs_ex_funding),
        preferred_equity_leverage_pct=_pct(total_preferred_equity, total_costs_ex_funding),
        funding_shortfall=funding.shortfall,
        drawdown_shortfall=drawdown.total_shortfall,
        npv=calculate_npv(flows, scenario.discount_rate),
        irr=calculate_irr(flows),
        total_land_size=context.total_land_size,
        lot_count=context.lot_count,
        residual_land_value=residual_land_value,
        residual_land_value_at_target=residual_at_target,
        gst=gst,
    )

    logger.debug(
        "Summary %r: revenue=%d costs=%d pbt=%d pat=%d",
        scenario.name,
        total_revenue_ex_gst,
        total_costs,
        profit_before_tax,
        profit_after_tax,
    )
    return FeasibilityResult(summary=summary, cashflow=months, drawdown=drawdown, funding=funding)


def compute_summary(state: FeasibilityState) -> FeasibilitySummary:
    return run_feasibility(state).summary


def legacy_summary_fields(summary: FeasibilitySummary) -> Dict[str, float]:
    """Advisory values cached on the scenario row for external reporting.

    These are recomputed on every save; the engine never reads them back.
    """
    return {
        "total_revenue": summary.total_revenue_ex_gst,
        "site_cost": summary.land_cost,
        "construction_cost": summary.construction_costs,
        "professional_fees": summary.professional_fees,
        "statutory_fees": summary.dev_fees,
        "finance_costs": summary.total_funding_costs,
        "marketing_costs": summary.marketing_costs,
        "contingency": summary.contingency_costs,
        "total_costs": summary.total_costs,
        "profit": summary.profit_before_tax,
        "profit_on_cost": round(summary.profit_on_cost, 2),
    }


def line_item_amount_cache(state: FeasibilityState) -> Dict[str, int]:
    """Live ex-GST total per line item id, for refreshing ``amount_ex_gst``."""
    context = build_resolve_context(state)
    return {item.id: total_line_item_amount(item, context) for item in state.line_items}
