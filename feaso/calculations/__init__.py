"""Calculation modules for the feasibility engine."""

from .money import round_half_up, dollars_to_cents, cents_to_dollars, format_currency, format_pct
from .gst import (
    normalize_to_ex_gst,
    calculate_gst,
    margin_scheme_gst,
    calculate_gst_position,
    GstPosition,
)
from .line_items import (
    ResolveContext,
    resolve_line_item_amount,
    total_line_item_amount,
    occurrence_months,
    build_resolve_context,
)
from .cashflow import CashflowMonth, generate_cashflow, project_cashflow
from .facilities import (
    FacilityCalcContext,
    ResolvedFacility,
    resolve_auto_facility_size,
    resolve_facilities,
    calculate_loan_interest,
)
from .drawdown import (
    DrawdownMonth,
    FacilityDrawdown,
    DrawdownSchedule,
    apply_equity_first,
    compute_drawdowns,
)
from .returns import calculate_npv, calculate_irr
from .equity import (
    EquityDistribution,
    EquityDistributionResult,
    FundingPosition,
    calculate_equity_distributions,
    calculate_funding_position,
)
from .summary import (
    FeasibilitySummary,
    FeasibilityResult,
    run_feasibility,  # Single entry point for the whole engine
    compute_summary,
    legacy_summary_fields,
    line_item_amount_cache,
)

__all__ = [
    "round_half_up",
    "dollars_to_cents",
    "cents_to_dollars",
    "format_currency",
    "format_pct",
    "normalize_to_ex_gst",
    "calculate_gst",
    "margin_scheme_gst",
    "calculate_gst_position",
    "GstPosition",
    "ResolveContext",
    "resolve_line_item_amount",
    "total_line_item_amount",
    "occurrence_months",
    "build_resolve_context",
    "CashflowMonth",
    "generate_cashflow",
    "project_cashflow",
    "FacilityCalcContext",
    "ResolvedFacility",
    "resolve_auto_facility_size",
    "resolve_facilities",
    "calculate_loan_interest",
    "DrawdownMonth",
    "FacilityDrawdown",
    "DrawdownSchedule",
    "apply_equity_first",
    "compute_drawdowns",
    "calculate_npv",
    "calculate_irr",
    "EquityDistribution",
    "EquityDistributionResult",
    "FundingPosition",
    "calculate_equity_distributions",
    "calculate_funding_position",
    "FeasibilitySummary",
    "FeasibilityResult",
    "run_feasibility",
    "compute_summary",
    "legacy_summary_fields",
    "line_item_amount_cache",
]
