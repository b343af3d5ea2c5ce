"""Debt facility sizing and fixed-loan interest."""

from dataclasses import dataclass
from typing import Iterable, List

import numpy_financial as npf

from ..models.lookups import (
    GST_RATE,
    PAYMENTS_PER_YEAR,
    FacilityPriority,
    LandLoanType,
    LvrMethod,
    RepaymentType,
    SizingMode,
)
from ..models.scenario import DebtFacility, DebtLoan
from .money import round_half_up


@dataclass(frozen=True)
class FacilityCalcContext:
    """Cost and revenue bases a facility's LVR can be applied to."""

    total_revenue_ex_gst: int = 0
    total_revenue: int = 0  # gross, as entered
    total_costs_ex_funding: int = 0
    construction_costs: int = 0
    contingency_costs: int = 0


@dataclass(frozen=True)
class ResolvedFacility:
    """A facility with its limit resolved, ready for the drawdown engine."""

    id: str
    name: str
    size: int
    interest_rate: float  # % p.a.
    land_loan_type: LandLoanType
    priority: FacilityPriority
    sort_order: int = 0


def _gross_up(amount: int) -> int:
    return round_half_up(amount * (1 + GST_RATE))


def lvr_basis(method: LvrMethod, ctx: FacilityCalcContext) -> int:
    """The cost or revenue total an LVR percentage applies to."""
    construction_and_contingency = ctx.construction_costs + ctx.contingency_costs
    bases = {
        LvrMethod.GRV: ctx.total_revenue_ex_gst,
        LvrMethod.GRV_INC_GST: ctx.total_revenue,
        LvrMethod.TDC: ctx.total_costs_ex_funding,
        LvrMethod.TDC_INC_GST: _gross_up(ctx.total_costs_ex_funding),
        LvrMethod.TCC_EX_GST: ctx.construction_costs,
        LvrMethod.TCC_INC_GST: _gross_up(ctx.construction_costs),
        LvrMethod.TCC_CONT_EX_GST: construction_and_contingency,
        LvrMethod.TCC_CONT_INC_GST: _gross_up(construction_and_contingency),
    }
    try:
        return bases[method]
    except KeyError:
        raise ValueError(f"Unknown LVR method: {method}") from None


def resolve_auto_facility_size(facility: DebtFacility, ctx: FacilityCalcContext) -> int:
    """Resolve a facility's limit.

    Manual facilities keep their entered ``total_facility``. Auto facilities
    are sized as ``round(basis x lvr_pct / 100)``.

    Example:
        >>> facility = DebtFacility(calculation_type=SizingMode.AUTO,
        ...                         lvr_method=LvrMethod.TDC, lvr_pct=65)
        >>> resolve_auto_facility_size(
        ...     facility, FacilityCalcContext(total_costs_ex_funding=300_000_000))
        195000000
    """
    if facility.calculation_type == SizingMode.MANUAL:
        return facility.total_facility
    return round_half_up(lvr_basis(facility.lvr_method, ctx) * facility.lvr_pct / 100)


def resolve_facilities(
    facilities: Iterable[DebtFacility],
    ctx: FacilityCalcContext,
) -> List[ResolvedFacility]:
    """Resolve every facility's size for the drawdown engine."""
    return [
        ResolvedFacility(
            id=f.id,
            name=f.name,
            size=resolve_auto_facility_size(f, ctx),
            interest_rate=f.interest_rate,
            land_loan_type=f.land_loan_type,
            priority=f.priority,
            sort_order=f.sort_order,
        )
        for f in facilities
    ]


def calculate_loan_interest(loan: DebtLoan) -> int:
    """Total interest over a fixed loan's term.

    Interest-only loans pay ``principal x rate / 12`` each month. Principal
    and interest loans pay a level annuity at the payment-period rate; the
    interest is total payments less principal.

    Args:
        loan: Loan terms.

    Returns:
        Interest in cents over the full term.
    """
    principal = loan.principal_amount
    if principal <= 0 or loan.term_months <= 0:
        return 0

    if loan.loan_type == RepaymentType.INTEREST_ONLY:
        monthly_rate = loan.interest_rate / 100 / 12
        return round_half_up(principal * monthly_rate * loan.term_months)

    periods_per_year = PAYMENTS_PER_YEAR[loan.payment_period]
    n_payments = max(1, round(loan.term_months * periods_per_year / 12))
    period_rate = loan.interest_rate / 100 / periods_per_year
    if period_rate == 0:
        return 0
    payment = -npf.pmt(period_rate, n_payments, principal)
    return round_half_up(float(payment) * n_payments - principal)
