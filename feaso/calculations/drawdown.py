"""Drawdown waterfall across prioritised debt facilities.

Key logic:
1. Equity funds project costs first until exhausted
2. Remaining monthly costs draw facilities in priority order
   (senior before mezzanine, ties broken by sort order)
3. Interest accrues monthly on each facility's opening balance
4. Provisioned interest capitalises into the balance up to the limit;
   serviced interest is paid from outside and never draws
5. Costs left after every facility is exhausted are a funding shortfall
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..models.lookups import PRIORITY_ORDER, LandLoanType
from .facilities import ResolvedFacility
from .money import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class DrawdownMonth:
    """One month of a facility's drawdown."""

    month: int  # 1-indexed
    label: str
    costs_drawn: int
    interest_accrued: int
    capitalised: int  # Interest added to the drawn balance
    cumulative_drawn: int  # Closing balance
    available_balance: int  # Headroom after this month


@dataclass
class FacilityDrawdown:
    """Drawdown result for a single facility."""

    facility_id: str
    facility_name: str
    facility_size: int
    interest_rate: float
    land_loan_type: LandLoanType
    months: List[DrawdownMonth] = field(default_factory=list)
    total_interest: int = 0
    uncapitalised_interest: int = 0  # Provisioned interest that found no headroom
    peak_drawn: int = 0

    @property
    def utilisation(self) -> float:
        """Peak drawn as a fraction of the facility size (0 when unsized)."""
        if self.facility_size <= 0:
            return 0.0
        return self.peak_drawn / self.facility_size

    @property
    def cumulative_drawn(self) -> List[int]:
        return [m.cumulative_drawn for m in self.months]


@dataclass
class DrawdownSchedule:
    """Drawdowns for every facility plus any unmet funding demand."""

    facilities: List[FacilityDrawdown]
    shortfall_by_month: List[int]

    @property
    def total_shortfall(self) -> int:
        return sum(self.shortfall_by_month)

    @property
    def is_fully_funded(self) -> bool:
        return self.total_shortfall == 0

    @property
    def total_interest(self) -> int:
        return sum(f.total_interest for f in self.facilities)

    @property
    def peak_debt(self) -> int:
        """Peak combined drawn balance across all facilities."""
        if not self.facilities or not self.shortfall_by_month:
            return 0
        return max(
            sum(f.months[i].cumulative_drawn for f in self.facilities)
            for i in range(len(self.shortfall_by_month))
        )

    def get_facility(self, facility_id: str) -> Optional[FacilityDrawdown]:
        for f in self.facilities:
            if f.facility_id == facility_id:
                return f
        return None


def sort_by_priority(facilities: Sequence[ResolvedFacility]) -> List[ResolvedFacility]:
    """Senior facilities first, then mezzanine; ties by sort order."""
    return sorted(
        facilities,
        key=lambda f: (PRIORITY_ORDER.get(f.priority, 99), f.sort_order),
    )


def apply_equity_first(monthly_costs: Sequence[int], equity: int) -> List[int]:
    """Fund monthly costs from equity until it runs out.

    Args:
        monthly_costs: Costs needing funding, one per month.
        equity: Total equity available.

    Returns:
        Costs still unfunded in each month after equity.

    Example:
        >>> apply_equity_first([100, 100, 100], 150)
        [0, 50, 100]
    """
    equity_left = max(0, equity)
    remaining = []
    for cost in monthly_costs:
        from_equity = min(max(0, cost), equity_left)
        equity_left -= from_equity
        remaining.append(cost - from_equity)
    return remaining


def _draw_facility(
    facility: ResolvedFacility,
    remaining: List[int],
    labels: Sequence[str],
) -> FacilityDrawdown:
    """Draw one facility against the unfunded costs, mutating ``remaining``."""
    size = max(0, facility.size)
    monthly_rate = (facility.interest_rate or 0) / 100 / 12
    provisioned = facility.land_loan_type == LandLoanType.PROVISIONED

    result = FacilityDrawdown(
        facility_id=facility.id,
        facility_name=facility.name,
        facility_size=size,
        interest_rate=facility.interest_rate,
        land_loan_type=facility.land_loan_type,
    )

    balance = 0
    for i in range(len(remaining)):
        opening = balance
        drawn = min(max(0, remaining[i]), max(0, size - balance))
        remaining[i] -= drawn
        balance += drawn

        interest = round_half_up(opening * monthly_rate)
        result.total_interest += interest

        capitalised = 0
        if provisioned and interest > 0:
            capitalised = min(interest, max(0, size - balance))
            balance += capitalised
            result.uncapitalised_interest += interest - capitalised

        result.peak_drawn = max(result.peak_drawn, balance)
        result.months.append(
            DrawdownMonth(
                month=i + 1,
                label=labels[i],
                costs_drawn=drawn,
                interest_accrued=interest,
                capitalised=capitalised,
                cumulative_drawn=balance,
                available_balance=max(0, size - balance),
            )
        )

    return result


def compute_drawdowns(
    facilities: Sequence[ResolvedFacility],
    monthly_costs: Sequence[int],
    month_labels: Optional[Sequence[str]] = None,
) -> DrawdownSchedule:
    """Compute the month-by-month drawdown for each facility.

    Args:
        facilities: Facilities with resolved sizes, in any order.
        monthly_costs: Unfunded project costs per month (after equity).
        month_labels: Optional label per month, ``M1..Mn`` when omitted.

    Returns:
        DrawdownSchedule with facilities in drawing order and the monthly
        shortfall left after every facility is exhausted.
    """
    remaining = [max(0, c) for c in monthly_costs]
    if month_labels is None or len(month_labels) < len(remaining):
        labels = [f"M{i + 1}" for i in range(len(remaining))]
    else:
        labels = list(month_labels)

    results = []
    if remaining:
        for facility in sort_by_priority(facilities):
            results.append(_draw_facility(facility, remaining, labels))

    schedule = DrawdownSchedule(facilities=results, shortfall_by_month=remaining)

    if not schedule.is_fully_funded:
        logger.warning(
            "Funding shortfall of %d cents after %d facilities",
            schedule.total_shortfall,
            len(results),
        )
    for f in results:
        if f.uncapitalised_interest:
            logger.warning(
                "Facility %r has %d cents of interest beyond its limit",
                f.facility_name,
                f.uncapitalised_interest,
            )
    return schedule
