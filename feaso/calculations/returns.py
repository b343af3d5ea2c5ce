"""Time value of money: NPV and IRR over monthly net cashflows."""

import logging
import math
from typing import Optional, Sequence

import numpy as np
import numpy_financial as npf

from .money import round_half_up

logger = logging.getLogger(__name__)


def monthly_rate(annual_rate_pct: float) -> float:
    """Nominal monthly rate for an annual percentage (``10`` -> ``0.00833``)."""
    return (annual_rate_pct or 0) / 100 / 12


def calculate_npv(flows: Sequence[int], annual_rate_pct: float) -> int:
    """Net present value of monthly cashflows.

    Month ``i`` (0-based) is discounted ``i + 1`` periods at the monthly
    rate, so the first month's flow is already one month out.

    Args:
        flows: Net cashflow per month in cents.
        annual_rate_pct: Discount rate, % p.a.

    Returns:
        NPV in cents.
    """
    if not flows:
        return 0
    npv = npf.npv(monthly_rate(annual_rate_pct), [0, *flows])
    return round_half_up(float(npv))


def has_sign_change(flows: Sequence[int]) -> bool:
    return any(f > 0 for f in flows) and any(f < 0 for f in flows)


def calculate_irr(flows: Sequence[int]) -> Optional[float]:
    """Annualised IRR of monthly cashflows, as a percentage.

    The monthly root from ``npf.irr`` is compounded to an annual rate:
    ``((1 + r) ** 12 - 1) x 100``.

    Returns:
        IRR in percent, or ``None`` when it is undefined (the series never
        changes sign or no root is found).
    """
    if not has_sign_change(flows):
        return None
    try:
        monthly_irr = npf.irr(np.asarray(flows, dtype=float))
    except (ValueError, np.linalg.LinAlgError) as exc:
        logger.debug("IRR solve failed: %s", exc)
        return None
    if monthly_irr is None or math.isnan(monthly_irr):
        return None
    return ((1 + float(monthly_irr)) ** 12 - 1) * 100
