"""Equity distributions and the project's funding position.

Payment order for after-tax profit:
1. ``fixed`` and ``preferred`` partners receive their preferred return,
   scaled pro rata when profit cannot cover every claim
2. The residual is split among ``proportional`` partners by their share of
   proportional equity
3. With no proportional partners the residual goes to ``preferred`` partners;
   ``fixed`` partners never share in the residual

With only proportional partners every partner's profit share is simply
``profit_after_tax x equity / total equity``.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List

from ..models.lookups import DistributionPolicy
from ..models.scenario import EquityPartner
from .money import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class EquityDistribution:
    """One partner's share of the project's after-tax profit."""

    partner_id: str
    partner_name: str
    distribution_type: DistributionPolicy
    equity_amount: int
    share: float  # Fraction of total equity
    preferred_return: int  # Entitlement at return_percentage
    preferred_paid: int  # Portion of the entitlement actually paid
    profit_share: int  # Residual profit allocated
    total_return: int
    roi: float  # (total_return - equity) / equity

    @property
    def profit(self) -> int:
        return self.total_return - self.equity_amount


@dataclass
class EquityDistributionResult:
    distributions: List[EquityDistribution]
    total_equity: int
    profit_after_tax: int
    unallocated: int  # Profit no partner is entitled to

    def get(self, partner_id: str) -> EquityDistribution:
        for d in self.distributions:
            if d.partner_id == partner_id:
                return d
        raise KeyError(partner_id)


@dataclass
class FundingPosition:
    """Debt limits and equity against the project costs needing funding."""

    total_costs: int
    total_debt: int
    total_equity: int
    total_funding: int
    debt_pct: float  # Of total funding
    equity_pct: float
    shortfall: int

    @property
    def is_fully_funded(self) -> bool:
        return self.shortfall == 0


def calculate_funding_position(
    total_costs_ex_funding: int,
    total_debt: int,
    total_equity: int,
) -> FundingPosition:
    """Check whether debt and equity cover the project costs.

    Example:
        >>> calculate_funding_position(300_000_000, 195_000_000, 0).shortfall
        105000000
    """
    total_funding = total_debt + total_equity
    shortfall = max(0, total_costs_ex_funding - total_funding)
    if shortfall:
        logger.warning(
            "Debt %d plus equity %d leaves a shortfall of %d against costs of %d",
            total_debt,
            total_equity,
            shortfall,
            total_costs_ex_funding,
        )
    return FundingPosition(
        total_costs=total_costs_ex_funding,
        total_debt=total_debt,
        total_equity=total_equity,
        total_funding=total_funding,
        debt_pct=total_debt / total_funding * 100 if total_funding > 0 else 0.0,
        equity_pct=total_equity / total_funding * 100 if total_funding > 0 else 0.0,
        shortfall=shortfall,
    )


def _split(amount: int, weights: Dict[str, int]) -> Dict[str, int]:
    """Split ``amount`` by weight, rounding each part half-up."""
    total = sum(weights.values())
    if total <= 0:
        return {key: 0 for key in weights}
    return {key: round_half_up(amount * w / total) for key, w in weights.items()}


def calculate_equity_distributions(
    partners: Iterable[EquityPartner],
    profit_after_tax: int,
) -> EquityDistributionResult:
    """Allocate after-tax profit across equity partners.

    Args:
        partners: Equity partners with their distribution terms.
        profit_after_tax: Project profit after tax, in cents.

    Returns:
        EquityDistributionResult with one distribution per partner.
    """
    partners = list(partners)
    total_equity = sum(p.equity_amount for p in partners)

    entitlements = {
        p.id: round_half_up(p.equity_amount * p.return_percentage / 100) for p in partners
    }
    priority_claims = {
        p.id: entitlements[p.id]
        for p in partners
        if p.distribution_type != DistributionPolicy.PROPORTIONAL
    }

    if profit_after_tax < 0:
        # Losses are borne pro rata by all equity
        paid = {key: 0 for key in priority_claims}
        residual = profit_after_tax
        residual_weights = {p.id: p.equity_amount for p in partners}
    else:
        claimed = sum(priority_claims.values())
        if claimed <= profit_after_tax:
            paid = dict(priority_claims)
        else:
            paid = _split(profit_after_tax, priority_claims)
        residual = profit_after_tax - sum(paid.values())
        residual_weights = {
            p.id: p.equity_amount
            for p in partners
            if p.distribution_type == DistributionPolicy.PROPORTIONAL
        }
        if not residual_weights:
            residual_weights = {
                p.id: p.equity_amount
                for p in partners
                if p.distribution_type == DistributionPolicy.PREFERRED
            }

    shares = _split(residual, residual_weights)
    unallocated = residual - sum(shares.values())

    distributions = []
    for p in partners:
        preferred_paid = paid.get(p.id, 0)
        profit_share = shares.get(p.id, 0)
        if p.distribution_type == DistributionPolicy.PROPORTIONAL:
            # Proportional partners are quoted their notional preferred
            # return on top of their profit share
            total_return = p.equity_amount + entitlements[p.id] + profit_share
        else:
            total_return = p.equity_amount + preferred_paid + profit_share
        distributions.append(
            EquityDistribution(
                partner_id=p.id,
                partner_name=p.name,
                distribution_type=p.distribution_type,
                equity_amount=p.equity_amount,
                share=p.equity_amount / total_equity if total_equity > 0 else 0.0,
                preferred_return=entitlements[p.id],
                preferred_paid=preferred_paid,
                profit_share=profit_share,
                total_return=total_return,
                roi=(
                    (total_return - p.equity_amount) / p.equity_amount
                    if p.equity_amount > 0
                    else 0.0
                ),
            )
        )

    return EquityDistributionResult(
        distributions=distributions,
        total_equity=total_equity,
        profit_after_tax=profit_after_tax,
        unallocated=unallocated,
    )
