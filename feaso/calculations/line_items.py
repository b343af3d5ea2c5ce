"""Line-item amount resolution.

A line item's amount depends on its rate type and a shared numeric context
(land area, lot count, construction and revenue totals). The context is an
explicit immutable value passed by parameter.
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterable, List

from ..models.lookups import (
    DEFAULTS,
    FREQUENCY_MONTHS,
    Frequency,
    GstStatus,
    LineItemSection,
    RateType,
)
from ..models.scenario import FeasibilityState, LandLot, LineItem
from .gst import normalize_to_ex_gst
from .money import round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveContext:
    """Totals a line item's rate can be applied to."""

    total_land_size: float = 0.0  # m2
    lot_count: int = 1
    construction_total: int = 0  # cents
    grv_total: int = 0  # cents, gross sale prices
    project_costs_total: int = 0  # cents
    project_length_months: int = DEFAULTS.project_length_months


def _unit_base(rate_type: RateType, rate: float, context: ResolveContext) -> float:
    if rate_type == RateType.FIXED_AMOUNT:
        return rate
    if rate_type == RateType.PER_M2:
        return rate * context.total_land_size
    if rate_type == RateType.PER_LOT:
        return rate * max(context.lot_count, 1)
    if rate_type == RateType.PERCENT_OF_CONSTRUCTION:
        return (rate / 100) * context.construction_total
    if rate_type == RateType.PERCENT_OF_REVENUE:
        return (rate / 100) * context.grv_total
    if rate_type == RateType.PERCENT_OF_PROJECT_COSTS:
        return (rate / 100) * context.project_costs_total
    raise ValueError(f"Unknown rate type: {rate_type}")


def resolve_line_item_amount(item: LineItem, context: ResolveContext) -> int:
    """Resolve one occurrence of a line item to ex-GST cents.

    | rate type                | amount                               |
    |--------------------------|--------------------------------------|
    | fixed_amount             | qty x rate                           |
    | per_m2                   | qty x rate x total land size         |
    | per_lot                  | qty x rate x max(lot count, 1)       |
    | percent_of_construction  | qty x rate% x construction total     |
    | percent_of_revenue       | qty x rate% x GRV total              |
    | percent_of_project_costs | qty x rate% x project costs total    |

    A zero context total resolves to zero. A single unit is rounded and
    normalized to ex-GST before being multiplied by a whole quantity, so
    quantity k always resolves to exactly k units. Fractional quantities
    are applied before rounding.

    Args:
        item: Line item to resolve.
        context: Shared totals for the scenario.

    Returns:
        Amount in cents, exclusive of GST.
    """
    unit = _unit_base(item.rate_type, item.rate, context)
    qty = item.quantity

    if float(qty).is_integer():
        return int(qty) * normalize_to_ex_gst(round_half_up(unit), item.gst_status)
    return normalize_to_ex_gst(round_half_up(qty * unit), item.gst_status)


def clamp_month(month: int, total_months: int) -> int:
    """Clamp a 1-based month index into ``1..total_months``."""
    return min(max(1, month), max(1, total_months))


def occurrence_months(item: LineItem, total_months: int) -> List[int]:
    """1-based months in which a line item is charged.

    ``once`` charges in its start month (default 1). Recurring items charge
    every 1/3/6/12 months from the start month until the project ends.
    """
    start = clamp_month(item.cashflow_start_month or 1, total_months)
    if item.frequency == Frequency.ONCE:
        return [start]
    cadence = FREQUENCY_MONTHS[item.frequency]
    return list(range(start, max(1, total_months) + 1, cadence))


def total_line_item_amount(item: LineItem, context: ResolveContext) -> int:
    """Total ex-GST cost of an item over the project (all occurrences)."""
    occurrences = len(occurrence_months(item, context.project_length_months))
    return resolve_line_item_amount(item, context) * occurrences


def sum_section(
    items: Iterable[LineItem],
    section: LineItemSection,
    context: ResolveContext,
) -> int:
    """Total of every item in one cost section."""
    return sum(
        total_line_item_amount(item, context) for item in items if item.section == section
    )


def get_total_land_size(state: FeasibilityState) -> float:
    return sum(lot.land_size_m2 for lot in state.land_lots)


def get_lot_count(state: FeasibilityState) -> int:
    return len(state.land_lots) or 1


def get_lot_cost(lot: LandLot) -> int:
    """Land cost of one lot, ex-GST when the embedded GST is recoverable."""
    if lot.gst_recoverable:
        return normalize_to_ex_gst(lot.purchase_price, GstStatus.INCLUSIVE)
    return lot.purchase_price


def get_land_cost(state: FeasibilityState) -> int:
    return sum(get_lot_cost(lot) for lot in state.land_lots)


def get_gross_revenue(state: FeasibilityState) -> int:
    """Gross (as entered) sale prices of all units still for sale."""
    return sum(u.sale_price for u in state.sales_units if not u.is_withdrawn)


def get_revenue_ex_gst(state: FeasibilityState) -> int:
    return sum(
        normalize_to_ex_gst(u.sale_price, u.gst_status)
        for u in state.sales_units
        if not u.is_withdrawn
    )


def build_resolve_context(state: FeasibilityState) -> ResolveContext:
    """Build the scenario's resolution context in three passes.

    1. Flat (non-percentage) construction items give the construction total.
    2. With that known, every item except ``percent_of_project_costs`` can be
       resolved; land plus those non-funding costs give the project-cost
       total.
    3. ``percent_of_project_costs`` items resolve against that total.

    Returns:
        Context against which every line item of the scenario resolves.
    """
    context = ResolveContext(
        total_land_size=get_total_land_size(state),
        lot_count=get_lot_count(state),
        grv_total=get_gross_revenue(state),
        project_length_months=state.project_length_months,
    )

    flat_construction = sum(
        total_line_item_amount(item, context)
        for item in state.line_items
        if item.section == LineItemSection.CONSTRUCTION and not item.rate_type.is_percentage
    )
    context = replace(context, construction_total=flat_construction)

    project_costs = get_land_cost(state) + sum(
        total_line_item_amount(item, context)
        for item in state.line_items
        if not item.section.is_funding_cost
        and item.rate_type != RateType.PERCENT_OF_PROJECT_COSTS
    )
    context = replace(context, project_costs_total=project_costs)

    logger.debug(
        "Resolve context: land=%.1fm2 lots=%d construction=%d grv=%d project_costs=%d",
        context.total_land_size,
        context.lot_count,
        context.construction_total,
        context.grv_total,
        context.project_costs_total,
    )
    return context
