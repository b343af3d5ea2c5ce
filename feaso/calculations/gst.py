"""GST normalisation and the scenario's GST position.

Canonical contract: ``calculate_gst`` only ever receives amounts that are
already exclusive of GST. Inclusive and exempt prices are first passed
through ``normalize_to_ex_gst``. Rounding is half-up to the cent, applied per
line; rounding differences are not redistributed.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

from ..models.lookups import GST_RATE, GstStatus
from ..models.scenario import LandLot, SalesUnit
from .money import round_half_up


def normalize_to_ex_gst(price: int, status: GstStatus) -> int:
    """Convert an entered price to its ex-GST value.

    Example:
        >>> normalize_to_ex_gst(110_00, GstStatus.INCLUSIVE)
        10000
    """
    if status == GstStatus.INCLUSIVE:
        return round_half_up(price / (1 + GST_RATE))
    if status in (GstStatus.EXCLUSIVE, GstStatus.EXEMPT):
        return price
    raise ValueError(f"Unknown GST status: {status}")


def calculate_gst(amount_ex_gst: int, status: GstStatus) -> int:
    """GST payable on an ex-GST amount (zero when exempt)."""
    if status == GstStatus.EXEMPT:
        return 0
    return round_half_up(amount_ex_gst * GST_RATE)


def margin_scheme_gst(sale_price: int, purchase_price: int) -> int:
    """Margin scheme GST: one eleventh of the margin over the purchase price."""
    margin = sale_price - purchase_price
    if margin <= 0:
        return 0
    return round_half_up(margin / 11)


@dataclass
class GstPosition:
    """GST collected on sales against credits claimable on costs."""

    gst_on_sales: int
    input_tax_credits: int
    land_gst_credit: int
    net_gst_payable: int
    margin_scheme_applied: bool


def calculate_gst_position(
    sales_units: Iterable[SalesUnit],
    land_lots: Iterable[LandLot],
    resolved_costs: Iterable[Tuple[int, GstStatus]],
) -> GstPosition:
    """Calculate the project's GST position.

    When any lot is bought under the margin scheme, GST on sales is one
    eleventh of the margin between taxable gross sales and the price paid
    for the margin-scheme land. Otherwise each unit's GST is calculated on its
    normalized ex-GST price.

    Args:
        sales_units: Sales units (withdrawn units are ignored).
        land_lots: Land lots with their GST flags.
        resolved_costs: ``(amount_ex_gst, gst_status)`` per resolved cost line.

    Returns:
        GstPosition with the net amount payable (negative = refund).
    """
    lots = list(land_lots)
    taxable_units = [
        u for u in sales_units if not u.is_withdrawn and u.gst_status != GstStatus.EXEMPT
    ]
    margin_lots = [lot for lot in lots if lot.margin_scheme_applied]

    if margin_lots:
        gross_sales = sum(u.sale_price for u in taxable_units)
        gst_on_sales = margin_scheme_gst(
            gross_sales, sum(lot.purchase_price for lot in margin_lots)
        )
    else:
        gst_on_sales = sum(
            calculate_gst(normalize_to_ex_gst(u.sale_price, u.gst_status), u.gst_status)
            for u in taxable_units
        )

    input_tax_credits = sum(calculate_gst(amount, status) for amount, status in resolved_costs)

    land_gst_credit = sum(
        lot.purchase_price - normalize_to_ex_gst(lot.purchase_price, GstStatus.INCLUSIVE)
        for lot in lots
        if lot.gst_recoverable
    )

    return GstPosition(
        gst_on_sales=gst_on_sales,
        input_tax_credits=input_tax_credits,
        land_gst_credit=land_gst_credit,
        net_gst_payable=gst_on_sales - input_tax_credits - land_gst_credit,
        margin_scheme_applied=bool(margin_lots),
    )
