"""Lookup tables for rate types, GST statuses, cost sections and facility terms."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class DevelopmentType(Enum):
    """Type of development a scenario models."""

    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    MIXED_USE = "mixed_use"
    INDUSTRIAL = "industrial"
    LAND_SUBDIVISION = "land_subdivision"


class RateType(Enum):
    """How a line item's rate is turned into an amount."""

    FIXED_AMOUNT = "fixed_amount"  # qty x rate
    PER_M2 = "per_m2"  # qty x rate x total land m2
    PER_LOT = "per_lot"  # qty x rate x lots
    PERCENT_OF_CONSTRUCTION = "percent_of_construction"
    PERCENT_OF_REVENUE = "percent_of_revenue"
    PERCENT_OF_PROJECT_COSTS = "percent_of_project_costs"

    @property
    def is_percentage(self) -> bool:
        return self in (
            RateType.PERCENT_OF_CONSTRUCTION,
            RateType.PERCENT_OF_REVENUE,
            RateType.PERCENT_OF_PROJECT_COSTS,
        )


class GstStatus(Enum):
    """GST treatment of an entered price."""

    EXCLUSIVE = "exclusive"
    INCLUSIVE = "inclusive"
    EXEMPT = "exempt"


class Frequency(Enum):
    """Recurrence of a line item over the project timeline."""

    ONCE = "once"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUALLY = "semi_annually"
    ANNUALLY = "annually"


class LineItemSection(Enum):
    """Cost section a line item belongs to."""

    ACQUISITION = "acquisition"
    PROFESSIONAL_FEES = "professional_fees"
    CONSTRUCTION = "construction"
    DEV_FEES = "dev_fees"
    LAND_HOLDING = "land_holding"
    CONTINGENCY = "contingency"
    MARKETING = "marketing"
    AGENT_FEES = "agent_fees"
    LEGAL_FEES = "legal_fees"
    RENTAL_COSTS = "rental_costs"
    # Funding cost sections
    FACILITY_FEES = "facility_fees"
    LOAN_FEES = "loan_fees"
    EQUITY_FEES = "equity_fees"

    @property
    def is_funding_cost(self) -> bool:
        return self in FUNDING_SECTIONS


class SaleStatus(Enum):
    """Sales status of a unit."""

    UNSOLD = "unsold"
    EXCHANGED = "exchanged"
    SETTLED = "settled"
    WITHDRAWN = "withdrawn"


class ProductType(Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"


class SaleType(Enum):
    VACANT_POSSESSION = "vacant_possession"
    SALE_WITH_LEASE = "sale_with_lease"


class FacilityPriority(Enum):
    """Drawing priority of a debt facility (senior draws first)."""

    SENIOR = "senior"
    MEZZANINE = "mezzanine"


class SizingMode(Enum):
    """Whether a facility limit is entered by hand or sized from an LVR."""

    MANUAL = "manual"
    AUTO = "auto"


class LvrMethod(Enum):
    """Basis a facility's LVR percentage is applied to."""

    GRV = "grv"  # Gross realisation, ex GST
    GRV_INC_GST = "grv_inc_gst"
    TDC = "tdc"  # Total development cost, ex GST
    TDC_INC_GST = "tdc_inc_gst"
    TCC_EX_GST = "tcc_ex_gst"  # Total construction cost
    TCC_INC_GST = "tcc_inc_gst"
    TCC_CONT_EX_GST = "tcc_cont_ex_gst"  # Construction + contingency
    TCC_CONT_INC_GST = "tcc_cont_inc_gst"


class LandLoanType(Enum):
    """How interest on a facility is met."""

    PROVISIONED = "provisioned"  # Capitalised into the drawn balance
    SERVICED = "serviced"  # Paid from outside the facility


class RepaymentType(Enum):
    INTEREST_ONLY = "interest_only"
    PRINCIPAL_AND_INTEREST = "principal_and_interest"


class PaymentPeriod(Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"


class DistributionPolicy(Enum):
    """How an equity partner participates in profit."""

    PROPORTIONAL = "proportional"
    PREFERRED = "preferred"
    FIXED = "fixed"


@dataclass(frozen=True)
class EngineDefaults:
    """Defaults applied when a scenario field is missing or blank."""

    gst_rate: float = 0.10  # Australian GST
    project_length_months: int = 24
    target_margin_pct: float = 20.0
    tax_rate_pct: float = 30.0
    discount_rate_pct: float = 10.0
    frequency: Frequency = Frequency.ONCE
    gst_status: GstStatus = GstStatus.EXCLUSIVE
    rate_type: RateType = RateType.FIXED_AMOUNT
    land_loan_type: LandLoanType = LandLoanType.PROVISIONED


DEFAULTS = EngineDefaults()

GST_RATE = DEFAULTS.gst_rate

FUNDING_SECTIONS = frozenset({
    LineItemSection.FACILITY_FEES,
    LineItemSection.LOAN_FEES,
    LineItemSection.EQUITY_FEES,
})

# Months between occurrences of a recurring item
FREQUENCY_MONTHS: Dict[Frequency, int] = {
    Frequency.ONCE: 0,
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.SEMI_ANNUALLY: 6,
    Frequency.ANNUALLY: 12,
}

PRIORITY_ORDER: Dict[FacilityPriority, int] = {
    FacilityPriority.SENIOR: 1,
    FacilityPriority.MEZZANINE: 2,
}

PAYMENTS_PER_YEAR: Dict[PaymentPeriod, int] = {
    PaymentPeriod.MONTHLY: 12,
    PaymentPeriod.QUARTERLY: 4,
    PaymentPeriod.ANNUALLY: 1,
}

# Labels used by the editing screens, accepted as aliases on input
RATE_TYPE_LABELS: Dict[str, RateType] = {
    "$ Amount": RateType.FIXED_AMOUNT,
    "$/m2": RateType.PER_M2,
    "$/Lot": RateType.PER_LOT,
    "% Construction": RateType.PERCENT_OF_CONSTRUCTION,
    "% GRV": RateType.PERCENT_OF_REVENUE,
    "% Project Costs": RateType.PERCENT_OF_PROJECT_COSTS,
}

LVR_METHOD_ALIASES: Dict[str, LvrMethod] = {
    "grv_ex_gst": LvrMethod.GRV,
    "tdc_ex_gst": LvrMethod.TDC,
}
