"""Scenario data model: the scenario row and its six child collections.

All money is integer cents and all percentages are plain numbers
(``65`` means 65%). Every record is a frozen dataclass so the calculation
engine always works on an immutable snapshot.

Rows arriving from the persistence layer may be partially entered while a
scenario is being edited. ``from_row`` constructors normalize missing or
unrecognised values to documented defaults instead of rejecting the row.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Type, TypeVar

from .lookups import (
    DEFAULTS,
    LVR_METHOD_ALIASES,
    RATE_TYPE_LABELS,
    DevelopmentType,
    DistributionPolicy,
    FacilityPriority,
    Frequency,
    GstStatus,
    LandLoanType,
    LineItemSection,
    LvrMethod,
    PaymentPeriod,
    ProductType,
    RateType,
    RepaymentType,
    SaleStatus,
    SaleType,
    SizingMode,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def _coerce_enum(
    enum_cls: Type[E],
    value: Any,
    default: E,
    aliases: Optional[Mapping[str, E]] = None,
) -> E:
    """Map a raw value onto ``enum_cls``, falling back to ``default``."""
    if isinstance(value, enum_cls):
        return value
    if value is None or value == "":
        return default
    if aliases and value in aliases:
        return aliases[value]
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(
            "Unrecognised %s %r, using %s", enum_cls.__name__, value, default.value
        )
        return default


def _int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(round(float(value)))
    except (TypeError, ValueError):
        logger.warning("Non-numeric value %r, using %s", value, default)
        return default


def _float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Non-numeric value %r, using %s", value, default)
        return default


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return _int(value)


def _date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning("Unparseable start date %r, treating as unset", value)
        return None


@dataclass(frozen=True)
class Scenario:
    """Top-level scenario settings."""

    id: str = ""
    name: str = "Scenario"
    development_type: DevelopmentType = DevelopmentType.RESIDENTIAL
    project_length_months: int = DEFAULTS.project_length_months
    project_lots: int = 0
    start_date: Optional[date] = None
    state: str = ""
    target_margin_pct: float = DEFAULTS.target_margin_pct
    tax_rate: float = DEFAULTS.tax_rate_pct  # %
    discount_rate: float = DEFAULTS.discount_rate_pct  # % p.a., for NPV

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Scenario":
        length = _int(row.get("project_length_months"), DEFAULTS.project_length_months)
        return cls(
            id=str(row.get("id") or ""),
            name=row.get("name") or "Scenario",
            development_type=_coerce_enum(
                DevelopmentType, row.get("development_type"), DevelopmentType.RESIDENTIAL
            ),
            project_length_months=length if length > 0 else DEFAULTS.project_length_months,
            project_lots=_int(row.get("project_lots")),
            start_date=_date(row.get("start_date")),
            state=row.get("state") or "",
            target_margin_pct=_float(row.get("target_margin_pct"), DEFAULTS.target_margin_pct),
            tax_rate=_float(row.get("tax_rate"), DEFAULTS.tax_rate_pct),
            discount_rate=_float(row.get("discount_rate"), DEFAULTS.discount_rate_pct),
        )


@dataclass(frozen=True)
class LandLot:
    """A parcel of land purchased for the project."""

    id: str = ""
    name: str = ""
    land_size_m2: float = 0.0
    purchase_price: int = 0
    deposit_pct: float = 0.0
    deposit_amount: int = 0
    deposit_month: int = 1
    settlement_month: int = 1
    entity_gst_registered: bool = False
    purchase_price_includes_gst: bool = False
    margin_scheme_applied: bool = False
    sort_order: int = 0

    @property
    def settlement_balance(self) -> int:
        """Amount payable at settlement (purchase price less deposit)."""
        return self.purchase_price - self.deposit_amount

    @property
    def gst_recoverable(self) -> bool:
        """True when the GST embedded in the purchase price can be claimed back."""
        return (
            self.entity_gst_registered
            and self.purchase_price_includes_gst
            and not self.margin_scheme_applied
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "LandLot":
        includes_gst = row.get("purchase_price_includes_gst")
        if includes_gst is None:
            includes_gst = row.get("land_purchase_gst_included")
        return cls(
            id=str(row.get("id") or ""),
            name=row.get("name") or "",
            land_size_m2=_float(row.get("land_size_m2")),
            purchase_price=_int(row.get("purchase_price")),
            deposit_pct=_float(row.get("deposit_pct")),
            deposit_amount=_int(row.get("deposit_amount")),
            deposit_month=max(1, _int(row.get("deposit_month"), 1)),
            settlement_month=max(1, _int(row.get("settlement_month"), 1)),
            entity_gst_registered=bool(row.get("entity_gst_registered")),
            purchase_price_includes_gst=bool(includes_gst),
            margin_scheme_applied=bool(row.get("margin_scheme_applied")),
            sort_order=_int(row.get("sort_order")),
        )


@dataclass(frozen=True)
class LineItem:
    """A single cost line within a section/tab.

    ``amount_ex_gst`` is an advisory cache written back for reporting; the
    engine always re-resolves the live amount and never reads it.
    """

    id: str = ""
    section: LineItemSection = LineItemSection.CONSTRUCTION
    tab_name: str = ""
    land_lot_id: Optional[str] = None
    name: str = ""
    quantity: float = 1.0
    rate_type: RateType = DEFAULTS.rate_type
    rate: float = 0.0  # cents, or % for percentage rate types
    gst_status: GstStatus = DEFAULTS.gst_status
    frequency: Frequency = DEFAULTS.frequency
    cashflow_start_month: Optional[int] = None
    cashflow_span_months: int = 1
    funding_facility_id: Optional[str] = None
    amount_ex_gst: int = 0
    sort_order: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "LineItem":
        return cls(
            id=str(row.get("id") or ""),
            section=_coerce_enum(
                LineItemSection, row.get("section"), LineItemSection.CONSTRUCTION
            ),
            tab_name=row.get("tab_name") or "",
            land_lot_id=row.get("land_lot_id"),
            name=row.get("name") or "",
            quantity=_float(row.get("quantity"), 1.0),
            rate_type=_coerce_enum(
                RateType, row.get("rate_type"), DEFAULTS.rate_type, RATE_TYPE_LABELS
            ),
            rate=_float(row.get("rate")),
            gst_status=_coerce_enum(GstStatus, row.get("gst_status"), DEFAULTS.gst_status),
            frequency=_coerce_enum(Frequency, row.get("frequency"), DEFAULTS.frequency),
            cashflow_start_month=_optional_int(row.get("cashflow_start_month")),
            cashflow_span_months=max(1, _int(row.get("cashflow_span_months"), 1)),
            funding_facility_id=row.get("funding_facility_id"),
            amount_ex_gst=_int(row.get("amount_ex_gst")),
            sort_order=_int(row.get("sort_order")),
        )


@dataclass(frozen=True)
class SalesUnit:
    """A saleable unit, lot or tenancy."""

    id: str = ""
    tab_name: str = ""
    name: str = ""
    status: SaleStatus = SaleStatus.UNSOLD
    product_type: ProductType = ProductType.RESIDENTIAL
    sale_type: SaleType = SaleType.VACANT_POSSESSION
    bedrooms: int = 0
    bathrooms: int = 0
    car_spaces: int = 0
    area_m2: float = 0.0
    sale_price: int = 0
    gst_status: GstStatus = DEFAULTS.gst_status
    settlement_month: Optional[int] = None
    sort_order: int = 0

    @property
    def is_withdrawn(self) -> bool:
        return self.status == SaleStatus.WITHDRAWN

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SalesUnit":
        return cls(
            id=str(row.get("id") or ""),
            tab_name=row.get("tab_name") or "",
            name=row.get("name") or "",
            status=_coerce_enum(SaleStatus, row.get("status"), SaleStatus.UNSOLD),
            product_type=_coerce_enum(
                ProductType, row.get("product_type"), ProductType.RESIDENTIAL
            ),
            sale_type=_coerce_enum(SaleType, row.get("sale_type"), SaleType.VACANT_POSSESSION),
            bedrooms=_int(row.get("bedrooms")),
            bathrooms=_int(row.get("bathrooms")),
            car_spaces=_int(row.get("car_spaces")),
            area_m2=_float(row.get("area_m2")),
            sale_price=_int(row.get("sale_price")),
            gst_status=_coerce_enum(GstStatus, row.get("gst_status"), DEFAULTS.gst_status),
            settlement_month=_optional_int(row.get("settlement_month")),
            sort_order=_int(row.get("sort_order")),
        )


@dataclass(frozen=True)
class DebtFacility:
    """A drawn credit facility participating in the funding waterfall."""

    id: str = ""
    name: str = ""
    priority: FacilityPriority = FacilityPriority.SENIOR
    calculation_type: SizingMode = SizingMode.MANUAL
    lvr_method: LvrMethod = LvrMethod.TDC
    lvr_pct: float = 0.0
    term_months: int = 0
    interest_rate: float = 0.0  # % p.a.
    total_facility: int = 0  # manual size, cents
    interest_provision: int = 0
    land_loan_type: LandLoanType = DEFAULTS.land_loan_type
    sort_order: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DebtFacility":
        return cls(
            id=str(row.get("id") or ""),
            name=row.get("name") or "",
            priority=_coerce_enum(FacilityPriority, row.get("priority"), FacilityPriority.SENIOR),
            calculation_type=_coerce_enum(
                SizingMode, row.get("calculation_type"), SizingMode.MANUAL
            ),
            lvr_method=_coerce_enum(
                LvrMethod, row.get("lvr_method"), LvrMethod.TDC, LVR_METHOD_ALIASES
            ),
            lvr_pct=_float(row.get("lvr_pct")),
            term_months=_int(row.get("term_months")),
            interest_rate=_float(row.get("interest_rate")),
            total_facility=_int(row.get("total_facility")),
            interest_provision=_int(row.get("interest_provision")),
            land_loan_type=_coerce_enum(
                LandLoanType, row.get("land_loan_type"), DEFAULTS.land_loan_type
            ),
            sort_order=_int(row.get("sort_order")),
        )


@dataclass(frozen=True)
class DebtLoan:
    """A fixed-principal loan costed as a flat funding line (not drawn)."""

    id: str = ""
    name: str = ""
    principal_amount: int = 0
    interest_rate: float = 0.0  # % p.a.
    payment_period: PaymentPeriod = PaymentPeriod.MONTHLY
    term_months: int = 0
    loan_type: RepaymentType = RepaymentType.INTEREST_ONLY
    sort_order: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DebtLoan":
        return cls(
            id=str(row.get("id") or ""),
            name=row.get("name") or "",
            principal_amount=_int(row.get("principal_amount")),
            interest_rate=_float(row.get("interest_rate")),
            payment_period=_coerce_enum(
                PaymentPeriod, row.get("payment_period"), PaymentPeriod.MONTHLY
            ),
            term_months=_int(row.get("term_months")),
            loan_type=_coerce_enum(RepaymentType, row.get("loan_type"), RepaymentType.INTEREST_ONLY),
            sort_order=_int(row.get("sort_order")),
        )


@dataclass(frozen=True)
class EquityPartner:
    """An equity contributor and its distribution terms."""

    id: str = ""
    name: str = ""
    equity_amount: int = 0
    return_percentage: float = 0.0
    distribution_type: DistributionPolicy = DistributionPolicy.PROPORTIONAL
    is_developer_equity: bool = False
    sort_order: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "EquityPartner":
        return cls(
            id=str(row.get("id") or ""),
            name=row.get("name") or "",
            equity_amount=_int(row.get("equity_amount")),
            return_percentage=_float(row.get("return_percentage")),
            distribution_type=_coerce_enum(
                DistributionPolicy, row.get("distribution_type"), DistributionPolicy.PROPORTIONAL
            ),
            is_developer_equity=bool(row.get("is_developer_equity")),
            sort_order=_int(row.get("sort_order")),
        )


@dataclass(frozen=True)
class FeasibilityState:
    """A consistent snapshot of one scenario and all of its children.

    Absent collections are empty tuples, never ``None``.
    """

    scenario: Scenario = field(default_factory=Scenario)
    land_lots: Tuple[LandLot, ...] = ()
    line_items: Tuple[LineItem, ...] = ()
    sales_units: Tuple[SalesUnit, ...] = ()
    debt_facilities: Tuple[DebtFacility, ...] = ()
    debt_loans: Tuple[DebtLoan, ...] = ()
    equity_partners: Tuple[EquityPartner, ...] = ()

    @property
    def project_length_months(self) -> int:
        return self.scenario.project_length_months or DEFAULTS.project_length_months


def _rows(rows: Optional[Iterable[Mapping[str, Any]]], record_cls) -> tuple:
    return tuple(record_cls.from_row(r) for r in (rows or ()))


def load_state(rows: Mapping[str, Any]) -> FeasibilityState:
    """Build a state snapshot from persisted rows.

    Args:
        rows: Mapping with a ``scenario`` row and optional child row lists
            (``land_lots``, ``line_items``, ``sales_units``,
            ``debt_facilities``, ``debt_loans``, ``equity_partners``).
            Missing or ``None`` collections load as empty.

    Returns:
        FeasibilityState ready for the calculation engine.
    """
    scenario_row: Dict[str, Any] = dict(rows.get("scenario") or {})
    return FeasibilityState(
        scenario=Scenario.from_row(scenario_row),
        land_lots=_rows(rows.get("land_lots"), LandLot),
        line_items=_rows(rows.get("line_items"), LineItem),
        sales_units=_rows(rows.get("sales_units"), SalesUnit),
        debt_facilities=_rows(rows.get("debt_facilities"), DebtFacility),
        debt_loans=_rows(rows.get("debt_loans"), DebtLoan),
        equity_partners=_rows(rows.get("equity_partners"), EquityPartner),
    )
