"""Data models for the feasibility calculation engine."""

from .lookups import (
    DEFAULTS,
    GST_RATE,
    DevelopmentType,
    DistributionPolicy,
    EngineDefaults,
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
from .scenario import (
    Scenario,
    LandLot,
    LineItem,
    SalesUnit,
    DebtFacility,
    DebtLoan,
    EquityPartner,
    FeasibilityState,
    load_state,
)
from .state import (
    Collection,
    LoadAll,
    UpdateScenario,
    AddChild,
    UpdateChild,
    RemoveChild,
    reduce_state,
)

__all__ = [
    "DEFAULTS",
    "GST_RATE",
    "DevelopmentType",
    "DistributionPolicy",
    "EngineDefaults",
    "FacilityPriority",
    "Frequency",
    "GstStatus",
    "LandLoanType",
    "LineItemSection",
    "LvrMethod",
    "PaymentPeriod",
    "ProductType",
    "RateType",
    "RepaymentType",
    "SaleStatus",
    "SaleType",
    "SizingMode",
    "Scenario",
    "LandLot",
    "LineItem",
    "SalesUnit",
    "DebtFacility",
    "DebtLoan",
    "EquityPartner",
    "FeasibilityState",
    "load_state",
    "Collection",
    "LoadAll",
    "UpdateScenario",
    "AddChild",
    "UpdateChild",
    "RemoveChild",
    "reduce_state",
]
