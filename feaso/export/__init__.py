"""Export module for feasibility reports."""

from .report import (
    ReportConfig,
    cashflow_to_dataframe,
    drawdown_to_dataframe,
    equity_to_dataframe,
    generate_feasibility_excel,
    summary_to_dataframe,
)

__all__ = [
    "ReportConfig",
    "cashflow_to_dataframe",
    "drawdown_to_dataframe",
    "equity_to_dataframe",
    "generate_feasibility_excel",
    "summary_to_dataframe",
]
