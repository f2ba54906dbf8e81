"""
Computation engine

Pure functions over in-memory records: rate resolution, channel totals,
declared projection, card settlement and period reporting.
"""

from sales_reconciliation.engine.rates import (
    RateResolver,
    ResolvedRates,
    normalize_percent,
    resolve_rates,
)
from sales_reconciliation.engine.channels import (
    CategorySplit,
    DeliveryFigures,
    apply_delivery_shares,
    compute_cash,
    compute_delivery,
    compute_totals,
    split_category_sales,
)
from sales_reconciliation.engine.declared import (
    project_category_sales,
    project_declared,
    resolve_coefficients,
)
from sales_reconciliation.engine.settlement import CardSettlement, compute_card_settlement
from sales_reconciliation.engine.period import (
    AccountingFigures,
    PeriodHalf,
    PeriodReport,
    PeriodRow,
    PeriodTotals,
    period_bounds,
    summarize_period,
)

__all__ = [
    "RateResolver",
    "ResolvedRates",
    "normalize_percent",
    "resolve_rates",
    "CategorySplit",
    "DeliveryFigures",
    "apply_delivery_shares",
    "compute_cash",
    "compute_delivery",
    "compute_totals",
    "split_category_sales",
    "project_category_sales",
    "project_declared",
    "resolve_coefficients",
    "CardSettlement",
    "compute_card_settlement",
    "AccountingFigures",
    "PeriodHalf",
    "PeriodReport",
    "PeriodRow",
    "PeriodTotals",
    "period_bounds",
    "summarize_period",
]
