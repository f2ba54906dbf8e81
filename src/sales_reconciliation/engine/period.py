"""
Period reporting

Month or half-month summaries of day records: one row per calendar day
(days never entered show zeroes) and column totals. The accounting view
reads the declared records, since that is what gets filed.
"""

import calendar
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from sales_reconciliation.config.engine_config import EngineConfig
from sales_reconciliation.engine.channels import compute_totals, split_category_sales
from sales_reconciliation.engine.rates import RateResolver
from sales_reconciliation.models.day_record import (
    DeclaredDayRecord,
    RealDayRecord,
    SyncStatus,
)


class PeriodHalf(str, Enum):
    """Portion of a month covered by a report"""
    FULL = "full"
    FIRST = "first"
    SECOND = "second"


class AccountingFigures(BaseModel):
    """Declared-side figures used for tax filing"""
    
    exempt_revenue: float = 0.0
    taxable_net: float = 0.0
    total_net: float = 0.0
    total_gross: float = 0.0
    delivery_exempt_share: float = 0.0
    delivery_taxable_share: float = 0.0


class PeriodRow(BaseModel):
    """One calendar day of a period report"""
    
    business_date: date
    sync_status: Optional[SyncStatus] = None
    exempt_revenue: float = 0.0
    taxable_net: float = 0.0
    total_net: float = 0.0
    total_gross: float = 0.0
    card_amount: float = 0.0
    check_amount: float = 0.0
    delivery_gross: float = 0.0
    delivery_incidents: float = 0.0
    delivery_cash: float = 0.0
    delivery_net: float = 0.0
    cash_derived: float = 0.0
    declared_total_gross: float = 0.0
    declared_cash: float = 0.0
    taxable_coefficient: Optional[float] = None
    accounting: AccountingFigures = Field(default_factory=AccountingFigures)


class PeriodTotals(BaseModel):
    """Column totals of a period report"""
    
    exempt_revenue: float = 0.0
    taxable_net: float = 0.0
    total_net: float = 0.0
    total_gross: float = 0.0
    card_amount: float = 0.0
    check_amount: float = 0.0
    delivery_gross: float = 0.0
    delivery_incidents: float = 0.0
    delivery_cash: float = 0.0
    delivery_net: float = 0.0
    cash_derived: float = 0.0
    declared_total_gross: float = 0.0
    declared_cash: float = 0.0
    accounting: AccountingFigures = Field(default_factory=AccountingFigures)


class PeriodReport(BaseModel):
    """Rows and totals for a date range"""
    
    start: date
    end: date
    rows: List[PeriodRow]
    totals: PeriodTotals


_SUMMED_FIELDS = (
    "exempt_revenue",
    "taxable_net",
    "total_net",
    "total_gross",
    "card_amount",
    "check_amount",
    "delivery_gross",
    "delivery_incidents",
    "delivery_cash",
    "delivery_net",
    "cash_derived",
    "declared_total_gross",
    "declared_cash",
)


def period_bounds(year: int, month: int, half: PeriodHalf = PeriodHalf.FULL) -> Tuple[date, date]:
    """First and last day covered by a month or half-month"""
    last_day = calendar.monthrange(year, month)[1]
    if half == PeriodHalf.FIRST:
        return date(year, month, 1), date(year, month, 15)
    if half == PeriodHalf.SECOND:
        return date(year, month, 16), date(year, month, last_day)
    return date(year, month, 1), date(year, month, last_day)


def accounting_figures(
    declared: DeclaredDayRecord, config: EngineConfig
) -> AccountingFigures:
    """Filing figures of one declared record"""
    split = split_category_sales(
        declared.category_sales, config.exempt_category, config.vat_divisor
    )
    return AccountingFigures(
        exempt_revenue=split.exempt_revenue,
        taxable_net=split.taxable_net,
        total_net=split.total_net,
        total_gross=split.theoretical_gross,
        delivery_exempt_share=declared.delivery.exempt_share,
        delivery_taxable_share=declared.delivery.taxable_share,
    )


def summarize_period(
    real_records: Iterable[RealDayRecord],
    declared_records: Iterable[DeclaredDayRecord],
    year: int,
    month: int,
    half: PeriodHalf = PeriodHalf.FULL,
    config: Optional[EngineConfig] = None,
) -> PeriodReport:
    """
    Build a period report
    
    Records outside the period are ignored. Totals are recomputed from
    each record's raw fields with the rates stored on it.
    
    Args:
        real_records: Real records (any dates)
        declared_records: Declared records (any dates)
        year: Report year
        month: Report month (1-12)
        half: Whole month or one of its halves
        config: Engine configuration (defaults when omitted)
        
    Returns:
        Report with one row per day of the period
    """
    config = config or EngineConfig()
    resolver = RateResolver(config.rates)
    start, end = period_bounds(year, month, half)
    
    real_by_day: Dict[date, RealDayRecord] = {
        r.business_date: r for r in real_records if start <= r.business_date <= end
    }
    declared_by_day: Dict[date, DeclaredDayRecord] = {
        d.business_date: d for d in declared_records if start <= d.business_date <= end
    }
    
    rows: List[PeriodRow] = []
    for day in range(start.day, end.day + 1):
        business_date = date(year, month, day)
        row = PeriodRow(business_date=business_date)
        
        real = real_by_day.get(business_date)
        if real is not None:
            resolved = resolver.resolve(
                real.delivery.rate_snapshot, gross_amount=real.delivery.gross_amount
            )
            totals = compute_totals(real, resolved, config)
            row.sync_status = real.sync_status
            row.exempt_revenue = totals.exempt_revenue
            row.taxable_net = totals.taxable_net
            row.total_net = totals.total_net
            row.total_gross = totals.total_gross
            row.card_amount = totals.card_amount
            row.check_amount = totals.check_amount
            row.delivery_gross = totals.delivery_gross
            row.delivery_incidents = real.delivery.incidents
            row.delivery_cash = real.delivery.cash_collected
            row.delivery_net = totals.delivery_net
            row.cash_derived = totals.cash_derived
        
        declared = declared_by_day.get(business_date)
        if declared is not None:
            resolved = resolver.resolve(
                declared.delivery.rate_snapshot,
                gross_amount=declared.delivery.gross_amount,
            )
            declared_totals = compute_totals(declared, resolved, config)
            row.declared_total_gross = declared_totals.total_gross
            row.declared_cash = declared_totals.cash_derived
            if declared.coefficients is not None:
                row.taxable_coefficient = declared.coefficients.taxable
            row.accounting = accounting_figures(declared, config)
        
        rows.append(row)
    
    return PeriodReport(start=start, end=end, rows=rows, totals=_sum_rows(rows))


def _sum_rows(rows: List[PeriodRow]) -> PeriodTotals:
    totals = PeriodTotals()
    accounting = AccountingFigures()
    for row in rows:
        for name in _SUMMED_FIELDS:
            setattr(totals, name, getattr(totals, name) + getattr(row, name))
        for name in AccountingFigures.model_fields:
            setattr(accounting, name, getattr(accounting, name) + getattr(row.accounting, name))
    totals.accounting = accounting
    return totals
