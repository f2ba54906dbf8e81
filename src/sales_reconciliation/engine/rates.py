"""
Delivery rate resolution

Decides which commission and revenue-split percentages apply to a day's
delivery-platform revenue. Days keep the rates they were first entered
under, so that re-opening an old day reproduces its saved figures even
after the global defaults change.
"""

from dataclasses import dataclass
from typing import Any, Optional

from sales_reconciliation.config.engine_config import RateTable
from sales_reconciliation.models.delivery import (
    COMMISSION_TTC_MARKUP,
    RateSet,
    RateSnapshot,
)
from sales_reconciliation.models.totals import RateSource
from sales_reconciliation.parsing import to_number


def normalize_percent(value: Any) -> float:
    """
    Bring a percentage onto the 0-100 scale
    
    Values strictly between 0 and 1 were persisted as fractions by older
    data and are scaled by 100 until they leave that interval, so
    ``normalize_percent(normalize_percent(x)) == normalize_percent(x)``.
    Unparseable input is 0.
    """
    number = to_number(value)
    while 0 < number < 1:
        number *= 100
    return number


@dataclass(frozen=True)
class ResolvedRates:
    """Rates chosen for a record and the rule that chose them"""
    rates: RateSet
    source: RateSource

    @property
    def commission_ttc(self) -> float:
        return self.rates.commission_ttc


class RateResolver:
    """
    Resolves delivery rates against one constants table
    
    Priority:
    1. A stored snapshot is used verbatim.
    2. Gross revenue without a snapshot is a legacy record: the historic
       constants are forced and any hint is ignored.
    3. A day with no delivery revenue yet takes the last used rates if a
       hint is supplied, else the current defaults.
    """
    
    def __init__(self, table: Optional[RateTable] = None) -> None:
        self.table = table or RateTable()
    
    def resolve(
        self,
        existing_snapshot: Optional[RateSnapshot],
        last_used_hint: Optional[RateSnapshot] = None,
        gross_amount: Any = 0.0,
    ) -> ResolvedRates:
        """
        Pick the rates for a record
        
        Args:
            existing_snapshot: Snapshot stored on the record, if any
            last_used_hint: Most recent snapshot saved on any other record
            gross_amount: Record's delivery gross amount
            
        Returns:
            Resolved rates with their source; never raises
        """
        if existing_snapshot is not None:
            return ResolvedRates(
                self._from_snapshot(existing_snapshot, self.table.historic),
                RateSource.SNAPSHOT,
            )
        
        if to_number(gross_amount) != 0:
            return ResolvedRates(self.table.historic, RateSource.HISTORIC)
        
        if last_used_hint is not None:
            return ResolvedRates(
                self._from_snapshot(last_used_hint, self.table.default),
                RateSource.HINT,
            )
        
        return ResolvedRates(self.table.default, RateSource.DEFAULT)
    
    def _from_snapshot(self, snapshot: RateSnapshot, fallback: RateSet) -> RateSet:
        """Normalize stored values, filling unrecorded ones from fallback"""
        commission_ht = normalize_percent(snapshot.commission_ht)
        if commission_ht == 0:
            commission_ttc = normalize_percent(snapshot.commission_ttc)
            if commission_ttc > 0:
                commission_ht = commission_ttc / COMMISSION_TTC_MARKUP
        
        taxable_share = normalize_percent(snapshot.taxable_share_pct)
        exempt_share = normalize_percent(snapshot.exempt_share_pct)
        
        return RateSet(
            commission_ht=commission_ht or fallback.commission_ht,
            taxable_share_pct=taxable_share or fallback.taxable_share_pct,
            exempt_share_pct=exempt_share or fallback.exempt_share_pct,
        )


def resolve_rates(
    existing_snapshot: Optional[RateSnapshot],
    last_used_hint: Optional[RateSnapshot] = None,
    gross_amount: Any = 0.0,
    table: Optional[RateTable] = None,
) -> ResolvedRates:
    """Resolve rates with a one-off resolver; see ``RateResolver.resolve``"""
    return RateResolver(table).resolve(existing_snapshot, last_used_hint, gross_amount)
