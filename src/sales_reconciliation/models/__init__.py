"""Models module initialization"""

from sales_reconciliation.models.delivery import (
    COMMISSION_TTC_MARKUP,
    RateSet,
    DeliveryBreakdown,
    RateSnapshot,
)
from sales_reconciliation.models.day_record import (
    DayRecord,
    DayRecordBase,
    DeclaredCoefficients,
    DeclaredDayRecord,
    OperatingTime,
    Payments,
    RealDayRecord,
    RecordMode,
    Supplements,
    SyncStatus,
    empty_record,
    parse_day_record,
)
from sales_reconciliation.models.totals import DerivedTotals, RateSource
from sales_reconciliation.models.legacy import from_legacy_payload, is_legacy_payload

__all__ = [
    "COMMISSION_TTC_MARKUP",
    "RateSet",
    "DeliveryBreakdown",
    "RateSnapshot",
    "DayRecord",
    "DayRecordBase",
    "DeclaredCoefficients",
    "DeclaredDayRecord",
    "OperatingTime",
    "Payments",
    "RealDayRecord",
    "RecordMode",
    "Supplements",
    "SyncStatus",
    "empty_record",
    "parse_day_record",
    "DerivedTotals",
    "RateSource",
    "from_legacy_payload",
    "is_legacy_payload",
]
