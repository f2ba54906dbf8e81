"""
Daily Sales Reconciliation Engine

Main entry point for the package
"""

from sales_reconciliation.exceptions import (
    ReconciliationError,
    ErrorCategory,
    ValidationError,
    StoreError,
    SessionError,
    ConfigError,
)

# Configuration
from sales_reconciliation.config import (
    EngineConfig,
    RateTable,
    StoreBackend,
    ConfigLoader,
    ConfigValidator,
    ENV_VAR_MAPPING,
    ConfigDefaults,
    configure_logging,
)

# Models
from sales_reconciliation.models import (
    DayRecord,
    RealDayRecord,
    DeclaredDayRecord,
    DeclaredCoefficients,
    DeliveryBreakdown,
    RateSet,
    RateSnapshot,
    RecordMode,
    SyncStatus,
    DerivedTotals,
    RateSource,
)

# Engine
from sales_reconciliation.engine import (
    RateResolver,
    resolve_rates,
    normalize_percent,
    compute_totals,
    project_declared,
    summarize_period,
    PeriodHalf,
)

# Stores
from sales_reconciliation.store import (
    DayRecordStore,
    SaveResult,
    InMemoryDayRecordStore,
    SqlDayRecordStore,
    HttpDayRecordStore,
    create_store,
)

# Session
from sales_reconciliation.session import EditSession

__version__ = "0.1.0"

__all__ = [
    # Exceptions
    "ReconciliationError",
    "ErrorCategory",
    "ValidationError",
    "StoreError",
    "SessionError",
    "ConfigError",
    # Configuration
    "EngineConfig",
    "RateTable",
    "StoreBackend",
    "ConfigLoader",
    "ConfigValidator",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    "configure_logging",
    # Models
    "DayRecord",
    "RealDayRecord",
    "DeclaredDayRecord",
    "DeclaredCoefficients",
    "DeliveryBreakdown",
    "RateSet",
    "RateSnapshot",
    "RecordMode",
    "SyncStatus",
    "DerivedTotals",
    "RateSource",
    # Engine
    "RateResolver",
    "resolve_rates",
    "normalize_percent",
    "compute_totals",
    "project_declared",
    "summarize_period",
    "PeriodHalf",
    # Stores
    "DayRecordStore",
    "SaveResult",
    "InMemoryDayRecordStore",
    "SqlDayRecordStore",
    "HttpDayRecordStore",
    "create_store",
    # Session
    "EditSession",
]
