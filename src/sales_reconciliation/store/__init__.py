"""
Day-record store module
"""

from typing import Optional

from sales_reconciliation.config.engine_config import EngineConfig, StoreBackend
from sales_reconciliation.store.base import (
    AnyDayRecord,
    DayRecordStore,
    SaveResult,
    deserialize_record,
    serialize_record,
)
from sales_reconciliation.store.memory import InMemoryDayRecordStore
from sales_reconciliation.store.sql_store import DailySalesRow, SqlDayRecordStore
from sales_reconciliation.store.http_store import HttpDayRecordStore


def create_store(config: Optional[EngineConfig] = None) -> DayRecordStore:
    """Build the store selected by ``config.store_backend``"""
    config = config or EngineConfig()
    if config.store_backend == StoreBackend.SQL:
        return SqlDayRecordStore(config.database_url)
    if config.store_backend == StoreBackend.HTTP:
        return HttpDayRecordStore(config)
    return InMemoryDayRecordStore()


__all__ = [
    "AnyDayRecord",
    "DayRecordStore",
    "SaveResult",
    "deserialize_record",
    "serialize_record",
    "InMemoryDayRecordStore",
    "DailySalesRow",
    "SqlDayRecordStore",
    "HttpDayRecordStore",
    "create_store",
]
