"""
Day-record store contract

A store loads and saves whole records keyed by ``(business_date, mode)``.
Saves are full upserts, never partial updates. There is no locking: one
editor per date is assumed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterator, List, Optional, Union

from sales_reconciliation.models.day_record import (
    DeclaredDayRecord,
    RealDayRecord,
    RecordMode,
    parse_day_record,
)
from sales_reconciliation.models.delivery import RateSnapshot
from sales_reconciliation.models.legacy import from_legacy_payload, is_legacy_payload


AnyDayRecord = Union[RealDayRecord, DeclaredDayRecord]


@dataclass
class SaveResult:
    """Outcome of a save; failures are reported, not raised"""
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "SaveResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> "SaveResult":
        return cls(success=False, error=error)


def serialize_record(record: AnyDayRecord) -> Dict[str, Any]:
    """JSON-ready payload of a record"""
    return record.model_dump(mode="json", by_alias=True)


def deserialize_record(
    business_date: date, mode: Union[RecordMode, str], payload: Dict[str, Any]
) -> AnyDayRecord:
    """
    Turn a stored payload back into a record
    
    Payloads written by the first version of the application are
    converted; anything else must match the current schema.
    """
    if is_legacy_payload(payload):
        return from_legacy_payload(business_date, mode, payload)
    data = dict(payload)
    data.setdefault("business_date", business_date)
    data.setdefault("mode", RecordMode(mode).value)
    return parse_day_record(data)


class DayRecordStore(ABC):
    """Abstract store of day records"""
    
    @abstractmethod
    def load(self, business_date: date, mode: Union[RecordMode, str]) -> AnyDayRecord:
        """
        Load a record
        
        Args:
            business_date: Day to load
            mode: Real or declared
            
        Returns:
            The stored record, or an empty default when none exists
            
        Raises:
            StoreError: If the backend cannot be read
        """
    
    @abstractmethod
    def exists(self, business_date: date, mode: Union[RecordMode, str]) -> bool:
        """Check whether a record has been saved"""
    
    @abstractmethod
    def save(self, record: AnyDayRecord) -> SaveResult:
        """
        Upsert a full record
        
        Returns:
            SaveResult; backend failures are returned, never raised
        """
    
    @abstractmethod
    def iter_records(self, mode: Union[RecordMode, str]) -> Iterator[AnyDayRecord]:
        """Iterate over every saved record of a mode, in no particular order"""
    
    def load_period(
        self, start: date, end: date, mode: Union[RecordMode, str]
    ) -> List[AnyDayRecord]:
        """Saved records of a mode between two dates inclusive, by date"""
        records = [
            r for r in self.iter_records(mode) if start <= r.business_date <= end
        ]
        return sorted(records, key=lambda r: r.business_date)
    
    def latest_rate_snapshot(
        self, exclude: Optional[date] = None
    ) -> Optional[RateSnapshot]:
        """
        Rate snapshot of the latest-dated real record
        
        Used as the "last used" hint when a new day is opened.
        
        Args:
            exclude: Date to skip, normally the day being edited
        """
        latest: Optional[RealDayRecord] = None
        for record in self.iter_records(RecordMode.REAL):
            if record.business_date == exclude:
                continue
            if record.delivery.rate_snapshot is None:
                continue
            if latest is None or record.business_date > latest.business_date:
                latest = record
        return latest.delivery.rate_snapshot if latest is not None else None
