"""In-memory day-record store"""

import logging
from datetime import date
from typing import Dict, Iterator, Tuple, Union

from sales_reconciliation.models.day_record import RecordMode, empty_record
from sales_reconciliation.store.base import AnyDayRecord, DayRecordStore, SaveResult


logger = logging.getLogger(__name__)


class InMemoryDayRecordStore(DayRecordStore):
    """
    Dictionary-backed store
    
    Records are deep-copied in and out so callers never share state with
    the store.
    """
    
    def __init__(self) -> None:
        self._records: Dict[Tuple[date, RecordMode], AnyDayRecord] = {}
    
    def load(self, business_date: date, mode: Union[RecordMode, str]) -> AnyDayRecord:
        record = self._records.get((business_date, RecordMode(mode)))
        if record is None:
            return empty_record(business_date, mode)
        return record.model_copy(deep=True)
    
    def exists(self, business_date: date, mode: Union[RecordMode, str]) -> bool:
        return (business_date, RecordMode(mode)) in self._records
    
    def save(self, record: AnyDayRecord) -> SaveResult:
        self._records[record.key] = record.model_copy(deep=True)
        logger.debug(f"Saved {record.mode} record for {record.business_date}")
        return SaveResult.ok()
    
    def iter_records(self, mode: Union[RecordMode, str]) -> Iterator[AnyDayRecord]:
        mode = RecordMode(mode)
        for (_, record_mode), record in list(self._records.items()):
            if record_mode == mode:
                yield record.model_copy(deep=True)
    
    def __len__(self) -> int:
        return len(self._records)
