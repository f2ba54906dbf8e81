"""
SQL day-record store

One row per calendar day in ``daily_sales``, with the real and declared
records held as JSON text in separate columns. Saving a record only
rewrites the column of its own mode.
"""

import json
import logging
from datetime import date
from typing import Any, Dict, Iterator, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import String, Text, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from sqlalchemy.pool import StaticPool

from sales_reconciliation.exceptions import StoreError
from sales_reconciliation.models.day_record import RecordMode, empty_record
from sales_reconciliation.store.base import (
    AnyDayRecord,
    DayRecordStore,
    SaveResult,
    deserialize_record,
    serialize_record,
)


logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for store tables"""


class DailySalesRow(Base):
    """A calendar day with its real and declared payloads"""
    
    __tablename__ = "daily_sales"
    
    business_date: Mapped[str] = mapped_column("date", String(10), primary_key=True)
    real_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    declared_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


_COLUMNS = {
    RecordMode.REAL: "real_data",
    RecordMode.DECLARED: "declared_data",
}


def _is_memory_url(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


class SqlDayRecordStore(DayRecordStore):
    """
    SQLAlchemy-backed store
    
    Example:
        >>> store = SqlDayRecordStore("sqlite:///daily_sales.db")
        >>> record = store.load(date(2025, 3, 1), "real")
    """
    
    def __init__(
        self,
        database_url: str = "sqlite://",
        engine: Optional[Engine] = None,
        create_schema: bool = True,
    ) -> None:
        """
        Create a store
        
        Args:
            database_url: SQLAlchemy URL, ignored when ``engine`` is given
            engine: Existing engine to share
            create_schema: Create the table if it does not exist
        """
        if engine is None:
            if _is_memory_url(database_url):
                # A single shared connection keeps the in-memory database alive
                engine = create_engine(
                    database_url,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            else:
                engine = create_engine(database_url, pool_pre_ping=True)
        self._engine = engine
        
        if create_schema:
            Base.metadata.create_all(self._engine)
    
    @property
    def engine(self) -> Engine:
        return self._engine
    
    def load(self, business_date: date, mode: Union[RecordMode, str]) -> AnyDayRecord:
        mode = RecordMode(mode)
        try:
            with Session(self._engine) as session:
                row = session.get(DailySalesRow, business_date.isoformat())
                raw = getattr(row, _COLUMNS[mode]) if row is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load {mode.value} record for {business_date}: {e}")
            raise StoreError(
                f"Could not read {mode.value} record for {business_date}",
                code="STORE_READ",
                cause=e,
            ) from e
        
        if raw is None:
            return empty_record(business_date, mode)
        return self._decode(business_date, mode, raw)
    
    def exists(self, business_date: date, mode: Union[RecordMode, str]) -> bool:
        mode = RecordMode(mode)
        column = getattr(DailySalesRow, _COLUMNS[mode])
        try:
            with Session(self._engine) as session:
                found = session.scalar(
                    select(DailySalesRow.business_date).where(
                        DailySalesRow.business_date == business_date.isoformat(),
                        column.is_not(None),
                    )
                )
        except SQLAlchemyError as e:
            raise StoreError(
                f"Could not read {mode.value} record for {business_date}",
                code="STORE_READ",
                cause=e,
            ) from e
        return found is not None
    
    def save(self, record: AnyDayRecord) -> SaveResult:
        mode = RecordMode(record.mode)
        key = record.business_date.isoformat()
        payload = json.dumps(serialize_record(record))
        
        try:
            with Session(self._engine) as session, session.begin():
                row = session.get(DailySalesRow, key)
                if row is None:
                    row = DailySalesRow(business_date=key)
                    session.add(row)
                setattr(row, _COLUMNS[mode], payload)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save {mode.value} record for {key}: {e}")
            return SaveResult.failed(str(e))
        
        logger.debug(f"Saved {mode.value} record for {key}")
        return SaveResult.ok()
    
    def iter_records(self, mode: Union[RecordMode, str]) -> Iterator[AnyDayRecord]:
        mode = RecordMode(mode)
        column = getattr(DailySalesRow, _COLUMNS[mode])
        try:
            with Session(self._engine) as session:
                rows = session.execute(
                    select(DailySalesRow.business_date, column).where(column.is_not(None))
                ).all()
        except SQLAlchemyError as e:
            raise StoreError(
                f"Could not list {mode.value} records",
                code="STORE_READ",
                cause=e,
            ) from e
        
        for key, raw in rows:
            yield self._decode(date.fromisoformat(key), mode, raw)
    
    def close(self) -> None:
        """Dispose of the engine's connection pool"""
        self._engine.dispose()
    
    def _decode(self, business_date: date, mode: RecordMode, raw: str) -> AnyDayRecord:
        try:
            payload: Dict[str, Any] = json.loads(raw)
            return deserialize_record(business_date, mode, payload)
        except (ValueError, PydanticValidationError) as e:
            raise StoreError(
                f"Corrupt {mode.value} record for {business_date}",
                code="STORE_DECODE",
                cause=e,
            ) from e
