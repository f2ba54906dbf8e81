"""
Day record models

A day record is the unit of persistence, keyed by business date and mode.
The real and declared variants share the settlement facts (payments,
delivery, tickets, hours) and differ in which revenue inputs they carry.
"""

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from sales_reconciliation.models.delivery import DeliveryBreakdown
from sales_reconciliation.models.types import Amount, Count
from sales_reconciliation.parsing import to_number


class RecordMode(str, Enum):
    """Record modes"""
    REAL = "real"
    DECLARED = "declared"


class SyncStatus(str, Enum):
    """Record lifecycle states"""
    DRAFT = "draft"
    READY = "ready"
    SYNCED = "synced"


class OperatingTime(BaseModel):
    """Opening or closing time; ranges are not enforced"""
    
    hour: Count = 0
    minute: Count = 0


class Payments(BaseModel):
    """Non-cash settlement channels"""
    
    card_count: Count = Field(default=0, description="Number of card slips")
    card_amount: Amount = Field(default=0.0, description="Card receipts (TTC)")
    check_count: Count = Field(default=0, description="Number of checks")
    check_amount: Amount = Field(default=0.0, description="Check receipts (TTC)")


class Supplements(BaseModel):
    """Manual real-mode adjustments to the register subtotal"""
    
    caterers: Amount = 0.0
    register_adjustment: Amount = Field(
        default=0.0,
        alias="register",
        description="Correction to the register total",
    )
    
    model_config = {"populate_by_name": True}


class DeclaredCoefficients(BaseModel):
    """Multipliers turning real category revenue into declared revenue"""
    
    exempt: float = Field(default=1.11, description="Applied to the exempt category")
    taxable: float = Field(default=0.60, description="Applied to every taxable category")
    
    @field_validator("exempt", "taxable", mode="before")
    @classmethod
    def coerce_number(cls, v: Any) -> float:
        """Read operator input, zero on failure"""
        return to_number(v)


class DayRecordBase(BaseModel):
    """Fields common to real and declared records"""
    
    business_date: date = Field(..., description="Calendar day this record covers")
    category_sales: Dict[str, Amount] = Field(
        default_factory=dict, description="Tax-inclusive sales per category code"
    )
    payments: Payments = Field(default_factory=Payments)
    ticket_count: Count = Field(default=0, description="Number of tickets issued")
    delivery: DeliveryBreakdown = Field(default_factory=DeliveryBreakdown)
    open_time: OperatingTime = Field(default_factory=OperatingTime)
    close_time: OperatingTime = Field(default_factory=OperatingTime)
    sync_status: SyncStatus = SyncStatus.DRAFT
    last_sync_at: Optional[datetime] = None
    
    @property
    def key(self) -> tuple:
        """Persistence key"""
        return (self.business_date, RecordMode(self.mode))


class RealDayRecord(DayRecordBase):
    """Register-side record of what was actually sold"""
    
    mode: Literal["real"] = "real"
    supplements: Supplements = Field(default_factory=Supplements)
    manual_subtotal: Amount = Field(
        default=0.0, description="Operator-entered tax-inclusive subtotal"
    )
    declared_coefficients: Optional[DeclaredCoefficients] = Field(
        default=None, description="Coefficients seeding this day's declared projection"
    )


class DeclaredDayRecord(DayRecordBase):
    """Fiscal record derived from the real record of the same day"""
    
    mode: Literal["declared"] = "declared"
    coefficients: Optional[DeclaredCoefficients] = Field(
        default=None,
        description="Coefficients this record was projected with",
    )


DayRecord = Annotated[
    Union[RealDayRecord, DeclaredDayRecord], Field(discriminator="mode")
]

_day_record_adapter: TypeAdapter = TypeAdapter(DayRecord)


def parse_day_record(data: Dict[str, Any]) -> Union[RealDayRecord, DeclaredDayRecord]:
    """Validate a stored payload into the matching record variant"""
    return _day_record_adapter.validate_python(data)


def empty_record(
    business_date: date, mode: Union[RecordMode, str]
) -> Union[RealDayRecord, DeclaredDayRecord]:
    """Blank record returned for a date that was never saved"""
    if RecordMode(mode) == RecordMode.REAL:
        return RealDayRecord(business_date=business_date)
    return DeclaredDayRecord(business_date=business_date)
