"""
Import of day payloads written by the first version of the application

Those payloads use French keys and string amounts, carry precomputed
totals under ``calculated`` (ignored here, they are always re-derived) and
never hold delivery rates, so any of them with delivery revenue becomes a
legacy record for rate resolution.
"""

from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from sales_reconciliation.models.day_record import (
    DeclaredCoefficients,
    DeclaredDayRecord,
    RealDayRecord,
    RecordMode,
    SyncStatus,
)
from sales_reconciliation.parsing import to_number


LEGACY_MARKER_KEYS = ("sales", "glovo", "subTotalInput", "nbTickets", "calculated")


def is_legacy_payload(payload: Dict[str, Any]) -> bool:
    """Check whether a stored payload uses the legacy layout"""
    if "business_date" in payload or "mode" in payload:
        return False
    return any(key in payload for key in LEGACY_MARKER_KEYS)


def _status(value: Any) -> SyncStatus:
    try:
        return SyncStatus(value)
    except ValueError:
        return SyncStatus.DRAFT


def _timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _coefficients(payload: Dict[str, Any]) -> Optional[DeclaredCoefficients]:
    if payload.get("coeffExo") is None and payload.get("coeffImp") is None:
        return None
    defaults = DeclaredCoefficients()
    return DeclaredCoefficients(
        exempt=to_number(payload.get("coeffExo")) or defaults.exempt,
        taxable=to_number(payload.get("coeffImp")) or defaults.taxable,
    )


def from_legacy_payload(
    business_date: date,
    mode: Union[RecordMode, str],
    payload: Dict[str, Any],
) -> Union[RealDayRecord, DeclaredDayRecord]:
    """
    Convert a legacy payload into a record
    
    Args:
        business_date: Date the payload is stored under
        mode: Column the payload was read from
        payload: Decoded legacy JSON object
        
    Returns:
        Record of the matching variant, without a rate snapshot
    """
    payments = payload.get("payments") or {}
    glovo = payload.get("glovo") or {}
    hours = payload.get("hours") or {}
    
    common: Dict[str, Any] = {
        "business_date": business_date,
        "category_sales": dict(payload.get("sales") or {}),
        "payments": {
            "card_count": payments.get("nbCmi"),
            "card_amount": payments.get("mtCmi"),
            "check_count": payments.get("nbChq"),
            "check_amount": payments.get("mtChq"),
        },
        "ticket_count": payload.get("nbTickets"),
        "delivery": {
            "gross_amount": glovo.get("brut"),
            "taxable_share": glovo.get("brutImp"),
            "exempt_share": glovo.get("brutExo"),
            "incidents": glovo.get("incid"),
            "cash_collected": glovo.get("cash"),
        },
        "open_time": {"hour": hours.get("startH"), "minute": hours.get("startM")},
        "close_time": {"hour": hours.get("endH"), "minute": hours.get("endM")},
        "sync_status": _status(payload.get("status")),
        "last_sync_at": _timestamp(payload.get("lastSyncAt")),
    }
    coefficients = _coefficients(payload)
    
    if RecordMode(mode) == RecordMode.REAL:
        supplements = payload.get("supplements") or {}
        return RealDayRecord(
            **common,
            supplements={
                "caterers": supplements.get("traiteurs"),
                "register": supplements.get("caisse"),
            },
            manual_subtotal=payload.get("subTotalInput"),
            declared_coefficients=coefficients,
        )
    
    return DeclaredDayRecord(
        **common,
        coefficients=coefficients,
    )
