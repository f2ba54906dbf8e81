"""Sync lifecycle of a day record: draft -> ready -> synced"""

from typing import Dict, FrozenSet, Union

from sales_reconciliation.exceptions import SessionError
from sales_reconciliation.models.day_record import RecordMode, SyncStatus


ALLOWED_TRANSITIONS: Dict[SyncStatus, FrozenSet[SyncStatus]] = {
    SyncStatus.DRAFT: frozenset({SyncStatus.READY, SyncStatus.SYNCED}),
    SyncStatus.READY: frozenset({SyncStatus.READY, SyncStatus.SYNCED}),
    # Re-sync overwrites; nothing moves a synced record backwards
    SyncStatus.SYNCED: frozenset({SyncStatus.SYNCED}),
}


def can_transition(current: SyncStatus, target: SyncStatus) -> bool:
    """Check a lifecycle transition against the allowed table"""
    return target in ALLOWED_TRANSITIONS[current]


def next_status(
    current: SyncStatus,
    is_draft: bool,
    mode: Union[RecordMode, str],
) -> SyncStatus:
    """
    Status a record moves to when saved
    
    A draft save marks the record ready; a final save syncs it. Synced
    real records are history and only accept a re-sync. Declared records
    are derived, so a draft save may move them back to ready.
    
    Raises:
        SessionError: If the transition is not allowed
    """
    target = SyncStatus.READY if is_draft else SyncStatus.SYNCED
    if RecordMode(mode) == RecordMode.DECLARED:
        return target
    if not can_transition(current, target):
        raise SessionError.invalid_transition(current.value, target.value)
    return target
