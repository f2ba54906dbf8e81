"""
Record Lifecycle and Error Unit Tests
"""

import pytest

from sales_reconciliation.exceptions import (
    ConfigError,
    ErrorCategory,
    ReconciliationError,
    SessionError,
    StoreError,
    ValidationError,
)
from sales_reconciliation.models import RecordMode, SyncStatus
from sales_reconciliation.session import can_transition, next_status


class TestLifecycle:
    """Tests for the draft -> ready -> synced lifecycle"""

    @pytest.mark.parametrize(
        "current,target,allowed",
        [
            (SyncStatus.DRAFT, SyncStatus.READY, True),
            (SyncStatus.DRAFT, SyncStatus.SYNCED, True),
            (SyncStatus.READY, SyncStatus.READY, True),
            (SyncStatus.READY, SyncStatus.SYNCED, True),
            (SyncStatus.SYNCED, SyncStatus.SYNCED, True),
            (SyncStatus.SYNCED, SyncStatus.READY, False),
            (SyncStatus.READY, SyncStatus.DRAFT, False),
        ],
    )
    def test_transitions(self, current, target, allowed):
        """Should only allow forward moves and re-syncs"""
        assert can_transition(current, target) is allowed

    def test_draft_save_is_ready(self):
        """Should mark draft saves ready"""
        assert next_status(SyncStatus.DRAFT, True, RecordMode.REAL) == SyncStatus.READY

    def test_final_save_is_synced(self):
        """Should sync final saves"""
        assert next_status(SyncStatus.READY, False, "real") == SyncStatus.SYNCED

    def test_synced_real_draft_save(self):
        """Should refuse to move a synced real record back to ready"""
        with pytest.raises(SessionError) as exc_info:
            next_status(SyncStatus.SYNCED, True, RecordMode.REAL)
        assert exc_info.value.code == "SESSION03"
        assert exc_info.value.details == {"from": "synced", "to": "ready"}

    def test_declared_follows_save_kind(self):
        """Should let derived declared records follow the kind of save"""
        assert next_status(SyncStatus.SYNCED, True, RecordMode.DECLARED) == SyncStatus.READY


class TestErrors:
    """Tests for the error hierarchy"""

    def test_categories_from_codes(self):
        """Should derive the category from the code prefix"""
        assert ValidationError.unknown_field("x").is_category(ErrorCategory.VALIDATION)
        assert StoreError("down").is_category(ErrorCategory.STORE)
        assert SessionError.no_open_record().is_category(ErrorCategory.SESSION)
        assert ConfigError("bad").is_category(ErrorCategory.CONFIG)
        assert ReconciliationError("odd").is_category(ErrorCategory.UNKNOWN)

    def test_locked_field_details(self):
        """Should record the field and mode of a locked edit"""
        error = ValidationError.locked_field("manual_subtotal", "declared")
        assert error.field == "manual_subtotal"
        assert error.has_code("VAL03")
        assert error.to_dict()["details"] == {"mode": "declared"}

    def test_description_names_cause(self):
        """Should mention code and cause in the description"""
        error = StoreError("Could not read", code="STORE_READ", cause=OSError("disk"))
        assert error.get_description() == "[STORE_READ] Could not read (caused by OSError)"
