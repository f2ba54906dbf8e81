"""
Edit session controller

Holds the one record being edited. The working copy is the single source
of truth: every edit writes to it, every total is recomputed from it, and
save finalizes and persists it directly, so the figures persisted are
always those of the latest edit.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional, Union

from sales_reconciliation.config.engine_config import EngineConfig
from sales_reconciliation.engine.channels import apply_delivery_shares, compute_totals
from sales_reconciliation.engine.declared import (
    project_category_sales,
    project_declared,
    resolve_coefficients,
)
from sales_reconciliation.engine.rates import RateResolver, ResolvedRates, normalize_percent
from sales_reconciliation.exceptions import SessionError, StoreError, ValidationError
from sales_reconciliation.models.day_record import (
    DeclaredCoefficients,
    DeclaredDayRecord,
    RealDayRecord,
    RecordMode,
    SyncStatus,
)
from sales_reconciliation.models.delivery import RateSnapshot
from sales_reconciliation.models.totals import DerivedTotals, RateSource
from sales_reconciliation.parsing import to_count, to_number
from sales_reconciliation.session.lifecycle import next_status
from sales_reconciliation.store.base import AnyDayRecord, DayRecordStore, SaveResult


logger = logging.getLogger(__name__)


# Editable fields and how their raw input is read
_AMOUNT = "amount"
_COUNT = "count"
_RATE = "rate"
_COEFFICIENT = "coefficient"

_COMMON_FIELDS: Dict[str, str] = {
    "open_time.hour": _COUNT,
    "open_time.minute": _COUNT,
    "close_time.hour": _COUNT,
    "close_time.minute": _COUNT,
}

_SETTLEMENT_FIELDS: Dict[str, str] = {
    "payments.card_count": _COUNT,
    "payments.card_amount": _AMOUNT,
    "payments.check_count": _COUNT,
    "payments.check_amount": _AMOUNT,
    "ticket_count": _COUNT,
    "delivery.gross_amount": _AMOUNT,
    "delivery.incidents": _AMOUNT,
    "delivery.cash_collected": _AMOUNT,
    "delivery.commission_ht": _RATE,
    "delivery.taxable_share_pct": _RATE,
    "delivery.exempt_share_pct": _RATE,
}

REAL_FIELDS: Dict[str, str] = {
    **_COMMON_FIELDS,
    **_SETTLEMENT_FIELDS,
    "supplements.caterers": _AMOUNT,
    "supplements.register_adjustment": _AMOUNT,
    "manual_subtotal": _AMOUNT,
    "declared_coefficients.exempt": _COEFFICIENT,
    "declared_coefficients.taxable": _COEFFICIENT,
}

DECLARED_FIELDS: Dict[str, str] = {
    **_COMMON_FIELDS,
    "coefficients.exempt": _COEFFICIENT,
    "coefficients.taxable": _COEFFICIENT,
}

# A declared day with no real record is entered like a blank day
DECLARED_UNLINKED_FIELDS: Dict[str, str] = {
    **DECLARED_FIELDS,
    **_SETTLEMENT_FIELDS,
}

DERIVED_FIELDS = frozenset({
    "delivery.taxable_share",
    "delivery.exempt_share",
    "delivery.commission_ttc",
})

CATEGORY_PREFIX = "category_sales."


def _system_clock() -> datetime:
    return datetime.now(timezone.utc)


class EditSession:
    """
    Edit session over one day record at a time

    Example:
        >>> session = EditSession(InMemoryDayRecordStore())
        >>> session.open(date(2025, 3, 1), "real")
        >>> session.commit_edit("category_sales.BOULANGERIE", "1000")
        >>> result = session.save(is_draft=False)
    """

    def __init__(
        self,
        store: DayRecordStore,
        config: Optional[EngineConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Create a session

        Args:
            store: Day-record store to load from and save to
            config: Engine configuration (defaults when omitted)
            clock: Source of sync timestamps
        """
        self.store = store
        self.config = config or EngineConfig()
        self._resolver = RateResolver(self.config.rates)
        self._clock = clock or _system_clock

        self._working: Optional[AnyDayRecord] = None
        self._linked_real: Optional[RealDayRecord] = None
        self._hint: Optional[RateSnapshot] = None
        self._dirty = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._working is not None

    @property
    def is_dirty(self) -> bool:
        """True when the working copy holds edits that were not saved"""
        return self._dirty

    @property
    def working_copy(self) -> AnyDayRecord:
        """The record being edited"""
        return self._require_open()

    @property
    def mode(self) -> RecordMode:
        return RecordMode(self._require_open().mode)

    @property
    def business_date(self) -> date:
        return self._require_open().business_date

    def _require_open(self) -> AnyDayRecord:
        if self._working is None:
            raise SessionError.no_open_record()
        return self._working

    # ------------------------------------------------------------------
    # Opening and closing
    # ------------------------------------------------------------------

    def open(
        self, business_date: date, mode: Union[RecordMode, str] = RecordMode.REAL
    ) -> DerivedTotals:
        """
        Load a record into the working copy

        Declared records are re-projected from the real record of the same
        day, using the coefficients saved with them.

        Args:
            business_date: Day to edit
            mode: Real or declared

        Returns:
            Derived totals of the loaded record

        Raises:
            SessionError: If the current record has unsaved edits
            StoreError: If the store cannot be read
        """
        if self._dirty:
            raise SessionError(
                "The open record has unsaved edits; save, close or use select_date",
                code="SESSION_DIRTY",
            )
        mode = RecordMode(mode)

        if mode == RecordMode.REAL:
            self._linked_real = None
            self._working = self.store.load(business_date, RecordMode.REAL)
        else:
            self._working = self._load_declared(business_date)

        self._hint = self.store.latest_rate_snapshot(exclude=business_date)
        self._dirty = False

        resolved = self._resolve()
        if resolved.source == RateSource.HISTORIC:
            logger.info(
                f"Legacy delivery record on {business_date}: historic rates applied"
            )
        logger.debug(f"Opened {mode.value} record for {business_date} ({resolved.source.value} rates)")
        return self.get_derived_totals()

    def _load_declared(self, business_date: date) -> DeclaredDayRecord:
        existing = None
        if self.store.exists(business_date, RecordMode.DECLARED):
            existing = self.store.load(business_date, RecordMode.DECLARED)

        if not self.store.exists(business_date, RecordMode.REAL):
            self._linked_real = None
            return existing or DeclaredDayRecord(business_date=business_date)

        real = self.store.load(business_date, RecordMode.REAL)
        self._linked_real = real
        return self._project(real, existing)

    def _project(
        self, real: RealDayRecord, existing: Optional[DeclaredDayRecord]
    ) -> DeclaredDayRecord:
        coefficients = resolve_coefficients(real, existing, self.config)
        rates = self._resolver.resolve(
            real.delivery.rate_snapshot,
            self.store.latest_rate_snapshot(exclude=real.business_date),
            real.delivery.gross_amount,
        ).rates
        return project_declared(real, coefficients, self.config, rates=rates, base=existing)

    def close(self) -> None:
        """Discard the working copy without saving"""
        if self._working is not None and self._dirty:
            logger.info(
                f"Discarded unsaved edits to {self._working.mode} record "
                f"for {self._working.business_date}"
            )
        self._working = None
        self._linked_real = None
        self._hint = None
        self._dirty = False

    def select_date(
        self,
        business_date: date,
        mode: Optional[Union[RecordMode, str]] = None,
    ) -> Optional[SaveResult]:
        """
        Switch to another day, flushing pending edits first

        Pending edits are saved as a draft before the new day is loaded.
        If that save fails the session stays on the current day.

        Args:
            business_date: Day to switch to
            mode: Mode to open; defaults to the current mode, else real

        Returns:
            Result of the flush, or None when nothing was pending
        """
        target_mode = RecordMode(mode) if mode is not None else (
            self.mode if self.is_open else RecordMode.REAL
        )

        flush: Optional[SaveResult] = None
        if self.is_open and self._dirty:
            flush = self.save(is_draft=True)
            if not flush.success:
                logger.warning(
                    f"Staying on {self.business_date}: pending edits could not be saved"
                )
                return flush

        self.open(business_date, target_mode)
        return flush

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def get_derived_totals(self) -> DerivedTotals:
        """Totals recomputed from the working copy"""
        record = self._require_open()
        return compute_totals(record, self._resolve(), self.config)

    def commit_edit(self, field: str, value: Any) -> DerivedTotals:
        """
        Write one raw field of the working copy

        Values are read leniently: anything unparseable becomes 0, or the
        configured default for a coefficient.

        Args:
            field: Dotted field path, e.g. ``payments.card_amount`` or
                ``category_sales.BOULANGERIE``
            value: Raw operator input

        Returns:
            Refreshed derived totals

        Raises:
            ValidationError: If the field is unknown, derived, or not
                editable in the current mode
        """
        record = self._require_open()
        mode = RecordMode(record.mode)

        if field in DERIVED_FIELDS:
            raise ValidationError.derived_field(field)

        if field.startswith(CATEGORY_PREFIX):
            self._edit_category(record, field[len(CATEGORY_PREFIX):], value)
        else:
            fields = self._editable_fields(mode)
            kind = fields.get(field)
            if kind is None:
                if field in REAL_FIELDS or field in DECLARED_FIELDS:
                    raise ValidationError.locked_field(field, mode.value)
                raise ValidationError.unknown_field(field)
            self._apply(record, field, kind, value)

        self._dirty = True
        return self.get_derived_totals()

    def _editable_fields(self, mode: RecordMode) -> Dict[str, str]:
        if mode == RecordMode.REAL:
            return REAL_FIELDS
        if self._linked_real is None:
            return DECLARED_UNLINKED_FIELDS
        return DECLARED_FIELDS

    def step_coefficient(self, which: str, delta: float = 0.01) -> DerivedTotals:
        """
        Nudge a declared coefficient and re-project

        Args:
            which: ``exempt`` or ``taxable``
            delta: Step, rounded to two decimals after applying
        """
        record = self._require_open()
        if not isinstance(record, DeclaredDayRecord):
            raise ValidationError.locked_field(f"coefficients.{which}", record.mode)
        if which not in ("exempt", "taxable"):
            raise ValidationError.unknown_field(f"coefficients.{which}")

        current = getattr(self._declared_coefficients(record), which)
        return self.commit_edit(f"coefficients.{which}", round(current + delta, 2))

    def _edit_category(self, record: AnyDayRecord, code: str, value: Any) -> None:
        code = code.strip().upper()
        field = f"{CATEGORY_PREFIX}{code}"
        if code not in self.config.categories:
            raise ValidationError.unknown_field(field)
        if isinstance(record, DeclaredDayRecord) and self._linked_real is not None:
            # Projected from the real record; only the coefficients move it
            raise ValidationError.locked_field(field, record.mode)
        record.category_sales[code] = to_number(value)

    def _apply(self, record: AnyDayRecord, field: str, kind: str, value: Any) -> None:
        section, _, name = field.rpartition(".")

        if kind == _RATE:
            self._edit_rate(record, name, value)
            return

        if kind == _COEFFICIENT:
            self._edit_coefficient(record, name, value)
            return

        parsed = to_count(value) if kind == _COUNT else to_number(value)

        if section == "delivery" and name == "gross_amount":
            self._stamp_rates_on_first_entry(record, parsed)

        target = getattr(record, section) if section else record
        setattr(target, name, parsed)

    def _stamp_rates_on_first_entry(self, record: AnyDayRecord, gross: float) -> None:
        """Freeze the current rates when a day first gets delivery revenue"""
        delivery = record.delivery
        if delivery.rate_snapshot is None and delivery.gross_amount == 0 and gross != 0:
            rates = self._resolve().rates
            delivery.rate_snapshot = rates.to_snapshot()
            logger.debug(
                f"Rates {rates.commission_ht}/{rates.taxable_share_pct}/"
                f"{rates.exempt_share_pct} frozen on {record.business_date}"
            )

    def _edit_rate(self, record: AnyDayRecord, name: str, value: Any) -> None:
        rates = self._resolve().rates.model_copy(update={name: normalize_percent(value)})
        record.delivery.rate_snapshot = rates.to_snapshot()

    def _edit_coefficient(self, record: AnyDayRecord, name: str, value: Any) -> None:
        # Unreadable input falls back to the configured default, not 0
        parsed = to_number(value) or getattr(self.config.default_coefficients, name)

        if isinstance(record, RealDayRecord):
            coefficients = record.declared_coefficients or self.config.default_coefficients
            record.declared_coefficients = coefficients.model_copy(update={name: parsed})
            return

        coefficients = self._declared_coefficients(record).model_copy(update={name: parsed})
        record.coefficients = coefficients
        if self._linked_real is not None:
            record.category_sales = project_category_sales(
                self._linked_real.category_sales,
                coefficients,
                self.config.exempt_category,
            )

    def _declared_coefficients(self, record: DeclaredDayRecord) -> DeclaredCoefficients:
        if record.coefficients is not None:
            return record.coefficients
        if self._linked_real is not None and self._linked_real.declared_coefficients is not None:
            return self._linked_real.declared_coefficients
        return self.config.default_coefficients

    def _resolve(self) -> ResolvedRates:
        record = self._require_open()
        return self._resolver.resolve(
            record.delivery.rate_snapshot,
            self._hint,
            record.delivery.gross_amount,
        )

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def save(self, is_draft: bool, target_date: Optional[date] = None) -> SaveResult:
        """
        Finalize and persist the working copy

        Derived delivery shares and the rate snapshot are recomputed from
        the working copy's raw fields. A draft save marks the record ready;
        a final save syncs it and stamps ``last_sync_at``. Saving a real
        record also re-projects and saves the declared record of that day.
        When saving under another date, the lifecycle check applies to the
        record already stored there.

        On failure the working copy is kept so the save can be retried.

        Args:
            is_draft: Save as ready instead of syncing
            target_date: Day to save under; defaults to the open day

        Returns:
            SaveResult of the store
        """
        record = self._require_open()
        mode = RecordMode(record.mode)

        current = record.sync_status
        if target_date is not None and target_date != record.business_date:
            try:
                current = self._stored_status(target_date, mode)
            except StoreError as e:
                logger.error(f"Could not read the record stored on {target_date}: {e}")
                return SaveResult.failed(str(e))

        try:
            status = next_status(current, is_draft, mode)
        except SessionError as e:
            logger.warning(f"Refused save of {target_date or record.business_date}: {e}")
            return SaveResult.failed(str(e))

        finalized = self._finalize(record, target_date)
        finalized.sync_status = status
        if not is_draft:
            finalized.last_sync_at = self._clock()

        totals = compute_totals(finalized, self._resolve_for(finalized), self.config)
        result = self.store.save(finalized)
        if not result.success:
            logger.error(
                f"Save of {mode.value} record for {finalized.business_date} failed: {result.error}"
            )
            return result

        logger.info(
            f"Saved {mode.value} record for {finalized.business_date} as {status.value} "
            f"(total {totals.total_gross:.2f}, cash {totals.cash_derived:.2f})"
        )
        self._working = finalized
        self._dirty = False

        if isinstance(finalized, RealDayRecord):
            return self._propagate_declared(finalized)
        return result

    def _stored_status(self, business_date: date, mode: RecordMode) -> SyncStatus:
        """Status of the record a save would overwrite"""
        if not self.store.exists(business_date, mode):
            return SyncStatus.DRAFT
        return self.store.load(business_date, mode).sync_status

    def _finalize(self, record: AnyDayRecord, target_date: Optional[date]) -> AnyDayRecord:
        rates = self._resolve().rates
        update: Dict[str, Any] = {
            "delivery": apply_delivery_shares(record.delivery, rates, self.config.vat_divisor),
        }
        if target_date is not None and target_date != record.business_date:
            update["business_date"] = target_date
        return record.model_copy(deep=True, update=update)

    def _resolve_for(self, record: AnyDayRecord) -> ResolvedRates:
        return self._resolver.resolve(
            record.delivery.rate_snapshot, self._hint, record.delivery.gross_amount
        )

    def _propagate_declared(self, real: RealDayRecord) -> SaveResult:
        """Re-project the declared record of a freshly saved real day"""
        existing = None
        if self.store.exists(real.business_date, RecordMode.DECLARED):
            existing = self.store.load(real.business_date, RecordMode.DECLARED)

        declared = self._project(real, existing)
        result = self.store.save(declared)
        if not result.success:
            logger.error(
                f"Real record for {real.business_date} saved but declared "
                f"projection failed: {result.error}"
            )
        return result
