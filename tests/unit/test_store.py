"""
Day-Record Store Unit Tests
"""

import json
from datetime import date

import pytest
from sqlalchemy import text

from sales_reconciliation.config import EngineConfig
from sales_reconciliation.exceptions import StoreError
from sales_reconciliation.models import (
    DeclaredDayRecord,
    RateSnapshot,
    RealDayRecord,
    RecordMode,
)
from sales_reconciliation.store import (
    HttpDayRecordStore,
    InMemoryDayRecordStore,
    SqlDayRecordStore,
    create_store,
)
from sales_reconciliation.store.base import deserialize_record, serialize_record


DAY = date(2024, 3, 14)


def make_real(business_date: date = DAY, commission: float = None) -> RealDayRecord:
    delivery = {"gross_amount": 100}
    if commission is not None:
        delivery["rate_snapshot"] = {"commission_ht": commission}
    return RealDayRecord(
        business_date=business_date,
        category_sales={"BOULANGERIE": 1000, "PATISSERIE": 600},
        manual_subtotal=1500,
        delivery=delivery,
    )


@pytest.fixture(params=["memory", "sqlite-memory", "sqlite-file"])
def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryDayRecordStore()
    elif request.param == "sqlite-memory":
        store = SqlDayRecordStore("sqlite://")
        yield store
        store.close()
    else:
        store = SqlDayRecordStore(f"sqlite:///{tmp_path / 'daily_sales.db'}")
        yield store
        store.close()


class TestDayRecordStore:
    """Behaviour shared by every store backend"""

    def test_load_missing_returns_empty(self, store):
        """Should return an empty default for a day never saved"""
        record = store.load(DAY, "real")
        assert isinstance(record, RealDayRecord)
        assert record.category_sales == {}
        assert store.exists(DAY, "real") is False

    def test_save_and_load(self, store):
        """Should return what was saved"""
        record = make_real(commission=15)
        assert store.save(record).success is True

        loaded = store.load(DAY, RecordMode.REAL)

        assert loaded == record
        assert store.exists(DAY, "real") is True

    def test_modes_are_separate(self, store):
        """Should keep the real and declared records of a day apart"""
        store.save(make_real())
        store.save(DeclaredDayRecord(business_date=DAY, category_sales={"BOULANGERIE": 1110}))

        assert store.load(DAY, "real").category_sales["BOULANGERIE"] == 1000
        assert store.load(DAY, "declared").category_sales["BOULANGERIE"] == 1110

    def test_save_is_full_upsert(self, store):
        """Should replace the whole record on save"""
        store.save(make_real())
        store.save(RealDayRecord(business_date=DAY, category_sales={"BOISSONS": 5}))

        assert store.load(DAY, "real").category_sales == {"BOISSONS": 5}

    def test_loaded_record_is_a_copy(self, store):
        """Should not let callers mutate stored state"""
        store.save(make_real())
        loaded = store.load(DAY, "real")
        loaded.category_sales["BOULANGERIE"] = 1

        assert store.load(DAY, "real").category_sales["BOULANGERIE"] == 1000

    def test_load_period(self, store):
        """Should return saved records in range, ordered by date"""
        for day in (20, 3, 10):
            store.save(make_real(date(2024, 3, day)))
        store.save(make_real(date(2024, 4, 1)))

        records = store.load_period(date(2024, 3, 1), date(2024, 3, 31), "real")

        assert [r.business_date.day for r in records] == [3, 10, 20]

    def test_latest_rate_snapshot(self, store):
        """Should hint the snapshot of the latest-dated other day"""
        store.save(make_real(date(2024, 3, 1), commission=12))
        store.save(make_real(date(2024, 3, 5), commission=18))
        store.save(make_real(date(2024, 3, 8)))

        assert store.latest_rate_snapshot().commission_ht == 18
        assert store.latest_rate_snapshot(exclude=date(2024, 3, 5)).commission_ht == 12

    def test_backfilled_day_is_not_hint(self, store):
        """Should keep hinting the latest date when an older day is saved afterwards"""
        store.save(make_real(date(2024, 3, 5), commission=18))
        store.save(make_real(date(2024, 3, 1), commission=12))

        assert store.latest_rate_snapshot().commission_ht == 18

    def test_latest_rate_snapshot_none(self, store):
        """Should return None when no record holds a snapshot"""
        store.save(make_real())
        assert store.latest_rate_snapshot() is None


class TestSqlDayRecordStore:
    """Tests specific to the SQL store"""

    @pytest.fixture
    def sql_store(self):
        store = SqlDayRecordStore("sqlite://")
        yield store
        store.close()

    def test_one_row_per_day(self, sql_store: SqlDayRecordStore):
        """Should store both modes of a day in one row"""
        sql_store.save(make_real())
        sql_store.save(DeclaredDayRecord(business_date=DAY))

        with sql_store.engine.connect() as conn:
            rows = conn.execute(text("SELECT date, real_data, declared_data FROM daily_sales")).all()

        assert len(rows) == 1
        assert rows[0][0] == "2024-03-14"
        assert json.loads(rows[0][1])["manual_subtotal"] == 1500
        assert json.loads(rows[0][2])["mode"] == "declared"

    def test_reads_legacy_payload(self, sql_store: SqlDayRecordStore):
        """Should convert rows written by the first version of the application"""
        legacy = {
            "sales": {"BOULANGERIE": "1000", "PATISSERIE": "600"},
            "subTotalInput": "1500",
            "glovo": {"brut": "100", "cash": "0"},
            "status": "synced",
        }
        with sql_store.engine.begin() as conn:
            conn.execute(
                text("INSERT INTO daily_sales (date, real_data) VALUES (:d, :r)"),
                {"d": "2024-03-14", "r": json.dumps(legacy)},
            )

        record = sql_store.load(DAY, "real")

        assert record.manual_subtotal == 1500
        assert record.delivery.is_legacy is True
        assert sql_store.exists(DAY, "declared") is False

    def test_corrupt_payload_raises(self, sql_store: SqlDayRecordStore):
        """Should raise StoreError rather than return an empty record"""
        with sql_store.engine.begin() as conn:
            conn.execute(
                text("INSERT INTO daily_sales (date, real_data) VALUES (:d, :r)"),
                {"d": "2024-03-14", "r": "{broken"},
            )

        with pytest.raises(StoreError) as exc_info:
            sql_store.load(DAY, "real")
        assert exc_info.value.code == "STORE_DECODE"

    def test_save_failure_is_returned(self):
        """Should report a backend failure as a failed result"""
        store = SqlDayRecordStore("sqlite://", create_schema=False)
        try:
            result = store.save(make_real())
        finally:
            store.close()

        assert result.success is False
        assert result.error

    def test_load_failure_raises(self):
        """Should raise StoreError when the backend cannot be read"""
        store = SqlDayRecordStore("sqlite://", create_schema=False)
        try:
            with pytest.raises(StoreError) as exc_info:
                store.load(DAY, "real")
        finally:
            store.close()
        assert exc_info.value.code == "STORE_READ"


class TestSerialization:
    """Tests for the stored payload helpers"""

    def test_fills_key_from_location(self):
        """Should take date and mode from where the payload was stored"""
        record = deserialize_record(DAY, "declared", {"category_sales": {"BOULANGERIE": 10}})
        assert isinstance(record, DeclaredDayRecord)
        assert record.business_date == DAY

    def test_serialized_snapshot(self):
        """Should persist the rate snapshot with its derived TTC"""
        payload = serialize_record(make_real(commission=15))
        assert payload["delivery"]["rate_snapshot"]["commission_ttc"] == pytest.approx(18)
        assert payload["business_date"] == "2024-03-14"

    def test_register_adjustment_stored_as_register(self):
        """Should store the register correction under its payload name"""
        record = RealDayRecord(business_date=DAY, supplements={"register": 5})
        assert record.supplements.register_adjustment == 5
        payload = serialize_record(record)
        assert payload["supplements"] == {"caterers": 0.0, "register": 5.0}
        restored = deserialize_record(DAY, "real", payload)
        assert restored.supplements.register_adjustment == 5


class TestCreateStore:
    """Tests for create_store"""

    def test_memory_default(self):
        """Should build an in-memory store by default"""
        assert isinstance(create_store(), InMemoryDayRecordStore)

    def test_sql(self):
        """Should build an SQL store from the database URL"""
        store = create_store(EngineConfig(store_backend="sql", database_url="sqlite://"))
        try:
            assert isinstance(store, SqlDayRecordStore)
        finally:
            store.close()

    def test_http(self):
        """Should build an HTTP store from the base URL"""
        store = create_store(EngineConfig(store_backend="http", store_base_url="https://example.com"))
        try:
            assert isinstance(store, HttpDayRecordStore)
        finally:
            store.close()
