"""
HTTP Store Unit Tests
"""

from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from sales_reconciliation.config import EngineConfig
from sales_reconciliation.exceptions import StoreError
from sales_reconciliation.models import DeclaredDayRecord, RealDayRecord
from sales_reconciliation.store.http_store import HttpDayRecordStore


DAY = date(2024, 3, 14)
BASE_URL = "https://sales.example.com/api"


def make_response(status_code: int = 200, body=None) -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig(store_backend="http", store_base_url=BASE_URL + "/", timeout=5000)


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def store(config: EngineConfig, session: MagicMock) -> HttpDayRecordStore:
    return HttpDayRecordStore(config, session=session)


class TestHttpDayRecordStore:
    """Tests for HttpDayRecordStore"""

    def test_requires_base_url(self):
        """Should refuse a configuration without a base URL"""
        with pytest.raises(StoreError) as exc_info:
            HttpDayRecordStore(EngineConfig())
        assert exc_info.value.code == "STORE_CONFIG"

    def test_load(self, store: HttpDayRecordStore, session: MagicMock):
        """Should GET the record and parse it"""
        session.request.return_value = make_response(200, {
            "business_date": "2024-03-14",
            "mode": "real",
            "manual_subtotal": 1500,
        })

        record = store.load(DAY, "real")

        assert isinstance(record, RealDayRecord)
        assert record.manual_subtotal == 1500
        method, url = session.request.call_args.args
        assert method == "GET"
        assert url == f"{BASE_URL}/daily-sales/2024-03-14/real"
        kwargs = session.request.call_args.kwargs
        assert kwargs["timeout"] == 5.0
        assert kwargs["headers"]["X-Request-ID"].startswith("recon-")

    def test_load_missing(self, store: HttpDayRecordStore, session: MagicMock):
        """Should return an empty default on 404"""
        session.request.return_value = make_response(404)

        record = store.load(DAY, "declared")

        assert isinstance(record, DeclaredDayRecord)
        assert record.category_sales == {}

    def test_load_server_error(self, store: HttpDayRecordStore, session: MagicMock):
        """Should raise StoreError on an error status"""
        session.request.return_value = make_response(500, {"message": "database down"})

        with pytest.raises(StoreError) as exc_info:
            store.load(DAY, "real")

        assert exc_info.value.code == "STORE_HTTP"
        assert "database down" in str(exc_info.value)
        assert exc_info.value.details["status_code"] == 500

    def test_load_invalid_json(self, store: HttpDayRecordStore, session: MagicMock):
        """Should raise StoreError for a body that is not JSON"""
        session.request.return_value = make_response(200, ValueError("no json"))

        with pytest.raises(StoreError) as exc_info:
            store.load(DAY, "real")
        assert exc_info.value.code == "STORE_DECODE"

    def test_load_timeout(self, store: HttpDayRecordStore, session: MagicMock):
        """Should map timeouts to StoreError"""
        session.request.side_effect = requests.exceptions.Timeout()

        with pytest.raises(StoreError) as exc_info:
            store.load(DAY, "real")
        assert exc_info.value.code == "STORE_TIMEOUT"

    def test_exists(self, store: HttpDayRecordStore, session: MagicMock):
        """Should report presence from the status code"""
        session.request.return_value = make_response(404)
        assert store.exists(DAY, "real") is False

        session.request.return_value = make_response(200, {})
        assert store.exists(DAY, "real") is True

    def test_save(self, store: HttpDayRecordStore, session: MagicMock):
        """Should PUT the full record"""
        session.request.return_value = make_response(204)
        record = RealDayRecord(business_date=DAY, manual_subtotal=1500)

        result = store.save(record)

        assert result.success is True
        method, url = session.request.call_args.args
        assert method == "PUT"
        assert url == f"{BASE_URL}/daily-sales/2024-03-14/real"
        body = session.request.call_args.kwargs["json"]
        assert body["manual_subtotal"] == 1500
        assert body["business_date"] == "2024-03-14"

    def test_save_failure_is_returned(self, store: HttpDayRecordStore, session: MagicMock):
        """Should return a failed result instead of raising"""
        session.request.side_effect = requests.exceptions.ConnectionError("refused")

        result = store.save(RealDayRecord(business_date=DAY))

        assert result.success is False
        assert "refused" in result.error

    def test_iter_records(self, store: HttpDayRecordStore, session: MagicMock):
        """Should list every record of a mode"""
        session.request.return_value = make_response(200, [
            {"business_date": "2024-03-01", "mode": "real", "manual_subtotal": 10},
            {"business_date": "2024-03-02", "mode": "real", "manual_subtotal": 20},
        ])

        records = list(store.iter_records("real"))

        assert [r.manual_subtotal for r in records] == [10, 20]
        assert session.request.call_args.kwargs["params"] == {"mode": "real"}

    def test_iter_records_requires_dates(self, store: HttpDayRecordStore, session: MagicMock):
        """Should reject listing entries without a date"""
        session.request.return_value = make_response(200, [{"manual_subtotal": 10}])

        with pytest.raises(StoreError):
            list(store.iter_records("real"))

    def test_context_manager_closes_session(self, config: EngineConfig, session: MagicMock):
        """Should close the session on exit"""
        with HttpDayRecordStore(config, session=session):
            pass
        session.close.assert_called_once()
