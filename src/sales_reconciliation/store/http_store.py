"""
HTTP day-record store
Talks to a REST backend holding day records as JSON documents

Endpoints, relative to the configured base URL:
    GET  /daily-sales/{date}/{mode}   one record, 404 when never saved
    PUT  /daily-sales/{date}/{mode}   full upsert
    GET  /daily-sales?mode={mode}     every record of a mode
"""

import logging
import time
import uuid
from datetime import date
from typing import Any, Dict, Iterator, Optional, Union

import requests
from pydantic import ValidationError as PydanticValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from sales_reconciliation.config.engine_config import EngineConfig
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

# Statuses worth retrying on idempotent requests
RETRYABLE_STATUSES = (408, 429, 500, 502, 503, 504)


class HttpDayRecordStore(DayRecordStore):
    """
    REST-backed store
    
    Features:
    - Connection keep-alive via session pooling
    - Retry with exponential backoff on GET and PUT
    - Request ID header for traceability
    
    Example:
        >>> config = EngineConfig(store_backend="http", store_base_url="https://api.example.com")
        >>> with HttpDayRecordStore(config) as store:
        ...     record = store.load(date(2025, 3, 1), "real")
    """
    
    def __init__(
        self,
        config: EngineConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Create a store
        
        Args:
            config: Resolved engine configuration with ``store_base_url``
            session: Pre-built session, mainly for tests
        """
        if not config.store_base_url:
            raise StoreError(
                "store_base_url is required for the http store",
                code="STORE_CONFIG",
            )
        self.config = config
        self._session = session or self._create_session()
    
    def _create_session(self) -> requests.Session:
        """Create requests session with connection pooling and retry adapter"""
        session = requests.Session()
        session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        
        retry = Retry(
            total=self.config.retry_attempts,
            backoff_factor=self.config.retry_delay / 1000.0,
            status_forcelist=RETRYABLE_STATUSES,
            allowed_methods=frozenset(["GET", "PUT"]),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(pool_connections=4, pool_maxsize=4, max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        
        return session
    
    def _generate_request_id(self) -> str:
        """Generate unique request ID for traceability"""
        timestamp = hex(int(time.time() * 1000))[2:]
        unique_id = uuid.uuid4().hex[:8]
        return f"recon-{timestamp}-{unique_id}"
    
    def _url(self, business_date: Optional[date] = None, mode: Optional[RecordMode] = None) -> str:
        url = f"{self.config.store_base_url}/daily-sales"
        if business_date is not None and mode is not None:
            url = f"{url}/{business_date.isoformat()}/{mode.value}"
        return url
    
    def _request(
        self,
        method: str,
        url: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """Send one request; transport failures become StoreError"""
        request_id = self._generate_request_id()
        start = time.time()
        try:
            response = self._session.request(
                method,
                url,
                json=json_body,
                params=params,
                headers={"X-Request-ID": request_id},
                timeout=self.config.timeout / 1000.0,
            )
        except requests.exceptions.Timeout as e:
            raise StoreError("Store request timed out", code="STORE_TIMEOUT", cause=e) from e
        except requests.exceptions.RequestException as e:
            raise StoreError(
                f"Store request failed: {e}", code="STORE_NETWORK", cause=e
            ) from e
        
        duration = int((time.time() - start) * 1000)
        logger.debug(
            f"{method} {url} -> {response.status_code} in {duration}ms [{request_id}]"
        )
        return response
    
    def _raise_for_status(self, response: requests.Response, action: str) -> None:
        if response.ok:
            return
        message = f"{action} failed with HTTP {response.status_code}"
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("message"):
                message = f"{message}: {body['message']}"
        except ValueError:
            pass
        raise StoreError(
            message,
            code="STORE_HTTP",
            details={"status_code": response.status_code},
        )
    
    def _decode(self, business_date: date, mode: RecordMode, payload: Any) -> AnyDayRecord:
        if not isinstance(payload, dict):
            raise StoreError(
                f"Unexpected payload for {mode.value} record {business_date}",
                code="STORE_DECODE",
            )
        try:
            return deserialize_record(business_date, mode, payload)
        except PydanticValidationError as e:
            raise StoreError(
                f"Corrupt {mode.value} record for {business_date}",
                code="STORE_DECODE",
                cause=e,
            ) from e
    
    def load(self, business_date: date, mode: Union[RecordMode, str]) -> AnyDayRecord:
        mode = RecordMode(mode)
        response = self._request("GET", self._url(business_date, mode))
        if response.status_code == 404:
            return empty_record(business_date, mode)
        self._raise_for_status(response, f"Loading {mode.value} record for {business_date}")
        
        try:
            payload = response.json()
        except ValueError as e:
            raise StoreError(
                f"Invalid JSON for {mode.value} record {business_date}",
                code="STORE_DECODE",
                cause=e,
            ) from e
        return self._decode(business_date, mode, payload)
    
    def exists(self, business_date: date, mode: Union[RecordMode, str]) -> bool:
        mode = RecordMode(mode)
        response = self._request("GET", self._url(business_date, mode))
        if response.status_code == 404:
            return False
        self._raise_for_status(response, f"Checking {mode.value} record for {business_date}")
        return True
    
    def save(self, record: AnyDayRecord) -> SaveResult:
        mode = RecordMode(record.mode)
        try:
            response = self._request(
                "PUT",
                self._url(record.business_date, mode),
                json_body=serialize_record(record),
            )
            self._raise_for_status(
                response, f"Saving {mode.value} record for {record.business_date}"
            )
        except StoreError as e:
            logger.error(e.get_description())
            return SaveResult.failed(str(e))
        return SaveResult.ok()
    
    def iter_records(self, mode: Union[RecordMode, str]) -> Iterator[AnyDayRecord]:
        mode = RecordMode(mode)
        response = self._request("GET", self._url(), params={"mode": mode.value})
        self._raise_for_status(response, f"Listing {mode.value} records")
        
        try:
            items = response.json()
        except ValueError as e:
            raise StoreError(
                f"Invalid JSON listing {mode.value} records",
                code="STORE_DECODE",
                cause=e,
            ) from e
        
        for item in items or []:
            if not isinstance(item, dict) or "business_date" not in item:
                raise StoreError(
                    f"Listing of {mode.value} records holds an undated entry",
                    code="STORE_DECODE",
                )
            yield self._decode(date.fromisoformat(item["business_date"]), mode, item)
    
    def close(self) -> None:
        """Close the HTTP session"""
        self._session.close()
    
    def __enter__(self) -> "HttpDayRecordStore":
        """Context manager entry"""
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit"""
        self.close()
