"""
Fund backend API client.

Single place that talks to the fund REST backend. Every call goes through
one request path with a hard timeout, exponential-backoff retries for
transient failures and strict validation of the JSON envelope:

    { "success": bool, "data": ..., "pagination": {...} }
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from fundscope.core.config import get_settings
from fundscope.core.exceptions import FundAPIError, FundAPIErrorType
from fundscope.models.fund import FundFilters, FundPage, FundRecord, HealthStatus, PaginationInfo

logger = logging.getLogger(__name__)

MIN_SEARCH_QUERY_LENGTH = 2
DEFAULT_HOLDINGS_LIMIT = 15


class FundAPIClient:
    """Async client for the fund backend REST API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        timeout_seconds: float | None = None,
        retry_attempts: int | None = None,
        retry_delay_seconds: float | None = None,
        max_page_size: int | None = None,
        default_page_size: int | None = None,
    ):
        settings = get_settings()
        self.http_client = http_client
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.request_timeout_seconds
        self.retry_attempts = max(1, retry_attempts if retry_attempts is not None else settings.retry_attempts)
        self.retry_delay_seconds = (
            retry_delay_seconds if retry_delay_seconds is not None else settings.retry_delay_seconds
        )
        self.max_page_size = max_page_size or settings.max_page_size
        self.default_page_size = default_page_size or settings.default_page_size
        self.health_url = settings.fund_api_health_url

    def clamp_page_request(self, page: int, limit: int) -> tuple[int, int]:
        """Silently correct out-of-range paging values."""
        safe_page = max(1, page)
        safe_limit = min(max(1, limit), self.max_page_size)
        return safe_page, safe_limit

    async def fetch_page(
        self,
        page: int = 1,
        limit: int | None = None,
        filters: FundFilters | None = None,
    ) -> FundPage:
        """
        Fetch one page of funds.

        Args:
            page: 1-based page number (clamped to >= 1)
            limit: Page size (clamped into [1, max_page_size])
            filters: Optional backend filters

        Returns:
            FundPage with raw records and pagination metadata

        Raises:
            FundAPIError: after retries for transient failures, immediately
                for protocol or application errors
        """
        safe_page, safe_limit = self.clamp_page_request(
            page, limit if limit is not None else self.default_page_size
        )

        params: dict[str, str] = {"page": str(safe_page), "limit": str(safe_limit)}
        if filters:
            params.update(filters.to_query_params())

        payload = await self._request("/funds", params=params)
        records = self._require_list(payload, "/funds")

        return FundPage(
            records=records,
            pagination=self._parse_pagination(payload.get("pagination"), safe_page, safe_limit, records),
            invalid_records=len(payload["data"]) - len(records),
        )

    async def fetch_fund(self, fund_id: str) -> FundRecord:
        """
        Fetch a single fund.

        Numeric ids are AMFI scheme codes; anything else is treated as a
        backend document id.
        """
        if not fund_id:
            raise ValueError("Fund ID is required")

        if fund_id.isdigit():
            path = f"/funds/scheme/{fund_id}"
        else:
            path = f"/funds/id/{fund_id}"

        payload = await self._request(path)
        return self._require_object(payload, path)

    async def fetch_fund_navs(
        self,
        fund_id: str,
        from_date: str | None = None,
        to_date: str | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch NAV history, optionally bounded by ISO dates."""
        params: dict[str, str] = {}
        if from_date:
            params["from"] = from_date
        if to_date:
            params["to"] = to_date

        path = self._fund_path(fund_id, "navs")
        payload = await self._request(path, params=params or None)
        return self._require_list(payload, path)

    async def fetch_fund_manager(self, fund_id: str) -> dict[str, Any]:
        """Fetch the fund manager profile."""
        path = self._fund_path(fund_id, "manager")
        payload = await self._request(path)
        return self._require_object(payload, path)

    async def fetch_fund_holdings(self, fund_id: str, limit: int = DEFAULT_HOLDINGS_LIMIT) -> list[dict[str, Any]]:
        """Fetch the top portfolio holdings."""
        path = self._fund_path(fund_id, "holdings")
        payload = await self._request(path, params={"limit": str(max(1, limit))})
        return self._require_list(payload, path)

    async def fetch_fund_sectors(self, fund_id: str) -> list[dict[str, Any]]:
        """Fetch the sector allocation."""
        path = self._fund_path(fund_id, "sectors")
        payload = await self._request(path)
        return self._require_list(payload, path)

    async def fetch_fund_details(self, fund_id: str) -> dict[str, Any]:
        """Fetch the complete fund view (holdings, sectors and manager included)."""
        path = self._fund_path(fund_id, "details")
        payload = await self._request(path)
        return self._require_object(payload, path)

    async def fetch_fund_universe(
        self,
        category: str | None = None,
        amc: str | None = None,
        limit: int | None = None,
    ) -> list[FundRecord]:
        """
        Fetch the unified fund universe used for fund selection.

        A category or amc of "all" is the same as no filter.
        """
        params: dict[str, str] = {}
        if category and category != "all":
            params["category"] = category
        if amc and amc != "all":
            params["amc"] = amc
        if limit:
            params["limit"] = str(limit)

        payload = await self._request("/funds/universe", params=params or None)
        records = self._require_list(payload, "/funds/universe")
        logger.info(f"Fund universe: {len(records)} funds loaded")
        return records

    async def search_funds(self, query: str, limit: int = 50) -> list[FundRecord]:
        """Search funds by free text; short queries return no results."""
        query = (query or "").strip()
        if len(query) < MIN_SEARCH_QUERY_LENGTH:
            return []

        _, safe_limit = self.clamp_page_request(1, limit)
        payload = await self._request("/funds/search", params={"q": query, "limit": str(safe_limit)})
        return self._require_list(payload, "/funds/search")

    async def check_health(self) -> HealthStatus:
        """Probe the backend health endpoint once; never raises."""
        timestamp = datetime.now(timezone.utc).isoformat()
        try:
            response = await asyncio.wait_for(
                self.http_client.get(self.health_url),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.HTTPError) as e:
            logger.warning(f"Backend health check failed: {e!r}")
            return HealthStatus(
                healthy=False,
                backend=self.health_url,
                timestamp=timestamp,
                details={"error": str(e) or type(e).__name__},
            )

        if not response.is_success:
            return HealthStatus(
                healthy=False,
                backend=self.health_url,
                timestamp=timestamp,
                details={"status": response.status_code, "reason": response.reason_phrase},
            )

        return HealthStatus(
            healthy=True,
            backend=self.health_url,
            timestamp=timestamp,
            details={"response": response.text},
        )

    def _fund_path(self, fund_id: str, resource: str) -> str:
        if not fund_id:
            raise ValueError("Fund ID is required")
        return f"/funds/{quote(fund_id, safe='')}/{resource}"

    def _backoff_delay(self, attempt: int) -> float:
        """Delay before retrying after the given (1-based) failed attempt."""
        return self.retry_delay_seconds * (2 ** (attempt - 1))

    async def _request(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Issue a GET with retry-with-backoff for transient failures."""
        attempt = 1
        while True:
            try:
                return await self._request_once(path, params)
            except FundAPIError as e:
                if not e.retryable:
                    logger.error(f"Request to {path} failed: {e}")
                    raise
                if attempt >= self.retry_attempts:
                    logger.error(f"Request to {path} failed after {attempt} attempts: {e}")
                    raise
                delay = self._backoff_delay(attempt)
                logger.warning(
                    f"Request to {path} failed ({e}), retrying in {delay:.2f}s "
                    f"({attempt}/{self.retry_attempts})"
                )
                await asyncio.sleep(delay)
                attempt += 1

    async def _request_once(self, path: str, params: dict[str, str] | None) -> dict[str, Any]:
        """Single attempt: bounded by the total timeout, then envelope validation."""
        logger.debug(f"GET {path} params={params}")

        try:
            response = await asyncio.wait_for(
                self.http_client.get(path, params=params),
                timeout=self.timeout_seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise FundAPIError(
                FundAPIErrorType.TIMEOUT,
                f"Request timeout after {self.timeout_seconds}s",
                url=path,
            ) from e
        except httpx.TransportError as e:
            raise FundAPIError(
                FundAPIErrorType.NETWORK_UNREACHABLE,
                f"Cannot reach fund backend: {e!r}",
                url=path,
            ) from e

        if response.status_code >= 500:
            raise FundAPIError(
                FundAPIErrorType.SERVER_ERROR,
                f"Backend server error: HTTP {response.status_code}",
                status_code=response.status_code,
                url=path,
            )
        if not response.is_success:
            raise FundAPIError(
                FundAPIErrorType.CLIENT_ERROR,
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
                url=path,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FundAPIError(
                FundAPIErrorType.PROTOCOL_VIOLATION,
                "Invalid API response: body is not JSON",
                status_code=response.status_code,
                url=path,
            ) from e

        if not isinstance(payload, dict):
            raise FundAPIError(
                FundAPIErrorType.PROTOCOL_VIOLATION,
                "Invalid API response: expected object",
                status_code=response.status_code,
                url=path,
            )

        success = payload.get("success")
        if not isinstance(success, bool):
            raise FundAPIError(
                FundAPIErrorType.PROTOCOL_VIOLATION,
                "Invalid API response: missing boolean 'success'",
                status_code=response.status_code,
                url=path,
            )

        if not success:
            raise FundAPIError(
                FundAPIErrorType.APPLICATION_ERROR,
                payload.get("error") or payload.get("message") or "API returned success: false",
                status_code=response.status_code,
                url=path,
            )

        return payload

    def _require_list(self, payload: dict[str, Any], path: str) -> list[dict[str, Any]]:
        """Return the objects in ``data``; other elements are dropped."""
        data = payload.get("data")
        if not isinstance(data, list):
            raise FundAPIError(
                FundAPIErrorType.PROTOCOL_VIOLATION,
                "Invalid API response: expected 'data' to be an array",
                url=path,
            )
        items = [item for item in data if isinstance(item, dict)]
        if len(items) < len(data):
            logger.warning(f"Dropped {len(data) - len(items)} non-object elements from {path}")
        return items

    def _require_object(self, payload: dict[str, Any], path: str) -> dict[str, Any]:
        data = payload.get("data")
        if not isinstance(data, dict):
            raise FundAPIError(
                FundAPIErrorType.PROTOCOL_VIOLATION,
                "Invalid API response: expected 'data' to be an object",
                url=path,
            )
        return data

    def _parse_pagination(
        self,
        raw: Any,
        page: int,
        limit: int,
        records: list[FundRecord],
    ) -> PaginationInfo:
        """Read backend pagination, deriving a single-page view when absent."""
        if not isinstance(raw, dict):
            return PaginationInfo(
                page=page,
                limit=limit,
                total=len(records),
                total_pages=1,
                has_next=False,
                has_prev=page > 1,
            )

        total = _as_int(raw.get("total"), len(records))
        total_pages = _as_int(raw.get("totalPages"), -(-total // limit) if total else 0)
        return PaginationInfo(
            page=_as_int(raw.get("page"), page),
            limit=_as_int(raw.get("limit"), limit),
            total=total,
            total_pages=total_pages,
            has_next=bool(raw.get("hasNext", False)),
            has_prev=bool(raw.get("hasPrev", page > 1)),
        )


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
