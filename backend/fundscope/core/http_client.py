"""HTTP client initialization and management for the fund backend."""

import httpx
from functools import lru_cache

from fundscope.core.config import get_settings
from fundscope.utils.fund_api_client import FundAPIClient

settings = get_settings()


@lru_cache
def get_http_client() -> httpx.AsyncClient:
    """
    Get or create the shared backend HTTP client (singleton).

    The client holds no per-request state, so concurrent aggregations
    can share it safely.

    Returns:
        httpx.AsyncClient bound to the fund backend base URL
    """
    return httpx.AsyncClient(
        base_url=settings.fund_api_base_url,
        timeout=settings.request_timeout_seconds,
        headers={"Content-Type": "application/json"},
    )


async def close_http_client() -> None:
    """Close the shared HTTP client connection pool."""
    client = get_http_client()
    await client.aclose()
    get_http_client.cache_clear()


def get_fund_api_client() -> FundAPIClient:
    """Dependency for the fund backend API client."""
    return FundAPIClient(get_http_client())
