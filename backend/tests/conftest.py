"""Shared fixtures: an in-process fake of the fund backend."""

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from fundscope.utils.fund_api_client import FundAPIClient


BACKEND_BASE_URL = "http://backend.test/api"


def make_funds(start: int, count: int, **fields: Any) -> list[dict[str, Any]]:
    """Build `count` raw fund records with sequential fundIds."""
    return [
        {
            "fundId": f"F{i:05d}",
            "name": f"Test Fund {i}",
            "category": "equity",
            "subCategory": "Large Cap",
            **fields,
        }
        for i in range(start, start + count)
    ]


def envelope(
    records: list[dict[str, Any]],
    page: int,
    limit: int,
    total: int,
    has_next: bool,
) -> dict[str, Any]:
    """Wrap records in the backend's success envelope."""
    return {
        "success": True,
        "data": records,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": -(-total // limit) if limit else 0,
            "hasNext": has_next,
            "hasPrev": page > 1,
        },
    }


class FakeBackend:
    """
    Records every request and delegates the response to `responder`.

    The responder receives the request and returns an httpx.Response or
    raises an httpx exception.
    """

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def pages_requested(self) -> list[int]:
        return [int(r.url.params["page"]) for r in self.requests if "page" in r.url.params]


def paged_backend(
    total: int,
    pages: dict[int, list[dict[str, Any]]] | None = None,
) -> FakeBackend:
    """
    Backend serving `total` sequential funds, paged by the requested limit.

    `pages` overrides the records returned for specific page numbers.
    """
    def responder(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        limit = int(request.url.params["limit"])
        start = (page - 1) * limit
        if pages and page in pages:
            records = pages[page]
        else:
            records = make_funds(start, max(0, min(limit, total - start)))
        return httpx.Response(200, json=envelope(records, page, limit, total, start + limit < total))

    return FakeBackend(responder)


@pytest.fixture
def make_client():
    """Factory for a FundAPIClient wired to a fake backend, with no retry delay."""
    def _make(handler: Callable[[httpx.Request], Any], **overrides: Any) -> FundAPIClient:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url=BACKEND_BASE_URL,
        )
        overrides.setdefault("retry_delay_seconds", 0)
        overrides.setdefault("timeout_seconds", 5)
        return FundAPIClient(http_client, **overrides)

    return _make
