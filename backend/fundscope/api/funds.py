"""Fund API endpoints."""

import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, HTTPException, Path

from fundscope.core.exceptions import FundAPIError, FundAPIErrorType, UnknownCategoryError
from fundscope.core.http_client import get_fund_api_client
from fundscope.models.fund import (
    AggregatedFundsResponse,
    CategoryListResponse,
    FundFilters,
    FundPageResponse,
    FundSummary,
)
from fundscope.services.fund_service import FundService
from fundscope.utils.fund_api_client import DEFAULT_HOLDINGS_LIMIT, FundAPIClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/funds", tags=["funds"])


def _upstream_error(e: FundAPIError, action: str) -> HTTPException:
    """Map a backend failure onto an HTTP error for our own clients."""
    if e.error_type == FundAPIErrorType.TIMEOUT:
        return HTTPException(status_code=504, detail=f"Fund backend timed out while {action}")
    return HTTPException(status_code=502, detail=f"Failed {action}: {e}")


def _fund_error(e: FundAPIError, fund_id: str, action: str) -> HTTPException:
    if e.status_code == 404:
        return HTTPException(status_code=404, detail=f"Fund not found: {fund_id}")
    logger.error(f"Error {action} for {fund_id}: {e}")
    return _upstream_error(e, action)


def _require_fund_id(fund_id: str) -> str:
    fund_id = fund_id.strip()
    if not fund_id:
        raise HTTPException(status_code=400, detail="Invalid fund_id: cannot be empty")
    return fund_id


@router.get("", response_model=FundPageResponse)
async def list_funds(
    page: int = Query(1, description="Page number (values below 1 are treated as 1)"),
    limit: int | None = Query(None, description="Items per page (clamped to the backend maximum)"),
    category: str | None = Query(None, description="Backend category filter"),
    sub_category: str | None = Query(None, alias="subCategory", description="Backend subcategory filter"),
    fund_house: str | None = Query(None, alias="fundHouse", description="Fund house filter"),
    min_aum: float | None = Query(None, alias="minAum", description="Minimum AUM"),
    sort_by: str | None = Query(None, alias="sortBy", description="Sort field"),
    sort_order: Literal["asc", "desc"] | None = Query(None, alias="sortOrder", description="Sort direction"),
    client: FundAPIClient = Depends(get_fund_api_client),
) -> FundPageResponse:
    """List one page of funds with their canonical categories."""
    service = FundService(client)

    filters = FundFilters(
        category=category,
        sub_category=sub_category,
        fund_house=fund_house,
        min_aum=min_aum,
        sort_by=sort_by,
        sort_order=sort_order,
    )

    try:
        return await service.list_funds(page=page, limit=limit, filters=filters)
    except FundAPIError as e:
        raise _upstream_error(e, "fetching funds")


@router.get("/all", response_model=AggregatedFundsResponse)
async def get_all_funds(
    target: int | None = Query(None, ge=0, description="Number of funds wanted (default: all)"),
    category: str | None = Query(None, description="Backend category filter"),
    sub_category: str | None = Query(None, alias="subCategory", description="Backend subcategory filter"),
    fund_house: str | None = Query(None, alias="fundHouse", description="Fund house filter"),
    client: FundAPIClient = Depends(get_fund_api_client),
) -> AggregatedFundsResponse:
    """
    Get all funds across backend pages, deduplicated.

    A ``warning`` in the response means the data is partial (a later page
    failed or the page safety limit was hit).
    """
    service = FundService(client)

    filters = FundFilters(category=category, sub_category=sub_category, fund_house=fund_house)

    try:
        return await service.get_all_funds(target_count=target, filters=filters)
    except FundAPIError as e:
        raise _upstream_error(e, "fetching funds")


@router.get("/categories", response_model=CategoryListResponse)
async def get_categories(
    client: FundAPIClient = Depends(get_fund_api_client),
) -> CategoryListResponse:
    """
    Get canonical categories with fund counts.

    Ordered by count descending, then alphabetically.
    """
    service = FundService(client)
    try:
        return await service.get_category_counts()
    except FundAPIError as e:
        raise _upstream_error(e, "fetching categories")


@router.get("/category/{slug}", response_model=AggregatedFundsResponse)
async def get_funds_by_category(
    slug: str = Path(..., description="Category slug, e.g. 'large-cap' or 'largecap'"),
    target: int | None = Query(None, ge=0, description="Maximum number of funds to return"),
    client: FundAPIClient = Depends(get_fund_api_client),
) -> AggregatedFundsResponse:
    """Get funds whose canonical category matches the slug."""
    service = FundService(client)
    try:
        return await service.get_funds_by_category(slug, target_count=target)
    except UnknownCategoryError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FundAPIError as e:
        raise _upstream_error(e, "fetching category funds")


@router.get("/search", response_model=list[FundSummary])
async def search_funds(
    q: str = Query(..., description="Search term (at least 2 characters)"),
    limit: int = Query(50, ge=1, le=500, description="Maximum number of results"),
    client: FundAPIClient = Depends(get_fund_api_client),
) -> list[FundSummary]:
    """Search funds by name."""
    service = FundService(client)
    return await service.search_funds(q, limit=limit)




@router.get("/universe", response_model=list[FundSummary])
async def get_fund_universe(
    category: str | None = Query(None, description="Category filter ('all' for none)"),
    amc: str | None = Query(None, description="AMC filter ('all' for none)"),
    limit: int | None = Query(None, ge=1, description="Maximum number of funds"),
    client: FundAPIClient = Depends(get_fund_api_client),
) -> list[FundSummary]:
    """Get the unified fund universe used for fund selection."""
    service = FundService(client)
    try:
        return await service.get_fund_universe(category=category, amc=amc, limit=limit)
    except FundAPIError as e:
        raise _upstream_error(e, "fetching fund universe")


@router.get("/{fund_id}", response_model=FundSummary)
async def get_fund_by_id(
    fund_id: str = Path(..., description="AMFI scheme code or backend fund id"),
    client: FundAPIClient = Depends(get_fund_api_client),
) -> FundSummary:
    """
    Get a single fund.

    Raises:
        400: Empty fund_id
        404: Fund not found
        502/504: Backend failure
    """
    service = FundService(client)
    fund_id = _require_fund_id(fund_id)

    try:
        return await service.get_fund(fund_id)
    except FundAPIError as e:
        raise _fund_error(e, fund_id, "fetching fund details")


@router.get("/{fund_id}/details", response_model=dict[str, Any])
async def get_fund_details(
    fund_id: str = Path(..., description="Backend fund id"),
    client: FundAPIClient = Depends(get_fund_api_client),
) -> dict[str, Any]:
    """Get the complete fund view with holdings, sectors and manager."""
    service = FundService(client)
    fund_id = _require_fund_id(fund_id)

    try:
        return await service.get_fund_details(fund_id)
    except FundAPIError as e:
        raise _fund_error(e, fund_id, "fetching fund details")


@router.get("/{fund_id}/navs", response_model=list[dict[str, Any]])
async def get_fund_navs(
    fund_id: str = Path(..., description="Backend fund id"),
    from_date: str | None = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: str | None = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    client: FundAPIClient = Depends(get_fund_api_client),
) -> list[dict[str, Any]]:
    """Get NAV history for a fund."""
    service = FundService(client)
    fund_id = _require_fund_id(fund_id)

    try:
        return await service.get_fund_navs(fund_id, from_date=from_date, to_date=to_date)
    except FundAPIError as e:
        raise _fund_error(e, fund_id, "fetching NAV history")


@router.get("/{fund_id}/manager", response_model=dict[str, Any])
async def get_fund_manager(
    fund_id: str = Path(..., description="Backend fund id"),
    client: FundAPIClient = Depends(get_fund_api_client),
) -> dict[str, Any]:
    """Get the fund manager profile."""
    service = FundService(client)
    fund_id = _require_fund_id(fund_id)

    try:
        return await service.get_fund_manager(fund_id)
    except FundAPIError as e:
        raise _fund_error(e, fund_id, "fetching fund manager")


@router.get("/{fund_id}/holdings", response_model=list[dict[str, Any]])
async def get_fund_holdings(
    fund_id: str = Path(..., description="Backend fund id"),
    limit: int = Query(DEFAULT_HOLDINGS_LIMIT, ge=1, le=100, description="Number of top holdings"),
    client: FundAPIClient = Depends(get_fund_api_client),
) -> list[dict[str, Any]]:
    """Get the top portfolio holdings."""
    service = FundService(client)
    fund_id = _require_fund_id(fund_id)

    try:
        return await service.get_fund_holdings(fund_id, limit=limit)
    except FundAPIError as e:
        raise _fund_error(e, fund_id, "fetching fund holdings")


@router.get("/{fund_id}/sectors", response_model=list[dict[str, Any]])
async def get_fund_sectors(
    fund_id: str = Path(..., description="Backend fund id"),
    client: FundAPIClient = Depends(get_fund_api_client),
) -> list[dict[str, Any]]:
    """Get the sector allocation."""
    service = FundService(client)
    fund_id = _require_fund_id(fund_id)

    try:
        return await service.get_fund_sectors(fund_id)
    except FundAPIError as e:
        raise _fund_error(e, fund_id, "fetching fund sectors")
