"""Pydantic schemas for fund backend payloads and API responses."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from fundscope.core.exceptions import FundAPIErrorType
from fundscope.models.category import CanonicalCategory


# Raw fund entity exactly as the backend returns it (camelCase keys)
FundRecord = dict[str, Any]


def _format_number(value: float) -> str:
    """Render a query number without losing digits (1234567.0 -> '1234567')."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


class FundFilters(BaseModel):
    """Optional filters forwarded to the backend fund-listing endpoint."""

    category: str | None = Field(None, description="Backend category (sent lower-cased)")
    sub_category: str | None = Field(None, alias="subCategory", description="Backend subcategory (sent as given)")
    fund_house: str | None = Field(None, alias="fundHouse", description="AMC / fund house name")
    min_aum: float | None = Field(None, alias="minAum", description="Minimum AUM")
    sort_by: str | None = Field(None, alias="sortBy", description="Sort field, e.g. 'aum' or 'returns.oneYear'")
    sort_order: Literal["asc", "desc"] | None = Field(None, alias="sortOrder", description="Sort direction")

    class Config:
        populate_by_name = True

    def to_query_params(self) -> dict[str, str]:
        """Build backend query parameters, omitting unset filters."""
        params: dict[str, str] = {}
        if self.category:
            params["category"] = self.category.lower()
        if self.sub_category:
            params["subCategory"] = self.sub_category
        if self.fund_house:
            params["fundHouse"] = self.fund_house
        if self.min_aum is not None:
            params["minAum"] = _format_number(self.min_aum)
        if self.sort_by:
            params["sortBy"] = self.sort_by
        if self.sort_order:
            params["sortOrder"] = self.sort_order
        return params


class PaginationInfo(BaseModel):
    """Pagination metadata reported by the backend."""

    page: int = Field(..., description="Current page (1-based)")
    limit: int = Field(..., description="Page size")
    total: int = Field(..., description="Total records available")
    total_pages: int = Field(..., alias="totalPages", description="Total pages available")
    has_next: bool = Field(..., alias="hasNext", description="Whether a further page exists")
    has_prev: bool = Field(False, alias="hasPrev", description="Whether a previous page exists")

    class Config:
        populate_by_name = True


class FundPage(BaseModel):
    """One bounded batch of raw fund records plus pagination metadata."""

    records: list[FundRecord] = Field(default_factory=list, description="Raw fund records")
    pagination: PaginationInfo
    invalid_records: int = Field(0, description="Elements of the page that were not fund objects")


class AggregationMetadata(BaseModel):
    """Bookkeeping for one multi-page aggregation run."""

    total_available: int = Field(..., description="Total reported by the first page")
    fetched_pages: int = Field(..., description="Pages successfully fetched")
    duplicates_removed: int = Field(0, description="Records collapsed by identity key")
    invalid_records_dropped: int = Field(0, description="Records without any identity key or not fund objects")
    target: int = Field(..., description="Effective target count for the run")


class AggregationResult(BaseModel):
    """Deduplicated records collected across pages."""

    records: list[FundRecord] = Field(default_factory=list)
    metadata: AggregationMetadata
    warning: str | None = Field(None, description="Set when the result is known to be incomplete")
    warning_type: FundAPIErrorType | None = Field(None, description="Why the result is incomplete")

    @property
    def is_partial(self) -> bool:
        return self.warning is not None


class FundSummary(BaseModel):
    """Summary of a fund with its canonical category, for catalog listing."""

    fund_id: str | None = Field(None, description="Fund identity key (fundId, _id or id)")
    scheme_code: str | None = Field(None, description="AMFI scheme code, when known")
    name: str = Field(..., description="Fund display name")
    category: str | None = Field(None, description="Backend category label")
    sub_category: str | None = Field(None, description="Backend subcategory label")
    fund_house: str | None = Field(None, description="Asset Management Company name")
    normalized_category: CanonicalCategory = Field(..., description="Canonical category")
    category_label: str = Field(..., description="Display label for the canonical category")
    current_nav: float | None = Field(None, description="Latest NAV")
    aum: float | None = Field(None, description="Assets under management")
    expense_ratio: float | None = Field(None, description="Annual expense ratio percentage")
    returns_1y: float | None = Field(None, description="1 year return (%)")
    returns_3y: float | None = Field(None, description="3 year return (%)")
    returns_5y: float | None = Field(None, description="5 year return (%)")


class FundPageResponse(BaseModel):
    """Response for a single page of funds."""

    items: list[FundSummary] = Field(..., description="List of funds")
    pagination: PaginationInfo


class AggregatedFundsResponse(BaseModel):
    """Response for a multi-page fund fetch."""

    items: list[FundSummary] = Field(..., description="Deduplicated list of funds")
    count: int = Field(..., description="Number of funds returned")
    metadata: AggregationMetadata
    warning: str | None = Field(None, description="Present when data is incomplete")

    class Config:
        json_schema_extra = {
            "example": {
                "items": [
                    {
                        "fund_id": "120503",
                        "scheme_code": "120503",
                        "name": "Axis Bluechip Fund - Direct Growth",
                        "category": "equity",
                        "sub_category": "Large Cap",
                        "fund_house": "Axis Mutual Fund",
                        "normalized_category": "large-cap",
                        "category_label": "Large Cap",
                    }
                ],
                "count": 1,
                "metadata": {
                    "total_available": 4459,
                    "fetched_pages": 1,
                    "duplicates_removed": 0,
                    "invalid_records_dropped": 0,
                    "target": 4459,
                },
                "warning": None,
            }
        }


class CategoryItem(BaseModel):
    """Canonical category with fund count."""
    value: CanonicalCategory = Field(..., description="Canonical category")
    label: str = Field(..., description="Display label")
    count: int = Field(..., description="Number of funds in this category")


class CategoryListResponse(BaseModel):
    """Response for category filter metadata."""
    items: list[CategoryItem] = Field(..., description="List of categories with counts")
    warning: str | None = Field(None, description="Present when counts are based on partial data")


class HealthStatus(BaseModel):
    """Backend health probe result."""
    healthy: bool
    backend: str
    timestamp: str = Field(..., description="Probe time (ISO format)")
    details: dict[str, Any] | None = None
