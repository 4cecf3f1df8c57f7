"""Fund service: consumer-facing operations over the fund backend."""

import logging
from collections import Counter
from typing import Any

from fundscope.core.exceptions import FundAPIError, UnknownCategoryError
from fundscope.models.fund import (
    AggregatedFundsResponse,
    AggregationResult,
    CategoryItem,
    CategoryListResponse,
    FundFilters,
    FundPageResponse,
    FundRecord,
    FundSummary,
)
from fundscope.services.category_normalizer import (
    CategoryNormalizer,
    category_from_slug,
    category_label,
)
from fundscope.services.fund_aggregator import FundAggregator, identity_key
from fundscope.utils.fund_api_client import DEFAULT_HOLDINGS_LIMIT, FundAPIClient

logger = logging.getLogger(__name__)


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _unwrap(value: Any) -> Any:
    # Some documents nest metrics as {"value": ..., "date": ...}
    if isinstance(value, dict):
        return value.get("value")
    return value


def _first_number(*candidates: Any) -> float | None:
    for candidate in candidates:
        number = _as_float(_unwrap(candidate))
        if number is not None:
            return number
    return None


def _first_text(*candidates: Any) -> str | None:
    for candidate in candidates:
        text = _as_text(candidate)
        if text is not None:
            return text
    return None


class FundService:
    """Service for fund listing, category browsing, detail and search."""

    def __init__(
        self,
        client: FundAPIClient,
        aggregator: FundAggregator | None = None,
        normalizer: CategoryNormalizer | None = None,
    ):
        self.client = client
        self.aggregator = aggregator or FundAggregator(client)
        self.normalizer = normalizer or CategoryNormalizer()

    def summarize(self, record: FundRecord) -> FundSummary:
        """
        Build the API view of a raw record, including its canonical category.

        Backend documents come in several shapes, so each field is read from
        the first populated source:

        - NAV: ``nav`` (plain or ``{"value": ...}``), then ``currentNav``
        - returns: ``returns["1Y"]``, then ``returns.oneYear``, then ``returns1Y``
        - fund house: ``amc.name``, then ``amcName``, then ``fundHouse``
        - AUM and expense ratio: plain or ``{"value": ...}``
        """
        canonical = self.normalizer.normalize(record)
        returns = record.get("returns") if isinstance(record.get("returns"), dict) else {}
        amc = record.get("amc") if isinstance(record.get("amc"), dict) else {}

        return FundSummary(
            fund_id=identity_key(record),
            scheme_code=_as_text(record.get("schemeCode")),
            name=_first_text(record.get("schemeName"), record.get("name")) or "Unknown",
            category=_as_text(record.get("category")),
            sub_category=_as_text(record.get("subCategory")),
            fund_house=_first_text(amc.get("name"), record.get("amcName"), record.get("fundHouse")),
            normalized_category=canonical,
            category_label=category_label(canonical),
            current_nav=_first_number(record.get("nav"), record.get("currentNav")),
            aum=_first_number(record.get("aum")),
            expense_ratio=_first_number(record.get("expenseRatio")),
            returns_1y=_first_number(returns.get("1Y"), returns.get("oneYear"), record.get("returns1Y")),
            returns_3y=_first_number(returns.get("3Y"), returns.get("threeYear"), record.get("returns3Y")),
            returns_5y=_first_number(returns.get("5Y"), returns.get("fiveYear"), record.get("returns5Y")),
        )

    async def list_funds(
        self,
        page: int = 1,
        limit: int | None = None,
        filters: FundFilters | None = None,
    ) -> FundPageResponse:
        """Fetch one page of funds."""
        result = await self.client.fetch_page(page, limit, filters)
        return FundPageResponse(
            items=[self.summarize(record) for record in result.records],
            pagination=result.pagination,
        )

    async def get_all_funds(
        self,
        target_count: int | None = None,
        filters: FundFilters | None = None,
    ) -> AggregatedFundsResponse:
        """Fetch funds across all pages (or up to target_count)."""
        result = await self.aggregator.aggregate(target_count=target_count, filters=filters)
        return self._to_response(result, result.records)

    async def get_funds_by_category(
        self,
        slug: str,
        target_count: int | None = None,
    ) -> AggregatedFundsResponse:
        """
        Get funds of one canonical category.

        Backend labels are inconsistent, so the full universe is fetched
        and filtered on the canonical category rather than on a backend
        ``category`` filter. This keeps category pages from showing 0 funds
        for funds labelled e.g. "Bluechip" instead of "Large Cap".

        Raises:
            UnknownCategoryError: if the slug does not resolve
        """
        target = category_from_slug(slug)
        if target is None:
            raise UnknownCategoryError(slug)

        result = await self.aggregator.aggregate()
        matching = [record for record in result.records if self.normalizer.belongs_to(record, target)]
        if target_count is not None:
            matching = matching[:max(0, target_count)]

        logger.info(f"Category {target.value}: {len(matching)} of {len(result.records)} funds")
        return self._to_response(result, matching)

    async def get_category_counts(self) -> CategoryListResponse:
        """
        Get canonical categories with fund counts.

        Ordered by count descending, then alphabetically.
        """
        result = await self.aggregator.aggregate()
        counts = Counter(self.normalizer.normalize(record) for record in result.records)

        items = [
            CategoryItem(value=category, label=category_label(category), count=count)
            for category, count in sorted(counts.items(), key=lambda item: (-item[1], item[0].value))
        ]
        return CategoryListResponse(items=items, warning=result.warning)

    async def get_fund_universe(
        self,
        category: str | None = None,
        amc: str | None = None,
        limit: int | None = None,
    ) -> list[FundSummary]:
        """Get the fund-selection universe as summaries."""
        records = await self.client.fetch_fund_universe(category=category, amc=amc, limit=limit)
        return [self.summarize(record) for record in records]

    async def get_fund(self, fund_id: str) -> FundSummary:
        """Get a single fund by scheme code or backend id."""
        record = await self.client.fetch_fund(fund_id)
        return self.summarize(record)

    async def get_fund_navs(
        self,
        fund_id: str,
        from_date: str | None = None,
        to_date: str | None = None,
    ) -> list[dict[str, Any]]:
        return await self.client.fetch_fund_navs(fund_id, from_date=from_date, to_date=to_date)

    async def get_fund_manager(self, fund_id: str) -> dict[str, Any]:
        return await self.client.fetch_fund_manager(fund_id)

    async def get_fund_holdings(self, fund_id: str, limit: int = DEFAULT_HOLDINGS_LIMIT) -> list[dict[str, Any]]:
        return await self.client.fetch_fund_holdings(fund_id, limit=limit)

    async def get_fund_sectors(self, fund_id: str) -> list[dict[str, Any]]:
        return await self.client.fetch_fund_sectors(fund_id)

    async def get_fund_details(self, fund_id: str) -> dict[str, Any]:
        """
        Get the complete fund view.

        The backend document is returned as is, with the canonical category
        and its label added.
        """
        details = await self.client.fetch_fund_details(fund_id)
        canonical = self.normalizer.normalize(details)
        return {
            **details,
            "normalizedCategory": canonical.value,
            "categoryLabel": category_label(canonical),
        }

    async def search_funds(self, query: str, limit: int = 50) -> list[FundSummary]:
        """Search funds; backend failures yield an empty result."""
        try:
            records = await self.client.search_funds(query, limit)
        except FundAPIError as e:
            logger.error(f"Search failed for {query!r}: {e}")
            return []
        return [self.summarize(record) for record in records]

    def _to_response(
        self,
        result: AggregationResult,
        records: list[FundRecord],
    ) -> AggregatedFundsResponse:
        items = [self.summarize(record) for record in records]
        return AggregatedFundsResponse(
            items=items,
            count=len(items),
            metadata=result.metadata,
            warning=result.warning,
        )
