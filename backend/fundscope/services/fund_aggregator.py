"""
Multi-Page Fund Aggregator

Collects a large fund universe by walking backend pages one at a time,
then deduplicates the result by identity key.

Usage:
    from fundscope.services.fund_aggregator import FundAggregator

    aggregator = FundAggregator(client)
    result = await aggregator.aggregate(
        target_count=1000,
        on_progress=lambda loaded, target: print(f"{loaded}/{target}"),
    )
    if result.is_partial:
        ...  # show a "partial data" banner
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from fundscope.core.config import get_settings
from fundscope.core.exceptions import FundAPIError, FundAPIErrorType
from fundscope.models.fund import (
    AggregationMetadata,
    AggregationResult,
    FundFilters,
    FundPage,
    FundRecord,
)
from fundscope.utils.fund_api_client import FundAPIClient

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

# Identity key fallback chain
IDENTITY_KEYS: tuple[str, ...] = ("fundId", "_id", "id")


def identity_key(record: FundRecord) -> str | None:
    """
    Derive a record's identity key via fundId -> _id -> id.

    Returns:
        Key as string, or None when the record has no usable identity
    """
    if not isinstance(record, dict):
        return None
    for key in IDENTITY_KEYS:
        value = record.get(key)
        if value is not None and value != "":
            return str(value)
    return None


def deduplicate_funds(records: Iterable[FundRecord]) -> tuple[list[FundRecord], int, int]:
    """
    Deduplicate records by identity key.

    The last-seen record for a key wins, at the position where the key was
    first seen. Records without an identity key are dropped.

    Returns:
        (unique records, duplicates removed, invalid records dropped)
    """
    unique: dict[str, FundRecord] = {}
    seen = 0
    invalid = 0

    for record in records:
        key = identity_key(record)
        if key is None:
            invalid += 1
            continue
        seen += 1
        unique[key] = record

    return list(unique.values()), seen - len(unique), invalid


@dataclass
class FetchSession:
    """Mutable state of one aggregation run; never shared between runs."""

    target_count: int | None
    records: list[FundRecord] = field(default_factory=list)
    current_page: int = 0
    total_available: int = 0
    target: int = 0
    has_next: bool = False
    failed_page: int | None = None
    invalid_records: int = 0

    def record_page(self, page_number: int, page: FundPage) -> None:
        self.current_page = page_number
        self.records.extend(page.records)
        self.invalid_records += page.invalid_records
        self.has_next = page.pagination.has_next

    @property
    def loaded(self) -> int:
        return len(self.records)

    def should_continue(self) -> bool:
        return self.loaded < self.target and self.has_next


class FundAggregator:
    """Orchestrates sequential page fetches into one deduplicated fund set."""

    def __init__(
        self,
        client: FundAPIClient,
        page_size: int | None = None,
        max_pages: int | None = None,
    ):
        settings = get_settings()
        self.client = client
        self.page_size = page_size or settings.max_page_size
        self.max_pages = max_pages or settings.max_aggregation_pages

    async def aggregate(
        self,
        target_count: int | None = None,
        filters: FundFilters | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> AggregationResult:
        """
        Fetch funds across pages until the target or the dataset is exhausted.

        Args:
            target_count: Number of funds wanted (default: all available).
                Capped at the total reported by the backend.
            filters: Backend filters applied to every page
            on_progress: Called as on_progress(loaded, target) after each page

        Returns:
            AggregationResult; ``warning`` is set when the data is incomplete

        Raises:
            FundAPIError: only when a page fails before any fund was collected
        """
        session = FetchSession(target_count=target_count)
        warning: str | None = None
        warning_type: FundAPIErrorType | None = None

        logger.info(
            f"Starting fund aggregation (page size: {self.page_size}, "
            f"target: {target_count if target_count is not None else 'all'})"
        )

        # First page is the source of truth for the total; errors propagate
        first_page = await self.client.fetch_page(1, self.page_size, filters)
        session.record_page(1, first_page)
        session.total_available = first_page.pagination.total or len(first_page.records)
        session.target = (
            min(target_count, session.total_available)
            if target_count is not None
            else session.total_available
        )

        logger.info(f"Total available: {session.total_available} funds")
        logger.info(f"Page 1: {len(first_page.records)} funds loaded")
        self._report_progress(on_progress, session)

        while session.should_continue():
            if session.current_page >= self.max_pages:
                warning = (
                    f"Reached safety limit of {self.max_pages} pages; "
                    f"returning {session.loaded} of {session.target} funds"
                )
                warning_type = FundAPIErrorType.SAFETY_LIMIT_REACHED
                logger.warning(warning)
                break

            page_number = session.current_page + 1
            try:
                page = await self.client.fetch_page(page_number, self.page_size, filters)
            except FundAPIError as e:
                session.failed_page = page_number
                if not session.loaded:
                    logger.error(f"Aggregation failed on page {page_number} with no funds collected: {e}")
                    raise
                warning = f"Partial data due to error on page {page_number}: {e}"
                warning_type = e.error_type
                logger.warning(f"Returning partial data: {session.loaded} funds ({e})")
                break

            session.record_page(page_number, page)
            logger.info(
                f"Page {page_number}: {len(page.records)} funds "
                f"(total: {session.loaded}/{session.target})"
            )
            self._report_progress(on_progress, session)

            if not session.has_next:
                logger.info("No more pages available")

        unique, duplicates, invalid = deduplicate_funds(session.records)
        invalid += session.invalid_records
        if duplicates:
            logger.info(f"Removed {duplicates} duplicate funds")
        if invalid:
            logger.warning(f"Dropped {invalid} invalid fund records")

        logger.info(f"Aggregation complete: {len(unique)} unique funds loaded")

        return AggregationResult(
            records=unique,
            metadata=AggregationMetadata(
                total_available=session.total_available,
                fetched_pages=session.current_page,
                duplicates_removed=duplicates,
                invalid_records_dropped=invalid,
                target=session.target,
            ),
            warning=warning,
            warning_type=warning_type,
        )

    def _report_progress(self, on_progress: ProgressCallback | None, session: FetchSession) -> None:
        if on_progress is None:
            return
        try:
            on_progress(session.loaded, session.target)
        except Exception as e:
            logger.warning(f"Progress callback failed, continuing aggregation: {e}", exc_info=True)
