"""
Bulk re-classification script for canonical categories.

Fetches the whole fund universe from the backend, normalizes every fund's
category and logs the resulting distribution. Nothing is written back.

Usage:
    python -m scripts.reclassify_funds
    python -m scripts.reclassify_funds --target 1000
    python -m scripts.reclassify_funds --category equity --show-unmatched
"""

import argparse
import asyncio
import logging
import sys
from collections import Counter
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fundscope.core.exceptions import FundAPIError
from fundscope.core.http_client import close_http_client, get_fund_api_client
from fundscope.models.category import CanonicalCategory
from fundscope.models.fund import FundFilters
from fundscope.services.category_normalizer import CategoryNormalizer, category_label
from fundscope.services.fund_aggregator import FundAggregator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def log_progress(loaded: int, target: int) -> None:
    logger.info(f"  -> {loaded}/{target} funds loaded")


async def reclassify(target: int | None, category: str | None, show_unmatched: bool) -> int:
    """Aggregate and classify; returns a process exit code."""
    aggregator = FundAggregator(get_fund_api_client())
    normalizer = CategoryNormalizer()
    filters = FundFilters(category=category) if category else None

    try:
        result = await aggregator.aggregate(target_count=target, filters=filters, on_progress=log_progress)
    except FundAPIError as e:
        logger.error(f"Could not fetch funds: {e}")
        return 1
    finally:
        await close_http_client()

    counts: Counter[CanonicalCategory] = Counter()
    unmatched = []
    for record in result.records:
        canonical = normalizer.normalize(record)
        counts[canonical] += 1
        if canonical == CanonicalCategory.OTHER:
            unmatched.append(record)

    logger.info("=" * 60)
    logger.info("CATEGORY RE-CLASSIFICATION COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Total available: {result.metadata.total_available}")
    logger.info(f"Funds classified: {len(result.records)}")
    logger.info(f"Pages fetched: {result.metadata.fetched_pages}")
    logger.info(f"Duplicates removed: {result.metadata.duplicates_removed}")
    if result.warning:
        logger.warning(f"Partial data: {result.warning}")
    for canonical, count in counts.most_common():
        logger.info(f"  {category_label(canonical):<20} {count}")

    if show_unmatched:
        for record in unmatched:
            logger.info(
                f"  unmatched: {record.get('name')!r} "
                f"(category={record.get('category')!r}, subCategory={record.get('subCategory')!r})"
            )

    return 0


def main():
    """Main entry point for bulk re-classification."""
    parser = argparse.ArgumentParser(description="Re-classify all funds into canonical categories")
    parser.add_argument(
        "--target",
        type=int,
        default=None,
        help="Number of funds to fetch (default: all available)"
    )
    parser.add_argument(
        "--category",
        type=str,
        default=None,
        help="Backend category filter, e.g. equity"
    )
    parser.add_argument(
        "--show-unmatched",
        action="store_true",
        help="Log every fund that falls back to 'other'"
    )
    args = parser.parse_args()

    sys.exit(asyncio.run(reclassify(args.target, args.category, args.show_unmatched)))


if __name__ == "__main__":
    main()
