"""Fund data services."""

from fundscope.services.category_normalizer import CategoryNormalizer, normalize_category
from fundscope.services.fund_aggregator import FundAggregator
from fundscope.services.fund_service import FundService

__all__ = ["CategoryNormalizer", "normalize_category", "FundAggregator", "FundService"]
