"""
Category Normalizer

Maps heterogeneous backend category labels onto the canonical taxonomy used
for filtering and search.

Usage:
    from fundscope.services.category_normalizer import CategoryNormalizer

    normalizer = CategoryNormalizer()
    normalizer.normalize({"category": "equity", "subCategory": "Large Cap"})
    # CanonicalCategory.LARGE_CAP
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from fundscope.models.category import CATEGORY_LABELS, CanonicalCategory
from fundscope.utils.normalization import normalize_field, normalize_slug, title_from_slug


# Keyword table (substring matching). Order is the tie-break order within
# a priority level and must follow CanonicalCategory.
CATEGORY_KEYWORDS: tuple[tuple[CanonicalCategory, tuple[str, ...]], ...] = (
    (CanonicalCategory.LARGE_CAP, (
        "large cap", "largecap", "large-cap", "bluechip", "blue chip",
        "top 100", "top100", "nifty 50", "sensex", "large & mid cap",
        "large and mid cap",
    )),
    (CanonicalCategory.MID_CAP, (
        "mid cap", "midcap", "mid-cap", "mid & small cap", "mid and small cap",
        "nifty midcap", "midcap 150", "midcap 100",
    )),
    (CanonicalCategory.SMALL_CAP, (
        "small cap", "smallcap", "small-cap", "micro cap", "microcap",
        "nifty smallcap", "smallcap 250", "smallcap 100",
    )),
    (CanonicalCategory.FLEXI_CAP, (
        "flexi cap", "flexicap", "flexi-cap", "flexible cap", "dynamic",
    )),
    (CanonicalCategory.MULTI_CAP, (
        "multi cap", "multicap", "multi-cap", "diversified", "multi asset",
    )),
    (CanonicalCategory.ELSS, (
        "elss", "tax saver", "tax saving", "equity linked saving", "tax plan",
    )),
    (CanonicalCategory.INDEX, (
        "index", "index fund", "indexfund", "nifty", "sensex", "nifty 50 index",
        "nifty next 50", "nifty 100", "passive", "tracker",
    )),
    (CanonicalCategory.SECTORAL, (
        "sectoral", "sector", "banking", "pharma", "healthcare", "technology",
        "tech", "infrastructure", "infra", "consumption", "fmcg", "auto",
        "financial services", "it sector", "realty", "energy", "power",
        "manufacturing",
    )),
    (CanonicalCategory.THEMATIC, (
        "thematic", "theme", "esg", "quant", "momentum", "quality", "growth",
        "innovation", "digital", "india opportunity", "special situations",
    )),
    (CanonicalCategory.FOCUSED, ("focused", "focus", "concentrated", "select")),
    (CanonicalCategory.VALUE, ("value", "value fund", "value style")),
    (CanonicalCategory.CONTRA, ("contra", "contrarian")),
    (CanonicalCategory.DIVIDEND, ("dividend yield", "dividend", "income")),
    (CanonicalCategory.HYBRID, (
        "hybrid", "balanced", "aggressive hybrid", "conservative hybrid",
        "balanced advantage", "dynamic asset allocation", "asset allocation",
        "equity savings", "multi asset allocation", "arbitrage",
    )),
    (CanonicalCategory.DEBT, (
        "debt", "bond", "fixed income", "credit", "medium duration",
        "long duration", "medium to long", "dynamic bond", "income fund",
    )),
    (CanonicalCategory.LIQUID, (
        "liquid", "money market", "ultra short", "ultrashort", "cash",
        "low duration",
    )),
    (CanonicalCategory.OVERNIGHT, ("overnight", "overnight fund")),
    (CanonicalCategory.SHORT_DURATION, (
        "short duration", "short term", "short maturity", "floater",
        "floating rate",
    )),
    (CanonicalCategory.CORPORATE_BOND, (
        "corporate bond", "corporate debt", "credit risk", "credit opportunities",
    )),
    (CanonicalCategory.BANKING_PSU, (
        "banking & psu", "banking psu", "banking and psu", "psu debt", "psu bond",
    )),
    (CanonicalCategory.GILT, (
        "gilt", "government securities", "g-sec", "gsec", "sovereign",
    )),
    (CanonicalCategory.COMMODITY, (
        "commodity", "commodities", "precious metals", "multi commodity",
    )),
    (CanonicalCategory.GOLD, (
        "gold", "gold fund", "gold etf", "gold savings", "gold fof",
    )),
    (CanonicalCategory.SILVER, ("silver", "silver fund", "silver etf")),
    (CanonicalCategory.INTERNATIONAL, (
        "international", "global", "overseas", "us equity", "us stock", "world",
        "emerging markets", "foreign", "feeder", "nasdaq", "s&p 500",
    )),
    (CanonicalCategory.ETF, ("etf", "exchange traded", "exchange-traded")),
    (CanonicalCategory.FOF, ("fof", "fund of funds", "fund-of-funds")),
)

# Coarse checks on the backend category when no keyword matched anywhere
CATEGORY_FALLBACKS: tuple[tuple[str, CanonicalCategory], ...] = (
    ("equity", CanonicalCategory.EQUITY),
    ("debt", CanonicalCategory.DEBT),
    ("hybrid", CanonicalCategory.HYBRID),
    ("commodity", CanonicalCategory.COMMODITY),
)

# Fund attributes in matching priority order (most specific first)
MATCH_PRIORITY: tuple[str, ...] = ("subCategory", "category", "schemeType", "name")

# URL slugs that differ from the canonical value
SLUG_ALIASES: dict[str, CanonicalCategory] = {
    "largecap": CanonicalCategory.LARGE_CAP,
    "midcap": CanonicalCategory.MID_CAP,
    "smallcap": CanonicalCategory.SMALL_CAP,
    "flexicap": CanonicalCategory.FLEXI_CAP,
    "multicap": CanonicalCategory.MULTI_CAP,
    "indexfund": CanonicalCategory.INDEX,
    "index-fund": CanonicalCategory.INDEX,
}


@dataclass(frozen=True)
class CategoryRules:
    """Immutable matching configuration for a CategoryNormalizer."""

    keywords: tuple[tuple[CanonicalCategory, tuple[str, ...]], ...] = CATEGORY_KEYWORDS
    fallbacks: tuple[tuple[str, CanonicalCategory], ...] = CATEGORY_FALLBACKS
    priority: tuple[str, ...] = MATCH_PRIORITY
    default: CanonicalCategory = CanonicalCategory.OTHER


DEFAULT_CATEGORY_RULES = CategoryRules()


class CategoryNormalizer:
    """Pure, deterministic mapping from fund attributes to a canonical category."""

    def __init__(self, rules: CategoryRules = DEFAULT_CATEGORY_RULES):
        self.rules = rules

    def normalize(self, fund: Mapping[str, Any] | None) -> CanonicalCategory:
        """
        Normalize a fund's category from its raw attributes.

        Each attribute in the priority order (subCategory, category,
        schemeType, name) is tested against the whole keyword table before
        moving to the next attribute, so a specific subCategory always beats
        a generic category.

        Args:
            fund: Raw fund record (or any mapping with the same keys).
                Missing, None or non-mapping input is treated as empty.

        Returns:
            Exactly one CanonicalCategory; never raises
        """
        if not isinstance(fund, Mapping):
            fund = {}

        fields = {key: normalize_field(fund.get(key)) for key in self.rules.priority}

        for key in self.rules.priority:
            text = fields[key]
            if not text:
                continue
            matched = self._match_keywords(text)
            if matched is not None:
                return matched

        category = fields.get("category", "")
        for keyword, fallback in self.rules.fallbacks:
            if keyword in category:
                return fallback

        return self.rules.default

    def _match_keywords(self, text: str) -> CanonicalCategory | None:
        for canonical, keywords in self.rules.keywords:
            if any(keyword in text for keyword in keywords):
                return canonical
        return None

    def belongs_to(self, fund: Mapping[str, Any], target: CanonicalCategory) -> bool:
        """
        Check if a fund belongs to a canonical category.

        A precomputed ``normalizedCategory`` on the record is trusted as is.
        """
        precomputed = fund.get("normalizedCategory") if isinstance(fund, Mapping) else None
        if precomputed:
            return precomputed == target.value
        return self.normalize(fund) == target


def category_from_slug(slug: str | None) -> CanonicalCategory | None:
    """
    Resolve a URL slug ("largecap", "large-cap", "Index Fund") to a category.

    Returns:
        CanonicalCategory, or None when the slug is unknown
    """
    normalized = normalize_slug(slug)
    if not normalized:
        return None
    if normalized in SLUG_ALIASES:
        return SLUG_ALIASES[normalized]
    try:
        return CanonicalCategory(normalized)
    except ValueError:
        return None


def category_label(category: CanonicalCategory | str) -> str:
    """Get the display label for a category; unknown values are title-cased."""
    try:
        return CATEGORY_LABELS[CanonicalCategory(category)]
    except ValueError:
        return title_from_slug(str(category))


def unique_categories(funds: Iterable[Mapping[str, Any]]) -> list[str]:
    """Sorted distinct ``normalizedCategory`` values present on the records."""
    return sorted({
        fund["normalizedCategory"]
        for fund in funds
        if fund.get("normalizedCategory")
    })


_default_normalizer = CategoryNormalizer()


def normalize_category(fund: Mapping[str, Any] | None) -> CanonicalCategory:
    """Normalize with the default rules."""
    return _default_normalizer.normalize(fund)
