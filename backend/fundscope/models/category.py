"""Canonical fund category taxonomy."""

from enum import Enum


class CanonicalCategory(str, Enum):
    """
    Fixed taxonomy used for filtering and search.

    Member order matters: it is the tie-break order of the keyword table.
    """

    LARGE_CAP = "large-cap"
    MID_CAP = "mid-cap"
    SMALL_CAP = "small-cap"
    FLEXI_CAP = "flexi-cap"
    MULTI_CAP = "multi-cap"
    ELSS = "elss"
    INDEX = "index"
    SECTORAL = "sectoral"
    THEMATIC = "thematic"
    FOCUSED = "focused"
    VALUE = "value"
    CONTRA = "contra"
    DIVIDEND = "dividend"
    HYBRID = "hybrid"
    BALANCED = "balanced"
    DEBT = "debt"
    LIQUID = "liquid"
    OVERNIGHT = "overnight"
    SHORT_DURATION = "short-duration"
    CORPORATE_BOND = "corporate-bond"
    BANKING_PSU = "banking-psu"
    GILT = "gilt"
    COMMODITY = "commodity"
    GOLD = "gold"
    SILVER = "silver"
    INTERNATIONAL = "international"
    ETF = "etf"
    FOF = "fof"
    EQUITY = "equity"
    OTHER = "other"


CATEGORY_LABELS: dict[CanonicalCategory, str] = {
    CanonicalCategory.LARGE_CAP: "Large Cap",
    CanonicalCategory.MID_CAP: "Mid Cap",
    CanonicalCategory.SMALL_CAP: "Small Cap",
    CanonicalCategory.FLEXI_CAP: "Flexi Cap",
    CanonicalCategory.MULTI_CAP: "Multi Cap",
    CanonicalCategory.ELSS: "ELSS (Tax Saver)",
    CanonicalCategory.INDEX: "Index Funds",
    CanonicalCategory.SECTORAL: "Sectoral",
    CanonicalCategory.THEMATIC: "Thematic",
    CanonicalCategory.FOCUSED: "Focused",
    CanonicalCategory.VALUE: "Value",
    CanonicalCategory.CONTRA: "Contra",
    CanonicalCategory.DIVIDEND: "Dividend Yield",
    CanonicalCategory.HYBRID: "Hybrid",
    CanonicalCategory.BALANCED: "Balanced",
    CanonicalCategory.DEBT: "Debt",
    CanonicalCategory.LIQUID: "Liquid",
    CanonicalCategory.OVERNIGHT: "Overnight",
    CanonicalCategory.SHORT_DURATION: "Short Duration",
    CanonicalCategory.CORPORATE_BOND: "Corporate Bond",
    CanonicalCategory.BANKING_PSU: "Banking & PSU",
    CanonicalCategory.GILT: "Gilt",
    CanonicalCategory.COMMODITY: "Commodity",
    CanonicalCategory.GOLD: "Gold",
    CanonicalCategory.SILVER: "Silver",
    CanonicalCategory.INTERNATIONAL: "International",
    CanonicalCategory.ETF: "ETF",
    CanonicalCategory.FOF: "Fund of Funds",
    CanonicalCategory.EQUITY: "Equity",
    CanonicalCategory.OTHER: "Other",
}
