"""
Unit tests for the category normalizer.
"""

import copy
import itertools
from dataclasses import FrozenInstanceError

import pytest

from fundscope.models.category import CanonicalCategory
from fundscope.services.category_normalizer import (
    CATEGORY_KEYWORDS,
    CategoryNormalizer,
    CategoryRules,
    category_from_slug,
    category_label,
    normalize_category,
    unique_categories,
)


@pytest.fixture
def normalizer():
    """Create a CategoryNormalizer with the default rules."""
    return CategoryNormalizer()


class TestPriorityOrder:
    """Tests for field priority: subCategory > category > schemeType > name."""

    def test_subcategory_beats_category(self, normalizer):
        """An index subCategory wins over a generic equity category."""
        fund = {"subCategory": "index fund", "category": "equity"}
        assert normalizer.normalize(fund) == CanonicalCategory.INDEX

    def test_category_used_when_subcategory_has_no_match(self, normalizer):
        fund = {"subCategory": "zzz", "category": "Liquid Fund"}
        assert normalizer.normalize(fund) == CanonicalCategory.LIQUID

    def test_scheme_type_used_before_name(self, normalizer):
        fund = {"schemeType": "ETF", "name": "Nippon India Gold"}
        assert normalizer.normalize(fund) == CanonicalCategory.ETF

    def test_name_used_as_last_keyword_source(self, normalizer):
        fund = {"name": "HDFC Gold Fund"}
        assert normalizer.normalize(fund) == CanonicalCategory.GOLD

    def test_tie_within_level_broken_by_table_order(self, normalizer):
        """'large & mid cap' also contains 'mid cap'; large-cap comes first."""
        assert normalizer.normalize({"subCategory": "Large & Mid Cap"}) == CanonicalCategory.LARGE_CAP

    def test_shared_keyword_goes_to_first_category(self, normalizer):
        """'sensex' is listed for both large-cap and index."""
        assert normalizer.normalize({"subCategory": "Sensex"}) == CanonicalCategory.LARGE_CAP


class TestKeywordMatching:
    """Tests for representative keyword matches."""

    @pytest.mark.parametrize(
        "sub_category, expected",
        [
            ("Bluechip", CanonicalCategory.LARGE_CAP),
            ("Top 100", CanonicalCategory.LARGE_CAP),
            ("Mid Cap", CanonicalCategory.MID_CAP),
            ("Small Cap", CanonicalCategory.SMALL_CAP),
            ("Flexi Cap", CanonicalCategory.FLEXI_CAP),
            ("Tax Saver", CanonicalCategory.ELSS),
            ("Pharma", CanonicalCategory.SECTORAL),
            ("ESG", CanonicalCategory.THEMATIC),
            ("Contra", CanonicalCategory.CONTRA),
            ("Overnight", CanonicalCategory.OVERNIGHT),
            ("Gilt", CanonicalCategory.GILT),
            ("Banking and PSU", CanonicalCategory.SECTORAL),
            ("Fund of Funds", CanonicalCategory.FOF),
            ("Overseas", CanonicalCategory.INTERNATIONAL),
        ],
    )
    def test_subcategory_keywords(self, normalizer, sub_category, expected):
        assert normalizer.normalize({"subCategory": sub_category}) == expected

    def test_matching_is_case_and_whitespace_insensitive(self, normalizer):
        assert normalizer.normalize({"subCategory": "   SMALL CAP   "}) == CanonicalCategory.SMALL_CAP


class TestFallback:
    """Tests for the coarse category fallback."""

    def test_plain_equity_falls_back_to_equity(self, normalizer):
        assert normalizer.normalize({"category": "Equity"}) == CanonicalCategory.EQUITY

    def test_equity_fallback_needs_category_field(self, normalizer):
        """The coarse fallback only looks at category, not at the name."""
        assert normalizer.normalize({"name": "Some Equity Scheme"}) == CanonicalCategory.OTHER

    def test_unmatched_input_is_other(self, normalizer):
        fund = {"category": "solution oriented", "subCategory": "retirement", "name": "ABC Plan"}
        assert normalizer.normalize(fund) == CanonicalCategory.OTHER


class TestTotality:
    """normalize never raises and always returns a canonical value."""

    @pytest.mark.parametrize("fund", [None, {}, [], "equity", 42, {"category": None}])
    def test_degenerate_input_is_other(self, normalizer, fund):
        assert normalizer.normalize(fund) == CanonicalCategory.OTHER

    def test_all_field_combinations(self, normalizer):
        values = [None, "", "   ", "Large Cap", "DEBT", "index fund", 123, "???", "gold etf"]
        for sub_category, category, scheme_type, name in itertools.product(values, repeat=4):
            fund = {
                "subCategory": sub_category,
                "category": category,
                "schemeType": scheme_type,
                "name": name,
            }
            result = normalizer.normalize(fund)
            assert isinstance(result, CanonicalCategory)

    def test_deterministic_across_calls(self, normalizer):
        fund = {"category": "Hybrid", "subCategory": "Balanced Advantage", "name": "X"}
        results = {normalizer.normalize(fund) for _ in range(50)}
        assert results == {CanonicalCategory.HYBRID}

    def test_input_not_mutated(self, normalizer):
        fund = {"category": "  Equity ", "subCategory": "Mid Cap", "extra": [1, 2]}
        snapshot = copy.deepcopy(fund)
        normalizer.normalize(fund)
        assert fund == snapshot

    def test_module_level_helper_matches_instance(self, normalizer):
        fund = {"subCategory": "Liquid"}
        assert normalize_category(fund) == normalizer.normalize(fund)


class TestCategoryRules:
    """Tests for the immutable rules object."""

    def test_default_table_follows_enum_order(self):
        table_order = [category for category, _ in CATEGORY_KEYWORDS]
        enum_order = [category for category in CanonicalCategory if category in table_order]
        assert table_order == enum_order

    def test_rules_are_frozen(self):
        rules = CategoryRules()
        with pytest.raises(FrozenInstanceError):
            rules.keywords = ()

    def test_custom_rules(self):
        normalizer = CategoryNormalizer(
            CategoryRules(keywords=((CanonicalCategory.GOLD, ("bullion",)),))
        )
        assert normalizer.normalize({"name": "Bullion Savings"}) == CanonicalCategory.GOLD
        # Default keywords are not consulted
        assert normalizer.normalize({"subCategory": "Large Cap"}) == CanonicalCategory.OTHER


class TestBelongsTo:
    """Tests for belongs_to method."""

    def test_uses_precomputed_category(self, normalizer):
        fund = {"normalizedCategory": "gold", "subCategory": "Large Cap"}
        assert normalizer.belongs_to(fund, CanonicalCategory.GOLD) is True
        assert normalizer.belongs_to(fund, CanonicalCategory.LARGE_CAP) is False

    def test_computes_when_missing(self, normalizer):
        assert normalizer.belongs_to({"subCategory": "Large Cap"}, CanonicalCategory.LARGE_CAP) is True


class TestSlugAndLabels:
    """Tests for slug resolution and display labels."""

    @pytest.mark.parametrize(
        "slug, expected",
        [
            ("largecap", CanonicalCategory.LARGE_CAP),
            ("large-cap", CanonicalCategory.LARGE_CAP),
            ("Large Cap", CanonicalCategory.LARGE_CAP),
            ("index-fund", CanonicalCategory.INDEX),
            ("indexfund", CanonicalCategory.INDEX),
            ("ELSS", CanonicalCategory.ELSS),
            ("banking-psu", CanonicalCategory.BANKING_PSU),
            ("fof", CanonicalCategory.FOF),
        ],
    )
    def test_known_slugs(self, slug, expected):
        assert category_from_slug(slug) == expected

    @pytest.mark.parametrize("slug", ["", None, "crypto", "large--cap"])
    def test_unknown_slugs(self, slug):
        assert category_from_slug(slug) is None

    def test_labels(self):
        assert category_label(CanonicalCategory.ELSS) == "ELSS (Tax Saver)"
        assert category_label("banking-psu") == "Banking & PSU"
        assert category_label("solution-oriented") == "Solution Oriented"

    def test_unique_categories_sorted(self):
        funds = [
            {"normalizedCategory": "gold"},
            {"normalizedCategory": "debt"},
            {"normalizedCategory": "gold"},
            {"name": "no category"},
        ]
        assert unique_categories(funds) == ["debt", "gold"]
