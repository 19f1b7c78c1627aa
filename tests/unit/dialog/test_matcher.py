"""Unit tests for fuzzy field matching."""

import pytest

from factfinder.dialog.matcher import FieldMatcher, key_forms, name_variants
from factfinder.dialog.models import FieldStatus, MatchKind


@pytest.fixture
def matcher() -> FieldMatcher:
    return FieldMatcher()


class TestNameVariants:
    """Tests for name_variants and key_forms."""

    def test_camel_case_variants(self) -> None:
        """camelCase names yield joined and spaced forms."""
        assert name_variants("companyName") == ["companyname", "company name"]

    def test_separator_variants(self) -> None:
        """Underscores and hyphens are removed in one variant."""
        assert "productname" in name_variants("product_name")

    def test_no_empty_variants(self) -> None:
        """Whitespace-only names produce no empty variant."""
        assert "" not in name_variants("  ")

    def test_key_forms(self) -> None:
        """Keys are compared lowered, stripped and with separators as spaces."""
        assert key_forms("Company_Info.Company-Name") == [
            "company_info.company-name",
            "companyinfo.companyname",
            "company info.company name",
        ]


class TestDirectMatch:
    """Tests for direct matching."""

    def test_camel_field_matches_snake_key(self, matcher: FieldMatcher) -> None:
        """companyName matches a nested snake_case key."""
        result = matcher.match("companyName", {"company_info.company_name": "Acme Corp"})

        assert result.kind == MatchKind.DIRECT
        assert result.key == "company_info.company_name"
        assert result.value == "Acme Corp"
        assert result.status == FieldStatus.PROVIDED

    def test_case_insensitive(self, matcher: FieldMatcher) -> None:
        """Key casing does not matter."""
        result = matcher.match("quote", {"CEO_QUOTE": "We are thrilled"})

        assert result.kind == MatchKind.DIRECT

    def test_first_valid_key_wins(self, matcher: FieldMatcher) -> None:
        """Keys holding invalid values are skipped in flattened order."""
        flattened = {"companyName": "", "company_name": "Acme", "company.name": "Other"}

        result = matcher.match("companyName", flattened)

        assert result.key == "company_name"
        assert result.value == "Acme"

    def test_falsy_non_empty_values_are_valid(self, matcher: FieldMatcher) -> None:
        """Zero and False count as provided values."""
        assert matcher.match("employeeCount", {"employeeCount": 0}).matched
        assert matcher.match("isPublic", {"isPublic": False}).matched

    def test_none_value_is_missing(self, matcher: FieldMatcher) -> None:
        """A None value is not a match."""
        result = matcher.match("quote", {"quote": None})

        assert result.status == FieldStatus.MISSING


class TestSemanticMatch:
    """Tests for semantic matching."""

    def test_words_in_any_order(self, matcher: FieldMatcher) -> None:
        """Every word of a multi-word field found inside the key is a semantic match."""
        result = matcher.match("contact email", {"email_of_contact": "pr@acme.com"})

        assert result.kind == MatchKind.SEMANTIC
        assert result.status == FieldStatus.LIKELY_PROVIDED

    def test_single_word_field_never_semantic(self, matcher: FieldMatcher) -> None:
        """camelCase fields are one word under non-word splitting."""
        assert not matcher.is_semantic_match("keyFeatures", "features.key")

    def test_short_words_block_semantic_match(self, matcher: FieldMatcher) -> None:
        """Words of two characters or fewer never match."""
        assert not matcher.is_semantic_match("pr contact", "contact_pr_person")

    def test_direct_preferred_over_semantic(self, matcher: FieldMatcher) -> None:
        """A direct match wins even when a semantic key comes first."""
        flattened = {"email_of_contact": "a@b.com", "contact email": "c@d.com"}

        result = matcher.match("contact email", flattened)

        assert result.kind == MatchKind.DIRECT
        assert result.key == "contact email"


class TestSentinels:
    """Tests for sentinel handling."""

    def test_sentinel_marked_unavailable(self, matcher: FieldMatcher) -> None:
        """A matching key holding a sentinel is unmatched but flagged."""
        result = matcher.match("announcementType", {"announcementType": "unknown"})

        assert not result.matched
        assert result.sentinel
        assert result.status == FieldStatus.UNAVAILABLE

    def test_valid_value_beats_sentinel(self, matcher: FieldMatcher) -> None:
        """A later valid value is preferred over an earlier sentinel."""
        flattened = {"quote": "unavailable", "ceo.quote": "Big day"}

        result = matcher.match("quote", flattened)

        assert result.matched
        assert result.value == "Big day"

    def test_case_sensitive_by_default(self, matcher: FieldMatcher) -> None:
        """Capitalized sentinels count as real values by default."""
        assert matcher.is_valid_value("Unknown")

    def test_case_insensitive_when_configured(self) -> None:
        """Sentinel comparison can ignore case."""
        matcher = FieldMatcher(sentinel_case_sensitive=False)

        assert matcher.is_sentinel("Unknown")
        assert not matcher.is_valid_value("UNAVAILABLE")

    def test_custom_sentinels(self) -> None:
        """Sentinel values are configurable."""
        matcher = FieldMatcher(sentinel_values=["n/a"])

        assert matcher.is_sentinel("n/a")
        assert not matcher.is_sentinel("unknown")
