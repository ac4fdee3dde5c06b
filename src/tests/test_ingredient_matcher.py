"""
Tests for ingredient name matching.

Tests cover:
- Name normalization
- Exact matches taking priority over substring matches
- Substring containment in either direction
- Iteration order deciding between overlapping candidates
- Ambiguity reporting
"""

from bar_costing.models.enums import MatchKind
from bar_costing.services.dto import InventoryItem
from bar_costing.services.ingredient_matcher import (
    find_ambiguous_matches,
    match,
    match_with_kind,
    normalize_name,
)


def _items(*names):
    return [InventoryItem(id=index, name=name) for index, name in enumerate(names, start=1)]


class TestNormalizeName:
    """Test normalize_name()."""

    def test_strips_case_spaces_and_punctuation(self):
        assert normalize_name("Grey Goose Vodka") == "greygoosevodka"
        assert normalize_name("St-Germain (70cl)") == "stgermain70cl"

    def test_empty(self):
        assert normalize_name("") == ""
        assert normalize_name(None) == ""
        assert normalize_name("  --  ") == ""


class TestMatch:
    """Test match() and match_with_kind()."""

    def test_substring_match(self):
        """Test a partial name resolves to the containing candidate."""
        candidates = _items("Grey Goose Vodka", "Patron Silver")
        result = match("Grey Goose", candidates)
        assert result is not None
        assert result.name == "Grey Goose Vodka"

    def test_candidate_contained_in_ingredient(self):
        """Test containment works in the other direction too."""
        candidates = _items("Patron Silver", "Lime")
        assert match("Fresh Lime Juice", candidates).name == "Lime"

    def test_exact_match_beats_earlier_substring(self):
        candidates = _items("Citrus Vodka", "Vodka")
        result = match_with_kind("vodka", candidates)
        assert result.item.name == "Vodka"
        assert result.kind == MatchKind.EXACT
        assert result.matched

    def test_first_substring_wins(self):
        """Test iteration order decides between overlapping candidates."""
        candidates = _items("Vanilla Vodka", "Citrus Vodka")
        result = match_with_kind("Vodka 70cl", candidates)
        assert result.item.name == "Vanilla Vodka"
        assert result.kind == MatchKind.SUBSTRING

    def test_punctuation_and_case_ignored(self):
        candidates = _items("ST-GERMAIN")
        assert match_with_kind("st germain", candidates).kind == MatchKind.EXACT

    def test_no_match(self):
        result = match_with_kind("Angostura", _items("Grey Goose Vodka", "Patron Silver"))
        assert result.item is None
        assert result.kind == MatchKind.NONE
        assert not result.matched

    def test_empty_name_never_matches(self):
        candidates = _items("Grey Goose Vodka")
        assert match("", candidates) is None
        assert match("!!!", candidates) is None

    def test_empty_candidate_name_skipped(self):
        candidates = _items("", "Lime Juice")
        assert match("Lime", candidates).name == "Lime Juice"

    def test_punctuation_only_names_do_not_pair_up(self):
        """Test a blank ingredient is not attributed to a blank or first inventory item."""
        result = match_with_kind("--", _items("***", "Grey Goose Vodka"))
        assert result.item is None
        assert result.kind == MatchKind.NONE

    def test_no_candidates(self):
        assert match("Lime", []) is None


class TestFindAmbiguousMatches:
    """Test find_ambiguous_matches()."""

    def test_lists_all_overlapping_candidates(self):
        candidates = _items("Vodka", "Citrus Vodka", "Gin")
        names = [item.name for item in find_ambiguous_matches("Vodka", candidates)]
        assert names == ["Vodka", "Citrus Vodka"]

    def test_single_candidate(self):
        candidates = _items("Grey Goose Vodka", "Patron Silver")
        assert len(find_ambiguous_matches("Grey Goose", candidates)) == 1

    def test_empty_name(self):
        assert find_ambiguous_matches("", _items("Vodka")) == []
