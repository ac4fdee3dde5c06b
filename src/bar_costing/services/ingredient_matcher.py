"""
Ingredient name matching against inventory records.

Resolves a free-text recipe ingredient name to an inventory item without an
exact key. Matching is deliberately simple:

1. Normalize both names (lowercase, strip everything but a-z and 0-9)
2. First candidate whose normalized name equals the ingredient's wins
3. Otherwise the first candidate where either normalized name contains
   the other wins
4. Otherwise no match

There is no similarity score or ranking; iteration order decides. Names
that overlap ("Vodka" vs "Citrus Vodka") can resolve to the wrong item, so
find_ambiguous_matches() is provided for callers that want to warn.
"""

import re
from typing import Iterable, List, Optional, Sequence

from bar_costing.models.enums import MatchKind
from bar_costing.services.dto import InventoryItem, MatchResult

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")


def normalize_name(name: Optional[str]) -> str:
    """
    Normalize a name for matching.

    Examples:
        >>> normalize_name("Grey Goose Vodka")
        'greygoosevodka'
        >>> normalize_name("St-Germain (70cl)")
        'stgermain70cl'
    """
    if not name:
        return ""
    return _NON_ALPHANUMERIC.sub("", name.lower())


def _is_substring_match(normalized_ingredient: str, normalized_candidate: str) -> bool:
    if not normalized_candidate:
        return False
    return (
        normalized_ingredient in normalized_candidate
        or normalized_candidate in normalized_ingredient
    )


def match_with_kind(ingredient_name: str, candidates: Iterable[InventoryItem]) -> MatchResult:
    """
    Resolve an ingredient name and report how it matched.

    Args:
        ingredient_name: Free-text recipe ingredient name
        candidates: Inventory items, in priority order

    Returns:
        MatchResult with the item and MatchKind.EXACT / SUBSTRING / NONE
    """
    normalized = normalize_name(ingredient_name)
    if not normalized:
        return MatchResult(item=None, kind=MatchKind.NONE)

    candidate_list = list(candidates)
    normalized_candidates = [normalize_name(item.name) for item in candidate_list]

    for item, candidate_name in zip(candidate_list, normalized_candidates):
        if candidate_name == normalized:
            return MatchResult(item=item, kind=MatchKind.EXACT)

    for item, candidate_name in zip(candidate_list, normalized_candidates):
        if _is_substring_match(normalized, candidate_name):
            return MatchResult(item=item, kind=MatchKind.SUBSTRING)

    return MatchResult(item=None, kind=MatchKind.NONE)


def match(ingredient_name: str, candidates: Iterable[InventoryItem]) -> Optional[InventoryItem]:
    """
    Resolve a free-text ingredient name to an inventory item.

    Args:
        ingredient_name: Free-text recipe ingredient name
        candidates: Inventory items, in priority order

    Returns:
        Matched InventoryItem, or None

    Example:
        >>> items = [InventoryItem(1, "Grey Goose Vodka"), InventoryItem(2, "Patron Silver")]
        >>> match("Grey Goose", items).name
        'Grey Goose Vodka'
    """
    return match_with_kind(ingredient_name, candidates).item


def find_ambiguous_matches(
    ingredient_name: str, candidates: Sequence[InventoryItem]
) -> List[InventoryItem]:
    """
    List every candidate the ingredient name could resolve to.

    Does not change what match() returns; use it to warn when more than one
    inventory item overlaps the name.

    Returns:
        All exact or substring candidates, in iteration order
    """
    normalized = normalize_name(ingredient_name)
    if not normalized:
        return []
    return [
        item
        for item in candidates
        if _is_substring_match(normalized, normalize_name(item.name))
    ]
