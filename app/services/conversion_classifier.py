"""
Conversion Action Classification

Maps a vendor conversion action (free-text name plus a vendor-specific
category code) to one business category: phone call, website action,
directions request, or other.

Rules are evaluated top to bottom and the first match wins, so every action
lands in exactly one category. An action matching several rules
("Email Directions Signup") takes the earliest one. Downstream totals rely on
that exclusivity, so the order below is part of the contract.
"""
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from app.models.insights import ConversionAction, ConversionCategory

T = TypeVar("T")
R = TypeVar("R")

# Google Ads conversion_action_category codes
PHONE_CALL_CODES = frozenset({11})
WEBSITE_CODES = frozenset({3})

Predicate = Callable[[ConversionAction], bool]


def name_contains(*fragments: str) -> Predicate:
    lowered = tuple(f.lower() for f in fragments)

    def predicate(action: ConversionAction) -> bool:
        name = (action.name or "").lower()
        return any(fragment in name for fragment in lowered)

    return predicate


def code_in(codes: Iterable[int]) -> Predicate:
    codes = frozenset(codes)

    def predicate(action: ConversionAction) -> bool:
        return action.category_code in codes

    return predicate


def any_of(*predicates: Predicate) -> Predicate:
    def predicate(action: ConversionAction) -> bool:
        return any(p(action) for p in predicates)

    return predicate


# ---------------------------------------------------------------------------
# Rule table: (predicate, category), first match wins
# ---------------------------------------------------------------------------

CLASSIFICATION_RULES: List[Tuple[Predicate, ConversionCategory]] = [
    (any_of(name_contains("call"), code_in(PHONE_CALL_CODES)), ConversionCategory.PHONE_CALL),
    (any_of(name_contains("page", "email", "form"), code_in(WEBSITE_CODES)), ConversionCategory.WEBSITE),
    (name_contains("direction", "map", "location"), ConversionCategory.DIRECTIONS),
]


def first_match(
    item: T,
    rules: Sequence[Tuple[Callable[[T], bool], R]],
    default: R,
) -> R:
    """Return the result of the first rule whose predicate accepts ``item``."""
    for predicate, result in rules:
        if predicate(item):
            return result
    return default


def classify(
    action: ConversionAction,
    rules: Optional[Sequence[Tuple[Predicate, ConversionCategory]]] = None,
) -> ConversionCategory:
    return first_match(
        action,
        CLASSIFICATION_RULES if rules is None else rules,
        ConversionCategory.OTHER,
    )


def tally_conversions(actions: Iterable[ConversionAction]) -> Dict[ConversionCategory, float]:
    """Sum conversions per category; each action counts toward one category only."""
    totals = {category: 0.0 for category in ConversionCategory}
    for action in actions:
        totals[classify(action)] += action.conversions
    return totals
