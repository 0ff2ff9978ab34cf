"""
Top-N selection with a two-tier fallback.

Entities are ranked by an outcome metric (conversions) when at least one of
them has it. Keyword-less and AI-driven campaign types often report zero
attributable conversions while still spending, so when nobody has the outcome
metric the ranking falls back to a secondary metric (cost) over the full set
and says so.
"""
from typing import Callable, List, Sequence, Tuple, TypeVar

T = TypeVar("T")


def select_top(
    entities: Sequence[T],
    n: int,
    primary_key: Callable[[T], float],
    secondary_key: Callable[[T], float],
) -> Tuple[List[T], bool]:
    """
    Returns:
        (ranked entities, at most n; True if the secondary metric was used)
    """
    scored = [e for e in entities if primary_key(e) > 0]
    if scored:
        return sorted(scored, key=primary_key, reverse=True)[:n], False

    return sorted(entities, key=secondary_key, reverse=True)[:n], True
