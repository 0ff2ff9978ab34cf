"""
Ranking selector tests.

Guards against: zero-conversion entities outranking converting ones, and an
empty top list when nothing converted but money was spent.
"""
from app.models.insights import RawKeyword
from app.services.ranking import select_top


def _kw(text, conversions, cost_micros):
    return RawKeyword(id=text, text=text, conversions=conversions, cost_micros=cost_micros)


def _conversions(k):
    return k.conversions


def _cost(k):
    return k.cost_micros


def test_ranks_by_primary_and_drops_zero_primary():
    keywords = [_kw("a", 0, 900), _kw("b", 3, 100), _kw("c", 7, 50)]
    ranked, used_secondary = select_top(keywords, 10, _conversions, _cost)

    assert [k.text for k in ranked] == ["c", "b"]
    assert used_secondary is False


def test_falls_back_to_secondary_when_nothing_converted():
    keywords = [_kw("a", 0, 100), _kw("b", 0, 900), _kw("c", 0, 500)]
    ranked, used_secondary = select_top(keywords, 10, _conversions, _cost)

    assert [k.text for k in ranked] == ["b", "c", "a"]
    assert used_secondary is True


def test_limits_to_n():
    keywords = [_kw(str(i), i + 1, 0) for i in range(15)]
    ranked, _ = select_top(keywords, 10, _conversions, _cost)

    assert len(ranked) == 10
    assert ranked[0].conversions == 15


def test_fallback_limits_to_n():
    keywords = [_kw(str(i), 0, i) for i in range(8)]
    ranked, used_secondary = select_top(keywords, 5, _conversions, _cost)

    assert [k.cost_micros for k in ranked] == [7, 6, 5, 4, 3]
    assert used_secondary is True


def test_empty_input():
    ranked, used_secondary = select_top([], 5, _conversions, _cost)
    assert ranked == []
    assert used_secondary is True
