from libtrends.models import LibraryItem
from libtrends.utils.strategies import CountThenFirstSeen, count_tags


def test_count_tags_records_first_seen_position():
    items = [LibraryItem("a", 2020, tags=("b", "a")), LibraryItem("c", 2021, tags=("a", "c", "b"))]
    counts, first_seen = count_tags(items)
    assert first_seen == {"b": 0, "a": 1, "c": 2}
    assert counts["a"] == 2
    assert counts["b"] == 2


def test_rank_by_count_then_first_seen():
    items = [
        LibraryItem("1", 2020, tags=("z", "y")),
        LibraryItem("2", 2020, tags=("x", "y")),
        LibraryItem("3", 2020, tags=("x",)),
    ]
    assert CountThenFirstSeen().rank(items, 10) == [("y", 2), ("x", 2), ("z", 1)]
    assert CountThenFirstSeen().rank(items, 1) == [("y", 2)]


def test_ties_break_on_scan_order_not_alphabet():
    items = [LibraryItem("1", 2020, tags=("zeta",)), LibraryItem("2", 2021, tags=("alpha",))]
    assert CountThenFirstSeen().rank(items, 2) == [("zeta", 1), ("alpha", 1)]
