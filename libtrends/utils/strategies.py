from __future__ import annotations
from collections import Counter
from typing import Dict, Iterable, List, Protocol, Sequence, Tuple

from libtrends.models import LibraryItem


class TagRanking(Protocol):
    def rank(self, items: Sequence[LibraryItem], top_n: int) -> List[Tuple[str, int]]: ...


def count_tags(items: Iterable[LibraryItem]) -> Tuple[Counter, Dict[str, int]]:
    """Tag occurrence counts plus each tag's first-seen position scanning items in order."""
    counts: Counter = Counter()
    first_seen: Dict[str, int] = {}
    for it in items:
        for tag in it.tags:
            counts[tag] += 1
            first_seen.setdefault(tag, len(first_seen))
    return counts, first_seen


class CountThenFirstSeen(TagRanking):
    """Descending count; equal counts keep the order tags were first seen."""

    def rank(self, items: Sequence[LibraryItem], top_n: int) -> List[Tuple[str, int]]:
        if top_n <= 0:
            return []
        counts, first_seen = count_tags(items)
        ranked = sorted(counts.items(), key=lambda kv: (-kv[1], first_seen[kv[0]]))
        return ranked[:top_n]
