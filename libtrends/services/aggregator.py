"""Year and tag aggregations over a normalized library.

Every function takes the item collection as an argument and returns fresh
plain data; nothing here keeps state between calls.
"""
from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from libtrends.config import STREAM_GRAPH_TAGS, TOP_TAGS_COUNT
from libtrends.models import LibraryItem
from libtrends.utils.strategies import CountThenFirstSeen, TagRanking

DEFAULT_RANKING: TagRanking = CountThenFirstSeen()


@dataclass(frozen=True)
class StreamMatrix:
    tag_labels: Tuple[str, ...]
    rows: Tuple[Tuple[int, Tuple[int, ...]], ...]

    def as_chart_table(self) -> Dict[str, list]:
        """Header row plus one data row per year, year as a category label."""
        return {
            "headers": ["Year", *self.tag_labels],
            "data": [[str(year), *counts] for year, counts in self.rows],
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag_labels": list(self.tag_labels),
            "rows": [[year, list(counts)] for year, counts in self.rows],
            **self.as_chart_table(),
        }


@dataclass(frozen=True)
class LibraryStats:
    total_items: int
    year_range: str
    total_tags: int

    def to_dict(self) -> Dict[str, Any]:
        return {"total_items": self.total_items, "year_range": self.year_range, "total_tags": self.total_tags}


def timeline_series(items: Sequence[LibraryItem]) -> List[Tuple[int, int]]:
    counts = Counter(it.year for it in items)
    return sorted(counts.items())


def stream_matrix(
    items: Sequence[LibraryItem],
    top_n: int = STREAM_GRAPH_TAGS,
    ranking: TagRanking = DEFAULT_RANKING,
) -> StreamMatrix:
    top_tags = tuple(tag for tag, _ in ranking.rank(items, top_n))
    wanted = set(top_tags)

    by_year: Dict[int, Counter] = {}
    for it in items:
        year_counts = by_year.setdefault(it.year, Counter())
        for tag in it.tags:
            if tag in wanted:
                year_counts[tag] += 1

    rows = tuple(
        (year, tuple(by_year[year][tag] for tag in top_tags))
        for year in sorted(by_year)
    )
    return StreamMatrix(tag_labels=top_tags, rows=rows)


def items_for_year(items: Sequence[LibraryItem], year: int) -> List[LibraryItem]:
    return [it for it in items if it.year == year]


def items_for_year_and_tag(items: Sequence[LibraryItem], year: int, tag: str) -> List[LibraryItem]:
    return [it for it in items if it.year == year and tag in it.tags]


def top_tags_for_year(
    items: Sequence[LibraryItem],
    year: int,
    top_n: int = TOP_TAGS_COUNT,
    ranking: TagRanking = DEFAULT_RANKING,
) -> List[Tuple[str, int]]:
    # ranked within the year only, independent of the global stream ranking
    return ranking.rank(items_for_year(items, year), top_n)


def all_years(items: Sequence[LibraryItem]) -> List[int]:
    return sorted({it.year for it in items})


def library_stats(items: Sequence[LibraryItem]) -> LibraryStats:
    years = all_years(items)
    tags = {tag for it in items for tag in it.tags}
    year_range = f"{years[0]} - {years[-1]}" if years else "N/A"
    return LibraryStats(total_items=len(items), year_range=year_range, total_tags=len(tags))
