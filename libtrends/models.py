from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class LibraryItem:
    """A normalized library record. `year` is always set."""
    key: str
    year: int
    title: str = "Untitled"
    tags: Tuple[str, ...] = field(default_factory=tuple)
    creators: Tuple[str, ...] = field(default_factory=tuple)
    item_type: str = ""
    publication_title: str = ""
    date: str = ""

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["tags"] = list(self.tags)
        out["creators"] = list(self.creators)
        return out
