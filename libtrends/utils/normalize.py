import re
from typing import Any, Dict, Iterable, List, Optional

from libtrends.models import LibraryItem

YEAR_RE = re.compile(r"[0-9]{4}")


def _as_dict(value) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def extract_year(date: Optional[str]) -> Optional[int]:
    # first run of four digits, e.g. "Spring 1999 issue" -> 1999
    if not date or not isinstance(date, str):
        return None
    m = YEAR_RE.search(date)
    return int(m.group(0)) if m else None


def extract_tags(raw_tags) -> List[str]:
    out = []
    for t in _as_list(raw_tags):
        label = t.get("tag") if isinstance(t, dict) else t
        if isinstance(label, str):
            out.append(label)
    return out


def creator_name(creator: Dict[str, Any]) -> str:
    if creator.get("name"):
        return str(creator["name"])
    first = creator.get("firstName") or ""
    last = creator.get("lastName") or ""
    return f"{first} {last}".strip()


def extract_creators(raw_creators) -> List[str]:
    names = (creator_name(c) for c in _as_list(raw_creators) if isinstance(c, dict))
    return [n for n in names if n]


def normalize_record(record: Dict[str, Any]) -> Optional[LibraryItem]:
    """Map one Zotero API record to a LibraryItem.

    Missing sub-fields fall back to defaults; a record whose date carries no
    four-digit year yields None.
    """
    record = _as_dict(record)
    data = _as_dict(record.get("data"))

    date = data.get("date") or ""
    year = extract_year(date)
    if year is None:
        return None

    return LibraryItem(
        key=data.get("key") or record.get("key") or "",
        year=year,
        title=data.get("title") or "Untitled",
        tags=tuple(extract_tags(data.get("tags"))),
        creators=tuple(extract_creators(data.get("creators"))),
        item_type=data.get("itemType") or "",
        publication_title=data.get("publicationTitle") or "",
        date=date,
    )


def normalize_items(records: Iterable[Dict[str, Any]]) -> List[LibraryItem]:
    items = []
    for rec in records:
        item = normalize_record(rec)
        if item is not None:
            items.append(item)
    return items
