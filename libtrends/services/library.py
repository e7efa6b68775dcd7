from __future__ import annotations
import threading
import time
from dataclasses import dataclass
from typing import Optional, Tuple

from libtrends.models import LibraryItem
from libtrends.providers.base import LibraryProvider
from libtrends.utils.normalize import normalize_items
from libtrends.utils.logging_setup import configure_logging_from_env

logger = configure_logging_from_env(__name__)


@dataclass(frozen=True)
class LibrarySnapshot:
    items: Tuple[LibraryItem, ...]
    raw_count: int
    loaded_at: float


def load_snapshot(provider: LibraryProvider) -> LibrarySnapshot:
    raw = provider.fetch_all()
    items = tuple(normalize_items(raw))
    logger.info("library_loaded raw=%d with_year=%d", len(raw), len(items))
    return LibrarySnapshot(items=items, raw_count=len(raw), loaded_at=time.time())


class LibrarySession:
    """Loads the snapshot on first use and hands the same one out afterwards.

    A failed load is not remembered, so the next call tries again.
    """

    def __init__(self, provider: LibraryProvider):
        self._provider = provider
        self._lock = threading.Lock()
        self._snapshot: Optional[LibrarySnapshot] = None

    def snapshot(self) -> LibrarySnapshot:
        with self._lock:
            if self._snapshot is None:
                self._snapshot = load_snapshot(self._provider)
            return self._snapshot
