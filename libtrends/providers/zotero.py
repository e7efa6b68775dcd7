import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional, Tuple

import pybreaker

from libtrends.providers.base import LibraryProvider
from libtrends.config import (
    ZOTERO_API_KEY, ZOTERO_API_BASE_URL, ZOTERO_LIBRARY_ID, ZOTERO_LIBRARY_TYPE,
    ZOTERO_ITEMS_PER_PAGE, ZOTERO_TIMEOUT,
)
from libtrends.errors import LibraryFetchError
from libtrends.utils.circuit_breaker import zotero_breaker
from libtrends.utils.logging_setup import configure_logging_from_env

logger = configure_logging_from_env(__name__)

API_VERSION = "3"


class ZoteroProvider(LibraryProvider):
    """Reads a whole Zotero library, one page at a time.

    Pages are requested strictly in sequence. The first failed page aborts
    the fetch with a LibraryFetchError; nothing partial is returned.
    """

    def __init__(
        self,
        library_id: str = ZOTERO_LIBRARY_ID,
        library_type: str = ZOTERO_LIBRARY_TYPE,
        api_key: Optional[str] = ZOTERO_API_KEY,
        base_url: str = ZOTERO_API_BASE_URL,
        page_size: int = ZOTERO_ITEMS_PER_PAGE,
        timeout: float = ZOTERO_TIMEOUT,
        breaker: pybreaker.CircuitBreaker = zotero_breaker,
    ):
        if library_type not in ("groups", "users"):
            raise ValueError(f"library_type must be 'groups' or 'users', got {library_type!r}")
        self.library_id = library_id
        self.library_type = library_type
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.page_size = max(1, page_size)
        self.timeout = timeout
        self.breaker = breaker
        logger.debug(
            "ZoteroProvider initialized | library=%s/%s api_key_present=%s",
            library_type, library_id, bool(api_key),
        )

    def _url(self, start: int) -> str:
        params = {"start": start, "limit": self.page_size, "format": "json"}
        return (
            f"{self.base_url}/{self.library_type}/{self.library_id}/items?"
            + urllib.parse.urlencode(params)
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Zotero-API-Version": API_VERSION}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _request(self, url: str) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        logger.info("Zotero API request: %s", url)
        req = urllib.request.Request(url, headers=self._headers())
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as r:
                total = r.headers.get("Total-Results")
                raw = r.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            raise LibraryFetchError(f"Zotero API error: {e.code} {e.reason}", status=e.code) from e

        logger.debug("Zotero API response bytes=%d total_results=%s", len(raw), total)
        items = json.loads(raw)
        if not isinstance(items, list):
            raise LibraryFetchError("Zotero API error: unexpected response body")
        return items, (int(total) if total not in (None, "") else None)

    def fetch_page(self, start: int) -> Tuple[List[Dict[str, Any]], Optional[int]]:
        url = self._url(start)
        try:
            return self.breaker.call(self._request, url)
        except LibraryFetchError:
            raise
        except pybreaker.CircuitBreakerError as e:
            # the call that trips the breaker carries the upstream error as its cause
            trigger = e.__cause__ or e.__context__
            if isinstance(trigger, LibraryFetchError):
                raise trigger from None
            if isinstance(trigger, Exception):
                raise LibraryFetchError(f"Zotero API request failed: {trigger}") from trigger
            raise LibraryFetchError(f"Zotero API unavailable: {e}") from e
        except Exception as e:
            raise LibraryFetchError(f"Zotero API request failed: {e}") from e

    def fetch_all(self) -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        start = 0
        total: Optional[int] = None

        while True:
            try:
                page, page_total = self.fetch_page(start)
            except LibraryFetchError as e:
                logger.error("zotero_fetch_fail start=%d err=%s", start, e, exc_info=True)
                raise

            if total is None:
                total = page_total
            records.extend(page)
            start += self.page_size
            logger.info("Fetched %d of %s items", len(records), total if total is not None else "?")

            if not page:
                break
            if total is not None and start >= total:
                break
            # no Total-Results header: a short page is the last one
            if total is None and len(page) < self.page_size:
                break

        logger.info("Successfully fetched all %d items", len(records))
        return records
