# tests/conftest.py
import json
import threading
import urllib.parse
from contextlib import contextmanager

import fakeredis
import pytest
from freezegun import freeze_time

from libtrends.errors import LibraryFetchError
from libtrends.providers.base import LibraryProvider


SAMPLE_RECORDS = [
    {"key": "A1", "data": {
        "key": "A1", "title": "Attention in Practice", "date": "2020-05-01", "itemType": "journalArticle",
        "publicationTitle": "Journal of Examples",
        "tags": [{"tag": "ai"}, {"tag": "nlp"}],
        "creators": [{"name": "Ada Lovelace"}, {"firstName": "Alan", "lastName": "Turing"}],
    }},
    {"key": "A2", "data": {"key": "A2", "title": "Second Look", "date": "March 2020", "tags": [{"tag": "ai"}]}},
    {"key": "A3", "data": {"key": "A3", "date": "2021", "tags": [{"tag": "nlp"}, {"tag": "vision"}]}},
    {"key": "A4", "data": {"key": "A4", "date": "n.d.", "tags": [{"tag": "ai"}]}},
    {"key": "A5"},
    {"key": "A6", "data": {
        "key": "A6", "date": "Spring 1999 issue", "tags": [{"tag": "vision"}],
        "creators": [{"firstName": "", "lastName": ""}],
    }},
]


class StaticProvider(LibraryProvider):
    def __init__(self, records=None):
        self.records = SAMPLE_RECORDS if records is None else records
        self.calls = 0

    def fetch_all(self):
        self.calls += 1
        return list(self.records)


class FailingProvider(LibraryProvider):
    def __init__(self, message="Zotero API error: 403 Forbidden"):
        self.message = message

    def fetch_all(self):
        raise LibraryFetchError(self.message, status=403)


class FakeResp:
    def __init__(self, payload, headers=None):
        self._p = payload
        self.headers = headers or {}
    def read(self): return self._p
    def __enter__(self): return self
    def __exit__(self, *a): return False


def make_paged_urlopen(records, total_header=True, calls=None):
    """urlopen stand-in serving `records` the way the Zotero items endpoint pages them."""
    def fake_open(req, timeout=None):
        url = req.full_url if hasattr(req, "full_url") else req
        qs = urllib.parse.parse_qs(urllib.parse.urlparse(url).query)
        start = int(qs["start"][0])
        limit = int(qs["limit"][0])
        if calls is not None:
            calls.append(req)
        headers = {"Total-Results": str(len(records))} if total_header else {}
        return FakeResp(json.dumps(records[start:start + limit]).encode(), headers)
    return fake_open


@pytest.fixture(autouse=True)
def patch_redis(monkeypatch):
    import redis
    monkeypatch.setattr(redis, "StrictRedis", fakeredis.FakeStrictRedis)
    yield


@pytest.fixture
def raw_records():
    return [dict(r) for r in SAMPLE_RECORDS]


@pytest.fixture
def freeze():
    with freeze_time("2025-08-20 10:00:00") as fz:
        yield fz


@contextmanager
def run_server(provider=None, limiter=None, ui_dir=None, host="127.0.0.1"):
    """Start the dashboard server on a free port in a background thread."""
    from libtrends import app

    kwargs = {"ui_dir": ui_dir} if ui_dir is not None else {}
    httpd = app.create_server(host, 0, provider=provider or StaticProvider(), limiter=limiter, **kwargs)
    port = httpd.server_address[1]
    t = threading.Thread(target=httpd.serve_forever, daemon=True)
    t.start()
    try:
        yield (httpd, f"http://{host}:{port}")
    finally:
        httpd.shutdown()
        t.join()
        httpd.server_close()
