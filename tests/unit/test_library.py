import pytest

from libtrends.errors import LibraryFetchError
from libtrends.services.library import LibrarySession, load_snapshot
from tests.conftest import FailingProvider, StaticProvider


def test_load_snapshot_normalizes_once():
    snap = load_snapshot(StaticProvider())
    assert snap.raw_count == 6
    assert isinstance(snap.items, tuple)
    assert [it.key for it in snap.items] == ["A1", "A2", "A3", "A6"]


def test_session_reuses_snapshot():
    provider = StaticProvider()
    session = LibrarySession(provider)
    assert session.snapshot() is session.snapshot()
    assert provider.calls == 1


def test_session_retries_after_failure():
    provider = FailingProvider()
    session = LibrarySession(provider)
    with pytest.raises(LibraryFetchError):
        session.snapshot()
    session._provider = StaticProvider()
    assert len(session.snapshot().items) == 4
