"""
tests/test_storage_gateway.py

Pytest unit tests for upload-with-verification and purging.

Coverage
--------
- First-attempt success does not sleep
- Linear backoff (5s, 10s) until confirmation
- Exhausted attempts return an unconfirmed result instead of raising
- Empty version tag counts as unconfirmed
- Client transport errors propagate
- Prefix purge, progress logging and per-object failure handling
"""

from __future__ import annotations

import logging

import pytest

from sitemap.errors import StorageUnconfirmedError
from sitemap.storage.gateway import StorageGateway
from tests.fakes import InMemoryObjectStorage, SleepRecorder


class FlakyStorage(InMemoryObjectStorage):
    """Loses the first ``failures`` writes: put returns a tag but nothing lands."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self._failures = failures

    def put(self, key: str, payload: bytes) -> str | None:
        if self._failures > 0:
            self._failures -= 1
            self.put_calls.append(key)
            return "etag-lost"
        return super().put(key, payload)


class NoVersionStorage(InMemoryObjectStorage):
    def put(self, key: str, payload: bytes) -> str | None:
        super().put(key, payload)
        return ""


class BrokenStorage(InMemoryObjectStorage):
    def put(self, key: str, payload: bytes) -> str | None:
        raise ConnectionError("storage unreachable")


class UndeletableStorage(InMemoryObjectStorage):
    def delete(self, key: str) -> None:
        if key.endswith("to=3"):
            raise OSError("permission denied")
        super().delete(key)


def _gateway(storage: InMemoryObjectStorage, sleeper: SleepRecorder) -> StorageGateway:
    return StorageGateway(storage, max_attempts=3, backoff_seconds=5.0, sleep=sleeper)


class TestUpload:
    def test_confirmed_on_first_attempt(self, gateway: StorageGateway, storage, sleeper) -> None:
        result = gateway.upload("a.xml", b"<x/>")
        assert result.confirmed is True
        assert result.attempts == 1
        assert result.version
        assert sleeper.delays == []
        assert storage.objects["a.xml"] == b"<x/>"

    def test_retries_with_linear_backoff_until_present(self) -> None:
        storage = FlakyStorage(failures=2)
        sleeper = SleepRecorder()
        result = _gateway(storage, sleeper).upload("a.xml", b"<x/>")

        assert result.confirmed is True
        assert result.attempts == 3
        assert sleeper.delays == [5.0, 10.0]
        assert sum(sleeper.delays) == 15.0
        assert storage.is_available("a.xml")
        assert storage.put_calls == ["a.xml", "a.xml", "a.xml"]

    def test_exhausted_attempts_return_unconfirmed(self) -> None:
        storage = FlakyStorage(failures=5)
        sleeper = SleepRecorder()
        result = _gateway(storage, sleeper).upload("a.xml", b"<x/>")

        assert result.confirmed is False
        assert result.attempts == 3
        assert sleeper.delays == [5.0, 10.0]
        with pytest.raises(StorageUnconfirmedError) as ctx:
            result.raise_for_status()
        assert ctx.value.key == "a.xml"
        assert ctx.value.attempts == 3

    def test_empty_version_tag_is_unconfirmed(self) -> None:
        sleeper = SleepRecorder()
        result = _gateway(NoVersionStorage(), sleeper).upload("a.xml", b"<x/>")
        assert result.confirmed is False
        assert result.version is None
        assert len(sleeper.delays) == 2

    def test_transport_error_propagates(self) -> None:
        sleeper = SleepRecorder()
        with pytest.raises(ConnectionError):
            _gateway(BrokenStorage(), sleeper).upload("a.xml", b"<x/>")
        assert sleeper.delays == []

    def test_raise_for_status_returns_confirmed_result(self, gateway: StorageGateway) -> None:
        result = gateway.upload("a.xml", b"<x/>")
        assert result.raise_for_status() is result


class TestPurgePrefix:
    def test_removes_only_matching_prefix(self, gateway: StorageGateway, storage) -> None:
        storage.put("sitemap-hashed-green.xml?from=0&to=3", b"g1")
        storage.put("sitemap-hashed-green.xml?from=3&to=4", b"g2")
        storage.put("sitemap-hashed-blue.xml?from=0&to=3", b"b1")
        storage.put("sitemap-index.xml", b"i")

        removed = gateway.purge_prefix("sitemap-hashed-green.xml")

        assert removed == 2
        assert sorted(storage.objects) == ["sitemap-hashed-blue.xml?from=0&to=3", "sitemap-index.xml"]

    def test_empty_store_is_not_an_error(self, gateway: StorageGateway, caplog) -> None:
        with caplog.at_level(logging.INFO):
            assert gateway.purge_prefix("sitemap-hashed-green.xml") == 0
        assert "No files to remove." in caplog.text

    def test_logs_progress_every_hundred(self, gateway: StorageGateway, storage, caplog) -> None:
        for n in range(250):
            storage.put(f"slot.xml?from={n}&to={n + 1}", b"x")

        with caplog.at_level(logging.INFO):
            assert gateway.purge_prefix("slot.xml") == 250

        assert "Removed 100 old files" in caplog.text
        assert "Removed 200 old files" in caplog.text
        assert "Removed all 250 old files" in caplog.text

    def test_delete_failure_is_logged_and_skipped(self, caplog) -> None:
        storage = UndeletableStorage()
        storage.put("slot.xml?from=0&to=3", b"x")
        storage.put("slot.xml?from=3&to=5", b"y")
        gateway = _gateway(storage, SleepRecorder())

        with caplog.at_level(logging.WARNING):
            removed = gateway.purge_prefix("slot.xml")

        assert removed == 1
        assert "slot.xml?from=0&to=3" in storage.objects
        assert "Failed to remove slot.xml?from=0&to=3" in caplog.text
