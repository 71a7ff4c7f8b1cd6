"""Unit tests for MemoizingCache."""

import threading

import pytest

from edgeconnect.core.utils.memo_cache import MemoizingCache


class TestMemoizingCache:
    def test_computes_once_per_key(self) -> None:
        """Second lookup returns the stored value without recomputing."""
        cache: MemoizingCache[str, str] = MemoizingCache()
        calls: list[str] = []

        def compute(key: str) -> str:
            calls.append(key)
            return key.upper()

        assert cache.get_or_compute("mqtts", compute) == "MQTTS"
        assert cache.get_or_compute("mqtts", compute) == "MQTTS"
        assert calls == ["mqtts"]
        assert "mqtts" in cache
        assert len(cache) == 1

    def test_none_results_are_not_stored(self) -> None:
        """A None result is retried on the next call."""
        cache: MemoizingCache[str, str] = MemoizingCache()
        results = iter([None, "cert"])

        assert cache.get_or_compute("mqtts", lambda _: next(results)) is None
        assert "mqtts" not in cache
        assert cache.get_or_compute("mqtts", lambda _: next(results)) == "cert"

    def test_exceptions_propagate_and_are_not_stored(self) -> None:
        cache: MemoizingCache[str, str] = MemoizingCache()

        def boom(_: str) -> str:
            raise OSError("unreadable")

        with pytest.raises(OSError):
            cache.get_or_compute("mqtts", boom)
        assert len(cache) == 0
        assert cache.get_or_compute("mqtts", lambda _: "ok") == "ok"

    def test_invalidate(self) -> None:
        cache: MemoizingCache[str, int] = MemoizingCache()
        cache.get_or_compute("a", lambda _: 1)
        cache.get_or_compute("b", lambda _: 2)

        cache.invalidate("a")
        assert cache.get("a") is None
        assert cache.get("b") == 2

        cache.invalidate()
        assert len(cache) == 0

    def test_concurrent_callers_compute_once(self) -> None:
        """Threads racing on the same key share a single computation."""
        cache: MemoizingCache[str, object] = MemoizingCache()
        calls = 0
        calls_lock = threading.Lock()
        start = threading.Barrier(8)
        results: list[object] = []

        def compute(_: str) -> object:
            nonlocal calls
            with calls_lock:
                calls += 1
            return object()

        def worker() -> None:
            start.wait()
            results.append(cache.get_or_compute("k", compute))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert calls == 1
        assert all(r is results[0] for r in results)
