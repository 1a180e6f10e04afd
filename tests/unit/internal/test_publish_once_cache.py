from __future__ import annotations

import threading

from wirebox._internal.cache import PublishOnceCache


def test_get_missing_key_returns_default() -> None:
    cache: PublishOnceCache[str, int] = PublishOnceCache()

    assert cache.get("missing") is None
    assert cache.get("missing", 5) == 5
    assert "missing" not in cache


def test_first_publish_is_retained() -> None:
    cache: PublishOnceCache[str, int] = PublishOnceCache()

    assert cache.publish("key", 1) == (1, True)
    assert cache.publish("key", 2) == (1, False)
    assert cache.get("key") == 1
    assert len(cache) == 1


def test_none_is_a_publishable_value() -> None:
    cache: PublishOnceCache[str, object] = PublishOnceCache()
    sentinel = object()

    cache.publish("key", None)

    assert "key" in cache
    assert cache.get("key", sentinel) is None
    assert cache.publish("key", "other") == (None, False)


def test_concurrent_publishers_agree_on_one_value() -> None:
    cache: PublishOnceCache[str, object] = PublishOnceCache()
    barrier = threading.Barrier(16)
    retained: list[object] = []
    winners: list[bool] = []

    def publish() -> None:
        value = object()
        barrier.wait()
        result, published = cache.publish("key", value)
        retained.append(result)
        winners.append(published)

    threads = [threading.Thread(target=publish) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert winners.count(True) == 1
    assert all(value is retained[0] for value in retained)
