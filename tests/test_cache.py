import threading

import pytest

from core.cache import NOT_FOUND_TTL, ExpiringCache
from core.errors import InvalidArgumentError


class FakeClock:
    def __init__(self, initial: int = 0):
        self._value = initial

    def now(self) -> int:
        return self._value

    def advance(self, ms: int) -> None:
        self._value += ms


@pytest.fixture
def clock():
    return FakeClock(initial=1_000)


@pytest.fixture
def cache(clock):
    return ExpiringCache(time_func=clock.now)


def test_put_then_get_returns_value_until_ttl_elapses(cache, clock):
    cache.put("k", "v", 100)
    assert cache.get("k") == "v"

    clock.advance(99)
    assert cache.get("k") == "v"

    clock.advance(1)
    assert cache.get("k") is None


def test_overwrite_resets_ttl(cache, clock):
    cache.put("k", "v1", 1000)
    clock.advance(500)
    cache.put("k", "v2", 1000)
    clock.advance(600)

    assert cache.get("k") == "v2"
    assert cache.get_remaining_ttl("k") == 400


def test_put_if_absent_does_not_clobber_live_entry(cache, clock):
    cache.put("k", "a", 1000)

    assert cache.put_if_absent("k", "b", 5000) == (False, "a")
    assert cache.get("k") == "a"
    assert cache.get_remaining_ttl("k") == 1000

    clock.advance(1000)
    assert cache.get("k") is None


def test_put_if_absent_inserts_missing_or_expired_key(cache, clock):
    assert cache.put_if_absent("k", "a", 100) == (True, "a")
    assert cache.get("k") == "a"

    clock.advance(100)
    assert cache.put_if_absent("k", "b", 100) == (True, "b")
    assert cache.get("k") == "b"


def test_put_if_absent_with_zero_ttl_reports_written_value(cache):
    assert cache.put_if_absent("k", "v", 0) == (True, "v")
    assert cache.get("k") is None


def test_lazy_purge_with_staggered_ttls_is_idempotent(cache, clock):
    cache.put("k1", "a", 100)
    cache.put("k2", "b", 200)
    cache.put("k3", "c", 300)

    clock.advance(150)

    assert cache.size() == 2
    assert cache.get("k1") is None
    assert cache.size() == 2
    assert cache.get("k2") == "b"
    assert cache.get("k3") == "c"


def test_stale_heap_nodes_are_discarded_without_double_removal(cache, clock):
    for _ in range(3):
        cache.put("k", "a", 100)

    assert cache.scheduled_count() == 3
    assert cache.size() == 1

    clock.advance(100)
    assert cache.size() == 0
    assert cache.scheduled_count() == 0

    cache.put("other", "x", 50)
    assert cache.size() == 1


def test_superseded_node_does_not_expire_newer_entry(cache, clock):
    cache.put("k", "old", 100)
    clock.advance(50)
    cache.put("k", "new", 100)

    clock.advance(60)
    # first node (expires at +100) popped here and must be ignored
    assert cache.size() == 1
    assert cache.get("k") == "new"
    assert cache.scheduled_count() == 1

    clock.advance(40)
    assert cache.get("k") is None


def test_remove_leaves_stale_node_behind(cache, clock):
    cache.put("k", "v", 100)

    assert cache.remove("k") is True
    assert cache.remove("k") is False
    assert cache.scheduled_count() == 1

    cache.put("k", "again", 500)
    clock.advance(100)

    assert cache.get("k") == "again"
    assert cache.scheduled_count() == 1


def test_remaining_ttl_decreases_and_hits_sentinel(cache, clock):
    cache.put("k", "v", 300)
    readings = []
    for _ in range(3):
        readings.append(cache.get_remaining_ttl("k"))
        clock.advance(100)

    assert readings == [300, 200, 100]
    assert cache.get_remaining_ttl("k") == NOT_FOUND_TTL
    assert cache.get_remaining_ttl("missing") == NOT_FOUND_TTL


def test_zero_ttl_expires_immediately(cache):
    cache.put("k", "v", 0)

    assert cache.get("k") is None
    assert cache.get_remaining_ttl("k") == NOT_FOUND_TTL
    assert cache.size() == 0


@pytest.mark.parametrize(
    ("key", "value", "ttl"),
    [
        ("", "v", 10),
        ("   ", "v", 10),
        (None, "v", 10),
        ("k", None, 10),
        ("k", "v", -1),
        ("k", "v", 1.5),
        ("k", "v", True),
    ],
)
def test_invalid_put_arguments_leave_state_untouched(cache, key, value, ttl):
    cache.put("existing", "v", 100)

    with pytest.raises(InvalidArgumentError):
        cache.put(key, value, ttl)
    with pytest.raises(InvalidArgumentError):
        cache.put_if_absent(key, value, ttl)

    assert cache.size() == 1
    assert cache.scheduled_count() == 1


def test_key_validation_on_reads(cache):
    with pytest.raises(InvalidArgumentError):
        cache.get("")
    with pytest.raises(InvalidArgumentError):
        cache.remove(" ")
    with pytest.raises(InvalidArgumentError):
        cache.get_remaining_ttl("")


def test_cache_concurrent_put_get_remove_is_thread_safe():
    cache = ExpiringCache()
    start = threading.Barrier(9)
    errors = []
    keys = [f"key-{i}" for i in range(50)]

    def writer(prefix: str):
        start.wait()
        try:
            for i in range(500):
                cache.put(keys[i % len(keys)], f"{prefix}-{i}", 30_000)
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    def reader_remover(prefix: str):
        start.wait()
        try:
            for i in range(500):
                value = cache.get(keys[i % len(keys)])
                if value is not None:
                    assert isinstance(value, str)
                if i % 7 == 0:
                    cache.remove(keys[i % len(keys)])
        except Exception as exc:  # pragma: no cover
            errors.append(exc)

    threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
    threads += [threading.Thread(target=reader_remover, args=(p,)) for p in "efgh"]

    for thread in threads:
        thread.start()

    start.wait()

    for thread in threads:
        thread.join()

    assert errors == []
    assert cache.size() <= len(keys)

    for key in keys:
        cache.put(key, "final", 30_000)
    assert cache.size() == len(keys)
    assert cache.get("key-0") == "final"
