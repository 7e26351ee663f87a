from fnmatch import fnmatchcase

import pytest

from helpdesk.cache import (
    MemoryCache,
    RedisCache,
    cached_page,
    invalidate_keys,
    list_cache_key,
    user_fragment,
)

USER_A = "1a2b3c4d-0000-4000-8000-000000000001"
USER_B = "9f8e7d6c-0000-4000-8000-000000000002"


class FakeRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ex=None):
        self.store[key] = value
        self.ttls[key] = ex

    def scan_iter(self, match=None):
        return iter([k for k in self.store if fnmatchcase(k, match)])

    def delete(self, *keys):
        return sum(1 for k in keys if self.store.pop(k, None) is not None)


class TestKeys:
    def test_fragment_is_first_uuid_group(self):
        assert user_fragment(USER_A) == "1a2b3c4d"

    def test_list_key(self):
        assert list_cache_key("tickets", USER_A, 2, 10) == "tickets_1a2b3c4d-2-10"

    def test_list_key_deleted_suffix(self):
        assert list_cache_key("tickets", USER_A, 1, 10, deleted=True) == "tickets_1a2b3c4d-1-10_deleted"


@pytest.fixture(params=["memory", "redis"])
def store(request):
    if request.param == "memory":
        return MemoryCache(maxsize=64, ttl=60)
    return RedisCache(FakeRedis(), ttl=30)


class TestInvalidation:
    def _fill(self, store):
        for user in (USER_A, USER_B):
            for page in (1, 2):
                store.set(list_cache_key("tickets", user, page, 10), {"page": page})
        store.set(list_cache_key("priorities", USER_A, 1, 10), {"page": 1})

    def test_user_scope_only_removes_that_user(self, store):
        self._fill(store)
        assert invalidate_keys(store, "tickets", USER_A) == 2
        assert store.get(list_cache_key("tickets", USER_A, 1, 10)) is None
        assert store.get(list_cache_key("tickets", USER_B, 1, 10)) == {"page": 1}

    def test_entity_scope_removes_all_pages_of_entity(self, store):
        self._fill(store)
        assert invalidate_keys(store, "tickets") == 4
        assert store.keys("tickets_*") == []
        assert store.get(list_cache_key("priorities", USER_A, 1, 10)) == {"page": 1}

    def test_nothing_to_invalidate(self, store):
        assert invalidate_keys(store, "tickets") == 0


class TestCachedPage:
    def test_loader_only_runs_on_miss(self, store):
        calls = []

        def loader():
            calls.append(1)
            return {"items": [1, 2], "meta": {"total_count": 2}}

        first = cached_page(store, "roles_x-1-10", loader)
        second = cached_page(store, "roles_x-1-10", loader)
        assert first == second
        assert len(calls) == 1

    def test_reload_after_invalidation(self, store):
        pages = iter([{"n": 1}, {"n": 2}])
        key = list_cache_key("roles", USER_A, 1, 10)
        assert cached_page(store, key, lambda: next(pages)) == {"n": 1}
        invalidate_keys(store, "roles")
        assert cached_page(store, key, lambda: next(pages)) == {"n": 2}


def test_redis_backend_sets_ttl():
    fake = FakeRedis()
    RedisCache(fake, ttl=30).set("k", {"a": 1})
    assert fake.ttls["k"] == 30


def test_memory_backend_returns_copies():
    store = MemoryCache()
    store.set("k", {"a": [1]})
    value = store.get("k")
    value["a"].append(2)
    assert store.get("k") == {"a": [1]}
