"""
测试页面缓存
"""
from app.utils.ttl_cache import TTLCache


def test_hit_within_ttl(clock):
    cache = TTLCache(ttl=30.0, clock=clock)
    cache.put("陶艺", ["work-1"])

    clock.advance(29.999)
    assert cache.get("陶艺") == ["work-1"]


def test_miss_at_ttl_boundary(clock):
    """恰好 30 秒时视为过期"""
    cache = TTLCache(ttl=30.0, clock=clock)
    cache.put("全部", ["work-1"])

    clock.advance(30.0)
    assert cache.get("全部") is None
    assert "全部" not in cache


def test_put_refreshes_timestamp(clock):
    cache = TTLCache(ttl=30.0, clock=clock)
    cache.put(1, "old")
    clock.advance(20)
    cache.put(1, "new")
    clock.advance(20)

    assert cache.get(1) == "new"


def test_delete_forces_miss(clock):
    cache = TTLCache(ttl=30.0, clock=clock)
    cache.put(42, ["registration"])
    cache.delete(42)
    cache.delete(42)

    assert cache.get(42) is None
    assert len(cache) == 0


def test_instances_are_independent(clock):
    works = TTLCache(clock=clock)
    workshops = TTLCache(clock=clock)
    works.put("all", [1])

    assert workshops.get("all") is None


def test_empty_list_is_a_hit(clock):
    cache = TTLCache(clock=clock)
    cache.put("玻璃", [])

    assert cache.get("玻璃") == []
