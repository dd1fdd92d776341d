"""
页面级数据缓存
"""
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional


@dataclass
class CacheEntry:
    payload: Any
    timestamp: float


class TTLCache:
    """
    按 key 缓存数据，超过 ttl 秒即视为未命中

    每个页面持有自己的实例；除过期外没有淘汰策略，
    key 的数量很小（分类名或用户ID）。
    """

    def __init__(self, ttl: float = 30.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        """命中返回缓存数据，未命中返回 None"""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl:
            return None
        return entry.payload

    def put(self, key: Hashable, payload: Any) -> None:
        self._entries[key] = CacheEntry(payload=payload, timestamp=self._clock())

    def delete(self, key: Hashable) -> None:
        """删除单个 key，强制下次读取重新加载"""
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
