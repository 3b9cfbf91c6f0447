"""
Layer 2 – 缓存层
基于 cachetools.TTLCache 的进程内缓存：键为 (股票代码, 数据源)，
过期条目视为不存在。仅在单个事件循环内访问，无需加锁。
"""

import logging
import time
from typing import Callable, Optional, Tuple

from cachetools import TTLCache

from quote_service.config import settings
from quote_service.models.market import CacheEntry, ProviderKind, Quote, Series

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, ProviderKind]


def _make_key(symbol: str, provider: ProviderKind) -> CacheKey:
    """生成规范化缓存键"""
    return symbol.strip().upper(), ProviderKind(provider)


class CacheLayer:
    """行情缓存层"""

    def __init__(
        self,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.time,
        maxsize: Optional[int] = None,
    ):
        self._ttl = settings.CACHE_TTL if ttl is None else ttl
        self._clock = clock
        self._entries: TTLCache = TTLCache(
            maxsize=settings.CACHE_MAXSIZE if maxsize is None else maxsize,
            ttl=self._ttl,
            timer=clock,
        )

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, symbol: str, provider: ProviderKind) -> Optional[CacheEntry]:
        key = _make_key(symbol, provider)
        entry = self._entries.get(key)
        if entry is not None:
            logger.debug(f"缓存命中: {key[0]}:{key[1].value}")
        return entry

    def put(self, symbol: str, provider: ProviderKind, series: Series, quote: Quote) -> CacheEntry:
        key = _make_key(symbol, provider)
        entry = CacheEntry(series=series, quote=quote, fetched_at=self._clock())
        self._entries[key] = entry
        logger.debug(f"缓存写入: {key[0]}:{key[1].value}（{len(series)} 条）")
        return entry

    def delete(self, symbol: str, provider: Optional[ProviderKind] = None) -> int:
        """删除某股票的缓存；provider 为空时删除所有数据源，返回删除条数"""
        self._entries.expire()
        symbol = symbol.strip().upper()
        keys = [
            k for k in list(self._entries.keys())
            if k[0] == symbol and (provider is None or k[1] == ProviderKind(provider))
        ]
        for k in keys:
            del self._entries[k]
        return len(keys)

    def clear(self) -> int:
        self._entries.expire()
        count = len(self._entries)
        self._entries.clear()
        return count

    def stats(self) -> dict:
        """清除过期条目后返回缓存统计信息"""
        expired = self._entries.expire()
        return {
            "entries": len(self._entries),
            "expired": len(expired),
            "maxsize": self._entries.maxsize,
            "ttl": self._ttl,
            "keys": sorted(f"{s}:{p.value}" for s, p in self._entries.keys()),
        }


# ── 模块级别单例 ──────────────────────────────────────────
_cache: Optional[CacheLayer] = None


def get_cache_layer() -> CacheLayer:
    global _cache
    if _cache is None:
        _cache = CacheLayer()
    return _cache
