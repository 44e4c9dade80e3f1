import json
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

from prehrastream.config.settings import settings
from prehrastream.utils.logger import cache_logger

# ===========================
# Base Cache Class
# ===========================
class ContentCache(ABC):

    def __init__(self, ttl: int = settings.CONTENT_CACHE_TTL, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self.clock = clock

    def is_fresh(self, stored_at: float) -> bool:
        return self.clock() - stored_at < self.ttl

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def put(self, key: str, value: Any) -> None:
        pass


# ===========================
# In-Memory Cache
# ===========================
class MemoryCache(ContentCache):

    def __init__(self, ttl: int = settings.CONTENT_CACHE_TTL, clock: Callable[[], float] = time.time):
        super().__init__(ttl, clock)
        self._entries: Dict[str, Tuple[Any, float]] = {}

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            cache_logger.debug(f"Miss: {key}")
            return None

        value, stored_at = entry
        if not self.is_fresh(stored_at):
            cache_logger.debug(f"Expired: {key}")
            return None

        cache_logger.debug(f"Hit: {key}")
        return value

    async def put(self, key: str, value: Any) -> None:
        self._entries[key] = (value, self.clock())
        cache_logger.debug(f"Saved: {key} ({self.ttl}s)")

    def __len__(self) -> int:
        return len(self._entries)


# ===========================
# Database Cache
# ===========================
class DatabaseCache(ContentCache):

    def __init__(self, database, ttl: int = settings.CONTENT_CACHE_TTL,
                 clock: Callable[[], float] = time.time, database_type: Optional[str] = None):
        super().__init__(ttl, clock)
        self.database = database
        self.database_type = database_type or settings.DATABASE_TYPE

    async def get(self, key: str) -> Optional[Any]:
        try:
            result = await self.database.fetch_one(
                "SELECT content, stored_at FROM content_cache WHERE cache_key = :cache_key",
                {"cache_key": key}
            )

            if not result:
                cache_logger.debug(f"Miss: {key}")
                return None

            if not self.is_fresh(float(result["stored_at"])):
                cache_logger.debug(f"Expired: {key}")
                return None

            cache_logger.debug(f"Hit: {key}")
            return json.loads(result["content"])
        except json.JSONDecodeError as e:
            cache_logger.error(f"Corrupted cache: {type(e).__name__}")
            return None
        except Exception as e:
            cache_logger.error(f"Cache read failed: {type(e).__name__}")
            return None

    async def put(self, key: str, value: Any) -> None:
        try:
            if self.database_type == "sqlite":
                query = """INSERT OR REPLACE INTO content_cache (cache_key, content, stored_at)
                           VALUES (:cache_key, :content, :stored_at)"""
            else:
                query = """INSERT INTO content_cache (cache_key, content, stored_at)
                           VALUES (:cache_key, :content, :stored_at)
                           ON CONFLICT (cache_key) DO UPDATE
                           SET content = :content, stored_at = :stored_at"""

            await self.database.execute(query, {
                "cache_key": key,
                "content": json.dumps(value),
                "stored_at": self.clock()
            })

            cache_logger.debug(f"Saved: {key} ({self.ttl}s)")
        except Exception as e:
            cache_logger.error(f"Cache save failed: {type(e).__name__}")


# ===========================
# Shared Cache Instance
# ===========================
_cache: Optional[ContentCache] = None


def get_cache() -> ContentCache:
    global _cache
    if _cache is None:
        if settings.CACHE_BACKEND == "database":
            from prehrastream.utils.database import database
            _cache = DatabaseCache(database)
        else:
            _cache = MemoryCache()
    return _cache


def set_cache(cache: Optional[ContentCache]) -> None:
    global _cache
    _cache = cache
