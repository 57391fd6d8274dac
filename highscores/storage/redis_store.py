import asyncio
from datetime import date
from typing import List, Optional

import redis
from redis.asyncio import Redis

from ..config import StorageConfig, storage
from ..engine.dates import parse_date
from ..logger import get_logger
from ..models.data import DailySnapshot
from .base import SnapshotStore

logger = get_logger()


class RedisSnapshotStore(SnapshotStore):
    """Same documents as the file store, one string key each, plus a sorted
    set of snapshot dates scored by ordinal day
    """

    name = 'redis'

    def __init__(self, client: Optional[Redis] = None, config: Optional[StorageConfig] = None):
        config = config or storage
        self.redis = client or Redis(
            host=config.redis_host,
            port=config.redis_port,
            db=config.redis_db,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
            retry_on_timeout=True
        )
        self.prefix = config.redis_prefix
        self.max_retries = config.max_retries
        self.retry_delay = config.retry_delay

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key.replace('/', ':')}"

    @property
    def _dates_key(self) -> str:
        return f"{self.prefix}:daily-dates"

    async def _with_retries(self, operation, *args, **kwargs):
        retry_count = 0
        while True:
            try:
                return await operation(*args, **kwargs)
            except redis.ConnectionError as e:
                retry_count += 1
                logger.error(f"Redis connection error (attempt {retry_count}/{self.max_retries}): {e}")
                if retry_count >= self.max_retries:
                    raise
                await asyncio.sleep(self.retry_delay * retry_count)

    async def _get(self, key: str) -> Optional[str]:
        return await self._with_retries(self.redis.get, self._key(key))

    async def _put(self, key: str, text: str):
        await self._with_retries(self.redis.set, self._key(key), text)

    async def save_snapshot(self, snapshot: DailySnapshot):
        await super().save_snapshot(snapshot)
        await self._with_retries(
            self.redis.zadd, self._dates_key, {snapshot.date.isoformat(): snapshot.date.toordinal()}
        )

    async def list_snapshot_dates(self) -> List[date]:
        members = await self._with_retries(self.redis.zrange, self._dates_key, 0, -1)
        days = []
        for member in members:
            try:
                days.append(parse_date(member))
            except ValueError:
                logger.warning(f"Skipping unexpected member in {self._dates_key}: {member!r}")
        return sorted(days)

    async def close(self):
        await self.redis.aclose()
