from typing import Optional

from ..config import StorageConfig, storage
from .base import SnapshotStore
from .cache import SnapshotCache
from .file_store import FileSnapshotStore
from .redis_store import RedisSnapshotStore


def build_store(config: Optional[StorageConfig] = None) -> SnapshotStore:
    config = config or storage
    if config.backend == 'redis':
        return RedisSnapshotStore(config=config)
    return FileSnapshotStore(config.data_dir)


__all__ = [
    'SnapshotStore',
    'SnapshotCache',
    'FileSnapshotStore',
    'RedisSnapshotStore',
    'build_store',
]
