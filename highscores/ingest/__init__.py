from .pipeline import (
    IngestionPipeline,
    IngestionResult,
    JsonFileSource,
    SnapshotSource,
    rebuild_user_index,
)

__all__ = [
    'IngestionPipeline',
    'IngestionResult',
    'JsonFileSource',
    'SnapshotSource',
    'rebuild_user_index',
]
