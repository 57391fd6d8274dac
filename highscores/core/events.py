import asyncio
from typing import Optional
from fastapi import FastAPI

from ..storage import SnapshotStore, build_store
from ..logger import get_logger

logger = get_logger()

async def startup_event(app: FastAPI, store: Optional[SnapshotStore] = None):
    """Attach the snapshot store the routes read from"""
    try:
        app.state.store = store or build_store()
        logger.info(f"Snapshot store initialized ({app.state.store.name})")
    except Exception as e:
        logger.error(f"Failed to initialize snapshot store: {e}")
        raise

async def shutdown_event(app: FastAPI):
    """Close the snapshot store"""
    store = getattr(app.state, 'store', None)
    if store is None:
        return
    try:
        async with asyncio.timeout(5.0):
            await store.close()
            logger.info("Snapshot store closed")
    except asyncio.TimeoutError:
        logger.warning("Shutdown timed out while closing the snapshot store")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")
    finally:
        app.state.store = None
