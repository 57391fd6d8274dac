from fastapi import Depends, HTTPException, Request

from ..engine.query import QueryEngine
from ..storage import SnapshotCache, SnapshotStore

def get_store(request: Request) -> SnapshotStore:
    store = getattr(request.app.state, 'store', None)
    if store is None:
        raise HTTPException(status_code=503, detail="Storage not initialized")
    return store

def get_query_engine(store: SnapshotStore = Depends(get_store)) -> QueryEngine:
    """A fresh engine per request, so the snapshot cache lives for one session"""
    return QueryEngine(store, SnapshotCache())
