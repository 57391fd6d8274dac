import datetime as dt
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Path

from ..config import leaderboard
from ..engine.dates import local_today
from ..engine.query import QueryEngine
from ..engine.user_index import UserDirectory
from ..models.response import UserHistoryResponse, UserResponse, UserSuggestionsResponse
from ..storage import SnapshotStore
from ..logger import get_logger
from .dependencies import get_query_engine, get_store

logger = get_logger()
router = APIRouter()

async def load_directory(store: SnapshotStore) -> UserDirectory:
    index = await store.load_user_index()
    if index is None:
        logger.warning("No user index found")
    return UserDirectory.from_index(index)

@router.get("/users", response_model=UserSuggestionsResponse)
async def suggest_users(
    q: str = Query("", max_length=200, description="Search text; only the last comma-separated term is matched"),
    limit: int = Query(leaderboard.autocomplete_limit, ge=1, le=50),
    store: SnapshotStore = Depends(get_store)
):
    """Usernames containing the search term, case-insensitively sorted"""
    try:
        directory = await load_directory(store)
        return UserSuggestionsResponse(query=q, users=directory.suggest(q, limit))
    except Exception as e:
        logger.error(f"Error suggesting users: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to search users")

@router.get("/users/{username}", response_model=UserResponse)
async def get_user(
    username: str = Path(..., min_length=1, max_length=100),
    store: SnapshotStore = Depends(get_store)
):
    """
    Get a player's summary card.

    - **username**: matched case-insensitively
    """
    try:
        directory = await load_directory(store)
        found = directory.get(username)
        if found is None:
            logger.warning(f"User {username} not found in user index")
            raise HTTPException(status_code=404, detail="User not found")
        name, user = found
        return UserResponse(username=name, user=user)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting user: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get user")

@router.get("/users/{username}/history", response_model=UserHistoryResponse)
async def get_user_history(
    username: str = Path(..., min_length=1, max_length=100),
    days: int = Query(leaderboard.history_days, ge=1, le=366),
    on: Optional[dt.date] = Query(None, alias="date"),
    engine: QueryEngine = Depends(get_query_engine)
):
    """Per-game scores for a player over the days before the reference date"""
    try:
        games = await engine.user_history(username, on or local_today(), days)
        has_data = any(points for points in games.values())
        return UserHistoryResponse(username=username, has_data=has_data, games=games)
    except Exception as e:
        logger.error(f"Error getting user history: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get user history")
