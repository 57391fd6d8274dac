import datetime as dt
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Path

from ..engine.dates import local_today
from ..engine.query import QueryEngine, QueryPeriod
from ..errors import UnknownPeriodError
from ..models.response import BoardEntry, GameBoard, LeaderboardResponse, StatusResponse, TrendsResponse
from ..config import leaderboard
from ..logger import get_logger
from .dependencies import get_query_engine

logger = get_logger()
router = APIRouter()

@router.get("/leaderboards/{period}", response_model=LeaderboardResponse)
async def get_leaderboards(
    period: str = Path(..., min_length=1, max_length=20),
    on: Optional[dt.date] = Query(None, alias="date", description="Reference date (YYYY-MM-DD), defaults to today in Pacific time"),
    engine: QueryEngine = Depends(get_query_engine)
):
    """
    Get every game's board for a time window.

    - **period**: one of today, yesterday, week, month, alltime
    - **date**: reference date the window is computed from
    """
    try:
        query_period = QueryPeriod.parse(period)
        reference = on or local_today()
        logger.info(f"Getting {query_period.value} leaderboards for {reference}")

        boards = await engine.query(query_period, reference)
        if boards is None:
            return LeaderboardResponse(period=query_period.value, reference_date=reference, has_data=False)

        games = {
            game_id: GameBoard(
                name=engine.games.get(game_id, game_id),
                top_avatar=view.top_avatar,
                scores=[BoardEntry.from_entry(entry) for entry in view.scores]
            )
            for game_id, view in boards.items()
        }
        return LeaderboardResponse(period=query_period.value, reference_date=reference, has_data=True, games=games)
    except HTTPException:
        raise
    except UnknownPeriodError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error getting leaderboards: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get leaderboards")

@router.get("/status", response_model=StatusResponse)
async def get_status(
    on: Optional[dt.date] = Query(None, alias="date"),
    engine: QueryEngine = Depends(get_query_engine)
):
    """When the data was last refreshed"""
    try:
        status = await engine.status(on or local_today())
        return StatusResponse(last_updated=status.last_updated, source=status.source)
    except Exception as e:
        logger.error(f"Error getting status: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get status")

@router.get("/trends", response_model=TrendsResponse)
async def get_trends(
    days: int = Query(leaderboard.history_days, ge=1, le=366),
    on: Optional[dt.date] = Query(None, alias="date"),
    engine: QueryEngine = Depends(get_query_engine)
):
    """
    Daily winning score per game over the days before the reference date.

    - **days**: how many days to look back (default 30)
    """
    try:
        reference = on or local_today()
        games = await engine.trends(reference, days)
        return TrendsResponse(reference_date=reference, days=days, games=games)
    except Exception as e:
        logger.error(f"Error getting trends: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to get trends")
