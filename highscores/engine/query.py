"""Leaderboards for a time window, assembled from daily snapshots.

Single-day periods walk an ordered table of (day offset, block) fallbacks
until a snapshot exists. Multi-day periods aggregate best scores across
every available day in the range. Missing data never raises: the engine
answers None ("no data") or empty boards instead.
"""
import asyncio
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence

from ..config import leaderboard
from ..errors import UnknownPeriodError
from ..logger import get_logger
from ..models.data import (
    DailySnapshot,
    HistoryPoint,
    LeaderboardView,
    Period,
    TrendPoint,
    UpdateStatus,
)
from ..storage.base import SnapshotStore
from ..storage.cache import SnapshotCache
from .aggregation import aggregate_scores, resolve_avatar
from .dates import days_before, month_to_date
from .history import top_score_trends, user_score_history

logger = get_logger()


class QueryPeriod(str, Enum):
    TODAY = 'today'
    YESTERDAY = 'yesterday'
    WEEK = 'week'
    MONTH = 'month'
    ALLTIME = 'alltime'

    @classmethod
    def parse(cls, value) -> 'QueryPeriod':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownPeriodError(value) from None


class DayFallback(NamedTuple):
    offset: int
    period: Period


# the page for day D carries D's running "today" board and D-1's final
# "yesterday" board, so either file can answer
FALLBACKS = {
    QueryPeriod.TODAY: (DayFallback(0, Period.TODAY), DayFallback(-1, Period.TODAY)),
    QueryPeriod.YESTERDAY: (DayFallback(-1, Period.YESTERDAY), DayFallback(0, Period.YESTERDAY)),
}

Boards = Dict[str, LeaderboardView]


class QueryEngine:
    def __init__(
        self,
        store: SnapshotStore,
        cache: Optional[SnapshotCache] = None,
        games: Optional[Mapping[str, str]] = None,
        board_size: Optional[int] = None,
        week_days: Optional[int] = None,
        avatar_lookback_days: Optional[int] = None,
    ):
        self.store = store
        self.cache = cache if cache is not None else SnapshotCache()
        self.games = dict(games if games is not None else leaderboard.games)
        self.board_size = board_size or leaderboard.board_size
        self.week_days = week_days or leaderboard.week_days
        self.avatar_lookback_days = avatar_lookback_days or leaderboard.avatar_lookback_days

    async def load_snapshot(self, day: date) -> Optional[DailySnapshot]:
        snapshot = self.cache.get(day)
        if snapshot is None:
            snapshot = await self.store.load_snapshot(day)
            if snapshot is not None:
                self.cache.put(snapshot)
        return snapshot

    async def load_days(self, days: Sequence[date]) -> List[DailySnapshot]:
        """Available snapshots for `days`, in the order given"""
        snapshots = await asyncio.gather(*(self.load_snapshot(day) for day in days))
        return [s for s in snapshots if s is not None]

    async def query(self, period, reference_date: date) -> Optional[Boards]:
        period = QueryPeriod.parse(period)
        if period in FALLBACKS:
            return await self._single_day(FALLBACKS[period], reference_date)
        if period is QueryPeriod.WEEK:
            return await self._aggregate(days_before(reference_date, self.week_days))
        if period is QueryPeriod.MONTH:
            return await self._aggregate(month_to_date(reference_date))
        if period is QueryPeriod.ALLTIME:
            return await self._all_time(reference_date)
        raise UnknownPeriodError(period)

    async def _single_day(self, strategies: Sequence[DayFallback], reference_date: date) -> Optional[Boards]:
        for strategy in strategies:
            day = reference_date + timedelta(days=strategy.offset)
            snapshot = await self.load_snapshot(day)
            if snapshot is None:
                logger.debug(f"No snapshot for {day}, trying next fallback")
                continue
            return self._read_block(snapshot, strategy.period)
        logger.info(f"No snapshot available for {reference_date}")
        return None

    def _read_block(self, snapshot: DailySnapshot, period: Period) -> Boards:
        boards = {}
        for game_id in self.games:
            game = snapshot.game(game_id)
            if game is None:
                boards[game_id] = LeaderboardView()
                continue
            block = game.block(period)
            boards[game_id] = LeaderboardView(scores=block.scores[:self.board_size], top_avatar=block.top_avatar)
        return boards

    async def _aggregate(self, days: Sequence[date]) -> Optional[Boards]:
        snapshots = await self.load_days(days)
        if not snapshots:
            return None
        return aggregate_scores(snapshots, self.games, Period.YESTERDAY, self.board_size)

    async def _all_time(self, reference_date: date) -> Boards:
        record = await self.store.load_all_time()
        if record is None:
            return {game_id: LeaderboardView() for game_id in self.games}

        recent = await self.load_days(days_before(reference_date, self.avatar_lookback_days))
        boards = {}
        for game_id in self.games:
            game = record.games.get(game_id)
            if game is None:
                boards[game_id] = LeaderboardView()
                continue
            scores = [e.model_copy(update={'rank': i + 1}) for i, e in enumerate(game.scores[:self.board_size])]
            top_avatar = None
            if scores:
                top_avatar = resolve_avatar(recent, game_id, scores[0].username, prioritize_highscores=True)
                top_avatar = top_avatar or game.top_avatar
            boards[game_id] = LeaderboardView(scores=scores, top_avatar=top_avatar)
        return boards

    async def trends(self, reference_date: date, days: Optional[int] = None) -> Dict[str, List[TrendPoint]]:
        snapshots = await self.load_days(days_before(reference_date, days or leaderboard.history_days))
        double_credit_days = await self.store.load_double_credit_days()
        return top_score_trends(snapshots, self.games, double_credit_days, self.board_size)

    async def user_history(self, username: str, reference_date: date,
                           days: Optional[int] = None) -> Dict[str, List[HistoryPoint]]:
        snapshots = await self.load_days(days_before(reference_date, days or leaderboard.history_days))
        return user_score_history(snapshots, self.games, username)

    async def status(self, reference_date: date) -> UpdateStatus:
        snapshot = await self.load_snapshot(reference_date)
        if snapshot is not None and snapshot.scraped_at is not None:
            return UpdateStatus(last_updated=snapshot.scraped_at.isoformat(), source='snapshot')
        record = await self.store.load_all_time()
        if record is not None:
            return UpdateStatus(last_updated=record.last_updated.isoformat(), source='all-time')
        return UpdateStatus()
