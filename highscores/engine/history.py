from datetime import date
from typing import AbstractSet, Dict, Iterable, List, Optional, Sequence

from ..config import leaderboard
from ..models.data import DailySnapshot, HistoryPoint, Period, TrendPoint

HISTORY_PERIODS = (Period.YESTERDAY, Period.TODAY, Period.HIGHSCORES)


def top_score_trends(
    snapshots: Sequence[DailySnapshot],
    game_ids: Iterable[str],
    double_credit_days: AbstractSet[date] = frozenset(),
    full_board: Optional[int] = None,
) -> Dict[str, List[TrendPoint]]:
    """Daily winning score per game, oldest first.

    Uses the yesterday block (the day's final results), or highscores when
    the page had no yesterday column. Days with no positive top score are
    left out.
    """
    full_board = full_board or leaderboard.board_size
    ordered = sorted(snapshots, key=lambda s: s.date)
    trends = {}
    for game_id in game_ids:
        points = []
        for snapshot in ordered:
            game = snapshot.game(game_id)
            if game is None:
                continue
            block = game.raw_block(Period.YESTERDAY) or game.raw_block(Period.HIGHSCORES)
            scores = block.scores if block is not None else []
            top = scores[0].score if scores else 0
            if top > 0:
                points.append(TrendPoint(
                    date=snapshot.date,
                    score=top,
                    double_credit=snapshot.date in double_credit_days,
                    low_participation=len(scores) < full_board,
                ))
        trends[game_id] = points
    return trends


def user_score_history(
    snapshots: Sequence[DailySnapshot],
    game_ids: Iterable[str],
    username: str,
) -> Dict[str, List[HistoryPoint]]:
    wanted = username.strip().casefold()
    ordered = sorted(snapshots, key=lambda s: s.date)
    history = {}
    for game_id in game_ids:
        points = []
        for snapshot in ordered:
            game = snapshot.game(game_id)
            if game is None:
                continue
            match = next(
                (e for period in HISTORY_PERIODS for e in game.block(period).scores
                 if e.username.casefold() == wanted),
                None,
            )
            if match is not None:
                points.append(HistoryPoint(date=snapshot.date, score=match.score))
        history[game_id] = points
    return history
