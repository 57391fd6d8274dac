from datetime import date
from typing import Dict, Iterable, Optional, Sequence
from sortedcontainers import SortedKeyList

from ..config import leaderboard
from ..models.data import DailySnapshot, DatedScore, LeaderboardView, Period

AVATAR_PRIORITY = {
    True: (Period.HIGHSCORES, Period.YESTERDAY, Period.TODAY),
    False: (Period.YESTERDAY, Period.TODAY, Period.HIGHSCORES),
}


class Leader:
    __slots__ = ('username', 'score', 'date')
    def __init__(self, username: str, score: int, date: date):
        self.username = username
        self.score = score
        self.date = date


def resolve_avatar(
    snapshots: Iterable[DailySnapshot],
    game_id: str,
    username: str,
    prioritize_highscores: bool = False,
) -> Optional[str]:
    """Find the avatar shown next to `username` when they were #1.

    Snapshots are scanned in the order given. Within a snapshot the first
    block whose rank-1 entry is the user answers, even if that block has
    no avatar.
    """
    wanted = username.casefold()
    periods = AVATAR_PRIORITY[bool(prioritize_highscores)]
    for snapshot in snapshots:
        game = snapshot.game(game_id)
        if game is None:
            continue
        for period in periods:
            block = game.block(period)
            if block.scores and block.scores[0].username.casefold() == wanted:
                return block.top_avatar
    return None


def aggregate_scores(
    snapshots: Sequence[DailySnapshot],
    game_ids: Iterable[str],
    source: Period = Period.YESTERDAY,
    size: Optional[int] = None,
) -> Dict[str, LeaderboardView]:
    """Best score per user across several days, top `size` per game.

    Days are walked oldest first so a tie keeps the earliest date. A day
    without the requested block falls back to its yesterday block.
    """
    size = size or leaderboard.board_size
    oldest_first = sorted(snapshots, key=lambda s: s.date)
    newest_first = oldest_first[::-1]

    result = {}
    for game_id in game_ids:
        best: Dict[str, Leader] = {}
        for snapshot in oldest_first:
            game = snapshot.game(game_id)
            if game is None:
                continue
            block = game.raw_block(source) or game.raw_block(Period.YESTERDAY)
            if block is None:
                continue
            for entry in block.scores:
                key = entry.username.casefold()
                held = best.get(key)
                if held is None:
                    best[key] = Leader(entry.username, entry.score, snapshot.date)
                elif entry.score > held.score:
                    held.score = entry.score
                    held.date = snapshot.date

        ranked = SortedKeyList(best.values(), key=lambda l: -l.score)
        scores = [
            DatedScore(rank=idx + 1, username=l.username, score=l.score, date=l.date)
            for idx, l in enumerate(ranked[:size])
        ]
        top_avatar = resolve_avatar(newest_first, game_id, scores[0].username) if scores else None
        result[game_id] = LeaderboardView(scores=scores, top_avatar=top_avatar)
    return result
