"""Per-user summary rebuilt from the full snapshot history.

The index is a cache: it is always derived from the stored snapshots plus
the all-time record and can be rebuilt from scratch at any time.
"""
from datetime import date
from itertools import islice
from typing import Dict, Iterable, List, Mapping, Optional, Tuple
from sortedcontainers import SortedKeyList

from ..config import leaderboard
from ..models.data import (
    AllTimeRecord,
    Appearance,
    DailySnapshot,
    GameStats,
    Period,
    UserIndex,
    UserRecord,
)

PERIOD_ORDER = (Period.YESTERDAY, Period.TODAY, Period.HIGHSCORES)
NO_RANK = 999


def _note_appearance(user: UserRecord, game_id: str, rank: int, day: date):
    if user.last_seen is None or day > user.last_seen:
        user.last_seen = day
        user.last_appearance = Appearance(game=game_id, rank=rank, date=day)
    elif day == user.last_seen:
        current = user.last_appearance.rank if user.last_appearance else NO_RANK
        if rank < current:
            user.last_appearance = Appearance(game=game_id, rank=rank, date=day)


def rebuild(snapshots: Iterable[DailySnapshot], all_time: Optional[AllTimeRecord]) -> Dict[str, UserRecord]:
    """Replay snapshots (oldest first) into a username -> UserRecord mapping.

    Callers must pass snapshots sorted by date; later observations override
    earlier ones. Stored ranks are trusted here since snapshots are
    historical fact.
    """
    users: Dict[str, UserRecord] = {}
    names: Dict[str, str] = {}

    for snapshot in snapshots:
        day = snapshot.date
        for game_id, game in snapshot.games.items():
            for period in PERIOD_ORDER:
                block = game.block(period)
                for idx, entry in enumerate(block.scores):
                    rank = entry.rank or idx + 1
                    name = names.setdefault(entry.username.casefold(), entry.username)
                    user = users.get(name)
                    if user is None:
                        user = users[name] = UserRecord()

                    if rank == 1 and block.top_avatar:
                        user.avatar = block.top_avatar

                    _note_appearance(user, game_id, rank, day)

                    stats = user.games.get(game_id)
                    if stats is None:
                        stats = user.games[game_id] = GameStats()
                    if entry.score > stats.best_score:
                        stats.best_score = entry.score
                        stats.date = day
                        stats.rank = rank

    if all_time is not None:
        for game_id, game in all_time.games.items():
            for position, entry in enumerate(game.scores, start=1):
                name = names.get(entry.username.casefold())
                if name is None:
                    continue
                stats = users[name].games.get(game_id)
                if stats is not None:
                    stats.all_time_rank = position

    return users


def build_user_index(users: Mapping[str, UserRecord], as_of: date) -> UserIndex:
    return UserIndex(last_updated=as_of, user_count=len(users), users=dict(users))


class UserDirectory:
    """Case-insensitive lookup and autocomplete over an index's usernames"""

    def __init__(self, users: Mapping[str, UserRecord]):
        self._users = dict(users)
        self._canonical = {name.casefold(): name for name in self._users}
        self._names = SortedKeyList(self._users, key=lambda n: (n.casefold(), n))

    @classmethod
    def from_index(cls, index: Optional[UserIndex]) -> 'UserDirectory':
        return cls(index.users if index is not None else {})

    def __len__(self):
        return len(self._users)

    @property
    def names(self) -> List[str]:
        return list(self._names)

    def get(self, username: str) -> Optional[Tuple[str, UserRecord]]:
        name = self._canonical.get(username.strip().casefold())
        if name is None:
            return None
        return name, self._users[name]

    def suggest(self, query: str, limit: Optional[int] = None) -> List[str]:
        # only the last comma-separated term is being typed
        term = query.split(',')[-1].strip().casefold()
        if not term:
            return []
        limit = limit or leaderboard.autocomplete_limit
        return list(islice((n for n in self._names if term in n.casefold()), limit))
