from datetime import date, datetime, timezone

import pytest

from highscores.models.data import DailySnapshot, GameSnapshot, PeriodBlock, ScoreEntry
from highscores.storage import FileSnapshotStore

GAMES = {'pirates': 'Pirates of the Caribbean', 'jungle-cruise': 'Jungle Cruise'}


def block(*pairs, avatar=None):
    """PeriodBlock from (username, score) pairs, ranked in the order given"""
    return PeriodBlock(
        top_avatar=avatar,
        scores=[ScoreEntry(rank=i + 1, username=u, score=s) for i, (u, s) in enumerate(pairs)],
    )


def game(name='Pirates of the Caribbean', today=None, yesterday=None, highscores=None):
    return GameSnapshot(name=name, today=today, yesterday=yesterday, highscores=highscores)


def snapshot(day, **games):
    return DailySnapshot(
        date=day,
        scraped_at=datetime(day.year, day.month, day.day, 15, 0, tzinfo=timezone.utc),
        games={game_id.replace('_', '-'): g for game_id, g in games.items()},
    )


@pytest.fixture
def store(tmp_path):
    return FileSnapshotStore(tmp_path / 'data')


@pytest.fixture
def reference_date():
    return date(2024, 3, 15)
