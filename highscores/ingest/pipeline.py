import json
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Dict, Mapping, NamedTuple, Optional, Protocol, Union

import aiofiles
from pydantic import ValidationError

from ..config import leaderboard
from ..engine.dates import local_today
from ..engine.merge import merge
from ..engine.user_index import build_user_index, rebuild
from ..errors import SourceUnavailableError
from ..logger import get_logger
from ..models.data import AllTimeRecord, DailySnapshot, GameSnapshot, UserIndex
from ..storage.base import SnapshotStore

logger = get_logger()


class SnapshotSource(Protocol):
    async def fetch(self) -> Mapping[str, GameSnapshot]:
        """Parsed boards keyed by game id; raises SourceUnavailableError"""


class JsonFileSource:
    """Reads boards already extracted by the page scraper from a JSON file,
    either `{gameId: {...}}` or a whole snapshot document with a `games` key
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def fetch(self) -> Dict[str, GameSnapshot]:
        try:
            async with aiofiles.open(self.path, 'r', encoding='utf-8') as f:
                raw = json.loads(await f.read())
            if isinstance(raw, dict) and isinstance(raw.get('games'), dict):
                raw = raw['games']
            return {game_id: GameSnapshot.model_validate(game) for game_id, game in raw.items()}
        except (OSError, json.JSONDecodeError, ValidationError, AttributeError) as e:
            raise SourceUnavailableError(f"Could not read boards from {self.path}: {e}") from e


class IngestionResult(NamedTuple):
    snapshot: DailySnapshot
    all_time: AllTimeRecord
    user_index: UserIndex


async def rebuild_user_index(store: SnapshotStore, as_of: Optional[date] = None) -> UserIndex:
    """Replay every stored snapshot into a fresh user index and persist it"""
    snapshots = await store.load_all_snapshots()
    all_time = await store.load_all_time()
    if all_time is None:
        logger.warning("No all-time record available, user index will have no all-time ranks")

    index = build_user_index(rebuild(snapshots, all_time), as_of or local_today())
    await store.save_user_index(index)
    logger.info(f"Rebuilt user index from {len(snapshots)} snapshots")
    return index


class IngestionPipeline:
    """One ingestion run: fetch, save the day's snapshot, merge the all-time
    record, rebuild the user index. Runs must not overlap.
    """

    def __init__(self, store: SnapshotStore, source: SnapshotSource,
                 games: Optional[Mapping[str, str]] = None, all_time_limit: Optional[int] = None):
        self.store = store
        self.source = source
        self.games = dict(games if games is not None else leaderboard.games)
        self.all_time_limit = all_time_limit or leaderboard.all_time_limit

    async def _fetch(self) -> Dict[str, GameSnapshot]:
        try:
            games = dict(await self.source.fetch())
        except SourceUnavailableError:
            raise
        except Exception as e:
            logger.error(f"Snapshot source failed: {e}")
            raise SourceUnavailableError(str(e)) from e
        if not games:
            raise SourceUnavailableError("Snapshot source returned no games")
        return games

    async def run(self, on: Optional[date] = None, captured_at: Optional[datetime] = None) -> IngestionResult:
        on = on or local_today()
        logger.info(f"Starting ingestion for {on}")

        # nothing is written unless the fetch succeeded
        games = await self._fetch()
        if len(games) != len(self.games):
            logger.warning(f"Expected {len(self.games)} games, found {len(games)}")

        snapshot = DailySnapshot(
            date=on,
            scraped_at=captured_at or datetime.now(timezone.utc),
            games=games,
        )
        await self.store.save_snapshot(snapshot)

        current = await self.store.load_all_time()
        record = merge(current, games, on, self.all_time_limit)
        await self.store.save_all_time(record)

        index = await rebuild_user_index(self.store, as_of=on)
        logger.info(f"Ingestion for {on} completed")
        return IngestionResult(snapshot, record, index)
