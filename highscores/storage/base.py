import asyncio
import json
from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Set

from pydantic import ValidationError

from ..engine.dates import parse_date
from ..engine.merge import parse_all_time
from ..logger import get_logger
from ..models.data import AllTimeRecord, DailySnapshot, UserIndex

logger = get_logger()

ALL_TIME_KEY = 'all-time'
USERS_KEY = 'users'
DOUBLE_CREDIT_KEY = 'double-credit-days'


def snapshot_key(day: date) -> str:
    return f"daily/{day.isoformat()}"


def dump_json(obj: dict) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


class SnapshotStore(ABC):
    """Persisted leaderboard state: daily snapshots, the all-time record,
    the derived user index and the double-credit calendar.

    Backends only provide raw text get/put by key and the list of stored
    snapshot dates; decoding and validation live here.
    """

    name = 'abstract'

    @abstractmethod
    async def _get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def _put(self, key: str, text: str):
        ...

    @abstractmethod
    async def list_snapshot_dates(self) -> List[date]:
        """Dates with a stored snapshot, ascending"""

    async def close(self):
        pass

    async def load_snapshot(self, day: date) -> Optional[DailySnapshot]:
        text = await self._get(snapshot_key(day))
        if text is None:
            return None
        try:
            snapshot = DailySnapshot.model_validate_json(text)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable snapshot for {day}: {e}")
            return None
        if snapshot.date != day:
            logger.warning(f"Ignoring snapshot stored under {day} but dated {snapshot.date}")
            return None
        return snapshot

    async def save_snapshot(self, snapshot: DailySnapshot):
        await self._put(snapshot_key(snapshot.date), dump_json(snapshot.to_json_dict()))
        logger.info(f"Saved daily snapshot for {snapshot.date}")

    async def load_all_snapshots(self) -> List[DailySnapshot]:
        days = await self.list_snapshot_dates()
        snapshots = await asyncio.gather(*(self.load_snapshot(day) for day in days))
        return sorted((s for s in snapshots if s is not None), key=lambda s: s.date)

    async def load_all_time(self) -> Optional[AllTimeRecord]:
        return parse_all_time(await self._get(ALL_TIME_KEY))

    async def save_all_time(self, record: AllTimeRecord):
        await self._put(ALL_TIME_KEY, dump_json(record.to_json_dict()))
        logger.info(f"Updated all-time record ({len(record.games)} games)")

    async def load_user_index(self) -> Optional[UserIndex]:
        text = await self._get(USERS_KEY)
        if text is None:
            return None
        try:
            return UserIndex.model_validate_json(text)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable user index: {e}")
            return None

    async def save_user_index(self, index: UserIndex):
        await self._put(USERS_KEY, dump_json(index.to_json_dict()))
        logger.info(f"Saved user index with {index.user_count} users")

    async def load_double_credit_days(self) -> Set[date]:
        text = await self._get(DOUBLE_CREDIT_KEY)
        if text is None:
            return set()
        try:
            return {parse_date(d) for d in json.loads(text).get('dates', [])}
        except (json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable double credit days: {e}")
            return set()
