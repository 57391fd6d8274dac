from datetime import date
from typing import Dict, Optional

from ..models.data import DailySnapshot


class SnapshotCache:
    """Read-through cache of snapshots by date for one query session.

    Only hits are kept, so a day whose file appears later in the session
    is still picked up. Not shared across sessions.
    """

    def __init__(self):
        self._snapshots: Dict[date, DailySnapshot] = {}

    def __contains__(self, day: date) -> bool:
        return day in self._snapshots

    def __len__(self):
        return len(self._snapshots)

    def get(self, day: date) -> Optional[DailySnapshot]:
        return self._snapshots.get(day)

    def put(self, snapshot: DailySnapshot):
        self._snapshots[snapshot.date] = snapshot

    def invalidate(self, day: date):
        self._snapshots.pop(day, None)

    def clear(self):
        self._snapshots.clear()
