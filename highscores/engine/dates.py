from datetime import date, datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from ..config import leaderboard


def local_today(tz_name: Optional[str] = None, now: Optional[datetime] = None) -> date:
    """Calendar date in the leaderboard's timezone (Pacific by default)"""
    tz = ZoneInfo(tz_name or leaderboard.timezone)
    if now is None:
        return datetime.now(tz).date()
    if now.tzinfo is None:
        raise ValueError('now must be timezone-aware')
    return now.astimezone(tz).date()


def days_before(reference: date, count: int) -> List[date]:
    """The `count` days preceding reference, most recent first"""
    return [reference - timedelta(days=i) for i in range(1, count + 1)]


def month_to_date(reference: date) -> List[date]:
    """From the 1st of reference's month up to the day before reference"""
    first = reference.replace(day=1)
    return [first + timedelta(days=i) for i in range((reference - first).days)]


def parse_date(value: str) -> date:
    return date.fromisoformat(value)
