import datetime as dt
from typing import Dict, List, Literal, Optional
from pydantic import Field

from .data import CamelModel, HistoryPoint, ScoreEntry, TrendPoint, UserRecord

class BoardEntry(CamelModel):
    rank: Optional[int] = None
    username: str
    score: int
    date: Optional[dt.date] = None
    achieved_on: Optional[dt.date] = None

    @classmethod
    def from_entry(cls, entry: ScoreEntry) -> 'BoardEntry':
        return cls.model_validate(entry.model_dump())

class GameBoard(CamelModel):
    name: str
    top_avatar: Optional[str] = None
    scores: List[BoardEntry] = Field(default_factory=list)

class LeaderboardResponse(CamelModel):
    period: str
    reference_date: dt.date
    has_data: bool
    games: Dict[str, GameBoard] = Field(default_factory=dict)

class StatusResponse(CamelModel):
    last_updated: Optional[str] = None
    source: Optional[str] = None

class TrendsResponse(CamelModel):
    reference_date: dt.date
    days: int
    games: Dict[str, List[TrendPoint]]

class UserSuggestionsResponse(CamelModel):
    query: str
    users: List[str]

class UserResponse(CamelModel):
    username: str
    user: UserRecord

class UserHistoryResponse(CamelModel):
    username: str
    has_data: bool
    games: Dict[str, List[HistoryPoint]]

class HealthResponse(CamelModel):
    status: Literal["healthy"] = "healthy"
    uptime: float
    storage: str
