import datetime as dt
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, SerializeAsAny, field_validator
from pydantic.alias_generators import to_camel


class Period(str, Enum):
    """Scoring windows published per game on each day's page"""
    TODAY = 'today'
    YESTERDAY = 'yesterday'
    HIGHSCORES = 'highscores'


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode='json', by_alias=True)


class ScoreEntry(CamelModel):
    model_config = ConfigDict(frozen=True)

    rank: Optional[int] = Field(None, ge=1)
    username: str = Field(..., min_length=1)
    score: int = Field(..., ge=0)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        if not v.strip():
            raise ValueError('username cannot be empty or whitespace')
        return v.strip()


class DatedScore(ScoreEntry):
    """A ranked entry carrying the day its score was recorded"""
    date: dt.date


class PeriodBlock(CamelModel):
    top_avatar: Optional[str] = None
    scores: List[ScoreEntry] = Field(default_factory=list)


class GameSnapshot(CamelModel):
    name: str = ''
    today: Optional[PeriodBlock] = None
    yesterday: Optional[PeriodBlock] = None
    highscores: Optional[PeriodBlock] = None

    def raw_block(self, period: Period) -> Optional[PeriodBlock]:
        """The block as captured, or None when the page did not have it"""
        if period is Period.TODAY:
            return self.today
        if period is Period.YESTERDAY:
            return self.yesterday
        if period is Period.HIGHSCORES:
            return self.highscores
        raise ValueError(f"Unhandled period: {period!r}")

    def block(self, period: Period) -> PeriodBlock:
        return self.raw_block(period) or PeriodBlock()


class DailySnapshot(CamelModel):
    date: dt.date
    scraped_at: Optional[dt.datetime] = None
    games: Dict[str, GameSnapshot] = Field(default_factory=dict)

    def game(self, game_id: str) -> Optional[GameSnapshot]:
        return self.games.get(game_id)


class AllTimeEntry(ScoreEntry):
    achieved_on: dt.date


class AllTimeGame(CamelModel):
    name: str = ''
    top_avatar: Optional[str] = None
    scores: List[AllTimeEntry] = Field(default_factory=list)


class AllTimeRecord(CamelModel):
    last_updated: dt.date
    games: Dict[str, AllTimeGame]


class Appearance(CamelModel):
    game: str
    rank: int
    date: dt.date


class GameStats(CamelModel):
    best_score: int = 0
    date: Optional[dt.date] = None
    rank: Optional[int] = None
    all_time_rank: Optional[int] = None


class UserRecord(CamelModel):
    avatar: Optional[str] = None
    last_seen: Optional[dt.date] = None
    last_appearance: Optional[Appearance] = None
    games: Dict[str, GameStats] = Field(default_factory=dict)


class UserIndex(CamelModel):
    last_updated: dt.date
    user_count: int
    users: Dict[str, UserRecord] = Field(default_factory=dict)


class LeaderboardView(CamelModel):
    """One game's board for a query period, at most board_size entries"""
    scores: List[SerializeAsAny[ScoreEntry]] = Field(default_factory=list)
    top_avatar: Optional[str] = None


class UpdateStatus(CamelModel):
    last_updated: Optional[str] = None
    source: Optional[str] = None


class TrendPoint(CamelModel):
    date: dt.date
    score: int
    double_credit: bool = False
    low_participation: bool = False


class HistoryPoint(CamelModel):
    date: dt.date
    score: int
