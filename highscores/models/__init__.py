from .data import (
    AllTimeEntry,
    AllTimeGame,
    AllTimeRecord,
    Appearance,
    DailySnapshot,
    DatedScore,
    GameSnapshot,
    GameStats,
    HistoryPoint,
    LeaderboardView,
    Period,
    PeriodBlock,
    ScoreEntry,
    TrendPoint,
    UpdateStatus,
    UserIndex,
    UserRecord,
)
