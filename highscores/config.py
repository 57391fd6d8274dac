from typing import Dict, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GAMES = {
    'castle-fireworks': 'Castle Fireworks Remixed',
    'pirates': 'Pirates of the Caribbean',
    'haunted-mansion': 'Haunted Mansion',
    'jungle-cruise': 'Jungle Cruise',
}

class StorageConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='HIGHSCORES_STORAGE_')

    backend: Literal['file', 'redis'] = 'file'
    data_dir: str = 'data'
    redis_host: str = 'localhost'
    redis_port: int = 6379
    redis_db: int = 0
    redis_prefix: str = 'highscores'
    max_retries: int = 3
    retry_delay: float = 1.0

storage = StorageConfig()

class LeaderboardConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='HIGHSCORES_')

    timezone: str = 'America/Los_Angeles'
    games: Dict[str, str] = DEFAULT_GAMES
    all_time_limit: int = 50
    board_size: int = 10
    week_days: int = 7
    avatar_lookback_days: int = 30
    history_days: int = 30
    autocomplete_limit: int = 8

leaderboard = LeaderboardConfig()
