"""Daily leaderboard snapshots, all-time records and player history."""

__version__ = "1.0.0"
