class HighscoresError(Exception):
    """Base class for errors raised by the high-score tracker"""


class UnknownPeriodError(HighscoresError, ValueError):
    def __init__(self, period):
        self.period = period
        super().__init__(f"Unknown period: {period!r}")


class SourceUnavailableError(HighscoresError):
    """The snapshot source could not produce a leaderboard for this run"""
