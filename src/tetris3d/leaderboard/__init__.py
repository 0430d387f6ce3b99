"""Client for the external leaderboard service."""

from .client import (
    Highscore,
    HighscoreState,
    LeaderboardClient,
    LeaderboardConfig,
    ScoreValidationError,
    validate_submission,
)

__all__ = [
    "Highscore",
    "HighscoreState",
    "LeaderboardClient",
    "LeaderboardConfig",
    "ScoreValidationError",
    "validate_submission",
]
