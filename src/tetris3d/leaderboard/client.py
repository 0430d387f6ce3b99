from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8888"
TOP_SCORES_PATH = "/api/get-highscores"
SUBMIT_SCORE_PATH = "/api/submit-highscore"
MAX_NAME_LENGTH = 20


class HighscoreState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


class ScoreValidationError(ValueError):
    """A score submission that the server would reject."""


@dataclass(frozen=True)
class Highscore:
    player_name: str
    score: int


@dataclass
class LeaderboardConfig:
    base_url: Optional[str] = None
    timeout: float = 5.0

    def __post_init__(self) -> None:
        if self.base_url is None:
            self.base_url = os.getenv("TETRIS3D_LEADERBOARD_URL", DEFAULT_BASE_URL)
        self.base_url = self.base_url.rstrip("/")
        if self.timeout <= 0:
            raise ValueError("timeout must be a positive number")


def validate_submission(player_name: Any, score: Any) -> None:
    if not isinstance(player_name, str) or not player_name.strip():
        raise ScoreValidationError("Player name must be a non-empty string.")
    if len(player_name) > MAX_NAME_LENGTH:
        raise ScoreValidationError(f"Player name must be at most {MAX_NAME_LENGTH} characters.")
    if isinstance(score, bool) or not isinstance(score, int):
        raise ScoreValidationError("Score must be an integer.")
    if score < 0:
        raise ScoreValidationError("Score must not be negative.")


@dataclass
class LeaderboardClient:
    """Fetches and submits scores against the external score store.

    Transport problems never propagate: they are logged and reflected in
    `state`. Nothing is retried.
    """

    config: LeaderboardConfig = field(default_factory=LeaderboardConfig)
    session: Any = field(default_factory=requests.Session)
    highscores: List[Highscore] = field(default_factory=list)
    state: HighscoreState = HighscoreState.IDLE
    _executor: Optional[ThreadPoolExecutor] = field(default=None, init=False, repr=False)

    def _url(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    def fetch_top_scores(self) -> List[Highscore]:
        response = self.session.get(self._url(TOP_SCORES_PATH), timeout=self.config.timeout)
        response.raise_for_status()
        rows = response.json()
        return [Highscore(player_name=str(row["player_name"]), score=int(row["score"])) for row in rows]

    def refresh(self) -> bool:
        self.state = HighscoreState.LOADING
        try:
            scores = self.fetch_top_scores()
        except (requests.RequestException, ValueError, KeyError, TypeError) as exc:
            logger.warning("Failed to fetch highscores: %s", exc)
            self.state = HighscoreState.ERROR
            return False
        self.highscores = scores
        self.state = HighscoreState.IDLE
        return True

    def refresh_async(self) -> Future:
        """Refresh on a background worker so gameplay never waits on the network."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="leaderboard")
        self.state = HighscoreState.LOADING
        return self._executor.submit(self.refresh)

    def submit(self, player_name: str, score: int) -> bool:
        """Post a score, then reload the table.

        Raises ScoreValidationError before any request is made if the
        name or score is malformed.
        """
        validate_submission(player_name, score)
        payload = {"playerName": player_name, "score": score}
        try:
            response = self.session.post(self._url(SUBMIT_SCORE_PATH), json=payload, timeout=self.config.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Failed to submit highscore: %s", exc)
            return False
        return self.refresh()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
