import pytest
import requests

from tetris3d.leaderboard import (
    Highscore,
    HighscoreState,
    LeaderboardClient,
    LeaderboardConfig,
    ScoreValidationError,
    validate_submission,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, get_response=None, post_response=None, error=None):
        self.get_response = get_response or FakeResponse(payload=[])
        self.post_response = post_response or FakeResponse(status_code=201, payload={})
        self.error = error
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(("GET", url, None))
        if self.error is not None:
            raise self.error
        return self.get_response

    def post(self, url, json=None, timeout=None):
        self.calls.append(("POST", url, json))
        if self.error is not None:
            raise self.error
        return self.post_response


def make_client(session):
    return LeaderboardClient(config=LeaderboardConfig(base_url="http://scores.test/"), session=session)


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("TETRIS3D_LEADERBOARD_URL", "http://env.test")
    assert LeaderboardConfig().base_url == "http://env.test"
    with pytest.raises(ValueError):
        LeaderboardConfig(base_url="http://x", timeout=0)


def test_refresh_loads_top_scores():
    rows = [{"player_name": "ada", "score": 900}, {"player_name": "bob", "score": 400}]
    session = FakeSession(get_response=FakeResponse(payload=rows))
    client = make_client(session)
    assert client.refresh()
    assert client.state == HighscoreState.IDLE
    assert client.highscores == [Highscore("ada", 900), Highscore("bob", 400)]
    assert session.calls[0] == ("GET", "http://scores.test/api/get-highscores", None)


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.ConnectionError("down")),
        FakeSession(get_response=FakeResponse(status_code=500, payload={"message": "x"})),
        FakeSession(get_response=FakeResponse(payload=ValueError("bad json"))),
        FakeSession(get_response=FakeResponse(payload=[{"name": "ada"}])),
    ],
)
def test_refresh_failure_sets_error_state(session):
    client = make_client(session)
    client.highscores = [Highscore("old", 1)]
    assert not client.refresh()
    assert client.state == HighscoreState.ERROR
    assert client.highscores == [Highscore("old", 1)]


def test_refresh_async_runs_in_background():
    session = FakeSession(get_response=FakeResponse(payload=[{"player_name": "ada", "score": 5}]))
    client = make_client(session)
    future = client.refresh_async()
    assert future.result(timeout=5) is True
    assert client.state == HighscoreState.IDLE
    assert client.highscores == [Highscore("ada", 5)]
    client.close()


def test_submit_posts_then_refreshes():
    session = FakeSession()
    client = make_client(session)
    assert client.submit("ada", 120)
    assert session.calls[0] == ("POST", "http://scores.test/api/submit-highscore", {"playerName": "ada", "score": 120})
    assert session.calls[1][0] == "GET"


def test_submit_transport_failure_is_swallowed():
    session = FakeSession(error=requests.Timeout("slow"))
    client = make_client(session)
    assert not client.submit("ada", 120)
    assert len(session.calls) == 1


@pytest.mark.parametrize(
    "name,score",
    [("", 10), ("   ", 10), ("x" * 21, 10), (None, 10), ("ada", -1), ("ada", 1.5), ("ada", "10"), ("ada", True)],
)
def test_malformed_submission_rejected_before_request(name, score):
    session = FakeSession()
    client = make_client(session)
    with pytest.raises(ScoreValidationError):
        client.submit(name, score)
    assert session.calls == []


def test_boundary_values_accepted():
    validate_submission("x" * 20, 0)
    validate_submission("a", 10**9)
