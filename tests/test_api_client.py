"""
Tests for the backend HTTP client (requests session mocked).
"""

from unittest import mock

import pytest
import requests

from dino_runner.runner_core.api_client import LeaderboardEntry, RunnerApiClient
from dino_runner.runner_core.config_loader import PlayerSettings
from dino_runner.runner_core.errors import ScoringServiceError, SettingsError

BASE_URL = "http://scores.test"


def make_response(payload=None, status_error=None, json_error=None):
    response = mock.Mock(spec=requests.Response)
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return RunnerApiClient(BASE_URL + "/", timeout=1.5, session=session)


class TestSubmitSession:
    """Test POST /api/scores."""

    def test_posts_summary(self, client, session):
        session.request.return_value = make_response(
            {"success": True, "globalRank": 4, "isNewRecord": False}
        )
        result = client.submit_session("Rex", 250, 3, 12, 3.5)

        session.request.assert_called_once_with(
            "POST",
            BASE_URL + "/api/scores",
            timeout=1.5,
            json={
                "playerName": "Rex",
                "score": 250,
                "obstaclesAvoided": 3,
                "gameDuration": 12,
                "maxSpeed": 3.5,
            }
        )
        assert result.accepted
        assert result.global_rank == 4
        assert not result.is_new_global_record

    def test_new_record(self, client, session):
        session.request.return_value = make_response(
            {"success": True, "globalRank": 1, "isNewRecord": True}
        )
        assert client.submit_session("Rex", 9000, 80, 300, 8.0).is_new_global_record

    def test_anonymous_rejected_without_request(self, client, session):
        with pytest.raises(ScoringServiceError):
            client.submit_session(None, 10, 0, 1, 3.0)
        session.request.assert_not_called()

    def test_connection_error(self, client, session):
        session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ScoringServiceError):
            client.submit_session("Rex", 10, 0, 1, 3.0)

    def test_http_error(self, client, session):
        session.request.return_value = make_response(
            status_error=requests.HTTPError("500 Server Error")
        )
        with pytest.raises(ScoringServiceError):
            client.submit_session("Rex", 10, 0, 1, 3.0)

    def test_invalid_json(self, client, session):
        session.request.return_value = make_response(json_error=ValueError("no json"))
        with pytest.raises(ScoringServiceError):
            client.submit_session("Rex", 10, 0, 1, 3.0)

    @pytest.mark.parametrize("payload", [
        {"success": False, "error": "Failed to save score"},
        {"success": True},
        {"success": True, "globalRank": 0},
        ["not", "an", "object"],
    ])
    def test_malformed_response(self, client, session, payload):
        session.request.return_value = make_response(payload)
        with pytest.raises(ScoringServiceError):
            client.submit_session("Rex", 10, 0, 1, 3.0)


class TestLeaderboard:
    """Test GET /api/leaderboard."""

    def test_parses_rows(self, client, session):
        session.request.return_value = make_response({
            "success": True,
            "leaderboard": [
                {"rank": 1, "playerName": "Ada", "score": 900, "obstaclesAvoided": 40},
                {"rank": 2, "playerName": "Rex", "score": 250},
            ],
        })
        entries = client.fetch_leaderboard(limit=2)

        session.request.assert_called_once_with(
            "GET", BASE_URL + "/api/leaderboard", timeout=1.5, params={"limit": 2}
        )
        assert entries == [
            LeaderboardEntry(rank=1, player_name="Ada", score=900, obstacles_avoided=40),
            LeaderboardEntry(rank=2, player_name="Rex", score=250, obstacles_avoided=0),
        ]

    def test_empty(self, client, session):
        session.request.return_value = make_response({"success": True, "leaderboard": []})
        assert client.fetch_leaderboard() == []

    def test_bad_row(self, client, session):
        session.request.return_value = make_response({"leaderboard": [{"rank": 1}]})
        with pytest.raises(ScoringServiceError):
            client.fetch_leaderboard()


class TestCustomization:
    """Test GET/POST /api/customization."""

    def test_fetch_quotes_name(self, client, session):
        session.request.return_value = make_response({
            "success": True,
            "settings": {"dinoColor": "#2196F3", "backgroundTheme": "space",
                         "soundEnabled": True, "difficultyPreference": "easy"},
        })
        settings = client.fetch_settings("Rex Jr/2")

        args, _ = session.request.call_args
        assert args == ("GET", BASE_URL + "/api/customization/Rex%20Jr%2F2")
        assert settings.background_theme == "space"
        assert settings.speed_multiplier == pytest.approx(0.8)

    def test_fetch_failure(self, client, session):
        session.request.side_effect = requests.Timeout("slow")
        with pytest.raises(SettingsError):
            client.fetch_settings("Rex")

    def test_save(self, client, session):
        session.request.return_value = make_response({"success": True})
        client.save_settings("Rex", PlayerSettings(difficulty_preference="hard"))

        _, kwargs = session.request.call_args
        assert kwargs["json"]["playerName"] == "Rex"
        assert kwargs["json"]["difficultyPreference"] == "hard"

    def test_save_rejected(self, client, session):
        session.request.return_value = make_response({"success": False, "error": "nope"})
        with pytest.raises(SettingsError):
            client.save_settings("Rex", PlayerSettings())


class TestHealth:

    def test_health(self, client, session):
        session.request.return_value = make_response({"status": "OK"})
        assert client.health() == {"status": "OK"}
        assert client.base_url == BASE_URL
