"""Tests for the web dashboard API."""

import pytest
from starlette.testclient import TestClient

from teams_dashboard.config import Config
from teams_dashboard.state.models import ChangeEvent
from teams_dashboard.web.app import create_app


@pytest.fixture
def web_env(roots, write_json):
    """Seed a teams tree and return a client plus the app."""
    teams_dir, tasks_dir = roots
    write_json(
        teams_dir / "builders" / "config.json",
        {
            "description": "Builds things",
            "createdAt": 1700000000000,
            "members": [{"name": "lead", "agentType": "team-lead", "model": "opus", "prompt": "long"}],
        },
    )
    write_json(teams_dir / "builders" / "inboxes" / "lead.json", [{"text": "hi"}, {"text": "yo", "read": True}])
    write_json(tasks_dir / "builders" / "2.json", {"id": "2", "status": "pending", "subject": "Second"})
    write_json(tasks_dir / "builders" / "1.json", {"id": "1", "status": "completed", "subject": "First"})
    (teams_dir / "idle").mkdir()

    config = Config(teams_dir=teams_dir, tasks_dir=tasks_dir, stability_threshold=0.1, poll_interval=0.05)
    app = create_app(config)
    yield TestClient(app), app


class TestDashboardPage:
    def test_index_returns_html(self, web_env):
        client, _ = web_env
        resp = client.get("/")
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert "Agent Teams" in resp.text
        assert "const REFRESH_MS = 2000;" in resp.text

    def test_team_cards_select_by_data_attribute(self, web_env):
        client, _ = web_env
        page = client.get("/").text
        assert "onclick=" not in page
        assert 'data-name="${esc(t.name)}"' in page
        assert "selectTeam(card.dataset.name)" in page
        assert "&quot;" in page and "&#39;" in page


class TestTeamsAPI:
    def test_list_teams(self, web_env):
        client, _ = web_env
        resp = client.get("/api/teams")
        assert resp.status_code == 200
        data = resp.json()
        assert [t["name"] for t in data] == ["builders", "idle"]
        builders = data[0]
        assert builders["status"] == "active"
        assert builders["memberCount"] == 1
        assert builders["createdAt"] == 1700000000000
        assert builders["members"] == [
            {"name": "lead", "agentType": "team-lead", "model": "opus", "color": None, "joinedAt": None}
        ]
        assert builders["lastActivityISO"].endswith("Z")
        idle = data[1]
        assert idle["status"] == "stale"
        assert idle["lastActivity"] == 0
        assert idle["lastActivityISO"] is None
        assert idle["description"] == ""

    def test_get_team(self, web_env):
        client, _ = web_env
        resp = client.get("/api/teams/builders")
        assert resp.status_code == 200
        assert resp.json()["members"][0]["prompt"] == "long"

    def test_get_nonexistent_team(self, web_env):
        client, _ = web_env
        resp = client.get("/api/teams/nope")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Team not found"}

    def test_team_without_config_is_not_found(self, web_env):
        client, _ = web_env
        assert client.get("/api/teams/idle").status_code == 404

    def test_inboxes(self, web_env):
        client, _ = web_env
        resp = client.get("/api/teams/builders/inboxes")
        assert resp.status_code == 200
        assert resp.json() == {"lead": [{"text": "hi"}, {"text": "yo", "read": True}]}

    def test_inboxes_unknown_team(self, web_env):
        client, _ = web_env
        assert client.get("/api/teams/nope/inboxes").json() == {}


class TestTasksAPI:
    def test_tasks_sorted(self, web_env):
        client, _ = web_env
        resp = client.get("/api/tasks/builders")
        assert resp.status_code == 200
        assert [t["subject"] for t in resp.json()] == ["First", "Second"]

    def test_tasks_unknown_team(self, web_env):
        client, _ = web_env
        assert client.get("/api/tasks/nope").json() == []


class TestOverviewAPI:
    def test_overview(self, web_env):
        client, _ = web_env
        resp = client.get("/api/overview")
        assert resp.status_code == 200
        builders, idle = resp.json()
        assert builders == {
            "name": "builders",
            "description": "Builds things",
            "memberCount": 1,
            "taskCount": 2,
            "completedTasks": 1,
            "inProgressTasks": 0,
            "pendingTasks": 1,
            "totalMessages": 2,
            "unreadMessages": 1,
        }
        assert idle["taskCount"] == 0
        assert idle["memberCount"] == 0


class TestLiveUpdates:
    def test_handshake_on_connect(self, web_env):
        client, _ = web_env
        with client.websocket_connect("/ws") as ws:
            message = ws.receive_json()
            assert message["type"] == "connected"
            assert isinstance(message["timestamp"], int)

    def test_change_events_reach_observers(self, web_env):
        client, app = web_env
        with TestClient(app) as live:
            assert app.state.watcher.running
            with live.websocket_connect("/ws") as ws:
                assert ws.receive_json()["type"] == "connected"
                event = ChangeEvent(
                    event="change",
                    area="tasks",
                    team_name="builders",
                    file="builders/1.json",
                    timestamp=1700000000000,
                )
                live.portal.call(app.state.watcher.on_change, event)
                assert ws.receive_json() == {
                    "type": "file_changed",
                    "event": "change",
                    "area": "tasks",
                    "teamName": "builders",
                    "file": "builders/1.json",
                    "timestamp": 1700000000000,
                }
        assert not app.state.watcher.running


class TestNonStandardJson:
    def test_task_with_nan_is_skipped(self, web_env, roots, write_json):
        client, _ = web_env
        _, tasks_dir = roots
        write_json(tasks_dir / "builders" / "3.json", '{"id": "3", "status": "pending", "estimate": NaN}')
        resp = client.get("/api/tasks/builders")
        assert resp.status_code == 200
        assert [t["id"] for t in resp.json()] == ["1", "2"]

    def test_config_with_infinity_reads_as_absent(self, web_env, roots, write_json):
        client, _ = web_env
        teams_dir, _ = roots
        write_json(teams_dir / "broken" / "config.json", '{"description": "x", "createdAt": Infinity}')
        resp = client.get("/api/teams")
        assert resp.status_code == 200
        broken = next(t for t in resp.json() if t["name"] == "broken")
        assert broken["description"] == ""
        assert broken["createdAt"] is None
        assert client.get("/api/teams/broken").status_code == 404

    def test_inbox_with_nan_is_excluded(self, web_env, roots, write_json):
        client, _ = web_env
        teams_dir, _ = roots
        write_json(teams_dir / "builders" / "inboxes" / "worker.json", '[{"text": "x", "score": NaN}]')
        resp = client.get("/api/teams/builders/inboxes")
        assert resp.status_code == 200
        assert set(resp.json()) == {"lead"}


class TestMissingRoots:
    def test_queries_served_without_watch_roots(self, roots):
        teams_dir, tasks_dir = roots
        config = Config(teams_dir=teams_dir / "missing", tasks_dir=tasks_dir / "missing")
        app = create_app(config)
        with TestClient(app) as client:
            assert not app.state.watcher.running
            assert client.get("/api/teams").json() == []
            assert client.get("/api/overview").json() == []
            assert client.get("/api/tasks/anything").json() == []
            with client.websocket_connect("/ws") as ws:
                assert ws.receive_json()["type"] == "connected"
