"""Web API and live update channel for the teams dashboard."""

import contextlib
import logging

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse
from starlette.routing import Route, WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

from teams_dashboard.config import Config, get_config
from teams_dashboard.core import teams as teams_mod
from teams_dashboard.core.watcher import ChangeWatcher
from teams_dashboard.state import reader
from teams_dashboard.state.models import ChangeEvent
from teams_dashboard.web.dashboard import get_dashboard_html
from teams_dashboard.web.hub import ConnectionRegistry

logger = logging.getLogger(__name__)


def _config(request) -> Config:
    return request.app.state.config


# ── Handlers ──────────────────────────────────────────────────────────────────


async def index(request: Request):
    return HTMLResponse(get_dashboard_html(_config(request).refresh_interval))


async def api_list_teams(request: Request):
    config = _config(request)
    summaries = teams_mod.list_team_summaries(config.teams_dir, config.tasks_dir)
    return JSONResponse([summary_to_dict(s) for s in summaries])


async def api_get_team(request: Request):
    name = request.path_params["name"]
    team_config = reader.read_team_config(_config(request).teams_dir, name)
    if team_config is None:
        return JSONResponse({"error": "Team not found"}, status_code=404)
    return JSONResponse(team_config)


async def api_team_inboxes(request: Request):
    name = request.path_params["name"]
    return JSONResponse(reader.read_team_inboxes(_config(request).teams_dir, name))


async def api_team_tasks(request: Request):
    team_name = request.path_params["team_name"]
    return JSONResponse(reader.read_team_tasks(_config(request).tasks_dir, team_name))


async def api_overview(request: Request):
    config = _config(request)
    overview = teams_mod.list_overview(config.teams_dir, config.tasks_dir)
    return JSONResponse([overview_to_dict(o) for o in overview])


async def ws_updates(websocket: WebSocket):
    registry: ConnectionRegistry = websocket.app.state.registry
    await registry.connect(websocket)
    try:
        while True:
            # Observers only listen; anything they send is ignored.
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WebSocket error")
    finally:
        registry.disconnect(websocket)


# ── Serialization ─────────────────────────────────────────────────────────────


def member_to_dict(m) -> dict:
    return {
        "name": m.name,
        "agentType": m.agent_type,
        "model": m.model,
        "color": m.color,
        "joinedAt": m.joined_at,
    }


def summary_to_dict(s) -> dict:
    return {
        "name": s.name,
        "description": s.description,
        "createdAt": s.created_at,
        "memberCount": s.member_count,
        "members": [member_to_dict(m) for m in s.members],
        "lastActivity": s.activity.last_activity,
        "lastActivityISO": s.activity.last_activity_iso,
        "ageHours": s.activity.age_hours,
        "status": s.activity.status,
    }


def overview_to_dict(o) -> dict:
    return {
        "name": o.name,
        "description": o.description,
        "memberCount": o.member_count,
        "taskCount": o.task_count,
        "completedTasks": o.completed_tasks,
        "inProgressTasks": o.in_progress_tasks,
        "pendingTasks": o.pending_tasks,
        "totalMessages": o.total_messages,
        "unreadMessages": o.unread_messages,
    }


def change_to_dict(e: ChangeEvent) -> dict:
    return {
        "type": "file_changed",
        "event": e.event,
        "area": e.area,
        "teamName": e.team_name,
        "file": e.file,
        "timestamp": e.timestamp,
    }


# ── App ───────────────────────────────────────────────────────────────────────


def create_app(config: Config | None = None) -> Starlette:
    config = config or get_config()
    registry = ConnectionRegistry()

    async def publish(event: ChangeEvent):
        await registry.broadcast(change_to_dict(event))

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        watcher = ChangeWatcher(
            config.teams_dir,
            config.tasks_dir,
            on_change=publish,
            stability_threshold=config.stability_threshold,
            poll_interval=config.poll_interval,
        )
        app.state.watcher = watcher
        await watcher.start()
        try:
            yield
        finally:
            await watcher.stop()

    routes = [
        Route("/", index),
        Route("/api/teams", api_list_teams),
        Route("/api/teams/{name}", api_get_team),
        Route("/api/teams/{name}/inboxes", api_team_inboxes),
        Route("/api/tasks/{team_name}", api_team_tasks),
        Route("/api/overview", api_overview),
        WebSocketRoute("/ws", ws_updates),
    ]
    middleware = [Middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])]
    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.config = config
    app.state.registry = registry
    return app


def run_server(config: Config | None = None):
    config = config or get_config()
    app = create_app(config)
    logger.info("Teams dashboard: http://%s:%d", config.host, config.port)
    logger.info("WebSocket:       ws://%s:%d/ws", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port)
