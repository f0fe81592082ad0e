"""Configuration loading from environment variables."""

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class Config:
    teams_dir: Path = field(default_factory=lambda: Path.home() / ".claude" / "teams")
    tasks_dir: Path = field(default_factory=lambda: Path.home() / ".claude" / "tasks")
    host: str = "127.0.0.1"
    port: int = 4747
    refresh_interval: float = 2.0
    stability_threshold: float = 0.3
    poll_interval: float = 0.1

    @classmethod
    def from_env(cls) -> "Config":
        config = cls()

        if teams := os.environ.get("TD_TEAMS_DIR"):
            config.teams_dir = Path(teams).expanduser()

        if tasks := os.environ.get("TD_TASKS_DIR"):
            config.tasks_dir = Path(tasks).expanduser()

        if host := os.environ.get("TD_HOST"):
            config.host = host

        if port := os.environ.get("TD_PORT") or os.environ.get("PORT"):
            config.port = int(port)

        if refresh := os.environ.get("TD_REFRESH_INTERVAL"):
            config.refresh_interval = float(refresh)

        if threshold := os.environ.get("TD_STABILITY_THRESHOLD"):
            config.stability_threshold = float(threshold)

        if poll := os.environ.get("TD_POLL_INTERVAL"):
            config.poll_interval = float(poll)

        return config


def get_config() -> Config:
    return Config.from_env()
