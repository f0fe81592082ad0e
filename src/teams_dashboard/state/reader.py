"""Best-effort readers for the on-disk team, task and inbox records.

Every function here re-reads disk on each call and never raises for missing
paths, permission errors or malformed JSON: those degrade to ``None`` or an
empty collection so a half-written file never breaks a query.
"""

import json
import math
from pathlib import Path
from typing import Any


def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant {name}")


def read_json(path: Path) -> Any | None:
    """Parse a JSON file, returning None if it is missing or malformed.

    ``NaN`` and ``Infinity`` are not valid JSON and count as malformed.
    """
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"), parse_constant=_reject_constant)
    except (OSError, ValueError):
        return None


def _team_dir(root: Path, team_name: str) -> Path | None:
    """Resolve a team directory under root, rejecting names that escape it."""
    if not team_name or team_name in (".", "..") or "/" in team_name or "\\" in team_name:
        return None
    return Path(root) / team_name


def _json_files(directory: Path) -> list[Path]:
    try:
        return sorted(p for p in directory.iterdir() if p.name.endswith(".json") and p.is_file())
    except OSError:
        return []


def list_team_names(teams_dir: Path) -> list[str]:
    """Names of the team directories directly under the teams root."""
    try:
        return sorted(p.name for p in Path(teams_dir).iterdir() if p.is_dir())
    except OSError:
        return []


def read_team_config(teams_dir: Path, team_name: str) -> dict | None:
    team_dir = _team_dir(teams_dir, team_name)
    if team_dir is None:
        return None
    config = read_json(team_dir / "config.json")
    return config if isinstance(config, dict) else None


def read_team_inboxes(teams_dir: Path, team_name: str) -> dict[str, list]:
    """Map each member name to the messages in its ``inboxes/<name>.json`` file."""
    team_dir = _team_dir(teams_dir, team_name)
    if team_dir is None:
        return {}

    inboxes = {}
    for path in _json_files(team_dir / "inboxes"):
        messages = read_json(path)
        if isinstance(messages, list):
            inboxes[path.stem] = messages
    return inboxes


def _task_sort_key(task: dict) -> tuple:
    # Numeric ids first in numeric order, anything else after by its text.
    task_id = task["id"]
    try:
        value = float(task_id)
    except (TypeError, ValueError):
        value = math.nan
    if math.isfinite(value):
        return (0, value, "")
    return (1, 0.0, str(task_id))


def read_team_tasks(tasks_dir: Path, team_name: str) -> list[dict]:
    """Load a team's tasks ordered by numeric id, skipping unreadable files."""
    team_dir = _team_dir(tasks_dir, team_name)
    if team_dir is None:
        return []

    tasks = []
    for path in _json_files(team_dir):
        task = read_json(path)
        if isinstance(task, dict) and task.get("id"):
            tasks.append(task)
    tasks.sort(key=_task_sort_key)
    return tasks
