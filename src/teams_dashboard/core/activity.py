"""Team activity classification from JSON file modification times."""

import math
import time
from datetime import datetime, timezone
from pathlib import Path

from teams_dashboard.state.models import Activity

MS_PER_HOUR = 60 * 60 * 1000
ACTIVE_HOURS = 1
RECENT_HOURS = 24


def _mtime_ms(path: Path) -> float:
    try:
        return path.stat().st_mtime_ns / 1_000_000
    except OSError:
        return 0


def latest_mtime(directory: Path) -> float:
    """Most recent mtime (epoch ms) of the JSON files in a directory.

    Looks at files directly inside ``directory`` and one level into each of
    its subdirectories (e.g. ``inboxes/``), never deeper. Returns 0 when no
    JSON file is found.
    """
    latest = 0
    try:
        entries = list(Path(directory).iterdir())
    except OSError:
        return latest

    for entry in entries:
        if entry.is_file() and entry.name.endswith(".json"):
            latest = max(latest, _mtime_ms(entry))
        elif entry.is_dir():
            try:
                children = [c for c in entry.iterdir() if c.name.endswith(".json")]
            except OSError:
                continue
            for child in children:
                latest = max(latest, _mtime_ms(child))
    return latest


def classify_age(age_hours: float) -> str:
    if age_hours < ACTIVE_HOURS:
        return "active"
    if age_hours < RECENT_HOURS:
        return "recent"
    return "stale"


def _iso(ms: float) -> str:
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_team_activity(
    teams_dir: Path,
    tasks_dir: Path,
    team_name: str,
    now: float | None = None,
) -> Activity:
    """Compute a team's activity from its config and task directories.

    ``now`` is the reference time in epoch milliseconds and defaults to the
    wall clock.
    """
    if now is None:
        now = time.time() * 1000

    last_activity = max(
        latest_mtime(Path(teams_dir) / team_name),
        latest_mtime(Path(tasks_dir) / team_name),
    )
    age_hours = (now - last_activity) / MS_PER_HOUR

    return Activity(
        last_activity=last_activity,
        last_activity_iso=_iso(last_activity) if last_activity else None,
        age_hours=math.floor(age_hours * 10 + 0.5) / 10,
        status=classify_age(age_hours),
    )
