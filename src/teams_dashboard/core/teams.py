"""Team summaries and the cross-team overview.

Both views are rebuilt from disk on every call; nothing is cached between
requests.
"""

from pathlib import Path

from teams_dashboard.core.activity import get_team_activity
from teams_dashboard.state import reader
from teams_dashboard.state.models import Team, TeamOverview, TeamSummary

STATUS_ORDER = {"active": 0, "recent": 1, "stale": 2}


def get_team_summary(
    teams_dir: Path,
    tasks_dir: Path,
    team_name: str,
    now: float | None = None,
) -> TeamSummary:
    team = Team.from_config(team_name, reader.read_team_config(teams_dir, team_name))
    return TeamSummary(
        name=team.name,
        description=team.description,
        created_at=team.created_at,
        members=team.members,
        member_count=team.member_count,
        activity=get_team_activity(teams_dir, tasks_dir, team_name, now=now),
    )


def _summary_sort_key(summary: TeamSummary) -> tuple:
    activity = summary.activity
    return (STATUS_ORDER.get(activity.status, len(STATUS_ORDER)), -activity.last_activity)


def list_team_summaries(
    teams_dir: Path,
    tasks_dir: Path,
    now: float | None = None,
) -> list[TeamSummary]:
    """Summaries for every team, most active first."""
    summaries = [
        get_team_summary(teams_dir, tasks_dir, name, now=now)
        for name in reader.list_team_names(teams_dir)
    ]
    summaries.sort(key=_summary_sort_key)
    return summaries


def count_messages(inboxes: dict[str, list]) -> int:
    return sum(len(messages) for messages in inboxes.values())


def count_unread(inboxes: dict[str, list]) -> int:
    """Count messages whose ``read`` flag is falsy or missing."""
    unread = 0
    for messages in inboxes.values():
        for message in messages:
            if not isinstance(message, dict) or not message.get("read"):
                unread += 1
    return unread


def get_team_overview(teams_dir: Path, tasks_dir: Path, team_name: str) -> TeamOverview:
    team = Team.from_config(team_name, reader.read_team_config(teams_dir, team_name))
    tasks = reader.read_team_tasks(tasks_dir, team_name)
    inboxes = reader.read_team_inboxes(teams_dir, team_name)

    statuses = [t.get("status") for t in tasks]
    return TeamOverview(
        name=team_name,
        description=team.description,
        member_count=team.member_count,
        task_count=len(tasks),
        completed_tasks=statuses.count("completed"),
        in_progress_tasks=statuses.count("in_progress"),
        pending_tasks=statuses.count("pending"),
        total_messages=count_messages(inboxes),
        unread_messages=count_unread(inboxes),
    )


def list_overview(teams_dir: Path, tasks_dir: Path) -> list[TeamOverview]:
    return [
        get_team_overview(teams_dir, tasks_dir, name)
        for name in reader.list_team_names(teams_dir)
    ]
