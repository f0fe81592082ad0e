"""CLI entry point for the teams dashboard."""

import json
import logging
import sys

import click

from teams_dashboard.config import get_config
from teams_dashboard.core import teams as teams_mod
from teams_dashboard.state import reader

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
def main(log_level):
    """tdash - Agent Teams Dashboard"""
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)


# ── Query Commands ────────────────────────────────────────────────────────────


STATUS_ICONS = {
    "active": "●",
    "recent": "◐",
    "stale": "○",
}

TASK_ICONS = {
    "pending": "○",
    "in_progress": "●",
    "completed": "✓",
}


@main.command("teams")
@click.option("--json-output", "--json", is_flag=True, help="Output as JSON")
def teams_list(json_output):
    """List teams, most recently active first."""
    from teams_dashboard.web.app import summary_to_dict

    config = get_config()
    summaries = teams_mod.list_team_summaries(config.teams_dir, config.tasks_dir)

    if json_output:
        click.echo(json.dumps([summary_to_dict(s) for s in summaries], indent=2))
        return

    if not summaries:
        click.echo("No teams found.")
        return

    for s in summaries:
        icon = STATUS_ICONS.get(s.activity.status, "?")
        desc = f" - {s.description}" if s.description else ""
        click.echo(
            f"  {icon} {s.name} ({s.activity.status}, {s.activity.age_hours}h)"
            f" [{s.member_count} members]{desc}"
        )
        for m in s.members:
            model = f" ({m.model})" if m.model else ""
            click.echo(f"      - {m.name}: {m.agent_type or '?'}{model}")


@main.command("team")
@click.argument("name")
def team_show(name):
    """Show a team's raw config."""
    config = get_config()
    team_config = reader.read_team_config(config.teams_dir, name)
    if team_config is None:
        click.echo(f"Team not found: {name}", err=True)
        sys.exit(1)
    click.echo(json.dumps(team_config, indent=2))


@main.command("tasks")
@click.argument("team_name")
@click.option("--json-output", "--json", is_flag=True, help="Output as JSON")
def tasks_list(team_name, json_output):
    """List a team's tasks."""
    config = get_config()
    tasks = reader.read_team_tasks(config.tasks_dir, team_name)

    if json_output:
        click.echo(json.dumps(tasks, indent=2))
        return

    if not tasks:
        click.echo("No tasks found.")
        return

    for task in tasks:
        status = task.get("status", "")
        icon = TASK_ICONS.get(status, "?")
        subject = task.get("subject") or task.get("title") or ""
        owner = f" [{task['owner']}]" if task.get("owner") else ""
        click.echo(f"  {icon} #{task['id']}: {subject} ({status}){owner}")


@main.command("inboxes")
@click.argument("team_name")
@click.option("--json-output", "--json", is_flag=True, help="Output as JSON")
def inboxes_list(team_name, json_output):
    """Show message counts per team member."""
    config = get_config()
    inboxes = reader.read_team_inboxes(config.teams_dir, team_name)

    if json_output:
        click.echo(json.dumps(inboxes, indent=2))
        return

    if not inboxes:
        click.echo("No inboxes found.")
        return

    for agent, messages in inboxes.items():
        unread = teams_mod.count_unread({agent: messages})
        click.echo(f"  {agent}: {len(messages)} messages, {unread} unread")


@main.command("overview")
@click.option("--json-output", "--json", is_flag=True, help="Output as JSON")
def overview(json_output):
    """Show task and message counts for every team."""
    from teams_dashboard.web.app import overview_to_dict

    config = get_config()
    entries = teams_mod.list_overview(config.teams_dir, config.tasks_dir)

    if json_output:
        click.echo(json.dumps([overview_to_dict(o) for o in entries], indent=2))
        return

    if not entries:
        click.echo("No teams found.")
        return

    for o in entries:
        click.echo(f"  {o.name}: {o.member_count} members")
        click.echo(
            f"    Tasks: {o.task_count} total, {o.completed_tasks} completed, "
            f"{o.in_progress_tasks} in progress, {o.pending_tasks} pending"
        )
        click.echo(f"    Messages: {o.total_messages} total, {o.unread_messages} unread")


# ── Server ────────────────────────────────────────────────────────────────────


@main.command("serve")
@click.option("--host", default=None, help="Host to bind to")
@click.option("--port", default=None, type=int, help="Port to listen on")
@click.option("--open", "open_browser", is_flag=True, help="Open browser")
def serve(host, port, open_browser):
    """Launch the web dashboard with live updates."""
    import webbrowser

    from teams_dashboard.web.app import run_server

    config = get_config()
    if host:
        config.host = host
    if port:
        config.port = port

    url = f"http://{config.host}:{config.port}"
    click.echo(f"Starting dashboard at {url}")
    if open_browser:
        webbrowser.open(url)
    run_server(config)


if __name__ == "__main__":
    main()
