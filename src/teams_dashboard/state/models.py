"""Data models for the teams dashboard."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Member:
    name: str
    agent_type: str | None = None
    model: str | None = None
    color: str | None = None
    joined_at: Any = None

    @classmethod
    def from_dict(cls, data: dict) -> "Member":
        return cls(
            name=data.get("name"),
            agent_type=data.get("agentType"),
            model=data.get("model"),
            color=data.get("color") or None,
            joined_at=data.get("joinedAt") or None,
        )


@dataclass
class Team:
    name: str
    description: str = ""
    created_at: Any = None
    members: list[Member] = field(default_factory=list)
    # Raw entry count, including entries too malformed to become a Member.
    member_count: int = 0

    @classmethod
    def from_config(cls, name: str, config: dict | None) -> "Team":
        """Build a team from its raw config; a missing config gives an empty team."""
        config = config or {}
        members = config.get("members")
        if not isinstance(members, list):
            members = []
        return cls(
            name=name,
            description=config.get("description") or "",
            created_at=config.get("createdAt") or None,
            members=[Member.from_dict(m) for m in members if isinstance(m, dict)],
            member_count=len(members),
        )


@dataclass
class Activity:
    last_activity: float = 0
    last_activity_iso: str | None = None
    age_hours: float = 0.0
    status: str = "stale"


@dataclass
class TeamSummary:
    name: str
    description: str = ""
    created_at: Any = None
    members: list[Member] = field(default_factory=list)
    activity: Activity = field(default_factory=Activity)
    member_count: int = 0


@dataclass
class TeamOverview:
    name: str
    description: str = ""
    member_count: int = 0
    task_count: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    pending_tasks: int = 0
    total_messages: int = 0
    unread_messages: int = 0


@dataclass
class ChangeEvent:
    event: str
    area: str
    team_name: str | None
    file: str
    timestamp: int
