"""Shared fixtures: temporary teams/tasks trees."""

import json
import os
import tempfile
from pathlib import Path

import pytest


@pytest.fixture
def roots():
    """Create empty teams and tasks roots in a temp directory."""
    with tempfile.TemporaryDirectory() as tmp:
        teams_dir = Path(tmp) / "teams"
        tasks_dir = Path(tmp) / "tasks"
        teams_dir.mkdir()
        tasks_dir.mkdir()
        yield teams_dir, tasks_dir


@pytest.fixture
def write_json():
    """Return a helper that writes JSON (or raw text) and optionally pins its mtime."""

    def _write(path: Path, data, mtime_ms: float | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        text = data if isinstance(data, str) else json.dumps(data)
        path.write_text(text)
        if mtime_ms is not None:
            ns = round(mtime_ms) * 1_000_000
            os.utime(path, ns=(ns, ns))
        return path

    return _write
