"""Filesystem change watcher for the teams and tasks roots.

Raw watchdog events arrive on the observer thread and are handed to the
event loop. Adds and changes are held per path until the file has stopped
changing, then queued for a single dispatcher so ``on_change`` sees events
in notification order.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from teams_dashboard.state.models import ChangeEvent

logger = logging.getLogger(__name__)

WATCH_DEPTH = 4


class _EventHandler(FileSystemEventHandler):
    def __init__(self, watcher: "ChangeWatcher"):
        self.watcher = watcher

    def on_created(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher.notify("add", event.src_path)

    def on_modified(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher.notify("change", event.src_path)

    def on_deleted(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher.notify("remove", event.src_path)

    def on_moved(self, event: FileSystemEvent):
        if not event.is_directory:
            self.watcher.notify("remove", event.src_path)
            self.watcher.notify("add", event.dest_path)


class ChangeWatcher:
    """Watch the teams and tasks roots and report debounced file changes."""

    def __init__(
        self,
        teams_dir: Path,
        tasks_dir: Path,
        on_change: Callable[[ChangeEvent], Awaitable[None]],
        stability_threshold: float = 0.3,
        poll_interval: float = 0.1,
        depth: int = WATCH_DEPTH,
    ):
        self.teams_dir = Path(teams_dir)
        self.tasks_dir = Path(tasks_dir)
        self.on_change = on_change
        self.stability_threshold = stability_threshold
        self.poll_interval = poll_interval
        self.depth = depth
        self.watched: list[Path] = []
        self._loop: asyncio.AbstractEventLoop | None = None
        self._observer: Observer | None = None
        self._queue: asyncio.Queue[ChangeEvent] | None = None
        self._dispatcher: asyncio.Task | None = None
        self._pending: dict[str, tuple[str, asyncio.Task]] = {}

    @property
    def running(self) -> bool:
        return self._observer is not None

    async def start(self) -> bool:
        """Start observing; returns False when there is nothing to watch."""
        if self._observer is not None:
            return True

        roots = [p for p in (self.teams_dir, self.tasks_dir) if p.is_dir()]
        if not roots:
            logger.warning("No watch directories found, live updates disabled")
            return False

        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        observer = Observer()
        try:
            observer.start()
        except OSError:
            logger.exception("File watcher failed to start, live updates disabled")
            self._queue = None
            return False

        # Emitters start inside schedule() once the observer runs, so a root
        # that cannot be watched fails here on its own.
        handler = _EventHandler(self)
        for root in roots:
            try:
                observer.schedule(handler, str(root), recursive=True)
            except OSError:
                logger.exception("Could not watch %s", root)
                continue
            self.watched.append(root)

        if not self.watched:
            logger.warning("No watch directories could be scheduled, live updates disabled")
            observer.stop()
            await asyncio.to_thread(observer.join, 5)
            self._queue = None
            return False

        self._dispatcher = asyncio.create_task(self._dispatch(self._queue))
        self._observer = observer
        logger.info("Watching: %s", ", ".join(str(p) for p in self.watched))
        return True

    async def stop(self):
        # Raw events still queued on the loop are ignored from here on.
        self._queue = None
        for _, task in self._pending.values():
            task.cancel()
        self._pending.clear()

        if self._dispatcher is not None:
            self._dispatcher.cancel()
            try:
                await self._dispatcher
            except asyncio.CancelledError:
                pass
            self._dispatcher = None

        if self._observer is not None:
            self._observer.stop()
            await asyncio.to_thread(self._observer.join, 5)
            self._observer = None
        self.watched = []

    # ── Classification ────────────────────────────────────────────────────────

    def classify(self, path: str | Path) -> tuple[str, str | None, str] | None:
        """Return ``(area, team_name, relative_file)`` for a watched path."""
        path = Path(path)
        for area, root in (("teams", self.teams_dir), ("tasks", self.tasks_dir)):
            if path.is_relative_to(root):
                rel = path.relative_to(root)
                team_name = rel.parts[0] if len(rel.parts) > 1 else None
                return area, team_name, rel.as_posix()
        return None

    def within_depth(self, rel_file: str) -> bool:
        """True when the file sits at most ``depth`` directories below its root."""
        return len(Path(rel_file).parts) - 1 <= self.depth

    # ── Raw events ────────────────────────────────────────────────────────────

    def notify(self, kind: str, path: str | bytes):
        """Called from the observer thread for every raw file event."""
        if isinstance(path, bytes):
            path = path.decode(errors="replace")
        if self._loop is None:
            return
        try:
            self._loop.call_soon_threadsafe(self._on_raw_event, kind, path)
        except RuntimeError:
            logger.debug("Event loop closed, dropping %s for %s", kind, path)

    def _on_raw_event(self, kind: str, path: str):
        if self._queue is None:
            return

        previous = self._pending.pop(path, None)
        if previous is not None:
            previous[1].cancel()

        if kind == "remove":
            self._emit(kind, path)
            return

        # A pending add stays an add until the write settles.
        if previous is not None and previous[0] == "add":
            kind = "add"
        task = asyncio.create_task(self._await_write_finish(kind, path))
        self._pending[path] = (kind, task)

    def _stat(self, path: str) -> tuple[int, int] | None:
        try:
            st = Path(path).stat()
        except OSError:
            return None
        return st.st_size, st.st_mtime_ns

    async def _await_write_finish(self, kind: str, path: str):
        loop = asyncio.get_running_loop()
        last = self._stat(path)
        stable_since = loop.time()
        try:
            while True:
                await asyncio.sleep(self.poll_interval)
                current = self._stat(path)
                if current is None:
                    return
                if current != last:
                    last = current
                    stable_since = loop.time()
                    continue
                if loop.time() - stable_since >= self.stability_threshold:
                    break
        finally:
            entry = self._pending.get(path)
            if entry is not None and entry[1] is asyncio.current_task():
                del self._pending[path]
        self._emit(kind, path)

    def _emit(self, kind: str, path: str):
        classified = self.classify(path)
        if classified is None:
            return
        area, team_name, rel_file = classified
        if not self.within_depth(rel_file) or self._queue is None:
            return
        self._queue.put_nowait(
            ChangeEvent(
                event=kind,
                area=area,
                team_name=team_name,
                file=rel_file,
                timestamp=int(time.time() * 1000),
            )
        )

    async def _dispatch(self, queue: asyncio.Queue):
        while True:
            event = await queue.get()
            logger.info("[%s] %s/%s", event.event, event.area, event.file)
            try:
                await self.on_change(event)
            except Exception:
                logger.exception("Error delivering change event for %s", event.file)
