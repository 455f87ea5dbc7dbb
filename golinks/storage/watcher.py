"""Hot-reload of the configuration file driven by change/rename events."""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
import os
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Optional, Protocol, Set, Tuple, Union

logger = logging.getLogger(__name__)

CHANGE = "change"
RENAME = "rename"


class WatchState(str, enum.Enum):
    IDLE = "idle"
    WATCHING = "watching"
    DEBOUNCING = "debouncing"


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


def _snapshot(path: Path) -> Optional[Tuple[int, int, int]]:
    try:
        stat = os.stat(path)
    except OSError:
        return None
    return stat.st_ino, stat.st_mtime_ns, stat.st_size


async def poll_events(path: Path, interval: float = 0.5) -> AsyncIterator[str]:
    """Yield "change" when the file is modified and "rename" when it is replaced or removed."""
    previous = await asyncio.to_thread(_snapshot, path)
    while True:
        await asyncio.sleep(interval)
        current = await asyncio.to_thread(_snapshot, path)
        if current == previous:
            continue
        if previous is None or current is None or current[0] != previous[0]:
            yield RENAME
        else:
            yield CHANGE
        previous = current


class ConfigWatcher:
    """State machine: IDLE -> WATCHING -> DEBOUNCING -> WATCHING.

    Change events are coalesced so only the last one within *debounce*
    seconds triggers a reload. A rename closes the watch; after
    *rename_delay* the file is reloaded and, if it exists again, watched.
    """

    def __init__(
        self,
        path: Union[str, Path],
        on_reload: Callable[[], Any],
        debounce: float = 0.3,
        rename_delay: float = 0.5,
        scheduler: Optional[Scheduler] = None,
        exists: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.path = Path(path).expanduser()
        self.on_reload = on_reload
        self.debounce = debounce
        self.rename_delay = rename_delay
        self.state = WatchState.IDLE
        self._scheduler = scheduler
        self._exists = exists or self.path.exists
        self._pending: Optional[TimerHandle] = None
        self._tasks: Set[asyncio.Future] = set()

    @property
    def scheduler(self) -> Scheduler:
        if self._scheduler is None:
            self._scheduler = asyncio.get_running_loop()
        return self._scheduler

    def start(self) -> WatchState:
        self.state = WatchState.WATCHING if self._exists() else WatchState.IDLE
        if self.state is WatchState.IDLE:
            logger.warning("Not watching %s: file does not exist", self.path)
        return self.state

    def stop(self) -> None:
        self._cancel_pending()
        self.state = WatchState.IDLE

    def handle_event(self, kind: str) -> WatchState:
        if self.state is WatchState.IDLE:
            return self.state
        if kind == CHANGE:
            self._cancel_pending()
            self._pending = self.scheduler.call_later(self.debounce, self._debounced_reload)
            self.state = WatchState.DEBOUNCING
        elif kind == RENAME:
            self._cancel_pending()
            self._pending = self.scheduler.call_later(self.rename_delay, self._recover_after_rename)
            self.state = WatchState.IDLE
        return self.state

    async def run(self, events: Optional[AsyncIterator[str]] = None, poll_interval: float = 0.5) -> None:
        self.start()
        source = events if events is not None else poll_events(self.path, poll_interval)
        try:
            async for kind in source:
                if self.state is WatchState.IDLE and self._pending is None and self._exists():
                    self.start()
                self.handle_event(kind)
        finally:
            self.stop()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _debounced_reload(self) -> None:
        self._pending = None
        self.state = WatchState.WATCHING
        self._dispatch()

    def _recover_after_rename(self) -> None:
        self._pending = None
        self._dispatch()
        if self._exists():
            self.state = WatchState.WATCHING
            logger.info("Re-established watch on %s", self.path)

    def _dispatch(self) -> None:
        result = self.on_reload()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
