import asyncio

import pytest

from golinks.storage.watcher import CHANGE, RENAME, ConfigWatcher, WatchState, poll_events


class FakeHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    def __init__(self):
        self.handles = []

    def call_later(self, delay, callback):
        handle = FakeHandle(delay, callback)
        self.handles.append(handle)
        return handle

    def active(self):
        return [handle for handle in self.handles if not handle.cancelled]


@pytest.fixture()
def present():
    return {"exists": True}


@pytest.fixture()
def scheduler():
    return FakeScheduler()


@pytest.fixture()
def reloads():
    return []


@pytest.fixture()
def watcher(tmp_path, present, scheduler, reloads):
    return ConfigWatcher(
        tmp_path / "links.yaml",
        on_reload=lambda: reloads.append(1),
        scheduler=scheduler,
        exists=lambda: present["exists"],
    )


def test_start(watcher, present):
    assert watcher.start() is WatchState.WATCHING
    present["exists"] = False
    assert watcher.start() is WatchState.IDLE


def test_events_ignored_while_idle(watcher, scheduler):
    assert watcher.handle_event(CHANGE) is WatchState.IDLE
    assert scheduler.handles == []


def test_changes_are_coalesced(watcher, scheduler, reloads):
    watcher.start()
    for _ in range(3):
        assert watcher.handle_event(CHANGE) is WatchState.DEBOUNCING
    assert len(scheduler.handles) == 3
    assert [handle.cancelled for handle in scheduler.handles] == [True, True, False]

    (pending,) = scheduler.active()
    assert pending.delay == 0.3
    pending.callback()
    assert reloads == [1]
    assert watcher.state is WatchState.WATCHING


def test_rename_recovers_when_file_returns(watcher, scheduler, reloads):
    watcher.start()
    watcher.handle_event(CHANGE)
    assert watcher.handle_event(RENAME) is WatchState.IDLE
    assert scheduler.handles[0].cancelled

    (pending,) = scheduler.active()
    assert pending.delay == 0.5
    pending.callback()
    assert reloads == [1]
    assert watcher.state is WatchState.WATCHING


def test_rename_without_file_stays_idle(watcher, scheduler, reloads, present):
    watcher.start()
    watcher.handle_event(RENAME)
    present["exists"] = False
    scheduler.active()[0].callback()
    assert reloads == [1]
    assert watcher.state is WatchState.IDLE


def test_stop_cancels_pending(watcher, scheduler):
    watcher.start()
    watcher.handle_event(CHANGE)
    watcher.stop()
    assert watcher.state is WatchState.IDLE
    assert scheduler.active() == []


def test_async_reload_callback_is_scheduled(tmp_path, scheduler):
    calls = []

    async def reload():
        calls.append("reloaded")

    async def scenario():
        watcher = ConfigWatcher(tmp_path / "links.yaml", reload, scheduler=scheduler, exists=lambda: True)
        watcher.start()
        watcher.handle_event(CHANGE)
        scheduler.active()[0].callback()
        await asyncio.sleep(0.01)

    asyncio.run(scenario())
    assert calls == ["reloaded"]


def test_run_consumes_event_source(watcher, scheduler):
    async def events():
        yield CHANGE
        yield RENAME
        yield CHANGE

    asyncio.run(watcher.run(events()))
    assert len(scheduler.handles) == 2
    assert all(handle.cancelled for handle in scheduler.handles)
    assert watcher.state is WatchState.IDLE


def test_run_resumes_when_file_appears(watcher, scheduler, present):
    present["exists"] = False

    async def events():
        present["exists"] = True
        yield CHANGE

    asyncio.run(watcher.run(events()))
    assert len(scheduler.handles) == 1
    assert scheduler.handles[0].delay == 0.3


def test_poll_events_reports_change_and_removal(tmp_path):
    path = tmp_path / "links.yaml"
    path.write_text("version: 1\n", encoding="utf-8")

    async def next_event(events, mutate):
        pending = asyncio.ensure_future(events.__anext__())
        await asyncio.sleep(0.2)
        mutate()
        return await asyncio.wait_for(pending, timeout=2)

    async def scenario():
        events = poll_events(path, interval=0.01)
        try:
            first = await next_event(events, lambda: path.write_text("version: 2\ngroups: []\n", encoding="utf-8"))
            second = await next_event(events, path.unlink)
        finally:
            await events.aclose()
        return first, second

    assert asyncio.run(scenario()) == (CHANGE, RENAME)
