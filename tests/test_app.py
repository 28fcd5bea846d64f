import asyncio
from collections import deque

import pytest
from rich.console import Console

from showq_tui.app import (
    DetailScreen,
    HelpScreen,
    QueueScreen,
    ShowqTUI,
    _env_flag,
    run,
    snapshot_to_text,
)
from showq_tui.data import JobStatus, QueueSnapshot
from showq_tui.render import DEFAULT_HINT, EMPTY_MESSAGE
from showq_tui.samples import sample_snapshot

from .util import make_job


class StaticFetcher:
    """Return the same snapshot every time and record detail lookups."""

    def __init__(self, snapshot, details=None):
        self.snapshot = snapshot
        self.details = details or {}
        self.detail_calls = []

    async def fetch_snapshot(self):
        return self.snapshot

    async def fetch_details(self, job_id):
        self.detail_calls.append(job_id)
        return dict(self.details)


class CyclingFetcher(StaticFetcher):
    def __init__(self, *snapshots):
        super().__init__(snapshots[0])
        self._snapshots = deque(snapshots)

    async def fetch_snapshot(self):
        current = self._snapshots[0]
        self._snapshots.rotate(-1)
        return current


def _snapshot(*jobs, errors=None):
    return QueueSnapshot(jobs=list(jobs), source="test", errors=list(errors or []))


JOBS = (
    make_job("1", JobStatus.RUNNING, name="alpha"),
    make_job("2", JobStatus.IDLE, name="beta"),
    make_job("3", JobStatus.COMPLETED, name="gamma"),
)


def test_env_flag_truthy(monkeypatch):
    monkeypatch.delenv("TEST_FLAG", raising=False)
    assert not _env_flag("TEST_FLAG")
    monkeypatch.setenv("TEST_FLAG", "1")
    assert _env_flag("TEST_FLAG")
    monkeypatch.setenv("TEST_FLAG", "false")
    assert not _env_flag("TEST_FLAG")


def test_run_honours_environment(monkeypatch):
    monkeypatch.setenv("SHOWQ_TUI_HEADLESS", "1")
    monkeypatch.setenv("SHOWQ_TUI_AUTOPILOT", "quit")
    captured = {}

    class DummyFetcher:
        async def fetch_snapshot(self):  # pragma: no cover - not used in this path
            raise AssertionError("fetch_snapshot should not be called during CLI setup")

    def fake_run(self, *, headless=False, auto_pilot=None, **kwargs):
        captured["headless"] = headless
        captured["auto_pilot"] = auto_pilot
        captured["fetcher"] = self.fetcher

    monkeypatch.setattr(ShowqTUI, "run", fake_run, raising=False)
    fetcher = DummyFetcher()
    run(argv=[], fetcher=fetcher)
    assert captured["headless"] is True
    assert captured["auto_pilot"] is not None
    assert captured["fetcher"] is fetcher


def test_run_sample_flag_configures_fetcher(monkeypatch):
    captured = {}

    def fake_run(self, *, headless=False, auto_pilot=None, **kwargs):
        captured["fetcher"] = self.fetcher

    monkeypatch.delenv("SHOWQ_TUI_HEADLESS", raising=False)
    monkeypatch.delenv("SHOWQ_TUI_AUTOPILOT", raising=False)
    monkeypatch.setattr(ShowqTUI, "run", fake_run, raising=False)
    run(argv=["--sample", "--user", "zenith", "--timeout", "5"])
    fetcher = captured["fetcher"]
    assert fetcher.force_sample is True
    assert fetcher.user == "zenith"
    assert fetcher.timeout == 5.0


def test_run_inline_prints_grouped_tables(monkeypatch, capsys):
    monkeypatch.setenv("COLUMNS", "100")
    run(argv=["--inline"], fetcher=StaticFetcher(sample_snapshot()))
    captured = capsys.readouterr()
    assert "Job ID" in captured.out
    assert "ocean_spinup" in captured.out
    assert "208356" in captured.out
    assert "sample data" in captured.err.lower()


def test_snapshot_to_text_orders_groups():
    text = snapshot_to_text(_snapshot(*JOBS), 80)
    plain = text.plain
    assert plain.index("gamma") < plain.index("alpha") < plain.index("beta")
    console = Console(record=True, width=80)
    console.print(text)
    assert "Job ID" in console.export_text()


def test_snapshot_to_text_without_jobs():
    assert EMPTY_MESSAGE in snapshot_to_text(_snapshot(), 80).plain


def _queue_lines(app):
    return app.render_queue(80, 24).plain_lines()


def test_navigation_keys_move_selection():
    app = ShowqTUI(fetcher=StaticFetcher(_snapshot(*JOBS)))

    async def interact() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            assert isinstance(app.screen, QueueScreen)
            assert app.navigator.selection is None

            await pilot.press("down")
            assert app.navigator.selection == "1"
            await pilot.press("down")
            assert app.navigator.selection == "2"
            await pilot.press("up", "up")
            assert app.navigator.selection == "3"

            await pilot.press("x")
            assert app.navigator.selection == "3"

    asyncio.run(interact())


def test_up_from_no_selection_selects_last_job():
    app = ShowqTUI(fetcher=StaticFetcher(_snapshot(*JOBS)))

    async def interact() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("up")
            assert app.navigator.selection == "3"

    asyncio.run(interact())


def test_refresh_keeps_selection_value():
    first = _snapshot(*JOBS)
    second = _snapshot(make_job("9", JobStatus.BLOCKED), make_job("8", JobStatus.RUNNING))
    app = ShowqTUI(fetcher=CyclingFetcher(first, second))

    async def interact() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("down")
            assert app.navigator.selection == "1"

            await pilot.press("r")
            await pilot.pause()
            assert [job.id for job in app.navigator.jobs] == ["9", "8"]
            assert app.navigator.selection == "1"

            await pilot.press("down")
            assert app.navigator.selection == "9"

    asyncio.run(interact())


def test_details_merge_extra_fields_and_return_on_any_key():
    job = make_job("5", JobStatus.RUNNING, name="foo")
    fetcher = StaticFetcher(_snapshot(job), details={"name": "bar", "state": "running"})
    app = ShowqTUI(fetcher=fetcher)

    async def interact() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("down", "enter")
            await pilot.pause()
            assert fetcher.detail_calls == ["5"]
            assert isinstance(app.screen, DetailScreen)
            assert job.fields == {"name": "bar", "procs": 4, "state": "running"}

            await pilot.press("z")
            await pilot.pause()
            assert isinstance(app.screen, QueueScreen)

    asyncio.run(interact())


def test_details_without_selection_is_a_no_op():
    fetcher = StaticFetcher(_snapshot(*JOBS))
    app = ShowqTUI(fetcher=fetcher)

    async def interact() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("enter")
            await pilot.pause()
            assert isinstance(app.screen, QueueScreen)
            assert fetcher.detail_calls == []

    asyncio.run(interact())


def test_details_for_stale_selection_is_a_no_op():
    fetcher = CyclingFetcher(_snapshot(*JOBS), _snapshot(make_job("7", JobStatus.IDLE)))
    app = ShowqTUI(fetcher=fetcher)

    async def interact() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("down", "r")
            await pilot.pause()
            await pilot.press("right")
            await pilot.pause()
            assert isinstance(app.screen, QueueScreen)
            assert fetcher.detail_calls == []

    asyncio.run(interact())


def test_help_page_opens_and_closes():
    app = ShowqTUI(fetcher=StaticFetcher(_snapshot(*JOBS)))

    async def interact() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press("question_mark")
            await pilot.pause()
            assert isinstance(app.screen, HelpScreen)
            await pilot.press("q")
            await pilot.pause()
            assert isinstance(app.screen, QueueScreen)
            assert app.is_running

    asyncio.run(interact())


@pytest.mark.parametrize("key", ["q", "escape"])
def test_quit_keys_exit(key):
    app = ShowqTUI(fetcher=StaticFetcher(_snapshot(*JOBS)))
    exits = []
    original_exit = app.exit

    def record_exit(*args, **kwargs):
        exits.append(args)
        return original_exit(*args, **kwargs)

    app.exit = record_exit

    async def interact() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            await pilot.press(key)
            assert exits

    asyncio.run(interact())


def test_status_line_shows_fetch_errors():
    app = ShowqTUI(fetcher=StaticFetcher(_snapshot(errors=["showq not found on PATH"])))

    async def interact() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            lines = _queue_lines(app)
            assert lines[0].startswith(f" {EMPTY_MESSAGE}")
            assert lines[-1].startswith(" showq not found on PATH")
            assert app.status_severity == "warning"

    asyncio.run(interact())


def test_status_line_shows_hint_without_errors():
    app = ShowqTUI(fetcher=StaticFetcher(_snapshot(*JOBS)))

    async def interact() -> None:
        async with app.run_test() as pilot:
            await pilot.pause()
            assert _queue_lines(app)[-1].startswith(f" {DEFAULT_HINT}")

    asyncio.run(interact())
