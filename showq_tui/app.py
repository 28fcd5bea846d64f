"""Textual application providing a Moab job queue dashboard."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.pilot import Pilot
from textual.screen import Screen
from textual.widget import Widget

from .data import Job, QueueSnapshot
from .fetcher import ShowqFetcher
from .navigation import Navigator
from .render import EMPTY_MESSAGE, Frame, detail_frame, help_frame, queue_frame, table_lines

logger = logging.getLogger(__name__)

SEVERITY_STYLES = {
    "info": None,
    "warning": "yellow",
    "error": "red",
}


class FrameView(Widget):
    """Display a :class:`Frame` built for the widget's current size."""

    DEFAULT_CSS = """
    FrameView {
        width: 1fr;
        height: 1fr;
    }
    """

    def __init__(self, build: Callable[[int, int], Frame], **kwargs) -> None:
        super().__init__(**kwargs)
        self._build = build

    def render(self) -> Text:
        return self._build(self.size.width, self.size.height).to_text()


class QueueScreen(Screen[None]):
    """Main view listing the jobs grouped by status."""

    BINDINGS = [
        Binding("up", "app.select_previous", "Previous job", show=False),
        Binding("down", "app.select_next", "Next job", show=False),
        Binding("enter,space,right", "app.show_details", "Details", show=False),
        Binding("q,Q,escape", "app.quit", "Quit", show=False),
        Binding("r,R", "app.refresh", "Refresh", show=False),
        Binding("h,H,question_mark", "app.show_help", "Help", show=False),
    ]

    def compose(self) -> ComposeResult:
        yield FrameView(self.app.render_queue, id="queue")


class PageScreen(Screen[None]):
    """Full-screen page that goes back to the job list on any key."""

    def __init__(self, build: Callable[[int, int], Frame]) -> None:
        super().__init__()
        self._build = build

    def compose(self) -> ComposeResult:
        yield FrameView(self._build)

    def on_key(self, event: events.Key) -> None:
        event.stop()
        self.app.pop_screen()


class HelpScreen(PageScreen):
    def __init__(self) -> None:
        super().__init__(help_frame)


class DetailScreen(PageScreen):
    def __init__(self, job: Job) -> None:
        super().__init__(lambda width, height: detail_frame(job, width, height))
        self.job = job


class ShowqTUI(App[None]):
    """Main Textual application class.

    The application owns the job list and the selection.  Every action runs to
    completion before the next key is handled, so a slow ``showq`` blocks the
    dashboard until it returns.
    """

    CSS = """
    Screen {
        background: black;
        overflow: hidden;
    }
    """

    def __init__(self, *, fetcher: Optional[ShowqFetcher] = None) -> None:
        super().__init__()
        self.fetcher = fetcher or ShowqFetcher()
        self.navigator = Navigator()
        self.snapshot: Optional[QueueSnapshot] = None
        self.status_message: Optional[str] = None
        self.status_severity: str = "info"

    def get_default_screen(self) -> Screen:
        return QueueScreen()

    async def on_mount(self) -> None:
        await self.refresh_data()

    def render_queue(self, width: int, height: int) -> Frame:
        return queue_frame(
            self.navigator.jobs,
            self.navigator.selection,
            width,
            height,
            message=self.status_message,
            message_style=SEVERITY_STYLES.get(self.status_severity),
        )

    def set_status(self, message: Optional[str], *, severity: str = "info") -> None:
        self.status_message = message
        self.status_severity = severity

    async def refresh_data(self) -> None:
        try:
            snapshot = await self.fetcher.fetch_snapshot()
        except Exception as exc:  # pragma: no cover - defensive
            self.set_status(f"Failed to refresh job list: {exc}", severity="error")
            self.log.error("Failed to refresh job list", exc)
            logger.exception("Failed to refresh job list")
        else:
            self.snapshot = snapshot
            self.navigator.replace_jobs(snapshot.jobs)
            if snapshot.errors:
                self.set_status("; ".join(snapshot.errors), severity="warning")
            else:
                self.set_status(None)
        self._redraw()

    def _redraw(self) -> None:
        for view in self.screen.query(FrameView):
            view.refresh()

    def action_select_next(self) -> None:
        self.navigator.next()
        self._redraw()

    def action_select_previous(self) -> None:
        self.navigator.previous()
        self._redraw()

    async def action_refresh(self) -> None:
        await self.refresh_data()

    async def action_show_details(self) -> None:
        job = self.navigator.selected_job()
        if job is None:
            return
        job.merge(await self.fetcher.fetch_details(job.id))
        await self.push_screen(DetailScreen(job))

    async def action_show_help(self) -> None:
        await self.push_screen(HelpScreen())


def snapshot_to_text(snapshot: QueueSnapshot, width: int) -> Text:
    """Return the grouped job tables of *snapshot* as a single rich ``Text``."""

    lines = table_lines(snapshot.jobs, None, width)
    if not lines:
        lines = [Text(f" {EMPTY_MESSAGE}")]
    return Text("\n", no_wrap=True, overflow="crop").join(lines)


def _env_flag(name: str) -> bool:
    """Return ``True`` when *name* is set to a truthy value."""

    value = os.getenv(name)
    if value is None:
        return False
    return value.strip().lower() not in {"", "0", "false", "no"}


def _configure_logging(log_file: Optional[str], verbose: bool) -> None:
    # Log records would corrupt the TUI, so they only go to a file.
    if not log_file:
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run(
    argv: Optional[Sequence[str]] = None,
    *,
    fetcher: Optional[ShowqFetcher] = None,
) -> None:
    """Entry point used by the ``showq-tui`` console script."""

    parser = argparse.ArgumentParser(description="Moab showq job queue dashboard")
    parser.add_argument(
        "--inline",
        action="store_true",
        help="Fetch jobs once and print the tables instead of starting the TUI.",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Display bundled sample jobs instead of querying showq.",
    )
    parser.add_argument(
        "--user",
        metavar="NAME",
        help="Show the jobs of NAME (default: $USER).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        metavar="SECONDS",
        help="Time limit for each showq/checkjob call (default: 30).",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        default=os.getenv("SHOWQ_TUI_LOG_FILE"),
        help="Write log messages to PATH.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages, including every command that is run.",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_file, args.verbose)

    fetcher_instance = fetcher or ShowqFetcher(
        user=args.user,
        timeout=args.timeout,
        force_sample=args.sample or _env_flag("SHOWQ_TUI_SAMPLE"),
    )

    if args.inline:
        snapshot = asyncio.run(fetcher_instance.fetch_snapshot())
        console = Console()
        console.print(snapshot_to_text(snapshot, console.width))
        if snapshot.errors:
            for message in snapshot.errors:
                print(message, file=sys.stderr)
        return

    headless = _env_flag("SHOWQ_TUI_HEADLESS")
    auto_pilot = None
    auto_flag = os.getenv("SHOWQ_TUI_AUTOPILOT", "").strip().lower()

    if auto_flag in {"quit", "exit"}:

        async def _auto_quit(pilot: Pilot) -> None:
            await pilot.pause(0.1)
            await pilot.press("q")

        auto_pilot = _auto_quit

    app = ShowqTUI(fetcher=fetcher_instance)
    app.run(headless=headless, auto_pilot=auto_pilot)


__all__ = ["DetailScreen", "HelpScreen", "QueueScreen", "ShowqTUI", "run", "snapshot_to_text"]
