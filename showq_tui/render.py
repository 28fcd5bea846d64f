"""Turn job lists into fixed-size frames of styled text.

Everything here is independent of Textual: a :class:`Frame` is a list of rich
``Text`` lines exactly as tall as the terminal, and the widgets in
:mod:`showq_tui.app` simply display it.  Lines past the bottom of the frame
wrap around to the top instead of scrolling.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from rich.cells import cell_len, set_cell_size
from rich.style import Style
from rich.text import Text

from .data import Job, JobStatus
from .layout import ColumnLayout, layout_for
from .ui_config import STATUS_COLORS, STATUS_ORDER, field_info

__all__ = [
    "DEFAULT_HINT",
    "EMPTY_MESSAGE",
    "Frame",
    "detail_frame",
    "format_cell",
    "help_frame",
    "queue_frame",
    "render_header",
    "render_job_row",
    "table_lines",
    "text_line",
]

DEFAULT_HINT = "Press H or ? for help, Q or ESC to quit."
EMPTY_MESSAGE = "No jobs in the queue. Press R to refresh."
HELP_TITLE = "List of commands - Press any key to go back"
DETAIL_TITLE = "Job details - Press any key to go back"

HELP_LINES: tuple[tuple[int, str], ...] = (
    (2, "  H or ?        Display this help page"),
    (3, "  Q or ESC      Quit"),
    (5, "  Up/Down       Highlight previous/next job"),
    (6, "  Enter/Space   Display more information about the highlighted job"),
    (7, "  R             Refresh the list of jobs"),
)

# Shown at the top of the details page; every other field is listed below.
DETAIL_SUMMARY_KEYS = ("id", "name", "procs", "walltime", "status")

REVERSE = Style(reverse=True)


class Frame:
    """A screenful of lines addressed modulo the terminal height."""

    def __init__(self, width: int, height: int) -> None:
        self.width = max(width, 0)
        self.height = max(height, 1)
        self.lines: list[Text] = [Text() for _ in range(self.height)]

    def put(self, line: int, text: Text) -> None:
        self.lines[line % self.height] = text

    def plain_lines(self) -> list[str]:
        return [line.plain for line in self.lines]

    def to_text(self) -> Text:
        return Text("\n", no_wrap=True, overflow="crop").join(self.lines)


def _display_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, JobStatus):
        return value.value
    return str(value)


def _fit(value: Any, width: int) -> str:
    """Right-justify *value* in *width* cells, truncating longer values."""

    text = _display_value(value)
    length = cell_len(text)
    if length >= width:
        return set_cell_size(text, width)
    return " " * (width - length) + text


def format_cell(value: Any, width: int) -> str:
    """Return a cell of exactly ``width + 2`` columns."""

    return f" {_fit(value, width)} "


def text_line(message: str, width: int, style: Optional[Style | str] = None) -> Text:
    """Full-width, left-aligned line with one space of padding on each side."""

    inner = max(width - 2, 0)
    return Text(f" {set_cell_size(message, inner)} ", style=style or "")


def render_header(layout: ColumnLayout) -> Text:
    line = Text()
    for key, width in layout.columns():
        line.append(format_cell(field_info(key).label, width), style=REVERSE)
    return line


def render_job_row(
    job: Job,
    layout: ColumnLayout,
    index: int,
    *,
    selected: bool = False,
) -> Text:
    """Render *job* as the *index*-th row of its status group."""

    colors = STATUS_COLORS[job.status]
    style = Style.parse(colors[index % len(colors)])
    if selected:
        style += REVERSE
    line = Text()
    for key, width in layout.columns():
        line.append(format_cell(job.get(key), width), style=style)
    return line


def _group_by_status(jobs: Iterable[Job]) -> dict[JobStatus, list[Job]]:
    groups: dict[JobStatus, list[Job]] = {status: [] for status in STATUS_ORDER}
    for job in jobs:
        groups[job.status].append(job)
    return groups


def table_lines(jobs: Sequence[Job], selection: Optional[str], width: int) -> list[Text]:
    """Return header, rows and separator for every non-empty status group."""

    lines: list[Text] = []
    groups = _group_by_status(jobs)
    for status in STATUS_ORDER:
        group = groups[status]
        if not group:
            continue
        layout = layout_for(status, width)
        lines.append(render_header(layout))
        lines.extend(
            render_job_row(job, layout, index, selected=job.id == selection)
            for index, job in enumerate(group)
        )
        lines.append(Text())
    return lines


def queue_frame(
    jobs: Sequence[Job],
    selection: Optional[str],
    width: int,
    height: int,
    *,
    message: Optional[str] = None,
    message_style: Optional[Style | str] = None,
) -> Frame:
    """Render the main view: grouped tables plus the status line at the bottom."""

    frame = Frame(width, height)
    if jobs:
        for number, line in enumerate(table_lines(jobs, selection, width)):
            frame.put(number, line)
    else:
        frame.put(0, text_line(EMPTY_MESSAGE, width))
    if isinstance(message_style, str):
        message_style = Style.parse(message_style)
    frame.put(-1, text_line(message or DEFAULT_HINT, width, REVERSE + message_style))
    return frame


def help_frame(width: int, height: int) -> Frame:
    frame = Frame(width, height)
    frame.put(0, text_line(HELP_TITLE, width, REVERSE))
    for number, message in HELP_LINES:
        frame.put(number, text_line(message, width))
    return frame


def detail_frame(job: Job, width: int, height: int) -> Frame:
    """Render the key/value page for a single job."""

    frame = Frame(width, height)
    frame.put(0, text_line(DETAIL_TITLE, width, REVERSE))

    summary = (
        f"Job ID: {_display_value(job.id)}",
        f"Job name: {_display_value(job.get('name'))}",
        f"Number of procs: {_display_value(job.get('procs'))}",
        f"Walltime limit: {_display_value(job.get('walltime'))}",
    )
    line = 1
    for message in summary:
        line += 1
        frame.put(line, text_line(message, width))

    line += 2
    status_style = STATUS_COLORS[job.status][0]
    frame.put(line, text_line(f"Status: {job.status.label}", width, status_style))

    line += 1
    for key in job.keys():
        if key in DETAIL_SUMMARY_KEYS:
            continue
        line += 1
        label = field_info(key).label
        frame.put(line, text_line(f"{label}: {_display_value(job.get(key))}", width))
    return frame
