"""
Progress bar handling for music-tags using the Rich library.

Every parallel pass (extraction, album/artist propagation, removal)
reports through a PassProgressBar. Updates arrive from worker threads,
so the counters are guarded by a lock.

Usage:
    from music_tags.core.progress import PassProgressBar

    with PassProgressBar(total=len(items), description="Extracting") as progress:
        ...
        progress.update(modified=True)
"""

import threading
from typing import Optional

from rich import get_console
from rich.console import JustifyMethod, OverflowMethod
from rich.highlighter import Highlighter
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    Task,
    TaskID,
)
from rich.style import StyleType
from rich.text import Text
from rich.theme import Theme


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(165,66,129)",
    "bar.finished": "rgb(114,156,31)",
    "bar.pulse": "rgb(165,66,129)",
    "progress.percentage": "white",
})


class SizedTextColumn(ProgressColumn):
    """
    Text column truncated with an ellipsis past a fixed width.
    """

    def __init__(
        self,
        text_format: str,
        style: StyleType = "none",
        justify: JustifyMethod = "left",
        markup: bool = True,
        highlighter: Optional[Highlighter] = None,
        overflow: Optional[OverflowMethod] = None,
        width: int = 20,
    ) -> None:
        self.text_format = text_format
        self.justify: JustifyMethod = justify
        self.style = style
        self.markup = markup
        self.highlighter = highlighter
        self.overflow: Optional[OverflowMethod] = overflow
        self.width = width
        super().__init__()

    def render(self, task: Task) -> Text:
        """Render the column."""
        _text = self.text_format.format(task=task)
        if self.markup:
            text = Text.from_markup(_text, style=self.style, justify=self.justify)
        else:
            text = Text(_text, style=self.style, justify=self.justify)
        if self.highlighter:
            self.highlighter.highlight(text)

        text.truncate(max_width=self.width, overflow=self.overflow, pad=True)
        return text


class PassProgressBar:
    """
    Progress bar for one parallel pass over library items.

    Displays:
    - Description (e.g., "Extracting")
    - Status: ✎ modified, · unchanged, ✗ failed
    - Progress bar
    - Percentage

    Example:
        Extracting      ✎ 120  · 40  ✗ 3       ━━━━━━━━━━━━━━━━━  64%
    """

    def __init__(self, total: int, description: str, status_width: int = 35):
        """
        Initialize the progress bar.

        Args:
            total: Total number of items in the pass.
            description: Description to show on the left.
            status_width: Width of the status column.
        """
        self.total = total
        self.description = description
        self.completed = 0
        self.modified = 0
        self.unchanged = 0
        self.failed = 0
        self._lock = threading.Lock()

        self.console = get_console()

        self.progress = Progress(
            SizedTextColumn(
                "[white]{task.description}",
                overflow="ellipsis",
                width=15,
            ),
            SizedTextColumn(
                "{task.fields[status]}",
                width=status_width,
                style="white",
            ),
            BarColumn(bar_width=40, finished_style="green"),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=self.console,
            transient=False,
            refresh_per_second=10,
        )

        self.task_id: Optional[TaskID] = None
        self._started = False

    def __enter__(self) -> "PassProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        if not self._started:
            self.console.push_theme(PROGRESS_THEME)
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        if self._started:
            self.progress.stop()
            self.console.pop_theme()
            self._started = False

    def _get_status_text(self) -> str:
        parts = [
            f"[magenta]✎ {self.modified}[/magenta]",
            f"[white]· {self.unchanged}[/white]",
        ]
        if self.failed > 0:
            parts.append(f"[red]✗ {self.failed}[/red]")
        return "  ".join(parts)

    def update(self, modified: bool = False, failed: bool = False) -> None:
        """
        Record one finished item.

        Args:
            modified: The item's tag list changed.
            failed: The item raised and was skipped.
        """
        with self._lock:
            self.completed += 1
            if failed:
                self.failed += 1
            elif modified:
                self.modified += 1
            else:
                self.unchanged += 1

            if self.task_id is not None:
                self.progress.update(
                    self.task_id,
                    completed=self.completed,
                    status=self._get_status_text(),
                )
