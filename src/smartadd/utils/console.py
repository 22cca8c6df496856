"""Console output for the smartadd CLI.

Thin layer over rich: themed status lines, the selection summary and a
progress bar that follows the pipeline's weighted progress reports.
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn
from rich.text import Text
from rich.theme import Theme


class StatusType(Enum):
    """Standard status types with associated symbols."""
    SUCCESS = ("[✓]", "success", "green")
    ERROR = ("[x]", "error", "red")
    WARNING = ("[!]", "warning", "yellow")
    INFO = ("[i]", "info", "cyan")


@dataclass
class ThemeColors:
    """Color definitions for a theme."""
    info: str
    warning: str
    error: str
    success: str
    highlight: str
    panel_border: str
    path: str
    number: str
    dim: str


THEMES = {
    'manhattan': ThemeColors(
        info='cyan',
        warning='yellow',
        error='red',
        success='green',
        highlight='bright_cyan',
        panel_border='bright_cyan',
        path='white',
        number='bright_blue',
        dim='bright_black',
    ),
    'sunset': ThemeColors(
        info='orange3',
        warning='yellow',
        error='red3',
        success='green',
        highlight='bold orange1',
        panel_border='orange3',
        path='wheat1',
        number='orange1',
        dim='grey50',
    ),
}


class ConsoleManager:
    """Themed console used by the CLI commands."""

    def __init__(self, theme: str = "manhattan", file: Optional[Any] = None):
        self.theme_name = theme
        self.theme_colors = THEMES.get(theme, THEMES['manhattan'])
        self.console = Console(
            theme=self._create_rich_theme(),
            file=file or sys.stdout,
            highlight=False,
        )

    def _create_rich_theme(self) -> Theme:
        colors = self.theme_colors
        return Theme({
            'info': colors.info,
            'warning': colors.warning,
            'error': colors.error,
            'success': colors.success,
            'highlight': colors.highlight,
            'panel.border': colors.panel_border,
            'path': colors.path,
            'number': colors.number,
            'dim': colors.dim,
        })

    def print(self, *args, **kwargs):
        self.console.print(*args, **kwargs)

    def print_status(self, status: StatusType, message: str):
        """Print a status line with icon."""
        icon, _, color = status.value
        status_text = Text()
        status_text.append(f"{icon} ", style=color)
        status_text.append(message)
        self.console.print(status_text)

    def print_error(self, message: str):
        self.print_status(StatusType.ERROR, message)

    def print_success(self, message: str):
        self.print_status(StatusType.SUCCESS, message)

    def print_info(self, message: str):
        self.print_status(StatusType.INFO, message)

    def print_warning(self, message: str):
        self.print_status(StatusType.WARNING, message)

    def print_panel(self, body: str, title: str):
        """Print preformatted text (such as a tree rendering) in a bordered panel."""
        self.console.print(Panel(Text(body), title=title, border_style="panel.border", expand=False))

    def progress(self, title: str) -> 'RichProgressReporter':
        return RichProgressReporter(self.console, title)


class RichProgressReporter:
    """Progress bar driven by weighted increments out of 100.

    Use as a context manager; report() may be called from the event loop
    thread while the bar is live.
    """

    def __init__(self, console: Console, title: str):
        self._progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        )
        self._title = title
        self._task_id = None

    def __enter__(self):
        self._progress.start()
        self._task_id = self._progress.add_task(self._title, total=100)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._progress.stop()

    def report(self, increment: float, message: str) -> None:
        if self._task_id is None:
            return
        self._progress.update(self._task_id, advance=increment, description=message)
