"""
Debug log and status line for export actions.

The log is append-only: entries are never trimmed or cleared, so a failed
batch can be diagnosed after the fact. The status line only ever shows the
latest terminal outcome.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

LEVEL_STYLES = {
    "info": "",
    "success": "green",
    "warning": "yellow",
    "error": "bold red",
}


class ExportLogger:
    """Logger that keeps a full history and optionally mirrors it to console and file.

    Args:
        log_file: Optional path entries are appended to
        console: Optional Rich console entries are echoed to
    """

    def __init__(self, log_file: Optional[Path] = None, console: Optional[Console] = None) -> None:
        self.log_file = log_file
        self.console = console
        self.entries: List[Text] = []
        self.status = "Ready"
        self.status_level = "info"

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(f"\n{'='*60}\n")
                f.write(f"Session started: {datetime.now().isoformat()}\n")
                f.write(f"{'='*60}\n")

    def log(self, message: str, level: str = "info") -> None:
        """Append a timestamped entry.

        Args:
            message: The message to log
            level: One of info, success, warning, error
        """
        timestamp = datetime.now().strftime("%H:%M:%S")
        entry = Text(f"[{timestamp}] {message}", style=LEVEL_STYLES.get(level, ""))
        self.entries.append(entry)

        if self.console is not None:
            self.console.print(entry)

        if self.log_file:
            try:
                with open(self.log_file, 'a', encoding='utf-8') as f:
                    f.write(f"{entry.plain} ({level})\n")
            except OSError:
                pass  # Don't fail an export on logging errors

    def info(self, message: str) -> None:
        self.log(message, "info")

    def success(self, message: str) -> None:
        self.log(message, "success")

    def warning(self, message: str) -> None:
        self.log(message, "warning")

    def error(self, message: str) -> None:
        self.log(message, "error")

    def set_status(self, message: str, level: str = "info") -> None:
        """Replace the status line and record the change in the log."""
        self.status = message
        self.status_level = level
        self.log(f"Status: {message}", level)

    @property
    def lines(self) -> List[str]:
        """Plain-text copy of the history, e.g. for copying to a clipboard."""
        return [entry.plain for entry in self.entries]

    def get_panel(self, title: str = "Debug Log", max_lines: Optional[int] = None) -> Panel:
        """Get a Rich Panel with the most recent entries."""
        visible = self.entries if max_lines is None else self.entries[-max_lines:]
        combined = Text("\n").join(visible)
        return Panel(
            combined,
            title=f"[cyan]{title} [{len(visible)} of {len(self.entries)}][/]",
            border_style="cyan",
            title_align="left",
        )
