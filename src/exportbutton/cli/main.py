#!/usr/bin/env python3
"""
exportbutton: export the selected timeline sequences through the encoder queue.

The command line stands in for the export panel: it edits the persisted
settings, probes the scripting host and runs one export action against it,
either a real host reached through a bridge command or a simulated host
described by a JSON project file.
"""

from __future__ import annotations

# Standard library imports
import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

# Third-party imports
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Local application imports
from ..config import AppConfig, ExportSettings, create_config_from_env
from ..core.constants import (
    AUDIO_PRESET_KEY,
    DIRECT_EXPORT_KEY,
    DOWNLOAD_ENABLED_KEY,
    FIXED_FOLDER_KEY,
    FOLDER_DEPTH_KEY,
    FOLDER_NAME_KEY,
    NAMING_PATTERN_KEY,
    USE_IN_OUT_KEY,
    VIDEO_PRESET_KEY,
)
from ..core.errors import ExportError, HostUnavailableError
from ..core.types import ExportOutcome
from ..host.remote import CommandTransport, RemoteCapability, ScriptBridge
from ..host.simulated import SimulatedHost
from ..output.logger import ExportLogger
from ..processing.export import ExportController
from ..settings.store import JsonSettingsStore

console = Console()

SETTING_ALIASES = {
    "video-preset": VIDEO_PRESET_KEY,
    "audio-preset": AUDIO_PRESET_KEY,
    "naming-pattern": NAMING_PATTERN_KEY,
    "folder-name": FOLDER_NAME_KEY,
    "folder-depth": FOLDER_DEPTH_KEY,
    "fixed-folder": FIXED_FOLDER_KEY,
    "download": DOWNLOAD_ENABLED_KEY,
    "in-out": USE_IN_OUT_KEY,
    "direct": DIRECT_EXPORT_KEY,
}


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    p = argparse.ArgumentParser(
        prog="exportbutton",
        description="Export selected sequences with versioned filenames through the encoder queue.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument("--settings", type=Path, help="Settings file. Defaults to the configured settings_file")
    p.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help=f"Persist a setting; KEY is a store key or one of: {', '.join(SETTING_ALIASES)}",
    )
    p.add_argument("--show-settings", action="store_true", help="Print the effective export settings and exit")
    host = p.add_mutually_exclusive_group()
    host.add_argument("--simulate", type=Path, metavar="PROJECT_JSON", help="Run against a simulated host")
    host.add_argument("--host-command", metavar="CMD", help="Bridge command evaluating host scripts from stdin")
    p.add_argument("--check-host", action="store_true", help="Probe the scripting host and exit")
    p.add_argument("--log-file", type=Path, help="Append the debug log to this file")
    p.add_argument("--show-log", action="store_true", help="Print the full debug log after the export")
    return p.parse_args(argv)


def apply_assignments(store: JsonSettingsStore, assignments: list[str]) -> list[tuple[str, str]]:
    """Write KEY=VALUE pairs into the store.

    Raises:
        ValueError: On an assignment without '='.
    """
    applied = []
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected KEY=VALUE, got {assignment!r}")
        key = SETTING_ALIASES.get(key.strip(), key.strip())
        store.set(key, value)
        applied.append((key, value))
    return applied


def build_remote(args: argparse.Namespace, config: AppConfig) -> RemoteCapability | None:
    if args.simulate:
        return SimulatedHost.from_file(args.simulate)
    if args.host_command:
        return ScriptBridge(CommandTransport(args.host_command, timeout=config.timeouts.remote_call_sec))
    return None


def create_settings_table(settings: ExportSettings) -> Panel:
    """Build the panel describing the effective export settings."""
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column(style="dim")
    table.add_column()
    table.add_row("Video preset:", settings.video_preset or "(platform default)")
    table.add_row("Audio preset:", settings.audio_preset or "(platform default)")
    table.add_row("Naming:", settings.naming_pattern)
    if settings.download_enabled:
        table.add_row("Output:", settings.fixed_folder or "(Downloads)")
    else:
        table.add_row("Output:", f"{settings.folder_name} (depth {settings.folder_depth})")
    table.add_row("In/Out only:", "yes" if settings.use_in_out else "no")
    table.add_row("Direct export:", "yes" if settings.direct_export else "no")
    return Panel(table, title="[bold cyan]Export Settings[/bold cyan]", border_style="cyan", title_align="left")


def create_summary(outcome: ExportOutcome) -> Panel:
    summary_table = Table(show_header=False, box=None, padding=(0, 1))
    summary_table.add_column(style="dim")
    summary_table.add_column()
    summary_table.add_row("Mode:", outcome.mode.value)
    summary_table.add_row("Status:", outcome.status)
    summary_table.add_row("Queued OK:", f"[green]{outcome.success_count}[/]")
    summary_table.add_row("Failed:", f"[red]{outcome.error_count}[/]" if outcome.error_count else "0")
    if outcome.skipped_count:
        summary_table.add_row("Skipped:", str(outcome.skipped_count))
    summary_table.add_row("Encoder started:", "yes" if outcome.started else "no")
    for path in outcome.output_paths:
        summary_table.add_row("Output:", path)
    for failure in outcome.failures:
        summary_table.add_row("Error:", f"{failure.name or '?'} ({failure.step}): {failure.reason}")
    return Panel(summary_table, title="[bold cyan]Summary[/bold cyan]", border_style="cyan", title_align="left")


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    args = parse_args(argv)
    config = create_config_from_env()
    store = JsonSettingsStore(args.settings or config.paths.settings_file)

    try:
        for key, value in apply_assignments(store, args.assignments):
            console.print(f"[green]Saved[/] {key} = {value!r}")
        settings = ExportSettings.from_store(store)
    except ValueError as ex:
        console.print(f"[bold red]Invalid settings:[/] {ex}")
        return 2

    if args.show_settings:
        console.print(create_settings_table(settings))
        return 0

    remote = build_remote(args, config)
    if remote is None:
        if args.assignments:
            return 0
        console.print("[bold red]No host:[/] pass --simulate PROJECT_JSON or --host-command CMD")
        return 2

    logger = ExportLogger(args.log_file or config.paths.log_file, console=console)
    controller = ExportController(remote, store, logger, config=config)

    if args.check_host:
        try:
            asyncio.run(controller.check_host())
        except HostUnavailableError as ex:
            console.print(f"[bold red]Host unavailable:[/] {ex}")
            return 2
        console.print("[bold green]Host OK[/]")
        return 0

    console.print(create_settings_table(settings))
    try:
        outcome = asyncio.run(controller.handle_export())
    except ExportError as ex:
        console.print(f"[bold red]{logger.status}[/] {ex}")
        return 2
    except KeyboardInterrupt:
        console.print("Interrupted.")
        return 130

    console.print()
    console.print(create_summary(outcome))
    if args.show_log:
        console.print(logger.get_panel())

    return 0 if outcome.ok else 1


if __name__ == "__main__":
    sys.exit(main())
