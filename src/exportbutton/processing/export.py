"""
Export entry point: decides between batch and single-item export.

Batch export needs the host's project panel selection. When that query is
unavailable, empty, broken or slow, or when direct in-app export is enabled,
the active sequence is exported on its own instead.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

from ..config import AppConfig, ExportSettings
from ..core.errors import BatchInProgressError, ExportError, HostUnavailableError, StepError
from ..core.types import ExportMode, ExportOutcome, ItemFailure, SequenceRef
from ..host.platform import PlatformDefaults
from ..host.remote import RemoteCapability
from ..output.logger import ExportLogger
from ..settings.store import SettingsStore
from ..utils.json import parse_host_response
from .batch import BatchExportOrchestrator
from .targets import TargetResolver
from .versioning import DirectoryLister, list_files


class ExportController:
    """Runs one export action per ``handle_export`` call."""

    def __init__(
        self,
        remote: RemoteCapability,
        store: SettingsStore,
        logger: ExportLogger,
        *,
        config: AppConfig | None = None,
        platform: PlatformDefaults | None = None,
        clock: Callable[[], datetime] = datetime.now,
        lister: DirectoryLister = list_files,
    ) -> None:
        self.remote = remote
        self.store = store
        self.logger = logger
        self.config = config or AppConfig()
        self.platform = platform
        self.clock = clock
        self.lister = lister
        self.busy = False

    async def handle_export(self, cancel_event: asyncio.Event | None = None) -> ExportOutcome:
        """Export the selected sequences, or the active one.

        Raises:
            HostUnavailableError: If the scripting host does not respond.
            ExportError: If the stored settings cannot be read.
            BatchInProgressError: If an export is already running.
        """
        if self.busy:
            raise BatchInProgressError("an export is already running")
        self.busy = True
        try:
            self.logger.set_status("Checking sequence...", "warning")
            await self.check_host()
            settings = self.load_settings()
            resolver = TargetResolver(
                self.remote,
                settings,
                self.logger,
                platform=self.platform,
                call_timeout=self.config.timeouts.remote_call_sec,
                clock=self.clock,
                lister=self.lister,
            )

            if settings.direct_export:
                self.logger.info("Direct export enabled, exporting the active sequence only")
                return await self.export_single(resolver, settings)

            selection = await self.query_selection()
            if not selection:
                return await self.export_single(resolver, settings)

            orchestrator = BatchExportOrchestrator(self.remote, resolver, self.logger)
            return await orchestrator.run(selection, cancel_event)
        finally:
            self.busy = False

    async def check_host(self) -> None:
        """Make sure the scripting engine evaluates code at all."""
        try:
            result = await asyncio.wait_for(self.remote.ping(), timeout=self.config.timeouts.remote_call_sec)
        except Exception as ex:
            result = f"{type(ex).__name__}: {ex}"

        if str(result).strip() != "2":
            self.logger.error(f"Scripting engine not responding: {result!r}")
            self.logger.set_status("Script error - check log", "error")
            raise HostUnavailableError(f"host did not evaluate 1+1: {result!r}")

    def load_settings(self) -> ExportSettings:
        try:
            return ExportSettings.from_store(self.store)
        except ValueError as ex:
            self.logger.error(f"Invalid settings: {ex}")
            self.logger.set_status("Invalid settings - check log", "error")
            raise ExportError(str(ex)) from ex

    async def query_selection(self) -> list[SequenceRef]:
        """Sequences selected in the project panel; empty means fall back."""
        timeout = self.config.timeouts.selection_query_sec
        try:
            raw = await asyncio.wait_for(self.remote.get_selected_sequences(), timeout=timeout)
            data = parse_host_response(raw)
            selection = [
                SequenceRef(name=str(seq["name"]), node_id=str(seq.get("nodeId") or ""))
                for seq in data.get("sequences") or []
            ]
        except asyncio.TimeoutError:
            self.logger.info(f"Selection query timed out after {timeout}s, using active sequence")
            return []
        except Exception as ex:
            self.logger.info(f"Selection unavailable ({type(ex).__name__}: {ex}), using active sequence")
            return []

        if not selection:
            self.logger.info("No sequences selected, using active sequence")
        else:
            self.logger.info(f"{len(selection)} sequence(s) selected: {', '.join(s.name for s in selection)}")
        return selection

    async def export_single(self, resolver: TargetResolver, settings: ExportSettings) -> ExportOutcome:
        """Export the host's active sequence and start encoding immediately."""
        direct = settings.direct_export
        outcome = ExportOutcome(mode=ExportMode.DIRECT if direct else ExportMode.SINGLE, total=1)
        name = ""
        try:
            active = await resolver.call("active-sequence", self.remote.get_active_sequence())
            name = str(active.get("name") or "")
            if not name:
                raise StepError("active-sequence", "No active sequence")
            self.logger.success(f"Active sequence: {name}")

            video = await resolver.call("video-check", self.remote.has_video_tracks())
            target = await resolver.build_target(name, bool(video.get("hasVideo")))
            filename = await resolver.versioned_filename(target)
            self.logger.set_status(f"Exporting {filename}...", "warning")

            if direct:
                # In-app render does not derive the container from the preset
                output_path = target.output_path(filename, with_extension=True)
                await resolver.call(
                    "submit", self.remote.export_direct(output_path, target.preset_path, settings.use_in_out)
                )
            else:
                output_path = target.output_path(filename)
                await resolver.call(
                    "submit", self.remote.export_to_ame(output_path, target.preset_path, settings.use_in_out)
                )
        except StepError as ex:
            return self._failed(outcome, ItemFailure(name, ex.step, ex.reason), ex.reason)
        except Exception as ex:
            return self._failed(outcome, ItemFailure(name, "unexpected", f"{type(ex).__name__}: {ex}"), "")

        outcome.success_count = 1
        outcome.started = True
        outcome.output_paths.append(output_path)
        outcome.status = f"{filename} started!"
        self.logger.set_status(outcome.status, "success")
        return outcome

    def _failed(self, outcome: ExportOutcome, failure: ItemFailure, status: str) -> ExportOutcome:
        outcome.error_count = 1
        outcome.failures.append(failure)
        outcome.status = status or "Export failed"
        self.logger.error(f"{failure.step} failed: {failure.reason}")
        self.logger.set_status(outcome.status, "error")
        return outcome
