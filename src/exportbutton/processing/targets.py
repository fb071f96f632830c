"""
Per-item export parameter resolution.

Turns a sequence name plus the settings snapshot into an ExportTarget:
preset selection, output folder and versioned filename. Shared by the batch
orchestrator and the single-item path.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from ..config import ExportSettings
from ..core.errors import HostResponseError, StepError
from ..core.naming import infer_extension, sanitize_name
from ..core.types import ExportTarget
from ..host.platform import PlatformDefaults
from ..host.remote import RemoteCapability
from ..output.logger import ExportLogger
from ..utils.json import parse_host_response
from .versioning import DirectoryLister, list_files, resolve_next_version


class TargetResolver:
    """Resolves presets, folders and filenames for one export action."""

    def __init__(
        self,
        remote: RemoteCapability,
        settings: ExportSettings,
        logger: ExportLogger,
        *,
        platform: PlatformDefaults | None = None,
        call_timeout: float | None = None,
        clock: Callable[[], datetime] = datetime.now,
        lister: DirectoryLister = list_files,
    ) -> None:
        self.remote = remote
        self.settings = settings
        self.logger = logger
        self.call_timeout = call_timeout
        self.clock = clock
        self.lister = lister
        self._platform = platform

    async def call(self, step: str, request: Awaitable[str], *, require_success: bool = True) -> dict[str, Any]:
        """Await one host call and decode its reply.

        Every failure mode (timeout, transport exception, malformed JSON,
        ``success: false``) is reported as a StepError naming ``step``.
        """
        try:
            raw = await asyncio.wait_for(request, timeout=self.call_timeout)
        except asyncio.TimeoutError as ex:
            raise StepError(step, f"no response after {self.call_timeout}s") from ex
        except Exception as ex:
            raise StepError(step, f"{type(ex).__name__}: {ex}") from ex

        try:
            return parse_host_response(raw, require_success=require_success)
        except HostResponseError as ex:
            raise StepError(step, str(ex)) from ex

    async def platform_defaults(self) -> PlatformDefaults:
        """Platform lookups, fetched from the host once per action."""
        if self._platform is None:
            try:
                self._platform = await asyncio.wait_for(
                    PlatformDefaults.from_host(self.remote), timeout=self.call_timeout
                )
            except asyncio.TimeoutError as ex:
                raise StepError("system-info", f"no response after {self.call_timeout}s") from ex
            except Exception as ex:
                raise StepError("system-info", f"{type(ex).__name__}: {ex}") from ex
        return self._platform

    async def select_preset(self, has_video: bool) -> str:
        configured = self.settings.video_preset if has_video else self.settings.audio_preset
        if configured:
            return configured
        platform = await self.platform_defaults()
        preset = platform.default_preset(has_video)
        if not preset:
            raise StepError("preset", "No preset configured")
        self.logger.info(f"Using default {'video' if has_video else 'audio'} preset: {preset}")
        return preset

    async def resolve_folder(self) -> str:
        """Fixed folder, Downloads, or the project-relative export folder."""
        if self.settings.download_enabled:
            if self.settings.fixed_folder:
                return self.settings.fixed_folder
            platform = await self.platform_defaults()
            if not platform.downloads_path:
                raise StepError("folder", "host reported no Downloads folder")
            return platform.downloads_path

        info = await self.call(
            "folder",
            self.remote.get_project_exports_path(self.settings.folder_name, self.settings.folder_depth),
        )
        path = str(info.get("path") or "")
        if not path:
            raise StepError("folder", f"Cannot find {self.settings.folder_name} folder")
        return path

    async def build_target(self, sequence_name: str, has_video: bool) -> ExportTarget:
        preset = await self.select_preset(has_video)
        folder = await self.resolve_folder()
        return ExportTarget(
            sequence_name=sequence_name,
            clean_name=sanitize_name(sequence_name),
            folder_path=folder,
            preset_path=preset,
            has_video=has_video,
            extension=infer_extension(preset, has_video),
        )

    async def versioned_filename(self, target: ExportTarget) -> str:
        """Render the next free filename for a target; version 1 if the scan fails."""
        # Listing may hit a slow network share
        resolution = await asyncio.to_thread(
            resolve_next_version,
            target.folder_path,
            target.clean_name,
            target.extension,
            self.settings.naming_pattern,
            lister=self.lister,
            now=self.clock(),
        )
        if not resolution.success:
            self.logger.warning(f"Version scan failed, using V1: {resolution.error}")
        return resolution.filename
