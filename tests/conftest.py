from __future__ import annotations

import asyncio
import json
from datetime import datetime
from pathlib import Path

import pytest

from exportbutton.core.constants import AUDIO_PRESET_KEY, VIDEO_PRESET_KEY
from exportbutton.output.logger import ExportLogger
from exportbutton.settings.store import MemorySettingsStore

HANG = object()

FIXED_NOW = datetime(2024, 3, 9, 14, 5, 30)

VIDEO_PRESET = "/presets/H.264 Master.epr"
AUDIO_PRESET = "/presets/WAV 48kHz 16 bit.epr"


def reply(**payload) -> str:
    return json.dumps(payload)


class FakeHost:
    """Scriptable RemoteCapability recording every call in order.

    ``overrides`` maps a method name to a raw reply string, an exception to
    raise, a callable receiving the call arguments, or HANG to never answer.
    """

    def __init__(
        self,
        *,
        selected: list[str] | None = None,
        video: dict[str, bool] | None = None,
        active: str = "Main Edit",
        exports_path: Path | None = None,
        downloads_path: Path | None = None,
        is_windows: bool = False,
    ) -> None:
        self.selected = selected or []
        self.video = video or {}
        self.active = active
        self.exports_path = exports_path
        self.downloads_path = downloads_path
        self.is_windows = is_windows
        self.overrides: dict[str, object] = {}
        self.calls: list[tuple] = []
        self._jobs = 0

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def _respond(self, method: str, default, *args) -> str:
        self.calls.append((method, *args))
        override = self.overrides.get(method)
        if override is None:
            return default()
        if override is HANG:
            await asyncio.Event().wait()
        if isinstance(override, Exception):
            raise override
        if callable(override):
            result = override(*args)
            return default() if result is None else result
        return override

    async def ping(self) -> str:
        return await self._respond("ping", lambda: "2")

    async def get_selected_sequences(self) -> str:
        def default():
            sequences = [{"name": n, "nodeId": str(i)} for i, n in enumerate(self.selected)]
            return reply(success=True, sequences=sequences, count=len(sequences))

        return await self._respond("getSelectedSequences", default)

    async def has_video_for_sequence(self, name: str) -> str:
        return await self._respond(
            "hasVideoForSequence", lambda: reply(success=True, hasVideo=self.video.get(name, True)), name
        )

    async def has_video_tracks(self) -> str:
        return await self._respond(
            "hasVideoTracks", lambda: reply(success=True, hasVideo=self.video.get(self.active, True))
        )

    async def get_active_sequence(self) -> str:
        return await self._respond("getActiveSequence", lambda: reply(success=True, name=self.active))

    async def get_system_info(self) -> str:
        return await self._respond(
            "getSystemInfo",
            lambda: reply(isWindows=self.is_windows, downloadsPath=str(self.downloads_path or "")),
        )

    async def get_project_exports_path(self, folder_name: str, depth: int) -> str:
        return await self._respond(
            "getProjectExportsPathWithDepth",
            lambda: reply(success=True, path=str(self.exports_path)),
            folder_name,
            depth,
        )

    async def export_sequence_by_name(self, name: str, output_path: str, preset_path: str) -> str:
        def default():
            self._jobs += 1
            return reply(success=True, jobID=f"job-{self._jobs}")

        return await self._respond("exportSequenceByName", default, name, output_path, preset_path)

    async def start_batch(self) -> str:
        return await self._respond("startAMEBatch", lambda: reply(success=True))

    async def export_to_ame(self, output_path: str, preset_path: str, use_in_out: bool) -> str:
        return await self._respond("exportToAME", lambda: reply(success=True), output_path, preset_path, use_in_out)

    async def export_direct(self, output_path: str, preset_path: str, use_in_out: bool) -> str:
        return await self._respond(
            "exportDirectInPremiere", lambda: reply(success=True), output_path, preset_path, use_in_out
        )


@pytest.fixture
def exports_dir(tmp_path: Path) -> Path:
    path = tmp_path / "EXPORTS"
    path.mkdir()
    return path


@pytest.fixture
def host(tmp_path: Path, exports_dir: Path) -> FakeHost:
    return FakeHost(exports_path=exports_dir, downloads_path=tmp_path / "Downloads")


@pytest.fixture
def store() -> MemorySettingsStore:
    return MemorySettingsStore({VIDEO_PRESET_KEY: VIDEO_PRESET, AUDIO_PRESET_KEY: AUDIO_PRESET})


@pytest.fixture
def logger() -> ExportLogger:
    return ExportLogger()
