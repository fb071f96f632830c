"""
In-process stand-in for the scripting host.

Backed by a JSON project description, it answers every host call the way the
real host does (JSON strings, ``success`` flags) and writes placeholder files
where the encoder would write its output. Useful for dry runs of settings
and naming patterns without the editor running.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from ..core.naming import infer_extension
from ..utils.json import load_json
from ..utils.path import project_exports_path

PLACEHOLDER_CONTENT = "EXPORT PLACEHOLDER"


class SimulatedTrack(BaseModel):
    """A video track; it only counts as content when it has clips and is not muted."""

    clips: int = 0
    muted: bool = False


class SimulatedSequence(BaseModel):
    name: str
    node_id: str = Field(default="", alias="nodeId")
    video_tracks: list[SimulatedTrack] = Field(default_factory=list, alias="videoTracks")

    class Config:
        populate_by_name = True

    @property
    def has_video(self) -> bool:
        return any(track.clips > 0 and not track.muted for track in self.video_tracks)


class SimulatedProject(BaseModel):
    """Project description the simulated host is loaded from."""

    project_path: str | None = Field(default=None, alias="projectPath")
    is_windows: bool = Field(default=False, alias="isWindows")
    downloads_path: str = Field(default="", alias="downloadsPath")
    active_sequence: str | None = Field(default=None, alias="activeSequence")
    selected: list[str] = Field(default_factory=list)
    supports_selection: bool = Field(default=True, alias="supportsSelection")
    sequences: list[SimulatedSequence] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class SimulatedHost:
    """RemoteCapability implementation over a SimulatedProject."""

    def __init__(self, project: SimulatedProject) -> None:
        self.project = project
        self.queue: list[dict[str, Any]] = []
        self.written: list[Path] = []
        self.calls: list[str] = []
        self._job_counter = 0

    @classmethod
    def from_file(cls, path: Path) -> SimulatedHost:
        return cls(SimulatedProject.model_validate(load_json(path)))

    # ---------------
    # Helpers
    # ---------------
    def _find(self, name: str | None) -> SimulatedSequence | None:
        for seq in self.project.sequences:
            if seq.name == name:
                return seq
        return None

    @staticmethod
    def _reply(**payload: Any) -> str:
        return json.dumps(payload)

    def _write_placeholder(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(PLACEHOLDER_CONTENT, encoding="utf-8")
        self.written.append(path)

    # ---------------
    # Host calls
    # ---------------
    async def ping(self) -> str:
        self.calls.append("ping")
        return "2"

    async def get_selected_sequences(self) -> str:
        self.calls.append("getSelectedSequences")
        if not self.project.supports_selection:
            return "EvalScript error."
        sequences = [
            {"name": seq.name, "nodeId": seq.node_id}
            for seq in (self._find(name) for name in self.project.selected)
            if seq is not None
        ]
        return self._reply(success=True, sequences=sequences, count=len(sequences))

    async def has_video_for_sequence(self, name: str) -> str:
        self.calls.append(f"hasVideoForSequence:{name}")
        seq = self._find(name)
        if seq is None:
            return self._reply(success=False, error=f"Sequence not found: {name}")
        return self._reply(success=True, hasVideo=seq.has_video)

    async def has_video_tracks(self) -> str:
        self.calls.append("hasVideoTracks")
        seq = self._find(self.project.active_sequence)
        if seq is None:
            return self._reply(success=False, error="No active sequence")
        return self._reply(success=True, hasVideo=seq.has_video)

    async def get_active_sequence(self) -> str:
        self.calls.append("getActiveSequence")
        seq = self._find(self.project.active_sequence)
        if seq is None:
            return self._reply(success=False, error="No active sequence")
        return self._reply(success=True, name=seq.name, id=seq.node_id)

    async def get_system_info(self) -> str:
        self.calls.append("getSystemInfo")
        return self._reply(
            isWindows=self.project.is_windows,
            downloadsPath=self.project.downloads_path,
            separator="\\" if self.project.is_windows else "/",
        )

    async def get_project_exports_path(self, folder_name: str, depth: int) -> str:
        self.calls.append(f"getProjectExportsPathWithDepth:{folder_name}:{depth}")
        if not self.project.project_path:
            return self._reply(success=False, error="Project has not been saved yet")
        path = project_exports_path(Path(self.project.project_path), folder_name, depth)
        path.mkdir(parents=True, exist_ok=True)
        return self._reply(success=True, path=str(path))

    async def export_sequence_by_name(self, name: str, output_path: str, preset_path: str) -> str:
        self.calls.append(f"exportSequenceByName:{name}")
        seq = self._find(name)
        if seq is None:
            return self._reply(success=False, error=f"Sequence not found: {name}")
        self._job_counter += 1
        job_id = f"job-{self._job_counter}"
        self.queue.append(
            {"jobID": job_id, "outputPath": output_path, "presetPath": preset_path, "hasVideo": seq.has_video}
        )
        return self._reply(success=True, jobID=job_id)

    async def start_batch(self) -> str:
        self.calls.append("startAMEBatch")
        for job in self.queue:
            ext = infer_extension(job["presetPath"], job["hasVideo"])
            self._write_placeholder(Path(f"{job['outputPath']}.{ext}"))
        started = len(self.queue)
        self.queue.clear()
        return self._reply(success=True, started=started)

    async def export_to_ame(self, output_path: str, preset_path: str, use_in_out: bool) -> str:
        self.calls.append("exportToAME")
        seq = self._find(self.project.active_sequence)
        if seq is None:
            return self._reply(success=False, error="No active sequence")
        ext = infer_extension(preset_path, seq.has_video)
        self._write_placeholder(Path(f"{output_path}.{ext}"))
        return self._reply(success=True, useInOut=use_in_out)

    async def export_direct(self, output_path: str, preset_path: str, use_in_out: bool) -> str:
        self.calls.append("exportDirectInPremiere")
        if self._find(self.project.active_sequence) is None:
            return self._reply(success=False, error="No active sequence")
        self._write_placeholder(Path(output_path))
        return self._reply(success=True, useInOut=use_in_out)
