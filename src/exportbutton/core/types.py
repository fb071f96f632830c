"""
Core data types for exportbutton.

These models describe one export attempt: the sequences the host reports,
the resolved target of each export, the version scan result and the batch
bookkeeping kept by the orchestrator.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field, field_validator


class SequenceRef(BaseModel):
    """A sequence as reported by the host's project panel selection."""

    name: str
    node_id: str = ""

    class Config:
        frozen = True


class ExportTarget(BaseModel):
    """Everything needed to submit one sequence to the encoder."""

    sequence_name: str
    clean_name: str
    folder_path: str
    preset_path: str
    has_video: bool
    extension: str

    class Config:
        frozen = True

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v):
        """Store extensions without the leading dot."""
        return v.lstrip(".").lower()

    def output_path(self, filename: str, with_extension: bool = False) -> str:
        """Join the folder and a rendered filename using native separators.

        The encoder queue picks the container from the preset, so the
        extension is only appended for in-app renders.
        """
        path = os.path.join(self.folder_path, filename)
        if with_extension:
            path = f"{path}.{self.extension}"
        return path


class VersionResolution(BaseModel):
    """Result of scanning a folder for the next free version number."""

    version: Annotated[int, Field(ge=1)] = 1
    filename: str = ""
    full_path: str = ""
    success: bool = True
    error: str | None = None

    class Config:
        frozen = True


class BatchPhase(str, Enum):
    """Orchestrator state."""

    IDLE = "idle"
    RUNNING = "running"
    FINALIZING = "finalizing"


class ExportMode(str, Enum):
    """Which export path handled a request."""

    BATCH = "batch"
    SINGLE = "single"
    DIRECT = "direct"


@dataclass
class ItemFailure:
    """A single item that could not be queued."""

    name: str
    step: str
    reason: str


@dataclass
class BatchState:
    """Mutable bookkeeping for the running batch."""

    items: list[SequenceRef]
    current_index: int = 0
    success_count: int = 0
    error_count: int = 0
    failures: list[ItemFailure] = field(default_factory=list)
    queued_paths: list[str] = field(default_factory=list)

    @property
    def remaining(self) -> int:
        return len(self.items) - self.current_index

    def advance(self) -> None:
        self.current_index += 1


@dataclass
class ExportOutcome:
    """Terminal report of one export action."""

    mode: ExportMode
    total: int
    success_count: int = 0
    error_count: int = 0
    skipped_count: int = 0
    started: bool = False
    status: str = ""
    output_paths: list[str] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error_count == 0 and self.started
