"""Exception types raised across the export pipeline."""

from __future__ import annotations


class ExportError(Exception):
    """Base class for export failures."""


class HostUnavailableError(ExportError):
    """The scripting host did not answer the availability probe."""


class HostResponseError(ExportError):
    """A host call returned malformed JSON or reported ``success: false``."""


class StepError(ExportError):
    """One step of an item's export pipeline failed."""

    def __init__(self, step: str, reason: str) -> None:
        super().__init__(f"{step}: {reason}")
        self.step = step
        self.reason = reason


class BatchInProgressError(ExportError):
    """A batch was started while another one is still running."""
