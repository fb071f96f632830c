"""
Sequential batch export.

Items are queued on the host's encoder one at a time, in list order, and the
queue is started once after every item has been attempted. Submission order
is render order, so nothing here may run two host calls concurrently.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from ..core.errors import BatchInProgressError, StepError
from ..core.types import BatchPhase, BatchState, ExportMode, ExportOutcome, ItemFailure, SequenceRef
from ..host.remote import RemoteCapability
from ..output.logger import ExportLogger
from .targets import TargetResolver


class BatchExportOrchestrator:
    """Queue-then-start export of several sequences."""

    def __init__(self, remote: RemoteCapability, resolver: TargetResolver, logger: ExportLogger) -> None:
        self.remote = remote
        self.resolver = resolver
        self.logger = logger
        self.phase = BatchPhase.IDLE
        self.state: BatchState | None = None

    async def run(self, items: Sequence[SequenceRef], cancel_event: asyncio.Event | None = None) -> ExportOutcome:
        """Queue every item, then start the encoder queue once.

        A failing item is counted and logged; it never stops the batch.

        Raises:
            BatchInProgressError: If a batch is already running.
        """
        if self.phase is not BatchPhase.IDLE:
            raise BatchInProgressError(f"batch already {self.phase.value}")

        self.phase = BatchPhase.RUNNING
        state = self.state = BatchState(items=list(items))
        total = len(state.items)
        self.logger.info(f"Batch export of {total} sequence(s)")

        try:
            while state.remaining:
                if cancel_event is not None and cancel_event.is_set():
                    self.logger.warning(f"Batch cancelled, skipping {state.remaining} remaining item(s)")
                    break

                item = state.items[state.current_index]
                label = f"[{state.current_index + 1:02d}/{total}] {item.name}"
                self.logger.set_status(f"Queueing {state.current_index + 1}/{total}...", "warning")
                try:
                    output_path = await self._queue_item(item)
                except StepError as ex:
                    state.error_count += 1
                    state.failures.append(ItemFailure(item.name, ex.step, ex.reason))
                    self.logger.error(f"{label} -> {ex.step} failed: {ex.reason}")
                except Exception as ex:
                    state.error_count += 1
                    state.failures.append(ItemFailure(item.name, "unexpected", f"{type(ex).__name__}: {ex}"))
                    self.logger.error(f"{label} -> ERROR {type(ex).__name__}: {ex}")
                else:
                    state.success_count += 1
                    state.queued_paths.append(output_path)
                    self.logger.success(f"{label} -> queued {output_path}")
                state.advance()

            self.phase = BatchPhase.FINALIZING
            started = await self._start_queue()
            return self._outcome(state, started)
        finally:
            self.phase = BatchPhase.IDLE
            self.state = None

    async def _queue_item(self, item: SequenceRef) -> str:
        video = await self.resolver.call("video-check", self.remote.has_video_for_sequence(item.name))
        target = await self.resolver.build_target(item.name, bool(video.get("hasVideo")))
        filename = await self.resolver.versioned_filename(target)
        output_path = target.output_path(filename)

        reply = await self.resolver.call(
            "submit", self.remote.export_sequence_by_name(item.name, output_path, target.preset_path)
        )
        if reply.get("jobID"):
            self.logger.info(f"    job {reply['jobID']}")
        return output_path

    async def _start_queue(self) -> bool:
        try:
            await self.resolver.call("start", self.remote.start_batch())
        except StepError as ex:
            self.logger.error(f"Could not start encoder queue: {ex.reason}")
            return False
        return True

    def _outcome(self, state: BatchState, started: bool) -> ExportOutcome:
        total = len(state.items)
        outcome = ExportOutcome(
            mode=ExportMode.BATCH,
            total=total,
            success_count=state.success_count,
            error_count=state.error_count,
            skipped_count=state.remaining,
            started=started,
            output_paths=list(state.queued_paths),
            failures=list(state.failures),
        )
        if started:
            outcome.status = f"Batch started: {state.success_count}/{total}"
            level = "success" if state.error_count == 0 else "warning"
        else:
            outcome.status = "Batch start failed - check log"
            level = "error"
        self.logger.set_status(outcome.status, level)
        return outcome
