from __future__ import annotations

import asyncio
import threading
from pathlib import Path

import pytest

from conftest import AUDIO_PRESET, FIXED_NOW, HANG, VIDEO_PRESET, FakeHost, reply
from exportbutton.config import ExportSettings
from exportbutton.core.errors import BatchInProgressError
from exportbutton.core.types import BatchPhase, ExportMode, SequenceRef
from exportbutton.host.platform import PlatformDefaults
from exportbutton.processing.batch import BatchExportOrchestrator
from exportbutton.processing.targets import TargetResolver


def make_orchestrator(host, logger, settings=None, **resolver_kwargs):
    settings = settings or ExportSettings(video_preset=VIDEO_PRESET, audio_preset=AUDIO_PRESET)
    resolver = TargetResolver(host, settings, logger, clock=lambda: FIXED_NOW, **resolver_kwargs)
    return BatchExportOrchestrator(host, resolver, logger)


def refs(*names: str) -> list[SequenceRef]:
    return [SequenceRef(name=n, node_id=str(i)) for i, n in enumerate(names)]


def test_failed_video_check_is_counted_and_start_issued_once_at_the_end(host: FakeHost, logger):
    host.overrides["hasVideoForSequence"] = (
        lambda name: reply(success=False, error="track query failed") if name == "B" else None
    )
    orchestrator = make_orchestrator(host, logger)

    outcome = asyncio.run(orchestrator.run(refs("A", "B", "C")))

    assert outcome.mode is ExportMode.BATCH
    assert outcome.success_count == 2
    assert outcome.error_count == 1
    assert outcome.started
    assert host.names().count("startAMEBatch") == 1
    # Start comes after every item was attempted
    assert host.names()[-1] == "startAMEBatch"
    attempted = [c[1] for c in host.calls if c[0] == "hasVideoForSequence"]
    assert attempted == ["A", "B", "C"]
    assert outcome.failures[0].name == "B"
    assert outcome.failures[0].step == "video-check"
    assert logger.status == "Batch started: 2/3"


def test_items_are_processed_strictly_in_order(host: FakeHost, logger):
    orchestrator = make_orchestrator(host, logger)

    asyncio.run(orchestrator.run(refs("One", "Two")))

    expected = [
        "hasVideoForSequence",
        "getProjectExportsPathWithDepth",
        "exportSequenceByName",
    ] * 2 + ["startAMEBatch"]
    assert host.names() == expected
    submitted = [c[1] for c in host.calls if c[0] == "exportSequenceByName"]
    assert submitted == ["One", "Two"]


def test_submission_paths_are_versioned_and_sanitized(host: FakeHost, logger, exports_dir: Path):
    (exports_dir / "My_Seq_Test_V4.mp4").write_text("x")
    orchestrator = make_orchestrator(host, logger)

    outcome = asyncio.run(orchestrator.run(refs("My:Seq/Test")))

    name, output_path, preset = host.calls[2][1:]
    assert name == "My:Seq/Test"
    assert output_path == str(exports_dir / "My_Seq_Test_V5")
    assert preset == VIDEO_PRESET
    assert outcome.output_paths == [output_path]


def test_audio_only_sequence_uses_audio_preset(host: FakeHost, logger):
    host.video = {"Podcast": False}
    orchestrator = make_orchestrator(host, logger)

    asyncio.run(orchestrator.run(refs("Podcast")))

    assert host.calls[2][3] == AUDIO_PRESET


def test_empty_preset_setting_falls_back_to_platform_default(host: FakeHost, logger):
    platform = PlatformDefaults(is_windows=False, downloads_path="/dl")
    orchestrator = make_orchestrator(host, logger, settings=ExportSettings(), platform=platform)

    asyncio.run(orchestrator.run(refs("A")))

    assert host.calls[2][3] == platform.video_preset
    assert platform.video_preset.endswith("YouTube 1080p Full HD.epr")


def test_fixed_folder_used_in_download_mode(host: FakeHost, logger, tmp_path: Path):
    fixed = tmp_path / "Deliveries"
    settings = ExportSettings(video_preset=VIDEO_PRESET, download_enabled=True, fixed_folder=str(fixed))
    orchestrator = make_orchestrator(host, logger, settings=settings)

    asyncio.run(orchestrator.run(refs("A")))

    assert "getProjectExportsPathWithDepth" not in host.names()
    assert host.calls[1][2] == str(fixed / "A_V1")


def test_blank_fixed_folder_uses_downloads(host: FakeHost, logger, tmp_path: Path):
    settings = ExportSettings(video_preset=VIDEO_PRESET, download_enabled=True)
    orchestrator = make_orchestrator(host, logger, settings=settings)

    asyncio.run(orchestrator.run(refs("A")))

    assert "getSystemInfo" in host.names()
    submitted = [c for c in host.calls if c[0] == "exportSequenceByName"][0]
    assert submitted[2] == str(tmp_path / "Downloads" / "A_V1")


def test_folder_depth_and_name_are_passed_to_host(host: FakeHost, logger):
    settings = ExportSettings(video_preset=VIDEO_PRESET, folder_name="RENDERS", folder_depth=2)
    orchestrator = make_orchestrator(host, logger, settings=settings)

    asyncio.run(orchestrator.run(refs("A")))

    assert ("getProjectExportsPathWithDepth", "RENDERS", 2) in host.calls


def test_malformed_and_failed_submissions_do_not_abort_batch(host: FakeHost, logger):
    responses = iter(["not json", reply(success=False, error="queue full"), reply(success=True, jobID="7")])
    host.overrides["exportSequenceByName"] = lambda *args: next(responses)
    orchestrator = make_orchestrator(host, logger)

    outcome = asyncio.run(orchestrator.run(refs("A", "B", "C")))

    assert outcome.success_count == 1
    assert outcome.error_count == 2
    assert [f.step for f in outcome.failures] == ["submit", "submit"]
    assert "queue full" in outcome.failures[1].reason
    assert host.names().count("startAMEBatch") == 1


def test_transport_exception_counts_as_item_failure(host: FakeHost, logger):
    host.overrides["getProjectExportsPathWithDepth"] = ConnectionError("bridge closed")
    orchestrator = make_orchestrator(host, logger)

    outcome = asyncio.run(orchestrator.run(refs("A", "B")))

    assert outcome.error_count == 2
    assert outcome.failures[0].step == "folder"
    assert "bridge closed" in outcome.failures[0].reason
    assert outcome.started


def test_version_scan_failure_falls_back_to_version_one(host: FakeHost, logger, exports_dir: Path):
    def broken_lister(folder):
        raise PermissionError("denied")

    (exports_dir / "A_V3.mp4").write_text("x")
    orchestrator = make_orchestrator(host, logger, lister=broken_lister)

    outcome = asyncio.run(orchestrator.run(refs("A")))

    assert outcome.success_count == 1
    assert outcome.output_paths == [str(exports_dir / "A_V1")]
    assert any("Version scan failed" in line for line in logger.lines)


def test_hung_call_times_out_as_step_failure(host: FakeHost, logger):
    host.overrides["hasVideoForSequence"] = HANG
    orchestrator = make_orchestrator(host, logger, call_timeout=0.05)

    outcome = asyncio.run(orchestrator.run(refs("A")))

    assert outcome.error_count == 1
    assert "no response" in outcome.failures[0].reason
    assert outcome.started


def test_failed_start_is_reported(host: FakeHost, logger):
    host.overrides["startAMEBatch"] = reply(success=False, error="encoder not running")
    orchestrator = make_orchestrator(host, logger)

    outcome = asyncio.run(orchestrator.run(refs("A")))

    assert outcome.success_count == 1
    assert not outcome.started
    assert not outcome.ok
    assert logger.status == "Batch start failed - check log"


def test_cancellation_skips_remaining_and_flushes_queued(host: FakeHost, logger):
    cancel = asyncio.Event()

    def cancel_after_first(name, output_path, preset):
        cancel.set()
        return reply(success=True, jobID="1")

    host.overrides["exportSequenceByName"] = cancel_after_first
    orchestrator = make_orchestrator(host, logger)

    outcome = asyncio.run(orchestrator.run(refs("A", "B", "C"), cancel))

    assert outcome.success_count == 1
    assert outcome.skipped_count == 2
    assert outcome.error_count == 0
    assert host.names().count("exportSequenceByName") == 1
    assert host.names()[-1] == "startAMEBatch"


def test_second_batch_while_running_is_rejected(host: FakeHost, logger):
    orchestrator = make_orchestrator(host, logger)

    async def scenario():
        gate = asyncio.Event()

        async def slow_video(name):
            await gate.wait()
            return reply(success=True, hasVideo=True)

        host.has_video_for_sequence = slow_video
        first = asyncio.create_task(orchestrator.run(refs("A")))
        await asyncio.sleep(0)
        assert orchestrator.phase is BatchPhase.RUNNING
        with pytest.raises(BatchInProgressError):
            await orchestrator.run(refs("B"))
        gate.set()
        return await first

    outcome = asyncio.run(scenario())

    assert outcome.success_count == 1
    assert orchestrator.phase is BatchPhase.IDLE
    assert orchestrator.state is None


def test_version_scan_runs_off_the_event_loop_thread(host: FakeHost, logger, exports_dir: Path):
    scan_threads = []

    def recording_lister(folder):
        scan_threads.append(threading.get_ident())
        return ["A_V2.mp4"]

    orchestrator = make_orchestrator(host, logger, lister=recording_lister)

    outcome = asyncio.run(orchestrator.run(refs("A")))

    assert outcome.output_paths == [str(exports_dir / "A_V3")]
    assert scan_threads and threading.get_ident() not in scan_threads
