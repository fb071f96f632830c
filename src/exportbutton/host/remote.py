"""
Remote capability surface of the scripting host.

Every call is asynchronous and returns the host's raw JSON string; decoding
and failure handling belong to the caller.
"""

from __future__ import annotations

import asyncio
import shlex
from typing import Protocol

from ..utils.subprocess import run_subprocess


class RemoteCapability(Protocol):
    """Host calls consumed by the export pipeline."""

    async def ping(self) -> str: ...

    async def get_selected_sequences(self) -> str: ...

    async def has_video_for_sequence(self, name: str) -> str: ...

    async def has_video_tracks(self) -> str: ...

    async def get_active_sequence(self) -> str: ...

    async def get_system_info(self) -> str: ...

    async def get_project_exports_path(self, folder_name: str, depth: int) -> str: ...

    async def export_sequence_by_name(self, name: str, output_path: str, preset_path: str) -> str: ...

    async def start_batch(self) -> str: ...

    async def export_to_ame(self, output_path: str, preset_path: str, use_in_out: bool) -> str: ...

    async def export_direct(self, output_path: str, preset_path: str, use_in_out: bool) -> str: ...


class ScriptTransport(Protocol):
    """Evaluates one script expression inside the host and returns its result."""

    async def evaluate(self, script: str) -> str: ...


def escape_script_string(value: str) -> str:
    """Escape a value for a single-quoted ExtendScript string literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def script_call(function: str, *args: str | int | bool) -> str:
    """Render a host function call, e.g. ``exportSequenceByName('A', '/out/A_V1', '/p.epr')``."""
    rendered = []
    for arg in args:
        if isinstance(arg, bool):
            rendered.append("true" if arg else "false")
        elif isinstance(arg, int):
            rendered.append(str(arg))
        else:
            rendered.append(f"'{escape_script_string(arg)}'")
    return f"{function}({', '.join(rendered)})"


class ScriptBridge:
    """RemoteCapability that renders host script calls and runs them through a transport."""

    def __init__(self, transport: ScriptTransport) -> None:
        self.transport = transport

    async def ping(self) -> str:
        return await self.transport.evaluate("1+1")

    async def get_selected_sequences(self) -> str:
        return await self.transport.evaluate(script_call("getSelectedSequences"))

    async def has_video_for_sequence(self, name: str) -> str:
        return await self.transport.evaluate(script_call("hasVideoForSequence", name))

    async def has_video_tracks(self) -> str:
        return await self.transport.evaluate(script_call("hasVideoTracks"))

    async def get_active_sequence(self) -> str:
        return await self.transport.evaluate(script_call("getActiveSequence"))

    async def get_system_info(self) -> str:
        return await self.transport.evaluate(script_call("getSystemInfo"))

    async def get_project_exports_path(self, folder_name: str, depth: int) -> str:
        return await self.transport.evaluate(script_call("getProjectExportsPathWithDepth", folder_name, depth))

    async def export_sequence_by_name(self, name: str, output_path: str, preset_path: str) -> str:
        return await self.transport.evaluate(script_call("exportSequenceByName", name, output_path, preset_path))

    async def start_batch(self) -> str:
        return await self.transport.evaluate(script_call("startAMEBatch"))

    async def export_to_ame(self, output_path: str, preset_path: str, use_in_out: bool) -> str:
        return await self.transport.evaluate(script_call("exportToAME", output_path, preset_path, use_in_out))

    async def export_direct(self, output_path: str, preset_path: str, use_in_out: bool) -> str:
        return await self.transport.evaluate(
            script_call("exportDirectInPremiere", output_path, preset_path, use_in_out)
        )


class CommandTransport:
    """Evaluates scripts by piping them to an external bridge command.

    The command receives the script on stdin and must print the result on
    stdout. A non-zero exit status is reported the way the host reports
    evaluation failures, as an ``EvalScript error.`` string.
    """

    def __init__(self, command: str | list[str], timeout: float | None = None) -> None:
        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        self.timeout = timeout

    async def evaluate(self, script: str) -> str:
        code, out, err = await asyncio.to_thread(
            run_subprocess, self.command, input_text=script, timeout=self.timeout
        )
        if code != 0:
            return f"EvalScript error. ({err.strip() or f'exit {code}'})"
        return out.strip()
