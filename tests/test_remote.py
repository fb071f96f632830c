from __future__ import annotations

import asyncio
import sys

from exportbutton.host.remote import CommandTransport, ScriptBridge, escape_script_string, script_call


class RecordingTransport:
    def __init__(self, result: str = "{}") -> None:
        self.result = result
        self.scripts: list[str] = []

    async def evaluate(self, script: str) -> str:
        self.scripts.append(script)
        return self.result


def test_escape_script_string():
    assert escape_script_string("it's") == "it\\'s"
    assert escape_script_string("C:\\Exports") == "C:\\\\Exports"


def test_script_call_renders_arguments():
    assert script_call("startAMEBatch") == "startAMEBatch()"
    assert script_call("getProjectExportsPathWithDepth", "EXPORTS", 2) == "getProjectExportsPathWithDepth('EXPORTS', 2)"
    assert script_call("exportToAME", "/o", "/p.epr", True) == "exportToAME('/o', '/p.epr', true)"


def test_bridge_maps_calls_to_host_functions():
    transport = RecordingTransport()
    bridge = ScriptBridge(transport)

    async def scenario():
        await bridge.ping()
        await bridge.get_selected_sequences()
        await bridge.export_sequence_by_name("Director's Cut", "/out/Cut_V1", "/p.epr")
        await bridge.export_direct("/out/Cut_V1.mp4", "/p.epr", False)

    asyncio.run(scenario())

    assert transport.scripts == [
        "1+1",
        "getSelectedSequences()",
        "exportSequenceByName('Director\\'s Cut', '/out/Cut_V1', '/p.epr')",
        "exportDirectInPremiere('/out/Cut_V1.mp4', '/p.epr', false)",
    ]


def test_command_transport_pipes_script_through_command():
    echo = [sys.executable, "-c", "import sys; print(sys.stdin.read().upper())"]
    transport = CommandTransport(echo, timeout=30)

    assert asyncio.run(transport.evaluate("getsystem()")) == "GETSYSTEM()"


def test_command_transport_reports_failures_as_eval_errors():
    failing = [sys.executable, "-c", "import sys; sys.exit(3)"]
    transport = CommandTransport(failing, timeout=30)

    assert asyncio.run(transport.evaluate("1+1")).startswith("EvalScript error.")


def test_command_transport_splits_string_commands():
    assert CommandTransport("bridge --port 8080").command == ["bridge", "--port", "8080"]
