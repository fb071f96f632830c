"""Centralized JSON handling utilities."""

import json
from pathlib import Path
from typing import Any

from ..core.errors import HostResponseError


def load_json(path: Path) -> Any:
    """Load JSON file with error handling.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON data

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If JSON is invalid
    """
    if not path.exists():
        raise FileNotFoundError(f"JSON file not found: {path}")

    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, data: dict[str, Any], indent: int | None = 2) -> None:
    """Write data to JSON file.

    Args:
        path: Path to write JSON file
        data: Data to serialize
        indent: JSON indentation (None for compact)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False)


def parse_host_response(raw: str | None, *, require_success: bool = True) -> dict[str, Any]:
    """Decode the JSON string a host call returned.

    The scripting host reports its own failures as strings such as
    "EvalScript error." or "Error: ...", and "undefined" when a function is
    missing, so anything that is not a JSON object is rejected.

    Args:
        raw: Raw result string from the host
        require_success: Reject objects whose ``success`` flag is false

    Returns:
        The decoded object

    Raises:
        HostResponseError: On missing, malformed or unsuccessful responses
    """
    if raw is None or not raw.strip() or raw.strip() == "undefined":
        raise HostResponseError(f"empty host response: {raw!r}")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as ex:
        raise HostResponseError(f"malformed host response: {raw!r}") from ex

    if not isinstance(data, dict):
        raise HostResponseError(f"unexpected host response: {raw!r}")

    if require_success and data.get("success") is False:
        raise HostResponseError(str(data.get("error") or "host reported failure"))

    return data
