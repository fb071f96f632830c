"""
Versioned filename resolution.

Existing exports are recognized by a fixed ``_V<digits>`` marker, whatever
the configured naming pattern looks like. Rendering places the version where
the pattern says; detection only ever looks for the marker.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path

from ..core.naming import render_pattern
from ..core.types import VersionResolution

VERSION_MARKER_RE = re.compile(r"_v(\d+)", re.IGNORECASE)

DirectoryLister = Callable[[Path], Iterable[str]]


def list_files(folder: Path) -> list[str]:
    """Names of the regular files directly inside ``folder``."""
    return [entry.name for entry in os.scandir(folder) if entry.is_file()]


def extract_version(filename: str, base_name: str) -> int | None:
    """Parse the version out of an existing export's filename.

    Examples:
        ("Base_V12.mp4", "Base") -> 12
        ("base_v3_final.mov", "Base") -> 3
        ("Other_V99.mp4", "Base") -> None

    Returns:
        The version, or None when the file does not belong to ``base_name``.
    """
    if not filename.lower().startswith(base_name.lower()):
        return None
    remainder = filename[len(base_name):]
    dot = remainder.rfind(".")
    if dot != -1:
        remainder = remainder[:dot]
    match = VERSION_MARKER_RE.search(remainder)
    if not match:
        return None
    return int(match.group(1))


def resolve_next_version(
    folder_path: str | Path,
    base_name: str,
    extension: str,
    naming_pattern: str,
    *,
    lister: DirectoryLister = list_files,
    now: datetime | None = None,
) -> VersionResolution:
    """Find the lowest version above every existing export of ``base_name``.

    Args:
        folder_path: Folder the export will be written to
        base_name: Sanitized sequence name
        extension: Expected extension; informational, any extension is matched
        naming_pattern: Pattern used to render the resulting filename
        lister: Directory listing function, replaceable for tests
        now: Clock value for {DATE}/{TIME} in the rendered filename

    Returns:
        VersionResolution. ``success`` is False only when listing failed; the
        version is then 1 so callers can proceed.
    """
    folder = Path(folder_path)

    def resolved(version: int) -> VersionResolution:
        filename = render_pattern(naming_pattern, version, base_name, now)
        return VersionResolution(
            version=version,
            filename=filename,
            full_path=os.path.join(str(folder_path), filename),
        )

    # Folder gets created by the host before writing
    if not folder.is_dir():
        return resolved(1)

    try:
        names = list(lister(folder))
    except OSError as ex:
        error = f"Cannot list {folder} for {base_name}.{extension.lstrip('.')}: {ex}"
        return resolved(1).model_copy(update={"success": False, "error": error})

    versions = [v for v in (extract_version(name, base_name) for name in names) if v is not None]
    return resolved(max(versions) + 1 if versions else 1)
