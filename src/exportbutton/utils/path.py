"""
Path utilities for exportbutton.

Helpers for locating export folders relative to a project file.
"""

from __future__ import annotations

from pathlib import Path


def parent_at_depth(path: Path, depth: int) -> Path:
    """Walk ``depth`` levels up from the directory containing ``path``.

    Depth 0 is the project file's own directory. Walking past the file
    system root stops at the root.

    Args:
        path (Path): A project file path.
        depth (int): Number of parent levels to climb.

    Returns:
        Path: The resolved directory.
    """
    folder = path.parent
    for _ in range(max(0, depth)):
        if folder.parent == folder:
            break
        folder = folder.parent
    return folder


def project_exports_path(project_path: Path, folder_name: str, depth: int) -> Path:
    """Export folder ``folder_name`` placed ``depth`` levels above the project."""
    return parent_at_depth(project_path, depth) / folder_name
