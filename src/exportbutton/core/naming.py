"""
Output naming for exported sequences.

This module turns a user naming pattern into a concrete filename and infers
container extensions from encoder preset names.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import NamedTuple

from .constants import INVALID_FILENAME_CHARS

# {V}, {VV}, ... {DATE}, {TIME}, {SEQ}; one pass so substituted text is never re-expanded
TOKEN_RE = re.compile(r"\{(v+|date|time|seq)\}", re.IGNORECASE)

_INVALID_RE = re.compile("[" + re.escape(INVALID_FILENAME_CHARS) + "]")


class ExtensionRule(NamedTuple):
    """Maps a preset-name keyword to the container it produces."""

    keyword: str
    extension: str


# Order matters - more specific first
EXTENSION_RULES = [
    ExtensionRule("prores", "mov"),
    ExtensionRule("quicktime", "mov"),
    ExtensionRule("dnxhr", "mxf"),
    ExtensionRule("dnxhd", "mxf"),
    ExtensionRule("mxf", "mxf"),
    ExtensionRule("h.264", "mp4"),
    ExtensionRule("h264", "mp4"),
    ExtensionRule("h.265", "mp4"),
    ExtensionRule("hevc", "mp4"),
    ExtensionRule("youtube", "mp4"),
    ExtensionRule("vimeo", "mp4"),
    ExtensionRule("match source", "mp4"),
    ExtensionRule("mp3", "mp3"),
    ExtensionRule("aac", "m4a"),
    ExtensionRule("aiff", "aif"),
    ExtensionRule("wav", "wav"),
]


def sanitize_name(name: str) -> str:
    """Replace characters that are invalid in filenames with underscores.

    Examples:
        "My:Seq/Test" -> "My_Seq_Test"
    """
    return _INVALID_RE.sub("_", name)


def render_pattern(pattern: str, version: int, sequence_name: str, now: datetime | None = None) -> str:
    """Render a naming pattern into a filename (without extension).

    Args:
        pattern: Template such as "{SEQ}_V{VV}".
        version: Version number substituted into every {V...} token.
        sequence_name: Value for {SEQ}; expected to be sanitized already.
        now: Clock value for {DATE} and {TIME}. Defaults to the local time.

    Returns:
        The rendered name. Unknown tokens are kept verbatim.
    """
    moment = now or datetime.now()

    def substitute(match: re.Match[str]) -> str:
        token = match.group(1).lower()
        if token == "date":
            return moment.strftime("%Y-%m-%d")
        if token == "time":
            return moment.strftime("%H-%M")
        if token == "seq":
            return sequence_name
        # width never truncates: 100 under {V} stays "100"
        return f"{version:0{len(token)}d}"

    return TOKEN_RE.sub(substitute, pattern)


def extension_from_preset(preset_path: str) -> str | None:
    """Return the container extension a preset name implies, if recognizable."""
    lowered = preset_path.replace("\\", "/").rsplit("/", 1)[-1].lower()
    for rule in EXTENSION_RULES:
        if rule.keyword in lowered:
            return rule.extension
    return None


def infer_extension(preset_path: str, has_video: bool) -> str:
    """Extension for an export, from the preset name or the track content."""
    ext = extension_from_preset(preset_path)
    if ext:
        return ext
    return "mp4" if has_video else "wav"
