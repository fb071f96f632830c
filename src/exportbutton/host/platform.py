"""Platform-dependent defaults: encoder presets and the Downloads folder."""

from __future__ import annotations

import ntpath
import posixpath
from dataclasses import dataclass

from ..core.constants import AME_PRESETS_MAC, AME_PRESETS_WINDOWS, AUDIO_PRESET_RELPATH, VIDEO_PRESET_RELPATH
from ..utils.json import parse_host_response
from .remote import RemoteCapability


@dataclass(frozen=True)
class PlatformDefaults:
    """Environment lookups the export pipeline falls back on."""

    is_windows: bool
    downloads_path: str

    @property
    def video_preset(self) -> str:
        return self._system_preset(VIDEO_PRESET_RELPATH)

    @property
    def audio_preset(self) -> str:
        return self._system_preset(AUDIO_PRESET_RELPATH)

    def default_preset(self, has_video: bool) -> str:
        return self.video_preset if has_video else self.audio_preset

    def _system_preset(self, relpath: tuple[str, str]) -> str:
        if self.is_windows:
            return ntpath.join(AME_PRESETS_WINDOWS, *relpath)
        return posixpath.join(AME_PRESETS_MAC, *relpath)

    @classmethod
    async def from_host(cls, remote: RemoteCapability) -> PlatformDefaults:
        """Ask the host which platform it runs on.

        Raises:
            HostResponseError: If the reply cannot be decoded.
        """
        info = parse_host_response(await remote.get_system_info(), require_success=False)
        return cls(
            is_windows=bool(info.get("isWindows", False)),
            downloads_path=str(info.get("downloadsPath") or ""),
        )
