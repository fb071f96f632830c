"""Centralized constants for the export bridge."""

# Settings store keys
VIDEO_PRESET_KEY = "exportButton_videoPreset"
AUDIO_PRESET_KEY = "exportButton_audioPreset"
NAMING_PATTERN_KEY = "exportButton_namingPattern"
FOLDER_NAME_KEY = "exportButton_folderName"
FOLDER_DEPTH_KEY = "exportButton_folderDepth"
FIXED_FOLDER_KEY = "exportButton_fixedFolder"
DOWNLOAD_ENABLED_KEY = "exportButton_downloadEnabled"
USE_IN_OUT_KEY = "exportButton_useInOut"
DIRECT_EXPORT_KEY = "exportButton_directExport"

# Defaults
DEFAULT_NAMING_PATTERN = "{SEQ}_V{V}"
DEFAULT_FOLDER_NAME = "EXPORTS"
DEFAULT_FOLDER_DEPTH = 0

# Characters the host file systems refuse in a filename
INVALID_FILENAME_CHARS = '<>:"/\\|?*'

# Timeouts (seconds)
SELECTION_QUERY_TIMEOUT_SEC = 3.0
REMOTE_CALL_TIMEOUT_SEC = 60.0

# Encoder system presets shipped with Adobe Media Encoder 2025
AME_PRESETS_WINDOWS = (
    "C:\\Program Files\\Adobe\\Adobe Media Encoder 2025\\MediaIO\\systempresets"
)
AME_PRESETS_MAC = (
    "/Applications/Adobe Media Encoder 2025/Adobe Media Encoder 2025.app/Contents/MediaIO/systempresets"
)
VIDEO_PRESET_RELPATH = ("58444341_4d584658", "YouTube 1080p Full HD.epr")
AUDIO_PRESET_RELPATH = ("41494646_41494646", "WAV 48kHz 16 bit.epr")
