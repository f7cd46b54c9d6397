"""Constants used throughout the Xcribe application."""

# Persistence
PROFILES_STORAGE_KEY = "xcribe_profiles_v2"
PROFILES_SCHEMA_VERSION = 1

# Session defaults
DEFAULT_LANGUAGE = "Auto-detect"

# Generation parameters
DEFAULT_TEMPERATURE = 0.1
DEFAULT_REQUEST_TIMEOUT = 600  # seconds

# Shown instead of an empty transcript
EMPTY_TRANSCRIPT_PLACEHOLDER = "No text was generated."

# Export
EXPORT_FILENAME_PATTERN = "Xcribe_Transcript_{date}.txt"
EXPORT_DATE_FORMAT = "%Y-%m-%d"

# Audio
AUDIO_MIME_TYPES = {
    ".mp3": "audio/mp3",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".opus": "audio/ogg",
    ".m4a": "audio/mp4",
    ".mp4": "audio/mp4",
    ".aac": "audio/aac",
    ".flac": "audio/flac",
    ".aiff": "audio/aiff",
    ".aif": "audio/aiff",
    ".webm": "audio/webm",
}
