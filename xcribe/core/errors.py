"""Error taxonomy for Xcribe.

Every error carries a user-facing ``message``. Anything more technical
(exception type, service response) goes into ``detail`` and is only logged.
"""

from typing import Optional


class XcribeError(Exception):
    """Base class for all Xcribe errors."""

    default_message = "An unknown error occurred."

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ConfigurationError(XcribeError):
    """Required configuration (e.g. the API key) is missing or unreadable."""

    default_message = "Xcribe is not configured. Run 'xcribe setup' or set GEMINI_API_KEY."


class ValidationError(XcribeError):
    """Local input problem that blocks a request before it reaches the network."""

    default_message = "Select an audio file first."


class TranscriptionError(XcribeError):
    """The transcription service call failed."""

    default_message = (
        "Transcription failed. Check that the audio file is not too large "
        "or try again later."
    )


class UnexpectedResponseError(TranscriptionError):
    """The service answered successfully but returned no usable text."""

    default_message = "The service returned no text for this audio."


class StorageError(XcribeError):
    """Persisted profiles could not be read or written."""

    default_message = "Stored profiles could not be read."


class InvalidTransitionError(XcribeError):
    """A session operation was requested in a state that does not allow it."""
