from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from .errors import XcribeError, UnexpectedResponseError
from .models import TranscriptionSettings


@dataclass
class TranscriptionOutcome:
    """Result of a single transcription round trip: text, or a typed error, or both for soft failures."""
    text: Optional[str] = None
    error: Optional[XcribeError] = None
    model: Optional[str] = None

    @property
    def ok(self) -> bool:
        # An empty-but-valid response still yields placeholder text
        return self.error is None or isinstance(self.error, UnexpectedResponseError)


class TranscriptionProvider(ABC):
    """Abstract base class for transcription providers."""

    def __init__(self, provider_config: Any):
        self.provider_config = provider_config

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique name of the provider."""
        pass

    @abstractmethod
    def select_model(self, settings: TranscriptionSettings) -> str:
        """Return the model id used for the settings' rendering mode."""
        pass

    @abstractmethod
    def transcribe(self, audio_data: str, mime_type: str, settings: TranscriptionSettings) -> TranscriptionOutcome:
        """
        Perform one transcription request.

        Args:
            audio_data: Base64-encoded audio.
            mime_type: MIME type of the audio, e.g. "audio/mp3".
            settings: Snapshot used to pick the model and render the prompt.

        Returns:
            TranscriptionOutcome. Service-side failures are returned, not raised.

        Raises:
            ConfigurationError: credentials are missing.
            ValidationError: the audio input is unusable.
        """
        pass
