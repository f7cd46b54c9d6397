import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from .errors import XcribeError, ValidationError, TranscriptionError, InvalidTransitionError
from .models import TranscriptionSettings, TranscriptionResult
from .profiles import ProfileStore
from .providers import TranscriptionProvider, TranscriptionOutcome
from ..file_manager import FileManager

logger = logging.getLogger("Xcribe.Session")


class SessionState(str, Enum):
    CONFIGURING = "configuring"
    READY_TO_UPLOAD = "ready_to_upload"
    PROCESSING = "processing"
    DONE = "done"


class SessionController:
    """
    Drives one user session: configure -> upload -> process -> result.

    A failed transcription returns the session to READY_TO_UPLOAD with ``error``
    set; nothing is left in PROCESSING.
    """

    def __init__(
        self,
        provider: TranscriptionProvider,
        profiles: Optional[ProfileStore] = None,
        settings: Optional[TranscriptionSettings] = None,
    ):
        self.provider = provider
        self.profiles = profiles
        self.settings = settings or TranscriptionSettings()
        self.state = SessionState.CONFIGURING
        self.audio_path: Optional[Path] = None
        self.result: Optional[TranscriptionResult] = None
        self.error: Optional[str] = None

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise InvalidTransitionError(
                f"Not possible while {self.state.value} (requires {allowed})."
            )

    def _transition(self, new_state: SessionState) -> None:
        logger.debug(f"Session: {self.state.value} -> {new_state.value}")
        self.state = new_state

    # --- Configuring ---

    def update_settings(self, **changes: Any) -> TranscriptionSettings:
        self._require(SessionState.CONFIGURING)
        self.settings = self.settings.with_changes(**changes)
        return self.settings

    def apply_profile(self, profile_id: str) -> TranscriptionSettings:
        self._require(SessionState.CONFIGURING)
        if self.profiles is None:
            raise XcribeError("Profiles are not available in this session.")
        self.settings = self.profiles.apply(profile_id, self.settings)
        logger.info(f"Applied profile {profile_id}")
        return self.settings

    def confirm_settings(self) -> SessionState:
        self._require(SessionState.CONFIGURING)
        self._transition(SessionState.READY_TO_UPLOAD)
        return self.state

    # --- Upload ---

    def back_to_configuring(self) -> SessionState:
        self._require(SessionState.READY_TO_UPLOAD)
        self._transition(SessionState.CONFIGURING)
        return self.state

    def select_audio(self, path: Union[str, Path]) -> None:
        self._require(SessionState.CONFIGURING, SessionState.READY_TO_UPLOAD)
        self.audio_path = Path(path)
        self.error = None

    def start_transcription(self) -> SessionState:
        """
        Run the transcription for the selected audio.

        Returns the resulting state: DONE on success, READY_TO_UPLOAD with
        ``error`` set when validation or the service call fails.
        """
        self._require(SessionState.READY_TO_UPLOAD)

        if self.audio_path is None:
            self.error = ValidationError().message
            logger.warning(self.error)
            return self.state

        try:
            audio_data, mime_type = FileManager.load_audio(self.audio_path)
        except ValidationError as e:
            self.error = e.message
            logger.warning(self.error)
            return self.state

        self.error = None
        self._transition(SessionState.PROCESSING)

        try:
            outcome = self.provider.transcribe(audio_data, mime_type, self.settings)
        except XcribeError as e:
            outcome = TranscriptionOutcome(error=e)
        except Exception as e:
            logger.exception(f"Provider '{self.provider.name}' failed unexpectedly")
            error = TranscriptionError(detail=f"{type(e).__name__}: {e}")
            error.__cause__ = e
            outcome = TranscriptionOutcome(error=error)

        return self._finish(outcome)

    def _finish(self, outcome: TranscriptionOutcome) -> SessionState:
        if not outcome.ok:
            self.error = outcome.error.message
            logger.error(f"Transcription failed: {self.error}")
            if outcome.error.detail:
                logger.debug(f"Failure detail: {outcome.error.detail}")
            self._transition(SessionState.READY_TO_UPLOAD)
            return self.state

        if outcome.error is not None:
            logger.warning(outcome.error.message)

        self.result = TranscriptionResult(
            text=outcome.text,
            timestamp=datetime.now(),
            model=outcome.model,
        )
        self._transition(SessionState.DONE)
        return self.state

    # --- Done ---

    def export_result(self, directory: Union[str, Path]) -> Path:
        self._require(SessionState.DONE)
        return FileManager.export_transcript(self.result, directory)

    def reset(self) -> SessionState:
        """Discard the result and start configuring again."""
        self._require(SessionState.DONE)
        self.audio_path = None
        self.result = None
        self.error = None
        self._transition(SessionState.CONFIGURING)
        return self.state
