"""Audio loading and transcript export."""

import base64
import logging
import mimetypes
from datetime import date
from pathlib import Path
from typing import Optional, Tuple, Union

from .constants import AUDIO_MIME_TYPES, EXPORT_FILENAME_PATTERN, EXPORT_DATE_FORMAT
from .core.errors import ValidationError, XcribeError
from .core.models import TranscriptionResult

logger = logging.getLogger("Xcribe.Files")


class FileManager:
    """Handles file operations around a transcription."""

    @staticmethod
    def guess_mime_type(filepath: Path) -> Optional[str]:
        """
        Determine the audio MIME type from the file extension.

        Returns:
            The MIME type, or None when the file is not recognisably audio.
        """
        mime_type = AUDIO_MIME_TYPES.get(filepath.suffix.lower())
        if mime_type:
            return mime_type
        guessed, _ = mimetypes.guess_type(str(filepath))
        if guessed and guessed.startswith("audio/"):
            return guessed
        return None

    @staticmethod
    def load_audio(filepath: Union[str, Path]) -> Tuple[str, str]:
        """
        Read an audio file as base64 text.

        Args:
            filepath: Path to the audio file

        Returns:
            (base64 text, MIME type)

        Raises:
            ValidationError: the file is missing, empty, unreadable or not audio.
        """
        path = Path(filepath).expanduser()
        if not path.is_file():
            raise ValidationError(f"Audio file not found: {path.name}")

        mime_type = FileManager.guess_mime_type(path)
        if mime_type is None:
            supported = ", ".join(sorted(AUDIO_MIME_TYPES))
            raise ValidationError(f"Unsupported file format: {path.suffix or path.name}. Supported: {supported}")

        try:
            raw = path.read_bytes()
        except OSError as e:
            raise ValidationError(f"Could not read {path.name}.", detail=str(e)) from e

        if not raw:
            raise ValidationError(f"The audio file {path.name} is empty.")

        logger.debug(f"Loaded {path.name}: {len(raw)} bytes, {mime_type}")
        return base64.b64encode(raw).decode("ascii"), mime_type

    @staticmethod
    def export_filename(today: Optional[date] = None) -> str:
        today = today or date.today()
        return EXPORT_FILENAME_PATTERN.format(date=today.strftime(EXPORT_DATE_FORMAT))

    @staticmethod
    def export_transcript(result: TranscriptionResult, directory: Union[str, Path], today: Optional[date] = None) -> Path:
        """
        Save a transcript as a plain-text file named after today's date.

        An existing export from the same day is overwritten.
        """
        target_dir = Path(directory).expanduser()
        output_path = target_dir / FileManager.export_filename(today)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(result.text)
        except OSError as e:
            raise XcribeError(f"Could not save the transcript to {output_path}.", detail=str(e)) from e

        logger.info(f"Transcript exported to {output_path}")
        return output_path
