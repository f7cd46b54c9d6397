import os
import base64
import binascii
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Optional

import google.generativeai as genai
from google.api_core import exceptions

from ...core.providers import TranscriptionProvider, TranscriptionOutcome
from ...core.models import TranscriptionSettings, RenderingMode
from ...core.errors import (
    ConfigurationError, ValidationError, TranscriptionError, UnexpectedResponseError
)
from ...core.logger import APILogger
from ...core.templates import get_system_instruction
from ...constants import EMPTY_TRANSCRIPT_PLACEHOLDER
from ...prompts import build_prompt
from . import GeminiConfig

logger = logging.getLogger("Xcribe.Plugin.Gemini")

API_KEY_ENV_VAR = "GEMINI_API_KEY"

# User-facing messages per service error class; anything else gets the generic message
ERROR_MESSAGES = {
    exceptions.ResourceExhausted: "The transcription service is busy (rate limit reached). Try again in a moment.",
    exceptions.DeadlineExceeded: "The transcription service did not answer in time. Try again or use a shorter recording.",
    exceptions.InvalidArgument: "The transcription service rejected the request. Check that the audio file is not too large and in a supported format.",
    exceptions.PermissionDenied: "The transcription service rejected the API key.",
    exceptions.Unauthenticated: "The transcription service rejected the API key.",
}


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj[name]
    return getattr(obj, name)


def extract_text(response: Any) -> str:
    """
    Pull the transcript out of ``candidates[0].content.parts``.

    Works on SDK response objects and on plain REST-style dicts.
    Returns the stripped text, possibly empty.

    Raises:
        TranscriptionError: the expected path is missing or malformed.
    """
    try:
        parts = _field(_field(_field(response, "candidates")[0], "content"), "parts")
        texts = [_field(parts[0], "text") or ""]
        for part in list(parts)[1:]:
            texts.append(part.get("text") if isinstance(part, Mapping) else getattr(part, "text", ""))
    except (AttributeError, KeyError, IndexError, TypeError) as e:
        raise TranscriptionError(
            "The transcription service returned an unreadable response. Please try again.",
            detail=f"{type(e).__name__}: {e}"
        ) from e

    return "".join(t for t in texts if t).strip()


class GeminiProvider(TranscriptionProvider):
    def __init__(self, provider_config: Optional[GeminiConfig] = None, log_dir: Optional[Path] = None):
        super().__init__(provider_config or GeminiConfig())
        self.gemini_config = self.provider_config
        self.api_logger = APILogger(log_dir) if log_dir and self.gemini_config.log_api_calls else None

    @property
    def name(self) -> str:
        return "gemini"

    def _resolve_api_key(self) -> str:
        if self.gemini_config.api_key:
            return self.gemini_config.api_key.get_secret_value()

        api_key = os.environ.get(API_KEY_ENV_VAR)
        if not api_key:
            raise ConfigurationError(
                f"Gemini API key not found. Set {API_KEY_ENV_VAR} or run 'xcribe setup'."
            )
        return api_key

    def select_model(self, settings: TranscriptionSettings) -> str:
        if settings.rendering_mode is RenderingMode.QUALITY:
            return self.gemini_config.models.quality
        return self.gemini_config.models.fast

    def transcribe(self, audio_data: str, mime_type: str, settings: TranscriptionSettings) -> TranscriptionOutcome:
        if not audio_data:
            raise ValidationError("The selected audio file is empty.")
        if not mime_type:
            raise ValidationError("The audio format of the selected file is unknown.")

        # Fail fast on configuration before anything touches the network
        api_key = self._resolve_api_key()

        try:
            audio_bytes = base64.b64decode(audio_data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValidationError("The audio data could not be decoded.", detail=str(e)) from e

        model_name = self.select_model(settings)
        prompt = build_prompt(settings)
        generation_config = {"temperature": self.gemini_config.temperature}

        # Audio first, then the instructions
        contents = [
            {"mime_type": mime_type, "data": audio_bytes},
            prompt,
        ]

        logger.info(f"Transcribing {len(audio_bytes)} bytes of {mime_type} with {model_name}")
        logger.debug(f"--- PROMPT ---\n{prompt}\n--------------")

        try:
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(model_name, system_instruction=get_system_instruction())
            response = model.generate_content(
                contents,
                generation_config=generation_config,
                request_options={"timeout": self.gemini_config.timeout},
            )
        except Exception as e:
            message = next(
                (msg for exc_cls, msg in ERROR_MESSAGES.items() if isinstance(e, exc_cls)),
                None
            )
            logger.error(f"Gemini request failed: {type(e).__name__}")
            logger.debug(f"Gemini error detail: {e}")
            self._log_call(model_name, contents, generation_config, None, error=f"{type(e).__name__}: {e}")
            error = TranscriptionError(message, detail=f"{type(e).__name__}: {e}")
            error.__cause__ = e
            return TranscriptionOutcome(error=error, model=model_name)

        try:
            text = extract_text(response)
        except TranscriptionError as e:
            logger.error(f"Unusable response from {model_name}: {e.detail}")
            self._log_call(model_name, contents, generation_config, None, error=e.detail)
            return TranscriptionOutcome(error=e, model=model_name)

        self._log_call(model_name, contents, generation_config, {"text": text})

        if not text:
            logger.warning(f"{model_name} returned an empty transcript.")
            return TranscriptionOutcome(
                text=EMPTY_TRANSCRIPT_PLACEHOLDER,
                error=UnexpectedResponseError(),
                model=model_name,
            )

        logger.info(f"Received transcript ({len(text)} characters)")
        return TranscriptionOutcome(text=text, model=model_name)

    def _log_call(self, model_name: str, contents: list, generation_config: Dict[str, Any], response: Any, error: Optional[str] = None):
        if not self.api_logger:
            return
        request = {
            "model": model_name,
            "contents": [{"inline_data": contents[0]}, {"text": contents[1]}],
            "generation_config": generation_config,
        }
        self.api_logger.log(self.name, "generate_content", request, response, error=error)
