import os
import base64
import unittest
from types import SimpleNamespace
from unittest.mock import patch, MagicMock

from google.api_core import exceptions

from xcribe.constants import EMPTY_TRANSCRIPT_PLACEHOLDER
from xcribe.core.errors import (
    ConfigurationError, ValidationError, TranscriptionError, UnexpectedResponseError
)
from xcribe.core.models import TranscriptionSettings, RenderingMode, StructureType
from xcribe.prompts import build_prompt
from xcribe.providers.gemini import GeminiConfig
from xcribe.providers.gemini.provider import GeminiProvider, extract_text

AUDIO_B64 = base64.b64encode(b"fake-audio-bytes").decode("ascii")


def make_response(*texts):
    parts = [SimpleNamespace(text=t) for t in texts]
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=parts))])


class TestExtractText(unittest.TestCase):

    def test_extracts_first_part_text(self):
        self.assertEqual(extract_text(make_response("Hello")), "Hello")

    def test_joins_and_strips_parts(self):
        self.assertEqual(extract_text(make_response("  Hello ", "world\n")), "Hello world")

    def test_accepts_rest_style_dict(self):
        payload = {"candidates": [{"content": {"parts": [{"text": "Hello"}]}}]}
        self.assertEqual(extract_text(payload), "Hello")

    def test_missing_path_raises_transcription_error(self):
        for response in (
            SimpleNamespace(),
            SimpleNamespace(candidates=[]),
            SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[]))]),
            {"candidates": [{"content": {}}]},
        ):
            with self.subTest(response=response):
                with self.assertRaises(TranscriptionError):
                    extract_text(response)


class TestGeminiProvider(unittest.TestCase):
    def setUp(self):
        self.config = GeminiConfig(api_key="test-key")
        self.provider = GeminiProvider(self.config)
        self.settings = TranscriptionSettings(structure=StructureType.SUMMARY, language="English")

    @patch('xcribe.providers.gemini.provider.genai')
    def test_transcribe_returns_text(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.return_value = make_response("Hello")

        outcome = self.provider.transcribe(AUDIO_B64, "audio/mp3", self.settings)

        self.assertTrue(outcome.ok)
        self.assertIsNone(outcome.error)
        self.assertEqual(outcome.text, "Hello")
        mock_genai.configure.assert_called_once_with(api_key="test-key")

    @patch('xcribe.providers.gemini.provider.genai')
    def test_request_shape_audio_first_then_prompt(self, mock_genai):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content.return_value = make_response("Hello")

        self.provider.transcribe(AUDIO_B64, "audio/mp3", self.settings)

        args, kwargs = model.generate_content.call_args
        contents = args[0]
        self.assertEqual(len(contents), 2)
        self.assertEqual(contents[0], {"mime_type": "audio/mp3", "data": b"fake-audio-bytes"})
        self.assertEqual(contents[1], build_prompt(self.settings))
        self.assertEqual(kwargs["generation_config"], {"temperature": 0.1})
        self.assertEqual(kwargs["request_options"], {"timeout": 600})

        _, model_kwargs = mock_genai.GenerativeModel.call_args
        self.assertIn("Never invent information", model_kwargs["system_instruction"])

    @patch('xcribe.providers.gemini.provider.genai')
    def test_model_selection_by_rendering_mode(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.return_value = make_response("Hi")

        quality = self.settings.with_changes(rendering_mode=RenderingMode.QUALITY)
        outcome = self.provider.transcribe(AUDIO_B64, "audio/mp3", quality)
        self.assertEqual(mock_genai.GenerativeModel.call_args[0][0], "gemini-3-pro-preview")
        self.assertEqual(outcome.model, "gemini-3-pro-preview")

        fast = self.settings.with_changes(rendering_mode=RenderingMode.FAST)
        self.provider.transcribe(AUDIO_B64, "audio/mp3", fast)
        self.assertEqual(mock_genai.GenerativeModel.call_args[0][0], "gemini-3-flash-preview")

    @patch('xcribe.providers.gemini.provider.genai')
    def test_empty_text_returns_placeholder(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.return_value = make_response("   ")

        outcome = self.provider.transcribe(AUDIO_B64, "audio/mp3", self.settings)

        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.text, EMPTY_TRANSCRIPT_PLACEHOLDER)
        self.assertIsInstance(outcome.error, UnexpectedResponseError)

    @patch('xcribe.providers.gemini.provider.genai')
    def test_malformed_response_is_transcription_error(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.return_value = SimpleNamespace(candidates=[])

        outcome = self.provider.transcribe(AUDIO_B64, "audio/mp3", self.settings)

        self.assertFalse(outcome.ok)
        self.assertIsInstance(outcome.error, TranscriptionError)
        self.assertNotIsInstance(outcome.error, UnexpectedResponseError)

    @patch('xcribe.providers.gemini.provider.genai')
    def test_service_error_becomes_outcome_error(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.side_effect = exceptions.ResourceExhausted("quota exceeded for project 123")

        outcome = self.provider.transcribe(AUDIO_B64, "audio/mp3", self.settings)

        self.assertFalse(outcome.ok)
        self.assertIn("rate limit", outcome.error.message)
        self.assertNotIn("project 123", outcome.error.message)
        self.assertIn("ResourceExhausted", outcome.error.detail)

    @patch('xcribe.providers.gemini.provider.genai')
    def test_transport_failure_uses_generic_message(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.side_effect = ConnectionError("socket closed")

        outcome = self.provider.transcribe(AUDIO_B64, "audio/mp3", self.settings)

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.error.message, TranscriptionError.default_message)
        self.assertIsInstance(outcome.error.__cause__, ConnectionError)

    @patch('xcribe.providers.gemini.provider.genai')
    def test_client_setup_failure_becomes_outcome_error(self, mock_genai):
        mock_genai.GenerativeModel.side_effect = ValueError("bad model name")

        outcome = self.provider.transcribe(AUDIO_B64, "audio/mp3", self.settings)

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.error.message, TranscriptionError.default_message)
        self.assertIsInstance(outcome.error.__cause__, ValueError)

    @patch('xcribe.providers.gemini.provider.genai')
    def test_no_automatic_retry(self, mock_genai):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content.side_effect = exceptions.ServiceUnavailable("down")

        self.provider.transcribe(AUDIO_B64, "audio/mp3", self.settings)

        self.assertEqual(model.generate_content.call_count, 1)

    @patch('xcribe.providers.gemini.provider.genai')
    def test_missing_api_key_fails_before_network(self, mock_genai):
        with patch.dict(os.environ, {}, clear=True):
            provider = GeminiProvider(GeminiConfig())
            with self.assertRaises(ConfigurationError):
                provider.transcribe(AUDIO_B64, "audio/mp3", self.settings)

        mock_genai.configure.assert_not_called()
        mock_genai.GenerativeModel.assert_not_called()

    @patch('xcribe.providers.gemini.provider.genai')
    def test_api_key_read_from_environment_at_call_time(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.return_value = make_response("ok")
        with patch.dict(os.environ, {}, clear=True):
            provider = GeminiProvider(GeminiConfig())
        with patch.dict(os.environ, {"GEMINI_API_KEY": "late-key"}):
            provider.transcribe(AUDIO_B64, "audio/mp3", self.settings)

        mock_genai.configure.assert_called_once_with(api_key="late-key")

    @patch('xcribe.providers.gemini.provider.genai')
    def test_invalid_input_is_validation_error(self, mock_genai):
        for audio, mime in (("", "audio/mp3"), (AUDIO_B64, ""), ("not base64!!", "audio/mp3")):
            with self.subTest(audio=audio, mime=mime):
                with self.assertRaises(ValidationError):
                    self.provider.transcribe(audio, mime, self.settings)
        mock_genai.GenerativeModel.assert_not_called()

    def test_custom_model_ids_from_config(self):
        provider = GeminiProvider(GeminiConfig(api_key="k", models={"fast": "f-model", "quality": "q-model"}))
        self.assertEqual(provider.select_model(TranscriptionSettings(rendering_mode=RenderingMode.FAST)), "f-model")
        self.assertEqual(provider.select_model(TranscriptionSettings(rendering_mode=RenderingMode.QUALITY)), "q-model")


if __name__ == '__main__':
    unittest.main()
