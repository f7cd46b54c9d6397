"""Xcribe - configurable AI transcription of audio files."""

__version__ = "2.0.0"
