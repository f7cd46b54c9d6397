import uuid
from enum import Enum
from typing import Dict, List, Optional, Any, Tuple
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..constants import DEFAULT_LANGUAGE, PROFILES_SCHEMA_VERSION


def generate_id(length: int = 9) -> str:
    return uuid.uuid4().hex[:length]


class StructureType(str, Enum):
    WORD_FOR_WORD = "word_for_word"
    SUMMARY = "summary"
    STRUCTURED = "structured"
    INTERVIEW = "interview"
    MINUTES = "minutes"
    CUSTOM = "custom"

class DetailLevel(str, Enum):
    LITERAL = "literal"
    CLEANED = "cleaned"
    EDITED = "edited"

class OutputStyle(str, Enum):
    RAW = "raw"
    PROFESSIONAL = "professional"
    BUSINESS = "business"
    INFORMAL = "informal"

class RenderingMode(str, Enum):
    FAST = "fast"
    QUALITY = "quality"


class StructureSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: generate_id(5))
    title: str = ""
    instruction: str = ""


class TranscriptionSettings(BaseModel):
    """Immutable snapshot of everything that shapes a single transcription request."""

    model_config = ConfigDict(frozen=True)

    structure: StructureType = StructureType.WORD_FOR_WORD
    sections: Tuple[StructureSection, ...] = ()
    detail_level: DetailLevel = DetailLevel.LITERAL
    output_style: OutputStyle = OutputStyle.RAW
    language: str = DEFAULT_LANGUAGE
    rendering_mode: RenderingMode = RenderingMode.FAST

    @model_validator(mode="before")
    @classmethod
    def _sections_only_for_custom(cls, data: Any) -> Any:
        # Sections are meaningful only for the custom structure
        if isinstance(data, dict) and data.get("structure", StructureType.WORD_FOR_WORD) != StructureType.CUSTOM:
            data = {**data, "sections": ()}
        return data

    def with_changes(self, **changes: Any) -> "TranscriptionSettings":
        """Return a new, re-validated snapshot with ``changes`` applied."""
        return TranscriptionSettings.model_validate({**self.model_dump(), **changes})


class TranscriptionProfile(BaseModel):
    """Named, persisted subset of settings. Language and rendering mode are never stored."""

    id: str = Field(default_factory=generate_id)
    name: str
    structure: StructureType = StructureType.STRUCTURED
    sections: List[StructureSection] = Field(default_factory=list)
    output_style: OutputStyle = OutputStyle.PROFESSIONAL
    detail_level: DetailLevel = DetailLevel.CLEANED

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("profile name must not be empty")
        return value.strip()


class ProfileCollection(BaseModel):
    version: int = PROFILES_SCHEMA_VERSION
    profiles: List[TranscriptionProfile] = Field(default_factory=list)


class TranscriptionResult(BaseModel):
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)
    model: Optional[str] = None


# --- Configuration ---

class SessionDefaults(BaseModel):
    language: str = DEFAULT_LANGUAGE
    rendering_mode: RenderingMode = RenderingMode.FAST

class PathsConfig(BaseModel):
    profiles: str = "~/.config/xcribe/profiles"
    exports: str = "."
    logs: Optional[str] = None

class AppConfig(BaseModel):
    debug: bool = False
    output_mode: str = "standard"
    provider: str = "gemini"
    session: SessionDefaults = Field(default_factory=SessionDefaults)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    providers: Dict[str, Any] = Field(default_factory=dict)

    def default_settings(self) -> TranscriptionSettings:
        return TranscriptionSettings(
            language=self.session.language,
            rendering_mode=self.session.rendering_mode,
        )
