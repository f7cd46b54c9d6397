"""Named settings presets, persisted as one versioned JSON document."""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Union

from pydantic import ValidationError as PydanticValidationError

from ..constants import PROFILES_STORAGE_KEY, PROFILES_SCHEMA_VERSION
from .errors import StorageError, ValidationError
from .models import (
    ProfileCollection, TranscriptionProfile, TranscriptionSettings, StructureSection,
    StructureType, DetailLevel, OutputStyle,
)

logger = logging.getLogger("Xcribe.Profiles")

DEFAULT_PROFILES = [
    TranscriptionProfile(
        id="def-1",
        name="Standard Report",
        structure=StructureType.STRUCTURED,
        output_style=OutputStyle.PROFESSIONAL,
        detail_level=DetailLevel.CLEANED,
    ),
    TranscriptionProfile(
        id="def-2",
        name="Legal Protocol",
        structure=StructureType.CUSTOM,
        output_style=OutputStyle.BUSINESS,
        detail_level=DetailLevel.LITERAL,
        sections=[
            StructureSection(id="1", title="Partijen", instruction="Who is present and what is their role?"),
            StructureSection(id="2", title="Feiten", instruction="Which undisputed facts were discussed?"),
            StructureSection(id="3", title="Besluiten", instruction="Which legally binding agreements were made?"),
        ],
    ),
]


class ProfileBackend(Protocol):
    def load(self) -> Optional[ProfileCollection]:
        ...

    def save(self, collection: ProfileCollection) -> None:
        ...


class JsonFileBackend:
    """Stores the profile collection as ``<directory>/<key>.json``."""

    def __init__(self, directory: Union[str, Path], key: str = PROFILES_STORAGE_KEY) -> None:
        self.path = Path(directory).expanduser() / f"{key}.json"

    def load(self) -> Optional[ProfileCollection]:
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Failed to read profiles from {self.path}.", detail=str(exc)) from exc

        try:
            collection = ProfileCollection.model_validate(payload)
        except PydanticValidationError as exc:
            raise StorageError(f"Profiles in {self.path} are not valid.", detail=str(exc)) from exc

        if collection.version > PROFILES_SCHEMA_VERSION:
            raise StorageError(
                f"Profiles in {self.path} were written by a newer Xcribe (schema {collection.version})."
            )
        return collection

    def save(self, collection: ProfileCollection) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(collection.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to write profiles to {self.path}.", detail=str(exc)) from exc


class ProfileStore:
    """CRUD over transcription profiles. Every mutation rewrites the whole collection."""

    def __init__(self, backend: ProfileBackend, defaults: Iterable[TranscriptionProfile] = DEFAULT_PROFILES) -> None:
        self.backend = backend
        collection = backend.load()
        if collection is None:
            logger.info("No stored profiles found, installing defaults")
            collection = ProfileCollection(profiles=[p.model_copy(deep=True) for p in defaults])
            backend.save(collection)
        self._profiles: List[TranscriptionProfile] = list(collection.profiles)

    def list(self) -> List[TranscriptionProfile]:
        return list(self._profiles)

    def get(self, profile_id: str) -> Optional[TranscriptionProfile]:
        return next((p for p in self._profiles if p.id == profile_id), None)

    def find(self, id_or_name: str) -> Optional[TranscriptionProfile]:
        """Look a profile up by id, falling back to a case-insensitive name match."""
        profile = self.get(id_or_name)
        if profile is not None:
            return profile
        wanted = id_or_name.strip().lower()
        return next((p for p in self._profiles if p.name.lower() == wanted), None)

    def create(
        self,
        name: str,
        structure: StructureType = StructureType.STRUCTURED,
        output_style: OutputStyle = OutputStyle.PROFESSIONAL,
        detail_level: DetailLevel = DetailLevel.CLEANED,
        sections: Optional[List[StructureSection]] = None,
    ) -> TranscriptionProfile:
        try:
            profile = TranscriptionProfile(
                name=name,
                structure=structure,
                output_style=output_style,
                detail_level=detail_level,
                sections=sections or [],
            )
        except PydanticValidationError as exc:
            raise ValidationError("A profile needs a name.", detail=str(exc)) from exc
        return self.save(profile)

    def save(self, profile: TranscriptionProfile) -> TranscriptionProfile:
        """Insert or replace by id. Last write wins."""
        profiles = list(self._profiles)
        for index, existing in enumerate(profiles):
            if existing.id == profile.id:
                profiles[index] = profile
                break
        else:
            profiles.append(profile)

        self._persist(profiles)
        logger.info(f"Saved profile '{profile.name}' ({profile.id})")
        return profile

    def delete(self, profile_id: str) -> bool:
        """Remove a profile. Unknown ids are ignored and nothing is written."""
        remaining = [p for p in self._profiles if p.id != profile_id]
        if len(remaining) == len(self._profiles):
            logger.debug(f"Profile {profile_id} not found, nothing deleted")
            return False
        self._persist(remaining)
        logger.info(f"Deleted profile {profile_id}")
        return True

    def apply(self, profile_id: str, settings: TranscriptionSettings) -> TranscriptionSettings:
        """Copy a profile's fields into ``settings``; language and rendering mode are kept."""
        profile = self.get(profile_id)
        if profile is None:
            raise ValidationError(f"Profile '{profile_id}' does not exist.")
        return apply_profile(profile, settings)

    def _persist(self, profiles: List[TranscriptionProfile]) -> None:
        self.backend.save(ProfileCollection(profiles=profiles))
        self._profiles = profiles


def apply_profile(profile: TranscriptionProfile, settings: TranscriptionSettings) -> TranscriptionSettings:
    return settings.with_changes(
        structure=profile.structure,
        output_style=profile.output_style,
        detail_level=profile.detail_level,
        sections=[s.model_dump() for s in profile.sections],
    )
