from pathlib import Path
from typing import Type, Dict, Any, Optional
from .errors import ConfigurationError
from .providers import TranscriptionProvider


class ProviderFactory:
    _registry: Dict[str, Type[TranscriptionProvider]] = {}

    @classmethod
    def register(cls, name: str, provider_cls: Type[TranscriptionProvider]):
        cls._registry[name] = provider_cls

    @classmethod
    def get_provider_class(cls, name: str) -> Type[TranscriptionProvider]:
        if name not in cls._registry:
            # Lazy load standard providers
            if name == "gemini":
                from ..providers.gemini.provider import GeminiProvider
                cls.register("gemini", GeminiProvider)
            else:
                raise ConfigurationError(f"Unknown provider: {name}")

        return cls._registry[name]

    @classmethod
    def create(cls, name: str, provider_config: Any, log_dir: Optional[Path] = None) -> TranscriptionProvider:
        provider_cls = cls.get_provider_class(name)
        return provider_cls(provider_config, log_dir=log_dir)
