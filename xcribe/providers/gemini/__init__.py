from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..base import ProviderConfig
from ...constants import DEFAULT_TEMPERATURE, DEFAULT_REQUEST_TIMEOUT


class GeminiModels(BaseModel):
    """Model id per rendering mode."""
    fast: str = "gemini-3-flash-preview"
    quality: str = "gemini-3-pro-preview"


class GeminiConfig(ProviderConfig, BaseSettings):
    """Configuration for the Gemini provider."""

    model_config = SettingsConfigDict(env_prefix="GEMINI_", extra="ignore")

    api_key: Optional[SecretStr] = Field(
        default=None,
        description="Gemini API key (also read from GEMINI_API_KEY)"
    )

    models: GeminiModels = Field(default_factory=GeminiModels)

    temperature: float = Field(
        default=DEFAULT_TEMPERATURE,
        description="Kept low so the model stays close to the literal audio"
    )

    timeout: int = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        description="Request timeout in seconds"
    )

    log_api_calls: bool = Field(
        default=False,
        description="Write redacted request/response logs (debug aid)"
    )

    metadata: Dict[str, Any] = Field(default_factory=dict)


Config = GeminiConfig
