import logging
import yaml
import importlib
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError

from .models import AppConfig, SessionDefaults, PathsConfig
from .errors import ConfigurationError
from ..providers.base import ProviderConfig

logger = logging.getLogger("Xcribe.Config")

DEFAULT_CONFIG_FILENAME = "config.yaml"
USER_CONFIG_DIR = Path.home() / ".config" / "xcribe"


def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Could not parse configuration file {path}.", detail=str(e)) from e


def _merge_dicts(base: Dict, update: Dict):
    """Recursively merge update dict into base dict."""
    for k, v in update.items():
        if isinstance(v, dict) and k in base and isinstance(base[k], dict):
            _merge_dicts(base[k], v)
        else:
            base[k] = v


def load_provider_config(provider_name: str, user_provider_config: Dict[str, Any]) -> Any:
    """
    Load a provider's configuration.

    The provider package's defaults.yaml is merged with the user's section and
    validated with the provider's ``Config`` model.

    Args:
        provider_name: The name of the provider (e.g., 'gemini').
        user_provider_config: The provider section from the user's config.yaml.

    Returns:
        Validated Pydantic model for the provider configuration.
    """
    try:
        module = importlib.import_module(f"xcribe.providers.{provider_name}")
    except ImportError as e:
        raise ConfigurationError(f"Unknown provider '{provider_name}'.", detail=str(e)) from e

    config_model = getattr(module, "Config", None)
    if not (isinstance(config_model, type) and issubclass(config_model, ProviderConfig)):
        return user_provider_config

    provider_dir = Path(module.__file__).parent
    provider_config = load_yaml(provider_dir / "defaults.yaml")
    _merge_dicts(provider_config, user_provider_config)

    try:
        return config_model(**provider_config)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid settings for provider '{provider_name}'.", detail=str(e)) from e


def find_config_path(config_path: Optional[str] = None) -> Path:
    """Explicit path first, then the working directory, then ~/.config/xcribe."""
    if config_path:
        return Path(config_path)

    cwd_config = Path(DEFAULT_CONFIG_FILENAME)
    if cwd_config.exists():
        return cwd_config
    return USER_CONFIG_DIR / DEFAULT_CONFIG_FILENAME


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load configuration from file and env vars."""
    load_dotenv()
    load_dotenv(USER_CONFIG_DIR / ".env")

    user_config = load_yaml(find_config_path(config_path))

    try:
        session = SessionDefaults(**(user_config.get("session") or {}))
        paths = PathsConfig(**(user_config.get("paths") or {}))
    except PydanticValidationError as e:
        raise ConfigurationError("Invalid configuration file.", detail=str(e)) from e

    provider_name = user_config.get("provider", "gemini")
    user_providers_section = user_config.get("providers") or {}

    active_providers = set(user_providers_section.keys())
    active_providers.add(provider_name)

    providers_config = {
        name: load_provider_config(name, user_providers_section.get(name) or {})
        for name in active_providers
    }

    return AppConfig(
        debug=user_config.get("debug", False),
        output_mode=user_config.get("output_mode", "standard"),
        provider=provider_name,
        session=session,
        paths=paths,
        providers=providers_config,
    )
