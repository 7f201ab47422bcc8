"""Runtime settings for the anotherpass tools."""

import platform
from pathlib import Path
from typing import Annotated, Any, List, Optional, Tuple, Type, Union

import structlog
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

logger = structlog.get_logger(__name__)

ENV_PREFIX = "ANOTHERPASS_"


class ConfigError(Exception):
    """Exception raised when settings cannot be loaded."""


def default_data_file() -> Path:
    """Get the platform-specific default location of the password data."""
    system = platform.system().lower()
    if system == "windows":
        base = Path.home() / "AppData/Local/AnotherPass"
    elif system == "darwin":
        base = Path.home() / "Library/Application Support/AnotherPass"
    else:
        base = Path.home() / ".local/share/anotherpass"
    return base / "passes.json"


class Settings(BaseSettings):
    """Settings shared by the CLI and embedding hosts.

    Sources, highest priority first: init kwargs, ``ANOTHERPASS_*``
    environment variables, the JSON file named by ``json_file``, defaults.
    """

    data_file: Path = Field(default_factory=default_data_file)
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    # Known user names; empty accepts every user
    users: Annotated[List[str], NoDecode] = Field(default_factory=list)
    hash_prefix_len: int = Field(default=8, ge=0, le=64)
    salt_length: int = Field(default=20, ge=8, le=128)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX, json_file_encoding="utf-8", extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, JsonConfigSettingsSource(settings_cls))

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR"}:
            raise ValueError(f"Unknown log level: {value}")
        return value

    @field_validator("users", mode="before")
    @classmethod
    def _split_users(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [u.strip() for u in value.split(",") if u.strip()]
        return value

    def is_known_user(self, user: str) -> bool:
        return not self.users or user in self.users


def _settings_for_file(path: Path) -> Type[Settings]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    class FileSettings(Settings):
        model_config = SettingsConfigDict(json_file=path)

    return FileSettings


def load_settings(
    path: Optional[Union[str, Path]] = None, **overrides: Any
) -> Settings:
    """Build settings from defaults, a config file, env vars and overrides.

    Later sources win. Overrides whose value is None are ignored.

    Args:
        path: Optional JSON config file.
        **overrides: Explicit values, e.g. from command-line options.

    Returns:
        Validated settings.

    Raises:
        ConfigError: If the config file or a value is invalid.
    """
    settings_cls = Settings
    if path is not None:
        settings_cls = _settings_for_file(Path(path).expanduser())

    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        settings = settings_cls(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
    except (ValueError, TypeError) as e:
        # Unparseable JSON or a file that is not a JSON object
        raise ConfigError(f"Failed to load settings: {e}") from e

    logger.debug("settings_loaded", data_file=str(settings.data_file))
    return settings
