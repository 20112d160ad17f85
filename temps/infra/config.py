"""
Configuration management using Pydantic Settings.

Architecture Decision: Why pydantic-settings?
- Type-safe configuration with validation
- Supports multiple sources (YAML, env vars, defaults)
- Easy to test with different configurations

Sources, highest priority first:
1. Explicit values (command line options)
2. Environment variables (TEMPS_FILE, TEMPS_MIDNIGHT_OFFSET, ...)
3. YAML config file
4. Default values
"""

import datetime
import os
from pathlib import Path
from typing import Any, Tuple, Type

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from temps.domain.exceptions import ConfigError, InvalidTimeError
from temps.utils import parse_duration


def default_config_file() -> Path:
    """Locate the YAML config file"""
    explicit = os.getenv('TEMPS_CONFIG_FILE')
    if explicit:
        return Path(explicit).expanduser()
    base = os.getenv('XDG_CONFIG_HOME')
    base = Path(base) if base else Path.home() / '.config'
    return base / 'temps' / 'settings.yaml'


class Settings(BaseSettings):
    """
    Application settings. Every value is validated here, so the core only
    receives values it can use.
    """
    model_config = SettingsConfigDict(
        env_prefix='TEMPS_',
        extra='ignore',
        validate_default=True,
    )

    # Tracking data
    temps_file: Path = Field(
        default=Path('~/temps.tsv'),
        validation_alias='temps_file',
        description="Path for the tracking data",
    )

    # Day boundaries
    midnight_offset: datetime.timedelta = Field(
        default=datetime.timedelta(0),
        description="Time at which we consider the current day to have ended",
    )
    first_weekday: int = Field(default=0, ge=0, le=6, description="First day of the week, 0 = Monday")

    # Timeline
    timeline_row_minutes: int = Field(default=30, ge=1, le=120, description="Minutes per timeline row")
    timeline_lane_width: int = Field(default=8, ge=1, le=80, description="Characters per timeline lane")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=default_config_file()),
        )

    @field_validator('temps_file', mode='after')
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator('midnight_offset', mode='before')
    @classmethod
    def _parse_offset(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return parse_duration(value)
            except InvalidTimeError as e:
                raise ValueError(str(e)) from None
        return value

    @field_validator('midnight_offset', mode='after')
    @classmethod
    def _check_offset(cls, value: datetime.timedelta) -> datetime.timedelta:
        if not datetime.timedelta(0) <= value < datetime.timedelta(days=1):
            raise ValueError("must be between 00:00 and 24:00")
        return value

    @field_validator('timeline_row_minutes', mode='after')
    @classmethod
    def _check_row_minutes(cls, value: int) -> int:
        if 120 % value:
            raise ValueError("must divide 120 so that labels fall on row boundaries")
        return value


def load_settings(**overrides: Any) -> Settings:
    """
    Resolve settings from all sources.

    Args:
        **overrides: Explicit values; None means "not given"

    Raises:
        ConfigError: If any value is invalid
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**values)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error['loc']) or "settings"
        raise ConfigError(f"Invalid configuration for '{field}': {error['msg']}") from None
