"""Application configuration using pydantic-settings."""

import functools
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from speech_attempt_evaluator.assessment.thresholds import (
    THRESHOLDS,
    ThresholdConfig,
    load_thresholds,
)
from speech_attempt_evaluator.models.evaluation import EvaluationMode


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if 'server' in data:
            flattened['host'] = data['server'].get('host')
            flattened['port'] = data['server'].get('port')
        if 'evaluation' in data:
            evaluation = data['evaluation']
            flattened['default_language'] = evaluation.get('default_language')
            flattened['default_mode'] = evaluation.get('default_mode')
            flattened['thresholds_file'] = evaluation.get('thresholds_file')
        if 'audio' in data:
            flattened['max_audio_bytes'] = data['audio'].get('max_bytes')

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Authentication (optional: None disables auth)
    app_secret: str | None = Field(default=None)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Evaluation
    default_language: str = Field(default="es")
    default_mode: EvaluationMode = Field(default=EvaluationMode.ADAPTIVE)
    thresholds_file: Path | None = Field(default=None)

    # Audio
    max_audio_bytes: int = Field(default=10 * 1024 * 1024)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def thresholds_path(self) -> Path | None:
        """Thresholds override file, resolved against the project root."""
        if self.thresholds_file is None:
            return None
        if self.thresholds_file.is_absolute():
            return self.thresholds_file
        return self.project_root / self.thresholds_file

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()


def resolve_thresholds(settings: Settings) -> Mapping[str, ThresholdConfig]:
    """Threshold table for the given settings (built-ins plus overrides)."""
    path = settings.thresholds_path
    if path is None:
        return THRESHOLDS
    return load_thresholds(path)


@functools.lru_cache
def get_thresholds_table() -> Mapping[str, ThresholdConfig]:
    """Threshold table for the application settings, loaded once."""
    return resolve_thresholds(get_settings())
