import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")

CONFIG_FILE_NAME = "konform.yaml"


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def get_config_path() -> Path:
    """Path of the YAML config file, overridable with KONFORM_CONFIG."""
    override = os.environ.get("KONFORM_CONFIG")
    if override:
        return Path(override)
    return Path.cwd() / CONFIG_FILE_NAME


def load_config_file(config_path: Path | None = None) -> dict:
    """Load and parse konform.yaml with environment variable interpolation."""
    config_path = config_path or get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"{CONFIG_FILE_NAME} not found at {config_path}")

    # Load .env early so env vars are available for YAML interpolation
    load_dotenv(config_path.parent / ".env")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="KONFORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Extra search directories, checked before ./templates and ./messages
    template_dirs: list[Path] = []
    message_dirs: list[Path] = []

    # Form defaults
    default_method: str = "post"
    textarea_cols: int = 60
    textarea_rows: int = 10
    option_value: str = "pk"
    option_label: str = "name"


@lru_cache
def get_settings() -> Settings:
    """Load settings from the environment and konform.yaml."""
    base_settings = Settings()

    try:
        file_config = load_config_file()
    except FileNotFoundError:
        return base_settings

    updates = {k: v for k, v in file_config.items() if k in Settings.model_fields}
    if updates:
        return Settings(**{**base_settings.model_dump(), **updates})

    return base_settings
