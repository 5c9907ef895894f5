"""fstree configuration management.

Configuration sources (in priority order):
1. Environment variables (FSTREE_ prefix)
2. Config file (fstree.yaml)
3. Defaults
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fstree.paths import normalize_mode


class _ConfigLoader(yaml.SafeLoader):
    """SafeLoader that keeps integer scalars as strings.

    Modes are written in octal, and `file: 644` must not arrive as decimal 644.
    Numeric fields convert the strings back through pydantic.
    """


_ConfigLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:int"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class WalkConfig(BaseModel):
    """Traversal engine defaults."""

    threads: int = Field(default=1, ge=1)


class ModeConfig(BaseModel):
    """Default permission bits, before the process umask is applied."""

    file: int = 0o666
    dir: int = 0o777

    @field_validator("file", "dir", mode="before")
    @classmethod
    def _octal(cls, value: object) -> object:
        # Strings are octal permission bits ("644", "0o644"); ints are taken as bits.
        if isinstance(value, str | int):
            return normalize_mode(value)
        return value


class JsonConfig(BaseModel):
    """JSON helper defaults."""

    indent: int | str | None = None
    ensure_ascii: bool = False

    @field_validator("indent", mode="before")
    @classmethod
    def _numeric_indent(cls, value: object) -> object:
        # Environment values always arrive as strings.
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        return value


class MoveConfig(BaseModel):
    """Move behaviour."""

    # Copy + delete when rename fails with EXDEV.
    cross_device_fallback: bool = True


class Settings(BaseSettings):
    """fstree settings."""

    model_config = SettingsConfigDict(
        env_prefix="FSTREE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    walk: WalkConfig = Field(default_factory=WalkConfig)
    modes: ModeConfig = Field(default_factory=ModeConfig)
    json_io: JsonConfig = Field(default_factory=JsonConfig)
    move: MoveConfig = Field(default_factory=MoveConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment beats values passed in from the YAML file.
        return env_settings, init_settings, dotenv_settings, file_secret_settings


def _load_config_file() -> dict:
    """Load configuration from YAML file if exists.

    Looks for config file in order:
    1. FSTREE_CONFIG_FILE environment variable
    2. ./fstree.yaml
    """
    config_paths = [
        os.environ.get("FSTREE_CONFIG_FILE"),
        Path("fstree.yaml"),
    ]

    for path in config_paths:
        if path is None:
            continue
        path = Path(path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                return yaml.load(f, Loader=_ConfigLoader) or {}

    return {}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    File values are passed as initial values; environment variables
    override them via pydantic-settings.
    """
    file_config = _load_config_file()
    return Settings(**file_config)
