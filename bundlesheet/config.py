#!/usr/bin/env python3
"""
Settings for the command line tool.

Values come from four places, in order of precedence: command line options,
a YAML config file, BUNDLESHEET_* environment variables and the defaults below.

Example bundlesheet.yaml:
```yaml
root: src/main/resources
includes:
  - "i18n/**/*.properties"
excludes:
  - "**/test/**"
encoding: utf-8
xls_file: translations/i18n.xlsx
missing_key_action: comment
verbose: false
```
"""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import PreconditionError
from .format_handlers.properties import MissingKeyAction, resolve_encoding
from .resource_bundles import DEFAULT_INCLUDES

DEFAULT_CONFIG_FILE = "bundlesheet.yaml"


class Settings(BaseSettings):
    """Effective settings of one command line run."""

    model_config = SettingsConfigDict(
        env_prefix="BUNDLESHEET_",
        case_sensitive=False,
        extra="forbid",
    )

    root: str = Field(default=".", description="Root directory of the .properties files")
    includes: list[str] = Field(default_factory=lambda: list(DEFAULT_INCLUDES))
    excludes: list[str] = Field(default_factory=list)
    encoding: str = "utf-8"
    xls_file: str = "i18n.xlsx"
    missing_key_action: str = "nothing"
    verbose: bool = False

    @field_validator("includes", "excludes", mode="before")
    @classmethod
    def single_pattern_as_list(cls, v):
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("encoding")
    @classmethod
    def known_encoding(cls, v):
        return resolve_encoding(v)

    @field_validator("missing_key_action")
    @classmethod
    def known_missing_key_action(cls, v):
        return MissingKeyAction.from_string(v).value


def _describe(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "settings"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


def load_config(path: Optional[str]) -> dict[str, Any]:
    """
    Load settings from a YAML config file.

    Args:
        path: Config file. If None, bundlesheet.yaml in the current
            directory is used when it exists.

    Returns:
        Mapping of setting name -> value (only the settings present in the file)
    """
    if path is None:
        if not Path(DEFAULT_CONFIG_FILE).is_file():
            return {}
        path = DEFAULT_CONFIG_FILE

    config_path = Path(path)
    if not config_path.is_file():
        raise PreconditionError(f"Config file not found: {path}")

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise PreconditionError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PreconditionError(f"{path}: config root must be a mapping")

    data = {str(name): value for name, value in data.items()}
    try:
        settings = Settings(**data)
    except ValidationError as e:
        raise PreconditionError(f"{path}: {_describe(e)}") from e
    return settings.model_dump(include=set(data))


def resolve_settings(cli_values: dict[str, Any], config_path: Optional[str] = None) -> Settings:
    """
    Combine command line values, config file, environment and defaults.

    Command line values of None (option not given) fall through to the
    config file, then to BUNDLESHEET_* environment variables and then to
    the defaults.
    """
    values = load_config(config_path)
    values.update({name: value for name, value in cli_values.items() if value is not None})
    try:
        return Settings(**values)
    except ValidationError as e:
        raise PreconditionError(f"Invalid settings: {_describe(e)}") from e
