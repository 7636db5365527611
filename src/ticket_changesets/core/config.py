"""Configuration for Ticket Changesets.

Only one option is recognised: the svn executable. It is read from
``~/.config/ticket-changesets/config.json`` and can be overridden with the
``TICKET_CHANGESETS_SVN_PATH`` environment variable or ``--svn-path``.
"""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator

from ticket_changesets.core.errors import ConfigError

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "ticket-changesets" / "config.json"
SVN_PATH_ENV = "TICKET_CHANGESETS_SVN_PATH"


class ViewerSettings(BaseModel):
    """User settings."""

    svn_path: str = "svn"

    model_config = {"extra": "ignore"}

    @field_validator("svn_path")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("svn_path must not be empty")
        return value


def load_settings(
    config_file: Optional[Path] = None, svn_path: Optional[str] = None
) -> ViewerSettings:
    """Load settings, later sources winning: file, environment, explicit argument."""
    config_file = Path(config_file) if config_file else DEFAULT_CONFIG_FILE
    values = {}

    if config_file.exists():
        try:
            data = json.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read {config_file}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{config_file} must contain a JSON object")
        values.update(data)

    env_svn_path = os.environ.get(SVN_PATH_ENV)
    if env_svn_path:
        values["svn_path"] = env_svn_path

    if svn_path:
        values["svn_path"] = svn_path

    try:
        return ViewerSettings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
