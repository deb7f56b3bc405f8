"""
Profile storage.

Each client profile owns JSON files named `{profile}_{suffix}.json` in one
directory: `{profile}_settings.json` for its ClientSettings and, for V2
profiles, `{profile}_token.json` for the access token (see FileStore).
"""

import json
import logging
import os
from pathlib import Path

from .models import ClientSettings, ConfigError

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "ZOHO_CRM_HOME"


def get_base_dir() -> Path:
    """Directory of the profile files: $ZOHO_CRM_HOME, or ~/.zoho_crm. Created on first use."""
    env_home = os.environ.get(HOME_ENV_VAR)
    base_dir = Path(env_home) if env_home else Path.home() / ".zoho_crm"

    base_dir.mkdir(parents=True, exist_ok=True)
    return base_dir


def config_path(profile: str, suffix: str = "settings") -> Path:
    """Path of the `suffix` file of a profile, e.g. config_path("eu", "token")."""
    return get_base_dir() / f"{profile}_{suffix}.json"


def save_json(profile: str, suffix: str, data: dict) -> Path:
    """
    Write one of the profile files, pretty-printed.

    Returns:
        The path written

    Raises:
        ConfigError: If the file cannot be written
    """
    path = config_path(profile, suffix)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        raise ConfigError(f"Failed to save JSON to {path}: {e}")

    logger.debug(f"Wrote {suffix} of profile '{profile}' to {path}")
    return path


def load_json(profile: str, suffix: str) -> dict:
    """
    Read one of the profile files.

    Raises:
        ConfigError: If the profile has no such file, or it is not valid JSON
    """
    path = config_path(profile, suffix)

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to load JSON from {path}: {e}")

    logger.debug(f"Read {suffix} of profile '{profile}' from {path}")
    return data


def save_client_settings(profile: str, settings: ClientSettings) -> Path:
    return save_json(profile, "settings", settings.to_dict())


def load_client_settings(profile: str) -> ClientSettings:
    """
    Read the connection settings of a profile.

    Raises:
        ConfigError: If the profile is not configured or its settings are invalid
    """
    data = load_json(profile, "settings")
    try:
        return ClientSettings.from_dict(data)
    except (KeyError, ValueError) as e:
        raise ConfigError(f"Failed to parse settings for profile '{profile}': {e}")
