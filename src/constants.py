"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    RESOLUTION_FAILED = 3
    USAGE_ERROR = 4


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    FORGE_URL = "https://forgeapi.puppetlabs.com"
    RELEASES_ENDPOINT = "/api/v1/releases.json"
    MODULE_DIR = os.path.join(os.path.expanduser("~"), ".modinstall", "modules")
    CACHE_DIR = os.path.join(os.path.expanduser("~"), ".modinstall", "cache")
    METADATA_FILE = "metadata.json"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    DOWNLOAD_CHUNK_SIZE = 65536
    FORCE_HINT = "Use `puppet module install --force` to install this module anyway"

    ENV_CONFIG = "MODINSTALL_CONFIG"
    ENV_LOG_LEVEL = "MODINSTALL_LOG_LEVEL"
    CONFIG_FILENAMES = ("modinstall.yml", "modinstall.yaml")


# Keys accepted from the YAML config and the Constants attribute they override.
_CONFIG_KEYS = {
    "forge_url": "FORGE_URL",
    "module_dir": "MODULE_DIR",
    "cache_dir": "CACHE_DIR",
    "request_timeout": "REQUEST_TIMEOUT",
    "retry_max": "HTTP_RETRY_MAX",
    "retry_base_delay": "HTTP_RETRY_BASE_DELAY_SEC",
}


def _config_candidates(explicit: Optional[str]) -> list:
    """Return config paths to try in priority order."""
    if explicit:
        return [explicit]
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        return [env_path]
    paths = [os.path.join(os.getcwd(), name) for name in Constants.CONFIG_FILENAMES]
    xdg = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    paths.extend(os.path.join(xdg, "modinstall", name) for name in Constants.CONFIG_FILENAMES)
    return paths


def load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the first YAML config found and apply it onto Constants.

    Args:
        path: Explicit config path; when omitted the environment and default
            locations are searched.

    Returns:
        dict: The settings that were applied (empty when no file was found).
    """
    import yaml  # pylint: disable=import-outside-toplevel

    for candidate in _config_candidates(path):
        if not os.path.isfile(candidate):
            continue
        with open(candidate, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level must be a mapping", candidate)
            return {}
        section = data.get("modinstall", data)
        applied: Dict[str, Any] = {}
        for key, attr in _CONFIG_KEYS.items():
            if key in section and section[key] is not None:
                value = section[key]
                if isinstance(getattr(Constants, attr), (int, float)) and not isinstance(value, bool):
                    value = type(getattr(Constants, attr))(value)
                setattr(Constants, attr, value)
                applied[key] = value
        logger.debug("Loaded config %s: %s", candidate, sorted(applied))
        return applied
    return {}
