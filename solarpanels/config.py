"""Configuration loading."""

import json
import os
from pathlib import Path

import appdirs

from .aggregator import AVERAGING_STRATEGIES
from .errors import ConfigError

CONFIG_FILENAME = "solarpanels.json"
SOLARPANELS_CONFIG_DIR = appdirs.user_config_dir("solarpanels")
API_BASE_URL_ENV = "SOLARPANELS_API_BASE_URL"

DEFAULTS = {
    "api_base_url": None,
    "timeout": 10.0,
    "deadline": 30.0,
    "averages": "snapshot",
    "uv_location": "per",
}


def config_path(path=None):
    """Find the config file to use.

    An explicit path wins, then solarpanels.json in the working directory,
    then the per-user config directory.

    Returns:
        Path: Config file path, or None if there is none
    """
    if path:
        return Path(path)
    for candidate in (Path(CONFIG_FILENAME), Path(SOLARPANELS_CONFIG_DIR, CONFIG_FILENAME)):
        if candidate.is_file():
            return candidate
    return None


def load_config(path=None, environ=None):
    """Load configuration from solarpanels.json and the environment.

    SOLARPANELS_API_BASE_URL overrides api_base_url from the file.

    Args:
        path: Optional explicit config file path
        environ: Mapping to read environment variables from, defaults to os.environ

    Returns:
        dict: Validated configuration

    Raises:
        ConfigError: If the file is unreadable or a value is invalid
    """
    environ = os.environ if environ is None else environ
    config = dict(DEFAULTS)

    file_path = config_path(path)
    if file_path is not None:
        try:
            with open(file_path) as fd:
                config.update(json.load(fd))
        except (OSError, ValueError) as e:
            raise ConfigError(f"cannot read config {file_path}: {e}") from e

    if environ.get(API_BASE_URL_ENV):
        config["api_base_url"] = environ[API_BASE_URL_ENV]

    if not config["api_base_url"]:
        raise ConfigError(f"api_base_url is not set; add it to {CONFIG_FILENAME} or set {API_BASE_URL_ENV}")
    config["api_base_url"] = config["api_base_url"].rstrip("/")

    for key in ("timeout", "deadline"):
        try:
            config[key] = float(config[key])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{key} must be a number of seconds: {e}") from e
        if config[key] <= 0:
            raise ConfigError(f"{key} must be positive, got {config[key]}")

    if config["averages"] not in AVERAGING_STRATEGIES:
        raise ConfigError(
            f"averages must be one of {list(AVERAGING_STRATEGIES)}, got {config['averages']!r}"
        )

    return config
