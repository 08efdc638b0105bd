"""
Configuration loader — reads slimpack.yml into a PackagerConfig.

Reads YAML, validates it against the Pydantic schema, and returns the
typed model. Every relative path in the file resolves against the
directory the file lives in.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from slimpack.core.models.package import PackagerConfig

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "slimpack.yml"


class ConfigError(Exception):
    """Raised when packager configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for slimpack.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to slimpack.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> PackagerConfig:
    """Load and validate packager configuration.

    Args:
        path: Explicit path to slimpack.yml. If None, searches upward.

    Returns:
        Validated PackagerConfig model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(f"No {CONFIG_FILE} found. Create one or specify --config.")

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading packager config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "packager" key or be flat
    if isinstance(data.get("packager"), dict):
        packager_data = dict(data["packager"])
        for key in ("version", "packages", "local_packages"):
            if key in data and key not in packager_data:
                packager_data[key] = data[key]
    else:
        packager_data = data

    try:
        config = PackagerConfig.model_validate(packager_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid packager configuration: {e}") from e

    logger.info("Loaded packager config with %d packages", len(config.packages))
    return config


def project_root(config_path: Path) -> Path:
    """Get the project root directory from a config file path."""
    return config_path.parent.resolve()
