"""
Configuration loader — reads cybex.yml into the Settings model.

Lookup order:
    explicit --config path  >  cybex.yml walking up from cwd
    >  ~/.config/cybex/cybex.yml  >  built-in defaults

Relative ``assets_dir`` values are resolved against the directory
containing the config file, so a checkout can carry its own assets.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from cybex.core.errors import CybexError
from cybex.core.models.settings import Settings

logger = logging.getLogger(__name__)

CONFIG_FILE = "cybex.yml"


class ConfigError(CybexError):
    """Raised when the configuration file is invalid or unreadable."""


def user_config_path() -> Path:
    """The per-user fallback config location."""
    return Path.home() / ".config" / "cybex" / CONFIG_FILE


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for cybex.yml starting from the given directory, walking up.

    Falls back to ``~/.config/cybex/cybex.yml``.

    Returns:
        Path to the config file, or None if there is none.
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

    fallback = user_config_path()
    if fallback.is_file():
        return fallback
    return None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit config path. If None, searches (see module docstring)
            and returns defaults when nothing is found.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found — using defaults", CONFIG_FILE)
        return Settings()

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return Settings()

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    base = path.parent.resolve()
    for key in ("home", "system_root", "npm_prefix"):
        if isinstance(data.get(key), str):
            data[key] = Path(data[key]).expanduser()
    assets = data.get("assets_dir", "config")
    data["assets_dir"] = _resolve_relative(Path(str(assets)).expanduser(), base)

    try:
        settings = Settings.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded settings from %s (assets: %s)", path, settings.assets_dir)
    return settings


def _resolve_relative(path: Path, base: Path) -> Path:
    return path if path.is_absolute() else (base / path).resolve()
