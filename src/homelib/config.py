# ABOUTME: Configuration for homelib: database location and cover image directory.
# ABOUTME: Loaded once per invocation from an optional JSON file and passed around explicitly.

import json
import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_HOME = Path.home() / ".homelib"
DEFAULT_CONFIG_PATH = DEFAULT_HOME / "config.json"


class ConfigError(Exception):
    """Raised when the configuration file exists but cannot be used."""


@dataclass(frozen=True)
class LibraryConfig:
    """Where the catalog database and cover images live."""

    db_path: Path = DEFAULT_HOME / "library.db"
    covers_dir: Path = DEFAULT_HOME / "covers"

    def with_overrides(
        self, *, db_path: Path | None = None, covers_dir: Path | None = None,
    ) -> "LibraryConfig":
        """Return a copy with any non-None overrides applied (CLI flags win)."""
        return LibraryConfig(
            db_path=db_path or self.db_path,
            covers_dir=covers_dir or self.covers_dir,
        )


def _path_value(data: dict[str, object], key: str, base: Path) -> Path | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{key}' must be a non-empty string")
    path = Path(value).expanduser()
    return path if path.is_absolute() else base / path


def load_config(path: Path | None = None) -> LibraryConfig:
    """Load configuration from a JSON file.

    Recognized keys are "database" and "covers_directory". Relative paths are
    resolved against the directory containing the config file. A missing file
    yields the defaults.

    Raises:
        ConfigError: If the file is unreadable, not a JSON object, or has
            values of the wrong type.
    """
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return LibraryConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read config {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a JSON object")

    base = config_path.parent
    defaults = LibraryConfig()
    config = defaults.with_overrides(
        db_path=_path_value(data, "database", base),
        covers_dir=_path_value(data, "covers_directory", base),
    )
    logger.info("Configuration loaded from %s", config_path)
    return config
