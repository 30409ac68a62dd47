"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to get_config)
2. Environment variables (MEDIA_ANALYZER_*)
3. Config file (~/.media-analyzer/config.toml)
4. Default values

Environment variables:
- MEDIA_ANALYZER_MEDIA_ROOT: Root of the media tree (default /media)
- MEDIA_ANALYZER_DATABASE_PATH: SQLite database file (unset = store disabled)
- MEDIA_ANALYZER_FFPROBE_PATH: Path to ffprobe executable
- MEDIA_ANALYZER_PROBE_TIMEOUT: Probe timeout in seconds (default 60)
- MEDIA_ANALYZER_SEARCH_MAX_RESULTS: Search page size clamp (default 2000)
- MEDIA_ANALYZER_SEARCH_DB_CHUNK_SIZE: Paths per name-search lookup (default 500)
- MEDIA_ANALYZER_ANALYZE_BATCH_SIZE: Analyze-all batch size (default 25)
- MEDIA_ANALYZER_WATCH: Enable the change watcher (default true)
- MEDIA_ANALYZER_WATCH_DEBOUNCE: Watcher debounce seconds (default 2.0)
- MEDIA_ANALYZER_WATCH_SIGNATURE_CAPACITY: Remembered signatures (default 10000)
- MEDIA_ANALYZER_SERVER_BIND / MEDIA_ANALYZER_SERVER_PORT: HTTP listen address
- MEDIA_ANALYZER_LOG_LEVEL / _LOG_FILE / _LOG_FORMAT: Logging overrides
- MEDIA_ANALYZER_CONFIG_PATH: Config file (overrides default location)
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from media_analyzer.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from media_analyzer.config.env import EnvReader
from media_analyzer.config.models import MediaAnalyzerConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".media-analyzer"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


class TomlParseError(Exception):
    """Raised when the config file cannot be parsed."""

    pass


def get_default_config_path() -> Path:
    """Get the config file path, honoring MEDIA_ANALYZER_CONFIG_PATH."""
    env_path = os.environ.get("MEDIA_ANALYZER_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config_file(
    path: Path | None = None, *, strict: bool = False
) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Args:
        path: Path to config file. If None, uses the default location.
        strict: If True, raise TomlParseError on parse failures.
            If False (default), log a warning and return an empty dict.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist.

    Raises:
        TomlParseError: When strict=True and the file cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise TomlParseError(f"Failed to parse config file {path}: {e}") from e
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config from %s", path)
    return config


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    media_root: Path | None = None,
    database_path: Path | None = None,
    ffprobe_path: Path | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> MediaAnalyzerConfig:
    """Get configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides MEDIA_ANALYZER_CONFIG_PATH).
        media_root: CLI override for the media root.
        database_path: CLI override for the database path.
        ffprobe_path: CLI override for the ffprobe path.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise TomlParseError on config file parse failures.

    Returns:
        MediaAnalyzerConfig with merged configuration.

    Raises:
        TomlParseError: When strict=True and the config file cannot be parsed.
        ValueError: If a resolved value fails validation.
    """
    reader = env_reader or EnvReader()
    file_config = load_config_file(config_path, strict=strict)

    cli_source = ConfigSource(
        media_root=media_root,
        database_path=database_path,
        ffprobe_path=ffprobe_path,
    )

    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config))
    builder.apply(source_from_env(reader))
    builder.apply(cli_source)
    return builder.build()
