"""Configuration builder with explicit layering.

ConfigBuilder composes ConfigSources (file, environment, CLI) into a
MediaAnalyzerConfig. Later sources override earlier ones for every value
they actually set.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from media_analyzer.config.env import ENV_PREFIX, EnvReader
from media_analyzer.config.models import (
    AnalyzeConfig,
    LoggingConfig,
    MediaAnalyzerConfig,
    ProbeConfig,
    SearchConfig,
    ServerConfig,
    StoreConfig,
    WatchConfig,
)


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and will not
    override values from lower-precedence sources.
    """

    media_root: Path | None = None

    # Probe
    ffprobe_path: Path | None = None
    probe_timeout: float | None = None

    # Store
    database_path: Path | None = None
    database_timeout: float | None = None

    # Search
    search_max_results: int | None = None
    search_db_chunk_size: int | None = None

    # Analyze
    analyze_batch_size: int | None = None

    # Watch
    watch_enabled: bool | None = None
    watch_debounce_seconds: float | None = None
    watch_signature_capacity: int | None = None

    # Server
    server_bind: str | None = None
    server_port: int | None = None
    server_shutdown_timeout: float | None = None

    # Logging
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds MediaAnalyzerConfig by layering ConfigSources with precedence.

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config))
        builder.apply(source_from_env(reader))
        builder.apply(cli_source)
        config = builder.build()
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource) -> None:
        """Apply a source; its non-None values override existing ones."""
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                self._values[field_obj.name] = value

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self) -> MediaAnalyzerConfig:
        """Build the final config with defaults for unset values.

        Raises:
            ValueError: If any resolved value fails validation.
        """
        probe = ProbeConfig(
            ffprobe_path=self._get("ffprobe_path", None),
            timeout=self._get("probe_timeout", 60.0),
        )
        store = StoreConfig(
            database_path=self._get("database_path", None),
            timeout=self._get("database_timeout", 30.0),
        )
        search = SearchConfig(
            max_results=self._get("search_max_results", 2000),
            db_chunk_size=self._get("search_db_chunk_size", 500),
        )
        analyze = AnalyzeConfig(
            batch_size=self._get("analyze_batch_size", 25),
        )
        watch = WatchConfig(
            enabled=self._get("watch_enabled", True),
            debounce_seconds=self._get("watch_debounce_seconds", 2.0),
            signature_capacity=self._get("watch_signature_capacity", 10_000),
        )
        server = ServerConfig(
            bind=self._get("server_bind", "127.0.0.1"),
            port=self._get("server_port", 3000),
            shutdown_timeout=self._get("server_shutdown_timeout", 30.0),
        )
        logging_config = LoggingConfig(
            level=self._get("logging_level", "info"),
            file=self._get("logging_file", None),
            format=self._get("logging_format", "text"),
            include_stderr=self._get("logging_include_stderr", False),
            max_bytes=self._get("logging_max_bytes", 10_485_760),
            backup_count=self._get("logging_backup_count", 5),
        )

        return MediaAnalyzerConfig(
            media_root=self._get("media_root", Path("/media")),
            probe=probe,
            store=store,
            search=search,
            analyze=analyze,
            watch=watch,
            server=server,
            logging=logging_config,
        )


def _path_or_none(value: Any) -> Path | None:
    return Path(value).expanduser() if value else None


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create ConfigSource from a parsed TOML config file."""
    probe = file_config.get("probe", {})
    database = file_config.get("database", {})
    search = file_config.get("search", {})
    analyze = file_config.get("analyze", {})
    watch = file_config.get("watch", {})
    server = file_config.get("server", {})
    logging_conf = file_config.get("logging", {})

    return ConfigSource(
        media_root=_path_or_none(file_config.get("media_root")),
        # Probe
        ffprobe_path=_path_or_none(probe.get("ffprobe_path")),
        probe_timeout=probe.get("timeout"),
        # Store
        database_path=_path_or_none(database.get("path")),
        database_timeout=database.get("timeout"),
        # Search
        search_max_results=search.get("max_results"),
        search_db_chunk_size=search.get("db_chunk_size"),
        # Analyze
        analyze_batch_size=analyze.get("batch_size"),
        # Watch
        watch_enabled=watch.get("enabled"),
        watch_debounce_seconds=watch.get("debounce_seconds"),
        watch_signature_capacity=watch.get("signature_capacity"),
        # Server
        server_bind=server.get("bind"),
        server_port=server.get("port"),
        server_shutdown_timeout=server.get("shutdown_timeout"),
        # Logging
        logging_level=logging_conf.get("level"),
        logging_file=_path_or_none(logging_conf.get("file")),
        logging_format=logging_conf.get("format"),
        logging_include_stderr=logging_conf.get("include_stderr"),
        logging_max_bytes=logging_conf.get("max_bytes"),
        logging_backup_count=logging_conf.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from MEDIA_ANALYZER_* environment variables."""
    p = ENV_PREFIX
    return ConfigSource(
        media_root=reader.get_path(f"{p}MEDIA_ROOT", must_exist=False),
        # Probe
        ffprobe_path=reader.get_path(f"{p}FFPROBE_PATH"),
        probe_timeout=reader.get_float(f"{p}PROBE_TIMEOUT"),
        # Store
        database_path=reader.get_path(f"{p}DATABASE_PATH", must_exist=False),
        database_timeout=None,  # No env var
        # Search
        search_max_results=reader.get_int(f"{p}SEARCH_MAX_RESULTS"),
        search_db_chunk_size=reader.get_int(f"{p}SEARCH_DB_CHUNK_SIZE"),
        # Analyze
        analyze_batch_size=reader.get_int(f"{p}ANALYZE_BATCH_SIZE"),
        # Watch
        watch_enabled=reader.get_bool(f"{p}WATCH"),
        watch_debounce_seconds=reader.get_float(f"{p}WATCH_DEBOUNCE"),
        watch_signature_capacity=reader.get_int(f"{p}WATCH_SIGNATURE_CAPACITY"),
        # Server
        server_bind=reader.get_str(f"{p}SERVER_BIND"),
        server_port=reader.get_int(f"{p}SERVER_PORT"),
        server_shutdown_timeout=None,  # No env var
        # Logging
        logging_level=reader.get_str(f"{p}LOG_LEVEL"),
        logging_file=reader.get_path(f"{p}LOG_FILE", must_exist=False),
        logging_format=reader.get_str(f"{p}LOG_FORMAT"),
    )
