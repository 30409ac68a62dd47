"""Configuration data models.

Each section validates itself in __post_init__, so an invalid value from
any source fails at load time rather than deep inside an operation.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ProbeConfig:
    """Configuration for the ffprobe subprocess."""

    # None = look up "ffprobe" on PATH
    ffprobe_path: Path | None = None

    # Seconds before a hung probe is killed
    timeout: float = 60.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")


@dataclass
class StoreConfig:
    """Configuration for the analysis store."""

    # None disables the store
    database_path: Path | None = None

    # SQLite lock timeout in seconds
    timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @property
    def enabled(self) -> bool:
        return self.database_path is not None


@dataclass
class SearchConfig:
    """Configuration for search paging."""

    max_results: int = 2000
    """Upper clamp for a search page size."""

    db_chunk_size: int = 500
    """Paths per store lookup when joining name-search hits."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_results < 1:
            raise ValueError(f"max_results must be >= 1, got {self.max_results}")
        if self.db_chunk_size < 1:
            raise ValueError(f"db_chunk_size must be >= 1, got {self.db_chunk_size}")


@dataclass
class AnalyzeConfig:
    """Configuration for bulk analysis."""

    batch_size: int = 25

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")


@dataclass
class WatchConfig:
    """Configuration for the change watcher."""

    enabled: bool = True
    debounce_seconds: float = 2.0
    signature_capacity: int = 10_000

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.debounce_seconds < 0:
            raise ValueError(
                f"debounce_seconds must be >= 0, got {self.debounce_seconds}"
            )
        if self.signature_capacity < 1:
            raise ValueError(
                f"signature_capacity must be >= 1, got {self.signature_capacity}"
            )


@dataclass
class ServerConfig:
    """Configuration for `media-analyzer serve`."""

    bind: str = "127.0.0.1"
    """Network address to bind to. Default localhost."""

    port: int = 3000
    """Port number for the HTTP server."""

    shutdown_timeout: float = 30.0
    """Seconds to wait for graceful shutdown."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be 1-65535, got {self.port}")
        if self.shutdown_timeout <= 0:
            raise ValueError(
                f"shutdown_timeout must be positive, got {self.shutdown_timeout}"
            )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class MediaAnalyzerConfig:
    """Main configuration container."""

    media_root: Path = Path("/media")
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    analyze: AnalyzeConfig = field(default_factory=AnalyzeConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
