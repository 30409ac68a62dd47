"""Configuration management for Media Analyzer.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (MEDIA_ANALYZER_*)
3. Config file (~/.media-analyzer/config.toml)
4. Default values (lowest priority)
"""

from media_analyzer.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from media_analyzer.config.env import EnvReader
from media_analyzer.config.loader import (
    TomlParseError,
    get_config,
    get_default_config_path,
    load_config_file,
)
from media_analyzer.config.logging_factory import build_logging_config
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

__all__ = [
    # Models
    "AnalyzeConfig",
    "LoggingConfig",
    "MediaAnalyzerConfig",
    "ProbeConfig",
    "SearchConfig",
    "ServerConfig",
    "StoreConfig",
    "WatchConfig",
    # Loader
    "TomlParseError",
    "get_config",
    "get_default_config_path",
    "load_config_file",
    # Builder
    "ConfigBuilder",
    "ConfigSource",
    "EnvReader",
    "source_from_env",
    "source_from_file",
    "build_logging_config",
]
