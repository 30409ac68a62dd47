"""Tests for configuration loading and precedence."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from media_analyzer.config import (
    ConfigBuilder,
    ConfigSource,
    EnvReader,
    LoggingConfig,
    ServerConfig,
    TomlParseError,
    WatchConfig,
    build_logging_config,
    get_config,
    get_default_config_path,
    load_config_file,
    source_from_env,
    source_from_file,
)
from media_analyzer.config.models import AnalyzeConfig, ProbeConfig, SearchConfig


class TestEnvReader:
    """Tests for EnvReader."""

    def test_get_str(self) -> None:
        reader = EnvReader(env={"A": "x"})
        assert reader.get_str("A") == "x"
        assert reader.get_str("B", "default") == "default"

    def test_get_int(self, caplog) -> None:
        reader = EnvReader(env={"N": "9000", "BAD": "nine"})

        assert reader.get_int("N") == 9000
        assert reader.get_int("BAD", 3) == 3
        assert "Invalid integer value for BAD" in caplog.text

    def test_get_int_strict(self) -> None:
        with pytest.raises(ValueError):
            EnvReader(env={"BAD": "x"}).get_int("BAD", strict=True)

    def test_get_float_rejects_non_finite(self) -> None:
        reader = EnvReader(env={"F": "1.5", "NAN": "nan"})

        assert reader.get_float("F") == 1.5
        assert reader.get_float("NAN", 2.0) == 2.0
        with pytest.raises(ValueError):
            reader.get_float("NAN", strict=True)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("true", True), ("1", True), ("YES", True), ("on", True), ("no", False)],
    )
    def test_get_bool(self, value, expected) -> None:
        assert EnvReader(env={"B": value}).get_bool("B") is expected

    def test_get_bool_empty_is_unset(self) -> None:
        assert EnvReader(env={"B": ""}).get_bool("B") is None

    def test_get_path_must_exist(self, tmp_path: Path, caplog) -> None:
        reader = EnvReader(env={"P": str(tmp_path / "missing")})

        assert reader.get_path("P") is None
        assert reader.get_path("P", must_exist=False) == tmp_path / "missing"
        assert "non-existent path" in caplog.text


class TestModels:
    """Tests for config model validation."""

    def test_defaults(self) -> None:
        builder = ConfigBuilder()
        config = builder.build()

        assert config.media_root == Path("/media")
        assert config.store.database_path is None
        assert config.store.enabled is False
        assert config.server.port == 3000
        assert config.server.bind == "127.0.0.1"
        assert config.analyze.batch_size == 25
        assert config.watch.enabled is True
        assert config.watch.debounce_seconds == 2.0
        assert config.search.max_results == 2000
        assert config.search.db_chunk_size == 500

    @pytest.mark.parametrize(
        "factory",
        [
            lambda: ServerConfig(port=0),
            lambda: ServerConfig(port=70000),
            lambda: ProbeConfig(timeout=0),
            lambda: SearchConfig(max_results=0),
            lambda: AnalyzeConfig(batch_size=0),
            lambda: WatchConfig(debounce_seconds=-1),
            lambda: WatchConfig(signature_capacity=0),
            lambda: LoggingConfig(level="verbose"),
            lambda: LoggingConfig(format="xml"),
        ],
    )
    def test_invalid_values_raise(self, factory) -> None:
        with pytest.raises(ValueError):
            factory()


class TestSources:
    """Tests for file and environment sources."""

    def test_source_from_file(self) -> None:
        source = source_from_file(
            {
                "media_root": "/srv/media",
                "database": {"path": "/var/lib/ma/media.db", "timeout": 5},
                "probe": {"ffprobe_path": "/usr/bin/ffprobe", "timeout": 10},
                "watch": {"enabled": False, "debounce_seconds": 0.5},
                "server": {"port": 8080},
                "logging": {"level": "debug", "format": "json"},
            }
        )

        assert source.media_root == Path("/srv/media")
        assert source.database_path == Path("/var/lib/ma/media.db")
        assert source.database_timeout == 5
        assert source.ffprobe_path == Path("/usr/bin/ffprobe")
        assert source.watch_enabled is False
        assert source.server_port == 8080
        assert source.logging_format == "json"
        assert source.search_max_results is None

    def test_source_from_env(self) -> None:
        reader = EnvReader(
            env={
                "MEDIA_ANALYZER_MEDIA_ROOT": "/data",
                "MEDIA_ANALYZER_DATABASE_PATH": "/tmp/x.db",
                "MEDIA_ANALYZER_WATCH": "false",
                "MEDIA_ANALYZER_SERVER_PORT": "9000",
                "MEDIA_ANALYZER_ANALYZE_BATCH_SIZE": "10",
            }
        )

        source = source_from_env(reader)

        assert source.media_root == Path("/data")
        assert source.database_path == Path("/tmp/x.db")
        assert source.watch_enabled is False
        assert source.server_port == 9000
        assert source.analyze_batch_size == 10
        assert source.ffprobe_path is None

    def test_builder_later_sources_win(self) -> None:
        builder = ConfigBuilder()
        builder.apply(ConfigSource(server_port=1111, server_bind="0.0.0.0"))
        builder.apply(ConfigSource(server_port=2222))

        config = builder.build()

        assert config.server.port == 2222
        assert config.server.bind == "0.0.0.0"

    def test_builder_validates(self) -> None:
        builder = ConfigBuilder()
        builder.apply(ConfigSource(server_port=0))
        with pytest.raises(ValueError):
            builder.build()


class TestLoader:
    """Tests for loading the config file and full precedence."""

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert load_config_file(tmp_path / "none.toml") == {}

    def test_parse_error_lenient(self, tmp_path: Path, caplog) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("this is [not toml")

        assert load_config_file(path) == {}
        assert "Failed to load config file" in caplog.text

    def test_parse_error_strict(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("this is [not toml")

        with pytest.raises(TomlParseError):
            load_config_file(path, strict=True)

    def test_default_path_from_env(self, tmp_path: Path) -> None:
        target = tmp_path / "custom.toml"
        with patch.dict(os.environ, {"MEDIA_ANALYZER_CONFIG_PATH": str(target)}):
            assert get_default_config_path() == target

    def test_precedence_cli_over_env_over_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.toml"
        config_file.write_text(
            'media_root = "/from-file"\n'
            "[server]\n"
            "port = 4000\n"
            "[analyze]\n"
            "batch_size = 7\n"
        )
        reader = EnvReader(
            env={
                "MEDIA_ANALYZER_MEDIA_ROOT": "/from-env",
                "MEDIA_ANALYZER_SERVER_PORT": "5000",
            }
        )

        config = get_config(
            config_file, media_root=Path("/from-cli"), env_reader=reader
        )

        assert config.media_root == Path("/from-cli")
        assert config.server.port == 5000
        assert config.analyze.batch_size == 7

    def test_invalid_file_value_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.toml"
        config_file.write_text("[server]\nport = 0\n")

        with pytest.raises(ValueError):
            get_config(config_file, env_reader=EnvReader(env={}))


class TestBuildLoggingConfig:
    """Tests for build_logging_config."""

    def test_overrides_applied(self, tmp_path: Path) -> None:
        base = LoggingConfig(level="info", format="text", max_bytes=100)

        config = build_logging_config(
            base, level="debug", file=tmp_path / "x.log", format="json"
        )

        assert config.level == "debug"
        assert config.file == tmp_path / "x.log"
        assert config.format == "json"
        assert config.max_bytes == 100

    def test_none_keeps_base(self) -> None:
        base = LoggingConfig(level="warning")
        assert build_logging_config(base).level == "warning"

    def test_invalid_override_raises(self) -> None:
        with pytest.raises(ValueError):
            build_logging_config(LoggingConfig(), level="loud")
