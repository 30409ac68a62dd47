"""Shared test fixtures for Media Analyzer."""

import json
import os
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from media_analyzer.config import MediaAnalyzerConfig, StoreConfig, WatchConfig
from media_analyzer.db import AnalysisStore
from media_analyzer.domain import (
    AnalysisFailed,
    AnalysisOk,
    AudioInfo,
    ContainerInfo,
    MediaKind,
    VideoInfo,
)
from media_analyzer.introspector import StubProber

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_ffprobe_fixture(name: str) -> dict:
    """Load an ffprobe JSON fixture by name.

    Args:
        name: Name of the fixture file (without .json extension).

    Returns:
        Parsed JSON data from the fixture.
    """
    fixture_path = FIXTURES_DIR / "ffprobe" / f"{name}.json"
    return json.loads(fixture_path.read_text())


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture
def temp_db(temp_dir: Path) -> Path:
    """Create a temporary database path."""
    return temp_dir / "db" / "media.db"


@pytest.fixture
def ffprobe_fixture() -> Callable[[str], dict]:
    """Return the ffprobe fixture loader."""
    return load_ffprobe_fixture


@pytest.fixture
def media_root(temp_dir: Path) -> Path:
    """Create a media tree with a few files of each kind.

    Layout:
        movies/movie.mp4        (video + audio)
        movies/silent.webm      (video only)
        movies/extras/trailer.mp4
        music/song.mp3
        photos/photo.png
        notes.txt               (not media)
        .cache/hidden.mp4       (hidden, never listed)
    """
    root = temp_dir / "media"
    files = {
        "movies/movie.mp4": b"\x00" * 64,
        "movies/silent.webm": b"\x00" * 32,
        "movies/extras/trailer.mp4": b"\x00" * 16,
        "music/song.mp3": b"\x00" * 48,
        "photos/photo.png": b"\x00" * 8,
        "notes.txt": b"hello",
        ".cache/hidden.mp4": b"\x00",
    }
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return root


@pytest.fixture
def stub_prober() -> StubProber:
    """StubProber answering for the files in ``media_root``.

    notes.txt has no response, so probing it fails.
    """
    return StubProber(
        {
            "movie.mp4": load_ffprobe_fixture("video_with_audio"),
            "trailer.mp4": load_ffprobe_fixture("video_with_audio"),
            "silent.webm": load_ffprobe_fixture("video_only"),
            "song.mp3": load_ffprobe_fixture("audio_only"),
            "photo.png": load_ffprobe_fixture("image"),
        }
    )


@pytest.fixture
def store(temp_db: Path):
    """Open an enabled AnalysisStore on a temporary database."""
    analysis_store = AnalysisStore.open(temp_db)
    yield analysis_store
    analysis_store.close()


@pytest.fixture
def disabled_store() -> AnalysisStore:
    """AnalysisStore with no database configured."""
    return AnalysisStore.open(None)


@pytest.fixture
def test_config(media_root: Path, temp_db: Path) -> MediaAnalyzerConfig:
    """Configuration pointing at ``media_root`` with the watcher disabled."""
    return MediaAnalyzerConfig(
        media_root=media_root,
        store=StoreConfig(database_path=temp_db),
        watch=WatchConfig(enabled=False, debounce_seconds=0.0),
    )


@pytest.fixture
def make_ok_record() -> Callable[..., AnalysisOk]:
    """Factory for ok records with sensible defaults."""

    def _make(
        path: str,
        *,
        kind: MediaKind = MediaKind.VIDEO,
        size_bytes: int = 1000,
        container: str | None = "matroska,webm",
        video_codec: str | None = "h264",
        width: int | None = 1920,
        height: int | None = 1080,
        audio_codec: str | None = "aac",
        sample_rate: int | None = 48000,
        channels: int | None = 2,
        duration_sec: float | None = 10.0,
        bit_rate: int | None = 1_000_000,
    ) -> AnalysisOk:
        video = None
        if video_codec is not None or width is not None:
            video = VideoInfo(
                codec=video_codec,
                width=width,
                height=height,
                pixel_format="yuv420p",
                frame_rate="25/1",
            )
        audio = None
        if audio_codec is not None:
            audio = AudioInfo(
                codec=audio_codec, sample_rate=sample_rate, channels=channels
            )
        return AnalysisOk(
            path=path,
            kind=kind,
            size_bytes=size_bytes,
            modified_at="2024-01-01T00:00:00.000Z",
            container=ContainerInfo(format_name=container),
            video=video,
            audio=audio,
            duration_sec=duration_sec,
            bit_rate=bit_rate,
            stream_count=int(video is not None) + int(audio is not None),
        )

    return _make


@pytest.fixture
def make_error_record() -> Callable[..., AnalysisFailed]:
    """Factory for error records."""

    def _make(path: str, error: str = "ffprobe exited with code 1: boom"):
        return AnalysisFailed(
            path=path,
            kind=MediaKind.VIDEO,
            error=error,
            size_bytes=10,
            modified_at="2024-01-01T00:00:00.000Z",
        )

    return _make


@pytest.fixture(autouse=True)
def isolated_environment(temp_dir: Path):
    """Keep tests away from the user's config file and environment.

    MEDIA_ANALYZER_CONFIG_PATH points at a file that does not exist, and
    every other MEDIA_ANALYZER_* variable is removed for the test.
    """
    env = {
        key: value
        for key, value in os.environ.items()
        if not key.startswith("MEDIA_ANALYZER_")
    }
    env["MEDIA_ANALYZER_CONFIG_PATH"] = str(temp_dir / "no-such-config.toml")
    with patch.dict(os.environ, env, clear=True):
        yield
