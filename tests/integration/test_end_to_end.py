"""End-to-end tests across the analysis pipeline, store, API and watcher.

Covers the complete flow:
1. Analyze the whole media tree through the API
2. Search, aggregate and compare the stored analyses
3. Drop a new file into the tree and let the watcher pick it up
4. Probe a generated file with the real ffprobe, when it is installed
"""

import shutil
import subprocess
from pathlib import Path

import pytest

from media_analyzer.analysis import analyze_files
from media_analyzer.domain import MediaKind
from media_analyzer.introspector import FFprobeProber
from media_analyzer.runtime import build_runtime
from media_analyzer.server.app import create_app

pytestmark = pytest.mark.integration


class CollectingTimers:
    """Timer factory whose timers fire on demand."""

    def __init__(self) -> None:
        self.pending: list[tuple] = []

    def __call__(self, delay, function, args):
        entry = (function, args)
        self.pending.append(entry)
        return _Timer(self, entry)

    def fire_all(self) -> None:
        entries, self.pending = self.pending, []
        for function, args in entries:
            function(*args)


class _Timer:
    def __init__(self, owner: CollectingTimers, entry: tuple) -> None:
        self.owner = owner
        self.entry = entry
        self.daemon = False

    def start(self) -> None:
        pass

    def cancel(self) -> None:
        if self.entry in self.owner.pending:
            self.owner.pending.remove(self.entry)


@pytest.mark.asyncio
async def test_analyze_search_compare_watch(
    aiohttp_client, test_config, stub_prober, media_root: Path
) -> None:
    runtime = build_runtime(test_config, prober=stub_prober)
    client = await aiohttp_client(create_app(runtime))

    # 1. Analyze everything
    summary = await (await client.post("/api/analyze-all")).json()
    assert summary["db"]["stored"] == 6

    # 2. Query the stored analyses
    container = "mov,mp4,m4a,3gp,3g2,mj2"
    videos = await (
        await client.post("/api/search", json={"kind": "video", "container": container})
    ).json()
    assert videos["total"] == 2

    hd = await (
        await client.post("/api/search", json={"resolution": "1920x1080"})
    ).json()
    assert [r["path"] for r in hd["results"]] == [
        "movies/extras/trailer.mp4",
        "movies/movie.mp4",
    ]

    dashboard = await (
        await client.get(
            "/api/db/dashboard", params={"scope": "current", "basePath": "music"}
        )
    ).json()
    assert dashboard["dashboard"]["totals"]["analyzedOkCount"] == 1

    comparison = await (
        await client.post(
            "/api/compare",
            json={"files": ["movies/movie.mp4", "music/song.mp3"]},
        )
    ).json()
    assert comparison["differences"]["kind"] == [
        {"path": "movies/movie.mp4", "value": "video"},
        {"path": "music/song.mp3", "value": "audio"},
    ]

    # 3. A new file shows up and the watcher analyzes it once
    timers = CollectingTimers()
    watcher = runtime.change_watcher(timer_factory=timers)
    new_file = media_root / "archive" / "movie.mp4"
    new_file.parent.mkdir()
    new_file.write_bytes(b"\x00" * 128)

    watcher.notify(str(new_file))
    watcher.notify(str(new_file))
    timers.fire_all()

    found = await (await client.post("/api/search", json={"name": "archive"})).json()
    assert found["results"][0]["path"] == "archive/movie.mp4"
    assert found["results"][0]["analyzed"] is True
    assert found["results"][0]["sizeBytes"] == 128
    assert [p.name for p in stub_prober.calls].count("movie.mp4") == 2


def _has_ffmpeg_tools() -> bool:
    return shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None


@pytest.mark.skipif(not _has_ffmpeg_tools(), reason="ffmpeg/ffprobe not installed")
def test_real_ffprobe_on_generated_audio(tmp_path: Path) -> None:
    audio = tmp_path / "tone.wav"
    subprocess.run(
        [
            "ffmpeg",
            "-hide_banner",
            "-loglevel",
            "error",
            "-f",
            "lavfi",
            "-i",
            "sine=frequency=440:duration=1",
            "-ar",
            "48000",
            str(audio),
        ],
        check=True,
        capture_output=True,
    )

    (tone,) = analyze_files(tmp_path, ["tone.wav"], FFprobeProber())

    assert tone.is_ok
    assert tone.kind is MediaKind.AUDIO
    assert tone.audio.codec == "pcm_s16le"
    assert tone.audio.sample_rate == 48000
    assert tone.duration_sec == pytest.approx(1.0, abs=0.1)
