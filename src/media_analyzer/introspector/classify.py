"""Kind classification from probe streams or file extension."""

import posixpath

from media_analyzer.domain import MediaKind
from media_analyzer.introspector.interface import ProbeSuccess

IMAGE_EXTENSIONS = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tif", ".tiff"}
)
VIDEO_EXTENSIONS = frozenset(
    {".mp4", ".mkv", ".mov", ".avi", ".webm", ".m4v", ".mpg", ".mpeg", ".ts"}
)
AUDIO_EXTENSIONS = frozenset({".mp3", ".wav", ".aac", ".flac", ".ogg", ".m4a", ".opus"})


def guess_kind_from_extension(rel_path: str | None) -> MediaKind:
    """Guess a kind from the file extension alone (case-insensitive)."""
    ext = posixpath.splitext(rel_path or "")[1].lower()
    if ext in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    if ext in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    if ext in AUDIO_EXTENSIONS:
        return MediaKind.AUDIO
    return MediaKind.UNKNOWN


def classify_streams(has_video: bool, has_audio: bool) -> MediaKind:
    """Map stream presence to a kind.

    A video stream without audio maps to IMAGE; see MediaKind.
    """
    if has_video and has_audio:
        return MediaKind.VIDEO
    if has_video:
        return MediaKind.IMAGE
    if has_audio:
        return MediaKind.AUDIO
    return MediaKind.UNKNOWN


def classify(rel_path: str | None, probe: ProbeSuccess | None = None) -> MediaKind:
    """Classify a file.

    Stream presence decides when probe data exists; the extension is only
    consulted when there is no probe data at all.
    """
    if probe is None:
        return guess_kind_from_extension(rel_path)
    return classify_streams(
        has_video=probe.first_stream("video") is not None,
        has_audio=probe.first_stream("audio") is not None,
    )
