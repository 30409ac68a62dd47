"""Tests for media-root path containment and enumeration."""

from pathlib import Path

import pytest

from media_analyzer.core import (
    PathEscapeError,
    browse_directory,
    list_all_files,
    normalize_relative,
    relative_to_root,
    resolve_within_root,
)


class TestNormalizeRelative:
    """Tests for normalize_relative."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, ""),
            ("", ""),
            ("/", ""),
            ("movies/", "movies"),
            ("/movies/a.mp4", "movies/a.mp4"),
            ("movies\\a.mp4", "movies/a.mp4"),
        ],
    )
    def test_normalizes(self, raw, expected) -> None:
        assert normalize_relative(raw) == expected


class TestResolveWithinRoot:
    """Tests for resolve_within_root."""

    def test_root_itself(self, media_root: Path) -> None:
        resolved = resolve_within_root(media_root, "")
        assert resolved.relative == ""
        assert resolved.absolute == media_root

    def test_nested_path(self, media_root: Path) -> None:
        resolved = resolve_within_root(media_root, "movies/movie.mp4")
        assert resolved.relative == "movies/movie.mp4"
        assert resolved.absolute == media_root / "movies" / "movie.mp4"

    def test_dot_segments_inside_root(self, media_root: Path) -> None:
        resolved = resolve_within_root(media_root, "movies/../music/song.mp3")
        assert resolved.relative == "music/song.mp3"

    @pytest.mark.parametrize("rel", ["..", "../etc/passwd", "movies/../../x"])
    def test_escape_raises(self, media_root: Path, rel: str) -> None:
        with pytest.raises(PathEscapeError):
            resolve_within_root(media_root, rel)

    def test_sibling_with_shared_prefix_raises(self, temp_dir: Path) -> None:
        root = temp_dir / "media"
        root.mkdir(exist_ok=True)
        with pytest.raises(PathEscapeError):
            resolve_within_root(root, "../media-other/file.mp4")

    def test_escape_error_is_value_error(self) -> None:
        assert issubclass(PathEscapeError, ValueError)


class TestRelativeToRoot:
    """Tests for relative_to_root."""

    def test_inside(self, media_root: Path) -> None:
        absolute = media_root / "music" / "song.mp3"
        assert relative_to_root(media_root, absolute) == "music/song.mp3"

    def test_outside_raises(self, media_root: Path, temp_dir: Path) -> None:
        with pytest.raises(PathEscapeError):
            relative_to_root(media_root, temp_dir / "elsewhere.mp4")


class TestListAllFiles:
    """Tests for list_all_files."""

    def test_lists_sorted_and_skips_hidden(self, media_root: Path) -> None:
        assert list_all_files(media_root) == [
            "movies/extras/trailer.mp4",
            "movies/movie.mp4",
            "movies/silent.webm",
            "music/song.mp3",
            "notes.txt",
            "photos/photo.png",
        ]

    def test_base_restricts_to_subtree(self, media_root: Path) -> None:
        assert list_all_files(media_root, "movies/extras") == [
            "movies/extras/trailer.mp4"
        ]

    def test_base_escape_raises(self, media_root: Path) -> None:
        with pytest.raises(PathEscapeError):
            list_all_files(media_root, "..")

    def test_empty_directory(self, temp_dir: Path) -> None:
        empty = temp_dir / "empty"
        empty.mkdir()
        assert list_all_files(empty) == []


class TestBrowseDirectory:
    """Tests for browse_directory."""

    def test_root_listing(self, media_root: Path) -> None:
        listing = browse_directory(media_root, "")

        assert listing.path == ""
        assert listing.parent is None
        assert listing.dirs == ["movies", "music", "photos"]
        assert listing.files == ["notes.txt"]
        assert listing.total_files == 1

    def test_nested_listing_parent(self, media_root: Path) -> None:
        listing = browse_directory(media_root, "movies/extras")
        assert listing.parent == "movies"
        assert listing.files == ["trailer.mp4"]

    def test_top_level_parent_is_root(self, media_root: Path) -> None:
        assert browse_directory(media_root, "movies").parent == ""

    def test_file_pagination(self, media_root: Path) -> None:
        listing = browse_directory(media_root, "movies", file_offset=1, file_limit=1)

        assert listing.files == ["silent.webm"]
        assert listing.total_files == 2
        assert listing.dirs == ["extras"]

    def test_to_dict(self, media_root: Path) -> None:
        doc = browse_directory(media_root, "music").to_dict()
        assert doc == {
            "path": "music",
            "parent": "",
            "dirs": [],
            "files": ["song.mp3"],
            "totalFiles": 1,
        }

    def test_missing_directory_raises(self, media_root: Path) -> None:
        with pytest.raises(FileNotFoundError):
            browse_directory(media_root, "nope")

    def test_escape_raises(self, media_root: Path) -> None:
        with pytest.raises(PathEscapeError):
            browse_directory(media_root, "../..")
