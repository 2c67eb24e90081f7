"""Tests for scanner.py — classify, is_jpeg, action_for, walk_tree."""
from pathlib import Path

import pytest

from models import Action, MediaKind
from scanner import action_for, classify, is_jpeg, normalize_extension, walk_tree
from tests.conftest import make_file


# ── classify ──────────────────────────────────────────────────────────────────

class TestClassify:
    @pytest.mark.parametrize("ext", [".jpg", ".jpeg", ".png"])
    def test_photo_extensions(self, ext):
        assert classify(Path(f"photo{ext}")) == MediaKind.PHOTO

    @pytest.mark.parametrize("ext", [".mp4", ".avi", ".mov", ".m4v"])
    def test_video_extensions(self, ext):
        assert classify(Path(f"clip{ext}")) == MediaKind.VIDEO

    @pytest.mark.parametrize("ext", [".vob", ".ifo", ".bup"])
    def test_dvd_extensions(self, ext):
        assert classify(Path(f"VTS_01_1{ext}")) == MediaKind.DVD

    def test_unknown_extension_is_ignored(self):
        assert classify(Path("doc.pdf")) == MediaKind.IGNORE
        assert classify(Path("photo.heic")) == MediaKind.IGNORE
        assert classify(Path("clip.mkv")) == MediaKind.IGNORE

    def test_no_extension_is_ignored(self):
        assert classify(Path("README")) == MediaKind.IGNORE
        assert classify(Path("trailing.")) == MediaKind.IGNORE

    @pytest.mark.parametrize("name", [
        "photo.jpg", "clip.avi", "VTS_01_1.vob", "notes.txt", "img.png",
    ])
    def test_case_of_extension_never_matters(self, name):
        p = Path(name)
        assert classify(p) == classify(p.with_suffix(p.suffix.upper()))
        assert classify(p) == classify(p.with_suffix(p.suffix.title()))

    def test_directory_part_is_irrelevant(self):
        assert classify(Path("/a/b.mp4/photo.jpg")) == MediaKind.PHOTO


class TestIsJpeg:
    def test_jpeg_variants(self):
        assert is_jpeg(Path("a.jpg"))
        assert is_jpeg(Path("a.JPEG"))

    def test_png_is_not_jpeg(self):
        assert not is_jpeg(Path("a.png"))


class TestNormalizeExtension:
    def test_lowercases_without_dot(self):
        assert normalize_extension(Path("IMG.JPG")) == "jpg"

    def test_missing_extension(self):
        assert normalize_extension(Path("IMG")) is None


# ── action_for ────────────────────────────────────────────────────────────────

class TestActionFor:
    def test_avi_is_converted(self):
        assert action_for(MediaKind.VIDEO, Path("old.AVI")) == Action.CONVERT_VIDEO

    @pytest.mark.parametrize("name", ["a.mp4", "a.mov", "a.m4v"])
    def test_other_video_is_copied(self, name):
        assert action_for(MediaKind.VIDEO, Path(name)) == Action.COPY

    def test_photo_is_copied(self):
        assert action_for(MediaKind.PHOTO, Path("a.png")) == Action.COPY

    def test_dvd_is_converted(self):
        assert action_for(MediaKind.DVD, Path("MOVIE")) == Action.CONVERT_DVD

    def test_ignore_has_no_action(self):
        with pytest.raises(ValueError):
            action_for(MediaKind.IGNORE, Path("a.txt"))


# ── walk_tree ─────────────────────────────────────────────────────────────────

class TestWalkTree:
    def test_yields_sorted_names(self, src):
        make_file(src / "b.jpg")
        make_file(src / "a.jpg")
        (src / "z").mkdir()
        (src / "m").mkdir()
        first = next(walk_tree(src))
        dir_path, dirnames, filenames = first
        assert dir_path == src
        assert dirnames == ["m", "z"]
        assert filenames == ["a.jpg", "b.jpg"]

    def test_visits_nested_directories(self, src):
        make_file(src / "x" / "y" / "deep.jpg")
        seen = [d for d, _, files in walk_tree(src) if "deep.jpg" in files]
        assert seen == [src / "x" / "y"]

    def test_error_callback_receives_walk_errors(self, tmp_path):
        errors = []
        list(walk_tree(tmp_path / "missing", on_error=errors.append))
        assert len(errors) == 1
        assert isinstance(errors[0], OSError)
