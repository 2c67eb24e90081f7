"""
Shared fixtures for the media-organizer test suite.
"""
import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pytest

from errors import TranscodeError
from models import Action, DateSource, MediaKind, PlannedItem
from transcoder import Transcoder


# ── File-creation helpers ─────────────────────────────────────────────────────

def make_file(path: Path, content: bytes = b"dummy content") -> Path:
    """Create a file with the given content; create parent dirs as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def set_mtime(path: Path, when: datetime) -> Path:
    """Set both atime and mtime of path to a local datetime."""
    ts = when.timestamp()
    os.utime(path, (ts, ts))
    return path


def make_dvd(root: Path, title_sets: dict) -> Path:
    """
    Create root/VIDEO_TS with VTS_<nn>_<m>.VOB parts.
    title_sets maps title number -> list of part sizes (part 0 = menu).
    """
    video_ts = root / "VIDEO_TS"
    make_file(video_ts / "VIDEO_TS.IFO", b"ifo")
    make_file(video_ts / "VIDEO_TS.BUP", b"bup")
    for title, sizes in title_sets.items():
        for part, size in enumerate(sizes):
            make_file(video_ts / f"VTS_{title:02d}_{part}.VOB", b"v" * size)
    return root


# ── Collaborator fakes ────────────────────────────────────────────────────────

class FakeProbe:
    """Stands in for FfprobeProbe; returns a fixed creation_time or raises."""

    def __init__(self, value: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.value = value
        self.error = error
        self.calls: List[Path] = []

    def creation_time(self, file_path: Path) -> Optional[str]:
        self.calls.append(Path(file_path))
        if self.error is not None:
            raise self.error
        return self.value


class FakeTranscoder(Transcoder):
    """Writes a marker file instead of running ffmpeg; can be told to fail."""

    def __init__(self, fail_on: Sequence[str] = ()) -> None:
        self.fail_on = set(fail_on)
        self.calls: List[Tuple[List[Path], Path]] = []

    def convert(self, inputs, destination: Path) -> None:
        inputs = [Path(p) for p in inputs]
        self.calls.append((inputs, Path(destination)))
        if any(p.name in self.fail_on for p in inputs) or Path(destination).name in self.fail_on:
            raise TranscodeError(f"ffmpeg exited 1 converting {inputs[0]}")
        make_file(Path(destination), b"converted:" + b"|".join(p.name.encode() for p in inputs))


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def src(tmp_path: Path) -> Path:
    """Empty input directory."""
    d = tmp_path / "input"
    d.mkdir()
    return d


@pytest.fixture
def out(tmp_path: Path) -> Path:
    """Export root (not created; plan must never create it)."""
    return tmp_path / "ExportSet"


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    d = tmp_path / "logs"
    d.mkdir()
    return d


@pytest.fixture
def probe() -> FakeProbe:
    return FakeProbe()


@pytest.fixture
def transcoder() -> FakeTranscoder:
    return FakeTranscoder()


@pytest.fixture
def fixed_date() -> datetime:
    return datetime(2024, 3, 15, 10, 30, 0)


@pytest.fixture
def sample_item() -> PlannedItem:
    return PlannedItem(
        kind=MediaKind.PHOTO,
        action=Action.COPY,
        src="/in/photo.jpg",
        dst="/out/Photos/2024/2024-03/2024-03-15/photo.jpg",
        best_dt="2024-03-15 10:30:00",
        date_source=DateSource.EXIF,
        size_bytes=1024,
        content_hash="abc123",
        duplicate_of=None,
    )
