import os
from pathlib import Path
from typing import Callable, Generator, List, Optional, Tuple

from models import Action, MediaKind


PHOTO_EXTENSIONS = {"jpg", "jpeg", "png"}
VIDEO_EXTENSIONS = {"mp4", "avi", "mov", "m4v"}
DVD_EXTENSIONS = {"vob", "ifo", "bup"}
JPEG_EXTENSIONS = {"jpg", "jpeg"}

# Video containers that are re-encoded rather than copied
CONVERT_VIDEO_EXTENSIONS = {"avi"}


def normalize_extension(file_path: Path) -> Optional[str]:
    """Return the lower-cased extension without its dot, or None."""
    suffix = Path(file_path).suffix
    if not suffix or suffix == ".":
        return None
    return suffix[1:].lower()


def classify(file_path: Path) -> MediaKind:
    """Return the MediaKind for a path based solely on its extension."""
    ext = normalize_extension(file_path)
    if ext in PHOTO_EXTENSIONS:
        return MediaKind.PHOTO
    if ext in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    if ext in DVD_EXTENSIONS:
        return MediaKind.DVD
    return MediaKind.IGNORE


def is_jpeg(file_path: Path) -> bool:
    return normalize_extension(file_path) in JPEG_EXTENSIONS


def action_for(kind: MediaKind, file_path: Path) -> Action:
    if kind == MediaKind.DVD:
        return Action.CONVERT_DVD
    if kind == MediaKind.VIDEO and normalize_extension(file_path) in CONVERT_VIDEO_EXTENSIONS:
        return Action.CONVERT_VIDEO
    if kind in (MediaKind.PHOTO, MediaKind.VIDEO):
        return Action.COPY
    raise ValueError(f"No action for kind {kind.value}: {file_path}")


def walk_tree(
    root: Path,
    on_error: Optional[Callable[[OSError], None]] = None,
) -> Generator[Tuple[Path, List[str], List[str]], None, None]:
    """
    Walk root top-down, yielding (dir_path, dirnames, filenames) with both
    name lists sorted so the resulting plan is stable between runs.
    Unreadable directories are reported to on_error and skipped.
    Symlinked directories are not followed.
    """
    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        yield Path(dirpath), dirnames, sorted(filenames)
