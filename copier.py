import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from models import MediaKind
from scanner import normalize_extension

MEDIA_KIND_DIRS = {
    MediaKind.PHOTO: "Photos",
    MediaKind.VIDEO: "Videos",
    MediaKind.DVD: "DVDs",
}

UNKNOWN_DATE_DIR = "UnknownDate"
TARGET_VIDEO_EXTENSION = "mp4"


def plan_dst(
    out_root: Path,
    kind: MediaKind,
    src: Path,
    date_taken: Optional[datetime],
) -> Path:
    """
    Construct: out_root / Photos|Videos|DVDs / YYYY / YYYY-MM / YYYY-MM-DD / name.ext
    Undated items go to out_root / <kind dir> / UnknownDate / name.ext
    Example: /export/Photos/2024/2024-03/2024-03-15/IMG_0042.jpg
    """
    if kind not in MEDIA_KIND_DIRS:
        raise ValueError(f"Cannot plan a destination for kind {kind.value}")
    base = Path(out_root) / MEDIA_KIND_DIRS[kind]
    src = Path(src)

    if date_taken is None:
        directory = base / UNKNOWN_DATE_DIR
    else:
        directory = (
            base
            / date_taken.strftime("%Y")
            / date_taken.strftime("%Y-%m")
            / date_taken.strftime("%Y-%m-%d")
        )

    if kind == MediaKind.PHOTO:
        ext = normalize_extension(src) or "jpg"
    else:
        ext = TARGET_VIDEO_EXTENSION

    # DVDs are named after their root directory, files after their stem
    if kind == MediaKind.DVD:
        name = src.name or "DVD"
    else:
        name = src.stem or "file"

    return directory / f"{name}.{ext}"


def ensure_parent_dir(dest_path: Path) -> None:
    Path(dest_path).parent.mkdir(parents=True, exist_ok=True)


def copy_file(source_path: Path, dest_path: Path) -> Path:
    """
    Create parent directories and copy source to dest (preserving timestamps).
    The copy lands in a temporary sibling first and is renamed into place,
    so dest_path only ever exists complete.
    Returns dest_path.
    """
    dest_path = Path(dest_path)
    ensure_parent_dir(dest_path)
    tmp_path = dest_path.with_name(dest_path.name + ".tmp")
    try:
        shutil.copy2(source_path, tmp_path)
        os.replace(tmp_path, dest_path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return dest_path
