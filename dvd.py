"""
DVD structure helpers.

A DVD root is any directory holding a VIDEO_TS subdirectory. Its main title
is the largest (by total bytes) title set of sequential VOB parts:

    VIDEO_TS/VTS_01_0.VOB   menu of title set 01, never part of a title
    VIDEO_TS/VTS_01_1.VOB   title set 01, part 1
    VIDEO_TS/VTS_01_2.VOB   title set 01, part 2
    VIDEO_TS/VTS_02_1.VOB   title set 02, part 1

Only the main title is converted; extras in smaller title sets are dropped.
"""

import re
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple

VIDEO_TS_DIRNAME = "VIDEO_TS"

_TITLE_VOB_RE = re.compile(r"^VTS_(\d{2})_(\d+)\.VOB$", re.IGNORECASE)


def is_video_ts_dir(path: Path) -> bool:
    return Path(path).name.upper() == VIDEO_TS_DIRNAME


def dvd_root_from_video_ts_dir(path: Path) -> Optional[Path]:
    """Return the DVD root for a VIDEO_TS directory, else None."""
    path = Path(path)
    if is_video_ts_dir(path):
        return path.parent
    return None


def is_inside_video_ts(file_path: Path, root: Path) -> bool:
    """True if any directory between root and file_path is a VIDEO_TS dir."""
    if is_video_ts_dir(Path(root)):
        return True
    file_path = Path(file_path)
    try:
        rel = file_path.relative_to(root)
    except ValueError:
        rel = file_path
    return any(part.upper() == VIDEO_TS_DIRNAME for part in rel.parent.parts)


def find_video_ts_dir(dvd_root: Path) -> Optional[Path]:
    """Locate the VIDEO_TS child of dvd_root regardless of its case."""
    dvd_root = Path(dvd_root)
    exact = dvd_root / VIDEO_TS_DIRNAME
    if exact.is_dir():
        return exact
    for child in sorted(dvd_root.iterdir()):
        if child.is_dir() and is_video_ts_dir(child):
            return child
    return None


def dvd_main_title_vobs(dvd_root: Path) -> List[Path]:
    """
    Return the VOB parts of the largest title set, ordered by part number.
    Returns [] when the DVD has no title VOBs. Listing errors propagate.
    """
    video_ts = find_video_ts_dir(dvd_root)
    if video_ts is None:
        return []

    title_sets: Dict[int, List[Tuple[int, Path]]] = defaultdict(list)
    sizes: Dict[int, int] = defaultdict(int)

    for entry in video_ts.iterdir():
        match = _TITLE_VOB_RE.match(entry.name)
        if match is None or not entry.is_file():
            continue
        title, part = int(match.group(1)), int(match.group(2))
        if part == 0:
            continue
        title_sets[title].append((part, entry))
        sizes[title] += entry.stat().st_size

    if not title_sets:
        return []

    # Largest total wins; ties go to the lowest title number
    main_title = min(title_sets, key=lambda t: (-sizes[t], t))
    return [path for _, path in sorted(title_sets[main_title])]
