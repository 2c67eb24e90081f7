from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from dateutil.parser import isoparse

from errors import MetadataError
from exif_reader import get_date_from_exif
from models import DateSource, MediaKind
from scanner import classify, is_jpeg
from video_meta import FfprobeProbe

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"

DateResult = Tuple[Optional[datetime], DateSource]


def format_dt(dt: datetime) -> str:
    return dt.strftime(DISPLAY_FORMAT)


def file_mtime(path: Path) -> Optional[datetime]:
    """Local modification time of path, or None if it cannot be stat'ed."""
    try:
        return datetime.fromtimestamp(Path(path).stat().st_mtime)
    except (OSError, OverflowError, ValueError):
        return None


def parse_rfc3339_local(raw_value: Optional[str]) -> Optional[datetime]:
    """
    Parse an RFC3339 timestamp and convert it to naive local time.
    Values without a UTC offset are not RFC3339 and yield None.
    """
    if not raw_value:
        return None
    try:
        dt = isoparse(raw_value.strip())
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        return None
    return dt.astimezone().replace(tzinfo=None)


def _mtime_or_none(path: Path) -> DateResult:
    dt = file_mtime(path)
    if dt is not None:
        return dt, DateSource.MTIME
    return None, DateSource.NONE


def best_datetime_for_file(
    file_path: Path,
    probe: Optional[FfprobeProbe] = None,
    errors: Optional[List[str]] = None,
) -> DateResult:
    """
    Resolve the best capture date for a photo or video.

    Photos: EXIF (JPEG only) -> mtime.  Videos: ffprobe creation_time -> mtime.
    Collaborator failures count as "no date from this source"; their messages
    are appended to ``errors`` when a list is supplied.
    """
    kind = classify(file_path)

    if kind == MediaKind.PHOTO:
        if is_jpeg(file_path):
            try:
                dt = get_date_from_exif(file_path)
            except MetadataError as e:
                dt = None
                if errors is not None:
                    errors.append(f"exif: {e}")
            if dt is not None:
                return dt, DateSource.EXIF
        return _mtime_or_none(file_path)

    if kind == MediaKind.VIDEO:
        probe = probe or FfprobeProbe()
        try:
            dt = parse_rfc3339_local(probe.creation_time(file_path))
        except MetadataError as e:
            dt = None
            if errors is not None:
                errors.append(f"ffprobe: {e}")
        if dt is not None:
            return dt, DateSource.FFPROBE
        return _mtime_or_none(file_path)

    return None, DateSource.NONE


def best_datetime_for_dvd(dvd_root: Path) -> DateResult:
    """Only the DVD root's own mtime is meaningful for a raw directory."""
    return _mtime_or_none(dvd_root)
