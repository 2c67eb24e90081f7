from datetime import datetime
from pathlib import Path
from typing import Optional

import exifread

from errors import MetadataError

# EXIF tags checked in priority order
EXIF_DATE_TAGS = [
    "EXIF DateTimeOriginal",
    "Image DateTime",
]

EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"


def _parse_exif_date(raw_value: str) -> Optional[datetime]:
    """Parse an EXIF date string, returning None if invalid or zeroed."""
    try:
        return datetime.strptime(raw_value.strip(), EXIF_DATE_FORMAT)
    except (ValueError, AttributeError):
        return None


def get_date_from_exif(file_path: Path) -> Optional[datetime]:
    """
    Return the capture date from DateTimeOriginal, then DateTime.
    Returns None when neither tag is present or parseable.
    Raises MetadataError when the file cannot be opened or parsed.
    """
    try:
        with open(file_path, "rb") as f:
            tags = exifread.process_file(f, details=False)
    except Exception as e:
        raise MetadataError(f"cannot read EXIF from {file_path}: {e}") from e

    for tag_name in EXIF_DATE_TAGS:
        if tag_name in tags:
            dt = _parse_exif_date(str(tags[tag_name]))
            if dt is not None:
                return dt

    return None
