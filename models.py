from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MediaKind(str, Enum):
    PHOTO = "Photo"
    VIDEO = "Video"
    DVD = "Dvd"
    IGNORE = "Ignore"   # classifier only, never planned


class Action(str, Enum):
    COPY = "Copy"
    CONVERT_VIDEO = "ConvertVideo"
    CONVERT_DVD = "ConvertDvd"


class DateSource(str, Enum):
    """Which fallback tier supplied an item's date, in priority order."""
    EXIF = "Exif"
    FFPROBE = "Ffprobe"
    MTIME = "Mtime"
    NONE = "None"


PLANNABLE_KINDS = (MediaKind.PHOTO, MediaKind.VIDEO, MediaKind.DVD)
DEDUP_KINDS = (MediaKind.PHOTO, MediaKind.VIDEO)


@dataclass(frozen=True)
class PlannedItem:
    kind: MediaKind
    action: Action
    src: str
    dst: str
    best_dt: Optional[str]          # "YYYY-MM-DD HH:MM:SS"
    date_source: DateSource
    size_bytes: Optional[int] = None
    content_hash: Optional[str] = None
    duplicate_of: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "action": self.action.value,
            "src": self.src,
            "dst": self.dst,
            "best_dt": self.best_dt,
            "date_source": self.date_source.value,
            "size_bytes": self.size_bytes,
            "content_hash": self.content_hash,
            "duplicate_of": self.duplicate_of,
        }

    @staticmethod
    def from_dict(d: dict) -> "PlannedItem":
        """Rebuild an item from a manifest record.

        Raises KeyError for a missing required field and ValueError for an
        unknown enum value.
        """
        kind = MediaKind(d["kind"])
        if kind not in PLANNABLE_KINDS:
            raise ValueError(f"kind {kind.value!r} cannot be planned")
        return PlannedItem(
            kind=kind,
            action=Action(d["action"]),
            src=d["src"],
            dst=d["dst"],
            best_dt=d.get("best_dt"),
            date_source=DateSource(d.get("date_source", DateSource.NONE.value)),
            size_bytes=d.get("size_bytes"),
            content_hash=d.get("content_hash"),
            duplicate_of=d.get("duplicate_of"),
        )


@dataclass
class PlanSummary:
    planned: int = 0
    photos: int = 0
    videos: int = 0
    dvds: int = 0
    missing_date: int = 0
    need_convert_video: int = 0
    need_convert_dvd: int = 0
    duplicate_photos: int = 0
    duplicate_videos: int = 0
    ignored: int = 0
    walk_errors: int = 0
    date_errors: int = 0


@dataclass
class ApplySummary:
    total: int = 0
    copied: int = 0
    converted_video: int = 0
    converted_dvd: int = 0
    skipped_existing: int = 0
    skipped_duplicate: int = 0
    failed: int = 0
