from typing import Optional


class OrganizerError(RuntimeError):
    """Base error type."""


class MetadataError(OrganizerError):
    """EXIF or ffprobe could not be read for a file."""


class TranscodeError(OrganizerError):
    """ffmpeg could not produce the destination file."""


class PlanError(OrganizerError):
    """Plan run aborted; the manifest would be unreliable."""


class ManifestError(OrganizerError):
    """Manifest could not be read or a record is malformed."""

    def __init__(self, message: str, line_no: Optional[int] = None) -> None:
        self.line_no = line_no
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)
