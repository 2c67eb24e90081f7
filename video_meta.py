"""ffprobe wrapper used as the video metadata collaborator."""

import json
import subprocess
from pathlib import Path
from typing import Optional

from errors import MetadataError

FFPROBE_TIMEOUT = 60  # seconds


class FfprobeProbe:
    """Reads the container-level ``creation_time`` tag via ffprobe."""

    def __init__(self, ffprobe: str = "ffprobe", timeout: Optional[float] = FFPROBE_TIMEOUT) -> None:
        self.ffprobe = ffprobe
        self.timeout = timeout

    def creation_time(self, file_path: Path) -> Optional[str]:
        """
        Return the raw ``format.tags.creation_time`` string, or None when
        ffprobe reports failure or the tag is absent.
        Raises MetadataError if ffprobe cannot be run or emits bad JSON.
        """
        cmd = [
            self.ffprobe,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            str(file_path),
        ]
        try:
            proc = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise MetadataError(f"ffprobe not found: {self.ffprobe}") from e
        except subprocess.TimeoutExpired as e:
            raise MetadataError(f"ffprobe timed out on {file_path}") from e
        except OSError as e:
            raise MetadataError(f"ffprobe exec error: {e}") from e

        if proc.returncode != 0:
            return None

        # Raw bytes: ffprobe echoes the filename undecoded
        try:
            data = json.loads(proc.stdout)
        except ValueError as e:
            raise MetadataError(f"ffprobe output was not valid JSON: {e}") from e

        if not isinstance(data, dict):
            return None
        tags = (data.get("format") or {}).get("tags") or {}
        value = tags.get("creation_time")
        return value if isinstance(value, str) else None
