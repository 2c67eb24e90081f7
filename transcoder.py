"""Transcoding seam: the pipeline only sees ``Transcoder.convert``."""

import abc
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from copier import ensure_parent_dir
from errors import TranscodeError

FFMPEG_ENCODE_ARGS = [
    "-c:v", "libx264",
    "-c:a", "aac",
    "-movflags", "+faststart",
]

PARTIAL_SUFFIX = ".partial"


class Transcoder(abc.ABC):
    """Produces ``destination`` from one or more source files, or raises."""

    @abc.abstractmethod
    def convert(self, inputs: Sequence[Path], destination: Path) -> None:
        """Create destination from inputs.

        Raises TranscodeError on failure, leaving no file at destination.
        """
        ...


def partial_path_for(destination: Path) -> Path:
    """clip.mp4 -> clip.partial.mp4 (keeps the extension ffmpeg muxes by)."""
    destination = Path(destination)
    return destination.with_name(destination.stem + PARTIAL_SUFFIX + destination.suffix)


def _input_arg(inputs: Sequence[Path]) -> str:
    if len(inputs) == 1:
        return str(inputs[0])
    # VOB parts are one MPEG-PS stream split on disc; byte concatenation is valid
    return "concat:" + "|".join(str(p) for p in inputs)


class FfmpegTranscoder(Transcoder):
    """Shells out to ffmpeg, encoding to H.264/AAC MP4."""

    def __init__(self, ffmpeg: str = "ffmpeg", timeout: Optional[float] = None) -> None:
        self.ffmpeg = ffmpeg
        self.timeout = timeout

    def build_command(self, inputs: Sequence[Path], output: Path) -> List[str]:
        return [
            self.ffmpeg,
            "-y",
            "-hide_banner",
            "-loglevel", "error",
            "-i", _input_arg(inputs),
            *FFMPEG_ENCODE_ARGS,
            str(output),
        ]

    def convert(self, inputs: Sequence[Path], destination: Path) -> None:
        if not inputs:
            raise TranscodeError(f"no input files for {destination}")

        destination = Path(destination)
        ensure_parent_dir(destination)
        partial = partial_path_for(destination)
        cmd = self.build_command(inputs, partial)

        try:
            proc = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            partial.unlink(missing_ok=True)
            raise TranscodeError(f"ffmpeg not found: {self.ffmpeg}") from e
        except subprocess.TimeoutExpired as e:
            partial.unlink(missing_ok=True)
            raise TranscodeError(f"ffmpeg timed out after {self.timeout}s converting {inputs[0]}") from e
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise TranscodeError(f"failed to spawn ffmpeg: {e}") from e

        if proc.returncode != 0:
            partial.unlink(missing_ok=True)
            stderr = (proc.stderr or b"").decode("utf-8", errors="replace").strip()
            detail = f": {stderr[:200]}" if stderr else ""
            raise TranscodeError(
                f"ffmpeg exited {proc.returncode} converting {inputs[0]}{detail}"
            )

        try:
            partial.replace(destination)
        except OSError as e:
            partial.unlink(missing_ok=True)
            raise TranscodeError(f"cannot move {partial} into place: {e}") from e
