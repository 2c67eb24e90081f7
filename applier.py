import sys
from pathlib import Path
from typing import IO, Iterable, Optional

from tqdm import tqdm

from copier import copy_file
from dvd import dvd_main_title_vobs
from errors import TranscodeError
from manifest import PATH_ERRORS, read_manifest
from models import Action, ApplySummary, PlannedItem
from transcoder import FfmpegTranscoder, Transcoder

OK_LOG_FILENAME = "apply_ok.log"
FAIL_LOG_FILENAME = "apply_fail.log"
DUP_LOG_FILENAME = "apply_duplicates_skipped.log"


class ApplyLogs:
    """
    The three append-only audit logs of an apply run.

    Opened once per run in append mode (created if absent, never truncated)
    and closed on every exit path when used as a context manager. Every line
    is flushed as soon as it is written so a crash loses at most the item in
    flight.
    """

    def __init__(self, log_dir: Path = Path(".")) -> None:
        self.log_dir = Path(log_dir)
        self._ok: Optional[IO[str]] = None
        self._fail: Optional[IO[str]] = None
        self._dup: Optional[IO[str]] = None

    def __enter__(self) -> "ApplyLogs":
        self.log_dir.mkdir(parents=True, exist_ok=True)
        try:
            self._ok = self._open(OK_LOG_FILENAME)
            self._fail = self._open(FAIL_LOG_FILENAME)
            self._dup = self._open(DUP_LOG_FILENAME)
        except OSError:
            self.close()
            raise
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _open(self, filename: str) -> IO[str]:
        return open(self.log_dir / filename, "a", encoding="utf-8", errors=PATH_ERRORS)

    def close(self) -> None:
        for handle in (self._ok, self._fail, self._dup):
            if handle is not None:
                handle.close()
        self._ok = self._fail = self._dup = None

    @staticmethod
    def _write(handle: Optional[IO[str]], line: str) -> None:
        if handle is None:
            raise RuntimeError("ApplyLogs used outside of its context")
        handle.write(line + "\n")
        handle.flush()

    def ok(self, item: PlannedItem) -> None:
        self._write(self._ok, f"OK\t{item.action.value}\t{item.src}\t->\t{item.dst}")

    def fail(self, item: PlannedItem, error: BaseException) -> None:
        self._write(
            self._fail,
            f"FAIL\t{item.action.value}\t{item.src}\t->\t{item.dst}\t[{error}]",
        )

    def duplicate(self, item: PlannedItem) -> None:
        self._write(self._dup, f"SKIP_DUP\t{item.src}\tdup_of={item.duplicate_of}")


def execute_item(item: PlannedItem, transcoder: Transcoder) -> None:
    """Perform the item's action. Raises on any failure."""
    src = Path(item.src)
    dst = Path(item.dst)

    if item.action == Action.COPY:
        copy_file(src, dst)
    elif item.action == Action.CONVERT_VIDEO:
        transcoder.convert([src], dst)
    elif item.action == Action.CONVERT_DVD:
        vobs = dvd_main_title_vobs(src)
        if not vobs:
            raise TranscodeError(f"no title VOBs found in {src}")
        transcoder.convert(vobs, dst)
    else:
        raise ValueError(f"Unknown action: {item.action}")


def _count_success(summary: ApplySummary, action: Action) -> None:
    if action == Action.COPY:
        summary.copied += 1
    elif action == Action.CONVERT_VIDEO:
        summary.converted_video += 1
    elif action == Action.CONVERT_DVD:
        summary.converted_dvd += 1


def apply_items(
    items: Iterable[PlannedItem],
    transcoder: Optional[Transcoder] = None,
    log_dir: Path = Path("."),
    verbose: bool = False,
    use_progress: bool = False,
) -> ApplySummary:
    """
    Replay planned items in order.

    Duplicates are logged and skipped without touching the filesystem, and
    existing destinations are never overwritten, so re-running after an
    interruption only does the remaining work. A failing item is logged and
    counted; it never stops the rest of the run.
    """
    items = list(items)
    transcoder = transcoder or FfmpegTranscoder()
    summary = ApplySummary()

    with ApplyLogs(log_dir) as logs, tqdm(
        total=len(items), unit="item", desc="apply", ncols=80,
        disable=not use_progress,
    ) as bar:
        for item in items:
            summary.total += 1
            bar.update(1)
            bar.set_postfix(failed=summary.failed)

            if item.duplicate_of is not None:
                summary.skipped_duplicate += 1
                logs.duplicate(item)
                if verbose:
                    print(f"  DUP   {item.src}  (= {item.duplicate_of})")
                continue

            if Path(item.dst).exists():
                summary.skipped_existing += 1
                if verbose:
                    print(f"  SKIP  {item.dst}")
                continue

            try:
                execute_item(item, transcoder)
            except Exception as e:
                summary.failed += 1
                logs.fail(item, e)
                if verbose:
                    print(f"  ERROR {item.src}: {e}", file=sys.stderr)
                continue

            _count_success(summary, item.action)
            logs.ok(item)
            if verbose:
                print(f"  {item.action.value.upper():<12} {item.src}  →  {item.dst}")

    return summary


def apply_manifest(
    manifest_path: Path,
    transcoder: Optional[Transcoder] = None,
    log_dir: Path = Path("."),
    verbose: bool = False,
    use_progress: bool = False,
) -> ApplySummary:
    """Read the whole manifest first (ManifestError aborts), then apply it."""
    items = read_manifest(manifest_path)
    return apply_items(
        items,
        transcoder=transcoder,
        log_dir=log_dir,
        verbose=verbose,
        use_progress=use_progress,
    )
