import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from date_resolver import best_datetime_for_dvd, best_datetime_for_file, format_dt
from copier import plan_dst
from dvd import dvd_main_title_vobs, dvd_root_from_video_ts_dir, is_inside_video_ts, is_video_ts_dir
from errors import PlanError
from hasher import find_exact_duplicates, hash_files
from models import DEDUP_KINDS, Action, MediaKind, PlanSummary, PlannedItem
from scanner import action_for, classify, walk_tree
from video_meta import FfprobeProbe


def _warn(message: str) -> None:
    print(f"Warning: {message}", file=sys.stderr)


# ── Walk ──────────────────────────────────────────────────────────────────────

def _plan_file(
    file_path: Path,
    kind: MediaKind,
    out_root: Path,
    probe: FfprobeProbe,
    summary: PlanSummary,
    verbose: bool,
) -> PlannedItem:
    date_errors: List[str] = []
    dt, source = best_datetime_for_file(file_path, probe=probe, errors=date_errors)
    if date_errors:
        summary.date_errors += 1
        if verbose:
            for msg in date_errors:
                print(f"  DATE? {file_path}: {msg}", file=sys.stderr)

    action = action_for(kind, file_path)
    if kind == MediaKind.PHOTO:
        summary.photos += 1
    else:
        summary.videos += 1
    if action == Action.CONVERT_VIDEO:
        summary.need_convert_video += 1
    if dt is None:
        summary.missing_date += 1

    summary.planned += 1
    return PlannedItem(
        kind=kind,
        action=action,
        src=str(file_path),
        dst=str(plan_dst(out_root, kind, file_path, dt)),
        best_dt=format_dt(dt) if dt is not None else None,
        date_source=source,
    )


def _walk_and_plan(
    root: Path,
    out_root: Path,
    probe: FfprobeProbe,
    summary: PlanSummary,
    verbose: bool,
) -> Tuple[List[PlannedItem], Set[Path]]:
    """Single pass over root: plan photos/videos, collect DVD roots."""
    planned: List[PlannedItem] = []
    dvd_roots: Set[Path] = set()

    def on_error(err: OSError) -> None:
        summary.walk_errors += 1
        _warn(f"cannot read {getattr(err, 'filename', '') or ''}: {err.strerror or err}")

    if is_video_ts_dir(root):
        dvd_roots.add(root.parent)

    for dir_path, dirnames, filenames in walk_tree(root, on_error=on_error):
        for dirname in dirnames:
            dvd_root = dvd_root_from_video_ts_dir(dir_path / dirname)
            if dvd_root is not None:
                dvd_roots.add(dvd_root)

        for filename in filenames:
            file_path = dir_path / filename

            # VOB sets are only consumed through their DVD item
            if is_inside_video_ts(file_path, root):
                continue
            if not file_path.is_file():
                continue

            kind = classify(file_path)
            if kind not in DEDUP_KINDS:
                summary.ignored += 1
                continue

            item = _plan_file(file_path, kind, out_root, probe, summary, verbose)
            planned.append(item)
            if verbose:
                print(f"  PLAN  {item.action.value:<12} {item.src}  →  {item.dst}")

    return planned, dvd_roots


# ── Duplicates ────────────────────────────────────────────────────────────────

def mark_input_duplicates(
    planned: List[PlannedItem],
    summary: PlanSummary,
    hash_algo: str = "sha256",
    use_progress: bool = False,
) -> List[PlannedItem]:
    """
    Hash every photo/video source once and return the items with size,
    content hash, and duplicate_of filled in. Runs after the walk because
    canonical selection needs the complete candidate set.
    """
    sources = [Path(item.src) for item in planned if item.kind in DEDUP_KINDS]
    try:
        hashes = hash_files(sources, algo=hash_algo, use_progress=use_progress)
    except OSError as e:
        raise PlanError(f"duplicate detection failed: {e}") from e

    duplicate_of: Dict[str, str] = {}
    for members in find_exact_duplicates(sources, hashes=hashes).values():
        canonical = str(members[0])
        for member in members[1:]:
            duplicate_of[str(member)] = canonical

    annotated: List[PlannedItem] = []
    for item in planned:
        if item.kind not in DEDUP_KINDS:
            annotated.append(item)
            continue

        src = Path(item.src)
        try:
            size: Optional[int] = src.stat().st_size
        except OSError:
            size = None

        canon = duplicate_of.get(item.src)
        if canon is not None:
            if item.kind == MediaKind.PHOTO:
                summary.duplicate_photos += 1
            else:
                summary.duplicate_videos += 1

        annotated.append(replace(
            item,
            size_bytes=size,
            content_hash=hashes.get(src),
            duplicate_of=canon,
        ))

    return annotated


# ── DVDs ──────────────────────────────────────────────────────────────────────

def _plan_dvd(
    dvd_root: Path,
    out_root: Path,
    summary: PlanSummary,
    verbose: bool,
) -> PlannedItem:
    dt, source = best_datetime_for_dvd(dvd_root)
    if dt is None:
        summary.missing_date += 1

    try:
        vobs = dvd_main_title_vobs(dvd_root)
    except OSError as e:
        raise PlanError(f"cannot list DVD {dvd_root}: {e}") from e
    if not vobs:
        _warn(f"no title VOBs found in {dvd_root}")
    elif verbose:
        total = sum(v.stat().st_size for v in vobs)
        print(f"  DVD   {dvd_root}: main title {len(vobs)} VOB(s), {total:,} bytes")

    summary.dvds += 1
    summary.need_convert_dvd += 1
    summary.planned += 1
    return PlannedItem(
        kind=MediaKind.DVD,
        action=Action.CONVERT_DVD,
        src=str(dvd_root),
        dst=str(plan_dst(out_root, MediaKind.DVD, dvd_root, dt)),
        best_dt=format_dt(dt) if dt is not None else None,
        date_source=source,
    )


# ── Entry point ───────────────────────────────────────────────────────────────

def build_plan(
    root: Path,
    out_root: Path,
    probe: Optional[FfprobeProbe] = None,
    hash_algo: str = "sha256",
    verbose: bool = False,
    use_progress: bool = False,
) -> Tuple[List[PlannedItem], PlanSummary]:
    """
    Decide what to do with every media item under root.
    Only reads the input tree; never writes to out_root or runs a transcoder.
    Raises PlanError when hashing or DVD enumeration hits an I/O error.
    """
    root = Path(root)
    out_root = Path(out_root)
    probe = probe or FfprobeProbe()
    summary = PlanSummary()

    planned, dvd_roots = _walk_and_plan(root, out_root, probe, summary, verbose)
    planned = mark_input_duplicates(
        planned, summary, hash_algo=hash_algo, use_progress=use_progress,
    )

    for dvd_root in sorted(dvd_roots, key=str):
        planned.append(_plan_dvd(dvd_root, out_root, summary, verbose))

    return planned, summary
