#!/usr/bin/env python3
"""
media-organizer: Plan and apply the organization of a photo/video/DVD
library into a dated export tree.

Usage:
    python organize.py plan  /Volumes/Archive ./ExportSet
    python organize.py apply manifest.jsonl
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from applier import DUP_LOG_FILENAME, FAIL_LOG_FILENAME, OK_LOG_FILENAME, apply_manifest
from errors import ManifestError, PlanError
from hasher import HASH_ALGORITHMS
from manifest import MANIFEST_FILENAME, write_manifest
from models import ApplySummary, PlanSummary
from planner import build_plan
from transcoder import FfmpegTranscoder
from video_meta import FFPROBE_TIMEOUT, FfprobeProbe

DEFAULT_OUT_ROOT = "./ExportSet"
COMMANDS = ("plan", "apply")


# ── Output ────────────────────────────────────────────────────────────────────

def print_plan_summary(summary: PlanSummary, manifest_path: Path) -> None:
    print("\n" + "=" * 44)
    print("  Plan Summary")
    print("=" * 44)
    print(f"  Planned          : {summary.planned:>6,} items")
    print(f"  Photos           : {summary.photos:>6,}")
    print(f"  Videos           : {summary.videos:>6,}")
    print(f"  DVDs             : {summary.dvds:>6,}")
    print(f"  Missing date     : {summary.missing_date:>6,}")
    print(f"  Convert (video)  : {summary.need_convert_video:>6,}")
    print(f"  Convert (DVD)    : {summary.need_convert_dvd:>6,}")
    print(f"  Duplicate photos : {summary.duplicate_photos:>6,}")
    print(f"  Duplicate videos : {summary.duplicate_videos:>6,}")
    print(f"  Ignored files    : {summary.ignored:>6,}")
    if summary.date_errors:
        print(f"  Date read errors : {summary.date_errors:>6,}")
    if summary.walk_errors:
        print(f"  Walk errors      : {summary.walk_errors:>6,}")
    print(f"\nManifest : {manifest_path}")
    print()


def print_apply_summary(summary: ApplySummary, log_dir: Path) -> None:
    print("\n" + "=" * 44)
    print("  Apply Summary")
    print("=" * 44)
    print(f"  Total             : {summary.total:>6,} items")
    print(f"  Copied            : {summary.copied:>6,}")
    print(f"  Converted (video) : {summary.converted_video:>6,}")
    print(f"  Converted (DVD)   : {summary.converted_dvd:>6,}")
    print(f"  Skipped (exists)  : {summary.skipped_existing:>6,}")
    print(f"  Skipped (dup)     : {summary.skipped_duplicate:>6,}")
    print(f"  Failed            : {summary.failed:>6,}")
    print(f"\nLogs : {log_dir / OK_LOG_FILENAME}")
    print(f"       {log_dir / FAIL_LOG_FILENAME}")
    print(f"       {log_dir / DUP_LOG_FILENAME}")
    print()


# ── Commands ──────────────────────────────────────────────────────────────────

def cmd_plan(args: argparse.Namespace) -> int:
    input_root = Path(args.input_root).expanduser()
    out_root = Path(args.out_root).expanduser()
    manifest_path = Path(args.manifest).expanduser()

    if not input_root.is_dir():
        print(f"Error: input root is not a directory: {input_root}", file=sys.stderr)
        return 1

    print(f"Planning: {input_root}  →  {out_root}")
    probe = FfprobeProbe(ffprobe=args.ffprobe, timeout=args.timeout or FFPROBE_TIMEOUT)
    try:
        items, summary = build_plan(
            input_root,
            out_root,
            probe=probe,
            hash_algo=args.hash_algo,
            verbose=args.verbose,
            use_progress=not args.no_progress,
        )
    except PlanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        write_manifest(items, manifest_path)
    except OSError as e:
        print(f"Error: cannot write manifest {manifest_path}: {e}", file=sys.stderr)
        return 1
    print_plan_summary(summary, manifest_path)
    return 0


def cmd_apply(args: argparse.Namespace) -> int:
    manifest_path = Path(args.manifest_path).expanduser()
    log_dir = Path(args.log_dir).expanduser()

    print(f"Applying: {manifest_path}")
    transcoder = FfmpegTranscoder(ffmpeg=args.ffmpeg, timeout=args.timeout)
    try:
        summary = apply_manifest(
            manifest_path,
            transcoder=transcoder,
            log_dir=log_dir,
            verbose=args.verbose,
            use_progress=not args.no_progress,
        )
    except ManifestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_apply_summary(summary, log_dir)
    return 1 if summary.failed else 0


# ── CLI ───────────────────────────────────────────────────────────────────────

def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Abort a single ffprobe/ffmpeg call after this many seconds.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print each item's action.",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable progress bars (useful when piping output to log files).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="organize.py",
        description=(
            "Organize photos, videos, and DVD rips into a dated export tree "
            "(Photos|Videos|DVDs/YYYY/YYYY-MM/YYYY-MM-DD/). 'plan' writes an "
            "inspectable manifest; 'apply' carries it out."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python organize.py plan /Volumes/Archive ./ExportSet\n"
            "  python organize.py apply manifest.jsonl --verbose\n"
        ),
    )
    subparsers = parser.add_subparsers(dest="command")

    plan_parser = subparsers.add_parser(
        "plan", help="Scan the input tree and write the manifest.",
    )
    plan_parser.add_argument(
        "input_root", nargs="?", default=".",
        help="Directory to scan (default: .).",
    )
    plan_parser.add_argument(
        "out_root", nargs="?", default=DEFAULT_OUT_ROOT,
        help=f"Export root for planned destinations (default: {DEFAULT_OUT_ROOT}).",
    )
    plan_parser.add_argument(
        "--manifest",
        default=MANIFEST_FILENAME,
        metavar="PATH",
        help=f"Where to write the manifest (default: {MANIFEST_FILENAME}).",
    )
    plan_parser.add_argument(
        "--hash",
        choices=HASH_ALGORITHMS,
        default="sha256",
        dest="hash_algo",
        help="Hash algorithm for duplicate detection (default: sha256).",
    )
    plan_parser.add_argument(
        "--ffprobe",
        default="ffprobe",
        metavar="BIN",
        help="ffprobe executable (default: ffprobe).",
    )
    _add_common_args(plan_parser)

    apply_parser = subparsers.add_parser(
        "apply", help="Carry out a previously written manifest.",
    )
    apply_parser.add_argument(
        "manifest_path", nargs="?", default=MANIFEST_FILENAME,
        help=f"Manifest to replay (default: {MANIFEST_FILENAME}).",
    )
    apply_parser.add_argument(
        "--log-dir",
        default=".",
        metavar="PATH",
        help="Directory for the apply_*.log audit files (default: .).",
    )
    apply_parser.add_argument(
        "--ffmpeg",
        default="ffmpeg",
        metavar="BIN",
        help="ffmpeg executable (default: ffmpeg).",
    )
    _add_common_args(apply_parser)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    # Echoed paths may hold undecodable filename bytes
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(errors="backslashreplace")
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else list(argv)

    # Unknown or missing subcommands are not an error
    if not argv or argv[0] not in COMMANDS + ("-h", "--help"):
        parser.print_usage(sys.stderr)
        return 0

    args = parser.parse_args(argv)
    if args.command == "plan":
        return cmd_plan(args)
    return cmd_apply(args)


if __name__ == "__main__":
    sys.exit(main())
