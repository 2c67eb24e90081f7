import json
import os
from pathlib import Path
from typing import Iterable, List

from errors import ManifestError
from models import PlannedItem

MANIFEST_FILENAME = "manifest.jsonl"

# os.walk hands back undecodable filename bytes as surrogates; write them back as the original bytes
PATH_ERRORS = "surrogateescape"


def write_manifest(items: Iterable[PlannedItem], manifest_path: Path) -> int:
    """
    Write one JSON record per line and return the number of records.

    Each line is an independent object so the manifest can be read, grepped,
    and hand-edited before apply:

      {"kind": "Photo", "action": "Copy", "src": "...", "dst": "...", ...}

    Writes to a .tmp file first, then renames to avoid a torn manifest.
    """
    manifest_path = Path(manifest_path)
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = manifest_path.with_name(manifest_path.name + ".tmp")
    count = 0
    with open(tmp_path, "w", encoding="utf-8", errors=PATH_ERRORS) as f:
        for item in items:
            f.write(json.dumps(item.to_dict(), ensure_ascii=False))
            f.write("\n")
            count += 1
    os.replace(tmp_path, manifest_path)
    return count


def parse_manifest_line(line: str, line_no: int) -> PlannedItem:
    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise ManifestError(f"invalid JSON: {e}", line_no=line_no) from e
    if not isinstance(record, dict):
        raise ManifestError("record is not a JSON object", line_no=line_no)
    try:
        return PlannedItem.from_dict(record)
    except KeyError as e:
        raise ManifestError(f"missing field {e}", line_no=line_no) from e
    except (TypeError, ValueError) as e:
        raise ManifestError(f"invalid record: {e}", line_no=line_no) from e


def read_manifest(manifest_path: Path) -> List[PlannedItem]:
    """
    Load every record in order. Blank lines are skipped.
    Any malformed line is fatal: a corrupt manifest is never partially trusted.
    """
    items: List[PlannedItem] = []
    try:
        with open(manifest_path, "r", encoding="utf-8", errors=PATH_ERRORS) as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                items.append(parse_manifest_line(line, line_no))
    except OSError as e:
        raise ManifestError(f"cannot read manifest {manifest_path}: {e}") from e
    return items
