import hashlib
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from tqdm import tqdm

CHUNK_SIZE = 65536  # 64 KB

HASH_ALGORITHMS = ("sha256", "md5")


def compute_hash(file_path: Path, algo: str = "sha256") -> str:
    """Stream-read the whole file and return its hex digest ('sha256' or 'md5')."""
    if algo not in HASH_ALGORITHMS:
        raise ValueError(f"Unsupported hash algorithm: {algo}")
    h = hashlib.new(algo)
    try:
        with open(file_path, "rb") as f:
            while chunk := f.read(CHUNK_SIZE):
                h.update(chunk)
    except OSError as e:
        raise OSError(f"Cannot read {file_path}: {e}") from e
    return h.hexdigest()


def hash_files(
    paths: Iterable[Path],
    algo: str = "sha256",
    use_progress: bool = False,
) -> Dict[Path, str]:
    """
    Hash each distinct path exactly once.
    Any unreadable file raises OSError; a partial result is never returned.
    """
    unique = sorted(set(Path(p) for p in paths), key=str)
    hashes: Dict[Path, str] = {}
    with tqdm(
        total=len(unique), unit="file", desc="hashing", ncols=80,
        disable=not use_progress,
    ) as bar:
        for path in unique:
            hashes[path] = compute_hash(path, algo=algo)
            bar.update(1)
    return hashes


def group_by_hash(hashes: Dict[Path, str]) -> Dict[str, List[Path]]:
    """Invert path->digest into digest->paths, members sorted by path string."""
    groups: Dict[str, List[Path]] = defaultdict(list)
    for path, digest in hashes.items():
        groups[digest].append(path)
    return {digest: sorted(members, key=str) for digest, members in groups.items()}


def find_exact_duplicates(
    paths: Iterable[Path],
    algo: str = "sha256",
    use_progress: bool = False,
    hashes: Optional[Dict[Path, str]] = None,
) -> Dict[str, List[Path]]:
    """
    Return groups of byte-identical files keyed by content hash.
    Only groups with two or more members are returned; members[0] is the
    canonical (lexicographically smallest) path.

    Pass the result of hash_files() as hashes to group an already-hashed
    set; paths is then ignored and nothing is read twice.
    """
    if hashes is None:
        hashes = hash_files(paths, algo=algo, use_progress=use_progress)
    groups = group_by_hash(hashes)
    return {digest: members for digest, members in groups.items() if len(members) > 1}
