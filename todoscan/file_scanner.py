"""走査対象ファイルの列挙と読み込み。

- バイナリらしいものは除外(ヒューリスティック)。
- .git や node_modules などのディレクトリは既定で降りない。
"""
from __future__ import annotations
import os
from pathlib import Path
from typing import Iterator, Iterable

BINARY_BYTES = set(range(0, 9)) | {11, 12} | set(range(14, 32))

EXCLUDE_DIRS = frozenset({
    ".git", ".hg", ".svn", "__pycache__", "node_modules", ".venv", "venv",
    ".tox", ".mypy_cache", ".pytest_cache", "build", "dist", ".idea", ".vs",
})

ENCODING_CANDIDATES = ("utf-8", "utf-8-sig", "utf-16", "utf-16-le", "utf-16-be", "cp932", "shift_jis")


def is_probably_text(data: bytes, threshold: float = 0.30) -> bool:
    if not data:
        return True
    non_text = sum(b in BINARY_BYTES for b in data)
    ratio = non_text / len(data)
    return ratio < threshold


def read_text(path: Path, encoding_candidates=ENCODING_CANDIDATES) -> str | None:
    try:
        raw = path.read_bytes()
    except OSError:
        return None
    if not is_probably_text(raw):
        return None
    if raw.startswith(b"\xef\xbb\xbf"):
        raw = raw[3:]
    for enc in encoding_candidates:
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    return None


def iter_files(paths: Iterable[str | os.PathLike[str]], exclude_dirs: Iterable[str] = EXCLUDE_DIRS) -> Iterator[Path]:
    excluded = set(exclude_dirs)
    for p in paths:
        path = Path(p)
        if path.is_file():
            yield path
        elif path.is_dir():
            for root, dirs, files in os.walk(path):
                dirs[:] = sorted(d for d in dirs if d not in excluded)
                for f in sorted(files):
                    yield Path(root) / f


__all__ = ["iter_files", "read_text", "is_probably_text", "EXCLUDE_DIRS"]
