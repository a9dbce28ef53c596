from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Dict, Any, List

from .scanner import ResolvedComment

logger = logging.getLogger(__name__)

DEFAULT_CACHE = ".todoscan_cache.json"


def load_cache(root: str, filename: str = DEFAULT_CACHE) -> Dict[str, Any]:
    p = Path(root) / filename
    if not p.is_file():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug("ignore unreadable cache %s: %s", p, e)
        return {}
    return data if isinstance(data, dict) else {}


def save_cache(root: str, data: Dict[str, Any], filename: str = DEFAULT_CACHE) -> None:
    p = Path(root) / filename
    p.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def file_fingerprint(path: Path) -> str:
    stat = path.stat()
    return f"{stat.st_mtime_ns}:{stat.st_size}"


def cached_comments(
    cache: Dict[str, Any], key: str, fingerprint: str, markers: str, language: str | None
) -> List[ResolvedComment] | None:
    """指紋・マーカー構成・言語が一致すれば保存済みの結果を返す。"""
    entry = cache.get(key)
    if not isinstance(entry, dict):
        return None
    if entry.get("fingerprint") != fingerprint or entry.get("markers") != markers:
        return None
    if entry.get("language") != language:
        return None
    try:
        return [ResolvedComment.from_dict(d) for d in entry.get("comments", [])]
    except (KeyError, TypeError, ValueError):
        return None


def store_comments(
    cache: Dict[str, Any],
    key: str,
    fingerprint: str,
    markers: str,
    language: str | None,
    comments: List[ResolvedComment],
) -> None:
    cache[key] = {
        "fingerprint": fingerprint,
        "markers": markers,
        "language": language,
        "comments": [c.to_dict() for c in comments],
    }


__all__ = [
    "load_cache",
    "save_cache",
    "file_fingerprint",
    "cached_comments",
    "store_comments",
    "DEFAULT_CACHE",
]
