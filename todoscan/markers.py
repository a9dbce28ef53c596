"""コメントマーカー(TODO/HACK など)の定義と読み込みユーティリティ。

オプション文字列形式:
    "HACK:2|TODO:2|UNDONE:2"   (TEXT[:PRIORITY] を | 区切り)

YAML:
---
- TODO:2
- text: FIXME
  priority: 3
- HACK

JSON: 上記と同じ構造の配列。
"""
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import json
from typing import Any, Iterable, List

import yaml


@dataclass(frozen=True)
class MarkerDescriptor:
    text: str
    priority: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "priority": self.priority}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MarkerDescriptor":
        return cls(text=str(data["text"]), priority=int(data.get("priority", 1)))


def _parse_item(item: str) -> MarkerDescriptor | None:
    item = item.strip()
    if not item:
        return None
    text, sep, prio = item.rpartition(":")
    if not sep:
        return MarkerDescriptor(item)
    # "TODO:" のように末尾が区切りだけならマーカー本体として扱う
    if not prio.strip():
        return MarkerDescriptor(item)
    try:
        priority = int(prio)
    except ValueError:
        raise ValueError(f"優先度は整数で指定してください: {item!r}")
    text = text.strip()
    if not text:
        return None
    return MarkerDescriptor(text, priority)


def parse_marker_option(value: str) -> List[MarkerDescriptor]:
    markers: List[MarkerDescriptor] = []
    for item in value.split("|"):
        d = _parse_item(item)
        if d is not None:
            markers.append(d)
    return markers


DEFAULT_MARKER_OPTION = "HACK:2|TODO:2|UNDONE:2|UnresolvedMergeConflict:3"
DEFAULT_MARKERS: tuple[MarkerDescriptor, ...] = tuple(parse_marker_option(DEFAULT_MARKER_OPTION))


def load_marker_file(path: str | Path) -> List[MarkerDescriptor]:
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(str(path))
    # いくつかのエンコーディング候補を試す (PowerShell Set-Content デフォルト UTF-16 対応)
    raw = p.read_bytes()
    text: str | None = None
    for enc in ("utf-8", "utf-8-sig", "utf-16", "utf-16-le", "utf-16-be", "cp932"):
        try:
            text = raw.decode(enc)
            break
        except UnicodeDecodeError:
            continue
    if text is None:
        raise UnicodeDecodeError("unknown", b"", 0, 1, "Unable to decode marker file with tried encodings")
    if text.startswith("\ufeff"):
        text = text.lstrip("\ufeff")
    if p.suffix.lower() in {".yaml", ".yml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"YAMLの解析に失敗しました: {path}: {e}")
    else:
        data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("マーカーファイルは配列である必要があります")
    markers: List[MarkerDescriptor] = []
    for item in data:
        if isinstance(item, str):
            d = _parse_item(item)
        elif isinstance(item, dict) and item.get("text"):
            try:
                d = MarkerDescriptor.from_dict(item)
            except (TypeError, ValueError) as e:
                raise ValueError(f"不正なマーカー定義: {item!r}: {e}")
        elif isinstance(item, dict) and len(item) == 1:
            # YAML の "- TODO: 2" は {TODO: 2} になる
            (key, prio), = item.items()
            d = _parse_item(f"{key}:{prio}")
        else:
            continue
        if d is not None:
            markers.append(d)
    return markers


def signature(markers: Iterable[MarkerDescriptor]) -> str:
    """キャッシュ照合用にマーカー集合を1行の文字列へ。順序も結果に影響するため保持する。"""
    return "|".join(f"{m.text}:{m.priority}" for m in markers)


__all__ = [
    "MarkerDescriptor",
    "parse_marker_option",
    "load_marker_file",
    "signature",
    "DEFAULT_MARKERS",
    "DEFAULT_MARKER_OPTION",
]
