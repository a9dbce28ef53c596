"""文書単位のスキャン(高レベルの非同期 API)。

流れ:
1. マーカーが空なら即座に空リスト(トリビア走査もリモート呼び出しもしない)
2. リモート(別プロセス)実行を1回だけ試し、結果が無ければローカル実行へフォールバック
3. ローカル実行: 構文ビュー取得 -> トリビアを文書順に走査 -> 候補のみ抽出
4. 抽出結果(絶対オフセット)を行/桁へ一括変換

キャンセルは各トリビアの境界で確認し、途中結果は返さない。
"""
from __future__ import annotations
from dataclasses import dataclass
import logging
import threading
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Sequence

from .dialects import Dialect, is_candidate
from .document import Document, SyntacticDocument
from .extractor import RawComment, append_comments
from .markers import MarkerDescriptor
from .text import LineTable

if TYPE_CHECKING:
    from .remote import RemoteScanner

logger = logging.getLogger(__name__)


class ScanCancelled(Exception):
    """スキャンが中断された。途中までの結果は破棄される。"""


class CancellationToken:
    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ScanCancelled()


@dataclass(frozen=True)
class ResolvedComment:
    descriptor: MarkerDescriptor
    message: str
    line: int  # 1 始まり
    column: int  # 1 始まり
    position: int
    document_id: str | None = None
    path: str | None = None

    @property
    def marker(self) -> str:
        return self.descriptor.text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "marker": self.descriptor.text,
            "priority": self.descriptor.priority,
            "message": self.message,
            "line": self.line,
            "column": self.column,
            "position": self.position,
            "document_id": self.document_id,
            "path": self.path,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResolvedComment":
        return cls(
            descriptor=MarkerDescriptor(str(data["marker"]), int(data.get("priority", 1))),
            message=str(data["message"]),
            line=int(data["line"]),
            column=int(data["column"]),
            position=int(data["position"]),
            document_id=data.get("document_id"),
            path=data.get("path"),
        )


def resolve_comments(document: Document, lines: LineTable, raw: Iterable[RawComment]) -> List[ResolvedComment]:
    """RawComment 列を行/桁付きへ一括変換する。

    隣接するコメントは同じ行に落ちることが多いため、直前の行に収まるかを先に確かめ、
    外れた場合だけ二分探索する。
    """
    resolved: List[ResolvedComment] = []
    current = None
    for item in raw:
        pos = item.position
        if current is None or not (current.start <= pos < current.end_including_break):
            current = lines.line_from_position(pos)
        resolved.append(ResolvedComment(
            descriptor=item.descriptor,
            message=item.message,
            line=current.line_number + 1,
            column=pos - current.start + 1,
            position=pos,
            document_id=document.id,
            path=document.path,
        ))
    return resolved


async def scan_document_in_process(
    document: Document,
    descriptors: Sequence[MarkerDescriptor],
    *,
    dialect: Dialect | None = None,
    token: CancellationToken | None = None,
) -> List[ResolvedComment]:
    if not descriptors:
        return []
    if token is not None:
        token.raise_if_cancelled()

    dialect = dialect or document.dialect
    syntax = await SyntacticDocument.create(document, dialect)

    raw: List[RawComment] = []
    for trivia in syntax.descendant_trivia():
        if token is not None:
            token.raise_if_cancelled()
        if not is_candidate(dialect, trivia):
            continue
        append_comments(dialect, descriptors, syntax, trivia, raw)

    logger.debug("%s: %d comment(s) matched", document.id, len(raw))
    return resolve_comments(document, syntax.lines, raw)


async def scan_document(
    document: Document,
    descriptors: Sequence[MarkerDescriptor],
    *,
    dialect: Dialect | None = None,
    remote: "RemoteScanner | None" = None,
    token: CancellationToken | None = None,
) -> List[ResolvedComment]:
    if not descriptors:
        return []
    if token is not None:
        token.raise_if_cancelled()

    # 独自ダイアレクト指定時はリモート側で再現できないためローカルのみ
    if remote is not None and dialect is None:
        try:
            result = await remote.try_scan(document, descriptors)
        except Exception as e:
            logger.warning("%s: remote scan failed: %s", document.id, e)
            result = None
        if token is not None:
            token.raise_if_cancelled()
        if result is not None:
            return result
        logger.debug("%s: remote scan returned no result, scanning in process", document.id)

    return await scan_document_in_process(document, descriptors, dialect=dialect, token=token)


__all__ = [
    "ResolvedComment",
    "CancellationToken",
    "ScanCancelled",
    "resolve_comments",
    "scan_document",
    "scan_document_in_process",
]
