"""別プロセスでのスキャン実行。

ProcessPoolRemote はローカルと同じ scan_document_in_process をワーカープロセスで実行する。
文書ID・チェックサム・本文・マーカーを送り、ワーカー側でチェックサムが一致しなければ None を返す。
ワーカーの失敗は呼び出し側へ伝播させず None (= 結果なし) として扱い、ローカル実行へ任せる。
"""
from __future__ import annotations
import asyncio
from concurrent.futures import ProcessPoolExecutor
import hashlib
import logging
from typing import Any, Dict, List, Protocol, Sequence, Tuple

from .document import Document
from .markers import MarkerDescriptor
from .scanner import ResolvedComment, scan_document_in_process

logger = logging.getLogger(__name__)


class RemoteScanner(Protocol):
    async def try_scan(
        self, document: Document, descriptors: Sequence[MarkerDescriptor]
    ) -> List[ResolvedComment] | None:
        ...


def _remote_scan(
    document_id: str,
    checksum: str,
    text: str,
    language: str,
    path: str | None,
    descriptors: Tuple[Tuple[str, int], ...],
) -> List[Dict[str, Any]] | None:
    """ワーカープロセス側のエントリポイント。結果は dict のリストで返す。"""
    if hashlib.sha256(text.encode("utf-8", errors="surrogatepass")).hexdigest() != checksum:
        return None
    document = Document(text=text, language=language, path=path, id=document_id)
    markers = [MarkerDescriptor(t, p) for t, p in descriptors]
    comments = asyncio.run(scan_document_in_process(document, markers))
    return [c.to_dict() for c in comments]


class ProcessPoolRemote:
    def __init__(self, max_workers: int | None = None):
        self._executor = ProcessPoolExecutor(max_workers=max_workers)

    async def try_scan(
        self, document: Document, descriptors: Sequence[MarkerDescriptor]
    ) -> List[ResolvedComment] | None:
        loop = asyncio.get_running_loop()
        payload = tuple((d.text, d.priority) for d in descriptors)
        try:
            result = await loop.run_in_executor(
                self._executor,
                _remote_scan,
                document.id,
                document.checksum,
                document.text,
                document.language,
                document.path,
                payload,
            )
        except Exception as e:
            logger.warning("remote scan failed for %s: %s", document.id, e)
            return None
        if result is None:
            return None
        return [ResolvedComment.from_dict(d) for d in result]

    def close(self) -> None:
        self._executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> "ProcessPoolRemote":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


__all__ = ["RemoteScanner", "ProcessPoolRemote"]
