"""高レベル API: テキスト/ファイル/パス群に対するコメントマーカー抽出

- 言語は拡張子から判定(明示指定も可)
- パス走査と簡易キャッシュ/並列
- 別プロセス実行(任意)。結果はローカル実行と同一
"""
from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor, as_completed
import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from .cache import cached_comments, file_fingerprint, load_cache, save_cache, store_comments
from .dialects import language_for_path
from .document import Document
from .file_scanner import iter_files, read_text
from .markers import DEFAULT_MARKERS, MarkerDescriptor, signature
from .remote import ProcessPoolRemote, RemoteScanner
from .scanner import ResolvedComment, scan_document

logger = logging.getLogger(__name__)


def scan_text(
    text: str,
    markers: Sequence[MarkerDescriptor] = DEFAULT_MARKERS,
    language: str = "csharp",
    file: str | None = None,
    remote: RemoteScanner | None = None,
) -> List[ResolvedComment]:
    document = Document(text=text, language=language, path=file)
    return asyncio.run(scan_document(document, list(markers), remote=remote))


def scan_file(
    path: str,
    markers: Sequence[MarkerDescriptor] = DEFAULT_MARKERS,
    language: str | None = None,
    remote: RemoteScanner | None = None,
) -> List[ResolvedComment]:
    lang = language or language_for_path(path)
    if lang is None:
        logger.debug("skip %s: unknown language", path)
        return []
    content = read_text(Path(path))
    if content is None:
        logger.debug("skip %s: not a text file", path)
        return []
    return scan_text(content, markers, language=lang, file=path, remote=remote)


def scan_paths(
    paths: Iterable[str],
    markers: Sequence[MarkerDescriptor] = DEFAULT_MARKERS,
    jobs: int = 1,
    use_cache: bool = True,
    language: str | None = None,
    remote: bool = False,
) -> List[ResolvedComment]:
    markers = list(markers)
    if not markers:
        return []
    files = list(iter_files(paths))
    if language is None:
        files = [f for f in files if language_for_path(f) is not None]
    marker_sig = signature(markers)

    # キャッシュ読み込み
    cache = load_cache(str(Path.cwd())) if use_cache else {}
    to_scan: List[Tuple[str, str, str | None]] = []  # (path, fingerprint, language)
    results: List[ResolvedComment] = []

    for f in files:
        fp = file_fingerprint(Path(f))
        key = str(f)
        lang = language or language_for_path(f)
        hit = cached_comments(cache, key, fp, marker_sig, lang) if use_cache else None
        if hit is not None:
            results.extend(hit)
            continue
        to_scan.append((key, fp, lang))
    logger.debug("%d file(s) to scan, %d from cache", len(to_scan), len(files) - len(to_scan))

    pool = ProcessPoolRemote(max_workers=jobs if jobs > 1 else None) if remote else None
    try:
        # 並列/直列実行
        if jobs and jobs > 1:
            with ThreadPoolExecutor(max_workers=jobs) as ex:
                futs = {
                    ex.submit(scan_file, key, markers, lang, pool): (key, fp, lang)
                    for key, fp, lang in to_scan
                }
                for fut in as_completed(futs):
                    key, fp, lang = futs[fut]
                    res = fut.result()
                    results.extend(res)
                    if use_cache:
                        store_comments(cache, key, fp, marker_sig, lang, res)
        else:
            for key, fp, lang in to_scan:
                res = scan_file(key, markers, language=lang, remote=pool)
                results.extend(res)
                if use_cache:
                    store_comments(cache, key, fp, marker_sig, lang, res)
    finally:
        if pool is not None:
            pool.close()

    # キャッシュ保存
    if use_cache:
        save_cache(str(Path.cwd()), cache)

    results.sort(key=lambda c: (c.path or "", c.position))
    return results


__all__ = ["scan_text", "scan_file", "scan_paths"]
