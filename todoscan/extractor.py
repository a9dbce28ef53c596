"""コメント本文からマーカーを抽出する。

- extract_single_line: 1行ぶんの断片と、その断片の絶対開始オフセットを受け取り照合する
- process_block: 複数行にまたがるブロックコメントを行ごとの断片に分けて extract_single_line へ渡す
- append_comments: トリビア種別に応じて上記へ振り分ける

行ごとに分けるのは、照合を「1断片・1オフセット基準」で行うため。
"""
from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, List, Sequence

from .dialects import Dialect
from .markers import MarkerDescriptor
from .trivia import Trivia

if TYPE_CHECKING:
    from .document import SyntacticDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawComment:
    descriptor: MarkerDescriptor
    message: str
    position: int  # マーカー先頭文字の文書内絶対オフセット


def extract_single_line(
    dialect: Dialect,
    descriptors: Sequence[MarkerDescriptor],
    message: str,
    start: int,
) -> List[RawComment]:
    found: List[RawComment] = []
    index = dialect.comment_start_index(message)
    if index >= len(message):
        return found

    normalized = dialect.normalize(message)
    for descriptor in descriptors:
        token = descriptor.text
        if not token:
            continue
        candidate = normalized[index:index + len(token)]
        if len(candidate) != len(token) or candidate.casefold() != token.casefold():
            continue
        after = index + len(token)
        if after < len(message) and dialect.is_identifier_char(message[after]):
            # "todoboo" のような識別子の一部は対象外
            continue
        found.append(RawComment(descriptor, message[index:], start + index))
    return found


def process_block(
    dialect: Dialect,
    descriptors: Sequence[MarkerDescriptor],
    document: "SyntacticDocument",
    trivia: Trivia,
    postfix_length: int,
) -> List[RawComment]:
    lines = document.lines
    start, end = trivia.full_start, trivia.full_end
    start_line = lines.line_from_position(start)
    end_line = lines.line_from_position(end)

    # 1行で閉じているブロックコメント
    if start_line.line_number == end_line.line_number:
        text = trivia.full_text
        message = text[:max(0, len(text) - postfix_length)]
        return extract_single_line(dialect, descriptors, message, start)

    found: List[RawComment] = []
    found.extend(extract_single_line(dialect, descriptors, lines.slice(start, start_line.end), start))

    for line_number in range(start_line.line_number + 1, end_line.line_number):
        line = lines[line_number]
        found.extend(extract_single_line(dialect, descriptors, lines.slice(line.start, line.end), line.start))

    length = max(0, (end - end_line.start) - postfix_length)
    found.extend(extract_single_line(dialect, descriptors, lines.slice(end_line.start, end_line.start + length), end_line.start))
    return found


def append_comments(
    dialect: Dialect,
    descriptors: Sequence[MarkerDescriptor],
    document: "SyntacticDocument",
    trivia: Trivia,
    out: List[RawComment],
) -> None:
    if dialect.is_preprocessor_comment(trivia):
        comment = next((c for c in getattr(trivia, "children", ()) if dialect.is_single_line(c)), None)
        if comment is None:
            logger.debug("directive at %d has no comment child", trivia.full_start)
            return
        out.extend(extract_single_line(dialect, descriptors, comment.full_text, comment.full_start))
        return

    if dialect.is_single_line(trivia):
        out.extend(extract_single_line(dialect, descriptors, trivia.full_text, trivia.full_start))
        return

    if dialect.is_multiline(trivia):
        out.extend(process_block(dialect, descriptors, document, trivia, dialect.postfix_length(trivia)))
        return

    logger.debug("skip trivia %s at %d", getattr(trivia, "kind", None), trivia.full_start)


__all__ = ["RawComment", "extract_single_line", "process_block", "append_comments"]
