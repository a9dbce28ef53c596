"""走査対象の文書と、その構文ビュー(行テーブル + トリビア列)。"""
from __future__ import annotations
import asyncio
from dataclasses import dataclass, field
from functools import cached_property
import hashlib
from pathlib import Path
from typing import Iterator, List
import uuid

from .dialects import Dialect, get_dialect, language_for_path
from .file_scanner import read_text
from .text import LineTable
from .trivia import Trivia


@dataclass(frozen=True)
class Document:
    text: str = field(repr=False)
    language: str
    path: str | None = None
    id: str = ""

    def __post_init__(self):
        if not self.id:
            object.__setattr__(self, "id", self.path or uuid.uuid4().hex)

    @cached_property
    def checksum(self) -> str:
        return hashlib.sha256(self.text.encode("utf-8", errors="surrogatepass")).hexdigest()

    @property
    def dialect(self) -> Dialect:
        return get_dialect(self.language)

    @classmethod
    def from_path(cls, path: str | Path, language: str | None = None) -> "Document":
        p = Path(path)
        lang = language or language_for_path(p)
        if lang is None:
            raise ValueError(f"拡張子から言語を判定できません: {p}")
        text = read_text(p)
        if text is None:
            raise ValueError(f"テキストとして読み込めません: {p}")
        return cls(text=text, language=lang, path=str(p))


class SyntacticDocument:
    """文書テキスト・行テーブル・トリビア列をまとめて保持する。

    トリビアは text への区間参照のみを持ち、本文の複製は作らない。
    """

    def __init__(self, document: Document, lines: LineTable, trivia: List[Trivia]):
        self.document = document
        self.lines = lines
        self._trivia = trivia

    @property
    def text(self) -> str:
        return self.document.text

    def descendant_trivia(self) -> Iterator[Trivia]:
        return iter(self._trivia)

    @classmethod
    def parse(cls, document: Document, dialect: Dialect) -> "SyntacticDocument":
        return cls(document, LineTable(document.text), list(dialect.lexer.lex(document.text)))

    @classmethod
    async def create(cls, document: Document, dialect: Dialect) -> "SyntacticDocument":
        # 字句解析は CPU 処理のためワーカースレッドで実行する
        return await asyncio.to_thread(cls.parse, document, dialect)


__all__ = ["Document", "SyntacticDocument"]
