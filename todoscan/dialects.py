"""言語ごとの判定関数セット(ダイアレクト)。

スキャナ本体は言語非依存で、以下の関数群だけが言語差を吸収する:
- is_preprocessor_comment / is_single_line / is_multiline: トリビアの分類
- is_identifier_char: 単語境界判定 (TODOX を TODO と誤検出しない)
- normalize: 照合前の正規化 (長さは変えない)
- comment_start_index: コメント開始記号を読み飛ばした本文の開始位置
- postfix_length: ブロックコメント終端記号の長さ
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Dict, Tuple
import unicodedata

from .trivia import (
    Trivia,
    TriviaKind,
    TriviaLexer,
    BlockDelimiter,
    C_LEXER,
    CSHARP_LEXER,
    CURLY_LEXER,
    SCRIPT_LEXER,
    HASH_LEXER,
    SHELL_LEXER,
    RUBY_LEXER,
    SQL_LEXER,
    LUA_LEXER,
    VB_LEXER,
    MARKUP_LEXER,
)

_IDENTIFIER_CATEGORIES = {"Mn", "Mc", "Nd", "Pc", "Cf"}


def is_identifier_char(ch: str) -> bool:
    if ch == "_" or ch.isalpha():
        return True
    return unicodedata.category(ch) in _IDENTIFIER_CATEGORIES


def identity(message: str) -> str:
    return message


def half_width(message: str) -> str:
    """全角英数記号(U+FF01..U+FF5E)と全角空白を半角へ。1文字ずつ置換するため長さは不変。"""
    out = []
    for ch in message:
        code = ord(ch)
        if 0xFF01 <= code <= 0xFF5E:
            out.append(chr(code - 0xFEE0))
        elif code == 0x3000:
            out.append(" ")
        else:
            out.append(ch)
    return "".join(out)


def comment_start_skipper(skip_chars: str, keywords: Tuple[str, ...] = ()) -> Callable[[str], int]:
    """空白と skip_chars、および単語として現れる keywords (REM, =begin など) を読み飛ばす関数を作る。"""
    lowered = tuple(k.lower() for k in keywords)

    def comment_start_index(message: str) -> int:
        i = 0
        n = len(message)
        while i < n:
            ch = message[i]
            if ch.isspace() or ch in skip_chars:
                i += 1
                continue
            for kw in lowered:
                end = i + len(kw)
                if message[i:end].lower() == kw and (end >= n or not is_identifier_char(message[end])):
                    i = end
                    break
            else:
                return i
        return n

    return comment_start_index


def _kind_is(kind: TriviaKind) -> Callable[[Trivia], bool]:
    def pred(trivia: Trivia) -> bool:
        return getattr(trivia, "kind", None) is kind

    return pred


def has_preprocessor_comment(trivia: Trivia) -> bool:
    if getattr(trivia, "kind", None) is not TriviaKind.PREPROCESSOR_DIRECTIVE:
        return False
    return any(c.kind is TriviaKind.SINGLE_LINE_COMMENT for c in trivia.children)


def block_postfix(blocks: Tuple[BlockDelimiter, ...]) -> Callable[[Trivia], int]:
    """閉じ記号があればその長さ。未終端(ファイル末尾まで)なら 0。"""

    def postfix_length(trivia: Trivia) -> int:
        text = trivia.full_text
        for b in blocks:
            if text.startswith(b.open) and len(text) >= len(b.open) + len(b.close) and text.endswith(b.close):
                return len(b.close)
        return 0

    return postfix_length


@dataclass(frozen=True)
class Dialect:
    name: str
    lexer: TriviaLexer
    is_preprocessor_comment: Callable[[Trivia], bool]
    is_single_line: Callable[[Trivia], bool]
    is_multiline: Callable[[Trivia], bool]
    is_identifier_char: Callable[[str], bool]
    normalize: Callable[[str], str]
    comment_start_index: Callable[[str], int]
    postfix_length: Callable[[Trivia], int]


def is_candidate(dialect: Dialect, trivia: Trivia) -> bool:
    return (
        dialect.is_preprocessor_comment(trivia)
        or dialect.is_single_line(trivia)
        or dialect.is_multiline(trivia)
    )


def _make(name: str, lexer_spec, skip_chars: str, keywords: Tuple[str, ...] = (), normalize=identity) -> Dialect:
    return Dialect(
        name=name,
        lexer=TriviaLexer(lexer_spec),
        is_preprocessor_comment=has_preprocessor_comment,
        is_single_line=_kind_is(TriviaKind.SINGLE_LINE_COMMENT),
        is_multiline=_kind_is(TriviaKind.BLOCK_COMMENT),
        is_identifier_char=is_identifier_char,
        normalize=normalize,
        comment_start_index=comment_start_skipper(skip_chars, keywords),
        postfix_length=block_postfix(lexer_spec.blocks),
    )


C_FAMILY = _make("c", C_LEXER, "/*")

DIALECTS: Dict[str, Dialect] = {
    "c": C_FAMILY,
    "cpp": replace(C_FAMILY, name="cpp"),
    "objc": replace(C_FAMILY, name="objc"),
    "csharp": replace(C_FAMILY, name="csharp", lexer=TriviaLexer(CSHARP_LEXER)),
    "java": _make("java", CURLY_LEXER, "/*"),
    "kotlin": _make("kotlin", CURLY_LEXER, "/*"),
    "scala": _make("scala", CURLY_LEXER, "/*"),
    "swift": _make("swift", CURLY_LEXER, "/*"),
    "go": _make("go", CURLY_LEXER, "/*"),
    "rust": _make("rust", CURLY_LEXER, "/*!"),
    "dart": _make("dart", CURLY_LEXER, "/*"),
    "javascript": _make("javascript", SCRIPT_LEXER, "/*"),
    "typescript": _make("typescript", SCRIPT_LEXER, "/*"),
    "python": _make("python", HASH_LEXER, "#"),
    "shell": _make("shell", SHELL_LEXER, "#!"),
    "yaml": _make("yaml", HASH_LEXER, "#"),
    "toml": _make("toml", HASH_LEXER, "#"),
    "perl": _make("perl", HASH_LEXER, "#"),
    "r": _make("r", HASH_LEXER, "#'"),
    "ruby": _make("ruby", RUBY_LEXER, "#", keywords=("=begin",)),
    "sql": _make("sql", SQL_LEXER, "-/*"),
    "lua": _make("lua", LUA_LEXER, "-["),
    "vb": _make("vb", VB_LEXER, "'\u2018\u2019\uff07", keywords=("REM",), normalize=half_width),
    "markup": _make("markup", MARKUP_LEXER, "<!-"),
}

_EXTENSIONS: Dict[str, str] = {
    ".c": "c", ".h": "c",
    ".cc": "cpp", ".cpp": "cpp", ".cxx": "cpp", ".hh": "cpp", ".hpp": "cpp", ".hxx": "cpp",
    ".m": "objc", ".mm": "objc",
    ".cs": "csharp",
    ".java": "java",
    ".kt": "kotlin", ".kts": "kotlin",
    ".scala": "scala",
    ".swift": "swift",
    ".go": "go",
    ".rs": "rust",
    ".dart": "dart",
    ".js": "javascript", ".jsx": "javascript", ".mjs": "javascript", ".cjs": "javascript",
    ".ts": "typescript", ".tsx": "typescript",
    ".py": "python", ".pyi": "python",
    ".sh": "shell", ".bash": "shell", ".zsh": "shell",
    ".yaml": "yaml", ".yml": "yaml",
    ".toml": "toml",
    ".pl": "perl", ".pm": "perl",
    ".r": "r",
    ".rb": "ruby",
    ".sql": "sql",
    ".lua": "lua",
    ".vb": "vb", ".bas": "vb",
    ".html": "markup", ".htm": "markup", ".xml": "markup", ".xaml": "markup", ".svg": "markup",
}
_FILENAMES: Dict[str, str] = {
    "makefile": "shell",
    "dockerfile": "shell",
    "cmakelists.txt": "shell",
}


def language_for_path(path: str | Path) -> str | None:
    p = Path(path)
    name = p.name.lower()
    if name in _FILENAMES:
        return _FILENAMES[name]
    return _EXTENSIONS.get(p.suffix.lower())


def get_dialect(language: str) -> Dialect:
    try:
        return DIALECTS[language.lower()]
    except KeyError:
        raise KeyError(f"未対応の言語です: {language!r} (対応: {', '.join(sorted(DIALECTS))})") from None


__all__ = [
    "Dialect",
    "DIALECTS",
    "is_candidate",
    "is_identifier_char",
    "half_width",
    "comment_start_skipper",
    "language_for_path",
    "get_dialect",
]
