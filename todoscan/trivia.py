"""簡易トリビア(コメント/空白/プリプロセッサ行)レキサー。

対応(簡易):
- 行コメント: '//', '#', '--', "'" など言語ごとの接頭辞、VB の REM
- ブロックコメント: /* ... */, <!-- ... -->, --[[ ... ]], =begin ... =end (行頭)
- プリプロセッサ行: 行頭 '#' のディレクティブ。中の行コメントは子トリビアとして保持
- 文字列リテラルは読み飛ばし、中の '//' や '#' をコメントと誤認しない

注意: これはヒューリスティックです。完全な字句解析ではありません
(C++ の raw 文字列、ネストしたブロックコメント等は未対応)。
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import re
from typing import Iterator, Pattern, Tuple

_NOT_EOL = r"[^\r\n\u2028\u2029\x85]"


class TriviaKind(Enum):
    WHITESPACE = "whitespace"
    END_OF_LINE = "end_of_line"
    SINGLE_LINE_COMMENT = "single_line_comment"
    BLOCK_COMMENT = "block_comment"
    PREPROCESSOR_DIRECTIVE = "preprocessor_directive"


@dataclass(frozen=True)
class Trivia:
    """ソーステキスト上の区間 [full_start, full_end) への読み取り専用ビュー。"""

    kind: TriviaKind
    full_start: int
    full_end: int
    source: str = field(repr=False, compare=False)
    children: Tuple["Trivia", ...] = ()

    @property
    def full_text(self) -> str:
        return self.source[self.full_start:self.full_end]


@dataclass(frozen=True)
class BlockDelimiter:
    open: str
    close: str
    line_start: bool = False  # Ruby の =begin/=end は行頭のみ

    def pattern(self) -> str:
        if self.line_start:
            return rf"(?ms:^{re.escape(self.open)}\b.*?(?:^{re.escape(self.close)}\b{_NOT_EOL}*|\Z))"
        return rf"(?s:{re.escape(self.open)}.*?(?:{re.escape(self.close)}|\Z))"


@dataclass(frozen=True)
class LexerSpec:
    line_prefixes: Tuple[str, ...] = ()
    line_keywords: Tuple[str, ...] = ()
    blocks: Tuple[BlockDelimiter, ...] = ()
    strings: Tuple[str, ...] = ()
    directives: bool = False
    # 直前にあると行コメント接頭辞とみなさない文字 (シェルの $# や ${#arr[@]})
    line_prefix_not_after: str = ""
    # 本文がコメントではなくメッセージとして扱われるディレクティブ
    message_directives: frozenset[str] = frozenset({"region", "endregion", "error", "warning"})


def _build_pattern(spec: LexerSpec) -> Pattern[str]:
    parts = []
    if spec.blocks:
        parts.append("(?P<block>" + "|".join(b.pattern() for b in spec.blocks) + ")")
    if spec.directives:
        parts.append(rf"(?P<directive>(?m:^)[ \t]*\#[ \t]*(?P<dname>[A-Za-z_]+){_NOT_EOL}*)")
    if spec.line_prefixes:
        # 長い接頭辞から順に試す
        prefixes = sorted(spec.line_prefixes, key=len, reverse=True)
        guard = rf"(?<![{re.escape(spec.line_prefix_not_after)}])" if spec.line_prefix_not_after else ""
        parts.append("(?P<line>" + guard + "(?:" + "|".join(re.escape(p) for p in prefixes) + rf"){_NOT_EOL}*)")
    if spec.line_keywords:
        kws = "|".join(re.escape(k) for k in spec.line_keywords)
        parts.append(rf"(?P<keyword>(?i:(?:{kws}))(?!\w){_NOT_EOL}*)")
    if spec.strings:
        parts.append("(?P<string>" + "|".join(spec.strings) + ")")
    parts.append(r"(?P<eol>\r\n|[\r\n\u2028\u2029\x85])")
    parts.append(r"(?P<ws>[ \t\f\v]+)")
    parts.append(r"(?P<other>\w+|(?s:.))")
    return re.compile("|".join(parts))


def _scan_directive_body(
    text: str, start: int, end: int, prefixes: Tuple[str, ...], block_opens: Tuple[str, ...]
) -> Tuple[int, bool]:
    """ディレクティブ本文中で最初に現れる行コメント/ブロックコメントの開始位置を返す。

    戻り値は (位置, ブロックか)。文字列 "..." 内は無視し、どちらも無ければ (-1, False)。
    """
    i = start
    in_string = False
    while i < end:
        ch = text[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        else:
            for p in prefixes:
                if text.startswith(p, i):
                    return i, False
            for o in block_opens:
                if text.startswith(o, i):
                    return i, True
        i += 1
    return -1, False


class TriviaLexer:
    def __init__(self, spec: LexerSpec):
        self.spec = spec
        self._pattern = _build_pattern(spec)
        self._block_opens = tuple(b.open for b in spec.blocks if not b.line_start)

    def lex(self, text: str) -> Iterator[Trivia]:
        pos = 0
        n = len(text)
        while pos < n:
            m = self._pattern.match(text, pos)
            kind = m.lastgroup
            if kind == "dname":
                kind = "directive"
            start, end = m.start(), m.end()
            if kind == "block":
                yield Trivia(TriviaKind.BLOCK_COMMENT, start, end, text)
            elif kind in ("line", "keyword"):
                yield Trivia(TriviaKind.SINGLE_LINE_COMMENT, start, end, text)
            elif kind == "directive":
                trivia = self._directive(m, text)
                # 行内でブロックコメントが始まる場合はそこで打ち切り、続きはブロックとして読む
                end = trivia.full_end
                yield trivia
            elif kind == "eol":
                yield Trivia(TriviaKind.END_OF_LINE, start, end, text)
            elif kind == "ws":
                yield Trivia(TriviaKind.WHITESPACE, start, end, text)
            pos = end

    def _directive(self, m: re.Match[str], text: str) -> Trivia:
        start, end = m.start(), m.end()
        name = m.group("dname").lower()
        if name in self.spec.message_directives:
            return Trivia(TriviaKind.PREPROCESSOR_DIRECTIVE, start, end, text)
        idx, is_block = _scan_directive_body(text, m.end("dname"), end, self.spec.line_prefixes, self._block_opens)
        if idx < 0:
            return Trivia(TriviaKind.PREPROCESSOR_DIRECTIVE, start, end, text)
        if is_block:
            return Trivia(TriviaKind.PREPROCESSOR_DIRECTIVE, start, idx, text)
        child = Trivia(TriviaKind.SINGLE_LINE_COMMENT, idx, end, text)
        return Trivia(TriviaKind.PREPROCESSOR_DIRECTIVE, start, end, text, (child,))


# 文字列リテラル(正規表現断片)
DQ_ESCAPED = r'"(?:\\.|[^"\\\r\n])*"'
SQ_CHAR = r"'(?:\\.|[^'\\\r\n])'"
SQ_ESCAPED = r"'(?:\\.|[^'\\\r\n])*'"
TRIPLE_DQ = r'(?s:""".*?(?:"""|\Z))'
TRIPLE_SQ = r"(?s:'''.*?(?:'''|\Z))"
BACKTICK = r"`(?:\\.|[^`\\])*`"
CS_VERBATIM = r'@"(?:[^"]|"")*"'
PY_PREFIX = r"(?i:[rbuf]{0,2})"
SQL_SQ = r"'(?:''|[^'])*'"
SQL_DQ = r'"(?:""|[^"])*"'
VB_DQ = r'"(?:""|[^"\r\n])*"'
LUA_LONG = r"(?s:\[\[.*?(?:\]\]|\Z))"
SH_SQ = r"'[^']*'"

C_BLOCK = BlockDelimiter("/*", "*/")

C_LEXER = LexerSpec(
    line_prefixes=("//",),
    blocks=(C_BLOCK,),
    strings=(DQ_ESCAPED, SQ_CHAR),
    directives=True,
)
CSHARP_LEXER = LexerSpec(
    line_prefixes=("//",),
    blocks=(C_BLOCK,),
    strings=(TRIPLE_DQ, CS_VERBATIM, DQ_ESCAPED, SQ_CHAR),
    directives=True,
)
CURLY_LEXER = LexerSpec(
    line_prefixes=("//",),
    blocks=(C_BLOCK,),
    strings=(TRIPLE_DQ, DQ_ESCAPED, SQ_CHAR, BACKTICK),
)
SCRIPT_LEXER = LexerSpec(
    line_prefixes=("//",),
    blocks=(C_BLOCK,),
    strings=(BACKTICK, DQ_ESCAPED, SQ_ESCAPED),
)
HASH_LEXER = LexerSpec(
    line_prefixes=("#",),
    strings=(PY_PREFIX + TRIPLE_DQ, PY_PREFIX + TRIPLE_SQ, PY_PREFIX + DQ_ESCAPED, PY_PREFIX + SQ_ESCAPED),
)
SHELL_LEXER = LexerSpec(
    line_prefixes=("#",),
    strings=(DQ_ESCAPED, SH_SQ),
    line_prefix_not_after="${",
)
RUBY_LEXER = LexerSpec(
    line_prefixes=("#",),
    blocks=(BlockDelimiter("=begin", "=end", line_start=True),),
    strings=(DQ_ESCAPED, SQ_ESCAPED),
)
SQL_LEXER = LexerSpec(
    line_prefixes=("--",),
    blocks=(C_BLOCK,),
    strings=(SQL_SQ, SQL_DQ),
)
LUA_LEXER = LexerSpec(
    line_prefixes=("--",),
    blocks=(BlockDelimiter("--[[", "]]"),),
    strings=(LUA_LONG, DQ_ESCAPED, SQ_ESCAPED),
)
VB_LEXER = LexerSpec(
    line_prefixes=("'", "\u2018", "\u2019", "\uff07"),
    line_keywords=("REM",),
    strings=(VB_DQ,),
    directives=True,
    message_directives=frozenset({"region", "endregion", "externalsource"}),
)
MARKUP_LEXER = LexerSpec(
    blocks=(BlockDelimiter("<!--", "-->"),),
)

__all__ = [
    "Trivia",
    "TriviaKind",
    "TriviaLexer",
    "LexerSpec",
    "BlockDelimiter",
]
