"""文字オフセットと行/桁の相互変換。

行区切りは \\r\\n, \\r, \\n, U+2028, U+2029, U+0085。行番号・桁はいずれも 0 始まり。
"""
from __future__ import annotations
from bisect import bisect_right
from dataclasses import dataclass
import re
from typing import Iterator, List, Tuple

_LINE_BREAK = re.compile(r"\r\n|[\n\r\u2028\u2029\x85]")


@dataclass(frozen=True)
class TextLine:
    line_number: int
    start: int
    end: int  # 改行を含まない
    end_including_break: int

    @property
    def length(self) -> int:
        return self.end - self.start


class LineTable:
    def __init__(self, text: str):
        self.text = text
        starts: List[int] = [0]
        ends: List[int] = []
        for m in _LINE_BREAK.finditer(text):
            ends.append(m.start())
            starts.append(m.end())
        ends.append(len(text))
        self._starts = starts
        self._ends = ends

    def __len__(self) -> int:
        return len(self._starts)

    def __getitem__(self, line_number: int) -> TextLine:
        if line_number < 0 or line_number >= len(self._starts):
            raise IndexError(f"line {line_number} out of range (0..{len(self._starts) - 1})")
        nxt = self._starts[line_number + 1] if line_number + 1 < len(self._starts) else len(self.text)
        return TextLine(line_number, self._starts[line_number], self._ends[line_number], nxt)

    def __iter__(self) -> Iterator[TextLine]:
        for i in range(len(self)):
            yield self[i]

    def line_from_position(self, position: int) -> TextLine:
        if position < 0 or position > len(self.text):
            raise IndexError(f"position {position} out of range (0..{len(self.text)})")
        return self[bisect_right(self._starts, position) - 1]

    def linecol(self, position: int) -> Tuple[int, int]:
        line = self.line_from_position(position)
        return line.line_number, position - line.start

    def position(self, line_number: int, column: int) -> int:
        return self[line_number].start + column

    def slice(self, start: int, end: int) -> str:
        return self.text[start:end]


__all__ = ["LineTable", "TextLine"]
