import pytest

from todoscan import scan_text
from todoscan.dialects import comment_start_skipper, get_dialect, half_width, is_candidate, language_for_path
from todoscan.markers import MarkerDescriptor
from todoscan.trivia import Trivia, TriviaKind

TODO = MarkerDescriptor("TODO")
HACK = MarkerDescriptor("HACK")


def test_visual_basic_quote_and_rem():
    text = "Dim x = 1 ' TODO: vb\nREM HACK something\nDim REMARK = 2\n"
    comments = scan_text(text, [TODO, HACK], language="vb")
    assert [(c.marker, c.line, c.column) for c in comments] == [("TODO", 1, 13), ("HACK", 2, 5)]


def test_visual_basic_full_width_marker():
    text = "' ＴＯＤＯ: 全角\n"
    comments = scan_text(text, [TODO], language="vb")
    assert len(comments) == 1
    assert comments[0].message == "ＴＯＤＯ: 全角"


def test_half_width_keeps_length():
    s = "ＴＯＤＯ　x"
    assert half_width(s) == "TODO x"
    assert len(half_width(s)) == len(s)


def test_ruby_block_comment():
    text = "=begin\nTODO: ruby block\n=end\nputs 1 # HACK: inline\n"
    comments = scan_text(text, [TODO, HACK], language="ruby")
    assert [(c.marker, c.line, c.column) for c in comments] == [("TODO", 2, 1), ("HACK", 4, 10)]


def test_sql_and_lua():
    sql = scan_text("SELECT 'x -- TODO' FROM t; -- TODO: sql\n", [TODO], language="sql")
    assert [c.message for c in sql] == ["TODO: sql"]
    lua = scan_text("--[[\nTODO: lua\n]]\nprint(1) -- HACK\n", [TODO, HACK], language="lua")
    assert [(c.marker, c.line) for c in lua] == [("TODO", 2), ("HACK", 4)]


def test_preprocessor_comment():
    text = "#if DEBUG // TODO: remove\nint x;\n#endif\n"
    comments = scan_text(text, [TODO], language="csharp")
    assert len(comments) == 1
    assert comments[0].position == text.index("TODO")
    assert comments[0].message == "TODO: remove"


def test_region_directive_is_not_comment():
    text = "#region Setup // TODO: not a comment\n#endregion\n"
    assert scan_text(text, [TODO], language="csharp") == []


def test_include_path_is_not_comment():
    text = '#include "http://example.com/TODO.h" // TODO: real\n'
    comments = scan_text(text, [TODO], language="c")
    assert [c.message for c in comments] == ["TODO: real"]


def test_classifier_is_total():
    dialect = get_dialect("c")
    assert is_candidate(dialect, object()) is False
    assert is_candidate(dialect, Trivia(TriviaKind.WHITESPACE, 0, 1, " ")) is False
    assert is_candidate(dialect, Trivia(TriviaKind.PREPROCESSOR_DIRECTIVE, 0, 3, "#if")) is False
    assert is_candidate(dialect, Trivia(TriviaKind.SINGLE_LINE_COMMENT, 0, 2, "//")) is True


def test_comment_start_keyword_needs_word_boundary():
    skip = comment_start_skipper("'", ("REM",))
    assert skip("REMARK") == 0
    assert skip("rem TODO") == 4
    assert skip("' REM") == 5


def test_language_for_path():
    assert language_for_path("src/a/Program.cs") == "csharp"
    assert language_for_path("x.PY") == "python"
    assert language_for_path("Makefile") == "shell"
    assert language_for_path("notes.txt") is None


def test_unknown_language():
    with pytest.raises(KeyError):
        get_dialect("cobol")


def test_shell_parameter_length_is_not_comment():
    text = 'n=${#arr[@]} # TODO: real\necho $# # HACK: args\n'
    comments = scan_text(text, [TODO, HACK], language="shell")
    assert [(c.marker, c.message) for c in comments] == [("TODO", "TODO: real"), ("HACK", "HACK: args")]
