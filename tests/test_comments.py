from todoscan import scan_text, MarkerDescriptor

TODO = [MarkerDescriptor("TODO")]


def test_detect_in_comment():
    text = "# TODO: コメント内\nprint('ok')"
    comments = scan_text(text, TODO, language="python")
    assert [c.message for c in comments] == ["TODO: コメント内"]


def test_not_detect_in_string_literal():
    text = "print('# TODO: 文字列内')\nx = \"// TODO\"\n"
    comments = scan_text(text, TODO, language="python")
    assert not comments


def test_string_then_comment_on_same_line():
    text = 'x = "# TODO not a comment"  # TODO: real\n'
    comments = scan_text(text, TODO, language="python")
    assert len(comments) == 1
    assert comments[0].position == text.rindex("TODO")


def test_c_string_literal_is_not_comment():
    text = 'const char *s = "// TODO: no";\nchar c = \'/\'; // TODO: yes\n'
    comments = scan_text(text, TODO, language="c")
    assert [c.message for c in comments] == ["TODO: yes"]


def test_csharp_verbatim_string():
    text = 'var s = @"a // TODO ""b"" ";\n'
    assert not scan_text(text, TODO, language="csharp")


def test_javascript_template_literal():
    text = "const s = `// TODO: no\n`; /* TODO: yes */\n"
    comments = scan_text(text, TODO, language="javascript")
    assert [c.message for c in comments] == ["TODO: yes "]


def test_block_comment_opened_on_directive_line():
    text = "#define X 1 /* start\n// TODO: inside block comment\n*/\nint y; // TODO: after\n"
    comments = scan_text(text, TODO, language="c")
    assert [(c.line, c.message) for c in comments] == [(4, "TODO: after")]


def test_closed_block_comment_on_directive_line():
    text = "#if X /* TODO: in block */\n#endif\n"
    comments = scan_text(text, TODO, language="c")
    assert [c.message for c in comments] == ["TODO: in block "]
    assert comments[0].position == text.index("TODO")
