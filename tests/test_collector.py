import json
from pathlib import Path

import pytest

from todoscan import Document, scan_file, scan_paths, MarkerDescriptor
from todoscan.cache import DEFAULT_CACHE

TODO = [MarkerDescriptor("TODO")]


def _tree(tmp_path):
    (tmp_path / "a.py").write_text("x = 1  # TODO: python\n", encoding="utf-8")
    (tmp_path / "b.cs").write_text("// TODO: csharp\nclass B {}\n", encoding="utf-8")
    (tmp_path / "c.txt").write_text("TODO: plain text is skipped\n", encoding="utf-8")
    (tmp_path / "bin.dat").write_bytes(b"\x00\x01\x02// TODO")
    nm = tmp_path / "node_modules"
    nm.mkdir()
    (nm / "x.js").write_text("// TODO: vendored\n", encoding="utf-8")
    return tmp_path


def test_scan_paths_walks_known_languages(tmp_path):
    root = _tree(tmp_path)
    comments = scan_paths([str(root)], TODO, use_cache=False)
    assert [(Path(c.path).name, c.message) for c in comments] == [
        ("a.py", "TODO: python"),
        ("b.cs", "TODO: csharp"),
    ]


def test_parallel_matches_serial(tmp_path):
    root = _tree(tmp_path)
    serial = scan_paths([str(root)], TODO, use_cache=False)
    parallel = scan_paths([str(root)], TODO, jobs=3, use_cache=False)
    assert serial == parallel


def test_remote_matches_local(tmp_path):
    root = _tree(tmp_path)
    local = scan_paths([str(root)], TODO, use_cache=False)
    remote = scan_paths([str(root)], TODO, use_cache=False, remote=True)
    assert local == remote


def test_language_override(tmp_path):
    p = tmp_path / "notes.txt"
    p.write_text("# TODO: forced\n", encoding="utf-8")
    assert scan_file(str(p), TODO) == []
    comments = scan_file(str(p), TODO, language="python")
    assert [c.message for c in comments] == ["TODO: forced"]


def test_cache_reuses_results(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    src = tmp_path / "a.py"
    src.write_text("# TODO: cached\n", encoding="utf-8")
    first = scan_paths([str(src)], TODO)
    assert [c.message for c in first] == ["TODO: cached"]

    cache_file = tmp_path / DEFAULT_CACHE
    data = json.loads(cache_file.read_text(encoding="utf-8"))
    data[str(src)]["comments"][0]["message"] = "from cache"
    cache_file.write_text(json.dumps(data), encoding="utf-8")

    second = scan_paths([str(src)], TODO)
    assert [c.message for c in second] == ["from cache"]

    # マーカー構成が変われば再走査する
    third = scan_paths([str(src)], TODO + [MarkerDescriptor("HACK")])
    assert [c.message for c in third] == ["TODO: cached"]


def test_empty_markers(tmp_path):
    root = _tree(tmp_path)
    assert scan_paths([str(root)], [], use_cache=False) == []


def test_document_from_path(tmp_path):
    p = tmp_path / "m.rb"
    p.write_text("# HACK: ruby\n", encoding="utf-8")
    doc = Document.from_path(p)
    assert (doc.language, doc.id) == ("ruby", str(p))
    assert len(doc.checksum) == 64
    with pytest.raises(ValueError):
        Document.from_path(tmp_path / "unknown.ext")


def test_cache_is_invalidated_by_language_override(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    p = tmp_path / "notes.txt"
    p.write_text("# TODO: hash\n// TODO: slash\n", encoding="utf-8")
    as_python = scan_paths([str(p)], TODO, language="python")
    assert [c.message for c in as_python] == ["TODO: hash"]
    as_c = scan_paths([str(p)], TODO, language="c")
    assert [c.message for c in as_c] == ["TODO: slash"]
    assert as_c == scan_paths([str(p)], TODO, language="c", use_cache=False)
