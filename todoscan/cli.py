from __future__ import annotations
import argparse
import json
import logging
import sys
import tomllib
from pathlib import Path
from typing import List

from .collector import scan_paths
from .dialects import DIALECTS
from .markers import DEFAULT_MARKER_OPTION, MarkerDescriptor, load_marker_file, parse_marker_option


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="todoscan",
        description="ソースコードのコメントから TODO/HACK などのマーカーを抽出します"
    )
    p.add_argument("paths", nargs="+", help="走査するファイル/ディレクトリ")
    p.add_argument("--json", action="store_true", help="JSONで出力")
    p.add_argument("--config", help="設定ファイル(TOML: pyproject.toml など)の [tool.todoscan] を読み込み、既定値を上書き")
    p.add_argument("--marker", action="append", dest="marker_options", metavar="TEXT[:PRIORITY]",
                   help=f"検出するマーカー (複数指定は繰り返し、'|' 区切りも可。既定: {DEFAULT_MARKER_OPTION})")
    p.add_argument("--markers", action="append", dest="marker_files", metavar="FILE",
                   help="マーカー定義ファイル(YAML/JSON) (複数指定は繰り返し)")
    p.add_argument("--language", choices=sorted(DIALECTS), help="言語を明示 (既定: 拡張子から判定し、未知の拡張子は読み飛ばす)")
    p.add_argument("--jobs", type=int, default=None, help="並列実行のワーカー数 (既定: 1)")
    p.add_argument("--no-cache", action="store_true", help="キャッシュを使わず毎回フルスキャン")
    p.add_argument("--remote", action="store_true", help="別プロセスで解析する (失敗時はプロセス内で実行)")
    p.add_argument("--fail-on-match", action="store_true", help="マーカーが1件でもあれば終了コード1")
    p.add_argument("-v", "--verbose", action="store_true", help="デバッグログを標準エラーに出力")
    return p


def _apply_config(args: argparse.Namespace) -> None:
    """CLI引数が最優先。未指定の項目のみ設定ファイルで補完する。"""
    cfg_path = Path(args.config)
    if not cfg_path.is_file():
        print(f"[warn] config not found: {cfg_path}", file=sys.stderr)
        return
    try:
        with cfg_path.open("rb") as f:
            cfg = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"[warn] failed to load config {cfg_path}: {e}", file=sys.stderr)
        return
    tool = cfg.get("tool", {}) if isinstance(cfg, dict) else {}
    conf = tool.get("todoscan", {}) if isinstance(tool, dict) else {}
    if not isinstance(conf, dict):
        return
    # ブール系
    for key, attr in [
        ("remote", "remote"),
        ("failOnMatch", "fail_on_match"),
        ("noCache", "no_cache"),
        ("json", "json"),
    ]:
        if key in conf and not getattr(args, attr):
            setattr(args, attr, bool(conf[key]))
    if "markers" in conf and not args.marker_options:
        val = conf["markers"]
        args.marker_options = [str(x) for x in val] if isinstance(val, list) else [str(val)]
    if "markerFiles" in conf and not args.marker_files:
        val = conf["markerFiles"]
        # 相対パスは設定ファイルの位置を基準にする
        files = val if isinstance(val, list) else [val]
        args.marker_files = [str(cfg_path.parent / str(x)) for x in files]
    if "language" in conf and args.language is None:
        lang = str(conf["language"]).lower()
        if lang in DIALECTS:
            args.language = lang
        else:
            print(f"[warn] unknown language in config: {lang}", file=sys.stderr)
    if "jobs" in conf and args.jobs is None:
        args.jobs = int(conf["jobs"])


def _collect_markers(args: argparse.Namespace) -> List[MarkerDescriptor]:
    markers: List[MarkerDescriptor] = []
    for opt in args.marker_options or []:
        markers.extend(parse_marker_option(opt))
    for mf in args.marker_files or []:
        markers.extend(load_marker_file(mf))
    if not args.marker_options and not args.marker_files:
        markers = parse_marker_option(DEFAULT_MARKER_OPTION)
    return markers


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="[%(levelname)s] %(name)s: %(message)s", stream=sys.stderr)
    if args.config:
        _apply_config(args)
    if args.jobs is None:
        args.jobs = 1

    try:
        markers = _collect_markers(args)
    except (OSError, ValueError) as e:
        print(f"Failed to load markers: {e}", file=sys.stderr)
        return 2
    if not markers:
        print("[warn] no markers configured; nothing to scan", file=sys.stderr)

    comments = scan_paths(
        args.paths,
        markers=markers,
        jobs=max(1, args.jobs),
        use_cache=not args.no_cache,
        language=args.language,
        remote=args.remote,
    )

    if args.json:
        data = [c.to_dict() for c in comments]
        print(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        if not comments:
            print("No comments found.")
        else:
            # VS Code でクリック可能なリンクにするため、file:line:col 形式で出力
            for c in comments:
                loc = f"{Path(c.path).resolve()}:{c.line}:{c.column}" if c.path else "<memory>"
                print(f"{loc}: [{c.marker}] {c.message.strip()}")
            print(f"Total: {len(comments)} comment(s)")
    if args.fail_on_match and comments:
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
