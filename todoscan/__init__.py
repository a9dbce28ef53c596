"""todoscan
ソースコードのコメントから TODO/HACK などのマーカーを抽出するライブラリ。

主な提供機能:
- 言語ごとのトリビア(コメント)分類と、行コメント/ブロックコメント/プリプロセッサ行内コメントの照合
- 単語境界判定 (TODOX は TODO とみなさない)・大文字小文字を区別しない照合
- 絶対オフセットから行/桁への変換
- 別プロセス実行とローカル実行のフォールバック
- CLI インターフェース
"""
from .markers import MarkerDescriptor, DEFAULT_MARKERS, parse_marker_option, load_marker_file
from .document import Document
from .scanner import ResolvedComment, CancellationToken, ScanCancelled, scan_document
from .collector import scan_text, scan_file, scan_paths

__all__ = [
    "MarkerDescriptor",
    "DEFAULT_MARKERS",
    "parse_marker_option",
    "load_marker_file",
    "Document",
    "ResolvedComment",
    "CancellationToken",
    "ScanCancelled",
    "scan_document",
    "scan_text",
    "scan_file",
    "scan_paths",
]

__version__ = "0.1.0"
