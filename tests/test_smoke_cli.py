import json
import subprocess
import sys
from pathlib import Path

PKG = 'todoscan'
ROOT = Path(__file__).resolve().parents[1]


def _run_cli(args, cwd):
    exe = [sys.executable, '-m', PKG + '.cli']
    cp = subprocess.run(exe + args, cwd=str(cwd), capture_output=True, text=True)
    return cp.returncode, cp.stdout, cp.stderr


def _sample(tmp_path):
    src = tmp_path / 'sample.c'
    src.write_text('int main(void) {\n    return 0; /* TODO: 戻り値を見直す */\n}\n', encoding='utf-8')
    return src


def test_smoke_cli_text_output(tmp_path):
    src = _sample(tmp_path)
    code, out, err = _run_cli(['--no-cache', str(src)], tmp_path)
    assert code == 0, err
    assert f'{src.resolve()}:2:18: [TODO] TODO: 戻り値を見直す' in out
    assert 'Total: 1 comment(s)' in out


def test_fail_on_match_and_json(tmp_path):
    src = _sample(tmp_path)
    code, out, err = _run_cli(['--no-cache', '--json', '--fail-on-match', str(src)], tmp_path)
    assert code == 1, err
    data = json.loads(out)
    assert data[0]['marker'] == 'TODO'
    assert (data[0]['line'], data[0]['column']) == (2, 18)


def test_marker_option_and_no_match(tmp_path):
    src = _sample(tmp_path)
    code, out, err = _run_cli(['--no-cache', '--marker', 'FIXME', str(src)], tmp_path)
    assert code == 0
    assert out.strip() == 'No comments found.'


def test_config_file(tmp_path):
    src = tmp_path / 'a.py'
    src.write_text('# FIXME: from config\n', encoding='utf-8')
    cfg = tmp_path / 'pyproject.toml'
    cfg.write_text('[tool.todoscan]\nmarkers = ["FIXME:2"]\nnoCache = true\nremote = true\n', encoding='utf-8')
    code, out, err = _run_cli(['--config', str(cfg), '--json', str(src)], tmp_path)
    assert code == 0, err
    data = json.loads(out)
    assert [(d['marker'], d['priority']) for d in data] == [('FIXME', 2)]
    assert not (tmp_path / '.todoscan_cache.json').exists()


def test_bad_marker_file(tmp_path):
    src = _sample(tmp_path)
    bad = tmp_path / 'markers.json'
    bad.write_text('{"not": "a list"}', encoding='utf-8')
    code, out, err = _run_cli(['--markers', str(bad), str(src)], tmp_path)
    assert code == 2
    assert 'Failed to load markers' in err


def test_explicit_jobs_wins_over_config(tmp_path):
    from todoscan.cli import _apply_config, build_parser

    cfg = tmp_path / 'pyproject.toml'
    cfg.write_text('[tool.todoscan]\njobs = 4\n', encoding='utf-8')
    parser = build_parser()
    explicit = parser.parse_args(['--config', str(cfg), '--jobs', '1', 'x'])
    _apply_config(explicit)
    assert explicit.jobs == 1
    implicit = parser.parse_args(['--config', str(cfg), 'x'])
    _apply_config(implicit)
    assert implicit.jobs == 4
