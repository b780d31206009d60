"""Integration tests for the command-line interface."""

import json
from unittest.mock import patch

import pytest

from kanji_lib.cli import main

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _no_logging_setup():
    with patch('kanji_lib.cli.configure_logging'):
        yield


class TestNormalizeCommand:

    def test_prints_entries(self, db_file, capsys):
        assert main(['normalize', str(db_file)]) == 0
        entries = json.loads(capsys.readouterr().out)
        assert [e['chu'] for e in entries] == ['日', '月', '二']


class TestStrokesCommand:

    def test_lists_strokes(self, asset_dir, capsys):
        assert main(['--assets', str(asset_dir), 'strokes', '二']) == 0
        out = capsys.readouterr().out
        assert out.startswith('二: 2 strokes')
        assert 'M10,80 L100,80' in out

    def test_missing_asset_exit_status(self, asset_dir):
        assert main(['--assets', str(asset_dir), 'strokes', '三']) == 2

    def test_more_than_one_character(self, asset_dir):
        with pytest.raises(SystemExit):
            main(['--assets', str(asset_dir), 'strokes', '二三'])

    def test_loader_uses_configured_http_settings(self, capsys):
        env = {'KANJI_HTTP_MAX_RETRIES': '5', 'KANJI_HTTP_TIMEOUT': '2.5'}
        with patch.dict('os.environ', env), \
                patch('kanji_lib.assets.loader.AssetLoader') as loader_cls:
            loader_cls.return_value.load_strokes.return_value = []
            assert main(['--assets', 'https://cdn.example.com/', 'strokes', '二']) == 0
        loader_cls.assert_called_once_with('https://cdn.example.com/', timeout=2.5, max_retries=5)
        assert capsys.readouterr().out.startswith('二: 0 strokes')


class TestFramesCommand:

    @pytest.mark.slow
    def test_writes_frames(self, asset_dir, tmp_path):
        out = tmp_path / 'frames'
        assert main(['--assets', str(asset_dir), 'frames', '二', '--out', str(out),
                     '--fps', '5', '--size', '64']) == 0
        frames = sorted(out.glob('*.png'))
        # 0..2000 ms every 200 ms, then the final 2160 ms frame
        assert len(frames) == 12
        assert frames[-1].name.endswith('02160ms.png')
