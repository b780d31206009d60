"""Integration tests for the Flask viewer app.

Tests cover:
    - ?c= validation (missing, more than one character)
    - /api/entry with examples collected from the record file
    - /api/strokes for known and unknown characters, and upstream failures
    - /api/frame PNG snapshots and parameter validation
    - /resources sanitized markup

Run with:
    python3 -m pytest tests/integration/test_app.py -v
"""

import io
from unittest.mock import patch

import pytest
import responses
from PIL import Image

from kanji_lib.assets.loader import AssetLoader
from kanji_lib.config import ViewerConfig
from kanji_lib.errors import ConfigurationError
from kanji_lib.web.app import create_app

pytestmark = pytest.mark.integration

REMOTE = 'https://assets.example.com/'


class TestValidation:
    """The ?c= parameter must be exactly one character."""

    @pytest.mark.parametrize('route', ['/api/entry', '/api/strokes', '/api/frame'])
    def test_missing_param(self, flask_client, route):
        response = flask_client.get(route)
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Missing ?c= parameter'

    @pytest.mark.parametrize('route', ['/api/entry', '/api/strokes', '/api/frame'])
    def test_multiple_characters(self, flask_client, route):
        response = flask_client.get(route, query_string={'c': '日本'})
        assert response.status_code == 400

    @pytest.mark.parametrize('route', ['/api/entry', '/api/strokes', '/api/frame'])
    def test_whitespace_param(self, flask_client, route):
        response = flask_client.get(route, query_string={'c': ' '})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'Missing ?c= parameter'


class TestEntryRoutes:
    """Tests for /api/entries and /api/entry."""

    def test_entries(self, flask_client):
        response = flask_client.get('/api/entries')
        assert response.get_json()['chars'] == ['日', '月', '二']

    def test_modern_entry(self, flask_client):
        response = flask_client.get('/api/entry', query_string={'c': '日'})
        assert response.status_code == 200
        data = response.get_json()
        assert data['entry']['hanViet'] == 'NHẬT'
        assert data['entry']['svg']['codepoint_hex'] == '065e5'
        assert [e['tu'] for e in data['examples']] == ['日', '日本']

    def test_legacy_entry(self, flask_client):
        data = flask_client.get('/api/entry', query_string={'c': '月'}).get_json()
        assert [r['am'] for r in data['entry']['kun']] == ['つき', 'げつ']

    def test_examples_from_raw_record(self, flask_client):
        data = flask_client.get('/api/entry', query_string={'c': '二'}).get_json()
        assert data['examples'] == [{'tu': '二月', 'hiragana': 'にがつ', 'nghia': 'tháng hai'}]

    def test_unknown_entry(self, flask_client):
        response = flask_client.get('/api/entry', query_string={'c': '龍'})
        assert response.status_code == 404


class TestStrokesRoute:
    """Tests for /api/strokes."""

    def test_strokes(self, flask_client):
        response = flask_client.get('/api/strokes', query_string={'c': '二'})
        assert response.status_code == 200
        data = response.get_json()
        assert data['count'] == 2
        assert [s['index'] for s in data['strokes']] == [0, 1]
        assert [s['length'] for s in data['strokes']] == pytest.approx([70.0, 90.0])
        assert data['strokes'][0]['d'] == 'M20,40 L90,40'

    def test_missing_asset_is_404(self, flask_client):
        response = flask_client.get('/api/strokes', query_string={'c': '三'})
        assert response.status_code == 404
        assert 'error' in response.get_json()

    @responses.activate
    def test_upstream_failure_is_502(self, tmp_path):
        responses.add(responses.GET, REMOTE + 'resources/kanji_svg/04e8c.svg', status=500)
        app = create_app(ViewerConfig(asset_base=REMOTE),
                         loader=AssetLoader(REMOTE, max_retries=1))
        response = app.test_client().get('/api/strokes', query_string={'c': '二'})
        assert response.status_code == 502
        assert 'HTTP 500' in response.get_json()['error']


class TestFrameRoute:
    """Tests for /api/frame."""

    def test_png(self, flask_client):
        response = flask_client.get('/api/frame', query_string={'c': '二', 't': '500'})
        assert response.status_code == 200
        assert response.mimetype == 'image/png'
        img = Image.open(io.BytesIO(response.data))
        assert img.size == (327, 327)

    def test_default_time_is_end_of_reveal(self, flask_client):
        response = flask_client.get('/api/frame', query_string={'c': '二', 'preset': 'gallery'})
        assert response.status_code == 200

    def test_unknown_preset(self, flask_client):
        response = flask_client.get('/api/frame', query_string={'c': '二', 'preset': 'slow'})
        assert response.status_code == 400

    def test_bad_time(self, flask_client):
        response = flask_client.get('/api/frame', query_string={'c': '二', 't': 'soon'})
        assert response.status_code == 400

    def test_missing_asset(self, flask_client):
        response = flask_client.get('/api/frame', query_string={'c': '三'})
        assert response.status_code == 404

    def test_unresolvable_asset_is_500(self, flask_client):
        with patch.object(AssetLoader, 'load_asset',
                          side_effect=ConfigurationError('no asset path')):
            response = flask_client.get('/api/frame', query_string={'c': '二'})
        assert response.status_code == 500
        assert response.get_json()['error'] == 'no asset path'


class TestResources:
    """Tests for /resources/<path>."""

    def test_sanitized_markup(self, flask_client):
        response = flask_client.get('/resources/kanji_svg/04e8c.svg')
        assert response.status_code == 200
        assert response.mimetype == 'image/svg+xml'
        text = response.get_data(as_text=True)
        assert text.startswith('<svg')
        assert ']>' not in text

    def test_missing(self, flask_client):
        assert flask_client.get('/resources/kanji_svg/00000.svg').status_code == 404


class TestCreateApp:
    """Tests for create_app."""

    def test_without_record_file(self, asset_dir):
        app = create_app(ViewerConfig(asset_base=str(asset_dir)))
        client = app.test_client()
        assert client.get('/api/entries').get_json() == {'chars': []}
        assert client.get('/api/strokes', query_string={'c': '二'}).status_code == 200

    def test_unreadable_record_file(self, tmp_path):
        bad = tmp_path / 'bad.json'
        bad.write_text('{not json', encoding='utf-8')
        with pytest.raises(ConfigurationError):
            create_app(ViewerConfig(db_path=str(bad)))

    def test_config_from_environment(self, asset_dir):
        with patch.dict('os.environ', {'KANJI_ASSET_BASE': str(asset_dir)}):
            app = create_app()
        assert app.test_client().get(
            '/api/strokes', query_string={'c': '二'}).get_json()['count'] == 2
