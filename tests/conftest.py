"""Shared pytest fixtures for the kanji_lib test suite.

Fixtures:
    sample_svg: KanjiVG-style markup for 二 with prolog, copyright comment,
        DOCTYPE internal subset, one guide line and two strokes
    asset_dir: Temporary asset root containing sample_svg at the
        conventional path for 二
    modern_record, legacy_record, collection_record: One record per known
        input shape
    db_file: Temporary record file mixing the shapes
    flask_client: Flask test client for the viewer app
    fixed_now: Timestamp pinned for normalization tests

Markers:
    slow: Mark test as slow-running (skip with -m "not slow")
    integration: Mark test as integration test
"""

import json

import pytest

SAMPLE_CHAR = '二'
SAMPLE_HEX = '04e8c'

SAMPLE_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<!--
Copyright (C) 2009/2010/2011 Ulrich Apel.
This work is distributed under the conditions of the Creative Commons
Attribution-Share Alike 3.0 Licence.
-->
<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.0//EN" "http://www.w3.org/TR/2001/REC-SVG-20010904/DTD/svg10.dtd" [
<!ATTLIST g
xmlns:kvg CDATA #FIXED "http://kanjivg.tagaini.net"
kvg:element CDATA #IMPLIED >
<!ATTLIST path
xmlns:kvg CDATA #FIXED "http://kanjivg.tagaini.net"
kvg:type CDATA #IMPLIED >
]>
<svg xmlns="http://www.w3.org/2000/svg" width="109" height="109" viewBox="0 0 109 109">
<g id="kvg:StrokePaths_04e8c" style="fill:none;stroke:#000000;stroke-width:3;stroke-linecap:round;stroke-linejoin:round;">
<path d="M0,54.5 L109,54.5" style="stroke:#BCC9E2;stroke-width:0.5" />
<g id="kvg:04e8c" kvg:element="二">
	<path id="kvg:04e8c-s1" kvg:type="㇐" d="M20,40 L90,40"/>
	<path id="kvg:04e8c-s2" kvg:type="㇐" d="M10,80 L100,80"/>
</g>
</g>
</svg>
"""

# Lengths of the two strokes above
SAMPLE_LENGTHS = (70.0, 90.0)

FIXED_NOW = '2024-05-01T12:00:00.000Z'


# -----------------------------------------------------------------------------
# Pytest Markers
# -----------------------------------------------------------------------------

def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow-running (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# -----------------------------------------------------------------------------
# Vector Asset Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def sample_svg():
    """Return KanjiVG-style markup for 二.

    Returns:
        str: Markup with an XML declaration, a copyright comment, a DOCTYPE
        carrying an internal subset, one #BCC9E2 guide line and two strokes.
    """
    return SAMPLE_SVG


@pytest.fixture
def asset_dir(tmp_path):
    """Create a local asset root holding the sample graphic.

    Returns:
        pathlib.Path: Directory containing resources/kanji_svg/04e8c.svg.
    """
    svg_dir = tmp_path / 'resources' / 'kanji_svg'
    svg_dir.mkdir(parents=True)
    (svg_dir / f'{SAMPLE_HEX}.svg').write_text(SAMPLE_SVG, encoding='utf-8')
    return tmp_path


# -----------------------------------------------------------------------------
# Record Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def modern_record():
    """Return a modern-shape record for 日."""
    return {
        'chu': '日',
        'hanViet': 'NHẬT',
        'nghia': 'mặt trời, ngày',
        'kun': [{'am': 'ひ', 'nghia': 'ngày', 'viDu': [
            {'tu': '日', 'hiragana': 'ひ', 'nghia': 'ngày'},
        ]}],
        'on': [{'am': 'ニチ', 'nghia': '', 'viDu': [
            {'tu': '日本', 'hiragana': 'にほん', 'nghia': 'Nhật Bản'},
        ]}],
        'bo': '日',
        'svg': {'codepoint_hex': '065e5', 'path': 'resources/kanji_svg/065e5.svg',
                'exists': True},
        'updatedAt': '2024-01-01T00:00:00.000Z',
    }


@pytest.fixture
def legacy_record():
    """Return a legacy-shape record with a free-form info map."""
    return {
        'kanji': '月',
        'hanviet_input': 'NGUYỆT',
        'info': {
            'Kunyomi': 'つき -げつ',
            'Onyomi': 'ゲツ、ガツ',
            'Nghĩa': 'mặt trăng, tháng',
            'Bộ': {'text': '月'},
        },
    }


@pytest.fixture
def collection_record(legacy_record):
    """Return a collection whose declared order puts 二 before 月."""
    return {
        'order': [SAMPLE_CHAR, '月'],
        'items': {
            '月': legacy_record,
            SAMPLE_CHAR: {'info': {'Hán-Việt': 'NHỊ', 'Nghĩa': 'hai'}},
        },
    }


@pytest.fixture
def db_file(tmp_path, modern_record, legacy_record):
    """Write a record file mixing modern and legacy shapes plus a reject.

    Returns:
        pathlib.Path: Path to the JSON file.
    """
    records = [
        modern_record,
        legacy_record,
        {'chu': SAMPLE_CHAR, 'hanViet': 'NHỊ', 'nghia': 'hai',
         'viDu': ['二月（にがつ）: tháng hai']},
        {'info': {}},
    ]
    path = tmp_path / 'kanji_db.json'
    path.write_text(json.dumps(records, ensure_ascii=False), encoding='utf-8')
    return path


# -----------------------------------------------------------------------------
# Flask Client Fixture
# -----------------------------------------------------------------------------

@pytest.fixture
def flask_client(asset_dir, db_file):
    """Create a Flask test client for the viewer app.

    The app serves assets from ``asset_dir`` and records from ``db_file``.

    Returns:
        flask.testing.FlaskClient: Test client for making requests.

    Example:
        def test_strokes(flask_client):
            response = flask_client.get('/api/strokes?c=二')
            assert response.status_code == 200
    """
    from kanji_lib.config import ViewerConfig
    from kanji_lib.web.app import create_app

    config = ViewerConfig(asset_base=str(asset_dir), db_path=str(db_file))
    app = create_app(config)
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
