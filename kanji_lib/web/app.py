"""Flask application for the kanji stroke viewer.

Serves normalized entries, stroke data, sanitized vector assets and PNG
snapshots of the stroke-reveal animation. The app is built by
create_app() so tests and the CLI can run it with their own config.

Routes:
    GET /api/entries            Characters available in the record file.
    GET /api/entry?c=           Normalized entry plus collected examples.
    GET /api/strokes?c=         Stroke count, lengths and path data.
    GET /api/frame?c=&t=&preset= PNG of the reveal ``t`` ms after play.
    GET /resources/<path>       Sanitized vector markup.

Example:
    Run the development server against a local asset tree::

        from kanji_lib.config import ViewerConfig, configure_logging
        from kanji_lib.web.app import create_app

        config = ViewerConfig(asset_base='public', db_path='kanji_db.json')
        configure_logging(config.log_level)
        create_app(config).run(port=5000)
"""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Mapping
from typing import Any

from flask import Blueprint, Flask, Response, current_app, jsonify, request, send_file
from werkzeug.security import safe_join

from ..animation.animator import AnimationTiming
from ..animation.frames import frame_at
from ..assets.extractor import extract_guides, extract_strokes
from ..assets.loader import AssetLoader
from ..assets.sanitize import sanitize_markup
from ..config import ViewerConfig
from ..domain.entry import Entry
from ..errors import ConfigurationError, NetworkError, NormalizationReject
from ..schema.examples import ExampleSet, collect_examples
from ..schema.normalizer import iter_collection, new_entry, normalize_all

logger = logging.getLogger(__name__)

viewer = Blueprint('viewer', __name__)


def validate_char_param(char: str | None) -> tuple[bool, tuple | None]:
    """Validate the ``?c=`` query parameter.

    Returns:
        (True, None) if ``char`` is exactly one character, otherwise
        (False, error_response) ready to be returned from a route.
    """
    if not char or not char.strip():
        return False, (jsonify(error="Missing ?c= parameter"), 400)
    if len(char) != 1:
        return False, (jsonify(error="Character must be a single character"), 400)
    return True, None


def send_pil_image_as_png(img):
    """Send a PIL image as an image/png response."""
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    buf.seek(0)
    return send_file(buf, mimetype='image/png')


def _raw_records(data: Any) -> list[Mapping]:
    if isinstance(data, list):
        return [item for item in data if isinstance(item, Mapping)]
    try:
        return [item for _, item in iter_collection(data) if isinstance(item, Mapping)]
    except NormalizationReject:
        return [data] if isinstance(data, Mapping) else []


def load_record_file(path: str | None) -> tuple[dict[str, Entry], dict[str, Mapping]]:
    """Load a record file into (entries by char, raw records by char).

    A missing path gives empty indexes. Rejected records are dropped.

    Raises:
        ConfigurationError: If the file cannot be read or is not JSON.
    """
    if not path:
        return {}, {}
    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read record file {path}: {e}") from e

    entries: dict[str, Entry] = {}
    for entry in normalize_all(data):
        entries.setdefault(entry.chu, entry)

    raw: dict[str, Mapping] = {}
    for record in _raw_records(data):
        chu = record.get('chu') or record.get('kanji')
        if isinstance(chu, str) and chu.strip():
            raw.setdefault(chu.strip(), record)
    logger.info("Loaded %d entries from %s", len(entries), path)
    return entries, raw


def _loader() -> AssetLoader:
    return current_app.extensions['kanji_loader']


def _entry_for(c: str) -> Entry:
    return current_app.extensions['kanji_entries'].get(c) or new_entry(c)


def _network_error(e: NetworkError):
    if e.status == 404:
        return jsonify(error=str(e)), 404
    return jsonify(error=str(e)), 502


@viewer.route('/api/entries')
def api_entries():
    return jsonify(chars=list(current_app.extensions['kanji_entries']))


@viewer.route('/api/entry')
def api_entry():
    c = request.args.get('c')
    ok, err = validate_char_param(c)
    if not ok:
        return err
    entry = current_app.extensions['kanji_entries'].get(c)
    if entry is None:
        return jsonify(error="Entry not found"), 404
    examples = ExampleSet(collect_examples(entry))
    examples.extend(collect_examples(current_app.extensions['kanji_raw'].get(c)))
    return jsonify(entry=entry.to_dict(), examples=[e.to_dict() for e in examples])


@viewer.route('/api/strokes')
def api_strokes():
    c = request.args.get('c')
    ok, err = validate_char_param(c)
    if not ok:
        return err
    try:
        strokes = _loader().load_strokes(_entry_for(c))
    except NetworkError as e:
        return _network_error(e)
    except ConfigurationError as e:
        return jsonify(error=str(e)), 500
    return jsonify(
        count=len(strokes),
        strokes=[{'index': s.index, 'length': round(s.length, 3), 'd': s.d} for s in strokes],
    )


@viewer.route('/api/frame')
def api_frame():
    c = request.args.get('c')
    ok, err = validate_char_param(c)
    if not ok:
        return err
    try:
        timing = AnimationTiming.preset(
            request.args.get('preset') or current_app.config['KANJI_ANIMATION_PRESET'])
    except ValueError as e:
        return jsonify(error=str(e)), 400

    try:
        document = _loader().load_asset(_entry_for(c))
    except NetworkError as e:
        return _network_error(e)
    except ConfigurationError as e:
        return jsonify(error=str(e)), 500

    strokes = extract_strokes(document)
    t = request.args.get('t')
    try:
        at_ms = float(t) if t is not None else timing.total_ms(len(strokes))
    except ValueError:
        return jsonify(error="t must be a number of milliseconds"), 400
    img = frame_at(strokes, at_ms, timing, guides=extract_guides(document))
    return send_pil_image_as_png(img)


@viewer.route('/resources/<path:path>')
def resources(path):
    rel = safe_join('resources', path)
    if rel is None:
        return jsonify(error="Not found"), 404
    try:
        markup = _loader().fetch_markup(rel)
    except NetworkError as e:
        return _network_error(e)
    return Response(sanitize_markup(markup), mimetype='image/svg+xml')


def create_app(config: ViewerConfig | None = None,
               loader: AssetLoader | None = None) -> Flask:
    """Build the viewer app.

    Args:
        config: Viewer configuration. Defaults to ViewerConfig.from_env().
        loader: Asset loader to use instead of one built from ``config``.

    Raises:
        ConfigurationError: If the configured record file is unreadable.
    """
    config = config or ViewerConfig.from_env()
    app = Flask(__name__)
    app.config['KANJI_ANIMATION_PRESET'] = config.animation_preset
    app.json.ensure_ascii = False

    entries, raw = load_record_file(config.db_path)
    app.extensions['kanji_entries'] = entries
    app.extensions['kanji_raw'] = raw
    app.extensions['kanji_loader'] = loader or AssetLoader(
        config.asset_base, timeout=config.http_timeout,
        max_retries=config.http_max_retries)
    app.register_blueprint(viewer)
    logger.debug("Viewer app created (assets: %s)", config.asset_base)
    return app
