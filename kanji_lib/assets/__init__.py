"""Vector asset loading, sanitizing and stroke extraction.

Exports:
    AssetLoader: Fetch per-character SVG markup over HTTP(S) or from disk.
    resolve_asset_path: Relative asset path for an entry.
    sanitize_markup: Strip prolog, DOCTYPE and leading comments.
    parse_document: Sanitize and parse markup into a VectorDocument.
    extract_strokes: Ordered stroke handles, guide lines excluded.
    extract_guides: The guide-line paths only.
"""

from .extractor import extract_guides, extract_strokes
from .loader import AssetLoader, resolve_asset_path
from .sanitize import parse_document, sanitize_markup

__all__ = [
    'AssetLoader', 'resolve_asset_path',
    'sanitize_markup', 'parse_document',
    'extract_strokes', 'extract_guides',
]
