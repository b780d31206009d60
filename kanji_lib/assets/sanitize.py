"""Markup sanitizing and parsing for KanjiVG-style SVG files.

KanjiVG files ship with an XML declaration, a DOCTYPE carrying an internal
subset of entity declarations, and a copyright comment. When the markup is
embedded in a page, a partially stripped DOCTYPE leaks as visible "]>"
text, so all of it is removed before the document is parsed.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET

from ..domain.document import KVG_NS, VectorDocument
from ..errors import ParseError

logger = logging.getLogger(__name__)

_XML_PROLOG = re.compile(r'<\?xml[\s\S]*?\?>\s*', re.IGNORECASE)
_DOCTYPE_WITH_SUBSET = re.compile(r'<!DOCTYPE[^\[>]*\[[\s\S]*?\]\s*>\s*', re.IGNORECASE)
_DOCTYPE_PLAIN = re.compile(r'<!DOCTYPE[^>]*>\s*', re.IGNORECASE)
_LEADING_COMMENTS = re.compile(r'^(\s*<!--[\s\S]*?-->\s*)+')

_STRAY_TEXT = {'', ']>', ']]>'}
_SVG_OPEN_TAG = re.compile(r'<svg\b')


def sanitize_markup(raw: str | bytes | None) -> str:
    """Strip the prolog, DOCTYPE and leading comments from SVG markup.

    Removal order is: XML declaration, DOCTYPE with an internal subset,
    plain DOCTYPE, leading comment blocks. Sanitizing twice gives the same
    result as sanitizing once.

    Args:
        raw: Markup as text or UTF-8 bytes.

    Returns:
        The trimmed markup, '' for empty input.
    """
    if not raw:
        return ''
    s = raw.decode('utf-8', errors='replace') if isinstance(raw, bytes) else str(raw)
    s = s.lstrip('\ufeff')
    s = _XML_PROLOG.sub('', s, count=1)
    s = _DOCTYPE_WITH_SUBSET.sub('', s, count=1)
    s = _DOCTYPE_PLAIN.sub('', s, count=1)
    s = _LEADING_COMMENTS.sub('', s, count=1)
    return s.strip()


def _strip_stray_text(root: ET.Element) -> int:
    removed = 0
    for elem in root.iter():
        if elem.text is not None and elem.text.strip() in _STRAY_TEXT:
            elem.text = None
            removed += 1
        if elem.tail is not None and elem.tail.strip() in _STRAY_TEXT:
            elem.tail = None
            removed += 1
    return removed


def parse_document(markup: str) -> VectorDocument:
    """Sanitize and parse markup into a VectorDocument.

    Whitespace-only and "]>" text nodes left in the tree are removed so
    they cannot render as stray text.

    Raises:
        ParseError: If the markup is empty or not well-formed XML.
    """
    cleaned = sanitize_markup(markup)
    if not cleaned:
        raise ParseError("empty vector markup")
    # KanjiVG declares the kvg prefix only in the DOCTYPE we just removed
    if 'kvg:' in cleaned and 'xmlns:kvg' not in cleaned:
        cleaned = _SVG_OPEN_TAG.sub(f'<svg xmlns:kvg="{KVG_NS}"', cleaned, count=1)
    try:
        root = ET.fromstring(cleaned)
    except ET.ParseError as e:
        raise ParseError(f"malformed vector markup: {e}") from e
    removed = _strip_stray_text(root)
    if removed:
        logger.debug("Removed %d stray text node(s)", removed)
    return VectorDocument(root)
