"""Stroke extraction from sanitized vector documents.

KanjiVG stores each stroke as a <path> element, in stroke-number order.
The file also carries decorative grid guide lines drawn in a fixed colour;
those are not strokes and are filtered out. Nothing is reordered, merged
or split.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from svgpathtools import parse_path

from ..config import GUIDE_STROKE_COLOR
from ..domain.document import StrokePath, VectorDocument, parse_style

logger = logging.getLogger(__name__)


def stroke_color(elem: ET.Element) -> str:
    """The element's stroke colour, lowercased.

    An inline ``style`` declaration overrides the ``stroke`` presentation
    attribute, as in CSS.
    """
    color = parse_style(elem.get('style')).get('stroke') or elem.get('stroke') or ''
    return color.strip().lower()


def is_guide(elem: ET.Element, guide_color: str = GUIDE_STROKE_COLOR) -> bool:
    return stroke_color(elem) == guide_color.lower()


def measure(d: str):
    """Parse path data and measure it.

    Returns:
        Tuple (path, length). Path data svgpathtools cannot handle yields
        (None, 0.0); the element is still a stroke.
    """
    try:
        path = parse_path(d)
        return path, float(path.length())
    except Exception as e:
        logger.warning("Could not measure path %.40r: %s", d, e)
        return None, 0.0


def extract_strokes(document: VectorDocument,
                    guide_color: str = GUIDE_STROKE_COLOR) -> list[StrokePath]:
    """Extract the ordered stroke paths of a document.

    Args:
        document: A sanitized VectorDocument. The empty document yields [].
        guide_color: Stroke colour identifying guide lines.

    Returns:
        StrokePath handles in document order; ``index`` equals the position.
    """
    strokes: list[StrokePath] = []
    for elem in document.iter_paths():
        if is_guide(elem, guide_color):
            continue
        d = (elem.get('d') or '').strip()
        if not d:
            continue
        path, length = measure(d)
        strokes.append(StrokePath(
            element=elem,
            index=len(strokes),
            length=length,
            d=d,
            document=document,
            path=path,
        ))
    logger.debug("Extracted %d stroke(s) from document %d", len(strokes), document.generation)
    return strokes


def extract_guides(document: VectorDocument,
                   guide_color: str = GUIDE_STROKE_COLOR) -> list[StrokePath]:
    """The guide-line paths that extract_strokes() leaves out."""
    guides = []
    for elem in document.iter_paths():
        d = (elem.get('d') or '').strip()
        if d and is_guide(elem, guide_color):
            path, length = measure(d)
            guides.append(StrokePath(elem, len(guides), length, d, document, path))
    return guides
