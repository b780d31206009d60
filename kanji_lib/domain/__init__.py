"""Domain objects for the kanji stroke viewer.

Record classes:
    Entry: Canonical record for one character.
    Reading: A pronunciation with optional gloss and examples.
    Example: A usage example (headword, kana, gloss).
    SvgLocator: Asset locator for the stroke-order graphic.

Vector classes:
    VectorDocument: Sanitized, parsed SVG for one character.
    StrokePath: Handle to one stroke inside a VectorDocument.

Example usage::

    from kanji_lib.domain import Entry, codepoint_hex

    entry = Entry(chu='日')
    print(codepoint_hex(entry.chu))  # '065e5'
"""

from .document import StrokePath, VectorDocument
from .entry import (
    Entry, Example, Reading, SvgLocator, codepoint_hex, default_asset_path,
)

__all__ = [
    'Entry', 'Reading', 'Example', 'SvgLocator',
    'codepoint_hex', 'default_asset_path',
    'VectorDocument', 'StrokePath',
]
