"""Canonical character records.

Entry is the single model every input schema is normalized into. Entries,
readings and examples are immutable values: the normalizer creates them,
the surrounding UI owns them for a viewing session, and the core only
reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from ..config import ASSET_PATH_TEMPLATE, CODEPOINT_HEX_WIDTH


def codepoint_hex(chu: str) -> str:
    """Lowercase hex code point of the first character, zero-padded to 5 digits.

    Padding only pads: code points above U+FFFFF produce a longer key.

    >>> codepoint_hex('日')
    '065e5'
    """
    if not chu:
        return ''
    return format(ord(chu[0]), f'0{CODEPOINT_HEX_WIDTH}x')


def default_asset_path(hex_key: str) -> str:
    """Conventional asset path for a codepoint hex key, '' for an empty key."""
    if not hex_key:
        return ''
    return ASSET_PATH_TEMPLATE.format(hex=hex_key)


@dataclass(frozen=True)
class Example:
    """A usage example: headword, kana reading and gloss."""
    tu: str
    hiragana: str = ''
    nghia: str = ''

    def key(self) -> tuple[str, str, str]:
        return (self.tu, self.hiragana, self.nghia)

    def to_dict(self) -> dict[str, str]:
        return {'tu': self.tu, 'hiragana': self.hiragana, 'nghia': self.nghia}


@dataclass(frozen=True)
class Reading:
    """One pronunciation of a character with an optional gloss and examples."""
    am: str
    nghia: str = ''
    examples: tuple[Example, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            'am': self.am,
            'nghia': self.nghia,
            'viDu': [ex.to_dict() for ex in self.examples],
        }


@dataclass(frozen=True)
class SvgLocator:
    """Where the stroke-order graphic for a character lives.

    Attributes:
        codepoint_hex: Lowercase 5+ digit hex key of the character.
        path: Asset path relative to the asset base.
        exists: False when the record says no graphic is available.
    """
    codepoint_hex: str = ''
    path: str = ''
    exists: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            'codepoint_hex': self.codepoint_hex,
            'path': self.path,
            'exists': self.exists,
        }


@dataclass(frozen=True)
class Entry:
    """Canonical record for one character.

    Attributes:
        chu: The character grapheme. Empty only transiently while editing.
        han_viet: Sino-Vietnamese reading label.
        nghia: Meaning gloss.
        kun: Kun readings in source order.
        on: On readings in source order.
        bo: Free-text radical annotation, or None.
        svg: Asset locator for the stroke-order graphic.
        updated_at: ISO timestamp of the last normalize-and-commit.
    """
    chu: str
    han_viet: str = ''
    nghia: str = ''
    kun: tuple[Reading, ...] = ()
    on: tuple[Reading, ...] = ()
    bo: str | None = None
    svg: SvgLocator = field(default_factory=SvgLocator)
    updated_at: str = ''

    @property
    def readings(self) -> tuple[Reading, ...]:
        """Kun readings followed by on readings."""
        return self.kun + self.on

    def with_timestamp(self, updated_at: str) -> Entry:
        return replace(self, updated_at=updated_at)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the record-file field names.

        The result is itself a valid modern-shape record, so normalizing it
        again yields an equal Entry.
        """
        return {
            'chu': self.chu,
            'hanViet': self.han_viet,
            'nghia': self.nghia,
            'kun': [r.to_dict() for r in self.kun],
            'on': [r.to_dict() for r in self.on],
            'bo': self.bo,
            'svg': self.svg.to_dict(),
            'updatedAt': self.updated_at,
        }
