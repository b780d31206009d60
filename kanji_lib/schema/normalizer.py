"""Schema normalization for character records.

Character records come in three historical shapes:

    Modern:
        ``{"chu": "日", "hanViet": "NHẬT", "kun": [{"am": "ひ", ...}], ...}``
    Legacy map:
        ``{"kanji": "日", "hanviet_input": "nhật", "info": {"Kunyomi": "ひ -び -か", ...}}``
    Collection:
        ``{"order": ["日", ...], "items": {"日": <legacy record>, ...}}``

Each shape has a strict decoder. normalize() tries them in priority order
and the first one that succeeds wins; a record with no determinable
character is rejected (None, never an exception). Normalizing an Entry's
own dict form gives back an equal Entry.

Example:
    Normalize a batch and skip bad records::

        from kanji_lib.schema.normalizer import normalize_all

        entries = normalize_all(json.load(open('kanji_db.json')))
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from ..domain.entry import (
    Entry, Example, Reading, SvgLocator, codepoint_hex, default_asset_path,
)
from ..errors import NormalizationReject
from .examples import coerce_example

logger = logging.getLogger(__name__)

# Candidate keys for legacy info maps, in priority order
HAN_TU_KEYS = ('Hán tự',)
HAN_VIET_KEYS = ('Hán-Việt', 'Hán Việt', 'Âm Hán', 'Âm hán')
NGHIA_KEYS = ('Nghĩa', 'Ý nghĩa', 'Nghĩa:', 'Nghia')
KUN_KEYS = ('Kunyomi', 'Kun', 'Âm Kun', 'Âm kunyomi')
ON_KEYS = ('Onyomi', 'On', 'Âm On', 'Âm onyomi')
BO_KEYS = ('Bộ',)

_READING_SEPARATORS = re.compile(r'[\s\-‐－、,，・/]+')


def utcnow_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def tokenize_readings(compact: str) -> list[str]:
    """Split a compact reading string into unique tokens.

    Splits on whitespace, hyphens and list separators, trims, drops
    empties and keeps the first occurrence of each token.

    >>> tokenize_readings('ひ -び -か')
    ['ひ', 'び', 'か']
    """
    seen: set[str] = set()
    tokens = []
    for token in _READING_SEPARATORS.split(compact or ''):
        token = token.strip()
        if token and token not in seen:
            seen.add(token)
            tokens.append(token)
    return tokens


def _text(value: Any) -> str:
    if value is None:
        return ''
    return str(value)


def _lookup(info: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in info:
            return info[key]
    return None


def _examples(raw: Any) -> tuple[Example, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    out = []
    for item in raw:
        ex = coerce_example(item)
        if ex is not None:
            out.append(ex)
    return tuple(out)


def _reading(raw: Any) -> Reading | None:
    if isinstance(raw, Reading):
        return raw
    if isinstance(raw, str):
        am = raw.strip()
        return Reading(am) if am else None
    if isinstance(raw, Mapping):
        return Reading(
            am=_text(raw.get('am')),
            nghia=_text(raw.get('nghia')),
            examples=_examples(raw.get('viDu', raw.get('examples'))),
        )
    return None


def _readings(raw: Any) -> tuple[Reading, ...]:
    if isinstance(raw, str):
        return tuple(Reading(am) for am in tokenize_readings(raw))
    if not isinstance(raw, (list, tuple)):
        return ()
    out = []
    for item in raw:
        reading = _reading(item)
        if reading is not None:
            out.append(reading)
    return tuple(out)


def _svg(raw: Any, chu: str) -> SvgLocator:
    svg = raw if isinstance(raw, Mapping) else {}
    hex_key = svg.get('codepoint_hex', svg.get('codepointHex'))
    hex_key = _text(hex_key).lower() if hex_key else codepoint_hex(chu)
    path = svg.get('path')
    return SvgLocator(
        codepoint_hex=hex_key,
        path=_text(path) if path else default_asset_path(hex_key),
        exists=svg.get('exists') is not False,
    )


def _bo(raw: Any) -> str | None:
    if isinstance(raw, Mapping):
        raw = raw.get('text')
    if raw is None:
        return None
    text = str(raw)
    return text if text.strip() else None


# --- Variant decoders ---

def decode_modern(raw: Any, now: str) -> Entry:
    """Decode a flat record keyed by ``chu``.

    Raises:
        NormalizationReject: If ``chu`` is not a non-empty string.
    """
    if not isinstance(raw, Mapping) or not isinstance(raw.get('chu'), str):
        raise NormalizationReject("not a modern record")
    chu = raw['chu'].strip()
    if not chu:
        raise NormalizationReject("empty 'chu'")
    return Entry(
        chu=chu,
        han_viet=_text(raw.get('hanViet')),
        nghia=_text(raw.get('nghia')),
        kun=_readings(raw.get('kun')),
        on=_readings(raw.get('on')),
        bo=_bo(raw.get('bo')),
        svg=_svg(raw.get('svg'), chu),
        updated_at=_text(raw.get('updatedAt')) or now,
    )


def decode_legacy(raw: Any, now: str, key: str = '') -> Entry:
    """Decode a record with a free-form ``info`` map.

    The character comes from ``kanji``, then from the ``Hán tự`` info
    field (a string or a mapping with ``kanji``/``text``), then from the
    collection key the record was filed under.

    Raises:
        NormalizationReject: If no character identity can be found.
    """
    if not isinstance(raw, Mapping):
        raise NormalizationReject("not a mapping")
    info = raw.get('info')
    if not isinstance(info, Mapping):
        info = {}

    han_tu = _lookup(info, HAN_TU_KEYS)
    if isinstance(han_tu, Mapping):
        han_tu = han_tu.get('kanji') or han_tu.get('text')
    chu = _text(raw.get('kanji')).strip() or _text(han_tu).strip() or key.strip()
    if not chu:
        raise NormalizationReject("no character in legacy record")

    han_viet = _text(raw.get('hanviet_input')) or _text(_lookup(info, HAN_VIET_KEYS))
    return Entry(
        chu=chu,
        han_viet=han_viet,
        nghia=_text(_lookup(info, NGHIA_KEYS)),
        kun=_readings(_lookup(info, KUN_KEYS)),
        on=_readings(_lookup(info, ON_KEYS)),
        bo=_bo(_lookup(info, BO_KEYS)),
        svg=_svg(raw.get('svg'), chu),
        updated_at=_text(raw.get('updatedAt')) or now,
    )


def iter_collection(raw: Any):
    """Yield (key, record) pairs of a collection in its declared order.

    Raises:
        NormalizationReject: If ``raw`` is not a collection.
    """
    if not isinstance(raw, Mapping) or not isinstance(raw.get('items'), Mapping):
        raise NormalizationReject("not a collection")
    items = raw['items']
    order = raw.get('order')
    if not isinstance(order, list):
        order = list(items.keys())
    for key in order:
        if key in items:
            yield str(key), items[key]


def decode_item(item: Any, now: str, key: str) -> Entry:
    """Decode one collection item: modern shape first, then legacy filed under ``key``.

    Raises:
        NormalizationReject: If neither shape yields a character.
    """
    try:
        return decode_modern(item, now)
    except NormalizationReject:
        return decode_legacy(item, now, key=key)


def decode_collection(raw: Any, now: str) -> Entry:
    """Decode the first record of a collection that has a character.

    Raises:
        NormalizationReject: If no record in the collection decodes.
    """
    for key, item in iter_collection(raw):
        try:
            return decode_item(item, now, key)
        except NormalizationReject:
            continue
    raise NormalizationReject("no usable record in collection")


DECODERS: tuple[tuple[str, Callable[[Any, str], Entry]], ...] = (
    ('modern', decode_modern),
    ('legacy', decode_legacy),
    ('collection', decode_collection),
)


def normalize(raw: Any, *, now: str | None = None) -> Entry | None:
    """Normalize one record of any known shape into an Entry.

    Args:
        raw: Record to normalize. An Entry is accepted and re-normalized
            from its dict form.
        now: Timestamp for records without ``updatedAt``. Defaults to the
            current UTC time.

    Returns:
        The Entry, or None if the record has no character identity.
    """
    if isinstance(raw, Entry):
        raw = raw.to_dict()
    stamp = now or utcnow_iso()
    for name, decoder in DECODERS:
        try:
            return decoder(raw, stamp)
        except NormalizationReject as e:
            logger.debug("%s decode rejected: %s", name, e)
    return None


def normalize_all(raw: Any, *, now: str | None = None) -> list[Entry]:
    """Normalize a bulk source, dropping records that are rejected.

    Args:
        raw: A list of records, or a collection
            (``{"order": [...], "items": {...}}``).
        now: Timestamp for records without ``updatedAt``.

    Returns:
        Entries in source order.
    """
    stamp = now or utcnow_iso()
    entries = []
    dropped = 0

    if isinstance(raw, list):
        for item in raw:
            entry = normalize(item, now=stamp)
            if entry is None:
                dropped += 1
            else:
                entries.append(entry)
    else:
        try:
            pairs = list(iter_collection(raw))
        except NormalizationReject:
            entry = normalize(raw, now=stamp)
            return [entry] if entry else []
        for key, item in pairs:
            try:
                entries.append(decode_item(item, stamp, key))
            except NormalizationReject:
                dropped += 1

    if dropped:
        logger.debug("Dropped %d record(s) without a character", dropped)
    return entries


def commit(entry: Entry, *, now: str | None = None) -> Entry:
    """Re-normalize an edited entry and stamp a fresh ``updatedAt``."""
    stamp = now or utcnow_iso()
    normalized = normalize(entry, now=stamp)
    if normalized is None:
        raise NormalizationReject("edited entry has no character")
    return normalized.with_timestamp(stamp)


def new_entry(chu: str, *, now: str | None = None) -> Entry:
    """Create an empty entry for a character (first character of ``chu``)."""
    ch = (chu or '').strip()[:1]
    stamp = now or utcnow_iso()
    hex_key = codepoint_hex(ch)
    return Entry(
        chu=ch,
        svg=SvgLocator(hex_key, default_asset_path(hex_key), True),
        updated_at=stamp,
    )
