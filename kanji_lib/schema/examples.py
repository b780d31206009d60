"""Usage-example parsing and collection.

Examples reach us in several shapes: structured mappings
(``{tu, hiragana, nghia}`` or ``{word, reading, meaning}``) and free-text
strings such as ``"日本（にほん）: Japan"``. This module turns all of them
into Example values and collects them from every field a record may carry
them in, suppressing duplicates.

Typical usage:
    from kanji_lib.schema.examples import parse_example, collect_examples

    parse_example('日本（にほん）: Japan')
    # Example(tu='日本', hiragana='にほん', nghia='Japan')

    for ex in collect_examples(entry):
        print(ex.tu, ex.hiragana, ex.nghia)
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from ..domain.entry import Entry, Example

# Word, bracketed reading, colon, gloss. ASCII and full-width forms.
_WORD_READING_GLOSS = re.compile(r'^(.+?)[（(]([^）)]+)[）)]\s*[:：]\s*(.+)$')
_WORD_READING = re.compile(r'^(.+?)[（(]([^）)]+)[）)]$')
_WORD_GLOSS = re.compile(r'^(.+?)\s*[:：]\s*(.+)$')


def parse_example(text: str) -> Example | None:
    """Parse a free-text example string.

    Patterns are tried in order and the first match wins:
    word(reading): gloss, word(reading), word: gloss. Anything else is
    taken as a bare word.

    Args:
        text: The example string.

    Returns:
        The parsed Example, or None for a blank string.
    """
    s = (text or '').strip()
    if not s:
        return None

    m = _WORD_READING_GLOSS.match(s)
    if m:
        return Example(m.group(1).strip(), m.group(2).strip(), m.group(3).strip())
    m = _WORD_READING.match(s)
    if m:
        return Example(m.group(1).strip(), m.group(2).strip(), '')
    m = _WORD_GLOSS.match(s)
    if m:
        return Example(m.group(1).strip(), '', m.group(2).strip())
    return Example(s, '', '')


def _text(value: Any) -> str:
    if value is None:
        return ''
    return str(value).strip()


def coerce_example(value: Any) -> Example | None:
    """Turn a string, mapping or Example into an Example.

    Mappings may use ``tu/hiragana/nghia`` or ``word/reading/meaning``.
    Returns None when there is no headword.
    """
    if isinstance(value, Example):
        return value if value.tu else None
    if isinstance(value, str):
        return parse_example(value)
    if isinstance(value, Mapping):
        tu = _text(value.get('tu', value.get('word')))
        if not tu:
            return None
        return Example(
            tu,
            _text(value.get('hiragana', value.get('reading'))),
            _text(value.get('nghia', value.get('meaning'))),
        )
    return None


class ExampleSet:
    """Ordered collection of unique examples.

    Uniqueness is structural equality on (tu, hiragana, nghia); the first
    occurrence wins and insertion order is preserved.
    """

    def __init__(self, examples: Iterable[Any] = ()):
        self._items: dict[tuple[str, str, str], Example] = {}
        for ex in examples:
            self.add(ex)

    def add(self, value: Any) -> bool:
        """Add an example in any accepted shape. Returns True if it was new."""
        ex = coerce_example(value)
        if ex is None or ex.key() in self._items:
            return False
        self._items[ex.key()] = ex
        return True

    def extend(self, values: Any) -> None:
        if isinstance(values, (list, tuple)):
            for value in values:
                self.add(value)

    def __iter__(self):
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, value: Any) -> bool:
        ex = coerce_example(value)
        return ex is not None and ex.key() in self._items

    def to_list(self) -> list[Example]:
        return list(self._items.values())


def _walk_readings(out: ExampleSet, readings: Any) -> None:
    if not isinstance(readings, (list, tuple)):
        return
    for reading in readings:
        if isinstance(reading, Mapping) and isinstance(reading.get('viDu'), list):
            out.extend(reading['viDu'])
        elif isinstance(reading, Mapping):
            # Examples embedded directly in a reading list
            out.add(reading)


def collect_examples(record: Entry | Mapping[str, Any] | None) -> list[Example]:
    """Collect every example a record carries, without duplicates.

    Fields are walked in this order: ``kun[].viDu``, ``on[].viDu``,
    ``viDuKun``, ``viDuOn``, ``viDu``, then ``examples`` (a list, or a
    mapping with ``kun``/``on`` lists).

    Args:
        record: A normalized Entry or a raw record mapping.

    Returns:
        Examples in first-seen order.
    """
    out = ExampleSet()
    if record is None:
        return []

    if isinstance(record, Entry):
        for reading in record.readings:
            out.extend(list(reading.examples))
        return out.to_list()

    _walk_readings(out, record.get('kun'))
    _walk_readings(out, record.get('on'))
    out.extend(record.get('viDuKun'))
    out.extend(record.get('viDuOn'))
    out.extend(record.get('viDu'))

    examples = record.get('examples')
    if isinstance(examples, list):
        out.extend(examples)
    elif isinstance(examples, Mapping):
        out.extend(examples.get('kun'))
        out.extend(examples.get('on'))
    return out.to_list()
