"""Sanitized vector documents and stroke handles.

A VectorDocument wraps the parsed SVG tree of one character. StrokePath
handles point into that tree: they carry the measured length of one stroke
and its presentation state (dash array, dash offset, transition), which is
mirrored into the element's inline style the same way a browser would
apply it.

Handles are only valid while their document is current. Once the document
is released (the viewer switched characters) every handle reports
``valid == False`` and must not be reused.
"""

from __future__ import annotations

import itertools
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Callable

import numpy as np

logger = logging.getLogger(__name__)

SVG_NS = 'http://www.w3.org/2000/svg'
KVG_NS = 'http://kanjivg.tagaini.net'
KANJIVG_VIEWBOX = (0.0, 0.0, 109.0, 109.0)

ET.register_namespace('', SVG_NS)
ET.register_namespace('kvg', KVG_NS)

_generations = itertools.count(1)


def local_name(tag: str) -> str:
    """Strip the '{namespace}' prefix from an ElementTree tag."""
    if not isinstance(tag, str):
        return ''
    return tag.rsplit('}', 1)[-1]


def parse_style(style: str | None) -> dict[str, str]:
    """Parse an inline 'a: b; c: d' style declaration into an ordered dict."""
    props: dict[str, str] = {}
    for decl in (style or '').split(';'):
        if ':' not in decl:
            continue
        name, value = decl.split(':', 1)
        name = name.strip().lower()
        if name:
            props[name] = value.strip()
    return props


def format_style(props: dict[str, str]) -> str:
    return ';'.join(f'{k}:{v}' for k, v in props.items())


class VectorDocument:
    """A sanitized SVG document for one character.

    Attributes:
        root: Root <svg> element, or None for the degraded empty document.
        generation: Unique id; handles compare against it to detect reuse.
        layout_flushes: Number of times flush() has been called.
    """

    def __init__(self, root: ET.Element | None):
        self.root = root
        self.generation = next(_generations)
        self.layout_flushes = 0
        self._released = False
        self._flush_listeners: list[Callable[[VectorDocument], None]] = []

    @classmethod
    def empty(cls) -> VectorDocument:
        """The document used when markup could not be parsed."""
        return cls(None)

    @property
    def is_empty(self) -> bool:
        return self.root is None

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Invalidate this document and every StrokePath pointing into it."""
        self._released = True
        self._flush_listeners.clear()

    @property
    def view_box(self) -> tuple[float, float, float, float]:
        """The (min_x, min_y, width, height) of the viewBox, KanjiVG's 109 box by default."""
        if self.root is None:
            return KANJIVG_VIEWBOX
        raw = self.root.get('viewBox', '')
        try:
            parts = [float(v) for v in raw.replace(',', ' ').split()]
        except ValueError:
            return KANJIVG_VIEWBOX
        if len(parts) != 4 or parts[2] <= 0 or parts[3] <= 0:
            return KANJIVG_VIEWBOX
        return tuple(parts)

    def iter_paths(self):
        """Yield every <path> element in document order, namespaced or not."""
        if self.root is None:
            return
        for elem in self.root.iter():
            if local_name(elem.tag) == 'path':
                yield elem

    def add_flush_listener(self, listener: Callable[[VectorDocument], None]) -> None:
        self._flush_listeners.append(listener)

    def remove_flush_listener(self, listener: Callable[[VectorDocument], None]) -> None:
        if listener in self._flush_listeners:
            self._flush_listeners.remove(listener)

    def flush(self) -> None:
        """Force a layout flush so pending style resets become observable."""
        self.layout_flushes += 1
        for listener in list(self._flush_listeners):
            listener(self)

    def serialize(self) -> str:
        """Serialize the current tree (including stroke presentation state)."""
        if self.root is None:
            return ''
        return ET.tostring(self.root, encoding='unicode')


@dataclass(eq=False)
class StrokePath:
    """Handle to one stroke of a loaded VectorDocument.

    Attributes:
        element: The <path> element in the document tree.
        index: Draw order, equal to the position in the extracted list.
        length: Measured path length in user units.
        d: Raw path data.
        document: The document the element belongs to.
        path: Parsed svgpathtools Path used for sampling, or None.
    """
    element: ET.Element
    index: int
    length: float
    d: str
    document: VectorDocument
    path: Any = None
    dash_array: float | None = None
    dash_offset: float | None = None
    transition_ms: float | None = None
    transition_start_ms: float | None = None
    _offset_from: float = field(default=0.0, repr=False)
    _generation: int = field(default=0, repr=False)

    def __post_init__(self):
        self._generation = self.document.generation

    @property
    def valid(self) -> bool:
        """False once the owning document has been released."""
        return (not self.document.released
                and self.document.generation == self._generation)

    def hide(self) -> None:
        """Reset to fully hidden: dash length and offset equal the path length."""
        self.transition_ms = None
        self.transition_start_ms = None
        self.dash_array = self.length
        self.dash_offset = self.length
        self._offset_from = self.length
        self._apply_style(transition='none', opacity='1')

    def begin_reveal(self, duration_ms: float, now_ms: float) -> None:
        """Start a linear transition of the dash offset to zero."""
        self._offset_from = self.length if self.dash_offset is None else self.dash_offset
        self.transition_ms = float(duration_ms)
        self.transition_start_ms = float(now_ms)
        self.dash_offset = 0.0
        self._apply_style(transition=f'stroke-dashoffset {int(duration_ms)}ms linear')

    def visible_fraction(self, now_ms: float | None = None) -> float:
        """Fraction of the stroke drawn at ``now_ms`` (0 hidden, 1 complete)."""
        if self.dash_offset is None:
            return 1.0
        if self.length <= 0:
            return 0.0 if self.dash_offset else 1.0
        offset = self.dash_offset
        if (self.transition_ms and self.transition_start_ms is not None
                and now_ms is not None):
            t = (now_ms - self.transition_start_ms) / self.transition_ms
            t = min(max(t, 0.0), 1.0)
            offset = self._offset_from + (self.dash_offset - self._offset_from) * t
        return float(np.clip(1.0 - offset / self.length, 0.0, 1.0))

    def sample(self, fraction: float = 1.0, samples: int = 64) -> list[tuple[float, float]]:
        """Points along the first ``fraction`` of the stroke, by arc length."""
        if self.path is None or self.length <= 0 or fraction <= 0:
            return []
        s_max = self.length * min(fraction, 1.0)
        points = []
        for s in np.linspace(0.0, s_max, max(2, samples)):
            t = self.path.ilength(s) if s < self.length else 1.0
            pt = self.path.point(t)
            points.append((float(pt.real), float(pt.imag)))
        return points

    def _apply_style(self, **overrides: str) -> None:
        props = parse_style(self.element.get('style'))
        props['stroke-dasharray'] = _fmt(self.dash_array)
        props['stroke-dashoffset'] = _fmt(self.dash_offset)
        for name, value in overrides.items():
            props[name] = value
        self.element.set('style', format_style(props))


def _fmt(value: float | None) -> str:
    if value is None:
        return 'none'
    return f'{value:.3f}'.rstrip('0').rstrip('.') or '0'
