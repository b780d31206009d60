"""Freehand tracing overlay.

An independent raster surface laid over the stroke-order graphic so a
learner can trace the character. The surface is a Pillow RGBA image whose
pixel size follows the host box's on-screen size times the device pixel
ratio, keeping lines crisp on high-density displays.

Input is intentionally raw: a press starts a path, every move while
pressed draws a straight segment from the previous sample, and a release
ends the path. Nothing is smoothed or recognized.

The overlay never raises to its caller. Resize and draw failures are
logged and swallowed so the overlay stays usable.

Example:
    Scoped use with guaranteed release of every listener::

        from kanji_lib.overlay import StaticHost, create_overlay

        host = StaticHost(327, 327, device_pixel_ratio=2.0)
        with create_overlay(host) as overlay:
            host.dispatch_pointer('pointerdown', 10, 10)
            host.dispatch_pointer('pointermove', 60, 60)
            host.dispatch_pointer('pointerup')
            png = overlay.to_png()
"""

from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass
from functools import wraps
from typing import Callable

from PIL import Image, ImageDraw

from ..config import INK_COLOR, INK_LINE_WIDTH
from .host import EventWindow, HostBox, PointerEvent, WindowEvents

logger = logging.getLogger(__name__)

_CLEAR = (0, 0, 0, 0)


@dataclass(frozen=True)
class InkStyle:
    """Line style of the freehand ink, in CSS pixels."""
    line_width: float = INK_LINE_WIDTH
    color: tuple[int, int, int, int] = INK_COLOR


def _never_raise(method):
    """Log and swallow any exception raised by an overlay operation."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except Exception:
            logger.exception("Overlay %s failed", method.__name__)
            return None
    return wrapper


class FreehandOverlay:
    """Raster drawing surface owned by one host box.

    Attributes:
        host: The host box the surface is aligned to.
        window: Window event source for window-level resize and release.
        style: Ink line style.
        surface: Current RGBA image, or None before attach().
        dpr: Device pixel ratio the surface was sized with.
        segment_count: Straight segments drawn since the last clear.
    """

    def __init__(self, host: HostBox, window: WindowEvents | None = None,
                 style: InkStyle = InkStyle(), enabled: bool = True):
        self.host = host
        self.window = window if window is not None else EventWindow()
        self.style = style
        self.surface: Image.Image | None = None
        self.dpr = 1.0
        self.segment_count = 0
        self._draw: ImageDraw.ImageDraw | None = None
        self._enabled = enabled
        self._drawing = False
        self._last: tuple[float, float] | None = None
        self._attached = False
        self._disposed = False
        self._registrations: list[Callable[[], None]] = []
        self._pointer_handlers = {
            'pointerdown': self._on_pointer_down,
            'pointermove': self._on_pointer_move,
            'pointerup': self._on_pointer_up,
            'pointercancel': self._on_pointer_up,
        }

    # --- lifecycle ---

    @_never_raise
    def attach(self) -> FreehandOverlay:
        """Size the surface and register resize observers and pointer listeners."""
        if self._attached or self._disposed:
            return self
        self.resize()
        self.host.observe_resize(self._on_host_resize)
        self._registrations.append(lambda: self.host.unobserve_resize(self._on_host_resize))
        for event, handler in (('resize', self._on_window_resize),
                               ('pointerup', self._on_window_pointer_up)):
            self.window.add_listener(event, handler)
            self._registrations.append(
                lambda e=event, h=handler: self.window.remove_listener(e, h))
        for kind, handler in self._pointer_handlers.items():
            self.host.add_pointer_listener(kind, handler)
            self._registrations.append(
                lambda k=kind, h=handler: self.host.remove_pointer_listener(k, h))
        self._attached = True
        return self

    @_never_raise
    def dispose(self) -> None:
        """Unregister every observer and listener. Safe to call twice."""
        if self._disposed:
            return
        self._disposed = True
        self._attached = False
        self._drawing = False
        self._last = None
        # Also covers an attach() that failed partway
        while self._registrations:
            unregister = self._registrations.pop()
            try:
                unregister()
            except Exception:
                logger.exception("Overlay listener removal failed")

    def __enter__(self) -> FreehandOverlay:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def disposed(self) -> bool:
        return self._disposed

    # --- enable / disable ---

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False
        self._drawing = False
        self._last = None

    # --- surface ---

    @property
    def size(self) -> tuple[int, int]:
        """Pixel size of the surface, (0, 0) before attach()."""
        return self.surface.size if self.surface is not None else (0, 0)

    @_never_raise
    def resize(self) -> None:
        """Recompute the surface size from the host box.

        Like a canvas whose width is reassigned, the surface starts blank.
        """
        rect = self.host.get_rect()
        dpr = float(getattr(self.host, 'device_pixel_ratio', 1.0) or 1.0)
        width = max(1, math.floor(rect.width * dpr))
        height = max(1, math.floor(rect.height * dpr))
        if self.surface is not None and self.surface.size == (width, height) and dpr == self.dpr:
            return
        self.dpr = dpr
        self.surface = Image.new('RGBA', (width, height), _CLEAR)
        self._draw = ImageDraw.Draw(self.surface)
        self.segment_count = 0
        logger.debug("Overlay surface %dx%d (dpr %.2f)", width, height, dpr)

    @_never_raise
    def clear(self) -> None:
        """Wipe all ink. The vector graphic underneath is untouched."""
        if self.surface is None:
            return
        self._draw.rectangle((0, 0, self.surface.width, self.surface.height), fill=_CLEAR)
        self.segment_count = 0

    @property
    def has_ink(self) -> bool:
        if self.surface is None:
            return False
        return self.surface.getchannel('A').getbbox() is not None

    def to_png(self) -> bytes:
        """PNG bytes of the surface, b'' before attach()."""
        if self.surface is None:
            return b''
        buf = io.BytesIO()
        self.surface.save(buf, format='PNG')
        return buf.getvalue()

    # --- input ---

    @_never_raise
    def pointer_down(self, x: float, y: float) -> None:
        if not self._enabled or self._disposed:
            return
        self._drawing = True
        self._last = (x, y)

    @_never_raise
    def pointer_move(self, x: float, y: float) -> None:
        if not self._enabled or not self._drawing or self._draw is None:
            return
        if self._last is None:
            self._last = (x, y)
        self._segment(self._last, (x, y))
        self._last = (x, y)

    @_never_raise
    def pointer_up(self) -> None:
        self._drawing = False
        self._last = None

    def _segment(self, start: tuple[float, float], end: tuple[float, float]) -> None:
        d = self.dpr
        width = max(1, int(round(self.style.line_width * d)))
        p0 = (start[0] * d, start[1] * d)
        p1 = (end[0] * d, end[1] * d)
        self._draw.line([p0, p1], fill=self.style.color, width=width)
        # Round caps and joins
        r = width / 2.0
        for x, y in (p0, p1):
            self._draw.ellipse((x - r, y - r, x + r, y + r), fill=self.style.color)
        self.segment_count += 1

    # --- listeners ---

    def _on_host_resize(self) -> None:
        self.resize()

    def _on_window_resize(self, *args) -> None:
        self.resize()

    def _on_window_pointer_up(self, *args) -> None:
        self.pointer_up()

    def _on_pointer_down(self, event: PointerEvent) -> None:
        self.pointer_down(event.x, event.y)

    def _on_pointer_move(self, event: PointerEvent) -> None:
        self.pointer_move(event.x, event.y)

    def _on_pointer_up(self, event: PointerEvent) -> None:
        self.pointer_up()


def create_overlay(host: HostBox, window: WindowEvents | None = None,
                   style: InkStyle = InkStyle(), enabled: bool = True) -> FreehandOverlay:
    """Create an overlay and attach it to ``host``.

    Returns:
        The attached overlay. Use it as a context manager, or call
        dispose() when the host goes away.
    """
    overlay = FreehandOverlay(host, window, style, enabled)
    overlay.attach()
    return overlay
