"""Freehand tracing overlay.

Exports:
    create_overlay: Create and attach an overlay to a host box.
    FreehandOverlay: The overlay handle (also a context manager).
    InkStyle: Ink line width and colour.
    StaticHost, EventWindow: In-memory host box and window event source.
"""

from .freehand import FreehandOverlay, InkStyle, create_overlay
from .host import EventWindow, HostBox, PointerEvent, Rect, StaticHost, WindowEvents

# The handle returned by create_overlay()
OverlayHandle = FreehandOverlay

__all__ = [
    'create_overlay', 'FreehandOverlay', 'OverlayHandle', 'InkStyle',
    'HostBox', 'WindowEvents', 'Rect', 'PointerEvent', 'StaticHost', 'EventWindow',
]
