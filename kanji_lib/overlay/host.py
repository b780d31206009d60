"""Host box and window abstractions for the freehand overlay.

The overlay does not know about any UI toolkit. It talks to its host box
through the HostBox protocol (on-screen size, device pixel ratio, resize
observation, pointer events) and to the window through WindowEvents
(window-level resize and pointer release).

StaticHost and EventWindow are plain in-memory implementations used for
headless rendering, the HTTP viewer and the tests. A toolkit adapter only
has to forward its own events to them.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Protocol

POINTER_EVENTS = ('pointerdown', 'pointermove', 'pointerup', 'pointercancel')


@dataclass(frozen=True)
class Rect:
    """On-screen box size in CSS pixels."""
    width: float
    height: float


@dataclass(frozen=True)
class PointerEvent:
    """Pointer position relative to the host box, in CSS pixels."""
    kind: str
    x: float = 0.0
    y: float = 0.0


PointerListener = Callable[[PointerEvent], None]


class HostBox(Protocol):
    device_pixel_ratio: float

    def get_rect(self) -> Rect: ...

    def observe_resize(self, callback: Callable[[], None]) -> None: ...

    def unobserve_resize(self, callback: Callable[[], None]) -> None: ...

    def add_pointer_listener(self, kind: str, callback: PointerListener) -> None: ...

    def remove_pointer_listener(self, kind: str, callback: PointerListener) -> None: ...


class WindowEvents(Protocol):
    def add_listener(self, event: str, callback: Callable) -> None: ...

    def remove_listener(self, event: str, callback: Callable) -> None: ...


class EventWindow:
    """In-memory window event source ('resize', 'pointerup', ...)."""

    def __init__(self):
        self._listeners: dict[str, list[Callable]] = defaultdict(list)

    def add_listener(self, event: str, callback: Callable) -> None:
        self._listeners[event].append(callback)

    def remove_listener(self, event: str, callback: Callable) -> None:
        if callback in self._listeners.get(event, ()):
            self._listeners[event].remove(callback)

    def dispatch(self, event: str, *args) -> None:
        for callback in list(self._listeners.get(event, ())):
            callback(*args)

    def listener_count(self) -> int:
        return sum(len(v) for v in self._listeners.values())


class StaticHost:
    """In-memory host box with a settable size and pixel ratio.

    Attributes:
        width: Box width in CSS pixels.
        height: Box height in CSS pixels.
        device_pixel_ratio: Physical pixels per CSS pixel.
    """

    def __init__(self, width: float = 327, height: float = 327,
                 device_pixel_ratio: float = 1.0):
        self.width = width
        self.height = height
        self.device_pixel_ratio = device_pixel_ratio
        self._resize_observers: list[Callable[[], None]] = []
        self._pointer_listeners: dict[str, list[PointerListener]] = defaultdict(list)

    def get_rect(self) -> Rect:
        return Rect(self.width, self.height)

    def observe_resize(self, callback: Callable[[], None]) -> None:
        self._resize_observers.append(callback)

    def unobserve_resize(self, callback: Callable[[], None]) -> None:
        if callback in self._resize_observers:
            self._resize_observers.remove(callback)

    def add_pointer_listener(self, kind: str, callback: PointerListener) -> None:
        self._pointer_listeners[kind].append(callback)

    def remove_pointer_listener(self, kind: str, callback: PointerListener) -> None:
        if callback in self._pointer_listeners.get(kind, ()):
            self._pointer_listeners[kind].remove(callback)

    def resize(self, width: float, height: float,
               device_pixel_ratio: float | None = None) -> None:
        """Change the box size and notify resize observers."""
        self.width = width
        self.height = height
        if device_pixel_ratio is not None:
            self.device_pixel_ratio = device_pixel_ratio
        for callback in list(self._resize_observers):
            callback()

    def dispatch_pointer(self, kind: str, x: float = 0.0, y: float = 0.0) -> None:
        event = PointerEvent(kind, x, y)
        for callback in list(self._pointer_listeners.get(kind, ())):
            callback(event)

    def listener_count(self) -> int:
        """Registered resize observers plus pointer listeners."""
        return len(self._resize_observers) + sum(
            len(v) for v in self._pointer_listeners.values())
