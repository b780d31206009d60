"""Viewer session: the caller that composes loader, animator and overlay.

A session shows one entry at a time. Opening an entry is the only
suspension point; every other operation is synchronous. The session owns
the policies the individual components leave to their caller:

    - stale loads are discarded by generation token, so a slow fetch for
      an entry the user already navigated away from never lands;
    - playing the animation disables drawing and clears the ink first;
    - turning drawing on stops the animation first.

Example:
    Open an entry and play it on the running event loop::

        session = ViewerSession(AssetLoader('public'), host=StaticHost())
        if await session.open_entry(entry):
            session.play()
        else:
            print(session.error_message)
"""

from __future__ import annotations

import asyncio
import logging

from ..animation.animator import AnimationTiming, StrokeAnimator
from ..animation.scheduler import AsyncioScheduler, Scheduler
from ..assets.extractor import extract_guides, extract_strokes
from ..assets.loader import AssetLoader
from ..domain.document import StrokePath, VectorDocument
from ..domain.entry import Entry
from ..errors import KanjiError
from ..overlay.freehand import FreehandOverlay, create_overlay
from ..overlay.host import HostBox, WindowEvents

logger = logging.getLogger(__name__)


class ViewerSession:
    """Currently shown entry with its document, strokes, animator and overlay.

    Attributes:
        loader: Asset loader used by open_entry().
        scheduler: Timer source for the animator.
        timing: Animation timing preset.
        host: Host box for the freehand overlay, or None for no overlay.
        window: Window event source passed to the overlay.
        entry: The entry most recently requested.
        document: Loaded vector document, or None.
        strokes: Stroke handles of ``document``.
        guides: Guide-line handles of ``document``.
        animator: Animator over ``strokes``, or None.
        overlay: Freehand overlay, or None.
        error: Exception of the last failed load, or None.
        generation: Incremented by every open_entry() and close().
    """

    def __init__(self, loader: AssetLoader, scheduler: Scheduler | None = None,
                 timing: AnimationTiming = AnimationTiming.MODAL,
                 host: HostBox | None = None, window: WindowEvents | None = None):
        self.loader = loader
        self.scheduler = scheduler or AsyncioScheduler()
        self.timing = timing
        self.host = host
        self.window = window
        self.entry: Entry | None = None
        self.document: VectorDocument | None = None
        self.strokes: list[StrokePath] = []
        self.guides: list[StrokePath] = []
        self.animator: StrokeAnimator | None = None
        self.overlay: FreehandOverlay | None = None
        self.error: Exception | None = None
        self.loading = False
        self.generation = 0

    @property
    def error_message(self) -> str:
        return str(self.error) if self.error is not None else ''

    @property
    def drawing(self) -> bool:
        return self.overlay is not None and self.overlay.enabled

    @property
    def animating(self) -> bool:
        return self.animator is not None and self.animator.is_animating

    def _teardown(self) -> None:
        if self.animator is not None:
            self.animator.dispose()
            self.animator = None
        if self.overlay is not None:
            self.overlay.dispose()
            self.overlay = None
        if self.document is not None:
            self.document.release()
            self.document = None
        self.strokes = []
        self.guides = []

    async def open_entry(self, entry: Entry) -> bool:
        """Show ``entry``, replacing whatever was shown before.

        Returns:
            True if the entry's document is now shown. False if the load
            failed (see ``error``) or was superseded by a newer call.
        """
        self.generation += 1
        generation = self.generation
        self._teardown()
        self.entry = entry
        self.error = None
        self.loading = True

        try:
            document = await asyncio.to_thread(self.loader.load_asset, entry)
        except KanjiError as e:
            if generation != self.generation:
                return False
            logger.warning("Could not load %s: %s", entry.chu, e)
            self.error = e
            self.loading = False
            return False

        if generation != self.generation:
            logger.debug("Discarding stale load of %s", entry.chu)
            document.release()
            return False

        self.loading = False
        self.document = document
        self.strokes = extract_strokes(document)
        self.guides = extract_guides(document)
        self.animator = StrokeAnimator(self.strokes, self.scheduler, self.timing,
                                       document=document)
        if self.host is not None:
            self.overlay = create_overlay(self.host, self.window, enabled=False)
        logger.debug("Opened %s with %d stroke(s)", entry.chu, len(self.strokes))
        return True

    def play(self) -> bool:
        """Turn drawing off, wipe the ink and start the reveal."""
        if self.overlay is not None:
            self.overlay.disable()
            self.overlay.clear()
        if self.animator is None:
            return False
        return self.animator.play()

    def stop(self) -> None:
        if self.animator is not None:
            self.animator.stop()

    def toggle_draw(self) -> bool:
        """Flip drawing mode, stopping the animation when turning it on.

        Returns:
            Whether drawing is enabled afterwards.
        """
        if self.overlay is None:
            return False
        if self.overlay.enabled:
            self.overlay.disable()
        else:
            self.stop()
            self.overlay.enable()
        return self.overlay.enabled

    def clear_ink(self) -> None:
        if self.overlay is not None:
            self.overlay.clear()

    def close(self) -> None:
        """Release the document, the animator and the overlay."""
        self.generation += 1
        self._teardown()
        self.entry = None
        self.loading = False

    async def __aenter__(self) -> ViewerSession:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
