"""Sequential stroke-reveal animation.

The animator reveals strokes one at a time, in extraction order, with a
length-based dash-offset transition. It is an explicit two-state machine
driven by a single scheduler timer and an abort token:

    IDLE --play()--> ANIMATING --last interval elapsed--> IDLE
                         |
                         +--stop()--> IDLE (pending interval still elapses,
                                            then the run ends)

Only timer ticks are cancellation points. stop() never interrupts a stroke
mid-transition; the reveal stays frozen where it was.

Example:
    Drive an animation on a virtual clock::

        from kanji_lib.animation import AnimationTiming, ManualScheduler, StrokeAnimator

        sched = ManualScheduler()
        animator = StrokeAnimator(strokes, sched, AnimationTiming.MODAL)
        animator.play()
        sched.advance(2000)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from ..config import GALLERY_TIMING, MODAL_TIMING
from ..domain.document import StrokePath, VectorDocument
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class AnimatorState(Enum):
    IDLE = 'idle'
    ANIMATING = 'animating'


@dataclass(frozen=True)
class AnimationTiming:
    """Per-stroke transition duration and gap before the next stroke.

    Attributes:
        per_stroke_ms: Duration of one stroke's reveal transition.
        gap_ms: Pause after a stroke's transition before the next starts.
    """
    per_stroke_ms: float = MODAL_TIMING[0]
    gap_ms: float = MODAL_TIMING[1]

    @property
    def interval_ms(self) -> float:
        return self.per_stroke_ms + self.gap_ms

    def total_ms(self, stroke_count: int) -> float:
        """Time from play() until the run returns to IDLE."""
        return stroke_count * self.interval_ms

    @classmethod
    def preset(cls, name: str) -> AnimationTiming:
        """Look up a named preset ('modal' or 'gallery')."""
        try:
            return _PRESETS[name.lower()]
        except KeyError:
            raise ValueError(f"Unknown animation preset: {name!r}") from None


AnimationTiming.MODAL = AnimationTiming(*MODAL_TIMING)
AnimationTiming.GALLERY = AnimationTiming(*GALLERY_TIMING)
_PRESETS = {'modal': AnimationTiming.MODAL, 'gallery': AnimationTiming.GALLERY}


class _AbortToken:
    __slots__ = ('aborted', 'run_id')

    def __init__(self, run_id: int):
        self.aborted = False
        self.run_id = run_id


class StrokeAnimator:
    """Plays strokes back in order, one animation instance at a time.

    Attributes:
        strokes: Stroke handles to reveal, in draw order.
        scheduler: Timer source.
        timing: Transition duration and inter-stroke gap.
        document: Document whose layout is flushed after the reset.
        run_id: Incremented for every started run.
        current_index: Index of the stroke most recently started, or -1.
    """

    def __init__(self, strokes: Sequence[StrokePath], scheduler: Scheduler,
                 timing: AnimationTiming = AnimationTiming.MODAL,
                 document: VectorDocument | None = None,
                 on_complete: Callable[[bool], None] | None = None):
        self.strokes = list(strokes)
        self.scheduler = scheduler
        self.timing = timing
        self.document = document or (self.strokes[0].document if self.strokes else None)
        self.run_id = 0
        self.current_index = -1
        self._state = AnimatorState.IDLE
        self._token: _AbortToken | None = None
        self._next_index = 0
        self._pending: TimerHandle | None = None
        self._complete_listeners: list[Callable[[bool], None]] = []
        self._stroke_listeners: list[Callable[[StrokePath], None]] = []
        if on_complete is not None:
            self._complete_listeners.append(on_complete)

    @property
    def state(self) -> AnimatorState:
        return self._state

    @property
    def is_animating(self) -> bool:
        return self._state is AnimatorState.ANIMATING

    def add_complete_listener(self, listener: Callable[[bool], None]) -> None:
        """Call ``listener(aborted)`` when a run ends."""
        self._complete_listeners.append(listener)

    def add_stroke_listener(self, listener: Callable[[StrokePath], None]) -> None:
        """Call ``listener(stroke)`` whenever a stroke's reveal starts."""
        self._stroke_listeners.append(listener)

    def play(self) -> bool:
        """Start a run.

        Ignored while a run is animating or when there are no strokes.

        Returns:
            True if a new run started.
        """
        if self._state is AnimatorState.ANIMATING:
            logger.debug("play() ignored: already animating")
            return False
        if not self.strokes:
            logger.debug("play() ignored: no strokes")
            return False

        self.run_id += 1
        token = _AbortToken(self.run_id)
        self._token = token
        self._state = AnimatorState.ANIMATING
        self._next_index = 0
        self.current_index = -1

        for stroke in self.strokes:
            stroke.hide()
        if self.document is not None:
            self.document.flush()

        logger.debug("Run %d: animating %d stroke(s)", token.run_id, len(self.strokes))
        self._step(token)
        return True

    def stop(self) -> None:
        """Request the running animation to stop.

        The state is IDLE as soon as this returns. The interval already
        scheduled still elapses; the run ends at that tick without starting
        another stroke.
        """
        if self._token is not None:
            self._token.aborted = True
        self._state = AnimatorState.IDLE

    def dispose(self) -> None:
        """Stop and drop the pending timer (used when the document goes away)."""
        self.stop()
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._token = None

    def progress_at(self, now_ms: float | None = None) -> list[float]:
        """Visible fraction of each stroke at ``now_ms`` (default: scheduler time)."""
        when = self.scheduler.now_ms() if now_ms is None else now_ms
        return [stroke.visible_fraction(when) for stroke in self.strokes]

    def _step(self, token: _AbortToken) -> None:
        if token.aborted:
            self._finish(token, aborted=True)
            return
        if self._next_index >= len(self.strokes):
            self._finish(token, aborted=False)
            return

        stroke = self.strokes[self._next_index]
        if not stroke.valid:
            logger.debug("Run %d: document released, ending", token.run_id)
            self._finish(token, aborted=True)
            return

        stroke.begin_reveal(self.timing.per_stroke_ms, self.scheduler.now_ms())
        self.current_index = self._next_index
        self._next_index += 1
        for listener in list(self._stroke_listeners):
            listener(stroke)
        self._pending = self.scheduler.call_later(
            self.timing.interval_ms, lambda: self._step(token))

    def _finish(self, token: _AbortToken, aborted: bool) -> None:
        if token is not self._token:
            # A newer run owns the animator now
            return
        self._pending = None
        self._state = AnimatorState.IDLE
        logger.debug("Run %d %s", token.run_id, 'aborted' if aborted else 'completed')
        for listener in list(self._complete_listeners):
            listener(aborted)


def create_animator(strokes: Sequence[StrokePath], scheduler: Scheduler | None = None,
                    timing: AnimationTiming | str = AnimationTiming.MODAL,
                    **kwargs) -> StrokeAnimator:
    """Build a StrokeAnimator, defaulting to the running asyncio loop.

    Args:
        strokes: Stroke handles from extract_strokes().
        scheduler: Timer source. Defaults to an AsyncioScheduler.
        timing: AnimationTiming or a preset name ('modal', 'gallery').
        **kwargs: Passed to StrokeAnimator (document, on_complete).
    """
    if isinstance(timing, str):
        timing = AnimationTiming.preset(timing)
    return StrokeAnimator(strokes, scheduler or AsyncioScheduler(), timing, **kwargs)
