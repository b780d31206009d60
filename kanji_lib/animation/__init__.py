"""Stroke-reveal animation.

Exports:
    StrokeAnimator: Two-state animator (IDLE/ANIMATING) with cooperative stop.
    AnimatorState: The animator states.
    AnimationTiming: Per-stroke duration and gap, with MODAL and GALLERY presets.
    create_animator: Factory defaulting to the running asyncio loop.
    ManualScheduler, AsyncioScheduler: Timer sources.
    render_frame, render_reveal, frame_at: Raster frames of a reveal.
"""

from .animator import AnimationTiming, AnimatorState, StrokeAnimator, create_animator
from .frames import frame_at, render_frame, render_reveal, to_png
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler

__all__ = [
    'StrokeAnimator', 'AnimatorState', 'AnimationTiming', 'create_animator',
    'Scheduler', 'ManualScheduler', 'AsyncioScheduler',
    'render_frame', 'render_reveal', 'frame_at', 'to_png',
]
