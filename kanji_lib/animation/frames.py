"""Raster frames of a stroke reveal.

Renders the current presentation state of a set of strokes (how much of
each stroke's dash offset has been consumed) into a Pillow image, so an
animation can be exported frame by frame or served as PNG snapshots.

Typical usage:
    from kanji_lib.animation.frames import render_frame, render_reveal

    img = render_frame(strokes, now_ms=1200)
    for t, frame in render_reveal(strokes, fps=12):
        frame.save(f'frame_{int(t):05d}.png')
"""

from __future__ import annotations

import io
import logging
from typing import Iterator, Sequence

from PIL import Image, ImageDraw

from ..config import (
    FRAME_BACKGROUND, FRAME_GUIDE_COLOR, FRAME_SIZE, FRAME_STROKE_COLOR,
    FRAME_STROKE_WIDTH,
)
from ..domain.document import KANJIVG_VIEWBOX, StrokePath
from .animator import AnimationTiming, StrokeAnimator
from .scheduler import ManualScheduler

logger = logging.getLogger(__name__)

SAMPLES_PER_STROKE = 96


def _draw_polyline(draw: ImageDraw.ImageDraw, pts: list[tuple[float, float]],
                   width: int, color) -> None:
    if len(pts) < 2:
        return
    draw.line(pts, fill=color, width=width, joint='curve')
    r = width / 2.0
    for x, y in (pts[0], pts[-1]):
        draw.ellipse((x - r, y - r, x + r, y + r), fill=color)


def render_frame(strokes: Sequence[StrokePath], now_ms: float | None = None,
                 size: int = FRAME_SIZE, guides: Sequence[StrokePath] = (),
                 background=FRAME_BACKGROUND, stroke_color=FRAME_STROKE_COLOR,
                 guide_color=FRAME_GUIDE_COLOR,
                 stroke_width: int = FRAME_STROKE_WIDTH) -> Image.Image:
    """Render the visible part of each stroke at ``now_ms``.

    Strokes that have never been hidden are drawn in full, matching how a
    freshly loaded graphic looks before any animation.

    Args:
        strokes: Stroke handles of one document.
        now_ms: Time on the animator's clock; None draws final dash state.
        size: Output width and height in pixels.
        guides: Guide-line paths drawn underneath, in full.
        background: RGBA background colour.
        stroke_color: RGBA stroke colour.
        guide_color: RGBA guide-line colour.
        stroke_width: Stroke width in viewBox units.

    Returns:
        RGBA image of ``size`` x ``size``.
    """
    img = Image.new('RGBA', (size, size), background)
    draw = ImageDraw.Draw(img)

    doc = strokes[0].document if strokes else (guides[0].document if guides else None)
    min_x, min_y, vb_w, vb_h = doc.view_box if doc is not None else KANJIVG_VIEWBOX
    scale = size / max(vb_w, vb_h)
    width = max(1, int(round(stroke_width * scale)))

    def to_px(pts):
        return [((x - min_x) * scale, (y - min_y) * scale) for x, y in pts]

    for guide in guides:
        _draw_polyline(draw, to_px(guide.sample(1.0, SAMPLES_PER_STROKE)),
                       max(1, width // 3), guide_color)

    for stroke in strokes:
        fraction = stroke.visible_fraction(now_ms)
        if fraction <= 0:
            continue
        samples = max(2, int(SAMPLES_PER_STROKE * fraction))
        _draw_polyline(draw, to_px(stroke.sample(fraction, samples)), width, stroke_color)

    return img


def render_reveal(strokes: Sequence[StrokePath],
                  timing: AnimationTiming = AnimationTiming.MODAL,
                  fps: int = 12, size: int = FRAME_SIZE,
                  guides: Sequence[StrokePath] = ()) -> Iterator[tuple[float, Image.Image]]:
    """Play a full reveal on a virtual clock and yield (time_ms, frame) pairs.

    The strokes' presentation state is left as the animation ends: fully
    revealed.
    """
    if not strokes:
        return
    scheduler = ManualScheduler()
    animator = StrokeAnimator(strokes, scheduler, timing)
    animator.play()
    frame_ms = 1000.0 / max(fps, 1)
    total = timing.total_ms(len(strokes))
    t = 0.0
    while True:
        scheduler.advance_to(t)
        yield t, render_frame(strokes, t, size=size, guides=guides)
        if t >= total:
            break
        t = min(t + frame_ms, total)
    logger.debug("Rendered reveal of %d stroke(s) over %.0f ms", len(strokes), total)


def frame_at(strokes: Sequence[StrokePath], at_ms: float,
             timing: AnimationTiming = AnimationTiming.MODAL,
             size: int = FRAME_SIZE, guides: Sequence[StrokePath] = ()) -> Image.Image:
    """Snapshot of a reveal ``at_ms`` milliseconds after play()."""
    scheduler = ManualScheduler()
    animator = StrokeAnimator(strokes, scheduler, timing)
    animator.play()
    scheduler.advance_to(max(at_ms, 0.0))
    return render_frame(strokes, scheduler.now_ms(), size=size, guides=guides)


def to_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return buf.getvalue()
