"""Kanji stroke-order viewer core.

Normalizes heterogeneous character records into one canonical entry
shape, loads and sanitizes per-character KanjiVG stroke-order graphics,
replays strokes sequentially, and lets a learner trace the character on a
freehand overlay.

The package is organized into the following modules:
    domain: Entry records and the parsed vector document with its stroke
        handles.
    schema: Record normalization (modern, legacy and collection shapes)
        and example collection.
    assets: Asset path resolution, fetching, sanitizing and stroke
        extraction.
    animation: The stroke animator, its schedulers and raster frames.
    overlay: The freehand tracing overlay and its host abstractions.
    api: ViewerSession, the caller that composes the components.
    web: Flask HTTP viewer.

Example usage:
    Normalize a record and play its strokes on a virtual clock::

        from kanji_lib import AssetLoader, ManualScheduler, create_animator, normalize

        entry = normalize({'chu': '日', 'hanViet': 'NHẬT'})
        strokes = AssetLoader('public').load_strokes(entry)
        animator = create_animator(strokes, ManualScheduler())
        animator.play()

Attributes:
    __version__ (str): Package version string.
    __all__ (list): List of public symbols exported by this package.
"""

from .animation import (
    AnimationTiming, AnimatorState, ManualScheduler, StrokeAnimator, create_animator,
    render_frame,
)
from .api import ViewerSession
from .assets import AssetLoader, extract_strokes
from .domain import Entry, Example, Reading, StrokePath, SvgLocator, VectorDocument
from .errors import ConfigurationError, KanjiError, NetworkError, NormalizationReject, ParseError
from .overlay import InkStyle, StaticHost, create_overlay
from .schema import collect_examples, normalize, normalize_all, parse_example

__all__ = [
    # Domain objects
    'Entry', 'Reading', 'Example', 'SvgLocator', 'VectorDocument', 'StrokePath',
    # Normalization
    'normalize', 'normalize_all', 'collect_examples', 'parse_example',
    # Assets
    'AssetLoader', 'extract_strokes',
    # Animation
    'StrokeAnimator', 'AnimatorState', 'AnimationTiming', 'ManualScheduler',
    'create_animator', 'render_frame',
    # Overlay
    'create_overlay', 'InkStyle', 'StaticHost',
    # Session
    'ViewerSession',
    # Errors
    'KanjiError', 'ConfigurationError', 'NetworkError', 'ParseError', 'NormalizationReject',
]

__version__ = '1.0.0'
