"""Configuration values and logging setup for the kanji stroke viewer.

This module centralizes the constants shared by the loader, the stroke
extractor, the animator and the freehand overlay, and provides the
application-wide logging configuration.

Having these values in one place keeps the HTTP viewer, the CLI and the
library defaults consistent.

Example:
    Configure logging at startup and build a config from the environment::

        from kanji_lib.config import ViewerConfig, configure_logging

        config = ViewerConfig.from_env()
        configure_logging(level=config.log_level)

Attributes:
    GUIDE_STROKE_COLOR (str): Stroke colour of the KanjiVG grid guide lines.
    ASSET_PATH_TEMPLATE (str): Relative asset path for a codepoint hex key.
    CODEPOINT_HEX_WIDTH (int): Minimum width of the zero-padded hex key.
    MODAL_TIMING (tuple): (per_stroke_ms, gap_ms) used by the detail modal.
    GALLERY_TIMING (tuple): (per_stroke_ms, gap_ms) used by the gallery view.
    HTTP_TIMEOUT (float): Seconds before an asset request times out.
    HTTP_MAX_RETRIES (int): Attempts made for transient HTTP failures.
    NOISY_LOGGERS (tuple): Third-party loggers configure_logging() holds at WARNING.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

# Module logger
logger = logging.getLogger(__name__)

# Vector assets
GUIDE_STROKE_COLOR = '#bcc9e2'
ASSET_PATH_TEMPLATE = 'resources/kanji_svg/{hex}.svg'
CODEPOINT_HEX_WIDTH = 5
DEFAULT_ASSET_BASE = 'public'

# Stroke animation (per-stroke duration, inter-stroke gap) in milliseconds
MODAL_TIMING = (900, 180)
GALLERY_TIMING = (800, 500)

# Freehand ink
INK_LINE_WIDTH = 6
INK_COLOR = (255, 255, 255, 242)  # rgba(255,255,255,0.95)

# Frame rendering
FRAME_SIZE = 327  # 3x the 109 unit KanjiVG viewBox
FRAME_BACKGROUND = (18, 20, 26, 255)
FRAME_STROKE_COLOR = (255, 255, 255, 235)
FRAME_GUIDE_COLOR = (188, 201, 226, 90)
FRAME_STROKE_WIDTH = 4

# HTTP
HTTP_TIMEOUT = 10.0
HTTP_MAX_RETRIES = 3
HTTP_BASE_DELAY = 0.5

# Logging
LOG_FORMAT = '%(asctime)s %(levelname)-8s [%(name)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
NOISY_LOGGERS = ('werkzeug', 'PIL', 'urllib3')


def configure_logging(level: str = 'INFO', log_file: str | None = None,
                      quiet: tuple[str, ...] = NOISY_LOGGERS) -> logging.Logger:
    """Install the viewer's log handlers on the root logger.

    Replaces any handlers already installed, so calling it again (the CLI
    does once per invocation) never duplicates output.

    Args:
        level: Level name. Unknown names mean INFO.
        log_file: Also append records to this file when given.
        quiet: Loggers held at WARNING whatever ``level`` is.

    Returns:
        The root logger.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
    fmt = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(fmt)
        root.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Log level %s, writing to %s", logging.getLevelName(root.level),
                 log_file or 'stderr')
    return root


@dataclass
class ViewerConfig:
    """Runtime configuration for the viewer session, HTTP app and CLI.

    Attributes:
        asset_base: Local directory or http(s) URL that asset paths are
            resolved against.
        db_path: Optional path to a JSON record file (array or collection
            shape) used by the HTTP viewer and the CLI.
        log_level: Log level name passed to configure_logging().
        animation_preset: 'modal' or 'gallery'.
        http_timeout: Seconds before an asset request times out.
        http_max_retries: Attempts for transient HTTP failures.
    """
    asset_base: str = DEFAULT_ASSET_BASE
    db_path: str | None = None
    log_level: str = 'INFO'
    animation_preset: str = 'modal'
    http_timeout: float = HTTP_TIMEOUT
    http_max_retries: int = HTTP_MAX_RETRIES

    @classmethod
    def from_env(cls, environ=None) -> ViewerConfig:
        """Build a config from KANJI_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ (for tests).

        Returns:
            ViewerConfig with defaults for any unset variable.
        """
        env = os.environ if environ is None else environ
        timeout = env.get('KANJI_HTTP_TIMEOUT')
        retries = env.get('KANJI_HTTP_MAX_RETRIES')
        return cls(
            asset_base=env.get('KANJI_ASSET_BASE', DEFAULT_ASSET_BASE),
            db_path=env.get('KANJI_DB_PATH') or None,
            log_level=env.get('KANJI_LOG_LEVEL', 'INFO'),
            animation_preset=env.get('KANJI_ANIMATION_PRESET', 'modal'),
            http_timeout=float(timeout) if timeout else HTTP_TIMEOUT,
            http_max_retries=int(retries) if retries else HTTP_MAX_RETRIES,
        )
