"""Command-line interface for the kanji stroke viewer.

Usage:
    python -m kanji_lib normalize kanji_db.json > entries.json
    python -m kanji_lib strokes 日 --assets public
    python -m kanji_lib frames 日 --out frames/ --fps 12 --preset gallery
    python -m kanji_lib serve --port 5000

Asset base, record file, log level and timing preset default to the
KANJI_* environment variables (see ViewerConfig.from_env).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import ViewerConfig, configure_logging

logger = logging.getLogger(__name__)


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog='kanji_lib',
        description='Normalize kanji records and play back stroke order'
    )
    parser.add_argument('--assets', '-a', type=str, default=None,
                        help='Asset base directory or URL (default: $KANJI_ASSET_BASE)')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Log level (default: $KANJI_LOG_LEVEL or INFO)')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('normalize', help='Print normalized entries as JSON')
    p.add_argument('db', type=str, help='Record file (array or collection JSON)')

    p = sub.add_parser('strokes', help='List the strokes of a character')
    p.add_argument('char', type=str, help='A single character')

    p = sub.add_parser('frames', help='Write PNG frames of the stroke reveal')
    p.add_argument('char', type=str, help='A single character')
    p.add_argument('--out', '-o', type=str, required=True, help='Output directory')
    p.add_argument('--fps', type=int, default=12, help='Frames per second (default: 12)')
    p.add_argument('--size', type=int, default=None, help='Frame size in pixels')
    p.add_argument('--preset', type=str, default=None, choices=['modal', 'gallery'],
                   help='Timing preset (default: $KANJI_ANIMATION_PRESET or modal)')

    p = sub.add_parser('serve', help='Run the HTTP viewer')
    p.add_argument('--host', type=str, default='127.0.0.1')
    p.add_argument('--port', '-p', type=int, default=5000)
    p.add_argument('--db', type=str, default=None, help='Record file (default: $KANJI_DB_PATH)')
    p.add_argument('--debug', action='store_true')
    return parser


def _single_char(value: str) -> str:
    if len(value) != 1:
        raise SystemExit(f"error: expected a single character, got {value!r}")
    return value


def _asset_loader(config: ViewerConfig):
    from .assets.loader import AssetLoader

    return AssetLoader(config.asset_base, timeout=config.http_timeout,
                       max_retries=config.http_max_retries)


def _cmd_normalize(args, config: ViewerConfig) -> int:
    from .schema.normalizer import normalize_all

    with open(args.db, encoding='utf-8') as f:
        data = json.load(f)
    entries = normalize_all(data)
    json.dump([e.to_dict() for e in entries], sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write('\n')
    logger.info("Normalized %d entries from %s", len(entries), args.db)
    return 0


def _cmd_strokes(args, config: ViewerConfig) -> int:
    from .schema.normalizer import new_entry

    loader = _asset_loader(config)
    strokes = loader.load_strokes(new_entry(_single_char(args.char)))
    print(f"{args.char}: {len(strokes)} strokes")
    for s in strokes:
        print(f"  {s.index + 1:2d}  length={s.length:8.2f}  {s.d}")
    return 0


def _cmd_frames(args, config: ViewerConfig) -> int:
    from .animation.animator import AnimationTiming
    from .animation.frames import render_reveal
    from .assets.extractor import extract_guides, extract_strokes
    from .config import FRAME_SIZE
    from .schema.normalizer import new_entry

    loader = _asset_loader(config)
    document = loader.load_asset(new_entry(_single_char(args.char)))
    strokes = extract_strokes(document)
    if not strokes:
        print(f"No strokes for {args.char}")
        return 1

    timing = AnimationTiming.preset(args.preset or config.animation_preset)
    output_dir = Path(args.out)
    output_dir.mkdir(parents=True, exist_ok=True)
    count = 0
    for t, frame in render_reveal(strokes, timing, fps=args.fps,
                                  size=args.size or FRAME_SIZE,
                                  guides=extract_guides(document)):
        frame.save(output_dir / f"frame_{count:04d}_{int(t):05d}ms.png")
        count += 1
    print(f"Saved {count} frames to {output_dir}/")
    return 0


def _cmd_serve(args, config: ViewerConfig) -> int:
    from .web.app import create_app

    if args.db:
        config.db_path = args.db
    app = create_app(config)
    app.run(host=args.host, port=args.port, debug=args.debug)
    return 0


COMMANDS = {
    'normalize': _cmd_normalize,
    'strokes': _cmd_strokes,
    'frames': _cmd_frames,
    'serve': _cmd_serve,
}


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run the selected command.

    Returns:
        Process exit status.
    """
    from .errors import KanjiError

    args = _create_argument_parser().parse_args(argv)
    config = ViewerConfig.from_env()
    if args.assets:
        config.asset_base = args.assets
    if args.log_level:
        config.log_level = args.log_level
    configure_logging(level=config.log_level)

    try:
        return COMMANDS[args.command](args, config)
    except KanjiError as e:
        logger.error("%s failed: %s", args.command, e)
        return 2


if __name__ == '__main__':
    sys.exit(main())
