#!/usr/bin/env python3
"""Command-line interface for signature tracing.

Traces one or more signature images and writes one JSON file per image.
With --plan, the JSON also carries a timed motion plan for the given
canvas size and style.

Usage:
    signature-trace scan.png
    signature-trace scans/*.png --output traced/ --max-width 800
    signature-trace scan.png --plan --width 800 --height 300 --style smooth_cursive --duration 4

Or run via the module:
    python -m signature_lib.cli scan.png

Output (``<output>/<image stem>.json``)::

    {"analysis": {...}, "paths": [...], "duration": 4000.0}

``paths`` and ``duration`` are present only with --plan. The exit status is
1 if any image failed to load, 0 otherwise.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from .api.services import SignatureService
from .config import MAX_PROCESS_WIDTH, TracerConfig
from .domain.motion import STYLE_PRESETS
from .motion.planner import natural_duration
from .utils.log_setup import configure_logging

logger = logging.getLogger(__name__)


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        description='Trace signature images into ordered vector strokes'
    )
    parser.add_argument('images', nargs='+', type=Path,
                        help='Image files to trace')
    parser.add_argument('--output', '-o', type=Path, default=Path('.'),
                        help='Output directory for JSON (default: current directory)')
    parser.add_argument('--max-width', type=int, default=MAX_PROCESS_WIDTH,
                        help=f'Processing width cap (default: {MAX_PROCESS_WIDTH})')
    parser.add_argument('--plan', action='store_true',
                        help='Also compute a timed motion plan')
    parser.add_argument('--width', type=int, default=800,
                        help='Canvas width for --plan (default: 800)')
    parser.add_argument('--height', type=int, default=300,
                        help='Canvas height for --plan (default: 300)')
    parser.add_argument('--style', choices=sorted(STYLE_PRESETS), default=None,
                        help='Handwriting style preset for --plan')
    parser.add_argument('--duration', type=float, default=None,
                        help='Rescale the plan to this many seconds')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity (default: WARNING)')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write logs to this file')
    return parser


def _validate_args(parser: argparse.ArgumentParser, args) -> None:
    """Reject option combinations argparse cannot express."""
    if args.max_width < 1:
        parser.error('--max-width must be positive')
    if args.plan and (args.width < 1 or args.height < 1):
        parser.error('--width and --height must be positive')
    if args.duration is not None and args.duration <= 0:
        parser.error('--duration must be positive')


def _trace_one(service: SignatureService, image: Path, args) -> dict:
    """Trace one image into the JSON document written for it.

    Raises:
        ValueError: If the image cannot be decoded.
    """
    analysis = service.trace_image(image, max_width=args.max_width)
    result = {'analysis': analysis.to_dict()}
    if args.plan:
        duration_ms = args.duration * 1000.0 if args.duration else None
        paths = service.plan_motion(analysis, args.width, args.height,
                                    style=args.style, duration_ms=duration_ms)
        result['paths'] = [p.to_dict() for p in paths]
        result['duration'] = natural_duration(paths)
    return result


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, trace every image, and write the results.

    Returns:
        Process exit status.
    """
    parser = _create_argument_parser()
    args = parser.parse_args(argv)
    _validate_args(parser, args)
    configure_logging(level=args.log_level, log_file=args.log_file)

    service = SignatureService(TracerConfig(max_process_width=args.max_width))
    args.output.mkdir(parents=True, exist_ok=True)

    failed = 0
    for image in tqdm(args.images, desc='Tracing', unit='image', disable=len(args.images) < 2):
        try:
            result = _trace_one(service, image, args)
        except ValueError as e:
            failed += 1
            tqdm.write(f"Error tracing {image}: {e}")
            logger.error("Failed to trace %s: %s", image, e)
            continue

        out_path = args.output / f"{image.stem}.json"
        out_path.write_text(json.dumps(result, indent=2))
        n_strokes = len(result['analysis']['strokes'])
        logger.debug("Wrote %s (%d strokes)", out_path, n_strokes)
        summary = f"Wrote {out_path} ({n_strokes} strokes)"
        if n_strokes == 0:
            summary += ", no ink found"
        tqdm.write(summary)

    if failed:
        print(f"{failed}/{len(args.images)} images failed", file=sys.stderr)
    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
