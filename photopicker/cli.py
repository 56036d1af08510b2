"""Command-line interface for photopicker."""

import argparse
from pathlib import Path
from typing import Optional, Tuple

from . import __version__
from .config import MAX_DIMENSION, ProcessingConfig

EPILOG = """\
Examples:
  photopicker photo.jpg -o shuffle.mp4 --masks response.json
  photopicker photo.jpg -o shuffle.mp4 --detector-url https://example.com/detect/
  photopicker photo.jpg -o shuffle.mp4 --masks response.json --seed 7 --container 640x640

Masks file format (same as the detector's JSON response):
  {"original_image": "<optional base64 JPEG>",
   "masks": [{"mask": [[0, 1, ...], ...], "score": 0.9, "label": "cat"}, ...]}

Each mask is traced into a polygon; one is picked at random after a short
animated shuffle, which is written to the output video.
"""


def parse_container(value: str) -> Tuple[int, int]:
    """Parse a WIDTHxHEIGHT string into positive integers."""
    parts = value.lower().split("x")
    if len(parts) != 2:
        raise ValueError(f"expected WIDTHxHEIGHT, got {value!r}")
    width, height = (int(p) for p in parts)
    if width <= 0 or height <= 0:
        raise ValueError(f"container size must be positive, got {value!r}")
    return width, height


def parse_args(args=None) -> ProcessingConfig:
    """Parse command-line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv).

    Returns:
        ProcessingConfig with parsed options.
    """
    parser = argparse.ArgumentParser(
        prog="photopicker",
        description="Segment objects in a photo and shuffle-pick one at random.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "input",
        type=str,
        help="Input image (.jpg, .png)",
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        required=True,
        help="Output video file for the shuffle animation",
    )

    # Segmentation source
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--masks",
        type=str,
        help="JSON file holding a saved detector response",
    )
    source.add_argument(
        "--detector-url",
        type=str,
        help="URL of the remote detection endpoint",
    )

    parser.add_argument(
        "--max-dimension",
        type=int,
        default=MAX_DIMENSION,
        help=f"Largest side sent to the detector and accepted in masks (default: {MAX_DIMENSION})",
    )

    parser.add_argument(
        "--threshold",
        type=float,
        default=0.5,
        help="Mask threshold passed to the detector; 0.0-1.0 (default: 0.5)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Detector request timeout in seconds (default: 30)",
    )

    # Shuffle arguments
    parser.add_argument(
        "--ticks",
        type=int,
        default=15,
        help="Highlight steps before the final pick (default: 15)",
    )

    parser.add_argument(
        "--interval-ms",
        type=int,
        default=150,
        help="Time between highlight steps; sets the video frame rate (default: 150)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for a reproducible pick",
    )

    parser.add_argument(
        "--bell",
        action="store_true",
        help="Ring the terminal bell on each tick and on the result",
    )

    # Output arguments
    parser.add_argument(
        "--container",
        type=str,
        default=None,
        metavar="WxH",
        help="Display size to letterbox the image into (default: image size)",
    )

    parser.add_argument(
        "--hold-frames",
        type=int,
        default=10,
        help="Extra frames showing the final pick (default: 10)",
    )

    parser.add_argument(
        "--snapshot",
        type=str,
        default=None,
        help="Also save the final frame as an image",
    )

    parsed = parser.parse_args(args)

    # Validate input exists
    if not Path(parsed.input).exists():
        parser.error(f"Input file not found: {parsed.input}")
    if parsed.masks and not Path(parsed.masks).exists():
        parser.error(f"Masks file not found: {parsed.masks}")
    if not 0.0 <= parsed.threshold <= 1.0:
        parser.error("--threshold must be between 0.0 and 1.0")
    if parsed.ticks < 1:
        parser.error("--ticks must be at least 1")
    if parsed.interval_ms <= 0:
        parser.error("--interval-ms must be positive")
    if parsed.max_dimension <= 0:
        parser.error("--max-dimension must be positive")

    container: Tuple[Optional[int], Optional[int]] = (None, None)
    if parsed.container:
        try:
            container = parse_container(parsed.container)
        except ValueError as e:
            parser.error(f"--container: {e}")

    return ProcessingConfig.from_args(
        input_path=parsed.input,
        output_path=parsed.output,
        detector_url=parsed.detector_url,
        masks_path=parsed.masks,
        max_dimension=parsed.max_dimension,
        threshold=parsed.threshold,
        timeout=parsed.timeout,
        ticks=parsed.ticks,
        interval_ms=parsed.interval_ms,
        seed=parsed.seed,
        bell=parsed.bell,
        container_width=container[0],
        container_height=container[1],
        hold_frames=parsed.hold_frames,
        snapshot_path=parsed.snapshot,
    )
