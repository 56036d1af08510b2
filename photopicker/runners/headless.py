"""Headless batch processing runner."""

import random
import sys

import cv2
import numpy as np
from tqdm import tqdm

from ..config import ProcessingConfig
from ..core.io import VideoWriter, read_image, write_image
from ..core.utils import letterbox_image
from ..detection.base import DetectorError, Segmenter
from ..detection.candidates import MaskShapeError
from ..render.overlay import OverlayRenderer
from ..selection.feedback import BellFeedback, NullFeedback
from ..selection.session import DetectionSession
from ..selection.shuffle import Idle, Selected, ShuffleSelector


def create_segmenter(config: ProcessingConfig) -> Segmenter:
    """Create the segmentation source based on config.

    Args:
        config: Processing configuration.

    Returns:
        FileSegmenter for a saved masks file, else RemoteSegmenter.

    Raises:
        ValueError: If neither a masks file nor a URL is configured.
    """
    if config.detector.masks_path:
        from ..detection.remote import FileSegmenter
        return FileSegmenter(config.detector.masks_path)
    if config.detector.url:
        from ..detection.remote import RemoteSegmenter
        print(f"Using remote segmenter at {config.detector.url}")
        return RemoteSegmenter(config.detector.url, timeout=config.detector.timeout)
    raise ValueError("Either a masks file or a detector URL is required")


def create_session(config: ProcessingConfig) -> DetectionSession:
    """Create a detection session with a selector configured for shuffling."""
    shuffle = config.shuffle
    selector = ShuffleSelector(
        ticks=shuffle.ticks,
        interval_ms=shuffle.interval_ms,
        silent_tail=shuffle.silent_tail,
        rng=random.Random(shuffle.seed),
        feedback=BellFeedback() if shuffle.bell else NullFeedback(),
    )
    return DetectionSession(
        selector=selector,
        max_dimension=config.detector.max_dimension,
        threshold=config.detector.threshold,
    )


def prepare_frame(session: DetectionSession, image: np.ndarray) -> np.ndarray:
    """Return the image in the masks' pixel space.

    Uses the service's preview when it sent one, otherwise resizes the source.
    """
    if session.preview_image is not None:
        return np.array(session.preview_image.convert("RGB"))

    width, height = session.natural_size
    if image.shape[1] != width or image.shape[0] != height:
        image = cv2.resize(image, (width, height), interpolation=cv2.INTER_AREA)
    return image


def run_headless(config: ProcessingConfig) -> None:
    """Segment an image, shuffle once and write the animation to video.

    Args:
        config: Processing configuration.

    Raises:
        SystemExit: If segmentation fails.
    """
    image = read_image(config.input_path)
    height, width = image.shape[:2]

    segmenter = create_segmenter(config)
    session = create_session(config)

    try:
        candidates = session.process(config.input_path, (width, height), segmenter)
    except (DetectorError, MaskShapeError) as e:
        print(f"Segmentation failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Loaded {len(candidates)} candidates")
    if not candidates:
        print("Nothing to shuffle; no video written.")
        return

    frame = prepare_frame(session, image)
    natural_width, natural_height = session.natural_size
    container_width = config.viewport.container_width or natural_width
    container_height = config.viewport.container_height or natural_height

    params = session.viewport(container_width, container_height)
    background = letterbox_image(frame, container_width, container_height)
    renderer = OverlayRenderer(candidates, params)

    run = session.shuffle()
    fps = 1000.0 / config.shuffle.interval_ms

    last = renderer.apply(background, Idle())
    with VideoWriter(config.output_path, container_width, container_height, fps) as writer:
        writer.write_frame(last)
        for state in tqdm(run, total=config.shuffle.ticks + 1, desc="Shuffling"):
            last = renderer.apply(background, state)
            writer.write_frame(last)
        for _ in range(config.output.hold_frames):
            writer.write_frame(last)

    state = session.state
    if isinstance(state, Selected):
        print(f"Selected: {state.id}")

    if config.output.snapshot_path:
        write_image(config.output.snapshot_path, last)
        print(f"Snapshot saved to: {config.output.snapshot_path}")

    print(f"Output saved to: {config.output_path}")
