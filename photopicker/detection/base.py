"""Segmentation service protocol and data structures."""

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Tuple

import numpy as np
from PIL import Image

from ..config import MAX_DIMENSION


class DetectorError(RuntimeError):
    """Recoverable failure talking to, or parsing, the segmentation service."""


@dataclass
class DetectionResponse:
    """Deserialized segmentation service output.

    Attributes:
        masks: One binary (H, W) grid per detected object.
        scores: Per-mask confidence, None where the service gave none.
        labels: Per-mask class name, None where the service gave none.
        preview_image: Re-encoded image the masks were computed on.
    """

    masks: List[np.ndarray]
    scores: List[Optional[float]] = field(default_factory=list)
    labels: List[Optional[str]] = field(default_factory=list)
    preview_image: Optional[Image.Image] = None

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        """(width, height) of the mask pixel space, if known."""
        if self.preview_image is not None:
            return self.preview_image.size
        if self.masks:
            height, width = self.masks[0].shape[:2]
            return width, height
        return None


class Segmenter(Protocol):
    """Protocol for segmentation services."""

    def segment(
        self, image_path: str, width: int, height: int, threshold: float
    ) -> DetectionResponse:
        """Segment objects in an image.

        Args:
            image_path: Path to the source image.
            width: Target width the service should resize to.
            height: Target height the service should resize to.
            threshold: Mask binarization threshold.

        Returns:
            DetectionResponse with one mask per object.

        Raises:
            DetectorError: On network, HTTP or payload failure.
        """
        ...


def fit_within(
    width: int, height: int, max_dimension: int = MAX_DIMENSION
) -> Tuple[int, int]:
    """Scale (width, height) down so neither side exceeds max_dimension.

    Never upscales.
    """
    if width > max_dimension or height > max_dimension:
        scale = min(max_dimension / width, max_dimension / height)
        width = round(width * scale)
        height = round(height * scale)
    return int(width), int(height)
