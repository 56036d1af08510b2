"""Build renderable candidates from segmentation masks."""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..config import MAX_DIMENSION
from ..core.contour import COLLINEARITY_TOLERANCE, simplify_polygon, trace_contour


ID_PREFIX = "object"
_ID_PATTERN = re.compile(rf"^{ID_PREFIX}-(\d+)$")


class MaskShapeError(ValueError):
    """Raised when a mask is not 2D or exceeds the upstream size limit."""


@dataclass(frozen=True, order=True)
class CandidateId:
    """Identifier derived from the mask's index in the detector response."""

    index: int

    def __str__(self) -> str:
        return f"{ID_PREFIX}-{self.index}"

    @classmethod
    def parse(cls, text: str) -> "CandidateId":
        match = _ID_PATTERN.match(text)
        if not match:
            raise ValueError(f"Not a candidate id: {text!r}")
        return cls(int(match.group(1)))


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in mask pixels."""

    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True, eq=False)
class Candidate:
    """A detected object ready for rendering and selection.

    Attributes:
        id: Stable identifier tied to the original mask index.
        polygon: Read-only (N, 2) integer array, N >= 3.
        bbox: Bounding box of the polygon points.
        confidence: Detector confidence in [0, 1].
        area: Bounding box area.
        label: Optional class name from the detector.
    """

    id: CandidateId
    polygon: np.ndarray
    bbox: BoundingBox
    confidence: float
    area: int
    label: Optional[str] = None


def clamp_confidence(score: Optional[float]) -> float:
    """Clamp a detector score to [0, 1]; missing scores count as 1.0."""
    if score is None:
        return 1.0
    return min(1.0, max(0.0, float(score)))


def bounding_box(polygon: np.ndarray) -> BoundingBox:
    """Compute the bounding box of an (N, 2) point array."""
    min_x, min_y = polygon.min(axis=0)
    max_x, max_y = polygon.max(axis=0)
    return BoundingBox(
        x=int(min_x),
        y=int(min_y),
        width=int(max_x - min_x),
        height=int(max_y - min_y),
    )


def build_candidate(
    index: int,
    mask: np.ndarray,
    score: Optional[float] = None,
    label: Optional[str] = None,
    tolerance: float = COLLINEARITY_TOLERANCE,
) -> Optional[Candidate]:
    """Trace and simplify one mask; None when it has no usable shape."""
    polygon = simplify_polygon(trace_contour(mask), tolerance)
    if len(polygon) < 3:
        return None

    polygon = polygon.copy()
    polygon.setflags(write=False)
    bbox = bounding_box(polygon)
    return Candidate(
        id=CandidateId(index),
        polygon=polygon,
        bbox=bbox,
        confidence=clamp_confidence(score),
        area=bbox.area,
        label=label,
    )


def build_candidates(
    masks: Sequence[np.ndarray],
    scores: Optional[Sequence[Optional[float]]] = None,
    labels: Optional[Sequence[Optional[str]]] = None,
    max_dimension: Optional[int] = MAX_DIMENSION,
    tolerance: float = COLLINEARITY_TOLERANCE,
) -> List[Candidate]:
    """Convert detector masks into candidates.

    Masks with no foreground, or whose outline simplifies to fewer than three
    points, are skipped without consuming an id. Ids always come from the
    original mask index, and output keeps input order.

    Args:
        masks: Binary (H, W) grids, one per detected object.
        scores: Optional per-mask confidences.
        labels: Optional per-mask class names.
        max_dimension: Largest allowed mask side; None disables the check.
        tolerance: Collinearity tolerance for simplification.

    Returns:
        List of Candidate objects.

    Raises:
        MaskShapeError: If a mask is not 2D or exceeds max_dimension.
    """
    scores = list(scores or [])
    labels = list(labels or [])

    candidates = []
    for i, raw in enumerate(masks):
        mask = np.asarray(raw)
        if mask.ndim != 2:
            raise MaskShapeError(f"Mask {i} must be 2D, got shape {mask.shape}")
        if max_dimension is not None and max(mask.shape) > max_dimension:
            raise MaskShapeError(
                f"Mask {i} is {mask.shape[1]}x{mask.shape[0]}, "
                f"larger than the {max_dimension}px limit"
            )

        candidate = build_candidate(
            i,
            mask,
            score=scores[i] if i < len(scores) else None,
            label=labels[i] if i < len(labels) else None,
            tolerance=tolerance,
        )
        if candidate is not None:
            candidates.append(candidate)

    return candidates
