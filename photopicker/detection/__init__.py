"""Detection module: segmentation service boundary and candidate building."""

from .base import DetectionResponse, DetectorError, Segmenter, fit_within
from .candidates import (
    BoundingBox,
    Candidate,
    CandidateId,
    MaskShapeError,
    build_candidates,
)

# Lazy imports for network-dependent segmenters
def __getattr__(name):
    if name in ("RemoteSegmenter", "FileSegmenter", "load_response", "parse_response"):
        from . import remote
        return getattr(remote, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "BoundingBox",
    "Candidate",
    "CandidateId",
    "DetectionResponse",
    "DetectorError",
    "FileSegmenter",
    "MaskShapeError",
    "RemoteSegmenter",
    "Segmenter",
    "build_candidates",
    "fit_within",
    "load_response",
    "parse_response",
]
