"""Letterboxed viewport projection.

Maps points from an image's natural pixel space into a container that shows
the image fitted inside, aspect preserved and centered.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


class ProjectionError(ValueError):
    """Raised when a projection is undefined (zero or negative size)."""


@dataclass(frozen=True)
class ViewportParams:
    """Natural image size and display container size, in pixels."""

    natural_width: float
    natural_height: float
    container_width: float
    container_height: float


@dataclass(frozen=True)
class ViewportMapping:
    """Scale and offset placing the image inside its container."""

    scale_x: float
    scale_y: float
    offset_x: float
    offset_y: float
    rendered_width: float
    rendered_height: float


def compute_mapping(params: ViewportParams) -> ViewportMapping:
    """Compute the fit-inside, centered mapping for a viewport.

    Args:
        params: Natural and container dimensions.

    Returns:
        ViewportMapping for the given sizes.

    Raises:
        ProjectionError: If any dimension is not positive.
    """
    if params.natural_width <= 0 or params.natural_height <= 0:
        raise ProjectionError(
            f"Natural size must be positive, got "
            f"{params.natural_width}x{params.natural_height}"
        )
    if params.container_width <= 0 or params.container_height <= 0:
        raise ProjectionError(
            f"Container size must be positive, got "
            f"{params.container_width}x{params.container_height}"
        )

    image_ratio = params.natural_width / params.natural_height
    container_ratio = params.container_width / params.container_height

    if image_ratio > container_ratio:
        # Wider than the container: bars top and bottom
        rendered_width = float(params.container_width)
        rendered_height = params.container_width / image_ratio
    else:
        # Taller (or equal): bars left and right
        rendered_height = float(params.container_height)
        rendered_width = params.container_height * image_ratio

    return ViewportMapping(
        scale_x=rendered_width / params.natural_width,
        scale_y=rendered_height / params.natural_height,
        offset_x=(params.container_width - rendered_width) / 2,
        offset_y=(params.container_height - rendered_height) / 2,
        rendered_width=rendered_width,
        rendered_height=rendered_height,
    )


def project(point: Sequence[float], params: ViewportParams) -> Tuple[float, float]:
    """Project one (x, y) point into container space."""
    mapping = compute_mapping(params)
    x, y = point
    return (
        x * mapping.scale_x + mapping.offset_x,
        y * mapping.scale_y + mapping.offset_y,
    )


def project_polygon(polygon: np.ndarray, params: ViewportParams) -> np.ndarray:
    """Project an (N, 2) polygon into container space.

    Args:
        polygon: Points in natural pixel space.
        params: Viewport dimensions.

    Returns:
        Float array of shape (N, 2).
    """
    mapping = compute_mapping(params)
    points = np.asarray(polygon, dtype=np.float64).reshape(-1, 2)
    scale = np.array([mapping.scale_x, mapping.scale_y])
    offset = np.array([mapping.offset_x, mapping.offset_y])
    return points * scale + offset
