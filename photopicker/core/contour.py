"""Mask boundary tracing and polygon simplification."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np


# Pixel offsets (dx, dy), clockwise from "up".
DIRECTIONS = (
    (0, -1),   # up
    (1, -1),   # up-right
    (1, 0),    # right
    (1, 1),    # down-right
    (0, 1),    # down
    (-1, 1),   # down-left
    (-1, 0),   # left
    (-1, -1),  # up-left
)

# Search restarts this many positions clockwise from the arrival direction,
# i.e. just past the backtrack pixel.
BACKTRACK_OFFSET = 5

COLLINEARITY_TOLERANCE = 0.5


@dataclass(frozen=True)
class TraceState:
    """Position of the boundary walker and the direction it arrived from.

    Attributes:
        position: Current pixel as (x, y).
        direction: Index into DIRECTIONS of the last move.
    """

    position: Tuple[int, int]
    direction: int


def find_start(mask: np.ndarray) -> Optional[Tuple[int, int]]:
    """Return the first foreground pixel in row-major order, or None."""
    ys, xs = np.nonzero(mask)
    if len(ys) == 0:
        return None
    # np.nonzero walks in C order, so the first hit is the row-major first.
    return int(xs[0]), int(ys[0])


def step(mask: np.ndarray, state: TraceState) -> Optional[TraceState]:
    """Advance the boundary walk by one pixel.

    Args:
        mask: Boolean foreground grid (H, W).
        state: Current walker state.

    Returns:
        The next state, or None if no foreground neighbor exists.
    """
    height, width = mask.shape
    x, y = state.position
    for i in range(8):
        direction = (state.direction + BACKTRACK_OFFSET + i) % 8
        dx, dy = DIRECTIONS[direction]
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height and mask[ny, nx]:
            return TraceState(position=(nx, ny), direction=direction)
    return None


def trace_contour(mask: np.ndarray) -> np.ndarray:
    """Trace the outer boundary of the first foreground region.

    Uses Moore-neighborhood boundary following. Every visited pixel is kept,
    revisits included; the start pixel appears once, at the front. Holes and
    any further disconnected regions are ignored.

    Args:
        mask: 2D grid where cells equal to 1 are foreground.

    Returns:
        Integer array of shape (N, 2) holding (x, y) points. Empty (0, 2)
        when the mask has no foreground.

    Raises:
        ValueError: If the mask is not 2D.
    """
    grid = np.asarray(mask)
    if grid.ndim != 2:
        raise ValueError(f"Mask must be 2D, got shape {grid.shape}")
    grid = grid == 1

    start = find_start(grid)
    if start is None:
        return np.empty((0, 2), dtype=np.int64)

    points: List[Tuple[int, int]] = [start]
    state = TraceState(position=start, direction=0)
    max_steps = 8 * grid.size

    for _ in range(max_steps):
        state = step(grid, state)
        if state is None or state.position == start:
            break
        points.append(state.position)

    return np.array(points, dtype=np.int64)


def simplify_polygon(
    polygon: np.ndarray, tolerance: float = COLLINEARITY_TOLERANCE
) -> np.ndarray:
    """Drop points that do not change direction.

    An interior point p1 with raw neighbors p0 and p2 survives only when
    |cross(p1 - p0, p2 - p1)| > tolerance. First and last points always
    survive.

    Args:
        polygon: Array of shape (N, 2).
        tolerance: Collinearity tolerance in mask pixels.

    Returns:
        Simplified array of shape (M, 2), M <= N.
    """
    points = np.asarray(polygon)
    if len(points) < 3:
        return points.copy()

    incoming = (points[1:-1] - points[:-2]).astype(np.float64)
    outgoing = (points[2:] - points[1:-1]).astype(np.float64)
    cross = incoming[:, 0] * outgoing[:, 1] - incoming[:, 1] * outgoing[:, 0]

    keep = np.ones(len(points), dtype=bool)
    keep[1:-1] = np.abs(cross) > tolerance
    return points[keep]
