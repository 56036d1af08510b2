"""Draw candidate polygons over a letterboxed frame."""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from ..core.utils import blend_images
from ..core.viewport import ViewportParams, compute_mapping, project_polygon
from ..detection.candidates import Candidate
from ..selection.shuffle import Selected, ShuffleState, Shuffling

Color = Tuple[int, int, int]


@dataclass
class OverlayStyle:
    """Colors (RGB) and fill opacities for each candidate look."""

    primary: Color = (139, 92, 246)
    accent: Color = (0, 185, 185)
    fill_alpha: float = 0.2
    highlight_alpha: float = 0.3
    selected_alpha: float = 0.3
    thickness: int = 1
    active_thickness: int = 2
    label: str = "Selected!"


def _look(candidate: Candidate, state: ShuffleState, style: OverlayStyle):
    if isinstance(state, Selected) and state.id == candidate.id:
        return style.accent, style.selected_alpha, style.active_thickness
    if isinstance(state, Shuffling) and state.highlighted == candidate.id:
        return style.primary, style.highlight_alpha, style.active_thickness
    return style.primary, style.fill_alpha, style.thickness


def draw_overlay(
    frame: np.ndarray,
    candidates: Sequence[Candidate],
    state: ShuffleState,
    params: ViewportParams,
    style: Optional[OverlayStyle] = None,
) -> np.ndarray:
    """Render candidate outlines for one shuffle state.

    Args:
        frame: Letterboxed RGB frame sized to the container.
        candidates: Candidates in mask pixel space.
        state: Current shuffle state.
        params: Viewport mapping mask space onto the frame.
        style: Colors and opacities.

    Returns:
        New RGB uint8 frame.
    """
    style = style or OverlayStyle()
    output = frame.copy()
    height, width = frame.shape[:2]
    mapping = compute_mapping(params)

    for candidate in candidates:
        color, alpha, thickness = _look(candidate, state, style)
        points = np.round(project_polygon(candidate.polygon, params)).astype(np.int32)

        fill = output.copy()
        cv2.fillPoly(fill, [points], color)
        mask = np.zeros((height, width), dtype=np.float32)
        cv2.fillPoly(mask, [points], 1.0)
        output = blend_images(output, fill, mask * alpha)
        cv2.polylines(output, [points], isClosed=True, color=color, thickness=thickness)

    if isinstance(state, Selected):
        for candidate in candidates:
            if candidate.id != state.id:
                continue
            bbox = candidate.bbox
            x = (bbox.x + bbox.width / 2) * mapping.scale_x + mapping.offset_x
            y = bbox.y * mapping.scale_y + mapping.offset_y
            (tw, th), _ = cv2.getTextSize(style.label, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1)
            org = (int(x - tw / 2), max(th, int(y) - 6))
            cv2.putText(
                output,
                style.label,
                org,
                cv2.FONT_HERSHEY_SIMPLEX,
                0.5,
                style.accent,
                1,
                cv2.LINE_AA,
            )

    return output


class OverlayRenderer:
    """Binds a candidate set and viewport so frames can be drawn per state."""

    def __init__(
        self,
        candidates: Sequence[Candidate],
        params: ViewportParams,
        style: Optional[OverlayStyle] = None,
    ):
        self.candidates = tuple(candidates)
        self.params = params
        self.style = style or OverlayStyle()

    def apply(self, frame: np.ndarray, state: ShuffleState) -> np.ndarray:
        """Draw the overlay for a state onto a copy of frame."""
        return draw_overlay(frame, self.candidates, state, self.params, self.style)
