"""Detection session: the single owner of candidates and shuffle state."""

from typing import Optional, Tuple

from PIL import Image

from ..config import MAX_DIMENSION
from ..core.viewport import ProjectionError, ViewportParams
from ..detection.base import DetectionResponse, Segmenter, fit_within
from ..detection.candidates import Candidate, build_candidates
from .shuffle import ShuffleRun, ShuffleSelector, ShuffleState


class DetectionSession:
    """Holds the candidates for the current image and drives selection.

    A new image replaces the candidate list wholesale, which cancels any
    shuffle in progress.
    """

    def __init__(
        self,
        selector: Optional[ShuffleSelector] = None,
        max_dimension: int = MAX_DIMENSION,
        threshold: float = 0.5,
    ):
        """Initialize the session.

        Args:
            selector: Shuffle selector to drive; a default one if omitted.
            max_dimension: Upstream size limit for requests and masks.
            threshold: Mask threshold passed to the segmenter.
        """
        self.selector = selector or ShuffleSelector()
        self.max_dimension = max_dimension
        self.threshold = threshold
        self.processing = False
        self.natural_size: Optional[Tuple[int, int]] = None
        self.preview_image: Optional[Image.Image] = None

    @property
    def candidates(self) -> Tuple[Candidate, ...]:
        return self.selector.candidates

    @property
    def state(self) -> ShuffleState:
        return self.selector.state

    def clear(self) -> None:
        """Drop the current image's candidates and selection."""
        self.selector.replace_candidates([])
        self.natural_size = None
        self.preview_image = None

    def load(
        self,
        response: DetectionResponse,
        natural_size: Optional[Tuple[int, int]] = None,
    ) -> Tuple[Candidate, ...]:
        """Build candidates from a detector response and make them live.

        Args:
            response: Deserialized detector output.
            natural_size: (width, height) of the mask pixel space; taken from
                the response when omitted.

        Returns:
            The new candidates.

        Raises:
            MaskShapeError: If a mask is malformed or over the size limit.
        """
        candidates = build_candidates(
            response.masks,
            scores=response.scores,
            labels=response.labels,
            max_dimension=self.max_dimension,
        )
        self.selector.replace_candidates(candidates)
        self.natural_size = natural_size or response.size
        self.preview_image = response.preview_image
        return self.selector.candidates

    def process(
        self, image_path: str, image_size: Tuple[int, int], segmenter: Segmenter
    ) -> Tuple[Candidate, ...]:
        """Segment a new image and load the result.

        On failure the session is left empty and not processing; the error
        propagates for the caller to report.

        Args:
            image_path: Source image path.
            image_size: (width, height) of the source image.
            segmenter: Segmentation service.

        Returns:
            The new candidates.

        Raises:
            DetectorError: If the service call fails.
            MaskShapeError: If the response holds malformed masks.
        """
        self.clear()
        self.processing = True
        try:
            width, height = fit_within(*image_size, self.max_dimension)
            response = segmenter.segment(image_path, width, height, self.threshold)
            return self.load(response, natural_size=response.size or (width, height))
        except Exception:
            self.clear()
            raise
        finally:
            self.processing = False

    def shuffle(self) -> Optional[ShuffleRun]:
        """Start a shuffle over the live candidates; None if not possible."""
        return self.selector.start()

    def reset(self) -> None:
        self.selector.reset()

    def viewport(self, container_width: float, container_height: float) -> ViewportParams:
        """Viewport parameters for the current image in a container.

        Raises:
            ProjectionError: If no image size is known yet.
        """
        if self.natural_size is None:
            raise ProjectionError("Image size is not known yet")
        width, height = self.natural_size
        return ViewportParams(width, height, container_width, container_height)
