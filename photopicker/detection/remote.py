"""HTTP client for the remote segmentation service."""

import base64
import binascii
import io
import json
from typing import Any, Dict, Optional

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from .base import DetectionResponse, DetectorError


def decode_preview(data: str) -> Image.Image:
    """Decode a base64 JPEG/PNG string into an RGB PIL image.

    Raises:
        DetectorError: If the data is not a decodable image.
    """
    try:
        raw = base64.b64decode(data, validate=True)
        image = Image.open(io.BytesIO(raw))
        return image.convert("RGB")
    except (binascii.Error, UnidentifiedImageError, OSError) as e:
        raise DetectorError(f"Invalid preview image: {e}") from e


def parse_response(payload: Dict[str, Any]) -> DetectionResponse:
    """Convert the service's JSON payload into a DetectionResponse.

    Expected shape::

        {"original_image": "<base64>",
         "masks": [{"mask": [[0, 1, ...], ...], "score": 0.9, "label": "cat"}]}

    Only ``masks[*].mask`` is required.

    Raises:
        DetectorError: If the payload does not match the schema.
    """
    if not isinstance(payload, dict) or "masks" not in payload:
        raise DetectorError("Response is missing 'masks'")
    entries = payload["masks"]
    if not isinstance(entries, list):
        raise DetectorError("'masks' must be a list")

    masks = []
    scores = []
    labels = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or "mask" not in entry:
            raise DetectorError(f"Mask entry {i} has no 'mask' field")
        try:
            mask = np.asarray(entry["mask"])
        except (TypeError, ValueError) as e:
            raise DetectorError(f"Mask entry {i} is not a numeric grid: {e}") from e
        if mask.dtype.kind not in "biuf":
            raise DetectorError(f"Mask entry {i} is not a numeric grid")
        if mask.ndim != 2:
            raise DetectorError(f"Mask entry {i} must be 2D, got shape {mask.shape}")
        if not np.isin(mask, (0, 1)).all():
            raise DetectorError(f"Mask entry {i} must contain only 0 and 1")
        mask = mask.astype(np.uint8)

        score = entry.get("score", entry.get("confidence"))
        if score is not None:
            try:
                score = float(score)
            except (TypeError, ValueError) as e:
                raise DetectorError(f"Mask entry {i} has a non-numeric score") from e
        masks.append(mask)
        scores.append(score)
        labels.append(entry.get("label"))

    preview = None
    if payload.get("original_image"):
        preview = decode_preview(payload["original_image"])

    return DetectionResponse(
        masks=masks, scores=scores, labels=labels, preview_image=preview
    )


def load_response(path: str) -> DetectionResponse:
    """Read a saved service response from a JSON file.

    Raises:
        DetectorError: If the file is unreadable or malformed.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DetectorError(f"Cannot read masks file {path}: {e}") from e
    return parse_response(payload)


class FileSegmenter:
    """Segmenter that replays a saved response instead of calling a service."""

    def __init__(self, path: str):
        self.path = path

    def segment(
        self, image_path: str, width: int, height: int, threshold: float
    ) -> DetectionResponse:
        return load_response(self.path)


class RemoteSegmenter:
    """Segmenter backed by the remote detection endpoint.

    Attributes:
        url: Endpoint accepting multipart ``file``, ``width``, ``height``
            and ``threshold`` fields.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize RemoteSegmenter.

        Args:
            url: Detection endpoint URL.
            timeout: Request timeout in seconds.
            session: Optional requests session to reuse connections.
        """
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def segment(
        self, image_path: str, width: int, height: int, threshold: float
    ) -> DetectionResponse:
        """Upload an image and parse the returned masks.

        Raises:
            DetectorError: On network, HTTP or payload failure.
        """
        data = {
            "width": str(width),
            "height": str(height),
            "threshold": str(threshold),
        }
        try:
            with open(image_path, "rb") as f:
                response = self.session.post(
                    self.url,
                    files={"file": f},
                    data=data,
                    timeout=self.timeout,
                )
            response.raise_for_status()
        except (OSError, requests.RequestException) as e:
            raise DetectorError(f"Segmentation request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise DetectorError(f"Segmentation response is not JSON: {e}") from e

        return parse_response(payload)
