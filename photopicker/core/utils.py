"""Image utility functions."""

import cv2
import numpy as np

from .viewport import ViewportParams, compute_mapping


def blend_images(
    img1: np.ndarray, img2: np.ndarray, alpha: np.ndarray | float
) -> np.ndarray:
    """Blend two images using alpha mask or scalar.

    Args:
        img1: First image (background).
        img2: Second image (foreground).
        alpha: Blend factor (0-1). Can be scalar or 2D/3D array.

    Returns:
        Blended image as uint8 array.

    Raises:
        ValueError: If image shapes don't match.
    """
    if img2 is None:
        return img1.astype(np.uint8)

    if img1.shape != img2.shape:
        raise ValueError(f"Shape mismatch: {img1.shape} vs {img2.shape}")

    if isinstance(alpha, np.ndarray) and alpha.ndim == 2:
        alpha = alpha[:, :, np.newaxis]

    blended = img1.astype(np.float32) * (1 - alpha) + img2.astype(np.float32) * alpha
    return np.clip(blended, 0, 255).astype(np.uint8)


def letterbox_image(
    image: np.ndarray, container_width: int, container_height: int
) -> np.ndarray:
    """Fit an image inside a container, centered on a black canvas.

    Placement matches compute_mapping, so polygons projected with the same
    viewport line up with the returned frame.

    Args:
        image: Input image (H, W, 3).
        container_width: Canvas width in pixels.
        container_height: Canvas height in pixels.

    Returns:
        Letterboxed image of shape (container_height, container_width, 3).
    """
    height, width = image.shape[:2]
    mapping = compute_mapping(
        ViewportParams(width, height, container_width, container_height)
    )

    new_width = max(1, int(round(mapping.rendered_width)))
    new_height = max(1, int(round(mapping.rendered_height)))
    resized = cv2.resize(image, (new_width, new_height), interpolation=cv2.INTER_AREA)

    canvas = np.zeros((container_height, container_width) + image.shape[2:], dtype=image.dtype)
    x0 = int(round(mapping.offset_x))
    y0 = int(round(mapping.offset_y))
    # Rounding can push the last row/column one pixel past the canvas
    x1 = min(container_width, x0 + new_width)
    y1 = min(container_height, y0 + new_height)
    canvas[y0:y1, x0:x1] = resized[: y1 - y0, : x1 - x0]
    return canvas
