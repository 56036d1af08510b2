"""Image and video I/O utilities."""

import cv2
import numpy as np
from PIL import Image


def read_image(path: str) -> np.ndarray:
    """Read an image file as an RGB array.

    Args:
        path: Path to image file.

    Returns:
        RGB numpy array (H, W, 3).
    """
    with Image.open(path) as img:
        return np.array(img.convert("RGB"))


def write_image(path: str, frame: np.ndarray) -> None:
    """Save an RGB frame to disk; format follows the file extension."""
    Image.fromarray(frame).save(path)


class VideoWriter:
    """Write frames to a video file."""

    def __init__(self, path: str, width: int, height: int, fps: float = 15.0):
        """Initialize the writer.

        Args:
            path: Output video path.
            width: Frame width.
            height: Frame height.
            fps: Frames per second.
        """
        self.path = path
        self.width = width
        self.height = height
        self.fps = fps
        self.frames_written = 0

        fourcc = cv2.VideoWriter_fourcc(*"mp4v")
        self._writer = cv2.VideoWriter(path, fourcc, fps, (width, height))
        if not self._writer.isOpened():
            raise IOError(f"Cannot create video writer: {path}")

    def write_frame(self, frame: np.ndarray):
        """Write a frame to the video.

        Args:
            frame: RGB numpy array.
        """
        bgr_frame = cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)
        self._writer.write(bgr_frame)
        self.frames_written += 1

    def close(self):
        """Release resources."""
        self._writer.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
