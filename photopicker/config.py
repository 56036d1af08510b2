"""Configuration dataclasses for photopicker."""

from dataclasses import dataclass
from typing import Optional


# Upstream detector resizes requests so neither side exceeds this.
MAX_DIMENSION = 768


@dataclass
class DetectorConfig:
    """Configuration for the segmentation source."""

    url: Optional[str] = None
    masks_path: Optional[str] = None
    max_dimension: int = MAX_DIMENSION
    threshold: float = 0.5
    timeout: float = 30.0


@dataclass
class ShuffleConfig:
    """Configuration for the shuffle animation."""

    ticks: int = 15
    interval_ms: int = 150
    silent_tail: int = 2
    seed: Optional[int] = None
    bell: bool = False


@dataclass
class ViewportConfig:
    """Display container size; None means the image's natural size."""

    container_width: Optional[int] = None
    container_height: Optional[int] = None


@dataclass
class OutputConfig:
    """Configuration for output video."""

    hold_frames: int = 10
    snapshot_path: Optional[str] = None


@dataclass
class ProcessingConfig:
    """Combined configuration for processing."""

    input_path: str
    output_path: str
    detector: DetectorConfig
    shuffle: ShuffleConfig
    viewport: ViewportConfig
    output: OutputConfig

    @classmethod
    def from_args(
        cls,
        input_path: str,
        output_path: str,
        # Detector config
        detector_url: Optional[str] = None,
        masks_path: Optional[str] = None,
        max_dimension: int = MAX_DIMENSION,
        threshold: float = 0.5,
        timeout: float = 30.0,
        # Shuffle config
        ticks: int = 15,
        interval_ms: int = 150,
        silent_tail: int = 2,
        seed: Optional[int] = None,
        bell: bool = False,
        # Viewport config
        container_width: Optional[int] = None,
        container_height: Optional[int] = None,
        # Output config
        hold_frames: int = 10,
        snapshot_path: Optional[str] = None,
    ) -> "ProcessingConfig":
        """Create ProcessingConfig from CLI arguments."""
        return cls(
            input_path=input_path,
            output_path=output_path,
            detector=DetectorConfig(
                url=detector_url,
                masks_path=masks_path,
                max_dimension=max_dimension,
                threshold=threshold,
                timeout=timeout,
            ),
            shuffle=ShuffleConfig(
                ticks=ticks,
                interval_ms=interval_ms,
                silent_tail=silent_tail,
                seed=seed,
                bell=bell,
            ),
            viewport=ViewportConfig(
                container_width=container_width,
                container_height=container_height,
            ),
            output=OutputConfig(
                hold_frames=hold_frames,
                snapshot_path=snapshot_path,
            ),
        )
