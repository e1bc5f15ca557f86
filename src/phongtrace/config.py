import os
import sys
from dataclasses import dataclass

from loguru import logger

# Image parameters
IMG_SIZE = 1000
IMG_WIDTH = IMG_SIZE
IMG_HEIGHT = IMG_SIZE

# Worker threads used by the render driver
NUM_THREADS = 10

# A frame slower than 40ms means a framerate below 25fps
RENDER_WARN_MS = 40
CAMERA_WARN_MS = 1

BACKGROUND = (0, 0, 0)


@dataclass(frozen=True)
class RenderConfig:
    """
    Parameters of the render driver.

    Parameters:
        - num_workers: Size of the thread pool the image rows are fanned out
          to.
        - rows_per_chunk: Number of image rows traced as one batch of rays.
        - channels: 3 for an RGB buffer, 4 for RGBA (alpha always opaque).
        - background: Pixel colour written where no shape is hit.
    """
    num_workers: int = NUM_THREADS
    rows_per_chunk: int = 50
    channels: int = 4
    background: tuple[int, int, int] = BACKGROUND

    def __post_init__(self):
        if self.num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {self.num_workers}")
        if self.rows_per_chunk < 1:
            raise ValueError(f"rows_per_chunk must be at least 1, got {self.rows_per_chunk}")
        if self.channels not in (3, 4):
            raise ValueError(f"channels must be 3 or 4, got {self.channels}")
        if len(self.background) != 3:
            raise ValueError("background must be an (r, g, b) triple")


def configure_logging(level: str = "WARNING"):
    """
    Replace loguru's default sink with a stderr sink. The `LOG` environment
    variable overrides `level`.
    """
    logger.remove()
    logger.add(sys.stderr, level=os.environ.get("LOG", level).upper())
