"""Image capture with collision-free file naming."""

import logging
import time
from pathlib import Path
from typing import Optional, Union

import numpy as np
import matplotlib.image

from ..errors import DisambiguationExhausted

logger = logging.getLogger(__name__)


def unique_path(target_path: Union[Path, str], max_attempts: Optional[int] = None) -> Path:
    """Return ``target_path`` with a ``.png`` suffix, or ``<stem>_<n>.png`` if taken.

    Suffixes are tried from 0 upwards until a free name is found.

    Args:
        target_path: Requested output path
        max_attempts: Optional cap on the number of suffixes tried

    Raises:
        DisambiguationExhausted: If the cap is reached without a free name
    """
    target_path = Path(target_path).with_suffix(".png")
    if not target_path.exists():
        return target_path

    i = 0
    while True:
        if max_attempts is not None and i >= max_attempts:
            raise DisambiguationExhausted(
                f"No free filename for {target_path} after {max_attempts} attempts"
            )
        candidate = target_path.with_name(f"{target_path.stem}_{i}.png")
        if not candidate.exists():
            return candidate
        i += 1


class ImageCapture:
    """Writes RGBA images as PNG files via matplotlib."""

    def __init__(self, max_attempts: Optional[int] = None):
        self.max_attempts = max_attempts

    def capture(self, image: np.ndarray, target_path: Union[Path, str]) -> Path:
        """Encode ``image`` to the first free name derived from ``target_path``.

        Returns:
            Path actually written
        """
        start = time.perf_counter()
        path = unique_path(target_path, self.max_attempts)
        path.parent.mkdir(parents=True, exist_ok=True)

        image = np.asarray(image)
        if image.dtype != np.uint8:
            image = np.round(np.clip(image, 0.0, 1.0) * 255.0).astype(np.uint8)
        matplotlib.image.imsave(path, image, format="png")

        logger.debug("Screenshot %s generated in %.0fms", path, 1000.0 * (time.perf_counter() - start))
        return path
