from __future__ import annotations

import logging
import math
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from .errors import ImageProcessingError

logger = logging.getLogger(__name__)

PNG_MIME = "image/png"


class ImageNormalizer:
    """Turns arbitrary artwork into a fixed-size square PNG.

    The image is scaled so its shorter side matches ``size`` (the square is
    always filled, never letterboxed). Along the longer side a window of
    ``size`` pixels is slid across the picture and the window whose
    greyscale histogram has the highest entropy is kept, which favours
    detailed regions over flat borders.
    """

    mime = PNG_MIME

    def __init__(self, size: int = 300, search_steps: int = 32) -> None:
        if size <= 0:
            raise ValueError("size must be positive")
        self.size = size
        self.search_steps = max(1, search_steps)

    def normalize(self, data: bytes) -> bytes:
        try:
            with Image.open(BytesIO(data)) as source:
                source.load()
                image = ImageOps.exif_transpose(source)
                image = image.convert("RGBA" if _has_alpha(image) else "RGB")
            scaled = self._cover(image)
            cropped = self._crop(scaled)
            out = BytesIO()
            cropped.save(out, format="PNG")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise ImageProcessingError(f"Could not normalize image: {exc}") from exc
        logger.debug("Normalized %dx%d image to %dx%d", image.width, image.height, self.size, self.size)
        return out.getvalue()

    def _cover(self, image: Image.Image) -> Image.Image:
        width, height = image.size
        scale = self.size / min(width, height)
        target = (
            max(self.size, round(width * scale)),
            max(self.size, round(height * scale)),
        )
        if target == image.size:
            return image
        return image.resize(target, Image.Resampling.LANCZOS)

    def _crop(self, image: Image.Image) -> Image.Image:
        width, height = image.size
        excess = max(width, height) - self.size
        if excess == 0:
            return image
        horizontal = width > height
        step = max(1, excess // self.search_steps)
        offsets = sorted(set(range(0, excess + 1, step)) | {excess})
        centre = excess / 2

        def window(offset: int) -> tuple[int, int, int, int]:
            if horizontal:
                return (offset, 0, offset + self.size, self.size)
            return (0, offset, self.size, offset + self.size)

        best = max(
            offsets,
            key=lambda offset: (entropy(image.crop(window(offset))), -abs(offset - centre)),
        )
        return image.crop(window(best))


def entropy(image: Image.Image) -> float:
    histogram = image.convert("L").histogram()
    total = sum(histogram)
    if not total:
        return 0.0
    result = 0.0
    for count in histogram:
        if count:
            p = count / total
            result -= p * math.log2(p)
    return result


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info)
