"""Opaque-pixel bounds of part artwork and vertical extent of a built figure."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from PIL import Image

from dollforge.constants import OPAQUE_ALPHA_THRESHOLD
from dollforge.geometry import Matrix
from dollforge.logging import get_logger
from dollforge.models import BodyPartType, Character

logger = get_logger("bounds")


@dataclass(frozen=True)
class PartBounds:
    """Tightest box around a part's opaque pixels, in native image pixels.

    Coordinates are inclusive, so ``width`` and ``height`` are one less
    than the pixel count along each axis.
    """

    x_min: int
    y_min: int
    x_max: int
    y_max: int

    @property
    def width(self) -> int:
        return self.x_max - self.x_min

    @property
    def height(self) -> int:
        return self.y_max - self.y_min


@dataclass(frozen=True)
class VerticalExtent:
    """Top and bottom of the built figure in pre-fit canvas space."""

    top: float
    bottom: float


def scan_opaque_bounds(
    image: Image.Image, threshold: int = OPAQUE_ALPHA_THRESHOLD
) -> PartBounds | None:
    """Scan *image*'s alpha channel for pixels at or above *threshold*.

    Returns:
        The bounds, or ``None`` if no pixel is opaque enough.
    """
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    alpha = image.getchannel("A")
    mask = alpha.point(lambda a: 255 if a >= threshold else 0)
    bbox = mask.getbbox()
    # drop the decoded planes now; bounds are all we keep
    mask.close()
    alpha.close()
    if bbox is None:
        return None
    x0, y0, x1, y1 = bbox
    return PartBounds(x_min=x0, y_min=y0, x_max=x1 - 1, y_max=y1 - 1)


ImageLookup = Callable[[BodyPartType, Character], "Image.Image | None"]


class BoundsCache:
    """Process-lifetime cache of part bounds, computed lazily on first use.

    An entry is written once per ``(part, character)`` and never
    invalidated.  ``None`` results (no image, fully transparent) are
    cached too.

    Args:
        lookup: Returns the main image for a part, or ``None``.
    """

    def __init__(self, lookup: ImageLookup) -> None:
        self._lookup = lookup
        self._cache: dict[tuple[BodyPartType, Character], PartBounds | None] = {}
        self.scan_count = 0

    def bounds_of(self, part: BodyPartType, character: Character) -> PartBounds | None:
        key = (part, character)
        if key in self._cache:
            return self._cache[key]

        image = self._lookup(part, character)
        bounds: PartBounds | None = None
        if image is not None:
            self.scan_count += 1
            bounds = scan_opaque_bounds(image)
            logger.debug(
                "Bounds for %s/%s: %s", part.name, character.name, bounds
            )
        self._cache[key] = bounds
        return bounds

    def __contains__(self, key: tuple[BodyPartType, Character]) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)


class ExtentTracker:
    """Running top/bottom of every placed part during one figure build."""

    def __init__(self) -> None:
        self.top = float("inf")
        self.bottom = float("-inf")
        self.recorded = 0

    def reset(self) -> None:
        self.top = float("inf")
        self.bottom = float("-inf")
        self.recorded = 0

    def record(self, transform: Matrix, bounds: PartBounds | None) -> None:
        """Fold a placed part into the extent.  ``None`` bounds are ignored."""
        if bounds is None:
            return
        parts = transform.decompose()
        self.top = min(self.top, parts.translate.y + bounds.y_min * parts.scale.y)
        self.bottom = max(
            self.bottom, parts.translate.y + bounds.y_max * parts.scale.y
        )
        self.recorded += 1

    def extent(self) -> VerticalExtent | None:
        """The extent so far, or ``None`` before anything was recorded."""
        if not self.recorded:
            return None
        return VerticalExtent(top=self.top, bottom=self.bottom)
