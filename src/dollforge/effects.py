"""Outline and drop-shadow post-filter for the composited figure.

Works on the finished RGBA raster only; it never touches queue, bounds
or selection state, so skipping it changes nothing but the pixels.

For every pixel, the alpha channel is sampled on a fixed 12-tap ring;
the clamped sum is the edge strength.  Sampled in place it gives the
outline, sampled at :data:`~dollforge.constants.SHADOW_OFFSET` it gives
the shadow.  Layering is shadow (black) under outline (light) under the
figure's own colour, which wins wherever it is opaque.
"""

from __future__ import annotations

from PIL import Image, ImageChops

from dollforge.constants import OUTLINE_RING, SHADOW_OFFSET


def ring_strength(alpha: Image.Image, offset: tuple[int, int] = (0, 0)) -> Image.Image:
    """Clamped sum of *alpha* sampled at ``pixel + offset + tap`` for each tap.

    Samples outside the image read as transparent.
    """
    ox, oy = offset
    total = Image.new("L", alpha.size, 0)
    for tx, ty in OUTLINE_RING:
        shifted = Image.new("L", alpha.size, 0)
        # value at p comes from p + (ox + tx, oy + ty)
        shifted.paste(alpha, (-(ox + tx), -(oy + ty)))
        total = ImageChops.add(total, shifted)
    return total


def apply_outline(image: Image.Image) -> Image.Image:
    """Return a copy of *image* with outline and drop shadow added."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    alpha = image.getchannel("A")

    outline = ring_strength(alpha)
    shadow = ring_strength(alpha, SHADOW_OFFSET)

    # mix(shadow_black, outline_grey, outline)
    grey = ImageChops.multiply(outline, outline)
    under_alpha = ImageChops.add(
        ImageChops.multiply(shadow, ImageChops.invert(outline)), grey
    )
    under = Image.merge("RGBA", (grey, grey, grey, under_alpha))

    # mix(under, color, color.a)
    return Image.composite(image, under, alpha)


def post_process(image: Image.Image, enabled: bool = True) -> Image.Image:
    """Apply the outline filter when *enabled*, else return *image* untouched."""
    if not enabled:
        return image
    return apply_outline(image)
