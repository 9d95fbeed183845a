"""Raster replay of draw commands onto a Pillow RGBA canvas."""

from __future__ import annotations

import io
from collections.abc import Iterable

from PIL import Image, ImageDraw

from dollforge.bounds import BoundsCache
from dollforge.compositor import DrawCommand
from dollforge.errors import RenderError
from dollforge.geometry import Matrix, Vector2
from dollforge.logging import get_logger
from dollforge.models import AttachPoint, BodyPartType
from dollforge.registry import CharacterRegistry

logger = get_logger("renderer")

TORSO_MARKERS = (
    AttachPoint.TORSO,
    AttachPoint.ARM_FRONT,
    AttachPoint.ARM_BACK,
    AttachPoint.LEG_FRONT,
    AttachPoint.LEG_BACK,
    AttachPoint.HEAD,
)
HEAD_MARKERS = (AttachPoint.HAIR, AttachPoint.EYES)


def affine_data(transform: Matrix) -> tuple[float, float, float, float, float, float]:
    """Coefficients for ``Image.transform(..., Image.Transform.AFFINE)``.

    Pillow maps *output* pixels back to *input* pixels, so this is the
    inverse of *transform* reordered to Pillow's row layout.

    Raises:
        RenderError: If *transform* is singular.
    """
    try:
        inv = transform.inverse()
    except ZeroDivisionError as exc:
        raise RenderError(f"Cannot blit with singular transform {transform}") from exc
    return (inv.a, inv.c, inv.e, inv.b, inv.d, inv.f)


def blit(canvas: Image.Image, image: Image.Image, transform: Matrix) -> None:
    """Draw *image* (local origin at 0,0) onto *canvas* through *transform*.

    Nearest-neighbour sampling, matching unsmoothed canvas drawing.
    """
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    placed = image.transform(
        canvas.size,
        Image.Transform.AFFINE,
        data=affine_data(transform),
        resample=Image.Resampling.NEAREST,
        fillcolor=(0, 0, 0, 0),
    )
    canvas.alpha_composite(placed)


def render_frame(
    commands: Iterable[DrawCommand],
    width: int,
    height: int,
) -> Image.Image:
    """Replay *commands* in order onto a fresh transparent canvas.

    Commands whose transform is singular (a zero-scale fit) are skipped.

    Returns:
        A PIL Image of size ``(width, height)`` in RGBA mode.
    """
    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    for command in commands:
        try:
            blit(canvas, command.image, command.transform)
        except RenderError:
            logger.debug(
                "Skipping %s/%s: singular transform",
                command.part.name,
                command.character.name,
            )
    return canvas


def draw_attach_points(
    canvas: Image.Image,
    commands: Iterable[DrawCommand],
    registry: CharacterRegistry,
    radius: float = 7.5,
) -> None:
    """Mark torso and head attach points in red, through each part's transform."""
    draw = ImageDraw.Draw(canvas)
    for command in commands:
        if command.part is BodyPartType.TORSO:
            points = TORSO_MARKERS
        elif command.part is BodyPartType.HEAD:
            points = HEAD_MARKERS
        else:
            continue
        for point in points:
            local = registry.attach_point(command.character, point).position
            at = command.transform.apply(local)
            draw.ellipse(
                (at.x - radius, at.y - radius, at.x + radius, at.y + radius),
                fill=(255, 0, 0, 255),
            )


def draw_part_bounds(
    canvas: Image.Image,
    commands: Iterable[DrawCommand],
    bounds: BoundsCache,
    width: int = 3,
) -> None:
    """Outline each part's opaque bounds in yellow, through its transform."""
    draw = ImageDraw.Draw(canvas)
    for command in commands:
        box = bounds.bounds_of(command.part, command.character)
        if box is None:
            continue
        corners = [
            command.transform.apply(Vector2(x, y))
            for x, y in (
                (box.x_min, box.y_min),
                (box.x_max, box.y_min),
                (box.x_max, box.y_max),
                (box.x_min, box.y_max),
                (box.x_min, box.y_min),
            )
        ]
        draw.line([(c.x, c.y) for c in corners], fill=(255, 255, 0, 255), width=width)


def frame_to_png_bytes(image: Image.Image) -> bytes:
    """Serialize a PIL Image to PNG bytes."""
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()
