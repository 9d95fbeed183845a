"""Tests for dollforge.renderer: affine blits, replay and debug overlays."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from dollforge.bounds import BoundsCache
from dollforge.compositor import DrawCommand
from dollforge.errors import RenderError
from dollforge.geometry import Matrix
from dollforge.models import BodyPartType, Character
from dollforge.registry import CharacterRegistry
from dollforge.renderer import (
    affine_data,
    blit,
    draw_attach_points,
    draw_part_bounds,
    frame_to_png_bytes,
    render_frame,
)
from synthetic_parts import make_part

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def _command(
    image: Image.Image,
    transform: Matrix,
    part: BodyPartType = BodyPartType.TORSO,
    character: Character = Character.HEATHER,
) -> DrawCommand:
    return DrawCommand(part=part, character=character, image=image, transform=transform)


# ---------------------------------------------------------------------------
# blit
# ---------------------------------------------------------------------------


class TestAffineData:
    """Pillow's inverse coefficient layout."""

    def test_translate(self) -> None:
        assert affine_data(Matrix().translate(3, 4)) == (1, 0, -3, 0, 1, -4)

    def test_singular_raises(self) -> None:
        with pytest.raises(RenderError):
            affine_data(Matrix().scale(0, 0))


class TestBlit:
    """Placing artwork through a transform."""

    def test_translate(self) -> None:
        canvas = Image.new("RGBA", (32, 32), (0, 0, 0, 0))
        blit(canvas, make_part(4, 4, color=RED), Matrix().translate(10, 5))
        assert canvas.getpixel((10, 5)) == RED
        assert canvas.getpixel((13, 8)) == RED
        assert canvas.getpixel((14, 5))[3] == 0
        assert canvas.getpixel((9, 5))[3] == 0

    def test_scale(self) -> None:
        canvas = Image.new("RGBA", (32, 32), (0, 0, 0, 0))
        blit(canvas, make_part(4, 4, color=RED), Matrix().translate(10, 10).scale(2, 2))
        assert canvas.getchannel("A").getbbox() == (10, 10, 18, 18)

    def test_rgb_source_converted(self) -> None:
        canvas = Image.new("RGBA", (8, 8), (0, 0, 0, 0))
        blit(canvas, Image.new("RGB", (2, 2), (0, 255, 0)), Matrix())
        assert canvas.getpixel((1, 1)) == (0, 255, 0, 255)


# ---------------------------------------------------------------------------
# render_frame
# ---------------------------------------------------------------------------


class TestRenderFrame:
    """Replaying draw commands in order."""

    def test_size_and_mode(self) -> None:
        img = render_frame([], 64, 48)
        assert img.size == (64, 48)
        assert img.mode == "RGBA"
        assert img.getbbox() is None

    def test_later_commands_draw_on_top(self) -> None:
        commands = [
            _command(make_part(4, 4, color=RED), Matrix().translate(2, 2)),
            _command(make_part(4, 4, color=BLUE), Matrix().translate(4, 4)),
        ]
        img = render_frame(commands, 16, 16)
        assert img.getpixel((3, 3)) == RED
        assert img.getpixel((5, 5)) == BLUE

    def test_singular_transform_skipped(self) -> None:
        commands = [
            _command(make_part(4, 4, color=RED), Matrix().scale(0, 0)),
            _command(make_part(4, 4, color=BLUE), Matrix()),
        ]
        img = render_frame(commands, 8, 8)
        assert img.getpixel((0, 0)) == BLUE


# ---------------------------------------------------------------------------
# Debug overlays
# ---------------------------------------------------------------------------


class TestOverlays:
    """Attach-point markers and part bounds."""

    def test_attach_points_marked(self, registry: CharacterRegistry) -> None:
        canvas = Image.new("RGBA", (640, 480), (0, 0, 0, 0))
        draw_attach_points(canvas, [_command(make_part(), Matrix())], registry)
        assert canvas.getpixel((265, 363)) == RED  # Heather torso centre
        assert canvas.getpixel((266, 223)) == RED  # Heather neck

    def test_non_anchor_parts_ignored(self, registry: CharacterRegistry) -> None:
        canvas = Image.new("RGBA", (640, 480), (0, 0, 0, 0))
        command = _command(make_part(), Matrix(), part=BodyPartType.ARM_FRONT)
        draw_attach_points(canvas, [command], registry)
        assert canvas.getbbox() is None

    def test_part_bounds_outlined(self) -> None:
        image = make_part(40, 40, box=(10, 10, 29, 29))
        cache = BoundsCache(lambda part, character: image)
        canvas = Image.new("RGBA", (64, 64), (0, 0, 0, 0))
        draw_part_bounds(canvas, [_command(image, Matrix().translate(5, 5))], cache)
        assert canvas.getpixel((25, 15)) == (255, 255, 0, 255)
        assert canvas.getpixel((25, 25))[3] == 0


class TestFrameToPngBytes:
    """PNG serialisation."""

    def test_round_trip(self) -> None:
        data = frame_to_png_bytes(make_part(6, 3))
        assert data[:8] == b"\x89PNG\r\n\x1a\n"
        assert Image.open(io.BytesIO(data)).size == (6, 3)
