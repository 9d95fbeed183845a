"""Time-driven figure transforms: dance sway, idle float, fit-to-frame.

Also holds the two small per-tick state machines the transforms read:
the entrance fade-in and the full-match intensity event.
"""

from __future__ import annotations

import math

from dollforge.constants import (
    DANCE_MAX_DEGREES,
    DANCE_TIME_STEP,
    FADE_IN_STEP,
    FIT_MARGIN,
    FLOAT_AMPLITUDE,
    FLOAT_TIME_STEP,
    INTENSITY_ARM_TICKS,
    INTENSITY_STEP,
)
from dollforge.geometry import Matrix
from dollforge.models import (
    FULL_MATCH_CHARACTER,
    OVERSIZED_LEGS_CHARACTER,
    Character,
    Selection,
)


def ease_in_cubic(x: float) -> float:
    return x * x * x


def approach(current: float, target: float, amount: float) -> float:
    """Move *current* toward *target* by *amount* without overshooting."""
    if current < target:
        return min(current + amount, target)
    return max(current - amount, target)


def round_half_up(value: float) -> int:
    """Round like a canvas would: halves go toward +infinity."""
    return math.floor(value + 0.5)


class DanceSway:
    """Rocks the figure about the canvas center while dancing.

    The angle is ``sin(t) * 20deg * (1 - intensity)`` and ``t`` advances by
    ``0.1 * (1 - intensity)`` per tick.  Stopping the dance resets ``t``.
    """

    def __init__(self) -> None:
        self.time = 0.0

    def step(
        self, width: float, height: float, dancing: bool, intensity: float = 0.0
    ) -> Matrix:
        """Return this tick's sway matrix and advance the clock."""
        if not dancing:
            self.time = 0.0
            return Matrix()

        damping = 1.0 - intensity
        mtx = (
            Matrix()
            .translate(width / 2, height / 2)
            .rotate_degrees(math.sin(self.time) * DANCE_MAX_DEGREES * damping)
            .translate(-width / 2, -height / 2)
        )
        self.time += DANCE_TIME_STEP * damping
        return mtx


class IdleFloat:
    """Gentle vertical bob plus the drop-in entrance offset.

    The bob clock freezes while the intensity event is active.  Both
    offsets are rounded to whole pixels.
    """

    def __init__(self) -> None:
        self.time = 0.0

    def step(self, height: float, fade_in: float, frozen: bool = False) -> Matrix:
        """Return this tick's float matrix and advance the clock."""
        bob = math.sin(self.time) * FLOAT_AMPLITUDE
        mtx = (
            Matrix()
            .translate(0, round_half_up(-ease_in_cubic(fade_in) * height))
            .translate(0, round_half_up(bob))
        )
        if not frozen:
            self.time += FLOAT_TIME_STEP
        return mtx


def fit_to_frame(
    built_top: float,
    built_bottom: float,
    width: float,
    height: float,
    margin: float = FIT_MARGIN,
    legs: Character | None = None,
) -> Matrix:
    """Scale the figure vertically so it stays inside ``[margin, height - margin]``.

    Scaling is uniform and centered horizontally.  Overflow at both ends
    maps the whole extent onto the band.  Overflow at one end only pivots
    on the opposite end (or the margin line, when that end also sits in
    the margin).  The oversized-legs pick is never corrected at the bottom.
    Returns identity when the figure already fits.
    """
    top = built_top - margin
    bottom = built_bottom + margin
    top_pivot = margin if top < 0 else built_top
    bottom_pivot = height - margin if bottom > height else built_bottom
    correct_bottom = bottom > height and legs != OVERSIZED_LEGS_CHARACTER

    mtx = Matrix().translate(width / 2, 0)
    if correct_bottom and top < 0:
        mtx = (
            mtx.translate(0, margin)
            .scale_uniform((height - margin - margin) / (built_bottom - built_top))
            .translate(0, -built_top)
        )
    else:
        if correct_bottom:
            mtx = (
                mtx.translate(0, top_pivot)
                .scale_uniform(
                    (height - top_pivot - margin) / (bottom - top_pivot - margin)
                )
                .translate(0, -top_pivot)
            )
        if top < 0:
            mtx = (
                mtx.translate(0, bottom_pivot)
                .scale_uniform((bottom_pivot - margin) / (bottom_pivot - top - margin))
                .translate(0, -bottom_pivot)
            )
    return mtx.translate(-width / 2, 0)


class FadeIn:
    """Entrance progress: starts at 1 (off-canvas) and eases to 0."""

    def __init__(self, progress: float = 1.0) -> None:
        self.progress = progress

    def update(self) -> float:
        self.progress = approach(self.progress, 0.0, FADE_IN_STEP)
        return self.progress


class IntensityEvent:
    """Full-match event: every slot on the same special character.

    A matching selection arms a 60-tick timer; when it runs out the event
    turns active and its progress climbs to 1.  Any other selection resets
    everything.
    """

    def __init__(self) -> None:
        self.active = False
        self.timer = -1
        self.progress = 0.0

    def reset(self) -> None:
        self.active = False
        self.timer = -1
        self.progress = 0.0

    def on_selection(self, selection: Selection) -> None:
        """Re-evaluate after a pick changes."""
        if not selection.all_match(FULL_MATCH_CHARACTER):
            self.reset()
            return
        self.timer = INTENSITY_ARM_TICKS

    def force(self) -> None:
        """Jump straight to the fully active state."""
        self.active = True
        self.progress = 1.0
        self.timer = -1

    def update(self) -> None:
        """Advance one tick."""
        if self.timer == -1 and not self.active:
            return
        if self.timer >= 0:
            self.timer -= 1
            if self.timer == -1:
                self.active = True
        if self.active and self.progress < 1.0:
            self.progress = approach(self.progress, 1.0, INTENSITY_STEP)
