"""Tests for dollforge.animation: fit-to-frame, dance, float, fade, intensity."""

from __future__ import annotations

import math

import pytest

from dollforge.animation import (
    DanceSway,
    FadeIn,
    IdleFloat,
    IntensityEvent,
    approach,
    ease_in_cubic,
    fit_to_frame,
    round_half_up,
)
from dollforge.constants import FLOAT_TIME_STEP, INTENSITY_ARM_TICKS, INTENSITY_STEP
from dollforge.geometry import Matrix, Vector2
from dollforge.models import OVERSIZED_LEGS_CHARACTER, Character, Selection

W, H, M = 640, 480, 15.0


def _y(mtx: Matrix, y: float) -> float:
    return mtx.apply(Vector2(W / 2, y)).y


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    """Tests for easing, approach and rounding."""

    def test_ease_in_cubic(self) -> None:
        assert ease_in_cubic(0.5) == 0.125

    def test_approach_never_overshoots(self) -> None:
        assert approach(0.98, 1.0, 0.05) == 1.0
        assert approach(0.02, 0.0, 0.05) == 0.0
        assert approach(0.5, 1.0, 0.1) == pytest.approx(0.6)

    def test_round_half_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(-2.5) == -2
        assert round_half_up(-0.4) == 0


# ---------------------------------------------------------------------------
# fit_to_frame
# ---------------------------------------------------------------------------


class TestFitToFrame:
    """Vertical normalisation into [margin, height - margin]."""

    def test_fits_already(self) -> None:
        assert fit_to_frame(100, 300, W, H, M).is_close(Matrix())

    def test_overflow_both_ends_maps_onto_band(self) -> None:
        mtx = fit_to_frame(-50, 600, W, H, M)
        assert _y(mtx, -50) == pytest.approx(M)
        assert _y(mtx, 600) == pytest.approx(H - M)

    def test_overflow_bottom_pivots_on_top(self) -> None:
        mtx = fit_to_frame(100, 500, W, H, M)
        assert _y(mtx, 100) == pytest.approx(100)
        assert _y(mtx, 500) == pytest.approx(H - M)

    def test_top_inside_margin_counts_as_overflow(self) -> None:
        mtx = fit_to_frame(10, 500, W, H, M)
        assert _y(mtx, 10) == pytest.approx(M)
        assert _y(mtx, 500) == pytest.approx(H - M)

    def test_overflow_top_pivots_on_bottom(self) -> None:
        mtx = fit_to_frame(-20, 300, W, H, M)
        assert _y(mtx, 300) == pytest.approx(300)
        assert _y(mtx, -20) == pytest.approx(M)

    def test_uniform_and_centered(self) -> None:
        mtx = fit_to_frame(-50, 600, W, H, M)
        assert mtx.a == pytest.approx(mtx.d)
        assert mtx.apply(Vector2(W / 2, 0)).x == pytest.approx(W / 2)

    def test_oversized_legs_exempt_from_bottom_fix(self) -> None:
        mtx = fit_to_frame(100, 500, W, H, M, legs=OVERSIZED_LEGS_CHARACTER)
        assert mtx.is_close(Matrix())

    def test_oversized_legs_still_fixes_top(self) -> None:
        mtx = fit_to_frame(-50, 600, W, H, M, legs=OVERSIZED_LEGS_CHARACTER)
        assert _y(mtx, -50) == pytest.approx(M)
        assert _y(mtx, 600) > H - M

    def test_other_legs_not_exempt(self) -> None:
        mtx = fit_to_frame(100, 500, W, H, M, legs=Character.HEATHER)
        assert _y(mtx, 500) == pytest.approx(H - M)


# ---------------------------------------------------------------------------
# DanceSway
# ---------------------------------------------------------------------------


class TestDanceSway:
    """Rotation about the canvas centre while dancing."""

    def test_not_dancing_is_identity_and_resets(self) -> None:
        dance = DanceSway()
        dance.step(W, H, True)
        dance.step(W, H, True)
        assert dance.step(W, H, False) == Matrix()
        assert dance.time == 0.0

    def test_clock_advances(self) -> None:
        dance = DanceSway()
        dance.step(W, H, True)
        assert dance.time == pytest.approx(0.1)

    def test_rotates_about_centre(self) -> None:
        dance = DanceSway()
        dance.step(W, H, True)
        mtx = dance.step(W, H, True)
        centre = mtx.apply(Vector2(W / 2, H / 2))
        assert centre.x == pytest.approx(W / 2)
        assert centre.y == pytest.approx(H / 2)
        angle = mtx.decompose().rotation
        assert angle == pytest.approx(math.radians(math.sin(0.1) * 20))

    def test_full_intensity_freezes(self) -> None:
        dance = DanceSway()
        mtx = dance.step(W, H, True, intensity=1.0)
        assert mtx.is_close(Matrix())
        assert dance.time == 0.0


# ---------------------------------------------------------------------------
# IdleFloat
# ---------------------------------------------------------------------------


class TestIdleFloat:
    """Vertical bob plus the entrance offset."""

    def test_first_tick_at_rest(self) -> None:
        idle = IdleFloat()
        assert idle.step(H, 0.0) == Matrix()
        assert idle.time == pytest.approx(FLOAT_TIME_STEP)

    def test_fade_in_lifts_figure(self) -> None:
        idle = IdleFloat()
        assert idle.step(H, 1.0).f == -H
        assert IdleFloat().step(H, 0.5).f == -60

    def test_bob_is_whole_pixels(self) -> None:
        idle = IdleFloat()
        for _ in range(20):
            mtx = idle.step(H, 0.0)
            assert mtx.f == int(mtx.f)
            assert abs(mtx.f) <= 2

    def test_frozen_keeps_clock(self) -> None:
        idle = IdleFloat()
        idle.step(H, 0.0, frozen=True)
        assert idle.time == 0.0


# ---------------------------------------------------------------------------
# FadeIn / IntensityEvent
# ---------------------------------------------------------------------------


class TestFadeIn:
    """Entrance progress."""

    def test_steps_towards_zero(self) -> None:
        fade = FadeIn()
        assert fade.update() == pytest.approx(0.95)

    def test_settles_at_zero(self) -> None:
        fade = FadeIn()
        for _ in range(25):
            fade.update()
        assert fade.progress == 0.0


class TestIntensityEvent:
    """Full-match event timer and progress."""

    def test_idle_without_match(self) -> None:
        event = IntensityEvent()
        event.on_selection(Selection())
        event.update()
        assert not event.active
        assert event.progress == 0.0

    def test_arms_then_activates(self) -> None:
        event = IntensityEvent()
        event.on_selection(Selection.uniform(Character.BOOMHAUER))
        for _ in range(INTENSITY_ARM_TICKS):
            event.update()
        assert not event.active
        event.update()
        assert event.active
        assert event.progress == pytest.approx(INTENSITY_STEP)

    def test_progress_caps_at_one(self) -> None:
        event = IntensityEvent()
        event.force()
        event.update()
        assert event.progress == 1.0

    def test_mismatch_resets(self) -> None:
        event = IntensityEvent()
        event.force()
        event.on_selection(Selection(hair=None))
        assert not event.active
        assert event.timer == -1
        assert event.progress == 0.0
