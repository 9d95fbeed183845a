"""Shared constants for figure placement, animation and post-processing.

Pixel values are in canvas space unless noted.  Per-tick increments
assume one build per animation tick at 60 ticks/s.
"""

# ---------------------------------------------------------------------------
# Canvas & fit
# ---------------------------------------------------------------------------

DEFAULT_CANVAS_WIDTH: int = 640
DEFAULT_CANVAS_HEIGHT: int = 480

# Space kept free above and below the figure by the fit-to-frame transform
FIT_MARGIN: float = 15.0

# Root scale applied on top of 1 / scale_factor(torso)
ROOT_SCALE: float = 0.9

# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------

# Alpha at or above this value counts as opaque (~50%)
OPAQUE_ALPHA_THRESHOLD: int = 127

# ---------------------------------------------------------------------------
# Animation
# ---------------------------------------------------------------------------

DANCE_MAX_DEGREES: float = 20.0
DANCE_TIME_STEP: float = 0.1

FLOAT_AMPLITUDE: float = 2.0
# pi / 60: one float cycle every two seconds at 60 ticks/s
FLOAT_TIME_STEP: float = 0.0523598666666667

FADE_IN_STEP: float = 0.05

# Full-match ("all Boomhauer") event
INTENSITY_ARM_TICKS: int = 60
INTENSITY_STEP: float = 0.0025
INTENSITY_ROOT_BOOST: float = 0.2

# Randomize jackpot: once more than JACKPOT_MIN_HITS randomizes have run, a
# roll of JACKPOT_ROLL_HIT in [0, JACKPOT_ROLL_MAX] forces the full-match event
JACKPOT_MIN_HITS: int = 10
JACKPOT_ROLL_MAX: int = 40
JACKPOT_ROLL_HIT: int = 5
# Randomizes ignored after a repeat jackpot; one entry is drawn uniformly
JACKPOT_BREAKS: tuple[int, ...] = (0,) * 9 + (1,) * 7 + (2,) * 4 + (4,)

# ---------------------------------------------------------------------------
# Outline / shadow post-filter
# ---------------------------------------------------------------------------

# 12-tap ring sampled around each pixel, in pixels
OUTLINE_RING: tuple[tuple[int, int], ...] = (
    (1, 0),
    (-1, 0),
    (0, 1),
    (0, -1),
    (2, 0),
    (-2, 0),
    (0, 2),
    (0, -2),
    (1, 1),
    (-1, 1),
    (1, -1),
    (-1, -1),
)

# Sample offset for the drop shadow ring
SHADOW_OFFSET: tuple[int, int] = (10, -10)
