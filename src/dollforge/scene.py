"""Interactive scene: user picks, animation clocks and the per-tick build.

:class:`Scene` is what a front end drives.  It owns the mutable bits
(selection, dance toggle, clocks, the full-match event) and, once per
tick, freezes them into a :class:`~dollforge.models.SceneState` and hands
that to the :class:`~dollforge.compositor.Compositor`.
"""

from __future__ import annotations

import random

from PIL import Image

from dollforge.animation import DanceSway, FadeIn, IdleFloat, IntensityEvent
from dollforge.assets import PartProvider
from dollforge.bounds import VerticalExtent
from dollforge.compositor import Compositor, DrawCommand, Frame
from dollforge.constants import (
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    FIT_MARGIN,
    JACKPOT_BREAKS,
    JACKPOT_MIN_HITS,
    JACKPOT_ROLL_HIT,
    JACKPOT_ROLL_MAX,
)
from dollforge.effects import post_process
from dollforge.logging import get_logger, tick_logger
from dollforge.models import FULL_MATCH_CHARACTER, Character, SceneState, Selection
from dollforge.registry import CharacterRegistry
from dollforge.renderer import render_frame

logger = get_logger("scene")


def randomize_selection(rng: random.Random | None = None) -> Selection:
    """Pick every slot uniformly from the playable characters."""
    rng = rng or random.Random()
    pool = Character.playable()
    return Selection(
        head=rng.choice(pool),
        hair=rng.choice(pool),
        torso=rng.choice(pool),
        arms=rng.choice(pool),
        legs=rng.choice(pool),
    )


class Scene:
    """A character being assembled and animated on a fixed-size canvas.

    Args:
        registry: Static character tables.
        provider: Artwork source.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        margin: Fit-to-frame margin in pixels.
        selection: Initial picks (all Heather by default).
        fade_in: Initial entrance progress; 0 skips the entrance.
        outline: Run the outline/shadow post-filter in :meth:`render`.
    """

    def __init__(
        self,
        registry: CharacterRegistry,
        provider: PartProvider,
        width: int = DEFAULT_CANVAS_WIDTH,
        height: int = DEFAULT_CANVAS_HEIGHT,
        margin: float = FIT_MARGIN,
        selection: Selection | None = None,
        fade_in: float = 1.0,
        outline: bool = True,
    ) -> None:
        self.compositor = Compositor(registry, provider, width, height, margin)
        self.selection = selection or Selection()
        self.dancing = False
        self.outline = outline
        self.ticks = 0
        self.dance = DanceSway()
        self.idle = IdleFloat()
        self.fade = FadeIn(fade_in)
        self.intensity = IntensityEvent()
        self.intensity.on_selection(self.selection)
        self._last_frame: Frame | None = None
        self.random_hits = 0
        # randomize calls still to ignore after a repeat jackpot
        self.jackpot_breaks = 0
        self._hit_jackpot = False

    @property
    def width(self) -> int:
        return self.compositor.width

    @property
    def height(self) -> int:
        return self.compositor.height

    # -- user input ---------------------------------------------------------

    def select(self, **picks: object) -> Selection:
        """Change one or more picks, e.g. ``scene.select(hair=None)``.

        Values may be characters, names, or ``None`` for hair/arms/legs.
        """
        unknown = set(picks) - set(Selection.model_fields)
        if unknown:
            raise ValueError(f"Unknown selection slot(s): {', '.join(sorted(unknown))}")
        self.selection = self.selection.model_validate(
            {**self.selection.model_dump(), **picks}
        )
        self.intensity.on_selection(self.selection)
        logger.debug("Selection now %s", self.selection)
        return self.selection

    def randomize(self, rng: random.Random | None = None) -> Selection:
        """Re-roll every pick.

        Once more than ``JACKPOT_MIN_HITS`` randomizes have run, a lucky roll
        picks the full-match character in every slot and forces its event
        straight to full intensity.  A repeat jackpot may then ignore the
        next few randomize calls.
        """
        rng = rng or random.Random()
        if self.jackpot_breaks:
            self.jackpot_breaks -= 1
            return self.selection

        if (
            self.random_hits > JACKPOT_MIN_HITS
            and rng.randint(0, JACKPOT_ROLL_MAX) == JACKPOT_ROLL_HIT
        ):
            self.selection = Selection.uniform(FULL_MATCH_CHARACTER)
            self.intensity.force()
            self.jackpot_breaks = rng.choice(JACKPOT_BREAKS) if self._hit_jackpot else 0
            self._hit_jackpot = True
            logger.info("Randomize jackpot after %d hits", self.random_hits)
        else:
            self.selection = randomize_selection(rng)
            self.intensity.on_selection(self.selection)
        self.random_hits += 1
        return self.selection

    def toggle_dance(self) -> bool:
        self.dancing = not self.dancing
        return self.dancing

    # -- per tick -----------------------------------------------------------

    def state(self) -> SceneState:
        """Snapshot of everything the next build reads."""
        return SceneState(
            selection=self.selection,
            dancing=self.dancing,
            intensity=self.intensity.progress,
            intensity_active=self.intensity.active,
            fade_in=self.fade.progress,
        )

    def build_frame(self) -> list[DrawCommand]:
        """Advance one tick and return the ordered draw commands."""
        self.fade.update()
        self.intensity.update()
        state = self.state()

        dance = self.dance.step(self.width, self.height, state.dancing, state.intensity)
        float_ = self.idle.step(
            self.height, state.fade_in, frozen=state.intensity_active
        )
        frame = self.compositor.compose(state, dance=dance, float_=float_)
        self._last_frame = frame
        self.ticks += 1
        tick_logger(logger, self.ticks).debug(
            "%d draw commands, extent %s", len(frame.commands), frame.extent
        )
        return frame.commands

    def get_vertical_extent(self) -> VerticalExtent | None:
        """Figure extent from the latest build (``None`` before the first)."""
        if self._last_frame is None:
            return None
        return self._last_frame.extent

    @property
    def last_frame(self) -> Frame | None:
        return self._last_frame

    def render(self) -> Image.Image:
        """Advance one tick and rasterize it, post-filter included."""
        commands = self.build_frame()
        image = render_frame(commands, self.width, self.height)
        return post_process(image, enabled=self.outline)
