"""Draw-queue compositor: walks the skeleton, queues parts, depth-sorts, replays.

One call to :meth:`Compositor.compose` is one full figure build:

1. seed a :class:`~dollforge.attach.TransformStack` with the root
   (torso-centering) matrix;
2. walk torso -> legs -> arms -> head -> hair, pushing attach transforms
   and queuing every part that exists and has a loaded image, while the
   :class:`~dollforge.bounds.ExtentTracker` accumulates the figure's
   vertical extent;
3. solve fit-to-frame from that extent;
4. stable-sort the queue by the torso pick's depth order;
5. wrap each entry as ``dance x float x fit x entry`` for the renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from PIL import Image

from dollforge.animation import fit_to_frame
from dollforge.assets import PartProvider
from dollforge.attach import TransformStack
from dollforge.bounds import BoundsCache, ExtentTracker, VerticalExtent
from dollforge.constants import (
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    FIT_MARGIN,
    INTENSITY_ROOT_BOOST,
    ROOT_SCALE,
)
from dollforge.geometry import Matrix
from dollforge.logging import get_logger
from dollforge.models import (
    AttachPoint,
    BodyPartType,
    Character,
    SceneState,
    Selection,
)
from dollforge.registry import CharacterRegistry

logger = get_logger("compositor")

TORSO_LAYERS = (
    BodyPartType.TORSO,
    BodyPartType.TORSO_FRONT,
    BodyPartType.TORSO_BACK,
    BodyPartType.TORSO_UNDER,
    BodyPartType.TAIL,
)
HEAD_LAYERS = (BodyPartType.HEAD_BACK, BodyPartType.HEAD, BodyPartType.HEAD_FRONT)
HAIR_LAYERS = (BodyPartType.HAIR_BACK, BodyPartType.HAIR_FRONT)


@dataclass(frozen=True)
class DrawQueueEntry:
    """A queued part with the stack transform captured when it was placed."""

    part: BodyPartType
    character: Character
    image: Image.Image
    transform: Matrix


@dataclass(frozen=True)
class DrawCommand:
    """Blit *image* at its local origin under *transform* (canvas space)."""

    part: BodyPartType
    character: Character
    image: Image.Image
    transform: Matrix


@dataclass
class Frame:
    """Output of one build.

    Attributes:
        commands: Depth-sorted draw commands with composite transforms.
        extent: Pre-fit vertical extent, ``None`` if nothing was placed.
        fit: The fit-to-frame matrix that was applied.
        queue: The sorted queue entries (pre-composite transforms).
    """

    commands: list[DrawCommand] = field(default_factory=list)
    extent: VerticalExtent | None = None
    fit: Matrix = field(default_factory=Matrix)
    queue: list[DrawQueueEntry] = field(default_factory=list)


def root_matrix(
    registry: CharacterRegistry,
    torso: Character,
    width: float,
    height: float,
    intensity_active: bool = False,
    intensity: float = 0.0,
) -> Matrix:
    """Center the torso's ``TORSO`` point on the canvas at normalized size."""
    mtx = Matrix().translate(width / 2, height / 2)
    if intensity_active:
        mtx = mtx.scale_uniform(1 + intensity * INTENSITY_ROOT_BOOST)
    mtx = mtx.scale_uniform((1 / registry.scale_factor(torso)) * ROOT_SCALE)
    torso_point = registry.attach_point(torso, AttachPoint.TORSO).position
    return mtx.translate_vector(torso_point.negative())


def depth_sort(
    queue: list[DrawQueueEntry], order_index: dict[BodyPartType, int]
) -> list[DrawQueueEntry]:
    """Stable sort by each entry's position in the depth order."""
    return sorted(queue, key=lambda entry: order_index[entry.part])


class Compositor:
    """Builds draw lists for a registry / artwork pair.

    The bounds cache persists across builds; queue, stack and extent are
    rebuilt on every :meth:`compose` call.

    Args:
        registry: Static character tables.
        provider: Artwork source.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        margin: Fit-to-frame margin in pixels.
    """

    def __init__(
        self,
        registry: CharacterRegistry,
        provider: PartProvider,
        width: int = DEFAULT_CANVAS_WIDTH,
        height: int = DEFAULT_CANVAS_HEIGHT,
        margin: float = FIT_MARGIN,
    ) -> None:
        self.registry = registry
        self.provider = provider
        self.width = width
        self.height = height
        self.margin = margin
        self.bounds = BoundsCache(provider.main_image)
        self.extent = ExtentTracker()
        self.queue: list[DrawQueueEntry] = []
        self.stack = TransformStack(registry)
        self._no_face = False

    # -- build --------------------------------------------------------------

    def build_queue(self, state: SceneState) -> list[DrawQueueEntry]:
        """Walk the skeleton for *state* and return the unsorted queue."""
        selection = state.selection
        self.queue = []
        self.extent.reset()
        self._no_face = selection.no_face
        self.stack = TransformStack(
            self.registry,
            root_matrix(
                self.registry,
                selection.torso,
                self.width,
                self.height,
                state.intensity_active,
                state.intensity,
            ),
        )

        for part in TORSO_LAYERS:
            self._place(part, selection.torso)
        self._place_legs(selection)
        self._place_arms(selection)
        self._place_head(selection)
        return self.queue

    def _place(self, part: BodyPartType, character: Character | None) -> None:
        if character is None:
            return
        if not self.provider.part_exists(part, character):
            return
        found = self.provider.image_available(part, character)
        if found is None:
            logger.debug("Skipping %s/%s: no image", part.name, character.name)
            return

        transform = self.stack.top
        self.extent.record(transform, self.bounds.bounds_of(part, character))
        self.queue.append(
            DrawQueueEntry(
                part=part,
                character=character,
                image=found.pick(self._no_face),
                transform=transform,
            )
        )

    def _place_legs(self, selection: Selection) -> None:
        legs = selection.legs
        if legs is None:
            return
        torso = selection.torso
        with self.stack.attached(torso, legs, AttachPoint.GHOST_TAIL):
            self._place(BodyPartType.GHOST_TAIL, legs)
        with self.stack.attached(torso, legs, AttachPoint.LEG_BACK):
            self._place(BodyPartType.LEG_BACK, legs)
        with self.stack.attached(torso, legs, AttachPoint.LEG_FRONT):
            self._place(BodyPartType.LEG_FRONT, legs)

    def _place_arms(self, selection: Selection) -> None:
        arms = selection.arms
        if arms is None:
            return
        torso = selection.torso
        with self.stack.attached(torso, arms, AttachPoint.ARM_BACK):
            self._place(BodyPartType.ARM_BACK, arms)
        with self.stack.attached(torso, arms, AttachPoint.ARM_FRONT):
            self._place(BodyPartType.ARM_FRONT, arms)
        # the outline-matched back arm only lines up on its own torso
        if arms == torso:
            with self.stack.attached(torso, arms, AttachPoint.ARM_BACK):
                self._place(BodyPartType.ARM_BACK_SAME_OUTLINE, arms)

    def _place_head(self, selection: Selection) -> None:
        head = selection.head
        with self.stack.attached(selection.torso, head, AttachPoint.HEAD):
            for part in HEAD_LAYERS:
                self._place(part, head)
            if not selection.no_face:
                self._place(BodyPartType.EYE_OVER_HAIR, head)

            hair = selection.hair
            if hair is None:
                return
            point = AttachPoint.EYES if selection.no_face else AttachPoint.HAIR
            with self.stack.attached(head, hair, point):
                for part in HAIR_LAYERS:
                    self._place(part, hair)

    # -- compose ------------------------------------------------------------

    def vertical_extent(self) -> VerticalExtent | None:
        """Extent of the most recent build."""
        return self.extent.extent()

    def fit_matrix(self, legs: Character | None) -> Matrix:
        extent = self.extent.extent()
        if extent is None:
            return Matrix()
        return fit_to_frame(
            extent.top, extent.bottom, self.width, self.height, self.margin, legs
        )

    def compose(
        self,
        state: SceneState,
        dance: Matrix | None = None,
        float_: Matrix | None = None,
    ) -> Frame:
        """Build, fit, sort and wrap one frame.

        Args:
            state: Selection and event state for this tick.
            dance: Dance sway matrix (identity when omitted).
            float_: Idle float matrix (identity when omitted).
        """
        self.build_queue(state)
        fit = self.fit_matrix(state.selection.legs)

        torso = state.selection.torso
        if self.registry.has_override(torso):
            logger.debug("Depth override for torso %s", torso.name)
        ordered = depth_sort(self.queue, self.registry.depth_index(torso))

        outer = (dance or Matrix()).transform_matrix(float_ or Matrix())
        outer = outer.transform_matrix(fit)
        commands = [
            DrawCommand(
                part=entry.part,
                character=entry.character,
                image=entry.image,
                transform=outer.transform_matrix(entry.transform),
            )
            for entry in ordered
        ]
        return Frame(
            commands=commands,
            extent=self.extent.extent(),
            fit=fit,
            queue=ordered,
        )
