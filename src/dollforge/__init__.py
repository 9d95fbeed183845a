"""DollForge: mix-and-match paper-doll character compositor."""

from dollforge.animation import (
    DanceSway,
    FadeIn,
    IdleFloat,
    IntensityEvent,
    fit_to_frame,
)
from dollforge.assets import PartImage, PartLibrary, PartProvider
from dollforge.attach import TransformStack, attach_matrix, ghost_tail_matrix
from dollforge.bounds import (
    BoundsCache,
    ExtentTracker,
    PartBounds,
    VerticalExtent,
    scan_opaque_bounds,
)
from dollforge.compositor import (
    Compositor,
    DrawCommand,
    DrawQueueEntry,
    Frame,
    depth_sort,
    root_matrix,
)
from dollforge.config import DollConfig, load_config
from dollforge.effects import apply_outline, post_process
from dollforge.errors import (
    AssetError,
    ConfigError,
    DollForgeError,
    RegistryError,
    RenderError,
)
from dollforge.geometry import Decomposition, Matrix, Vector2
from dollforge.logging import get_logger, setup_logging
from dollforge.models import (
    AttachPoint,
    AttachPointInfo,
    BodyPartType,
    Character,
    CharacterInfo,
    SceneState,
    Selection,
)
from dollforge.registry import CharacterRegistry, default_registry, load_registry
from dollforge.renderer import (
    draw_attach_points,
    draw_part_bounds,
    frame_to_png_bytes,
    render_frame,
)
from dollforge.scene import Scene, randomize_selection

__all__ = [
    "AssetError",
    "AttachPoint",
    "AttachPointInfo",
    "BodyPartType",
    "BoundsCache",
    "Character",
    "CharacterInfo",
    "CharacterRegistry",
    "Compositor",
    "ConfigError",
    "DanceSway",
    "Decomposition",
    "DollConfig",
    "DollForgeError",
    "DrawCommand",
    "DrawQueueEntry",
    "ExtentTracker",
    "FadeIn",
    "Frame",
    "IdleFloat",
    "IntensityEvent",
    "Matrix",
    "PartBounds",
    "PartImage",
    "PartLibrary",
    "PartProvider",
    "RegistryError",
    "RenderError",
    "Scene",
    "SceneState",
    "Selection",
    "TransformStack",
    "Vector2",
    "VerticalExtent",
    "apply_outline",
    "attach_matrix",
    "default_registry",
    "depth_sort",
    "draw_attach_points",
    "draw_part_bounds",
    "fit_to_frame",
    "frame_to_png_bytes",
    "get_logger",
    "ghost_tail_matrix",
    "load_config",
    "load_registry",
    "post_process",
    "randomize_selection",
    "render_frame",
    "root_matrix",
    "scan_opaque_bounds",
    "setup_logging",
]
