"""YAML scene configuration: canvas, asset directory and the five picks."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from dollforge.constants import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH, FIT_MARGIN
from dollforge.errors import ConfigError
from dollforge.logging import get_logger
from dollforge.models import Selection

logger = get_logger("config")


class CanvasConfig(BaseModel):
    """Output canvas settings.

    Attributes:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        margin: Fit-to-frame margin in pixels.
    """

    width: int = Field(default=DEFAULT_CANVAS_WIDTH, gt=0)
    height: int = Field(default=DEFAULT_CANVAS_HEIGHT, gt=0)
    margin: float = Field(default=FIT_MARGIN, ge=0)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


class EffectsConfig(BaseModel):
    """Visual extras.

    Attributes:
        dancing: Start with the dance sway on.
        outline: Run the outline/shadow post-filter.
        fade_in: Start the drop-in entrance from this progress (0 = none).
        show_attach_points: Overlay attach-point markers.
        show_part_bounds: Overlay part bounds rectangles.
    """

    dancing: bool = False
    outline: bool = True
    fade_in: float = Field(default=0.0, ge=0.0, le=1.0)
    show_attach_points: bool = False
    show_part_bounds: bool = False


class DollConfig(BaseModel):
    """Top-level scene configuration.

    Attributes:
        selection: The five part picks.
        canvas: Canvas size and fit margin.
        effects: Animation and post-filter switches.
        assets_dir: Directory holding the part artwork.
        registry_path: Optional replacement for the packaged registry.
        frames: Ticks to simulate before capturing a still.
        output_path: Where the still is written.
    """

    selection: Selection = Selection()
    canvas: CanvasConfig = CanvasConfig()
    effects: EffectsConfig = EffectsConfig()
    assets_dir: str = "assets"
    registry_path: str | None = None
    frames: int = Field(default=1, ge=1)
    output_path: str = ""


def _parse_yaml(path: Path) -> dict[str, Any]:
    """Read *path* and require a top-level mapping.

    Raises:
        ConfigError: If the YAML is malformed or not a mapping.
    """
    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Malformed YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}"
        )
    return data


def load_config(path: str | Path) -> DollConfig:
    """Load and validate a scene configuration file.

    Relative ``assets_dir`` / ``registry_path`` values are resolved against
    the config file's directory.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigError: If the content is malformed or fails validation.
    """
    resolved = Path(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"Config file not found: {resolved}")
    data = _parse_yaml(resolved)

    if "selection" not in data:
        raise ConfigError(f"Config {resolved} is missing the 'selection' section")
    for section in ("selection", "canvas", "effects"):
        if section in data and not isinstance(data[section], dict):
            raise ConfigError(
                f"'{section}' section must be a YAML mapping, "
                f"got {type(data[section]).__name__}"
            )

    try:
        config = DollConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {resolved}: {exc}") from exc

    base = resolved.parent
    updates: dict[str, Any] = {}
    if not Path(config.assets_dir).is_absolute():
        updates["assets_dir"] = str(base / config.assets_dir)
    if config.registry_path and not Path(config.registry_path).is_absolute():
        updates["registry_path"] = str(base / config.registry_path)
    if updates:
        config = config.model_copy(update=updates)

    logger.info(
        "Loaded config %s: torso=%s head=%s, %dx%d",
        resolved,
        config.selection.torso.name,
        config.selection.head.name,
        config.canvas.width,
        config.canvas.height,
    )
    return config
