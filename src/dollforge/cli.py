"""Command-line interface for DollForge.

Provides commands for rendering a still of an assembled character,
validating a character registry and listing the available characters.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from dollforge.assets import PartLibrary
from dollforge.config import DollConfig, load_config
from dollforge.errors import DollForgeError
from dollforge.logging import get_logger, setup_logging
from dollforge.models import BodyPartType, Character
from dollforge.registry import CharacterRegistry, load_registry
from dollforge.renderer import draw_attach_points, draw_part_bounds, frame_to_png_bytes
from dollforge.scene import Scene

console = Console()
logger = get_logger("cli")


def _setup_logging(verbose: bool) -> None:
    """Configure logging based on verbose flag."""
    if verbose:
        setup_logging(level=logging.DEBUG, verbose=True)
    else:
        setup_logging(level=logging.WARNING)


def _picked_characters(config: DollConfig) -> list[Character]:
    sel = config.selection
    picks = [sel.head, sel.hair, sel.torso, sel.arms, sel.legs]
    return sorted({c for c in picks if c is not None})


def _build_scene(config: DollConfig, registry: CharacterRegistry) -> Scene:
    library = PartLibrary.from_directory(
        config.assets_dir, registry, characters=_picked_characters(config)
    )
    scene = Scene(
        registry,
        library,
        width=config.canvas.width,
        height=config.canvas.height,
        margin=config.canvas.margin,
        selection=config.selection,
        fade_in=config.effects.fade_in,
        outline=config.effects.outline,
    )
    scene.dancing = config.effects.dancing
    return scene


@click.group()
@click.version_option(package_name="dollforge")
def main() -> None:
    """DollForge: mix-and-match paper-doll character compositor."""
    pass


@main.command()
@click.argument(
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output PNG path (overrides config)",
)
@click.option(
    "--frames",
    "-n",
    type=click.IntRange(min=1),
    help="Ticks to simulate before capturing (overrides config)",
)
@click.option(
    "--no-outline",
    is_flag=True,
    help="Skip the outline/shadow post-filter",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable detailed logging",
)
def render(
    config_path: Path,
    output: Path | None,
    frames: int | None,
    no_outline: bool,
    verbose: bool,
) -> None:
    """Render a still PNG of the character described by CONFIG_PATH.

    CONFIG_PATH: Path to the scene YAML file

    Example:

        \b
        dollforge render scenes/heather.yaml -o heather.png
        dollforge render scenes/mix.yaml -o mix.png --frames 30 --no-outline
    """
    _setup_logging(verbose)

    try:
        with console.status(f"[bold blue]Loading scene from {config_path}..."):
            config = load_config(config_path)
            registry = load_registry(config.registry_path)
            scene = _build_scene(config, registry)

        if no_outline:
            scene.outline = False
        output_path = output or (Path(config.output_path) if config.output_path else None)
        if output_path is None:
            console.print(
                "[bold red]✗[/] No output path. Use --output or set output_path in config."
            )
            sys.exit(1)

        ticks = frames or config.frames
        for _ in range(ticks - 1):
            scene.build_frame()
        image = scene.render()

        frame = scene.last_frame
        if frame is not None and config.effects.show_part_bounds:
            draw_part_bounds(image, frame.commands, scene.compositor.bounds)
        if frame is not None and config.effects.show_attach_points:
            draw_attach_points(image, frame.commands, registry)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(frame_to_png_bytes(image))
        logger.info("Saved frame %d to %s", scene.ticks, output_path)

        extent = scene.get_vertical_extent()
        console.print(f"[bold green]✓[/] Rendered [bold]{output_path}[/]")
        console.print(
            f"  {len(frame.commands) if frame else 0} parts, {ticks} tick(s), "
            f"{config.canvas.width}x{config.canvas.height}"
        )
        if extent is not None:
            console.print(f"  Extent: {extent.top:.1f} .. {extent.bottom:.1f}")

    except (DollForgeError, FileNotFoundError) as e:
        console.print(f"[bold red]✗[/] Render failed: {e}")
        sys.exit(1)


@main.command()
@click.option(
    "--registry",
    "registry_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Registry YAML to check (default: the packaged registry)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable detailed logging",
)
def validate(registry_path: Path | None, verbose: bool) -> None:
    """Validate a character registry.

    Checks that every character defines every attach point and that every
    depth order lists each body part exactly once.

    Example:

        \b
        dollforge validate
        dollforge validate --registry my_characters.yaml
    """
    _setup_logging(verbose)

    try:
        registry = load_registry(registry_path)
    except DollForgeError as e:
        console.print(f"[bold red]✗[/] Validation failed: {e}")
        sys.exit(1)

    console.print("[bold green]✓[/] Registry is valid")
    console.print(f"  Characters: {len(registry.characters)}")
    overrides = ", ".join(c.name.title() for c in registry.overridden_torsos)
    console.print(f"  Depth overrides: {overrides or 'none'}")


@main.command()
@click.option(
    "--registry",
    "registry_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Registry YAML to list (default: the packaged registry)",
)
def characters(registry_path: Path | None) -> None:
    """List the characters with their scale factors and parts."""
    try:
        registry = load_registry(registry_path)
    except DollForgeError as e:
        console.print(f"[bold red]✗[/] {e}")
        sys.exit(1)

    table = Table(title="Characters")
    table.add_column("Character", style="bold")
    table.add_column("Asset")
    table.add_column("Scale", justify="right")
    table.add_column("Parts", justify="right")
    table.add_column("Depth order")
    table.add_column("Extras")

    for info in registry.characters:
        extras = [
            part.asset_stem
            for part in (
                BodyPartType.TAIL,
                BodyPartType.GHOST_TAIL,
                BodyPartType.ARM_BACK_SAME_OUTLINE,
            )
            if info.has_part(part)
        ]
        table.add_row(
            info.character.name.title(),
            info.asset_name,
            f"{info.scale_factor:g}",
            str(len(info.parts)),
            "override" if registry.has_override(info.character) else "default",
            ", ".join(extras),
        )
    console.print(table)


if __name__ == "__main__":
    main()
