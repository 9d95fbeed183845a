"""Static character registry: attach points, scale factors, parts, depth orders.

The registry is loaded once from YAML (the packaged
``data/characters.yaml`` by default) and never mutated afterwards.  It
must be total: every character defines every concrete attach point, and
every depth order is a permutation of all body-part layers.  Any gap is
reported as :class:`~dollforge.errors.RegistryError` at load time so the
per-tick code can index it without checks.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from dollforge.errors import RegistryError
from dollforge.logging import get_logger
from dollforge.models import (
    AttachPoint,
    AttachPointInfo,
    BodyPartType,
    Character,
    CharacterInfo,
)

logger = get_logger("registry")

DEFAULT_ORDER_KEY = "default"


class CharacterRegistry:
    """Read-only lookup tables keyed by character, attach point and part.

    Args:
        characters: One record per character.
        default_order: Back-to-front layer order used when the torso pick
            has no override.
        overrides: Per-torso-character replacement orders.

    Raises:
        RegistryError: If the tables are not total.
    """

    def __init__(
        self,
        characters: Mapping[Character, CharacterInfo],
        default_order: tuple[BodyPartType, ...],
        overrides: Mapping[Character, tuple[BodyPartType, ...]] | None = None,
    ) -> None:
        self._characters = dict(characters)
        self._default_order = tuple(default_order)
        self._overrides = dict(overrides or {})
        self._depth_index: dict[Character | None, dict[BodyPartType, int]] = {}
        self.validate()
        self._depth_index[None] = _index_of(self._default_order)
        for character, order in self._overrides.items():
            self._depth_index[character] = _index_of(order)

    # -- validation ---------------------------------------------------------

    def validate(self) -> None:
        """Check totality over every character and attach point."""
        missing = [c.name for c in Character if c not in self._characters]
        if missing:
            raise RegistryError(f"Registry has no entry for: {', '.join(missing)}")

        for character, info in self._characters.items():
            if info.character != character:
                raise RegistryError(
                    f"Registry entry keyed {character.name} describes "
                    f"{info.character.name}"
                )
            gaps = [p.name for p in AttachPoint.concrete() if p not in info.attach_points]
            if gaps:
                raise RegistryError(
                    f"{character.name} is missing attach points: {', '.join(gaps)}"
                )
            if AttachPoint.GHOST_TAIL in info.attach_points:
                raise RegistryError(
                    f"{character.name} defines GHOST_TAIL, which is derived from the legs"
                )

        _check_order("default", self._default_order)
        for character, order in self._overrides.items():
            _check_order(character.name, order)

    # -- lookups ------------------------------------------------------------

    def info(self, character: Character) -> CharacterInfo:
        return self._characters[character]

    def attach_point(self, character: Character, point: AttachPoint) -> AttachPointInfo:
        """Return the coordinate record for *point* on *character*.

        Raises:
            RegistryError: For ``GHOST_TAIL``, which has no stored coordinate.
        """
        try:
            return self._characters[character].attach_points[point]
        except KeyError:
            raise RegistryError(
                f"No attach point {point.name} for {character.name}"
            ) from None

    def scale_factor(self, character: Character) -> float:
        return self._characters[character].scale_factor

    def part_exists(self, part: BodyPartType, character: Character) -> bool:
        return part in self._characters[character].parts

    def asset_name(self, character: Character) -> str:
        return self._characters[character].asset_name

    def depth_order(self, torso: Character) -> tuple[BodyPartType, ...]:
        """Layer order for a torso pick, falling back to the default order."""
        return self._overrides.get(torso, self._default_order)

    def depth_index(self, torso: Character) -> dict[BodyPartType, int]:
        """``{part: position}`` for :meth:`depth_order`, precomputed."""
        if torso in self._depth_index:
            return self._depth_index[torso]
        return self._depth_index[None]

    def has_override(self, torso: Character) -> bool:
        return torso in self._overrides

    @property
    def characters(self) -> list[CharacterInfo]:
        return [self._characters[c] for c in Character]

    @property
    def overridden_torsos(self) -> list[Character]:
        return sorted(self._overrides)

    # -- construction -------------------------------------------------------

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CharacterRegistry:
        """Build from the parsed YAML layout (``characters`` + ``depth_orders``).

        Raises:
            RegistryError: On structural or validation problems.
        """
        raw_chars = data.get("characters")
        if not isinstance(raw_chars, list):
            raise RegistryError("'characters' must be a YAML sequence")

        characters: dict[Character, CharacterInfo] = {}
        for entry in raw_chars:
            try:
                info = CharacterInfo.model_validate(entry)
            except ValidationError as exc:
                raise RegistryError(f"Invalid character entry: {exc}") from exc
            if info.character in characters:
                raise RegistryError(f"Duplicate character entry: {info.character.name}")
            characters[info.character] = info

        raw_orders = data.get("depth_orders")
        if not isinstance(raw_orders, dict) or DEFAULT_ORDER_KEY not in raw_orders:
            raise RegistryError("'depth_orders' must be a mapping with a 'default' entry")

        overrides: dict[Character, tuple[BodyPartType, ...]] = {}
        default_order: tuple[BodyPartType, ...] = ()
        for key, order in raw_orders.items():
            parts = _parse_order(key, order)
            if key == DEFAULT_ORDER_KEY:
                default_order = parts
                continue
            try:
                overrides[Character.parse(key)] = parts
            except ValueError as exc:
                raise RegistryError(f"Unknown depth order key: {key!r}") from exc

        return cls(characters, default_order, overrides)


def _index_of(order: tuple[BodyPartType, ...]) -> dict[BodyPartType, int]:
    return {part: i for i, part in enumerate(order)}


def _parse_order(key: str, order: Any) -> tuple[BodyPartType, ...]:
    if not isinstance(order, list):
        raise RegistryError(f"Depth order {key!r} must be a YAML sequence")
    try:
        return tuple(BodyPartType.parse(p) for p in order)
    except ValueError as exc:
        raise RegistryError(f"Depth order {key!r}: {exc}") from exc


def _check_order(label: str, order: tuple[BodyPartType, ...]) -> None:
    if sorted(order) != sorted(BodyPartType) or len(order) != len(BodyPartType):
        raise RegistryError(
            f"Depth order {label!r} must list every body part exactly once"
        )


def load_registry(path: str | Path | None = None) -> CharacterRegistry:
    """Load and validate a registry YAML file.

    Args:
        path: Registry file; the packaged ``data/characters.yaml`` when None.

    Raises:
        RegistryError: If the file is missing, malformed or not total.
    """
    if path is None:
        source = resources.files("dollforge").joinpath("data/characters.yaml")
        text = source.read_text(encoding="utf-8")
        origin = "packaged registry"
    else:
        resolved = Path(path)
        if not resolved.is_file():
            raise RegistryError(f"Registry file not found: {resolved}")
        text = resolved.read_text(encoding="utf-8")
        origin = str(resolved)

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RegistryError(f"Malformed YAML in {origin}: {exc}") from exc
    if not isinstance(data, dict):
        raise RegistryError(f"Expected a YAML mapping at top level of {origin}")

    registry = CharacterRegistry.from_mapping(data)
    logger.info(
        "Loaded %s: %d characters, %d depth overrides",
        origin,
        len(registry.characters),
        len(registry.overridden_torsos),
    )
    return registry


@lru_cache(maxsize=1)
def default_registry() -> CharacterRegistry:
    """The packaged registry, loaded once per process."""
    return load_registry()
