"""Part artwork providers.

The compositor never loads files itself.  It asks a :class:`PartProvider`
for the image of a ``(part, character)`` pair and skips the part when the
answer is ``None``.  :class:`PartLibrary` is the stock provider: an
in-memory table that can be filled from a directory of PNGs laid out as
``char/<part>[_noface]_<character>.png``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from dollforge.errors import AssetError
from dollforge.logging import get_logger
from dollforge.models import BodyPartType, Character
from dollforge.registry import CharacterRegistry

logger = get_logger("assets")

NO_FACE_SUFFIX = "noface"


@dataclass(frozen=True)
class PartImage:
    """Main artwork plus the variant drawn while the no-face hair is picked.

    ``no_face`` falls back to ``main`` for parts without a dedicated variant.
    """

    main: Image.Image
    no_face: Image.Image | None = None

    def pick(self, no_face: bool) -> Image.Image:
        if no_face and self.no_face is not None:
            return self.no_face
        return self.main


class PartProvider(ABC):
    """Source of part artwork and existence flags."""

    @abstractmethod
    def image_available(
        self, part: BodyPartType, character: Character
    ) -> PartImage | None:
        """Return the loaded artwork, or ``None`` if absent / not loaded."""

    @abstractmethod
    def part_exists(self, part: BodyPartType, character: Character) -> bool:
        """Whether *character* has artwork for *part* at all."""

    def main_image(
        self, part: BodyPartType, character: Character
    ) -> Image.Image | None:
        """Main image lookup, shaped for :class:`~dollforge.bounds.BoundsCache`."""
        if not self.part_exists(part, character):
            return None
        found = self.image_available(part, character)
        return found.main if found is not None else None


def part_file_name(
    registry: CharacterRegistry,
    part: BodyPartType,
    character: Character,
    suffix: str = "",
) -> str:
    """``<part>[_suffix]_<character>.png``, e.g. ``head_noface_heather.png``."""
    middle = f"_{suffix}" if suffix else ""
    return f"{part.asset_stem}{middle}_{registry.asset_name(character)}.png"


def open_part_image(path: Path) -> Image.Image:
    """Decode *path* as RGBA.

    Raises:
        AssetError: If the file exists but is not a readable image.
    """
    try:
        with Image.open(path) as img:
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise AssetError(f"Cannot decode part image {path}: {exc}") from exc


class PartLibrary(PartProvider):
    """In-memory provider backed by the registry's existence flags.

    Images registered for a part the character does not have are ignored
    by lookups, so a stray file can never be drawn.
    """

    def __init__(
        self,
        registry: CharacterRegistry,
        images: Mapping[tuple[BodyPartType, Character], PartImage] | None = None,
    ) -> None:
        self._registry = registry
        self._images: dict[tuple[BodyPartType, Character], PartImage] = dict(
            images or {}
        )

    @property
    def registry(self) -> CharacterRegistry:
        return self._registry

    def add(
        self,
        part: BodyPartType,
        character: Character,
        main: Image.Image,
        no_face: Image.Image | None = None,
    ) -> None:
        self._images[(part, character)] = PartImage(
            main=main, no_face=no_face if no_face is not None else main
        )

    def image_available(
        self, part: BodyPartType, character: Character
    ) -> PartImage | None:
        if not self._registry.part_exists(part, character):
            return None
        return self._images.get((part, character))

    def part_exists(self, part: BodyPartType, character: Character) -> bool:
        return self._registry.part_exists(part, character)

    def __len__(self) -> int:
        return len(self._images)

    @classmethod
    def from_images(
        cls,
        registry: CharacterRegistry,
        images: Mapping[tuple[BodyPartType, Character], Image.Image],
        no_face: Mapping[tuple[BodyPartType, Character], Image.Image] | None = None,
    ) -> PartLibrary:
        """Build a library from in-memory images keyed by ``(part, character)``."""
        library = cls(registry)
        no_face = no_face or {}
        for (part, character), main in images.items():
            library.add(part, character, main, no_face.get((part, character)))
        return library

    @classmethod
    def from_directory(
        cls,
        directory: str | Path,
        registry: CharacterRegistry,
        characters: list[Character] | None = None,
    ) -> PartLibrary:
        """Load every existing part for *characters* from *directory*.

        Files are looked up under ``<directory>/char/`` first, then directly
        in *directory*.  Missing files are skipped with a debug log; the
        part is then simply not drawn.  Only ``HEAD`` parts have a
        ``_noface`` variant.

        Args:
            directory: Asset root.
            registry: Supplies asset names and existence flags.
            characters: Which characters to load; the playable set by default.

        Raises:
            FileNotFoundError: If *directory* does not exist.
            AssetError: If a present file cannot be decoded.
        """
        root = Path(directory)
        if not root.is_dir():
            raise FileNotFoundError(f"Asset directory not found: {root}")
        char_dir = root / "char" if (root / "char").is_dir() else root

        library = cls(registry)
        wanted = characters if characters is not None else Character.playable()
        missing = 0
        for character in wanted:
            for part in BodyPartType:
                if not registry.part_exists(part, character):
                    continue
                main_path = char_dir / part_file_name(registry, part, character)
                if not main_path.is_file():
                    missing += 1
                    logger.debug("No artwork at %s", main_path)
                    continue
                main = open_part_image(main_path)
                no_face = None
                if part is BodyPartType.HEAD:
                    face_path = char_dir / part_file_name(
                        registry, part, character, NO_FACE_SUFFIX
                    )
                    if face_path.is_file():
                        no_face = open_part_image(face_path)
                library.add(part, character, main, no_face)

        logger.info(
            "Loaded %d part images from %s (%d missing)", len(library), root, missing
        )
        return library
