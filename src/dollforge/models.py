"""Enumerations and Pydantic data models for characters, parts and scenes."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from dollforge.geometry import Vector2


class BodyPartType(IntEnum):
    """Anatomical layer kinds.  The value is the default draw depth."""

    HEAD_BACK = 0
    HAIR_BACK = 1
    TORSO_BACK = 2
    TAIL = 3
    ARM_BACK = 4
    LEG_BACK = 5
    GHOST_TAIL = 6
    TORSO_UNDER = 7
    TORSO = 8
    ARM_BACK_SAME_OUTLINE = 9
    LEG_FRONT = 10
    ARM_FRONT = 11
    HEAD = 12
    HAIR_FRONT = 13
    EYE_OVER_HAIR = 14
    HEAD_FRONT = 15
    TORSO_FRONT = 16

    @property
    def asset_stem(self) -> str:
        """File-name stem used by the part artwork (e.g. ``"hairb"``)."""
        return _PART_STEMS[self]

    @classmethod
    def parse(cls, value: Any) -> BodyPartType:
        """Accept a member, its int value, or its snake_case name."""
        return _parse_enum(cls, value)


_PART_STEMS: dict[BodyPartType, str] = {
    BodyPartType.HEAD_BACK: "headb",
    BodyPartType.HAIR_BACK: "hairb",
    BodyPartType.TORSO_BACK: "torsob",
    BodyPartType.TAIL: "tail",
    BodyPartType.ARM_BACK: "armb",
    BodyPartType.LEG_BACK: "legb",
    BodyPartType.GHOST_TAIL: "ghosttail",
    BodyPartType.TORSO_UNDER: "torsou",
    BodyPartType.TORSO: "torso",
    BodyPartType.ARM_BACK_SAME_OUTLINE: "armbsameol",
    BodyPartType.LEG_FRONT: "legf",
    BodyPartType.ARM_FRONT: "armf",
    BodyPartType.HEAD: "head",
    BodyPartType.HAIR_FRONT: "hairf",
    BodyPartType.EYE_OVER_HAIR: "eyeoverhair",
    BodyPartType.HEAD_FRONT: "headf",
    BodyPartType.TORSO_FRONT: "torsof",
}


class Character(IntEnum):
    """Source character templates, each with its own artwork coordinate space."""

    TEST1 = 0
    TEST2 = 1
    BEKZII = 2
    AUSTROL = 3
    HERMAN = 4
    JUNE = 5
    BOOMHAUER = 6
    HAZEL = 7
    MOTH = 8
    HEATHER = 9
    LEEBY = 10
    CATE = 11
    SHERM = 12
    SEAN = 13
    VIOLET = 14
    BOOTS = 15
    OLLIE = 16
    KIWI = 17
    WARE = 18
    IRON = 19
    SODA = 20
    ROXY = 21
    JUSTO = 22
    ASH = 23
    RAC = 24
    BRICK = 25

    @classmethod
    def parse(cls, value: Any) -> Character:
        """Accept a member, its int value, or its name in any case."""
        return _parse_enum(cls, value)

    @classmethod
    def playable(cls) -> list[Character]:
        """Characters offered to users (the two test rigs are excluded)."""
        return [c for c in cls if c not in (cls.TEST1, cls.TEST2)]


class AttachPoint(IntEnum):
    """Named skeletal anchors.  ``GHOST_TAIL`` has no per-character coordinate."""

    LEG_FRONT = 0  # left top of the front leg
    LEG_BACK = 1  # right top of the back leg
    ARM_FRONT = 2  # shoulder of the front arm
    ARM_BACK = 3  # shoulder of the back arm
    HEAD = 4  # neck
    TORSO = 5  # torso center
    HAIR = 6  # top of the hair
    EYES = 7  # bottom of the eyes
    GHOST_TAIL = 8  # spans LEG_FRONT..LEG_BACK

    @classmethod
    def parse(cls, value: Any) -> AttachPoint:
        return _parse_enum(cls, value)

    @classmethod
    def concrete(cls) -> list[AttachPoint]:
        """Attach points every character must define coordinates for."""
        return [p for p in cls if p is not cls.GHOST_TAIL]


def _parse_enum(enum_cls: Any, value: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a valid {enum_cls.__name__}: {value!r}")
    if isinstance(value, int):
        return enum_cls(value)
    if isinstance(value, str):
        key = value.strip().upper().replace("-", "_").replace(" ", "_")
        if key in enum_cls.__members__:
            return enum_cls[key]
    raise ValueError(f"Not a valid {enum_cls.__name__}: {value!r}")


# The hair selection that swaps every part to its no-face artwork and hangs
# the "hair" from the eyes attach point.
NO_FACE_CHARACTER = Character.HERMAN

# Parent whose hair attach-point local scale is ignored, keeping the
# deliberately oversized hair.
OVERSIZED_HAIR_CHARACTER = Character.BOOMHAUER

# Legs selection exempt from the fit-to-frame bottom correction.
OVERSIZED_LEGS_CHARACTER = Character.BOOMHAUER

# Selecting this character in every slot triggers the intensity event.
FULL_MATCH_CHARACTER = Character.BOOMHAUER


class AttachPointInfo(BaseModel):
    """Coordinate of one attach point in a character's native artwork.

    Attributes:
        x: Horizontal pixel coordinate.
        y: Vertical pixel coordinate.
        scale: Local scale of the artwork around this point (default 1).
    """

    x: float
    y: float
    scale: float = Field(default=1.0, gt=0)

    model_config = {"frozen": True}

    @property
    def position(self) -> Vector2:
        return Vector2(self.x, self.y)


class CharacterInfo(BaseModel):
    """Static registry record for one character template.

    Attributes:
        character: Which template this record describes.
        asset_name: File-name suffix of the character's artwork.
        scale_factor: Relative on-screen size versus the other templates.
        attach_points: Coordinates for every concrete attach point.
        parts: Body-part layers this character has artwork for.
    """

    character: Character
    asset_name: str = Field(min_length=1)
    scale_factor: float = Field(gt=0)
    attach_points: dict[AttachPoint, AttachPointInfo]
    parts: frozenset[BodyPartType] = frozenset()

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _accept_name_alias(cls, data: Any) -> Any:
        if isinstance(data, dict) and "character" not in data and "name" in data:
            data = dict(data)
            data["character"] = data.pop("name")
        return data

    @field_validator("character", mode="before")
    @classmethod
    def _parse_character(cls, v: Any) -> Character:
        return Character.parse(v)

    @field_validator("attach_points", mode="before")
    @classmethod
    def _parse_attach_keys(cls, v: Any) -> Any:
        if not isinstance(v, dict):
            raise ValueError("attach_points must be a mapping")
        return {AttachPoint.parse(k): info for k, info in v.items()}

    @field_validator("parts", mode="before")
    @classmethod
    def _parse_parts(cls, v: Any) -> frozenset[BodyPartType]:
        if v is None:
            return frozenset()
        return frozenset(BodyPartType.parse(p) for p in v)

    def has_part(self, part: BodyPartType) -> bool:
        return part in self.parts


class Selection(BaseModel):
    """The five user picks.  ``None`` means "no part" for hair, arms and legs.

    Attributes:
        head: Character supplying the head layers.
        hair: Character supplying hair (or the eye piece for the no-face pick).
        torso: Character supplying the torso; also selects the depth order.
        arms: Character supplying both arms.
        legs: Character supplying legs / ghost tail.
    """

    head: Character = Character.HEATHER
    hair: Character | None = Character.HEATHER
    torso: Character = Character.HEATHER
    arms: Character | None = Character.HEATHER
    legs: Character | None = Character.HEATHER

    model_config = {"frozen": True}

    @field_validator("head", "torso", mode="before")
    @classmethod
    def _parse_required(cls, v: Any) -> Character:
        if v is None or (isinstance(v, str) and v.strip().lower() == "none"):
            raise ValueError("head and torso cannot be 'none'")
        return Character.parse(v)

    @field_validator("hair", "arms", "legs", mode="before")
    @classmethod
    def _parse_optional(cls, v: Any) -> Character | None:
        if v is None or v == -1:
            return None
        if isinstance(v, str) and v.strip().lower() == "none":
            return None
        return Character.parse(v)

    @classmethod
    def uniform(cls, character: Character) -> Selection:
        """Every slot picks *character*."""
        return cls(
            head=character, hair=character, torso=character, arms=character, legs=character
        )

    def all_match(self, character: Character) -> bool:
        return all(
            pick == character
            for pick in (self.head, self.hair, self.torso, self.arms, self.legs)
        )

    @property
    def no_face(self) -> bool:
        """True when the hair pick swaps in no-face artwork."""
        return self.hair == NO_FACE_CHARACTER


class SceneState(BaseModel):
    """Everything one figure build reads, frozen for the duration of a tick.

    Attributes:
        selection: The five part picks.
        dancing: Whether the dance sway is on.
        intensity: Full-match event progress in [0, 1].
        intensity_active: Whether the full-match event is running.
        fade_in: Entrance progress in [0, 1]; 1 lifts the figure a full canvas height.
    """

    selection: Selection = Selection()
    dancing: bool = False
    intensity: float = Field(default=0.0, ge=0.0, le=1.0)
    intensity_active: bool = False
    fade_in: float = Field(default=0.0, ge=0.0, le=1.0)

    model_config = {"frozen": True}
