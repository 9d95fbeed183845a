"""Shared fixtures for dollforge tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from dollforge.assets import PartLibrary
from dollforge.models import Character
from dollforge.registry import CharacterRegistry, default_registry
from synthetic_parts import fill_library, uniform_registry_data


@pytest.fixture(scope="session")
def registry() -> CharacterRegistry:
    """The packaged character registry."""
    return default_registry()


@pytest.fixture()
def simple_registry() -> CharacterRegistry:
    """Every character identical: scale factor 1, all parts, points near (10, 10)."""
    return CharacterRegistry.from_mapping(uniform_registry_data())


@pytest.fixture()
def heather_library(registry: CharacterRegistry) -> PartLibrary:
    """Solid artwork for every Heather part."""
    return fill_library(registry, [Character.HEATHER])


@pytest.fixture(autouse=True)
def _reset_dollforge_logger() -> Iterator[None]:
    """Keep handlers added by CLI tests from leaking between tests."""
    yield
    logger = logging.getLogger("dollforge")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
