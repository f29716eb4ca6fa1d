"""Shared fixtures: the shipped level catalog and quick level lookups."""

from __future__ import annotations

import pytest

from lenstutor.core.levels import LevelConfig, LevelRepository


@pytest.fixture(scope="session")
def catalog() -> LevelRepository:
    return LevelRepository()


@pytest.fixture()
def level1(catalog: LevelRepository) -> LevelConfig:
    return catalog.get(1)


@pytest.fixture()
def level3(catalog: LevelRepository) -> LevelConfig:
    return catalog.get(3)


@pytest.fixture()
def level4(catalog: LevelRepository) -> LevelConfig:
    return catalog.get(4)
