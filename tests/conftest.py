"""Pytest configuration and shared fixtures for the search scraper tests."""

import itertools
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from src.search_scraper.amazon.regions import RegionConfig, resolve_region
from src.search_scraper.base import ScraperConfigManager
from src.search_scraper.base.config import reset_config_manager


@pytest.fixture(autouse=True)
def _reset_global_config() -> Generator[None, None, None]:
    reset_config_manager()
    yield
    reset_config_manager()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def config_manager() -> ScraperConfigManager:
    """Configuration with every value at its built-in default."""
    return ScraperConfigManager.from_dict({})


@pytest.fixture
def us_region() -> RegionConfig:
    return resolve_region("US")


@pytest.fixture
def tagged_us_region() -> RegionConfig:
    return resolve_region("US", "myamazon-20")


@pytest.fixture
def sequential_ids() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"
