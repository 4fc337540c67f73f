"""Pytest configuration and shared fixtures for Roster Scanner tests."""

import pytest
import numpy as np
from unittest.mock import patch

from roster_scanner.core.types import Character, ImageBuffer, Rarity
from roster_scanner.reference.library import TemplateLibrary


def solid_card(color, width=100, height=100):
    """Uniform RGB card of the given size."""
    rgb = np.zeros((height, width, 3), dtype=np.uint8)
    rgb[:, :] = color
    return ImageBuffer.from_rgb(rgb)


def painted_card(background, regions, width=100, height=100):
    """Card filled with ``background`` and ``(y1, y2, x1, x2, color)`` rectangles on top."""
    rgb = np.zeros((height, width, 3), dtype=np.uint8)
    rgb[:, :] = background
    for y1, y2, x1, x2, color in regions:
        rgb[y1:y2, x1:x2] = color
    return ImageBuffer.from_rgb(rgb)


def portrait(seed, size=64):
    """Deterministic random portrait; different seeds give dissimilar images."""
    rng = np.random.default_rng(seed)
    blocks = rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8)
    rgb = np.kron(blocks, np.ones((size // 8, size // 8, 1), dtype=np.uint8))
    return ImageBuffer.from_rgb(rgb)


@pytest.fixture(scope="function")
def sample_roster():
    """Small roster with one character of each rarity."""
    return [
        Character("batman", "Batman", Rarity.LEGENDARY),
        Character("aquaman", "Aquaman", Rarity.EPIC),
        Character("cyborg", "Cyborg", Rarity.EPIC),
    ]


@pytest.fixture(scope="function")
def sample_library():
    """Template library of three distinct portraits."""
    return TemplateLibrary({
        "aquaman": portrait(1),
        "batman": portrait(2),
        "cyborg": portrait(3),
    })


@pytest.fixture(scope="function")
def roster_screenshot():
    """1400x800 screenshot with the default 7x4 grid painted in distinct colors."""
    rgb = np.zeros((800, 1400, 3), dtype=np.uint8)
    rgb[:, :252] = (10, 10, 60)
    for row in range(4):
        for col in range(7):
            x = 252 + 5 + col * 163
            y = 5 + row * 163
            rgb[y:y + 158, x:x + 158] = (40 + col * 30, 40 + row * 50, 90)
    return ImageBuffer.from_rgb(rgb)


@pytest.fixture(scope="function")
def mock_settings():
    """Mock application settings used by the recognition pipeline."""
    with patch('roster_scanner.pipeline.orchestrator.settings') as mock_settings:
        mock_settings.MATCH_STRATEGY = "center_crop"
        mock_settings.MATCH_MODE = "pixel"
        mock_settings.MAX_TEMPLATE_COMPARISONS = 0
        mock_settings.MATCH_WORKERS = 1
        yield mock_settings


# Configure pytest options
def pytest_configure(config):
    """Configure pytest with custom options."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Mark integration tests
        if "integration" in item.name.lower() or "Integration" in str(item.cls):
            item.add_marker(pytest.mark.integration)

        # Mark slow tests
        if any(slow_indicator in item.name.lower() for slow_indicator in ['performance', 'bulk']):
            item.add_marker(pytest.mark.slow)

        # Mark unit tests (default)
        if not item.get_closest_marker('integration') and not item.get_closest_marker('slow'):
            item.add_marker(pytest.mark.unit)
