"""
Market Radar - Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- Listing factory
- Mock marketplace API responses (fixtures/*.json)
- Async test support via pytest-asyncio
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from src.models.listing import Listing
from tests.factories import make_listing


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for anyio tests."""
    return "asyncio"


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def listing_factory() -> Callable[..., Listing]:
    return make_listing


# ---------------------------------------------------------------------------
# Fixture Loaders
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def load_mock_search() -> dict:
    """Load mock search response from fixtures/mock_search_iphone.json."""
    fixture_path = Path(__file__).parent / "fixtures" / "mock_search_iphone.json"
    with open(fixture_path) as f:
        return json.load(f)
