"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.test_inputs import (
    get_profitable_state,
    get_reference_state,
    get_rich_state,
)


@pytest.fixture
def reference_state():
    """Reference scenario with no equity and interest-free debt."""
    return get_reference_state()


@pytest.fixture
def profitable_state():
    """Scenario earning $1M before tax."""
    return get_profitable_state()


@pytest.fixture
def rich_state():
    """Scenario using every cost category and funding instrument."""
    return get_rich_state()
