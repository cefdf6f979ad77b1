"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tests.helpers import RecordingSleep  # noqa: E402


@pytest.fixture
def fake_sleep():
    return RecordingSleep()


@pytest.fixture
def provider_factory():
    """Build an async provider whose successive calls return or raise ``outcomes``."""

    def _make(*outcomes):
        return AsyncMock(side_effect=list(outcomes))

    return _make
