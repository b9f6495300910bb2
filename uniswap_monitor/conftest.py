"""
Pytest configuration shared by all uniswap_monitor tests.
"""

import pytest

from .config import ConfigManager
from .tests.fakes import FakeChainClient


@pytest.fixture
def config():
    """Configuration built from defaults and the test environment."""
    return ConfigManager()


@pytest.fixture
def chain_client():
    """Fake chain client at block 100."""
    return FakeChainClient(block_number=100)
