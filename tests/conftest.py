"""
Pytest configuration and shared fixtures for vmt tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Isolates every test from VMT_* environment variables and the
   process-wide default config
3. Provides commonly-used fixtures via pytest's autodiscovery
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

import importlib

_common = importlib.import_module("fixtures.common")

FOUR_WORDS = _common.FOUR_WORDS

from vmt.config import set_default_config
from vmt.merkle import build


# =============================================================================
# Isolation
# =============================================================================

_ENV_VARS = (
    "VMT_HASH_ALGORITHM",
    "VMT_DUPLICATE_POLICY",
    "VMT_MAX_WORKERS",
    "VMT_PARALLEL_THRESHOLD",
)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Start every test from built-in defaults."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    set_default_config(None)
    yield
    set_default_config(None)


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def four_words():
    """The four-value example input."""
    return list(FOUR_WORDS)


@pytest.fixture
def four_word_tree(four_words):
    """SHA-256 tree over the four-value example input."""
    return build(four_words)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
