"""
Pytest configuration and shared fixtures for the CHIP-8 test suite.
"""

import sys
from pathlib import Path

import pytest

# Ensure project root is on PYTHONPATH so 'chip8' can be imported
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from chip8.cpu import Chip8  # noqa: E402


def assemble(*words):
    """Encode 16-bit instruction words big-endian, as a ROM stores them."""
    return b"".join(word.to_bytes(2, "big") for word in words)


class FixedRandom:
    """Random source that always returns the same byte."""

    def __init__(self, value):
        self.value = value
        self.calls = 0

    def getrandbits(self, k):
        self.calls += 1
        return self.value & ((1 << k) - 1)


@pytest.fixture
def make_chip():
    """
    Fixture returning a factory that builds an engine from instruction words.

    Returns:
        callable: make_chip(*words, rng=None) -> Chip8
    """

    def _make(*words, rng=None):
        return Chip8(assemble(*words), rng=rng)

    return _make


@pytest.fixture
def fixed_random():
    """Fixture returning the FixedRandom class, for tests that need a known byte."""
    return FixedRandom
