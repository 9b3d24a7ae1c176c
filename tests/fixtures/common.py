"""
Common test helpers shared by all test modules.

Expected hashes are computed straight from hashlib so the tests do not
depend on the code under test to build their oracles.
"""

import hashlib

FOUR_WORDS = ("one", "two", "three", "four")


def make_values(count: int, prefix: str = "value") -> list[str]:
    """Distinct string values: value0, value1, ..."""
    return [f"{prefix}{i}" for i in range(count)]


def leaf(value: str, name: str = "sha256") -> bytes:
    """Leaf hash of a string value."""
    return hashlib.new(name, value.encode("utf-8")).digest()


def pair(a: bytes, b: bytes, name: str = "sha256") -> bytes:
    """Commutative pair hash: smaller operand first."""
    lo, hi = sorted((a, b))
    return hashlib.new(name, lo + hi).digest()
