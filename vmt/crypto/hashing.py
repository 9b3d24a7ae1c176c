"""
Module 02 - Hashing Utilities
Pluggable hash provider for leaf hashing and commutative pair combination.

This module provides:
- HashAlgorithm: enumerated set of supported hashlib algorithms
- hash_bytes: hash raw bytes with a chosen algorithm
- hash_value: hash an input value via its canonical serialization
- combine: commutative pair hash used for every interior tree node
- Hex encoding/decoding with 0x prefix

Combination Rule (Hard Contract):
    combine(a, b) = H(min(a, b) || max(a, b))
The two operands are ordered byte-wise before concatenation, so
combine(a, b) == combine(b, a) for every pair regardless of the
underlying algorithm. This is what lets proofs omit left/right flags.
"""
from __future__ import annotations

import hashlib
import re
from enum import Enum
from typing import Any

from vmt.schemas.canonical import serialize_value


class HashAlgorithm(str, Enum):
    """
    Supported hash algorithms. Values are hashlib constructor names.

    Example:
        >>> HashAlgorithm.parse("sha-256") is HashAlgorithm.SHA256
        True
    """
    SHA256 = "sha256"
    SHA512 = "sha512"
    SHA3_256 = "sha3_256"
    SHA3_512 = "sha3_512"
    BLAKE2B = "blake2b"
    BLAKE2S = "blake2s"

    @property
    def digest_size(self) -> int:
        """Width in bytes of every hash produced by this algorithm."""
        return _DIGEST_SIZES[self]

    @classmethod
    def parse(cls, name: str | HashAlgorithm) -> HashAlgorithm:
        """
        Resolve an algorithm from its enum member, value or a loose name.

        Matching is case-insensitive and ignores "-" / "_", so "SHA-256",
        "sha256" and "SHA3_256" all resolve.

        Raises:
            ValueError: If the name matches no supported algorithm.
        """
        if isinstance(name, cls):
            return name
        wanted = str(name).strip().lower().replace("-", "").replace("_", "")
        for member in cls:
            if member.value.replace("_", "") == wanted:
                return member
        raise ValueError(
            f"Unsupported hash algorithm: {name!r}. "
            f"Supported: {[m.value for m in cls]}"
        )


_DIGEST_SIZES: dict[HashAlgorithm, int] = {
    algo: hashlib.new(algo.value).digest_size for algo in HashAlgorithm
}

DEFAULT_ALGORITHM: HashAlgorithm = HashAlgorithm.SHA256

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")


def hash_bytes(data: bytes, algorithm: HashAlgorithm = DEFAULT_ALGORITHM) -> bytes:
    """
    Hash raw bytes.

    Any byte sequence, including the empty one, hashes deterministically.

    Example:
        >>> hash_bytes(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.new(algorithm.value, data).digest()


def sha256(data: bytes) -> bytes:
    """Shorthand for hash_bytes(data, HashAlgorithm.SHA256)."""
    return hashlib.sha256(data).digest()


def hash_value(value: Any, algorithm: HashAlgorithm = DEFAULT_ALGORITHM) -> bytes:
    """
    Compute the leaf hash of an input value.

    Rule: leaf = H(serialize_value(value))

    Raises:
        SerializationError: If the value cannot be serialized.
    """
    return hash_bytes(serialize_value(value), algorithm)


def combine(left: bytes, right: bytes, algorithm: HashAlgorithm = DEFAULT_ALGORITHM) -> bytes:
    """
    Compute the parent hash of two sibling hashes.

    The smaller operand (byte-wise) is hashed first, so sibling order
    never affects the result.

    Args:
        left: One child hash
        right: The other child hash
        algorithm: Hash algorithm to use

    Returns:
        Parent hash
    """
    if right < left:
        left, right = right, left
    h = hashlib.new(algorithm.value)
    h.update(left)
    h.update(right)
    return h.digest()


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    # bytes.fromhex would skip whitespace
    if not _HEX_DIGITS.fullmatch(hex_content):
        raise ValueError(f"Invalid hex characters in string: {hex_string[:20]!r}")

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    return bytes.fromhex(hex_content)


__all__ = [
    "HashAlgorithm",
    "DEFAULT_ALGORITHM",
    "hash_bytes",
    "sha256",
    "hash_value",
    "combine",
    "to_hex",
    "from_hex",
]
