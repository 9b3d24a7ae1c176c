"""
Core cryptographic utilities: the hash provider used for leaves and
interior nodes.
"""
from .hashing import (
    DEFAULT_ALGORITHM,
    HashAlgorithm,
    combine,
    from_hex,
    hash_bytes,
    hash_value,
    sha256,
    to_hex,
)

__all__ = [
    "DEFAULT_ALGORITHM",
    "HashAlgorithm",
    "combine",
    "from_hex",
    "hash_bytes",
    "hash_value",
    "sha256",
    "to_hex",
]
