"""
Module 03 - Merkle Proofs
Inclusion proof generation over the flat tree array, and stateless proof
validation.

This module provides:
- Proof: frozen value object (sibling hashes + leaf hash + algorithm)
- build_proof_from_array: walk the flat array from a leaf to the root
- validate_proof: recompute a root from (value, proof) and compare
- ProofValidator: validate many proofs against one known root

Validation Rules (Hard Contracts):
1. current = H(serialize(value))
2. For each sibling, leaf level first: current = combine(current, sibling)
3. Valid iff current == expected root
4. A mismatch returns False; only a structurally broken proof raises
   MalformedProofError

Validation never touches a MerkleTree: a verifier only needs the value,
the proof and a root obtained through some other channel.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Sequence, Union

from pydantic import ValidationError

from vmt.crypto.hashing import (
    DEFAULT_ALGORITHM,
    HashAlgorithm,
    combine,
    hash_value,
    to_hex,
)
from vmt.schemas.canonical import dumps_canonical
from vmt.schemas.errors import MalformedProofError
from vmt.schemas.proof import ProofEnvelope

logger = logging.getLogger(__name__)

# No tree that fits in memory is anywhere near this tall
MAX_PROOF_LENGTH = 64


@dataclass(frozen=True)
class Proof:
    """
    An inclusion proof for a single value.

    Siblings carry no left/right flag: pair combination is commutative.

    Attributes:
        siblings: Sibling hashes from the leaf level up to (not including)
            the root
        leaf: Leaf hash of the proven value, or None if not carried
        algorithm: Hash algorithm the tree was built with
    """
    siblings: tuple[bytes, ...] = field(default_factory=tuple)
    leaf: bytes | None = None
    algorithm: HashAlgorithm = DEFAULT_ALGORITHM

    def __post_init__(self) -> None:
        # Accept lists and other iterables, store an immutable tuple
        if not isinstance(self.siblings, tuple):
            object.__setattr__(self, "siblings", tuple(self.siblings))
        if not isinstance(self.algorithm, HashAlgorithm):
            object.__setattr__(self, "algorithm", _parse_algorithm(self.algorithm))

    def to_envelope(self) -> ProofEnvelope:
        """Convert to the wire schema (hashes as 0x hex)."""
        _check_structure(self.siblings, self.leaf, self.algorithm)
        return ProofEnvelope(
            algorithm=self.algorithm,
            leaf=to_hex(bytes(self.leaf)) if self.leaf is not None else None,
            siblings=[to_hex(bytes(s)) for s in self.siblings],
        )

    @classmethod
    def from_envelope(cls, envelope: ProofEnvelope) -> "Proof":
        """Build a Proof from its wire schema."""
        return cls(
            siblings=tuple(envelope.sibling_bytes()),
            leaf=envelope.leaf_bytes(),
            algorithm=envelope.algorithm,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dictionary form."""
        return self.to_envelope().model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Proof":
        """
        Parse a proof from its dictionary form.

        Raises:
            MalformedProofError: If the data does not describe a valid proof.
        """
        try:
            envelope = ProofEnvelope.model_validate(data)
        except ValidationError as e:
            raise MalformedProofError(
                f"Invalid proof data: {e.error_count()} validation error(s)",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e
        return cls.from_envelope(envelope)

    def to_json(self) -> str:
        """Canonical JSON form, suitable for sending to a verifier."""
        return dumps_canonical(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str | bytes) -> "Proof":
        """
        Parse a proof from JSON.

        Raises:
            MalformedProofError: If the JSON does not describe a valid proof.
        """
        try:
            envelope = ProofEnvelope.model_validate_json(json_str)
        except ValidationError as e:
            raise MalformedProofError(
                f"Invalid proof JSON: {e.error_count()} validation error(s)",
                details={"errors": [err["msg"] for err in e.errors()]},
            ) from e
        return cls.from_envelope(envelope)


ProofLike = Union[Proof, ProofEnvelope, Sequence[bytes]]


def build_proof_from_array(
    array: bytes,
    digest_size: int,
    padded_leaf_count: int,
    index: int,
) -> list[bytes]:
    """
    Collect the sibling hashes for the leaf at ``index``.

    The array holds every level bottom-up, leaves first. At each level the
    sibling of node i is node i ^ 1, and its parent is node i // 2 of the
    next level, which starts right after the current one.

    Args:
        array: Flat tree array (node_count * digest_size bytes)
        digest_size: Width of one hash
        padded_leaf_count: Number of leaves after padding (power of two)
        index: 0-based leaf index

    Returns:
        Sibling hashes, leaf level first, root excluded

    Raises:
        IndexError: If index is not a leaf index
    """
    if index < 0 or index >= padded_leaf_count:
        raise IndexError(
            f"Leaf index {index} out of range for {padded_leaf_count} leaves"
        )

    siblings: list[bytes] = []
    level_start = 0
    level_len = padded_leaf_count

    while level_len > 1:
        offset = (level_start + (index ^ 1)) * digest_size
        siblings.append(array[offset:offset + digest_size])

        level_start += level_len
        level_len //= 2
        index //= 2

    return siblings


def validate_proof(
    value: Any,
    proof: ProofLike,
    root: bytes,
    algorithm: HashAlgorithm | str | None = None,
) -> bool:
    """
    Check that ``value`` is committed to by ``root``.

    Args:
        value: The claimed value
        proof: A Proof, a ProofEnvelope, or a plain sequence of sibling hashes
        root: Independently known tree root
        algorithm: Hash algorithm; defaults to the one embedded in the proof
            (SHA-256 for a plain sequence)

    Returns:
        True if the recomputed root equals ``root``, False otherwise

    Raises:
        MalformedProofError: If the proof or root is structurally invalid,
            or the algorithm disagrees with the one embedded in the proof
        SerializationError: If the value cannot be serialized
    """
    siblings, leaf, embedded = _unpack(proof)
    algo = _resolve_algorithm(algorithm, embedded)

    _check_structure(siblings, leaf, algo)
    _check_hash(root, algo.digest_size, "root")

    expected_leaf = hash_value(value, algo)
    if leaf is not None and bytes(leaf) != expected_leaf:
        logger.debug("Proof leaf does not match value hash")
        return False

    current = expected_leaf
    for sibling in siblings:
        current = combine(current, bytes(sibling), algo)

    if current != bytes(root):
        logger.debug(f"Recomputed root {current.hex()} does not match {bytes(root).hex()}")
        return False
    return True


class ProofValidator:
    """
    Validates proofs against one known root.

    Example:
        >>> validator = ProofValidator(root, HashAlgorithm.SHA256)
        >>> validator.validate("one", proof)
        True
    """

    def __init__(self, root: bytes, algorithm: HashAlgorithm | str = DEFAULT_ALGORITHM) -> None:
        self.algorithm = _parse_algorithm(algorithm)
        _check_hash(root, self.algorithm.digest_size, "root")
        self.root = bytes(root)

    def validate(self, value: Any, proof: ProofLike) -> bool:
        """Validate ``proof`` for ``value`` against this validator's root."""
        return validate_proof(value, proof, self.root, self.algorithm)


def _parse_algorithm(algorithm: HashAlgorithm | str) -> HashAlgorithm:
    try:
        return HashAlgorithm.parse(algorithm)
    except ValueError as e:
        raise MalformedProofError(str(e), details={"algorithm": str(algorithm)}) from e


def _resolve_algorithm(
    requested: HashAlgorithm | str | None,
    embedded: HashAlgorithm | None,
) -> HashAlgorithm:
    if requested is None:
        return embedded or DEFAULT_ALGORITHM
    algo = _parse_algorithm(requested)
    if embedded is not None and embedded is not algo:
        raise MalformedProofError(
            f"Proof was built with {embedded.value}, not {algo.value}",
            details={"proof_algorithm": embedded.value, "algorithm": algo.value},
        )
    return algo


def _unpack(proof: Any) -> tuple[Sequence[Any], bytes | None, HashAlgorithm | None]:
    if isinstance(proof, Proof):
        return proof.siblings, proof.leaf, proof.algorithm
    if isinstance(proof, ProofEnvelope):
        return proof.sibling_bytes(), proof.leaf_bytes(), proof.algorithm
    if isinstance(proof, (str, bytes, bytearray, memoryview)):
        raise MalformedProofError(
            f"Proof must be a sequence of hashes, got {type(proof).__name__}"
        )
    try:
        return tuple(proof), None, None
    except TypeError as e:
        raise MalformedProofError(
            f"Proof must be a sequence of hashes, got {type(proof).__name__}"
        ) from e


def _check_structure(
    siblings: Sequence[Any],
    leaf: Any,
    algorithm: HashAlgorithm,
) -> None:
    if len(siblings) > MAX_PROOF_LENGTH:
        raise MalformedProofError(
            f"Proof has {len(siblings)} siblings, more than any tree can need",
            details={"length": len(siblings), "max_length": MAX_PROOF_LENGTH},
        )
    width = algorithm.digest_size
    if leaf is not None:
        _check_hash(leaf, width, "leaf")
    for i, sibling in enumerate(siblings):
        _check_hash(sibling, width, f"sibling {i}", sibling_index=i)


def _check_hash(
    value: Any,
    width: int,
    what: str,
    sibling_index: int | None = None,
) -> None:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise MalformedProofError(
            f"{what} must be bytes, got {type(value).__name__}",
            sibling_index=sibling_index,
        )
    # nbytes, not len: a memoryview with a wider format counts elements
    size = memoryview(value).nbytes
    if size != width:
        raise MalformedProofError(
            f"{what} is {size} bytes, expected {width}",
            sibling_index=sibling_index,
            details={"width": size, "expected_width": width},
        )


__all__ = [
    "MAX_PROOF_LENGTH",
    "Proof",
    "ProofLike",
    "ProofValidator",
    "build_proof_from_array",
    "validate_proof",
]
