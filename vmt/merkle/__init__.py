"""
Module 03 - Merkle Tree and Proofs
Flat-array Merkle tree construction + proof generation/validation.

This module provides:
- MerkleTree / build: build a tree once over an ordered sequence of values
- Proof: inclusion proof value object (no tree-internal indices)
- validate_proof / ProofValidator: stateless validation against a root

Usage:
    from vmt.merkle import build, validate_proof
    from vmt.crypto import HashAlgorithm

    tree = build(["one", "two", "three", "four"], HashAlgorithm.SHA256)
    proof = tree.build_proof("one")

    # Verifier side: only the value, the proof and the root are needed
    assert validate_proof("one", proof, tree.root)
"""
from .merkle_proofs import (
    MAX_PROOF_LENGTH,
    Proof,
    ProofLike,
    ProofValidator,
    build_proof_from_array,
    validate_proof,
)

from .merkle_tree import (
    MerkleTree,
    build,
    compute_tree_height,
    next_power_of_two,
)


__all__ = [
    # Core types
    "MerkleTree",
    "Proof",
    "ProofLike",
    "MAX_PROOF_LENGTH",
    # Core functions
    "build",
    "build_proof_from_array",
    "validate_proof",
    "compute_tree_height",
    "next_power_of_two",
    # Convenience classes
    "ProofValidator",
]
