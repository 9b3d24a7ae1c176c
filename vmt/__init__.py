"""
vmt - Merkle trees packed into a single flat array, with inclusion proofs.

Public API:
- build(values, algorithm) -> MerkleTree
- MerkleTree.root, MerkleTree.build_proof(value) -> Proof
- validate_proof(value, proof, root, algorithm) -> bool
"""
from vmt.config import DuplicatePolicy, TreeConfig
from vmt.crypto import HashAlgorithm, combine, hash_bytes, hash_value
from vmt.merkle import MerkleTree, Proof, ProofValidator, build, validate_proof
from vmt.schemas import (
    ConfigurationError,
    DuplicateValueError,
    EmptyInputError,
    MalformedProofError,
    NotFoundError,
    SerializationError,
    VmtException,
)
from vmt.schemas.proof import ProofEnvelope

__version__ = "0.1.0"

__all__ = [
    "DuplicatePolicy",
    "TreeConfig",
    "HashAlgorithm",
    "combine",
    "hash_bytes",
    "hash_value",
    "MerkleTree",
    "Proof",
    "ProofEnvelope",
    "ProofValidator",
    "build",
    "validate_proof",
    "ConfigurationError",
    "DuplicateValueError",
    "EmptyInputError",
    "MalformedProofError",
    "NotFoundError",
    "SerializationError",
    "VmtException",
]
