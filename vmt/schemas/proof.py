"""
Module 01 - Schemas & Serialization
File: proof.py

Purpose: Wire schema for inclusion proofs.

A ProofEnvelope is what travels to a verifier that only holds the tree
root. It carries no tree-internal indices: just the hash algorithm, the
leaf hash and the sibling hashes (leaf-to-root, root excluded), all as
0x-prefixed hex.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from vmt.crypto.hashing import DEFAULT_ALGORITHM, HashAlgorithm, from_hex

from .versioning import SCHEMA_VERSION, SUPPORTED_SCHEMA_VERSIONS, is_compatible_schema_version


class ProofEnvelope(BaseModel):
    """
    Serialized form of a Merkle inclusion proof.

    Example:
        {"algorithm":"sha256","leaf":"0x…","schema_version":"v1",
         "siblings":["0x…","0x…"]}
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: str = Field(default=SCHEMA_VERSION)
    algorithm: HashAlgorithm = Field(
        default=DEFAULT_ALGORITHM,
        description="Hash algorithm the proof was built with",
    )
    leaf: str | None = Field(
        default=None,
        description="0x-prefixed leaf hash of the proven value",
    )
    siblings: list[str] = Field(
        default_factory=list,
        description="0x-prefixed sibling hashes, leaf level first",
    )

    @field_validator("schema_version")
    @classmethod
    def validate_schema_version(cls, v: str) -> str:
        """Reject proof formats this library cannot read."""
        if not is_compatible_schema_version(v):
            raise ValueError(
                f"Unsupported schema version: '{v}'. "
                f"Supported versions: {sorted(SUPPORTED_SCHEMA_VERSIONS)}"
            )
        return v

    @field_validator("algorithm", mode="before")
    @classmethod
    def parse_algorithm(cls, v: object) -> object:
        """Accept loose algorithm names such as "SHA-256"."""
        if isinstance(v, str):
            return HashAlgorithm.parse(v)
        return v

    @model_validator(mode="after")
    def validate_hash_widths(self) -> "ProofEnvelope":
        """Every hash must decode to exactly one digest of the algorithm."""
        width = self.algorithm.digest_size
        if self.leaf is not None and len(from_hex(self.leaf)) != width:
            raise ValueError(f"leaf must be {width} bytes for {self.algorithm.value}")
        for i, sibling in enumerate(self.siblings):
            if len(from_hex(sibling)) != width:
                raise ValueError(
                    f"sibling {i} must be {width} bytes for {self.algorithm.value}"
                )
        return self

    def sibling_bytes(self) -> list[bytes]:
        """Decode the sibling hashes."""
        return [from_hex(s) for s in self.siblings]

    def leaf_bytes(self) -> bytes | None:
        """Decode the leaf hash, if present."""
        return from_hex(self.leaf) if self.leaf is not None else None
