"""
Module 03 - Merkle Tree Implementation
Merkle tree packed into a single flat array of fixed-width hashes.

This module provides:
- MerkleTree: build once, then read the root and generate proofs
- build: functional entry point equivalent to MerkleTree(...)
- next_power_of_two / compute_tree_height: layout arithmetic

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = H(serialize_value(value))
2. Parent hashing: parent = combine(a, b) = H(min(a, b) || max(a, b))
3. Padding: the leaf level is padded to the next power of two by
   repeating the LAST real leaf. A single value is a tree of one node.
4. Empty input is rejected (EmptyInputError)
5. Duplicate values: the first occurrence wins (or the build is rejected
   under DuplicatePolicy.REJECT)

Array Layout:
Levels are stored bottom-up, leaves first. With n padded leaves:

    nodes [0, n)            level 0 (leaves)
    nodes [n, n + n/2)      level 1
    ...
    node  2n - 2            root

so node_count == 2n - 1. Node i of a level has its sibling at i ^ 1 and its
parent at i // 2 of the next level.

Order Notes:
- Input order matters in general: leaves are never sorted.
- Because pair combination is commutative, swapping the two members of
  any sibling pair leaves the root unchanged (["a", "b"] and ["b", "a"]
  share a root, as does any power-of-two input and its reversal).

The array is an immutable bytes object: once built, any number of
threads may generate proofs concurrently without locking.
"""
from __future__ import annotations

import concurrent.futures
import logging
from typing import Any, Iterable, Optional

from vmt.config.runtime import DuplicatePolicy, TreeConfig, get_default_config
from vmt.crypto.hashing import HashAlgorithm, combine, hash_bytes
from vmt.merkle.merkle_proofs import Proof, ProofLike, build_proof_from_array, validate_proof
from vmt.schemas.canonical import serialize_value
from vmt.schemas.errors import (
    DuplicateValueError,
    EmptyInputError,
    NotFoundError,
    SerializationError,
)

logger = logging.getLogger(__name__)


def next_power_of_two(n: int) -> int:
    """
    Smallest power of two >= n (n must be positive).

    Example:
        >>> [next_power_of_two(i) for i in (1, 2, 3, 5, 8)]
        [1, 2, 4, 8, 8]
    """
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")
    return 1 << (n - 1).bit_length()


def compute_tree_height(num_leaves: int) -> int:
    """
    Number of levels (leaves and root included) for ``num_leaves`` values.

    A single leaf has height 1, two leaves height 2, three or four
    leaves height 3, and so on. An empty tree has height 0.
    """
    if num_leaves == 0:
        return 0
    return next_power_of_two(num_leaves).bit_length()


class MerkleTree:
    """
    Immutable Merkle tree over an ordered sequence of values.

    Example:
        >>> tree = MerkleTree(["one", "two", "three", "four"])
        >>> proof = tree.build_proof("one")
        >>> len(proof.siblings)
        2
        >>> validate_proof("one", proof, tree.root)
        True
    """

    def __init__(
        self,
        values: Iterable[Any],
        algorithm: HashAlgorithm | str | None = None,
        config: Optional[TreeConfig] = None,
    ) -> None:
        """
        Build the tree.

        Args:
            values: Ordered input values (bytes, str, or anything canonically
                serializable)
            algorithm: Hash algorithm; overrides the config's algorithm
            config: Build settings; defaults to the process default config

        Raises:
            EmptyInputError: If ``values`` is empty
            SerializationError: If a value cannot be serialized
            DuplicateValueError: If a value repeats under DuplicatePolicy.REJECT
        """
        config = config or get_default_config()
        if algorithm is not None:
            config = config.copy(hash_algorithm=algorithm)

        self._algorithm: HashAlgorithm = config.hash_algorithm
        self._digest_size: int = self._algorithm.digest_size

        leaves, self._index = self._hash_leaves(values, config.duplicate_policy)

        self._leaf_count = len(leaves)
        self._padded_leaf_count = next_power_of_two(self._leaf_count)
        self._array: bytes = self._build_array(leaves, config)

        logger.debug(
            f"Built Merkle tree: {self._leaf_count} values, "
            f"{self._padded_leaf_count - self._leaf_count} padding leaves, "
            f"height {self.height}, algorithm {self._algorithm.value}"
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _hash_leaves(
        self,
        values: Iterable[Any],
        duplicate_policy: DuplicatePolicy,
    ) -> tuple[list[bytes], dict[bytes, int]]:
        leaves: list[bytes] = []
        index: dict[bytes, int] = {}
        duplicates = 0

        for i, value in enumerate(values):
            try:
                data = serialize_value(value)
            except SerializationError as e:
                e.details.setdefault("index", i)
                raise

            leaves.append(hash_bytes(data, self._algorithm))

            first = index.setdefault(data, i)
            if first != i:
                if duplicate_policy is DuplicatePolicy.REJECT:
                    raise DuplicateValueError(
                        f"Value at index {i} duplicates the value at index {first}",
                        first_index=first,
                        duplicate_index=i,
                    )
                duplicates += 1

        if not leaves:
            raise EmptyInputError()

        if duplicates:
            logger.warning(
                f"{duplicates} duplicate value(s) in input; proofs use the first occurrence"
            )

        return leaves, index

    def _build_array(self, leaves: list[bytes], config: TreeConfig) -> bytes:
        width = self._digest_size
        n = self._padded_leaf_count

        buf = bytearray(width * (2 * n - 1))
        for i, leaf in enumerate(leaves):
            buf[i * width:(i + 1) * width] = leaf
        # Pad with the last real leaf
        last = leaves[-1]
        for i in range(len(leaves), n):
            buf[i * width:(i + 1) * width] = last

        use_pool = config.parallel and n >= config.parallel_threshold
        if use_pool:
            logger.debug(f"Hashing levels with {config.max_workers} worker threads")
            with concurrent.futures.ThreadPoolExecutor(max_workers=config.max_workers) as pool:
                self._fill_levels(buf, config, pool)
        else:
            self._fill_levels(buf, config, None)

        return bytes(buf)

    def _fill_levels(
        self,
        buf: bytearray,
        config: TreeConfig,
        pool: Optional[concurrent.futures.Executor],
    ) -> None:
        width = self._digest_size
        level_start = 0
        level_len = self._padded_leaf_count

        while level_len > 1:
            pairs = level_len // 2
            if pool is not None and pairs >= config.parallel_threshold // 2:
                # Pairs within a level are independent; levels stay sequential
                chunk = -(-pairs // config.max_workers)
                futures = [
                    pool.submit(self._hash_pairs, buf, level_start, p, min(p + chunk, pairs))
                    for p in range(0, pairs, chunk)
                ]
                parents = [h for f in futures for h in f.result()]
            else:
                parents = self._hash_pairs(buf, level_start, 0, pairs)

            next_start = level_start + level_len
            for j, parent in enumerate(parents):
                offset = (next_start + j) * width
                buf[offset:offset + width] = parent

            level_start = next_start
            level_len = pairs

    def _hash_pairs(self, buf: bytearray, level_start: int, first: int, stop: int) -> list[bytes]:
        width = self._digest_size
        result: list[bytes] = []
        for p in range(first, stop):
            offset = (level_start + 2 * p) * width
            left = buf[offset:offset + width]
            right = buf[offset + width:offset + 2 * width]
            result.append(combine(left, right, self._algorithm))
        return result

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def root(self) -> bytes:
        """The tree's commitment: the last node of the array."""
        return self._array[-self._digest_size:]

    @property
    def algorithm(self) -> HashAlgorithm:
        return self._algorithm

    @property
    def digest_size(self) -> int:
        return self._digest_size

    @property
    def leaf_count(self) -> int:
        """Number of input values (before padding)."""
        return self._leaf_count

    @property
    def padded_leaf_count(self) -> int:
        return self._padded_leaf_count

    @property
    def height(self) -> int:
        """Number of levels, leaves and root included."""
        return self._padded_leaf_count.bit_length()

    @property
    def node_count(self) -> int:
        return len(self._array) // self._digest_size

    @property
    def data_size(self) -> int:
        """Size of the flat array in bytes."""
        return len(self._array)

    def node(self, index: int) -> bytes:
        """Hash stored at array position ``index`` (leaves first)."""
        if index < 0 or index >= self.node_count:
            raise IndexError(f"Node index {index} out of range for {self.node_count} nodes")
        offset = index * self._digest_size
        return self._array[offset:offset + self._digest_size]

    def level(self, depth: int) -> list[bytes]:
        """
        All hashes of one level; 0 is the (padded) leaf level and
        ``height - 1`` the root level.
        """
        if depth < 0 or depth >= self.height:
            raise IndexError(f"Level {depth} out of range for height {self.height}")
        start = 0
        length = self._padded_leaf_count
        for _ in range(depth):
            start += length
            length //= 2
        return [self.node(start + i) for i in range(length)]

    def leaves(self) -> list[bytes]:
        """Leaf hashes including padding."""
        return self.level(0)

    def index_of(self, value: Any) -> int:
        """
        Leaf index of ``value`` (its first occurrence).

        Raises:
            NotFoundError: If the value was not part of the input
            SerializationError: If the value cannot be serialized
        """
        index = self._index.get(serialize_value(value))
        if index is None:
            raise NotFoundError(
                "Value is not in the tree",
                details={"type": type(value).__name__},
            )
        return index

    def __contains__(self, value: Any) -> bool:
        try:
            return serialize_value(value) in self._index
        except SerializationError:
            return False

    def __len__(self) -> int:
        return self._leaf_count

    def __repr__(self) -> str:
        return (
            f"MerkleTree(leaves={self._leaf_count}, height={self.height}, "
            f"algorithm={self._algorithm.value!r}, root={self.root.hex()!r})"
        )

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def build_proof(self, value: Any) -> Proof:
        """
        Build the inclusion proof for ``value``.

        Raises:
            NotFoundError: If the value was not part of the input
        """
        index = self.index_of(value)
        siblings = build_proof_from_array(
            self._array,
            self._digest_size,
            self._padded_leaf_count,
            index,
        )
        logger.debug(f"Built proof for leaf {index} with {len(siblings)} siblings")
        return Proof(
            siblings=tuple(siblings),
            leaf=self.node(index),
            algorithm=self._algorithm,
        )

    def validate(self, value: Any, proof: ProofLike) -> bool:
        """Validate a proof against this tree's own root and algorithm."""
        return validate_proof(value, proof, self.root, self._algorithm)


def build(
    values: Iterable[Any],
    algorithm: HashAlgorithm | str | None = None,
    config: Optional[TreeConfig] = None,
) -> MerkleTree:
    """
    Build a MerkleTree over ``values``.

    Example:
        >>> tree = build(["a"], HashAlgorithm.SHA256)
        >>> tree.root == hash_bytes(b"a")
        True
    """
    return MerkleTree(values, algorithm=algorithm, config=config)


__all__ = [
    "MerkleTree",
    "build",
    "compute_tree_height",
    "next_power_of_two",
]
