"""
Hashing Unit Tests
Tests for vmt/crypto/hashing.py

Tests:
- hash_bytes matches hashlib for every supported algorithm
- combine is commutative and sorts its operands
- hash_value routes through value serialization
- to_hex/from_hex round trip and error handling
"""
import hashlib

import pytest

from vmt.crypto.hashing import (
    DEFAULT_ALGORITHM,
    HashAlgorithm,
    combine,
    from_hex,
    hash_bytes,
    hash_value,
    sha256,
    to_hex,
)
from vmt.schemas.errors import SerializationError


class TestHashAlgorithm:
    """Tests for the HashAlgorithm enum."""

    @pytest.mark.parametrize("algorithm", list(HashAlgorithm))
    def test_digest_size_matches_hashlib(self, algorithm):
        """digest_size is the hashlib digest width."""
        assert algorithm.digest_size == hashlib.new(algorithm.value).digest_size

    def test_default_is_sha256(self):
        """SHA-256 is the default algorithm."""
        assert DEFAULT_ALGORITHM is HashAlgorithm.SHA256
        assert DEFAULT_ALGORITHM.digest_size == 32

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("sha256", HashAlgorithm.SHA256),
            ("SHA-256", HashAlgorithm.SHA256),
            ("sha3-256", HashAlgorithm.SHA3_256),
            ("SHA3_512", HashAlgorithm.SHA3_512),
            ("Blake2b", HashAlgorithm.BLAKE2B),
            (HashAlgorithm.BLAKE2S, HashAlgorithm.BLAKE2S),
        ],
    )
    def test_parse_loose_names(self, name, expected):
        """parse accepts members, values and loose spellings."""
        assert HashAlgorithm.parse(name) is expected

    def test_parse_unknown_raises(self):
        """Unknown names are rejected."""
        with pytest.raises(ValueError, match="Unsupported hash algorithm"):
            HashAlgorithm.parse("md5")


class TestHashBytes:
    """Tests for hash_bytes()."""

    def test_sha256_known_value(self):
        """Default algorithm produces the SHA-256 digest."""
        expected = hashlib.sha256(b"hello").digest()

        assert hash_bytes(b"hello") == expected
        assert sha256(b"hello") == expected

    def test_empty_bytes(self):
        """Empty input hashes deterministically."""
        assert hash_bytes(b"") == hashlib.sha256(b"").digest()

    @pytest.mark.parametrize("algorithm", list(HashAlgorithm))
    def test_every_algorithm_matches_hashlib(self, algorithm):
        """Each algorithm delegates to the matching hashlib constructor."""
        data = b"test data for hashing"
        expected = hashlib.new(algorithm.value, data).digest()

        result = hash_bytes(data, algorithm)

        assert result == expected
        assert len(result) == algorithm.digest_size

    def test_different_algorithms_differ(self):
        """Different algorithms give different digests."""
        assert hash_bytes(b"x", HashAlgorithm.SHA256) != hash_bytes(b"x", HashAlgorithm.SHA3_256)


class TestHashValue:
    """Tests for hash_value()."""

    def test_string_hashes_utf8_bytes(self):
        """A string leaf is the hash of its UTF-8 bytes."""
        assert hash_value("a") == hashlib.sha256(b"a").digest()
        assert hash_value("ü") == hashlib.sha256("ü".encode("utf-8")).digest()

    def test_bytes_hash_unchanged(self):
        """Raw bytes are hashed as-is."""
        assert hash_value(b"\x00\x01") == hashlib.sha256(b"\x00\x01").digest()

    def test_dict_key_order_irrelevant(self):
        """Structured values hash through canonical JSON."""
        assert hash_value({"b": 2, "a": 1}) == hash_value({"a": 1, "b": 2})
        assert hash_value({"a": 1, "b": 2}) == hashlib.sha256(b'\xff{"a":1,"b":2}').digest()

    def test_unserializable_raises(self):
        """Values that cannot be serialized raise SerializationError."""
        with pytest.raises(SerializationError):
            hash_value(object())


class TestCombine:
    """Tests for the commutative pair hash."""

    def test_commutative(self):
        """combine(a, b) == combine(b, a)."""
        a = sha256(b"a")
        b = sha256(b"b")

        assert combine(a, b) == combine(b, a)

    def test_smaller_operand_first(self):
        """The byte-wise smaller hash is concatenated first."""
        a = sha256(b"a")
        b = sha256(b"b")
        lo, hi = sorted((a, b))

        assert combine(a, b) == hashlib.sha256(lo + hi).digest()

    def test_equal_operands(self):
        """Combining a hash with itself is H(x || x)."""
        x = sha256(b"x")

        assert combine(x, x) == hashlib.sha256(x + x).digest()

    @pytest.mark.parametrize("algorithm", list(HashAlgorithm))
    def test_commutative_for_every_algorithm(self, algorithm):
        """Commutativity does not depend on the hash function."""
        for i in range(20):
            a = hash_bytes(f"left{i}".encode(), algorithm)
            b = hash_bytes(f"right{i}".encode(), algorithm)
            assert combine(a, b, algorithm) == combine(b, a, algorithm)

    def test_accepts_bytearray(self):
        """bytearray operands give the same result as bytes."""
        a = sha256(b"a")
        b = sha256(b"b")

        assert combine(bytearray(a), bytearray(b)) == combine(a, b)


class TestHexConversion:
    """Tests for to_hex() and from_hex() functions."""

    def test_to_hex_format(self):
        """to_hex produces 0x-prefixed lowercase hex."""
        assert to_hex(bytes.fromhex("deadbeef")) == "0xdeadbeef"

    def test_from_hex(self):
        """from_hex decodes 0x-prefixed hex."""
        assert from_hex("0xdeadbeef") == bytes.fromhex("deadbeef")

    def test_round_trip(self):
        """Digest survives a hex round trip."""
        digest = sha256(b"round trip")

        assert from_hex(to_hex(digest)) == digest

    def test_from_hex_requires_prefix(self):
        """Missing 0x prefix is rejected."""
        with pytest.raises(ValueError, match="0x"):
            from_hex("deadbeef")

    def test_from_hex_odd_length(self):
        """Odd-length hex is rejected."""
        with pytest.raises(ValueError, match="even length"):
            from_hex("0xabc")

    def test_from_hex_invalid_chars(self):
        """Non-hex characters are rejected."""
        with pytest.raises(ValueError, match="Invalid hex"):
            from_hex("0xzz")

    @pytest.mark.parametrize("text", ["0xde  ad", "0x de ad", "0xdead\n", "0x\tdead"])
    def test_from_hex_rejects_whitespace(self, text):
        """Whitespace inside the digits is not hex."""
        with pytest.raises(ValueError, match="Invalid hex"):
            from_hex(text)
