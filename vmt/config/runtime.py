"""
Runtime Configuration

Default settings for tree construction: hash algorithm, duplicate-value
policy and per-level parallelism.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from vmt.crypto.hashing import DEFAULT_ALGORITHM, HashAlgorithm
from vmt.schemas.errors import ConfigurationError

load_dotenv()


class DuplicatePolicy(str, Enum):
    """What to do when the same value appears more than once in the input."""
    FIRST = "first"    # proofs point at the first occurrence
    REJECT = "reject"  # building fails with DuplicateValueError


@dataclass
class TreeConfig:
    """
    Configuration for building Merkle trees.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    hash_algorithm: HashAlgorithm = DEFAULT_ALGORITHM
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.FIRST
    max_workers: int = 1
    parallel_threshold: int = 1024

    def __post_init__(self) -> None:
        try:
            self.hash_algorithm = HashAlgorithm.parse(self.hash_algorithm)
        except ValueError as e:
            raise ConfigurationError(str(e), field_name="hash_algorithm") from e
        if not isinstance(self.duplicate_policy, DuplicatePolicy):
            try:
                self.duplicate_policy = DuplicatePolicy(str(self.duplicate_policy).strip().lower())
            except ValueError as e:
                raise ConfigurationError(
                    f"Unsupported duplicate policy: {self.duplicate_policy!r}",
                    field_name="duplicate_policy",
                ) from e
        self.max_workers = _as_int(self.max_workers, "max_workers", minimum=1)
        self.parallel_threshold = _as_int(self.parallel_threshold, "parallel_threshold", minimum=2)

    @property
    def parallel(self) -> bool:
        """True when level hashing may be spread over worker threads."""
        return self.max_workers > 1

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - VMT_HASH_ALGORITHM: hash algorithm name (e.g. sha256, sha3-256)
        - VMT_DUPLICATE_POLICY: "first" or "reject"
        - VMT_MAX_WORKERS: worker threads for level hashing (1 = sequential)
        - VMT_PARALLEL_THRESHOLD: minimum level size hashed in parallel
        """
        overrides: dict[str, Any] = {}

        if os.getenv("VMT_HASH_ALGORITHM"):
            overrides["hash_algorithm"] = os.getenv("VMT_HASH_ALGORITHM")
        if os.getenv("VMT_DUPLICATE_POLICY"):
            overrides["duplicate_policy"] = os.getenv("VMT_DUPLICATE_POLICY")
        if os.getenv("VMT_MAX_WORKERS"):
            overrides["max_workers"] = os.getenv("VMT_MAX_WORKERS")
        if os.getenv("VMT_PARALLEL_THRESHOLD"):
            overrides["parallel_threshold"] = os.getenv("VMT_PARALLEL_THRESHOLD")

        return overrides

    @classmethod
    def from_env(cls) -> "TreeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "TreeConfig":
        """
        Load configuration from a YAML file.

        The settings may sit at the top level or under a ``tree:`` key.
        """
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {path}")
        if isinstance(data.get("tree"), dict):
            data = data["tree"]
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TreeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        known = {"hash_algorithm", "duplicate_policy", "max_workers", "parallel_threshold"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {sorted(unknown)}",
                details={"unknown": sorted(unknown)},
            )
        return cls(**data)

    def with_env_overrides(self) -> "TreeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        data = self.to_dict()
        data.update(overrides)
        return TreeConfig.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "hash_algorithm": self.hash_algorithm.value,
            "duplicate_policy": self.duplicate_policy.value,
            "max_workers": self.max_workers,
            "parallel_threshold": self.parallel_threshold,
        }

    def copy(self, **changes: Any) -> "TreeConfig":
        """Return a copy with the given fields replaced."""
        new_config = copy.copy(self)
        for key, value in changes.items():
            if not hasattr(new_config, key):
                raise ConfigurationError(f"Unknown configuration key: {key}", field_name=key)
            setattr(new_config, key, value)
        new_config.__post_init__()
        return new_config


def _as_int(value: Any, field_name: str, minimum: int) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer, got {value!r}", field_name=field_name)
    try:
        result = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"{field_name} must be an integer, got {value!r}",
            field_name=field_name,
        ) from e
    if result < minimum:
        raise ConfigurationError(
            f"{field_name} must be >= {minimum}, got {result}",
            field_name=field_name,
        )
    return result


# Global default configuration
_default_config: Optional[TreeConfig] = None


def get_default_config() -> TreeConfig:
    """Get the default tree configuration (loaded from env on first use)."""
    global _default_config
    if _default_config is None:
        _default_config = TreeConfig.from_env()
    return _default_config


def set_default_config(config: Optional[TreeConfig]) -> None:
    """Set the default tree configuration. None resets to env defaults."""
    global _default_config
    _default_config = config
