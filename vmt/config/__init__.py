"""
Runtime Configuration Module

Provides configuration loading and management for tree construction.
"""

from .runtime import DuplicatePolicy, TreeConfig, get_default_config, set_default_config

__all__ = [
    "DuplicatePolicy",
    "TreeConfig",
    "get_default_config",
    "set_default_config",
]
