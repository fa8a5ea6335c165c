"""
PatternMix Utils - Support Classes for the Pattern Mixins
=========================================================

This package contains helpers shared by the pattern mixins.

Classes:
- KeyedLocks: Per-key mutual exclusion with automatic lock cleanup

Functions:
- derive_key: Canonical string key for an (identifier, context) pair
- canonicalize: JSON-compatible canonical form of a context value
"""

from .canonical import canonicalize, derive_key
from .key_locks import KeyedLocks

__all__ = [
    "KeyedLocks",
    "canonicalize",
    "derive_key",
]
