"""
Registry Pattern
================

A Registry is a well-known object that other objects use to find common
objects and services by name. Underneath it is an associative array with an
object-oriented interface, which makes it a good base for other keyed
patterns (the flyweight factory keeps its cache in one).

RegistryMixin adds the behaviour to any class. Storage is created on first
use, so hosts do not have to declare or initialize anything.

Usage:
    class Services(RegistryMixin):
        pass

    services = Services()
    services.set("db", connection).set("cache", client)
    services.get("db")           # connection
    services.get("mail", None)   # None, nothing stored

    registry = Registry(maxsize=128)   # bounded, least recently used first out
"""

from typing import Any, Dict, List, MutableMapping, Optional

from cachetools import Cache, LRUCache

# Sentinel object for "key not found"
_MISSING = object()


class RegistryMixin:
    """
    Key/value registry behaviour for arbitrary host classes.

    Mutating operations return ``self`` for chaining. Lookups never raise:
    a missing key yields the supplied default or ``False``.
    """

    def _create_registry_storage(self) -> MutableMapping:
        """Build the backing mapping. Override to change the container."""
        return {}

    @property
    def _registry_data(self) -> MutableMapping:
        storage = getattr(self, "_registry_storage", None)
        if storage is None:
            storage = self._create_registry_storage()
            self._registry_storage = storage
        return storage

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get an object/value out of the registry.

        Args:
            key: The key of the object/value to retrieve
            default: The value to return if the key is missing

        Returns:
            The stored object/value, or default
        """
        value = self._registry_data.get(key, _MISSING)
        return default if value is _MISSING else value

    def set(self, key: str, value: Any) -> "RegistryMixin":
        """Store an object/value under key, replacing any previous one."""
        self._registry_data[key] = value
        return self

    def has(self, key: str) -> bool:
        """Check whether key exists in the registry."""
        return key in self._registry_data

    def remove(self, key: str) -> "RegistryMixin":
        """Remove the entry for key. Missing keys are ignored."""
        self._registry_data.pop(key, None)
        return self

    def clear(self) -> "RegistryMixin":
        """Remove all objects/values from the registry."""
        self._registry_data.clear()
        return self

    def all(self) -> Dict[str, Any]:
        """Return a copy of all entries; changing it leaves the registry alone."""
        storage = self._registry_data
        if isinstance(storage, Cache):
            # Plain Cache lookups leave LRU recency untouched
            return {key: Cache.__getitem__(storage, key) for key in storage}
        return dict(storage)

    def is_empty(self) -> bool:
        return len(self._registry_data) == 0

    def keys(self) -> List[str]:
        """Return all keys."""
        return list(self._registry_data.keys())

    def count(self) -> int:
        """Return number of entries."""
        return len(self._registry_data)


class Registry(RegistryMixin):
    """
    Standalone registry with the container protocol on top of RegistryMixin.

    Unbounded by default. With ``maxsize`` the entries live in a
    ``cachetools.LRUCache``: once full, setting a new key drops the least
    recently used one, and ``get`` counts as a use.
    """

    def __init__(self, maxsize: Optional[int] = None):
        if maxsize is not None and maxsize <= 0:
            raise ValueError(f"maxsize must be a positive integer, got {maxsize}")
        self._maxsize = maxsize

    def _create_registry_storage(self) -> MutableMapping:
        if self._maxsize is None:
            return {}
        return LRUCache(maxsize=self._maxsize)

    @property
    def maxsize(self) -> Optional[int]:
        return self._maxsize

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key: Any) -> bool:
        return self.has(key)

    def __iter__(self):
        return iter(self.keys())

    def __getitem__(self, key: str) -> Any:
        """Get value for key, raises KeyError if not found."""
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        """Delete key, raises KeyError if not found."""
        if not self.has(key):
            raise KeyError(key)
        self.remove(key)

    def __repr__(self) -> str:
        bound = "" if self._maxsize is None else f", maxsize={self._maxsize}"
        return f"{type(self).__name__}({self.keys()!r}{bound})"


def create_registry(maxsize: Optional[int] = None) -> Registry:
    """
    Create a registry with specified settings.

    Args:
        maxsize: Bound on the number of entries, or None for unbounded

    Returns:
        Configured Registry instance
    """
    return Registry(maxsize=maxsize)
