"""
Flyweight Factory Pattern
=========================

A flyweight factory hands out shared objects instead of building a fresh
duplicate every time a logically identical object is requested. Requests name
the kind of object (the identifier) and its construction parameters (the
context); both are folded into a derived key that indexes a Registry cache.

FlyweightFactoryMixin adds ``acquire()`` to any class that implements
``construct()``:

    class Exceptions(FlyweightFactoryMixin):
        def construct(self, identifier, context):
            return EXCEPTIONS[identifier](**context)

    factory = Exceptions()
    factory.acquire("Timeout") is factory.acquire("Timeout")  # True

ProducerFlyweightFactory replaces the override with an explicit table of
producers:

    factory = ProducerFlyweightFactory()

    @factory.producer("point")
    def make_point(x=0, y=0):
        return Point(x, y)

    factory.acquire("point", {"x": 1, "y": 2})

Thread Safety:
    acquire() may be called from several threads. Construction is serialized
    per derived key, so one key never gets two constructions racing while
    unrelated keys proceed in parallel.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional

from .registry import Registry, RegistryMixin
from .util.canonical import derive_key
from .util.key_locks import KeyedLocks

# Sentinel object for "key not found"
_MISSING = object()

# Guards lazy creation of per-instance factory state
_STATE_GUARD = threading.Lock()


class ConstructionError(Exception):
    """Raised when a flyweight cannot be constructed."""

    pass


class UnknownProducerError(ConstructionError, LookupError):
    """Raised when no producer is registered for an identifier."""

    def __init__(self, identifier: str):
        super().__init__(f"No producer registered for identifier {identifier!r}")
        self.identifier = identifier


class _FlyweightState:
    """Cache, locks and counters owned by one factory instance."""

    __slots__ = ("store", "locks", "_stats", "_stats_lock")

    def __init__(self, store: RegistryMixin):
        self.store = store
        self.locks = KeyedLocks()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "constructions": 0,
            "failures": 0,
        }
        self._stats_lock = threading.Lock()

    def count(self, name: str) -> None:
        with self._stats_lock:
            self._stats[name] += 1

    def snapshot(self) -> Dict[str, Any]:
        with self._stats_lock:
            stats = self._stats.copy()
        stats["cached"] = self.store.count()
        requests = stats["hits"] + stats["misses"]
        stats["hit_rate"] = stats["hits"] / requests if requests > 0 else 0
        return stats


class FlyweightFactoryMixin:
    """
    Flyweight factory behaviour for arbitrary host classes.

    Hosts implement ``construct(identifier, context)``. The cache is a
    Registry owned by the instance and created on first use; nothing in it
    expires on its own. Failures raised by ``construct`` reach the caller of
    ``acquire`` untouched and are never cached.
    """

    def _create_flyweight_store(self) -> RegistryMixin:
        """Build the Registry used as flyweight cache. Override to swap it."""
        return Registry()

    @property
    def _flyweight_state(self) -> _FlyweightState:
        state = getattr(self, "_flyweight_state_obj", None)
        if state is None:
            with _STATE_GUARD:
                state = getattr(self, "_flyweight_state_obj", None)
                if state is None:
                    state = _FlyweightState(self._create_flyweight_store())
                    self._flyweight_state_obj = state
        return state

    def acquire(self, identifier: str, context: Optional[Mapping] = None) -> Any:
        """
        Get the shared object for identifier and context, building it once.

        Args:
            identifier: Name of the kind of object to produce
            context: Named construction parameters (defaults to empty)

        Returns:
            The cached object for the derived key, or a newly constructed one

        Raises:
            TypeError: If identifier is not a string or context not a mapping
            Exception: Whatever ``construct`` raises, unmodified
        """
        derived_key = derive_key(identifier, context)
        state = self._flyweight_state
        store = state.store

        value = store.get(derived_key, _MISSING)
        if value is not _MISSING:
            state.count("hits")
            return value

        with state.locks.hold(derived_key):
            # Another thread may have built it while we waited
            value = store.get(derived_key, _MISSING)
            if value is not _MISSING:
                state.count("hits")
                return value

            state.count("misses")
            try:
                value = self.construct(identifier, dict(context or {}))
            except Exception as e:
                state.count("failures")
                logging.debug(f"Constructing flyweight {derived_key} failed: {e!r}")
                raise

            store.set(derived_key, value)
            state.count("constructions")

        logging.debug(f"Constructed flyweight {derived_key}")
        return value

    def construct(self, identifier: str, context: Dict[str, Any]) -> Any:
        """
        Build a new object for identifier from context.

        Extension point: hosts must override this. Signal unknown identifiers
        or bad context by raising (ConstructionError is provided for that).
        """
        raise NotImplementedError(
            f"{type(self).__name__} must implement construct(identifier, context)"
        )

    def is_cached(self, identifier: str, context: Optional[Mapping] = None) -> bool:
        """Check whether a flyweight exists for identifier and context."""
        return self._flyweight_state.store.has(derive_key(identifier, context))

    def release(self, identifier: str, context: Optional[Mapping] = None) -> bool:
        """
        Drop the cached flyweight for identifier and context.

        Returns:
            True if a flyweight was cached, False otherwise
        """
        derived_key = derive_key(identifier, context)
        state = self._flyweight_state
        with state.locks.hold(derived_key):
            if not state.store.has(derived_key):
                return False
            state.store.remove(derived_key)
        logging.debug(f"Released flyweight {derived_key}")
        return True

    def clear_flyweights(self) -> None:
        """Drop every cached flyweight."""
        state = self._flyweight_state
        dropped = state.store.count()
        state.store.clear()
        logging.debug(f"Cleared {dropped} flyweights from {type(self).__name__}")

    def flyweight_count(self) -> int:
        return self._flyweight_state.store.count()

    def flyweights(self) -> Dict[str, Any]:
        """Return a copy of the cache, derived key -> flyweight."""
        return self._flyweight_state.store.all()

    def flyweight_stats(self) -> Dict[str, Any]:
        """Get statistics about acquire() calls and the cache."""
        return self._flyweight_state.snapshot()


class ProducerFlyweightFactory(FlyweightFactoryMixin):
    """
    Flyweight factory that builds objects through registered producers.

    A producer is any callable; ``construct`` calls it with the context as
    keyword arguments. Identifiers without a producer raise
    UnknownProducerError from ``acquire``.
    """

    def __init__(self):
        self._producers = Registry()

    def register(
        self, identifier: str, producer: Callable[..., Any]
    ) -> "ProducerFlyweightFactory":
        """Register producer for identifier, replacing any previous one."""
        if not isinstance(identifier, str):
            raise TypeError(
                f"Identifier must be a string, got {type(identifier).__name__}"
            )
        if not callable(producer):
            raise TypeError(f"Producer for {identifier!r} must be callable")
        self._producers.set(identifier, producer)
        return self

    def unregister(self, identifier: str) -> "ProducerFlyweightFactory":
        """Forget the producer for identifier. Cached flyweights stay."""
        self._producers.remove(identifier)
        return self

    def producer(self, identifier: str) -> Callable[[Callable], Callable]:
        """Decorator form of register()."""

        def decorator(func: Callable) -> Callable:
            self.register(identifier, func)
            return func

        return decorator

    def has_producer(self, identifier: str) -> bool:
        return self._producers.has(identifier)

    def identifiers(self) -> List[str]:
        """Return all identifiers with a registered producer."""
        return self._producers.keys()

    def construct(self, identifier: str, context: Dict[str, Any]) -> Any:
        producer = self._producers.get(identifier)
        if producer is None:
            raise UnknownProducerError(identifier)
        return producer(**context)


def create_flyweight_factory(
    producers: Optional[Mapping[str, Callable[..., Any]]] = None,
) -> ProducerFlyweightFactory:
    """
    Create a producer-backed flyweight factory.

    Args:
        producers: Optional mapping of identifier -> producer to register

    Returns:
        Configured ProducerFlyweightFactory instance
    """
    factory = ProducerFlyweightFactory()
    for identifier, producer in (producers or {}).items():
        factory.register(identifier, producer)
    return factory
