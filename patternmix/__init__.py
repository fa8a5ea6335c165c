"""
PatternMix - Classic Design Patterns as Mixins

Registry and Flyweight Factory behaviour that any class can mix in, plus
ready-made concrete classes for standalone use.
"""

from .flyweight import (
    ConstructionError,
    FlyweightFactoryMixin,
    ProducerFlyweightFactory,
    UnknownProducerError,
    create_flyweight_factory,
)
from .registry import Registry, RegistryMixin, create_registry
from .util.canonical import derive_key

__version__ = "0.1.0"

# Export all the main classes and functions
__all__ = [
    # Registry
    "RegistryMixin",
    "Registry",
    "create_registry",
    # Flyweight factory
    "FlyweightFactoryMixin",
    "ProducerFlyweightFactory",
    "create_flyweight_factory",
    "derive_key",
    # Exceptions
    "ConstructionError",
    "UnknownProducerError",
]
