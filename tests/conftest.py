"""
Shared pytest fixtures and configuration for PatternMix tests.
"""

import pytest

from patternmix import (
    ConstructionError,
    FlyweightFactoryMixin,
    ProducerFlyweightFactory,
    Registry,
)


class FooError(Exception):
    pass


class BarError(Exception):
    pass


class ExceptionFlyweights(FlyweightFactoryMixin):
    """Builds ``<identifier>Error`` instances and records every construction."""

    KNOWN = {"Foo": FooError, "Bar": BarError}

    def __init__(self):
        self.constructed = []

    def construct(self, identifier, context):
        self.constructed.append((identifier, context))
        error_class = self.KNOWN.get(identifier)
        if error_class is None:
            raise ConstructionError(f"Unknown exception kind: {identifier}")
        return error_class(*context.get("args", ()))


@pytest.fixture
def registry():
    """Provide a fresh unbounded Registry."""
    return Registry()


@pytest.fixture
def exception_factory():
    """Provide a fresh flyweight factory over FooError/BarError."""
    return ExceptionFlyweights()


@pytest.fixture
def producer_factory():
    """Provide a fresh ProducerFlyweightFactory with no producers."""
    return ProducerFlyweightFactory()


@pytest.fixture
def exception_kinds():
    """Provide the exception classes built by exception_factory, by identifier."""
    return dict(ExceptionFlyweights.KNOWN)
