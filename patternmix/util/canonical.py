"""
Canonical Key Derivation
========================

Turns an identifier and a context mapping into a single deterministic string,
used as the cache key of a flyweight factory.

The key is the compact JSON text of ``[identifier, context]`` with sorted
object keys, so:

- Context entry order never matters, at any nesting depth
- Identifier and context cannot bleed into each other
- Value-equal inputs always give the same key

Sequences and sets are written as JSON arrays whose first element names the
container (``"list"``, ``"tuple"``, ``"set"``). A string value is always a
JSON string, so it can never match a container. Numbers follow Python
equality: ``True``, ``1`` and ``1.0`` share a key, as do ``0.0`` and
``-0.0``.

Only JSON-like values have a canonical form. Anything else raises TypeError
rather than being keyed by an identity that can be recycled.

Usage:
    derive_key("Foo", {"b": 2, "a": 1})  # '["Foo",{"a":1,"b":2}]'
    derive_key("Foo", {"a": 1, "b": 2})  # same string
"""

import json
import math
from collections.abc import Mapping, Set
from typing import Any, Optional


def canonicalize(value: Any) -> Any:
    """
    Convert a context value into a JSON-compatible canonical form.

    Mappings keep their string keys. Lists, tuples and sets become tagged
    arrays, sets ordered by the JSON text of their members. Integral numbers
    collapse to ``int``.

    Raises:
        TypeError: If a mapping has a non-string key, or a value has no
            canonical form
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return value
    if isinstance(value, Mapping):
        canonical = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(
                    f"Context keys must be strings, got {type(key).__name__}: {key!r}"
                )
            canonical[key] = canonicalize(item)
        return canonical
    if isinstance(value, list):
        return ["list"] + [canonicalize(item) for item in value]
    if isinstance(value, tuple):
        return ["tuple"] + [canonicalize(item) for item in value]
    if isinstance(value, Set):
        members = sorted((canonicalize(item) for item in value), key=_dumps)
        return ["set"] + members
    raise TypeError(
        f"Context value of type {type(value).__name__} has no canonical form"
    )


def derive_key(identifier: str, context: Optional[Mapping] = None) -> str:
    """
    Compute the derived key for an (identifier, context) pair.

    Args:
        identifier: Name of the kind of object to produce
        context: Named construction parameters (defaults to empty)

    Returns:
        Deterministic key string

    Raises:
        TypeError: If identifier is not a string, context is not a mapping,
            or context holds a value with no canonical form
    """
    if not isinstance(identifier, str):
        raise TypeError(
            f"Identifier must be a string, got {type(identifier).__name__}"
        )
    if context is None:
        context = {}
    elif not isinstance(context, Mapping):
        raise TypeError(f"Context must be a mapping, got {type(context).__name__}")
    return _dumps([identifier, canonicalize(context)])


def _dumps(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))
