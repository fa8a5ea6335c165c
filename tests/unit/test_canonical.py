"""
Tests for derived-key computation.
"""

import gc
from decimal import Decimal

import pytest

from patternmix.util.canonical import canonicalize, derive_key


class Opaque:
    def __init__(self, tag):
        self.tag = tag


class TestDeriveKey:
    """Test suite for derive_key()."""

    def test_equal_inputs_give_equal_keys(self):
        assert derive_key("Foo", {"a": 1}) == derive_key("Foo", {"a": 1})

    def test_context_order_does_not_matter(self):
        """Entry order is irrelevant, including nested mappings."""
        first = derive_key("Foo", {"a": 1, "b": {"x": 1, "y": 2}})
        second = derive_key("Foo", {"b": {"y": 2, "x": 1}, "a": 1})

        assert first == second

    def test_missing_and_empty_context_are_equal(self):
        assert derive_key("Foo") == derive_key("Foo", {}) == derive_key("Foo", None)

    def test_different_contexts_give_different_keys(self):
        assert derive_key("Foo", {"a": 1}) != derive_key("Foo", {"a": 2})
        assert derive_key("Foo", {"a": 1}) != derive_key("Foo", {"b": 1})
        assert derive_key("Foo", {"a": 1}) != derive_key("Foo", {"a": "1"})

    def test_different_identifiers_give_different_keys(self):
        assert derive_key("Foo") != derive_key("Bar")

    def test_identifier_cannot_collide_with_context(self):
        """Identifiers that look like serialized context stay distinct."""
        assert derive_key('Foo{"a":1}', {}) != derive_key("Foo", {"a": 1})
        assert derive_key('Foo",{"a":1}]', {}) != derive_key("Foo", {"a": 1})

    def test_key_format(self):
        assert derive_key("Foo", {"b": 2, "a": 1}) == '["Foo",{"a":1,"b":2}]'

    def test_numerically_equal_values_share_a_key(self):
        """Keys follow Python equality: 1 == 1.0 == True and 0.0 == -0.0."""
        assert {"a": 1} == {"a": 1.0} == {"a": True}
        assert (
            derive_key("Foo", {"a": 1})
            == derive_key("Foo", {"a": 1.0})
            == derive_key("Foo", {"a": True})
        )
        assert derive_key("Foo", {"a": 0.0}) == derive_key("Foo", {"a": -0.0})
        assert derive_key("Foo", {"a": 0.5}) != derive_key("Foo", {"a": 1})

    def test_tuples_and_lists_have_different_keys(self):
        """(1, 2) != [1, 2], so their keys differ as well."""
        assert derive_key("Foo", {"v": (1, 2)}) != derive_key("Foo", {"v": [1, 2]})

    def test_strings_never_match_containers(self):
        assert derive_key("Foo", {"v": ["list", 1]}) != derive_key("Foo", {"v": [1]})
        assert derive_key("Foo", {"v": '["list",1]'}) != derive_key("Foo", {"v": [1]})

    def test_rejects_values_without_canonical_form(self):
        with pytest.raises(TypeError, match="Decimal has no canonical form"):
            derive_key("Foo", {"v": Decimal("1")})
        with pytest.raises(TypeError, match="Opaque has no canonical form"):
            derive_key("Foo", {"cfg": Opaque(1)})

    def test_recycled_objects_cannot_alias_a_key(self):
        """Short-lived objects are rejected, never keyed by their address."""
        for i in range(20):
            with pytest.raises(TypeError):
                derive_key("Foo", {"cfg": Opaque(i)})
            gc.collect()

    def test_rejects_non_string_identifier(self):
        with pytest.raises(TypeError, match="Identifier must be a string"):
            derive_key(42, {})

    def test_rejects_non_mapping_context(self):
        with pytest.raises(TypeError, match="Context must be a mapping"):
            derive_key("Foo", [("a", 1)])


class TestCanonicalize:
    """Test suite for canonicalize()."""

    def test_scalars_pass_through(self):
        for value in ("text", 3, 2.5, None):
            assert canonicalize(value) == value

    def test_integral_numbers_collapse_to_int(self):
        assert canonicalize(True) == 1
        assert type(canonicalize(True)) is int
        assert type(canonicalize(2.0)) is int
        assert type(canonicalize(-0.0)) is int

    def test_containers_are_tagged(self):
        assert canonicalize([1, 2]) == ["list", 1, 2]
        assert canonicalize((1, 2)) == ["tuple", 1, 2]
        assert canonicalize({3, 1, 2}) == ["set", 1, 2, 3]

    def test_frozensets_match_equal_sets(self):
        assert canonicalize(frozenset({"b", "a"})) == canonicalize({"a", "b"})

    def test_mixed_sets_are_ordered_deterministically(self):
        assert canonicalize({1, "1"}) == canonicalize({"1", 1})

    def test_nested_structures(self):
        value = {"outer": [{"b": (1,), "a": {2}}]}

        assert canonicalize(value) == {
            "outer": ["list", {"b": ["tuple", 1], "a": ["set", 2]}]
        }

    def test_rejects_non_string_mapping_keys(self):
        with pytest.raises(TypeError, match="Context keys must be strings"):
            canonicalize({1: "one"})

    def test_rejects_nested_unsupported_values(self):
        with pytest.raises(TypeError, match="bytes has no canonical form"):
            canonicalize({"outer": [b"raw"]})
