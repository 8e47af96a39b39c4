"""Unit tests for the action registry.

Tests cover:
- Single-mutation and multi-mutation configurations
- Variables producer and options lookup (mapping or function)
- Cache-update target resolution by mutation field name
- Identity-keyed caching and explicit invalidation
"""

import pytest
from graphql import parse

from gqlform.actions import ActionRegistry, build_actions, lookup, pass_form_data
from gqlform.errors import StructureError


SAVE = parse("mutation ($name: String) { saveUser(name: $name) { id } }")
DELETE = parse("mutation ($id: ID!) { removed: deleteUser(id: $id) }")


class TestLookup:
    """Test mapping-or-function lookup."""

    def test_mapping(self):
        assert lookup({"a": 1}, "a") == 1
        assert lookup({"a": 1}, "b") is None

    def test_function(self):
        assert lookup(lambda name: name.upper(), "a") == "A"

    def test_none(self):
        assert lookup(None, "a") is None


class TestBuildActions:
    """Test building the action mapping."""

    def test_single_mutation_registered_under_submit_action(self):
        actions = build_actions(mutation=SAVE, submit_action="save")
        assert list(actions) == ["save"]
        assert actions["save"].mutation is SAVE

    def test_single_mutation_overrides_multi_actions(self):
        actions = build_actions(mutation=SAVE, mutations={"submit": DELETE, "delete": DELETE})
        assert list(actions) == ["submit"]
        assert actions["submit"].mutation is SAVE

    def test_multi_actions(self):
        actions = build_actions(mutations={"save": SAVE, "delete": DELETE})
        assert set(actions) == {"save", "delete"}

    def test_source_text_is_parsed(self):
        actions = build_actions(mutations={"ping": "mutation { ping }"})
        assert actions["ping"].mutation.definitions[0].selection_set.selections[0].name.value == "ping"

    def test_single_mutation_variables_producer(self):
        producer = lambda data: {"name": data["first"]}  # noqa: E731
        actions = build_actions(mutation=SAVE, mutation_variables=producer)
        assert actions["submit"].variables_producer is producer

    def test_missing_producer_defaults_to_form_data(self):
        actions = build_actions(mutations={"save": SAVE})
        assert actions["save"].variables_producer is pass_form_data

    def test_producers_by_mapping_and_function(self):
        producer = lambda data: data  # noqa: E731
        by_mapping = build_actions(mutations={"save": SAVE}, mutations_variables={"save": producer})
        by_function = build_actions(mutations={"save": SAVE}, mutations_variables=lambda name: producer)
        assert by_mapping["save"].variables_producer is producer
        assert by_function["save"].variables_producer is producer

    def test_options_lookup(self):
        actions = build_actions(
            mutations={"save": SAVE, "delete": DELETE},
            mutations_options={"save": {"refetch_queries": ["Users"]}},
        )
        assert actions["save"].options == {"refetch_queries": ["Users"]}
        assert actions["delete"].options == {}

    def test_cache_update_by_field_name(self):
        update = object()
        actions = build_actions(mutations={"delete": DELETE}, cache_updates={"deleteUser": update})
        assert actions["delete"].cache_update is update

    def test_cache_update_by_resolver(self):
        actions = build_actions(mutations={"save": SAVE}, cache_updates=lambda name: f"update:{name}")
        assert actions["save"].cache_update == "update:saveUser"

    def test_cache_update_ignores_alias(self):
        actions = build_actions(mutations={"delete": DELETE}, cache_updates={"removed": "wrong"})
        assert actions["delete"].cache_update is None

    def test_mutation_without_field_raises(self):
        with pytest.raises(StructureError):
            build_actions(mutations={"bad": parse("fragment F on User { id }")})


class TestActionRegistry:
    """Test identity-keyed registry caching."""

    def test_same_sources_reuse_registry(self):
        registry = ActionRegistry()
        mutations = {"save": SAVE}
        first = registry.get(mutations=mutations)
        assert registry.get(mutations=mutations) is first

    def test_equal_but_distinct_sources_rebuild(self):
        registry = ActionRegistry()
        first = registry.get(mutations={"save": SAVE})
        second = registry.get(mutations={"save": SAVE})
        assert second is not first
        assert second == first

    def test_replaced_producer_rebuilds(self):
        registry = ActionRegistry()
        mutations = {"save": SAVE}
        first = registry.get(mutations=mutations, mutations_variables={"save": pass_form_data})
        producer = lambda data: {}  # noqa: E731
        second = registry.get(mutations=mutations, mutations_variables={"save": producer})
        assert second is not first
        assert second["save"].variables_producer is producer

    def test_in_place_change_is_not_detected(self):
        registry = ActionRegistry()
        mutations = {"save": SAVE}
        first = registry.get(mutations=mutations)
        mutations["delete"] = DELETE
        assert registry.get(mutations=mutations) is first

    def test_invalidate_forces_rebuild(self):
        registry = ActionRegistry()
        mutations = {"save": SAVE}
        first = registry.get(mutations=mutations)
        registry.invalidate()
        assert registry.get(mutations=mutations) is not first

    def test_unknown_sources_rejected(self):
        with pytest.raises(TypeError):
            ActionRegistry().get(mutationz={})
