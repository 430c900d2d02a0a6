"""
Unit tests for dependency descriptors and graph flattening.
"""

import pytest

from rust_codegen.core.config import RuntimeConfig
from rust_codegen.core.dependencies import (
    FASTRAND,
    SERDE,
    CargoDependency,
    CratesIo,
    DependencyScope,
    InlineDependency,
    Local,
    flatten_dependencies,
    protocol_test_helpers,
    smithy_types,
)
from rust_codegen.core.errors import CyclicInlineDependency


class TestCargoDependency:
    """Cargo coordinates and their Cargo.toml rendering."""

    def test_crates_io_with_features(self):
        assert SERDE.to_toml() == '{ version = "1", features = ["derive"] }'

    def test_local_path_uses_relative_path(self):
        dependency = smithy_types(RuntimeConfig(relative_path="../../runtime/"))

        assert dependency.name == "smithy-types"
        assert dependency.to_toml() == '{ path = "../../runtime/smithy-types" }'

    def test_with_features_merges(self):
        dependency = CargoDependency("tokio", CratesIo("1"), features=frozenset({"rt"}))

        merged = dependency.with_features(["macros"])

        assert merged.features == frozenset({"rt", "macros"})
        assert dependency.features == frozenset({"rt"})

    def test_dev_scope_key(self):
        dependency = protocol_test_helpers(RuntimeConfig())

        assert dependency.scope == DependencyScope.DEV
        assert dependency.key == ("cargo", "dev-dependencies", "protocol-test-helpers")

    def test_locations_compare_by_value(self):
        assert Local("../") == Local("../")
        assert CratesIo("1") != CratesIo("2")


class TestInlineDependency:
    """Identity of inline dependencies."""

    def test_identity_ignores_renderer_and_extras(self):
        def render(writer):
            pass

        with_renderer = InlineDependency("json", "util", (FASTRAND,), render)

        assert with_renderer == InlineDependency("json", "util")
        assert with_renderer.key == ("inline", "util", "json")
        assert str(with_renderer) == "util::json"

    def test_same_name_in_different_modules_differs(self):
        assert InlineDependency("json", "util") != InlineDependency("json", "other")


class TestFlattenDependencies:
    """Depth-first flattening with deduplication and cycle detection."""

    def test_shared_requirement_appears_once(self):
        b = InlineDependency("b", "util")
        a = InlineDependency("a", "util", extra_dependencies=(b,))

        flattened = flatten_dependencies([a, b])

        assert flattened == [b, a]
        assert [d.key for d in flattened].count(b.key) == 1

    def test_requirements_precede_requirers(self):
        c = InlineDependency("c", "util", extra_dependencies=(SERDE,))
        b = InlineDependency("b", "util", extra_dependencies=(c, FASTRAND))
        a = InlineDependency("a", "util", extra_dependencies=(b,))

        assert flatten_dependencies([a]) == [SERDE, c, FASTRAND, b, a]

    def test_first_descriptor_wins(self):
        plain = CargoDependency("serde", CratesIo("1"))

        flattened = flatten_dependencies([plain, SERDE])

        assert len(flattened) == 1
        assert flattened[0].features == frozenset()

    def test_cycle_is_detected(self):
        # "a" again by key, so the graph is a -> b -> a
        b = InlineDependency("b", "util", extra_dependencies=(InlineDependency("a", "util"),))
        a = InlineDependency("a", "util", extra_dependencies=(b,))

        with pytest.raises(CyclicInlineDependency) as exc_info:
            flatten_dependencies([a])

        assert exc_info.value.cycle == ["inline:util::a", "inline:util::b", "inline:util::a"]
        assert "inline:util::a -> inline:util::b -> inline:util::a" in str(exc_info.value)

    def test_self_requirement_is_a_cycle(self):
        a = InlineDependency("a", "util", extra_dependencies=(InlineDependency("a", "util"),))

        with pytest.raises(CyclicInlineDependency):
            flatten_dependencies([a])

    def test_empty_input(self):
        assert flatten_dependencies([]) == []
