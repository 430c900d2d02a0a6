"""
Unit tests for the per-unit dependency manifest.
"""

import threading

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
    protocol_test_helpers,
    smithy_types,
)
from rust_codegen.core.errors import CyclicInlineDependency, DependencyConflict
from rust_codegen.core.manifest import DependencyManifest


class TestRegistration:
    """register() idempotence and merge semantics."""

    def test_register_is_idempotent(self):
        manifest = DependencyManifest()

        assert manifest.register(SERDE) is True
        assert manifest.register(SERDE) is False
        assert len(manifest) == 1

    def test_value_equal_registrations_collapse(self):
        manifest = DependencyManifest()

        manifest.register(smithy_types(RuntimeConfig()))
        manifest.register(smithy_types(RuntimeConfig()))

        assert manifest.dependencies() == [smithy_types(RuntimeConfig())]

    def test_features_merge(self):
        manifest = DependencyManifest([CargoDependency("serde", CratesIo("1"))])

        assert manifest.register(SERDE) is True
        assert manifest.dependencies()[0].features == frozenset({"derive"})

    def test_location_conflict(self):
        manifest = DependencyManifest([SERDE])

        with pytest.raises(DependencyConflict):
            manifest.register(CargoDependency("serde", CratesIo("2")))

    def test_scopes_are_separate(self):
        manifest = DependencyManifest()
        compile_dep = CargoDependency("protocol-test-helpers", Local("../"))

        manifest.register(compile_dep)
        manifest.register(protocol_test_helpers(RuntimeConfig()))

        assert len(manifest) == 2

    def test_inline_registered_once(self):
        manifest = DependencyManifest()

        manifest.register(InlineDependency("json", "util"))
        manifest.register(InlineDependency("json", "util", renderer=lambda w: None))

        assert len(manifest) == 1
        assert InlineDependency("json", "util") in manifest

    def test_merge_keeps_order(self):
        first = DependencyManifest([SERDE])
        second = DependencyManifest([FASTRAND, SERDE])

        first.merge(second)

        assert first.dependencies() == [SERDE, FASTRAND]

    def test_copy_is_independent(self):
        manifest = DependencyManifest([SERDE])
        copied = manifest.copy()

        copied.register(FASTRAND)

        assert len(manifest) == 1
        assert len(copied) == 2

    def test_concurrent_registration(self):
        manifest = DependencyManifest()
        dependencies = [
            CargoDependency(f"crate{i}", CratesIo("1")) for i in range(10)
        ]

        def register_all():
            for _ in range(50):
                for dependency in dependencies:
                    manifest.register(dependency)

        threads = [threading.Thread(target=register_all) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(manifest) == 10


class TestFlattenedViews:
    """Views over the flattened dependency graph."""

    def test_direct_and_transitive_requirement_yield_one_entry(self):
        b = InlineDependency("b", "util")
        a = InlineDependency("a", "util", extra_dependencies=(b,))
        manifest = DependencyManifest([a, b])

        assert manifest.inline_dependencies() == [b, a]

    def test_cargo_dependencies_include_transitive_and_sort(self):
        a = InlineDependency("a", "util", extra_dependencies=(FASTRAND,))
        manifest = DependencyManifest([SERDE, a])

        names = [d.name for d in manifest.cargo_dependencies()]

        assert names == ["fastrand", "serde"]

    def test_cargo_dependencies_by_scope(self):
        manifest = DependencyManifest([SERDE, protocol_test_helpers(RuntimeConfig())])

        assert manifest.cargo_dependencies(DependencyScope.COMPILE) == [SERDE]
        assert [d.name for d in manifest.cargo_dependencies(DependencyScope.DEV)] == [
            "protocol-test-helpers"
        ]

    def test_transitive_features_merge(self):
        a = InlineDependency("a", "util", extra_dependencies=(SERDE,))
        manifest = DependencyManifest([CargoDependency("serde", CratesIo("1")), a])

        (serde,) = manifest.cargo_dependencies()

        assert serde.features == frozenset({"derive"})

    def test_cycle_surfaces_from_flattened(self):
        b = InlineDependency("b", "util", extra_dependencies=(InlineDependency("a", "util"),))
        a = InlineDependency("a", "util", extra_dependencies=(b,))
        manifest = DependencyManifest([a])

        with pytest.raises(CyclicInlineDependency):
            manifest.flattened()
