"""
Dependency descriptors carried by references.

A dependency is either a Cargo package coordinate or an inline module that
the generator writes into the crate itself. Inline dependencies may declare
further dependencies, forming a graph that is flattened before emission.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterable, List, Tuple, Union

from .config import RuntimeConfig
from .errors import CyclicInlineDependency


class DependencyScope(Enum):
    """Cargo.toml table a crate dependency is declared in."""

    COMPILE = "dependencies"
    DEV = "dev-dependencies"


@dataclass(frozen=True)
class CratesIo:
    """A crate fetched from crates.io at a version requirement."""

    version: str

    def toml_fields(self, crate_name: str) -> Dict[str, str]:
        return {"version": self.version}


@dataclass(frozen=True)
class Local:
    """A crate found on disk next to the generated crate."""

    base_path: str

    def toml_fields(self, crate_name: str) -> Dict[str, str]:
        return {"path": f"{self.base_path}{crate_name}"}


DependencyLocation = Union[CratesIo, Local]


@dataclass(frozen=True)
class CargoDependency:
    """An external Cargo package required by generated code."""

    name: str
    location: DependencyLocation
    scope: DependencyScope = DependencyScope.COMPILE
    features: FrozenSet[str] = frozenset()

    @property
    def key(self) -> Tuple[str, ...]:
        return ("cargo", self.scope.value, self.name)

    def with_features(self, features: Iterable[str]) -> "CargoDependency":
        """Return a copy whose feature set also contains ``features``."""
        return replace(self, features=self.features | frozenset(features))

    def to_toml(self) -> str:
        """Render the right-hand side of this dependency's Cargo.toml entry."""
        parts = [f'{k} = "{v}"' for k, v in self.location.toml_fields(self.name).items()]
        if self.features:
            feature_list = ", ".join(f'"{f}"' for f in sorted(self.features))
            parts.append(f"features = [{feature_list}]")
        return "{ " + ", ".join(parts) + " }"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class InlineDependency:
    """
    A support module generated into the crate alongside generated code.

    Identity is ``(name, module)``: the renderer and declared transitive
    dependencies do not take part in equality, so two descriptors for the
    same inline module deduplicate even when built separately.
    """

    name: str
    module: str
    extra_dependencies: Tuple["Dependency", ...] = field(default=(), compare=False)
    renderer: Callable = field(default=None, compare=False, repr=False)

    @property
    def key(self) -> Tuple[str, ...]:
        return ("inline", self.module, self.name)

    def __str__(self) -> str:
        return f"{self.module}::{self.name}"


Dependency = Union[CargoDependency, InlineDependency]


def dependency_label(dependency: Dependency) -> str:
    """Short human-readable label used in diagnostics."""
    if isinstance(dependency, InlineDependency):
        return f"inline:{dependency}"
    return f"cargo:{dependency.name}"


def flatten_dependencies(dependencies: Iterable[Dependency]) -> List[Dependency]:
    """
    Flatten a dependency graph into an ordered, deduplicated list.

    Inline dependencies are walked depth-first through their declared
    ``extra_dependencies``; every dependency appears once, after the
    dependencies it requires. The first descriptor seen for a key wins.

    Args:
        dependencies: Root dependencies in registration order

    Returns:
        Flattened dependency list

    Raises:
        CyclicInlineDependency: If an inline dependency requires itself
    """
    ordered: List[Dependency] = []
    done = set()
    visiting: List[Dependency] = []

    def visit(dependency: Dependency):
        if dependency.key in done:
            return

        if any(d.key == dependency.key for d in visiting):
            start = next(i for i, d in enumerate(visiting) if d.key == dependency.key)
            cycle = [dependency_label(d) for d in visiting[start:]]
            cycle.append(dependency_label(dependency))
            raise CyclicInlineDependency(cycle)

        visiting.append(dependency)
        if isinstance(dependency, InlineDependency):
            for child in dependency.extra_dependencies:
                visit(child)
        visiting.pop()

        done.add(dependency.key)
        ordered.append(dependency)

    for dependency in dependencies:
        visit(dependency)

    return ordered


# Support crates, named after the configured prefix
def smithy_types(runtime_config: RuntimeConfig) -> CargoDependency:
    return CargoDependency(
        runtime_config.crate_name("types"), Local(runtime_config.relative_path)
    )


def smithy_http(runtime_config: RuntimeConfig) -> CargoDependency:
    return CargoDependency(
        runtime_config.crate_name("http"), Local(runtime_config.relative_path)
    )


def protocol_test_helpers(runtime_config: RuntimeConfig) -> CargoDependency:
    return CargoDependency(
        "protocol-test-helpers",
        Local(runtime_config.relative_path),
        scope=DependencyScope.DEV,
    )


def operation_wip(runtime_config: RuntimeConfig) -> CargoDependency:
    return CargoDependency("operationwip", Local(runtime_config.relative_path))


# Third-party crates
BYTES = CargoDependency("bytes", CratesIo("1"))
HTTP = CargoDependency("http", CratesIo("0.2"))
SERDE = CargoDependency("serde", CratesIo("1"), features=frozenset({"derive"}))
SERDE_JSON = CargoDependency("serde_json", CratesIo("1"))
FASTRAND = CargoDependency("fastrand", CratesIo("1"))
