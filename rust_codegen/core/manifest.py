"""
Per-compilation-unit dependency manifest.

Every reference resolved while writing a unit registers its dependency
here. Registration is idempotent and safe to call from several threads.
"""

import threading
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..logging_config import get_logger
from .dependencies import (
    CargoDependency,
    Dependency,
    DependencyScope,
    InlineDependency,
    flatten_dependencies,
)
from .errors import DependencyConflict

logger = get_logger(__name__)


class DependencyManifest:
    """Ordered, deduplicated set of dependencies required by a unit."""

    def __init__(self, dependencies: Optional[Iterable[Dependency]] = None):
        self._lock = threading.Lock()
        self._entries: Dict[Tuple[str, ...], Dependency] = {}
        for dependency in dependencies or ():
            self.register(dependency)

    def register(self, dependency: Dependency) -> bool:
        """
        Add a dependency unless an equal one is already present.

        Cargo dependencies with the same name and scope merge their feature
        sets; they must agree on location.

        Args:
            dependency: Dependency to record

        Returns:
            True if the manifest changed

        Raises:
            DependencyConflict: If a crate is registered from two locations
        """
        key = dependency.key
        with self._lock:
            existing = self._entries.get(key)
            if existing is None:
                self._entries[key] = dependency
                return True

            if isinstance(dependency, CargoDependency):
                if existing.location != dependency.location:
                    raise DependencyConflict(
                        f"Crate '{dependency.name}' registered from both "
                        f"{existing.location} and {dependency.location}"
                    )
                if not dependency.features <= existing.features:
                    self._entries[key] = existing.with_features(dependency.features)
                    return True

            return False

    def merge(self, other: "DependencyManifest") -> None:
        """Register every dependency of ``other``, in its order."""
        for dependency in other:
            self.register(dependency)

    def dependencies(self) -> List[Dependency]:
        """Directly registered dependencies in registration order."""
        with self._lock:
            return list(self._entries.values())

    def flattened(self) -> List[Dependency]:
        """
        Registered dependencies plus everything inline dependencies require.

        Raises:
            CyclicInlineDependency: If the inline dependency graph has a cycle
        """
        return flatten_dependencies(self.dependencies())

    def cargo_dependencies(
        self, scope: DependencyScope = DependencyScope.COMPILE
    ) -> List[CargoDependency]:
        """
        Flattened crate dependencies of one scope, sorted by crate name.

        Features requested by any registration of a crate, direct or through
        an inline dependency, are merged into its single entry.
        """
        merged = DependencyManifest()
        for dependency in self.flattened():
            if isinstance(dependency, CargoDependency):
                merged.register(dependency)
                continue
            for child in dependency.extra_dependencies:
                if isinstance(child, CargoDependency):
                    merged.register(child)

        return sorted(
            (d for d in merged if d.scope == scope),
            key=lambda d: d.name,
        )

    def inline_dependencies(self) -> List[InlineDependency]:
        """Flattened inline dependencies, required-before-requiring."""
        return [d for d in self.flattened() if isinstance(d, InlineDependency)]

    def copy(self) -> "DependencyManifest":
        return DependencyManifest(self.dependencies())

    def __contains__(self, dependency: Dependency) -> bool:
        with self._lock:
            return dependency.key in self._entries

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self.dependencies())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        names = ", ".join(str(d) for d in self.dependencies())
        return f"DependencyManifest([{names}])"
