"""
Crate assembly.

A RustCrate collects compilation units, generates each one independently
(optionally in parallel), writes the inline support modules they require
and renders Cargo.toml and src/lib.rs from the merged dependency manifest.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..logging_config import get_logger
from .config import CodegenSettings
from .dependencies import Dependency, DependencyScope, InlineDependency, dependency_label
from .errors import CyclicInlineDependency, DependencyConflict, GeneratorError
from .manifest import DependencyManifest
from .runtime_types import LOCAL_ROOT, RuntimeType, resolve
from .templates import get_default_template_engine
from .writer import RustWriter

logger = get_logger(__name__)

RenderedInline = Tuple[InlineDependency, str]


class CompilationUnit:
    """One generated module together with its dependency manifest."""

    def __init__(self, module: str, indent_size: int = 4):
        self.module = module
        self.manifest = DependencyManifest()
        self.writer = RustWriter(self.namespace, self.manifest, indent_size)
        self.indent_size = indent_size

    @property
    def namespace(self) -> str:
        return f"{LOCAL_ROOT}::{self.module}"

    def register_dependency(self, dependency: Dependency) -> bool:
        """Record a dependency on this unit; repeated registrations are no-ops."""
        return self.manifest.register(dependency)

    def resolve(self, ref: RuntimeType) -> str:
        """Resolve a reference from inside this unit and register its dependency."""
        resolution = resolve(ref, self.namespace)
        if resolution.dependency is not None:
            self.register_dependency(resolution.dependency)
        return resolution.display_text

    def materialize_inline_dependencies(self) -> List[RenderedInline]:
        """
        Render every inline dependency this unit requires.

        Raises:
            CyclicInlineDependency: If inline dependencies require each other
        """
        rendered: Dict[Tuple[str, ...], RenderedInline] = {}
        for dependency in self.manifest.inline_dependencies():
            materialize_inline(dependency, self.manifest, rendered, self.indent_size)
        return list(rendered.values())


def materialize_inline(
    dependency: InlineDependency,
    manifest: DependencyManifest,
    rendered: Optional[Dict[Tuple[str, ...], RenderedInline]] = None,
    indent_size: int = 4,
    _stack: Tuple[InlineDependency, ...] = (),
) -> str:
    """
    Produce the source of an inline dependency.

    Declared and discovered requirements of the dependency are rendered
    first; every reference written by the generator registers on
    ``manifest``.

    Args:
        dependency: Inline dependency to render
        manifest: Manifest of the unit that requires it
        rendered: Cache of already rendered dependencies, filled in
            required-before-requiring order
        indent_size: Spaces per indentation level

    Returns:
        Source text of the dependency

    Raises:
        CyclicInlineDependency: If rendering requires the dependency itself
    """
    if rendered is None:
        rendered = {}

    if dependency.key in rendered:
        return rendered[dependency.key][1]

    if any(d.key == dependency.key for d in _stack):
        start = next(i for i, d in enumerate(_stack) if d.key == dependency.key)
        cycle = [dependency_label(d) for d in _stack[start:]] + [
            dependency_label(dependency)
        ]
        raise CyclicInlineDependency(cycle)

    if dependency.renderer is None:
        raise GeneratorError(f"Inline dependency {dependency} has no generator")

    stack = _stack + (dependency,)

    for child in dependency.extra_dependencies:
        manifest.register(child)
        if isinstance(child, InlineDependency):
            materialize_inline(child, manifest, rendered, indent_size, stack)

    writer = RustWriter(f"{LOCAL_ROOT}::{dependency.module}", manifest, indent_size)
    dependency.renderer(writer)

    for child in writer.referenced:
        if isinstance(child, InlineDependency) and child.key != dependency.key:
            materialize_inline(child, manifest, rendered, indent_size, stack)

    text = writer.to_string()
    rendered[dependency.key] = (dependency, text)
    logger.debug(f"Materialized inline dependency {dependency}")
    return text


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        code: str,
        warnings: List[str] = None,
        metadata: Dict[str, Any] = None,
    ):
        """
        Initialize generation result.

        Args:
            code: Generated code
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
        """
        self.code = code
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.success = True
        self.error_message = None
        self.exception = None

    @classmethod
    def error(cls, message: str, exception: Exception = None) -> "GenerationResult":
        """Create a failed generation result."""
        result = cls(code="")
        result.success = False
        result.error_message = message
        result.exception = exception
        return result


@dataclass
class CrateOutput:
    """Files of a generated crate plus per-unit outcomes."""

    files: Dict[str, str]
    results: Dict[str, GenerationResult]
    manifest: DependencyManifest = field(default_factory=DependencyManifest)

    @property
    def success(self) -> bool:
        return all(result.success for result in self.results.values())

    @property
    def failed_modules(self) -> List[str]:
        return [name for name, result in self.results.items() if not result.success]

    def write_to(self, directory) -> List[Path]:
        """Write every file below ``directory`` and return the written paths."""
        root = Path(directory)
        written = []
        for relative, content in self.files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            written.append(path)
        logger.info(f"Wrote {len(written)} files to {root}")
        return written


UnitGenerator = Callable[[RustWriter], None]


class RustCrate:
    """Collects compilation units and assembles the crate."""

    def __init__(self, settings: Optional[CodegenSettings] = None):
        self.settings = settings or CodegenSettings()
        self._units: List[Tuple[str, UnitGenerator]] = []

    def with_module(self, module: str, generate: UnitGenerator) -> "RustCrate":
        """
        Queue a compilation unit.

        Args:
            module: Module name, written to ``src/<module>.rs``
            generate: Callable writing the module body to a RustWriter

        Returns:
            self, for chaining
        """
        if any(name == module for name, _ in self._units):
            raise ValueError(f"Module already registered: {module}")
        self._units.append((module, generate))
        return self

    @property
    def modules(self) -> List[str]:
        return [name for name, _ in self._units]

    def finalize(self) -> CrateOutput:
        """
        Generate every unit and render the crate files.

        A unit that fails is reported in the results and contributes no
        file and no dependencies; other units are unaffected.
        """
        workers = max(1, min(self.settings.max_workers, len(self._units) or 1))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            outcomes = list(pool.map(lambda unit: self._generate_unit(*unit), self._units))

        results: Dict[str, GenerationResult] = {}
        crate_manifest = DependencyManifest()
        module_chunks: Dict[str, List[str]] = {}
        unit_modules = set()

        for (module, _), (result, unit, _) in zip(self._units, outcomes):
            results[module] = result
            if not result.success:
                continue
            try:
                crate_manifest = self._merge_unit_manifest(crate_manifest, unit)
            except DependencyConflict as e:
                logger.error(f"Dependencies of module '{module}' conflict: {e}")
                results[module] = GenerationResult.error(
                    f"Dependencies of module '{module}' conflict: {e}", e
                )
                continue
            module_chunks.setdefault(module, []).append(result.code)
            unit_modules.add(module)

        seen_inline = set()
        for (module, _), (_, _, inline) in zip(self._units, outcomes):
            if not results[module].success:
                continue
            for dependency, text in inline:
                if dependency.key in seen_inline:
                    continue
                seen_inline.add(dependency.key)
                module_chunks.setdefault(dependency.module, []).append(text)

        files = self._render_files(module_chunks, unit_modules, crate_manifest)

        failed = [m for m, r in results.items() if not r.success]
        if failed:
            logger.warning(f"Generation failed for modules: {failed}")
        logger.info(
            f"Generated crate {self.settings.crate_name}: {len(files)} files, "
            f"{len(crate_manifest)} dependencies"
        )
        return CrateOutput(files=files, results=results, manifest=crate_manifest)

    @staticmethod
    def _merge_unit_manifest(
        crate_manifest: DependencyManifest, unit: CompilationUnit
    ) -> DependencyManifest:
        """
        Merge a unit's dependencies into a copy of the crate manifest.

        The copy is returned only if the unit agrees with every dependency
        already accepted, including crates required by inline modules, so a
        conflicting unit leaves the crate manifest untouched.

        Raises:
            DependencyConflict: If the unit needs a crate from another location
        """
        merged = crate_manifest.copy()
        merged.merge(unit.manifest)
        merged.cargo_dependencies(DependencyScope.COMPILE)
        return merged

    def _generate_unit(
        self, module: str, generate: UnitGenerator
    ) -> Tuple[GenerationResult, Optional[CompilationUnit], List[RenderedInline]]:
        unit = CompilationUnit(module, self.settings.indent_size)
        try:
            generate(unit.writer)
            inline = unit.materialize_inline_dependencies()
        except Exception as e:
            logger.error(f"Generation of module '{module}' failed: {e}", exc_info=True)
            return (
                GenerationResult.error(f"Generation of module '{module}' failed: {e}", e),
                None,
                [],
            )

        metadata = {
            "module": module,
            "dependencies": [dependency_label(d) for d in unit.manifest],
            "inline_dependencies": [str(d) for d, _ in inline],
        }
        return GenerationResult(unit.writer.to_string(), metadata=metadata), unit, inline

    def _render_files(
        self,
        module_chunks: Dict[str, List[str]],
        unit_modules: set,
        manifest: DependencyManifest,
    ) -> Dict[str, str]:
        engine = get_default_template_engine()
        files: Dict[str, str] = {}

        files["Cargo.toml"] = engine.render_template(
            "Cargo.toml",
            {
                "crate_name": self.settings.crate_name,
                "version": self.settings.module_version,
                "edition": self.settings.edition,
                "dependencies": manifest.cargo_dependencies(DependencyScope.COMPILE),
                "dev_dependencies": manifest.cargo_dependencies(DependencyScope.DEV),
            },
        )

        modules = sorted(module_chunks)
        files["src/lib.rs"] = engine.render_template("lib.rs", {"modules": modules})

        for module in modules:
            header = engine.render_template(
                "module_header.rs", {"inline_only": module not in unit_modules}
            )
            body = "\n".join(chunk for chunk in module_chunks[module] if chunk)
            files[f"src/{module}.rs"] = format_code(header + body)

        return files


def format_code(code: str) -> str:
    """
    Strip trailing whitespace and collapse runs of blank lines.

    Args:
        code: Raw generated code

    Returns:
        Formatted code ending with a single newline
    """
    formatted_lines = []
    blank_count = 0

    for line in code.split("\n"):
        stripped = line.rstrip()
        if not stripped:
            blank_count += 1
            if blank_count <= 1:
                formatted_lines.append("")
        else:
            blank_count = 0
            formatted_lines.append(stripped)

    return "\n".join(formatted_lines).strip("\n") + "\n"
