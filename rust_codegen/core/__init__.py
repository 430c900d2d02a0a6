"""
Core code generation components.

Provides reference resolution, dependency tracking, the Rust writer and
the section dispatch used by every generation point.
"""

from .config import CodegenSettings, ConfigManager, ConfigError, RuntimeConfig, load_settings
from .crate import CompilationUnit, CrateOutput, GenerationResult, RustCrate
from .dependencies import (
    CargoDependency,
    CratesIo,
    DependencyScope,
    InlineDependency,
    Local,
    flatten_dependencies,
)
from .errors import (
    CyclicInlineDependency,
    DependencyConflict,
    GeneratorError,
    MissingSlotHandler,
    ModelError,
    UnsupportedTraitVariant,
)
from .manifest import DependencyManifest
from .model import Model, Shape, ShapeType, TimestampFormat
from .naming import NameSanitizer, NamingCase
from .runtime_types import RuntimeType, resolve
from .sections import EMPTY_SECTION, NamedSectionGenerator, Section, dispatch, writable
from .templates import TemplateEngine, TemplateError
from .writer import RustWriter

__all__ = [
    # Configuration system
    "CodegenSettings",
    "ConfigManager",
    "ConfigError",
    "RuntimeConfig",
    "load_settings",
    # Crate assembly
    "CompilationUnit",
    "CrateOutput",
    "GenerationResult",
    "RustCrate",
    # Dependencies and references
    "CargoDependency",
    "CratesIo",
    "DependencyScope",
    "InlineDependency",
    "Local",
    "flatten_dependencies",
    "DependencyManifest",
    "RuntimeType",
    "resolve",
    # Errors
    "CyclicInlineDependency",
    "DependencyConflict",
    "GeneratorError",
    "MissingSlotHandler",
    "ModelError",
    "UnsupportedTraitVariant",
    # Model
    "Model",
    "Shape",
    "ShapeType",
    "TimestampFormat",
    # Naming utilities
    "NameSanitizer",
    "NamingCase",
    # Sections
    "EMPTY_SECTION",
    "NamedSectionGenerator",
    "Section",
    "dispatch",
    "writable",
    # Template system
    "TemplateEngine",
    "TemplateError",
    # Writer
    "RustWriter",
]
