"""
Rust Code Generation

Generates Rust crates from Smithy-style service models. References to
runtime support crates are resolved together with the dependencies they
require, and customizations extend generated code through named sections.
"""

from typing import Any, Dict, Optional, Union

from .core.config import CodegenSettings, RuntimeConfig, load_settings
from .core.crate import CrateOutput, RustCrate
from .core.errors import GeneratorError
from .core.model import Model
from .registry import CustomizationRegistry, get_registry, register_customization

# Version info
__version__ = "0.1.0"


def generate_crate(
    model: Union[Model, Dict[str, Any]],
    settings: Optional[CodegenSettings] = None,
    registry: Optional[CustomizationRegistry] = None,
) -> CrateOutput:
    """
    Generate a crate from a model.

    Args:
        model: Model instance or parsed model document
        settings: Generation settings, defaults if None
        registry: Customization registry, the global one if None

    Returns:
        CrateOutput with the generated files and per-module results
    """
    from .generators.service import ServiceGenerator

    if not isinstance(model, Model):
        model = Model.from_document(model)

    return ServiceGenerator(model, settings, registry).generate()


__all__ = [
    "CodegenSettings",
    "RuntimeConfig",
    "load_settings",
    "CrateOutput",
    "RustCrate",
    "GeneratorError",
    "Model",
    "CustomizationRegistry",
    "get_registry",
    "register_customization",
    "generate_crate",
    "__version__",
]
