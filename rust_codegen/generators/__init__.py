"""
Generation points.

Each module renders one part of the crate and exposes a Section enum plus
a customization base class for it.
"""

from .config import ConfigCustomization, ServiceConfig, ServiceConfigGenerator
from .operation import OperationCustomization, OperationGenerator, OperationSection
from .structure import RustType, RustTypeMapper, StructureGenerator

__all__ = [
    "ConfigCustomization",
    "ServiceConfig",
    "ServiceConfigGenerator",
    "OperationCustomization",
    "OperationGenerator",
    "OperationSection",
    "RustType",
    "RustTypeMapper",
    "StructureGenerator",
]
