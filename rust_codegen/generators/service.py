"""
Service-level driver.

Walks the model, assigns every structure to a crate module and queues one
compilation unit per module on a RustCrate.
"""

from typing import Dict, List, Optional

from ..core.config import CodegenSettings
from ..core.crate import CrateOutput, RustCrate
from ..core.model import Model, Shape, ShapeType
from ..core.writer import RustWriter
from ..logging_config import get_logger
from ..registry import CustomizationRegistry, get_registry
from .config import ServiceConfigGenerator
from .operation import OperationGenerator
from .structure import ERROR_TRAIT, RustTypeMapper, StructureGenerator

logger = get_logger(__name__)

STRUCTURE_MODULES = ("model", "input", "output", "error")


class ServiceGenerator:
    """Generates a crate for every structure and operation in a model."""

    def __init__(
        self,
        model: Model,
        settings: Optional[CodegenSettings] = None,
        registry: Optional[CustomizationRegistry] = None,
    ):
        self.model = model
        self.settings = settings or CodegenSettings()
        self.registry = registry if registry is not None else get_registry()
        self.runtime_config = self.settings.runtime_config
        self.operations = self.model.shapes_of_type(ShapeType.OPERATION)
        self.structure_modules = self._assign_structure_modules()

    def _assign_structure_modules(self) -> Dict[str, str]:
        modules: Dict[str, str] = {}
        for op in self.operations:
            if op.input:
                modules[op.input] = "input"
            if op.output:
                modules[op.output] = "output"

        for shape in self.model.shapes_of_type(ShapeType.STRUCTURE):
            if shape.id in modules:
                continue
            modules[shape.id] = "error" if ERROR_TRAIT in shape.traits else "model"
        return modules

    def _structures_in(self, module: str) -> List[Shape]:
        return [
            shape
            for shape in self.model.shapes_of_type(ShapeType.STRUCTURE)
            if self.structure_modules.get(shape.id) == module
        ]

    def build_crate(self) -> RustCrate:
        """Queue every compilation unit without generating anything yet."""
        crate = RustCrate(self.settings)
        crate.with_module("config", self._render_config)

        for module in STRUCTURE_MODULES:
            shapes = self._structures_in(module)
            if shapes:
                crate.with_module(module, self._structure_renderer(shapes))

        if self.operations:
            crate.with_module("operation", self._render_operations)

        return crate

    def generate(self) -> CrateOutput:
        crate = self.build_crate()
        logger.info(f"Generating modules: {crate.modules}")
        return crate.finalize()

    def _render_config(self, writer: RustWriter) -> None:
        customizations = self.registry.config_customizations(self.runtime_config)
        ServiceConfigGenerator(customizations).render(writer)

    def _structure_renderer(self, shapes: List[Shape]):
        def render(writer: RustWriter) -> None:
            mapper = RustTypeMapper(self.model, self.runtime_config, self.structure_modules)
            generator = StructureGenerator(self.model, mapper)
            for index, shape in enumerate(shapes):
                if index:
                    writer.rust("")
                for hint in generator.render(writer, shape):
                    logger.warning(hint)

        return render

    def _render_operations(self, writer: RustWriter) -> None:
        for index, operation_shape in enumerate(self.operations):
            if index:
                writer.rust("")
            customizations = self.registry.operation_customizations(
                self.runtime_config, operation_shape
            )
            OperationGenerator(self.runtime_config, customizations).render(
                writer, operation_shape
            )
