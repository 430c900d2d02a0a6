"""
Region customization.

Adds a ``region`` field to the service Config and its Builder, resolves a
default region through the provider chain at build time, and inserts the
configured region into every operation request's property bag.
"""

from ..core.config import RuntimeConfig
from ..core.dependencies import operation_wip
from ..core.model import Shape
from ..core.runtime_types import RuntimeType
from ..core.sections import EMPTY_SECTION, writable
from ..generators.config import ConfigCustomization
from ..generators.operation import OperationCustomization


def region(runtime_config: RuntimeConfig) -> RuntimeType:
    """Reference to the ``region`` module of the operation support crate."""
    return RuntimeType("region", operation_wip(runtime_config), "operationwip")


class RegionConfig(ConfigCustomization):
    def __init__(self, runtime_config: RuntimeConfig):
        self.region = region(runtime_config)

    def config_struct(self):
        return writable("pub region: Option<#T::Region>,", self.region)

    def config_impl(self):
        return EMPTY_SECTION

    def builder_struct(self):
        return writable("region: Option<#T::Region>,", self.region)

    def builder_impl(self):
        return writable(
            """
            pub fn region(mut self, region: impl #T::ProvideRegion) -> Self {
                self.region = region.region();
                self
            }
            """,
            self.region,
        )

    def builder_preamble(self):
        return writable(
            """
            use #1T::ProvideRegion;
            let region = self.region.or_else(|| #1T::default_provider().region());
            """,
            self.region,
        )

    def builder_build(self):
        return writable("region: region.clone(),")


class RegionConfigPlugin(OperationCustomization):
    def __init__(self, operation_shape: Shape):
        self.operation_shape = operation_shape

    def impl_block(self):
        return EMPTY_SECTION

    def plugin(self):
        return writable(
            """
            if let Some(region) = &_config.region {
                request.config_mut().insert(region.clone());
            }
            """
        )
