"""
Customization registry.

Keeps named customization factories in registration order. The order is
the order contributions appear in every section, so it must be stable
between runs.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .core.config import RuntimeConfig
from .core.model import Shape
from .generators.config import ConfigCustomization
from .generators.operation import OperationCustomization
from .logging_config import get_logger

logger = get_logger(__name__)

ConfigFactory = Callable[[RuntimeConfig], ConfigCustomization]
OperationFactory = Callable[[RuntimeConfig, Shape], OperationCustomization]


class RegistryError(Exception):
    """Exception raised for registry-related errors."""

    pass


@dataclass(frozen=True)
class CustomizationEntry:
    """Factories contributed under one customization name."""

    name: str
    config_factory: Optional[ConfigFactory] = None
    operation_factory: Optional[OperationFactory] = None


class CustomizationRegistry:
    """Registry of customizations, ordered by registration."""

    def __init__(self):
        """Initialize empty registry."""
        self._entries: Dict[str, CustomizationEntry] = {}

    def register(
        self,
        name: str,
        config_factory: Optional[ConfigFactory] = None,
        operation_factory: Optional[OperationFactory] = None,
        replace: bool = False,
    ):
        """
        Register a customization.

        Args:
            name: Unique customization name
            config_factory: Builds the ServiceConfig customization, if any
            operation_factory: Builds the per-operation customization, if any
            replace: If True, replace an existing registration in place

        Raises:
            RegistryError: If the name is taken or no factory is given
        """
        if config_factory is None and operation_factory is None:
            raise RegistryError(f"Customization '{name}' provides no factories")

        key = name.lower()
        if key in self._entries and not replace:
            raise RegistryError(f"Customization already registered: {name}")

        self._entries[key] = CustomizationEntry(key, config_factory, operation_factory)
        logger.debug(f"Registered customization '{key}'")

    def unregister(self, name: str):
        """Remove a customization; unknown names are ignored."""
        self._entries.pop(name.lower(), None)

    def is_registered(self, name: str) -> bool:
        return name.lower() in self._entries

    def list_customizations(self) -> List[str]:
        """Registered names in registration order."""
        return list(self._entries)

    def config_customizations(
        self, runtime_config: RuntimeConfig
    ) -> List[ConfigCustomization]:
        """Instantiate every ServiceConfig customization, in order."""
        return [
            entry.config_factory(runtime_config)
            for entry in self._entries.values()
            if entry.config_factory is not None
        ]

    def operation_customizations(
        self, runtime_config: RuntimeConfig, operation_shape: Shape
    ) -> List[OperationCustomization]:
        """Instantiate every operation customization for one operation, in order."""
        return [
            entry.operation_factory(runtime_config, operation_shape)
            for entry in self._entries.values()
            if entry.operation_factory is not None
        ]


# Global registry instance - created once
_global_registry: Optional[CustomizationRegistry] = None


def get_registry() -> CustomizationRegistry:
    """Get the global customization registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = CustomizationRegistry()
        _auto_register_customizations(_global_registry)
    return _global_registry


def _auto_register_customizations(registry: CustomizationRegistry):
    """Register the built-in customizations."""
    from .customizations.region import RegionConfig, RegionConfigPlugin

    registry.register(
        "region",
        config_factory=RegionConfig,
        operation_factory=lambda runtime_config, shape: RegionConfigPlugin(shape),
    )


def register_customization(
    name: str,
    config_factory: Optional[ConfigFactory] = None,
    operation_factory: Optional[OperationFactory] = None,
):
    """Register a customization in the global registry."""
    get_registry().register(name, config_factory, operation_factory)


def list_customizations() -> List[str]:
    """List customizations in the global registry."""
    return get_registry().list_customizations()
