"""
Configuration management for code generation.

Handles loading and merging generation settings from JSON files,
providing defaults and validation. RuntimeConfig controls how references
into the support crates are namespaced and is shared read-only by every
compilation unit of a run.
"""

import json
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

from ..logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CRATE_PREFIX = "smithy"
DEFAULT_RELATIVE_PATH = "../"

_CRATE_PREFIX_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


@dataclass(frozen=True)
class RuntimeConfig:
    """Naming of the support crates that generated code depends on."""

    crate_prefix: str = DEFAULT_CRATE_PREFIX
    relative_path: str = DEFAULT_RELATIVE_PATH

    def __post_init__(self):
        if not isinstance(self.crate_prefix, str) or not _CRATE_PREFIX_PATTERN.match(
            self.crate_prefix
        ):
            raise ConfigError(f"Invalid cratePrefix: {self.crate_prefix!r}")
        if not isinstance(self.relative_path, str):
            raise ConfigError(f"Invalid relativePath: {self.relative_path!r}")

    @classmethod
    def from_node(cls, node: Optional[Dict[str, Any]]) -> "RuntimeConfig":
        """
        Build a RuntimeConfig from an optional configuration document.

        Args:
            node: Object with optional ``cratePrefix`` and ``relativePath``
                string members, or None

        Returns:
            RuntimeConfig with defaults filled in for absent members
        """
        if node is None:
            return cls()

        if not isinstance(node, dict):
            raise ConfigError(
                f"runtimeConfig must be an object, got {type(node).__name__}"
            )

        return cls(
            crate_prefix=node.get("cratePrefix", DEFAULT_CRATE_PREFIX),
            relative_path=node.get("relativePath", DEFAULT_RELATIVE_PATH),
        )

    def to_node(self) -> Dict[str, str]:
        """Serialize back to the configuration document shape."""
        return {"cratePrefix": self.crate_prefix, "relativePath": self.relative_path}

    def crate_name(self, suffix: str) -> str:
        """Cargo package name of a support crate, e.g. ``smithy-types``."""
        return f"{self.crate_prefix}-{suffix}"

    def module_name(self, suffix: str) -> str:
        """Rust module path root of a support crate, e.g. ``smithy_types``."""
        return f"{self.crate_prefix}_{suffix}"


@dataclass(frozen=True)
class CodegenSettings:
    """Settings for one generation run."""

    # Generated crate identity
    module_name: str = "generated"
    module_version: str = "0.0.1"
    edition: str = "2018"

    # Code style settings
    indent_size: int = 4

    # Parallelism across compilation units
    max_workers: int = 4

    runtime_config: RuntimeConfig = field(default_factory=RuntimeConfig)

    @property
    def crate_name(self) -> str:
        return self.module_name.replace("_", "-")


# camelCase document keys -> CodegenSettings field names
_SETTINGS_KEYS = {
    "module": "module_name",
    "moduleVersion": "module_version",
    "edition": "edition",
    "indentSize": "indent_size",
    "maxWorkers": "max_workers",
}


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._defaults: Dict[str, Any] = {
            "module": "generated",
            "moduleVersion": "0.0.1",
            "edition": "2018",
            "indentSize": 4,
            "maxWorkers": 4,
        }

    def get_settings(
        self,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> CodegenSettings:
        """
        Get complete settings for a run.

        Args:
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged settings
        """
        base_config = dict(self._defaults)

        if config_file:
            file_config = self._load_config_file(config_file)
            base_config.update(file_config)

        if custom_config:
            base_config.update(custom_config)

        return self._dict_to_settings(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        logger.debug(f"Loaded configuration from {path}")
        return config

    def _dict_to_settings(self, config_dict: Dict[str, Any]) -> CodegenSettings:
        """Convert a merged configuration document to CodegenSettings."""
        settings_args = {}
        unknown = []

        for key, value in config_dict.items():
            if key == "runtimeConfig":
                continue
            if key in _SETTINGS_KEYS:
                settings_args[_SETTINGS_KEYS[key]] = value
            else:
                unknown.append(key)

        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {sorted(unknown)}")

        settings_args["runtime_config"] = RuntimeConfig.from_node(
            config_dict.get("runtimeConfig")
        )
        return CodegenSettings(**settings_args)

    def save_settings(self, settings: CodegenSettings, output_path: Union[str, Path]):
        """Save settings to a JSON file."""
        path = Path(output_path)
        names = {v: k for k, v in _SETTINGS_KEYS.items()}

        config_dict = {
            names[f.name]: getattr(settings, f.name)
            for f in fields(settings)
            if f.name in names
        }
        config_dict["runtimeConfig"] = settings.runtime_config.to_node()

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e

    def validate_settings(self, settings: CodegenSettings) -> List[str]:
        """
        Validate settings.

        Returns:
            List of validation warnings
        """
        warnings = []

        if not settings.module_name.replace("-", "_").isidentifier():
            warnings.append(f"Invalid module name: {settings.module_name}")

        if settings.indent_size < 1:
            warnings.append(f"Invalid indentSize: {settings.indent_size}")

        if settings.max_workers < 1:
            warnings.append(f"Invalid maxWorkers: {settings.max_workers}")

        if not settings.runtime_config.relative_path.endswith("/"):
            warnings.append(
                f"relativePath should end with '/': {settings.runtime_config.relative_path}"
            )

        return warnings


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_settings(
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> CodegenSettings:
    """
    Convenience function to load settings.

    Args:
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged settings
    """
    return get_config_manager().get_settings(custom_config, config_file)


EXAMPLE_SETTINGS = {
    "module": "snowball",
    "moduleVersion": "0.0.1",
    "runtimeConfig": {"cratePrefix": "smithy", "relativePath": "../"},
}
