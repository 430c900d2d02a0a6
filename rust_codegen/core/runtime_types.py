"""
References to types and functions that generated code mentions.

A RuntimeType names one entity (a type, a function or a whole module),
the module path it lives under and the dependency needed to reach it.
Resolving a RuntimeType to text and learning which dependency to declare
happen in the same step, so the two cannot drift apart.
"""

from dataclasses import dataclass
from typing import Optional

from .config import RuntimeConfig
from .dependencies import (
    BYTES,
    HTTP,
    SERDE,
    SERDE_JSON,
    Dependency,
    InlineDependency,
    protocol_test_helpers,
    smithy_http,
    smithy_types,
)
from .errors import UnsupportedTraitVariant
from .model import TIMESTAMP_FORMAT_TRAIT, TimestampFormat

# Namespace root of the crate being generated
LOCAL_ROOT = "crate"
PATH_SEPARATOR = "::"


@dataclass(frozen=True)
class RuntimeType:
    """
    Immutable reference to a nameable entity.

    ``name`` may be None, meaning the module itself is referenced (for
    example to bring it into scope) rather than a member of it.
    """

    name: Optional[str]
    dependency: Optional[Dependency]
    namespace: str

    @property
    def is_local(self) -> bool:
        """
        True when the namespace is inside the crate being generated.

        Only the first path segment is compared, so ``crate_utils::X`` is an
        external crate even though its text starts with ``crate``. A plain
        prefix test would treat it as local.
        """
        return self.namespace.split(PATH_SEPARATOR, 1)[0] == LOCAL_ROOT

    def fully_qualified_name(self) -> str:
        """Absolute path for external crates, crate-relative path for local ones."""
        prefix = "" if self.is_local else PATH_SEPARATOR
        postfix = f"{PATH_SEPARATOR}{self.name}" if self.name else ""
        return f"{prefix}{self.namespace}{postfix}"

    def member(self, name: str) -> "RuntimeType":
        """Reference to ``name`` inside the entity this type points at."""
        if self.name is None:
            return RuntimeType(name, self.dependency, self.namespace)
        return RuntimeType(
            name, self.dependency, f"{self.namespace}{PATH_SEPARATOR}{self.name}"
        )

    def __str__(self) -> str:
        return self.fully_qualified_name()


@dataclass(frozen=True)
class Resolution:
    """Text to emit at a use site plus the dependency it requires."""

    display_text: str
    dependency: Optional[Dependency]


def resolve(ref: RuntimeType, current_module: Optional[str] = None) -> Resolution:
    """
    Resolve a reference to its use-site text and dependency.

    Args:
        ref: Reference to resolve
        current_module: Namespace of the module being written, if known

    Returns:
        Resolution with the fully qualified text and optional dependency

    Raises:
        ValueError: If the reference has an empty namespace
    """
    if not ref.namespace:
        raise ValueError(f"RuntimeType {ref.name!r} has an empty namespace")

    if (
        ref.name is None
        and ref.dependency is None
        and current_module is not None
        and ref.namespace == current_module
    ):
        return Resolution("", None)

    return Resolution(ref.fully_qualified_name(), ref.dependency)


# Standard library and third-party references
BYTES_TYPE = RuntimeType("Bytes", BYTES, "bytes")
FROM = RuntimeType("From", None, "std::convert")
AS_REF = RuntimeType("AsRef", None, "std::convert")
STD_ERROR = RuntimeType("Error", None, "std::error")
HASH_SET = RuntimeType("HashSet", None, "std::collections")
HASH_MAP = RuntimeType("HashMap", None, "std::collections")
BYTE_SLAB = RuntimeType("Vec<u8>", None, "std::vec")


def std(member: str) -> RuntimeType:
    return RuntimeType(member, None, "std")


def std_fmt(member: str) -> RuntimeType:
    return RuntimeType(f"fmt::{member}", None, "std")


def http(path: str) -> RuntimeType:
    return RuntimeType(path, HTTP, "http")


HTTP_REQUEST_BUILDER = http("request::Builder")
HTTP_RESPONSE_BUILDER = http("response::Builder")


def serde(path: str) -> RuntimeType:
    return RuntimeType(path, SERDE, "serde")


SERIALIZE = serde("Serialize")
DESERIALIZE = serde("Deserialize")
SERIALIZER = serde("Serializer")
DESERIALIZER = serde("Deserializer")


def serde_json(path: str) -> RuntimeType:
    return RuntimeType(path, SERDE_JSON, "serde_json")


SJ = RuntimeType(None, SERDE_JSON, "serde_json")

CONFIG = RuntimeType("config", None, LOCAL_ROOT)


# Support crate references, retargeted by RuntimeConfig.crate_prefix
def instant(runtime_config: RuntimeConfig) -> RuntimeType:
    return RuntimeType(
        "Instant", smithy_types(runtime_config), runtime_config.module_name("types")
    )


def blob(runtime_config: RuntimeConfig) -> RuntimeType:
    return RuntimeType(
        "Blob", smithy_types(runtime_config), runtime_config.module_name("types")
    )


def document(runtime_config: RuntimeConfig) -> RuntimeType:
    return RuntimeType(
        "Document", smithy_types(runtime_config), runtime_config.module_name("types")
    )


def label_format(runtime_config: RuntimeConfig, func: str) -> RuntimeType:
    return RuntimeType(
        func, smithy_http(runtime_config), f"{runtime_config.module_name('http')}::label"
    )


def query_format(runtime_config: RuntimeConfig, func: str) -> RuntimeType:
    return RuntimeType(
        func, smithy_http(runtime_config), f"{runtime_config.module_name('http')}::query"
    )


def base64_encode(runtime_config: RuntimeConfig) -> RuntimeType:
    return RuntimeType(
        "encode",
        smithy_http(runtime_config),
        f"{runtime_config.module_name('http')}::base64",
    )


def base64_decode(runtime_config: RuntimeConfig) -> RuntimeType:
    return RuntimeType(
        "decode",
        smithy_http(runtime_config),
        f"{runtime_config.module_name('http')}::base64",
    )


_TIMESTAMP_FORMAT_VARIANTS = {
    TimestampFormat.EPOCH_SECONDS: "EpochSeconds",
    TimestampFormat.DATE_TIME: "DateTime",
    TimestampFormat.HTTP_DATE: "HttpDate",
}


def timestamp_format(
    runtime_config: RuntimeConfig, timestamp_format: TimestampFormat
) -> RuntimeType:
    """
    Reference to the ``instant::Format`` variant for a timestamp format.

    Raises:
        UnsupportedTraitVariant: For TimestampFormat.UNKNOWN
    """
    variant = _TIMESTAMP_FORMAT_VARIANTS.get(timestamp_format)
    if variant is None:
        raise UnsupportedTraitVariant(TIMESTAMP_FORMAT_TRAIT, timestamp_format.value)
    return RuntimeType(
        variant,
        smithy_types(runtime_config),
        f"{runtime_config.module_name('types')}::instant::Format",
    )


def protocol_test_helper(runtime_config: RuntimeConfig, func: str) -> RuntimeType:
    return RuntimeType(func, protocol_test_helpers(runtime_config), "protocol_test_helpers")


def operation(runtime_config: RuntimeConfig) -> RuntimeType:
    return RuntimeType(
        "Operation",
        smithy_http(runtime_config),
        f"{runtime_config.module_name('http')}::operation",
    )


def operation_module(runtime_config: RuntimeConfig) -> RuntimeType:
    return RuntimeType(
        None,
        smithy_http(runtime_config),
        f"{runtime_config.module_name('http')}::operation",
    )


def operation_request(runtime_config: RuntimeConfig) -> RuntimeType:
    return RuntimeType(
        "Request",
        smithy_http(runtime_config),
        f"{runtime_config.module_name('http')}::operation",
    )


def parse_strict(runtime_config: RuntimeConfig) -> RuntimeType:
    return RuntimeType(
        "ParseStrictResponse",
        smithy_http(runtime_config),
        f"{runtime_config.module_name('http')}::response",
    )


def sdk_body(runtime_config: RuntimeConfig) -> RuntimeType:
    return RuntimeType(
        "SdkBody",
        smithy_http(runtime_config),
        f"{runtime_config.module_name('http')}::body",
    )


def for_inline_fun(name: str, module: str, func, extra_dependencies=()) -> RuntimeType:
    """
    Reference to a function generated on demand into ``crate::<module>``.

    Args:
        name: Function name, also the inline dependency's name
        module: Crate module the function is written into
        func: Callable receiving a RustWriter that writes the function
        extra_dependencies: Dependencies the generated function requires
    """
    return RuntimeType(
        name,
        InlineDependency(name, module, tuple(extra_dependencies), func),
        f"{LOCAL_ROOT}::{module}",
    )
