"""
Operation generation point.

Each modeled operation becomes a struct wrapping its input. The input is
serialized as the JSON body of an http request, and ``build()`` wraps that
request in an ``operation::Request``.
Customizations inject request mutation (PLUGIN) and extra methods
(IMPL_BLOCK).
"""

from typing import Sequence, Tuple

from ..core.config import RuntimeConfig
from ..core.errors import UnsupportedTraitVariant
from ..core.model import HTTP_TRAIT, Shape
from ..core.naming import NamingCase, create_rust_sanitizer
from ..core.runtime_types import (
    CONFIG,
    LOCAL_ROOT,
    SJ,
    RuntimeType,
    http,
    operation_request,
    sdk_body,
)
from ..core.sections import EMPTY_SECTION, NamedSectionGenerator, Section, dispatch, writable
from ..core.writer import RustWriter

DEFAULT_METHOD = "POST"
DEFAULT_URI = "/"


class OperationSection(Section):
    """Slots of an operation's generated impl."""

    IMPL_BLOCK = "impl_block"
    PLUGIN = "plugin"


class OperationCustomization(NamedSectionGenerator, abstract=True):
    """Base class for customizations of an operation."""

    section_type = OperationSection


class OperationGenerator:
    """Writes one operation struct and its request builder."""

    def __init__(
        self,
        runtime_config: RuntimeConfig,
        customizations: Sequence[OperationCustomization] = (),
    ):
        self.runtime_config = runtime_config
        self.customizations = list(customizations)
        self.sanitizer = create_rust_sanitizer()

    def render(self, writer: RustWriter, operation_shape: Shape) -> None:
        struct_name = self.sanitizer.sanitize_name(
            operation_shape.name, NamingCase.PASCAL_CASE
        )
        method, uri = self._http_binding(operation_shape)

        if operation_shape.input:
            input_ref = RuntimeType(
                self.sanitizer.sanitize_name(
                    operation_shape.input.split("#", 1)[-1], NamingCase.PASCAL_CASE
                ),
                None,
                f"{LOCAL_ROOT}::input",
            )
            input_field = writable("input: #T,", input_ref)
            constructor = writable(
                """
                pub fn new(input: #T) -> Self {
                    Self { input }
                }
                """,
                input_ref,
            )
            body = writable(
                '#T::to_vec(&self.input).expect("operation input serializes to JSON")', SJ
            )
        else:
            input_field = EMPTY_SECTION
            constructor = writable(
                """
                pub fn new() -> Self {
                    Self {}
                }
                """
            )
            body = writable("Vec::new()")

        writer.rust(
            """
            pub struct #{name} {
                #{input_field}
            }

            impl #{name} {
                #{constructor}

                fn build_http_request(&self) -> #{http_request}<Vec<u8>> {
                    #{http_request}::builder()
                        .method(#{method})
                        .uri(#{uri})
                        .body(#{body})
                        .expect("operation request is valid")
                }

                pub fn build(self, _config: &#{config}::Config) -> #{request} {
                    let mut request = #{request}::new(
                        self.build_http_request().map(#{sdk_body}::from),
                    );
                    #{plugin}
                    request
                }
                #{impl_block}
            }
            """,
            name=struct_name,
            input_field=input_field,
            constructor=constructor,
            http_request=http("Request"),
            method=writable("#S", method),
            uri=writable("#S", uri),
            body=body,
            config=CONFIG,
            request=operation_request(self.runtime_config),
            sdk_body=sdk_body(self.runtime_config),
            plugin=dispatch(self.customizations, OperationSection.PLUGIN),
            impl_block=dispatch(self.customizations, OperationSection.IMPL_BLOCK),
        )

    @staticmethod
    def _http_binding(operation_shape: Shape) -> Tuple[str, str]:
        """
        Method and URI of the request, from the operation's http trait.

        Operations without the trait are sent as ``POST /``.

        Raises:
            UnsupportedTraitVariant: If the URI has path labels
        """
        binding = operation_shape.traits.get(HTTP_TRAIT) or {}
        method = str(binding.get("method", DEFAULT_METHOD)).upper()
        uri = str(binding.get("uri", DEFAULT_URI))
        if "{" in uri:
            raise UnsupportedTraitVariant(HTTP_TRAIT, uri, operation_shape.id)
        return method, uri
