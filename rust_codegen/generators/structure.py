"""
Structure generation and shape-to-Rust type mapping.

RustTypeMapper picks the reference factory for each member target,
consulting model traits (timestampFormat) where the choice depends on
them. StructureGenerator writes serde-enabled structs from the mapping.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from ..core.config import RuntimeConfig
from ..core.errors import ModelError
from ..core.inlineable import GENERIC_ERROR, IDEMPOTENCY_TOKEN, instant_serde
from ..core.model import (
    DOCUMENTATION_TRAIT,
    IDEMPOTENCY_TOKEN_TRAIT,
    REQUIRED_TRAIT,
    MemberShape,
    Model,
    Shape,
    ShapeType,
)
from ..core.naming import NamingCase, create_rust_sanitizer
from ..core.runtime_types import (
    DESERIALIZE,
    HASH_MAP,
    HASH_SET,
    LOCAL_ROOT,
    SERIALIZE,
    RuntimeType,
    blob,
    document,
    instant,
)
from ..core.writer import RustWriter

ERROR_TRAIT = "smithy.api#error"

_PRIMITIVES = {
    ShapeType.BOOLEAN: "bool",
    ShapeType.STRING: "String",
    ShapeType.BYTE: "i8",
    ShapeType.SHORT: "i16",
    ShapeType.INTEGER: "i32",
    ShapeType.LONG: "i64",
    ShapeType.FLOAT: "f32",
    ShapeType.DOUBLE: "f64",
}


@dataclass(frozen=True)
class RustType:
    """
    Immutable rendering recipe for a Rust type.

    ``template`` uses ``#T`` placeholders filled from ``references`` in
    order, so writing the type also registers its dependencies.
    """

    template: str
    references: Tuple[RuntimeType, ...] = ()
    is_optional: bool = False
    serde_with: Optional[RuntimeType] = None

    @classmethod
    def of(cls, ref: RuntimeType) -> "RustType":
        return cls("#T", (ref,))

    def wrap(self, prefix: str, suffix: str = ">", *outer: RuntimeType) -> "RustType":
        """Wrap this type, e.g. ``wrap("Vec<")``; outer refs precede inner ones."""
        return replace(
            self,
            template=f"{prefix}{self.template}{suffix}",
            references=tuple(outer) + self.references,
            serde_with=None,
        )

    def as_optional(self) -> "RustType":
        if self.is_optional:
            return self
        optional = self.wrap("Option<")
        return replace(
            optional,
            is_optional=True,
            serde_with=self.serde_with.member("opt") if self.serde_with else None,
        )

    def render(self, writer: RustWriter) -> str:
        return writer.format(self.template, *self.references)


class RustTypeMapper:
    """Maps model members to Rust types."""

    def __init__(
        self,
        model: Model,
        runtime_config: RuntimeConfig,
        structure_modules: Optional[Dict[str, str]] = None,
    ):
        self.model = model
        self.runtime_config = runtime_config
        self.structure_modules = structure_modules or {}
        self.sanitizer = create_rust_sanitizer()

    def map_member(self, member: MemberShape) -> RustType:
        """
        Map a member to its Rust type, applying optionality.

        Raises:
            UnsupportedTraitVariant: If a timestamp member has an unmapped format
            ModelError: If the member targets an unsupported shape
        """
        target = self.model.expect_shape(member.target)
        rust_type = self._map_shape(target)

        if target.type == ShapeType.TIMESTAMP:
            fmt = self.model.timestamp_format(member.id)
            rust_type = replace(rust_type, serde_with=instant_serde(self.runtime_config, fmt))

        if not member.has_trait(REQUIRED_TRAIT):
            rust_type = rust_type.as_optional()

        return rust_type

    def structure_reference(self, shape: Shape) -> RuntimeType:
        module = self.structure_modules.get(shape.id, "model")
        name = self.sanitizer.sanitize_name(shape.name, NamingCase.PASCAL_CASE)
        return RuntimeType(name, None, f"{LOCAL_ROOT}::{module}")

    def _map_shape(self, shape: Shape) -> RustType:
        if shape.type in _PRIMITIVES:
            return RustType(_PRIMITIVES[shape.type])

        if shape.type == ShapeType.BLOB:
            return RustType.of(blob(self.runtime_config))
        if shape.type == ShapeType.TIMESTAMP:
            return RustType.of(instant(self.runtime_config))
        if shape.type == ShapeType.DOCUMENT:
            return RustType.of(document(self.runtime_config))

        if shape.type == ShapeType.LIST:
            return self._element(shape, "member").wrap("Vec<")
        if shape.type == ShapeType.SET:
            return self._element(shape, "member").wrap("#T<", ">", HASH_SET)
        if shape.type == ShapeType.MAP:
            return self._element(shape, "value").wrap("#T<String, ", ">", HASH_MAP)

        if shape.type == ShapeType.STRUCTURE:
            return RustType.of(self.structure_reference(shape))

        raise ModelError(f"Cannot map {shape.type.value} shape {shape.id} to a Rust type")

    def _element(self, shape: Shape, member_name: str) -> RustType:
        member = shape.get_member(member_name)
        if member is None:
            raise ModelError(f"{shape.type.value} shape {shape.id} has no '{member_name}' member")
        return self._map_shape(self.model.expect_shape(member.target))


class StructureGenerator:
    """Writes a serde-enabled struct for a structure shape."""

    def __init__(self, model: Model, type_mapper: RustTypeMapper):
        self.model = model
        self.type_mapper = type_mapper

    def render(self, writer: RustWriter, shape: Shape) -> List[str]:
        """
        Write the struct for ``shape``.

        Returns:
            Validation hints collected while mapping member types
        """
        if shape.type != ShapeType.STRUCTURE:
            raise ModelError(f"{shape.id} is not a structure")

        sanitizer = create_rust_sanitizer()
        struct_name = self.type_mapper.structure_reference(shape).name
        hints: List[str] = []
        token_fields = []

        documentation = shape.traits.get(DOCUMENTATION_TRAIT)
        if documentation:
            for line in str(documentation).splitlines():
                writer.rust("/// #L", line)

        writer.rust("#[derive(Debug, Clone, PartialEq, #T, #T)]", SERIALIZE, DESERIALIZE)
        with writer.block("pub struct #L", struct_name):
            for member in shape.members:
                field_name = sanitizer.sanitize_name(member.name, NamingCase.SNAKE_CASE)
                rust_type = self.type_mapper.map_member(member)

                member_doc = member.traits.get(DOCUMENTATION_TRAIT)
                if member_doc:
                    for line in str(member_doc).splitlines():
                        writer.rust("/// #L", line)
                if field_name != member.name:
                    writer.rust("#[serde(rename = #S)]", member.name)
                if rust_type.serde_with is not None:
                    writer.rust('#[serde(with = "#T")]', rust_type.serde_with)
                if rust_type.is_optional:
                    writer.rust('#[serde(default, skip_serializing_if = "Option::is_none")]')
                writer.rust("pub #L: #L,", field_name, rust_type.render(writer))

                if member.has_trait(IDEMPOTENCY_TOKEN_TRAIT):
                    if rust_type.template == "Option<String>":
                        token_fields.append(field_name)
                    else:
                        hints.append(
                            f"Idempotency token {member.id} is not an optional string"
                        )

            if ERROR_TRAIT in shape.traits:
                writer.rust("#[serde(skip)]")
                writer.rust("pub meta: #T,", GENERIC_ERROR)

        if token_fields:
            writer.rust("")
            with writer.block("impl #L", struct_name):
                for field_name in token_fields:
                    with writer.block("pub fn ensure_#L(&mut self)", field_name):
                        writer.rust(
                            """
                            if self.#L.is_none() {
                                self.#L = Some(#T());
                            }
                            """,
                            field_name,
                            field_name,
                            IDEMPOTENCY_TOKEN.member("uuid_v4"),
                        )

        return hints
