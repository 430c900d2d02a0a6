"""
Tests for shape-to-type mapping and structure generation.
"""

import pytest

from rust_codegen.core.config import RuntimeConfig
from rust_codegen.core.dependencies import SERDE, InlineDependency, smithy_types
from rust_codegen.core.errors import ModelError, UnsupportedTraitVariant
from rust_codegen.core.model import Model
from rust_codegen.core.writer import RustWriter
from rust_codegen.generators.structure import RustType, RustTypeMapper, StructureGenerator

STRUCTURE_MODULES = {
    "example.jobs#GetJobInput": "input",
    "example.jobs#GetJobOutput": "output",
    "example.jobs#Job": "model",
    "example.jobs#JobNotFound": "error",
}


def render_structure(model, shape_id, runtime_config=None, module="model"):
    runtime_config = runtime_config or RuntimeConfig()
    writer = RustWriter(f"crate::{module}")
    mapper = RustTypeMapper(model, runtime_config, STRUCTURE_MODULES)
    hints = StructureGenerator(model, mapper).render(writer, model.expect_shape(shape_id))
    return writer, hints


def model_with_member(member):
    return Model.from_document(
        {
            "shapes": {
                "example#Holder": {"type": "structure", "members": {"value": member}},
                "example#Ids": {"type": "set", "member": {"target": "smithy.api#String"}},
                "example#Counts": {
                    "type": "map",
                    "key": {"target": "smithy.api#String"},
                    "value": {"target": "smithy.api#Integer"},
                },
            }
        }
    )


class TestStructureGenerator:
    """Generated struct text."""

    def test_job_structure(self, model):
        writer, hints = render_structure(model, "example.jobs#Job")

        assert writer.to_string() == (
            "/// A scheduled job.\n"
            "#[derive(Debug, Clone, PartialEq, ::serde::Serialize, ::serde::Deserialize)]\n"
            "pub struct Job {\n"
            '    #[serde(rename = "createdAt")]\n'
            '    #[serde(with = "crate::instant_epoch")]\n'
            "    pub created_at: ::smithy_types::Instant,\n"
            '    #[serde(rename = "updatedAt")]\n'
            '    #[serde(with = "crate::instant_8601::opt")]\n'
            '    #[serde(default, skip_serializing_if = "Option::is_none")]\n'
            "    pub updated_at: Option<::smithy_types::Instant>,\n"
            '    #[serde(default, skip_serializing_if = "Option::is_none")]\n'
            "    pub tags: Option<Vec<String>>,\n"
            '    #[serde(default, skip_serializing_if = "Option::is_none")]\n'
            "    pub payload: Option<::smithy_types::Blob>,\n"
            "}\n"
        )
        assert hints == []

    def test_timestamp_formats_register_inline_modules(self, model):
        writer, _ = render_structure(model, "example.jobs#Job")

        assert SERDE in writer.manifest
        assert smithy_types(RuntimeConfig()) in writer.manifest
        assert InlineDependency("instant_epoch", "instant_epoch") in writer.manifest
        assert InlineDependency("instant_8601", "instant_8601") in writer.manifest

    def test_structure_member_reference(self, model):
        writer, _ = render_structure(model, "example.jobs#GetJobOutput", module="output")

        assert "    pub job: Option<crate::model::Job>,\n" in writer.to_string()

    def test_error_structure_carries_generic_error(self, model):
        writer, _ = render_structure(model, "example.jobs#JobNotFound", module="error")

        assert (
            "    #[serde(skip)]\n"
            "    pub meta: crate::types::GenericError,\n"
            "}\n"
        ) in writer.to_string()
        assert InlineDependency("generic_error", "types") in writer.manifest

    def test_idempotency_token_helper(self, model):
        writer, hints = render_structure(model, "example.jobs#GetJobInput", module="input")
        code = writer.to_string()

        assert "    pub job_id: String,\n" in code
        assert "    pub client_token: Option<String>,\n" in code
        assert (
            "impl GetJobInput {\n"
            "    pub fn ensure_client_token(&mut self) {\n"
            "        if self.client_token.is_none() {\n"
            "            self.client_token = Some(crate::idempotency_token::uuid_v4());\n"
            "        }\n"
            "    }\n"
            "}\n"
        ) in code
        assert hints == []
        assert InlineDependency("idempotency_token", "idempotency_token") in writer.manifest

    def test_required_idempotency_token_is_reported(self):
        model = model_with_member(
            {
                "target": "smithy.api#String",
                "traits": {"smithy.api#required": {}, "smithy.api#idempotencyToken": {}},
            }
        )

        writer, hints = render_structure(model, "example#Holder")

        assert len(hints) == 1
        assert "example#Holder$value" in hints[0]
        assert "ensure_value" not in writer.to_string()

    def test_reserved_member_name_is_renamed(self):
        model = model_with_member({"target": "smithy.api#String"})
        model.expect_shape("example#Holder").members[0].name = "type"

        writer, _ = render_structure(model, "example#Holder")

        assert '    #[serde(rename = "type")]\n    #[serde(default' in writer.to_string()
        assert "    pub type_: Option<String>,\n" in writer.to_string()

    def test_multiline_member_documentation(self):
        model = model_with_member(
            {
                "target": "smithy.api#String",
                "traits": {"smithy.api#documentation": "First line.\nSecond line."},
            }
        )

        writer, _ = render_structure(model, "example#Holder")

        assert (
            "pub struct Holder {\n"
            "    /// First line.\n"
            "    /// Second line.\n"
            '    #[serde(default, skip_serializing_if = "Option::is_none")]\n'
            "    pub value: Option<String>,\n"
        ) in writer.to_string()

    def test_non_structure_is_rejected(self, model):
        writer = RustWriter("crate::model")
        mapper = RustTypeMapper(model, RuntimeConfig())

        with pytest.raises(ModelError):
            StructureGenerator(model, mapper).render(
                writer, model.expect_shape("example.jobs#TagList")
            )


class TestTimestampFormats:
    """Trait-driven selection of the serde module."""

    @pytest.mark.parametrize(
        "trait_value, module",
        [
            ("epoch-seconds", "instant_epoch"),
            ("date-time", "instant_8601"),
            ("http-date", "instant_httpdate"),
        ],
    )
    def test_format_selects_module(self, trait_value, module):
        model = model_with_member(
            {
                "target": "smithy.api#Timestamp",
                "traits": {
                    "smithy.api#required": {},
                    "smithy.api#timestampFormat": trait_value,
                },
            }
        )

        writer, _ = render_structure(model, "example#Holder")

        assert f'#[serde(with = "crate::{module}")]' in writer.to_string()

    @pytest.mark.parametrize("trait_value", ["unix-millis", "unknown"])
    def test_unsupported_format_is_fatal(self, trait_value):
        model = model_with_member(
            {
                "target": "smithy.api#Timestamp",
                "traits": {"smithy.api#timestampFormat": trait_value},
            }
        )

        with pytest.raises(UnsupportedTraitVariant) as exc_info:
            render_structure(model, "example#Holder")

        assert exc_info.value.value == trait_value
        assert exc_info.value.shape_id == "example#Holder$value"


class TestRustTypeMapper:
    """Mapping of member targets to Rust types."""

    def test_set_and_map(self):
        model = model_with_member({"target": "example#Ids", "traits": {"smithy.api#required": {}}})
        mapper = RustTypeMapper(model, RuntimeConfig())
        writer = RustWriter("crate::model")

        ids = mapper.map_member(model.expect_member("example#Holder$value"))

        assert ids.render(writer) == "::std::collections::HashSet<String>"
        assert not ids.is_optional

        counts = model.expect_shape("example#Counts")
        assert mapper._map_shape(counts).render(writer) == (
            "::std::collections::HashMap<String, i32>"
        )

    def test_optional_wraps_once(self):
        rust_type = RustType("i32").as_optional()

        assert rust_type.as_optional() is rust_type
        assert rust_type.template == "Option<i32>"

    def test_unknown_target(self):
        model = model_with_member({"target": "example#Missing"})
        mapper = RustTypeMapper(model, RuntimeConfig())

        with pytest.raises(ModelError):
            mapper.map_member(model.expect_member("example#Holder$value"))

    def test_structure_defaults_to_model_module(self, model):
        mapper = RustTypeMapper(model, RuntimeConfig())

        ref = mapper.structure_reference(model.expect_shape("example.jobs#Job"))

        assert ref.fully_qualified_name() == "crate::model::Job"
