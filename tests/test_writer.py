"""
Unit tests for the RustWriter templating sink.
"""

import pytest

from rust_codegen.core.config import RuntimeConfig
from rust_codegen.core.dependencies import smithy_types
from rust_codegen.core.manifest import DependencyManifest
from rust_codegen.core.runtime_types import HASH_MAP, HASH_SET, RuntimeType, blob
from rust_codegen.core.sections import EMPTY_SECTION, writable
from rust_codegen.core.writer import RustWriter


class TestPlaceholders:
    """Placeholder substitution."""

    def test_runtime_type_is_qualified(self, writer):
        writer.rust("let map = #T::new();", HASH_MAP)

        assert writer.to_string() == "let map = ::std::collections::HashMap::new();\n"

    def test_runtime_type_registers_dependency(self, writer, runtime_config):
        writer.rust("let b: #T = #T::new(vec![]);", blob(runtime_config), blob(runtime_config))

        assert writer.manifest.dependencies() == [smithy_types(runtime_config)]
        assert writer.referenced == [smithy_types(runtime_config)]

    def test_std_reference_registers_nothing(self, writer):
        writer.rust("#T", HASH_SET)

        assert len(writer.manifest) == 0

    def test_literal_and_string(self, writer):
        writer.rust("let #L = #S;", "name", 'say "hi"')

        assert writer.to_string() == 'let name = "say \\"hi\\"";\n'

    def test_positional_arguments_continue_across_lines(self, writer):
        writer.rust(
            """
            let a = #L;
            let b = #L;
            let c: #T = #S;
            """,
            "first",
            "second",
            HASH_SET,
            "third",
        )

        assert writer.to_string() == (
            "let a = first;\n"
            "let b = second;\n"
            'let c: ::std::collections::HashSet = "third";\n'
        )

    def test_indexed_arguments(self, writer):
        writer.rust("#1T #2L #1T", HASH_SET, "x")

        assert writer.to_string() == (
            "::std::collections::HashSet x ::std::collections::HashSet\n"
        )

    def test_named_arguments_infer_kind(self, writer):
        writer.rust(
            "#{ty}::with_capacity(#{size}); #{body}",
            ty=HASH_MAP,
            size=8,
            body=writable("done();"),
        )

        assert writer.to_string() == (
            "::std::collections::HashMap::with_capacity(8); done();\n"
        )

    def test_escaped_hash(self, writer):
        writer.rust("##[derive(Debug)]")

        assert writer.to_string() == "#[derive(Debug)]\n"

    def test_attribute_needs_no_escape(self, writer):
        writer.rust("#[derive(Debug)]")

        assert writer.to_string() == "#[derive(Debug)]\n"

    def test_missing_positional_argument(self, writer):
        with pytest.raises(IndexError):
            writer.rust("#T and #T", HASH_MAP)

    def test_missing_named_argument(self, writer):
        with pytest.raises(KeyError):
            writer.rust("#{missing}")

    def test_type_placeholder_requires_runtime_type(self, writer):
        with pytest.raises(TypeError):
            writer.rust("#T", "HashMap")

    def test_self_reference_renders_empty(self):
        writer = RustWriter("crate::model")

        assert writer.format("use #T;", RuntimeType(None, None, "crate::model")) == "use ;"


class TestLayout:
    """Indentation, writables and blocks."""

    def test_template_is_dedented(self, writer):
        writer.rust(
            """
            fn main() {
                run();
            }
            """
        )

        assert writer.to_string() == "fn main() {\n    run();\n}\n"

    def test_multiline_writable_keeps_indentation(self, writer):
        fields = writable("a: u8,\nb: u8,")

        writer.rust(
            """
            struct A {
                #W
            }
            """,
            fields,
        )

        assert writer.to_string() == "struct A {\n    a: u8,\n    b: u8,\n}\n"

    def test_empty_writable_line_is_dropped(self, writer):
        writer.rust(
            """
            struct A {
                #W
            }
            """,
            EMPTY_SECTION,
        )

        assert writer.to_string() == "struct A {\n}\n"

    def test_blank_template_line_is_kept(self, writer):
        writer.rust("a();")
        writer.rust("")
        writer.rust("b();")

        assert writer.to_string() == "a();\n\nb();\n"

    def test_block(self, writer):
        with writer.block("impl #L", "Foo"):
            writer.rust("fn a() {}")

        assert writer.to_string() == "impl Foo {\n    fn a() {}\n}\n"

    def test_custom_indent_size(self):
        writer = RustWriter(indent_size=2)

        with writer.block("mod inner"):
            writer.rust("fn a() {}")

        assert writer.to_string() == "mod inner {\n  fn a() {}\n}\n"

    def test_dedent_below_zero(self, writer):
        with pytest.raises(ValueError):
            writer.dedent()

    def test_is_empty(self, writer):
        assert writer.is_empty()
        assert writer.to_string() == ""

        writer.rust("x();")

        assert not writer.is_empty()


class TestWritableDependencies:
    """Writables register dependencies on the parent's manifest."""

    def test_writable_reference_registers_on_parent(self, runtime_config):
        manifest = DependencyManifest()
        writer = RustWriter("crate::test", manifest)

        writer.rust("let x: #W;", writable("#T", blob(runtime_config)))

        assert writer.to_string() == "let x: ::smithy_types::Blob;\n"
        assert smithy_types(runtime_config) in manifest
        assert writer.referenced == [smithy_types(runtime_config)]

    def test_prefix_change_retargets_output(self):
        writer = RustWriter()

        writer.rust("#T", blob(RuntimeConfig(crate_prefix="acme")))

        assert writer.to_string() == "::acme_types::Blob\n"
