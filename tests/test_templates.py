"""
Tests for the Jinja2 template engine wrapper.
"""

import pytest

from rust_codegen.core.dependencies import SERDE
from rust_codegen.core.templates import (
    TemplateEngine,
    TemplateError,
    get_default_template_engine,
    toml_string,
)


class TestFilters:
    def test_toml_string(self):
        assert toml_string('a "b"') == '"a \\"b\\""'


class TestTemplateEngine:
    def test_add_and_render(self):
        engine = TemplateEngine()
        engine.add_template("mod.rs", "pub mod {{ name }};")

        assert engine.render_template("mod.rs", {"name": "job_model"}) == "pub mod job_model;"

    def test_undefined_variable_is_an_error(self):
        engine = TemplateEngine()
        engine.add_template("broken.rs", "{{ missing }}")

        with pytest.raises(TemplateError):
            engine.render_template("broken.rs", {})

    def test_unknown_template(self):
        engine = TemplateEngine()

        with pytest.raises(TemplateError):
            engine.render_template("nope", {})

    def test_dev_dependencies_section(self):
        engine = get_default_template_engine()

        cargo = engine.render_template(
            "Cargo.toml",
            {
                "crate_name": "jobs",
                "version": "0.1.0",
                "edition": "2018",
                "dependencies": [SERDE],
                "dev_dependencies": [SERDE],
            },
        )

        assert cargo.endswith(
            "[dependencies]\n"
            'serde = { version = "1", features = ["derive"] }\n'
            "\n"
            "[dev-dependencies]\n"
            'serde = { version = "1", features = ["derive"] }\n'
        )
