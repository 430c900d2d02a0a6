"""
Template engine wrapper for crate scaffolding.

Provides a simple interface for Jinja2 template rendering with the
built-in templates used to write Cargo.toml and src/lib.rs.
"""

from typing import Any, Dict

from jinja2 import DictLoader, Environment, StrictUndefined


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self):
        self._env = Environment(
            loader=DictLoader({}),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self._env.filters["toml_string"] = toml_string

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template
            context: Variables to pass to template

        Returns:
            Rendered template content
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template {template_name}: {e}") from e

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template.

        Args:
            name: Template name
            content: Template content
        """
        self._env.loader.mapping[name] = content


def toml_string(value: str) -> str:
    """Quote a value as a TOML basic string."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


CARGO_TOML_TEMPLATE = """\
# Code generated by rust_codegen. DO NOT EDIT.
[package]
name = {{ crate_name | toml_string }}
version = {{ version | toml_string }}
edition = {{ edition | toml_string }}

[dependencies]
{% for dependency in dependencies %}
{{ dependency.name }} = {{ dependency.to_toml() }}
{% endfor %}
{% if dev_dependencies %}

[dev-dependencies]
{% for dependency in dev_dependencies %}
{{ dependency.name }} = {{ dependency.to_toml() }}
{% endfor %}
{% endif %}
"""

LIB_RS_TEMPLATE = """\
// Code generated by rust_codegen. DO NOT EDIT.
{% for module in modules %}
pub mod {{ module }};
{% endfor %}
"""

MODULE_HEADER_TEMPLATE = """\
// Code generated by rust_codegen. DO NOT EDIT.
{% if inline_only %}
#![allow(dead_code)]
{% endif %}
"""

# Default template engine instance
_default_engine = None


def get_default_template_engine() -> TemplateEngine:
    """Get the default template engine instance."""
    global _default_engine
    if _default_engine is None:
        _default_engine = TemplateEngine()
        _default_engine.add_template("Cargo.toml", CARGO_TOML_TEMPLATE)
        _default_engine.add_template("lib.rs", LIB_RS_TEMPLATE)
        _default_engine.add_template("module_header.rs", MODULE_HEADER_TEMPLATE)

    return _default_engine
