"""
Templating sink for Rust source.

RustWriter accepts templates containing placeholders and writes them at the
current indentation level. Placeholders:

    #T        next positional argument, a RuntimeType
    #W        next positional argument, a Writable
    #L        next positional argument, written with str()
    #S        next positional argument, written as a Rust string literal
    #1T       positional argument by 1-based index (any kind letter)
    #{name}   named argument; kind is inferred from its value
    ##        a literal '#'

A RuntimeType is written as its fully qualified name and its dependency is
registered on the writer's manifest in the same step.
"""

import re
import textwrap
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Sequence

from .dependencies import Dependency
from .manifest import DependencyManifest
from .runtime_types import RuntimeType, resolve

Writable = Callable[["RustWriter"], None]

_PLACEHOLDER = re.compile(r"##|#(\d+)?([TWLS])|#\{(\w+)\}")


class RustWriter:
    """Accumulates Rust source for one module."""

    def __init__(
        self,
        namespace: str = "crate",
        manifest: Optional[DependencyManifest] = None,
        indent_size: int = 4,
        _referenced: Optional[List[Dependency]] = None,
    ):
        """
        Args:
            namespace: Module path of the code being written, e.g. ``crate::config``
            manifest: Manifest that receives dependency registrations
            indent_size: Spaces per indentation level
        """
        self.namespace = namespace
        self.manifest = manifest if manifest is not None else DependencyManifest()
        self.indent_size = indent_size
        self._lines: List[str] = []
        self._level = 0
        # Dependencies resolved through this writer and its children, in order
        self.referenced: List[Dependency] = _referenced if _referenced is not None else []

    def rust(self, template: str, *args: Any, **named: Any) -> "RustWriter":
        """Format ``template`` and append it at the current indentation."""
        template = textwrap.dedent(template).strip("\n")
        position = [0]
        for line in template.split("\n"):
            formatted = self._format_line(line, args, named, position)
            if formatted is None:
                continue
            for out in formatted.split("\n"):
                self._append_line(out)
        return self

    write = rust

    def write_writable(self, writable: Writable) -> "RustWriter":
        """Run a writable against this writer at the current indentation."""
        writable(self)
        return self

    @contextmanager
    def block(self, header: str, *args: Any, **named: Any):
        """Write ``header {``, indent the body, then close with ``}``."""
        self.rust(header.rstrip() + " {", *args, **named)
        self.indent()
        try:
            yield self
        finally:
            self.dedent()
            self.rust("}")

    def indent(self) -> "RustWriter":
        self._level += 1
        return self

    def dedent(self) -> "RustWriter":
        if self._level == 0:
            raise ValueError("Cannot dedent below level 0")
        self._level -= 1
        return self

    def format(self, template: str, *args: Any, **named: Any) -> str:
        """Render a single-line template to text without writing it."""
        formatted = self._format_line(template, args, named, [0])
        return formatted or ""

    def is_empty(self) -> bool:
        return not self._lines

    def to_string(self) -> str:
        if not self._lines:
            return ""
        return "\n".join(self._lines) + "\n"

    def __str__(self) -> str:
        return self.to_string()

    def _append_line(self, line: str):
        if line.strip():
            self._lines.append(" " * (self._level * self.indent_size) + line.rstrip())
        else:
            self._lines.append("")

    def _format_line(
        self,
        line: str,
        args: Sequence[Any],
        named: Dict[str, Any],
        position: List[int],
    ) -> Optional[str]:
        """
        Substitute placeholders in one template line.

        Returns None when the line held only writables and all of them were
        empty, so that empty sections do not leave blank lines behind.
        ``position`` holds the index of the next un-indexed argument and is
        shared by every line of one template.
        """
        leading = line[: len(line) - len(line.lstrip())]
        only_writables = bool(line.strip())
        produced_text = False
        cursor = 0
        pieces = []

        for match in _PLACEHOLDER.finditer(line):
            pieces.append(line[cursor : match.start()])
            if line[cursor : match.start()].strip():
                only_writables = False
            cursor = match.end()

            if match.group(0) == "##":
                pieces.append("#")
                only_writables = False
                continue

            index, kind, name = match.groups()
            if name is not None:
                if name not in named:
                    raise KeyError(f"No value for named placeholder '#{{{name}}}'")
                value = named[name]
                kind = _infer_kind(value)
            else:
                if index is not None:
                    slot = int(index) - 1
                else:
                    slot = position[0]
                    position[0] += 1
                if slot < 0 or slot >= len(args):
                    raise IndexError(
                        f"Template placeholder {match.group(0)} has no argument "
                        f"(got {len(args)})"
                    )
                value = args[slot]

            text = self._render_value(kind, value)
            if kind != "W":
                only_writables = False
            if text:
                produced_text = True
                text = text.replace("\n", "\n" + leading)
            pieces.append(text)

        pieces.append(line[cursor:])
        if line[cursor:].strip():
            only_writables = False

        if only_writables and not produced_text and cursor > 0:
            return None
        return "".join(pieces)

    def _render_value(self, kind: str, value: Any) -> str:
        if kind == "T":
            if not isinstance(value, RuntimeType):
                raise TypeError(f"#T expects a RuntimeType, got {type(value).__name__}")
            resolution = resolve(value, self.namespace)
            if resolution.dependency is not None:
                self.add_dependency(resolution.dependency)
            return resolution.display_text
        if kind == "W":
            child = RustWriter(
                self.namespace, self.manifest, self.indent_size, self.referenced
            )
            value(child)
            return child.to_string().rstrip("\n")
        if kind == "S":
            escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
            return f'"{escaped}"'
        return str(value)

    def add_dependency(self, dependency: Dependency) -> None:
        """Register a dependency on the manifest and remember it was used here."""
        self.manifest.register(dependency)
        if all(d.key != dependency.key for d in self.referenced):
            self.referenced.append(dependency)


def _infer_kind(value: Any) -> str:
    if isinstance(value, RuntimeType):
        return "T"
    if callable(value):
        return "W"
    return "L"
