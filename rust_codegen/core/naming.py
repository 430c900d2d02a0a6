"""
Naming utilities for safe code generation.

Handles name sanitization, case conversions and keyword conflicts for
identifiers derived from model shape and member names.
"""

import re
from enum import Enum
from typing import Dict, Optional, Set


class NamingCase(Enum):
    """Different naming case styles."""

    SNAKE_CASE = "snake"  # user_name
    PASCAL_CASE = "pascal"  # UserName
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME


RUST_RESERVED_WORDS = {
    "as", "async", "await", "break", "const", "continue", "crate", "dyn",
    "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
    "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
    "self", "static", "struct", "super", "trait", "true", "type", "unsafe",
    "use", "where", "while", "abstract", "become", "box", "do", "final",
    "macro", "override", "priv", "try", "typeof", "unsized", "virtual",
    "yield",
}

# Type names generated code relies on; shapes must not shadow them
RUST_BUILTIN_TYPES = {
    "option", "result", "string", "vec", "box", "self", "config", "builder",
}


class NameSanitizer:
    """Handles name sanitization and case conversion."""

    def __init__(
        self,
        reserved_words: Optional[Set[str]] = None,
        builtin_types: Optional[Set[str]] = None,
    ):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin type names that might conflict
        """
        self.reserved_words = reserved_words or set()
        self.builtin_types = builtin_types or set()
        self._name_cache: Dict[str, str] = {}
        self._used_names: Set[str] = set()

    def sanitize_name(
        self,
        name: str,
        target_case: NamingCase = NamingCase.SNAKE_CASE,
        suffix_on_conflict: str = "_",
    ) -> str:
        """
        Sanitize a name for safe use as a Rust identifier.

        The same input always maps to the same output for the lifetime of
        the sanitizer; distinct inputs that collide get numbered suffixes.

        Args:
            name: Original name to sanitize
            target_case: Desired case style
            suffix_on_conflict: Suffix to add for conflicts

        Returns:
            Sanitized name safe for use
        """
        cache_key = f"{name}_{target_case.value}_{suffix_on_conflict}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        cleaned = self._clean_basic(name)
        converted = self._convert_case(cleaned, target_case)
        if converted[0].isdigit():
            converted = f"_{converted}"
        final_name = self._resolve_conflicts(converted, target_case, suffix_on_conflict)

        self._name_cache[cache_key] = final_name
        self._used_names.add(final_name)

        return final_name

    def _clean_basic(self, name: str) -> str:
        """Basic name cleanup - remove invalid characters."""
        cleaned = re.sub(r"[^a-zA-Z0-9_-]", "_", name)
        cleaned = cleaned.strip("_-")

        if cleaned and cleaned[0].isdigit():
            cleaned = f"_{cleaned}"

        if not cleaned:
            cleaned = "field"

        return cleaned

    def _convert_case(self, name: str, target_case: NamingCase) -> str:
        """Convert name to target case style."""
        if target_case == NamingCase.SNAKE_CASE:
            return self._to_snake_case(name)
        elif target_case == NamingCase.PASCAL_CASE:
            return self._to_pascal_case(name)
        elif target_case == NamingCase.SCREAMING_SNAKE:
            return self._to_snake_case(name).upper()
        else:
            return name

    def _to_snake_case(self, name: str) -> str:
        """Convert to snake_case."""
        name = name.replace("-", "_")
        # Split acronym runs: "HTTPRequest" -> "HTTP_Request"
        name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
        name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
        name = name.lower()
        name = re.sub(r"_+", "_", name)
        return name.strip("_") or "field"

    def _to_pascal_case(self, name: str) -> str:
        """Convert to PascalCase."""
        snake = self._to_snake_case(name)
        parts = snake.split("_")
        return "".join(part.capitalize() for part in parts if part)

    def _resolve_conflicts(self, name: str, target_case: NamingCase, suffix: str) -> str:
        """Resolve naming conflicts with reserved words and existing names."""
        if name.lower() in self.reserved_words or name.lower() in self.builtin_types:
            if target_case == NamingCase.PASCAL_CASE:
                name = f"{name}Value"
            else:
                name = f"{name}{suffix}"

        original_name = name
        counter = 1
        while name in self._used_names:
            name = f"{original_name}{suffix}{counter}"
            counter += 1

        return name

    def reset_used_names(self):
        """Reset the tracking of used names."""
        self._used_names.clear()
        self._name_cache.clear()

    def add_used_name(self, name: str):
        """Manually add a name to the used names set."""
        self._used_names.add(name)


def create_rust_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for Rust."""
    return NameSanitizer(RUST_RESERVED_WORDS, RUST_BUILTIN_TYPES)
