"""
Naming utilities for safe code generation.

Handles name sanitization, PascalCase conversion and reserved word conflicts for
Pascal identifiers, plus validation of unit and routine names.
"""

import re
from typing import Dict, Optional, Set


# Delphi reserved words; directives like "name" or "index" are usable
PASCAL_RESERVED_WORDS = {
    "and", "array", "as", "asm", "begin", "case", "class", "const",
    "constructor", "destructor", "dispinterface", "div", "do", "downto",
    "else", "end", "except", "exports", "file", "finalization", "finally",
    "for", "function", "goto", "if", "implementation", "in", "inherited",
    "initialization", "inline", "interface", "is", "label", "library", "mod",
    "nil", "not", "object", "of", "or", "out", "packed", "procedure",
    "program", "property", "raise", "record", "repeat", "resourcestring",
    "set", "shl", "shr", "string", "then", "threadvar", "to", "try", "type",
    "unit", "until", "uses", "var", "while", "with", "xor",
}

# Names the generated code itself declares
PASCAL_BUILTIN_NAMES = {
    "result", "ds", "data", "idx", "col", "null", "true", "false",
    "tdataset", "tcomponent", "encodedate", "encodetime", "vararrayof",
}

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class NameSanitizer:
    """Turns arbitrary names into unique PascalCase identifiers."""

    def __init__(self, reserved_words: Set[str] = None, builtin_names: Set[str] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_names: Set of names that might conflict with generated code
        """
        self.reserved_words = reserved_words or set()
        self.builtin_names = builtin_names or set()
        self._name_cache: Dict[str, str] = {}
        self._used_names: Set[str] = set()

    def sanitize_name(self, name: str, suffix_on_conflict: str = "_") -> str:
        """
        Sanitize a name for safe use as an identifier.

        Args:
            name: Original name to sanitize
            suffix_on_conflict: Suffix to add for conflicts

        Returns:
            Sanitized name safe for use
        """
        cache_key = f"{name}_{suffix_on_conflict}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        cleaned = self._clean_basic(name)
        converted = self._to_pascal_case(cleaned)
        final_name = self._resolve_conflicts(converted, suffix_on_conflict)

        self._name_cache[cache_key] = final_name
        self._used_names.add(final_name.lower())

        return final_name

    def _clean_basic(self, name: str) -> str:
        """Basic name cleanup - remove invalid characters."""
        cleaned = re.sub(r"[^a-zA-Z0-9_]", "_", name)
        cleaned = cleaned.strip("_")

        if cleaned and cleaned[0].isdigit():
            cleaned = f"_{cleaned}"

        if not cleaned:
            cleaned = "dataset"

        return cleaned

    def _to_snake_case(self, name: str) -> str:
        """Convert to snake_case."""
        name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
        name = name.lower()
        name = re.sub(r"_+", "_", name)
        return name.strip("_")

    def _to_pascal_case(self, name: str) -> str:
        """Convert to PascalCase."""
        snake = self._to_snake_case(name)
        parts = snake.split("_")
        converted = "".join(part.capitalize() for part in parts if part)
        # Keep a leading underscore that protects a leading digit
        if name.startswith("_") and converted[:1].isdigit():
            return f"_{converted}"
        return converted

    def _resolve_conflicts(self, name: str, suffix: str) -> str:
        """Resolve conflicts with reserved words and names already handed out."""
        original_name = name

        if name.lower() in self.reserved_words or name.lower() in self.builtin_names:
            name = f"{name}{suffix}"

        # Pascal identifiers are case-insensitive
        counter = 1
        while name.lower() in self._used_names:
            name = f"{original_name}{suffix}{counter}"
            counter += 1

        return name

    def reset_used_names(self):
        """Reset the tracking of used names."""
        self._used_names.clear()
        self._name_cache.clear()


def create_pascal_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for Delphi."""
    return NameSanitizer(PASCAL_RESERVED_WORDS, PASCAL_BUILTIN_NAMES)


def is_valid_identifier(name: Optional[str]) -> bool:
    """Check that a name is a plain Pascal identifier and not a reserved word."""
    if not name or not _IDENTIFIER_RE.match(name):
        return False
    return name.lower() not in PASCAL_RESERVED_WORDS


def is_valid_unit_name(name: Optional[str]) -> bool:
    """Check a unit name; dotted (namespaced) names like ``Fake.Orders`` are allowed."""
    if not name:
        return False
    return all(is_valid_identifier(part) for part in name.split("."))


def derive_function_name(table_name: str) -> str:
    """Function name for a table, e.g. ``order_items`` -> ``GivenOrderItems``."""
    sanitizer = create_pascal_sanitizer()
    return "Given" + sanitizer.sanitize_name(table_name).lstrip("_")


def derive_unit_name(table_name: str) -> str:
    """Unit name for a table, e.g. ``order_items`` -> ``uOrderItemsDataSet``."""
    sanitizer = create_pascal_sanitizer()
    base = sanitizer.sanitize_name(table_name).rstrip("_")
    return f"u{base.lstrip('_')}DataSet"
